"""Command line entry point: stader-deploy."""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .chain import TerraChainClient
from .config import ChainConfig, StakingParams
from .configurator import apply_config_updates, raise_for_failures
from .constants import DEFAULT_CHAIN_ID
from .exceptions import DeploymentError
from .gas import fetch_gas_prices
from .orchestrator import run_deployment
from .paths import get_default_artifacts_dir, get_registry_path
from .plan import Plan, check_order, load_plan, stader_plan
from .registry import DeploymentRegistry
from .types import ConfigUpdateResult

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stader-deploy",
        description="Deploy and wire the Stader staking contracts on a Terra network.",
    )
    parser.add_argument("--chain-id", help="Chain id (defaults to $TERRA_CHAIN_ID, then bombay-12)")
    parser.add_argument("--lcd-url", help="LCD endpoint (defaults to $TERRA_LCD_URL, then the network default)")
    parser.add_argument("--registry", type=Path, help="Registry file (defaults to ./.stader-deployments/<chain-id>.json)")
    parser.add_argument(
        "--fetch-gas-prices",
        action="store_true",
        help="Use current gas prices from the network's FCD endpoint",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")

    subparsers = parser.add_subparsers(dest="command", required=True)

    deploy = subparsers.add_parser("deploy", help="Deploy all contracts, then apply config updates")
    deploy.add_argument("--artifacts", type=Path, help="Directory of compiled .wasm files (defaults to ./artifacts)")
    deploy.add_argument("--plan", type=Path, help="JSON plan file (defaults to the standard Stader plan)")

    configure = subparsers.add_parser("configure", help="Re-apply config updates to deployed contracts")
    configure.add_argument("--artifacts", type=Path, help=argparse.SUPPRESS)
    configure.add_argument("--plan", type=Path, help="JSON plan file (defaults to the standard Stader plan)")

    subparsers.add_parser("show", help="Print the deployment registry")

    return parser


def _load_plan(args: argparse.Namespace) -> Plan:
    artifacts_dir = args.artifacts or get_default_artifacts_dir()
    if args.plan is not None:
        return load_plan(args.plan, artifacts_dir)
    return stader_plan(StakingParams(), artifacts_dir)


def _make_client(args: argparse.Namespace) -> TerraChainClient:
    config = ChainConfig.from_env(chain_id=args.chain_id, lcd_url=args.lcd_url)
    if args.fetch_gas_prices:
        if config.fcd_url is None:
            raise ValueError(f"No FCD endpoint known for chain '{config.chain_id}'")
        config.gas_prices = fetch_gas_prices(config.fcd_url)
    return TerraChainClient(config)


def _print_results(results: Sequence[ConfigUpdateResult]) -> None:
    for result in results:
        status = "FAILED" if result.is_error else "ok"
        variant = next(iter(result.update.message), "?")
        print(f"{result.update.target}.{variant}: {status}")
        if result.is_error:
            print(f"  code: {result.outcome.code}, codespace: {result.outcome.codespace}")
            print(f"  raw_log: {result.outcome.raw_log}")


def _deploy(args: argparse.Namespace, chain_id: str, registry_path: Path) -> None:
    client = _make_client(args)
    plan = _load_plan(args)
    registry = DeploymentRegistry.load_or_create(registry_path, chain_id)
    logger.info("Deploying from %s to %s", client.address, chain_id)

    check_order(plan.descriptors, registry)
    try:
        run_deployment(client, plan.descriptors, registry, registry_path=registry_path)
    finally:
        print(registry.summary())

    results = apply_config_updates(client, registry, plan.config_updates)
    _print_results(results)
    raise_for_failures(results)


def _configure(args: argparse.Namespace, registry_path: Path) -> None:
    client = _make_client(args)
    plan = _load_plan(args)
    registry = DeploymentRegistry.load(registry_path)

    results = apply_config_updates(client, registry, plan.config_updates)
    _print_results(results)
    raise_for_failures(results)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    chain_id = args.chain_id or os.environ.get("TERRA_CHAIN_ID", DEFAULT_CHAIN_ID)
    registry_path = args.registry or get_registry_path(chain_id)

    try:
        match args.command:
            case "deploy":
                _deploy(args, chain_id, registry_path)
            case "configure":
                _configure(args, registry_path)
            case "show":
                print(DeploymentRegistry.load(registry_path).summary())
    except (DeploymentError, OSError, RuntimeError, ValueError) as e:
        logger.error("%s", e)
        if isinstance(e, DeploymentError) and e.registry is not None:
            logger.error("Registry saved to %s; rerun to resume from '%s'", registry_path, e.contract_name)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
