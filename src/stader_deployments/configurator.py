"""Post-deployment configuration updates."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from terra_sdk.core.wasm import MsgExecuteContract

from .catalog import MessageCatalog, default_catalog
from .chain import ChainClient
from .exceptions import ConfigurationIncomplete, UnknownTarget
from .references import resolve_references
from .registry import DeploymentRegistry
from .types import ConfigUpdate, ConfigUpdateResult, TxOutcome

logger = logging.getLogger(__name__)


def _prepare(
    update: ConfigUpdate,
    registry: DeploymentRegistry,
    catalog: MessageCatalog,
) -> Dict[str, Any]:
    if update.target not in registry:
        raise UnknownTarget(update.target)
    message = resolve_references(update.message, registry, contract_name=update.target)
    catalog.validate_execute(update.schema_name, message)
    return message


def apply_config_updates(
    client: ChainClient,
    registry: DeploymentRegistry,
    updates: Sequence[ConfigUpdate],
    catalog: Optional[MessageCatalog] = None,
) -> List[ConfigUpdateResult]:
    """
    Send configuration updates to deployed contracts.

    Every update is resolved and validated before the first one is sent, so a
    bad update list costs no transactions. Once sending starts, an update that
    is rejected, or whose broadcast raises, is recorded as an error outcome and
    the remaining updates are still sent: updates do not depend on each other.

    Args:
        client: Chain client signing as the contracts' admin
        registry: Deployed contracts; targets and references are looked up here
        updates: Updates to send, in order
        catalog: Message catalog to validate against (defaults to the standard one)

    Returns:
        One ConfigUpdateResult per update, in input order

    Raises:
        UnknownTarget: If an update targets a contract missing from the registry
        UnresolvedReference: If an update references a contract missing from the registry
        InvalidMessageError: If an update violates its contract's execute schema
    """
    if catalog is None:
        catalog = default_catalog()

    prepared = [_prepare(update, registry, catalog) for update in updates]

    results: List[ConfigUpdateResult] = []
    for update, message in zip(updates, prepared):
        contract = registry[update.target].address
        logger.info("Executing %s on %s (%s)", next(iter(message), "?"), update.target, contract)
        try:
            outcome = client.sign_and_broadcast(
                [MsgExecuteContract(sender=client.address, contract=contract, execute_msg=message)]
            )
        except Exception as e:
            # The transaction may still have landed; re-querying is up to the operator
            outcome = TxOutcome(is_error=True, code=-1, codespace="client", raw_log=str(e))
        if outcome.is_error:
            logger.warning(
                "Update of %s failed. code: %s, codespace: %s, raw_log: %s",
                update.target,
                outcome.code,
                outcome.codespace,
                outcome.raw_log,
            )
        results.append(ConfigUpdateResult(update=update, outcome=outcome))

    return results


def failed_updates(results: Sequence[ConfigUpdateResult]) -> List[ConfigUpdate]:
    """Updates that were rejected and need to be re-issued."""
    return [result.update for result in results if result.is_error]


def raise_for_failures(results: Sequence[ConfigUpdateResult]) -> None:
    """
    Raise if any update was rejected.

    Raises:
        ConfigurationIncomplete: Listing every rejected update
    """
    failures = [result for result in results if result.is_error]
    if failures:
        raise ConfigurationIncomplete(failures)
