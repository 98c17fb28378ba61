"""Deployment plans: the standard Stader sequence and JSON plan files."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set, Union

from .catalog import encode_decimal, encode_uint128
from .config import StakingParams
from .constants import AIRDROPS_REGISTRY, CW20_TOKEN, DEFAULT_ARTIFACTS, REWARD, STAKING
from .exceptions import PlanError, UnresolvedReference
from .references import PLACEHOLDER, Placeholder, Ref, iter_references
from .registry import DeploymentRegistry
from .types import ConfigUpdate, ContractDescriptor


@dataclass
class Plan:
    """Contracts to deploy, in order, and the updates that wire them together."""

    descriptors: List[ContractDescriptor] = field(default_factory=list)
    config_updates: List[ConfigUpdate] = field(default_factory=list)


def stader_descriptors(params: StakingParams, artifacts_dir: Union[Path, str]) -> List[ContractDescriptor]:
    """
    Contracts of the standard deployment, in dependency order.

    Reward and staking reference each other. Reward is instantiated first with
    a placeholder staking address, which stader_config_updates() later replaces.
    """
    artifacts_dir = Path(artifacts_dir)

    def artifact(name: str) -> Path:
        return artifacts_dir / DEFAULT_ARTIFACTS[name]

    fee_contract = params.protocol_fee_contract or PLACEHOLDER
    withdrawal_contract = params.airdrop_withdrawal_contract or PLACEHOLDER

    return [
        ContractDescriptor(
            name=AIRDROPS_REGISTRY,
            bytecode_path=artifact(AIRDROPS_REGISTRY),
            init_message={},
        ),
        ContractDescriptor(
            name=REWARD,
            bytecode_path=artifact(REWARD),
            init_message={
                "reward_denom": params.reward_denom,
                "staking_contract": PLACEHOLDER,
            },
        ),
        ContractDescriptor(
            name=STAKING,
            bytecode_path=artifact(STAKING),
            init_message={
                "min_deposit": encode_uint128(params.min_deposit),
                "max_deposit": encode_uint128(params.max_deposit),
                "reward_contract": Ref(REWARD),
                "airdrops_registry_contract": Ref(AIRDROPS_REGISTRY),
                "airdrop_withdrawal_contract": withdrawal_contract,
                "protocol_fee_contract": fee_contract,
                "protocol_reward_fee": encode_decimal(params.protocol_reward_fee),
                "protocol_deposit_fee": encode_decimal(params.protocol_deposit_fee),
                "protocol_withdraw_fee": encode_decimal(params.protocol_withdraw_fee),
                "unbonding_period": params.unbonding_period,
                "undelegation_cooldown": params.undelegation_cooldown,
            },
        ),
        ContractDescriptor(
            name=CW20_TOKEN,
            bytecode_path=artifact(CW20_TOKEN),
            init_message={
                "name": params.token_name,
                "symbol": params.token_symbol,
                "decimals": params.token_decimals,
                "initial_balances": [],
                "mint": {"minter": Ref(STAKING)},
            },
        ),
    ]


def stader_config_updates() -> List[ConfigUpdate]:
    """Updates that close the reward/staking cycle and hand the token to staking."""
    return [
        ConfigUpdate(
            target=REWARD,
            message={"update_config": {"staking_contract": Ref(STAKING)}},
        ),
        ConfigUpdate(
            target=STAKING,
            message={"update_config": {"config_request": {"cw20_token_contract": Ref(CW20_TOKEN)}}},
        ),
    ]


def stader_plan(params: StakingParams, artifacts_dir: Union[Path, str]) -> Plan:
    return Plan(stader_descriptors(params, artifacts_dir), stader_config_updates())


def check_order(
    descriptors: Sequence[ContractDescriptor],
    registry: Optional[DeploymentRegistry] = None,
) -> None:
    """
    Check that every reference points at an earlier descriptor.

    Contracts already in ``registry`` count as deployed. Nothing is sent.

    Raises:
        UnresolvedReference: For the first reference to a later or unknown contract
    """
    available: Set[str] = set(registry.names()) if registry is not None else set()
    for descriptor in descriptors:
        for ref in iter_references(descriptor.init_message):
            if ref.name not in available:
                raise UnresolvedReference(ref.name, descriptor.name)
        available.add(descriptor.name)


def _decode(value: Any) -> Any:
    if isinstance(value, dict):
        if "$ref" in value:
            extra = set(value) - {"$ref", "attr"}
            if extra or not isinstance(value["$ref"], str):
                raise PlanError(f"Malformed reference: {value!r}", value)
            try:
                return Ref(value["$ref"], value.get("attr", "address"))
            except ValueError as e:
                raise PlanError(str(e), value) from e
        if "$placeholder" in value:
            if value != {"$placeholder": True}:
                raise PlanError(f"Malformed placeholder: {value!r}", value)
            return PLACEHOLDER
        return {key: _decode(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_decode(item) for item in value]
    return value


def _encode(value: Any) -> Any:
    if isinstance(value, Ref):
        if value.attr == "address":
            return {"$ref": value.name}
        return {"$ref": value.name, "attr": value.attr}
    if isinstance(value, Placeholder):
        return {"$placeholder": True}
    if isinstance(value, dict):
        return {key: _encode(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    return value


def parse_plan(data: Dict[str, Any], artifacts_dir: Union[Path, str]) -> Plan:
    """
    Build a plan from its JSON form.

    Args:
        data: {"contracts": [{"name", "wasm", "init_msg", ...}], "config_updates": [{"target", "msg"}]}
        artifacts_dir: Directory that relative "wasm" paths are resolved against

    Returns:
        Plan with references decoded

    Raises:
        PlanError: If required keys are missing or a reference is malformed
    """
    artifacts_dir = Path(artifacts_dir)
    plan = Plan()

    for index, entry in enumerate(data.get("contracts", [])):
        try:
            name = entry["name"]
            wasm = entry.get("wasm", DEFAULT_ARTIFACTS.get(name, f"{name}.wasm"))
            plan.descriptors.append(
                ContractDescriptor(
                    name=name,
                    bytecode_path=artifacts_dir / wasm,
                    init_message=_decode(entry["init_msg"]),
                    admin=entry.get("admin"),
                    init_coins=entry.get("init_coins"),
                    schema=entry.get("schema"),
                )
            )
        except KeyError as e:
            raise PlanError(f"Contract entry {index} is missing {e}", entry) from e

    for index, entry in enumerate(data.get("config_updates", [])):
        try:
            plan.config_updates.append(
                ConfigUpdate(
                    target=entry["target"],
                    message=_decode(entry["msg"]),
                    schema=entry.get("schema"),
                )
            )
        except KeyError as e:
            raise PlanError(f"Config update {index} is missing {e}", entry) from e

    return plan


def load_plan(path: Union[Path, str], artifacts_dir: Union[Path, str]) -> Plan:
    """
    Read a plan file.

    Raises:
        PlanError: If the file is not valid JSON or not a valid plan
    """
    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise PlanError(f"Plan file {path} is not valid JSON: {e}") from e
    return parse_plan(data, artifacts_dir)


def plan_to_dict(plan: Plan) -> Dict[str, Any]:
    """Serialize a plan into the JSON form parse_plan() reads."""
    contracts = []
    for descriptor in plan.descriptors:
        entry: Dict[str, Any] = {
            "name": descriptor.name,
            "wasm": Path(descriptor.bytecode_path).name,
            "init_msg": _encode(descriptor.init_message),
        }
        for key, value in (
            ("admin", descriptor.admin),
            ("init_coins", descriptor.init_coins),
            ("schema", descriptor.schema),
        ):
            if value is not None:
                entry[key] = value
        contracts.append(entry)

    updates = []
    for update in plan.config_updates:
        entry = {"target": update.target, "msg": _encode(update.message)}
        if update.schema is not None:
            entry["schema"] = update.schema
        updates.append(entry)

    return {"contracts": contracts, "config_updates": updates}
