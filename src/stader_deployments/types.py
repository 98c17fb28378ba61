"""Data types and dataclasses for stader-deployments library."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import ExecuteFailed


@dataclass(frozen=True)
class ContractDescriptor:
    """A contract to upload and instantiate."""

    name: str  # Registry key, e.g. "staking"
    bytecode_path: Path  # Compiled .wasm artifact
    init_message: Dict[str, Any]  # May contain Ref / Placeholder values

    admin: Optional[str] = None  # Defaults to the deployer address
    init_coins: Optional[Dict[str, int]] = None  # e.g. {"uluna": 10000000}
    schema: Optional[str] = None  # Message catalog key, defaults to name

    @property
    def schema_name(self) -> str:
        return self.schema or self.name


@dataclass(frozen=True)
class DeploymentRecord:
    """Chain-assigned identity of a deployed contract."""

    contract_name: str
    code_id: int
    address: str  # Bech32 contract address

    def to_dict(self) -> Dict[str, Any]:
        return {"code_id": self.code_id, "address": self.address}


@dataclass(frozen=True)
class TxOutcome:
    """Result of one signed and broadcast transaction."""

    is_error: bool
    code: int = 0
    codespace: str = ""
    raw_log: str = ""
    txhash: Optional[str] = None

    # Populated on success for store code / instantiate transactions
    code_id: Optional[int] = None
    contract_address: Optional[str] = None

    @property
    def success(self) -> bool:
        return not self.is_error


@dataclass(frozen=True)
class ConfigUpdate:
    """An execute message to send to an already deployed contract."""

    target: str  # Registry key of the contract to execute against
    message: Dict[str, Any]  # May contain Ref values
    schema: Optional[str] = None  # Message catalog key, defaults to target

    @property
    def schema_name(self) -> str:
        return self.schema or self.target


@dataclass(frozen=True)
class ConfigUpdateResult:
    """Outcome of a single configuration update."""

    update: ConfigUpdate
    outcome: TxOutcome

    @property
    def is_error(self) -> bool:
        return self.outcome.is_error

    @property
    def error(self) -> Optional[ExecuteFailed]:
        """The rejection as an exception, or None if the update succeeded."""
        if not self.outcome.is_error:
            return None
        return ExecuteFailed(self.update.target, self.outcome)
