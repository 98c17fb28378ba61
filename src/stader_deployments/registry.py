"""Append-only registry of deployed contracts."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from .exceptions import RegistryConflictError, RegistryNotFoundError
from .references import Ref, resolve_references
from .types import DeploymentRecord

logger = logging.getLogger(__name__)


class DeploymentRegistry:
    """
    Ordered mapping of contract name to DeploymentRecord.

    Insertion order is deployment order. Entries are never replaced: a name
    recorded once keeps its code id and address for the life of the registry.
    """

    def __init__(self, chain_id: Optional[str] = None):
        self.chain_id = chain_id
        self._records: Dict[str, DeploymentRecord] = {}

    def record(self, record: DeploymentRecord) -> None:
        """
        Add a deployment record.

        Raises:
            RegistryConflictError: If the contract name is already recorded
        """
        existing = self._records.get(record.contract_name)
        if existing is not None:
            raise RegistryConflictError(
                f"Contract '{record.contract_name}' already recorded at {existing.address} "
                f"(code id {existing.code_id})"
            )
        self._records[record.contract_name] = record

    def get(self, name: str) -> Optional[DeploymentRecord]:
        return self._records.get(name)

    def __getitem__(self, name: str) -> DeploymentRecord:
        return self._records[name]

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def names(self) -> List[str]:
        return list(self._records)

    def records(self) -> List[DeploymentRecord]:
        return list(self._records.values())

    def resolve(self, ref: Ref) -> Any:
        """
        Look up the value a reference stands for.

        Raises:
            UnresolvedReference: If the referenced contract is not recorded
        """
        return resolve_references(ref, self)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the registry.

        Returns:
            {"metadata": {...}, "contracts": {name: {"code_id", "address"}}}
        """
        return {
            "metadata": {
                "chain_id": self.chain_id,
                "updated_at": datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC"),
            },
            "contracts": {name: record.to_dict() for name, record in self._records.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeploymentRegistry":
        """Rebuild a registry from its serialized form, preserving order."""
        registry = cls(data.get("metadata", {}).get("chain_id"))
        for name, entry in data.get("contracts", {}).items():
            registry.record(
                DeploymentRecord(
                    contract_name=name,
                    code_id=int(entry["code_id"]),
                    address=entry["address"],
                )
            )
        return registry

    def save(self, path: Union[Path, str]) -> None:
        """
        Write the registry to a JSON file.

        Creates parent directories if they don't exist.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.debug("Saved %d deployment record(s) to %s", len(self), path)

    @classmethod
    def load(cls, path: Union[Path, str]) -> "DeploymentRegistry":
        """
        Read a registry written by save().

        Raises:
            RegistryNotFoundError: If the file does not exist
            RegistryConflictError: If the file records a contract twice
        """
        path = Path(path)
        if not path.exists():
            raise RegistryNotFoundError(f"Deployment registry not found at {path}")

        with open(path) as f:
            return cls.from_dict(json.load(f))

    @classmethod
    def load_or_create(cls, path: Union[Path, str], chain_id: str) -> "DeploymentRegistry":
        """
        Load the registry for a chain, or start an empty one.

        Raises:
            RegistryConflictError: If the file belongs to a different chain
        """
        try:
            registry = cls.load(path)
        except RegistryNotFoundError:
            return cls(chain_id)

        if registry.chain_id is None:
            registry.chain_id = chain_id
        elif registry.chain_id != chain_id:
            raise RegistryConflictError(
                f"Registry at {path} belongs to chain '{registry.chain_id}', not '{chain_id}'"
            )
        return registry

    def summary(self) -> str:
        """Render the registry as a table for operators."""
        if not self._records:
            return "No contracts deployed."

        width = max(len("contract"), *(len(name) for name in self._records))
        lines = [f"{'contract'.ljust(width)}  {'code id':>7}  address"]
        for name, record in self._records.items():
            lines.append(f"{name.ljust(width)}  {record.code_id:>7}  {record.address}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"DeploymentRegistry(chain_id={self.chain_id!r}, contracts={self.names()!r})"
