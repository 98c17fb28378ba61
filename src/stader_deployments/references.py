"""Deployment-time references inside contract messages."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterator, Optional

from .exceptions import UnresolvedReference

if TYPE_CHECKING:
    from .registry import DeploymentRegistry

REFERENCE_ATTRS = ("address", "code_id")


@dataclass(frozen=True)
class Ref:
    """Stands for the address (or code id) of contract ``name`` once deployed."""

    name: str
    attr: str = "address"

    def __post_init__(self) -> None:
        if self.attr not in REFERENCE_ATTRS:
            raise ValueError(f"Unsupported reference attribute '{self.attr}'")


@dataclass(frozen=True)
class Placeholder:
    """
    Provisional address used to break a cyclic reference.

    Resolves to the deployer's own address. The real address must be patched in
    afterwards with a configuration update.
    """


PLACEHOLDER = Placeholder()


def resolve_references(
    value: Any,
    registry: "DeploymentRegistry",
    placeholder_address: Optional[str] = None,
    contract_name: Optional[str] = None,
) -> Any:
    """
    Replace every Ref and Placeholder in a message with its concrete value.

    Args:
        value: Message or message fragment (dicts and lists are walked)
        registry: Registry to look references up in
        placeholder_address: Address substituted for Placeholder markers
        contract_name: Contract the message belongs to, for error messages

    Returns:
        A new message with no references left; the input is not modified

    Raises:
        UnresolvedReference: If a referenced contract is not in the registry,
            or a Placeholder is found and no placeholder_address was given
    """
    if isinstance(value, Ref):
        record = registry.get(value.name)
        if record is None:
            raise UnresolvedReference(value.name, contract_name)
        return getattr(record, value.attr)
    if isinstance(value, Placeholder):
        if placeholder_address is None:
            raise UnresolvedReference("<placeholder>", contract_name)
        return placeholder_address
    if isinstance(value, dict):
        return {
            key: resolve_references(item, registry, placeholder_address, contract_name)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [
            resolve_references(item, registry, placeholder_address, contract_name)
            for item in value
        ]
    return value


def iter_references(value: Any) -> Iterator[Ref]:
    """Yield every Ref found in a message, depth first."""
    if isinstance(value, Ref):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from iter_references(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from iter_references(item)


def has_unresolved(value: Any) -> bool:
    """Check whether a message still contains a Ref or Placeholder."""
    if isinstance(value, (Ref, Placeholder)):
        return True
    if isinstance(value, dict):
        return any(has_unresolved(item) for item in value.values())
    if isinstance(value, (list, tuple)):
        return any(has_unresolved(item) for item in value)
    return False
