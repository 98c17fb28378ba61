"""Path management utilities for stader-deployments library."""

from pathlib import Path
from typing import Optional, Union


def get_default_registry_dir() -> Path:
    """
    Get default registry directory.

    Returns:
        Path to ./.stader-deployments
    """
    return Path.cwd() / ".stader-deployments"


def get_default_artifacts_dir() -> Path:
    """
    Get default directory holding compiled contract artifacts.

    Returns:
        Path to ./artifacts
    """
    return Path.cwd() / "artifacts"


def get_registry_path(chain_id: str, registry_root: Optional[Union[Path, str]] = None) -> Path:
    """
    Get the registry file path for a chain.

    Each chain gets its own file so testnet and mainnet runs never mix.

    Args:
        chain_id: Chain identifier, e.g. "bombay-12"
        registry_root: Custom registry directory (defaults to ./.stader-deployments)

    Returns:
        Path to {registry_root}/{chain_id}.json
    """
    if registry_root is None:
        registry_root = get_default_registry_dir()
    else:
        registry_root = Path(registry_root).absolute()

    return registry_root / f"{chain_id}.json"
