"""
stader-deployments: Python library for deploying and wiring the Stader staking contracts
"""

from importlib.metadata import PackageNotFoundError, version

from .catalog import MessageCatalog, default_catalog
from .chain import ChainClient, TerraChainClient
from .config import ChainConfig, StakingParams
from .configurator import apply_config_updates, failed_updates, raise_for_failures
from .exceptions import (
    BytecodeNotFoundError,
    CodeUploadFailed,
    ConfigurationIncomplete,
    DeploymentAborted,
    DeploymentError,
    DuplicateContractError,
    ExecuteFailed,
    InstantiationFailed,
    InvalidMessageError,
    PlanError,
    RegistryConflictError,
    RegistryNotFoundError,
    TransactionFailed,
    UnknownTarget,
    UnresolvedReference,
)
from .executor import deploy_contract
from .orchestrator import run_deployment
from .plan import Plan, load_plan, stader_plan
from .references import PLACEHOLDER, Placeholder, Ref
from .registry import DeploymentRegistry
from .types import (
    ConfigUpdate,
    ConfigUpdateResult,
    ContractDescriptor,
    DeploymentRecord,
    TxOutcome,
)

try:
    __version__ = version("stader-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "deploy_contract",
    "run_deployment",
    "apply_config_updates",
    "failed_updates",
    "raise_for_failures",
    "ChainClient",
    "TerraChainClient",
    "ChainConfig",
    "StakingParams",
    "MessageCatalog",
    "default_catalog",
    "DeploymentRegistry",
    "Plan",
    "load_plan",
    "stader_plan",
    "Ref",
    "Placeholder",
    "PLACEHOLDER",
    "ContractDescriptor",
    "DeploymentRecord",
    "TxOutcome",
    "ConfigUpdate",
    "ConfigUpdateResult",
    "DeploymentError",
    "DeploymentAborted",
    "TransactionFailed",
    "CodeUploadFailed",
    "InstantiationFailed",
    "ExecuteFailed",
    "ConfigurationIncomplete",
    "UnresolvedReference",
    "UnknownTarget",
    "InvalidMessageError",
    "RegistryConflictError",
    "DuplicateContractError",
    "PlanError",
    "BytecodeNotFoundError",
    "RegistryNotFoundError",
]
