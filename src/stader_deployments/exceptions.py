"""Custom exception classes for stader-deployments library."""

from typing import TYPE_CHECKING, Any, List, Optional, Sequence

if TYPE_CHECKING:
    from .registry import DeploymentRegistry
    from .types import ConfigUpdateResult, TxOutcome


class DeploymentError(Exception):
    """Base exception for deployment-related errors.

    When raised out of a deployment run, ``contract_name`` names the contract
    being processed and ``registry`` holds every record made before the
    failure, so an operator can resume from that point.
    """

    contract_name: Optional[str] = None
    registry: Optional["DeploymentRegistry"] = None


class DeploymentAborted(DeploymentError):
    """Raised when a run halts on an error that is not a DeploymentError."""

    def __init__(self, contract_name: str, registry: "DeploymentRegistry", cause: BaseException):
        super().__init__(f"Deployment of '{contract_name}' aborted: {cause}")
        self.contract_name = contract_name
        self.registry = registry
        self.cause = cause


class TransactionFailed(DeploymentError):
    """Raised when the chain reports an error for a broadcast transaction."""

    action = "transaction"

    def __init__(self, contract_name: str, outcome: "TxOutcome"):
        super().__init__(
            f"{self.action} failed for '{contract_name}'. "
            f"code: {outcome.code}, codespace: {outcome.codespace}, raw_log: {outcome.raw_log}"
        )
        self.contract_name = contract_name
        self.outcome = outcome

    @property
    def code(self) -> int:
        return self.outcome.code

    @property
    def codespace(self) -> str:
        return self.outcome.codespace

    @property
    def raw_log(self) -> str:
        return self.outcome.raw_log


class CodeUploadFailed(TransactionFailed):
    """Raised when a store code transaction is rejected."""

    action = "store code"


class InstantiationFailed(TransactionFailed):
    """Raised when an instantiate transaction is rejected.

    The uploaded ``code_id`` stays valid and can be reused for a manual retry.
    """

    action = "instantiate"

    def __init__(self, contract_name: str, outcome: "TxOutcome", code_id: int):
        super().__init__(contract_name, outcome)
        self.code_id = code_id


class ExecuteFailed(TransactionFailed):
    """Raised when a configuration execute transaction is rejected."""

    action = "execute"


class ConfigurationIncomplete(DeploymentError):
    """Raised when one or more configuration updates were rejected."""

    def __init__(self, failures: Sequence["ConfigUpdateResult"]):
        targets = ", ".join(f"'{result.update.target}'" for result in failures)
        super().__init__(f"{len(failures)} configuration update(s) failed: {targets}")
        self.failures: List["ConfigUpdateResult"] = list(failures)


class UnresolvedReference(DeploymentError, ValueError):
    """Raised when a message references a contract missing from the registry."""

    def __init__(self, reference: str, contract_name: Optional[str] = None):
        if contract_name is None:
            message = f"Contract '{reference}' has not been deployed"
        else:
            message = f"Contract '{reference}' referenced by '{contract_name}' has not been deployed"
        super().__init__(message)
        self.reference = reference
        self.contract_name = contract_name


class UnknownTarget(DeploymentError, ValueError):
    """Raised when a configuration update targets an undeployed contract."""

    def __init__(self, target: str):
        super().__init__(f"Configuration target '{target}' is not in the registry")
        self.contract_name = target


class InvalidMessageError(DeploymentError, ValueError):
    """Raised when a message does not match its contract's schema."""

    def __init__(self, schema: str, message_kind: str, problems: List[str]):
        details = "; ".join(problems)
        super().__init__(f"Invalid {message_kind} message for '{schema}': {details}")
        self.schema = schema
        self.message_kind = message_kind
        self.problems = problems


class RegistryConflictError(DeploymentError, ValueError):
    """Raised when a registry entry would be overwritten or belongs to another chain."""

    pass


class DuplicateContractError(DeploymentError, ValueError):
    """Raised when a deployment sequence names the same contract twice."""

    def __init__(self, name: str):
        super().__init__(f"Contract '{name}' appears more than once in the deployment sequence")
        self.contract_name = name


class PlanError(DeploymentError, ValueError):
    """Raised when a deployment plan file is malformed."""

    def __init__(self, message: str, detail: Any = None):
        super().__init__(message)
        self.detail = detail


class BytecodeNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when a contract's wasm bytecode cannot be read."""

    pass


class RegistryNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when a persisted deployment registry file is not found."""

    pass
