"""Custom exception classes for core-deployments library."""

from typing import Any, Dict, Optional


class DeploymentError(Exception):
    """
    Base exception for deployment-related errors.

    Attributes:
        state: Deployment state being entered when the error occurred
               (set by the orchestrator, None outside a run)
        transaction_hash: Hash of the deployment transaction, if one was broadcast
    """

    def __init__(
        self,
        message: str = "",
        *,
        state: Optional[str] = None,
        transaction_hash: Optional[str] = None,
    ):
        super().__init__(message)
        self.state = state
        self.transaction_hash = transaction_hash

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        """Failure record for operators and downstream tooling."""
        return {
            "state": self.state,
            "error": self.kind,
            "message": str(self),
            "transactionHash": self.transaction_hash,
        }


class ResolutionError(DeploymentError, LookupError):
    """Raised when the named contract is unknown to the artifact source."""

    pass


class NoSignerError(DeploymentError, LookupError):
    """Raised when no usable funding account is available."""

    pass


class SubmissionError(DeploymentError, RuntimeError):
    """Raised when the deployment transaction is rejected at broadcast time."""

    pass


class ConfirmationTimeoutError(DeploymentError, TimeoutError):
    """Raised when the deployment transaction never finalizes or is reverted."""

    pass


class VerificationError(DeploymentError, ValueError):
    """Raised when the deployed address does not answer read-back calls."""

    pass


class ChainClientError(DeploymentError, RuntimeError):
    """Raised by the chain client on transport or RPC failures."""

    pass


class ReportNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when a saved deployment report file is not found."""

    pass


class ConfigurationError(DeploymentError, ValueError):
    """Raised when network or environment configuration is invalid."""

    pass
