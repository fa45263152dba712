"""
core-deployments: deploy and verify smart contracts on Core blockchain networks
"""

from importlib.metadata import PackageNotFoundError, version

from .chain import ChainClient, Web3ChainClient
from .config import DeploymentConfig, load_config
from .exceptions import (
    ChainClientError,
    ConfigurationError,
    ConfirmationTimeoutError,
    DeploymentError,
    NoSignerError,
    ReportNotFoundError,
    ResolutionError,
    SubmissionError,
    VerificationError,
)
from .factory import ContractFactory, Factory
from .orchestrator import DeploymentOrchestrator
from .report import build_report, load_report, save_report
from .types import (
    ContractStateSnapshot,
    DeployedContractHandle,
    DeploymentReport,
    DeploymentState,
    DeploymentTransaction,
    Signer,
)

try:
    __version__ = version("core-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "DeploymentOrchestrator",
    "ChainClient",
    "Web3ChainClient",
    "ContractFactory",
    "Factory",
    "DeploymentConfig",
    "load_config",
    "build_report",
    "save_report",
    "load_report",
    "Signer",
    "DeploymentTransaction",
    "DeployedContractHandle",
    "ContractStateSnapshot",
    "DeploymentReport",
    "DeploymentState",
    "DeploymentError",
    "ResolutionError",
    "NoSignerError",
    "SubmissionError",
    "ConfirmationTimeoutError",
    "VerificationError",
    "ChainClientError",
    "ReportNotFoundError",
    "ConfigurationError",
]
