"""Data types and dataclasses for core-deployments library."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class DeploymentState(Enum):
    """
    States of a deployment run.

    Value strings are what operators see in logs and failure records.
    Runs move strictly forward from INIT to REPORTED; FAILED is reachable
    from any state between FACTORY_RESOLVED and VERIFIED.
    """

    INIT = "Init"
    FACTORY_RESOLVED = "FactoryResolved"
    SIGNER_RESOLVED = "SignerResolved"
    BALANCE_CHECKED = "BalanceChecked"
    SUBMITTED = "Submitted"
    CONFIRMED = "Confirmed"
    VERIFIED = "Verified"
    REPORTED = "Reported"
    FAILED = "Failed"


@dataclass
class Signer:
    """An account able to authorize the deployment transaction."""

    address: str  # 0x-prefixed, 20 bytes
    balance: Optional[int] = None  # wei, if the client knows it


@dataclass(frozen=True)
class DeploymentTransaction:
    """A broadcast deployment transaction awaiting confirmation."""

    transaction_hash: str
    contract_name: str


@dataclass(frozen=True)
class DeployedContractHandle:
    """Reference to a confirmed on-chain contract instance."""

    address: str
    transaction_hash: str
    block_number: Optional[int] = None


@dataclass(frozen=True)
class ContractStateSnapshot:
    """Values read back from a deployed contract during verification."""

    address: str
    values: Dict[str, int] = field(default_factory=dict)


# Serialized key -> attribute name
_REPORT_FIELDS = {
    "contractName": "contract_name",
    "contractAddress": "contract_address",
    "deployer": "deployer",
    "network": "network",
    "deploymentTime": "deployment_time",
    "transactionHash": "transaction_hash",
}


@dataclass(frozen=True)
class DeploymentReport:
    """Final record of a successful deployment."""

    contract_name: str
    contract_address: str
    deployer: str
    network: str  # Human-readable network label, e.g. "Core Testnet"
    deployment_time: str  # ISO-8601, UTC
    transaction_hash: str

    def to_dict(self) -> Dict[str, str]:
        """Flat camelCase mapping consumed by downstream scripts."""
        return {key: getattr(self, attr) for key, attr in _REPORT_FIELDS.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeploymentReport":
        return cls(**{attr: str(data[key]) for key, attr in _REPORT_FIELDS.items()})
