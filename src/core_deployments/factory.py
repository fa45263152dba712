"""Contract factories backed by compiled artifacts."""

import logging
from pathlib import Path
from typing import Optional, Union

from .artifacts import ContractArtifact, load_artifact
from .chain import ChainClient
from .paths import get_default_artifacts_dir
from .types import DeploymentTransaction, Signer

logger = logging.getLogger(__name__)


class Factory:
    """Builds and broadcasts creation transactions for one contract."""

    def __init__(self, artifact: ContractArtifact, client: ChainClient):
        self.artifact = artifact
        self._client = client

    @property
    def contract_name(self) -> str:
        return self.artifact.name

    def deploy(self, signer: Signer, gas_price: Optional[int] = None) -> DeploymentTransaction:
        """
        Broadcast the contract creation transaction from signer.

        Args:
            signer: Funding account
            gas_price: Gas price in wei (queried by the client if None)

        Returns:
            DeploymentTransaction holding the broadcast hash

        Raises:
            ChainClientError: If the client rejects the submission
        """
        tx_hash = self._client.submit_deployment(
            signer, self.artifact.abi, self.artifact.bytecode, gas_price=gas_price
        )
        return DeploymentTransaction(transaction_hash=tx_hash, contract_name=self.contract_name)


class ContractFactory:
    """Resolves contract names to factories from an artifacts directory."""

    def __init__(
        self,
        client: ChainClient,
        artifacts_dir: Optional[Union[Path, str]] = None,
    ):
        """
        Args:
            client: Chain client used by resolved factories to submit transactions
            artifacts_dir: Compiled artifacts root (defaults to ./artifacts)
        """
        if artifacts_dir is None:
            artifacts_dir = get_default_artifacts_dir()
        self.artifacts_dir = Path(artifacts_dir)
        self._client = client

    def resolve(self, contract_name: str) -> Factory:
        """
        Get a factory for a named contract.

        Raises:
            ResolutionError: If the contract is unknown or its artifact is unusable
        """
        artifact = load_artifact(self.artifacts_dir, contract_name)
        logger.debug(
            "Resolved %s from %s artifact %s",
            contract_name,
            artifact.source_format.value,
            artifact.path,
        )
        return Factory(artifact, self._client)
