"""Deployment-and-verification state machine for core-deployments library."""

import json
import logging
from datetime import datetime
from typing import Callable, Mapping, Optional

from web3 import Web3

from .chain import ChainClient
from .constants import DEFAULT_VERIFICATION_CALLS
from .exceptions import (
    ChainClientError,
    ConfirmationTimeoutError,
    DeploymentError,
    NoSignerError,
    SubmissionError,
    VerificationError,
)
from .factory import ContractFactory, Factory
from .report import build_report, utc_now
from .types import (
    ContractStateSnapshot,
    DeployedContractHandle,
    DeploymentReport,
    DeploymentState,
    DeploymentTransaction,
    Signer,
)

logger = logging.getLogger(__name__)


class DeploymentOrchestrator:
    """
    Deploys one contract and verifies it, failing fast at the first error.

    Each call to run() walks Init -> FactoryResolved -> SignerResolved ->
    BalanceChecked -> Submitted -> Confirmed -> Verified -> Reported. Any error
    moves the run to Failed and is re-raised with the state it failed to
    reach. Nothing is retried or rolled back: a broadcast transaction that
    never confirms stays on the network.
    """

    def __init__(
        self,
        client: ChainClient,
        factory: ContractFactory,
        contract_name: str,
        network: str,
        verification_calls: Optional[Mapping[str, Optional[str]]] = None,
        currency_symbol: str = "ETH",
        block_explorer_url: Optional[str] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            client: Chain access (signers, balances, confirmation, read calls)
            factory: Resolves contract_name to a deployable factory
            contract_name: Name of the contract to deploy
            network: Network label written to the report (e.g., "Core Testnet")
            verification_calls: Read-only accessors to call after confirmation,
                                mapped to a display unit ("ether" or None).
                                Defaults to DEFAULT_VERIFICATION_CALLS.
            currency_symbol: Native currency symbol used in progress output
            block_explorer_url: Explorer base URL for the final contract link
            clock: Source of the report's deployment time

        Raises:
            ValueError: If contract_name or network is empty, or fewer than two
                        verification calls are given
        """
        if not contract_name:
            raise ValueError("Contract name is required")
        if not network:
            raise ValueError("Network label is required")
        if verification_calls is None:
            verification_calls = DEFAULT_VERIFICATION_CALLS
        if len(verification_calls) < 2:
            raise ValueError("At least two verification calls are required")

        self.client = client
        self.factory = factory
        self.contract_name = contract_name
        self.network = network
        self.verification_calls = dict(verification_calls)
        self.currency_symbol = currency_symbol
        self.block_explorer_url = block_explorer_url
        self.clock = clock

        self.state = DeploymentState.INIT
        self._target = DeploymentState.INIT
        self._transaction_hash: Optional[str] = None

    def run(self) -> DeploymentReport:
        """
        Deploy and verify the contract.

        Returns:
            DeploymentReport of the verified deployment

        Raises:
            ResolutionError: Contract unknown to the artifact source
            NoSignerError: No usable funding account
            SubmissionError: Deployment transaction rejected at broadcast
            ConfirmationTimeoutError: Transaction not finalized, dropped or reverted
            VerificationError: Deployed address does not answer read-back calls
        """
        self.state = DeploymentState.INIT
        self._transaction_hash = None
        logger.info("Starting deployment of %s to %s...", self.contract_name, self.network)

        try:
            factory = self._resolve_factory()
            signer = self._resolve_signer()
            self._check_balance(signer)
            transaction = self._submit(factory, signer)
            handle = self._confirm(transaction)
            snapshot = self._verify(factory, handle)
        except DeploymentError as e:
            self._fail(e)
            raise

        report = build_report(
            self.contract_name, handle, signer, self.network, snapshot, self.clock
        )
        self._advance(DeploymentState.REPORTED)

        logger.info("Deployment summary:\n%s", json.dumps(report.to_dict(), indent=2))
        if self.block_explorer_url:
            logger.info(
                "You can now interact with your contract at: %s/address/%s",
                self.block_explorer_url,
                report.contract_address,
            )
        return report

    def _enter(self, state: DeploymentState) -> None:
        self._target = state

    def _advance(self, state: DeploymentState) -> None:
        logger.debug("%s -> %s", self.state.value, state.value)
        self.state = state

    def _fail(self, error: DeploymentError) -> None:
        if error.state is None:
            error.state = self._target.value
        if error.transaction_hash is None:
            error.transaction_hash = self._transaction_hash
        self.state = DeploymentState.FAILED
        logger.error(
            "Deployment failed while entering %s: %s: %s", error.state, error.kind, error
        )

    def _resolve_factory(self) -> Factory:
        self._enter(DeploymentState.FACTORY_RESOLVED)
        factory = self.factory.resolve(self.contract_name)
        self._advance(DeploymentState.FACTORY_RESOLVED)
        return factory

    def _resolve_signer(self) -> Signer:
        self._enter(DeploymentState.SIGNER_RESOLVED)
        try:
            signers = self.client.get_signers()
        except ChainClientError as e:
            raise NoSignerError(f"Cannot resolve a deployer account: {e}") from e
        if not signers:
            raise NoSignerError("No deployer account configured or unlocked")

        signer = signers[0]
        logger.info("Deploying contracts with the account: %s", signer.address)
        self._advance(DeploymentState.SIGNER_RESOLVED)
        return signer

    def _check_balance(self, signer: Signer) -> None:
        # Advisory only; an underfunded deployer fails at submission
        self._enter(DeploymentState.BALANCE_CHECKED)
        try:
            balance = self.client.get_balance(signer.address)
        except ChainClientError as e:
            raise NoSignerError(f"Cannot query balance of {signer.address}: {e}") from e

        logger.info(
            "Account balance: %s %s", Web3.from_wei(balance, "ether"), self.currency_symbol
        )
        if balance == 0:
            logger.warning("Deployer %s has no funds; submission will likely fail", signer.address)
        self._advance(DeploymentState.BALANCE_CHECKED)

    def _submit(self, factory: Factory, signer: Signer) -> DeploymentTransaction:
        self._enter(DeploymentState.SUBMITTED)
        try:
            gas_price = self.client.get_gas_price()
            logger.info("Gas price: %s gwei", Web3.from_wei(gas_price, "gwei"))
            logger.info("Deploying %s...", self.contract_name)
            transaction = factory.deploy(signer, gas_price=gas_price)
        except ChainClientError as e:
            raise SubmissionError(f"Deployment of {self.contract_name} rejected: {e}") from e

        self._transaction_hash = transaction.transaction_hash
        logger.info("Deployment transaction: %s", transaction.transaction_hash)
        self._advance(DeploymentState.SUBMITTED)
        return transaction

    def _confirm(self, transaction: DeploymentTransaction) -> DeployedContractHandle:
        self._enter(DeploymentState.CONFIRMED)
        try:
            handle = self.client.wait_for_confirmation(transaction)
        except ChainClientError as e:
            raise ConfirmationTimeoutError(
                f"Lost track of {transaction.transaction_hash}: {e}",
                transaction_hash=transaction.transaction_hash,
            ) from e

        logger.info("%s deployed successfully!", self.contract_name)
        logger.info("Contract address: %s", handle.address)
        logger.info("Network: %s", self.network)
        self._advance(DeploymentState.CONFIRMED)
        return handle

    def _verify(self, factory: Factory, handle: DeployedContractHandle) -> ContractStateSnapshot:
        self._enter(DeploymentState.VERIFIED)
        values = {}
        for function_name, unit in self.verification_calls.items():
            try:
                value = self.client.read_uint(handle.address, factory.artifact.abi, function_name)
            except ChainClientError as e:
                raise VerificationError(
                    f"{function_name}() on {handle.address} failed: {e}"
                ) from e
            values[function_name] = value

            if unit is None:
                logger.info("%s: %d", function_name, value)
            else:
                logger.info(
                    "%s: %s %s", function_name, Web3.from_wei(value, unit), self.currency_symbol
                )

        self._advance(DeploymentState.VERIFIED)
        return ContractStateSnapshot(address=handle.address, values=values)
