"""Chain client protocol and its web3.py implementation."""

import logging
import time
from typing import Any, Dict, List, Optional, Protocol

import requests
from eth_account import Account
from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception

from .constants import DEFAULT_CONFIRMATION_TIMEOUT, DEFAULT_CONFIRMATIONS, DEFAULT_POLL_LATENCY
from .exceptions import ChainClientError, ConfirmationTimeoutError
from .types import DeployedContractHandle, DeploymentTransaction, Signer

logger = logging.getLogger(__name__)

# ValueError covers eth-utils/hexbytes formatting of addresses and bytecode
_CLIENT_ERRORS = (Web3Exception, ValueError, requests.RequestException)


class ChainClient(Protocol):
    """Network access needed to deploy and verify a contract."""

    def get_signers(self) -> List[Signer]:
        ...

    def get_balance(self, address: str) -> int:
        ...

    def get_gas_price(self) -> int:
        ...

    def submit_deployment(
        self,
        signer: Signer,
        abi: List[Dict[str, Any]],
        bytecode: str,
        gas_price: Optional[int] = None,
    ) -> str:
        ...

    def wait_for_confirmation(self, transaction: DeploymentTransaction) -> DeployedContractHandle:
        ...

    def read_uint(self, address: str, abi: List[Dict[str, Any]], function_name: str) -> int:
        ...


class Web3ChainClient:
    """
    ChainClient over a JSON-RPC endpoint.

    With a private key, transactions are signed locally and sent raw. Without
    one, the node's own unlocked accounts (e.g. a Hardhat or Anvil node) are
    used as signers.
    """

    def __init__(
        self,
        rpc_url: str,
        chain_id: int,
        private_key: Optional[str] = None,
        timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
        confirmations: int = DEFAULT_CONFIRMATIONS,
        poll_latency: float = DEFAULT_POLL_LATENCY,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            rpc_url: JSON-RPC endpoint URL
            chain_id: Chain ID used when signing transactions
            private_key: Deployer key (0x + 64 hex); node accounts are used if None
            timeout: Seconds to wait for a deployment to be confirmed
            confirmations: Blocks required on top of (and including) the receipt block
            poll_latency: Seconds between confirmation polls
            api_key: Optional bearer token sent with every RPC request
            session: HTTP session to reuse (a new one is created if None)
        """
        if session is None:
            session = requests.Session()
        if api_key:
            session.headers["Authorization"] = f"Bearer {api_key}"

        self.rpc_url = rpc_url
        self.chain_id = chain_id
        self.timeout = timeout
        self.confirmations = confirmations
        self.poll_latency = poll_latency
        self.w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": 30}, session=session))
        self._account = Account.from_key(private_key) if private_key else None

    @classmethod
    def from_config(cls, config) -> "Web3ChainClient":
        """Build a client from a DeploymentConfig."""
        return cls(
            rpc_url=config.rpc_url,
            chain_id=config.chain_id,
            private_key=config.private_key,
            timeout=config.confirmation_timeout,
            confirmations=config.confirmations,
            api_key=config.rpc_api_key,
        )

    def get_signers(self) -> List[Signer]:
        if self._account is not None:
            return [Signer(address=self._account.address)]

        try:
            accounts = self.w3.eth.accounts
        except _CLIENT_ERRORS as e:
            raise ChainClientError(f"Cannot list accounts on {self.rpc_url}: {e}") from e
        return [Signer(address=account) for account in accounts]

    def get_balance(self, address: str) -> int:
        try:
            return self.w3.eth.get_balance(Web3.to_checksum_address(address))
        except _CLIENT_ERRORS as e:
            raise ChainClientError(f"Cannot get balance of {address}: {e}") from e

    def get_gas_price(self) -> int:
        try:
            return self.w3.eth.gas_price
        except _CLIENT_ERRORS as e:
            raise ChainClientError(f"Cannot get gas price: {e}") from e

    def submit_deployment(
        self,
        signer: Signer,
        abi: List[Dict[str, Any]],
        bytecode: str,
        gas_price: Optional[int] = None,
    ) -> str:
        """
        Broadcast a contract creation transaction.

        Gas is estimated by the node; estimation is where most rejections
        (insufficient funds, constructor revert) surface.

        Returns:
            0x-prefixed transaction hash
        """
        try:
            sender = Web3.to_checksum_address(signer.address)
            contract = self.w3.eth.contract(abi=abi, bytecode=bytecode)
            if gas_price is None:
                gas_price = self.w3.eth.gas_price

            if self._account is not None and sender == self._account.address:
                tx = contract.constructor().build_transaction(
                    {
                        "from": sender,
                        "nonce": self.w3.eth.get_transaction_count(sender, "pending"),
                        "gasPrice": gas_price,
                        "chainId": self.chain_id,
                    }
                )
                signed = self._account.sign_transaction(tx)
                tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            else:
                tx_hash = contract.constructor().transact({"from": sender, "gasPrice": gas_price})
        except _CLIENT_ERRORS as e:
            raise ChainClientError(f"Deployment transaction rejected: {e}") from e

        return Web3.to_hex(tx_hash)

    def wait_for_confirmation(self, transaction: DeploymentTransaction) -> DeployedContractHandle:
        """
        Block until the deployment is mined and buried under the configured depth.

        Raises:
            ConfirmationTimeoutError: If not mined in time, reverted, or no contract created
            ChainClientError: On transport or RPC failures
        """
        tx_hash = transaction.transaction_hash
        started = time.monotonic()

        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.timeout, poll_latency=self.poll_latency
            )
        except TimeExhausted as e:
            raise ConfirmationTimeoutError(
                f"Transaction {tx_hash} not confirmed within {self.timeout}s",
                transaction_hash=tx_hash,
            ) from e
        except _CLIENT_ERRORS as e:
            raise ChainClientError(f"Cannot get receipt for {tx_hash}: {e}") from e

        block_number = receipt["blockNumber"]
        if receipt["status"] != 1:
            raise ConfirmationTimeoutError(
                f"Transaction {tx_hash} reverted in block {block_number}",
                transaction_hash=tx_hash,
            )

        address = receipt.get("contractAddress")
        if not address:
            raise ConfirmationTimeoutError(
                f"Transaction {tx_hash} did not create a contract",
                transaction_hash=tx_hash,
            )

        if self.confirmations > 1:
            self._wait_for_depth(block_number, tx_hash, started)

        return DeployedContractHandle(
            address=address, transaction_hash=tx_hash, block_number=block_number
        )

    def _wait_for_depth(self, block_number: int, tx_hash: str, started: float) -> None:
        target = block_number + self.confirmations - 1
        while True:
            try:
                current = self.w3.eth.block_number
            except _CLIENT_ERRORS as e:
                raise ChainClientError(f"Cannot get block number: {e}") from e

            if current >= target:
                return
            if time.monotonic() - started >= self.timeout:
                raise ConfirmationTimeoutError(
                    f"Transaction {tx_hash} has {current - block_number + 1} of "
                    f"{self.confirmations} confirmations after {self.timeout}s",
                    transaction_hash=tx_hash,
                )
            logger.debug("Waiting for block %d (at %d)", target, current)
            time.sleep(self.poll_latency)

    def read_uint(self, address: str, abi: List[Dict[str, Any]], function_name: str) -> int:
        """
        Call a read-only accessor returning an integer.

        Raises:
            ChainClientError: If the address has no code, the call fails or
                              the result is not an integer
        """
        checksum_address = Web3.to_checksum_address(address)

        try:
            code = self.w3.eth.get_code(checksum_address)
        except _CLIENT_ERRORS as e:
            raise ChainClientError(f"Cannot get code at {checksum_address}: {e}") from e
        if not code:
            raise ChainClientError(f"No contract code at {checksum_address}")

        contract = self.w3.eth.contract(address=checksum_address, abi=abi)
        try:
            value = getattr(contract.functions, function_name)().call()
        except _CLIENT_ERRORS as e:
            raise ChainClientError(f"Call to {function_name}() failed: {e}") from e

        if not isinstance(value, int) or isinstance(value, bool):
            raise ChainClientError(f"{function_name}() returned non-integer {value!r}")
        return value
