"""Shared pytest fixtures for core-deployments tests."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import responses

from core_deployments.exceptions import ChainClientError, ConfirmationTimeoutError
from core_deployments.factory import ContractFactory
from core_deployments.orchestrator import DeploymentOrchestrator
from core_deployments.types import DeployedContractHandle, DeploymentTransaction, Signer

DEPLOYER = "0xABC0000000000000000000000000000000000001"
RPC_URL = "http://test-rpc.example.com"
TX_HASH = "0x" + "ab" * 32
CONTRACT_ADDRESS = "0x5fbdb2315678afecb367f032d93f642f64180aa3"
NODE_ACCOUNT = "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"
# Hardhat/Anvil default account #0, publicly known test key
NODE_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"


class FakeChainClient:
    """
    In-memory ChainClient.

    Records every call in order and flags read-back calls made against an
    address that was never confirmed. Each submission yields a new
    transaction hash and, once confirmed, a new contract address.
    """

    def __init__(
        self,
        signers: Optional[List[str]] = None,
        balance: int = 2 * 10**18,
        gas_price: int = 1_000_000_000,
        signer_error: Optional[str] = None,
        balance_error: Optional[str] = None,
        submit_error: Optional[str] = None,
        confirm_failure: Optional[str] = None,
        read_error: Optional[str] = None,
        read_values: Optional[Dict[str, int]] = None,
    ):
        self.signers = [DEPLOYER] if signers is None else signers
        self.balance = balance
        self.gas_price = gas_price
        self.signer_error = signer_error
        self.balance_error = balance_error
        self.submit_error = submit_error
        self.confirm_failure = confirm_failure  # "timeout" or "transport"
        self.read_error = read_error
        self.read_values = read_values or {"nextTaskId": 1, "MIN_STAKE": 10**16}

        self.calls: List[str] = []
        self.out_of_order: List[str] = []
        self.submitted: List[Dict[str, Any]] = []
        self.broadcast: List[str] = []
        self.confirmed: List[str] = []

    def get_signers(self) -> List[Signer]:
        self.calls.append("get_signers")
        if self.signer_error:
            raise ChainClientError(self.signer_error)
        return [Signer(address=address) for address in self.signers]

    def get_balance(self, address: str) -> int:
        self.calls.append("get_balance")
        if self.balance_error:
            raise ChainClientError(self.balance_error)
        return self.balance

    def get_gas_price(self) -> int:
        self.calls.append("get_gas_price")
        return self.gas_price

    def submit_deployment(self, signer, abi, bytecode, gas_price=None) -> str:
        self.calls.append("submit_deployment")
        self.submitted.append(
            {"signer": signer.address, "bytecode": bytecode, "gas_price": gas_price}
        )
        if self.submit_error:
            raise ChainClientError(self.submit_error)
        tx_hash = f"0x{len(self.broadcast) + 1:064x}"
        self.broadcast.append(tx_hash)
        return tx_hash

    def wait_for_confirmation(self, transaction: DeploymentTransaction) -> DeployedContractHandle:
        self.calls.append("wait_for_confirmation")
        tx_hash = transaction.transaction_hash
        if tx_hash not in self.broadcast:
            self.out_of_order.append(f"wait_for_confirmation({tx_hash})")

        if self.confirm_failure == "timeout":
            raise ConfirmationTimeoutError(
                f"Transaction {tx_hash} not confirmed within 120s", transaction_hash=tx_hash
            )
        if self.confirm_failure == "transport":
            raise ChainClientError("connection reset by peer")

        address = f"0x{0xC0DE0000 + len(self.confirmed) + 1:040x}"
        self.confirmed.append(address)
        return DeployedContractHandle(address=address, transaction_hash=tx_hash, block_number=42)

    def read_uint(self, address: str, abi, function_name: str) -> int:
        self.calls.append(f"read_uint:{function_name}")
        if address not in self.confirmed:
            self.out_of_order.append(f"read_uint({address})")
        if self.read_error:
            raise ChainClientError(self.read_error)
        return self.read_values[function_name]


class FakeRpcNode:
    """JSON-RPC responder keyed by method name, for use with responses."""

    def __init__(self):
        self.methods: List[str] = []
        self.errors: Dict[str, Dict[str, Any]] = {}
        self.results: Dict[str, Any] = {
            "eth_chainId": hex(1115),
            "eth_accounts": [NODE_ACCOUNT],
            "eth_getBalance": hex(10**18),
            "eth_gasPrice": hex(1_000_000_000),
            "eth_getTransactionCount": "0x0",
            "eth_estimateGas": hex(2_000_000),
            "eth_sendRawTransaction": TX_HASH,
            "eth_sendTransaction": TX_HASH,
            "eth_getTransactionReceipt": make_receipt(),
            "eth_blockNumber": hex(42),
            "eth_getCode": "0x6080604052348015600f57600080fd5b50",
            "eth_call": "0x" + f"{7:064x}",
        }

    def handle(self, request):
        payload = json.loads(request.body)
        method = payload["method"]
        self.methods.append(method)

        body: Dict[str, Any] = {"jsonrpc": "2.0", "id": payload["id"]}
        if method in self.errors:
            body["error"] = self.errors[method]
        elif method in self.results:
            result = self.results[method]
            body["result"] = result(payload["params"]) if callable(result) else result
        else:
            body["error"] = {"code": -32601, "message": f"the method {method} does not exist"}
        return (200, {}, json.dumps(body))


def make_receipt(status: int = 1, contract_address: Optional[str] = CONTRACT_ADDRESS) -> Dict[str, Any]:
    """Build a raw JSON-RPC transaction receipt for a contract creation."""
    return {
        "blockHash": "0x" + "11" * 32,
        "blockNumber": hex(42),
        "contractAddress": contract_address,
        "cumulativeGasUsed": hex(1_500_000),
        "effectiveGasPrice": hex(1_000_000_000),
        "from": NODE_ACCOUNT,
        "gasUsed": hex(1_500_000),
        "logs": [],
        "logsBloom": "0x" + "00" * 256,
        "status": hex(status),
        "to": None,
        "transactionHash": TX_HASH,
        "transactionIndex": "0x0",
        "type": "0x0",
    }


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def artifacts_dir(fixtures_dir: Path) -> Path:
    """Return the sample Hardhat artifacts directory."""
    return fixtures_dir / "artifacts"


@pytest.fixture
def fixed_clock():
    """Clock that always returns 2025-03-01 12:30:45.123 UTC."""
    moment = datetime(2025, 3, 1, 12, 30, 45, 123000, tzinfo=timezone.utc)
    return lambda: moment


@pytest.fixture
def fake_client() -> FakeChainClient:
    """Chain client double where every step succeeds."""
    return FakeChainClient()


@pytest.fixture
def make_client():
    """Return a constructor for chain client doubles with custom behaviour."""
    return FakeChainClient


@pytest.fixture
def make_orchestrator(artifacts_dir: Path, fixed_clock):
    """Return a builder for orchestrators deploying Widget to "Test Network"."""

    def build(client, contract_name: str = "Widget", **kwargs) -> DeploymentOrchestrator:
        kwargs.setdefault("network", "Test Network")
        kwargs.setdefault("clock", fixed_clock)
        return DeploymentOrchestrator(
            client=client,
            factory=ContractFactory(client, artifacts_dir),
            contract_name=contract_name,
            **kwargs,
        )

    return build


@pytest.fixture
def rpc_node():
    """Mock JSON-RPC endpoint at RPC_URL answering by method name."""
    node = FakeRpcNode()
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add_callback(
            responses.POST, RPC_URL, callback=node.handle, content_type="application/json"
        )
        yield node
