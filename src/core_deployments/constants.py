"""Configuration constants for core-deployments library."""

DEFAULT_CONTRACT_NAME = "ProcrastinationMiningProtocol"

DEFAULT_NETWORK = "core_testnet"

# Read-only accessors called on a fresh deployment to confirm it is live.
# Maps accessor name -> display unit ("ether" values are formatted from wei)
DEFAULT_VERIFICATION_CALLS = {
    "nextTaskId": None,
    "MIN_STAKE": "ether",
}

DEFAULT_CONFIRMATION_TIMEOUT = 120  # seconds
DEFAULT_CONFIRMATIONS = 1
DEFAULT_POLL_LATENCY = 0.5  # seconds

# Network configuration based on ethereum-lists/chains
NETWORK_CONFIG = {
    "core_testnet": {
        "chain_id": 1115,
        "label": "Core Testnet",
        "currency_symbol": "tCORE",
        "rpc_url": "https://rpc.test.btcs.network",
        "block_explorer_url": "https://scan.test.btcs.network",
        "default_rpc_env": "CORE_TESTNET_RPC_URL",
    },
    "core_mainnet": {
        "chain_id": 1116,
        "label": "Core Mainnet",
        "currency_symbol": "CORE",
        "rpc_url": "https://rpc.coredao.org",
        "block_explorer_url": "https://scan.coredao.org",
        "default_rpc_env": "CORE_RPC_URL",
    },
    "localhost": {
        "chain_id": 31337,
        "label": "Localhost",
        "currency_symbol": "ETH",
        "rpc_url": "http://127.0.0.1:8545",
        "block_explorer_url": None,
        "default_rpc_env": "LOCALHOST_RPC_URL",
    },
}
