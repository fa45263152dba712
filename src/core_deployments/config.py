"""Environment-driven configuration for core-deployments library."""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from .constants import (
    DEFAULT_CONFIRMATION_TIMEOUT,
    DEFAULT_CONFIRMATIONS,
    DEFAULT_CONTRACT_NAME,
    NETWORK_CONFIG,
)
from .exceptions import ConfigurationError
from .paths import get_default_artifacts_dir

_PRIVATE_KEY_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


@dataclass
class DeploymentConfig:
    """Settings for one deployment run."""

    network: str  # Key into NETWORK_CONFIG, e.g. "core_testnet"
    network_label: str  # Reported network name, e.g. "Core Testnet"
    chain_id: int
    rpc_url: str
    currency_symbol: str
    block_explorer_url: Optional[str]
    contract_name: str = DEFAULT_CONTRACT_NAME
    artifacts_dir: Optional[Path] = None
    private_key: Optional[str] = None
    rpc_api_key: Optional[str] = None
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT
    confirmations: int = DEFAULT_CONFIRMATIONS

    def __repr__(self) -> str:
        # Keep secrets out of logs and tracebacks
        return (
            f"DeploymentConfig(network={self.network!r}, rpc_url={self.rpc_url!r}, "
            f"contract_name={self.contract_name!r}, artifacts_dir={str(self.artifacts_dir)!r}, "
            f"private_key={'<set>' if self.private_key else None})"
        )


def _parse_number(environ: Mapping[str, str], name: str, default: Any, cast) -> Any:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"${name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"${name} must be positive, got {raw!r}")
    return value


def load_config(
    network: str,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> DeploymentConfig:
    """
    Build configuration for a network from the environment.

    Environment variables:
        <network default_rpc_env>: RPC URL (e.g., $CORE_TESTNET_RPC_URL)
        DEPLOYER_PRIVATE_KEY: Deployer key; node accounts are used if unset
        RPC_API_KEY: Bearer token for the RPC endpoint
        CONFIRMATION_TIMEOUT: Seconds to wait for confirmation
        CONFIRMATIONS: Confirmation depth in blocks
        ARTIFACTS_DIR: Compiled artifacts directory

    Args:
        network: Network key from NETWORK_CONFIG
        environ: Environment mapping (defaults to os.environ)
        **overrides: DeploymentConfig fields that take precedence (None is ignored)

    Returns:
        DeploymentConfig

    Raises:
        ConfigurationError: If the network is unknown or a value is malformed
    """
    if environ is None:
        environ = os.environ

    if network not in NETWORK_CONFIG:
        raise ConfigurationError(
            f"Unknown network '{network}'. Available: {', '.join(sorted(NETWORK_CONFIG))}"
        )
    network_config = NETWORK_CONFIG[network]

    artifacts_dir = environ.get("ARTIFACTS_DIR")
    config = DeploymentConfig(
        network=network,
        network_label=network_config["label"],
        chain_id=network_config["chain_id"],
        rpc_url=environ.get(network_config["default_rpc_env"]) or network_config["rpc_url"],
        currency_symbol=network_config["currency_symbol"],
        block_explorer_url=network_config["block_explorer_url"],
        artifacts_dir=Path(artifacts_dir) if artifacts_dir else get_default_artifacts_dir(),
        private_key=environ.get("DEPLOYER_PRIVATE_KEY") or None,
        rpc_api_key=environ.get("RPC_API_KEY") or None,
        confirmation_timeout=_parse_number(
            environ, "CONFIRMATION_TIMEOUT", DEFAULT_CONFIRMATION_TIMEOUT, float
        ),
        confirmations=_parse_number(environ, "CONFIRMATIONS", DEFAULT_CONFIRMATIONS, int),
    )

    for key, value in overrides.items():
        if not hasattr(config, key):
            raise TypeError(f"Unknown configuration field '{key}'")
        if value is not None:
            setattr(config, key, value)
    config.artifacts_dir = Path(config.artifacts_dir)

    if config.private_key is not None and not _PRIVATE_KEY_RE.match(config.private_key):
        raise ConfigurationError("DEPLOYER_PRIVATE_KEY must be 66 chars (0x + 64 hex)")

    return config
