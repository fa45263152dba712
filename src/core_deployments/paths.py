"""Path management utilities for core-deployments library."""

from pathlib import Path
from typing import Optional, Union


def get_default_artifacts_dir() -> Path:
    """
    Get default compiled artifacts directory.

    Returns:
        Path to ./artifacts (Hardhat's default build output)
    """
    return Path.cwd() / "artifacts"


def get_default_reports_dir() -> Path:
    """
    Get default directory for saved deployment reports.

    Returns:
        Path to ./deployments
    """
    return Path.cwd() / "deployments"


def get_report_path(
    network: str,
    contract_name: str,
    reports_root: Optional[Union[Path, str]] = None,
) -> Path:
    """
    Get the report file path for a contract on a network.

    Args:
        network: Network key (e.g., "core_testnet")
        contract_name: Contract name (e.g., "ProcrastinationMiningProtocol")
        reports_root: Custom reports directory (defaults to ./deployments)

    Returns:
        Path to {reports_root}/{network}/{contract_name}.json
    """
    if reports_root is None:
        reports_root = get_default_reports_dir()
    else:
        reports_root = Path(reports_root).absolute()

    return reports_root / network / f"{contract_name}.json"
