"""Deployment report assembly and storage for core-deployments library."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from .exceptions import ReportNotFoundError
from .types import ContractStateSnapshot, DeployedContractHandle, DeploymentReport, Signer


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """
    Format a datetime as ISO-8601 UTC with millisecond precision.

    Naive datetimes are taken to be UTC.

    Returns:
        String like "2025-01-31T12:00:00.000Z"
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_report(
    contract_name: str,
    handle: DeployedContractHandle,
    signer: Signer,
    network: str,
    snapshot: ContractStateSnapshot,
    clock: Callable[[], datetime] = utc_now,
) -> DeploymentReport:
    """
    Assemble the report of a verified deployment.

    Makes no network calls. The snapshot is only taken as proof that
    read-back verification succeeded for the handle's address.

    Args:
        contract_name: Name of the deployed contract
        handle: Confirmed contract handle
        signer: Account that paid for the deployment
        network: Network label (e.g., "Core Testnet")
        snapshot: State read back from the deployed contract
        clock: Source of the deployment time

    Returns:
        DeploymentReport

    Raises:
        ValueError: If a field is empty or the snapshot belongs to another address
    """
    if snapshot.address.lower() != handle.address.lower():
        raise ValueError(
            f"Snapshot of {snapshot.address} does not verify contract at {handle.address}"
        )

    report = DeploymentReport(
        contract_name=contract_name,
        contract_address=handle.address,
        deployer=signer.address,
        network=network,
        deployment_time=format_timestamp(clock()),
        transaction_hash=handle.transaction_hash,
    )

    empty = [key for key, value in report.to_dict().items() if not value]
    if empty:
        raise ValueError(f"Deployment report fields are empty: {', '.join(empty)}")

    return report


def save_report(report: DeploymentReport, report_path: Path) -> None:
    """
    Save a deployment report to disk as JSON.

    Creates parent directories if they don't exist.
    """
    report_path.parent.mkdir(parents=True, exist_ok=True)
    with open(report_path, "w") as f:
        json.dump(report.to_dict(), f, indent=2)


def load_report(report_path: Path) -> DeploymentReport:
    """
    Load a saved deployment report.

    Raises:
        ReportNotFoundError: If the report file does not exist
        KeyError: If a report field is missing
    """
    try:
        with open(report_path) as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ReportNotFoundError(f"Deployment report not found at {report_path}") from e

    return DeploymentReport.from_dict(data)
