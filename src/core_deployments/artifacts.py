"""Compiled contract artifact parsers for core-deployments library."""

import json
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import ResolutionError

_HEX_RE = re.compile(r"^0x(?:[0-9a-fA-F]{2})+$")


class ArtifactFormat(Enum):
    """
    Compiled artifact formats.

    - HARDHAT: artifacts/contracts/<Source>.sol/<Name>.json, bytecode is a hex string
    - FOUNDRY: out/<Source>.sol/<Name>.json, bytecode nested under "object"
    """

    HARDHAT = "hardhat"
    FOUNDRY = "foundry"


@dataclass(frozen=True)
class ContractArtifact:
    """ABI and creation bytecode of a compiled contract."""

    name: str
    abi: List[Dict[str, Any]]
    bytecode: str
    source_format: ArtifactFormat
    path: Path


def detect_artifact_format(data: Dict[str, Any]) -> Optional[ArtifactFormat]:
    """
    Detect artifact format from its parsed JSON content.

    Returns:
        ArtifactFormat.FOUNDRY if bytecode is an object with an "object" key
        ArtifactFormat.HARDHAT if bytecode is a plain string
        None if no bytecode field is present
    """
    bytecode = data.get("bytecode")
    if isinstance(bytecode, dict) and "object" in bytecode:
        return ArtifactFormat.FOUNDRY
    if isinstance(bytecode, str):
        return ArtifactFormat.HARDHAT
    return None


def find_artifact(artifacts_dir: Path, contract_name: str) -> Optional[Path]:
    """
    Find the artifact file for a contract below an artifacts directory.

    Debug files (*.dbg.json) and build-info are skipped. When several sources
    define the same contract name, the first path in sorted order wins.

    Returns:
        Path to the artifact JSON file, or None if not found
    """
    if not artifacts_dir.is_dir():
        return None

    candidates = sorted(
        p
        for p in artifacts_dir.rglob(f"{contract_name}.json")
        if "build-info" not in p.parts
    )
    return candidates[0] if candidates else None


def parse_artifact(file_path: Path, contract_name: str) -> ContractArtifact:
    """
    Parse a compiled artifact file.

    Args:
        file_path: Path to artifact JSON file
        contract_name: Contract name the artifact was looked up by

    Returns:
        ContractArtifact with ABI and 0x-prefixed creation bytecode

    Raises:
        ResolutionError: If the file is unreadable or lacks ABI/bytecode
    """
    try:
        with open(file_path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ResolutionError(f"Cannot read artifact {file_path}: {e}") from e

    abi = data.get("abi")
    if not abi:
        raise ResolutionError(f"ABI missing from artifact {file_path}")

    artifact_format = detect_artifact_format(data)
    match artifact_format:
        case ArtifactFormat.FOUNDRY:
            bytecode = data["bytecode"]["object"]
        case ArtifactFormat.HARDHAT:
            bytecode = data["bytecode"]
        case _:
            raise ResolutionError(f"Bytecode missing from artifact {file_path}")

    # Interfaces and abstract contracts compile to empty bytecode
    if not bytecode or bytecode == "0x":
        raise ResolutionError(
            f"Contract '{contract_name}' has no creation bytecode (abstract or interface?)"
        )
    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode
    if "__" in bytecode:
        raise ResolutionError(
            f"Contract '{contract_name}' has unlinked library references in {file_path}"
        )
    if not _HEX_RE.match(bytecode):
        raise ResolutionError(f"Bytecode of '{contract_name}' in {file_path} is not hex")

    return ContractArtifact(
        name=contract_name,
        abi=abi,
        bytecode=bytecode,
        source_format=artifact_format,
        path=file_path,
    )


def load_artifact(artifacts_dir: Path, contract_name: str) -> ContractArtifact:
    """
    Locate and parse the artifact for a contract.

    Raises:
        ResolutionError: If no artifact exists for the contract
    """
    artifact_path = find_artifact(artifacts_dir, contract_name)
    if artifact_path is None:
        raise ResolutionError(
            f"Contract '{contract_name}' not found in artifacts at {artifacts_dir}. "
            "Compile the contracts first."
        )
    return parse_artifact(artifact_path, contract_name)
