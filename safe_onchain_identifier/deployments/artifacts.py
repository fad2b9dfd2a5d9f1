"""
Hardhat compilation artifacts, ``<artifacts_dir>/**/<ContractName>.json``.
Debug artifacts (``*.dbg.json``) are ignored
"""

import dataclasses
import json
import logging
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, List

from hexbytes import HexBytes

from .exceptions import ArtifactNotFoundException

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ContractArtifact:
    contract_name: str
    abi: List[Dict[str, Any]]
    bytecode: HexBytes


class ContractArtifacts:
    def __init__(self, artifacts_dir: str | Path):
        self.artifacts_dir = Path(artifacts_dir)

    @cached_property
    def artifact_paths(self) -> Dict[str, Path]:
        """
        :return: Dictionary of contract names and their artifact path. If a name is repeated, first found is used
        """
        artifact_paths = {}
        for path in sorted(self.artifacts_dir.rglob("*.json")):
            if path.name.endswith(".dbg.json"):
                continue
            artifact_paths.setdefault(path.stem, path)
        logger.debug(
            "Found %d artifacts on %s", len(artifact_paths), self.artifacts_dir
        )
        return artifact_paths

    def has_artifact(self, contract_name: str) -> bool:
        return contract_name in self.artifact_paths

    def get_artifact(self, contract_name: str) -> ContractArtifact:
        """
        :param contract_name:
        :return: ABI and creation bytecode for ``contract_name``
        :raises ArtifactNotFoundException:
        """
        try:
            path = self.artifact_paths[contract_name]
        except KeyError as exc:
            raise ArtifactNotFoundException(
                f"Cannot find artifact for contract {contract_name} on {self.artifacts_dir}"
            ) from exc

        with open(path) as artifact_file:
            artifact = json.load(artifact_file)

        if "abi" not in artifact or "bytecode" not in artifact:
            raise ArtifactNotFoundException(
                f"{path} is not a valid Hardhat artifact for contract {contract_name}"
            )
        return ContractArtifact(
            artifact.get("contractName", contract_name),
            artifact["abi"],
            HexBytes(artifact["bytecode"]),
        )
