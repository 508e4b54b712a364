"""
Artifact Resolver
Locates Hardhat compiled artifacts (ABI + bytecode) by contract name
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
from loguru import logger

from .errors import ArtifactNotFound


@dataclass(frozen=True)
class ContractArtifact:
    """Compiled contract produced by `npx hardhat compile`"""

    contract_name: str
    abi: List[Dict] = field(repr=False)
    bytecode: str = field(repr=False)
    source_name: str = ''
    path: Optional[Path] = None


class ArtifactResolver:
    """
    Resolves contract names to compiled artifacts

    Accepts a bare name ("SmartLendProtocol") or a fully qualified name
    ("contracts/SmartLendProtocol.sol:SmartLendProtocol").
    """

    def __init__(self, artifacts_dir):
        """
        Initialize Artifact Resolver

        Args:
            artifacts_dir: Hardhat artifacts root (usually ./artifacts)
        """
        self.artifacts_dir = Path(artifacts_dir)

    def resolve(self, contract_name: str) -> ContractArtifact:
        """
        Find and load the artifact for a contract

        Args:
            contract_name: Bare or fully qualified contract name

        Returns:
            ContractArtifact
        """
        if not self.artifacts_dir.is_dir():
            raise ArtifactNotFound(
                contract_name,
                f"artifacts directory {self.artifacts_dir} does not exist "
                "(run 'npx hardhat compile' first)"
            )

        path = self._find(contract_name)
        artifact = self._load(contract_name, path)

        logger.info(f"Resolved artifact for {artifact.contract_name}: {path}")
        return artifact

    def _find(self, contract_name: str) -> Path:
        if ':' in contract_name:
            source_name, name = contract_name.rsplit(':', 1)
            path = self.artifacts_dir / source_name / f"{name}.json"
            if not path.is_file():
                raise ArtifactNotFound(contract_name, f"{path} does not exist")
            return path

        # Hardhat default layout counts even without a contractName entry
        default = self.artifacts_dir / 'contracts' / f"{contract_name}.sol" / f"{contract_name}.json"
        candidates = [default] if default.is_file() else []

        for path in sorted(self.artifacts_dir.rglob(f"{contract_name}.json")):
            if path == default or 'build-info' in path.relative_to(self.artifacts_dir).parts:
                continue
            if self._declares(path, contract_name):
                candidates.append(path)

        if not candidates:
            raise ArtifactNotFound(contract_name)

        if len(candidates) > 1:
            names = ', '.join(str(p.relative_to(self.artifacts_dir)) for p in candidates)
            raise ArtifactNotFound(
                contract_name,
                f"multiple artifacts match ({names}); use a fully qualified name"
            )

        return candidates[0]

    @staticmethod
    def _declares(path: Path, contract_name: str) -> bool:
        """Check if an artifact file declares the given contract"""
        try:
            with open(path, 'r') as f:
                return json.load(f).get('contractName') == contract_name
        except (OSError, ValueError, AttributeError):
            logger.warning(f"Skipping unreadable artifact {path}")
            return False

    def _load(self, contract_name: str, path: Path) -> ContractArtifact:
        try:
            with open(path, 'r') as f:
                contract_json = json.load(f)
        except (OSError, ValueError) as e:
            raise ArtifactNotFound(contract_name, f"cannot read {path}: {e}") from e

        if not isinstance(contract_json, dict):
            raise ArtifactNotFound(contract_name, f"{path} is not a contract artifact")

        abi = contract_json.get('abi')
        bytecode = contract_json.get('bytecode')

        if abi is None or bytecode is None:
            raise ArtifactNotFound(contract_name, f"{path} is missing 'abi' or 'bytecode'")

        if not isinstance(bytecode, str):
            # solc standard JSON nests it as {"object": "..."}
            bytecode = bytecode.get('object', '') if isinstance(bytecode, dict) else ''

        if not bytecode.startswith('0x'):
            bytecode = '0x' + bytecode

        if bytecode == '0x':
            raise ArtifactNotFound(
                contract_name,
                f"{path} has empty bytecode (abstract contract or interface)"
            )

        return ContractArtifact(
            contract_name=contract_json.get('contractName', contract_name.rsplit(':', 1)[-1]),
            abi=abi,
            bytecode=bytecode,
            source_name=contract_json.get('sourceName', ''),
            path=path
        )
