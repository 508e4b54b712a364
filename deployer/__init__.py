"""
SmartLend Deployer Package
Resolves compiled artifacts, deploys them and waits for confirmation
"""

from .artifacts import ArtifactResolver, ContractArtifact
from .chain_client import ChainClient
from .config import CONTRACT_NAME, DeploymentConfig
from .errors import (
    ArtifactNotFound,
    DeploymentError,
    DeploymentTimeout,
    TransactionReverted,
    TransactionSubmissionError,
    UnknownDeploymentError,
)
from .factory import ContractFactory, DeployedContract, get_contract_factory
from .gas import GasCalculator
from .runner import DeploymentResult, DeploymentRunner

__all__ = [
    'ArtifactResolver',
    'ContractArtifact',
    'ChainClient',
    'CONTRACT_NAME',
    'DeploymentConfig',
    'ArtifactNotFound',
    'DeploymentError',
    'DeploymentTimeout',
    'TransactionReverted',
    'TransactionSubmissionError',
    'UnknownDeploymentError',
    'ContractFactory',
    'DeployedContract',
    'get_contract_factory',
    'GasCalculator',
    'DeploymentResult',
    'DeploymentRunner'
]
