"""
Deployment Runner
Drives one contract deployment to completion and reports the outcome
"""

import os
import sys
import asyncio
from dataclasses import dataclass
from typing import Optional
from loguru import logger

from .artifacts import ArtifactResolver
from .chain_client import ChainClient
from .config import CONTRACT_NAME, DeploymentConfig
from .errors import DeploymentError, UnknownDeploymentError
from .factory import get_contract_factory
from .log import configure_logging


@dataclass
class DeploymentResult:
    """Outcome of one deployment run"""

    contract_name: str
    address: Optional[str] = None
    transaction_hash: Optional[str] = None
    error: Optional[DeploymentError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


class DeploymentRunner:
    """
    Single-shot deployment:
    resolve artifact -> submit -> wait for confirmation -> print address

    Every failure is caught once in run() and returned in the result.
    """

    def __init__(
        self,
        config: Optional[DeploymentConfig] = None,
        resolver: Optional[ArtifactResolver] = None,
        client: Optional[ChainClient] = None
    ):
        """
        Initialize Deployment Runner

        Args:
            config: Deployment configuration (None = load from environment in run())
            resolver: Artifact resolver (None = config.artifacts_dir)
            client: Chain client (None = built from config)
        """
        self.config = config
        self.resolver = resolver
        self.client = client

    @property
    def contract_name(self) -> str:
        return self.config.contract_name if self.config else CONTRACT_NAME

    async def run(self) -> DeploymentResult:
        """
        Deploy the contract

        Returns:
            DeploymentResult; never raises
        """
        contract = None

        try:
            self._setup()

            logger.info(f"Starting {self.contract_name} deployment on '{self.config.network}'...")

            factory = get_contract_factory(self.contract_name, self.resolver, self.client)
            contract = await factory.deploy()
            await contract.deployed()

        except DeploymentError as e:
            error = e
        except Exception as e:
            error = UnknownDeploymentError(f"{type(e).__name__}: {e}")
            error.__cause__ = e
        else:
            print(f"{self.contract_name} contract deployed to: {contract.address}", flush=True)
            return DeploymentResult(
                contract_name=self.contract_name,
                address=contract.address,
                transaction_hash=contract.deploy_transaction_hash
            )

        logger.opt(exception=error).error(f"Deployment of {self.contract_name} failed: {error}")

        return DeploymentResult(
            contract_name=self.contract_name,
            transaction_hash=contract.deploy_transaction_hash if contract else None,
            error=error
        )

    def _setup(self):
        if self.config is None:
            self.config = DeploymentConfig.from_env()
        if self.resolver is None:
            self.resolver = ArtifactResolver(self.config.artifacts_dir)
        if self.client is None:
            self.client = ChainClient(self.config)


async def main(config: Optional[DeploymentConfig] = None) -> int:
    """Run one deployment and return the process exit status"""
    result = await DeploymentRunner(config).run()
    return result.exit_code


def cli():
    """Entry point for both `python main.py` and `smartlend-deploy`"""
    configure_logging(os.getenv('DEPLOY_LOG_FILE') or None)

    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        logger.error("Interrupted by user")
        exit_code = 1

    sys.exit(exit_code)
