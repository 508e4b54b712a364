"""
Contract Factory
Deployable handle for a compiled contract, and the deployed-contract handle it returns
"""

from typing import Dict, Optional
from web3 import Web3
from loguru import logger

from .artifacts import ArtifactResolver, ContractArtifact
from .chain_client import ChainClient
from .errors import UnknownDeploymentError


class DeployedContract:
    """
    A submitted deployment

    `address` stays None until `deployed()` has seen the confirmation.
    """

    def __init__(self, artifact: ContractArtifact, client: ChainClient, tx_hash: str):
        self.artifact = artifact
        self.client = client
        self.deploy_transaction_hash = tx_hash

        self.receipt: Optional[Dict] = None
        self.address: Optional[str] = None

    @property
    def contract_name(self) -> str:
        return self.artifact.contract_name

    async def deployed(self) -> 'DeployedContract':
        """Wait for the deployment to be confirmed and read back the address"""
        if self.address is not None:
            return self

        receipt = await self.client.wait_for_receipt(self.deploy_transaction_hash)

        contract_address = receipt.get('contractAddress')
        if not contract_address:
            raise UnknownDeploymentError(
                f"Receipt for {self.deploy_transaction_hash} has no contract address"
            )

        self.receipt = receipt
        self.address = Web3.to_checksum_address(contract_address)

        logger.success(f"{self.contract_name} deployed at {self.address}")
        logger.info(f"Transaction hash: {self.deploy_transaction_hash}")
        logger.info(f"Gas used: {receipt.get('gasUsed')}")

        return self

    def __repr__(self):
        return (
            f"DeployedContract({self.contract_name!r}, address={self.address!r}, "
            f"tx={self.deploy_transaction_hash!r})"
        )


class ContractFactory:
    """Submits deployment transactions for one artifact"""

    def __init__(self, artifact: ContractArtifact, client: ChainClient):
        self.artifact = artifact
        self.client = client

    @property
    def contract_name(self) -> str:
        return self.artifact.contract_name

    async def deploy(self, *args) -> DeployedContract:
        """
        Submit the deployment transaction

        Args:
            *args: Constructor arguments

        Returns:
            DeployedContract (not yet confirmed)
        """
        logger.info(f"Deploying {self.contract_name}...")

        transaction = self.client.build_deploy_transaction(self.artifact, *args)
        self.client.check_balance(transaction)
        tx_hash = self.client.send_transaction(transaction)

        return DeployedContract(self.artifact, self.client, tx_hash)


def get_contract_factory(
    contract_name: str,
    resolver: ArtifactResolver,
    client: ChainClient
) -> ContractFactory:
    """
    Get a deployable handle for a named contract

    Args:
        contract_name: Bare or fully qualified contract name
        resolver: Artifact resolver
        client: Chain client the factory submits through

    Returns:
        ContractFactory
    """
    artifact = resolver.resolve(contract_name)
    return ContractFactory(artifact, client)
