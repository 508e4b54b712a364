"""
Contract Factory Tests
"""

import pytest
from web3 import Web3

from deployer.artifacts import ArtifactResolver
from deployer.chain_client import ChainClient
from deployer.errors import ArtifactNotFound, TransactionSubmissionError, UnknownDeploymentError
from deployer.factory import ContractFactory, DeployedContract, get_contract_factory

from conftest import FakeNode


@pytest.fixture
def client(config, node):
    return ChainClient(config, w3=node.w3)


@pytest.fixture
def factory(artifacts_dir, client):
    return get_contract_factory('SmartLendProtocol', ArtifactResolver(artifacts_dir), client)


class TestContractFactory:
    """Test factory resolution and deployment handles"""

    def test_get_contract_factory(self, factory, client):
        assert isinstance(factory, ContractFactory)
        assert factory.contract_name == 'SmartLendProtocol'
        assert factory.client is client

    def test_get_contract_factory_missing(self, artifacts_dir, client, node):
        """Resolution fails before touching the network"""
        with pytest.raises(ArtifactNotFound):
            get_contract_factory('LendingPool', ArtifactResolver(artifacts_dir), client)

        node.w3.is_connected.assert_not_called()

    @pytest.mark.asyncio
    async def test_deploy_returns_pending_handle(self, factory, node):
        contract = await factory.deploy()

        assert isinstance(contract, DeployedContract)
        assert contract.address is None
        assert contract.deploy_transaction_hash == Web3.to_hex(Web3.keccak(text='deployment:0'))
        assert len(node.sent) == 1

    @pytest.mark.asyncio
    async def test_deployed_reads_back_address(self, factory, node):
        contract = await factory.deploy()

        result = await contract.deployed()

        assert result is contract
        assert Web3.is_checksum_address(contract.address)
        assert contract.address == node.receipts[contract.deploy_transaction_hash]['contractAddress']
        assert contract.receipt['status'] == 1

    @pytest.mark.asyncio
    async def test_deployed_twice_does_not_poll_again(self, factory, node):
        contract = await (await factory.deploy()).deployed()
        polls = node.w3.eth.get_transaction_receipt.call_count

        await contract.deployed()

        assert node.w3.eth.get_transaction_receipt.call_count == polls

    @pytest.mark.asyncio
    async def test_receipt_without_contract_address(self, factory, node):
        contract = await factory.deploy()
        node.receipts[contract.deploy_transaction_hash]['contractAddress'] = None

        with pytest.raises(UnknownDeploymentError, match='no contract address'):
            await contract.deployed()

    @pytest.mark.asyncio
    async def test_insufficient_funds_sends_nothing(self, config, artifacts_dir):
        node = FakeNode(balance=0)
        client = ChainClient(config, w3=node.w3)
        factory = get_contract_factory('SmartLendProtocol', ArtifactResolver(artifacts_dir), client)

        with pytest.raises(TransactionSubmissionError, match='Insufficient funds'):
            await factory.deploy()

        assert node.sent == []
