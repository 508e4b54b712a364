"""
Shared fixtures: a fake JSON-RPC node behind a mocked Web3, and Hardhat artifacts
"""

import json
import sys
from unittest.mock import MagicMock

import pytest
from loguru import logger
from web3 import Web3
from web3.exceptions import TransactionNotFound

from deployer.config import DeploymentConfig


# Hardhat node account #0 (well-known development key)
HARDHAT_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
HARDHAT_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

# PUSH1 0 PUSH1 0 RETURN: deploys empty runtime code
BYTECODE = "0x60006000f3"

ABI = [{"inputs": [], "stateMutability": "nonpayable", "type": "constructor"}]

ENV_VARS = [
    'DEPLOY_NETWORK',
    'DEPLOY_RPC_URL',
    'DEPLOY_NETWORKS_FILE',
    'DEPLOYER_PRIVATE_KEY',
    'ARTIFACTS_DIR',
    'DEPLOY_CONFIRMATIONS',
    'DEPLOY_TIMEOUT',
    'DEPLOY_LOG_FILE',
    'SEPOLIA_RPC_URL',
]


class FakeNode:
    """
    Mocked Web3 that behaves like a Hardhat node with automine

    Every sent transaction is mined at once with a fresh contract address.
    """

    def __init__(self, chain_id=31337, balance=10 ** 19, base_fee=10 ** 9, status=1):
        self.nonce = 0
        self.status = status
        self.mine = True
        self.sent = []
        self.receipts = {}

        self.w3 = MagicMock()
        self.w3.is_connected.return_value = True

        eth = self.w3.eth
        eth.chain_id = chain_id
        eth.accounts = [HARDHAT_ADDRESS]
        eth.block_number = 1
        eth.gas_price = 2 * 10 ** 9
        eth.max_priority_fee = 10 ** 9
        eth.get_block.return_value = {'number': 1, 'baseFeePerGas': base_fee}
        eth.get_balance.return_value = balance
        eth.get_transaction_count.side_effect = lambda address, block='latest': self.nonce

        self.constructor = eth.contract.return_value.constructor.return_value
        self.constructor.estimate_gas.return_value = 250_000
        self.constructor.build_transaction.side_effect = (
            lambda params: {**params, 'value': 0, 'data': BYTECODE}
        )

        eth.send_raw_transaction.side_effect = self._send
        eth.send_transaction.side_effect = self._send
        eth.get_transaction_receipt.side_effect = self._get_receipt

    def _send(self, transaction):
        self.sent.append(transaction)

        tx_hash = Web3.keccak(text=f"deployment:{self.nonce}")
        address = Web3.to_checksum_address(
            '0x' + Web3.keccak(text=f"{HARDHAT_ADDRESS}:{self.nonce}").hex()[-40:]
        )

        if self.mine:
            self.receipts[Web3.to_hex(tx_hash)] = {
                'transactionHash': tx_hash,
                'status': self.status,
                'contractAddress': address,
                'blockNumber': self.nonce + 1,
                'gasUsed': 210_000
            }

        self.nonce += 1
        return tx_hash

    def _get_receipt(self, tx_hash):
        if tx_hash not in self.receipts:
            raise TransactionNotFound(f"Transaction with hash: '{tx_hash}' not found.")
        return self.receipts[tx_hash]


def write_artifact(root, source_name, contract_name, bytecode=BYTECODE, abi=None):
    """Write a Hardhat-style artifact JSON file and return its path"""
    path = root / source_name / f"{contract_name}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({
        "_format": "hh-sol-artifact-1",
        "contractName": contract_name,
        "sourceName": source_name,
        "abi": ABI if abi is None else abi,
        "bytecode": bytecode,
        "deployedBytecode": "0x",
        "linkReferences": {},
        "deployedLinkReferences": {}
    }))
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of the tests"""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def artifacts_dir(tmp_path):
    """Compiled SmartLendProtocol artifact in the Hardhat layout"""
    root = tmp_path / 'artifacts'
    write_artifact(root, 'contracts/SmartLendProtocol.sol', 'SmartLendProtocol')
    return root


@pytest.fixture
def config(artifacts_dir):
    """Local-key configuration against a Hardhat-like chain"""
    return DeploymentConfig(
        network='localhost',
        rpc_url='http://127.0.0.1:8545',
        chain_id=31337,
        private_key=HARDHAT_KEY,
        artifacts_dir=artifacts_dir,
        timeout=1,
        poll_interval=0
    )


@pytest.fixture
def node():
    """Fake Hardhat node"""
    return FakeNode()


@pytest.fixture
def log_messages():
    """Collect loguru output"""
    messages = []
    handler_id = logger.add(messages.append, level='DEBUG', format="{level} | {message}")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def restore_logging():
    """Put loguru back to its default sink after entry points reconfigure it"""
    yield
    logger.remove()
    logger.add(sys.stderr)
