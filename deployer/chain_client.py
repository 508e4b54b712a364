"""
Chain Client
RPC connection, signer, transaction submission and confirmation polling
"""

import asyncio
import time
from typing import Dict, Optional
from web3 import Web3
from web3.exceptions import TransactionNotFound
from eth_account import Account
from loguru import logger

from .artifacts import ContractArtifact
from .config import DeploymentConfig
from .errors import (
    DeploymentError,
    DeploymentTimeout,
    TransactionReverted,
    TransactionSubmissionError,
)
from .gas import GasCalculator


class ChainClient:
    """
    Executes deployment transactions against the configured network

    Signs locally when a private key is configured, otherwise sends through
    the first account managed by the node (e.g. `npx hardhat node`).
    """

    def __init__(self, config: DeploymentConfig, w3: Optional[Web3] = None):
        """
        Initialize Chain Client

        Args:
            config: Deployment configuration
            w3: Pre-built Web3 instance (None = HTTPProvider from config.rpc_url)
        """
        self.config = config
        self.w3 = w3

        self.account = None
        self.sender = None
        self.chain_id = None
        self.gas = None

    @property
    def connected(self) -> bool:
        return self.sender is not None

    def connect(self) -> 'ChainClient':
        """Connect to the RPC endpoint and load the signer"""
        if self.connected:
            return self

        if self.w3 is None:
            if not self.config.rpc_url:
                raise TransactionSubmissionError(
                    f"No RPC URL configured for network '{self.config.network}'"
                )
            self.w3 = Web3(Web3.HTTPProvider(
                self.config.rpc_url,
                request_kwargs={'timeout': self.config.request_timeout}
            ))

        try:
            connected = self.w3.is_connected()
        except Exception as e:
            logger.debug(f"Connection check raised: {e}")
            connected = False

        if not connected:
            raise TransactionSubmissionError(
                f"Failed to connect to network '{self.config.network}' "
                f"at {self.config.rpc_url}"
            )

        self._load_signer()
        self.chain_id = self._check_chain_id()
        self.gas = GasCalculator(self.w3, self.config)

        logger.info(
            f"Connected to '{self.config.network}' (chain id {self.chain_id}), "
            f"deploying from: {self.sender}"
        )
        return self

    def _load_signer(self):
        if self.config.private_key:
            try:
                self.account = Account.from_key(self.config.private_key)
            except Exception as e:
                # The key itself must never end up in logs
                raise TransactionSubmissionError(
                    f"Invalid deployer private key: {type(e).__name__}"
                ) from None
            self.sender = self.account.address
            return

        try:
            accounts = self.w3.eth.accounts
        except Exception as e:
            raise TransactionSubmissionError(f"Failed to list node accounts: {e}") from e

        if not accounts:
            raise TransactionSubmissionError(
                "DEPLOYER_PRIVATE_KEY is not set and the node manages no accounts"
            )

        self.sender = Web3.to_checksum_address(accounts[0])
        logger.warning(f"DEPLOYER_PRIVATE_KEY not set, using node account {self.sender}")

    def _check_chain_id(self) -> int:
        try:
            chain_id = int(self.w3.eth.chain_id)
        except Exception as e:
            raise TransactionSubmissionError(f"Failed to read chain id: {e}") from e

        expected = self.config.chain_id
        if expected is not None and chain_id != expected:
            raise TransactionSubmissionError(
                f"Network '{self.config.network}' expects chain id {expected}, "
                f"but the RPC endpoint reports {chain_id}"
            )

        return chain_id

    def get_balance(self) -> int:
        """Get deployer balance in wei"""
        try:
            return int(self.w3.eth.get_balance(self.sender))
        except Exception as e:
            raise TransactionSubmissionError(f"Failed to read deployer balance: {e}") from e

    def build_deploy_transaction(self, artifact: ContractArtifact, *args) -> Dict:
        """
        Build a contract creation transaction

        Args:
            artifact: Compiled contract
            *args: Constructor arguments

        Returns:
            Transaction dict (unsigned)
        """
        self.connect()

        logger.info(f"Building deployment transaction for {artifact.contract_name}...")

        try:
            contract = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
            constructor = contract.constructor(*args)
        except Exception as e:
            raise TransactionSubmissionError(
                f"Invalid constructor call for {artifact.contract_name}: {e}"
            ) from e

        gas_limit = self.gas.estimate_gas_limit(constructor, self.sender)
        fee_params = self.gas.get_fee_params()

        try:
            nonce = self.w3.eth.get_transaction_count(self.sender, 'pending')
            transaction = constructor.build_transaction({
                'from': self.sender,
                'nonce': nonce,
                'gas': gas_limit,
                'chainId': self.chain_id,
                **fee_params
            })
        except Exception as e:
            raise TransactionSubmissionError(f"Failed to build deployment transaction: {e}") from e

        return transaction

    def check_balance(self, transaction: Dict):
        """
        Fail early if the deployer cannot pay for the transaction

        Args:
            transaction: Transaction dict with gas and fee fields
        """
        balance = self.get_balance()
        max_cost = GasCalculator.max_cost(transaction)

        logger.info(f"Account balance: {Web3.from_wei(balance, 'ether')} ETH")
        logger.info(f"Estimated deployment cost (max): {Web3.from_wei(max_cost, 'ether')} ETH")

        if balance < max_cost:
            raise TransactionSubmissionError(
                f"Insufficient funds for gas: {self.sender} has {balance} wei, "
                f"deployment may cost up to {max_cost} wei"
            )

    def send_transaction(self, transaction: Dict) -> str:
        """
        Sign (when using a local key) and send a transaction

        Args:
            transaction: Transaction dict

        Returns:
            Transaction hash as 0x-prefixed hex
        """
        try:
            if self.account is not None:
                logger.info("Signing transaction...")
                signed_tx = self.account.sign_transaction(transaction)
                logger.info("Sending deployment transaction...")
                tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
            else:
                logger.info("Sending deployment transaction through node account...")
                tx_hash = self.w3.eth.send_transaction(transaction)
        except DeploymentError:
            raise
        except Exception as e:
            raise TransactionSubmissionError(f"Failed to submit deployment transaction: {e}") from e

        tx_hash = Web3.to_hex(tx_hash)
        logger.info(f"Transaction sent: {tx_hash}")
        return tx_hash

    async def wait_for_receipt(self, tx_hash: str) -> Dict:
        """
        Wait until a transaction has the configured number of confirmations

        Args:
            tx_hash: Transaction hash

        Returns:
            Transaction receipt
        """
        timeout = self.config.timeout
        required = self.config.confirmations
        deadline = time.monotonic() + timeout

        logger.info(f"Waiting for {required} confirmation(s)...")

        while True:
            receipt = self._get_receipt(tx_hash)

            if receipt is not None:
                # Pre-Byzantium receipts carry no status field
                if receipt.get('status') == 0:
                    raise TransactionReverted(tx_hash, dict(receipt))

                confirmations = self._count_confirmations(receipt)
                if confirmations >= required:
                    logger.debug(
                        f"{tx_hash} confirmed in block {receipt['blockNumber']} "
                        f"({confirmations} confirmation(s))"
                    )
                    return receipt

            if time.monotonic() >= deadline:
                raise DeploymentTimeout(tx_hash, timeout)

            await asyncio.sleep(self.config.poll_interval)

    def _get_receipt(self, tx_hash: str) -> Optional[Dict]:
        try:
            return self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        except Exception as e:
            logger.warning(f"Error polling receipt for {tx_hash}: {e}")
            return None

    def _count_confirmations(self, receipt: Dict) -> int:
        if self.config.confirmations <= 1:
            return 1

        try:
            head = self.w3.eth.block_number
        except Exception as e:
            logger.warning(f"Error reading block number: {e}")
            return 0

        return head - receipt['blockNumber'] + 1
