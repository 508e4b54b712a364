"""
Gas Calculator
Gas limit and fee parameters for contract creation transactions
"""

from typing import Dict
from web3 import Web3
from loguru import logger

from .config import DeploymentConfig
from .errors import TransactionSubmissionError


DEFAULT_PRIORITY_FEE_GWEI = 1


class GasCalculator:
    """
    Picks gas limit and fees for a deployment

    Fixed gas price from config -> legacy gasPrice
    Node reports baseFeePerGas -> EIP-1559 (maxFeePerGas, maxPriorityFeePerGas)
    Otherwise -> legacy gasPrice from the node
    """

    def __init__(self, w3: Web3, config: DeploymentConfig):
        """
        Initialize Gas Calculator

        Args:
            w3: Web3 instance
            config: Deployment configuration
        """
        self.w3 = w3
        self.gas_multiplier = config.gas_multiplier
        self.fallback_gas_limit = config.fallback_gas_limit
        self.gas_price_gwei = config.gas_price_gwei

    def estimate_gas_limit(self, constructor, sender: str) -> int:
        """
        Estimate gas for a constructor call, with buffer

        Args:
            constructor: web3 ContractConstructor
            sender: Deployer address

        Returns:
            Gas limit
        """
        try:
            gas_estimate = constructor.estimate_gas({'from': sender})
            gas_limit = int(gas_estimate * self.gas_multiplier)
        except Exception as e:
            logger.warning(f"Gas estimation failed: {e}, using default {self.fallback_gas_limit}")
            gas_limit = self.fallback_gas_limit

        logger.info(f"Gas limit: {gas_limit}")
        return gas_limit

    def get_fee_params(self) -> Dict[str, int]:
        """
        Get fee fields for the transaction dict

        Returns:
            Either {'gasPrice'} or {'maxFeePerGas', 'maxPriorityFeePerGas'}, in wei
        """
        if self.gas_price_gwei is not None:
            gas_price = int(Web3.to_wei(self.gas_price_gwei, 'gwei'))
            logger.info(f"Gas price (fixed): {self.gas_price_gwei} gwei")
            return {'gasPrice': gas_price}

        try:
            latest_block = self.w3.eth.get_block('latest')
            base_fee = latest_block.get('baseFeePerGas')

            if base_fee is None:
                gas_price = int(self.w3.eth.gas_price)
                logger.info(f"Gas price: {Web3.from_wei(gas_price, 'gwei')} gwei")
                return {'gasPrice': gas_price}
        except Exception as e:
            raise TransactionSubmissionError(f"Failed to fetch fee data: {e}") from e

        priority_fee = self._get_priority_fee()

        # Max fee = base fee * 2 + priority fee (buffer for fluctuations)
        max_fee = int(base_fee) * 2 + priority_fee

        logger.info(
            f"Max fee: {Web3.from_wei(max_fee, 'gwei')} gwei, "
            f"priority fee: {Web3.from_wei(priority_fee, 'gwei')} gwei"
        )

        return {
            'maxFeePerGas': max_fee,
            'maxPriorityFeePerGas': priority_fee
        }

    def _get_priority_fee(self) -> int:
        try:
            return int(self.w3.eth.max_priority_fee)
        except Exception as e:
            logger.warning(
                f"eth_maxPriorityFeePerGas unavailable: {e}, "
                f"using {DEFAULT_PRIORITY_FEE_GWEI} gwei"
            )
            return int(Web3.to_wei(DEFAULT_PRIORITY_FEE_GWEI, 'gwei'))

    @staticmethod
    def max_cost(transaction: Dict) -> int:
        """
        Upper bound of what a transaction can cost the sender

        Args:
            transaction: Transaction dict with gas and fee fields

        Returns:
            Cost in wei
        """
        fee_per_gas = transaction.get('maxFeePerGas', transaction.get('gasPrice', 0))
        return int(transaction.get('gas', 0)) * int(fee_per_gas) + int(transaction.get('value', 0))
