"""
Deployment Errors
Error taxonomy for a single contract deployment

DeploymentError
 ├─ ArtifactNotFound            : no deployable compiled artifact for the name
 ├─ TransactionSubmissionError  : signer, network, gas or RPC failure on submit
 ├─ DeploymentTimeout           : confirmation did not arrive in time
 ├─ TransactionReverted         : the chain rejected the creation transaction
 └─ UnknownDeploymentError      : anything unanticipated
"""

from typing import Optional


class DeploymentError(Exception):
    """Base class for deployment failures"""

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__

    def __str__(self) -> str:
        return self.message


class ArtifactNotFound(DeploymentError):
    """The named contract has no compiled, deployable artifact"""

    def __init__(self, contract_name: str, reason: str = "no compiled artifact found"):
        super().__init__(f"Artifact for {contract_name!r} not found: {reason}")
        self.contract_name = contract_name
        self.reason = reason


class TransactionSubmissionError(DeploymentError):
    """Signer, network or gas configuration is invalid, or the RPC is unreachable"""


class DeploymentTimeout(DeploymentError):
    """Confirmation did not happen before the wait timed out"""

    def __init__(self, tx_hash: str, timeout: float):
        super().__init__(
            f"Transaction {tx_hash} was not confirmed within {timeout:g} seconds"
        )
        self.tx_hash = tx_hash
        self.timeout = timeout


class TransactionReverted(DeploymentError):
    """The deployment transaction was mined with a failed status"""

    def __init__(self, tx_hash: str, receipt: Optional[dict] = None):
        block = receipt.get('blockNumber') if receipt else None
        where = f" in block {block}" if block is not None else ""
        super().__init__(f"Deployment transaction {tx_hash} reverted{where}")
        self.tx_hash = tx_hash
        self.receipt = receipt


class UnknownDeploymentError(DeploymentError):
    """Unanticipated failure during deployment"""
