"""
Pre-flight Check
Verifies configuration, artifact, RPC connection and deployer balance
without sending anything

Run: python -m deployer.preflight
"""

import os
import sys
from typing import Optional
from web3 import Web3
from loguru import logger

from .artifacts import ArtifactResolver
from .chain_client import ChainClient
from .config import DeploymentConfig
from .errors import DeploymentError
from .log import configure_logging


def check_configuration() -> Optional[DeploymentConfig]:
    """Load deployment configuration from environment"""
    logger.info("Checking configuration...")

    try:
        config = DeploymentConfig.from_env()
    except DeploymentError as e:
        logger.error(f"  ✗ {e}")
        return None
    except Exception as e:
        logger.error(f"  ✗ Invalid configuration: {type(e).__name__}: {e}")
        return None

    logger.success(f"  ✓ Network: {config.network} ({config.rpc_url or 'no RPC URL'})")

    if not config.private_key:
        logger.warning("  DEPLOYER_PRIVATE_KEY not set - will use the node's first account")

    return config


def check_artifact(config: DeploymentConfig) -> bool:
    """Check that the contract has a deployable artifact"""
    logger.info("Checking contract artifact...")

    try:
        artifact = ArtifactResolver(config.artifacts_dir).resolve(config.contract_name)
    except DeploymentError as e:
        logger.error(f"  ✗ {e}")
        logger.info("  Run 'npx hardhat compile' first")
        return False

    logger.success(f"  ✓ {artifact.contract_name}: {artifact.path}")
    return True


def check_rpc_connection(client: ChainClient) -> bool:
    """Check RPC endpoint, chain id and signer"""
    logger.info("Checking RPC connection...")

    try:
        client.connect()
        block = client.w3.eth.block_number
    except DeploymentError as e:
        logger.error(f"  ✗ {e}")
        return False
    except Exception as e:
        logger.error(f"  ✗ {client.config.rpc_url}: {e}")
        return False

    logger.success(f"  ✓ Connected (chain id {client.chain_id}, block {block})")
    return True


def check_deployer_balance(client: ChainClient) -> bool:
    """Check that the deployer can pay for gas at all"""
    logger.info("Checking deployer balance...")

    try:
        balance = client.get_balance()
    except DeploymentError as e:
        logger.error(f"  ✗ {e}")
        return False

    logger.info(f"  {client.sender}: {Web3.from_wei(balance, 'ether')} ETH")

    if balance == 0:
        logger.error("  ✗ Deployer has no funds for gas")
        return False

    logger.success("  ✓ Deployer balance non-zero")
    return True


def main(client: Optional[ChainClient] = None) -> int:
    """
    Run all pre-flight checks

    Args:
        client: Chain client to check (None = built from configuration)

    Returns:
        0 if every check passed, 1 otherwise
    """
    logger.info("=" * 70)
    logger.info("Deployment Pre-flight Check")
    logger.info("=" * 70)

    results = []

    config = client.config if client else check_configuration()
    results.append(("Configuration", config is not None))

    if config is not None:
        client = client or ChainClient(config)

        results.append(("Contract Artifact", check_artifact(config)))

        connected = check_rpc_connection(client)
        results.append(("RPC Connection", connected))

        if connected:
            results.append(("Deployer Balance", check_deployer_balance(client)))

    # Summary
    logger.info("")
    passed = sum(1 for _, result in results if result)

    for name, result in results:
        status = "✓ PASS" if result else "✗ FAIL"
        logger.info(f"  {status}: {name}")

    logger.info(f"Total: {passed}/{len(results)} checks passed")

    if passed == len(results) and len(results) == 4:
        logger.success("✅ Ready to deploy: python main.py")
        return 0

    logger.error("❌ Not ready to deploy - fix issues above")
    return 1


def cli():
    """Console entry point"""
    configure_logging(os.getenv('DEPLOY_LOG_FILE') or None)
    sys.exit(main())


if __name__ == "__main__":
    cli()
