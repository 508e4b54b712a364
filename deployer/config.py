"""
Deployment Configuration
Explicit network, signer and artifact settings for one deployment run
"""

import os
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional
from loguru import logger
from dotenv import load_dotenv

from .errors import TransactionSubmissionError

load_dotenv()


CONTRACT_NAME = "SmartLendProtocol"

DEFAULT_NETWORKS_PATH = Path(__file__).resolve().parent.parent / "config" / "networks.json"

# Used when config/networks.json is missing or does not define the network
BUILTIN_NETWORKS = {
    'localhost': {
        'name': 'Hardhat Localhost',
        'url': 'http://127.0.0.1:8545',
        'chain_id': 31337
    }
}


REQUIRED_NUMBERS = (
    'confirmations',
    'timeout',
    'poll_interval',
    'request_timeout',
    'gas_multiplier',
    'fallback_gas_limit'
)


@dataclass
class DeploymentConfig:
    """Everything the runner needs, passed in explicitly at startup"""

    network: str = 'localhost'
    rpc_url: Optional[str] = 'http://127.0.0.1:8545'
    contract_name: str = CONTRACT_NAME
    chain_id: Optional[int] = None
    private_key: Optional[str] = field(default=None, repr=False)
    artifacts_dir: Path = Path('artifacts')
    confirmations: int = 1
    timeout: float = 120.0
    poll_interval: float = 1.0
    request_timeout: float = 30.0
    gas_multiplier: float = 1.2
    fallback_gas_limit: int = 3_000_000
    gas_price_gwei: Optional[float] = None

    def __post_init__(self):
        self.artifacts_dir = Path(self.artifacts_dir)

        for name in REQUIRED_NUMBERS:
            if getattr(self, name) is None:
                raise TransactionSubmissionError(f"{name} must be set")

        if self.confirmations < 1:
            raise TransactionSubmissionError(
                f"confirmations must be at least 1, got {self.confirmations}"
            )
        if self.timeout <= 0:
            raise TransactionSubmissionError(f"timeout must be positive, got {self.timeout}")
        if self.poll_interval < 0:
            raise TransactionSubmissionError(
                f"poll_interval must not be negative, got {self.poll_interval}"
            )
        if self.gas_multiplier < 1:
            raise TransactionSubmissionError(
                f"gas_multiplier must be at least 1, got {self.gas_multiplier}"
            )

    @classmethod
    def from_env(cls, networks_path: Optional[str] = None) -> 'DeploymentConfig':
        """
        Build configuration from environment variables and network profiles

        Args:
            networks_path: JSON file with network profiles
                (default: DEPLOY_NETWORKS_FILE or config/networks.json)

        Returns:
            DeploymentConfig
        """
        network = os.getenv('DEPLOY_NETWORK', 'localhost')
        path = networks_path or os.getenv('DEPLOY_NETWORKS_FILE') or DEFAULT_NETWORKS_PATH

        profile = load_network_profile(network, path)

        rpc_url = os.getenv('DEPLOY_RPC_URL') or _profile_url(profile)

        config = cls(
            network=network,
            rpc_url=rpc_url,
            chain_id=_as_int('chain_id', profile.get('chain_id')),
            private_key=os.getenv('DEPLOYER_PRIVATE_KEY') or None,
            artifacts_dir=Path(os.getenv('ARTIFACTS_DIR', 'artifacts')),
            confirmations=_as_int(
                'DEPLOY_CONFIRMATIONS',
                os.getenv('DEPLOY_CONFIRMATIONS') or _setting(profile, 'confirmations', 1)
            ),
            timeout=_as_float(
                'DEPLOY_TIMEOUT',
                os.getenv('DEPLOY_TIMEOUT') or _setting(profile, 'timeout', 120)
            ),
            poll_interval=_as_float('poll_interval', _setting(profile, 'poll_interval', 1.0)),
            request_timeout=_as_float('request_timeout', _setting(profile, 'request_timeout', 30)),
            gas_multiplier=_as_float('gas_multiplier', _setting(profile, 'gas_multiplier', 1.2)),
            fallback_gas_limit=_as_int(
                'fallback_gas_limit', _setting(profile, 'fallback_gas_limit', 3_000_000)
            ),
            gas_price_gwei=_as_float('gas_price_gwei', profile.get('gas_price_gwei'))
        )

        logger.debug(f"Loaded deployment config for network '{network}': {config}")
        return config


def load_network_profile(network: str, path) -> Dict:
    """
    Load a single network profile

    Args:
        network: Profile name
        path: JSON file with a top-level "networks" object

    Returns:
        Profile dict
    """
    networks = dict(BUILTIN_NETWORKS)
    path = Path(path)

    if path.exists():
        try:
            with open(path, 'r') as f:
                networks.update(json.load(f).get('networks', {}))
        except (OSError, ValueError) as e:
            raise TransactionSubmissionError(f"Cannot read network profiles {path}: {e}") from e
    else:
        logger.debug(f"Network profiles not found at {path}, using built-in profiles")

    if network not in networks:
        raise TransactionSubmissionError(
            f"Unknown network '{network}' (available: {', '.join(sorted(networks))})"
        )

    if not isinstance(networks[network], dict):
        raise TransactionSubmissionError(f"Network profile '{network}' in {path} is not an object")

    return networks[network]


def _setting(profile: Dict, key: str, default):
    """Profile value, or the default when missing or null"""
    value = profile.get(key)
    return default if value is None else value


def _profile_url(profile: Dict) -> Optional[str]:
    """Resolve a profile URL, either inline or through an env variable"""
    if profile.get('http_url_env'):
        return os.getenv(profile['http_url_env']) or None
    return profile.get('url')


def _as_int(name: str, value) -> Optional[int]:
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise TransactionSubmissionError(f"Invalid integer for {name}: {value!r}") from e


def _as_float(name: str, value) -> Optional[float]:
    if value is None or value == '':
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise TransactionSubmissionError(f"Invalid number for {name}: {value!r}") from e
