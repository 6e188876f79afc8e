"""
Network Configuration
Loads contract addresses and service endpoints per network
"""

import os
import json
from pathlib import Path
from typing import Dict, Optional
from web3 import Web3
from loguru import logger
from dotenv import load_dotenv

from utils.exceptions import ConfigurationError

load_dotenv()

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "network_config.json"

ADDRESS_FIELDS = ('batch_exchange', 'multi_send', 'safe_master_copy', 'fleet_factory')

# Environment variables that override values from the config file
ENV_OVERRIDES = {
    'fleet_factory': 'FLEET_FACTORY_ADDRESS',
    'batch_exchange': 'BATCH_EXCHANGE_ADDRESS',
    'safe_service_url': 'SAFE_SERVICE_URL',
}


def load_network_config(network: str, config_path: Optional[str] = None) -> Dict:
    """
    Load configuration for a single network

    Args:
        network: Network key (e.g. 'mainnet')
        config_path: Optional path to the JSON config file

    Returns:
        Network configuration dict with checksummed addresses and 'rpc_url'
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    try:
        with open(path, 'r') as f:
            all_networks = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read network config {path}: {e}") from e

    if network not in all_networks:
        raise ConfigurationError(
            f"Unknown network '{network}' (known: {', '.join(sorted(all_networks))})"
        )

    config = dict(all_networks[network])
    config['network'] = network

    for field, env_name in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            logger.debug(f"{field} overridden by {env_name}")
            config[field] = value

    for field in ADDRESS_FIELDS:
        if config.get(field):
            try:
                config[field] = Web3.to_checksum_address(config[field])
            except ValueError as e:
                raise ConfigurationError(f"Invalid address for {field}: {config[field]}") from e

    config['rpc_url'] = os.getenv(config.get('rpc_url_env', 'RPC_URL'))
    config['safe_service_url'] = config['safe_service_url'].rstrip('/')

    return config
