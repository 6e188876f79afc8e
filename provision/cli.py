"""
Command Line Interface
Parses arguments and wires the provisioning components together
"""

import os
import asyncio
import argparse
from typing import List, Optional
from web3 import Web3
from loguru import logger
from dotenv import load_dotenv

from blockchain.contract_manager import ContractManager
from blockchain.safe_transaction_service import SafeTransactionService
from blockchain.transaction_builder import TransactionBuilder
from utils.exceptions import ConfigurationError, ProvisionError, ValidationError

from .config import load_network_config
from .liquidity_provision import LiquidityProvision
from .wallet_manager import WalletManager

load_dotenv()


def _address(value: str) -> str:
    if not Web3.is_address(value):
        raise argparse.ArgumentTypeError(f"invalid address: {value}")
    return Web3.to_checksum_address(value)


def _address_list(value: str) -> List[str]:
    addresses = [_address(item.strip()) for item in value.split(',') if item.strip()]
    if not addresses:
        raise argparse.ArgumentTypeError("expected a comma separated list of addresses")
    if len(set(addresses)) != len(addresses):
        raise argparse.ArgumentTypeError(f"duplicate addresses in {value}")
    return addresses


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Deploy and fund a fleet of bracket Safes placing orders on the BatchExchange"
    )
    parser.add_argument('--masterSafe', type=_address, required=True,
                        help="Address of Gnosis Safe owning every bracket")
    parser.add_argument('--fleetSize', type=int, default=20,
                        help="Even number of brackets to be deployed")
    parser.add_argument('--brackets', type=_address_list,
                        help="Trader account addresses to place orders on behalf of")
    parser.add_argument('--baseTokenId', type=int, required=True,
                        help="Token whose target price is to be specified (i.e. ETH)")
    parser.add_argument('--depositBaseToken', type=str, required=True,
                        help="Amount to be invested into the baseToken")
    parser.add_argument('--quoteTokenId', type=int, required=True,
                        help="Trusted Quote Token for which to open orders (i.e. DAI)")
    parser.add_argument('--depositQuoteToken', type=str, required=True,
                        help="Amount to be invested into the quoteToken")
    parser.add_argument('--currentPrice', type=float, required=True,
                        help="Price at which the brackets will be centered (e.g. current price of ETH in USD)")
    parser.add_argument('--lowestLimit', type=float, required=True,
                        help="Price for the bracket buying with the lowest price")
    parser.add_argument('--highestLimit', type=float, required=True,
                        help="Price for the bracket selling at the highest price")
    parser.add_argument('--verify', action='store_true',
                        help="Do not actually send transactions, just verify their earlier submission")
    parser.add_argument('--nonce', type=int,
                        help="Use this specific nonce instead of the next available one")
    parser.add_argument('--validFrom', type=int,
                        help="Batch from which the orders are valid (default: current batch + 3)")
    parser.add_argument('--network', default=os.getenv('NETWORK', 'mainnet'),
                        help="Network key in config/network_config.json")
    parser.add_argument('--yes', action='store_true',
                        help="Proceed without asking when a safety check fails")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def create_provision(args: argparse.Namespace) -> LiquidityProvision:
    """Connect to the network and assemble a provisioning run"""
    network_config = load_network_config(args.network)

    if not network_config['rpc_url']:
        raise ConfigurationError(f"{network_config.get('rpc_url_env', 'RPC_URL')} must be set in .env")

    w3 = Web3(Web3.HTTPProvider(network_config['rpc_url']))
    if not w3.is_connected():
        raise ConfigurationError(f"Failed to connect to {args.network} node")

    # Verifying only reads from the chain and the Safe service
    wallet_manager = None if args.verify else WalletManager()

    contract_manager = ContractManager(w3, network_config)
    transaction_builder = TransactionBuilder(contract_manager, network_config)
    safe_service = SafeTransactionService(contract_manager, network_config, wallet_manager)

    return LiquidityProvision(
        args,
        contract_manager,
        transaction_builder,
        safe_service,
        wallet_manager=wallet_manager,
        price_api_url=os.getenv('PRICE_API_URL')
    )


def run(argv: Optional[List[str]] = None) -> int:
    """
    Run the provisioning script

    Returns:
        Process exit code
    """
    args = parse_args(argv)

    try:
        provision = create_provision(args)
        asyncio.run(provision.run())

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except ValidationError as e:
        logger.error(f"Invalid arguments: {e}")
        return 1
    except ProvisionError as e:
        logger.error(f"Error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1

    logger.success("Liquidity provision complete")
    return 0
