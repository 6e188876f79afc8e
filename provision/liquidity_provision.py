"""
Liquidity Provision
Deploys (or reuses) a fleet of bracket Safes, places their orders and funds them,
all through two transactions proposed to the master Safe
"""

import asyncio
from typing import Callable, Dict, List, Optional
from web3 import Web3
from loguru import logger

from blockchain.nonce_manager import SafeNonceManager
from blockchain.transaction_builder import ORDER_VALIDITY_DELAY_BATCHES
from utils.exceptions import ConfigurationError, SafetyCheckError, ValidationError
from utils.price_utils import are_bounds_reasonable, is_price_reasonable
from utils.printing_tools import to_erc20_units
from utils.user_interface import proceed_anyways

# Larger fleets make the funding transaction too big for hosted nodes
MAX_FLEET_SIZE = 23

# Seconds to wait for nodes to index freshly deployed brackets
DEPLOYMENT_PROPAGATION_DELAY = 3


class LiquidityProvision:
    """
    One-shot provisioning run

    Validates the arguments, runs the safety checks, then proposes the
    order transaction followed by the funding transaction.
    """

    def __init__(
        self,
        args,
        contract_manager,
        transaction_builder,
        safe_service,
        wallet_manager=None,
        confirm: Callable[[str], bool] = None,
        price_api_url: Optional[str] = None,
        deployment_delay: float = DEPLOYMENT_PROPAGATION_DELAY
    ):
        """
        Initialize a provisioning run

        Args:
            args: Parsed command line arguments
            contract_manager: ContractManager
            transaction_builder: TransactionBuilder
            safe_service: SafeTransactionService
            wallet_manager: Proposer wallet (needed to deploy brackets)
            confirm: Callback asking the operator to proceed after a failed check
            price_api_url: Price API URL template
            deployment_delay: Seconds to wait after deploying brackets
        """
        self.args = args
        self.contract_manager = contract_manager
        self.transaction_builder = transaction_builder
        self.safe_service = safe_service
        self.wallet_manager = wallet_manager
        self.confirm = confirm or (lambda message: proceed_anyways(message, getattr(args, 'yes', False)))
        self.price_api_url = price_api_url
        self.deployment_delay = deployment_delay

        self.master_address = Web3.to_checksum_address(args.masterSafe)

    def validate_arguments(self):
        """Argument checks that must pass before anything touches the chain"""
        fleet_size = self.args.fleetSize

        if not 0 < self.args.lowestLimit < self.args.highestLimit:
            raise ValidationError("Limits must satisfy 0 < lowestLimit < highestLimit")
        if self.args.currentPrice <= 0:
            raise ValidationError("currentPrice must be positive")
        if self.args.baseTokenId == self.args.quoteTokenId:
            raise ValidationError("baseTokenId and quoteTokenId must differ")

        if self.args.brackets is not None and fleet_size != len(self.args.brackets):
            raise ValidationError("Please ensure fleetSize equals number of brackets")
        if fleet_size <= 0 or fleet_size % 2 != 0:
            raise ValidationError("Fleet size must be a positive even number")
        if fleet_size > MAX_FLEET_SIZE:
            raise ValidationError(
                "Choose a smaller fleetSize, otherwise your payload will be too big for Infura nodes"
            )
        if self.args.brackets is None and self.args.verify:
            raise ValidationError(
                "Trading brackets need to be provided via --brackets when verifying a transaction"
            )
        if self.args.verify and self.args.validFrom is None:
            raise ValidationError(
                "The batch the orders are valid from needs to be provided via --validFrom when verifying"
            )

    async def run_safety_checks(self, base_token: Dict, quote_token: Dict, deposit_base: int, deposit_quote: int):
        """Balance, price and bound checks against the master Safe and the market"""
        logger.info("==> Performing safety checks")

        for token, amount in ((base_token, deposit_base), (quote_token, deposit_quote)):
            if not await self.contract_manager.check_sufficiency_of_balance(token, self.master_address, amount):
                raise SafetyCheckError(
                    f"MasterSafe has insufficient balance for the token {token['address']}."
                )

        if not await is_price_reasonable(base_token, quote_token, self.args.currentPrice, api_url=self.price_api_url):
            if not self.confirm("Price check failed!"):
                raise SafetyCheckError("Price checks did not pass")

        if not are_bounds_reasonable(self.args.currentPrice, self.args.lowestLimit, self.args.highestLimit):
            if not self.confirm("Bound checks failed!"):
                raise SafetyCheckError("Bound checks did not pass")

    async def check_existing_brackets(self, bracket_addresses: List[str]):
        """Brackets must be owned solely by the master Safe; existing orders need confirmation"""
        ownership = await asyncio.gather(*(
            self.contract_manager.is_only_safe_owner(self.master_address, bracket)
            for bracket in bracket_addresses
        ))
        foreign = [bracket for bracket, owned in zip(bracket_addresses, ownership) if not owned]
        if foreign:
            raise SafetyCheckError(
                f"Brackets {', '.join(foreign)} are not owned (or at least not solely) "
                f"by master safe {self.master_address}"
            )

        existing_orders = await asyncio.gather(*(
            self.contract_manager.has_existing_orders(bracket)
            for bracket in bracket_addresses
        ))
        dirty_brackets = [bracket for bracket, dirty in zip(bracket_addresses, existing_orders) if dirty]
        if dirty_brackets and not self.confirm(
            f"The following brackets have existing orders:\n  {','.join(dirty_brackets)}\n"
        ):
            raise SafetyCheckError("Existing order verification failed.")

    async def resolve_brackets(self) -> List[str]:
        """Reuse the given brackets or deploy a new fleet"""
        if self.args.brackets is not None:
            logger.info("==> Skipping safe deployment and using brackets safeOwners")
            brackets = [Web3.to_checksum_address(bracket) for bracket in self.args.brackets]
            await self.check_existing_brackets(brackets)
            return brackets

        if self.wallet_manager is None:
            raise ConfigurationError("A proposer wallet is required to deploy brackets")

        logger.info(f"==> Deploying {self.args.fleetSize} trading brackets")
        brackets = await self.contract_manager.deploy_fleet_of_safes(
            self.master_address,
            self.args.fleetSize,
            self.wallet_manager
        )
        # Give nodes time to process the new contracts before reading from them
        await asyncio.sleep(self.deployment_delay)
        return brackets

    async def run(self) -> Dict:
        """
        Execute the provisioning run

        Returns:
            Summary with brackets, nonce and Safe transaction hashes
        """
        self.validate_arguments()

        tokens = await self.contract_manager.fetch_token_info([self.args.baseTokenId, self.args.quoteTokenId])
        base_token = tokens[self.args.baseTokenId]
        quote_token = tokens[self.args.quoteTokenId]

        try:
            deposit_base = to_erc20_units(self.args.depositBaseToken, base_token['decimals'])
            deposit_quote = to_erc20_units(self.args.depositQuoteToken, quote_token['decimals'])
        except ValueError as e:
            raise ValidationError(str(e)) from e

        await self.run_safety_checks(base_token, quote_token, deposit_base, deposit_quote)

        bracket_addresses = await self.resolve_brackets()

        logger.info("==> Building orders and deposits")
        valid_from = self.args.validFrom
        if valid_from is None:
            valid_from = self.contract_manager.get_current_batch_id() + ORDER_VALIDITY_DELAY_BATCHES
        order_transaction = await self.transaction_builder.build_orders(
            self.master_address,
            bracket_addresses,
            base_token,
            quote_token,
            self.args.lowestLimit,
            self.args.highestLimit,
            valid_from=valid_from
        )
        funding_transaction = await self.transaction_builder.build_transfer_approve_deposit(
            self.master_address,
            bracket_addresses,
            base_token,
            quote_token,
            self.args.lowestLimit,
            self.args.highestLimit,
            self.args.currentPrice,
            deposit_quote,
            deposit_base
        )

        nonce_manager = SafeNonceManager(self.contract_manager, self.master_address, self.args.nonce)

        logger.info(
            "==> Sending the order placing transaction to gnosis-safe interface.\n"
            "    Attention: This transaction MUST be executed first!"
        )
        order_nonce = await nonce_manager.get_nonce()
        order_hash = await self.safe_service.sign_and_send(
            self.master_address, order_transaction, order_nonce, self.args.verify
        )

        logger.info(
            "==> Sending the funds transferring transaction.\n"
            "    Attention: This transaction can only be executed after the one above!"
        )
        funding_nonce = await nonce_manager.get_nonce()
        funding_hash = await self.safe_service.sign_and_send(
            self.master_address, funding_transaction, funding_nonce, self.args.verify
        )

        if not self.args.verify:
            logger.info(
                f"To verify the transactions run the same script with --verify "
                f"--nonce={order_nonce} --validFrom={valid_from} --brackets={','.join(bracket_addresses)}"
            )

        return {
            'brackets': bracket_addresses,
            'nonce': order_nonce,
            'valid_from': valid_from,
            'order_transaction_hash': order_hash,
            'funding_transaction_hash': funding_hash
        }
