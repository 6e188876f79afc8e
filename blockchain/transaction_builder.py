"""
Transaction Builder
Constructs the master Safe transactions that place bracket orders and fund the brackets
"""

from fractions import Fraction
from typing import Dict, List, Optional
from web3 import Web3
from eth_abi import encode
from eth_abi.packed import encode_packed
from loguru import logger

from utils.bracket_math import bracket_limits, split_deposits, unlimited_order_amounts
from utils.exceptions import ValidationError
from utils.printing_tools import from_erc20_units
from .contract_manager import ZERO_ADDRESS

# Safe operations
CALL = 0
DELEGATECALL = 1

# Orders stay valid until the last batch representable by the exchange
MAX_UINT32 = 2**32 - 1

# Orders become valid a few batches in the future so that both
# transactions can be executed before any order is matched
ORDER_VALIDITY_DELAY_BATCHES = 3


def encode_call(signature: str, types: List[str], args: List) -> bytes:
    """ABI encode a function call: 4 byte selector followed by the arguments"""
    return Web3.keccak(text=signature)[:4] + encode(types, args)


class TransactionBuilder:
    """
    Builds Safe transactions as dicts with 'to', 'value', 'data' and 'operation'
    """

    def __init__(self, contract_manager, network_config: Dict):
        """
        Initialize Transaction Builder

        Args:
            contract_manager: ContractManager for exchange reads
            network_config: Network configuration (multi_send, batch_exchange)
        """
        self.contract_manager = contract_manager
        self.multi_send_address = network_config['multi_send']
        self.exchange_address = network_config['batch_exchange']

    def encode_multisend(self, transactions: List[Dict]) -> Dict:
        """
        Bundle transactions into a single MultiSend delegatecall

        Args:
            transactions: Safe transaction dicts

        Returns:
            Safe transaction executing all of them in order
        """
        packed = b''.join(
            encode_packed(
                ['uint8', 'address', 'uint256', 'uint256', 'bytes'],
                [
                    tx['operation'],
                    Web3.to_checksum_address(tx['to']),
                    tx['value'],
                    len(tx['data']),
                    tx['data']
                ]
            )
            for tx in transactions
        )

        return {
            'to': self.multi_send_address,
            'value': 0,
            'data': encode_call('multiSend(bytes)', ['bytes'], [packed]),
            'operation': DELEGATECALL
        }

    def build_exec_transaction(self, bracket_address: str, transaction: Dict, master_address: str) -> Dict:
        """
        Have a bracket Safe execute a transaction on behalf of its owner

        The master Safe is the caller, so a pre-validated signature
        (r = owner, s = 0, v = 1) is accepted by the bracket.

        Args:
            bracket_address: Bracket Safe executing the transaction
            transaction: Transaction the bracket executes
            master_address: Owner of the bracket

        Returns:
            Transaction calling execTransaction on the bracket
        """
        signature = (
            Web3.to_bytes(hexstr=master_address).rjust(32, b'\x00')
            + bytes(32)
            + b'\x01'
        )

        data = encode_call(
            'execTransaction(address,uint256,bytes,uint8,uint256,uint256,uint256,address,address,bytes)',
            ['address', 'uint256', 'bytes', 'uint8', 'uint256', 'uint256', 'uint256', 'address', 'address', 'bytes'],
            [
                Web3.to_checksum_address(transaction['to']),
                transaction['value'],
                transaction['data'],
                transaction['operation'],
                0,
                0,
                0,
                ZERO_ADDRESS,
                ZERO_ADDRESS,
                signature
            ]
        )

        return {
            'to': Web3.to_checksum_address(bracket_address),
            'value': 0,
            'data': data,
            'operation': CALL
        }

    async def build_orders(
        self,
        master_address: str,
        bracket_addresses: List[str],
        base_token: Dict,
        quote_token: Dict,
        lowest_limit: float,
        highest_limit: float,
        valid_from: Optional[int] = None
    ) -> Dict:
        """
        Build the transaction placing two orders per bracket

        Each bracket buys base token at its lower limit and sells it
        at its upper limit.

        Args:
            master_address: Master Safe owning the brackets
            bracket_addresses: Brackets ordered from lowest to highest price
            base_token: Base token info dict
            quote_token: Quote token info dict
            lowest_limit: Lowest buy price (quote per base)
            highest_limit: Highest sell price (quote per base)
            valid_from: First batch the orders are valid in
                (default: current batch + ORDER_VALIDITY_DELAY_BATCHES)

        Returns:
            Master Safe transaction
        """
        limits = bracket_limits(lowest_limit, highest_limit, len(bracket_addresses))
        if valid_from is None:
            valid_from = self.contract_manager.get_current_batch_id() + ORDER_VALIDITY_DELAY_BATCHES

        transactions = []
        for bracket_address, (lower_limit, upper_limit) in zip(bracket_addresses, limits):
            # Buy base with quote at the lower limit
            lower_sell_amount, lower_buy_amount = unlimited_order_amounts(
                Fraction(1) / Fraction(str(lower_limit)),
                quote_token['decimals'],
                base_token['decimals']
            )
            # Sell base for quote at the upper limit
            upper_sell_amount, upper_buy_amount = unlimited_order_amounts(
                upper_limit,
                base_token['decimals'],
                quote_token['decimals']
            )

            logger.debug(
                f"Bracket {bracket_address}: buy {base_token['symbol']} at {lower_limit:.6g}, "
                f"sell at {upper_limit:.6g} {quote_token['symbol']}"
            )

            order_data = encode_call(
                'placeValidFromOrders(uint16[],uint16[],uint32[],uint32[],uint128[],uint128[])',
                ['uint16[]', 'uint16[]', 'uint32[]', 'uint32[]', 'uint128[]', 'uint128[]'],
                [
                    [base_token['id'], quote_token['id']],
                    [quote_token['id'], base_token['id']],
                    [valid_from, valid_from],
                    [MAX_UINT32, MAX_UINT32],
                    [lower_buy_amount, upper_buy_amount],
                    [lower_sell_amount, upper_sell_amount]
                ]
            )

            transactions.append(self.build_exec_transaction(
                bracket_address,
                {'to': self.exchange_address, 'value': 0, 'data': order_data, 'operation': CALL},
                master_address
            ))

        logger.info(f"Built {2 * len(transactions)} orders valid from batch {valid_from}")
        return self.encode_multisend(transactions)

    def _funding_transactions(
        self,
        master_address: str,
        bracket_address: str,
        token: Dict,
        amount: int
    ) -> List[Dict]:
        """Transfer amount to the bracket, then approve and deposit it on the exchange"""
        transfer = {
            'to': token['address'],
            'value': 0,
            'data': encode_call(
                'transfer(address,uint256)',
                ['address', 'uint256'],
                [Web3.to_checksum_address(bracket_address), amount]
            ),
            'operation': CALL
        }
        approve = {
            'to': token['address'],
            'value': 0,
            'data': encode_call(
                'approve(address,uint256)',
                ['address', 'uint256'],
                [self.exchange_address, amount]
            ),
            'operation': CALL
        }
        deposit = {
            'to': self.exchange_address,
            'value': 0,
            'data': encode_call(
                'deposit(address,uint256)',
                ['address', 'uint256'],
                [token['address'], amount]
            ),
            'operation': CALL
        }

        return [
            transfer,
            self.build_exec_transaction(bracket_address, approve, master_address),
            self.build_exec_transaction(bracket_address, deposit, master_address)
        ]

    async def build_transfer_approve_deposit(
        self,
        master_address: str,
        bracket_addresses: List[str],
        base_token: Dict,
        quote_token: Dict,
        lowest_limit: float,
        highest_limit: float,
        current_price: float,
        deposit_quote_token: int,
        deposit_base_token: int
    ) -> Dict:
        """
        Build the transaction funding every bracket from the master Safe

        Brackets below the current price receive quote token, the others
        base token. Each side's deposit is split evenly; the remainder of
        the integer division stays in the master Safe.

        Returns:
            Master Safe transaction
        """
        limits = bracket_limits(lowest_limit, highest_limit, len(bracket_addresses))
        quote_brackets, base_brackets = split_deposits(limits, current_price)

        if deposit_quote_token > 0 and not quote_brackets:
            raise ValidationError(
                f"No bracket trades below the current price {current_price}; cannot deposit quote token"
            )
        if deposit_base_token > 0 and not base_brackets:
            raise ValidationError(
                f"No bracket trades above the current price {current_price}; cannot deposit base token"
            )

        transactions = []

        for token, indices, total in (
            (quote_token, quote_brackets, deposit_quote_token),
            (base_token, base_brackets, deposit_base_token)
        ):
            if not indices or total == 0:
                continue

            amount = total // len(indices)
            if amount == 0:
                raise ValidationError(
                    f"Deposit of {token['symbol']} is too small to split over {len(indices)} brackets"
                )

            logger.info(
                f"Depositing {from_erc20_units(amount, token['decimals'])} {token['symbol']} "
                f"into each of {len(indices)} brackets"
            )

            for index in indices:
                transactions.extend(
                    self._funding_transactions(master_address, bracket_addresses[index], token, amount)
                )

        if not transactions:
            raise ValidationError("Nothing to deposit")

        return self.encode_multisend(transactions)
