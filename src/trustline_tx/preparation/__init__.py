from .amounts import (
    ETH_DECIMALS,
    GWEI_DECIMALS,
    to_raw,
    to_amount,
    to_delegation_fees,
    to_hex_string,
    format_raw,
    gwei_to_wei,
)
from .decimals import DecimalsCache
from .networks import CurrencyNetwork
from .paths import PathNegotiator
from .fees import FeeDelegationNegotiator
from .transactions import TransactionBuilder, DEFAULT_GAS_LIMIT
from .payments import Payment, resolve_payment_options
from .trustlines import Trustline
from .shield import Shield

__all__ = [
    "ETH_DECIMALS",
    "GWEI_DECIMALS",
    "to_raw",
    "to_amount",
    "to_delegation_fees",
    "to_hex_string",
    "format_raw",
    "gwei_to_wei",
    "DecimalsCache",
    "CurrencyNetwork",
    "PathNegotiator",
    "FeeDelegationNegotiator",
    "TransactionBuilder",
    "DEFAULT_GAS_LIMIT",
    "Payment",
    "resolve_payment_options",
    "Trustline",
    "Shield",
]
