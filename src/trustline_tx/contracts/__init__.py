from .abis import CONTRACT_ABIS, get_currency_network_abi, get_currency_network_shield_abi
from .encoder import ContractEncoder

__all__ = [
    "CONTRACT_ABIS",
    "get_currency_network_abi",
    "get_currency_network_shield_abi",
    "ContractEncoder",
]
