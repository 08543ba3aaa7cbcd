"""
Currency Network Smart Contract ABI Module

This module provides the ABI definitions of the contract functions a
preparation can target: transfers and trustline closing on a currency
network, and mint / transfer / burn / key registration on its shield.

Usage:
    from trustline_tx.contracts.abis import (
        get_currency_network_abi,
        get_currency_network_shield_abi,
    )

    # Transfer along a path
    network_abi = get_currency_network_abi()

    # Shielded mint, transfer and burn
    shield_abi = get_currency_network_shield_abi()
"""

from typing import Any, Callable, Dict, List


def get_currency_network_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for the currency network functions used by payments and trustlines.

    Returns:
        List[Dict[str, Any]]: ABI for ``transfer`` and
        ``closeTrustlineByTriangularTransfer``.

    Example:
        abi = get_currency_network_abi()
        # transfer(receiver, value, maxFee, path[1:])
    """
    return [
        {
            "name": "transfer",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "_to", "type": "address"},
                {"name": "_value", "type": "uint64"},
                {"name": "_maxFee", "type": "uint64"},
                {"name": "_path", "type": "address[]"},
            ],
            "outputs": [{"name": "", "type": "bool"}],
        },
        {
            "name": "closeTrustlineByTriangularTransfer",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "_otherParty", "type": "address"},
                {"name": "_maxFee", "type": "uint32"},
                {"name": "_path", "type": "address[]"},
            ],
            "outputs": [],
        },
    ]


def get_currency_network_shield_abi() -> List[Dict[str, Any]]:
    """
    Get ABI for the shield contract of a currency network.

    Argument order is the verifier contract's declared parameter order.

    Returns:
        List[Dict[str, Any]]: ABI for ``mint``, ``transfer``, ``burn`` and
        ``registerVerificationKey``.
    """
    return [
        {
            "name": "mint",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "_proof", "type": "uint256[]"},
                {"name": "_inputs", "type": "uint256[]"},
                {"name": "_value", "type": "uint64"},
                {"name": "_commitment", "type": "bytes32"},
                {"name": "_path", "type": "address[]"},
            ],
            "outputs": [],
        },
        {
            "name": "transfer",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "_proof", "type": "uint256[]"},
                {"name": "_inputs", "type": "uint256[]"},
                {"name": "_root", "type": "bytes32"},
                {"name": "_nullifierC", "type": "bytes32"},
                {"name": "_nullifierD", "type": "bytes32"},
                {"name": "_commitmentE", "type": "bytes32"},
                {"name": "_commitmentF", "type": "bytes32"},
            ],
            "outputs": [],
        },
        {
            "name": "burn",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "_proof", "type": "uint256[]"},
                {"name": "_inputs", "type": "uint256[]"},
                {"name": "_root", "type": "bytes32"},
                {"name": "_nullifier", "type": "bytes32"},
                {"name": "_value", "type": "uint64"},
                {"name": "_path", "type": "address[]"},
            ],
            "outputs": [],
        },
        {
            "name": "registerVerificationKey",
            "type": "function",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "_vk", "type": "uint256[]"},
                {"name": "_vkType", "type": "uint8"},
            ],
            "outputs": [],
        },
    ]


#: Contract name -> ABI getter, as referenced by preparations.
CONTRACT_ABIS: Dict[str, Callable[[], List[Dict[str, Any]]]] = {
    "CurrencyNetwork": get_currency_network_abi,
    "CurrencyNetworkShield": get_currency_network_shield_abi,
}
