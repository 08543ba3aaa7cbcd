"""
Test suite for contract call encoding.
"""

import pytest
from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector
from web3 import Web3

from trustline_tx.contracts.encoder import ContractEncoder
from trustline_tx.engine.exceptions import ABIEncodingError

from test_mocks import MEDIATOR_ADDRESS, RECEIVER_ADDRESS, word


def expected_call(signature, types, values):
    return "0x" + (function_signature_to_4byte_selector(signature) + encode(types, values)).hex()


class TestContractEncoder:
    def test_transfer(self):
        data = ContractEncoder().encode(
            "CurrencyNetwork", "transfer", [RECEIVER_ADDRESS, 150, "3", [MEDIATOR_ADDRESS]]
        )

        assert data == expected_call(
            "transfer(address,uint64,uint64,address[])",
            ["address", "uint64", "uint64", "address[]"],
            [Web3.to_checksum_address(RECEIVER_ADDRESS), 150, 3, [Web3.to_checksum_address(MEDIATOR_ADDRESS)]],
        )

    def test_shield_words_become_ints_and_bytes(self):
        data = ContractEncoder().encode(
            "CurrencyNetworkShield",
            "transfer",
            [[word(1)], [word(2)], word(10), word(11), word(12), word(13), "0x0e"],
        )

        assert data == expected_call(
            "transfer(uint256[],uint256[],bytes32,bytes32,bytes32,bytes32,bytes32)",
            ["uint256[]", "uint256[]", "bytes32", "bytes32", "bytes32", "bytes32", "bytes32"],
            [[1], [2]] + [bytes.fromhex(word(n)[2:]) for n in (10, 11, 12, 13, 14)],
        )

    def test_selector_prefix(self):
        data = ContractEncoder().encode("CurrencyNetworkShield", "registerVerificationKey", [[1, 2], 0])
        selector = function_signature_to_4byte_selector("registerVerificationKey(uint256[],uint8)")
        assert data.startswith("0x" + selector.hex())

    def test_unknown_contract(self):
        with pytest.raises(ABIEncodingError):
            ContractEncoder().encode("Exchange", "fillOrder", [])

    def test_unknown_function_or_arity(self):
        encoder = ContractEncoder()
        with pytest.raises(ABIEncodingError):
            encoder.encode("CurrencyNetwork", "approve", [RECEIVER_ADDRESS, 1])
        with pytest.raises(ABIEncodingError):
            encoder.encode("CurrencyNetwork", "transfer", [RECEIVER_ADDRESS, 1])

    @pytest.mark.parametrize(
        "args",
        [
            ["0x1234", 1, 1, []],
            [RECEIVER_ADDRESS, 2 ** 64, 1, []],
            [RECEIVER_ADDRESS, "ten", 1, []],
            [RECEIVER_ADDRESS, "1_000", 1, []],
            [RECEIVER_ADDRESS, 1, 1, MEDIATOR_ADDRESS],
        ],
    )
    def test_invalid_arguments(self, args):
        with pytest.raises(ABIEncodingError):
            ContractEncoder().encode("CurrencyNetwork", "transfer", args)

    def test_custom_abis(self):
        abi = [{
            "name": "ping",
            "type": "function",
            "inputs": [{"name": "n", "type": "uint8"}],
        }]
        data = ContractEncoder({"Pinger": lambda: abi}).encode("Pinger", "ping", [7])
        assert data == expected_call("ping(uint8)", ["uint8"], [7])
