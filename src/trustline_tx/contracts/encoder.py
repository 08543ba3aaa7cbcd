"""
Contract call encoding.

Turns ``(contract name, function name, ordered args)`` into call data using
eth-abi for the arguments and the keccak selector from eth-utils. Arguments
may be given the way the relay and the shield tooling produce them: amounts
as ints or decimal / hex strings, 32-byte words as hex strings, addresses in
any case.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from eth_abi import encode
from eth_abi.exceptions import EncodingError
from eth_utils import function_signature_to_4byte_selector, to_bytes
from web3 import Web3

from ..engine.exceptions import ABIEncodingError
from .abis import CONTRACT_ABIS

logger = logging.getLogger(__name__)

AbiGetter = Callable[[], List[Dict[str, Any]]]


class ContractEncoder:
    """
    Default ABI-encoding collaborator of the transaction builder.

    Any object exposing the same ``encode`` signature can be injected instead.

    Example:
        encoder = ContractEncoder()
        data = encoder.encode("CurrencyNetwork", "transfer", [receiver, 100, 2, path])
    """

    def __init__(self, abis: Optional[Dict[str, AbiGetter]] = None) -> None:
        self._abis = dict(CONTRACT_ABIS if abis is None else abis)

    def encode(self, contract_name: str, function_name: str, args: Sequence[Any]) -> str:
        """
        Encode a contract call.

        Args:
            contract_name: Key of the contract ABI (``"CurrencyNetwork"``).
            function_name: Function to call.
            args: Arguments in declaration order.

        Returns:
            str: ``0x``-prefixed call data.

        Raises:
            ABIEncodingError: If the function is unknown or an argument does
                not fit its declared type.
        """
        types = self._input_types(contract_name, function_name, len(args))
        signature = f"{function_name}({','.join(types)})"
        try:
            values = [_normalize(abi_type, arg) for abi_type, arg in zip(types, args)]
            encoded = encode(types, values)
        except (ValueError, TypeError, OverflowError, EncodingError) as e:
            raise ABIEncodingError(
                f"cannot encode {contract_name}.{signature}: {e}",
                cause=e,
            ) from e

        logger.debug(f"encoded {contract_name}.{signature}")
        return "0x" + (function_signature_to_4byte_selector(signature) + encoded).hex()

    def _input_types(self, contract_name: str, function_name: str, arity: int) -> List[str]:
        getter = self._abis.get(contract_name)
        if getter is None:
            raise ABIEncodingError(f"unknown contract {contract_name!r}")

        for entry in getter():
            if entry.get("type") != "function" or entry.get("name") != function_name:
                continue
            inputs = entry.get("inputs", [])
            if len(inputs) == arity:
                return [item["type"] for item in inputs]

        raise ABIEncodingError(
            f"{contract_name} has no function {function_name!r} taking {arity} arguments"
        )


def _normalize(abi_type: str, value: Any) -> Any:
    if abi_type.endswith("[]"):
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
            raise TypeError(f"{abi_type} expects a list, got {value!r}")
        return [_normalize(abi_type[:-2], item) for item in value]
    if abi_type == "address":
        return Web3.to_checksum_address(value)
    if abi_type.startswith(("uint", "int")):
        return _to_int(value)
    if abi_type.startswith("bytes") and abi_type != "bytes":
        size = int(abi_type[5:])
        raw = _to_bytes(value)
        if len(raw) > size:
            raise ValueError(f"{abi_type} value too long: {value!r}")
        return raw.rjust(size, b"\x00")
    if abi_type == "bytes":
        return _to_bytes(value)
    return value


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError(f"expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if "_" in text:
        raise ValueError(f"digit separators are not allowed: {text!r}")
    if text[:2].lower() == "0x":
        return int(text, 16)
    return int(text, 10)


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return to_bytes(value)
    return to_bytes(hexstr=str(value))
