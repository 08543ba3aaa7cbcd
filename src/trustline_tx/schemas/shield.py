"""
Shield Operation Schema Models

Tagged variants for mint, transfer and burn calls on a shielded currency
network. ``to_call_args`` returns the arguments in the exact order declared by
the verifier contract; that order is a wire contract and must not change.

Field elements (``proof``, ``inputs``, amounts) and 32-byte values (roots,
nullifiers, commitments) are stored as canonical ``0x`` + 64 lowercase hex
digits.
"""

import re
from typing import Any, List, Literal, Union

from pydantic import Field, field_validator
from typing_extensions import Annotated

from .bases import CanonicalModel
from .transactions import TxObject

#: Verification key types, indexed as the shield contract expects them.
VK_TYPES = ["mint", "transfer", "burn"]

_WORD = re.compile(r"^0x[0-9a-f]{64}$")


def _check_word(value: str, name: str) -> str:
    if not _WORD.match(value):
        raise ValueError(f"{name} must be 0x followed by 64 lowercase hex digits, got {value!r}")
    return value


class _ShieldCall(CanonicalModel):
    proof: List[str] = Field(..., min_length=1)
    inputs: List[str] = Field(..., min_length=1)

    @field_validator("proof", "inputs")
    @classmethod
    def _check_field_elements(cls, elements: List[str], info) -> List[str]:
        for element in elements:
            _check_word(element, info.field_name)
        return elements


class MintOperation(_ShieldCall):
    """Move ``value`` from the backing network into a new commitment."""

    kind: Literal["mint"] = "mint"
    value: str
    commitment: str
    path: List[str] = Field(..., min_length=1)

    @field_validator("value", "commitment")
    @classmethod
    def _check_words(cls, value: str, info) -> str:
        return _check_word(value, info.field_name)

    def to_call_args(self) -> List[Any]:
        return [self.proof, self.inputs, self.value, self.commitment, self.path]


class TransferOperation(_ShieldCall):
    """Spend two notes and create two new commitments inside the shield."""

    kind: Literal["transfer"] = "transfer"
    root: str
    nullifier_c: str
    nullifier_d: str
    commitment_e: str
    commitment_f: str

    @field_validator("root", "nullifier_c", "nullifier_d", "commitment_e", "commitment_f")
    @classmethod
    def _check_words(cls, value: str, info) -> str:
        return _check_word(value, info.field_name)

    def to_call_args(self) -> List[Any]:
        return [
            self.proof,
            self.inputs,
            self.root,
            self.nullifier_c,
            self.nullifier_d,
            self.commitment_e,
            self.commitment_f,
        ]


class BurnOperation(_ShieldCall):
    """
    Spend a note and pay ``value`` out to the backing network.

    ``pay_to`` is recorded for the signer but is not a contract argument;
    the payout route is carried by ``path``.
    """

    kind: Literal["burn"] = "burn"
    root: str
    nullifier: str
    value: str
    pay_to: str
    path: List[str] = Field(..., min_length=1)

    @field_validator("root", "nullifier", "value")
    @classmethod
    def _check_words(cls, value: str, info) -> str:
        return _check_word(value, info.field_name)

    def to_call_args(self) -> List[Any]:
        return [self.proof, self.inputs, self.root, self.nullifier, self.value, self.path]


# Discriminated union selected by the 'kind' field
ShieldOperation = Annotated[
    Union[
        MintOperation,      # kind: "mint"
        TransferOperation,  # kind: "transfer"
        BurnOperation,      # kind: "burn"
    ],
    Field(discriminator="kind")
]


class ShieldTxObject(TxObject):
    """Shield transaction bundle together with the operation it encodes."""

    operation: ShieldOperation
