"""
Base Schema Models for Transaction Preparation

This module defines the base model and the monetary value objects that every
other schema builds on.

Core Classes:
    - CanonicalModel: Pydantic base model with camelCase wire aliases and
      canonical JSON serialization
    - Amount: Lossless raw/decimal representation of a monetary amount
    - DelegationFeesObject: Amount payable to a relayer in a network of its choice
    - DecimalsObject / DecimalsOptions: Decimals configuration of a currency network
    - WalletType: Self-custody vs delegated-identity wallets

Dependencies:
    - pydantic: For data validation and serialization
"""

import json
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def render_raw(raw: int, decimals: int) -> str:
    """
    Render a raw integer as a fixed-point decimal string.

    Uses pure string arithmetic so that arbitrarily large integers never pass
    through a rounding context. Trailing fractional zeros are dropped.

    Example:
        render_raw(123, 2)       # "1.23"
        render_raw(100, 2)       # "1"
        render_raw(105, 6)       # "0.000105"
    """
    digits = str(raw)
    if decimals == 0:
        return digits

    digits = digits.rjust(decimals + 1, "0")
    integer_part, fraction = digits[:-decimals], digits[-decimals:].rstrip("0")
    return f"{integer_part}.{fraction}" if fraction else integer_part


class CanonicalModel(BaseModel):
    """
    Pydantic base model with canonical JSON serialization.

    Fields are declared in snake_case and exchanged with the relay in
    camelCase (``raw_tx`` <-> ``rawTx``). Both spellings are accepted on input.
    Instances are immutable once produced.

    Example:
        class MyModel(CanonicalModel):
            gas_limit: str

        MyModel(gasLimit="21000").to_canonical_json()  # '{"gasLimit":"21000"}'
    """

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        frozen=True,
    )

    def to_wire(self) -> Dict[str, Any]:
        """Return the camelCase JSON-compatible dict sent to or received from the relay."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_canonical_json(self) -> str:
        """
        Convert model to a canonical JSON string.

        Keys are sorted and whitespace is removed so that equal objects always
        produce equal strings.

        Returns:
            str: Compact JSON with sorted camelCase keys.
        """
        return json.dumps(
            self.to_wire(),
            separators=(",", ":"),
            sort_keys=True,
            ensure_ascii=False
        )


class WalletType(str, Enum):
    """
    Wallet flavours that decide the fee mode of a transaction.

    Attributes:
        ETHERS: Self-custody key; the signer pays gas in the native coin.
        IDENTITY: Delegated identity contract; a relayer pays gas and is
            compensated with a delegation fee.
    """
    ETHERS = "ethers"
    IDENTITY = "identity"


class DecimalsObject(CanonicalModel):
    """Decimals configuration of a currency network."""

    network_decimals: int = Field(..., ge=0, description="Decimals of monetary values in the network")
    interest_rate_decimals: int = Field(default=0, ge=0, description="Decimals of interest rates")


class DecimalsOptions(CanonicalModel):
    """Caller-supplied decimals; any field left out is fetched from the relay."""

    network_decimals: Optional[int] = Field(default=None, ge=0)
    interest_rate_decimals: Optional[int] = Field(default=None, ge=0)


class Amount(CanonicalModel):
    """
    Monetary amount in both raw (on-chain integer) and value (decimal) form.

    Invariant: ``value == raw / 10**decimals`` exactly, rendered without
    trailing fractional zeros. Construct through :meth:`from_raw` or the
    converters in ``preparation.amounts``.

    Attributes:
        raw: Arbitrary-precision non-negative integer as a string.
        value: Fixed-point decimal string.
        decimals: Number of decimals of the denomination.
    """

    raw: str = Field(..., description="Integer amount in the smallest unit")
    value: str = Field(..., description="Decimal amount for display")
    decimals: int = Field(..., ge=0, description="Decimals precision")

    @model_validator(mode="after")
    def _check_consistency(self) -> "Amount":
        if not self.raw.isdigit():
            raise ValueError(f"raw must be a non-negative integer string, got {self.raw!r}")
        expected = render_raw(int(self.raw), self.decimals)
        if self.value != expected:
            raise ValueError(
                f"value {self.value!r} does not match raw {self.raw} "
                f"with {self.decimals} decimals (expected {expected!r})"
            )
        return self

    @classmethod
    def from_raw(cls, raw: int, decimals: int) -> "Amount":
        """Build an amount from a raw integer."""
        return cls(raw=str(raw), value=render_raw(raw, decimals), decimals=decimals)

    @property
    def raw_int(self) -> int:
        return int(self.raw)


class DelegationFeesObject(Amount):
    """
    Fee payable to a relayer for a meta transaction.

    Denominated in a currency network chosen by the relayer, not the caller.
    An empty ``currency_network_of_fees`` means no fee was offered.
    """

    currency_network_of_fees: str = Field(default="", description="Currency network the fee is paid in")

    @classmethod
    def from_raw(cls, raw: int, decimals: int, currency_network_of_fees: str = "") -> "DelegationFeesObject":
        return cls(
            raw=str(raw),
            value=render_raw(raw, decimals),
            decimals=decimals,
            currency_network_of_fees=currency_network_of_fees,
        )
