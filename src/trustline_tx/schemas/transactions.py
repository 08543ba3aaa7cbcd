"""
Transaction Schema Models

Models for the unsigned transaction bundle and the fee negotiation that
precedes it.

The central invariant lives in :class:`TxObject`: a transaction is either
self-paid (no delegation fees, positive native-coin fees) or relayer-paid
(delegation fees present, zero native-coin fees). Never both, never neither.
"""

from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import Field, model_validator
from typing_extensions import Annotated

from .bases import Amount, CanonicalModel, DelegationFeesObject


class TxOptions(CanonicalModel):
    """
    Caller overrides for gas.

    Attributes:
        gas_price: Gas price in gwei. Falls back to the relay's quote.
        gas_limit: Gas limit. Falls back to the relay's estimate, then to the
            configured default.
    """

    gas_price: Optional[Decimal] = Field(default=None, ge=0, description="Gas price in gwei")
    gas_limit: Optional[int] = Field(default=None, gt=0, description="Gas limit")


class TxInfos(CanonicalModel):
    """Nonce source as returned by ``users/{address}/txinfos`` or ``identities/{address}``."""

    nonce: int = Field(..., ge=0)
    gas_price: int = Field(default=0, ge=0, description="Gas price in wei")
    balance: str = Field(default="0", description="Native-coin balance as reported by the relay")
    identity: Optional[str] = Field(default=None, description="Identity contract address (meta transactions)")


class MetaTransaction(CanonicalModel):
    """Meta transaction as exchanged with the relay's fee and relay endpoints."""

    extra_data: str = Field(default="0x")
    from_address: str = Field(..., alias="from")
    to_address: str = Field(..., alias="to")
    value: str = Field(default="0")
    data: str = Field(default="0x")
    delegation_fees: str = Field(default="0")
    currency_network_of_fees: str = Field(default="")
    nonce: str
    signature: Optional[str] = None


class RawTxFields(CanonicalModel):
    """
    Canonical unsigned transaction.

    Numeric fields are decimal strings of raw integers (wei for value and gas
    price). ``delegation_fees`` and ``currency_network_of_fees`` are only set
    for relayer-paid transactions.
    """

    from_address: str = Field(..., alias="from")
    to_address: str = Field(..., alias="to")
    value: str = Field(default="0")
    gas_limit: str
    gas_price: str
    data: str = Field(default="0x")
    nonce: int = Field(..., ge=0)
    delegation_fees: Optional[str] = None
    currency_network_of_fees: Optional[str] = None

    def to_meta_transaction(self, extra_data: str = "0x") -> MetaTransaction:
        """Project a relayer-paid transaction onto the relay's meta transaction shape."""
        return MetaTransaction(
            extra_data=extra_data,
            from_address=self.from_address,
            to_address=self.to_address,
            value=self.value,
            data=self.data,
            delegation_fees=self.delegation_fees or "0",
            currency_network_of_fees=self.currency_network_of_fees or "",
            nonce=str(self.nonce),
        )

    def to_signable_dict(self, chain_id: Optional[int] = None) -> Dict[str, Any]:
        """Return the legacy transaction dict accepted by eth-account signing."""
        tx: Dict[str, Any] = {
            "to": self.to_address,
            "value": int(self.value),
            "gas": int(self.gas_limit),
            "gasPrice": int(self.gas_price),
            "data": self.data,
            "nonce": self.nonce,
        }
        if chain_id is not None:
            tx["chainId"] = chain_id
        return tx


class PendingCall(CanonicalModel):
    """Unsigned call skeleton handed to the fee negotiator."""

    sender: str
    to_address: str
    value: int = Field(default=0, ge=0)
    data: str = Field(default="0x")
    nonce: int = Field(..., ge=0)
    gas_limit: int = Field(..., gt=0)
    gas_price: Optional[int] = Field(default=None, ge=0, description="Caller override in wei")


class FeeOffer(CanonicalModel):
    """One delegation fee offer of the relay."""

    delegation_fees: str = Field(..., description="Raw fee amount")
    currency_network_of_fees: str = Field(default="")


class SelfPaid(CanonicalModel):
    """Fee decision: the signer pays gas in the native coin."""

    mode: Literal["self_paid"] = "self_paid"
    gas_price: int = Field(..., gt=0, description="Gas price in wei")
    gas_limit: int = Field(..., gt=0)

    @property
    def eth_fees_raw(self) -> int:
        return self.gas_price * self.gas_limit


class Delegated(CanonicalModel):
    """Fee decision: a relayer pays gas and collects ``delegation_fees``."""

    mode: Literal["delegated"] = "delegated"
    delegation_fees: DelegationFeesObject
    currency_network_of_fees: str = Field(default="")


# Discriminated union selected by the 'mode' field
FeeDecision = Annotated[
    Union[
        SelfPaid,   # mode: "self_paid"
        Delegated,  # mode: "delegated"
    ],
    Field(discriminator="mode")
]


class TxObject(CanonicalModel):
    """
    Fully specified, still unsigned transaction bundle.

    Attributes:
        raw_tx: Transaction fields to sign.
        eth_fees: Maximum native-coin fees (18 decimals).
        delegation_fees: Fees owed to the relayer, relayer-paid mode only.
    """

    raw_tx: RawTxFields
    eth_fees: Amount
    delegation_fees: Optional[DelegationFeesObject] = None

    @model_validator(mode="after")
    def _check_fee_mode(self) -> "TxObject":
        self_paid = self.delegation_fees is None and self.eth_fees.raw_int > 0
        delegated = self.delegation_fees is not None and self.eth_fees.raw_int == 0
        if not (self_paid or delegated):
            raise ValueError(
                "a transaction is either self-paid (no delegation fees, positive eth fees) "
                "or relayer-paid (delegation fees, zero eth fees)"
            )
        return self

    @property
    def is_delegated(self) -> bool:
        return self.delegation_fees is not None


class PaymentTxObject(TxObject):
    """Transfer transaction with the negotiated path."""

    path: List[str]
    max_fees: Amount


class CloseTxObject(TxObject):
    """Trustline closing transaction with the negotiated close path."""

    path: List[str]
    max_fees: Amount
    value: Amount
