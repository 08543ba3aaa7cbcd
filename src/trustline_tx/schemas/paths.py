"""
Path Negotiation Schema Models

Request and response models for the relay's path-finding endpoints
(``networks/{network}/path-info`` and ``networks/{network}/close-path-info``).
"""

from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union

from pydantic import Field, model_validator

from .bases import Amount, CanonicalModel, DecimalsObject, DecimalsOptions
from .transactions import TxOptions


class PathKind(str, Enum):
    """
    Operation a path is requested for.

    Attributes:
        PAYMENT: Route ``value`` from ``from`` to ``to``.
        CLOSE: Route the residual balance of a trustline back to zero;
            ``value`` is the target residual rather than a transfer amount.
    """
    PAYMENT = "payment"
    CLOSE = "close"


class PathOptions(CanonicalModel):
    """
    Caller constraints for a path query. Validated by the negotiator, never mutated.

    Attributes:
        max_hops: Maximum number of mediators on the path.
        max_fees: Maximum fees the sender accepts, forwarded verbatim.
        decimals: Decimals of the network the path is searched in.
    """

    max_hops: Optional[int] = Field(default=None, description="Maximum number of hops")
    max_fees: Optional[Union[int, Decimal]] = Field(default=None, description="Maximum fees, forwarded verbatim")
    decimals: DecimalsObject


class PathRequest(CanonicalModel):
    """Body of a path-info / close-path-info request."""

    from_address: str = Field(..., alias="from")
    to_address: str = Field(..., alias="to")
    value: str = Field(..., description="Raw amount (payment) or raw residual target (close)")
    max_fees: Optional[Union[int, str]] = None
    max_hops: Optional[int] = None


class PathResult(CanonicalModel):
    """
    A viable route returned by the path service.

    ``path[0]`` is the requesting account itself; ``path[1:]`` is what gets
    passed to the contract, the sender being implicit on-chain.
    """

    path: List[str] = Field(..., description="Ordered addresses from sender to receiver")
    max_fees: Amount = Field(..., description="Fees along the path, in network decimals")
    estimated_gas: int = Field(default=0, ge=0, description="Gas estimate of the relay")

    @model_validator(mode="after")
    def _require_route(self) -> "PathResult":
        if not self.path:
            raise ValueError("a path result must contain at least one address")
        return self

    @property
    def contract_path(self) -> List[str]:
        """Path as passed on-chain, without the implicit sender."""
        return list(self.path[1:])


class ClosePathResult(PathResult):
    """Close-path route plus the residual value that will be moved to close it."""

    value: Amount = Field(..., description="Value transferred to bring the trustline to zero")


class PaymentOptions(CanonicalModel):
    """
    Caller options of a payment or close preparation.

    Attributes:
        decimals: Network decimals as an ``int`` or a partial ``DecimalsOptions``;
            anything left out is fetched from the relay.
        max_hops: Maximum number of hops of the path.
        max_fees: Maximum fees of the path.
        gas_price: Gas price in gwei.
        gas_limit: Gas limit.
    """

    decimals: Optional[Union[int, DecimalsOptions]] = None
    max_hops: Optional[int] = None
    max_fees: Optional[Union[int, Decimal]] = None
    gas_price: Optional[Decimal] = Field(default=None, ge=0)
    gas_limit: Optional[int] = Field(default=None, gt=0)

    def path_options(self, decimals: DecimalsObject) -> PathOptions:
        return PathOptions(max_hops=self.max_hops, max_fees=self.max_fees, decimals=decimals)

    def tx_options(self) -> TxOptions:
        return TxOptions(gas_price=self.gas_price, gas_limit=self.gas_limit)
