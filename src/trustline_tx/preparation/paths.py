"""
Path negotiation with the relay's path-finding service.

The relay finds routes; this module only shapes the request, enforces the
caller's constraints and tells apart "no route exists" (``NoPathFound``) from
"the path service could not be asked" (``PathQueryFailed``).
"""

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Union

from ..engine.exceptions import (
    InvalidAmountError,
    InvalidPathOptions,
    NoPathFound,
    PathQueryFailed,
    RelayRequestError,
)
from ..schemas.paths import ClosePathResult, PathKind, PathOptions, PathRequest, PathResult
from .amounts import NumberLike, to_amount, to_raw

if TYPE_CHECKING:
    from ..clients.relay_provider import RelayProvider

logger = logging.getLogger(__name__)


class PathNegotiator:
    """Requests payment and close paths between two accounts of a network."""

    def __init__(self, provider: "RelayProvider") -> None:
        self.provider = provider

    async def find_path(
        self,
        network_address: str,
        from_address: str,
        to_address: str,
        value: NumberLike,
        options: PathOptions,
        kind: PathKind = PathKind.PAYMENT,
    ) -> Union[PathResult, ClosePathResult]:
        """
        Request a path through ``network_address``.

        Args:
            network_address: Currency network to route through.
            from_address: Requesting account; becomes ``path[0]``.
            to_address: Receiver (payment) or trustline counterparty (close).
            value: Decimal amount to transfer, or the residual target for ``close``.
            options: Hop and fee constraints plus the network decimals.
            kind: ``PathKind.PAYMENT`` or ``PathKind.CLOSE``.

        Returns:
            ``PathResult`` for payments, ``ClosePathResult`` for close paths.

        Raises:
            InvalidPathOptions: If ``max_fees`` or ``max_hops`` is negative.
            InvalidAmountPrecision: If ``value`` does not fit the network decimals.
            PathQueryFailed: If the relay could not be reached or answered garbage.
            NoPathFound: If the relay answered with an empty path.
        """
        self._validate_options(options)
        decimals = options.decimals.network_decimals

        request = PathRequest(
            from_address=from_address,
            to_address=to_address,
            value=str(to_raw(value, decimals)),
            max_fees=self._forwarded_fees(options.max_fees),
            max_hops=options.max_hops,
        )

        try:
            if kind is PathKind.CLOSE:
                data = await self.provider.get_close_path_info(network_address, request.to_wire())
            else:
                data = await self.provider.get_path_info(network_address, request.to_wire())
        except RelayRequestError as e:
            raise PathQueryFailed(
                f"error while finding a path: {e}",
                stage="path",
                cause=e,
            ) from e

        path = self._read_path(data)
        if not path:
            raise NoPathFound(
                f"could not find a path with enough capacity in network {network_address}",
                stage="path",
                network=network_address,
            )

        try:
            max_fees = to_amount(data.get("fees", 0), decimals)
            estimated_gas = int(data.get("estimatedGas") or 0)
            if kind is PathKind.CLOSE:
                result = ClosePathResult(
                    path=path,
                    max_fees=max_fees,
                    estimated_gas=estimated_gas,
                    value=to_amount(data.get("value", 0), decimals),
                )
            else:
                result = PathResult(path=path, max_fees=max_fees, estimated_gas=estimated_gas)
        except (InvalidAmountError, ValueError, TypeError) as e:
            raise PathQueryFailed(
                f"error while finding a path: malformed response {data!r}",
                stage="path",
                cause=e,
            ) from e

        logger.debug(
            f"{kind.value} path in {network_address}: {len(path) - 1} hops, max fees {max_fees.value}"
        )
        return result

    @staticmethod
    def _validate_options(options: PathOptions) -> None:
        if options.max_fees is not None and options.max_fees < 0:
            raise InvalidPathOptions(f"max_fees must be non-negative, got {options.max_fees}")
        if options.max_hops is not None and options.max_hops < 0:
            raise InvalidPathOptions(f"max_hops must be non-negative, got {options.max_hops}")

    @staticmethod
    def _forwarded_fees(max_fees: Union[int, Decimal, None]) -> Union[int, str, None]:
        if max_fees is None or isinstance(max_fees, int):
            return max_fees
        return str(max_fees)

    @staticmethod
    def _read_path(data: Any) -> list:
        if not isinstance(data, dict):
            raise PathQueryFailed(
                f"error while finding a path: malformed response {data!r}",
                stage="path",
            )
        path = data.get("path") or []
        if not isinstance(path, list):
            raise PathQueryFailed(
                f"error while finding a path: malformed path {path!r}",
                stage="path",
            )
        return path
