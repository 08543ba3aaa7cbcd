"""
Currency network lookups: decimals, shield backing networks and gateways.
"""

from typing import TYPE_CHECKING, Union

from ..engine.exceptions import RelayRequestError, ShieldLookupFailed
from ..schemas.bases import DecimalsObject, DecimalsOptions
from .decimals import DecimalsCache

if TYPE_CHECKING:
    from ..clients.relay_provider import RelayProvider

DecimalsOverride = Union[int, DecimalsOptions, DecimalsObject, None]


class CurrencyNetwork:
    """
    Read-only queries about currency networks.

    Decimals go through the client's :class:`DecimalsCache`; caller-supplied
    decimals short-circuit the cache entirely.
    """

    def __init__(self, provider: "RelayProvider", decimals_cache: DecimalsCache) -> None:
        self.provider = provider
        self.decimals_cache = decimals_cache

    async def get_decimals(self, network_address: str, override: DecimalsOverride = None) -> DecimalsObject:
        """
        Resolve the decimals of a network.

        Args:
            network_address: Address of the currency network.
            override: Caller decimals. An ``int`` is taken as the network
                decimals (interest rate decimals 0). A ``DecimalsOptions``
                with both fields set is used as is; missing fields are filled
                from the cache.

        Raises:
            DecimalsUnavailable: If decimals have to be fetched and the fetch fails.
        """
        if isinstance(override, DecimalsObject):
            return override
        if isinstance(override, int) and not isinstance(override, bool):
            return DecimalsObject(network_decimals=override, interest_rate_decimals=0)

        options = override or DecimalsOptions()
        if options.network_decimals is not None and options.interest_rate_decimals is not None:
            return DecimalsObject(
                network_decimals=options.network_decimals,
                interest_rate_decimals=options.interest_rate_decimals,
            )

        fetched = await self.decimals_cache.get(network_address)
        return DecimalsObject(
            network_decimals=(
                options.network_decimals
                if options.network_decimals is not None
                else fetched.network_decimals
            ),
            interest_rate_decimals=(
                options.interest_rate_decimals
                if options.interest_rate_decimals is not None
                else fetched.interest_rate_decimals
            ),
        )

    async def get_shielded_network(self, shield_address: str) -> str:
        """Returns the address of the currency network backing a shield."""
        try:
            return await self.provider.get_shielded_network(shield_address)
        except (RelayRequestError, KeyError, TypeError) as e:
            raise ShieldLookupFailed(
                f"error while resolving the network of shield {shield_address}: {e}",
                cause=e,
            ) from e

    async def get_gateway(self, network_address: str) -> str:
        """Returns the gateway account of a shielded network."""
        try:
            return await self.provider.get_gateway(network_address)
        except (RelayRequestError, KeyError, TypeError) as e:
            raise ShieldLookupFailed(
                f"error while resolving the gateway of network {network_address}: {e}",
                cause=e,
            ) from e
