"""
Relay Server HTTP Provider

Provides a thin httpx layer over the relay server's REST API: path finding,
nonce and gas information, delegation fee quotes, network metadata and
transaction relaying. Every failure surfaces as ``RelayRequestError``; there
are no retries.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..engine.exceptions import RelayRequestError
from ..schemas.bases import Amount, DecimalsObject
from ..schemas.transactions import FeeOffer, MetaTransaction, TxInfos
from ..preparation.amounts import ETH_DECIMALS, to_amount, to_raw

logger = logging.getLogger(__name__)


class RelayProvider(httpx.AsyncClient):
    """
    Extended httpx.AsyncClient bound to a relay server.

    Fully compatible with httpx.AsyncClient and usable as an async context
    manager. All endpoint helpers return decoded JSON mapped onto the
    package schemas.

    Usage:
        ```python
        async with RelayProvider("http://localhost:5000/api/v1") as relay:
            infos = await relay.get_tx_infos("0x...")
        ```
    """

    def __init__(self, relay_api_url: str, **kwargs) -> None:
        """
        Initialize provider.

        Args:
            relay_api_url: Base URL of the relay REST API.
            **kwargs: All standard httpx.AsyncClient arguments (timeout, transport, ...).
        """
        super().__init__(base_url=relay_api_url.rstrip("/") + "/", **kwargs)
        self.relay_api_url = relay_api_url

    # =========================================================================
    # Generic request helpers
    # =========================================================================

    async def fetch_endpoint(
        self,
        endpoint: str,
        method: str = "GET",
        json: Optional[Any] = None,
    ) -> Any:
        """
        Request an endpoint of the relay and return its JSON response.

        Args:
            endpoint: Endpoint path relative to the relay base URL. A leading
                slash is ignored.
            method: HTTP method.
            json: Optional JSON body.

        Returns:
            Decoded JSON body.

        Raises:
            RelayRequestError: On transport errors, HTTP status >= 400 or a
                body that is not JSON.
        """
        trimmed = endpoint.strip("/")
        logger.debug(f"relay {method} {trimmed}")
        try:
            response = await self.request(method, trimmed, json=json)
        except httpx.HTTPError as e:
            raise RelayRequestError(
                f"request to {trimmed} failed: {e}",
                endpoint=trimmed,
                cause=e,
            ) from e

        if response.status_code >= 400:
            raise RelayRequestError(
                f"{response.status_code} from {trimmed}: {response.text}",
                status_code=response.status_code,
                endpoint=trimmed,
            )

        try:
            return response.json()
        except ValueError as e:
            raise RelayRequestError(
                f"invalid JSON from {trimmed}",
                status_code=response.status_code,
                endpoint=trimmed,
                cause=e,
            ) from e

    async def post_to_endpoint(self, endpoint: str, data: Any) -> Any:
        return await self.fetch_endpoint(endpoint, method="POST", json=data)

    # =========================================================================
    # Transaction information
    # =========================================================================

    async def get_tx_infos(self, address: str) -> TxInfos:
        """
        Returns nonce, gas price (wei) and balance needed for a self-paid
        transaction of ``address``.
        """
        data = await self.fetch_endpoint(f"users/{address}/txinfos")
        return TxInfos(
            nonce=int(data["nonce"]),
            gas_price=int(data["gasPrice"]),
            balance=str(data.get("balance", "0")),
        )

    async def get_meta_tx_infos(self, address: str) -> TxInfos:
        """
        Returns the next nonce of the identity contract at ``address``.
        Gas price is always zero since the relayer pays gas.
        """
        data = await self.fetch_endpoint(f"identities/{address}")
        return TxInfos(
            nonce=int(data["nextNonce"]),
            gas_price=0,
            balance=str(data.get("balance", "0")),
            identity=data.get("identity"),
        )

    async def get_meta_tx_fees(self, meta_transaction: MetaTransaction) -> List[FeeOffer]:
        """
        Returns the delegation fee offers of the relay for ``meta_transaction``,
        in the order the relay returned them.
        """
        offers = await self.post_to_endpoint(
            "meta-transaction-fees",
            {"metaTransaction": meta_transaction.to_wire()},
        )
        return [
            FeeOffer(
                delegation_fees=str(offer["delegationFees"]),
                currency_network_of_fees=offer.get("currencyNetworkOfFees") or "",
            )
            for offer in offers or []
        ]

    # =========================================================================
    # Networks and paths
    # =========================================================================

    async def get_network_decimals(self, network_address: str) -> DecimalsObject:
        data = await self.fetch_endpoint(f"networks/{network_address}")
        return DecimalsObject(
            network_decimals=int(data["decimals"]),
            interest_rate_decimals=int(data.get("interestRateDecimals", 0)),
        )

    async def get_path_info(self, network_address: str, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self.post_to_endpoint(f"networks/{network_address}/path-info", body)

    async def get_close_path_info(self, network_address: str, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self.post_to_endpoint(f"networks/{network_address}/close-path-info", body)

    async def get_shielded_network(self, shield_address: str) -> str:
        """Returns the currency network backing the shield at ``shield_address``."""
        data = await self.fetch_endpoint(f"shields/{shield_address}")
        return data["currencyNetwork"]

    async def get_gateway(self, network_address: str) -> str:
        """Returns the gateway account bridging ``network_address`` and its shield."""
        data = await self.fetch_endpoint(f"networks/{network_address}/gateway")
        return data["address"]

    # =========================================================================
    # Accounts and relaying
    # =========================================================================

    async def get_balance(self, address: str) -> Amount:
        """Returns the native-coin balance of ``address``."""
        balance = await self.fetch_endpoint(f"users/{address}/balance")
        return to_amount(to_raw(balance, ETH_DECIMALS), ETH_DECIMALS)

    async def get_relay_version(self) -> str:
        """Returns the relay version in the format ``<name>/vX.X.X``."""
        return await self.fetch_endpoint("version")

    async def send_signed_transaction(self, signed_transaction: str) -> str:
        """Hands a signed raw transaction to the relay and returns its hash."""
        return await self.post_to_endpoint("relay", {"rawTransaction": signed_transaction})

    async def send_signed_meta_transaction(self, meta_transaction: MetaTransaction) -> str:
        """
        Hands a signed meta transaction to the relay.

        Returns:
            Hash of the transaction sent by the relayer, not the hash of the
            meta transaction itself.
        """
        return await self.post_to_endpoint(
            "relay-meta-transaction",
            {"metaTransaction": meta_transaction.to_wire()},
        )
