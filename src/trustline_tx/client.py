"""
TLNetwork client façade.

Wires one relay provider and one decimals cache into every preparation
component of a user. The decimals cache lives as long as the client.

Usage:
    ```python
    async with TLNetwork(NetworkConfig.from_env(), user_address) as tl:
        tx = await tl.payment.prepare(network, receiver, "1.5")
        tx_hash = await tl.payment.confirm(tx)
    ```
"""

import logging
from typing import Any, Optional

import httpx

from .clients.relay_provider import RelayProvider
from .config import NetworkConfig, get_private_key_from_env
from .contracts.encoder import ContractEncoder
from .engine.exceptions import ConfigurationError
from .preparation.decimals import DecimalsCache
from .preparation.fees import FeeDelegationNegotiator
from .preparation.networks import CurrencyNetwork
from .preparation.paths import PathNegotiator
from .preparation.payments import Payment
from .preparation.shield import Shield
from .preparation.transactions import TransactionBuilder
from .preparation.trustlines import Trustline
from .signers import LocalAccountSigner, MetaTransactionSigner, TransactionSigner

logger = logging.getLogger(__name__)


class TLNetwork:
    """
    Entry point of the library for one user.

    Attributes:
        relay: HTTP provider of the relay server.
        decimals: Decimals cache shared by every component of this client.
        currency_network: Network lookups.
        payment: Payment preparation and confirmation.
        trustline: Trustline closing.
        shield: Shielded mint / transfer / burn.
    """

    def __init__(
        self,
        config: NetworkConfig,
        user_address: str,
        signer: Optional[TransactionSigner] = None,
        meta_signer: Optional[MetaTransactionSigner] = None,
        encoder: Optional[Any] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize client.

        Args:
            config: Relay connection and defaults.
            user_address: Account preparations are made for. For identity
                wallets, the identity contract address.
            signer: Signs self-paid transactions in ``payment.confirm``.
            meta_signer: Signs meta transactions in ``payment.confirm``.
            encoder: ABI-encoding collaborator, ``ContractEncoder`` by default.
            transport: httpx transport of the relay client (tests, proxies).
        """
        self.config = config
        self.user_address = user_address

        self.relay = RelayProvider(
            config.relay_url,
            timeout=config.request_timeout,
            transport=transport,
        )
        self.decimals = DecimalsCache(self.relay.get_network_decimals)
        self.currency_network = CurrencyNetwork(self.relay, self.decimals)
        self.path_negotiator = PathNegotiator(self.relay)
        self.fee_negotiator = FeeDelegationNegotiator(self.relay, self.decimals)
        self.builder = TransactionBuilder(
            self.relay,
            self.fee_negotiator,
            encoder or ContractEncoder(),
            wallet_type=config.wallet_type,
            default_gas_limit=config.default_gas_limit,
        )

        self.payment = Payment(
            user_address,
            self.relay,
            self.currency_network,
            self.path_negotiator,
            self.builder,
            signer=signer,
            meta_signer=meta_signer,
        )
        self.trustline = Trustline(user_address, self.currency_network, self.path_negotiator, self.builder)
        self.shield = Shield(user_address, self.currency_network, self.path_negotiator, self.builder)

        logger.debug(f"client for {user_address} on {config.relay_url} ({config.wallet_type.value})")

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None, **kwargs: Any) -> "TLNetwork":
        """
        Build a self-paid client from the environment.

        The user is the account of ``TL_PRIVATE_KEY``, which also signs.

        Raises:
            ConfigurationError: If the configuration or the key is missing or invalid.
        """
        config = NetworkConfig.from_env(dotenv_path)
        private_key = get_private_key_from_env()
        if not private_key:
            raise ConfigurationError("TL_PRIVATE_KEY is not set")
        try:
            signer = LocalAccountSigner(private_key, chain_id=config.chain_id)
        except ValueError as e:
            raise ConfigurationError(f"invalid TL_PRIVATE_KEY: {e}", cause=e) from e
        return cls(config, signer.address, signer=signer, **kwargs)

    async def close(self) -> None:
        await self.relay.aclose()

    async def __aenter__(self) -> "TLNetwork":
        await self.relay.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.relay.__aexit__(exc_type, exc_value, traceback)
