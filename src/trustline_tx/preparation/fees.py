"""
Fee delegation negotiation.

Decides who pays gas for a pending call. Self-custody wallets pay it
themselves in the native coin; identity wallets have a relayer pay it and
owe a delegation fee in a currency network of the relayer's choosing.
"""

import logging
from typing import TYPE_CHECKING, Optional

from ..engine.exceptions import (
    FeeQuoteFailed,
    GasResolutionError,
    InvalidAmountError,
    RelayRequestError,
)
from ..schemas.bases import WalletType
from ..schemas.transactions import (
    Delegated,
    FeeDecision,
    FeeOffer,
    MetaTransaction,
    PendingCall,
    SelfPaid,
    TxInfos,
)
from .amounts import to_delegation_fees
from .decimals import DecimalsCache

if TYPE_CHECKING:
    from ..clients.relay_provider import RelayProvider

logger = logging.getLogger(__name__)


class FeeDelegationNegotiator:
    """
    Resolves the fee mode of a transaction.

    The relay may quote zero or more delegation fee offers. The first offer in
    relay order is taken as is. An empty quote resolves to a zero fee so that
    a missing offer never blocks a preparation.
    """

    def __init__(self, provider: "RelayProvider", decimals_cache: DecimalsCache) -> None:
        self.provider = provider
        self.decimals_cache = decimals_cache

    async def negotiate(
        self,
        wallet_type: WalletType,
        pending_call: PendingCall,
        tx_infos: Optional[TxInfos] = None,
    ) -> FeeDecision:
        """
        Decide the fee mode of ``pending_call``.

        Args:
            wallet_type: ``ETHERS`` pays gas itself, ``IDENTITY`` delegates it.
            pending_call: Unsigned call skeleton.
            tx_infos: Already fetched transaction infos of the sender; saves
                a round trip when resolving the gas price.

        Returns:
            ``SelfPaid`` or ``Delegated``.

        Raises:
            GasResolutionError: If no positive gas price can be resolved.
            FeeQuoteFailed: If the relay fee quote could not be obtained.
            DecimalsUnavailable: If the decimals of the fee network are unknown.
        """
        if WalletType(wallet_type) is WalletType.IDENTITY:
            return await self._delegated(pending_call)
        return await self._self_paid(pending_call, tx_infos)

    async def _self_paid(self, pending_call: PendingCall, tx_infos: Optional[TxInfos]) -> SelfPaid:
        gas_price = pending_call.gas_price
        if gas_price is None:
            if tx_infos is None:
                try:
                    tx_infos = await self.provider.get_tx_infos(pending_call.sender)
                except RelayRequestError as e:
                    raise GasResolutionError(
                        f"error while fetching the gas price: {e}",
                        stage="fees",
                        cause=e,
                    ) from e
            gas_price = tx_infos.gas_price

        if gas_price <= 0:
            raise GasResolutionError(
                f"no positive gas price for {pending_call.sender}, got {gas_price}",
                stage="fees",
            )
        return SelfPaid(gas_price=gas_price, gas_limit=pending_call.gas_limit)

    async def _delegated(self, pending_call: PendingCall) -> Delegated:
        meta_transaction = MetaTransaction(
            from_address=pending_call.sender,
            to_address=pending_call.to_address,
            value=str(pending_call.value),
            data=pending_call.data,
            nonce=str(pending_call.nonce),
        )
        try:
            offers = await self.provider.get_meta_tx_fees(meta_transaction)
        except (RelayRequestError, KeyError, TypeError) as e:
            raise FeeQuoteFailed(
                f"error while fetching delegation fees: {e}",
                stage="fees",
                cause=e,
            ) from e

        if not offers:
            logger.warning(
                f"relay offered no delegation fees for {pending_call.sender} -> "
                f"{pending_call.to_address}, using zero fees"
            )
            return self._zero_fees()

        return await self._accept(offers[0])

    async def _accept(self, offer: FeeOffer) -> Delegated:
        network = offer.currency_network_of_fees
        decimals = (await self.decimals_cache.get(network)).network_decimals if network else 0
        try:
            fees = to_delegation_fees(offer.delegation_fees, decimals, network)
        except InvalidAmountError as e:
            raise FeeQuoteFailed(
                f"error while reading delegation fees: {e}",
                stage="fees",
                cause=e,
            ) from e
        return Delegated(delegation_fees=fees, currency_network_of_fees=network)

    @staticmethod
    def _zero_fees() -> Delegated:
        return Delegated(delegation_fees=to_delegation_fees(0, 0), currency_network_of_fees="")
