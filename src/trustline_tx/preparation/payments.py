"""
Payments within a currency network.

``Payment.prepare`` is the main entry point of a preparation: decimals ->
path -> transfer. The transfer itself is built by the
:class:`TransactionBuilder`, which adds nonce, encoding and fee stages.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple, Union

from ..engine.exceptions import (
    DecimalsUnavailable,
    PathQueryFailed,
    RelayRequestError,
    SignerUnavailable,
    TransactionRelayFailed,
)
from ..engine.stages import PreparationPipeline, Stage
from ..schemas.bases import DecimalsObject, DecimalsOptions
from ..schemas.paths import PathKind, PathResult, PaymentOptions
from ..schemas.transactions import PaymentTxObject, TxObject, TxOptions
from .amounts import ETH_DECIMALS, NumberLike, to_raw
from .networks import CurrencyNetwork, DecimalsOverride
from .paths import PathNegotiator
from .transactions import TransactionBuilder, tx_fields

if TYPE_CHECKING:
    from ..clients.relay_provider import RelayProvider
    from ..signers import MetaTransactionSigner, TransactionSigner

logger = logging.getLogger(__name__)

#: Either the network decimals, or the full options object in their place.
DecimalsOrOptions = Union[int, DecimalsOptions, DecimalsObject, PaymentOptions, None]


def resolve_payment_options(
    decimals_or_options: DecimalsOrOptions = None,
    options: Optional[PaymentOptions] = None,
) -> Tuple[DecimalsOverride, PaymentOptions]:
    """
    Split the "decimals or options" argument of a preparation.

    Callers may pass the decimals positionally and the options after them, or
    pass the options object directly in place of the decimals.

    Example:
        resolve_payment_options(2)                              # (2, PaymentOptions())
        resolve_payment_options(PaymentOptions(max_hops=3))     # (None, PaymentOptions(max_hops=3))
        resolve_payment_options(2, PaymentOptions(max_hops=3))  # (2, PaymentOptions(max_hops=3))

    Raises:
        TypeError: For any other argument type, or for two options objects.
    """
    if isinstance(decimals_or_options, PaymentOptions):
        if options is not None:
            raise TypeError("options given twice")
        return decimals_or_options.decimals, decimals_or_options

    if decimals_or_options is not None and (
        isinstance(decimals_or_options, bool)
        or not isinstance(decimals_or_options, (int, DecimalsOptions, DecimalsObject))
    ):
        raise TypeError(
            f"expected decimals or PaymentOptions, got {type(decimals_or_options).__name__}"
        )

    options = options or PaymentOptions()
    decimals = decimals_or_options if decimals_or_options is not None else options.decimals
    return decimals, options


class Payment:
    """Prepares, and on request relays, payments of one user."""

    def __init__(
        self,
        user_address: str,
        provider: "RelayProvider",
        currency_network: CurrencyNetwork,
        path_negotiator: PathNegotiator,
        builder: TransactionBuilder,
        signer: Optional["TransactionSigner"] = None,
        meta_signer: Optional["MetaTransactionSigner"] = None,
    ) -> None:
        self.user_address = user_address
        self.provider = provider
        self.currency_network = currency_network
        self.path_negotiator = path_negotiator
        self.builder = builder
        self.signer = signer
        self.meta_signer = meta_signer

    async def prepare(
        self,
        network_address: str,
        receiver: str,
        value: NumberLike,
        decimals_or_options: DecimalsOrOptions = None,
        options: Optional[PaymentOptions] = None,
    ) -> PaymentTxObject:
        """
        Prepare a transfer of ``value`` to ``receiver`` along a path.

        Args:
            network_address: Currency network to pay in.
            receiver: Receiving account.
            value: Decimal amount.
            decimals_or_options: Network decimals, or a ``PaymentOptions``.
            options: Path and gas options when decimals are given first.

        Returns:
            PaymentTxObject: Unsigned transfer together with its path and fees.

        Raises:
            DecimalsUnavailable: If the network decimals are unknown.
            InvalidAmountPrecision: If ``value`` does not fit the decimals.
            PathQueryFailed: If the path service could not be asked.
            NoPathFound: If no path with enough capacity exists.
            NonceResolutionFailed, ABIEncodingError, FeeQuoteFailed:
                From building the transaction.
        """
        decimals, payment_options = resolve_payment_options(decimals_or_options, options)
        context = {
            "network": network_address,
            "receiver": receiver,
            "value": value,
            "decimals_override": decimals,
            "options": payment_options,
        }
        stages = [
            Stage("decimals", "resolving decimals", self._decimals, DecimalsUnavailable),
            Stage("path", "finding a path", self._path, PathQueryFailed),
            Stage("transfer", "building the transfer", self._transfer),
        ]
        result = await PreparationPipeline(stages, label="payment").execute(context)
        path: PathResult = result["path"]
        return PaymentTxObject(
            **tx_fields(result["transfer"]),
            path=path.path,
            max_fees=path.max_fees,
        )

    async def get_path(
        self,
        network_address: str,
        from_address: str,
        to_address: str,
        value: NumberLike,
        options: Optional[PaymentOptions] = None,
    ) -> PathResult:
        """Query a payment path without preparing a transaction."""
        options = options or PaymentOptions()
        decimals = await self.currency_network.get_decimals(network_address, options.decimals)
        return await self.path_negotiator.find_path(
            network_address,
            from_address,
            to_address,
            value,
            options.path_options(decimals),
            kind=PathKind.PAYMENT,
        )

    async def prepare_eth(
        self,
        to_address: str,
        value: NumberLike,
        options: Union[TxOptions, PaymentOptions, None] = None,
    ) -> TxObject:
        """Prepare a transfer of ``value`` in the native coin."""
        if isinstance(options, PaymentOptions):
            options = options.tx_options()
        return await self.builder.build_value_transfer(
            self.user_address,
            to_address,
            to_raw(value, ETH_DECIMALS),
            options,
        )

    async def confirm(self, tx: TxObject) -> str:
        """
        Sign ``tx`` and hand it to the relay.

        Self-paid transactions are relayed as raw transactions, relayer-paid
        ones as meta transactions.

        Returns:
            str: Transaction hash returned by the relay.

        Raises:
            SignerUnavailable: If no signer for the fee mode of ``tx`` is set.
            TransactionRelayFailed: If the relay rejected the transaction.
        """
        if tx.is_delegated:
            if self.meta_signer is None:
                raise SignerUnavailable("no meta transaction signer configured")
            meta_transaction = tx.raw_tx.to_meta_transaction()
            signature = await self.meta_signer.sign_meta_transaction(meta_transaction)
            signed = meta_transaction.model_copy(update={"signature": signature})
            send = self.provider.send_signed_meta_transaction(signed)
        else:
            if self.signer is None:
                raise SignerUnavailable("no transaction signer configured")
            signed_tx = await self.signer.sign_transaction(tx.raw_tx)
            send = self.provider.send_signed_transaction(signed_tx)

        try:
            tx_hash = await send
        except RelayRequestError as e:
            raise TransactionRelayFailed(
                f"error while relaying the transaction: {e}",
                stage="relay",
                cause=e,
            ) from e

        logger.info(f"relayed transaction {tx_hash}")
        return tx_hash

    # =========================================================================
    # Stages
    # =========================================================================

    async def _decimals(self, context: Dict[str, Any]) -> DecimalsObject:
        return await self.currency_network.get_decimals(context["network"], context["decimals_override"])

    async def _path(self, context: Dict[str, Any]) -> PathResult:
        options: PaymentOptions = context["options"]
        return await self.path_negotiator.find_path(
            context["network"],
            self.user_address,
            context["receiver"],
            context["value"],
            options.path_options(context["decimals"]),
            kind=PathKind.PAYMENT,
        )

    async def _transfer(self, context: Dict[str, Any]) -> TxObject:
        path: PathResult = context["path"]
        decimals: DecimalsObject = context["decimals"]
        options: PaymentOptions = context["options"]
        return await self.builder.build(
            self.user_address,
            context["network"],
            "CurrencyNetwork",
            "transfer",
            [
                context["receiver"],
                to_raw(context["value"], decimals.network_decimals),
                path.max_fees.raw_int,
                path.contract_path,
            ],
            options.tx_options(),
            estimated_gas=path.estimated_gas,
        )
