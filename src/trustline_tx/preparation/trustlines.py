"""
Trustline closing.
"""

from typing import Any, Dict, Optional

from ..engine.exceptions import DecimalsUnavailable, PathQueryFailed
from ..engine.stages import PreparationPipeline, Stage
from ..schemas.paths import ClosePathResult, PathKind, PaymentOptions
from ..schemas.transactions import CloseTxObject, TxObject
from .amounts import NumberLike
from .networks import CurrencyNetwork
from .paths import PathNegotiator
from .transactions import TransactionBuilder, tx_fields


class Trustline:
    """Prepares trustline operations of one user."""

    def __init__(
        self,
        user_address: str,
        currency_network: CurrencyNetwork,
        path_negotiator: PathNegotiator,
        builder: TransactionBuilder,
    ) -> None:
        self.user_address = user_address
        self.currency_network = currency_network
        self.path_negotiator = path_negotiator
        self.builder = builder

    async def prepare_close(
        self,
        network_address: str,
        counterparty: str,
        options: Optional[PaymentOptions] = None,
        value: NumberLike = 0,
    ) -> CloseTxObject:
        """
        Prepare closing the trustline with ``counterparty``.

        The balance is brought to zero by a triangular transfer along a
        close path, then the trustline is removed.

        Args:
            network_address: Currency network of the trustline.
            counterparty: Other party of the trustline.
            options: Path and gas options.
            value: Residual balance the close path should target.

        Raises:
            NoPathFound: If the balance cannot be moved along any path.
        """
        context = {
            "network": network_address,
            "counterparty": counterparty,
            "value": value,
            "options": options or PaymentOptions(),
        }
        stages = [
            Stage("decimals", "resolving decimals", self._decimals, DecimalsUnavailable),
            Stage("path", "finding a close path", self._path, PathQueryFailed),
            Stage("close", "building the close transaction", self._close),
        ]
        result = await PreparationPipeline(stages, label="close trustline").execute(context)
        path: ClosePathResult = result["path"]
        return CloseTxObject(
            **tx_fields(result["close"]),
            path=path.path,
            max_fees=path.max_fees,
            value=path.value,
        )

    async def _decimals(self, context: Dict[str, Any]):
        return await self.currency_network.get_decimals(context["network"], context["options"].decimals)

    async def _path(self, context: Dict[str, Any]) -> ClosePathResult:
        options: PaymentOptions = context["options"]
        return await self.path_negotiator.find_path(
            context["network"],
            self.user_address,
            context["counterparty"],
            context["value"],
            options.path_options(context["decimals"]),
            kind=PathKind.CLOSE,
        )

    async def _close(self, context: Dict[str, Any]) -> TxObject:
        path: ClosePathResult = context["path"]
        return await self.builder.build(
            self.user_address,
            context["network"],
            "CurrencyNetwork",
            "closeTrustlineByTriangularTransfer",
            [context["counterparty"], path.max_fees.raw_int, path.contract_path],
            context["options"].tx_options(),
            estimated_gas=path.estimated_gas,
        )
