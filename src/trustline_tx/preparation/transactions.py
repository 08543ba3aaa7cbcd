"""
Transaction assembly.

The builder resolves the nonce, encodes the call, negotiates who pays gas and
assembles the unsigned :class:`TxObject`. It only ever reads from the relay;
signing and relaying are left to the caller.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence

from ..engine.exceptions import ABIEncodingError, FeeQuoteFailed, NonceResolutionFailed
from ..engine.stages import PreparationPipeline, Stage
from ..schemas.bases import WalletType
from ..schemas.transactions import (
    Delegated,
    PendingCall,
    RawTxFields,
    TxInfos,
    TxObject,
    TxOptions,
)
from .amounts import ETH_DECIMALS, gwei_to_wei, to_amount
from .fees import FeeDelegationNegotiator

if TYPE_CHECKING:
    from ..clients.relay_provider import RelayProvider
    from ..contracts.encoder import ContractEncoder

logger = logging.getLogger(__name__)

#: Gas limit of a contract call when neither the caller nor the relay gives one.
DEFAULT_GAS_LIMIT = 600000

#: Gas limit of a plain native-coin transfer.
VALUE_TRANSFER_GAS_LIMIT = 21000


def tx_fields(tx: TxObject) -> Dict[str, Any]:
    """Fields of ``tx`` for building one of its subclasses."""
    return {
        "raw_tx": tx.raw_tx,
        "eth_fees": tx.eth_fees,
        "delegation_fees": tx.delegation_fees,
    }


class TransactionBuilder:
    """
    Builds unsigned transactions under the fee mode of the wallet.

    Each ``build`` runs as a pipeline: ``nonce`` -> ``data`` -> ``call`` ->
    ``fees`` -> ``tx``. The first failing stage aborts the call and no
    partial transaction is returned.
    """

    def __init__(
        self,
        provider: "RelayProvider",
        negotiator: FeeDelegationNegotiator,
        encoder: "ContractEncoder",
        wallet_type: WalletType = WalletType.ETHERS,
        default_gas_limit: int = DEFAULT_GAS_LIMIT,
    ) -> None:
        self.provider = provider
        self.negotiator = negotiator
        self.encoder = encoder
        self.wallet_type = WalletType(wallet_type)
        self.default_gas_limit = default_gas_limit

    async def build(
        self,
        sender: str,
        contract_address: str,
        contract_name: str,
        function_name: str,
        args: Sequence[Any],
        options: Optional[TxOptions] = None,
        estimated_gas: Optional[int] = None,
    ) -> TxObject:
        """
        Build a contract call transaction.

        Args:
            sender: Signing account (identity contract for identity wallets).
            contract_address: Contract the call is sent to.
            contract_name: ABI name used by the encoder.
            function_name: Function to call.
            args: Ordered call arguments.
            options: Gas price (gwei) and gas limit overrides.
            estimated_gas: Relay gas estimate, used when no gas limit is given.

        Returns:
            TxObject: Unsigned transaction with fee-mode exclusive fields.

        Raises:
            NonceResolutionFailed: If the nonce could not be fetched.
            ABIEncodingError: If the call could not be encoded.
            FeeQuoteFailed: If fee negotiation failed at the transport level.
            GasResolutionError: If no positive gas price could be resolved.
        """
        stages = [
            Stage("nonce", "resolving the nonce", self._resolve_nonce, NonceResolutionFailed),
            Stage("data", "encoding the contract call", self._encode, ABIEncodingError),
            Stage("call", "preparing the call", self._pending_call),
            Stage("fees", "negotiating fees", self._negotiate, FeeQuoteFailed),
            Stage("tx", "assembling the transaction", self._assemble),
        ]
        context = {
            "sender": sender,
            "to": contract_address,
            "value": 0,
            "contract_name": contract_name,
            "function_name": function_name,
            "args": list(args),
            "options": options or TxOptions(),
            "estimated_gas": estimated_gas,
        }
        label = f"{contract_name}.{function_name}"
        result = await PreparationPipeline(stages, label=label).execute(context)
        tx = result["tx"]
        logger.info(f"prepared {label} for {sender} ({self._mode(tx)})")
        return tx

    async def build_value_transfer(
        self,
        sender: str,
        to_address: str,
        raw_value: int,
        options: Optional[TxOptions] = None,
    ) -> TxObject:
        """
        Build a plain native-coin transfer of ``raw_value`` wei.

        The gas limit defaults to 21000.
        """
        stages = [
            Stage("nonce", "resolving the nonce", self._resolve_nonce, NonceResolutionFailed),
            Stage("call", "preparing the call", self._pending_call),
            Stage("fees", "negotiating fees", self._negotiate, FeeQuoteFailed),
            Stage("tx", "assembling the transaction", self._assemble),
        ]
        context = {
            "sender": sender,
            "to": to_address,
            "value": raw_value,
            "data": "0x",
            "options": options or TxOptions(),
            "estimated_gas": VALUE_TRANSFER_GAS_LIMIT,
        }
        result = await PreparationPipeline(stages, label="value transfer").execute(context)
        tx = result["tx"]
        logger.info(f"prepared value transfer for {sender} ({self._mode(tx)})")
        return tx

    # =========================================================================
    # Stages
    # =========================================================================

    async def _resolve_nonce(self, context: Dict[str, Any]) -> TxInfos:
        if self.wallet_type is WalletType.IDENTITY:
            return await self.provider.get_meta_tx_infos(context["sender"])
        return await self.provider.get_tx_infos(context["sender"])

    async def _encode(self, context: Dict[str, Any]) -> str:
        return self.encoder.encode(context["contract_name"], context["function_name"], context["args"])

    async def _pending_call(self, context: Dict[str, Any]) -> PendingCall:
        options: TxOptions = context["options"]
        return PendingCall(
            sender=context["sender"],
            to_address=context["to"],
            value=context["value"],
            data=context["data"],
            nonce=context["nonce"].nonce,
            gas_limit=self._gas_limit(options, context["estimated_gas"]),
            gas_price=gwei_to_wei(options.gas_price) if options.gas_price is not None else None,
        )

    async def _negotiate(self, context: Dict[str, Any]):
        return await self.negotiator.negotiate(self.wallet_type, context["call"], context["nonce"])

    async def _assemble(self, context: Dict[str, Any]) -> TxObject:
        call: PendingCall = context["call"]
        decision = context["fees"]
        fields = {
            "from_address": call.sender,
            "to_address": call.to_address,
            "value": str(call.value),
            "gas_limit": str(call.gas_limit),
            "data": call.data,
            "nonce": call.nonce,
        }

        if isinstance(decision, Delegated):
            raw_tx = RawTxFields(
                **fields,
                gas_price="0",
                delegation_fees=decision.delegation_fees.raw,
                currency_network_of_fees=decision.currency_network_of_fees,
            )
            return TxObject(
                raw_tx=raw_tx,
                eth_fees=to_amount(0, ETH_DECIMALS),
                delegation_fees=decision.delegation_fees,
            )

        raw_tx = RawTxFields(**fields, gas_price=str(decision.gas_price))
        return TxObject(raw_tx=raw_tx, eth_fees=to_amount(decision.eth_fees_raw, ETH_DECIMALS))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _gas_limit(self, options: TxOptions, estimated_gas: Optional[int]) -> int:
        if options.gas_limit is not None:
            return options.gas_limit
        if estimated_gas:
            return estimated_gas
        return self.default_gas_limit

    @staticmethod
    def _mode(tx: TxObject) -> str:
        return "relayer-paid" if tx.is_delegated else "self-paid"
