"""
Shielded commitments.

Builds mint, transfer and burn calls of a currency network shield. Mint and
burn move value between the backing network and the shield through the
network's gateway, so both need a path to (mint) or from (burn) the gateway
before any call is built.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from ..engine.exceptions import (
    NoBurnPath,
    NoMintPath,
    NoPathFound,
    PathQueryFailed,
    ShieldArgumentInvalid,
    ShieldLookupFailed,
)
from ..engine.stages import PreparationPipeline, Stage
from ..schemas.paths import PathKind, PathResult, PaymentOptions
from ..schemas.shield import (
    VK_TYPES,
    BurnOperation,
    MintOperation,
    ShieldTxObject,
    TransferOperation,
)
from ..schemas.transactions import TxObject
from .amounts import NumberLike, to_hex_string, to_raw
from .networks import CurrencyNetwork
from .paths import PathNegotiator
from .transactions import TransactionBuilder, tx_fields

logger = logging.getLogger(__name__)

FieldElement = Union[int, str]

SHIELD_CONTRACT = "CurrencyNetworkShield"


def _words(elements: Sequence[FieldElement]) -> List[str]:
    return [to_hex_string(element) for element in elements]


class Shield:
    """
    Prepares shield operations of one user.

    Proofs, inputs, amounts and 32-byte words are normalized to ``0x`` + 64
    lowercase hex digits before the operation is built.
    """

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

    async def prepare_mint_commitment(
        self,
        shield_address: str,
        proof: Sequence[FieldElement],
        inputs: Sequence[FieldElement],
        value: NumberLike,
        commitment: FieldElement,
        options: Optional[PaymentOptions] = None,
    ) -> ShieldTxObject:
        """
        Prepare minting ``value`` into ``commitment``.

        The value is paid from the user to the gateway of the backing network.

        Raises:
            ShieldLookupFailed: If the backing network or gateway is unknown.
            NoMintPath: If there is no path from the user to the gateway.
            ShieldArgumentInvalid: If a field element is malformed.
        """
        context = self._context(shield_address, value, options)
        context["raw_operation"] = {"proof": proof, "inputs": inputs, "commitment": commitment}
        stages = self._gateway_stages(self._mint_path) + [
            Stage("operation", "building the mint arguments", self._mint_operation, ShieldArgumentInvalid),
            Stage("tx", "building the mint transaction", self._build),
        ]
        return await self._run("mint", stages, context)

    async def prepare_transfer_commitment(
        self,
        shield_address: str,
        proof: Sequence[FieldElement],
        inputs: Sequence[FieldElement],
        root: FieldElement,
        nullifier_c: FieldElement,
        nullifier_d: FieldElement,
        commitment_e: FieldElement,
        commitment_f: FieldElement,
        options: Optional[PaymentOptions] = None,
    ) -> ShieldTxObject:
        """Prepare a transfer inside the shield: two notes in, two commitments out."""
        context = self._context(shield_address, 0, options)
        context["raw_operation"] = {
            "proof": proof,
            "inputs": inputs,
            "root": root,
            "nullifier_c": nullifier_c,
            "nullifier_d": nullifier_d,
            "commitment_e": commitment_e,
            "commitment_f": commitment_f,
        }
        stages = [
            Stage("operation", "building the transfer arguments", self._transfer_operation, ShieldArgumentInvalid),
            Stage("tx", "building the transfer transaction", self._build),
        ]
        return await self._run("transfer", stages, context)

    async def prepare_burn_commitment(
        self,
        shield_address: str,
        proof: Sequence[FieldElement],
        inputs: Sequence[FieldElement],
        root: FieldElement,
        nullifier: FieldElement,
        value: NumberLike,
        pay_to: str,
        options: Optional[PaymentOptions] = None,
    ) -> ShieldTxObject:
        """
        Prepare burning ``value`` out of the shield.

        The value is paid from the gateway of the backing network to the user.

        Raises:
            ShieldLookupFailed: If the backing network or gateway is unknown.
            NoBurnPath: If there is no path from the gateway to the user.
            ShieldArgumentInvalid: If a field element is malformed.
        """
        context = self._context(shield_address, value, options)
        context["raw_operation"] = {
            "proof": proof,
            "inputs": inputs,
            "root": root,
            "nullifier": nullifier,
            "pay_to": pay_to,
        }
        stages = self._gateway_stages(self._burn_path) + [
            Stage("operation", "building the burn arguments", self._burn_operation, ShieldArgumentInvalid),
            Stage("tx", "building the burn transaction", self._build),
        ]
        return await self._run("burn", stages, context)

    async def prepare_register_vk(
        self,
        shield_address: str,
        flattened_vk: Sequence[FieldElement],
        vk_type: str,
        options: Optional[PaymentOptions] = None,
    ) -> TxObject:
        """
        Prepare registering a verification key. Development helper.

        Args:
            vk_type: One of ``"mint"``, ``"transfer"``, ``"burn"``.
        """
        if vk_type not in VK_TYPES:
            raise ShieldArgumentInvalid(f"unknown verification key type {vk_type!r}, expected one of {VK_TYPES}")
        if not flattened_vk:
            raise ShieldArgumentInvalid("verification key is empty")

        options = options or PaymentOptions()
        return await self.builder.build(
            self.user_address,
            shield_address,
            SHIELD_CONTRACT,
            "registerVerificationKey",
            [_words(flattened_vk), VK_TYPES.index(vk_type)],
            options.tx_options(),
        )

    # =========================================================================
    # Pipeline assembly
    # =========================================================================

    def _context(self, shield_address: str, value: NumberLike, options: Optional[PaymentOptions]) -> Dict[str, Any]:
        return {
            "shield": shield_address,
            "value": value,
            "options": options or PaymentOptions(),
        }

    def _gateway_stages(self, path_handler) -> List[Stage]:
        return [
            Stage("network", "resolving the shielded network", self._network, ShieldLookupFailed),
            Stage("lookup", "resolving decimals and gateway", self._lookup, ShieldLookupFailed),
            Stage("path", "finding a path", path_handler, PathQueryFailed),
        ]

    async def _run(self, function_name: str, stages: List[Stage], context: Dict[str, Any]) -> ShieldTxObject:
        context["function_name"] = function_name
        result = await PreparationPipeline(stages, label=f"shield {function_name}").execute(context)
        return ShieldTxObject(**tx_fields(result["tx"]), operation=result["operation"])

    # =========================================================================
    # Stages
    # =========================================================================

    async def _network(self, context: Dict[str, Any]) -> str:
        return await self.currency_network.get_shielded_network(context["shield"])

    async def _lookup(self, context: Dict[str, Any]) -> Dict[str, Any]:
        network = context["network"]
        tasks = [
            asyncio.ensure_future(self.currency_network.get_decimals(network, context["options"].decimals)),
            asyncio.ensure_future(self.currency_network.get_gateway(network)),
        ]
        try:
            decimals, gateway = await asyncio.gather(*tasks)
        except BaseException:
            # a failed lookup ends the stage; nothing may keep querying the relay
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        logger.debug(f"shielded network {network}: gateway {gateway}")
        return {"decimals": decimals, "gateway": gateway}

    async def _mint_path(self, context: Dict[str, Any]) -> PathResult:
        try:
            return await self._find_path(context, self.user_address, context["lookup"]["gateway"])
        except NoPathFound as e:
            raise NoMintPath(
                f"no path to mint {context['value']} in network {context['network']}",
                stage="path",
                network=context["network"],
                cause=e,
            ) from e

    async def _burn_path(self, context: Dict[str, Any]) -> PathResult:
        try:
            return await self._find_path(context, context["lookup"]["gateway"], self.user_address)
        except NoPathFound as e:
            raise NoBurnPath(
                f"no path to burn {context['value']} in network {context['network']}",
                stage="path",
                network=context["network"],
                cause=e,
            ) from e

    async def _find_path(self, context: Dict[str, Any], from_address: str, to_address: str) -> PathResult:
        options: PaymentOptions = context["options"]
        return await self.path_negotiator.find_path(
            context["network"],
            from_address,
            to_address,
            context["value"],
            options.path_options(context["lookup"]["decimals"]),
            kind=PathKind.PAYMENT,
        )

    async def _mint_operation(self, context: Dict[str, Any]) -> MintOperation:
        raw = context["raw_operation"]
        return MintOperation(
            proof=_words(raw["proof"]),
            inputs=_words(raw["inputs"]),
            value=self._raw_value(context),
            commitment=to_hex_string(raw["commitment"]),
            path=context["path"].path,
        )

    async def _transfer_operation(self, context: Dict[str, Any]) -> TransferOperation:
        raw = context["raw_operation"]
        return TransferOperation(
            proof=_words(raw["proof"]),
            inputs=_words(raw["inputs"]),
            root=to_hex_string(raw["root"]),
            nullifier_c=to_hex_string(raw["nullifier_c"]),
            nullifier_d=to_hex_string(raw["nullifier_d"]),
            commitment_e=to_hex_string(raw["commitment_e"]),
            commitment_f=to_hex_string(raw["commitment_f"]),
        )

    async def _burn_operation(self, context: Dict[str, Any]) -> BurnOperation:
        raw = context["raw_operation"]
        return BurnOperation(
            proof=_words(raw["proof"]),
            inputs=_words(raw["inputs"]),
            root=to_hex_string(raw["root"]),
            nullifier=to_hex_string(raw["nullifier"]),
            value=self._raw_value(context),
            pay_to=raw["pay_to"],
            path=context["path"].path,
        )

    async def _build(self, context: Dict[str, Any]) -> TxObject:
        return await self.builder.build(
            self.user_address,
            context["shield"],
            SHIELD_CONTRACT,
            context["function_name"],
            context["operation"].to_call_args(),
            context["options"].tx_options(),
        )

    @staticmethod
    def _raw_value(context: Dict[str, Any]) -> str:
        decimals = context["lookup"]["decimals"].network_decimals
        return to_hex_string(to_raw(context["value"], decimals))
