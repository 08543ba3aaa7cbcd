"""
Test suite for shielded commitments.
Tests: 1) gateway lookup and path direction 2) contract argument order
3) field element normalization 4) NoMintPath / NoBurnPath before encoding
"""

import asyncio

import httpx
import pytest

from trustline_tx.engine.exceptions import (
    NoBurnPath,
    NoMintPath,
    NoPathFound,
    ShieldArgumentInvalid,
    ShieldLookupFailed,
)
from trustline_tx.schemas.shield import BurnOperation, MintOperation, TransferOperation

from test_mocks import (
    GATEWAY_ADDRESS,
    MEDIATOR_ADDRESS,
    MOCK_GATEWAY_PATH,
    NETWORK_ADDRESS,
    SHIELD_ADDRESS,
    USER_ADDRESS,
    MockRelay,
    create_client,
    create_mock_encoder,
    default_routes,
    path_response,
    word,
)

PATH_INFO = f"networks/{NETWORK_ADDRESS}/path-info"
BURN_PATH = [GATEWAY_ADDRESS, MEDIATOR_ADDRESS, USER_ADDRESS]

PROOF = ["1", "0x2", 3]
INPUTS = ["0xAB"]
PROOF_WORDS = [word(1), word(2), word(3)]
INPUT_WORDS = [word(0xab)]


def shield_routes(path=None):
    routes = default_routes()
    routes[("POST", PATH_INFO)] = path_response(path=MOCK_GATEWAY_PATH if path is None else path)
    return routes


class TestMintCommitment:
    @pytest.mark.asyncio
    async def test_mint_arguments_in_contract_order(self):
        relay = MockRelay(shield_routes())
        encoder = create_mock_encoder()
        async with create_client(relay, encoder=encoder) as tl:
            tx = await tl.shield.prepare_mint_commitment(SHIELD_ADDRESS, PROOF, INPUTS, "1.5", "0xc0ffee")

        encoder.encode.assert_called_once_with(
            "CurrencyNetworkShield",
            "mint",
            [PROOF_WORDS, INPUT_WORDS, word(150), word(0xc0ffee), MOCK_GATEWAY_PATH],
        )
        assert isinstance(tx.operation, MintOperation)
        assert tx.operation.value == word(150)
        assert tx.raw_tx.to_address == SHIELD_ADDRESS

    @pytest.mark.asyncio
    async def test_mint_path_runs_from_user_to_gateway(self):
        relay = MockRelay(shield_routes())
        async with create_client(relay, encoder=create_mock_encoder()) as tl:
            await tl.shield.prepare_mint_commitment(SHIELD_ADDRESS, PROOF, INPUTS, 1, "0x01")

        body = relay.body("POST", PATH_INFO)
        assert body["from"] == USER_ADDRESS
        assert body["to"] == GATEWAY_ADDRESS
        assert body["value"] == "100"
        assert len(relay.calls("GET", f"shields/{SHIELD_ADDRESS}")) == 1
        assert len(relay.calls("GET", f"networks/{NETWORK_ADDRESS}/gateway")) == 1

    @pytest.mark.asyncio
    async def test_mint_with_real_encoder(self):
        relay = MockRelay(shield_routes())
        async with create_client(relay) as tl:
            tx = await tl.shield.prepare_mint_commitment(SHIELD_ADDRESS, PROOF, INPUTS, "1.5", "0xc0ffee")

        assert tx.raw_tx.data.startswith("0x")
        assert len(tx.raw_tx.data) > 10

    @pytest.mark.asyncio
    async def test_no_mint_path_stops_before_encoding(self):
        relay = MockRelay(shield_routes(path=[]))
        encoder = create_mock_encoder()
        async with create_client(relay, encoder=encoder) as tl:
            with pytest.raises(NoMintPath) as exc_info:
                await tl.shield.prepare_mint_commitment(SHIELD_ADDRESS, PROOF, INPUTS, 1, "0x01")

        assert isinstance(exc_info.value, NoPathFound)
        assert NETWORK_ADDRESS in str(exc_info.value)
        encoder.encode.assert_not_called()
        assert relay.calls("GET", f"users/{USER_ADDRESS}/txinfos") == []

    @pytest.mark.asyncio
    async def test_unknown_shield(self):
        routes = shield_routes()
        routes[("GET", f"shields/{SHIELD_ADDRESS}")] = httpx.Response(404, json={"message": "unknown"})
        async with create_client(MockRelay(routes), encoder=create_mock_encoder()) as tl:
            with pytest.raises(ShieldLookupFailed):
                await tl.shield.prepare_mint_commitment(SHIELD_ADDRESS, PROOF, INPUTS, 1, "0x01")

    @pytest.mark.asyncio
    async def test_failed_gateway_lookup_cancels_decimals_lookup(self, monkeypatch):
        finished = []
        cancelled = []

        async def slow_decimals(network_address, override=None):
            try:
                await asyncio.sleep(0.05)
            except asyncio.CancelledError:
                cancelled.append(network_address)
                raise
            finished.append(network_address)

        async def missing_gateway(network_address):
            raise ShieldLookupFailed(f"no gateway for {network_address}")

        async with create_client(MockRelay(shield_routes()), encoder=create_mock_encoder()) as tl:
            monkeypatch.setattr(tl.shield.currency_network, "get_decimals", slow_decimals)
            monkeypatch.setattr(tl.shield.currency_network, "get_gateway", missing_gateway)
            with pytest.raises(ShieldLookupFailed) as exc_info:
                await tl.shield.prepare_mint_commitment(SHIELD_ADDRESS, PROOF, INPUTS, 1, "0x01")
            await asyncio.sleep(0.1)

        assert exc_info.value.stage == "lookup"
        assert cancelled == [NETWORK_ADDRESS]
        assert finished == []

    @pytest.mark.asyncio
    async def test_malformed_proof(self):
        encoder = create_mock_encoder()
        async with create_client(MockRelay(shield_routes()), encoder=encoder) as tl:
            with pytest.raises(ShieldArgumentInvalid) as exc_info:
                await tl.shield.prepare_mint_commitment(SHIELD_ADDRESS, ["0xzz"], INPUTS, 1, "0x01")

        assert exc_info.value.stage == "operation"
        encoder.encode.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_inputs(self):
        async with create_client(MockRelay(shield_routes()), encoder=create_mock_encoder()) as tl:
            with pytest.raises(ShieldArgumentInvalid):
                await tl.shield.prepare_mint_commitment(SHIELD_ADDRESS, PROOF, [], 1, "0x01")


class TestTransferCommitment:
    @pytest.mark.asyncio
    async def test_transfer_arguments_in_contract_order(self):
        relay = MockRelay(default_routes())
        encoder = create_mock_encoder()
        async with create_client(relay, encoder=encoder) as tl:
            tx = await tl.shield.prepare_transfer_commitment(
                SHIELD_ADDRESS, PROOF, INPUTS, "0x0a", "0x0b", "0x0c", "0x0d", "0x0e"
            )

        encoder.encode.assert_called_once_with(
            "CurrencyNetworkShield",
            "transfer",
            [PROOF_WORDS, INPUT_WORDS, word(10), word(11), word(12), word(13), word(14)],
        )
        assert isinstance(tx.operation, TransferOperation)
        assert relay.calls("POST", PATH_INFO) == []
        assert relay.calls("GET", f"shields/{SHIELD_ADDRESS}") == []


class TestBurnCommitment:
    @pytest.mark.asyncio
    async def test_burn_arguments_in_contract_order(self):
        relay = MockRelay(shield_routes(path=BURN_PATH))
        encoder = create_mock_encoder()
        async with create_client(relay, encoder=encoder) as tl:
            tx = await tl.shield.prepare_burn_commitment(
                SHIELD_ADDRESS, PROOF, INPUTS, "0x0a", "0x0b", "2.5", USER_ADDRESS
            )

        encoder.encode.assert_called_once_with(
            "CurrencyNetworkShield",
            "burn",
            [PROOF_WORDS, INPUT_WORDS, word(10), word(11), word(250), BURN_PATH],
        )
        assert isinstance(tx.operation, BurnOperation)
        assert tx.operation.pay_to == USER_ADDRESS

    @pytest.mark.asyncio
    async def test_burn_path_runs_from_gateway_to_user(self):
        relay = MockRelay(shield_routes(path=BURN_PATH))
        async with create_client(relay, encoder=create_mock_encoder()) as tl:
            await tl.shield.prepare_burn_commitment(
                SHIELD_ADDRESS, PROOF, INPUTS, "0x0a", "0x0b", 1, USER_ADDRESS
            )

        body = relay.body("POST", PATH_INFO)
        assert body["from"] == GATEWAY_ADDRESS
        assert body["to"] == USER_ADDRESS

    @pytest.mark.asyncio
    async def test_no_burn_path(self):
        encoder = create_mock_encoder()
        async with create_client(MockRelay(shield_routes(path=[])), encoder=encoder) as tl:
            with pytest.raises(NoBurnPath):
                await tl.shield.prepare_burn_commitment(
                    SHIELD_ADDRESS, PROOF, INPUTS, "0x0a", "0x0b", 1, USER_ADDRESS
                )

        encoder.encode.assert_not_called()


class TestRegisterVerificationKey:
    @pytest.mark.asyncio
    async def test_register_vk(self):
        encoder = create_mock_encoder()
        async with create_client(MockRelay(default_routes()), encoder=encoder) as tl:
            await tl.shield.prepare_register_vk(SHIELD_ADDRESS, [1, "2"], "transfer")

        encoder.encode.assert_called_once_with(
            "CurrencyNetworkShield",
            "registerVerificationKey",
            [[word(1), word(2)], 1],
        )

    @pytest.mark.asyncio
    async def test_unknown_vk_type(self):
        async with create_client(MockRelay(default_routes()), encoder=create_mock_encoder()) as tl:
            with pytest.raises(ShieldArgumentInvalid):
                await tl.shield.prepare_register_vk(SHIELD_ADDRESS, [1], "swap")
