"""
Test suite for payment preparation and confirmation.
Tests: 1) decimals -> path -> transfer pipeline 2) decimals/options resolution
3) confirm via raw and meta transaction relaying
"""

from unittest.mock import AsyncMock

import httpx
import pytest
from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector
from web3 import Web3

from trustline_tx.engine.exceptions import (
    DecimalsUnavailable,
    InvalidAmountPrecision,
    NoPathFound,
    SignerUnavailable,
    TransactionRelayFailed,
)
from trustline_tx.preparation.payments import resolve_payment_options
from trustline_tx.schemas.bases import DecimalsOptions, WalletType
from trustline_tx.schemas.paths import PaymentOptions
from trustline_tx.signers import LocalAccountSigner

from test_mocks import (
    FEE_NETWORK_ADDRESS,
    MEDIATOR_ADDRESS,
    MOCK_CHAIN_ID,
    MOCK_ESTIMATED_GAS,
    MOCK_GAS_PRICE,
    MOCK_PATH,
    MOCK_PRIVATE_KEY,
    MOCK_TX_HASH,
    NETWORK_ADDRESS,
    RECEIVER_ADDRESS,
    USER_ADDRESS,
    MockRelay,
    create_client,
    create_mock_encoder,
    default_routes,
    path_response,
)

PATH_INFO = f"networks/{NETWORK_ADDRESS}/path-info"
DECIMALS_ENDPOINT = f"networks/{NETWORK_ADDRESS}"


class TestResolvePaymentOptions:
    def test_nothing_given(self):
        decimals, options = resolve_payment_options()
        assert decimals is None
        assert options == PaymentOptions()

    def test_decimals_then_options(self):
        options = PaymentOptions(max_hops=3)
        assert resolve_payment_options(2, options) == (2, options)

    def test_options_in_place_of_decimals(self):
        options = PaymentOptions(decimals=4, max_fees=10)
        assert resolve_payment_options(options) == (4, options)

    def test_partial_decimals(self):
        partial = DecimalsOptions(network_decimals=2)
        assert resolve_payment_options(partial)[0] == partial

    @pytest.mark.parametrize("bad", ["2", 2.0, True, {"decimals": 2}])
    def test_rejects_other_types(self, bad):
        with pytest.raises(TypeError):
            resolve_payment_options(bad)

    def test_rejects_options_twice(self):
        with pytest.raises(TypeError):
            resolve_payment_options(PaymentOptions(), PaymentOptions())


class TestPaymentPrepare:
    @pytest.mark.asyncio
    async def test_prepare_transfer(self):
        relay = MockRelay(default_routes())
        async with create_client(relay) as tl:
            tx = await tl.payment.prepare(NETWORK_ADDRESS, RECEIVER_ADDRESS, "1.5")

        assert tx.path == MOCK_PATH
        assert tx.max_fees.value == "0.03"
        assert tx.raw_tx.to_address == NETWORK_ADDRESS
        assert tx.raw_tx.gas_limit == str(MOCK_ESTIMATED_GAS)
        assert tx.eth_fees.raw == str(MOCK_GAS_PRICE * MOCK_ESTIMATED_GAS)
        assert tx.delegation_fees is None

        signature = "transfer(address,uint64,uint64,address[])"
        expected = function_signature_to_4byte_selector(signature) + encode(
            ["address", "uint64", "uint64", "address[]"],
            [
                Web3.to_checksum_address(RECEIVER_ADDRESS),
                150,
                3,
                [Web3.to_checksum_address(MEDIATOR_ADDRESS), Web3.to_checksum_address(RECEIVER_ADDRESS)],
            ],
        )
        assert tx.raw_tx.data == "0x" + expected.hex()

    @pytest.mark.asyncio
    async def test_contract_args_strip_the_sender(self):
        encoder = create_mock_encoder()
        async with create_client(MockRelay(default_routes()), encoder=encoder) as tl:
            await tl.payment.prepare(NETWORK_ADDRESS, RECEIVER_ADDRESS, "1.5")

        encoder.encode.assert_called_once_with(
            "CurrencyNetwork",
            "transfer",
            [RECEIVER_ADDRESS, 150, 3, [MEDIATOR_ADDRESS, RECEIVER_ADDRESS]],
        )

    @pytest.mark.asyncio
    async def test_self_paid_with_gas_overrides(self):
        relay = MockRelay(default_routes())
        async with create_client(relay) as tl:
            tx = await tl.payment.prepare(
                NETWORK_ADDRESS,
                RECEIVER_ADDRESS,
                1,
                PaymentOptions(gas_price=5, gas_limit=21000),
            )

        assert tx.eth_fees.value == "0.000105"
        assert tx.delegation_fees is None

    @pytest.mark.asyncio
    async def test_relayer_paid(self):
        relay = MockRelay(default_routes())
        async with create_client(relay, WalletType.IDENTITY) as tl:
            tx = await tl.payment.prepare(NETWORK_ADDRESS, RECEIVER_ADDRESS, 1)

        assert tx.delegation_fees.raw == "2"
        assert tx.delegation_fees.currency_network_of_fees == FEE_NETWORK_ADDRESS
        assert tx.eth_fees.raw == "0"

    @pytest.mark.asyncio
    async def test_decimals_override_skips_lookup(self):
        relay = MockRelay(default_routes())
        async with create_client(relay) as tl:
            await tl.payment.prepare(NETWORK_ADDRESS, RECEIVER_ADDRESS, "1.5", 3, PaymentOptions(max_hops=2))

        assert relay.calls("GET", DECIMALS_ENDPOINT) == []
        assert relay.body("POST", PATH_INFO) == {
            "from": USER_ADDRESS,
            "to": RECEIVER_ADDRESS,
            "value": "1500",
            "maxHops": 2,
        }

    @pytest.mark.asyncio
    async def test_decimals_cached_across_preparations(self):
        relay = MockRelay(default_routes())
        async with create_client(relay) as tl:
            await tl.payment.prepare(NETWORK_ADDRESS, RECEIVER_ADDRESS, 1)
            await tl.payment.prepare(NETWORK_ADDRESS, RECEIVER_ADDRESS, 2)

        assert len(relay.calls("GET", DECIMALS_ENDPOINT)) == 1

    @pytest.mark.asyncio
    async def test_empty_path_never_builds(self):
        routes = default_routes()
        routes[("POST", PATH_INFO)] = path_response(path=[], fees="0")
        relay = MockRelay(routes)
        encoder = create_mock_encoder()
        async with create_client(relay, encoder=encoder) as tl:
            with pytest.raises(NoPathFound) as exc_info:
                await tl.payment.prepare(NETWORK_ADDRESS, RECEIVER_ADDRESS, 1)

        assert NETWORK_ADDRESS in str(exc_info.value)
        assert exc_info.value.stage == "path"
        encoder.encode.assert_not_called()
        assert relay.calls("GET", f"users/{USER_ADDRESS}/txinfos") == []

    @pytest.mark.asyncio
    async def test_unknown_decimals(self):
        routes = default_routes()
        del routes[("GET", DECIMALS_ENDPOINT)]
        async with create_client(MockRelay(routes)) as tl:
            with pytest.raises(DecimalsUnavailable):
                await tl.payment.prepare(NETWORK_ADDRESS, RECEIVER_ADDRESS, 1)

    @pytest.mark.asyncio
    async def test_value_beyond_decimals(self):
        async with create_client(MockRelay(default_routes())) as tl:
            with pytest.raises(InvalidAmountPrecision) as exc_info:
                await tl.payment.prepare(NETWORK_ADDRESS, RECEIVER_ADDRESS, "1.234")

        assert exc_info.value.stage == "path"

    @pytest.mark.asyncio
    async def test_get_path(self):
        relay = MockRelay(default_routes())
        async with create_client(relay) as tl:
            result = await tl.payment.get_path(
                NETWORK_ADDRESS, USER_ADDRESS, RECEIVER_ADDRESS, 1, PaymentOptions(max_fees=5)
            )

        assert result.path == MOCK_PATH
        assert relay.body("POST", PATH_INFO)["maxFees"] == 5

    @pytest.mark.asyncio
    async def test_prepare_eth(self):
        relay = MockRelay(default_routes())
        async with create_client(relay) as tl:
            tx = await tl.payment.prepare_eth(RECEIVER_ADDRESS, "0.5")

        assert tx.raw_tx.value == "500000000000000000"
        assert tx.raw_tx.to_address == RECEIVER_ADDRESS
        assert tx.raw_tx.data == "0x"


class TestPaymentConfirm:
    @pytest.mark.asyncio
    async def test_self_paid_is_signed_and_relayed(self):
        relay = MockRelay(default_routes())
        signer = LocalAccountSigner(MOCK_PRIVATE_KEY, chain_id=MOCK_CHAIN_ID)
        async with create_client(relay, signer=signer) as tl:
            tx = await tl.payment.prepare(NETWORK_ADDRESS, RECEIVER_ADDRESS, 1)
            tx_hash = await tl.payment.confirm(tx)

        assert tx_hash == MOCK_TX_HASH
        raw_transaction = relay.body("POST", "relay")["rawTransaction"]
        assert raw_transaction.startswith("0x")
        assert len(raw_transaction) > 2

    @pytest.mark.asyncio
    async def test_relayer_paid_is_relayed_as_meta_transaction(self):
        relay = MockRelay(default_routes())
        meta_signer = AsyncMock()
        meta_signer.sign_meta_transaction.return_value = "0xsignature"
        async with create_client(relay, WalletType.IDENTITY, meta_signer=meta_signer) as tl:
            tx = await tl.payment.prepare(NETWORK_ADDRESS, RECEIVER_ADDRESS, 1)
            tx_hash = await tl.payment.confirm(tx)

        assert tx_hash == MOCK_TX_HASH
        meta_transaction = relay.body("POST", "relay-meta-transaction")["metaTransaction"]
        assert meta_transaction["signature"] == "0xsignature"
        assert meta_transaction["delegationFees"] == "2"
        assert meta_transaction["currencyNetworkOfFees"] == FEE_NETWORK_ADDRESS
        assert relay.calls("POST", "relay") == []

    @pytest.mark.asyncio
    async def test_missing_signer(self):
        async with create_client(MockRelay(default_routes())) as tl:
            tx = await tl.payment.prepare(NETWORK_ADDRESS, RECEIVER_ADDRESS, 1)
            with pytest.raises(SignerUnavailable):
                await tl.payment.confirm(tx)

    @pytest.mark.asyncio
    async def test_rejected_by_relay(self):
        routes = default_routes()
        routes[("POST", "relay")] = httpx.Response(409, json={"message": "nonce too low"})
        signer = LocalAccountSigner(MOCK_PRIVATE_KEY, chain_id=MOCK_CHAIN_ID)
        async with create_client(MockRelay(routes), signer=signer) as tl:
            tx = await tl.payment.prepare(NETWORK_ADDRESS, RECEIVER_ADDRESS, 1)
            with pytest.raises(TransactionRelayFailed) as exc_info:
                await tl.payment.confirm(tx)

        assert exc_info.value.cause.status_code == 409
