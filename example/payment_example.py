from trustline_tx import TLNetwork, NetworkConfig, setup_logger
from trustline_tx.schemas.paths import PaymentOptions
from trustline_tx.signers import LocalAccountSigner

pk = "0xxxx"  # Replace with actual private key
network = "0xxxx"  # Replace with a currency network address
receiver = "0xxxx"  # Replace with the receiving account

setup_logger("DEBUG")

signer = LocalAccountSigner(pk, chain_id=1)
config = NetworkConfig(protocol="https", host="relay.example.org", path="api/v1")


async def main():
    async with TLNetwork(config, signer.address, signer=signer) as tl:
        tx = await tl.payment.prepare(network, receiver, "1.5", PaymentOptions(max_hops=5))
        print("Path:", tx.path)
        print("Max fees:", tx.max_fees.value)
        print("Eth fees:", tx.eth_fees.value)
        return await tl.payment.confirm(tx)


if __name__ == "__main__":
    import asyncio
    tx_hash = asyncio.run(main())
    print("Transaction hash:", tx_hash)
