"""
Signing collaborators.

Preparation never signs. ``Payment.confirm`` hands the prepared transaction to
one of these and relays the result. Key storage is up to the implementation.
"""

from typing import Optional

from eth_account import Account
from typing_extensions import Protocol, runtime_checkable
from web3 import Web3

from .engine.exceptions import SignerUnavailable
from .schemas.transactions import MetaTransaction, RawTxFields


@runtime_checkable
class TransactionSigner(Protocol):
    """Signs self-paid transactions."""

    async def sign_transaction(self, raw_tx: RawTxFields) -> str:
        """Return the ``0x``-prefixed signed raw transaction."""
        ...


@runtime_checkable
class MetaTransactionSigner(Protocol):
    """Signs relayer-paid meta transactions of an identity contract."""

    async def sign_meta_transaction(self, meta_transaction: MetaTransaction) -> str:
        """Return the ``0x``-prefixed signature of ``meta_transaction``."""
        ...


class LocalAccountSigner:
    """
    Signs self-paid transactions with a private key held in memory.

    Example:
        signer = LocalAccountSigner(os.getenv("TL_PRIVATE_KEY"), chain_id=1)
        signed = await signer.sign_transaction(tx.raw_tx)
    """

    def __init__(self, private_key: str, chain_id: Optional[int] = None) -> None:
        self._account = Account.from_key(private_key)
        self.chain_id = chain_id

    @property
    def address(self) -> str:
        return self._account.address

    async def sign_transaction(self, raw_tx: RawTxFields) -> str:
        """
        Sign ``raw_tx`` as a legacy transaction.

        Raises:
            SignerUnavailable: If ``raw_tx`` is not sent from this account.
        """
        if raw_tx.from_address.lower() != self.address.lower():
            raise SignerUnavailable(
                f"signer {self.address} cannot sign for {raw_tx.from_address}"
            )
        tx = raw_tx.to_signable_dict(self.chain_id)
        tx["to"] = Web3.to_checksum_address(tx["to"])
        signed = self._account.sign_transaction(tx)
        return Web3.to_hex(signed.raw_transaction)
