"""
Opaque signing capability for a custodial wallet.

A ``WalletSigner`` can sign transactions for its public key but never hands
out the secret bytes; only ``WalletRepository`` builds one from storage.
"""

from __future__ import annotations

from typing import Sequence

from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction, VersionedTransaction


class WalletSigner:
    __slots__ = ("_keypair",)

    def __init__(self, keypair: Keypair) -> None:
        self._keypair = keypair

    @property
    def pubkey(self) -> Pubkey:
        return self._keypair.pubkey()

    @property
    def public_key(self) -> str:
        return str(self._keypair.pubkey())

    def sign_instructions(self, instructions: Sequence[Instruction], blockhash: Hash) -> Transaction:
        """Transacción legacy pagada y firmada por esta wallet."""
        message = Message.new_with_blockhash(list(instructions), self.pubkey, blockhash)
        return Transaction([self._keypair], message, blockhash)

    def sign_versioned(self, raw_tx: bytes) -> VersionedTransaction:
        """Firma una transacción versionada serializada (la que devuelve el agregador)."""
        unsigned = VersionedTransaction.from_bytes(raw_tx)
        return VersionedTransaction(unsigned.message, [self._keypair])

    def __eq__(self, other: object) -> bool:
        return isinstance(other, WalletSigner) and other.public_key == self.public_key

    def __hash__(self) -> int:
        return hash(self.public_key)

    def __repr__(self) -> str:
        return f"WalletSigner({self.public_key})"
