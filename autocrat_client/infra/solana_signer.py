"""
Transaction signing abstractions

Wallet signing for the provider plus co-signing with extra keypairs that
some instructions create (e.g. a fresh proposal instructions account).
"""

from __future__ import annotations

import json
import logging
import os
from typing import List, Optional, Protocol, Sequence, Tuple, runtime_checkable

import base58
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from ..errors import SignerError, ConfigurationError
from ..config import config as global_config

logger = logging.getLogger(__name__)


@runtime_checkable
class Signer(Protocol):
    """
    Protocol for transaction signers

    Implementations must provide:
    - pubkey: The signer's public key
    - sign(): Sign raw message bytes
    - sign_transaction(): Sign a serialized versioned transaction
    """

    @property
    def pubkey(self) -> Pubkey:
        ...

    def sign(self, message: bytes) -> bytes:
        ...

    def sign_transaction(
        self,
        unsigned_tx: bytes,
        additional_signers: Sequence[Keypair] = (),
    ) -> Tuple[bytes, str]:
        ...


def _message_bytes(message) -> bytes:
    # Versioned messages are signed with their 0x80 version prefix
    raw = bytes(message)
    if isinstance(message, MessageV0):
        return bytes([0x80]) + raw
    return raw


class LocalSigner:
    """
    Local signer using a Solana keypair

    Usage:
        signer = LocalSigner(Keypair())
        signed_tx, sig = signer.sign_transaction(unsigned_tx_bytes)

        # Co-sign with a keypair created for the transaction
        signed_tx, sig = signer.sign_transaction(unsigned_tx_bytes, [ix_keypair])
    """

    def __init__(self, keypair: Keypair):
        self._keypair = keypair

    @property
    def pubkey(self) -> Pubkey:
        return self._keypair.pubkey()

    @property
    def keypair(self) -> Keypair:
        return self._keypair

    def sign(self, message: bytes) -> bytes:
        """Sign message bytes"""
        return bytes(self._keypair.sign_message(message))

    def sign_transaction(
        self,
        unsigned_tx: bytes,
        additional_signers: Sequence[Keypair] = (),
    ) -> Tuple[bytes, str]:
        """
        Sign a versioned transaction

        The wallet and every additional signer are placed at their slot in
        the message's required-signer list.

        Returns:
            (signed_tx_bytes, fee_payer_signature_base58)

        Raises:
            SignerError: If a keypair is not a required signer, or a
                required signer has no keypair
        """
        tx = VersionedTransaction.from_bytes(unsigned_tx)
        message = tx.message
        num_required = message.header.num_required_signatures
        required: List[Pubkey] = list(message.account_keys[:num_required])

        keypairs = [self._keypair] + [kp for kp in additional_signers if kp.pubkey() != self.pubkey]
        signatures: List[Optional[Signature]] = [None] * num_required
        payload = _message_bytes(message)

        for kp in keypairs:
            try:
                index = required.index(kp.pubkey())
            except ValueError:
                raise SignerError.failed(
                    f"{kp.pubkey()} is not in the required signers list "
                    f"{[str(key) for key in required]}"
                ) from None
            signatures[index] = kp.sign_message(payload)

        missing = [str(required[i]) for i, sig in enumerate(signatures) if sig is None]
        if missing:
            raise SignerError.failed(f"missing signatures for {missing}")

        signed_tx = VersionedTransaction.populate(message, signatures)
        return bytes(signed_tx), str(signatures[0])

    @classmethod
    def from_bytes(cls, secret_key: bytes) -> "LocalSigner":
        """Create signer from secret key bytes (64 bytes)"""
        return cls(Keypair.from_bytes(secret_key))

    @classmethod
    def from_base58(cls, secret_key: str) -> "LocalSigner":
        """Create signer from base58 secret key"""
        return cls.from_bytes(base58.b58decode(secret_key))

    @classmethod
    def from_file(cls, path: str) -> "LocalSigner":
        """
        Create signer from keypair file

        Supports:
        - JSON array format (Solana CLI): [1,2,3,...]
        - Raw bytes file (64 bytes)
        """
        with open(path, "rb") as f:
            content = f.read()

        try:
            data = json.loads(content.decode("utf-8"))
            if isinstance(data, list):
                return cls.from_bytes(bytes(data))
        except (json.JSONDecodeError, UnicodeDecodeError):
            pass

        if len(content) == 64:
            return cls.from_bytes(content)

        raise ConfigurationError.invalid("keypair_file", f"Cannot parse keypair file: {path}")


def create_signer(
    keypair: Optional[Keypair] = None,
    keypair_path: Optional[str] = None,
) -> LocalSigner:
    """
    Create signer based on configuration

    Priority:
    1. keypair: Use LocalSigner with provided keypair
    2. keypair_path: Load keypair from file
    3. Environment: SOLANA_KEYPAIR_PATH

    Raises:
        SignerError: If no valid signer configuration found
    """
    if keypair is not None:
        return LocalSigner(keypair)

    if keypair_path is not None:
        return LocalSigner.from_file(keypair_path)

    if global_config.signer.keypair_path and os.path.isfile(global_config.signer.keypair_path):
        logger.debug(f"Loading keypair from {global_config.signer.keypair_path}")
        return LocalSigner.from_file(global_config.signer.keypair_path)

    raise SignerError.not_configured()
