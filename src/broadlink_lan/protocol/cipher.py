"""AES-128-CBC cipher session for Broadlink payloads.

A CipherSession is immutable: it holds a key, the protocol IV and a padding
mode, and builds a fresh encryptor/decryptor per call. The bootstrap session
can therefore be shared across threads.
"""

from __future__ import annotations

from enum import StrEnum

from cryptography.hazmat.primitives import padding as sym_padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from broadlink_lan.protocol.constants import BLOCK_SIZE, BOOTSTRAP_KEY, KEY_LENGTH, PROTOCOL_IV
from broadlink_lan.protocol.exceptions import DecryptError


class Padding(StrEnum):
    """Block padding applied before encryption."""

    # Pad with PKCS#7 and validate on decrypt
    PKCS7 = "pkcs7"
    # Pad with zero bytes; decrypt only checks block alignment (device firmware layout)
    ZERO = "zero"


class CipherSession:
    """AES-128-CBC with a fixed IV.

    Example:
        >>> session = CipherSession.bootstrap()
        >>> session.decrypt(session.encrypt(b"hello")) == b"hello"
        True

    """

    __slots__ = ("_key", "_iv", "_padding")

    def __init__(self, key: bytes, iv: bytes = PROTOCOL_IV, padding: Padding = Padding.PKCS7):
        if len(key) != KEY_LENGTH:
            error_msg = f"Key must be {KEY_LENGTH} bytes, got {len(key)}"
            raise ValueError(error_msg)
        if len(iv) != BLOCK_SIZE:
            error_msg = f"IV must be {BLOCK_SIZE} bytes, got {len(iv)}"
            raise ValueError(error_msg)
        self._key = bytes(key)
        self._iv = bytes(iv)
        self._padding = Padding(padding)

    @classmethod
    def bootstrap(cls, padding: Padding = Padding.PKCS7) -> CipherSession:
        """Session keyed with the well-known bootstrap key, used before authentication."""
        return cls(BOOTSTRAP_KEY, PROTOCOL_IV, padding)

    def with_key(self, key: bytes) -> CipherSession:
        """Derive a session with a new key and the same IV and padding."""
        return type(self)(key, self._iv, self._padding)

    @property
    def key(self) -> bytes:
        return self._key

    @property
    def iv(self) -> bytes:
        return self._iv

    @property
    def padding(self) -> Padding:
        return self._padding

    def _cipher(self) -> Cipher[modes.CBC]:
        return Cipher(algorithms.AES(self._key), modes.CBC(self._iv))

    def pad(self, plaintext: bytes) -> bytes:
        """Return ``plaintext`` padded to a whole number of blocks."""
        if self._padding is Padding.ZERO:
            remainder = len(plaintext) % BLOCK_SIZE
            return plaintext + bytes((BLOCK_SIZE - remainder) % BLOCK_SIZE)
        padder = sym_padding.PKCS7(BLOCK_SIZE * 8).padder()
        return padder.update(plaintext) + padder.finalize()

    def encrypt(self, plaintext: bytes) -> bytes:
        """Pad and encrypt ``plaintext``."""
        encryptor = self._cipher().encryptor()
        return encryptor.update(self.pad(plaintext)) + encryptor.finalize()

    def decrypt(self, ciphertext: bytes) -> bytes:
        """Decrypt ``ciphertext`` and remove padding.

        Raises:
            DecryptError: If the ciphertext is not block aligned or the padding is invalid

        """
        if len(ciphertext) % BLOCK_SIZE:
            error_reason = "not_block_aligned"
            raise DecryptError(error_reason, ciphertext)

        decryptor = self._cipher().decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        if self._padding is Padding.ZERO:
            return padded

        if not padded:
            error_reason = "invalid_padding"
            raise DecryptError(error_reason, ciphertext)
        unpadder = sym_padding.PKCS7(BLOCK_SIZE * 8).unpadder()
        try:
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            error_reason = "invalid_padding"
            raise DecryptError(error_reason, ciphertext) from e

    def __repr__(self) -> str:
        # Never print the key
        return f"CipherSession(padding={self._padding.value}, bootstrap={self._key == BOOTSTRAP_KEY})"
