"""Custom exception types for Broadlink protocol errors.

This module defines the exception hierarchy for codec and cipher errors,
following the "No Nullability" principle where errors raise exceptions
instead of returning None.
"""

from __future__ import annotations


class BroadlinkProtocolError(Exception):
    """Base exception for all Broadlink protocol errors.

    All protocol and transport exceptions inherit from this base class,
    enabling catch-all error handling when needed while maintaining
    specific exception types for detailed handling.
    """


class PacketDecodeError(BroadlinkProtocolError):
    """Packet cannot be decoded.

    Base class for the three ways an incoming buffer is rejected: it is
    structurally invalid, its checksum does not match, or it does not decrypt.

    Attributes:
        reason: Specific failure reason (e.g., "too_short", "invalid_checksum")
        data_preview: First 16 bytes of packet data (security: prevents key material leaking into logs)
    """

    def __init__(self, reason: str, data: bytes = b""):
        self.reason = reason
        self.data_preview = data[:16] if data else b""
        super().__init__(f"Packet decode failed: {reason}")


class MalformedPacketError(PacketDecodeError):
    """Buffer too short or structurally invalid (bad magic, bad length)."""


class ChecksumMismatchError(PacketDecodeError):
    """Integrity failure: the stored checksum does not match the recomputed one.

    Attributes:
        expected: Checksum recomputed from the buffer
        actual: Checksum stored in the buffer
    """

    def __init__(self, reason: str, data: bytes = b"", expected: int = 0, actual: int = 0):
        super().__init__(reason, data)
        self.expected = expected
        self.actual = actual

    def __str__(self) -> str:
        return f"{super().__str__()} (expected 0x{self.expected:04x}, got 0x{self.actual:04x})"


class DecryptError(PacketDecodeError):
    """Ciphertext could not be decrypted: wrong key, bad padding or corrupt data."""
