"""
Checksum utilities for Broadlink packets.

Every Broadlink frame carries a 16-bit little-endian checksum at offset 0x20:
the sum of all frame bytes, seeded with 0xBEAF, computed while the checksum
field itself is zero. Command frames additionally carry the same sum over the
plaintext payload at offset 0x34.

Device firmware keeps only the low 16 bits of the running sum. Folding the
carry back in (RFC 1071 style) produces different values once the sum
overflows and devices drop those frames, so the sum is truncated.
"""

from __future__ import annotations

from typing import Final

from broadlink_lan.protocol.constants import CHECKSUM_SEED, OFFSET_CHECKSUM

CHECKSUM_LENGTH: Final[int] = 2


def checksum(data: bytes | bytearray, seed: int = CHECKSUM_SEED) -> int:
    """
    Compute the Broadlink additive checksum.

    Args:
        data: Bytes to sum
        seed: Initial value of the running sum

    Returns:
        The checksum (0-0xFFFF)
    """
    return (seed + sum(data)) & 0xFFFF


def frame_checksum(frame: bytes | bytearray, offset: int = OFFSET_CHECKSUM) -> int:
    """
    Compute the checksum of a frame as if its checksum field were zero.

    The input is not modified.

    Raises:
        ValueError: If the frame does not contain the checksum field
    """
    if len(frame) < offset + CHECKSUM_LENGTH:
        raise ValueError("Frame too short to contain a checksum field")

    stored = frame[offset] + frame[offset + 1]
    return (CHECKSUM_SEED + sum(frame) - stored) & 0xFFFF


def read_checksum(frame: bytes | bytearray, offset: int = OFFSET_CHECKSUM) -> int:
    """Read the little-endian checksum stored in ``frame``."""
    return int.from_bytes(frame[offset : offset + CHECKSUM_LENGTH], "little")


def insert_checksum_in_place(frame: bytearray, offset: int = OFFSET_CHECKSUM) -> int:
    """
    Zero the checksum field, compute the checksum and write it back.

    Args:
        frame: Mutable frame buffer
        offset: Position of the checksum field

    Returns:
        The checksum that was written
    """
    frame[offset : offset + CHECKSUM_LENGTH] = b"\x00\x00"
    value = checksum(frame)
    frame[offset : offset + CHECKSUM_LENGTH] = value.to_bytes(CHECKSUM_LENGTH, "little")
    return value
