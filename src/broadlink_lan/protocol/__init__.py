"""Broadlink protocol package - packet framing, checksums and payload cipher.

Public API:
- Packet type constants (PACKET_TYPE_*)
- Envelope dataclasses (PacketEnvelope, BroadcastFrame)
- Envelope encoder/decoder (BroadlinkCodec)
- Cipher session (CipherSession, Padding)
"""

from broadlink_lan.protocol.checksum import checksum
from broadlink_lan.protocol.cipher import CipherSession, Padding
from broadlink_lan.protocol.codec import BroadlinkCodec
from broadlink_lan.protocol.constants import (
    PACKET_TYPE_AUTH,
    PACKET_TYPE_AUTH_REPLY,
    PACKET_TYPE_COMMAND,
    PACKET_TYPE_COMMAND_REPLY,
    PACKET_TYPE_HELLO,
    PACKET_TYPE_HELLO_REPLY,
    PACKET_TYPE_JOIN,
    PACKET_TYPE_JOIN_REPLY,
)
from broadlink_lan.protocol.packet_types import BroadcastFrame, PacketEnvelope

__all__ = [
    # Encoder/decoder
    "BroadlinkCodec",
    "checksum",
    # Cipher
    "CipherSession",
    "Padding",
    # Packet type constants
    "PACKET_TYPE_AUTH",
    "PACKET_TYPE_AUTH_REPLY",
    "PACKET_TYPE_COMMAND",
    "PACKET_TYPE_COMMAND_REPLY",
    "PACKET_TYPE_HELLO",
    "PACKET_TYPE_HELLO_REPLY",
    "PACKET_TYPE_JOIN",
    "PACKET_TYPE_JOIN_REPLY",
    # Dataclasses
    "BroadcastFrame",
    "PacketEnvelope",
]
