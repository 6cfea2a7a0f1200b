"""Packet type definitions and the decoded envelope dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field

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

PACKET_TYPE_NAMES: dict[int, str] = {
    PACKET_TYPE_HELLO: "discovery_probe",
    PACKET_TYPE_HELLO_REPLY: "discovery_reply",
    PACKET_TYPE_JOIN: "join",
    PACKET_TYPE_JOIN_REPLY: "join_reply",
    PACKET_TYPE_AUTH: "auth_request",
    PACKET_TYPE_AUTH_REPLY: "auth_reply",
    PACKET_TYPE_COMMAND: "command_request",
    PACKET_TYPE_COMMAND_REPLY: "command_reply",
}


def packet_type_name(type_code: int) -> str:
    """Human readable name of a packet type code, for logs and metric labels."""
    return PACKET_TYPE_NAMES.get(type_code, f"unknown_0x{type_code:04x}")


@dataclass(frozen=True)
class PacketEnvelope:
    """Decoded command/auth envelope.

    Attributes:
        type_code: Packet type (offset 0x26)
        sequence_counter: Message count (offset 0x28)
        device_id: Device id assigned during authentication, 0 before (offset 0x30)
        checksum: Whole-frame checksum (offset 0x20)
        payload: Decrypted payload (padding removed per cipher mode)
        device_type: Device type code (offset 0x24)
        mac: Device MAC in display order (stored reversed at offset 0x2A)
        error_code: Device-reported status, 0 on success (offset 0x22)
        payload_checksum: Checksum of the plaintext payload (offset 0x34)

    """

    type_code: int
    sequence_counter: int
    device_id: int
    checksum: int
    payload: bytes
    device_type: int = 0
    mac: bytes = field(default=bytes(6))
    error_code: int = 0
    payload_checksum: int = 0

    @property
    def type_name(self) -> str:
        return packet_type_name(self.type_code)

    @property
    def is_error(self) -> bool:
        return self.error_code != 0


@dataclass(frozen=True)
class BroadcastFrame:
    """Decoded cleartext broadcast frame (discovery reply, join reply).

    Attributes:
        type_code: Packet type (offset 0x26)
        checksum: Whole-frame checksum (offset 0x20)
        raw: Complete frame bytes; field offsets are absolute
    """

    type_code: int
    checksum: int
    raw: bytes
