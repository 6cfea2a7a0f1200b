"""Unit tests for packet type names and envelope dataclasses."""

from __future__ import annotations

import dataclasses

import pytest

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
from broadlink_lan.protocol.packet_types import PacketEnvelope, packet_type_name


@pytest.mark.parametrize(
    "type_code,name",
    [
        (PACKET_TYPE_HELLO, "discovery_probe"),
        (PACKET_TYPE_HELLO_REPLY, "discovery_reply"),
        (PACKET_TYPE_JOIN, "join"),
        (PACKET_TYPE_JOIN_REPLY, "join_reply"),
        (PACKET_TYPE_AUTH, "auth_request"),
        (PACKET_TYPE_AUTH_REPLY, "auth_reply"),
        (PACKET_TYPE_COMMAND, "command_request"),
        (PACKET_TYPE_COMMAND_REPLY, "command_reply"),
    ],
)
def test_packet_type_names(type_code: int, name: str) -> None:
    """Test every known packet type has a stable name."""
    assert packet_type_name(type_code) == name


def test_packet_type_codes() -> None:
    """Test packet type codes match device firmware."""
    assert PACKET_TYPE_AUTH == 0x65
    assert PACKET_TYPE_AUTH_REPLY == 0x3E9
    assert PACKET_TYPE_COMMAND == 0x6A
    assert PACKET_TYPE_COMMAND_REPLY == 0x3EE


def test_unknown_packet_type_name() -> None:
    """Test unknown codes get a hex name usable as a metric label."""
    assert packet_type_name(0x1234) == "unknown_0x1234"


class TestPacketEnvelope:
    """Tests for PacketEnvelope."""

    def test_defaults(self) -> None:
        """Test optional fields default to zero values."""
        envelope = PacketEnvelope(
            type_code=PACKET_TYPE_COMMAND_REPLY,
            sequence_counter=1,
            device_id=2,
            checksum=3,
            payload=b"",
        )

        assert envelope.device_type == 0
        assert envelope.mac == bytes(6)
        assert envelope.error_code == 0
        assert envelope.is_error is False
        assert envelope.type_name == "command_reply"

    def test_is_error(self) -> None:
        """Test non-zero error code flags an error."""
        envelope = PacketEnvelope(PACKET_TYPE_AUTH_REPLY, 1, 0, 0, b"", error_code=0xFFFF)
        assert envelope.is_error is True

    def test_frozen(self) -> None:
        """Test envelopes are immutable."""
        envelope = PacketEnvelope(PACKET_TYPE_COMMAND_REPLY, 1, 2, 3, b"")

        with pytest.raises(dataclasses.FrozenInstanceError):
            envelope.payload = b"changed"  # type: ignore[misc]
