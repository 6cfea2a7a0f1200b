"""Broadlink wire protocol constants.

Offsets, packet type codes, the bootstrap key and the fixed IV all have to
match deployed device firmware byte for byte. None of them are configuration.

The IV never changes between messages or sessions. That is a known weakness
of the protocol, kept as-is because devices reject anything else.
"""

from __future__ import annotations

from typing import Final

# Transport
DEVICE_PORT: Final = 80
BROADCAST_ADDRESS: Final = "255.255.255.255"
RECV_BUFFER_SIZE: Final = 2048

# Cipher (AES-128-CBC)
BLOCK_SIZE: Final = 16
KEY_LENGTH: Final = 16
PROTOCOL_IV: Final = bytes.fromhex("562e17996d093d28ddb3ba695a2e6f58")
BOOTSTRAP_KEY: Final = bytes.fromhex("097628343fe99e23765c1513accf8b02")

# Checksum
CHECKSUM_SEED: Final = 0xBEAF

# Envelope header (command/auth packets)
HEADER_LENGTH: Final = 0x38
MAGIC: Final = bytes([0x5A, 0xA5, 0xAA, 0x55, 0x5A, 0xA5, 0xAA, 0x55])
OFFSET_CHECKSUM: Final = 0x20
OFFSET_ERROR_CODE: Final = 0x22
OFFSET_DEVICE_TYPE: Final = 0x24
OFFSET_PACKET_TYPE: Final = 0x26
OFFSET_COUNT: Final = 0x28
OFFSET_MAC: Final = 0x2A
OFFSET_DEVICE_ID: Final = 0x30
OFFSET_PAYLOAD_CHECKSUM: Final = 0x34

# Broadcast frames (discovery/join) are cleartext and carry no magic
HELLO_LENGTH: Final = 0x30
HELLO_OFFSET_DATETIME: Final = 0x08
HELLO_OFFSET_LOCAL_IP: Final = 0x18
HELLO_OFFSET_LOCAL_PORT: Final = 0x1C
HELLO_REPLY_MIN_LENGTH: Final = 0x40
HELLO_REPLY_OFFSET_DEVICE_TYPE: Final = 0x34
HELLO_REPLY_OFFSET_IP: Final = 0x36
HELLO_REPLY_OFFSET_MAC: Final = 0x3A
HELLO_REPLY_OFFSET_NAME: Final = 0x40
HELLO_REPLY_OFFSET_LOCKED: Final = 0x7F

JOIN_LENGTH: Final = 0x88
JOIN_OFFSET_SSID: Final = 0x44
JOIN_OFFSET_PASSWORD: Final = 0x64
JOIN_OFFSET_SSID_LENGTH: Final = 0x84
JOIN_OFFSET_PASSWORD_LENGTH: Final = 0x85
JOIN_OFFSET_SECURITY: Final = 0x86
JOIN_MAX_FIELD_LENGTH: Final = 32

# Auth payload
AUTH_PAYLOAD_LENGTH: Final = 0x50
AUTH_OFFSET_CLIENT_ID: Final = 0x04
CLIENT_ID_LENGTH: Final = 16
# Reverse engineered flag bytes, sent verbatim
AUTH_CAPABILITY_FLAGS: Final = {0x1E: 0x01, 0x2D: 0x01}
AUTH_OFFSET_CLIENT_NAME: Final = 0x30
AUTH_CLIENT_NAME_MAX_LENGTH: Final = AUTH_PAYLOAD_LENGTH - AUTH_OFFSET_CLIENT_NAME
AUTH_REPLY_OFFSET_DEVICE_ID: Final = 0x00
AUTH_REPLY_OFFSET_KEY: Final = 0x04

# Sequence counter
SEQUENCE_MODULO: Final = 0x10000
SEQUENCE_INITIAL_MIN: Final = 0x8000
SEQUENCE_INITIAL_MAX: Final = 0xFFFF

# Packet type codes (offset 0x26)
PACKET_TYPE_HELLO: Final = 0x0006
PACKET_TYPE_HELLO_REPLY: Final = 0x0007
PACKET_TYPE_JOIN: Final = 0x0014
PACKET_TYPE_JOIN_REPLY: Final = 0x0015
PACKET_TYPE_AUTH: Final = 0x0065
PACKET_TYPE_AUTH_REPLY: Final = 0x03E9
PACKET_TYPE_COMMAND: Final = 0x006A
PACKET_TYPE_COMMAND_REPLY: Final = 0x03EE
