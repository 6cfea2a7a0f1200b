"""Reference frames for protocol validation testing.

The literal frames below were assembled byte by byte from the documented
layouts, with checksums worked out by hand.

## Frames

| Name                      | Type   | Bytes | Checksum | Notes                                   |
|---------------------------|--------|-------|----------|-----------------------------------------|
| HELLO_2024_03_15          | 0x0006 | 48    | 0xC277   | 14:30 UTC, 192.168.1.10:54321           |
| COMMAND_REPLY_HEADER_ONLY | 0x03EE | 56    | 0xC7A7   | error 0xFFF9, no payload, RM2 34:ea:... |
| COMMAND_BOOTSTRAP_32      | 0x006A | 88    | 0xD3A9   | bytes 0x00-0x1F under the bootstrap key |

The COMMAND_BOOTSTRAP_32 ciphertext was produced with
`openssl enc -aes-128-cbc -nopad` using the bootstrap key and protocol IV.
"""

from __future__ import annotations

from datetime import UTC, datetime

from broadlink_lan.protocol.checksum import insert_checksum_in_place

__all__ = [
    "A1_DEVICE_TYPE",
    "COMMAND_REPLY_HEADER_ONLY",
    "COMMAND_BOOTSTRAP_32",
    "COMMAND_BOOTSTRAP_32_CHECKSUM",
    "COMMAND_BOOTSTRAP_32_PAYLOAD",
    "COMMAND_REPLY_HEADER_ONLY_CHECKSUM",
    "DEVICE_HOST",
    "DEVICE_ID",
    "HELLO_2024_03_15",
    "HELLO_2024_03_15_CHECKSUM",
    "HELLO_LOCAL_IP",
    "HELLO_LOCAL_PORT",
    "HELLO_TIMESTAMP",
    "MP1_DEVICE_TYPE",
    "REFERENCE_MAC",
    "RM2_DEVICE_TYPE",
    "RM2_PRO_DEVICE_TYPE",
    "RM4_DEVICE_TYPE",
    "SESSION_KEY",
    "SP2_DEVICE_TYPE",
    "make_hello_reply",
]

# Discovery probe sent 2024-03-15 14:30 UTC (a Friday) from 192.168.1.10:54321
HELLO_TIMESTAMP = datetime(2024, 3, 15, 14, 30, tzinfo=UTC)
HELLO_LOCAL_IP = "192.168.1.10"
HELLO_LOCAL_PORT = 54321
HELLO_2024_03_15_CHECKSUM = 0xC277

HELLO_2024_03_15 = bytes.fromhex(
    "00000000 00000000 00000000 e8071e0e 18050f03 00000000"  # 0x00-0x17: utc offset 0, date/time
    "0a01a8c0 31d40000 77c20000 00000600 00000000 00000000"  # 0x18-0x2F: ip, port, checksum, type
)

# Values a device hands out after authentication
SESSION_KEY = bytes.fromhex("00112233445566778899aabbccddeeff")
DEVICE_ID = 0x0001A2B3
DEVICE_HOST = "192.168.1.50"

# Device types, one per command family
RM2_DEVICE_TYPE = 0x2712  # IR + temperature
RM2_PRO_DEVICE_TYPE = 0x272A  # adds RF
RM4_DEVICE_TYPE = 0x51DA  # length-prefixed payloads
SP2_DEVICE_TYPE = 0x2711
A1_DEVICE_TYPE = 0x2714
MP1_DEVICE_TYPE = 0x4EB5

# RM2 (0x2712) at 34:ea:34:01:02:03 answering count 0x8001 with error 0xFFF9
REFERENCE_MAC = bytes.fromhex("34ea34010203")
COMMAND_REPLY_HEADER_ONLY_CHECKSUM = 0xC7A7

COMMAND_REPLY_HEADER_ONLY = bytes.fromhex(
    "5aa5aa555aa5aa55 0000000000000000"  # 0x00-0x0F: magic
    "0000000000000000 0000000000000000"  # 0x10-0x1F
    "a7c7 f9ff 1227 ee03 0180 03020134ea34"  # 0x20-0x2F: checksum, error, devtype, type, count, mac
    "01000000 00000000"  # 0x30-0x37: device id, payload checksum
)

# Command 0x6A, count 0x8001, device id 0, RM2 34:ea:34:01:02:03, zero padding
COMMAND_BOOTSTRAP_32_PAYLOAD = bytes(range(32))
COMMAND_BOOTSTRAP_32_CHECKSUM = 0xD3A9

COMMAND_BOOTSTRAP_32 = bytes.fromhex(
    "5aa5aa555aa5aa55 0000000000000000"  # 0x00-0x0F: magic
    "0000000000000000 0000000000000000"  # 0x10-0x1F
    "a9d3 0000 1227 6a00 0180 03020134ea34"  # 0x20-0x2F: checksum, error, devtype, type, count, mac
    "00000000 9fc0 0000"  # 0x30-0x37: device id, payload checksum
    "6652475b5619177997b8941ecc2fbf7a"  # 0x38-0x47: first cipher block
    "7b1c95d35d6519397297d41d0a82eb11"  # 0x48-0x57: second cipher block
)


def make_hello_reply(
    device_type: int,
    mac: bytes = REFERENCE_MAC,
    name: str = "",
    *,
    locked: bool = False,
    embedded_ip: str = "10.0.0.99",
    length: int = 0x80,
) -> bytes:
    """Build a discovery reply the way device firmware lays it out."""
    frame = bytearray(max(length, 0x80))
    frame[0x26:0x28] = (0x0007).to_bytes(2, "little")
    frame[0x34:0x36] = device_type.to_bytes(2, "little")
    frame[0x36:0x3A] = bytes(int(part) for part in embedded_ip.split("."))[::-1]
    frame[0x3A:0x40] = mac[::-1]
    encoded_name = name.encode("utf-8")
    frame[0x40 : 0x40 + len(encoded_name)] = encoded_name
    frame[0x7F] = 1 if locked else 0
    frame = frame[:length]
    insert_checksum_in_place(frame)
    return bytes(frame)
