"""Broadlink packet encoder/decoder implementation.

Command and auth packets share one envelope: a 0x38-byte little-endian header
followed by the AES-encrypted payload. Discovery and Wi-Fi join packets are
cleartext broadcast frames with fields at absolute offsets; they use the same
checksum rule but no header magic and no encryption.
"""

from __future__ import annotations

from broadlink_lan.logging_abstraction import get_logger
from broadlink_lan.protocol.checksum import checksum, frame_checksum, insert_checksum_in_place, read_checksum
from broadlink_lan.protocol.cipher import CipherSession
from broadlink_lan.protocol.constants import (
    HEADER_LENGTH,
    MAGIC,
    OFFSET_COUNT,
    OFFSET_DEVICE_ID,
    OFFSET_DEVICE_TYPE,
    OFFSET_ERROR_CODE,
    OFFSET_MAC,
    OFFSET_PACKET_TYPE,
    OFFSET_PAYLOAD_CHECKSUM,
)
from broadlink_lan.protocol.exceptions import ChecksumMismatchError, MalformedPacketError
from broadlink_lan.protocol.packet_types import BroadcastFrame, PacketEnvelope, packet_type_name

MAC_LENGTH_BYTES = 6
U16_MAX = 0xFFFF
U32_MAX = 0xFFFFFFFF

logger = get_logger(__name__)


def _u16(frame: bytes | bytearray, offset: int) -> int:
    return int.from_bytes(frame[offset : offset + 2], "little")


def _put_u16(frame: bytearray, offset: int, value: int) -> None:
    frame[offset : offset + 2] = value.to_bytes(2, "little")


def _check_range(name: str, value: int, maximum: int) -> None:
    if not 0 <= value <= maximum:
        error_msg = f"{name} must be between 0 and 0x{maximum:x}, got {value}"
        raise ValueError(error_msg)


class BroadlinkCodec:
    """Broadlink envelope encoder/decoder.

    Provides static methods for encoding and decoding packets.
    All methods are stateless - the cipher is supplied by the caller.
    """

    @staticmethod
    def encode(
        type_code: int,
        sequence_counter: int,
        device_id: int,
        cipher: CipherSession,
        payload: bytes,
        *,
        device_type: int = 0,
        mac: bytes = bytes(MAC_LENGTH_BYTES),
        error_code: int = 0,
    ) -> bytes:
        """Encode a command/auth envelope.

        Layout (little-endian):
        - 0x00-0x07: magic
        - 0x20-0x21: checksum of the whole frame, computed with this field zero
        - 0x22-0x23: error code (0 in requests)
        - 0x24-0x25: device type
        - 0x26-0x27: packet type
        - 0x28-0x29: sequence counter
        - 0x2A-0x2F: MAC, reversed
        - 0x30-0x33: device id
        - 0x34-0x35: checksum of the plaintext payload
        - 0x38-    : encrypted payload

        Args:
            type_code: Packet type (PACKET_TYPE_AUTH, PACKET_TYPE_COMMAND, ...)
            sequence_counter: Counter value chosen by the caller (not mutated here)
            device_id: Device id from authentication, 0 before
            cipher: Session used to encrypt the payload
            payload: Plaintext payload of any length
            device_type: Device type code of the target
            mac: Target MAC in display order
            error_code: Status code (used when simulating a device)

        Returns:
            Complete frame

        Raises:
            ValueError: If a header field is out of range or mac is not 6 bytes

        """
        _check_range("type_code", type_code, U16_MAX)
        _check_range("sequence_counter", sequence_counter, U16_MAX)
        _check_range("device_id", device_id, U32_MAX)
        _check_range("device_type", device_type, U16_MAX)
        _check_range("error_code", error_code, U16_MAX)
        if len(mac) != MAC_LENGTH_BYTES:
            error_msg = f"mac must be {MAC_LENGTH_BYTES} bytes, got {len(mac)}"
            raise ValueError(error_msg)

        frame = bytearray(HEADER_LENGTH)
        frame[0 : len(MAGIC)] = MAGIC
        _put_u16(frame, OFFSET_ERROR_CODE, error_code)
        _put_u16(frame, OFFSET_DEVICE_TYPE, device_type)
        _put_u16(frame, OFFSET_PACKET_TYPE, type_code)
        _put_u16(frame, OFFSET_COUNT, sequence_counter)
        frame[OFFSET_MAC : OFFSET_MAC + MAC_LENGTH_BYTES] = bytes(mac)[::-1]
        frame[OFFSET_DEVICE_ID : OFFSET_DEVICE_ID + 4] = device_id.to_bytes(4, "little")
        _put_u16(frame, OFFSET_PAYLOAD_CHECKSUM, checksum(payload))

        frame.extend(cipher.encrypt(payload))
        frame_sum = insert_checksum_in_place(frame)

        logger.debug(
            "Encoded %s: count=0x%04x, payload_len=%d, frame_len=%d, checksum=0x%04x",
            packet_type_name(type_code),
            sequence_counter,
            len(payload),
            len(frame),
            frame_sum,
        )
        return bytes(frame)

    @staticmethod
    def decode(data: bytes, cipher: CipherSession) -> PacketEnvelope:
        """Decode a command/auth envelope.

        Steps:
        1. Validate minimum length (0x38 bytes) and magic
        2. Recompute and compare the frame checksum
        3. Extract header fields
        4. Decrypt the payload and verify its plaintext checksum

        A header-only frame (devices send these for errors and while locked)
        decodes to an empty payload without a decrypt attempt.

        Raises:
            MalformedPacketError: Frame shorter than the header or bad magic
            ChecksumMismatchError: Frame or payload checksum mismatch
            DecryptError: Ciphertext rejected by the cipher

        """
        if len(data) < HEADER_LENGTH:
            error_reason = "too_short"
            raise MalformedPacketError(error_reason, data)

        if bytes(data[0 : len(MAGIC)]) != MAGIC:
            error_reason = "invalid_magic"
            raise MalformedPacketError(error_reason, data)

        stored = read_checksum(data)
        calculated = frame_checksum(data)
        if stored != calculated:
            error_reason = "invalid_checksum"
            raise ChecksumMismatchError(error_reason, data, expected=calculated, actual=stored)

        payload_checksum = _u16(data, OFFSET_PAYLOAD_CHECKSUM)
        ciphertext = bytes(data[HEADER_LENGTH:])
        payload = b""
        if ciphertext:
            payload = cipher.decrypt(ciphertext)
            actual = checksum(payload)
            if actual != payload_checksum:
                error_reason = "invalid_payload_checksum"
                raise ChecksumMismatchError(error_reason, data, expected=actual, actual=payload_checksum)

        envelope = PacketEnvelope(
            type_code=_u16(data, OFFSET_PACKET_TYPE),
            sequence_counter=_u16(data, OFFSET_COUNT),
            device_id=int.from_bytes(data[OFFSET_DEVICE_ID : OFFSET_DEVICE_ID + 4], "little"),
            checksum=stored,
            payload=payload,
            device_type=_u16(data, OFFSET_DEVICE_TYPE),
            mac=bytes(data[OFFSET_MAC : OFFSET_MAC + MAC_LENGTH_BYTES])[::-1],
            error_code=_u16(data, OFFSET_ERROR_CODE),
            payload_checksum=payload_checksum,
        )

        logger.debug(
            "Decoded %s: count=0x%04x, error=0x%04x, payload_len=%d",
            envelope.type_name,
            envelope.sequence_counter,
            envelope.error_code,
            len(payload),
        )
        return envelope

    @staticmethod
    def encode_broadcast(type_code: int, frame: bytearray) -> bytes:
        """Stamp the packet type and checksum into a cleartext broadcast frame.

        Args:
            type_code: Packet type written at offset 0x26
            frame: Frame with all payload fields already in place (modified in place)

        Returns:
            Complete frame

        """
        _check_range("type_code", type_code, U16_MAX)
        if len(frame) < HEADER_LENGTH - 0x08:
            error_msg = f"Broadcast frame must be at least 0x{HEADER_LENGTH - 0x08:x} bytes, got {len(frame)}"
            raise ValueError(error_msg)

        _put_u16(frame, OFFSET_PACKET_TYPE, type_code)
        insert_checksum_in_place(frame)
        logger.debug("Encoded %s broadcast frame: len=%d", packet_type_name(type_code), len(frame))
        return bytes(frame)

    @staticmethod
    def decode_broadcast(data: bytes, min_length: int) -> BroadcastFrame:
        """Validate a cleartext broadcast frame.

        Raises:
            MalformedPacketError: Frame shorter than ``min_length``
            ChecksumMismatchError: Frame checksum mismatch

        """
        if len(data) < min_length:
            error_reason = "too_short"
            raise MalformedPacketError(error_reason, data)

        stored = read_checksum(data)
        calculated = frame_checksum(data)
        if stored != calculated:
            error_reason = "invalid_checksum"
            raise ChecksumMismatchError(error_reason, data, expected=calculated, actual=stored)

        return BroadcastFrame(type_code=_u16(data, OFFSET_PACKET_TYPE), checksum=stored, raw=bytes(data))
