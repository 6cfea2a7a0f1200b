"""Authentication handshake: trade the bootstrap key for a per-device session key."""

from __future__ import annotations

import os

from broadlink_lan import const
from broadlink_lan.correlation import ensure_correlation_id
from broadlink_lan.instrumentation import timed
from broadlink_lan.logging_abstraction import get_logger
from broadlink_lan.metrics import record_auth, record_decode_error, record_packet_recv, record_packet_sent
from broadlink_lan.protocol.cipher import CipherSession, Padding
from broadlink_lan.protocol.codec import BroadlinkCodec
from broadlink_lan.protocol.constants import (
    AUTH_CAPABILITY_FLAGS,
    AUTH_CLIENT_NAME_MAX_LENGTH,
    AUTH_OFFSET_CLIENT_ID,
    AUTH_OFFSET_CLIENT_NAME,
    AUTH_PAYLOAD_LENGTH,
    AUTH_REPLY_OFFSET_DEVICE_ID,
    AUTH_REPLY_OFFSET_KEY,
    CLIENT_ID_LENGTH,
    KEY_LENGTH,
    PACKET_TYPE_AUTH,
)
from broadlink_lan.protocol.exceptions import MalformedPacketError, PacketDecodeError
from broadlink_lan.transport.exceptions import AuthRejectedError, AuthTimeoutError
from broadlink_lan.transport.session import DeviceSession, initial_sequence, next_sequence
from broadlink_lan.transport.socket_abstraction import UDPEndpoint
from broadlink_lan.transport.types import DeviceDescriptor

logger = get_logger(__name__)


def build_auth_payload(client_id: bytes, client_name: str) -> bytes:
    """
    Build the 0x50-byte auth request payload.

    - 0x04-0x13: client id
    - 0x1E, 0x2D: capability flags (0x01 each)
    - 0x30-    : client name, UTF-8, truncated to fit

    Raises:
        ValueError: If client_id is not 16 bytes
    """
    if len(client_id) != CLIENT_ID_LENGTH:
        error_msg = f"client_id must be {CLIENT_ID_LENGTH} bytes, got {len(client_id)}"
        raise ValueError(error_msg)

    payload = bytearray(AUTH_PAYLOAD_LENGTH)
    payload[AUTH_OFFSET_CLIENT_ID : AUTH_OFFSET_CLIENT_ID + CLIENT_ID_LENGTH] = client_id
    for offset, value in AUTH_CAPABILITY_FLAGS.items():
        payload[offset] = value
    name = client_name.encode("utf-8")[:AUTH_CLIENT_NAME_MAX_LENGTH]
    payload[AUTH_OFFSET_CLIENT_NAME : AUTH_OFFSET_CLIENT_NAME + len(name)] = name
    return bytes(payload)


def parse_auth_reply(payload: bytes, host: str = "") -> tuple[int, bytes]:
    """
    Extract (device id, session key) from a decrypted auth reply.

    Raises:
        AuthRejectedError: Empty payload (device locked) or all-zero key
        MalformedPacketError: Payload too short to carry a key
    """
    if not payload:
        error_reason = "device_locked"
        raise AuthRejectedError(error_reason, host)

    key_end = AUTH_REPLY_OFFSET_KEY + KEY_LENGTH
    if len(payload) < key_end:
        error_reason = "auth_reply_too_short"
        raise MalformedPacketError(error_reason, payload)

    device_id = int.from_bytes(payload[AUTH_REPLY_OFFSET_DEVICE_ID : AUTH_REPLY_OFFSET_DEVICE_ID + 4], "little")
    key = bytes(payload[AUTH_REPLY_OFFSET_KEY:key_end])
    if not any(key):
        error_reason = "empty_key"
        raise AuthRejectedError(error_reason, host)
    return device_id, key


def resolve_padding(padding: Padding | str | None) -> Padding:
    """
    Pick the cipher padding for a handshake.

    An explicit ``padding`` must name a valid mode (ValueError otherwise). When
    it is omitted, BROADLINK_CIPHER_PADDING is used, falling back to zero
    padding if the configured value is unknown.
    """
    if padding is not None:
        return Padding(padding)
    try:
        return Padding(const.BROADLINK_CIPHER_PADDING)
    except ValueError:
        logger.warning(
            "Unknown BROADLINK_CIPHER_PADDING %r, using %s",
            const.BROADLINK_CIPHER_PADDING,
            Padding.ZERO.value,
        )
        return Padding.ZERO


@timed("authenticate")
def authenticate(
    descriptor: DeviceDescriptor,
    timeout: float,
    *,
    bind_address: str | None = None,
    client_id: bytes | None = None,
    client_name: str | None = None,
    padding: Padding | str | None = None,
    sequence_counter: int | None = None,
) -> DeviceSession:
    """
    Run the handshake and return an open session.

    The request is encrypted with the bootstrap key. The device answers with
    its id and a fresh key; the returned session owns the socket the
    handshake used.

    Args:
        descriptor: Device to authenticate with (from discovery)
        timeout: Seconds to wait for the reply
        bind_address: Local address to bind (default: all interfaces)
        client_id: 16-byte client id (default: random)
        client_name: Name shown by the device (default: BROADLINK_CLIENT_NAME)
        padding: Cipher padding (default: BROADLINK_CIPHER_PADDING)
        sequence_counter: Counter seed (default: random)

    Raises:
        AuthTimeoutError: No reply within ``timeout``
        AuthRejectedError: Device refused (error code, locked, empty key)
        PacketDecodeError: Reply failed checksum or decryption
        TransportError: Socket failure
    """
    ensure_correlation_id()
    host = descriptor.host
    label = descriptor.mac_str
    bootstrap = CipherSession.bootstrap(resolve_padding(padding))
    counter = next_sequence(initial_sequence() if sequence_counter is None else sequence_counter)
    payload = build_auth_payload(client_id or os.urandom(CLIENT_ID_LENGTH), client_name or const.BROADLINK_CLIENT_NAME)
    frame = BroadlinkCodec.encode(
        PACKET_TYPE_AUTH,
        counter,
        0,
        bootstrap,
        payload,
        device_type=descriptor.device_type,
        mac=descriptor.mac,
    )

    if descriptor.is_locked:
        logger.warning(
            "Device %s reports itself locked; authentication will likely be refused",
            descriptor,
            extra={"mac": label},
        )

    endpoint = UDPEndpoint(bind_address)
    try:
        endpoint.open()
        endpoint.connect(descriptor.address)
        endpoint.send(frame)
        record_packet_sent(label, "auth_request", "success")
        logger.debug("Auth request sent to %s", host, extra={"mac": label, "sequence_counter": counter})

        received = endpoint.recv(timeout)
        if received is None:
            record_auth(label, "timeout")
            error_reason = f"no reply within {timeout}s"
            raise AuthTimeoutError(error_reason, host)

        try:
            envelope = BroadlinkCodec.decode(received[0], bootstrap)
        except PacketDecodeError as e:
            record_decode_error(label, e.reason)
            record_auth(label, "decode_error")
            raise

        record_packet_recv(label, envelope.type_name, "success")
        if envelope.is_error:
            record_auth(label, "rejected")
            error_reason = f"device error 0x{envelope.error_code:04x}"
            raise AuthRejectedError(error_reason, host)

        try:
            device_id, key = parse_auth_reply(envelope.payload, host)
        except AuthRejectedError:
            record_auth(label, "rejected")
            raise
    except BaseException:
        endpoint.close()
        raise

    record_auth(label, "success")
    logger.info(
        "Authenticated with %s",
        descriptor,
        extra={"mac": label, "device_id": f"0x{device_id:08x}"},
    )
    return DeviceSession(descriptor, bootstrap.with_key(key), device_id, endpoint, sequence_counter=counter)
