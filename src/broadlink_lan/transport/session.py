"""Authenticated command/response session with one device."""

from __future__ import annotations

import random
import time
from types import TracebackType

from broadlink_lan.logging_abstraction import get_logger
from broadlink_lan.metrics import (
    record_decode_error,
    record_exchange_latency,
    record_packet_recv,
    record_packet_sent,
    record_reply_timeout,
    record_session_closed,
    record_session_opened,
)
from broadlink_lan.protocol.cipher import CipherSession
from broadlink_lan.protocol.codec import BroadlinkCodec
from broadlink_lan.protocol.constants import (
    PACKET_TYPE_COMMAND,
    SEQUENCE_INITIAL_MAX,
    SEQUENCE_INITIAL_MIN,
    SEQUENCE_MODULO,
)
from broadlink_lan.protocol.exceptions import PacketDecodeError
from broadlink_lan.transport.exceptions import CommandRejectedError, ReplyTimeoutError, TransportError
from broadlink_lan.transport.socket_abstraction import UDPEndpoint
from broadlink_lan.transport.types import DeviceDescriptor

logger = get_logger(__name__)


def initial_sequence() -> int:
    """Random starting value for a session's sequence counter."""
    return random.randint(SEQUENCE_INITIAL_MIN, SEQUENCE_INITIAL_MAX)


def next_sequence(counter: int) -> int:
    return (counter + 1) % SEQUENCE_MODULO


class DeviceSession:
    """Encrypted command channel to an authenticated device.

    Created by :func:`broadlink_lan.transport.auth.authenticate`. Every
    ``send_command`` advances the sequence counter by one (mod 2^16) before
    the frame is built. Not thread-safe: one caller at a time.
    """

    def __init__(
        self,
        descriptor: DeviceDescriptor,
        cipher: CipherSession,
        device_id: int,
        endpoint: UDPEndpoint,
        sequence_counter: int | None = None,
    ):
        """
        Args:
            descriptor: Device the session talks to
            cipher: Cipher keyed with the negotiated session key
            device_id: Id assigned by the device during authentication
            endpoint: Open endpoint connected to the device
            sequence_counter: Counter value of the last frame sent (random if None)
        """
        self.descriptor = descriptor
        self.cipher = cipher
        self.device_id = device_id
        self.endpoint = endpoint
        self._sequence_counter = initial_sequence() if sequence_counter is None else sequence_counter
        self._closed = False
        self._sent_at: float | None = None
        record_session_opened()

    @property
    def sequence_counter(self) -> int:
        """Counter value carried by the most recent frame."""
        return self._sequence_counter

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def _label(self) -> str:
        return self.descriptor.mac_str

    def send_command(self, payload: bytes) -> None:
        """
        Encrypt ``payload`` and send it as a command frame.

        Raises:
            TransportError: Socket failure or session closed
        """
        if self._closed:
            error_reason = "session_closed"
            raise TransportError(error_reason, self.descriptor.address)

        self._sequence_counter = next_sequence(self._sequence_counter)
        frame = BroadlinkCodec.encode(
            PACKET_TYPE_COMMAND,
            self._sequence_counter,
            self.device_id,
            self.cipher,
            payload,
            device_type=self.descriptor.device_type,
            mac=self.descriptor.mac,
        )
        try:
            self.endpoint.send(frame)
        except TransportError:
            record_packet_sent(self._label, "command_request", "error")
            raise
        record_packet_sent(self._label, "command_request", "success")
        self._sent_at = time.perf_counter()

    def receive_reply(self, timeout: float) -> bytes:
        """
        Wait for the next reply and return its decrypted payload.

        Raises:
            ReplyTimeoutError: Nothing arrived within ``timeout``
            ChecksumMismatchError: Corrupted reply
            DecryptError: Reply not decryptable with the session key
            CommandRejectedError: Device reported a non-zero error code
            TransportError: Socket failure or session closed
        """
        if self._closed:
            error_reason = "session_closed"
            raise TransportError(error_reason, self.descriptor.address)

        received = self.endpoint.recv(timeout)
        if received is None:
            record_reply_timeout(self._label)
            logger.warning(
                "No reply from %s within %.1fs",
                self.descriptor.host,
                timeout,
                extra={"mac": self._label, "sequence_counter": self._sequence_counter},
            )
            raise ReplyTimeoutError(timeout, self._sequence_counter)

        data, _sender = received
        try:
            envelope = BroadlinkCodec.decode(data, self.cipher)
        except PacketDecodeError as e:
            record_decode_error(self._label, e.reason)
            record_packet_recv(self._label, "command_reply", "decode_error")
            raise

        if self._sent_at is not None:
            record_exchange_latency(self._label, time.perf_counter() - self._sent_at)
            self._sent_at = None

        if envelope.is_error:
            record_packet_recv(self._label, envelope.type_name, "rejected")
            logger.debug(
                "Device %s returned error 0x%04x",
                self._label,
                envelope.error_code,
                extra={"sequence_counter": envelope.sequence_counter},
            )
            raise CommandRejectedError(envelope.error_code)

        record_packet_recv(self._label, envelope.type_name, "success")
        return envelope.payload

    def exchange(self, payload: bytes, timeout: float) -> bytes:
        """Send a command and wait for its reply."""
        self.send_command(payload)
        return self.receive_reply(timeout)

    def close(self) -> None:
        """Release the socket. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self.endpoint.close()
        record_session_closed()
        logger.debug("Closed session with %s", self._label)

    def __enter__(self) -> DeviceSession:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        status = "closed" if self._closed else "open"
        return f"DeviceSession({self.descriptor.mac_str} @ {self.descriptor.host}, id=0x{self.device_id:08x}, {status})"
