"""Device discovery and Wi-Fi provisioning over UDP broadcast.

Discovery broadcasts a cleartext hello frame to port 80 and collects replies
until the deadline passes. Each run moves through
``IDLE -> PROBING -> COLLECTING -> DONE``; replies that fail to decode are
logged, counted and skipped so one misbehaving device cannot hide the others.
"""

from __future__ import annotations

import asyncio
import socket
import time
from collections.abc import Generator, Iterator
from datetime import datetime
from enum import IntEnum, StrEnum

from broadlink_lan.const import LOCAL_TZ
from broadlink_lan.correlation import ensure_correlation_id
from broadlink_lan.instrumentation import timed, timed_async
from broadlink_lan.logging_abstraction import get_logger
from broadlink_lan.metrics import (
    record_decode_error,
    record_device_discovered,
    record_discovery_duration,
    record_packet_recv,
    record_packet_sent,
)
from broadlink_lan.protocol.codec import BroadlinkCodec
from broadlink_lan.protocol.constants import (
    BROADCAST_ADDRESS,
    DEVICE_PORT,
    HELLO_LENGTH,
    HELLO_OFFSET_DATETIME,
    HELLO_OFFSET_LOCAL_IP,
    HELLO_OFFSET_LOCAL_PORT,
    HELLO_REPLY_MIN_LENGTH,
    HELLO_REPLY_OFFSET_DEVICE_TYPE,
    HELLO_REPLY_OFFSET_LOCKED,
    HELLO_REPLY_OFFSET_MAC,
    HELLO_REPLY_OFFSET_NAME,
    JOIN_LENGTH,
    JOIN_MAX_FIELD_LENGTH,
    JOIN_OFFSET_PASSWORD,
    JOIN_OFFSET_PASSWORD_LENGTH,
    JOIN_OFFSET_SECURITY,
    JOIN_OFFSET_SSID,
    JOIN_OFFSET_SSID_LENGTH,
    PACKET_TYPE_HELLO,
    PACKET_TYPE_JOIN,
)
from broadlink_lan.protocol.exceptions import PacketDecodeError
from broadlink_lan.transport.exceptions import DeviceNotFoundError, TransportError
from broadlink_lan.transport.socket_abstraction import UDPEndpoint, local_ip_for
from broadlink_lan.transport.types import DeviceDescriptor

__all__ = [
    "Discovery",
    "DiscoveryState",
    "WirelessSecurity",
    "build_hello_frame",
    "build_join_frame",
    "discover",
    "discover_async",
    "join_network",
    "parse_hello_reply",
    "probe",
]

logger = get_logger(__name__)


class DiscoveryState(StrEnum):
    IDLE = "idle"
    PROBING = "probing"
    COLLECTING = "collecting"
    DONE = "done"


class WirelessSecurity(IntEnum):
    """Security mode byte of the join frame (offset 0x86)."""

    NONE = 0
    WEP = 1
    WPA1 = 2
    WPA2 = 3
    WPA = 4  # WPA1/WPA2 mixed


def build_hello_frame(local_ip: str, local_port: int, now: datetime | None = None) -> bytes:
    """
    Build the cleartext discovery probe.

    Layout (little-endian, absolute offsets):
    - 0x08-0x0B: UTC offset in whole hours (signed)
    - 0x0C-0x0D: year
    - 0x0E: minute, 0x0F: hour, 0x10: two-digit year
    - 0x11: ISO weekday, 0x12: day, 0x13: month
    - 0x18-0x1B: local IPv4 address, reversed
    - 0x1C-0x1D: local port
    - 0x20-0x21: checksum
    - 0x26: packet type (0x06)

    Args:
        local_ip: IPv4 address devices should answer to
        local_port: UDP port devices should answer to
        now: Timestamp to embed (defaults to the current time in the local zone)
    """
    if now is None:
        now = datetime.now(LOCAL_TZ)

    offset = now.utcoffset()
    offset_hours = int(offset.total_seconds() / 3600) if offset is not None else 0

    frame = bytearray(HELLO_LENGTH)
    dt_at = HELLO_OFFSET_DATETIME
    frame[dt_at : dt_at + 4] = offset_hours.to_bytes(4, "little", signed=True)
    frame[dt_at + 4 : dt_at + 6] = now.year.to_bytes(2, "little")
    frame[dt_at + 6] = now.minute
    frame[dt_at + 7] = now.hour
    frame[dt_at + 8] = now.year % 100
    frame[dt_at + 9] = now.isoweekday()
    frame[dt_at + 10] = now.day
    frame[dt_at + 11] = now.month
    frame[HELLO_OFFSET_LOCAL_IP : HELLO_OFFSET_LOCAL_IP + 4] = socket.inet_aton(local_ip)[::-1]
    frame[HELLO_OFFSET_LOCAL_PORT : HELLO_OFFSET_LOCAL_PORT + 2] = local_port.to_bytes(2, "little")
    return BroadlinkCodec.encode_broadcast(PACKET_TYPE_HELLO, frame)


def parse_hello_reply(data: bytes, sender: tuple[str, int]) -> DeviceDescriptor:
    """
    Turn a discovery reply into a descriptor.

    The device is addressed by the packet source, not by the IP embedded in
    the reply.

    Raises:
        MalformedPacketError: Reply too short
        ChecksumMismatchError: Reply checksum mismatch
    """
    frame = BroadlinkCodec.decode_broadcast(data, HELLO_REPLY_MIN_LENGTH).raw

    device_type = int.from_bytes(frame[HELLO_REPLY_OFFSET_DEVICE_TYPE : HELLO_REPLY_OFFSET_DEVICE_TYPE + 2], "little")
    mac = frame[HELLO_REPLY_OFFSET_MAC : HELLO_REPLY_OFFSET_MAC + 6][::-1]
    name = frame[HELLO_REPLY_OFFSET_NAME:].split(b"\x00", 1)[0].decode("utf-8", errors="replace")
    is_locked = len(frame) > HELLO_REPLY_OFFSET_LOCKED and bool(frame[HELLO_REPLY_OFFSET_LOCKED])

    return DeviceDescriptor(
        address=sender,
        mac=mac,
        device_type=device_type,
        name=name,
        is_locked=is_locked,
    )


class Discovery:
    """One discovery run.

    Iterating the run sends the probe and yields descriptors as replies
    arrive. A run can be iterated once; ``state`` reports progress.
    """

    def __init__(
        self,
        timeout: float,
        *,
        bind_address: str | None = None,
        destination: tuple[str, int] = (BROADCAST_ADDRESS, DEVICE_PORT),
    ):
        self.timeout = timeout
        self.bind_address = bind_address
        self.destination = destination
        self.state = DiscoveryState.IDLE
        self.rejected = 0
        self._seen: set[bytes] = set()
        self._started = False

    def __iter__(self) -> Generator[DeviceDescriptor]:
        if self._started:
            error_msg = f"Discovery run already {self.state.value}"
            raise RuntimeError(error_msg)
        self._started = True
        ensure_correlation_id()
        return self._run()

    def _run(self) -> Generator[DeviceDescriptor]:
        start_time = time.perf_counter()
        deadline = time.monotonic() + max(self.timeout, 0.0)
        broadcast = self.destination[0] == BROADCAST_ADDRESS
        endpoint = UDPEndpoint(self.bind_address, broadcast=broadcast)
        try:
            endpoint.open()
            self.state = DiscoveryState.PROBING
            local_ip, local_port = endpoint.local_address
            if local_ip == "0.0.0.0":
                local_ip = local_ip_for(None if broadcast else self.destination[0])
            endpoint.send(build_hello_frame(local_ip, local_port), self.destination)
            record_packet_sent("broadcast" if broadcast else self.destination[0], "discovery_probe", "success")
            logger.debug(
                "Discovery probe sent to %s:%d",
                *self.destination,
                extra={"local_ip": local_ip, "local_port": local_port, "timeout": self.timeout},
            )

            self.state = DiscoveryState.COLLECTING
            while (remaining := deadline - time.monotonic()) > 0:
                received = endpoint.recv(remaining)
                if received is None:
                    break
                descriptor = self.accept_reply(*received)
                if descriptor is not None:
                    yield descriptor
        finally:
            endpoint.close()
            self.state = DiscoveryState.DONE
            duration = time.perf_counter() - start_time
            record_discovery_duration(duration)
            logger.debug(
                "Discovery finished: %d device(s), %d rejected reply(ies) in %.1fms",
                len(self._seen),
                self.rejected,
                duration * 1000,
            )

    def accept_reply(self, data: bytes, sender: tuple[str, int]) -> DeviceDescriptor | None:
        try:
            descriptor = parse_hello_reply(data, sender)
        except PacketDecodeError as e:
            self.rejected += 1
            record_decode_error(sender[0], e.reason)
            record_packet_recv(sender[0], "discovery_reply", "decode_error")
            logger.warning(
                "Skipping discovery reply from %s: %s",
                sender[0],
                e,
                extra={"host": sender[0], "reason": e.reason, "bytes": len(data), "preview": e.data_preview.hex()},
            )
            return None

        record_packet_recv(sender[0], "discovery_reply", "success")
        if descriptor.mac in self._seen:
            logger.debug("Duplicate discovery reply from %s", descriptor.mac_str, extra={"host": sender[0]})
            return None

        self._seen.add(descriptor.mac)
        record_device_discovered(descriptor.device_type)
        logger.info(
            "Discovered %s",
            descriptor,
            extra={"host": descriptor.host, "mac": descriptor.mac_str, "device_type": f"0x{descriptor.device_type:04x}"},
        )
        return descriptor


def discover(timeout: float, *, bind_address: str | None = None) -> Iterator[DeviceDescriptor]:
    """
    Broadcast a discovery probe and yield a descriptor per responding device.

    The generator is lazy: the probe goes out on first ``next()``. Iteration
    ends once ``timeout`` seconds have elapsed; an empty network yields nothing.

    Raises:
        TransportError: If the socket cannot be bound or the probe cannot be sent
    """
    return iter(Discovery(timeout, bind_address=bind_address))


@timed("probe")
def probe(
    host: str,
    timeout: float,
    *,
    bind_address: str | None = None,
    port: int = DEVICE_PORT,
) -> DeviceDescriptor:
    """
    Send the discovery probe to a single host and return its descriptor.

    Raises:
        DeviceNotFoundError: No valid reply within ``timeout``
        TransportError: Socket failure
    """
    run = Discovery(timeout, bind_address=bind_address, destination=(host, port))
    descriptors = iter(run)
    try:
        return next(descriptors)
    except StopIteration:
        raise DeviceNotFoundError(host, timeout) from None
    finally:
        descriptors.close()


class _DiscoveryProtocol(asyncio.DatagramProtocol):
    def __init__(self, run: Discovery):
        self.run = run
        self.found: list[DeviceDescriptor] = []
        self.error: Exception | None = None

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        descriptor = self.run.accept_reply(data, (str(addr[0]), int(addr[1])))
        if descriptor is not None:
            self.found.append(descriptor)

    def error_received(self, exc: Exception) -> None:
        logger.warning("Discovery socket error: %s", exc, extra={"error": str(exc)})
        self.error = exc


@timed_async("discover_async")
async def discover_async(timeout: float, *, bind_address: str | None = None) -> list[DeviceDescriptor]:
    """
    Asyncio variant of :func:`discover`.

    Collects every reply that arrives within ``timeout`` and returns them in
    arrival order, duplicates removed.

    Raises:
        TransportError: If the socket cannot be bound, the probe cannot be sent
            or the socket reported an error while collecting
    """
    ensure_correlation_id()
    loop = asyncio.get_running_loop()
    run = Discovery(timeout, bind_address=bind_address)
    start_time = time.perf_counter()
    try:
        transport, protocol = await loop.create_datagram_endpoint(
            lambda: _DiscoveryProtocol(run),
            local_addr=(bind_address or "0.0.0.0", 0),
            family=socket.AF_INET,
            allow_broadcast=True,
        )
    except OSError as e:
        error_reason = f"bind_failed: {e}"
        raise TransportError(error_reason) from e

    try:
        run.state = DiscoveryState.PROBING
        local_ip, local_port = transport.get_extra_info("sockname")[:2]
        if local_ip == "0.0.0.0":
            local_ip = local_ip_for()
        try:
            transport.sendto(build_hello_frame(local_ip, local_port), run.destination)
        except OSError as e:
            error_reason = f"send_failed: {e}"
            raise TransportError(error_reason, run.destination) from e
        record_packet_sent("broadcast", "discovery_probe", "success")

        run.state = DiscoveryState.COLLECTING
        await asyncio.sleep(max(timeout, 0.0))
        if protocol.error is not None:
            error_reason = f"recv_failed: {protocol.error}"
            raise TransportError(error_reason) from protocol.error
    finally:
        transport.close()
        run.state = DiscoveryState.DONE
        record_discovery_duration(time.perf_counter() - start_time)

    return protocol.found


def build_join_frame(ssid: str, password: str, security_mode: WirelessSecurity) -> bytes:
    """
    Build the cleartext Wi-Fi join frame.

    Layout (absolute offsets):
    - 0x26: packet type (0x14)
    - 0x44-0x63: SSID, NUL padded
    - 0x64-0x83: password, NUL padded
    - 0x84: SSID length, 0x85: password length
    - 0x86: security mode

    Raises:
        ValueError: SSID empty, or SSID/password longer than 32 bytes
    """
    ssid_bytes = ssid.encode("utf-8")
    password_bytes = b"" if security_mode is WirelessSecurity.NONE else password.encode("utf-8")
    if not ssid_bytes:
        error_msg = "SSID must not be empty"
        raise ValueError(error_msg)
    if len(ssid_bytes) > JOIN_MAX_FIELD_LENGTH or len(password_bytes) > JOIN_MAX_FIELD_LENGTH:
        error_msg = f"SSID and password are limited to {JOIN_MAX_FIELD_LENGTH} bytes"
        raise ValueError(error_msg)

    frame = bytearray(JOIN_LENGTH)
    frame[JOIN_OFFSET_SSID : JOIN_OFFSET_SSID + len(ssid_bytes)] = ssid_bytes
    frame[JOIN_OFFSET_PASSWORD : JOIN_OFFSET_PASSWORD + len(password_bytes)] = password_bytes
    frame[JOIN_OFFSET_SSID_LENGTH] = len(ssid_bytes)
    frame[JOIN_OFFSET_PASSWORD_LENGTH] = len(password_bytes)
    frame[JOIN_OFFSET_SECURITY] = int(security_mode)
    return BroadlinkCodec.encode_broadcast(PACKET_TYPE_JOIN, frame)


def join_network(
    ssid: str,
    password: str,
    security_mode: WirelessSecurity,
    *,
    bind_address: str | None = None,
) -> None:
    """
    Broadcast Wi-Fi credentials to a device in AP (provisioning) mode.

    The host must be connected to the device's own access point. Devices do
    not acknowledge reliably, so this is fire-and-forget.

    Raises:
        ValueError: Invalid SSID/password
        TransportError: Socket failure
    """
    frame = build_join_frame(ssid, password, WirelessSecurity(security_mode))
    with UDPEndpoint(bind_address, broadcast=True) as endpoint:
        endpoint.send(frame, (BROADCAST_ADDRESS, DEVICE_PORT))
    record_packet_sent("broadcast", "join", "success")
    logger.info(
        "Sent Wi-Fi join request for SSID %r",
        ssid,
        extra={"ssid": ssid, "security": WirelessSecurity(security_mode).name},
    )
