"""Blocking UDP socket abstraction with deadlines and instrumentation."""

from __future__ import annotations

import socket
import time
from types import TracebackType

from broadlink_lan.logging_abstraction import get_logger
from broadlink_lan.protocol.constants import DEVICE_PORT, RECV_BUFFER_SIZE
from broadlink_lan.transport.exceptions import TransportError

logger = get_logger(__name__)

# Any routable address works; connect() on a UDP socket sends nothing
_ROUTE_PROBE_ADDRESS = ("10.255.255.255", DEVICE_PORT)


def local_ip_for(target: str | None = None) -> str:
    """
    Return the local IPv4 address the OS would use to reach ``target``.

    Falls back to ``0.0.0.0`` when no route exists (device replies are
    addressed to the packet source, so the advertised address is informational).
    """
    probe = (target, DEVICE_PORT) if target else _ROUTE_PROBE_ADDRESS
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.connect(probe)
        return str(sock.getsockname()[0])
    except OSError:
        return "0.0.0.0"
    finally:
        sock.close()


class UDPEndpoint:
    """UDP socket with per-call receive deadlines.

    Used in two modes:
    - broadcast: unconnected, ``SO_BROADCAST`` set, ``send`` takes an address
    - connected: ``connect`` pins the peer, datagrams from other hosts are dropped by the OS
    """

    def __init__(
        self,
        bind_address: str | None = None,
        *,
        broadcast: bool = False,
        max_read_size: int = RECV_BUFFER_SIZE,
    ):
        """
        Initialize endpoint parameters. The socket is created by ``open``.

        Args:
            bind_address: Local IPv4 address to bind (None binds all interfaces)
            broadcast: Enable sending to the broadcast address
            max_read_size: Maximum datagram size to read
        """
        self.bind_address = bind_address
        self.broadcast = broadcast
        self.max_read_size = max_read_size
        self.peer: tuple[str, int] | None = None
        self._sock: socket.socket | None = None

    def open(self) -> UDPEndpoint:
        """Create and bind the socket to an ephemeral port.

        Raises:
            TransportError: If the socket cannot be created or bound
        """
        if self._sock is not None:
            return self

        bind_to = (self.bind_address or "", 0)
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        except OSError as e:
            error_reason = f"socket_failed: {e}"
            raise TransportError(error_reason) from e

        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            if self.broadcast:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            sock.bind(bind_to)
        except OSError as e:
            sock.close()
            error_reason = f"bind_failed: {e}"
            raise TransportError(error_reason, bind_to) from e

        self._sock = sock
        logger.debug(
            "Opened UDP endpoint on %s:%d",
            *self.local_address,
            extra={"bind_address": self.bind_address, "broadcast": self.broadcast},
        )
        return self

    def connect(self, address: tuple[str, int]) -> None:
        """Pin the endpoint to a single peer.

        Raises:
            TransportError: If the peer address is unusable
        """
        sock = self._require_socket()
        try:
            sock.connect(address)
        except OSError as e:
            error_reason = f"connect_failed: {e}"
            raise TransportError(error_reason, address) from e
        self.peer = address
        logger.debug("UDP endpoint connected to %s:%d", *address, extra={"host": address[0], "port": address[1]})

    @property
    def local_address(self) -> tuple[str, int]:
        sock = self._require_socket()
        host, port = sock.getsockname()[:2]
        return str(host), int(port)

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    def send(self, data: bytes, address: tuple[str, int] | None = None) -> None:
        """
        Send one datagram.

        Args:
            data: Datagram payload
            address: Destination; required unless the endpoint is connected

        Raises:
            TransportError: On socket failure
        """
        sock = self._require_socket()
        target = address or self.peer
        if target is None:
            error_reason = "no_destination"
            raise TransportError(error_reason)

        start_time = time.perf_counter()
        try:
            if address is None:
                sock.send(data)
            else:
                sock.sendto(data, address)
        except OSError as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "Send to %s:%d failed after %.1fms: %s",
                target[0],
                target[1],
                elapsed_ms,
                e,
                extra={"host": target[0], "port": target[1], "elapsed_ms": elapsed_ms, "error": str(e)},
            )
            error_reason = f"send_failed: {e}"
            raise TransportError(error_reason, target) from e

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "Sent %d bytes to %s:%d in %.1fms",
            len(data),
            target[0],
            target[1],
            elapsed_ms,
            extra={"bytes": len(data), "host": target[0], "port": target[1], "elapsed_ms": elapsed_ms},
        )

    def recv(self, timeout: float) -> tuple[bytes, tuple[str, int]] | None:
        """
        Receive one datagram, waiting at most ``timeout`` seconds.

        Returns:
            (data, sender address), or None when the deadline passes

        Raises:
            TransportError: On socket failure
        """
        sock = self._require_socket()
        if timeout <= 0:
            return None

        start_time = time.perf_counter()
        try:
            sock.settimeout(timeout)
            data, sender = sock.recvfrom(self.max_read_size)
        except TimeoutError:
            return None
        except OSError as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "Receive failed after %.1fms: %s",
                elapsed_ms,
                e,
                extra={"peer": self.peer, "elapsed_ms": elapsed_ms, "error": str(e)},
            )
            error_reason = f"recv_failed: {e}"
            raise TransportError(error_reason, self.peer) from e

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        sender_address = (str(sender[0]), int(sender[1]))
        logger.debug(
            "Received %d bytes from %s:%d in %.1fms",
            len(data),
            sender_address[0],
            sender_address[1],
            elapsed_ms,
            extra={"bytes": len(data), "host": sender_address[0], "port": sender_address[1], "elapsed_ms": elapsed_ms},
        )
        return data, sender_address

    def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self._sock is None:
            return
        try:
            self._sock.close()
        except OSError as e:
            logger.warning("Error closing UDP endpoint: %s", e, extra={"error": str(e), "peer": self.peer})
        finally:
            self._sock = None

    def _require_socket(self) -> socket.socket:
        if self._sock is None:
            error_reason = "endpoint_closed"
            raise TransportError(error_reason, self.peer)
        return self._sock

    def __enter__(self) -> UDPEndpoint:
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        status = "open" if self._sock is not None else "closed"
        peer = f" -> {self.peer[0]}:{self.peer[1]}" if self.peer else ""
        return f"UDPEndpoint({self.bind_address or '*'}{peer}, {status})"
