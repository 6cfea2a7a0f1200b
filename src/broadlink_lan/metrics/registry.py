"""Prometheus metrics registry for Broadlink LAN communication."""

import threading
from typing import Final

from prometheus_client import (  # type: ignore[import-untyped]
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

# Metric definitions
broadlink_packet_sent_total: Final = Counter(  # type: ignore[assignment]
    "broadlink_packet_sent_total",
    "Total packets sent",
    ["device", "packet_type", "outcome"],
)

broadlink_packet_recv_total: Final = Counter(  # type: ignore[assignment]
    "broadlink_packet_recv_total",
    "Total packets received",
    ["device", "packet_type", "outcome"],
)

broadlink_decode_errors_total: Final = Counter(  # type: ignore[assignment]
    "broadlink_decode_errors_total",
    "Total decode errors",
    ["device", "reason"],
)

broadlink_exchange_latency_seconds: Final = Histogram(  # type: ignore[assignment]
    "broadlink_exchange_latency_seconds",
    "Command round-trip latency in seconds",
    ["device"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

broadlink_reply_timeout_total: Final = Counter(  # type: ignore[assignment]
    "broadlink_reply_timeout_total",
    "Total command replies that never arrived",
    ["device"],
)

broadlink_auth_total: Final = Counter(  # type: ignore[assignment]
    "broadlink_auth_total",
    "Total authentication handshakes",
    ["device", "outcome"],
)

broadlink_devices_discovered_total: Final = Counter(  # type: ignore[assignment]
    "broadlink_devices_discovered_total",
    "Total devices reported by discovery",
    ["device_type"],
)

broadlink_discovery_duration_seconds: Final = Histogram(  # type: ignore[assignment]
    "broadlink_discovery_duration_seconds",
    "Discovery run duration in seconds",
    buckets=(0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)

broadlink_sessions_open: Final = Gauge(  # type: ignore[assignment]
    "broadlink_sessions_open",
    "Currently open device sessions",
)

_server_state = {"started": False}
_server_lock = threading.Lock()


def start_metrics_server(port: int = 9400) -> None:
    """Start Prometheus HTTP metrics server (idempotent)."""
    with _server_lock:
        if not _server_state["started"]:
            start_http_server(port)  # type: ignore[no-untyped-call]
            _server_state["started"] = True


def record_packet_sent(device: str, packet_type: str, outcome: str) -> None:
    """Record a sent packet."""
    broadlink_packet_sent_total.labels(device=device, packet_type=packet_type, outcome=outcome).inc()  # type: ignore[no-untyped-call]


def record_packet_recv(device: str, packet_type: str, outcome: str) -> None:
    """Record a received packet."""
    broadlink_packet_recv_total.labels(device=device, packet_type=packet_type, outcome=outcome).inc()  # type: ignore[no-untyped-call]


def record_decode_error(device: str, reason: str) -> None:
    """Record a decode error."""
    broadlink_decode_errors_total.labels(device=device, reason=reason).inc()  # type: ignore[no-untyped-call]


def record_exchange_latency(device: str, latency_seconds: float) -> None:
    """Record command round-trip latency."""
    broadlink_exchange_latency_seconds.labels(device=device).observe(latency_seconds)  # type: ignore[no-untyped-call]


def record_reply_timeout(device: str) -> None:
    """Record a command reply timeout."""
    broadlink_reply_timeout_total.labels(device=device).inc()  # type: ignore[no-untyped-call]


def record_auth(device: str, outcome: str) -> None:
    """Record an authentication handshake."""
    broadlink_auth_total.labels(device=device, outcome=outcome).inc()  # type: ignore[no-untyped-call]


def record_device_discovered(device_type: int) -> None:
    """Record a device reported by discovery."""
    broadlink_devices_discovered_total.labels(device_type=f"0x{device_type:04x}").inc()  # type: ignore[no-untyped-call]


def record_discovery_duration(duration_seconds: float) -> None:
    """Record how long a discovery run took."""
    broadlink_discovery_duration_seconds.observe(duration_seconds)  # type: ignore[no-untyped-call]


def record_session_opened() -> None:
    """Record a device session opened."""
    broadlink_sessions_open.inc()  # type: ignore[no-untyped-call]


def record_session_closed() -> None:
    """Record a device session closed."""
    broadlink_sessions_open.dec()  # type: ignore[no-untyped-call]
