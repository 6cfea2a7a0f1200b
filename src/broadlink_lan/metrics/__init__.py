"""Metrics module."""

from .registry import (
    record_auth,
    record_decode_error,
    record_device_discovered,
    record_discovery_duration,
    record_exchange_latency,
    record_packet_recv,
    record_packet_sent,
    record_reply_timeout,
    record_session_closed,
    record_session_opened,
    start_metrics_server,
)

__all__ = [
    "record_auth",
    "record_decode_error",
    "record_device_discovered",
    "record_discovery_duration",
    "record_exchange_latency",
    "record_packet_recv",
    "record_packet_sent",
    "record_reply_timeout",
    "record_session_closed",
    "record_session_opened",
    "start_metrics_server",
]
