"""Broadlink transport package - UDP endpoint, discovery, handshake and sessions."""

from broadlink_lan.transport.auth import authenticate
from broadlink_lan.transport.discovery import (
    Discovery,
    DiscoveryState,
    WirelessSecurity,
    discover,
    discover_async,
    join_network,
    probe,
)
from broadlink_lan.transport.exceptions import (
    AuthError,
    AuthRejectedError,
    AuthTimeoutError,
    CommandRejectedError,
    DeviceNotFoundError,
    ReplyTimeoutError,
    TransportError,
    UnsupportedCommandError,
)
from broadlink_lan.transport.session import DeviceSession
from broadlink_lan.transport.socket_abstraction import UDPEndpoint
from broadlink_lan.transport.types import DeviceDescriptor

__all__ = [
    "AuthError",
    "AuthRejectedError",
    "AuthTimeoutError",
    "CommandRejectedError",
    "DeviceDescriptor",
    "DeviceNotFoundError",
    "DeviceSession",
    "Discovery",
    "DiscoveryState",
    "ReplyTimeoutError",
    "TransportError",
    "UDPEndpoint",
    "UnsupportedCommandError",
    "WirelessSecurity",
    "authenticate",
    "discover",
    "discover_async",
    "join_network",
    "probe",
]
