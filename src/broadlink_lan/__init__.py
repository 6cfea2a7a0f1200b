"""Client for the Broadlink LAN protocol: discovery, authentication and encrypted commands."""

__version__ = "0.4.1"

from broadlink_lan.protocol import BroadlinkCodec, CipherSession, PacketEnvelope, Padding  # noqa: E402
from broadlink_lan.protocol.exceptions import (  # noqa: E402
    BroadlinkProtocolError,
    ChecksumMismatchError,
    DecryptError,
    MalformedPacketError,
    PacketDecodeError,
)
from broadlink_lan.transport import (  # noqa: E402
    AuthError,
    AuthRejectedError,
    AuthTimeoutError,
    CommandRejectedError,
    DeviceDescriptor,
    DeviceNotFoundError,
    DeviceSession,
    ReplyTimeoutError,
    TransportError,
    UnsupportedCommandError,
    WirelessSecurity,
    authenticate,
    discover,
    discover_async,
    join_network,
    probe,
)

__all__ = [
    "AuthError",
    "AuthRejectedError",
    "AuthTimeoutError",
    "BroadlinkCodec",
    "BroadlinkProtocolError",
    "ChecksumMismatchError",
    "CipherSession",
    "CommandRejectedError",
    "DecryptError",
    "DeviceDescriptor",
    "DeviceNotFoundError",
    "DeviceSession",
    "MalformedPacketError",
    "PacketDecodeError",
    "PacketEnvelope",
    "Padding",
    "ReplyTimeoutError",
    "TransportError",
    "UnsupportedCommandError",
    "WirelessSecurity",
    "__version__",
    "authenticate",
    "discover",
    "discover_async",
    "join_network",
    "probe",
]
