"""Custom exception types for Broadlink transport layer errors.

This module defines the exception hierarchy for socket, discovery,
handshake and session errors, extending the protocol exceptions.
"""

from __future__ import annotations

from broadlink_lan.protocol.exceptions import BroadlinkProtocolError


class TransportError(BroadlinkProtocolError):
    """Socket-level failure (bind, send, receive, close).

    Attributes:
        reason: Specific failure reason
        address: Peer address the operation targeted, if any
    """

    def __init__(self, reason: str, address: tuple[str, int] | None = None):
        self.reason = reason
        self.address = address
        target = f" ({address[0]}:{address[1]})" if address else ""
        super().__init__(f"Transport error: {reason}{target}")


class AuthError(BroadlinkProtocolError):
    """Authentication handshake failed.

    Attributes:
        reason: Specific failure reason
        host: Device host the handshake targeted
    """

    def __init__(self, reason: str, host: str = ""):
        self.reason = reason
        self.host = host
        super().__init__(f"Authentication with {host or 'device'} failed: {reason}")


class AuthRejectedError(AuthError):
    """Device answered the handshake but refused it.

    Raised when:
    - Reply carries a non-zero error code
    - Reply has no payload (device is locked)
    - Reply payload carries an all-zero key
    """


class AuthTimeoutError(AuthError):
    """No handshake reply within the deadline."""


class ReplyTimeoutError(BroadlinkProtocolError):
    """No reply to a command within the deadline.

    Attributes:
        timeout_seconds: Timeout value that was exceeded
        sequence_counter: Counter of the command that went unanswered
    """

    def __init__(self, timeout_seconds: float, sequence_counter: int | None = None):
        self.timeout_seconds = timeout_seconds
        self.sequence_counter = sequence_counter
        super().__init__(f"No reply after {timeout_seconds}s")


class CommandRejectedError(BroadlinkProtocolError):
    """Device replied with a non-zero error code.

    Attributes:
        error_code: Device-reported status (header offset 0x22)
    """

    def __init__(self, error_code: int):
        self.error_code = error_code
        super().__init__(f"Device rejected command: error 0x{error_code:04x}")


class DeviceNotFoundError(BroadlinkProtocolError):
    """Unicast probe got no valid discovery reply.

    Attributes:
        host: Probed host
        timeout_seconds: Probe deadline
    """

    def __init__(self, host: str, timeout_seconds: float):
        self.host = host
        self.timeout_seconds = timeout_seconds
        super().__init__(f"No Broadlink device answered at {host} within {timeout_seconds}s")


class UnsupportedCommandError(BroadlinkProtocolError):
    """Command is not available for the device's family.

    Attributes:
        command: Command name
        device_type: Device type code of the target
    """

    def __init__(self, command: str, device_type: int):
        self.command = command
        self.device_type = device_type
        super().__init__(f"Device type 0x{device_type:04x} does not support {command}")
