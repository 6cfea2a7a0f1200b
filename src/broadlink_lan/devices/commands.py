"""Family-aware command helpers on top of a DeviceSession.

Each helper checks the device's capabilities in the catalog, builds the
family's payload layout, runs one exchange and decodes the reply.
"""

from __future__ import annotations

import struct
import time
from collections.abc import Callable
from dataclasses import dataclass

from broadlink_lan import const
from broadlink_lan.devices.catalog import Capability, DeviceModel, classify
from broadlink_lan.instrumentation import timed
from broadlink_lan.logging_abstraction import get_logger
from broadlink_lan.protocol.exceptions import MalformedPacketError
from broadlink_lan.transport.exceptions import CommandRejectedError, ReplyTimeoutError, UnsupportedCommandError
from broadlink_lan.transport.session import DeviceSession

logger = get_logger(__name__)

# Remote (RM) command words
RM_CMD_TEMPERATURE = 0x01
RM_CMD_SEND_DATA = 0x02
RM_CMD_ENTER_LEARNING = 0x03
RM_CMD_CHECK_DATA = 0x04
RM_CMD_SWEEP_FREQUENCY = 0x19
RM_CMD_CHECK_FREQUENCY = 0x1A
RM_CMD_FIND_RF_PACKET = 0x1B
RM_CMD_CANCEL_SWEEP = 0x1E
RM4_CMD_SENSORS = 0x24

# Switch (SP2) and sensor (A1) request bytes
SWITCH_SET_POWER = 0x02
SWITCH_CHECK_POWER = 0x01
SENSOR_CHECK = 0x01
FIXED_PAYLOAD_LENGTH = 16

LIGHT_LEVELS = ("dark", "dim", "normal", "bright")
AIR_QUALITY_LEVELS = ("excellent", "good", "normal", "bad")
NOISE_LEVELS = ("quiet", "normal", "noisy")


@dataclass(frozen=True)
class PowerState:
    power: bool
    nightlight: bool


@dataclass(frozen=True)
class SensorReading:
    """A1 environment sensor reading."""

    temperature: float
    humidity: float
    light: str
    air_quality: str
    noise: str


def _timeout(timeout: float | None) -> float:
    return const.BROADLINK_REPLY_TIMEOUT if timeout is None else timeout


def _require(session: DeviceSession, capability: Capability, command: str) -> DeviceModel:
    model = classify(session.descriptor.device_type)
    if not model.supports(capability):
        raise UnsupportedCommandError(command, session.descriptor.device_type)
    return model


def _level(levels: tuple[str, ...], value: int) -> str:
    return levels[value] if value < len(levels) else "unknown"


def remote_request(model: DeviceModel, command: int, data: bytes = b"") -> bytes:
    """Frame an RM command: command word, optionally preceded by the RM4 length prefix."""
    if model.length_prefixed:
        return struct.pack("<HI", len(data) + 4, command) + data
    return struct.pack("<I", command) + data


def remote_reply(model: DeviceModel, payload: bytes) -> bytes:
    """Strip the RM reply header (and RM4 length prefix) from a decrypted payload."""
    if model.length_prefixed:
        if len(payload) < 6:
            error_reason = "rm4_reply_too_short"
            raise MalformedPacketError(error_reason, payload)
        length = int.from_bytes(payload[0:2], "little")
        return payload[6 : length + 2]
    return payload[4:]


def _remote_exchange(
    session: DeviceSession,
    model: DeviceModel,
    command: int,
    data: bytes = b"",
    timeout: float | None = None,
) -> bytes:
    reply = session.exchange(remote_request(model, command, data), _timeout(timeout))
    return remote_reply(model, reply)


# Remotes


def send_code(session: DeviceSession, code: bytes, timeout: float | None = None) -> None:
    """Transmit a learned IR/RF code."""
    model = _require(session, Capability.IR, "send_code")
    _remote_exchange(session, model, RM_CMD_SEND_DATA, code, timeout)
    logger.debug("Sent %d byte code to %s", len(code), session.descriptor.mac_str)


def enter_learning(session: DeviceSession, timeout: float | None = None) -> None:
    """Put the remote into IR learning mode."""
    model = _require(session, Capability.IR, "enter_learning")
    _remote_exchange(session, model, RM_CMD_ENTER_LEARNING, timeout=timeout)


def check_data(session: DeviceSession, timeout: float | None = None) -> bytes:
    """
    Fetch the last learned code.

    Raises:
        CommandRejectedError: Nothing has been learned yet
    """
    model = _require(session, Capability.IR, "check_data")
    return _remote_exchange(session, model, RM_CMD_CHECK_DATA, timeout=timeout)


def _poll_for_code(session: DeviceSession, timeout: float, poll_interval: float, reply_timeout: float | None) -> bytes:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        time.sleep(poll_interval)
        try:
            code = check_data(session, reply_timeout)
        except CommandRejectedError as e:
            logger.debug("No code yet (device error 0x%04x)", e.error_code)
            continue
        if any(code):
            return code
    raise ReplyTimeoutError(timeout)


@timed("learn_ir", threshold_ms=60_000)
def learn_ir(
    session: DeviceSession,
    timeout: float = 30.0,
    *,
    poll_interval: float = 1.0,
    reply_timeout: float | None = None,
) -> bytes:
    """
    Enter learning mode and poll until an IR code arrives.

    Raises:
        ReplyTimeoutError: No code within ``timeout``
    """
    enter_learning(session, reply_timeout)
    return _poll_for_code(session, timeout, poll_interval, reply_timeout)


def sweep_frequency(session: DeviceSession, timeout: float | None = None) -> None:
    model = _require(session, Capability.RF, "sweep_frequency")
    _remote_exchange(session, model, RM_CMD_SWEEP_FREQUENCY, timeout=timeout)


def check_frequency(session: DeviceSession, timeout: float | None = None) -> bool:
    """Return True once the RF sweep has locked onto a carrier."""
    model = _require(session, Capability.RF, "check_frequency")
    data = _remote_exchange(session, model, RM_CMD_CHECK_FREQUENCY, timeout=timeout)
    return bool(data) and data[0] == 1


def find_rf_packet(session: DeviceSession, timeout: float | None = None) -> None:
    model = _require(session, Capability.RF, "find_rf_packet")
    _remote_exchange(session, model, RM_CMD_FIND_RF_PACKET, timeout=timeout)


def cancel_sweep_frequency(session: DeviceSession, timeout: float | None = None) -> None:
    model = _require(session, Capability.RF, "cancel_sweep_frequency")
    _remote_exchange(session, model, RM_CMD_CANCEL_SWEEP, timeout=timeout)


@timed("learn_rf", threshold_ms=120_000)
def learn_rf(
    session: DeviceSession,
    timeout: float = 30.0,
    *,
    on_frequency_locked: Callable[[], None] | None = None,
    poll_interval: float = 1.0,
    reply_timeout: float | None = None,
) -> bytes:
    """
    Learn an RF code in two steps.

    1. Sweep until the remote locks onto the carrier (hold the button)
    2. Capture the packet (release, then press once)

    ``on_frequency_locked`` runs between the steps so a front end can prompt
    the user. Each step gets ``timeout`` seconds.

    Raises:
        ReplyTimeoutError: Carrier not found or no code captured in time
    """
    sweep_frequency(session, reply_timeout)
    deadline = time.monotonic() + timeout
    locked = False
    while not locked and time.monotonic() < deadline:
        time.sleep(poll_interval)
        locked = check_frequency(session, reply_timeout)

    if not locked:
        cancel_sweep_frequency(session, reply_timeout)
        raise ReplyTimeoutError(timeout)

    logger.info("RF carrier locked on %s", session.descriptor.mac_str)
    if on_frequency_locked is not None:
        on_frequency_locked()

    find_rf_packet(session, reply_timeout)
    return _poll_for_code(session, timeout, poll_interval, reply_timeout)


def check_temperature(session: DeviceSession, timeout: float | None = None) -> float:
    """Read the remote's built-in thermometer in degrees Celsius."""
    model = _require(session, Capability.TEMPERATURE, "check_temperature")
    command = RM4_CMD_SENSORS if model.length_prefixed else RM_CMD_TEMPERATURE
    data = _remote_exchange(session, model, command, timeout=timeout)
    if len(data) < 2:
        error_reason = "temperature_reply_too_short"
        raise MalformedPacketError(error_reason, data)
    return (data[0] * 10 + data[1]) / 10.0


def check_humidity(session: DeviceSession, timeout: float | None = None) -> float:
    """Read relative humidity (RM4 models with a sensor cable)."""
    model = _require(session, Capability.HUMIDITY, "check_humidity")
    data = _remote_exchange(session, model, RM4_CMD_SENSORS, timeout=timeout)
    if len(data) < 4:
        error_reason = "humidity_reply_too_short"
        raise MalformedPacketError(error_reason, data)
    return (data[2] * 10 + data[3]) / 10.0


# Switches


def set_power(session: DeviceSession, on: bool, *, nightlight: bool = False, timeout: float | None = None) -> None:
    _require(session, Capability.POWER, "set_power")
    payload = bytearray(FIXED_PAYLOAD_LENGTH)
    payload[0] = SWITCH_SET_POWER
    payload[4] = (2 if nightlight else 0) | (1 if on else 0)
    session.exchange(bytes(payload), _timeout(timeout))
    logger.info(
        "Set %s power %s",
        session.descriptor.mac_str,
        "on" if on else "off",
        extra={"nightlight": nightlight},
    )


def check_power(session: DeviceSession, timeout: float | None = None) -> PowerState:
    _require(session, Capability.POWER, "check_power")
    payload = bytearray(FIXED_PAYLOAD_LENGTH)
    payload[0] = SWITCH_CHECK_POWER
    reply = session.exchange(bytes(payload), _timeout(timeout))
    if len(reply) < 5:
        error_reason = "power_reply_too_short"
        raise MalformedPacketError(error_reason, reply)
    return PowerState(power=bool(reply[4] & 0x01), nightlight=bool(reply[4] & 0x02))


# Sensors


def check_sensors(session: DeviceSession, timeout: float | None = None) -> SensorReading:
    _require(session, Capability.ENVIRONMENT, "check_sensors")
    payload = bytearray(FIXED_PAYLOAD_LENGTH)
    payload[0] = SENSOR_CHECK
    reply = session.exchange(bytes(payload), _timeout(timeout))
    if len(reply) < 13:
        error_reason = "sensor_reply_too_short"
        raise MalformedPacketError(error_reason, reply)
    return SensorReading(
        temperature=(reply[4] * 10 + reply[5]) / 10.0,
        humidity=(reply[6] * 10 + reply[7]) / 10.0,
        light=_level(LIGHT_LEVELS, reply[8]),
        air_quality=_level(AIR_QUALITY_LEVELS, reply[10]),
        noise=_level(NOISE_LEVELS, reply[12]),
    )
