"""Shared fixtures for broadlink-lan tests."""

from __future__ import annotations

import pytest

from broadlink_lan.protocol.cipher import CipherSession, Padding
from broadlink_lan.transport.types import DeviceDescriptor
from tests.fixtures.reference_packets import (
    A1_DEVICE_TYPE,
    DEVICE_HOST,
    REFERENCE_MAC,
    RM2_DEVICE_TYPE,
    RM2_PRO_DEVICE_TYPE,
    RM4_DEVICE_TYPE,
    SESSION_KEY,
    SP2_DEVICE_TYPE,
)
from tests.helpers.fakes import FakeEndpoint


def _descriptor(device_type: int, name: str) -> DeviceDescriptor:
    return DeviceDescriptor(address=(DEVICE_HOST, 80), mac=REFERENCE_MAC, device_type=device_type, name=name)


@pytest.fixture
def bootstrap_cipher() -> CipherSession:
    """Bootstrap cipher in device (zero padding) mode."""
    return CipherSession.bootstrap(Padding.ZERO)


@pytest.fixture
def session_cipher() -> CipherSession:
    """Cipher keyed with the post-auth session key, zero padding."""
    return CipherSession(SESSION_KEY, padding=Padding.ZERO)


@pytest.fixture
def rm2_descriptor() -> DeviceDescriptor:
    return _descriptor(RM2_DEVICE_TYPE, "Living Room")


@pytest.fixture
def rm2_pro_descriptor() -> DeviceDescriptor:
    return _descriptor(RM2_PRO_DEVICE_TYPE, "Garage")


@pytest.fixture
def rm4_descriptor() -> DeviceDescriptor:
    return _descriptor(RM4_DEVICE_TYPE, "Bedroom")


@pytest.fixture
def sp2_descriptor() -> DeviceDescriptor:
    return _descriptor(SP2_DEVICE_TYPE, "Heater")


@pytest.fixture
def a1_descriptor() -> DeviceDescriptor:
    return _descriptor(A1_DEVICE_TYPE, "Hallway")


@pytest.fixture
def fake_endpoint() -> FakeEndpoint:
    return FakeEndpoint(reply_from=(DEVICE_HOST, 80))
