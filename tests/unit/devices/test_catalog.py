"""Unit tests for the device-type catalog."""

from __future__ import annotations

import pytest

from broadlink_lan.devices.catalog import DEVICE_MODELS, Capability, DeviceFamily, DeviceModel, classify
from tests.fixtures.reference_packets import (
    A1_DEVICE_TYPE,
    MP1_DEVICE_TYPE,
    RM2_DEVICE_TYPE,
    RM2_PRO_DEVICE_TYPE,
    RM4_DEVICE_TYPE,
    SP2_DEVICE_TYPE,
)


@pytest.mark.parametrize(
    "device_type,model,family",
    [
        (SP2_DEVICE_TYPE, "SP2", DeviceFamily.SWITCH),
        (RM2_DEVICE_TYPE, "RM2", DeviceFamily.REMOTE),
        (RM2_PRO_DEVICE_TYPE, "RM2 Pro Plus", DeviceFamily.REMOTE),
        (RM4_DEVICE_TYPE, "RM4 Mini", DeviceFamily.REMOTE_RM4),
        (0x6026, "RM4 Pro", DeviceFamily.REMOTE_RM4),
        (A1_DEVICE_TYPE, "A1", DeviceFamily.SENSOR),
        (MP1_DEVICE_TYPE, "MP1", DeviceFamily.POWER_STRIP),
    ],
)
def test_classify_known_types(device_type: int, model: str, family: DeviceFamily) -> None:
    """Test known device types map to their model and family."""
    result = classify(device_type)

    assert result.device_type == device_type
    assert result.model == model
    assert result.family is family


def test_classify_unknown_type() -> None:
    """Test unknown codes get a placeholder model without capabilities."""
    result = classify(0xABCD)

    assert result.model == "Unknown (0xabcd)"
    assert result.family is DeviceFamily.UNKNOWN
    assert result.capabilities == Capability.NONE
    assert 0xABCD not in DEVICE_MODELS


class TestCapabilities:
    """Tests for per-family capabilities."""

    def test_switch(self) -> None:
        """Test switches support power and nightlight only."""
        model = classify(SP2_DEVICE_TYPE)

        assert model.supports(Capability.POWER)
        assert model.supports(Capability.NIGHTLIGHT)
        assert not model.supports(Capability.IR)

    def test_remote_without_rf(self) -> None:
        """Test plain RM2 has IR and temperature but no RF."""
        model = classify(RM2_DEVICE_TYPE)

        assert model.supports(Capability.IR)
        assert model.supports(Capability.TEMPERATURE)
        assert not model.supports(Capability.RF)
        assert not model.supports(Capability.HUMIDITY)

    def test_remote_pro_has_rf(self) -> None:
        """Test Pro models add RF."""
        assert classify(RM2_PRO_DEVICE_TYPE).supports(Capability.RF)
        assert classify(0x6026).supports(Capability.RF)

    def test_rm4_has_humidity(self) -> None:
        """Test RM4 models report humidity."""
        model = classify(RM4_DEVICE_TYPE)

        assert model.supports(Capability.HUMIDITY)
        assert not model.supports(Capability.RF)

    def test_sensor(self) -> None:
        """Test A1 only exposes the environment reading."""
        model = classify(A1_DEVICE_TYPE)

        assert model.supports(Capability.ENVIRONMENT)
        assert not model.supports(Capability.POWER)

    def test_power_strip_has_no_commands(self) -> None:
        """Test MP1 is catalogued without capabilities."""
        assert classify(MP1_DEVICE_TYPE).capabilities == Capability.NONE

    def test_supports_combined_flags(self) -> None:
        """Test supports requires every flag in a combination."""
        model = classify(RM2_DEVICE_TYPE)

        assert model.supports(Capability.IR | Capability.TEMPERATURE)
        assert not model.supports(Capability.IR | Capability.RF)


@pytest.mark.parametrize(
    "device_type,expected",
    [(RM4_DEVICE_TYPE, True), (0x6026, True), (RM2_DEVICE_TYPE, False), (SP2_DEVICE_TYPE, False)],
)
def test_length_prefixed(device_type: int, expected: bool) -> None:
    """Test only the RM4 family frames payloads with a length prefix."""
    assert classify(device_type).length_prefixed is expected


def test_catalog_entries_are_consistent() -> None:
    """Test every catalog key matches its model's device type."""
    for device_type, model in DEVICE_MODELS.items():
        assert isinstance(model, DeviceModel)
        assert model.device_type == device_type
        assert model.family is not DeviceFamily.UNKNOWN
