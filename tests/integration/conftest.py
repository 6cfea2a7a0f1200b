"""Fixtures for integration tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from tests.helpers.fake_device import FakeBroadlinkDevice, ResponseMode


@pytest.fixture
def fake_device(request: pytest.FixtureRequest) -> Iterator[FakeBroadlinkDevice]:
    """Running fake device; parametrize indirectly with a ResponseMode."""
    mode = getattr(request, "param", ResponseMode.SUCCESS)
    device = FakeBroadlinkDevice(mode)
    device.start()
    yield device
    device.stop()
