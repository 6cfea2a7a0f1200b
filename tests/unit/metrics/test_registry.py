"""Unit tests for metrics registry."""

from __future__ import annotations

from unittest.mock import patch

from broadlink_lan.metrics import registry

# Test constants
DEVICE = "34:ea:34:01:02:03"  # MAC label used by sessions
RM2_DEVICE_TYPE = 0x2712
METRICS_PORT = 9499


def _value(metric: object, name: str, labels: dict[str, str] | None = None) -> float:
    samples = metric.collect()[0].samples  # type: ignore[attr-defined]
    return next(s.value for s in samples if s.name == name and s.labels == (labels or {}))


class TestPacketMetrics:
    """Tests for packet counters."""

    def test_record_packet_sent(self) -> None:
        """Test record_packet_sent helper."""
        registry.record_packet_sent(DEVICE, "command", "success")
        samples = list(registry.broadlink_packet_sent_total.collect()[0].samples)
        assert any(
            s.labels == {"device": DEVICE, "packet_type": "command", "outcome": "success"}
            for s in samples
        )

    def test_record_packet_recv(self) -> None:
        """Test record_packet_recv helper."""
        registry.record_packet_recv(DEVICE, "command_reply", "success")
        samples = list(registry.broadlink_packet_recv_total.collect()[0].samples)
        assert any(
            s.labels == {"device": DEVICE, "packet_type": "command_reply", "outcome": "success"}
            for s in samples
        )

    def test_record_decode_error(self) -> None:
        """Test record_decode_error helper."""
        registry.record_decode_error(DEVICE, "checksum_mismatch")
        samples = list(registry.broadlink_decode_errors_total.collect()[0].samples)
        assert any(s.labels == {"device": DEVICE, "reason": "checksum_mismatch"} for s in samples)

    def test_counter_increments(self) -> None:
        """Test repeated records accumulate."""
        labels = {"device": "aa:bb:cc:dd:ee:ff"}
        registry.record_reply_timeout(labels["device"])
        before = _value(registry.broadlink_reply_timeout_total, "broadlink_reply_timeout_total", labels)

        registry.record_reply_timeout(labels["device"])

        after = _value(registry.broadlink_reply_timeout_total, "broadlink_reply_timeout_total", labels)
        assert after == before + 1


class TestSessionMetrics:
    """Tests for handshake and session metrics."""

    def test_record_auth(self) -> None:
        """Test record_auth helper."""
        registry.record_auth(DEVICE, "success")
        samples = list(registry.broadlink_auth_total.collect()[0].samples)
        assert any(s.labels == {"device": DEVICE, "outcome": "success"} for s in samples)

    def test_record_exchange_latency(self) -> None:
        """Test record_exchange_latency helper."""
        registry.record_exchange_latency(DEVICE, 0.03)
        samples = list(registry.broadlink_exchange_latency_seconds.collect()[0].samples)
        assert any(s.labels.get("device") == DEVICE for s in samples)

    def test_sessions_open_gauge(self) -> None:
        """Test opened and closed sessions move the gauge."""
        before = registry.broadlink_sessions_open.collect()[0].samples[0].value

        registry.record_session_opened()
        registry.record_session_opened()
        registry.record_session_closed()

        assert registry.broadlink_sessions_open.collect()[0].samples[0].value == before + 1
        registry.record_session_closed()


class TestDiscoveryMetrics:
    """Tests for discovery metrics."""

    def test_record_device_discovered(self) -> None:
        """Test device types are labelled as hex."""
        registry.record_device_discovered(RM2_DEVICE_TYPE)
        samples = list(registry.broadlink_devices_discovered_total.collect()[0].samples)
        assert any(s.labels == {"device_type": "0x2712"} for s in samples)

    def test_record_discovery_duration(self) -> None:
        """Test record_discovery_duration helper."""
        registry.record_discovery_duration(1.5)
        samples = list(registry.broadlink_discovery_duration_seconds.collect()[0].samples)
        assert len(samples) > 0


class TestMetricsServer:
    """Tests for start_metrics_server."""

    def test_starts_once(self) -> None:
        """Test repeated calls only start one HTTP server."""
        with (
            patch.object(registry, "start_http_server") as mock_start,
            patch.dict(registry._server_state, {"started": False}),
        ):
            registry.start_metrics_server(METRICS_PORT)
            registry.start_metrics_server(METRICS_PORT)

        mock_start.assert_called_once_with(METRICS_PORT)
