"""Core dataclasses for the Broadlink transport layer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DeviceDescriptor:
    """Device found on the local network.

    Attributes:
        address: (ip, port) the device answers on
        mac: MAC address in display order (6 bytes)
        device_type: 16-bit device type code from the discovery reply
        name: Name the device reports (may be empty)
        is_locked: Device refuses authentication until unlocked in the vendor app
    """

    address: tuple[str, int]
    mac: bytes
    device_type: int
    name: str = ""
    is_locked: bool = False

    @property
    def host(self) -> str:
        return self.address[0]

    @property
    def mac_str(self) -> str:
        """MAC formatted as aa:bb:cc:dd:ee:ff."""
        return ":".join(f"{b:02x}" for b in self.mac)

    def __str__(self) -> str:
        lock = ", locked" if self.is_locked else ""
        label = self.name or "unnamed"
        return f"{label} [0x{self.device_type:04x}] {self.mac_str} @ {self.host}{lock}"
