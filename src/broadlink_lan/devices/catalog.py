"""Device-type catalog.

Maps the 16-bit device type from a discovery reply to a model name, a
command family and the capabilities the family supports. Commands look up
the capability here instead of branching on device classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Flag, StrEnum, auto


class DeviceFamily(StrEnum):
    SWITCH = "sp2"
    POWER_STRIP = "mp1"
    REMOTE = "rm"
    REMOTE_RM4 = "rm4"
    SENSOR = "a1"
    UNKNOWN = "unknown"


class Capability(Flag):
    NONE = 0
    POWER = auto()
    NIGHTLIGHT = auto()
    IR = auto()
    RF = auto()
    TEMPERATURE = auto()
    HUMIDITY = auto()
    ENVIRONMENT = auto()


_SWITCH = Capability.POWER | Capability.NIGHTLIGHT
_REMOTE = Capability.IR | Capability.TEMPERATURE
_REMOTE_PRO = _REMOTE | Capability.RF
_RM4 = Capability.IR | Capability.TEMPERATURE | Capability.HUMIDITY
_RM4_PRO = _RM4 | Capability.RF


@dataclass(frozen=True)
class DeviceModel:
    """Static facts about one device type.

    Attributes:
        device_type: 16-bit type code
        model: Marketing name
        family: Command family (selects payload layout)
        capabilities: Commands the device accepts
    """

    device_type: int
    model: str
    family: DeviceFamily
    capabilities: Capability = Capability.NONE

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    @property
    def length_prefixed(self) -> bool:
        """RM4 frames carry a 2-byte payload length ahead of the command word."""
        return self.family is DeviceFamily.REMOTE_RM4


def _models(family: DeviceFamily, capabilities: Capability, entries: dict[int, str]) -> dict[int, DeviceModel]:
    return {code: DeviceModel(code, name, family, capabilities) for code, name in entries.items()}


DEVICE_MODELS: dict[int, DeviceModel] = {
    **_models(
        DeviceFamily.SWITCH,
        _SWITCH,
        {
            0x2711: "SP2",
            0x2719: "Honeywell SP2",
            0x7919: "Honeywell SP2",
            0x271A: "Honeywell SP2",
            0x791A: "Honeywell SP2",
            0x2720: "SP Mini",
            0x753E: "SP3",
            0x7D00: "SP3 (OEM)",
            0x947A: "SP3S",
            0x9479: "SP3S",
            0x2728: "SP Mini 2",
            0x2733: "SP Mini (OEM)",
            0x273E: "SP Mini (OEM)",
            0x7530: "SP Mini 2 (OEM)",
            0x7546: "SP Mini 2 (OEM)",
            0x7918: "SP Mini 2 (OEM)",
            0x7D0D: "SP Mini 3 (OEM)",
            0x2736: "SP Mini Plus",
        },
    ),
    **_models(
        DeviceFamily.REMOTE,
        _REMOTE,
        {
            0x2712: "RM2",
            0x2737: "RM Mini",
            0x273D: "RM Pro (Phicomm)",
            0x2783: "RM2 Home Plus",
            0x277C: "RM2 Home Plus GDT",
            0x278F: "RM Mini Shate",
            0x27C2: "RM Mini 3",
            0x27D1: "RM Mini 3",
            0x27DE: "RM Mini 3",
        },
    ),
    **_models(
        DeviceFamily.REMOTE,
        _REMOTE_PRO,
        {
            0x272A: "RM2 Pro Plus",
            0x2787: "RM2 Pro Plus 2",
            0x279D: "RM2 Pro Plus 3",
            0x27A9: "RM2 Pro Plus 300",
            0x278B: "RM2 Pro Plus BL",
            0x2797: "RM2 Pro Plus HYC",
            0x27A1: "RM2 Pro Plus R1",
            0x27A6: "RM2 Pro PP",
        },
    ),
    **_models(
        DeviceFamily.REMOTE_RM4,
        _RM4,
        {
            0x51DA: "RM4 Mini",
            0x5F36: "RM Mini 3",
            0x6070: "RM4C Mini",
            0x610E: "RM4 Mini",
            0x610F: "RM4C",
            0x62BC: "RM4 Mini",
            0x62BE: "RM4C",
            0x6364: "RM4S",
            0x648D: "RM4 Mini",
            0x6539: "RM4C Mini",
            0x653A: "RM4 Mini",
        },
    ),
    **_models(
        DeviceFamily.REMOTE_RM4,
        _RM4_PRO,
        {
            0x6026: "RM4 Pro",
            0x61A2: "RM4 Pro",
            0x649B: "RM4 Pro",
            0x653C: "RM4 Pro",
        },
    ),
    **_models(DeviceFamily.SENSOR, Capability.ENVIRONMENT, {0x2714: "A1"}),
    **_models(
        DeviceFamily.POWER_STRIP,
        Capability.NONE,
        {
            0x4EB5: "MP1",
            0x4EF7: "MP1 (Honyar OEM)",
            0x4F1B: "MP1-1K3S2U",
            0x4F65: "MP1-1K3S2U",
        },
    ),
}


def classify(device_type: int) -> DeviceModel:
    """Look up a device type; unknown codes get an UNKNOWN model with no capabilities."""
    model = DEVICE_MODELS.get(device_type)
    if model is None:
        return DeviceModel(device_type, f"Unknown (0x{device_type:04x})", DeviceFamily.UNKNOWN)
    return model
