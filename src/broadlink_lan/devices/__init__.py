"""Device catalog and family-specific commands."""

from broadlink_lan.devices.catalog import DEVICE_MODELS, Capability, DeviceFamily, DeviceModel, classify

__all__ = [
    "DEVICE_MODELS",
    "Capability",
    "DeviceFamily",
    "DeviceModel",
    "classify",
]
