import os
import zoneinfo

import tzlocal

from broadlink_lan import __version__

__all__ = [
    "BROADLINK_AUTH_TIMEOUT",
    "BROADLINK_BIND_ADDRESS",
    "BROADLINK_CIPHER_PADDING",
    "BROADLINK_CLIENT_NAME",
    "BROADLINK_DEBUG",
    "BROADLINK_DISCOVERY_TIMEOUT",
    "BROADLINK_LOG_FORMAT",
    "BROADLINK_LOG_HUMAN_OUTPUT",
    "BROADLINK_LOG_JSON_FILE",
    "BROADLINK_LOG_NAME",
    "BROADLINK_METRICS_PORT",
    "BROADLINK_PERF_THRESHOLD_MS",
    "BROADLINK_PERF_TRACKING",
    "BROADLINK_REPLY_TIMEOUT",
    "BROADLINK_VERSION",
    "LOCAL_TZ",
    "YES_ANSWER",
]

YES_ANSWER = ("true", "1", "yes", "y", "t", 1, "on", "o")
LOCAL_TZ = zoneinfo.ZoneInfo(str(tzlocal.get_localzone()))
BROADLINK_LOG_NAME: str = "broadlink_lan"
BROADLINK_VERSION: str = __version__


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


BROADLINK_DEBUG: bool = os.environ.get("BROADLINK_DEBUG", "0").casefold() in YES_ANSWER

# Network
_bind_address = os.environ.get("BROADLINK_BIND_ADDRESS")
BROADLINK_BIND_ADDRESS: str | None = _bind_address if _bind_address else None
BROADLINK_DISCOVERY_TIMEOUT: float = _float_env("BROADLINK_DISCOVERY_TIMEOUT", 5.0)
BROADLINK_AUTH_TIMEOUT: float = _float_env("BROADLINK_AUTH_TIMEOUT", 10.0)
BROADLINK_REPLY_TIMEOUT: float = _float_env("BROADLINK_REPLY_TIMEOUT", 10.0)
# "zero" (device firmware) or "pkcs7"
BROADLINK_CIPHER_PADDING: str = os.environ.get("BROADLINK_CIPHER_PADDING", "zero").casefold()
BROADLINK_CLIENT_NAME: str = os.environ.get("BROADLINK_CLIENT_NAME", "Test 1")

# Logging Configuration
BROADLINK_LOG_FORMAT: str = os.environ.get("BROADLINK_LOG_FORMAT", "human")  # "json", "human", or "both"
_json_file = os.environ.get("BROADLINK_LOG_JSON_FILE")
BROADLINK_LOG_JSON_FILE: str | None = _json_file if _json_file else None
BROADLINK_LOG_HUMAN_OUTPUT: str = os.environ.get("BROADLINK_LOG_HUMAN_OUTPUT", "stderr")

# Metrics and performance instrumentation
BROADLINK_METRICS_PORT: int = _int_env("BROADLINK_METRICS_PORT", 0)  # 0 disables the exporter
BROADLINK_PERF_TRACKING: bool = os.environ.get("BROADLINK_PERF_TRACKING", "true").casefold() in YES_ANSWER
BROADLINK_PERF_THRESHOLD_MS: int = _int_env("BROADLINK_PERF_THRESHOLD_MS", 1000)
