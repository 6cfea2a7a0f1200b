"""
Timing decorators for blocking network operations.

Durations above ``BROADLINK_PERF_THRESHOLD_MS`` are logged as warnings, the
rest at debug level. ``BROADLINK_PERF_TRACKING=false`` turns timing off.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

from broadlink_lan.logging_abstraction import BroadlinkLogger, get_logger

__all__ = [
    "elapsed_ms",
    "timed",
    "timed_async",
]

P = ParamSpec("P")
T = TypeVar("T")

logger = get_logger(__name__)


def elapsed_ms(start_time: float) -> float:
    """Milliseconds since ``start_time`` (a ``time.perf_counter()`` value)."""
    return (time.perf_counter() - start_time) * 1000


def _settings(threshold_ms: int | None) -> tuple[bool, int]:
    # Read at call time so tests and the CLI can patch the module constants
    from broadlink_lan import const

    threshold = const.BROADLINK_PERF_THRESHOLD_MS if threshold_ms is None else threshold_ms
    return const.BROADLINK_PERF_TRACKING, threshold


def timed(
    operation_name: str | None = None,
    *,
    threshold_ms: int | None = None,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Time a blocking function.

    Args:
        operation_name: Name used in the log line (defaults to the function name)
        threshold_ms: Override of BROADLINK_PERF_THRESHOLD_MS for this operation

    Example:
        @timed("auth_handshake")
        def authenticate(descriptor, timeout):
            ...
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        op_name = operation_name or func.__name__

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            enabled, threshold = _settings(threshold_ms)
            if not enabled:
                return func(*args, **kwargs)

            start_time = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                _log_timing(logger, op_name, elapsed_ms(start_time), threshold)

        return wrapper

    return decorator


def timed_async(
    operation_name: str | None = None,
    *,
    threshold_ms: int | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Coroutine counterpart of :func:`timed`."""

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        op_name = operation_name or func.__name__

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            enabled, threshold = _settings(threshold_ms)
            if not enabled:
                return await func(*args, **kwargs)

            start_time = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            finally:
                _log_timing(logger, op_name, elapsed_ms(start_time), threshold)

        return wrapper

    return decorator


def _log_timing(log: BroadlinkLogger, operation_name: str, duration_ms: float, threshold_ms: int) -> None:
    context = {
        "operation": operation_name,
        "duration_ms": round(duration_ms, 2),
        "threshold_ms": threshold_ms,
        "exceeded_threshold": duration_ms > threshold_ms,
    }
    if duration_ms > threshold_ms:
        log.warning(
            "[%s] took %.1fms (threshold: %dms)",
            operation_name,
            duration_ms,
            threshold_ms,
            extra=context,
        )
    else:
        log.debug("[%s] took %.1fms", operation_name, duration_ms, extra=context)
