"""
Correlation ids that tie together the log lines of one logical operation.

An operation is a discovery run, an authentication handshake or one CLI
invocation. The id lives in a ContextVar, so it follows the call chain of a
blocking exchange and is copied into asyncio tasks created while it is set.
Ids are UUIDv7 strings; their leading timestamp bits make them sort in
creation order.
"""

from __future__ import annotations

import contextvars
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from typing import cast

from uuid_extensions import uuid7

__all__ = [
    "correlation_context",
    "ensure_correlation_id",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
]

_current: contextvars.ContextVar[str | None] = contextvars.ContextVar("broadlink_correlation_id", default=None)


def generate_correlation_id() -> str:
    return str(cast(uuid.UUID, uuid7()))


def get_correlation_id() -> str | None:
    return _current.get()


def set_correlation_id(correlation_id: str | None) -> None:
    _current.set(correlation_id)


@contextmanager
def correlation_context(
    correlation_id: str | None = None,
    auto_generate: bool = True,
) -> Generator[str | None]:
    """
    Scope a correlation id to a block and restore the outer one afterwards.

    Args:
        correlation_id: Id to use; a fresh one is generated when None
        auto_generate: When False and no id is given, clear the id for the block

    Example:
        with correlation_context():
            descriptor = probe("192.168.1.40", 2.0)
            session = authenticate(descriptor, 5.0)  # same id as the probe
    """
    if correlation_id is None and auto_generate:
        correlation_id = generate_correlation_id()
    token = _current.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _current.reset(token)


def ensure_correlation_id() -> str:
    """
    Return the active correlation id, starting one if none is set.

    Called where an operation begins (discovery, authentication) so a library
    caller that never opened a correlation_context still gets grouped logs.
    An id already set by the caller is kept.
    """
    correlation_id = _current.get()
    if correlation_id is None:
        correlation_id = generate_correlation_id()
        _current.set(correlation_id)
    return correlation_id
