"""Runtime configuration for the client and the CLI."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator

from broadlink_lan import const
from broadlink_lan.protocol.cipher import Padding


class ClientEnv(BaseModel):
    """Settings shared by discovery, authentication and sessions.

    Defaults come from the ``BROADLINK_*`` environment variables read at
    import time (see ``const``). ``from_environ`` re-reads them, which the CLI
    does after loading a dotenv file.
    """

    bind_address: str | None = const.BROADLINK_BIND_ADDRESS
    discovery_timeout: float = Field(default=const.BROADLINK_DISCOVERY_TIMEOUT, gt=0)
    auth_timeout: float = Field(default=const.BROADLINK_AUTH_TIMEOUT, gt=0)
    reply_timeout: float = Field(default=const.BROADLINK_REPLY_TIMEOUT, gt=0)
    cipher_padding: Padding = Field(default=const.BROADLINK_CIPHER_PADDING, validate_default=True)
    client_name: str = const.BROADLINK_CLIENT_NAME
    metrics_port: int = Field(default=const.BROADLINK_METRICS_PORT, ge=0, le=65535)
    debug: bool = const.BROADLINK_DEBUG

    @field_validator("bind_address", mode="before")
    @classmethod
    def empty_bind_address_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("cipher_padding", mode="before")
    @classmethod
    def casefold_padding(cls, value: object) -> object:
        return value.casefold() if isinstance(value, str) else value

    @classmethod
    def from_environ(cls) -> ClientEnv:
        """Build settings from the current process environment.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value
        """
        values: dict[str, object] = {}
        mapping = {
            "bind_address": "BROADLINK_BIND_ADDRESS",
            "discovery_timeout": "BROADLINK_DISCOVERY_TIMEOUT",
            "auth_timeout": "BROADLINK_AUTH_TIMEOUT",
            "reply_timeout": "BROADLINK_REPLY_TIMEOUT",
            "cipher_padding": "BROADLINK_CIPHER_PADDING",
            "client_name": "BROADLINK_CLIENT_NAME",
            "metrics_port": "BROADLINK_METRICS_PORT",
        }
        for field_name, env_name in mapping.items():
            raw = os.environ.get(env_name)
            if raw is not None:
                values[field_name] = raw
        debug = os.environ.get("BROADLINK_DEBUG")
        if debug is not None:
            values["debug"] = debug.casefold() in const.YES_ANSWER
        return cls.model_validate(values)
