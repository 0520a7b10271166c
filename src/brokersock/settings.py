# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Application settings."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from brokersock.constants import (
    DEFAULT_RECV_TIMEOUT_SEC,
    DEFAULT_RECV_TIMEOUT_USEC,
    DEFAULT_SEND_TIMEOUT_SEC,
    DEFAULT_SEND_TIMEOUT_USEC,
    ENV_PREFIX,
)
from brokersock.deadline import Deadline


def _default_recv_deadline() -> Deadline:
    return Deadline(seconds=DEFAULT_RECV_TIMEOUT_SEC, microseconds=DEFAULT_RECV_TIMEOUT_USEC)


def _default_send_deadline() -> Deadline:
    return Deadline(seconds=DEFAULT_SEND_TIMEOUT_SEC, microseconds=DEFAULT_SEND_TIMEOUT_USEC)


class TransportSettings(BaseSettings):
    host: str | None = None
    port: int = 0
    recv_deadline: Deadline = Field(default_factory=_default_recv_deadline)
    send_deadline: Deadline = Field(default_factory=_default_send_deadline)
    log_level: str = "WARNING"
    log_format: Literal["console", "json"] = "console"

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        extra="ignore",
    )
