# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Structured logging setup for brokersock.

Transport events go to stderr through structlog so that stdout stays free for
CLI output. Level comes from BROKERSOCK_LOG_LEVEL (default: WARNING) and the
renderer from BROKERSOCK_LOG_FORMAT ("console" or "json").
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from brokersock.settings import TransportSettings

__all__ = ["get_logger", "configure_logging"]


def _renderer(log_format: str) -> Any:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(settings: TransportSettings | None = None) -> None:
    """Configure structlog for brokersock.

    Call once at application startup; the transport itself never configures
    logging.

    Args:
        settings: Settings instance (will be created if None)
    """
    if settings is None:
        from brokersock.settings import TransportSettings

        settings = TransportSettings()

    log_level = getattr(logging, settings.log_level.upper(), logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            _renderer(settings.log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Return a structlog logger, optionally named after the calling module."""
    return structlog.get_logger(name)
