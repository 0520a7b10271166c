# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Exception hierarchy for transport operations.

Every error derives from :class:`TransportError` and from the closest builtin,
so callers can catch either ``TransportTimeoutError`` or plain ``TimeoutError``.
"""

from __future__ import annotations


class TransportError(Exception):
    """Base exception for transport operations."""

    pass


class InvalidArgumentError(TransportError, ValueError):
    """Invalid argument supplied; no I/O was attempted."""

    pass


class TransportConnectionError(TransportError, ConnectionError):
    """Failed to open a connection to the broker."""

    def __init__(
        self,
        message: str,
        *,
        host: str | None = None,
        port: int | None = None,
        errno: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(message)
        self.host = host
        self.port = port
        self.errno = errno
        self.reason = reason


class TransportIOError(TransportError, OSError):
    """Read or write failed after partial progress.

    Attributes:
        expected: Bytes the operation was asked to move
        completed: Bytes moved before the failure
    """

    def __init__(self, message: str, *, expected: int = 0, completed: int = 0) -> None:
        super().__init__(message)
        self.expected = expected
        self.completed = completed


class TransportTimeoutError(TransportIOError, TimeoutError):
    """Readiness wait expired before the operation could finish."""

    def __init__(
        self,
        message: str,
        *,
        expected: int = 0,
        completed: int = 0,
        partial: bytes = b"",
    ) -> None:
        super().__init__(message, expected=expected, completed=completed)
        self.partial = partial


class ShortReadError(TransportError, EOFError):
    """Exact-length read reached end of stream early."""

    def __init__(self, requested: int, read: int) -> None:
        self.requested = requested
        self.read = read
        self.shortfall = requested - read
        super().__init__(
            f"Needed to read {requested} bytes, instead read {read} bytes ({self.shortfall} short)"
        )
