# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Stream handle contract and readiness waits shared by transports."""

from __future__ import annotations

import io
import os
import selectors
import socket
from typing import Any, Protocol, runtime_checkable

import structlog

from brokersock.exceptions import InvalidArgumentError

log = structlog.get_logger()

# poll(2) accepts regular files (always ready); epoll does not
_Selector: type[selectors.BaseSelector] = getattr(selectors, "PollSelector", selectors.SelectSelector)

EVENT_READ = selectors.EVENT_READ
EVENT_WRITE = selectors.EVENT_WRITE


@runtime_checkable
class StreamHandle(Protocol):
    """Anything that can be waited on and closed.

    Socket-like handles also provide ``recv``/``send``; file-like handles
    provide ``read``/``write`` instead.
    """

    def fileno(self) -> int: ...

    def close(self) -> None: ...


def is_socket_like(handle: Any) -> bool:
    return callable(getattr(handle, "recv", None)) and callable(getattr(handle, "send", None))


def is_file_like(handle: Any) -> bool:
    return callable(getattr(handle, "read", None)) and callable(getattr(handle, "write", None))


def validate_handle(handle: Any) -> None:
    """Reject anything that is not an open duplex byte stream.

    Raises:
        InvalidArgumentError: If the handle cannot be used as a connection
    """
    kind = type(handle).__name__
    if not isinstance(handle, StreamHandle):
        raise InvalidArgumentError(f"Stream should be a socket or file object, {kind} given")
    if not (is_socket_like(handle) or is_file_like(handle)):
        raise InvalidArgumentError(f"Stream {kind} supports neither recv/send nor read/write")
    if isinstance(handle, io.TextIOBase):
        raise InvalidArgumentError(f"Stream {kind} is not a byte stream")
    if getattr(handle, "closed", False) is True:
        raise InvalidArgumentError(f"Stream {kind} is closed")
    try:
        fd = handle.fileno()
    except (OSError, ValueError) as e:
        raise InvalidArgumentError(f"Stream {kind} has no usable file descriptor") from e
    if not isinstance(fd, int) or fd < 0:
        raise InvalidArgumentError(f"Stream {kind} is closed")

    if isinstance(handle, socket.socket):
        if handle.type != socket.SOCK_STREAM:
            raise InvalidArgumentError(f"Socket must be SOCK_STREAM, got {handle.type!r}")
        accept_conn = getattr(socket, "SO_ACCEPTCONN", None)
        if accept_conn is not None:
            try:
                listening = handle.getsockopt(socket.SOL_SOCKET, accept_conn)
            except OSError:
                listening = 0
            if listening:
                raise InvalidArgumentError("Listening sockets cannot be used as a connection")


def set_nonblocking(handle: Any) -> None:
    if callable(getattr(handle, "setblocking", None)):
        handle.setblocking(False)
    else:
        os.set_blocking(handle.fileno(), False)


def wait_ready(handle: StreamHandle, events: int, timeout: float) -> bool | None:
    """Wait until the handle is readable or writable.

    Args:
        handle: Stream to wait on
        events: ``EVENT_READ`` or ``EVENT_WRITE``
        timeout: Seconds to wait; 0 polls without blocking

    Returns:
        True when ready, False when the wait expired, None when the wait
        itself failed (descriptor closed or invalid)
    """
    try:
        with _Selector() as selector:
            selector.register(handle, events)
            ready = selector.select(timeout)
    except (OSError, ValueError) as e:
        log.warning("transport_wait_failed", events=events, error=str(e))
        return None
    return any(mask & events for _, mask in ready)
