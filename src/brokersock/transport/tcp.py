# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Timeout-bounded TCP transport.

The connection is kept in non-blocking mode and every blocking step is an
explicit readiness wait bounded by the configured deadline. Deadlines are
re-armed on each wait: a peer that trickles one byte per deadline keeps a
read alive indefinitely unless the caller passes ``total_timeout``.
"""

from __future__ import annotations

import contextlib
import socket
import time
from typing import TYPE_CHECKING, Any

import structlog

from brokersock.constants import (
    DEFAULT_RECV_TIMEOUT_SEC,
    DEFAULT_RECV_TIMEOUT_USEC,
    DEFAULT_SEND_TIMEOUT_SEC,
    DEFAULT_SEND_TIMEOUT_USEC,
    INJECTED_HOST,
    INJECTED_PORT,
    READ_MAX_LEN,
)
from brokersock.deadline import Deadline
from brokersock.exceptions import (
    InvalidArgumentError,
    ShortReadError,
    TransportConnectionError,
    TransportIOError,
    TransportTimeoutError,
)
from brokersock.transport.base import (
    EVENT_READ,
    EVENT_WRITE,
    StreamHandle,
    is_socket_like,
    set_nonblocking,
    validate_handle,
    wait_ready,
)

if TYPE_CHECKING:
    from types import TracebackType

    from brokersock.settings import TransportSettings

log = structlog.get_logger()

DeadlineLike = Deadline | tuple[int, int] | float


class SocketTransport:
    """Single-connection byte-stream transport with bounded reads and writes."""

    def __init__(
        self,
        host: str | None,
        port: int,
        recv_deadline: DeadlineLike = (DEFAULT_RECV_TIMEOUT_SEC, DEFAULT_RECV_TIMEOUT_USEC),
        send_deadline: DeadlineLike = (DEFAULT_SEND_TIMEOUT_SEC, DEFAULT_SEND_TIMEOUT_USEC),
    ) -> None:
        """Initialize an unconnected transport.

        Args:
            host: Broker hostname or IP address
            port: Broker port
            recv_deadline: Per-wait read timeout as (seconds, microseconds)
            send_deadline: Per-wait write timeout as (seconds, microseconds);
                also bounds connection setup
        """
        self.host = host
        self.port = port
        self.recv_deadline = Deadline.of(recv_deadline)
        self.send_deadline = Deadline.of(send_deadline)
        self._stream: StreamHandle | None = None
        self._owns_stream = True
        self._timed_out = False

    @classmethod
    def from_stream(cls, stream: Any, *, close_stream: bool = True, **kwargs: Any) -> SocketTransport:
        """Wrap an already-open stream instead of connecting.

        Args:
            stream: Connected socket, socket-like wrapper, or file object
            close_stream: Whether ``close()`` also closes the stream
            **kwargs: Deadline overrides passed to the constructor

        Raises:
            InvalidArgumentError: If ``stream`` is not an open stream handle
        """
        transport = cls(INJECTED_HOST, INJECTED_PORT, **kwargs)
        transport.set_stream(stream, close_stream=close_stream)
        return transport

    @classmethod
    def from_settings(cls, settings: TransportSettings) -> SocketTransport:
        return cls(
            settings.host,
            settings.port,
            recv_deadline=settings.recv_deadline,
            send_deadline=settings.send_deadline,
        )

    def set_stream(self, stream: Any, *, close_stream: bool = True) -> SocketTransport:
        """Replace the connection with an externally supplied stream."""
        validate_handle(stream)
        set_nonblocking(stream)
        self._stream = stream
        self._owns_stream = close_stream
        self._timed_out = False
        log.debug("transport_stream_attached", stream=type(stream).__name__, fd=stream.fileno())
        return self

    @property
    def connection(self) -> StreamHandle | None:
        return self._stream

    @property
    def connected(self) -> bool:
        return self._stream is not None

    @property
    def timed_out(self) -> bool:
        """Whether the most recent wait expired or the stream reports a timeout."""
        return self._timed_out or bool(getattr(self._stream, "timed_out", False))

    def connect(self) -> SocketTransport:
        """Open the connection if there is none yet.

        Raises:
            TransportConnectionError: If host/port are unset or the connect fails
        """
        if self._stream is not None:
            return self
        if not self.host:
            raise TransportConnectionError("Cannot open null host.", host=self.host, port=self.port)
        if self.port <= 0:
            raise TransportConnectionError("Cannot open without port.", host=self.host, port=self.port)

        timeout = self.send_deadline.total_seconds
        try:
            sock = socket.create_connection((self.host, self.port), timeout=timeout)
        except OSError as e:
            reason = e.strerror or str(e) or type(e).__name__
            log.warning(
                "transport_connect_failed", host=self.host, port=self.port, errno=e.errno, reason=reason
            )
            raise TransportConnectionError(
                f"Could not connect to {self.host}:{self.port} -> {reason} ({e.errno})",
                host=self.host,
                port=self.port,
                errno=e.errno,
                reason=reason,
            ) from e

        sock.setblocking(False)
        self._stream = sock
        self._owns_stream = True
        self._timed_out = False
        log.info("transport_connected", host=self.host, port=self.port, timeout_s=timeout)
        return self

    def close(self) -> SocketTransport:
        """Release the connection; safe to call repeatedly."""
        stream, self._stream = self._stream, None
        if stream is None:
            return self
        if self._owns_stream:
            try:
                stream.close()
            except OSError as e:
                log.debug("transport_close_error", error=str(e))
        log.info("transport_closed", host=self.host, port=self.port)
        return self

    def rewind(self) -> SocketTransport:
        """Seek a file-backed stream back to its start; sockets are left alone."""
        stream = self._stream
        if stream is None:
            return self
        seekable = getattr(stream, "seekable", None)
        if callable(seekable) and seekable():
            stream.seek(0)
        return self

    def read(
        self,
        length: int,
        verify_exact_length: bool = False,
        total_timeout: float | None = None,
    ) -> bytes:
        """Read up to ``length`` bytes.

        Returns as soon as ``length`` bytes arrived or the peer reached end of
        stream, whichever comes first.

        Args:
            length: Maximum number of bytes to read
            verify_exact_length: Raise if fewer than ``length`` bytes arrived
            total_timeout: Optional bound in seconds for the whole call

        Returns:
            Between 0 and ``length`` bytes

        Raises:
            InvalidArgumentError: If ``length`` is negative or above READ_MAX_LEN
            TransportTimeoutError: If the stream stays idle past a deadline
            TransportIOError: On a hard read error or a readiness signal with no data
            ShortReadError: If exact length was requested and EOF came first
        """
        if length > READ_MAX_LEN:
            raise InvalidArgumentError(
                f"Unable to read {length} bytes from stream, max length is {READ_MAX_LEN}"
            )
        if length < 0:
            raise InvalidArgumentError(f"Unable to read {length} bytes from stream")
        stream = self._require_stream(length)

        give_up_at = _give_up_at(total_timeout)
        remaining = length
        data = bytearray()
        while remaining:
            readable = self._wait(stream, EVENT_READ, self.recv_deadline, give_up_at)
            if readable is None:
                break
            if not readable:
                raise TransportTimeoutError(
                    f"stream timed out reading {length} bytes",
                    expected=length,
                    completed=len(data),
                    partial=bytes(data),
                )

            chunk = self._recv(stream, remaining, length, data)
            if chunk:
                data += chunk
                remaining -= len(chunk)
            elif chunk is not None:
                # EOF before the requested length is not an error by itself
                break
            elif self.timed_out:
                raise TransportTimeoutError(
                    f"stream timed out reading {length} bytes",
                    expected=length,
                    completed=len(data),
                    partial=bytes(data),
                )
            else:
                raise TransportIOError(
                    f"Stream reported readable but returned no data reading {length} bytes",
                    expected=length,
                    completed=len(data),
                )

        if remaining and verify_exact_length:
            log.debug("transport_short_read", requested=length, read=len(data))
            raise ShortReadError(length, len(data))
        return bytes(data)

    def write(self, buffer: bytes | bytearray | memoryview | str, total_timeout: float | None = None) -> int:
        """Write the whole buffer, looping over partial writes.

        Args:
            buffer: Data to send; ``str`` is encoded as UTF-8
            total_timeout: Optional bound in seconds for the whole call

        Returns:
            Number of bytes written, always ``len(buffer)``

        Raises:
            TransportTimeoutError: If the stream stays unwritable past a deadline
            TransportIOError: If the write or the readiness wait fails
        """
        if isinstance(buffer, str):
            buffer = buffer.encode("utf-8")
        view = memoryview(buffer).cast("B")
        buflen = len(view)
        stream = self._require_stream(buflen)

        give_up_at = _give_up_at(total_timeout)
        written = 0
        while written < buflen:
            writable = self._wait(stream, EVENT_WRITE, self.send_deadline, give_up_at)
            if writable:
                written += self._send(stream, view[written:], buflen, written)
                continue
            if writable is not None and self.timed_out:
                raise TransportTimeoutError(
                    f"Timed out writing {buflen} bytes to stream after writing {written} bytes",
                    expected=buflen,
                    completed=written,
                )
            raise TransportIOError(
                f"Could not write {buflen} bytes to stream, completed writing only {written} bytes",
                expected=buflen,
                completed=written,
            )
        return written

    def _require_stream(self, expected: int) -> StreamHandle:
        if self._stream is None:
            raise TransportIOError("Not connected", expected=expected)
        return self._stream

    def _wait(self, stream: StreamHandle, events: int, deadline: Deadline, give_up_at: float | None) -> bool | None:
        timeout = deadline.total_seconds
        if give_up_at is not None:
            left = give_up_at - time.monotonic()
            if left <= 0:
                self._timed_out = True
                return False
            timeout = min(timeout, left)
        ready = wait_ready(stream, events, timeout)
        self._timed_out = ready is False
        return ready

    def _recv(self, stream: Any, size: int, expected: int, received: bytearray) -> bytes | None:
        """Read once; None means nothing was available and the stream is not at EOF."""
        try:
            if is_socket_like(stream):
                return stream.recv(size)
            return stream.read(size)
        except BlockingIOError:
            return None
        except TimeoutError as e:
            raise TransportTimeoutError(
                f"stream timed out reading {expected} bytes",
                expected=expected,
                completed=len(received),
                partial=bytes(received),
            ) from e
        except (OSError, ValueError) as e:
            raise TransportIOError(
                f"Error reading {size} bytes from stream: {e}",
                expected=expected,
                completed=len(received),
            ) from e

    def _send(self, stream: Any, data: memoryview, expected: int, completed: int) -> int:
        try:
            if is_socket_like(stream):
                sent = stream.send(data)
            else:
                sent = stream.write(data)
                flush = getattr(stream, "flush", None)
                if callable(flush):
                    flush()
        except BlockingIOError:
            return 0
        except (OSError, ValueError) as e:
            raise TransportIOError(
                f"Could not write {expected} bytes to stream, completed writing only {completed} bytes: {e}",
                expected=expected,
                completed=completed,
            ) from e
        if sent is None:
            return 0
        if sent < 0:
            raise TransportIOError(
                f"Could not write {expected} bytes to stream, completed writing only {completed} bytes",
                expected=expected,
                completed=completed,
            )
        return sent

    def __enter__(self) -> SocketTransport:
        return self.connect()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __del__(self) -> None:
        # Interpreter shutdown or a failed __init__ may leave attributes missing
        stream = getattr(self, "_stream", None)
        if stream is None:
            return
        self._stream = None
        # No logging here: structlog may already be torn down
        if self._owns_stream:
            with contextlib.suppress(OSError):
                stream.close()

    def __repr__(self) -> str:
        state = "connected" if self.connected else "closed"
        return f"<SocketTransport {self.host}:{self.port} {state}>"


def _give_up_at(total_timeout: float | None) -> float | None:
    if total_timeout is None:
        return None
    if total_timeout < 0:
        raise InvalidArgumentError(f"total_timeout must be non-negative, {total_timeout!r} given")
    return time.monotonic() + total_timeout
