"""Fault-injection stream wrapper (deterministic).

This is used for resilience testing. It wraps a connected socket and injects
partial writes, short reads, spurious wakeups and timeouts at deterministic
intervals so tests are repeatable. Pass it to ``SocketTransport.from_stream``.
"""

from __future__ import annotations

import random
import socket
from typing import Any


class ChaosStream:
    def __init__(
        self,
        inner: socket.socket,
        *,
        seed: int = 1,
        max_send_chunk: int = 0,
        max_recv_chunk: int = 0,
        spurious_every_n_receives: int = 0,
        timeout_every_n_receives: int = 0,
        random_chunks: bool = False,
        label: str = "chaos",
    ) -> None:
        self._inner = inner
        self._rng = random.Random(int(seed))
        self._max_send = int(max_send_chunk or 0)
        self._max_recv = int(max_recv_chunk or 0)
        self._spurious_n = int(spurious_every_n_receives or 0)
        self._timeout_n = int(timeout_every_n_receives or 0)
        self._random_chunks = bool(random_chunks)
        self._label = str(label or "chaos")
        self._rx_count = 0
        self.timed_out = False
        self.send_sizes: list[int] = []

    def fileno(self) -> int:
        return self._inner.fileno()

    def setblocking(self, flag: bool) -> None:
        self._inner.setblocking(flag)

    def close(self) -> None:
        self._inner.close()

    def send(self, data: Any) -> int:
        view = memoryview(data)
        limit = self._limit(self._max_send, len(view))
        sent = self._inner.send(view[:limit])
        self.send_sizes.append(sent)
        return sent

    def recv(self, bufsize: int) -> bytes:
        self._rx_count += 1

        if self._timeout_n > 0 and (self._rx_count % self._timeout_n) == 0:
            # Simulate the stream's own timeout tripping without touching the socket.
            self.timed_out = True
            raise BlockingIOError(f"{self._label}: injected timeout on receive #{self._rx_count}")

        if self._spurious_n > 0 and (self._rx_count % self._spurious_n) == 0:
            raise BlockingIOError(f"{self._label}: injected spurious wakeup on receive #{self._rx_count}")

        self.timed_out = False
        return self._inner.recv(self._limit(self._max_recv, bufsize))

    def _limit(self, cap: int, size: int) -> int:
        if cap <= 0 or size <= cap:
            return size
        if self._random_chunks:
            return self._rng.randint(1, cap)
        return cap

    def __repr__(self) -> str:
        return f"<ChaosStream {self._label} fd={self.fileno()}>"
