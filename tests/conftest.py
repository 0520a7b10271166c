# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Pytest configuration and fixtures."""

from __future__ import annotations

import contextlib
import socket
from typing import TYPE_CHECKING

import pytest
import structlog

from brokersock.deadline import Deadline

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def broker_host() -> str:
    """Default broker host for testing."""
    return "127.0.0.1"


@pytest.fixture
def fast_deadline() -> Deadline:
    """Short readiness deadline so timeout tests finish quickly."""
    return Deadline(seconds=0, microseconds=50_000)


@pytest.fixture
def sock_pair() -> Iterator[tuple[socket.socket, socket.socket]]:
    """Connected stream socket pair: (local end, peer end)."""
    local, peer = socket.socketpair(socket.AF_UNIX if hasattr(socket, "AF_UNIX") else socket.AF_INET)
    peer.settimeout(2)
    yield local, peer
    for sock in (local, peer):
        with contextlib.suppress(OSError):
            sock.close()


@pytest.fixture
def unused_port(broker_host: str) -> int:
    """A port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((broker_host, 0))
        return sock.getsockname()[1]


@pytest.fixture
def stalled_pair(sock_pair: tuple[socket.socket, socket.socket]) -> tuple[socket.socket, socket.socket]:
    """Socket pair whose local send buffer is full and whose peer never reads."""
    local, peer = sock_pair
    local.setblocking(False)
    chunk = b"\0" * 65536
    while True:
        try:
            local.send(chunk)
        except BlockingIOError:
            return local, peer


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo configure_logging() calls so loggers never hold a closed stderr."""
    yield
    structlog.reset_defaults()
