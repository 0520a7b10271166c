# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""End-to-end tests over a real TCP connection to the mock broker."""

from __future__ import annotations

import os

import pytest

from brokersock.exceptions import ShortReadError
from brokersock.transport import SocketTransport

from .mock_broker_server import MockBroker


def test_ping_pong(broker_host: str) -> None:
    """Write PING, read PONG back with exact-length verification."""
    with MockBroker(["PONG"]) as server:
        transport = SocketTransport(
            broker_host,
            server.port,
            recv_deadline=(0, 750_000),
            send_deadline=(0, 100_000),
        )
        transport.connect()

        assert transport.write(b"PING") == 4
        assert transport.read(4, True) == b"PONG"

        transport.close()
        assert server.received_bytes == b"PING"


def test_request_response_frames(broker_host: str) -> None:
    """Length-prefixed frame handled by the caller on top of raw reads."""
    body = os.urandom(300)
    frame = len(body).to_bytes(4, "big") + body

    with MockBroker([frame]) as server:
        with SocketTransport(broker_host, server.port) as transport:
            transport.write(b"\x00\x00\x00\x04req!")
            size = int.from_bytes(transport.read(4, True), "big")
            assert transport.read(size, True) == body


def test_greeting_then_close_is_short_read(broker_host: str) -> None:
    with MockBroker(greeting="HELLO", close_after_responses=True) as server:
        with SocketTransport(broker_host, server.port) as transport:
            with pytest.raises(ShortReadError) as exc_info:
                transport.read(10, True)
    assert exc_info.value.read == 5
    assert exc_info.value.shortfall == 5


def test_greeting_then_close_partial_read(broker_host: str) -> None:
    with MockBroker(greeting="HELLO", close_after_responses=True) as server:
        with SocketTransport(broker_host, server.port) as transport:
            assert transport.read(10, False) == b"HELLO"


def test_connect_twice_opens_one_connection(broker_host: str) -> None:
    with MockBroker(["ok"]) as server:
        transport = SocketTransport(broker_host, server.port)
        transport.connect()
        transport.connect()
        transport.write(b"hi")
        assert transport.read(2, True) == b"ok"
        transport.close()
    assert server.accepted == 1
