from __future__ import annotations

import socket

import pytest

from brokersock.transport import ChaosStream, SocketTransport

Pair = tuple[socket.socket, socket.socket]


def test_chaos_limits_send_size(sock_pair: Pair) -> None:
    local, peer = sock_pair
    stream = ChaosStream(local, max_send_chunk=2, label="t")

    assert stream.send(b"hello") == 2
    assert peer.recv(16) == b"he"
    assert stream.send_sizes == [2]


def test_chaos_limits_recv_size(sock_pair: Pair) -> None:
    local, peer = sock_pair
    peer.sendall(b"hello")
    stream = ChaosStream(local, max_recv_chunk=3)

    assert stream.recv(1024) == b"hel"
    assert stream.recv(1024) == b"lo"


def test_chaos_spurious_every_n_receives(sock_pair: Pair) -> None:
    local, peer = sock_pair
    peer.sendall(b"abcd")
    stream = ChaosStream(local, max_recv_chunk=1, spurious_every_n_receives=2, label="t")

    assert stream.recv(4) == b"a"
    with pytest.raises(BlockingIOError, match="t: injected spurious wakeup on receive #2"):
        stream.recv(4)
    assert not stream.timed_out
    assert stream.recv(4) == b"b"


def test_chaos_timeout_sets_flag(sock_pair: Pair) -> None:
    local, peer = sock_pair
    peer.sendall(b"ab")
    stream = ChaosStream(local, timeout_every_n_receives=1)

    with pytest.raises(BlockingIOError):
        stream.recv(4)
    assert stream.timed_out


def test_chaos_random_chunks_are_deterministic(sock_pair: Pair) -> None:
    local, peer = sock_pair
    first = ChaosStream(local, seed=3, max_send_chunk=10, random_chunks=True)
    second = ChaosStream(local, seed=3, max_send_chunk=10, random_chunks=True)

    for _ in range(5):
        first.send(b"x" * 50)
        second.send(b"x" * 50)
    assert first.send_sizes == second.send_sizes
    assert all(1 <= size <= 10 for size in first.send_sizes)


def test_chaos_stream_is_accepted_by_transport(sock_pair: Pair) -> None:
    local, _ = sock_pair
    stream = ChaosStream(local)
    transport = SocketTransport.from_stream(stream)

    assert transport.connection is stream
    assert local.getblocking() is False
    transport.close()
    assert local.fileno() == -1
