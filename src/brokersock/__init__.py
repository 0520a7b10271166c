# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Timeout-bounded byte-stream transport for broker wire clients."""

from __future__ import annotations

from brokersock.constants import READ_MAX_LEN
from brokersock.deadline import Deadline
from brokersock.exceptions import (
    InvalidArgumentError,
    ShortReadError,
    TransportConnectionError,
    TransportError,
    TransportIOError,
    TransportTimeoutError,
)
from brokersock.transport import SocketTransport

__all__ = [
    "READ_MAX_LEN",
    "Deadline",
    "InvalidArgumentError",
    "ShortReadError",
    "SocketTransport",
    "TransportConnectionError",
    "TransportError",
    "TransportIOError",
    "TransportTimeoutError",
]
