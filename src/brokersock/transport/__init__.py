# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport layer for broker connections."""

from __future__ import annotations

from brokersock.transport.base import StreamHandle
from brokersock.transport.chaos import ChaosStream
from brokersock.transport.tcp import SocketTransport

__all__ = ["ChaosStream", "SocketTransport", "StreamHandle"]
