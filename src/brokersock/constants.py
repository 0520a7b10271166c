# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Shared constants for brokersock."""

from __future__ import annotations

# Largest single read request (5 MiB); callers chunk anything bigger
READ_MAX_LEN = 5_242_880

# Default readiness-wait deadlines as (seconds, microseconds)
DEFAULT_RECV_TIMEOUT_SEC = 0
DEFAULT_RECV_TIMEOUT_USEC = 750_000
DEFAULT_SEND_TIMEOUT_SEC = 0
DEFAULT_SEND_TIMEOUT_USEC = 100_000

USEC_PER_SEC = 1_000_000

# Placeholders used when wrapping an injected stream
INJECTED_HOST = "localhost"
INJECTED_PORT = 0

ENV_PREFIX = "BROKERSOCK_"
