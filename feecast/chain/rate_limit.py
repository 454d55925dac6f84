# feecast/chain/rate_limit.py
from __future__ import annotations

from feecast.utils.errors import (
    PermanentUpstreamError,
    TransientUpstreamError,
    UpstreamError,
)

RATE_LIMIT_STATUS = frozenset({429})

# -32005: "limit exceeded" (EIP-1474); some providers echo 429 as the rpc code
RATE_LIMIT_CODES = frozenset({429, -32005})

RATE_LIMIT_MARKERS = (
    "rate limit",
    "rate-limit",
    "ratelimit",
    "too many requests",
    "request limit",
    "throttl",
)


def is_rate_limited(exc: BaseException) -> bool:
    """
    Default retry classifier for JSON-RPC block sources.

    True only for throttling: an explicit TransientUpstreamError, HTTP 429,
    a known rate-limit rpc code, or a throttling phrase in the message.
    """
    if isinstance(exc, TransientUpstreamError):
        return True
    if isinstance(exc, PermanentUpstreamError):
        return False
    if not isinstance(exc, UpstreamError):
        return False

    if exc.status in RATE_LIMIT_STATUS:
        return True
    if exc.code in RATE_LIMIT_CODES:
        return True

    message = (exc.message or "").lower()
    return any(marker in message for marker in RATE_LIMIT_MARKERS)
