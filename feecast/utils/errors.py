# feecast/utils/errors.py
from __future__ import annotations

from typing import Optional


class UserInputError(RuntimeError):
    """
    Raised for invalid user-provided config (RPC url, window sizes, etc).
    Should NOT print traceback.
    """


class UpstreamError(RuntimeError):
    """
    Any failure talking to the upstream block source.

    status : HTTP status code, when the failure came from the transport layer
    code   : JSON-RPC error code, when the node answered with an error object
    """

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code

    def __str__(self) -> str:
        parts = [self.message]
        if self.status is not None:
            parts.append(f"status={self.status}")
        if self.code is not None:
            parts.append(f"code={self.code}")
        return " ".join(parts)


class TransientUpstreamError(UpstreamError):
    """Upstream signalled throttling; retry after a delay."""


class PermanentUpstreamError(UpstreamError):
    """Upstream failure that a retry will not fix."""


class NoBaseFeeError(RuntimeError):
    """Latest block carries no base fee (pre-London chain or empty answer)."""
