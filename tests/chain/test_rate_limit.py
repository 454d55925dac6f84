#!filepath: tests/chain/test_rate_limit.py
import pytest

from feecast.chain.rate_limit import is_rate_limited
from feecast.utils.errors import PermanentUpstreamError, TransientUpstreamError, UpstreamError


@pytest.mark.parametrize(
    "exc",
    [
        TransientUpstreamError("anything"),
        UpstreamError("http error", status=429),
        UpstreamError("limit exceeded", code=-32005),
        UpstreamError("x", code=429),
        UpstreamError("Your app has exceeded its compute units: Rate Limit reached"),
        UpstreamError("request throttled, try later"),
        UpstreamError("Too Many Requests"),
    ],
)
def test_throttling_is_rate_limited(exc):
    assert is_rate_limited(exc)


@pytest.mark.parametrize(
    "exc",
    [
        UpstreamError("http error", status=500),
        UpstreamError("header not found", code=-32000),
        PermanentUpstreamError("too many requests", status=429),
        ValueError("rate limit"),
        KeyError("number"),
    ],
)
def test_other_failures_are_not_rate_limited(exc):
    assert not is_rate_limited(exc)


def test_upstream_error_str_includes_status_and_code():
    assert str(UpstreamError("boom", status=502, code=-1)) == "boom status=502 code=-1"
