from __future__ import annotations

from functools import wraps
from typing import Any, Callable

from flask import jsonify

from feecast import logs
from feecast.utils.errors import NoBaseFeeError, UpstreamError


def handle_service_errors(func: Callable[..., Any]):
    """
    Decorator: convert service exceptions into JSON error responses.

    Contract (FROZEN):
    - NoBaseFeeError → 503
    - UpstreamError  → 502
    - anything else  → 500 (logged with traceback)
    - Returns JSON {error}
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except NoBaseFeeError as e:
            return jsonify({"error": str(e)}), 503
        except UpstreamError as e:
            logs.warning(f"[API] {func.__name__} upstream failure: {e}")
            return jsonify({"error": "upstream unavailable", "detail": str(e)}), 502
        except Exception as e:
            logs.exception(f"[API] {func.__name__} failed")
            return jsonify({"error": str(e) or "unknown error"}), 500

    return wrapper
