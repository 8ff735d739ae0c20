"""
Authentication utilities for the bitbank private REST API

Every private call is signed with HMAC-SHA256 over a canonical string:
- GET:  request_time + time_window + "/v1" + path (query string included)
- POST: request_time + time_window + body (exact bytes sent on the wire)
"""

import hashlib
import hmac
import time
from typing import Dict

from trigger_trader.models import Credentials

API_VERSION_PREFIX = "/v1"


def generate_signature(secret: str, message: str) -> str:
    """
    Generate HMAC-SHA256 signature for a canonical request string

    Args:
        secret: API secret key
        message: Canonical message (see build_get_message / build_post_message)

    Returns:
        64-character lowercase hex digest
    """
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def get_request_time_ms() -> int:
    """Milliseconds since epoch, taken fresh for every request."""
    return int(time.time() * 1000)


def build_get_message(request_time_ms: int, time_window_ms: int, path: str) -> str:
    return f"{request_time_ms}{time_window_ms}{API_VERSION_PREFIX}{path}"


def build_post_message(request_time_ms: int, time_window_ms: int, body: str) -> str:
    return f"{request_time_ms}{time_window_ms}{body}"


def build_auth_headers(credentials: Credentials, signature: str, request_time_ms: int) -> Dict[str, str]:
    return {
        "ACCESS-KEY": credentials.access_key,
        "ACCESS-SIGNATURE": signature.lower(),
        "ACCESS-REQUEST-TIME": str(request_time_ms),
        "ACCESS-TIME-WINDOW": str(credentials.time_window_ms),
    }


def sign_get(credentials: Credentials, path: str) -> Dict[str, str]:
    """
    Build the auth headers for a GET request

    Args:
        credentials: API credentials
        path: Endpoint path below /v1, including the query string

    Returns:
        Header dict with a fresh request time
    """
    request_time = get_request_time_ms()
    message = build_get_message(request_time, credentials.time_window_ms, path)
    signature = generate_signature(credentials.secret_key, message)
    return build_auth_headers(credentials, signature, request_time)


def sign_post(credentials: Credentials, body: str) -> Dict[str, str]:
    """Build the auth headers for a POST request whose serialized body is `body`."""
    request_time = get_request_time_ms()
    message = build_post_message(request_time, credentials.time_window_ms, body)
    signature = generate_signature(credentials.secret_key, message)
    return build_auth_headers(credentials, signature, request_time)
