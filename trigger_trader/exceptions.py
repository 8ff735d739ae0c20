"""
Domain exceptions for the trader.

The REST client and the ticker stream translate httpx / aiohttp failures
into these types so callers only ever deal with one taxonomy.
"""

from typing import Optional


class ExchangeError(Exception):
    """Base exchange error with an optional exchange error code."""

    def __init__(self, message: str, code: Optional[int] = None):
        self.message = message
        self.code = code
        super().__init__(message)


class AuthError(ExchangeError):
    """Signature, credentials or time window rejected by the exchange."""


class NetworkError(ExchangeError):
    """Transport-level failure (timeout, connection reset, server unavailable)."""


class ProtocolError(ExchangeError):
    """Response could not be parsed into the expected shape."""


class ExchangeRejected(ExchangeError):
    """Business-rule rejection (insufficient funds, invalid amount, ...)."""

    def __init__(self, reason: str, code: Optional[int] = None):
        self.reason = reason
        super().__init__(f"Order rejected: {reason}", code=code)


class OrderTimeoutError(ExchangeError):
    """Order did not reach FULLY_FILLED within the configured poll timeout."""
