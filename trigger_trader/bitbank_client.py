"""
bitbank private REST API client

Owns a single httpx.AsyncClient and the API credentials; both are read-only
after construction and reused for every sequential call.

- HMAC-SHA256 request signing (see bitbank_api.auth)
- Response envelope unwrapping ({"success": 1, "data": {...}})
- Translation of transport and API errors into trigger_trader.exceptions
"""

import asyncio
import json
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from trigger_trader.bitbank_api import account_api, order_api
from trigger_trader.bitbank_api.auth import sign_get, sign_post
from trigger_trader.exceptions import (
    AuthError,
    ExchangeRejected,
    NetworkError,
    ProtocolError,
)
from trigger_trader.models import Credentials, Order, TradeSide

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://api.bitbank.cc/v1"

# bitbank error codes that mean "try again later" rather than "request is wrong"
TRANSIENT_ERROR_CODES = {10001, 10003, 10005, 10007, 10008, 10009}
AUTH_ERROR_CODES = range(20000, 21000)


def error_for_code(code: Optional[int]) -> Exception:
    """Map a bitbank error code to the matching domain exception"""
    if code is None:
        return ProtocolError("Error response without code")
    if code in AUTH_ERROR_CODES:
        return AuthError(f"Authentication rejected (code {code})", code=code)
    if code in TRANSIENT_ERROR_CODES:
        return NetworkError(f"Exchange temporarily unavailable (code {code})", code=code)
    return ExchangeRejected(f"code {code}", code=code)


class BitbankClient:
    """
    Authenticated bitbank REST client

    Usage:
        async with BitbankClient(credentials) as client:
            balances = await client.get_assets()
    """

    def __init__(
        self,
        credentials: Credentials,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = 10.0,
        max_retries: int = 3,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._credentials = credentials
        self._endpoint = endpoint.rstrip("/")
        self._max_retries = max_retries
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        logger.info(f"BitbankClient initialized (endpoint={self._endpoint})")

    def __repr__(self) -> str:
        return f"BitbankClient(endpoint={self._endpoint!r}, access_key={self._credentials.access_key!r})"

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        """Close the underlying httpx client to release connections."""
        if self._client:
            await self._client.aclose()

    # ===== Request plumbing =====

    async def _request(
        self,
        method: str,
        path: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Make an authenticated request and return the envelope's `data` object

        GET requests are retried on HTTP 429 with exponential backoff. POST
        requests are never retried since they place live orders.

        Raises:
            AuthError, NetworkError, ProtocolError, ExchangeRejected
        """
        url = f"{self._endpoint}{path}"

        for attempt in range(self._max_retries):
            # Fresh request time per attempt; reused timestamps are rejected
            if method == "GET":
                headers = sign_get(self._credentials, path)
                send = self._client.get(url, headers=headers)
            elif method == "POST":
                body = json.dumps(data or {}, separators=(",", ":"))
                headers = sign_post(self._credentials, body)
                headers["Content-Type"] = "application/json"
                send = self._client.post(url, headers=headers, content=body.encode("utf-8"))
            else:
                raise ValueError(f"Unsupported method: {method}")

            try:
                response = await send
            except httpx.TimeoutException as e:
                logger.error(f"bitbank timeout: {method} {path}")
                raise NetworkError(f"Timeout on {method} {path}: {e}")
            except httpx.TransportError as e:
                logger.error(f"bitbank connection failed: {method} {path}: {e}")
                raise NetworkError(f"Transport failure on {method} {path}: {e}")
            except httpx.HTTPError as e:
                # Decoding errors, redirect loops
                logger.error(f"bitbank request failed: {method} {path}: {e}")
                raise NetworkError(f"Request failure on {method} {path}: {e}")

            if response.status_code == 429 and method == "GET" and attempt < self._max_retries - 1:
                wait_time = 2 ** attempt
                logger.warning(
                    f"Rate limited (429) on {method} {path}, retrying in {wait_time}s "
                    f"(attempt {attempt + 1}/{self._max_retries})"
                )
                await asyncio.sleep(wait_time)
                continue

            return self._unwrap(method, path, response)

        raise NetworkError(f"Rate limit exceeded after {self._max_retries} attempts on {method} {path}")

    @staticmethod
    def _unwrap(method: str, path: str, response: httpx.Response) -> Dict[str, Any]:
        """Validate the response envelope and return its data"""
        status = response.status_code
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict) and "success" in payload:
            data = payload.get("data")
            if payload["success"] == 1:
                if not isinstance(data, dict):
                    raise ProtocolError(f"Response to {method} {path} has no data object")
                return data
            code = data.get("code") if isinstance(data, dict) else None
            error = error_for_code(code)
            logger.error(f"bitbank API error on {method} {path}: HTTP {status}, code {code}")
            raise error

        body = response.text[:200]
        if status in (401, 403):
            raise AuthError(f"HTTP {status} on {method} {path}: {body}")
        if status == 429 or status >= 500:
            raise NetworkError(f"HTTP {status} on {method} {path}: {body}")
        raise ProtocolError(f"Unexpected response to {method} {path} (HTTP {status}): {body}")

    # ===== Account =====

    async def get_assets(self) -> Dict[str, Decimal]:
        """Free balance per asset symbol, always fetched fresh"""
        return await account_api.get_assets(self._request)

    # ===== Orders =====

    async def submit_market_order(self, pair: str, amount: str, side: TradeSide) -> int:
        """Place a market order and return its id. Never retried."""
        return await order_api.create_market_order(self._request, pair, amount, side)

    async def get_order(self, pair: str, order_id: int) -> Order:
        return await order_api.get_order(self._request, pair, order_id)

    async def get_order_status(self, pair: str, order_id: int) -> str:
        order = await self.get_order(pair, order_id)
        return order.status
