"""
Shared test fixtures for the trigger trader tests.

Provides reusable fixtures for:
- API credentials
- Ticker snapshots and Socket.IO ticker frames
- Mock exchange clients
"""

import json
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from trigger_trader.models import Credentials, Order, TickerSnapshot


@pytest.fixture
def credentials():
    return Credentials(access_key="test-key", secret_key="hoge", time_window_ms=1000)


@pytest.fixture
def make_ticker():
    """Factory for TickerSnapshot from plain numbers."""

    def _make(sell=4950000, buy=4950000, high=5000000, low=4900000):
        return TickerSnapshot(
            sell=Decimal(str(sell)),
            buy=Decimal(str(buy)),
            high=Decimal(str(high)),
            low=Decimal(str(low)),
        )

    return _make


@pytest.fixture
def ticker_frame():
    """Factory for a bitbank ticker room message as sent on the wire."""

    def _frame(pair="btc_jpy", sell="4950000", buy="4949000", high="5000000", low="4900000"):
        payload = [
            "message",
            {
                "room_name": f"ticker_{pair}",
                "message": {
                    "data": {
                        "sell": sell,
                        "buy": buy,
                        "high": high,
                        "low": low,
                        "open": "4920000",
                        "last": "4949500",
                        "vol": "123.4567",
                        "timestamp": 1721121776490,
                    }
                },
            },
        ]
        return "42" + json.dumps(payload)

    return _frame


def _order(status="FULLY_FILLED", order_id=42, average_price="4900000", pair="btc_jpy"):
    return Order(
        order_id=order_id,
        pair=pair,
        status=status,
        side="buy",
        type="market",
        average_price=Decimal(average_price) if average_price is not None else None,
    )


@pytest.fixture
def make_order():
    """Factory for Order as returned by BitbankClient.get_order."""
    return _order


@pytest.fixture
def mock_client():
    """Mock BitbankClient with async methods."""
    client = MagicMock()
    client.get_assets = AsyncMock(return_value={"btc": Decimal("0.5"), "jpy": Decimal("100000")})
    client.submit_market_order = AsyncMock(return_value=42)
    client.get_order = AsyncMock(return_value=_order())
    return client
