"""
Tests for trigger_trader/bitbank_api/order_api.py and account_api.py

Covers market order creation, order lookup, balance parsing and the
ProtocolError raised for unexpected response shapes. The authenticated
request function is mocked.
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from trigger_trader.bitbank_api.account_api import get_assets, parse_assets
from trigger_trader.bitbank_api.order_api import create_market_order, get_order, parse_order
from trigger_trader.exceptions import ProtocolError
from trigger_trader.models import TradeSide


class TestCreateMarketOrder:
    """Tests for create_market_order()"""

    @pytest.mark.asyncio
    async def test_posts_market_order_payload(self):
        """Happy path: POSTs pair/amount/side/type and returns the order id."""
        request_func = AsyncMock(return_value={"order_id": 123456, "status": "UNFILLED"})

        order_id = await create_market_order(request_func, "btc_jpy", "0.014286", TradeSide.BUY)

        assert order_id == 123456
        request_func.assert_called_once_with(
            "POST",
            "/user/spot/order",
            data={"pair": "btc_jpy", "amount": "0.014286", "side": "buy", "type": "market"},
        )

    @pytest.mark.asyncio
    async def test_payload_key_order_is_stable(self):
        """The body keys are serialized in pair, amount, side, type order."""
        request_func = AsyncMock(return_value={"order_id": 1})
        await create_market_order(request_func, "btc_jpy", "1.000000", TradeSide.SELL)
        payload = request_func.call_args.kwargs["data"]
        assert list(payload) == ["pair", "amount", "side", "type"]

    @pytest.mark.asyncio
    async def test_accepts_plain_side_string(self):
        """Edge case: "sell" string is coerced to TradeSide."""
        request_func = AsyncMock(return_value={"order_id": 9})
        await create_market_order(request_func, "btc_jpy", "1.000000", "sell")
        assert request_func.call_args.kwargs["data"]["side"] == "sell"

    @pytest.mark.asyncio
    async def test_missing_order_id_raises_protocol_error(self):
        """Failure: response without order_id."""
        request_func = AsyncMock(return_value={"status": "UNFILLED"})
        with pytest.raises(ProtocolError):
            await create_market_order(request_func, "btc_jpy", "1.000000", TradeSide.SELL)


class TestGetOrder:
    """Tests for get_order() / parse_order()"""

    @pytest.mark.asyncio
    async def test_builds_query_path(self):
        """GET path carries pair and order_id as a query string."""
        request_func = AsyncMock(return_value={"order_id": 7, "pair": "btc_jpy", "status": "UNFILLED"})

        order = await get_order(request_func, "btc_jpy", 7)

        request_func.assert_called_once_with("GET", "/user/spot/order?pair=btc_jpy&order_id=7")
        assert order.order_id == 7
        assert order.status == "UNFILLED"
        assert not order.is_filled

    def test_parses_fill_details(self):
        """average_price and amounts are parsed as Decimal."""
        order = parse_order({
            "order_id": 7,
            "pair": "btc_jpy",
            "side": "buy",
            "type": "market",
            "start_amount": "0.014286",
            "executed_amount": "0.014286",
            "average_price": "4901000.5",
            "status": "FULLY_FILLED",
        })
        assert order.is_filled
        assert order.average_price == Decimal("4901000.5")
        assert order.executed_amount == Decimal("0.014286")

    def test_empty_average_price_is_none(self):
        """Edge case: unfilled orders report an empty average price."""
        order = parse_order({"order_id": 1, "status": "UNFILLED", "average_price": ""})
        assert order.average_price is None

    def test_missing_status_raises_protocol_error(self):
        with pytest.raises(ProtocolError):
            parse_order({"order_id": 1})

    def test_non_numeric_price_raises_protocol_error(self):
        with pytest.raises(ProtocolError):
            parse_order({"order_id": 1, "status": "FULLY_FILLED", "average_price": "abc"})


class TestGetAssets:
    """Tests for get_assets() / parse_assets()"""

    @pytest.mark.asyncio
    async def test_maps_symbol_to_free_amount(self):
        request_func = AsyncMock(return_value={
            "assets": [
                {"asset": "jpy", "free_amount": "100000.0000", "locked_amount": "0"},
                {"asset": "btc", "free_amount": "0.50000000", "locked_amount": "0.1"},
            ]
        })

        balances = await get_assets(request_func)

        request_func.assert_called_once_with("GET", "/user/assets")
        assert balances == {"jpy": Decimal("100000"), "btc": Decimal("0.5")}

    def test_missing_assets_list_raises(self):
        with pytest.raises(ProtocolError):
            parse_assets({"foo": []})

    def test_malformed_entry_raises(self):
        with pytest.raises(ProtocolError):
            parse_assets({"assets": [{"asset": "btc"}]})
