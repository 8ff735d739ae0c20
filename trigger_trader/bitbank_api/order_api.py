"""
Order operations for bitbank API
Handles market order creation and order status lookup
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

from trigger_trader.exceptions import ProtocolError
from trigger_trader.models import Order, OrderRequest, TradeSide

logger = logging.getLogger(__name__)

ORDER_PATH = "/user/spot/order"


def _optional_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ProtocolError(f"Expected a decimal string, got {value!r}")


def parse_order(data: Dict[str, Any]) -> Order:
    """
    Parse the `data` object of GET/POST /user/spot/order

    Raises:
        ProtocolError: order_id or status missing
    """
    if not isinstance(data, dict):
        raise ProtocolError(f"Order response is not an object: {data!r}")
    try:
        order_id = int(data["order_id"])
        status = str(data["status"])
    except (KeyError, TypeError, ValueError) as e:
        raise ProtocolError(f"Order response missing order_id/status: {e}")

    return Order(
        order_id=order_id,
        pair=str(data.get("pair", "")),
        status=status,
        side=data.get("side"),
        type=data.get("type"),
        start_amount=_optional_decimal(data.get("start_amount")),
        executed_amount=_optional_decimal(data.get("executed_amount")),
        average_price=_optional_decimal(data.get("average_price")),
        raw=data,
    )


async def create_market_order(request_func: Callable, pair: str, amount: str, side: TradeSide) -> int:
    """
    Create a market order

    Places a live order. Not idempotent, callers must not retry blindly.

    Args:
        request_func: Authenticated request function
        pair: Trading pair (e.g., "btc_jpy")
        amount: Base amount with 6 fractional digits
        side: TradeSide.BUY or TradeSide.SELL

    Returns:
        Exchange order id
    """
    req = OrderRequest(pair=pair, amount=amount, side=TradeSide(side))
    data = await request_func("POST", ORDER_PATH, data=req.to_payload())

    try:
        order_id = int(data["order_id"])
    except (KeyError, TypeError, ValueError) as e:
        raise ProtocolError(f"New order response missing order_id: {e}")

    logger.info(f"Created market {req.side.value} order {order_id}: {amount} {pair}")
    return order_id


async def get_order(request_func: Callable, pair: str, order_id: int) -> Order:
    """
    Get order details

    Args:
        request_func: Authenticated request function
        pair: Trading pair the order was placed on
        order_id: bitbank order id

    Returns:
        Order including status and average fill price
    """
    query = urlencode({"pair": pair, "order_id": order_id})
    data = await request_func("GET", f"{ORDER_PATH}?{query}")
    return parse_order(data)
