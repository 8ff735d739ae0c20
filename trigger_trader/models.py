"""
Value types shared by the client, the ticker stream, the trigger rules and the executor.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

FULLY_FILLED = "FULLY_FILLED"
MARKET_ORDER = "market"


class TradeSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class Credentials:
    """API credentials, immutable for the life of the process."""
    access_key: str
    secret_key: str = field(repr=False)
    time_window_ms: int = 5000

    def __post_init__(self):
        if int(self.time_window_ms) <= 0:
            raise ValueError(f"time_window_ms must be positive, got {self.time_window_ms}")


@dataclass(frozen=True)
class Asset:
    symbol: str
    free_amount: Decimal


@dataclass(frozen=True)
class TickerSnapshot:
    """Best prices and 24h range for one pair at one instant"""
    sell: Decimal
    buy: Decimal
    high: Decimal
    low: Decimal
    last: Optional[Decimal] = None
    timestamp: Optional[int] = None


@dataclass(frozen=True)
class TradePlan:
    """
    Side chosen for a cycle.

    For SELL, amount is the asset quantity held. For BUY, amount is the
    quote-currency budget to spend.
    """
    side: TradeSide
    amount: Decimal


@dataclass(frozen=True)
class OrderRequest:
    pair: str
    amount: str  # always 6 fractional digits
    side: TradeSide
    type: str = MARKET_ORDER

    def to_payload(self) -> Dict[str, str]:
        # Key order is part of the signed body
        return {
            "pair": self.pair,
            "amount": self.amount,
            "side": self.side.value,
            "type": self.type,
        }


@dataclass(frozen=True)
class OrderHandle:
    order_id: int
    pair: str


@dataclass(frozen=True)
class Order:
    """Order as reported by GET /user/spot/order"""
    order_id: int
    pair: str
    status: str
    side: Optional[str] = None
    type: Optional[str] = None
    start_amount: Optional[Decimal] = None
    executed_amount: Optional[Decimal] = None
    average_price: Optional[Decimal] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def is_filled(self) -> bool:
        return self.status == FULLY_FILLED


@dataclass(frozen=True)
class TriggerPrices:
    middle: Decimal
    sell_trigger: Decimal
    buy_trigger: Decimal


@dataclass(frozen=True)
class TradeDecision:
    """
    Outcome of evaluating one ticker.

    trigger_price / reference_price refer to the side of the plan: the sell
    trigger and best sell price for SELL, the buy trigger and best buy price
    for BUY.
    """
    fired: bool
    prices: TriggerPrices
    trigger_price: Decimal
    reference_price: Decimal
    order: Optional[OrderRequest] = None
