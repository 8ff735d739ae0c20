"""
Fill notifications

Notifiers are called once an order is FULLY_FILLED. Delivery is best effort:
failures are logged and never propagate into the order flow.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import httpx

from trigger_trader.models import TradeSide

logger = logging.getLogger(__name__)

SIDE_VERBS = {TradeSide.BUY: "Bought", TradeSide.SELL: "Sold"}


@dataclass(frozen=True)
class FillReport:
    pair: str
    asset: str
    side: TradeSide
    amount: str
    average_price: Optional[Decimal]
    trigger_price: Decimal
    reference_price: Decimal
    middle_price: Decimal


def _price(value: Optional[Decimal]) -> str:
    if value is None:
        return "unknown"
    return f"{value:.2f}"


def format_fill_message(report: FillReport) -> str:
    """
    Plain-text summary of a fill.

    Example:
        Order filled: Bought 0.014286 btc at 4900000.00 on btc_jpy
        Buy trigger price: 4925000.00
        Expected price: 4900000.00
        24h mid price: 4950000.00
    """
    verb = SIDE_VERBS[report.side]
    return "\n".join([
        f"Order filled: {verb} {report.amount} {report.asset} at {_price(report.average_price)} on {report.pair}",
        f"{report.side.value.capitalize()} trigger price: {_price(report.trigger_price)}",
        f"Expected price: {_price(report.reference_price)}",
        f"24h mid price: {_price(report.middle_price)}",
    ])


class Notifier(ABC):
    """Port used by OrderExecutor after a fill"""

    @abstractmethod
    async def notify(self, report: FillReport) -> None:
        pass

    async def close(self):
        pass


class LogNotifier(Notifier):
    """Fallback when no webhook is configured"""

    async def notify(self, report: FillReport) -> None:
        logger.info(format_fill_message(report))


class WebhookNotifier(Notifier):
    """POST the fill summary as plain text to a webhook URL"""

    def __init__(self, url: str, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self):
        await self._client.aclose()

    async def notify(self, report: FillReport) -> None:
        message = format_fill_message(report)
        try:
            response = await self._client.post(
                self.url,
                content=message.encode("utf-8"),
                headers={"Content-Type": "text/plain; charset=utf-8"},
            )
            response.raise_for_status()
            logger.info(f"Fill notification delivered (HTTP {response.status_code})")
        except httpx.HTTPStatusError as e:
            logger.warning(f"Webhook rejected fill notification: HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.warning(f"Failed to deliver fill notification: {e}")
