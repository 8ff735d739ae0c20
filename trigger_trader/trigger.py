"""
Trigger rules

Pure functions deciding which side to trade in a cycle and whether a ticker
crosses the trigger price. No I/O.

Trigger prices interpolate between the 24h midpoint and the 24h extreme:
    middle       = (high + low) / 2
    sell_trigger = middle * (1 - ratio) + high * ratio
    buy_trigger  = middle * (1 - ratio) + low  * ratio
"""

from decimal import Decimal
from typing import Mapping

from trigger_trader.exceptions import ProtocolError
from trigger_trader.models import (
    OrderRequest,
    TickerSnapshot,
    TradeDecision,
    TradePlan,
    TradeSide,
    TriggerPrices,
)
from trigger_trader.precision import format_amount, format_held_amount

DEFAULT_BUY_BUDGET_RATIO = Decimal("0.7")


def _check_ratio(ratio: Decimal):
    if not Decimal("0") <= ratio <= Decimal("1"):
        raise ValueError(f"trigger ratio must be within [0, 1], got {ratio}")


def compute_trigger_prices(ticker: TickerSnapshot, ratio: Decimal) -> TriggerPrices:
    _check_ratio(ratio)
    middle = (ticker.high + ticker.low) / 2
    return TriggerPrices(
        middle=middle,
        sell_trigger=middle * (1 - ratio) + ticker.high * ratio,
        buy_trigger=middle * (1 - ratio) + ticker.low * ratio,
    )


def select_side(
    balances: Mapping[str, Decimal],
    asset: str,
    min_amount_for_sell: Decimal,
    buy_budget_ratio: Decimal = DEFAULT_BUY_BUDGET_RATIO,
    quote_asset: str = "jpy",
) -> TradePlan:
    """
    Choose the side for this cycle from a balance snapshot.

    SELL the whole free asset balance once it reaches min_amount_for_sell,
    otherwise BUY with buy_budget_ratio of the free quote balance.

    Args:
        balances: Free amount per asset symbol
        asset: Traded asset (e.g. "btc")
        min_amount_for_sell: Threshold at which the held asset is sold
        buy_budget_ratio: Share of the free quote balance to spend on a buy
        quote_asset: Quote currency (e.g. "jpy")

    Returns:
        TradePlan with the side and the asset amount (SELL) or quote budget (BUY)
    """
    if asset not in balances:
        raise ProtocolError(f"Asset {asset!r} not present in account balances")

    free_amount = balances[asset]
    if free_amount >= min_amount_for_sell:
        return TradePlan(side=TradeSide.SELL, amount=free_amount)

    if quote_asset not in balances:
        raise ProtocolError(f"Quote asset {quote_asset!r} not present in account balances")
    return TradePlan(side=TradeSide.BUY, amount=balances[quote_asset] * buy_budget_ratio)


def evaluate(ticker: TickerSnapshot, plan: TradePlan, ratio: Decimal, pair: str) -> TradeDecision:
    """
    Decide whether this ticker fires the plan's order.

    Comparisons are inclusive: a price exactly at the trigger fires.

    Returns:
        TradeDecision; `order` is set only when fired
    """
    prices = compute_trigger_prices(ticker, ratio)

    if plan.side == TradeSide.SELL:
        trigger_price, reference_price = prices.sell_trigger, ticker.sell
        fired = ticker.sell >= prices.sell_trigger
        amount = format_held_amount(plan.amount) if fired else None
    else:
        trigger_price, reference_price = prices.buy_trigger, ticker.buy
        # A non-positive quote cannot be converted into an amount
        fired = ticker.buy > 0 and ticker.buy <= prices.buy_trigger
        amount = format_amount(plan.amount / ticker.buy) if fired else None

    order = OrderRequest(pair=pair, amount=amount, side=plan.side) if fired else None
    return TradeDecision(
        fired=fired,
        prices=prices,
        trigger_price=trigger_price,
        reference_price=reference_price,
        order=order,
    )
