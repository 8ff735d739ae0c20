"""
Trigger Bot - main trading loop

One cycle:
1. Fetch fresh balances and pick the side (SELL held asset or BUY with budget)
2. Open a new ticker stream and evaluate every ticker
3. On the first trigger, execute the order and wait for the fill
4. Cycle ends on fill, on failure, or when the stream disconnects

Between cycles the bot sleeps for the cooldown. No state is carried over.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Callable, Optional

from trigger_trader.exceptions import ExchangeError
from trigger_trader.order_executor import ExecutionResult, OrderExecutor
from trigger_trader.price_feeds.ticker_stream import TickerStream
from trigger_trader.trigger import DEFAULT_BUY_BUDGET_RATIO, evaluate, select_side

logger = logging.getLogger(__name__)


class TriggerBot:
    def __init__(
        self,
        client,
        feed_factory: Callable[[], TickerStream],
        executor: OrderExecutor,
        asset: str,
        quote_asset: str = "jpy",
        min_amount_for_sell: Decimal = Decimal("1.0"),
        trigger_rate: Decimal = Decimal("0.5"),
        buy_budget_ratio: Decimal = DEFAULT_BUY_BUDGET_RATIO,
        cycle_cooldown: float = 30.0,
    ):
        self.client = client
        self.feed_factory = feed_factory
        self.executor = executor
        self.asset = asset
        self.quote_asset = quote_asset
        self.min_amount_for_sell = min_amount_for_sell
        self.trigger_rate = trigger_rate
        self.buy_budget_ratio = buy_budget_ratio
        self.cycle_cooldown = cycle_cooldown
        self.cycles_completed = 0

    @property
    def pair(self) -> str:
        return f"{self.asset}_{self.quote_asset}"

    async def run_cycle(self) -> Optional[ExecutionResult]:
        """
        Run one trading cycle.

        Returns:
            ExecutionResult when an order filled, None when the ticker stream
            ended before the trigger fired.
        """
        balances = await self.client.get_assets()
        plan = select_side(
            balances,
            asset=self.asset,
            min_amount_for_sell=self.min_amount_for_sell,
            buy_budget_ratio=self.buy_budget_ratio,
            quote_asset=self.quote_asset,
        )
        logger.info(f"Cycle plan for {self.pair}: {plan.side.value} with {plan.amount}")

        fired = None
        feed = self.feed_factory()
        tickers = feed.stream()
        try:
            async for ticker in tickers:
                decision = evaluate(ticker, plan, self.trigger_rate, self.pair)
                logger.debug(
                    f"sell: {ticker.sell}, buy: {ticker.buy}, high: {ticker.high}, low: {ticker.low}, "
                    f"sell_trigger: {decision.prices.sell_trigger:.2f}, "
                    f"buy_trigger: {decision.prices.buy_trigger:.2f}"
                )
                if decision.fired:
                    fired = decision
                    break
        finally:
            # The stream is not read while the order is polled
            await tickers.aclose()

        if fired is None:
            logger.warning(f"Ticker stream for {self.pair} ended before the trigger fired")
            return None
        return await self.executor.execute(fired)

    async def run_forever(self, max_cycles: Optional[int] = None):
        """
        Run cycles until cancelled (or until max_cycles have run).

        Every cycle, successful or not, is followed by the cooldown.
        """
        while max_cycles is None or self.cycles_completed < max_cycles:
            try:
                result = await self.run_cycle()
                if result is not None:
                    logger.info(
                        f"Cycle complete: order {result.handle.order_id} "
                        f"{result.decision.order.side.value} {result.decision.order.amount} filled"
                    )
            except ExchangeError as e:
                logger.error(f"Cycle abandoned ({type(e).__name__}): {e}")
            except Exception as e:
                logger.error(f"Unexpected error in trading cycle: {e}", exc_info=True)

            self.cycles_completed += 1
            if max_cycles is not None and self.cycles_completed >= max_cycles:
                break
            logger.info(f"Sleeping {self.cycle_cooldown}s before next cycle")
            await asyncio.sleep(self.cycle_cooldown)
