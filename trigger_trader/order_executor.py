"""
Order Executor

Turns a fired TradeDecision into a filled order:

    IDLE -> SUBMITTED -> POLLING -> FILLED
                 \\            \\
                  ABANDONED    ABANDONED (poll timeout)

- Submission happens exactly once; a failure abandons the cycle.
- Polling is read-only, so every ExchangeError while polling is retried.
- Only the literal status FULLY_FILLED is terminal.
- The notifier runs after FILLED and can never undo it.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from trigger_trader.exceptions import ExchangeError, OrderTimeoutError
from trigger_trader.models import Order, OrderHandle, TradeDecision
from trigger_trader.notifier import FillReport, Notifier

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.2


class ExecutionState(str, Enum):
    IDLE = "idle"
    SUBMITTED = "submitted"
    POLLING = "polling"
    FILLED = "filled"
    ABANDONED = "abandoned"


@dataclass(frozen=True)
class ExecutionResult:
    handle: OrderHandle
    order: Order
    decision: TradeDecision
    polls: int


class OrderExecutor:
    """
    Submits one market order at a time and waits for it to fill.

    Args:
        client: BitbankClient (or anything with submit_market_order / get_order)
        asset: Traded asset symbol, used in notifications
        notifier: Optional Notifier called after a fill
        poll_interval: Seconds between status polls
        poll_timeout: Give up after this many seconds; None polls forever
    """

    def __init__(
        self,
        client,
        asset: str,
        notifier: Optional[Notifier] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        poll_timeout: Optional[float] = None,
    ):
        self.client = client
        self.asset = asset
        self.notifier = notifier
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout
        self.state = ExecutionState.IDLE
        self._outstanding: Optional[OrderHandle] = None

    @property
    def outstanding(self) -> Optional[OrderHandle]:
        return self._outstanding

    async def execute(self, decision: TradeDecision) -> ExecutionResult:
        """
        Submit the decision's order and wait until it is FULLY_FILLED.

        Raises:
            ValueError: the decision did not fire
            RuntimeError: another order is still outstanding
            ExchangeError: submission failed (never retried)
            OrderTimeoutError: poll_timeout elapsed before the fill
        """
        if not decision.fired or decision.order is None:
            raise ValueError("Cannot execute a decision that did not fire")
        if self._outstanding is not None:
            raise RuntimeError(f"Order {self._outstanding.order_id} is still outstanding")

        request = decision.order
        self.state = ExecutionState.IDLE
        try:
            order_id = await self.client.submit_market_order(request.pair, request.amount, request.side)
        except ExchangeError as e:
            self.state = ExecutionState.ABANDONED
            logger.error(f"Order submission failed, abandoning cycle: {e}")
            raise

        handle = OrderHandle(order_id=order_id, pair=request.pair)
        self._outstanding = handle
        self.state = ExecutionState.SUBMITTED
        logger.info(
            f"Submitted {request.side.value} {request.amount} {request.pair} "
            f"(order {order_id}, trigger {decision.trigger_price}, price {decision.reference_price})"
        )

        try:
            order, polls = await self._wait_for_fill(handle)
        finally:
            self._outstanding = None

        self.state = ExecutionState.FILLED
        logger.info(f"Order {order_id} filled at {order.average_price} after {polls} polls")

        result = ExecutionResult(handle=handle, order=order, decision=decision, polls=polls)
        await self._notify(result)
        return result

    async def _wait_for_fill(self, handle: OrderHandle):
        self.state = ExecutionState.POLLING
        started = time.monotonic()
        polls = 0

        while True:
            polls += 1
            try:
                order = await self.client.get_order(handle.pair, handle.order_id)
            except ExchangeError as e:
                logger.warning(f"Poll {polls} for order {handle.order_id} failed, retrying: {e}")
            else:
                if order.is_filled:
                    return order, polls
                logger.debug(f"Order {handle.order_id} status {order.status}")

            if self.poll_timeout is not None and time.monotonic() - started >= self.poll_timeout:
                self.state = ExecutionState.ABANDONED
                logger.error(f"Order {handle.order_id} not filled within {self.poll_timeout}s, giving up")
                raise OrderTimeoutError(f"Order {handle.order_id} not filled within {self.poll_timeout}s")

            await asyncio.sleep(self.poll_interval)

    async def _notify(self, result: ExecutionResult):
        if self.notifier is None:
            return
        decision = result.decision
        report = FillReport(
            pair=result.handle.pair,
            asset=self.asset,
            side=decision.order.side,
            amount=decision.order.amount,
            average_price=result.order.average_price,
            trigger_price=decision.trigger_price,
            reference_price=decision.reference_price,
            middle_price=decision.prices.middle,
        )
        try:
            await self.notifier.notify(report)
        except Exception as e:
            logger.error(f"Notifier failed for order {result.handle.order_id}: {e}")
