"""
Entry point: python -m trigger_trader.main (or the trigger-trader script)

Reads settings from the environment / .env, wires the client, ticker
stream, executor and notifier together and runs cycles until interrupted.
"""

import asyncio
import logging

from trigger_trader.bitbank_client import BitbankClient
from trigger_trader.bot import TriggerBot
from trigger_trader.config import Settings, settings
from trigger_trader.notifier import LogNotifier, Notifier, WebhookNotifier
from trigger_trader.order_executor import OrderExecutor
from trigger_trader.price_feeds.ticker_stream import TickerStream

logger = logging.getLogger(__name__)


def setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )


def build_notifier(config: Settings) -> Notifier:
    if config.webhook_url:
        return WebhookNotifier(config.webhook_url, timeout=config.request_timeout)
    return LogNotifier()


def build_bot(config: Settings, client: BitbankClient, notifier: Notifier) -> TriggerBot:
    executor = OrderExecutor(
        client,
        asset=config.asset,
        notifier=notifier,
        poll_interval=config.order_poll_interval,
        poll_timeout=config.order_poll_timeout,
    )
    return TriggerBot(
        client=client,
        feed_factory=lambda: TickerStream(config.pair, url=config.stream_endpoint),
        executor=executor,
        asset=config.asset,
        quote_asset=config.quote_asset,
        min_amount_for_sell=config.min_amount_for_sell,
        trigger_rate=config.trigger_rate,
        buy_budget_ratio=config.buy_budget_ratio,
        cycle_cooldown=config.cycle_cooldown,
    )


async def run(config: Settings):
    credentials = config.credentials()
    notifier = build_notifier(config)
    async with BitbankClient(credentials, endpoint=config.api_endpoint, timeout=config.request_timeout) as client:
        logger.info(
            f"Starting trigger bot on {config.pair} "
            f"(trigger_rate={config.trigger_rate}, min_amount_for_sell={config.min_amount_for_sell})"
        )
        try:
            await build_bot(config, client, notifier).run_forever()
        finally:
            await notifier.close()


def main():
    setup_logging(settings.log_level)
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received; stopping trigger bot.")


if __name__ == "__main__":
    main()
