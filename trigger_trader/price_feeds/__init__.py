"""
Price Feeds Module

Real-time market data sources.

Components:
- TickerStream: bitbank Socket.IO ticker room consumer
- parse_ticker_frame: pure frame decoder used by TickerStream
"""

from trigger_trader.price_feeds.ticker_stream import FeedState, TickerStream, parse_ticker_frame

__all__ = [
    "FeedState",
    "TickerStream",
    "parse_ticker_frame",
]
