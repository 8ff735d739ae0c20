"""
bitbank Ticker Stream

Consumes the public Socket.IO ticker room over a raw WebSocket.

Wire protocol (Engine.IO v4 / Socket.IO):
- client -> "40"                               open the default namespace
- client -> 42["join-room","ticker_<pair>"]    subscribe to the ticker room
- server -> 42["message",{"room_name":"ticker_<pair>","message":{"data":{...}}}]
- server -> "2" (ping), client -> "3" (pong)

Every other frame is ignored. A stream instance is single-use: once it is
closed, open a new one for the next cycle.
"""

import asyncio
import json
import logging
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import AsyncIterator, Optional

import aiohttp

from trigger_trader.exceptions import NetworkError, ProtocolError
from trigger_trader.models import TickerSnapshot

logger = logging.getLogger(__name__)

DEFAULT_STREAM_URL = "wss://stream.bitbank.cc/socket.io/?EIO=4&transport=websocket"

OPEN_NAMESPACE = "40"
EVENT_PREFIX = "42"
PING = "2"
PONG = "3"
ROOM_MESSAGE_EVENT = "message"


class FeedState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    HANDSHAKING = "handshaking"
    SUBSCRIBING = "subscribing"
    STREAMING = "streaming"
    CLOSED = "closed"


def ticker_room(pair: str) -> str:
    return f"ticker_{pair}"


def join_room_frame(pair: str) -> str:
    return EVENT_PREFIX + json.dumps(["join-room", ticker_room(pair)], separators=(",", ":"))


def _price(data: dict, key: str) -> Decimal:
    try:
        value = Decimal(str(data[key]))
    except (KeyError, InvalidOperation) as e:
        raise ProtocolError(f"Ticker field {key!r} missing or not numeric: {e}")
    if not value.is_finite():
        raise ProtocolError(f"Ticker field {key!r} is not a finite number: {value}")
    return value


def parse_ticker_frame(text: str, pair: str) -> Optional[TickerSnapshot]:
    """
    Decode one text frame into a TickerSnapshot.

    Args:
        text: Raw WebSocket text frame
        pair: Subscribed pair, e.g. "btc_jpy"

    Returns:
        TickerSnapshot for a room message of the subscribed ticker room,
        None for any other frame.

    Raises:
        ProtocolError: the frame is a message for our room but its ticker
            payload is malformed.
    """
    if not text.startswith(EVENT_PREFIX):
        return None
    try:
        event = json.loads(text[len(EVENT_PREFIX):])
    except ValueError:
        return None

    if not isinstance(event, list) or len(event) < 2 or event[0] != ROOM_MESSAGE_EVENT:
        return None
    envelope = event[1]
    if not isinstance(envelope, dict) or envelope.get("room_name") != ticker_room(pair):
        return None

    message = envelope.get("message")
    data = message.get("data") if isinstance(message, dict) else None
    if not isinstance(data, dict):
        raise ProtocolError(f"Ticker message without data object: {text[:200]}")

    timestamp = data.get("timestamp")
    return TickerSnapshot(
        sell=_price(data, "sell"),
        buy=_price(data, "buy"),
        high=_price(data, "high"),
        low=_price(data, "low"),
        last=_price(data, "last") if data.get("last") is not None else None,
        timestamp=int(timestamp) if isinstance(timestamp, (int, float)) else None,
    )


class TickerStream:
    """
    Lazy, unbounded sequence of TickerSnapshot for one pair.

    Usage:
        stream = TickerStream("btc_jpy")
        async for ticker in stream.stream():
            ...
    """

    def __init__(self, pair: str, url: str = DEFAULT_STREAM_URL, open_timeout: float = 10.0):
        self.pair = pair
        self.url = url
        self.open_timeout = open_timeout
        self.state = FeedState.IDLE

    async def stream(self) -> AsyncIterator[TickerSnapshot]:
        """
        Connect, subscribe and yield one snapshot per ticker message.

        The sequence ends when the remote closes or the transport fails.

        Raises:
            RuntimeError: the stream was already used
            NetworkError: the connection could not be opened
            ProtocolError: a ticker message for the room was malformed
        """
        if self.state != FeedState.IDLE:
            raise RuntimeError(f"TickerStream for {self.pair} already {self.state.value}; create a new one")

        self.state = FeedState.CONNECTING
        logger.info(f"Connecting to ticker stream for {self.pair}")
        timeout = aiohttp.ClientTimeout(total=None, sock_connect=self.open_timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.ws_connect(self.url) as ws:
                    self.state = FeedState.HANDSHAKING
                    await ws.send_str(OPEN_NAMESPACE)

                    self.state = FeedState.SUBSCRIBING
                    await ws.send_str(join_room_frame(self.pair))

                    self.state = FeedState.STREAMING
                    logger.info(f"Subscribed to {ticker_room(self.pair)}")
                    async for msg in ws:
                        if msg.type == aiohttp.WSMsgType.TEXT:
                            if msg.data == PING:
                                await ws.send_str(PONG)
                                continue
                            ticker = parse_ticker_frame(msg.data, self.pair)
                            if ticker is not None:
                                yield ticker
                        elif msg.type == aiohttp.WSMsgType.ERROR:
                            logger.warning(f"Ticker stream for {self.pair} errored: {ws.exception()}")
                            break
            logger.warning(f"Ticker stream for {self.pair} closed by remote")
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
            if self.state == FeedState.CONNECTING:
                raise NetworkError(f"Could not connect to ticker stream: {e}")
            logger.warning(f"Ticker stream for {self.pair} failed: {e}")
        finally:
            self.state = FeedState.CLOSED
            logger.info(f"Ticker stream for {self.pair} ended")
