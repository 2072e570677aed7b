"""Polls a market data client and publishes new trades and order books."""

from __future__ import annotations

import logging
from typing import Callable, Generic, Protocol, TypeVar

from .marketdata import OrderBook, Trade

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 0.1

T = TypeVar("T")


class StreamClient(Protocol):
    def subscribe(self, symbols: list[str]) -> None: ...
    def start(self) -> None: ...
    def stop(self) -> None: ...
    def get_new_trades(self, symbol: str, last_trade_id: str) -> list[Trade]: ...
    def get_order_book(self, symbol: str) -> OrderBook: ...


class TradeSink(Protocol):
    def push_trade(self, trade: Trade) -> bool: ...


class _Signal(Generic[T]):
    """A list of callbacks invoked together."""

    def __init__(self) -> None:
        self._handlers: list[Callable[..., None]] = []

    def connect(self, handler: Callable[..., None]) -> None:
        self._handlers.append(handler)

    def disconnect(self, handler: Callable[..., None]) -> None:
        self._handlers.remove(handler)

    def emit(self, *args) -> None:
        for handler in list(self._handlers):
            handler(*args)


class StreamController:
    """Drives a stream client: subscribes, polls and forwards data to listeners."""

    def __init__(self, client_factory: Callable[[], StreamClient]) -> None:
        self._client_factory = client_factory
        self._client: StreamClient | None = None
        self._symbols: list[str] = []
        self._last_trade_ids: dict[str, str] = {}
        self._adapter: TradeSink | None = None
        self._trades_processed = 0
        self._book_polls = 0
        self.trade_received: _Signal[Trade] = _Signal()
        self.order_book_updated: _Signal[OrderBook] = _Signal()
        self.connected: _Signal[None] = _Signal()
        self.disconnected: _Signal[None] = _Signal()

    def __enter__(self) -> StreamController:
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    @property
    def is_running(self) -> bool:
        return self._client is not None

    def set_gpu_adapter(self, adapter: TradeSink | None) -> None:
        """Send every new trade to this sink as well as to listeners."""
        self._adapter = adapter

    def start(self, symbols) -> None:
        """Create a client, subscribe to the symbols and start it."""
        logger.info("Starting stream controller")
        if self._client is not None:
            self._client.stop()
        self._symbols = list(symbols)
        client = self._client_factory()
        client.subscribe(self._symbols)
        client.start()
        self._client = client
        self.connected.emit()
        logger.info("Stream controller started")

    def stop(self) -> None:
        """Stop the client and forget trade tracking."""
        logger.info("Stopping stream controller")
        client, self._client = self._client, None
        if client is not None:
            client.stop()
        self._last_trade_ids.clear()
        self.disconnected.emit()

    def poll_trades(self) -> None:
        """Fetch trades newer than the last seen one for each symbol."""
        if self._client is None:
            return
        for symbol in self._symbols:
            last_id = self._last_trade_ids.get(symbol, "")
            new_trades = self._client.get_new_trades(symbol, last_id)
            if new_trades:
                logger.debug("Found %d new trades for %s", len(new_trades), symbol)
            for trade in new_trades:
                self._last_trade_ids[symbol] = trade.trade_id
                if self._adapter is not None and not self._adapter.push_trade(trade):
                    logger.warning("Trade queue full; trade dropped")
                self._trades_processed += 1
                if self._trades_processed % 50 == 1:
                    logger.debug(
                        "Pushing trade %s $%s size %s [%d processed]",
                        trade.product_id, trade.price, trade.size, self._trades_processed,
                    )
                self.trade_received.emit(trade)

    def poll_order_books(self) -> None:
        """Fetch each symbol's order book and publish non-empty ones."""
        if self._client is None:
            return
        for symbol in self._symbols:
            book = self._client.get_order_book(symbol)
            self._book_polls += 1
            if self._book_polls % 20 == 1:
                logger.debug(
                    "Polled %s order book: %d bids, %d asks [%d polls]",
                    symbol, len(book.bids), len(book.asks), self._book_polls,
                )
            if book.bids or book.asks:
                self.order_book_updated.emit(book)

    def tick(self) -> None:
        """Run one polling cycle; call every POLL_INTERVAL_SECONDS."""
        self.poll_trades()
        self.poll_order_books()