"""A trade price chart with an order book overlay, computed as drawing primitives."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple

from .marketdata import AggressorSide, OrderBook, Trade

MAX_TRADES_TO_DISPLAY = 1000
HORIZONTAL_GRID_LINES = 10
VERTICAL_GRID_LINES = 15
PRICE_LEVELS = 10
WAITING_MESSAGE = "Waiting for trade data..."

GRID_COLOR = (40, 40, 40)
_SIDE_COLORS = {
    AggressorSide.BUY: "green",
    AggressorSide.SELL: "red",
}


class Line(NamedTuple):
    x1: float
    y1: float
    x2: float
    y2: float


class PriceLabel(NamedTuple):
    y: int
    text: str


class TradePoint(NamedTuple):
    x: float
    y: float
    color: str


class HeatmapBand(NamedTuple):
    x: float
    y: float
    width: float
    height: float
    color: tuple[int, int, int, int]


@dataclass
class TradeChart:
    """Keeps recent trades for one symbol and lays them out for drawing."""

    symbol: str = ""
    trades: list[Trade] = field(default_factory=list)
    order_book: OrderBook = field(default_factory=OrderBook)
    min_price: float | None = None
    max_price: float | None = None

    @property
    def is_waiting(self) -> bool:
        """True while there are no trades to draw."""
        return not self.trades

    def set_symbol(self, symbol: str) -> None:
        self.symbol = symbol
        self.clear_trades()

    def add_trade(self, trade: Trade) -> None:
        """Record a trade for the current symbol; others are ignored."""
        if trade.product_id != self.symbol:
            return
        self.trades.append(trade)
        if self.min_price is None or trade.price < self.min_price:
            self.min_price = trade.price
        if self.max_price is None or trade.price > self.max_price:
            self.max_price = trade.price
        excess = len(self.trades) - MAX_TRADES_TO_DISPLAY
        if excess > 0:
            del self.trades[:excess]

    def update_order_book(self, book: OrderBook) -> None:
        """Replace the displayed book if it belongs to the current symbol."""
        if book.product_id != self.symbol:
            return
        self.order_book = book

    def clear_trades(self) -> None:
        self.trades.clear()
        self.min_price = None
        self.max_price = None

    def _price_range(self) -> float:
        assert self.min_price is not None and self.max_price is not None
        price_range = self.max_price - self.min_price
        return price_range if price_range > 0 else 1.0

    def grid_lines(self, width: int, height: int) -> list[Line]:
        """Horizontal then vertical background grid lines."""
        row = height // HORIZONTAL_GRID_LINES
        col = width // VERTICAL_GRID_LINES
        horizontal = [Line(0, row * i, width, row * i) for i in range(HORIZONTAL_GRID_LINES)]
        vertical = [Line(col * i, 0, col * i, height) for i in range(VERTICAL_GRID_LINES)]
        return horizontal + vertical

    def price_labels(self, height: int) -> list[PriceLabel]:
        """Axis labels from the highest price at the top to the lowest at the bottom."""
        if self.min_price is None or self.max_price is None:
            return []
        price_range = self._price_range()
        step = price_range / PRICE_LEVELS
        return [
            PriceLabel((height * i) // PRICE_LEVELS, f"{self.max_price - step * i:.2f}")
            for i in range(PRICE_LEVELS + 1)
        ]

    def trade_points(self, width: int, height: int) -> list[TradePoint]:
        """Screen positions and colours of the trades, oldest first."""
        if not self.trades:
            return []
        price_range = self._price_range()
        min_price = self.min_price

        def y_of(trade: Trade) -> float:
            return height - ((trade.price - min_price) / price_range * height)

        def color_of(trade: Trade) -> str:
            return _SIDE_COLORS.get(trade.side, "gray")

        if len(self.trades) == 1:
            trade = self.trades[0]
            return [TradePoint(float(width), y_of(trade), color_of(trade))]
        last = len(self.trades) - 1
        return [
            TradePoint(i / last * width, y_of(trade), color_of(trade))
            for i, trade in enumerate(self.trades)
        ]

    def heatmap_bands(self, width: int, height: int) -> list[HeatmapBand]:
        """Horizontal bands for order book levels inside the visible price range."""
        book = self.order_book
        if not book.bids and not book.asks:
            return []
        if self.min_price is None or self.max_price is None:
            return []
        price_range = self.max_price - self.min_price
        if price_range <= 0:
            return []

        lo, hi = self.min_price, self.max_price
        visible_bids = [lvl for lvl in book.bids if lo <= lvl.price <= hi]
        visible_asks = [lvl for lvl in book.asks if lo <= lvl.price <= hi]
        max_size = max((lvl.size for lvl in visible_bids + visible_asks), default=0.0)
        if max_size == 0:
            max_size = 1.0

        def band(level, rgb: tuple[int, int, int]) -> HeatmapBand:
            y = height - ((level.price - lo) / price_range * height)
            alpha = min(int(5 + (level.size / max_size) * 70), 255)
            return HeatmapBand(0, y - 1, width, 2, (*rgb, alpha))

        return [band(lvl, (0, 255, 0)) for lvl in visible_bids] + [
            band(lvl, (255, 0, 0)) for lvl in visible_asks
        ]