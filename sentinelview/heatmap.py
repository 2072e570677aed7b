"""An order book heatmap layer that accumulates history and builds triangle vertices."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Callable, NamedTuple

from .heatmapgeometry import Color, Viewport, intensity_color, point_size, quad_geometry
from .marketdata import OrderBook, OrderBookLevel

logger = logging.getLogger(__name__)

DEFAULT_MAX_QUADS = 200000
DEFAULT_MAX_LEVELS = 100
HISTORY_ALPHA = 0.8
FADE_WINDOW_MS = 30000.0
FADE_OPACITY = 0.8
VERTICES_PER_QUAD = 6


def _now_ms() -> float:
    return time.time() * 1000.0


@dataclass
class QuadInstance:
    """One coloured heatmap quad with the market data it was made from."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    r: float = 0.0
    g: float = 0.0
    b: float = 0.0
    a: float = 0.0
    intensity: float = 0.0
    price: float = 0.0
    size: float = 0.0
    timestamp: float = 0.0
    raw_timestamp: float = 0.0
    raw_price: float = 0.0

    @property
    def color(self) -> Color:
        return Color(self.r, self.g, self.b, self.a)


class Vertex(NamedTuple):
    """A screen-space vertex with an 8-bit RGBA colour."""

    x: float
    y: float
    r: int
    g: int
    b: int
    a: int


class HeatmapFrame(NamedTuple):
    """Triangle vertices for the bid and ask history."""

    bids: list[Vertex]
    asks: list[Vertex]


def _level_values(level: Any) -> tuple[float, float]:
    if isinstance(level, Mapping):
        return float(level.get("price", 0.0) or 0.0), float(level.get("size", 0.0) or 0.0)
    return float(level.price), float(level.size)


class HeatmapLayer:
    """Turns order book levels into heatmap quads and renders their history."""

    def __init__(
        self,
        width: float = 0.0,
        height: float = 0.0,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.viewport = Viewport(width=width, height=height)
        self._clock = clock or _now_ms
        self._lock = threading.Lock()
        self._bid_instances: list[QuadInstance] = []
        self._ask_instances: list[QuadInstance] = []
        self._bid_history: list[QuadInstance] = []
        self._ask_history: list[QuadInstance] = []
        self.max_quads = DEFAULT_MAX_QUADS
        self.max_bid_levels = DEFAULT_MAX_LEVELS
        self.max_ask_levels = DEFAULT_MAX_LEVELS
        self.intensity_scale = 1.0
        self.geometry_dirty = True
        self.bids_dirty = False
        self.asks_dirty = False
        self._frame = HeatmapFrame([], [])

    @property
    def bid_instances(self) -> list[QuadInstance]:
        return list(self._bid_instances)

    @property
    def ask_instances(self) -> list[QuadInstance]:
        return list(self._ask_instances)

    @property
    def bid_history(self) -> list[QuadInstance]:
        return list(self._bid_history)

    @property
    def ask_history(self) -> list[QuadInstance]:
        return list(self._ask_history)

    def resize(self, width: float, height: float) -> None:
        """Change the drawing area; positions are recomputed on the next render."""
        self.viewport.width = width
        self.viewport.height = height
        self.geometry_dirty = True

    def _snapshot_quads(self, levels: Iterable[Any], is_bid: bool) -> list[QuadInstance]:
        lo, hi = self.viewport.expanded_price_range()
        vp = self.viewport
        quads = []
        for level in levels:
            price, size = _level_values(level)
            if not (lo <= price <= hi and size > 0.0):
                continue
            rect = quad_geometry(
                price, size, vp.min_price, vp.max_price, vp.width, vp.height,
                self.intensity_scale,
            )
            color = intensity_color(size, is_bid, self.intensity_scale)
            quads.append(
                QuadInstance(
                    x=rect.x, y=rect.y, width=rect.width, height=rect.height,
                    r=color.r, g=color.g, b=color.b, a=color.a,
                    intensity=size * self.intensity_scale,
                    price=price, size=size,
                )
            )
        return quads

    def update_bids(self, levels: Iterable[Any]) -> None:
        """Replace the current bid quads; levels are mappings with price and size."""
        with self._lock:
            self._bid_instances = self._snapshot_quads(levels, True)
            self.bids_dirty = True

    def update_asks(self, levels: Iterable[Any]) -> None:
        """Replace the current ask quads; levels are mappings with price and size."""
        with self._lock:
            self._ask_instances = self._snapshot_quads(levels, False)
            self.asks_dirty = True

    def _history_quads(self, levels: Iterable[OrderBookLevel], is_bid: bool) -> list[QuadInstance]:
        now = float(self._clock())
        lo, hi = self.viewport.expanded_price_range()
        quads = []
        for level in levels:
            if not (lo <= level.price <= hi and level.size > 0.0):
                continue
            color = intensity_color(level.size, is_bid, self.intensity_scale)
            quads.append(
                QuadInstance(
                    r=color.r, g=color.g, b=color.b, a=HISTORY_ALPHA,
                    intensity=level.size * self.intensity_scale,
                    price=level.price, size=level.size, timestamp=now,
                    raw_timestamp=now, raw_price=level.price,
                )
            )
        return quads

    def update_order_book(self, book: OrderBook) -> None:
        """Append the book's levels, stamped with the current time, to the history."""
        with self._lock:
            self._bid_history.extend(self._history_quads(book.bids, True))
            self._ask_history.extend(self._history_quads(book.asks, False))
            self._cleanup_history()
            self.bids_dirty = True
            self.asks_dirty = True

    def _cleanup_history(self) -> None:
        now = float(self._clock())
        for history in (self._bid_history, self._ask_history):
            for quad in history:
                age = now - quad.timestamp
                if 0 < age < FADE_WINDOW_MS:
                    quad.a = quad.a * (1.0 - age / FADE_WINDOW_MS) * FADE_OPACITY
        for name, history in (("bid", self._bid_history), ("ask", self._ask_history)):
            excess = len(history) - self.max_quads
            if excess > 0:
                del history[:excess]
                logger.debug(
                    "Removed %d oldest %s points, %d remain", excess, name, len(history)
                )

    def clear_order_book(self) -> None:
        """Drop the current bid and ask quads."""
        with self._lock:
            self._bid_instances.clear()
            self._ask_instances.clear()
            self.bids_dirty = True
            self.asks_dirty = True

    def set_max_quads(self, max_quads: int) -> None:
        """Limit the history length and split the level limit between bids and asks."""
        if max_quads < 0:
            raise ValueError("max_quads must not be negative")
        self.max_quads = max_quads
        self.max_bid_levels = max_quads // 2
        self.max_ask_levels = max_quads // 2

    def set_price_range(self, min_price: float, max_price: float) -> None:
        self.viewport.min_price = min_price
        self.viewport.max_price = max_price
        self.geometry_dirty = True

    def set_intensity_scale(self, scale: float) -> None:
        self.intensity_scale = scale
        self.geometry_dirty = True

    def set_time_window(
        self, start_ms: int, end_ms: int, min_price: float, max_price: float
    ) -> None:
        """Synchronise the visible time window and price range."""
        self.viewport.start_ms = start_ms
        self.viewport.end_ms = end_ms
        self.viewport.min_price = min_price
        self.viewport.max_price = max_price
        if self.viewport.time_window_valid:
            self.geometry_dirty = True
            logger.debug(
                "Heatmap window %s..%s ms, price %s..%s", start_ms, end_ms, min_price, max_price
            )

    def sort_and_limit_levels(self) -> None:
        """Order bids high to low and asks low to high, keeping the top levels."""
        with self._lock:
            self._bid_instances.sort(key=lambda q: q.price, reverse=True)
            self._ask_instances.sort(key=lambda q: q.price)
            del self._bid_instances[self.max_bid_levels:]
            del self._ask_instances[self.max_ask_levels:]

    def build_vertices(self, instances: Iterable[QuadInstance]) -> list[Vertex]:
        """Two triangles per quad, centred on its time and price."""
        side = point_size(self.viewport.end_ms - self.viewport.start_ms)
        half = side / 2.0
        vertices: list[Vertex] = []
        for quad in instances:
            sx, sy = self.viewport.world_to_screen(quad.raw_timestamp, quad.raw_price)
            x1, y1 = sx - half, sy - half
            x2, y2 = x1 + side, y1 + side
            rgba = quad.color.to_bytes()
            vertices.extend(
                Vertex(x, y, *rgba)
                for x, y in ((x1, y1), (x2, y1), (x1, y2), (x2, y1), (x2, y2), (x1, y2))
            )
        return vertices

    def render(self) -> HeatmapFrame:
        """Rebuild the vertex lists that are out of date and return the frame."""
        if self.viewport.width <= 0 or self.viewport.height <= 0:
            return self._frame
        with self._lock:
            bids, asks = self._frame
            if self.bids_dirty or self.geometry_dirty or not bids:
                bids = self.build_vertices(self._bid_history)
                self.bids_dirty = False
            if self.asks_dirty or self.geometry_dirty or not asks:
                asks = self.build_vertices(self._ask_history)
                self.asks_dirty = False
            self.geometry_dirty = False
            self._frame = HeatmapFrame(bids, asks)
            return self._frame