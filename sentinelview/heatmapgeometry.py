"""Colour, size and position calculations for order book heatmap quads."""

from __future__ import annotations

from dataclasses import dataclass

OFF_SCREEN = (-1000.0, -1000.0)
PRICE_BUFFER_FRACTION = 0.5
QUAD_HEIGHT = 3.0
MIN_QUAD_WIDTH = 2.0
MAX_QUAD_WIDTH_FRACTION = 0.4
QUAD_WIDTH_PER_UNIT = 20.0
REFERENCE_TIME_WINDOW_MS = 60000.0
MIN_POINT_SIZE = 2.0
MAX_POINT_SIZE = 8.0


@dataclass(frozen=True)
class Color:
    """An RGBA colour with channels between 0 and 1."""

    r: float
    g: float
    b: float
    a: float = 1.0

    def to_bytes(self) -> tuple[int, int, int, int]:
        """Channels scaled to 0..255, truncated."""
        return tuple(int(channel * 255) for channel in (self.r, self.g, self.b, self.a))


@dataclass(frozen=True)
class Rect:
    """An axis-aligned rectangle in screen coordinates."""

    x: float
    y: float
    width: float
    height: float


@dataclass
class Viewport:
    """The visible time window and price range mapped onto a drawing area."""

    width: float = 0.0
    height: float = 0.0
    min_price: float = 107000.0
    max_price: float = 109000.0
    start_ms: int = 0
    end_ms: int = 0

    @property
    def time_window_valid(self) -> bool:
        return self.end_ms > self.start_ms

    def world_to_screen(self, timestamp_ms: float, price: float) -> tuple[float, float]:
        """Map a time and price to screen x, y; later is right, higher is up."""
        if self.width <= 0 or self.height <= 0 or not self.time_window_valid:
            return OFF_SCREEN
        time_range = self.end_ms - self.start_ms
        if time_range <= 0:
            time_range = 1.0
        x = (timestamp_ms - self.start_ms) / time_range * self.width

        price_range = self.max_price - self.min_price
        if price_range <= 0:
            price_range = 1.0
        y = (1.0 - (price - self.min_price) / price_range) * self.height
        return (x, y)

    def expanded_price_range(self) -> tuple[float, float]:
        """The price range widened by half its span on each side."""
        buffer = (self.max_price - self.min_price) * PRICE_BUFFER_FRACTION
        return (self.min_price - buffer, self.max_price + buffer)


def intensity_color(size: float, is_bid: bool, intensity_scale: float = 1.0) -> Color:
    """A blue-green-yellow-red colour for an order size; bids cooler, asks warmer."""
    intensity = min(1.0, size * intensity_scale / 10.0)
    intensity = max(intensity, 0.0) ** 0.6

    if intensity < 0.2:
        r = 0.0
        g = intensity * 2.0
        b = 0.2 + intensity * 2.0
    elif intensity < 0.5:
        t = (intensity - 0.2) / 0.3
        r = 0.0
        g = 0.4 + t * 0.4
        b = 0.6 - t * 0.6
    elif intensity < 0.8:
        t = (intensity - 0.5) / 0.3
        r = t * 0.8
        g = 0.8
        b = 0.0
    else:
        t = (intensity - 0.8) / 0.2
        r = 0.8 + t * 0.2
        g = 0.8 - t * 0.8
        b = 0.0

    if is_bid:
        g = min(1.0, g * 1.1)
        b = min(1.0, b * 1.1)
    else:
        r = min(1.0, r * 1.1)

    alpha = 0.4 + intensity * 0.6
    return Color(r, g, b, alpha)


def quad_geometry(
    price: float,
    size: float,
    min_price: float,
    max_price: float,
    width: float,
    height: float,
    intensity_scale: float = 1.0,
) -> Rect:
    """A horizontally centred bar whose row follows price and width follows size."""
    price_range = max_price - min_price
    if price_range <= 0:
        price_range = 1.0
    normalized = min(max((price - min_price) / price_range, 0.0), 1.0)
    y = (1.0 - normalized) * height

    max_width = width * MAX_QUAD_WIDTH_FRACTION
    quad_width = size * intensity_scale * QUAD_WIDTH_PER_UNIT
    if quad_width < MIN_QUAD_WIDTH:
        quad_width = MIN_QUAD_WIDTH
    if quad_width > max_width:
        quad_width = max_width

    x = width * 0.5 - quad_width * 0.5
    return Rect(x, y, quad_width, QUAD_HEIGHT)


def point_size(time_range_ms: float) -> float:
    """Side of a heatmap point in pixels; grows as the time window narrows."""
    if time_range_ms <= 0:
        time_range_ms = REFERENCE_TIME_WINDOW_MS
    zoom = max(1.0, REFERENCE_TIME_WINDOW_MS / time_range_ms)
    return min(MAX_POINT_SIZE, MIN_POINT_SIZE * zoom)