"""Market data records: trades and order book snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class AggressorSide(Enum):
    """Which side initiated a trade."""

    BUY = "buy"
    SELL = "sell"
    UNKNOWN = "unknown"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Trade:
    """A single executed trade."""

    product_id: str
    trade_id: str
    price: float
    size: float
    side: AggressorSide = AggressorSide.UNKNOWN
    timestamp: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class OrderBookLevel:
    """One price level of an order book."""

    price: float
    size: float


@dataclass
class OrderBook:
    """A snapshot of bids and asks for one product."""

    product_id: str = ""
    bids: list[OrderBookLevel] = field(default_factory=list)
    asks: list[OrderBookLevel] = field(default_factory=list)
    timestamp: datetime = field(default_factory=_now)