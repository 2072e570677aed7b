"""Display modes available to the chart."""

from enum import Enum, auto


class ChartMode(Enum):
    """How market data is drawn on the chart."""

    TRADE_SCATTER = auto()
    HIGH_FREQ_CANDLES = auto()
    TRADITIONAL_CANDLES = auto()
    ORDER_BOOK_HEATMAP = auto()
    HYBRID_CANDLES_TRADES = auto()
    HYBRID_DEPTH_PRICE = auto()
    MULTI_TIMEFRAME = auto()