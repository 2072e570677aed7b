"""View models for live market data: trade charts, order-book heatmaps and stream polling."""

__version__ = "0.1.0"

__all__ = [
    "chartmode",
    "marketdata",
    "tradechart",
    "streamcontroller",
    "heatmapgeometry",
    "heatmap",
]