# sentinelview

`sentinelview` turns live market data into drawing data for trading displays. It does not draw anything itself. Its classes work out what should be drawn: lines, labels, points, bands and coloured triangle vertices. You can pass the results to any drawing toolkit.

It has no third-party dependencies.

## Installation

```
pip install .
```

To run the tests, install the test extra and then run pytest:

```
pip install .[test]
pytest
```

## Modules

### `sentinelview.chartmode`

`ChartMode` is an enumeration of display modes:

- `TRADE_SCATTER`
- `HIGH_FREQ_CANDLES`
- `TRADITIONAL_CANDLES`
- `ORDER_BOOK_HEATMAP`
- `HYBRID_CANDLES_TRADES`
- `HYBRID_DEPTH_PRICE`
- `MULTI_TIMEFRAME`

### `sentinelview.marketdata`

This module holds the market-data records:

- `AggressorSide` has the values `BUY`, `SELL` and `UNKNOWN`.
- `Trade(product_id, trade_id, price, size, side=AggressorSide.UNKNOWN, timestamp=now)`.
- `OrderBookLevel(price, size)` is frozen.
- `OrderBook(product_id="", bids=[], asks=[], timestamp=now)`.

Timestamps default to the current UTC time.

### `sentinelview.tradechart`

`TradeChart` is a price-line chart for one symbol.

- `set_symbol(symbol)` switches the symbol and clears the stored trades.
- `add_trade(trade)` keeps trades for the current symbol and ignores all others. It keeps at most the 1000 most recent trades. `min_price` and `max_price` track the lowest and highest price it has seen.
- `update_order_book(book)` replaces the displayed book, but only when `book.product_id` matches the symbol.
- `clear_trades()` removes the trades and resets the price range.
- `is_waiting` is true while there are no trades.

The chart yields drawing data through these methods:

- `grid_lines(width, height)` returns 10 horizontal and then 15 vertical `Line`s.
- `price_labels(height)` returns 11 `PriceLabel`s. They run from the highest price to the lowest and are formatted to two decimals.
- `trade_points(width, height)` returns `TradePoint`s, oldest first. They are coloured `"green"` for buys, `"red"` for sells and `"gray"` otherwise. A single trade is placed at the right edge.
- `heatmap_bands(width, height)` returns `HeatmapBand`s for order-book levels inside the traded price range. Bids are green and asks are red. Opacity scales with size relative to the largest visible level.

### `sentinelview.streamcontroller`

`StreamController(client_factory)` drives a stream client. The client is any object with these methods:

- `subscribe(symbols)`
- `start()`
- `stop()`
- `get_new_trades(symbol, last_trade_id)`
- `get_order_book(symbol)`

The controller works as follows:

- `start(symbols)` creates a client with `client_factory`, subscribes it to the symbols and starts it. It then emits `connected`.
- `stop()` stops the client, forgets the last seen trade ids and emits `disconnected`. The controller is also a context manager that stops on exit.
- `poll_trades()` fetches trades newer than the last one seen for each symbol. Each trade goes to the adapter set with `set_gpu_adapter`, through its `push_trade(trade)` method; a refused trade is logged as dropped. Each trade is also emitted on `trade_received`.
- `poll_order_books()` emits `order_book_updated` for every book that has bids or asks.
- `tick()` runs one polling round and is meant to be called every `POLL_INTERVAL_SECONDS` (0.1 s).

Listeners attach with `signal.connect(handler)` and detach with `signal.disconnect(handler)`.

### `sentinelview.heatmapgeometry`

This module holds the geometry and colour helpers.

- `Color(r, g, b, a)` holds channels between 0 and 1. `to_bytes()` converts them to 0..255.
- `Rect(x, y, width, height)`.
- `Viewport` holds a drawing area, a price range and a time window.
  - `world_to_screen(timestamp_ms, price)` maps a time and a price to `(x, y)`. Higher prices are higher on the screen. It returns `(-1000, -1000)` when the area is empty or the time window is invalid.
  - `expanded_price_range()` widens the price range by half its span on each side.
- `intensity_color(size, is_bid, intensity_scale=1.0)` gives a continuous blue, green, yellow, red colour scale. Bids are shifted cooler and asks warmer.
- `quad_geometry(price, size, min_price, max_price, width, height, intensity_scale=1.0)` returns a centred bar 3 px high. Its width follows size, clamped between 2 px and 40 % of the width.
- `point_size(time_range_ms)` returns 2 px for a window of one minute or longer, growing to at most 8 px as the window narrows.

### `sentinelview.heatmap`

`HeatmapLayer(width=0, height=0, clock=None)` is an order-book heatmap. `clock` returns milliseconds and defaults to the wall clock.

Current snapshot:

- `update_bids(levels)` and `update_asks(levels)` replace the current quads, available as `bid_instances` and `ask_instances`. Levels may be mappings with `"price"` and `"size"` keys or objects with those attributes.
- Only levels with positive size inside the expanded price range are kept.
- `sort_and_limit_levels()` orders bids high to low and asks low to high, then keeps the top `max_bid_levels` and `max_ask_levels`.
- `clear_order_book()` drops the current quads.

History:

- `update_order_book(book)` appends the book's levels to `bid_history` and `ask_history`, stamped with the clock.
- Points younger than 30 s fade on each update.
- Each history is trimmed to `max_quads` points by dropping the oldest.

Settings:

- `set_max_quads(n)` sets `max_quads` and gives half of `n` to each level limit. It raises `ValueError` for a negative `n`.
- `resize(width, height)` sets the drawing area.
- `set_price_range(min_price, max_price)` sets the visible prices.
- `set_intensity_scale(scale)` sets the intensity scale.
- `set_time_window(start_ms, end_ms, min_price, max_price)` sets the visible time window and price range together.

Rendering:

- `build_vertices(instances)` returns six `Vertex`es (two triangles) per quad, centred on its time and price.
- `render()` rebuilds whichever side is out of date and returns a `HeatmapFrame(bids, asks)` of vertices built from the history. While the drawing area is empty, it returns the previous frame.

## Example

```python
from sentinelview.marketdata import AggressorSide, Trade, OrderBook, OrderBookLevel
from sentinelview.tradechart import TradeChart
from sentinelview.heatmap import HeatmapLayer

chart = TradeChart()
chart.set_symbol("BTC-USD")
chart.add_trade(Trade("BTC-USD", "1", 100.0, 0.5, AggressorSide.BUY))
chart.add_trade(Trade("BTC-USD", "2", 101.0, 0.2, AggressorSide.SELL))
points = chart.trade_points(800, 600)
labels = chart.price_labels(600)

layer = HeatmapLayer(clock=lambda: 30_000.0)
layer.resize(800, 600)
layer.set_time_window(0, 60_000, 100.0, 110.0)
layer.update_order_book(
    OrderBook("BTC-USD", bids=[OrderBookLevel(104.0, 2.0)], asks=[OrderBookLevel(106.0, 1.5)])
)
bid_vertices, ask_vertices = layer.render()
```

## What it does not do

- It has no exchange connection. `StreamController` needs a client supplied through `client_factory`, and it does not run a timer of its own. Call `tick()` yourself.
- It has no window, widget or graphics output. It only computes drawing data.
- It has no candlestick building. `ChartMode` names candle modes, but no module turns trades into candles.
- It has no command-line program.