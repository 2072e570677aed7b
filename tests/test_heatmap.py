import pytest

from sentinelview.heatmap import HISTORY_ALPHA, HeatmapLayer, QuadInstance
from sentinelview.heatmapgeometry import intensity_color, point_size, quad_geometry
from sentinelview.marketdata import OrderBook, OrderBookLevel


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def layer(clock):
    return HeatmapLayer(200.0, 100.0, clock=clock)


def book(bids=(), asks=()):
    return OrderBook(
        product_id="BTC-USD",
        bids=[OrderBookLevel(p, s) for p, s in bids],
        asks=[OrderBookLevel(p, s) for p, s in asks],
    )


def test_update_bids_filters_by_expanded_range_and_size(layer):
    layer.update_bids([
        {"price": 105000.0, "size": 1.0},
        {"price": 108000.0, "size": 1.0},
        {"price": 108500.0, "size": 0.0},
        {"price": 110000.0, "size": 2.0},
    ])
    assert [q.price for q in layer.bid_instances] == [108000.0, 110000.0]
    assert layer.bids_dirty


def test_update_asks_geometry_and_color(layer):
    layer.update_asks([{"price": 108000.0, "size": 3.0}])
    (quad,) = layer.ask_instances
    rect = quad_geometry(108000.0, 3.0, 107000.0, 109000.0, 200.0, 100.0, 1.0)
    assert (quad.x, quad.y, quad.width, quad.height) == (rect.x, rect.y, rect.width, rect.height)
    assert quad.color == intensity_color(3.0, False, 1.0)
    assert quad.intensity == 3.0


def test_update_order_book_accumulates_history(layer):
    layer.update_order_book(book(bids=[(108000.0, 1.0)], asks=[(108100.0, 2.0)]))
    layer.update_order_book(book(bids=[(107900.0, 1.0)]))
    assert [q.raw_price for q in layer.bid_history] == [108000.0, 107900.0]
    assert [q.raw_price for q in layer.ask_history] == [108100.0]
    assert layer.ask_history[0].a == HISTORY_ALPHA


def test_older_history_fades(layer, clock):
    layer.update_order_book(book(bids=[(108000.0, 1.0)]))
    clock.now += 15000.0
    layer.update_order_book(book(bids=[(108000.0, 1.0)]))
    old, new = layer.bid_history
    assert old.a < HISTORY_ALPHA
    assert new.a == HISTORY_ALPHA
    assert new.timestamp - old.timestamp == 15000.0


def test_history_trimmed_to_max_quads(layer, clock):
    layer.set_max_quads(4)
    layer.update_order_book(book(bids=[(108000.0, 1.0), (108001.0, 1.0), (108002.0, 1.0)]))
    clock.now += 1.0
    layer.update_order_book(book(bids=[(108003.0, 1.0), (108004.0, 1.0), (108005.0, 1.0)]))
    history = layer.bid_history
    assert len(history) == 4
    assert [q.raw_price for q in history] == [108002.0, 108003.0, 108004.0, 108005.0]


def test_clear_order_book_keeps_history(layer):
    layer.update_bids([{"price": 108000.0, "size": 1.0}])
    layer.update_order_book(book(bids=[(108000.0, 1.0)]))
    layer.clear_order_book()
    assert layer.bid_instances == []
    assert len(layer.bid_history) == 1


def test_set_max_quads_splits_levels(layer):
    layer.set_max_quads(7)
    assert (layer.max_quads, layer.max_bid_levels, layer.max_ask_levels) == (7, 3, 3)


def test_negative_max_quads_rejected(layer):
    with pytest.raises(ValueError):
        layer.set_max_quads(-1)


def test_sort_and_limit_levels(layer):
    layer.set_max_quads(4)
    layer.update_bids([{"price": p, "size": 1.0} for p in (107500.0, 108500.0, 108000.0)])
    layer.update_asks([{"price": p, "size": 1.0} for p in (108500.0, 107500.0, 108000.0)])
    layer.sort_and_limit_levels()
    assert [q.price for q in layer.bid_instances] == [108500.0, 108000.0]
    assert [q.price for q in layer.ask_instances] == [107500.0, 108000.0]


def test_set_time_window_updates_viewport(layer):
    layer.geometry_dirty = False
    layer.set_time_window(1000, 61000, 100.0, 200.0)
    assert layer.viewport.min_price == 100.0
    assert layer.viewport.max_price == 200.0
    assert layer.geometry_dirty


def test_invalid_time_window_does_not_mark_dirty(layer):
    layer.geometry_dirty = False
    layer.set_time_window(5000, 5000, 100.0, 200.0)
    assert not layer.geometry_dirty
    assert layer.viewport.min_price == 100.0


def test_build_vertices_centres_points(layer):
    layer.set_time_window(0, 60000, 100.0, 200.0)
    quad = QuadInstance(r=1.0, g=0.0, b=0.0, a=1.0, raw_timestamp=30000.0, raw_price=150.0)
    vertices = layer.build_vertices([quad])
    assert len(vertices) == 6
    xs = [v.x for v in vertices]
    ys = [v.y for v in vertices]
    cx, cy = layer.viewport.world_to_screen(30000.0, 150.0)
    side = point_size(60000)
    assert max(xs) - min(xs) == pytest.approx(side)
    assert (max(xs) + min(xs)) / 2 == pytest.approx(cx)
    assert (max(ys) + min(ys)) / 2 == pytest.approx(cy)
    assert {(v.r, v.g, v.b, v.a) for v in vertices} == {(255, 0, 0, 255)}


def test_build_vertices_off_screen_without_window(layer):
    vertices = layer.build_vertices([QuadInstance(raw_timestamp=1.0, raw_price=108000.0)])
    assert all(v.x < -990 and v.y < -990 for v in vertices)


def test_build_vertices_empty(layer):
    assert layer.build_vertices([]) == []


def test_render_zero_size_returns_empty_frame(clock):
    empty = HeatmapLayer(clock=clock)
    empty.update_order_book(book(bids=[(108000.0, 1.0)]))
    frame = empty.render()
    assert frame.bids == [] and frame.asks == []
    assert empty.bids_dirty