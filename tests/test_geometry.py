import itertools

import pytest

from photogrid.geometry import (
    CellIndexError,
    Rect,
    cell_at,
    cell_rect,
    corner_radius,
    cover_fit,
    grid_rects,
    place,
)
from photogrid.templates import TEMPLATES, resolve


def test_cell_rect_basic_2x2():
    rect = cell_rect(resolve("2x2"), 100, 100, 0, 0, 0)
    assert rect == Rect(0, 0, 50, 50)
    rect = cell_rect(resolve("2x2"), 100, 100, 0, 0, 3)
    assert rect == Rect(50, 50, 50, 50)


def test_cell_rect_with_padding_and_gap():
    template = resolve("2x3")
    # usable 280x180; cell_w = (280 - 2*10)/3, cell_h = (180 - 10)/2
    rect = cell_rect(template, 300, 200, 10, 10, 5)
    assert rect.w == pytest.approx(260 / 3)
    assert rect.h == pytest.approx(85)
    assert rect.x == pytest.approx(10 + 2 * (260 / 3 + 10))
    assert rect.y == pytest.approx(10 + 85 + 10)


@pytest.mark.parametrize("index", [-1, 4, 100])
def test_out_of_range_index_fails_fast(index):
    with pytest.raises(CellIndexError):
        cell_rect(resolve("2x2"), 100, 100, 0, 0, index)


def test_cell_index_error_is_index_error():
    assert issubclass(CellIndexError, IndexError)


@pytest.mark.parametrize(
    "template_id,stage,pad,gap",
    [
        (tid, stage, pad, gap)
        for tid in TEMPLATES
        for stage, pad, gap in [((600, 600), 12, 8), ((2048, 2048), 40, 24), ((333, 517), 0, 3)]
    ],
)
def test_grid_never_overlaps_and_fills_usable_area(template_id, stage, pad, gap):
    template = resolve(template_id)
    width, height = stage
    rects = grid_rects(template, width, height, pad, gap)
    assert len(rects) == template.count

    for a, b in itertools.combinations(rects, 2):
        assert a.intersection(b) is None

    area = sum(r.w * r.h for r in rects)
    gaps_w = gap * (template.cols - 1)
    gaps_h = gap * (template.rows - 1)
    usable = (width - 2 * pad - gaps_w) * (height - 2 * pad - gaps_h)
    assert area == pytest.approx(usable)

    assert min(r.x for r in rects) == pytest.approx(pad)
    assert min(r.y for r in rects) == pytest.approx(pad)
    assert max(r.right for r in rects) == pytest.approx(width - pad)
    assert max(r.bottom for r in rects) == pytest.approx(height - pad)


def test_rows_share_height_and_columns_share_width():
    template = resolve("3x3")
    rects = grid_rects(template, 900, 600, 10, 5)
    for row in range(3):
        heights = {round(rects[row * 3 + c].h, 9) for c in range(3)}
        assert len(heights) == 1
    for col in range(3):
        widths = {round(rects[r * 3 + col].w, 9) for r in range(3)}
        assert len(widths) == 1


def test_cell_at_hits_cells_and_misses_gaps():
    template = resolve("2v")
    # cells: x 10..100 and 110..200 (stage 210, pad 10, gap 10)
    assert cell_at(template, 210, 110, 10, 10, 50, 50) == 0
    assert cell_at(template, 210, 110, 10, 10, 150, 50) == 1
    assert cell_at(template, 210, 110, 10, 10, 105, 50) is None
    assert cell_at(template, 210, 110, 10, 10, 5, 5) is None


@pytest.mark.parametrize(
    "iw,ih,rw,rh",
    [(4000, 3000, 500, 500), (300, 1200, 640, 360), (1, 1, 999, 3), (777, 333, 100, 100), (50, 50, 50, 50)],
)
def test_cover_fit_never_underfills(iw, ih, rw, rh):
    fit = cover_fit(iw, ih, rw, rh)
    assert fit.draw_w >= rw - 1e-9
    assert fit.draw_h >= rh - 1e-9
    assert fit.offset_x <= 1e-9
    assert fit.offset_y <= 1e-9
    # one axis matches exactly
    assert fit.draw_w == pytest.approx(rw) or fit.draw_h == pytest.approx(rh)
    assert fit.draw_w / fit.draw_h == pytest.approx(iw / ih)


def test_cover_fit_centres_the_crop():
    fit = cover_fit(200, 100, 100, 100)
    assert fit.scale == pytest.approx(1.0)
    assert (fit.draw_w, fit.draw_h) == (200, 100)
    assert (fit.offset_x, fit.offset_y) == (-50, 0)


@pytest.mark.parametrize("args", [(0, 10, 10, 10), (10, -1, 10, 10), (10, 10, 0, 10)])
def test_cover_fit_rejects_degenerate_sizes(args):
    with pytest.raises(ValueError):
        cover_fit(*args)


def test_place_identity_matches_cover_fit():
    rect = Rect(10, 20, 100, 100)
    fit = cover_fit(200, 100, rect.w, rect.h)
    placed = place(rect, fit, 1.0, 0, 0)
    assert placed == Rect(10 - 50, 20, 200, 100)


def test_place_scales_about_centre_then_translates():
    rect = Rect(0, 0, 100, 100)
    fit = cover_fit(100, 100, 100, 100)
    placed = place(rect, fit, 2.0, 5, -7)
    assert placed.center == pytest.approx((50 + 5, 50 - 7))
    assert (placed.w, placed.h) == (200, 200)
    assert (placed.x, placed.y) == (-45, -57)


def test_corner_radius_capped_at_half_short_side():
    assert corner_radius(Rect(0, 0, 30, 10), 24) == 5
    assert corner_radius(Rect(0, 0, 300, 300), 24) == 24
