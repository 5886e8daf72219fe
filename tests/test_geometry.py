"""Tests for bounding boxes and arc endpoints."""

from __future__ import annotations

import logging
import math

import pytest

from geda_kicad.geometry import (
    arc_box,
    arc_ends,
    arc_point,
    board_bounding_box,
    bounding_box,
    footprint_box,
    line_box,
    pad_box,
    text_box,
)
from geda_kicad.models import (
    Arc,
    Board,
    Box,
    Font,
    Footprint,
    FootprintText,
    Glyph,
    Layer,
    Line,
    Pad,
    Pin,
    Point,
    Polygon,
    Via,
)


def _texts(refdes: str = "") -> list[FootprintText]:
    return [FootprintText(refdes), FootprintText(""), FootprintText("")]


def _assert_box(box: Box, x1, y1, x2, y2) -> None:
    assert box.x1 == pytest.approx(x1)
    assert box.y1 == pytest.approx(y1)
    assert box.x2 == pytest.approx(x2)
    assert box.y2 == pytest.approx(y2)


class TestArcs:

    def test_zero_degrees_points_to_negative_x(self):
        p = arc_point(Arc(0, 0, 10, 10, 0, 90, 1), 0)
        assert p.x == pytest.approx(-10)
        assert p.y == pytest.approx(0)

    def test_ninety_degrees_points_down(self):
        p = arc_point(Arc(0, 0, 10, 10, 0, 90, 1), 90)
        assert p.x == pytest.approx(0)
        assert p.y == pytest.approx(10)

    def test_ends(self):
        start, end = arc_ends(Arc(0, 0, 10, 20, 0, 90, 1))
        assert (start.x, start.y) == pytest.approx((-10, 0))
        assert (end.x, end.y) == pytest.approx((0, 20))

    def test_box_includes_crossed_extremum(self):
        """Sweeping 350 -> 390 passes 360, the leftmost point of the arc."""
        box = arc_box(Arc(100, 100, 50, 50, 350, 40, 10))
        assert box.x1 == pytest.approx(45)
        assert box.y1 == pytest.approx(100 - 50 * math.sin(math.radians(10)) - 5)
        assert box.x2 == pytest.approx(100 - 50 * math.cos(math.radians(30)) + 5)
        assert box.y2 == pytest.approx(130)

    def test_negative_delta_sweeps_backwards(self):
        box = arc_box(Arc(100, 100, 50, 50, 30, -40, 10))
        assert box.x1 == pytest.approx(45)

    def test_full_circle(self):
        _assert_box(arc_box(Arc(0, 0, 10, 10, 0, 360, 0)), -10, -10, 10, 10)


class TestPrimitiveBoxes:

    def test_line_grows_by_half_thickness(self):
        _assert_box(line_box(Line(Point(0, 0), Point(10, 20), 4)), -2, -2, 12, 22)

    def test_pad_grows_by_full_thickness(self):
        pad = Pad("1", Point(0, 0), Point(10, 0), 4)
        _assert_box(pad_box(pad), -4, -4, 14, 4)

    def test_via(self):
        _assert_box(bounding_box(Via(5, 5, 2)), 4, 4, 6, 6)

    def test_polygon(self):
        poly = Polygon([Point(0, 5), Point(10, 0), Point(4, 12)])
        _assert_box(bounding_box(poly), 0, 0, 10, 12)

    def test_unsupported_type_logs_and_returns_zero(self, caplog):
        with caplog.at_level(logging.WARNING, logger="geda_kicad"):
            box = bounding_box("not a primitive")
        _assert_box(box, 0, 0, 0, 0)
        assert "unsupported type str" in caplog.text


class TestTextBox:

    font = Font(symbols={"A": Glyph(width=10, delta=2, height=8)},
                default_symbol=Box(0, 0, 10, 15))

    def test_mapped_glyphs(self):
        box = text_box("AA", 100, 100, 0, 100, False, self.font)
        _assert_box(box, 100, 100, 124, 108)

    def test_scale(self):
        box = text_box("AA", 100, 100, 0, 200, False, self.font)
        _assert_box(box, 100, 100, 148, 116)

    def test_unmapped_glyph_uses_default_symbol(self):
        box = text_box("?", 0, 0, 0, 100, False, self.font)
        _assert_box(box, 0, 0, 12, 15)

    def test_quarter_turn(self):
        box = text_box("AA", 100, 100, 1, 100, False, self.font)
        _assert_box(box, 100, 76, 108, 100)

    def test_solder_side_grows_upwards(self):
        box = text_box("AA", 100, 100, 0, 100, True, self.font)
        _assert_box(box, 100, 92, 124, 100)


class TestFootprintBox:

    def test_pins_are_translated_by_anchor(self):
        fp = Footprint(1000, 1000, _texts(), pins=[Pin("1", -100, 0, 20)])
        _assert_box(footprint_box(fp), 890, 990, 1000, 1010)

    def test_value_text_is_ignored(self):
        font = Font(symbols={"X": Glyph(10, 0, 10)})
        texts = _texts()
        texts[1] = FootprintText("XXXXXXXX", 0, 0)
        fp = Footprint(0, 0, texts, pins=[Pin("1", 0, 0, 2)])
        _assert_box(footprint_box(fp, font), -1, -1, 1, 1)


class TestBoardBoundingBox:

    def test_empty_board(self):
        assert board_bounding_box(Board(1000, 1000)) is None

    def test_union_of_layers_and_vias(self):
        layer = Layer("top", "copper", "Top",
                      lines=[Line(Point(0, 0), Point(100, 0), 10)])
        board = Board(1000, 1000, layers=[layer], vias=[Via(200, 200, 20)])
        _assert_box(board_bounding_box(board), -5, -5, 210, 210)
