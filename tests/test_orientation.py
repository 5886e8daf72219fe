"""Tests for footprint rotation inference."""

from __future__ import annotations

import logging

import pytest

from geda_kicad.models import Footprint, FootprintText, Pad, Pin, Point
from geda_kicad.orientation import fixed_rotation, infer_rotation, xy_to_angle


def _footprint(pins=(), pads=(), on_solder=False, attributes=None) -> Footprint:
    return Footprint(
        0, 0,
        [FootprintText("U1"), FootprintText(""), FootprintText("")],
        on_solder=on_solder,
        attributes=attributes or {},
        pins=list(pins),
        pads=list(pads),
    )


def _pin(number: str, x: int, y: int) -> Pin:
    return Pin(number, x, y, 100)


class TestXyToAngle:
    """Pin 1 direction from the centroid; y grows downwards."""

    @pytest.mark.parametrize("x, y, expected", [
        (-1, -1, 0.0),   # top left
        (0, -1, 0.0),    # dead top
        (1, -1, 270.0),  # top right
        (1, 0, 270.0),
        (0, 1, 180.0),   # bottom
        (-1, 0, 90.0),   # left
    ])
    def test_multi_pin(self, x, y, expected):
        assert xy_to_angle(x, y, True) == expected

    @pytest.mark.parametrize("x, y, expected", [
        (-1, 0, 0.0),    # left
        (-1, -1, 0.0),   # top left
        (0, -1, 270.0),  # top
        (1, 0, 180.0),   # right
        (0, 1, 90.0),    # bottom
    ])
    def test_two_pin(self, x, y, expected):
        assert xy_to_angle(x, y, False) == expected


class TestFixedRotation:

    def test_attribute_wins(self):
        fp = _footprint(
            pins=[_pin("1", 10, 0), _pin("2", 0, 0)],
            attributes={"xy-fixed-rotation": "90"},
        )
        assert fixed_rotation(fp) == 90.0
        assert infer_rotation(fp) == 90.0

    def test_non_numeric_is_ignored(self, caplog):
        fp = _footprint(
            pins=[_pin("1", 0, 0), _pin("2", 10, 0)],
            attributes={"xy-fixed-rotation": "sideways"},
        )
        with caplog.at_level(logging.WARNING, logger="geda_kicad"):
            assert infer_rotation(fp) == 0.0
        assert "sideways" in caplog.text


class TestInferRotation:

    def test_no_pins(self):
        assert infer_rotation(_footprint()) == 0.0

    def test_two_pin_pin_one_left(self):
        fp = _footprint(pins=[_pin("1", 0, 0), _pin("2", 10, 0)])
        assert infer_rotation(fp) == 0.0

    def test_two_pin_pin_one_right(self):
        fp = _footprint(pins=[_pin("1", 10, 0), _pin("2", 0, 0)])
        assert infer_rotation(fp) == 180.0

    def test_back_side_mirrors_x(self):
        fp = _footprint(pins=[_pin("1", 10, 0), _pin("2", 0, 0)], on_solder=True)
        assert infer_rotation(fp) == 0.0

    def test_pin_at_centroid_falls_through_to_next(self):
        fp = _footprint(pins=[_pin("1", 0, 0), _pin("2", 10, 0), _pin("3", -10, 0)])
        assert infer_rotation(fp) == 270.0

    def test_grid_names(self):
        fp = _footprint(pins=[
            _pin("A1", -5, -5), _pin("B1", 5, -5),
            _pin("A2", -5, 5), _pin("B2", 5, 5),
        ])
        assert infer_rotation(fp) == 0.0

    def test_single_pad_uses_own_angle(self):
        pad = Pad("1", Point(0, 0), Point(0, 10), 5)
        assert infer_rotation(_footprint(pads=[pad])) == -90.0

    def test_no_reference_pin(self):
        fp = _footprint(pins=[_pin("7", 0, 0), _pin("8", 10, 0)])
        assert infer_rotation(fp) == 0.0
