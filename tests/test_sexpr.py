"""Tests for s-expression formatting of output records."""

from __future__ import annotations

import pytest

from geda_kicad.models import Point
from geda_kicad.nets import NO_CONNECT, Net
from geda_kicad.records import NetRecord, PinRecord, ViaRecord
from geda_kicad.sexpr import (
    LAYER_TABLE,
    fmt,
    format_header,
    format_points,
    format_record,
    quote,
)


def _pin(**overrides) -> PinRecord:
    fields = dict(
        number="1",
        kind="thru_hole",
        shape="rect",
        chamfered=False,
        at=Point(-2.54, 0.0),
        size=1.5,
        drill=0.8,
        mask_margin=0.1,
        clearance=0.25,
        net=Net(2, "SIG"),
        uuid="u",
    )
    fields.update(overrides)
    return PinRecord(**fields)


class TestScalars:

    @pytest.mark.parametrize("value, expected", [
        (1.5, "1.500000"),
        (-1.5, "-1.500000"),
        (-0.0, "0.000000"),
        (-1e-9, "0.000000"),
        (2.54, "2.540000"),
    ])
    def test_fmt(self, value, expected):
        assert fmt(value) == expected

    def test_quote_escapes(self):
        assert quote('a"b\\c') == '"a\\"b\\\\c"'

    def test_points_per_line(self):
        text = format_points([Point(i, 0) for i in range(15)])
        assert [line.count("(xy ") for line in text.splitlines()] == [7, 7, 1]


class TestHeader:

    def test_layer_table(self):
        text = format_header(20240108, "geda-kicad", "1.0", 1.6, 50.0, 40.0)
        assert len(LAYER_TABLE) == 31
        assert '\t\t(0 "F.Cu" signal)' in text
        assert '\t\t(31 "B.Cu" signal)' in text
        assert '\t\t(46 "B.CrtYd" user "B.Courtyard")' in text
        assert '\t\t(58 "User.9" user)' in text

    def test_version_and_paper(self):
        text = format_header(20240108, "geda-kicad", "1.0", 1.6, 50.0, 40.0)
        assert text.startswith("(kicad_pcb\n\t(version 20240108)")
        assert '(generator "geda-kicad")' in text
        assert '(paper "User" 50.000000 40.000000)' in text


class TestRecords:

    def test_net(self):
        assert format_record(NetRecord(NO_CONNECT)) == '\t(net 0 "no connection")'

    def test_pin(self):
        text = format_record(_pin())
        assert text.startswith('\t\t(pad "1" thru_hole rect')
        assert "(at -2.540000 0.000000)" in text
        assert "(size 1.500000 1.500000)" in text
        assert '(net 2 "SIG")' in text
        assert "chamfer" not in text
        assert "zone_connect" not in text

    def test_octagon_pin_is_chamfered(self):
        assert "(chamfer_ratio 0.29365)" in format_record(_pin(chamfered=True))

    def test_thermal(self):
        text = format_record(_pin(zone_connect=2, thermal_gap=0.25))
        assert "(zone_connect 2)" in text
        assert "(thermal_gap 0.250000)" in text

    def test_via(self):
        rec = ViaRecord(Point(40.0, 30.0), 0.6, 0.3, ("F.Cu", "B.Cu"), NO_CONNECT, "u")
        text = format_record(rec)
        assert '(layers "F.Cu" "B.Cu")' in text
        assert "(net 0)" in text

    def test_unknown_record(self):
        with pytest.raises(TypeError):
            format_record(object())
