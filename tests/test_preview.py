"""Tests for the DXF preview writer."""

from __future__ import annotations

from collections import Counter
from pathlib import Path

import ezdxf
import pytest

from geda_kicad.board_xml import parse_xml
from geda_kicad.exceptions import DestinationError
from geda_kicad.models import Arc, Board, Footprint, FootprintText, Layer, Line, Pad, Point
from geda_kicad.preview import write_preview

FIXTURE = Path(__file__).parent / "fixtures" / "two_resistors.xml"
MM = 1_000_000


def _layer_counts(dxf_path: Path) -> dict[str, int]:
    """Return {layer_name: entity_count} for the DXF."""
    doc = ezdxf.readfile(str(dxf_path))
    counts: dict[str, int] = Counter()
    for e in doc.modelspace():
        counts[e.dxf.layer] += 1
    return dict(counts)


class TestWritePreview:

    def test_fixture_layer_counts(self, tmp_path: Path) -> None:
        out = write_preview(parse_xml(str(FIXTURE)), tmp_path / "board.dxf")
        counts = _layer_counts(out)
        # 2 pins, 2 pads, 1 via, 1 track, zone outline and its hole
        assert counts["F.Cu"] == 8
        # 2 pin drills and the via drill
        assert counts["Drill"] == 3
        # board silk line and R1's body line
        assert counts["F.SilkS"] == 2
        assert counts["Edge.Cuts"] == 4
        assert counts["Cmts.User"] == 1
        assert counts.get("B.Cu", 0) == 0

    def test_inner_layer_defined(self, tmp_path: Path) -> None:
        out = write_preview(parse_xml(str(FIXTURE)), tmp_path / "board.dxf")
        doc = ezdxf.readfile(str(out))
        assert doc.layers.has_entry("In1.Cu")

    def test_y_axis_points_up(self, tmp_path: Path) -> None:
        out = write_preview(parse_xml(str(FIXTURE)), tmp_path / "board.dxf")
        doc = ezdxf.readfile(str(out))
        vias = [
            e for e in doc.modelspace().query("CIRCLE")
            if e.dxf.radius == pytest.approx(0.3)
        ]
        assert len(vias) == 1
        assert vias[0].dxf.center.x == pytest.approx(40.0)
        assert vias[0].dxf.center.y == pytest.approx(-30.0)

    def test_back_side_parts(self, tmp_path: Path) -> None:
        pad = Pad("1", Point(0, 0), Point(MM, 0), MM, on_solder=True)
        fp = Footprint(
            0, 0,
            [FootprintText("U1"), FootprintText(""), FootprintText("")],
            on_solder=True,
            pads=[pad],
            arcs=[Arc(0, 0, MM, MM, 0, 180, MM // 10)],
        )
        out = write_preview(Board(10 * MM, 10 * MM, footprints=[fp]), tmp_path / "b.dxf")
        counts = _layer_counts(out)
        assert counts["B.Cu"] == 1
        assert counts["B.SilkS"] == 1
        assert counts.get("F.Cu", 0) == 0

    def test_unsupported_layer_not_drawn(self, tmp_path: Path) -> None:
        layer = Layer("odd", "silk", "Inner", lines=[Line(Point(0, 0), Point(MM, 0), 1000)])
        out = write_preview(Board(MM, MM, layers=[layer]), tmp_path / "odd.dxf")
        assert sum(_layer_counts(out).values()) == 0

    def test_unwritable_destination(self, tmp_path: Path) -> None:
        with pytest.raises(DestinationError):
            write_preview(Board(MM, MM), tmp_path / "missing" / "board.dxf")
