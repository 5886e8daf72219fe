"""DXF preview of a board, on layers named after the KiCad layers."""

from __future__ import annotations

import logging
from pathlib import Path

from ezdxf import units as ezdxf_units
from ezdxf.document import Drawing
from ezdxf.filemanagement import new as ezdxf_new
from ezdxf.layouts.layout import Modelspace

from .exceptions import DestinationError
from .export import BACK, FRONT, inner_layer_numbers, kicad_layer_name
from .geometry import arc_point, polygon_contours
from .models import Arc, Board, Footprint, Line, Point, Polygon
from .transforms import to_mm

logger = logging.getLogger(__name__)

# Straight pieces used to draw one arc
ARC_STEPS = 24

LAYER_COLORS = {
    "F.Cu": 1,
    "B.Cu": 5,
    "F.SilkS": 3,
    "B.SilkS": 4,
    "Edge.Cuts": 7,
    "Cmts.User": 8,
    "Drill": 8,
}

# Colors for inner copper layers (cycling if more than available)
INNER_COLORS = [30, 140, 170, 200, 50, 110]


def _xy(x: float, y: float) -> tuple[float, float]:
    """Board coords to DXF millimetres; DXF y grows upwards."""
    return to_mm(x), -to_mm(y)


def setup_layers(doc: Drawing, names: list[str]) -> None:
    for i, name in enumerate(names):
        color = LAYER_COLORS.get(name, INNER_COLORS[i % len(INNER_COLORS)])
        doc.layers.add(name, color=color)


# ─── DXF Emission Helpers ─────────────────────────────────────────────────


def _add_wide_line(
    msp: Modelspace,
    p1: tuple[float, float],
    p2: tuple[float, float],
    width: float,
    layer: str,
) -> None:
    """Emit a line with physical width as a 2-vertex LWPOLYLINE.

    Uses per-vertex start/end width (xyseb format) since some DXF viewers
    ignore const_width.
    """
    msp.add_lwpolyline(
        [(p1[0], p1[1], width, width, 0.0), (p2[0], p2[1], width, width, 0.0)],
        dxfattribs={"layer": layer},
        format="xyseb",
    )


def _add_wide_arc(
    msp: Modelspace, arc: Arc, offset: Point, layer: str
) -> None:
    """Emit an elliptical arc as a wide polyline through sampled points."""
    width = to_mm(arc.thickness)
    points = []
    for i in range(ARC_STEPS + 1):
        p = arc_point(arc, arc.start_angle + arc.delta * i / ARC_STEPS)
        x, y = _xy(p.x + offset.x, p.y + offset.y)
        points.append((x, y, width, width, 0.0))
    msp.add_lwpolyline(points, dxfattribs={"layer": layer}, format="xyseb")


def _add_line(msp: Modelspace, line: Line, offset: Point, layer: str) -> None:
    _add_wide_line(
        msp,
        _xy(line.p1.x + offset.x, line.p1.y + offset.y),
        _xy(line.p2.x + offset.x, line.p2.y + offset.y),
        to_mm(line.thickness),
        layer,
    )


def _add_contour(msp: Modelspace, points: list[Point], layer: str) -> None:
    if len(points) < 2:
        return
    msp.add_lwpolyline(
        [_xy(p.x, p.y) for p in points],
        close=True,
        dxfattribs={"layer": layer},
    )


# ─── DXF Emission ────────────────────────────────────────────────────────


def emit_footprint(msp: Modelspace, fp: Footprint) -> None:
    side = BACK if fp.on_solder else FRONT
    anchor = Point(fp.x, fp.y)
    for pin in fp.pins:
        center = _xy(pin.x + fp.x, pin.y + fp.y)
        # pins go through every copper layer; F.Cu stands in for the stack
        msp.add_circle(
            center=center,
            radius=to_mm(pin.thickness) / 2.0,
            dxfattribs={"layer": "F.Cu"},
        )
        if pin.drill > 0:
            msp.add_circle(
                center=center,
                radius=to_mm(pin.drill) / 2.0,
                dxfattribs={"layer": "Drill"},
            )
    for pad in fp.pads:
        if pad.thickness <= 0:
            continue
        pad_side = BACK if pad.on_solder else FRONT
        _add_wide_line(
            msp,
            _xy(pad.p1.x + fp.x, pad.p1.y + fp.y),
            _xy(pad.p2.x + fp.x, pad.p2.y + fp.y),
            to_mm(pad.thickness),
            pad_side.copper,
        )
    for line in fp.lines:
        _add_line(msp, line, anchor, side.silk)
    for arc in fp.arcs:
        _add_wide_arc(msp, arc, anchor, side.silk)


def emit_polygon(msp: Modelspace, polygon: Polygon, layer: str) -> None:
    outer, holes = polygon_contours(polygon)
    _add_contour(msp, outer, layer)
    for hole in holes:
        _add_contour(msp, hole, layer)


def emit_vias(msp: Modelspace, board: Board) -> None:
    for via in board.vias:
        center = _xy(via.x, via.y)
        msp.add_circle(
            center=center,
            radius=to_mm(via.thickness) / 2.0,
            dxfattribs={"layer": "F.Cu"},
        )
        if via.drill > 0:
            msp.add_circle(
                center=center,
                radius=to_mm(via.drill) / 2.0,
                dxfattribs={"layer": "Drill"},
            )


# ─── Main Conversion ─────────────────────────────────────────────────────


def write_preview(board: Board, path: str | Path) -> Path:
    """Write a DXF drawing of the board, one DXF layer per KiCad layer.

    Raises:
        DestinationError: If the drawing cannot be saved.
    """
    path = Path(path)
    inner = inner_layer_numbers(board)
    board_layers = [(layer, kicad_layer_name(layer, inner)) for layer in board.layers]

    names = ["F.Cu", "B.Cu", "F.SilkS", "B.SilkS", "Edge.Cuts", "Drill"]
    for _, name in board_layers:
        if name is not None and name not in names:
            names.append(name)

    doc = ezdxf_new("R2010")
    doc.units = ezdxf_units.MM
    setup_layers(doc, names)
    msp = doc.modelspace()

    origin = Point(0, 0)
    for layer, name in board_layers:
        if name is None:
            logger.warning("Layer %s has no KiCad counterpart, not previewed", layer.name)
            continue
        for line in layer.lines:
            _add_line(msp, line, origin, name)
        for arc in layer.arcs:
            _add_wide_arc(msp, arc, origin, name)
        for polygon in layer.polygons:
            emit_polygon(msp, polygon, name)

    for fp in board.footprints:
        emit_footprint(msp, fp)
    emit_vias(msp, board)

    try:
        doc.saveas(path)
    except OSError as e:
        raise DestinationError(f"Cannot write {path}: {e}", path=str(path)) from e
    logger.info("Preview written: %s", path)
    return path
