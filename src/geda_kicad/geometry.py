"""Bounding boxes and arc endpoints for board primitives.

Everything here works in board coords and never mutates its input.
"""

from __future__ import annotations

import logging
import math

from .models import (
    REFDES,
    Arc,
    Board,
    Box,
    Font,
    Footprint,
    FootprintText,
    Line,
    Pad,
    Pin,
    Point,
    Polygon,
    Text,
    Via,
)

logger = logging.getLogger(__name__)


def arc_point(arc: Arc, angle_deg: float) -> Point:
    """Point on the arc's ellipse at the given angle (0 degrees points to -x)."""
    phi = math.radians(angle_deg)
    return Point(
        x=arc.x - arc.width * math.cos(phi),
        y=arc.y + arc.height * math.sin(phi),
    )


def arc_ends(arc: Arc) -> tuple[Point, Point]:
    return (
        arc_point(arc, arc.start_angle),
        arc_point(arc, arc.start_angle + arc.delta),
    )


def _swept_range(arc: Arc) -> tuple[float, float]:
    if arc.delta < 0:
        return arc.start_angle + arc.delta, arc.start_angle
    return arc.start_angle, arc.start_angle + arc.delta


def arc_box(arc: Arc) -> Box:
    """Box of an arc including its stroke.

    The ellipse extrema sit at multiples of 90 degrees, so every such angle
    inside the swept range is probed along with both endpoints.
    """
    lo, hi = _swept_range(arc)
    points = list(arc_ends(arc))
    quarter = math.ceil(lo / 90.0) * 90.0
    while quarter <= hi:
        points.append(arc_point(arc, quarter))
        quarter += 90.0
    half = arc.thickness / 2
    return Box(
        min(p.x for p in points) - half,
        min(p.y for p in points) - half,
        max(p.x for p in points) + half,
        max(p.y for p in points) + half,
    )


def line_box(line: Line) -> Box:
    half = line.thickness / 2
    return Box(
        min(line.p1.x, line.p2.x) - half,
        min(line.p1.y, line.p2.y) - half,
        max(line.p1.x, line.p2.x) + half,
        max(line.p1.y, line.p2.y) + half,
    )


def pad_box(pad: Pad) -> Box:
    # pads grow by the full thickness, unlike lines
    return Box(
        min(pad.p1.x, pad.p2.x) - pad.thickness,
        min(pad.p1.y, pad.p2.y) - pad.thickness,
        max(pad.p1.x, pad.p2.x) + pad.thickness,
        max(pad.p1.y, pad.p2.y) + pad.thickness,
    )


def round_box(x: float, y: float, thickness: float) -> Box:
    half = thickness / 2
    return Box(x - half, y - half, x + half, y + half)


def polygon_box(polygon: Polygon) -> Box:
    if not polygon.points:
        return Box(0, 0, 0, 0)
    xs = [p.x for p in polygon.points]
    ys = [p.y for p in polygon.points]
    return Box(min(xs), min(ys), max(xs), max(ys))


def _rotate_quarter(x: float, y: float, ox: float, oy: float, steps: int) -> tuple[float, float]:
    """Rotate (x, y) around (ox, oy) by steps * 90 degrees, screen counterclockwise."""
    for _ in range(steps & 3):
        x, y = ox + (y - oy), oy - (x - ox)
    return x, y


def text_box(
    string: str,
    x: float,
    y: float,
    direction: int,
    scale: int,
    on_solder: bool,
    font: Font,
) -> Box:
    """Box of a text string laid out with the board font."""
    width = 0.0
    height = 0.0
    default = font.default_symbol
    for char in string:
        glyph = font.symbols.get(char)
        if glyph is not None:
            width += glyph.width + glyph.delta
            height = max(height, glyph.height)
        else:
            width += (default.x2 - default.x1) * 6 / 5
            height = max(height, default.y2 - default.y1)

    width = width * scale / 100
    height = height * scale / 100

    if on_solder:
        # seen from the back: the glyphs grow upwards, rotation reverses
        corner = (x + width, y - height)
        steps = (4 - direction) & 3
    else:
        corner = (x + width, y + height)
        steps = direction
    x2, y2 = _rotate_quarter(corner[0], corner[1], x, y, steps)
    return Box(min(x, x2), min(y, y2), max(x, x2), max(y, y2))


def footprint_text_box(footprint: Footprint, text: FootprintText, font: Font) -> Box:
    return text_box(
        text.string,
        footprint.x + text.x,
        footprint.y + text.y,
        text.direction,
        text.scale,
        footprint.on_solder,
        font,
    )


def footprint_box(footprint: Footprint, font: Font | None = None) -> Box:
    """Union of the footprint's owned primitives plus its reference designator.

    The value and footprint-name texts are left out.
    """
    font = font or Font()
    box = footprint_text_box(footprint, footprint.texts[REFDES], font)
    local: list[Box] = []
    local.extend(line_box(line) for line in footprint.lines)
    local.extend(arc_box(arc) for arc in footprint.arcs)
    local.extend(round_box(pin.x, pin.y, pin.thickness) for pin in footprint.pins)
    local.extend(pad_box(pad) for pad in footprint.pads)
    for part in local:
        box = box.union(part.translated(footprint.x, footprint.y))
    return box


def bounding_box(obj: object, font: Font | None = None) -> Box:
    """Bounding box of any supported primitive, in board coords.

    Footprint-owned pins and pads are boxed in their anchor-relative frame.
    Unsupported kinds log a warning and return a zero box.
    """
    if isinstance(obj, Point):
        return Box(obj.x, obj.y, obj.x, obj.y)
    if isinstance(obj, Line):
        return line_box(obj)
    if isinstance(obj, Arc):
        return arc_box(obj)
    if isinstance(obj, Pad):
        return pad_box(obj)
    if isinstance(obj, (Pin, Via)):
        return round_box(obj.x, obj.y, obj.thickness)
    if isinstance(obj, Polygon):
        return polygon_box(obj)
    if isinstance(obj, Text):
        return text_box(
            obj.string, obj.x, obj.y, obj.direction, obj.scale, obj.on_solder,
            font or Font(),
        )
    if isinstance(obj, Footprint):
        return footprint_box(obj, font)
    logger.warning("Request for bounding box of unsupported type %s", type(obj).__name__)
    return Box(0, 0, 0, 0)


def board_bounding_box(board: Board) -> Box | None:
    """Box around everything on the board, or None for an empty board."""
    boxes: list[Box] = []
    boxes.extend(round_box(via.x, via.y, via.thickness) for via in board.vias)
    boxes.extend(footprint_box(fp, board.font) for fp in board.footprints)
    for layer in board.layers:
        boxes.extend(line_box(line) for line in layer.lines)
        boxes.extend(arc_box(arc) for arc in layer.arcs)
        boxes.extend(bounding_box(text, board.font) for text in layer.texts)
        boxes.extend(polygon_box(poly) for poly in layer.polygons if poly.points)
    if not boxes:
        return None
    box = boxes[0]
    for other in boxes[1:]:
        box = box.union(other)
    return box


def polygon_contours(polygon: Polygon) -> tuple[list[Point], list[list[Point]]]:
    """Split a polygon's point array into its outer contour and hole contours."""
    points = polygon.points
    if not polygon.hole_indices:
        return list(points), []
    outer = list(points[:polygon.hole_indices[0]])
    holes = []
    for i, start in enumerate(polygon.hole_indices):
        end = (
            polygon.hole_indices[i + 1]
            if i + 1 < len(polygon.hole_indices)
            else len(points)
        )
        holes.append(list(points[start:end]))
    return outer, holes

