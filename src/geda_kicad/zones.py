"""Polygon to zone conversion.

KiCad zones have no holes, so each polygon becomes one filled zone for its
outer contour plus one keep-out zone per hole on the same layer.  Whether
KiCad's filler then clears exactly the original hole area is not
guaranteed: a keep-out only forbids copper pour inside it.
"""

from __future__ import annotations

from .geometry import polygon_contours
from .ids import IdGenerator
from .models import Point, Polygon
from .nets import Net
from .records import KeepoutRecord, ZoneRecord
from .sexpr import format_record
from .transforms import to_mm

FULL_POLY_ISLAND_MODE = 2  # keep islands
DEFAULT_ISLAND_MODE = 0  # remove islands


def _to_mm_points(points: list[Point]) -> tuple[Point, ...]:
    return tuple(Point(to_mm(p.x), to_mm(p.y)) for p in points)


def zone_records(
    polygon: Polygon,
    net: Net,
    layer: str,
    ids: IdGenerator,
    island_area_min: float = 0.0,
    hatch: float = 0.508,
    clearance: float = 0.25,
    min_thickness: float = 0.1,
) -> list[ZoneRecord | KeepoutRecord]:
    """One filled zone for the outer contour, then one keep-out per hole."""
    outer, holes = polygon_contours(polygon)
    records: list[ZoneRecord | KeepoutRecord] = [
        ZoneRecord(
            net=net,
            layer=layer,
            uuid=ids(),
            points=_to_mm_points(outer),
            island_removal_mode=(
                FULL_POLY_ISLAND_MODE if polygon.full else DEFAULT_ISLAND_MODE
            ),
            island_area_min=island_area_min,
            hatch=hatch,
            clearance=clearance,
            min_thickness=min_thickness,
        )
    ]
    for hole in holes:
        records.append(
            KeepoutRecord(
                layer=layer,
                uuid=ids(),
                points=_to_mm_points(hole),
                hatch=hatch,
                clearance=clearance,
                min_thickness=min_thickness,
            )
        )
    return records


def emit_polygon(
    polygon: Polygon,
    net: Net,
    layer: str,
    ids: IdGenerator,
    island_area_min: float = 0.0,
) -> str:
    """KiCad text for a polygon: its zone followed by its hole keep-outs."""
    return "\n".join(
        format_record(rec)
        for rec in zone_records(polygon, net, layer, ids, island_area_min)
    )
