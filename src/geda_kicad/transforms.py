"""Coordinate transform utilities from board coords to KiCad footprint frames."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from .models import Pad, Point

MM_PER_COORD = 1e-6  # coords are nanometres

# Pads shorter than this (mm) are treated as square/round dots.
DEGENERATE_PAD = 0.0001

_RIGHT_ANGLES = {
    0.0: (0.0, 1.0),
    90.0: (1.0, 0.0),
    180.0: (0.0, -1.0),
    270.0: (-1.0, 0.0),
}


def to_mm(coord: float) -> float:
    return coord * MM_PER_COORD


def area_to_mm2(area: float) -> float:
    return area * MM_PER_COORD * MM_PER_COORD


def right_angle_trig(angle_deg: float) -> tuple[float, float]:
    """Return (sin, cos) of an angle, exact for multiples of 90 degrees."""
    exact = _RIGHT_ANGLES.get(angle_deg % 360.0)
    if exact is not None:
        return exact
    phi = math.radians(angle_deg)
    return math.sin(phi), math.cos(phi)


@dataclass
class Placement:
    """Footprint placement: anchor (coords), rotation (degrees), mirror flag."""

    anchor: Point
    rotation: float
    mirror: bool = False
    sin: float = field(init=False)
    cos: float = field(init=False)

    def __post_init__(self) -> None:
        self.sin, self.cos = right_angle_trig(self.rotation)


def place_local(offset: Point, placement: Placement) -> Point:
    """Transform an anchor-relative offset (coords) into the footprint frame (mm).

    1. Negate x if the footprint sits on the back side
    2. Rotate by the standard matrix [cos, -sin; sin, cos]
    """
    x = to_mm(offset.x)
    y = to_mm(offset.y)
    if placement.mirror:
        x = -x
    return Point(
        x=x * placement.cos - y * placement.sin,
        y=x * placement.sin + y * placement.cos,
    )


def place_absolute(offset: Point, placement: Placement) -> Point:
    """Like place_local, then translated by the footprint anchor (mm)."""
    local = place_local(offset, placement)
    return Point(
        x=local.x + to_mm(placement.anchor.x),
        y=local.y + to_mm(placement.anchor.y),
    )


def normalize_angle(angle_deg: float) -> float:
    angle = angle_deg % 360.0
    # tiny negative inputs wrap to exactly 360.0
    if angle == 360.0 or angle == 0.0:
        return 0.0
    return angle


@dataclass
class PadGeometry:
    center: Point  # mm, footprint frame
    width: float
    height: float
    angle: float


def pad_geometry(pad: Pad, placement: Placement) -> PadGeometry:
    """Turn a two-endpoint pad into a centred, sized and angled KiCad pad.

    The pad's own direction (atan2 of its endpoint vector) is added to the
    footprint rotation, since a pad can sit at any angle to the footprint.
    """
    q1 = place_local(pad.p1, placement)
    q2 = place_local(pad.p2, placement)
    center = Point(x=(q1.x + q2.x) / 2.0, y=(q1.y + q2.y) / 2.0)
    thick = to_mm(pad.thickness)
    dx = q2.x - q1.x
    dy = q2.y - q1.y
    if abs(dx) <= DEGENERATE_PAD and abs(dy) <= DEGENERATE_PAD:
        return PadGeometry(center, thick, thick, normalize_angle(placement.rotation))
    if abs(dy) <= DEGENERATE_PAD:
        own = 0.0
    elif abs(dx) <= DEGENERATE_PAD:
        own = 90.0
    else:
        # y grows downwards, so negate dy for a counterclockwise angle
        own = math.degrees(math.atan2(-dy, dx))
    length = math.hypot(dx, dy)
    return PadGeometry(
        center=center,
        width=length + thick,
        height=thick,
        angle=normalize_angle(placement.rotation + own),
    )


def text_angle(direction: int, on_solder: bool) -> int:
    """KiCad text angle for a quarter-turn direction."""
    angle = direction * 90
    if on_solder:
        angle = 180 - angle
    return angle
