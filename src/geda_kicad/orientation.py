"""Infer a footprint's rotation from the position of its reference pins."""

from __future__ import annotations

import logging
import math

from .models import Footprint

logger = logging.getLogger(__name__)

FIXED_ROTATION_ATTR = "xy-fixed-rotation"

# Looked up in this priority order.
REFERENCE_PIN_NAMES = ("1", "2", "A1", "A2", "B1", "B2")


def xy_to_angle(x: float, y: float, more_than_two_pins: bool) -> float:
    """Classify the pin-1 direction from the centroid into a rotation.

    IPC-7351 uses different rules for two-pin parts: a multi-pin part reads
    0 degrees with pin 1 in the top left or dead top, a two-pin part with
    pin 1 in the top left or left.
    """
    d = math.degrees(math.atan2(-y, x))
    if more_than_two_pins:
        if d < -100:
            return 90.0  # -180 to -100
        if d < -10:
            return 180.0  # -100 to -10
        if d < 80:
            return 270.0  # -10 to 80
        if d < 170:
            return 0.0  # 80 to 170
        return 90.0  # 170 to 180
    if d < -175:
        return 0.0  # -180 to -175
    if d < -85:
        return 90.0  # -175 to -85
    if d < 5:
        return 180.0  # -85 to 5
    if d < 95:
        return 270.0  # 5 to 95
    return 0.0  # 95 to 180


def fixed_rotation(footprint: Footprint) -> float | None:
    """The designer's fixed rotation override, if present and numeric."""
    raw = footprint.attributes.get(FIXED_ROTATION_ATTR)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning(
            "Ignoring non-numeric %s=%r on %s",
            FIXED_ROTATION_ATTR, raw, footprint.refdes,
        )
        return None


def infer_rotation(footprint: Footprint) -> float:
    """Best-effort footprint rotation in degrees.

    Symmetric or ambiguous footprints get a deterministic but arbitrary
    answer; footprints with no reference pin get 0.
    """
    theta = fixed_rotation(footprint)
    if theta is not None:
        return theta

    # name -> (x, y, intrinsic angle)
    found: dict[str, tuple[float, float, float]] = {}
    positions: list[tuple[float, float]] = []

    for pin in footprint.pins:
        positions.append((pin.x, pin.y))
        if pin.number in REFERENCE_PIN_NAMES:
            found[pin.number] = (pin.x, pin.y, 0.0)  # pins have no angle

    for pad in footprint.pads:
        cx = (pad.p1.x + pad.p2.x) / 2.0
        cy = (pad.p1.y + pad.p2.y) / 2.0
        positions.append((cx, cy))
        if pad.number in REFERENCE_PIN_NAMES:
            # y grows downwards, flip it for a counterclockwise angle
            angle = math.degrees(math.atan2(pad.p1.y - pad.p2.y, pad.p2.x - pad.p1.x))
            found[pad.number] = (cx, cy, angle)

    count = len(positions)
    if count == 0:
        return 0.0

    centroid_x = sum(p[0] for p in positions) / count
    centroid_y = sum(p[1] for p in positions) / count

    for name in REFERENCE_PIN_NAMES:
        if name not in found:
            continue
        px, py, own_angle = found[name]
        if count == 1:
            return own_angle
        rel_x = px - centroid_x
        rel_y = py - centroid_y
        if footprint.on_solder:
            rel_x = -rel_x
        if rel_x != 0.0 or rel_y != 0.0:
            return xy_to_angle(rel_x, rel_y, count > 2)
    return 0.0
