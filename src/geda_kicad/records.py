"""Typed output records, one per KiCad element kind.

Coordinates and sizes are millimetres; net fields carry the resolved net.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import Point
from .nets import Net


@dataclass(frozen=True)
class NetRecord:
    net: Net


@dataclass(frozen=True)
class PropertyRecord:
    name: str  # "Reference", "Value", "Footprint"
    value: str
    at: Point
    angle: int
    layer: str
    hidden: bool
    uuid: str
    font_size: tuple[float, float] = (1.0, 1.0)
    font_thickness: float = 0.1
    unlocked: bool = False
    justify: str | None = None  # e.g. "left top" or "left top mirror"


@dataclass(frozen=True)
class PinRecord:
    number: str
    kind: str  # "thru_hole" or "np_thru_hole"
    shape: str  # "circle" or "rect"
    chamfered: bool
    at: Point
    size: float
    drill: float
    mask_margin: float
    clearance: float
    net: Net
    uuid: str
    zone_connect: int | None = None
    thermal_gap: float | None = None


@dataclass(frozen=True)
class PadRecord:
    number: str
    shape: str  # "oval" or "rect"
    chamfered: bool
    at: Point
    angle: float
    size: tuple[float, float]
    layers: tuple[str, ...]
    mask_margin: float
    clearance: float
    net: Net
    uuid: str


@dataclass(frozen=True)
class FpLineRecord:
    start: Point
    end: Point
    width: float
    layer: str
    uuid: str


@dataclass(frozen=True)
class FpArcRecord:
    start: Point
    mid: Point
    end: Point
    width: float
    layer: str
    uuid: str


@dataclass(frozen=True)
class FootprintRecord:
    library: str
    name: str
    layer: str
    uuid: str
    at: Point
    angle: float
    properties: tuple[PropertyRecord, ...] = ()
    pads: tuple[PinRecord | PadRecord, ...] = ()
    graphics: tuple[FpLineRecord | FpArcRecord, ...] = ()


@dataclass(frozen=True)
class ViaRecord:
    at: Point
    size: float
    drill: float
    layers: tuple[str, ...]
    net: Net
    uuid: str


@dataclass(frozen=True)
class SegmentRecord:
    start: Point
    end: Point
    width: float
    layer: str
    net: Net
    uuid: str


@dataclass(frozen=True)
class TrackArcRecord:
    start: Point
    mid: Point
    end: Point
    width: float
    layer: str
    net: Net
    uuid: str


@dataclass(frozen=True)
class ZoneRecord:
    net: Net
    layer: str
    uuid: str
    points: tuple[Point, ...]
    island_removal_mode: int
    island_area_min: float
    hatch: float = 0.508
    clearance: float = 0.25
    min_thickness: float = 0.1


@dataclass(frozen=True)
class KeepoutRecord:
    layer: str
    uuid: str
    points: tuple[Point, ...]
    hatch: float = 0.508
    clearance: float = 0.25
    min_thickness: float = 0.1


@dataclass(frozen=True)
class GrLineRecord:
    start: Point
    end: Point
    width: float
    layer: str
    uuid: str


@dataclass(frozen=True)
class GrArcRecord:
    start: Point
    mid: Point
    end: Point
    width: float
    layer: str
    uuid: str


@dataclass(frozen=True)
class GrTextRecord:
    text: str
    at: Point
    angle: int
    layer: str
    uuid: str
    size: tuple[float, float]
    mirror: bool = False
