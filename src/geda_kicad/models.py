"""Data classes for the in-memory board layout.

All coordinates are integer nanometres.  Footprint-owned primitives and
footprint texts store offsets from the footprint anchor, in board
orientation (y grows downwards).
"""

from __future__ import annotations

from dataclasses import dataclass, field

REFDES = 0
VALUE = 1
FOOTPRINT_NAME = 2

PIN_SHAPES = ("round", "square", "octagon")


@dataclass
class Point:
    x: float
    y: float


@dataclass
class Box:
    x1: float
    y1: float
    x2: float
    y2: float

    def union(self, other: Box) -> Box:
        return Box(
            min(self.x1, other.x1),
            min(self.y1, other.y1),
            max(self.x2, other.x2),
            max(self.y2, other.y2),
        )

    def translated(self, dx: float, dy: float) -> Box:
        return Box(self.x1 + dx, self.y1 + dy, self.x2 + dx, self.y2 + dy)

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1


# Primitives compare by identity so they can key per-run sets and maps.


@dataclass(eq=False)
class Line:
    p1: Point
    p2: Point
    thickness: int
    clearance: int = 0


@dataclass(eq=False)
class Arc:
    x: int
    y: int
    width: int  # x radius
    height: int  # y radius
    start_angle: float  # degrees
    delta: float  # degrees, may be negative
    thickness: int
    clearance: int = 0


@dataclass(eq=False)
class Text:
    string: str
    x: int
    y: int
    direction: int = 0  # quarter turns, 0..3
    scale: int = 100  # percent
    on_solder: bool = False


@dataclass(eq=False)
class Polygon:
    points: list[Point]
    hole_indices: list[int] = field(default_factory=list)
    full: bool = False


@dataclass(eq=False)
class Pin:
    number: str
    x: int
    y: int
    thickness: int
    clearance: int = 0
    mask: int = 0
    drill: int = 0
    shape: str = "round"
    hole: bool = False  # mechanical, unplated
    thermals: list[int] = field(default_factory=list)  # style per copper group


@dataclass(eq=False)
class Pad:
    number: str
    p1: Point
    p2: Point
    thickness: int
    clearance: int = 0
    mask: int = 0
    shape: str = "round"
    on_solder: bool = False
    nopaste: bool = False


@dataclass(eq=False)
class Via:
    x: int
    y: int
    thickness: int
    clearance: int = 0
    mask: int = 0
    drill: int = 0
    thermals: list[int] = field(default_factory=list)


@dataclass(eq=False)
class FootprintText:
    string: str
    x: int = 0
    y: int = 0
    direction: int = 0
    scale: int = 100


@dataclass(eq=False)
class Footprint:
    x: int
    y: int
    texts: list[FootprintText]  # refdes, value, footprint name
    on_solder: bool = False
    hide_name: bool = False
    attributes: dict[str, str] = field(default_factory=dict)
    pins: list[Pin] = field(default_factory=list)
    pads: list[Pad] = field(default_factory=list)
    lines: list[Line] = field(default_factory=list)
    arcs: list[Arc] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.texts) != 3:
            raise ValueError(
                f"Footprint needs exactly 3 texts, got {len(self.texts)}"
            )

    @property
    def refdes(self) -> str:
        return self.texts[REFDES].string

    @property
    def value(self) -> str:
        return self.texts[VALUE].string

    @property
    def name(self) -> str:
        return self.texts[FOOTPRINT_NAME].string


@dataclass(eq=False)
class Layer:
    name: str
    kind: str  # "copper", "silk", "outline", "notes"
    side: str = "Inner"  # "Top", "Bottom" or "Inner"
    group: int = 0
    lines: list[Line] = field(default_factory=list)
    arcs: list[Arc] = field(default_factory=list)
    texts: list[Text] = field(default_factory=list)
    polygons: list[Polygon] = field(default_factory=list)

    @property
    def is_copper(self) -> bool:
        return self.kind == "copper" and self.name != "outline"


@dataclass
class NetlistEntry:
    name: str
    connections: list[str] = field(default_factory=list)  # "R1-1", ...


@dataclass
class Glyph:
    width: int
    delta: int
    height: int


@dataclass
class Font:
    symbols: dict[str, Glyph] = field(default_factory=dict)
    default_symbol: Box = field(
        default_factory=lambda: Box(0, 0, 1_016_000, 1_524_000)
    )


@dataclass
class Board:
    width: int
    height: int
    isle_area: int = 0  # nm^2
    layers: list[Layer] = field(default_factory=list)
    footprints: list[Footprint] = field(default_factory=list)
    vias: list[Via] = field(default_factory=list)
    netlist: list[NetlistEntry] = field(default_factory=list)
    font: Font = field(default_factory=Font)

    @property
    def copper_layers(self) -> list[Layer]:
        return [layer for layer in self.layers if layer.is_copper]
