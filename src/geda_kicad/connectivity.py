"""Copper connectivity search.

The net resolver only needs something that answers "what is electrically
reachable from this primitive".  ``CopperConnectivity`` is a plain
geometric flood fill good enough for exporting; callers can plug in any
other ``ConnectivitySearch``.
"""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Protocol

from .geometry import arc_point, polygon_contours
from .models import Arc, Board, Point

ARC_CHORDS = 16
GRID_CELLS = 64  # per side of the board

Contour = list[tuple[float, float]]


class ConnectivitySearch(Protocol):
    def find_connected(self, seed: object) -> set[object]:
        """Return every primitive reachable from seed, seed included."""
        ...


@dataclass
class _Capsule:
    a: tuple[float, float]
    b: tuple[float, float]
    radius: float


@dataclass(eq=False)
class _Item:
    primitive: object
    groups: frozenset[int]
    capsules: list[_Capsule] = field(default_factory=list)
    contour: Contour = field(default_factory=list)
    holes: list[Contour] = field(default_factory=list)
    clearance: int = 0
    thermals: list[int] = field(default_factory=list)
    box: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)

    def joins_pour(self, group: int) -> bool:
        """Whether a pour on group reaches this item instead of clearing it."""
        if group < len(self.thermals) and self.thermals[group]:
            return True
        return self.clearance == 0


def _segment_distance(
    p: tuple[float, float], a: tuple[float, float], b: tuple[float, float]
) -> float:
    ax, ay = a
    dx = b[0] - ax
    dy = b[1] - ay
    length2 = dx * dx + dy * dy
    if length2 == 0.0:
        return math.hypot(p[0] - ax, p[1] - ay)
    t = max(0.0, min(1.0, ((p[0] - ax) * dx + (p[1] - ay) * dy) / length2))
    return math.hypot(p[0] - (ax + t * dx), p[1] - (ay + t * dy))


def _cross(o, a, b) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def _segments_intersect(a1, a2, b1, b2) -> bool:
    d1 = _cross(b1, b2, a1)
    d2 = _cross(b1, b2, a2)
    d3 = _cross(a1, a2, b1)
    d4 = _cross(a1, a2, b2)
    return (d1 * d2 < 0) and (d3 * d4 < 0)


def _segments_distance(a1, a2, b1, b2) -> float:
    if _segments_intersect(a1, a2, b1, b2):
        return 0.0
    return min(
        _segment_distance(a1, b1, b2),
        _segment_distance(a2, b1, b2),
        _segment_distance(b1, a1, a2),
        _segment_distance(b2, a1, a2),
    )


def _point_in_contour(p: tuple[float, float], contour: Contour) -> bool:
    """Even-odd ray cast."""
    inside = False
    x, y = p
    n = len(contour)
    for i in range(n):
        x1, y1 = contour[i]
        x2, y2 = contour[(i + 1) % n]
        if (y1 > y) != (y2 > y):
            cross_x = x1 + (y - y1) * (x2 - x1) / (y2 - y1)
            if x < cross_x:
                inside = not inside
    return inside


def _edges(contour: Contour):
    n = len(contour)
    for i in range(n):
        yield contour[i], contour[(i + 1) % n]


def _polygon_edges(item: _Item):
    yield from _edges(item.contour)
    for hole in item.holes:
        yield from _edges(hole)


def _in_copper(p: tuple[float, float], item: _Item) -> bool:
    """Inside the outer contour and outside every hole."""
    if not _point_in_contour(p, item.contour):
        return False
    return not any(_point_in_contour(p, hole) for hole in item.holes)


def _capsule_hits_polygon(cap: _Capsule, item: _Item) -> bool:
    if _in_copper(cap.a, item) or _in_copper(cap.b, item):
        return True
    return any(
        _segments_distance(cap.a, cap.b, e1, e2) <= cap.radius
        for e1, e2 in _polygon_edges(item)
    )


def _polygons_touch(first: _Item, second: _Item) -> bool:
    if _in_copper(first.contour[0], second) or _in_copper(second.contour[0], first):
        return True
    return any(
        _segments_distance(a1, a2, b1, b2) == 0.0
        for a1, a2 in _polygon_edges(first)
        for b1, b2 in _polygon_edges(second)
    )


def _capsule_meets_pour(item: _Item, pour: _Item, shared: frozenset[int]) -> bool:
    if not any(item.joins_pour(group) for group in shared):
        return False
    return any(_capsule_hits_polygon(cap, pour) for cap in item.capsules)


def _touch(first: _Item, second: _Item) -> bool:
    shared = first.groups & second.groups
    if not shared:
        return False
    b1, b2 = first.box, second.box
    if b1[2] < b2[0] or b2[2] < b1[0] or b1[3] < b2[1] or b2[3] < b1[1]:
        return False
    if first.contour and second.contour:
        return _polygons_touch(first, second)
    if second.contour:
        return _capsule_meets_pour(first, second, shared)
    if first.contour:
        return _capsule_meets_pour(second, first, shared)
    return any(
        _segments_distance(c1.a, c1.b, c2.a, c2.b) <= c1.radius + c2.radius
        for c1 in first.capsules
        for c2 in second.capsules
    )


def _finish(item: _Item) -> _Item:
    xs: list[float] = []
    ys: list[float] = []
    for cap in item.capsules:
        xs.extend((cap.a[0] - cap.radius, cap.b[0] - cap.radius,
                   cap.a[0] + cap.radius, cap.b[0] + cap.radius))
        ys.extend((cap.a[1] - cap.radius, cap.b[1] - cap.radius,
                   cap.a[1] + cap.radius, cap.b[1] + cap.radius))
    for x, y in item.contour:
        xs.append(x)
        ys.append(y)
    if xs:
        item.box = (min(xs), min(ys), max(xs), max(ys))
    return item


def _arc_capsules(arc: Arc) -> list[_Capsule]:
    radius = arc.thickness / 2
    points = [
        arc_point(arc, arc.start_angle + arc.delta * i / ARC_CHORDS)
        for i in range(ARC_CHORDS + 1)
    ]
    return [
        _Capsule((p.x, p.y), (q.x, q.y), radius)
        for p, q in zip(points, points[1:])
    ]


def _xy(p: Point, dx: float = 0.0, dy: float = 0.0) -> tuple[float, float]:
    return (p.x + dx, p.y + dy)


class CopperConnectivity:
    """Geometric flood fill over the board's copper.

    Items sharing a layer group touch when their copper overlaps.  Pins and
    vias reach every copper group, pads the top or bottom one.  A pour only
    reaches an item it does not clear: one with zero clearance, or a pin or
    via with a thermal on the pour's group.  Polygon holes carry no copper.

    Candidates come from a coarse grid over the item boxes, so a search only
    tests items near the ones already reached.
    """

    def __init__(self, board: Board) -> None:
        copper = board.copper_layers
        all_groups = frozenset(layer.group for layer in copper)
        top = frozenset(l.group for l in copper if l.side == "Top")
        bottom = frozenset(l.group for l in copper if l.side == "Bottom")
        self._cell = max(board.width, board.height, 1) / GRID_CELLS

        self._items: list[_Item] = []
        self._grid: dict[tuple[int, int], list[_Item]] = {}
        for fp in board.footprints:
            for pin in fp.pins:
                center = (fp.x + pin.x, fp.y + pin.y)
                self._add(_Item(
                    pin, all_groups, [_Capsule(center, center, pin.thickness / 2)],
                    clearance=pin.clearance, thermals=pin.thermals,
                ))
            for pad in fp.pads:
                cap = _Capsule(
                    _xy(pad.p1, fp.x, fp.y), _xy(pad.p2, fp.x, fp.y), pad.thickness / 2
                )
                groups = bottom if pad.on_solder else top
                self._add(_Item(pad, groups, [cap], clearance=pad.clearance))
        for via in board.vias:
            center = (via.x, via.y)
            self._add(_Item(
                via, all_groups, [_Capsule(center, center, via.thickness / 2)],
                clearance=via.clearance, thermals=via.thermals,
            ))
        for layer in copper:
            groups = frozenset((layer.group,))
            for line in layer.lines:
                cap = _Capsule(_xy(line.p1), _xy(line.p2), line.thickness / 2)
                self._add(_Item(line, groups, [cap], clearance=line.clearance))
            for arc in layer.arcs:
                self._add(_Item(arc, groups, _arc_capsules(arc), clearance=arc.clearance))
            for poly in layer.polygons:
                outer, holes = polygon_contours(poly)
                if len(outer) < 3:
                    continue
                self._add(_Item(
                    poly, groups,
                    contour=[_xy(p) for p in outer],
                    holes=[[_xy(p) for p in hole] for hole in holes if len(hole) >= 3],
                ))

        self._by_primitive = {item.primitive: item for item in self._items}

    def _cells(self, box: tuple[float, float, float, float]) -> Iterator[tuple[int, int]]:
        x0, y0 = math.floor(box[0] / self._cell), math.floor(box[1] / self._cell)
        x1, y1 = math.floor(box[2] / self._cell), math.floor(box[3] / self._cell)
        for ix in range(x0, x1 + 1):
            for iy in range(y0, y1 + 1):
                yield ix, iy

    def _add(self, item: _Item) -> None:
        _finish(item)
        self._items.append(item)
        for cell in self._cells(item.box):
            self._grid.setdefault(cell, []).append(item)

    def _nearby(self, item: _Item) -> Iterator[_Item]:
        seen: set[int] = set()
        for cell in self._cells(item.box):
            for other in self._grid.get(cell, ()):
                if id(other) not in seen:
                    seen.add(id(other))
                    yield other

    def find_connected(self, seed: object) -> set[object]:
        start = self._by_primitive.get(seed)
        if start is None:
            return {seed}
        found = {id(start)}
        queue = deque([start])
        reached: set[object] = {seed}
        while queue:
            current = queue.popleft()
            for other in self._nearby(current):
                if id(other) in found:
                    continue
                if _touch(current, other):
                    found.add(id(other))
                    reached.add(other.primitive)
                    queue.append(other)
        return reached
