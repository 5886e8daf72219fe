"""KiCad board emission and conversion orchestration."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from .connectivity import ConnectivitySearch, CopperConnectivity
from .exceptions import DestinationError
from .geometry import arc_ends, arc_point
from .ids import IdGenerator, random_ids
from .models import (
    FOOTPRINT_NAME,
    REFDES,
    VALUE,
    Arc,
    Board,
    Footprint,
    Layer,
    Line,
    Pad,
    Pin,
    Point,
    Text,
    Via,
)
from .nets import NetResolver, NetTable
from .orientation import infer_rotation
from .records import (
    FootprintRecord,
    FpArcRecord,
    FpLineRecord,
    GrArcRecord,
    GrLineRecord,
    GrTextRecord,
    NetRecord,
    PadRecord,
    PinRecord,
    PropertyRecord,
    SegmentRecord,
    TrackArcRecord,
    ViaRecord,
)
from .sexpr import LAYER_TABLE, format_header, format_record
from .transforms import (
    Placement,
    area_to_mm2,
    pad_geometry,
    place_local,
    text_angle,
    to_mm,
)
from .zones import zone_records

logger = logging.getLogger(__name__)

VIA_LAYERS = ("F.Cu", "B.Cu")
TABLE_LAYERS = frozenset(name for _, name, _, _ in LAYER_TABLE)
SOLID_THERMAL = 3


@dataclass
class ExportOptions:
    version: int = 20240108
    generator: str = "geda-kicad"
    generator_version: str = "1.0"
    board_thickness: float = 1.6
    footprint_library: str = "geda"
    zone_hatch: float = 0.508
    zone_clearance: float = 0.25
    zone_min_thickness: float = 0.1


@dataclass
class _Side:
    copper: str
    silk: str
    fab: str
    paste: str
    mask: str


FRONT = _Side("F.Cu", "F.SilkS", "F.Fab", "F.Paste", "F.Mask")
BACK = _Side("B.Cu", "B.SilkS", "B.Fab", "B.Paste", "B.Mask")


def _mm(p: Point) -> Point:
    return Point(to_mm(p.x), to_mm(p.y))


def inner_layer_numbers(board: Board) -> dict[int, int]:
    """Map inner copper groups to KiCad In<n>.Cu numbers, in group order."""
    inner = sorted({l.group for l in board.copper_layers if l.side == "Inner"})
    return {group: i + 1 for i, group in enumerate(inner)}


def kicad_layer_name(layer: Layer, inner_numbers: dict[int, int]) -> str | None:
    """KiCad layer for a board layer, None if the kind is unsupported."""
    if layer.kind == "copper":
        if layer.name == "outline":
            return "Edge.Cuts"
        if layer.side == "Top":
            return "F.Cu"
        if layer.side == "Bottom":
            return "B.Cu"
        name = f"In{inner_numbers[layer.group]}.Cu"
        # inner groups past the fixed layer table have no KiCad layer
        return name if name in TABLE_LAYERS else None
    if layer.kind == "silk":
        if layer.side == "Top":
            return "F.SilkS"
        if layer.side == "Bottom":
            return "B.SilkS"
        return None
    if layer.kind == "outline":
        return "Edge.Cuts"
    if layer.kind == "notes":
        return "Cmts.User"
    return None


class KicadExporter:
    """Walks a board and produces the KiCad document for it.

    Net resolution state lives on the exporter, so use one instance per run.
    """

    def __init__(
        self,
        board: Board,
        options: ExportOptions | None = None,
        ids: IdGenerator | None = None,
        search: ConnectivitySearch | None = None,
    ) -> None:
        self.board = board
        self.options = options or ExportOptions()
        self.ids = ids or random_ids()
        self.table = NetTable.from_board(board)
        self.resolver = NetResolver(
            board, self.table, search or CopperConnectivity(board)
        )
        self._inner_numbers = inner_layer_numbers(board)

    def layer_name(self, layer: Layer) -> str | None:
        return kicad_layer_name(layer, self._inner_numbers)

    # ─── Footprints ──────────────────────────────────────────────────

    def footprint_record(self, fp: Footprint) -> FootprintRecord:
        rotation = infer_rotation(fp)
        placement = Placement(Point(fp.x, fp.y), rotation, fp.on_solder)
        side = BACK if fp.on_solder else FRONT

        return FootprintRecord(
            library=self.options.footprint_library,
            name=fp.name,
            layer=side.copper,
            uuid=self.ids(),
            at=_mm(Point(fp.x, fp.y)),
            angle=rotation,
            properties=self._properties(fp, placement, side),
            pads=tuple(
                [self._pin(fp, pin, placement) for pin in fp.pins]
                + [
                    self._pad(pad, placement)
                    for pad in fp.pads
                    if pad.thickness > 0
                ]
            ),
            graphics=tuple(
                [self._fp_line(line, placement, side) for line in fp.lines]
                + [self._fp_arc(arc, placement, side) for arc in fp.arcs]
            ),
        )

    def _properties(
        self, fp: Footprint, placement: Placement, side: _Side
    ) -> tuple[PropertyRecord, ...]:
        ref = fp.texts[REFDES]
        value = fp.texts[VALUE]
        name = fp.texts[FOOTPRINT_NAME]
        return (
            PropertyRecord(
                name="Reference",
                value=ref.string,
                at=place_local(Point(ref.x, ref.y), placement),
                angle=text_angle(ref.direction, fp.on_solder),
                layer=side.silk,
                hidden=fp.hide_name,
                uuid=self.ids(),
                font_size=(1.0, 0.8),
                font_thickness=0.18,
                unlocked=True,
                justify="left top mirror" if fp.on_solder else "left top",
            ),
            PropertyRecord(
                name="Value",
                value=value.string,
                at=place_local(Point(value.x, value.y), placement),
                angle=value.direction * 90,
                layer=side.fab,
                hidden=True,
                uuid=self.ids(),
            ),
            PropertyRecord(
                name="Footprint",
                value=f"{self.options.footprint_library}:{name.string}",
                at=place_local(Point(name.x, name.y), placement),
                angle=name.direction * 90,
                layer=side.fab,
                hidden=True,
                uuid=self.ids(),
            ),
        )

    def _pin(self, fp: Footprint, pin: Pin, placement: Placement) -> PinRecord:
        net = self.resolver.resolve(pin)
        thick = to_mm(pin.thickness)
        clear = to_mm(pin.clearance)
        zone_connect = None
        styles = [style for style in pin.thermals if style]
        if styles:
            logger.debug("Pin %s-%s has thermal style %d", fp.refdes, pin.number, styles[0])
            zone_connect = 2 if styles[0] == SOLID_THERMAL else 1
        return PinRecord(
            number=pin.number,
            kind="np_thru_hole" if pin.hole else "thru_hole",
            shape="circle" if pin.shape == "round" else "rect",
            chamfered=pin.shape == "octagon",
            at=place_local(Point(pin.x, pin.y), placement),
            size=thick,
            drill=to_mm(pin.drill),
            mask_margin=(to_mm(pin.mask) - thick) / 2.0,
            clearance=clear / 2.0,
            net=net,
            uuid=self.ids(),
            zone_connect=zone_connect,
            thermal_gap=clear / 2.0 if zone_connect is not None else None,
        )

    def _pad(self, pad: Pad, placement: Placement) -> PadRecord:
        net = self.resolver.resolve(pad)
        geom = pad_geometry(pad, placement)
        side = BACK if pad.on_solder else FRONT
        layers = (side.copper,) if pad.nopaste else (side.copper, side.paste)
        thick = to_mm(pad.thickness)
        return PadRecord(
            number=pad.number,
            shape="oval" if pad.shape == "round" else "rect",
            chamfered=pad.shape == "octagon",
            at=geom.center,
            angle=geom.angle,
            size=(geom.width, geom.height),
            layers=layers + (side.mask,),
            mask_margin=(to_mm(pad.mask) - thick) / 2.0,
            clearance=to_mm(pad.clearance) / 2.0,
            net=net,
            uuid=self.ids(),
        )

    def _fp_line(self, line: Line, placement: Placement, side: _Side) -> FpLineRecord:
        return FpLineRecord(
            start=place_local(line.p1, placement),
            end=place_local(line.p2, placement),
            width=to_mm(line.thickness),
            layer=side.silk,
            uuid=self.ids(),
        )

    def _fp_arc(self, arc: Arc, placement: Placement, side: _Side) -> FpArcRecord:
        start, end = arc_ends(arc)
        mid = arc_point(arc, arc.start_angle + arc.delta / 2.0)
        return FpArcRecord(
            start=place_local(start, placement),
            mid=place_local(mid, placement),
            end=place_local(end, placement),
            width=to_mm(arc.thickness),
            layer=side.silk,
            uuid=self.ids(),
        )

    # ─── Board-level items ───────────────────────────────────────────

    def via_record(self, via: Via) -> ViaRecord:
        return ViaRecord(
            at=_mm(Point(via.x, via.y)),
            size=to_mm(via.thickness),
            drill=to_mm(via.drill),
            layers=VIA_LAYERS,
            net=self.resolver.resolve(via),
            uuid=self.ids(),
        )

    def _arc_points(self, arc: Arc) -> tuple[Point, Point, Point]:
        start, end = arc_ends(arc)
        mid = arc_point(arc, arc.start_angle + arc.delta / 2.0)
        return _mm(start), _mm(mid), _mm(end)

    def copper_records(self, layer: Layer, name: str) -> Iterator[object]:
        for line in layer.lines:
            yield SegmentRecord(
                start=_mm(line.p1),
                end=_mm(line.p2),
                width=to_mm(line.thickness),
                layer=name,
                net=self.resolver.resolve(line),
                uuid=self.ids(),
            )
        for arc in layer.arcs:
            start, mid, end = self._arc_points(arc)
            yield TrackArcRecord(
                start=start,
                mid=mid,
                end=end,
                width=to_mm(arc.thickness),
                layer=name,
                net=self.resolver.resolve(arc),
                uuid=self.ids(),
            )
        island_area_min = area_to_mm2(self.board.isle_area)
        for polygon in layer.polygons:
            if not polygon.points:
                logger.warning("Skipping empty polygon on layer %s", layer.name)
                continue
            net = self.resolver.resolve(polygon)
            yield from zone_records(
                polygon,
                net,
                name,
                self.ids,
                island_area_min=island_area_min,
                hatch=self.options.zone_hatch,
                clearance=self.options.zone_clearance,
                min_thickness=self.options.zone_min_thickness,
            )
        if layer.texts:
            logger.warning(
                "Skipping %d text(s) on copper layer %s", len(layer.texts), layer.name
            )

    def graphic_records(self, layer: Layer, name: str) -> Iterator[object]:
        for line in layer.lines:
            yield GrLineRecord(
                start=_mm(line.p1),
                end=_mm(line.p2),
                width=to_mm(line.thickness),
                layer=name,
                uuid=self.ids(),
            )
        for arc in layer.arcs:
            start, mid, end = self._arc_points(arc)
            yield GrArcRecord(
                start=start,
                mid=mid,
                end=end,
                width=to_mm(arc.thickness),
                layer=name,
                uuid=self.ids(),
            )
        for text in layer.texts:
            yield self._text_record(text, name)
        if layer.polygons:
            logger.warning(
                "Skipping %d polygon(s) on non-copper layer %s",
                len(layer.polygons), layer.name,
            )

    def _text_record(self, text: Text, layer_name: str) -> GrTextRecord:
        return GrTextRecord(
            text=text.string,
            at=_mm(Point(text.x, text.y)),
            angle=text_angle(text.direction, text.on_solder),
            layer=layer_name,
            uuid=self.ids(),
            size=(1.0 * text.scale / 100.0, 0.8 * text.scale / 100.0),
            mirror=text.on_solder,
        )

    # ─── Main conversion ─────────────────────────────────────────────

    def records(self) -> Iterator[object]:
        """Every output record in document order."""
        for net in self.table.nets:
            yield NetRecord(net)

        for fp in self.board.footprints:
            yield self.footprint_record(fp)

        for via in self.board.vias:
            yield self.via_record(via)

        for layer in self.board.layers:
            name = self.layer_name(layer)
            if name is None:
                logger.warning(
                    "Unsupported layer %s (kind %s, side %s), skipping",
                    layer.name, layer.kind, layer.side,
                )
                continue
            logger.debug("Processing layer %s as %s", layer.name, name)
            if layer.is_copper:
                yield from self.copper_records(layer, name)
            else:
                yield from self.graphic_records(layer, name)

    def render(self) -> str:
        opts = self.options
        parts = [
            format_header(
                opts.version,
                opts.generator,
                opts.generator_version,
                opts.board_thickness,
                to_mm(self.board.width),
                to_mm(self.board.height),
            )
        ]
        parts.extend(format_record(rec) for rec in self.records())
        parts.append(")")
        logger.info(
            "Exported %d footprints, %d vias, %d nets using %d connectivity searches",
            len(self.board.footprints),
            len(self.board.vias),
            len(self.table),
            self.resolver.searches,
        )
        return "\n".join(parts) + "\n"


def write_kicad(
    board: Board,
    path: str | Path,
    options: ExportOptions | None = None,
    ids: IdGenerator | None = None,
    search: ConnectivitySearch | None = None,
) -> Path:
    """Render the board and write it to path.

    The document is rendered fully in memory and moved into place from a
    temporary file, so a failed run never leaves a partial file behind.

    Raises:
        DestinationError: If the destination cannot be written.
    """
    path = Path(path)
    text = KicadExporter(board, options, ids, search).render()
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(text)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise DestinationError(f"Cannot write {path}: {e}", path=str(path)) from e
    return path
