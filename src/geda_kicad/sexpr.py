"""KiCad s-expression text for each output record kind.

Numbers go through ``fmt`` and strings through ``quote`` so precision and
escaping are decided in one place.
"""

from __future__ import annotations

from typing import Callable

from .models import Point
from .records import (
    FootprintRecord,
    FpArcRecord,
    FpLineRecord,
    GrArcRecord,
    GrLineRecord,
    GrTextRecord,
    KeepoutRecord,
    NetRecord,
    PadRecord,
    PinRecord,
    PropertyRecord,
    SegmentRecord,
    TrackArcRecord,
    ViaRecord,
    ZoneRecord,
)

# Fixed layer table, independent of the source board.
LAYER_TABLE: tuple[tuple[int, str, str, str | None], ...] = (
    (0, "F.Cu", "signal", None),
    (1, "In1.Cu", "signal", None),
    (2, "In2.Cu", "signal", None),
    (31, "B.Cu", "signal", None),
    (32, "B.Adhes", "user", None),
    (33, "F.Adhes", "user", None),
    (34, "B.Paste", "user", None),
    (35, "F.Paste", "user", None),
    (36, "B.SilkS", "user", None),
    (37, "F.SilkS", "user", None),
    (38, "B.Mask", "user", None),
    (39, "F.Mask", "user", None),
    (40, "Dwgs.User", "user", None),
    (41, "Cmts.User", "user", None),
    (42, "Eco1.User", "user", None),
    (43, "Eco2.User", "user", None),
    (44, "Edge.Cuts", "user", None),
    (45, "Margin", "user", None),
    (46, "B.CrtYd", "user", "B.Courtyard"),
    (47, "F.CrtYd", "user", "F.Courtyard"),
    (48, "B.Fab", "user", None),
    (49, "F.Fab", "user", None),
    (50, "User.1", "user", None),
    (51, "User.2", "user", None),
    (52, "User.3", "user", None),
    (53, "User.4", "user", None),
    (54, "User.5", "user", None),
    (55, "User.6", "user", None),
    (56, "User.7", "user", None),
    (57, "User.8", "user", None),
    (58, "User.9", "user", None),
)

CHAMFER = "(chamfer_ratio 0.29365) (chamfer top_left top_right bottom_left bottom_right)"

POINTS_PER_LINE = 7


def fmt(value: float) -> str:
    text = f"{value:.6f}"
    if text == "-0.000000":
        return "0.000000"
    return text


def quote(text: str) -> str:
    """Double-quote a string, escaping quotes and backslashes."""
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def xy(p: Point) -> str:
    return f"{fmt(p.x)} {fmt(p.y)}"


def format_header(
    version: int,
    generator: str,
    generator_version: str,
    thickness: float,
    paper_width: float,
    paper_height: float,
) -> str:
    lines = [
        "(kicad_pcb",
        f"\t(version {version})",
        f"\t(generator {quote(generator)})",
        f"\t(generator_version {quote(generator_version)})",
        "\t(general",
        f"\t\t(thickness {thickness})",
        "\t)",
        f"\t(paper \"User\" {fmt(paper_width)} {fmt(paper_height)})",
        "\t(layers",
    ]
    for number, name, kind, user_name in LAYER_TABLE:
        extra = f" {quote(user_name)}" if user_name else ""
        lines.append(f"\t\t({number} {quote(name)} {kind}{extra})")
    lines.append("\t)")
    return "\n".join(lines)


def format_points(points: tuple[Point, ...] | list[Point], indent: str = "\t\t\t\t") -> str:
    """(xy x y) pairs, POINTS_PER_LINE to a line."""
    rows = []
    for start in range(0, len(points), POINTS_PER_LINE):
        batch = points[start:start + POINTS_PER_LINE]
        rows.append(indent + " ".join(f"(xy {xy(p)})" for p in batch))
    return "\n".join(rows)


def format_net(rec: NetRecord) -> str:
    return f"\t(net {rec.net.number} {quote(rec.net.name)})"


def format_property(rec: PropertyRecord) -> str:
    lines = [
        f"\t\t(property {quote(rec.name)} {quote(rec.value)}",
        f"\t\t\t(at {xy(rec.at)} {rec.angle})",
    ]
    if rec.unlocked:
        lines.append("\t\t\t(unlocked yes)")
    lines += [
        f"\t\t\t(layer {quote(rec.layer)})",
        f"\t\t\t(hide {'yes' if rec.hidden else 'no'})",
        f"\t\t\t(uuid {quote(rec.uuid)})",
        "\t\t\t(effects",
        "\t\t\t\t(font",
        f"\t\t\t\t\t(size {rec.font_size[0]:g} {rec.font_size[1]:g})",
        f"\t\t\t\t\t(thickness {rec.font_thickness:g})",
        "\t\t\t\t)",
    ]
    if rec.justify:
        lines.append(f"\t\t\t\t(justify {rec.justify})")
    lines += ["\t\t\t)", "\t\t)"]
    return "\n".join(lines)


def format_pin(rec: PinRecord) -> str:
    lines = [f"\t\t(pad {quote(rec.number)} {rec.kind} {rec.shape}"]
    if rec.chamfered:
        lines.append(f"\t\t\t{CHAMFER}")
    lines += [
        f"\t\t\t(at {xy(rec.at)})",
        f"\t\t\t(size {fmt(rec.size)} {fmt(rec.size)})",
        f"\t\t\t(drill {fmt(rec.drill)})",
        '\t\t\t(layers "*.Cu" "*.Mask")',
        f"\t\t\t(solder_mask_margin {fmt(rec.mask_margin)})",
        f"\t\t\t(clearance {fmt(rec.clearance)})",
    ]
    if rec.zone_connect is not None:
        lines.append(f"\t\t\t(zone_connect {rec.zone_connect})")
        lines.append(f"\t\t\t(thermal_gap {fmt(rec.thermal_gap or 0.0)})")
    lines += [
        f"\t\t\t(net {rec.net.number} {quote(rec.net.name)})",
        f"\t\t\t(uuid {quote(rec.uuid)})",
        "\t\t)",
    ]
    return "\n".join(lines)


def format_pad(rec: PadRecord) -> str:
    lines = [f"\t\t(pad {quote(rec.number)} smd {rec.shape}"]
    if rec.chamfered:
        lines.append(f"\t\t\t{CHAMFER}")
    layers = " ".join(quote(layer) for layer in rec.layers)
    lines += [
        f"\t\t\t(at {xy(rec.at)} {fmt(rec.angle)})",
        f"\t\t\t(size {fmt(rec.size[0])} {fmt(rec.size[1])})",
        f"\t\t\t(layers {layers})",
        f"\t\t\t(solder_mask_margin {fmt(rec.mask_margin)})",
        f"\t\t\t(clearance {fmt(rec.clearance)})",
        f"\t\t\t(net {rec.net.number} {quote(rec.net.name)})",
        f"\t\t\t(uuid {quote(rec.uuid)})",
        "\t\t)",
    ]
    return "\n".join(lines)


def _stroke(width: float, style: str, indent: str) -> str:
    return (
        f"{indent}(stroke\n"
        f"{indent}\t(width {fmt(width)})\n"
        f"{indent}\t(type {style})\n"
        f"{indent})"
    )


def format_fp_line(rec: FpLineRecord) -> str:
    return "\n".join([
        "\t\t(fp_line",
        f"\t\t\t(start {xy(rec.start)})",
        f"\t\t\t(end {xy(rec.end)})",
        _stroke(rec.width, "default", "\t\t\t"),
        f"\t\t\t(layer {quote(rec.layer)})",
        f"\t\t\t(uuid {quote(rec.uuid)})",
        "\t\t)",
    ])


def format_fp_arc(rec: FpArcRecord) -> str:
    return "\n".join([
        "\t\t(fp_arc",
        f"\t\t\t(start {xy(rec.start)})",
        f"\t\t\t(mid {xy(rec.mid)})",
        f"\t\t\t(end {xy(rec.end)})",
        _stroke(rec.width, "default", "\t\t\t"),
        f"\t\t\t(layer {quote(rec.layer)})",
        f"\t\t\t(uuid {quote(rec.uuid)})",
        "\t\t)",
    ])


def format_footprint(rec: FootprintRecord) -> str:
    lines = [
        f"\t(footprint {quote(f'{rec.library}:{rec.name}')}",
        f"\t\t(layer {quote(rec.layer)})",
        f"\t\t(uuid {quote(rec.uuid)})",
        f"\t\t(at {xy(rec.at)} {fmt(rec.angle)})",
    ]
    lines += [format_record(child) for child in rec.properties]
    lines += [format_record(child) for child in rec.pads]
    lines += [format_record(child) for child in rec.graphics]
    lines.append("\t)")
    return "\n".join(lines)


def format_via(rec: ViaRecord) -> str:
    layers = " ".join(quote(layer) for layer in rec.layers)
    return "\n".join([
        "\t(via",
        f"\t\t(at {xy(rec.at)})",
        f"\t\t(size {fmt(rec.size)})",
        f"\t\t(drill {fmt(rec.drill)})",
        f"\t\t(layers {layers})",
        f"\t\t(net {rec.net.number})",
        f"\t\t(uuid {quote(rec.uuid)})",
        "\t)",
    ])


def format_segment(rec: SegmentRecord) -> str:
    return "\n".join([
        "\t(segment",
        f"\t\t(start {xy(rec.start)})",
        f"\t\t(end {xy(rec.end)})",
        f"\t\t(width {fmt(rec.width)})",
        f"\t\t(layer {quote(rec.layer)})",
        f"\t\t(net {rec.net.number})",
        f"\t\t(uuid {quote(rec.uuid)})",
        "\t)",
    ])


def format_track_arc(rec: TrackArcRecord) -> str:
    return "\n".join([
        "\t(arc",
        f"\t\t(start {xy(rec.start)})",
        f"\t\t(mid {xy(rec.mid)})",
        f"\t\t(end {xy(rec.end)})",
        f"\t\t(width {fmt(rec.width)})",
        f"\t\t(layer {quote(rec.layer)})",
        f"\t\t(net {rec.net.number})",
        f"\t\t(uuid {quote(rec.uuid)})",
        "\t)",
    ])


def _zone_polygon(points: tuple[Point, ...]) -> list[str]:
    body = ["\t\t(polygon", "\t\t\t(pts"]
    if points:
        body.append(format_points(points))
    body += ["\t\t\t)", "\t\t)"]
    return body


def format_zone(rec: ZoneRecord) -> str:
    lines = [
        "\t(zone",
        f"\t\t(net {rec.net.number})",
        f"\t\t(net_name {quote(rec.net.name)})",
        f"\t\t(layer {quote(rec.layer)})",
        f"\t\t(uuid {quote(rec.uuid)})",
        f"\t\t(hatch edge {fmt(rec.hatch)})",
        f"\t\t(connect_pads no (clearance {fmt(rec.clearance)}))",
        f"\t\t(min_thickness {fmt(rec.min_thickness)})",
        "\t\t(fill yes",
        f"\t\t\t(island_removal_mode {rec.island_removal_mode})",
        f"\t\t\t(island_area_min {fmt(rec.island_area_min)})",
        "\t\t)",
    ]
    lines += _zone_polygon(rec.points)
    lines.append("\t)")
    return "\n".join(lines)


def format_keepout(rec: KeepoutRecord) -> str:
    lines = [
        "\t(zone",
        "\t\t(net 0)",
        '\t\t(net_name "")',
        f"\t\t(layer {quote(rec.layer)})",
        f"\t\t(uuid {quote(rec.uuid)})",
        f"\t\t(hatch edge {fmt(rec.hatch)})",
        f"\t\t(connect_pads no (clearance {fmt(rec.clearance)}))",
        f"\t\t(min_thickness {fmt(rec.min_thickness)})",
        "\t\t(keepout",
        "\t\t\t(tracks allowed)",
        "\t\t\t(vias allowed)",
        "\t\t\t(pads allowed)",
        "\t\t\t(copperpour not_allowed)",
        "\t\t\t(footprints allowed)",
        "\t\t)",
        "\t\t(fill yes",
        "\t\t)",
    ]
    lines += _zone_polygon(rec.points)
    lines.append("\t)")
    return "\n".join(lines)


def format_gr_line(rec: GrLineRecord) -> str:
    return "\n".join([
        "\t(gr_line",
        f"\t\t(start {xy(rec.start)})",
        f"\t\t(end {xy(rec.end)})",
        _stroke(rec.width, "solid", "\t\t"),
        f"\t\t(layer {quote(rec.layer)})",
        f"\t\t(uuid {quote(rec.uuid)})",
        "\t)",
    ])


def format_gr_arc(rec: GrArcRecord) -> str:
    return "\n".join([
        "\t(gr_arc",
        f"\t\t(start {xy(rec.start)})",
        f"\t\t(mid {xy(rec.mid)})",
        f"\t\t(end {xy(rec.end)})",
        _stroke(rec.width, "solid", "\t\t"),
        f"\t\t(layer {quote(rec.layer)})",
        f"\t\t(uuid {quote(rec.uuid)})",
        "\t)",
    ])


def format_gr_text(rec: GrTextRecord) -> str:
    justify = "left top mirror" if rec.mirror else "left top"
    return "\n".join([
        f"\t(gr_text {quote(rec.text)}",
        f"\t\t(at {xy(rec.at)} {rec.angle})",
        f"\t\t(layer {quote(rec.layer)})",
        f"\t\t(uuid {quote(rec.uuid)})",
        "\t\t(effects",
        "\t\t\t(font",
        f"\t\t\t\t(size {fmt(rec.size[0])} {fmt(rec.size[1])})",
        "\t\t\t\t(thickness 0.18)",
        "\t\t\t)",
        f"\t\t\t(justify {justify})",
        "\t\t)",
        "\t)",
    ])


_FORMATTERS: dict[type, Callable] = {
    NetRecord: format_net,
    PropertyRecord: format_property,
    PinRecord: format_pin,
    PadRecord: format_pad,
    FpLineRecord: format_fp_line,
    FpArcRecord: format_fp_arc,
    FootprintRecord: format_footprint,
    ViaRecord: format_via,
    SegmentRecord: format_segment,
    TrackArcRecord: format_track_arc,
    ZoneRecord: format_zone,
    KeepoutRecord: format_keepout,
    GrLineRecord: format_gr_line,
    GrArcRecord: format_gr_arc,
    GrTextRecord: format_gr_text,
}


def format_record(record: object) -> str:
    formatter = _FORMATTERS.get(type(record))
    if formatter is None:
        raise TypeError(f"No formatter for {type(record).__name__}")
    return formatter(record)
