"""XML parsing for board layout interchange files.

All numeric attributes are integer nanometres unless stated otherwise.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from .exceptions import BoardFormatError
from .models import (
    PIN_SHAPES,
    Arc,
    Board,
    Box,
    Font,
    Footprint,
    FootprintText,
    Glyph,
    Layer,
    Line,
    NetlistEntry,
    Pad,
    Pin,
    Point,
    Polygon,
    Text,
    Via,
)

TEXT_ROLES = ("refdes", "value", "footprint")


def _attr(elem: ET.Element, name: str, default: str = "0") -> str:
    """Get an XML attribute as a non-None string."""
    val = elem.get(name)
    return val if val is not None else default


def _int(elem: ET.Element, name: str, default: str = "0") -> int:
    raw = _attr(elem, name, default)
    try:
        return int(raw)
    except ValueError:
        raise BoardFormatError(
            f"<{elem.tag}> attribute {name}={raw!r} is not an integer"
        ) from None


def _float(elem: ET.Element, name: str, default: str = "0") -> float:
    raw = _attr(elem, name, default)
    try:
        return float(raw)
    except ValueError:
        raise BoardFormatError(
            f"<{elem.tag}> attribute {name}={raw!r} is not a number"
        ) from None


def _flag(elem: ET.Element, name: str) -> bool:
    return _attr(elem, name, "false").lower() == "true"


def _shape(elem: ET.Element) -> str:
    shape = _attr(elem, "SHAPE", "round")
    if shape not in PIN_SHAPES:
        raise BoardFormatError(f"<{elem.tag}> has unknown SHAPE {shape!r}")
    return shape


def parse_point(elem: ET.Element) -> Point:
    return Point(x=_int(elem, "X"), y=_int(elem, "Y"))


def parse_line(elem: ET.Element) -> Line:
    return Line(
        p1=Point(_int(elem, "X1"), _int(elem, "Y1")),
        p2=Point(_int(elem, "X2"), _int(elem, "Y2")),
        thickness=_int(elem, "THICKNESS"),
        clearance=_int(elem, "CLEARANCE"),
    )


def parse_arc(elem: ET.Element) -> Arc:
    return Arc(
        x=_int(elem, "X"),
        y=_int(elem, "Y"),
        width=_int(elem, "WIDTH"),
        height=_int(elem, "HEIGHT"),
        start_angle=_float(elem, "START-ANGLE"),
        delta=_float(elem, "DELTA"),
        thickness=_int(elem, "THICKNESS"),
        clearance=_int(elem, "CLEARANCE"),
    )


def parse_text(elem: ET.Element) -> Text:
    return Text(
        string=_attr(elem, "STRING", ""),
        x=_int(elem, "X"),
        y=_int(elem, "Y"),
        direction=_int(elem, "DIRECTION") & 3,
        scale=_int(elem, "SCALE", "100"),
        on_solder=_flag(elem, "ONSOLDER"),
    )


def parse_polygon(elem: ET.Element) -> Polygon:
    """Outer POINTs first, then each HOLE's POINTs appended after them."""
    points = [parse_point(p) for p in elem.findall("POINT")]
    hole_indices: list[int] = []
    for hole in elem.findall("HOLE"):
        hole_points = [parse_point(p) for p in hole.findall("POINT")]
        if not hole_points:
            continue
        hole_indices.append(len(points))
        points.extend(hole_points)
    return Polygon(points=points, hole_indices=hole_indices, full=_flag(elem, "FULL"))


def parse_layer(elem: ET.Element) -> Layer:
    kind = _attr(elem, "KIND", "copper")
    # unknown kinds are kept so the exporter can report and skip them
    return Layer(
        name=_attr(elem, "NAME", kind),
        kind=kind,
        side=_attr(elem, "SIDE", "Inner"),
        group=_int(elem, "GROUP"),
        lines=[parse_line(e) for e in elem.findall("LINE")],
        arcs=[parse_arc(e) for e in elem.findall("ARC")],
        texts=[parse_text(e) for e in elem.findall("TEXT")],
        polygons=[parse_polygon(e) for e in elem.findall("POLYGON")],
    )


def _thermals(elem: ET.Element) -> list[int]:
    raw = _attr(elem, "THERMALS", "")
    try:
        return [int(s) for s in raw.split(",") if s.strip()]
    except ValueError:
        raise BoardFormatError(f"<{elem.tag}> has bad THERMALS {raw!r}") from None


def parse_pin(elem: ET.Element) -> Pin:
    return Pin(
        number=_attr(elem, "NUMBER", ""),
        x=_int(elem, "X"),
        y=_int(elem, "Y"),
        thickness=_int(elem, "THICKNESS"),
        clearance=_int(elem, "CLEARANCE"),
        mask=_int(elem, "MASK"),
        drill=_int(elem, "DRILL"),
        shape=_shape(elem),
        hole=_flag(elem, "HOLE"),
        thermals=_thermals(elem),
    )


def parse_pad(elem: ET.Element) -> Pad:
    return Pad(
        number=_attr(elem, "NUMBER", ""),
        p1=Point(_int(elem, "X1"), _int(elem, "Y1")),
        p2=Point(_int(elem, "X2"), _int(elem, "Y2")),
        thickness=_int(elem, "THICKNESS"),
        clearance=_int(elem, "CLEARANCE"),
        mask=_int(elem, "MASK"),
        shape=_shape(elem),
        on_solder=_flag(elem, "ONSOLDER"),
        nopaste=_flag(elem, "NOPASTE"),
    )


def parse_footprint(elem: ET.Element) -> Footprint:
    texts = {role: FootprintText("") for role in TEXT_ROLES}
    for text_elem in elem.findall("TEXT"):
        role = _attr(text_elem, "ROLE", "")
        if role not in texts:
            raise BoardFormatError(f"<ELEMENT> TEXT has unknown ROLE {role!r}")
        texts[role] = FootprintText(
            string=_attr(text_elem, "STRING", ""),
            x=_int(text_elem, "X"),
            y=_int(text_elem, "Y"),
            direction=_int(text_elem, "DIRECTION") & 3,
            scale=_int(text_elem, "SCALE", "100"),
        )
    attributes = {
        _attr(a, "NAME", ""): _attr(a, "VALUE", "")
        for a in elem.findall("ATTRIBUTE")
    }
    return Footprint(
        x=_int(elem, "X"),
        y=_int(elem, "Y"),
        texts=[texts[role] for role in TEXT_ROLES],
        on_solder=_flag(elem, "ONSOLDER"),
        hide_name=_flag(elem, "HIDENAME"),
        attributes=attributes,
        pins=[parse_pin(e) for e in elem.findall("PIN")],
        pads=[parse_pad(e) for e in elem.findall("PAD")],
        lines=[parse_line(e) for e in elem.findall("LINE")],
        arcs=[parse_arc(e) for e in elem.findall("ARC")],
    )


def parse_via(elem: ET.Element) -> Via:
    return Via(
        x=_int(elem, "X"),
        y=_int(elem, "Y"),
        thickness=_int(elem, "THICKNESS"),
        clearance=_int(elem, "CLEARANCE"),
        mask=_int(elem, "MASK"),
        drill=_int(elem, "DRILL"),
        thermals=_thermals(elem),
    )


def parse_font(elem: ET.Element | None) -> Font:
    if elem is None:
        return Font()
    font = Font()
    default = elem.find("DEFAULT-SYMBOL")
    if default is not None:
        font.default_symbol = Box(
            _int(default, "X1"), _int(default, "Y1"),
            _int(default, "X2"), _int(default, "Y2"),
        )
    for sym in elem.findall("SYMBOL"):
        char = _attr(sym, "CHAR", "")
        if len(char) != 1:
            raise BoardFormatError(f"<SYMBOL> CHAR must be one character, got {char!r}")
        font.symbols[char] = Glyph(
            width=_int(sym, "WIDTH"),
            delta=_int(sym, "DELTA"),
            height=_int(sym, "HEIGHT"),
        )
    return font


def parse_netlist(board: ET.Element) -> list[NetlistEntry]:
    return [
        NetlistEntry(
            name=_attr(net, "NAME", ""),
            connections=[(c.text or "").strip() for c in net.findall("CONNECT")],
        )
        for net in board.findall("NET")
    ]


def parse_board(root: ET.Element, source: str = "<string>") -> Board:
    board = root if root.tag == "BOARD" else root.find("BOARD")
    if board is None:
        raise BoardFormatError(f"No <BOARD> element found in {source}", path=source)

    return Board(
        width=_int(board, "WIDTH"),
        height=_int(board, "HEIGHT"),
        isle_area=_int(board, "ISLE-AREA"),
        layers=[parse_layer(e) for e in board.findall("LAYER")],
        footprints=[parse_footprint(e) for e in board.findall("ELEMENT")],
        vias=[parse_via(e) for e in board.findall("VIA")],
        netlist=parse_netlist(board),
        font=parse_font(board.find("FONT")),
    )


def parse_xml(xml_path: str) -> Board:
    try:
        tree = ET.parse(xml_path)
    except ET.ParseError as e:
        raise BoardFormatError(f"Malformed XML in {xml_path}: {e}", path=xml_path) from e
    return parse_board(tree.getroot(), xml_path)


def parse_xml_string(text: str) -> Board:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise BoardFormatError(f"Malformed XML: {e}") from e
    return parse_board(root)
