"""Command-line interface for geda-kicad."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .board_xml import parse_xml
from .exceptions import GedaKicadError
from .export import ExportOptions, inner_layer_numbers, kicad_layer_name, write_kicad
from .geometry import board_bounding_box
from .ids import random_ids, seeded_ids
from .logging_config import LOG_LEVELS, setup_logging
from .models import Board
from .orientation import infer_rotation
from .transforms import to_mm

logger = logging.getLogger(__name__)


def _load(input_arg: str) -> Board:
    input_path = Path(input_arg)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        sys.exit(1)
    return parse_xml(str(input_path))


def print_summary(board: Board) -> None:
    """Print the board extent, per-layer contents and footprint rotations."""
    print(f"Board size: {to_mm(board.width):.3f} x {to_mm(board.height):.3f} mm")
    box = board_bounding_box(board)
    if box is not None:
        print(
            f"Bounding box: ({to_mm(box.x1):.3f}, {to_mm(box.y1):.3f}) to "
            f"({to_mm(box.x2):.3f}, {to_mm(box.y2):.3f})"
        )
    print()

    inner = inner_layer_numbers(board)
    print("Layers:")
    for layer in board.layers:
        target = kicad_layer_name(layer, inner) or "(unsupported)"
        print(
            f"  {layer.name:20s} -> {target:12s} "
            f"{len(layer.lines):5d} lines {len(layer.arcs):5d} arcs "
            f"{len(layer.polygons):5d} polygons {len(layer.texts):5d} texts"
        )
    print()

    print("Footprints:")
    for fp in board.footprints:
        side = "bottom" if fp.on_solder else "top"
        print(
            f"  {fp.refdes:12s} {fp.name:24s} {side:6s} "
            f"rotation {infer_rotation(fp):g}"
        )
    print()

    print(f"Vias: {len(board.vias)}")
    print(f"Nets: {len(board.netlist)}")


# --- Subcommand handlers ---


def _cmd_export(args: argparse.Namespace) -> None:
    """Handle the export subcommand."""
    board = _load(args.input)

    if args.output:
        output_path = Path(args.output)
    else:
        output_path = Path(args.input).with_suffix(".kicad_pcb")

    options = ExportOptions()
    if args.generator:
        options.generator = args.generator
    ids = seeded_ids(args.seed) if args.seed is not None else random_ids()

    write_kicad(board, output_path, options=options, ids=ids)
    print(f"Written: {output_path}")

    if args.preview:
        from .preview import write_preview

        write_preview(board, args.preview)
        print(f"Preview: {args.preview}")


def _cmd_inspect(args: argparse.Namespace) -> None:
    """Handle the inspect subcommand."""
    print_summary(_load(args.input))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="geda-kicad",
        description="Convert gEDA PCB board layouts to KiCad boards.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (default: $GEDA_KICAD_LOG_LEVEL or WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command")

    # --- export subcommand ---
    p_export = subparsers.add_parser(
        "export",
        help="Convert a board XML file to a .kicad_pcb file.",
    )
    p_export.add_argument(
        "input",
        help="Path to the board XML file",
    )
    p_export.add_argument(
        "-o", "--output",
        help="Output file path (default: input with .kicad_pcb extension)",
    )
    p_export.add_argument(
        "--seed",
        type=int,
        help="Seed the id generator for reproducible output",
    )
    p_export.add_argument(
        "--preview",
        metavar="DXF",
        help="Also write a DXF drawing of the board to this path",
    )
    p_export.add_argument(
        "--generator",
        help="Generator name recorded in the file header",
    )
    p_export.set_defaults(func=_cmd_export)

    # --- inspect subcommand ---
    p_inspect = subparsers.add_parser(
        "inspect",
        help="Print a summary of a board XML file.",
    )
    p_inspect.add_argument(
        "input",
        help="Path to the board XML file",
    )
    p_inspect.set_defaults(func=_cmd_inspect)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.log_level)
    try:
        args.func(args)
    except GedaKicadError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)
