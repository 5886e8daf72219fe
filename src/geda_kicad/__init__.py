"""geda-kicad: Convert gEDA PCB board layouts to KiCad boards."""

__version__ = "0.1.0"

from .board_xml import parse_xml
from .exceptions import BoardFormatError, DestinationError, GedaKicadError
from .export import ExportOptions, KicadExporter, write_kicad
from .models import Board
from .preview import write_preview

__all__ = [
    "Board",
    "BoardFormatError",
    "DestinationError",
    "ExportOptions",
    "GedaKicadError",
    "KicadExporter",
    "parse_xml",
    "write_kicad",
    "write_preview",
]
