"""Exception hierarchy for the exporter."""

from __future__ import annotations

from typing import Any


class GedaKicadError(Exception):
    """Base exception for all geda-kicad errors."""

    error_code: str = ""

    def __init__(self, message: str, error_code: str | None = None, **kwargs: Any):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.__dict__.update(kwargs)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "error": True,
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
        }
        result.update(
            {k: v for k, v in self.__dict__.items() if k not in ["message", "error_code"]}
        )
        return result


class BoardFormatError(GedaKicadError):
    """Raised when an input board description cannot be read."""

    error_code = "BOARD_FORMAT_ERROR"

    def __init__(self, message: str, path: str | None = None, **kwargs: Any):
        super().__init__(message, "BOARD_FORMAT_ERROR", path=path, **kwargs)


class DestinationError(GedaKicadError):
    """Raised when the output file cannot be written."""

    error_code = "DESTINATION_ERROR"

    def __init__(self, message: str, path: str | None = None, **kwargs: Any):
        super().__init__(message, "DESTINATION_ERROR", path=path, **kwargs)
