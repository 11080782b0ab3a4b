"""
Error types raised by the rendering pipeline

Every error is fatal to the document being processed and to nothing else:
the site driver catches PressmarkError per document and moves on.
"""

from pathlib import Path
from typing import Optional


class PressmarkError(Exception):
    """
    Base class for document processing errors

    Attributes:
        message: Human-readable description
        line_number: Source line the error refers to, if known
        source_path: Document the error belongs to (set by the site driver)
    """

    def __init__(self, message: str, line_number: Optional[int] = None) -> None:
        self.message = message
        self.line_number = line_number
        self.source_path: Optional[Path] = None
        super().__init__(message)

    def __str__(self) -> str:
        location = ""
        if self.source_path is not None:
            location = str(self.source_path)
        if self.line_number is not None:
            location = f"{location}:{self.line_number}" if location else f"line {self.line_number}"
        return f"{location}: {self.message}" if location else self.message


class ParseError(PressmarkError):
    """Malformed front matter, unclosed block or malformed tag"""


class ResolutionError(PressmarkError):
    """
    An inclusion could not be resolved

    Attributes:
        name: Partial (or capture/variable) the failure is about
    """

    def __init__(self, name: str, message: Optional[str] = None, line_number: Optional[int] = None) -> None:
        self.name = name
        super().__init__(message or f"Unknown partial '{name}'", line_number)


class MissingParameterError(ResolutionError):
    """
    A required partial parameter was neither supplied nor defaulted

    Attributes:
        parameter: Name of the missing parameter
        partial: Name of the partial that requires it
    """

    def __init__(self, parameter: str, partial: str, line_number: Optional[int] = None) -> None:
        self.parameter = parameter
        self.partial = partial
        super().__init__(
            partial,
            f"Partial '{partial}' requires parameter '{parameter}'",
            line_number,
        )


class RenderError(PressmarkError):
    """Unresolved markup reached the renderer, or a layout is unusable"""


class SiteConfigError(PressmarkError):
    """Raised when site configuration or partial loading fails"""
