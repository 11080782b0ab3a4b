"""
Document and body segment models

A Document is produced once per source file by the Parser, transformed by
the Resolver into a new Document whose inclusions are expanded, and finally
consumed by the Renderer. Documents and segments are frozen; transformation
always builds new instances.
"""

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class TextSegment:
    """
    Literal markup copied to the output

    Attributes:
        text: The literal text
        line_number: Source line where the text starts
        verbatim: True for text taken from a {% raw %} block; verbatim text
                  is never scanned for markers
    """
    text: str
    line_number: int = 1
    verbatim: bool = False


@dataclass(frozen=True)
class Parameter:
    """
    One argument of an inclusion marker

    Attributes:
        name: Parameter name, or None for a positional argument
        value: Raw value with quotes removed
        quoted: Whether the value was quoted. Unquoted values are references
                (capture name, page./site. variable) before they are literals.

    Example:
        {% include image.html url="/img/a.png" caption %}
        -> Parameter(name="url", value="/img/a.png", quoted=True)
           Parameter(name=None, value="caption", quoted=False)
    """
    name: Optional[str]
    value: str
    quoted: bool = True


@dataclass(frozen=True)
class InclusionRef:
    """
    An unresolved inclusion marker

    Attributes:
        name: Partial name as written (e.g., "code.html", "image")
        parameters: Arguments in source order
        line_number: Source line of the marker
        marker: The marker text as it appeared in the source
    """
    name: str
    parameters: Tuple[Parameter, ...] = ()
    line_number: int = 1
    marker: str = ""


@dataclass(frozen=True)
class CaptureBlock:
    """
    Verbatim text saved under a name for later use by an inclusion

    Attributes:
        name: Variable name declared by the opening marker
        payload: Captured text, never reinterpreted
        lang: Display language for highlighting
        caption: Optional caption shown with the block
        line_number: Source line of the opening marker
    """
    name: str
    payload: str
    lang: str = "text"
    caption: str = ""
    line_number: int = 1


@dataclass(frozen=True)
class VariableRef:
    """
    An output tag such as {{ page.title }} or {{ site.baseurl }}

    Attributes:
        scope: "page" or "site"
        path: Dotted key below the scope (e.g., "author.name")
        line_number: Source line of the tag
        marker: The tag text as it appeared in the source
    """
    scope: str
    path: str
    line_number: int = 1
    marker: str = ""


@dataclass(frozen=True)
class ResolvedSegment:
    """
    Expanded output of an inclusion or variable

    Only the Resolver creates these. Their text is final: it is not scanned
    again by the resolver or the renderer.

    Attributes:
        text: Rendered text
        origin: What produced it (partial name or variable tag)
        line_number: Source line of the marker that was replaced
    """
    text: str
    origin: str = ""
    line_number: int = 1


Segment = Union[TextSegment, InclusionRef, CaptureBlock, VariableRef, ResolvedSegment]


def _frozenMapping_make(mapping: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    """Read-only view over a private copy of the mapping"""
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class Document:
    """
    A parsed content file

    Attributes:
        front_matter: Read-only metadata mapping (title, layout, ...)
        segments: Body segments in source order
        source_path: File the document came from, if any
    """
    front_matter: Mapping[str, Any] = field(default_factory=dict)
    segments: Tuple[Segment, ...] = ()
    source_path: Optional[Path] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "front_matter", _frozenMapping_make(self.front_matter))
        object.__setattr__(self, "segments", tuple(self.segments))

    def captures_get(self) -> Dict[str, CaptureBlock]:
        """Capture blocks keyed by name (a later capture shadows an earlier one)"""
        return {seg.name: seg for seg in self.segments if isinstance(seg, CaptureBlock)}

    def inclusions_get(self) -> Tuple[InclusionRef, ...]:
        """All inclusion markers still waiting for resolution"""
        return tuple(seg for seg in self.segments if isinstance(seg, InclusionRef))

    def segments_replace(self, segments: Tuple[Segment, ...]) -> "Document":
        """New document with the same metadata and different segments"""
        return Document(
            front_matter=self.front_matter,
            segments=segments,
            source_path=self.source_path,
        )
