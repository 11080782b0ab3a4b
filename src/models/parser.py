"""
Parser-specific data models

Type-safe structures for parser operations and return values.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class SplitSource:
    """
    Result of separating front matter from a source text

    Returned by frontmatter_split().

    Attributes:
        front_matter: Parsed flat mapping ({} when the source has none)
        body: Everything after the closing delimiter line
        body_line: Source line number the body starts on

    Example:
        For "---\\ntitle: X\\n---\\nbody":
        SplitSource(front_matter={"title": "X"}, body="body", body_line=4)
    """
    front_matter: Dict[str, Any]
    body: str
    body_line: int = 1


@dataclass
class TagMatch:
    """
    A tag found while scanning the body

    Returned by Parser.tag_find() for every {% ... %} tag and every
    {{ include ... }} / {{ page.x }} / {{ site.x }} output tag.

    Attributes:
        kind: Tag keyword ("include", "capture", "endcapture", "raw",
              "variable", ...)
        arguments: Text after the keyword, stripped
        start: Position of the tag's first character in the body
        end: Position just past the tag's last character
        line_number: Source line where the tag starts
        marker: Full tag text

    Example:
        For body "See {% include image.html url=a.png %}" :
        TagMatch(kind="include", arguments="image.html url=a.png",
                 start=4, end=38, line_number=1, marker="{% include ... %}")
    """
    kind: str
    arguments: str
    start: int
    end: int
    line_number: int
    marker: str


@dataclass
class BlockExtent:
    """
    Location of a closing tag for a block (capture, raw, comment)

    Returned by Parser.block_findEnd().

    Attributes:
        content: Verbatim text between the opening and closing tags
        end: Position just past the closing tag
    """
    content: str
    end: int
