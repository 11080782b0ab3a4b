"""
Renderer for resolved documents

Assembles a resolved Document into its final text. Two output formats:

- html: the body, wrapped in the document's layout chain when a layouts
  directory is available
- source: front matter block (when non-empty) followed by the resolved
  body, for downstream static-site tooling
"""

import html
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from ..models.document import (
    CaptureBlock,
    Document,
    InclusionRef,
    ResolvedSegment,
    TextSegment,
    VariableRef,
)
from .errors import ParseError, RenderError, SiteConfigError
from .frontmatter import frontmatter_dump, frontmatter_split
from .log import LOG
from .partials import (
    MARKER_PATTERN,
    TEMPLATE_TAG_PATTERN,
    filters_parse,
    markers_reject,
    path_lookup,
    value_stringify,
)
from .site import SiteConfig


OUTPUT_FORMATS = ("html", "source")

LAYOUT_TAG_PATTERN = re.compile(
    r"\{\{-?\s*content\s*-?\}\}|" + TEMPLATE_TAG_PATTERN.pattern
)


@dataclass
class Layout:
    """
    A page layout

    Attributes:
        name: Layout name (file name without suffix)
        template: Layout text; {{ content }} marks where the page goes
        front_matter: The layout's own front matter (may name a parent layout)
        source_path: Layout file
    """
    name: str
    template: str
    front_matter: Dict[str, Any] = field(default_factory=dict)
    source_path: Optional[Path] = None


def layouts_load(directory: Optional[Path]) -> Optional[Dict[str, Layout]]:
    """
    Load every layout file of a layouts directory

    Args:
        directory: Layouts directory

    Returns:
        Layouts keyed by name, or None when there is no layouts directory

    Raises:
        SiteConfigError: If a layout cannot be read, has bad front matter,
                         uses an unsupported filter or holds include or
                         capture markers
    """
    if directory is None or not directory.is_dir():
        return None

    layouts: Dict[str, Layout] = {}
    for path in sorted(directory.iterdir()):
        if not path.is_file() or path.name.startswith("."):
            continue
        try:
            split = frontmatter_split(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise SiteConfigError(f"Cannot read layout {path}: {e}") from e
        except ParseError as e:
            raise SiteConfigError(f"Layout {path}: {e.message}", e.line_number) from e

        markers_reject(split.body, path.stem, "Layout", split.body_line)
        for match in TEMPLATE_TAG_PATTERN.finditer(split.body):
            filters_parse(match.group("filters"), path.stem)

        layouts[path.stem] = Layout(
            name=path.stem,
            template=split.body,
            front_matter=split.front_matter,
            source_path=path,
        )
        LOG(f"Loaded layout '{path.stem}'", level=3)

    return layouts


class Renderer:
    """
    Renders resolved documents to output text

    Read-only after construction; one Renderer serves a whole site run.
    """

    def __init__(
        self,
        layouts: Optional[Dict[str, Layout]] = None,
        site: Optional[SiteConfig] = None,
        output_format: str = "html",
    ) -> None:
        """
        Initialize renderer

        Args:
            layouts: Layout table; None disables layouts
            site: Site configuration for site.* lookups in layouts
            output_format: "html" or "source"

        Raises:
            ValueError: On an unknown output format
        """
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown output format '{output_format}', expected one of {OUTPUT_FORMATS}")
        self.layouts = layouts
        self.site = site if site is not None else SiteConfig()
        self.output_format = output_format

    def render(self, document: Document) -> str:
        """
        Render a resolved document

        Args:
            document: Output of Resolver.resolve()

        Returns:
            Final output text

        Raises:
            RenderError: An unresolved inclusion or variable, leftover marker
                         syntax, or an unusable layout
        """
        try:
            body = self.body_assemble(document)

            if self.output_format == "source":
                if document.front_matter:
                    return frontmatter_dump(document.front_matter) + body
                return body

            return self.layouts_apply(body, document)
        except RenderError as e:
            e.source_path = document.source_path
            raise

    def body_assemble(self, document: Document) -> str:
        """
        Concatenate the body segments

        Returns:
            Body text

        Raises:
            RenderError: If a segment still needs resolution
        """
        parts: List[str] = []

        for segment in document.segments:
            if isinstance(segment, InclusionRef):
                raise RenderError(
                    f"Unresolved include '{segment.name}' reached the renderer",
                    segment.line_number,
                )
            if isinstance(segment, VariableRef):
                raise RenderError(
                    f"Unresolved variable '{segment.scope}.{segment.path}' reached the renderer",
                    segment.line_number,
                )
            if isinstance(segment, CaptureBlock):
                continue
            if isinstance(segment, TextSegment):
                if not segment.verbatim:
                    match = MARKER_PATTERN.search(segment.text)
                    if match:
                        line = segment.line_number + segment.text.count("\n", 0, match.start())
                        raise RenderError(f"Unresolved marker '{match.group(0).strip()}'", line)
                parts.append(segment.text)
            elif isinstance(segment, ResolvedSegment):
                parts.append(segment.text)

        return "".join(parts)

    def layouts_apply(self, body: str, document: Document) -> str:
        """
        Wrap a body in the document's layout chain

        The document's layout wraps the body, then that layout's own parent,
        and so on. Without a layout table the body is returned unchanged.

        Raises:
            RenderError: Unknown layout or a layout cycle
        """
        name = self.layoutName_get(document.front_matter)
        if name is None:
            return body
        if self.layouts is None:
            LOG(f"No layouts directory; layout '{name}' not applied", level=2)
            return body

        page = dict(document.front_matter)
        visited: Set[str] = set()
        while name is not None:
            if name in visited:
                raise RenderError(f"Layout cycle through '{name}'")
            visited.add(name)

            layout = self.layouts.get(name)
            if layout is None:
                raise RenderError(f"Unknown layout '{name}'")

            body = self.layout_substitute(layout, body, page)
            name = self.layoutName_get(layout.front_matter)

        return body

    def layout_substitute(self, layout: Layout, content: str, page: Dict[str, Any]) -> str:
        """Single-pass substitution of {{ content }}, page.* and site.* in a layout"""

        def tag_substitute(match: re.Match[str]) -> str:
            scope = match.group("scope")
            if scope is None:
                return content
            if scope == "include":
                return match.group(0)
            default_value, has_default, escape = filters_parse(match.group("filters"), layout.name)
            found, value = path_lookup(page if scope == "page" else self.site.config, match.group("path"))
            if (not found or value is None or value == "") and has_default:
                value = default_value
            text = value_stringify(value)
            return html.escape(text) if escape else text

        return LAYOUT_TAG_PATTERN.sub(tag_substitute, layout.template)

    @staticmethod
    def layoutName_get(front_matter: Any) -> Optional[str]:
        """Layout named by front matter; None, "" and "none" mean no layout"""
        name = front_matter.get("layout")
        if name is None:
            return None
        name = str(name).strip()
        if not name or name.lower() in ("none", "null"):
            return None
        return name
