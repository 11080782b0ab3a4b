"""
Parser for Liquid-style article sources

Transforms a source document into a Document: front matter plus an ordered
list of body segments.

The parser operates in two phases:
1. Front matter: split the leading YAML block off the source
2. Scanning: walk the body tag by tag, producing segments

Recognized tags:
- {% include NAME ARGS %} and {{ include NAME ARGS }} -> InclusionRef
- {% capture NAME lang=.. caption=.. %}...{% endcapture %} -> CaptureBlock
- {% raw %}...{% endraw %} -> verbatim TextSegment
- {% comment %}...{% endcomment %} -> dropped
- {{ page.KEY }} and {{ site.KEY }} -> VariableRef

Any other tag is kept as literal text. Text inside capture, raw and comment
blocks is never interpreted.

Example:
    >>> doc = Parser("---\\ntitle: X\\n---\\n{% include image.html url=a.png %}").parse()
    >>> doc.front_matter["title"]
    'X'
    >>> doc.segments[0].name
    'image.html'
"""

import re
from pathlib import Path
from typing import List, Optional, Tuple

from ..config import appsettings
from ..models.document import (
    CaptureBlock,
    Document,
    InclusionRef,
    Parameter,
    Segment,
    TextSegment,
    VariableRef,
)
from ..models.parser import BlockExtent, TagMatch
from .errors import ParseError
from .frontmatter import frontmatter_split


TAG_PATTERN = re.compile(
    r"\{%-?\s*(?P<kind>[A-Za-z_]\w*)(?P<args>(?:(?!\{%).)*?)-?%\}"
    r"|\{\{-?\s*include(?=\s)(?P<include_args>(?:(?!\{\{).)*?)-?\}\}"
    r"|\{\{-?\s*(?P<scope>page|site)\.(?P<path>[A-Za-z_][\w\-]*(?:\.[A-Za-z_][\w\-]*)*)\s*-?\}\}",
    re.DOTALL,
)

ARGUMENT_PATTERN = re.compile(
    r"""(?:(?P<key>[A-Za-z_][\w\-]*)\s*=\s*)?"""
    r"""(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s"'=]+))"""
)

PARTIAL_NAME_PATTERN = re.compile(r"[A-Za-z0-9_][\w.\-/]*")

CAPTURE_NAME_PATTERN = re.compile(r"[A-Za-z_]\w*")

# Block tags and the keyword that closes them
BLOCK_TAGS = {
    "capture": "endcapture",
    "raw": "endraw",
    "comment": "endcomment",
}

CAPTURE_OPTIONS = ("lang", "caption")


class Parser:
    """
    Parser for article sources

    Handles:
    - Front matter extraction
    - Inclusion markers in both Jekyll and short form
    - Capture, raw and comment blocks (verbatim, not interpreted)
    - page./site. output tags
    - Error reporting with line numbers
    """

    def __init__(self, source: str, source_path: Optional[Path] = None, debug: bool = False):
        """
        Initialize parser with source text

        Args:
            source: Raw source text (front matter + body)
            source_path: File the source was read from, for error messages
            debug: Enable debug output for parser operations

        Attributes:
            source: Source text being parsed
            source_path: Originating file, if any
            debug: Debug mode flag
            body: Body text once front matter is split off
            body_line: Source line number of the first body character
        """
        self.source = source
        self.source_path = source_path
        self.debug = debug
        self.body = ""
        self.body_line = 1

    def parse(self) -> Document:
        """
        Parse source text into a Document

        Returns:
            Document with front matter and body segments in source order.
            Empty source gives a Document without segments.

        Raises:
            ParseError: Malformed front matter, unclosed block, stray closing
                        tag, malformed include or capture marker, or a source
                        over the configured size budget
        """
        try:
            if len(self.source) > appsettings.max_document_chars:
                raise ParseError(
                    f"Source has {len(self.source)} characters, "
                    f"limit is {appsettings.max_document_chars}"
                )

            split = frontmatter_split(self.source)
            self.body = split.body
            self.body_line = split.body_line

            segments = self.body_parse()
        except ParseError as e:
            e.source_path = self.source_path
            raise

        return Document(
            front_matter=split.front_matter,
            segments=tuple(segments),
            source_path=self.source_path,
        )

    def body_parse(self) -> List[Segment]:
        """
        Scan the body into segments

        Walks the body tag by tag. Text between tags accumulates into
        TextSegments; unknown tags join the surrounding text unchanged.

        Returns:
            List of segments in source order
        """
        segments: List[Segment] = []
        pending: List[str] = []
        pending_line = self.body_line
        position = 0

        def text_flush() -> None:
            nonlocal pending, pending_line
            text = "".join(pending)
            if text:
                segments.append(TextSegment(text=text, line_number=pending_line))
            pending = []

        while position < len(self.body):
            tag = self.tag_find(position)
            if tag is None:
                break

            if not pending:
                pending_line = self.line_at(position)
            pending.append(self.body[position:tag.start])

            if tag.kind == "include":
                text_flush()
                segments.append(self.inclusion_make(tag))
                position = tag.end

            elif tag.kind == "variable":
                text_flush()
                scope, path = tag.arguments.split(".", 1)
                segments.append(VariableRef(
                    scope=scope,
                    path=path,
                    line_number=tag.line_number,
                    marker=tag.marker,
                ))
                position = tag.end

            elif tag.kind == "capture":
                text_flush()
                extent = self.block_findEnd(tag)
                segments.append(self.capture_make(tag, extent.content))
                position = extent.end

            elif tag.kind == "raw":
                text_flush()
                extent = self.block_findEnd(tag)
                if extent.content:
                    segments.append(TextSegment(
                        text=extent.content,
                        line_number=tag.line_number,
                        verbatim=True,
                    ))
                position = extent.end

            elif tag.kind == "comment":
                extent = self.block_findEnd(tag)
                position = extent.end

            elif tag.kind in BLOCK_TAGS.values():
                raise ParseError(
                    f"'{{% {tag.kind} %}}' without a matching opening tag",
                    tag.line_number,
                )

            else:
                # Not ours: keep the tag as literal text
                if self.debug:
                    self.trace(f"literal tag '{tag.kind}' at line {tag.line_number}")
                pending.append(tag.marker)
                position = tag.end

        if position < len(self.body):
            if not pending:
                pending_line = self.line_at(position)
            pending.append(self.body[position:])
        text_flush()

        return segments

    def tag_find(self, position: int) -> Optional[TagMatch]:
        """
        Find the next tag in the body from a position

        Args:
            position: Body position to start scanning from

        Returns:
            TagMatch for the next tag, or None if there are no more tags

        Example:
            For body "a {{ page.title }} b" at position 0:
            Returns TagMatch(kind="variable", arguments="page.title", start=2, ...)
        """
        match = TAG_PATTERN.search(self.body, position)
        if not match:
            return None

        if match.group("kind") is not None:
            kind = match.group("kind")
            arguments = match.group("args").strip()
        elif match.group("include_args") is not None:
            kind = "include"
            arguments = match.group("include_args").strip()
        else:
            kind = "variable"
            arguments = f"{match.group('scope')}.{match.group('path')}"

        return TagMatch(
            kind=kind,
            arguments=arguments,
            start=match.start(),
            end=match.end(),
            line_number=self.line_at(match.start()),
            marker=match.group(0),
        )

    def block_findEnd(self, tag: TagMatch) -> BlockExtent:
        """
        Find the closing tag of a block and return its verbatim content

        Blocks do not nest: the first closing tag ends the block, whatever
        sits between the two tags.

        Args:
            tag: Opening tag of a capture, raw or comment block

        Returns:
            BlockExtent with the untouched content and the position past the
            closing tag

        Raises:
            ParseError: If the block is never closed. For captures the error
                        names the capture.
        """
        closing = BLOCK_TAGS[tag.kind]
        end_pattern = re.compile(r"\{%-?\s*" + closing + r"\s*-?%\}")
        match = end_pattern.search(self.body, tag.end)

        if not match:
            if tag.kind == "capture":
                name = tag.arguments.split()[0] if tag.arguments.split() else "?"
                raise ParseError(
                    f"Capture '{name}' is never closed with '{{% {closing} %}}'",
                    tag.line_number,
                )
            raise ParseError(
                f"'{{% {tag.kind} %}}' block is never closed with '{{% {closing} %}}'",
                tag.line_number,
            )

        return BlockExtent(
            content=self.body[tag.end:match.start()],
            end=match.end(),
        )

    def inclusion_make(self, tag: TagMatch) -> InclusionRef:
        """
        Build an InclusionRef from an include tag

        Args:
            tag: Tag of kind "include"

        Returns:
            InclusionRef with the partial name and its parameters

        Raises:
            ParseError: If the partial name is missing or the argument list
                        cannot be tokenized

        Example:
            Tag arguments: 'code.html code=snippet lang="cpp"'
            Result: InclusionRef(name="code.html", parameters=(
                Parameter("code", "snippet", quoted=False),
                Parameter("lang", "cpp", quoted=True)), ...)
        """
        name_match = PARTIAL_NAME_PATTERN.match(tag.arguments)
        rest = tag.arguments[name_match.end():] if name_match else ""
        if not name_match or (rest and not rest[0].isspace()):
            raise ParseError(
                f"Include marker '{tag.marker}' does not name a partial",
                tag.line_number,
            )

        parameters = self.arguments_parse(rest, tag)
        return InclusionRef(
            name=name_match.group(0),
            parameters=parameters,
            line_number=tag.line_number,
            marker=tag.marker,
        )

    def capture_make(self, tag: TagMatch, content: str) -> CaptureBlock:
        """
        Build a CaptureBlock from a capture tag and its content

        The payload is the block content with one leading newline removed and
        a whitespace-only last line (the closing tag's indentation) dropped.
        Everything else, indentation included, is kept as is.

        Args:
            tag: Opening tag of kind "capture"
            content: Verbatim text between the opening and closing tags

        Returns:
            CaptureBlock keyed by the declared name

        Raises:
            ParseError: Missing or invalid name, positional arguments after
                        the name, or unknown options
        """
        name_match = CAPTURE_NAME_PATTERN.match(tag.arguments)
        rest = tag.arguments[name_match.end():] if name_match else ""
        if not name_match or (rest and not rest[0].isspace()):
            raise ParseError(
                f"Capture marker '{tag.marker}' does not declare a variable name",
                tag.line_number,
            )
        name = name_match.group(0)

        options = {"lang": "text", "caption": ""}
        for parameter in self.arguments_parse(rest, tag):
            if parameter.name is None:
                raise ParseError(
                    f"Capture '{name}' takes only lang= and caption= options, got '{parameter.value}'",
                    tag.line_number,
                )
            if parameter.name not in CAPTURE_OPTIONS:
                raise ParseError(
                    f"Capture '{name}' has unknown option '{parameter.name}'",
                    tag.line_number,
                )
            options[parameter.name] = parameter.value

        return CaptureBlock(
            name=name,
            payload=self.payload_trim(content),
            lang=options["lang"] or "text",
            caption=options["caption"],
            line_number=tag.line_number,
        )

    @staticmethod
    def payload_trim(content: str) -> str:
        """
        Trim the block framing from captured text

        Example:
            "\\n  int x;\\n  {" + "\\n    " -> "  int x;\\n  {"
        """
        if content.startswith("\n"):
            content = content[1:]
        last_newline = content.rfind("\n")
        tail = content[last_newline + 1:]
        if not tail.strip():
            content = content[:max(last_newline, 0)]
        return content

    def arguments_parse(self, text: str, tag: TagMatch) -> Tuple[Parameter, ...]:
        """
        Tokenize a tag argument list

        Args:
            text: Argument text (after the partial or capture name)
            tag: Tag the arguments belong to (for error reporting)

        Returns:
            Parameters in source order

        Raises:
            ParseError: If some part of the text is not a valid argument

        Example:
            'url="/a b.png" alt=\\'x\\' wide' ->
            (Parameter("url", "/a b.png", True), Parameter("alt", "x", True),
             Parameter(None, "wide", False))
        """
        parameters: List[Parameter] = []
        position = 0

        while position < len(text):
            while position < len(text) and text[position].isspace():
                position += 1
            if position >= len(text):
                break

            match = ARGUMENT_PATTERN.match(text, position)
            if not match or match.end() == position:
                raise ParseError(
                    f"Cannot parse argument '{text[position:].strip()}' in '{tag.marker}'",
                    tag.line_number,
                )

            if match.group("dq") is not None:
                value, quoted = match.group("dq"), True
            elif match.group("sq") is not None:
                value, quoted = match.group("sq"), True
            else:
                value, quoted = match.group("bare"), False

            parameters.append(Parameter(name=match.group("key"), value=value, quoted=quoted))
            position = match.end()

        return tuple(parameters)

    def line_at(self, position: int) -> int:
        """Source line number of a body position"""
        return self.body_line + self.body.count("\n", 0, position)

    def trace(self, message: str) -> None:
        """Debug output for parser internals"""
        from .log import LOG
        LOG(f"parser: {message}", level=3)
