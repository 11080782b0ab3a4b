"""
Front matter parsing and serialization

A document may open with a YAML block between two delimiter lines:

    ---
    layout: post
    title: Getting started
    banner: /images/banner.png
    ---
    Body text...

The block must be a flat mapping: string keys, scalar values or lists of
scalars. Anything nested is rejected so that front matter always survives
a dump/split round trip unchanged.
"""

from typing import Any, Dict, List, Mapping, Optional

import yaml

from ..config import appsettings
from ..models.parser import SplitSource
from .errors import ParseError


_SCALAR_TYPES = (str, int, float, bool, type(None))


def value_isFlat(value: Any) -> bool:
    """
    Check that a front matter value is a scalar or a list of scalars

    Dates and datetimes produced by YAML timestamps count as scalars.
    """
    if isinstance(value, (list, tuple)):
        return all(value_isFlat(item) and not isinstance(item, (list, tuple)) for item in value)
    if isinstance(value, dict):
        return False
    return isinstance(value, _SCALAR_TYPES) or hasattr(value, "isoformat")


def mapping_validate(mapping: Any, line_number: int = 1) -> Dict[str, Any]:
    """
    Validate a loaded YAML block as flat front matter

    Args:
        mapping: Result of yaml.safe_load on the block
        line_number: Line of the opening delimiter (for error reporting)

    Returns:
        The mapping as a plain dict

    Raises:
        ParseError: If the block is not a flat string-keyed mapping
    """
    if mapping is None:
        return {}
    if not isinstance(mapping, dict):
        raise ParseError(
            f"Front matter must be a key/value mapping, got {type(mapping).__name__}",
            line_number,
        )
    for key, value in mapping.items():
        if not isinstance(key, str):
            raise ParseError(f"Front matter key {key!r} is not a string", line_number)
        if not value_isFlat(value):
            raise ParseError(
                f"Front matter value for '{key}' must be a scalar or a list of scalars",
                line_number,
            )
    return dict(mapping)


def bareBlock_split(lines: List[str], delimiter: str) -> Optional[SplitSource]:
    """
    Front matter written without its opening delimiter line

    The lines before the first delimiter line count as front matter only
    if they load as a non-empty flat mapping, so prose followed by a
    horizontal rule stays body.

    Returns:
        SplitSource, or None when the text has no such block
    """
    closing = next(
        (index for index, line in enumerate(lines) if line.rstrip() == delimiter),
        None,
    )
    if not closing:
        return None

    try:
        loaded = yaml.safe_load("\n".join(lines[:closing]))
    except yaml.YAMLError:
        return None
    if not isinstance(loaded, dict) or not loaded:
        return None
    try:
        front_matter = mapping_validate(loaded)
    except ParseError:
        return None

    return SplitSource(
        front_matter=front_matter,
        body="\n".join(lines[closing + 1:]),
        body_line=closing + 2,
    )


def frontmatter_split(text: str, delimiter: Optional[str] = None) -> SplitSource:
    """
    Separate front matter from the body of a source text

    Args:
        text: Raw source text
        delimiter: Delimiter line (defaults to appsettings.front_matter_delimiter)

    Returns:
        SplitSource with the parsed mapping, the remaining body and the line
        number the body starts on. Without an opening delimiter line, the
        text up to the first delimiter line is front matter only when it
        loads as a non-empty flat mapping; otherwise the text comes back
        unchanged with an empty mapping.

    Raises:
        ParseError: If the opening delimiter has no matching closing
                    delimiter or the block is not a valid flat mapping

    Examples:
        >>> split = frontmatter_split("---\\ntitle: X\\n---\\nbody")
        >>> split.front_matter, split.body
        ({'title': 'X'}, 'body')
        >>> frontmatter_split("title: X\\n---\\nbody").front_matter
        {'title': 'X'}
    """
    delimiter = delimiter or appsettings.front_matter_delimiter
    if text.startswith("\ufeff"):
        text = text[1:]
    text = text.replace("\r\n", "\n")

    lines = text.split("\n")
    if lines[0].rstrip() != delimiter:
        return bareBlock_split(lines, delimiter) or SplitSource(front_matter={}, body=text, body_line=1)

    closing = None
    for index in range(1, len(lines)):
        if lines[index].rstrip() == delimiter:
            closing = index
            break

    if closing is None:
        raise ParseError(
            f"Front matter opened with '{delimiter}' is never closed",
            1,
        )

    block = "\n".join(lines[1:closing])
    try:
        loaded = yaml.safe_load(block)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line = mark.line + 2 if mark is not None else 1
        raise ParseError(f"Invalid front matter: {e}", line) from e

    return SplitSource(
        front_matter=mapping_validate(loaded),
        body="\n".join(lines[closing + 1:]),
        body_line=closing + 2,
    )


def frontmatter_dump(mapping: Mapping[str, Any], delimiter: Optional[str] = None) -> str:
    """
    Serialize a flat mapping as a front matter block

    The result, followed by any body, splits back into the same mapping and
    body with frontmatter_split().

    Args:
        mapping: Flat front matter mapping
        delimiter: Delimiter line (defaults to appsettings.front_matter_delimiter)

    Returns:
        Delimited YAML block ending with a newline
    """
    delimiter = delimiter or appsettings.front_matter_delimiter
    data = mapping_validate(dict(mapping))
    if not data:
        return f"{delimiter}\n{delimiter}\n"
    block = yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)
    return f"{delimiter}\n{block}{delimiter}\n"
