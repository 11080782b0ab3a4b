"""
Partial implementations for pressmark

Each partial turns a bound inclusion into output markup. Builtin partials
are Python handlers; template partials are files from the includes
directory whose {{ include.NAME }} tags are substituted in a single pass.
Uses PartialSpec for metadata and parameter validation.
"""

import html
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pygments import highlight
from pygments.lexers import get_lexer_by_name, TextLexer
from pygments.lexer import Lexer
from pygments.formatters import HtmlFormatter
from pygments.util import ClassNotFound

from ..models.document import CaptureBlock
from ..models.partials import PartialSpec, PartialCategory, PartialCall
from .errors import SiteConfigError
from .lexer import get_lexer
from .log import LOG


TEMPLATE_TAG_PATTERN = re.compile(
    r"\{\{-?\s*(?P<scope>include|page|site)\.(?P<path>[A-Za-z_][\w\-]*(?:\.[A-Za-z_][\w\-]*)*)"
    r"\s*(?P<filters>(?:\|[^|}]*)*)-?\}\}"
)

DEFAULT_FILTER_PATTERN = re.compile(
    r"""^default\s*:\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>\S+))\s*$"""
)

# Inclusion or capture syntax that must not survive resolution
MARKER_PATTERN = re.compile(
    r"\{%-?\s*(?:include|capture|endcapture)\b|\{\{-?\s*include\s"
)

# Attributes a template can read from a capture parameter
CAPTURE_ATTRIBUTES = ("payload", "lang", "caption", "name")


def value_stringify(value: Any) -> str:
    """
    Text form of a bound value

    Captures give their payload, None gives "", booleans are lower-cased
    and lists are joined with ", ".
    """
    if value is None:
        return ""
    if isinstance(value, CaptureBlock):
        return value.payload
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(value_stringify(item) for item in value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def path_lookup(mapping: Any, path: str) -> Tuple[bool, Any]:
    """
    Walk a dotted path through nested mappings

    Args:
        mapping: Root mapping (front matter, site config, bound params)
        path: Dotted key, e.g. "author.name"

    Returns:
        (found, value)
    """
    value = mapping
    for key in path.split("."):
        if isinstance(value, CaptureBlock) and key in CAPTURE_ATTRIBUTES:
            value = getattr(value, key)
        elif hasattr(value, "get") and key in value:
            value = value[key]
        else:
            return False, None
    return True, value


def filters_parse(filters: str, template_name: str) -> Tuple[Optional[Any], bool, bool]:
    """
    Parse the filter chain of a template tag

    Args:
        filters: Raw text after the variable, e.g. '| default: "x" | escape'
        template_name: Partial name for error messages

    Returns:
        (default_value, has_default, escape)

    Raises:
        SiteConfigError: On an unsupported filter
    """
    default_value: Optional[Any] = None
    has_default = False
    escape = False

    for item in filters.split("|")[1:]:
        item = item.strip()
        if item == "escape":
            escape = True
            continue
        match = DEFAULT_FILTER_PATTERN.match(item)
        if match:
            has_default = True
            for group in ("dq", "sq", "bare"):
                if match.group(group) is not None:
                    default_value = match.group(group)
                    break
            continue
        raise SiteConfigError(f"Partial '{template_name}' uses unsupported filter '{item}'")

    return default_value, has_default, escape


def markers_reject(template: str, template_name: str, kind: str = "Partial", first_line: int = 1) -> None:
    """
    Reject include and capture markers in a partial or layout

    Template output is spliced in as final text, so a marker inside a
    template would reach the output unresolved.

    Raises:
        SiteConfigError: Naming the template and the marker's line
    """
    match = MARKER_PATTERN.search(template)
    if match:
        raise SiteConfigError(
            f"{kind} '{template_name}' contains '{match.group(0).strip()}'; "
            f"templates cannot include partials or capture blocks",
            first_line + template.count("\n", 0, match.start()),
        )


def template_analyze(template: str, template_name: str) -> Tuple[List[str], Dict[str, Any]]:
    """
    Find the parameters a template reads and their defaults

    A parameter is any include.NAME tag (include.NAME.lang counts as NAME).
    It is optional when at least one of its tags carries a default filter.

    Args:
        template: Template text
        template_name: Partial name for error messages

    Returns:
        (parameters in first-use order, defaults)

    Raises:
        SiteConfigError: On an unsupported filter or an include or capture
                         marker in the template

    Example:
        '<img src="{{ include.url }}" alt="{{ include.alt | default: "" }}">'
        -> (["url", "alt"], {"alt": ""})
    """
    markers_reject(template, template_name)

    parameters: List[str] = []
    defaults: Dict[str, Any] = {}

    for match in TEMPLATE_TAG_PATTERN.finditer(template):
        default_value, has_default, _ = filters_parse(match.group("filters"), template_name)
        if match.group("scope") != "include":
            continue
        parameter = match.group("path").split(".", 1)[0]
        if parameter not in parameters:
            parameters.append(parameter)
        if has_default and parameter not in defaults:
            defaults[parameter] = default_value

    return parameters, defaults


def template_render(spec: PartialSpec, call: PartialCall, resolver: Any) -> str:
    """
    Substitute a template partial's tags in a single pass

    Substituted values are never scanned again, so a parameter value that
    looks like a tag comes out literally.

    Args:
        spec: Template partial
        call: Bound inclusion (defaults already applied)
        resolver: Resolver giving access to site configuration

    Returns:
        Rendered partial text
    """
    scopes = {
        "include": call.params,
        "page": call.page,
        "site": resolver.site.config,
    }

    def tag_substitute(match: re.Match[str]) -> str:
        """Replace one {{ scope.path | filters }} tag"""
        default_value, has_default, escape = filters_parse(match.group("filters"), spec.name)
        found, value = path_lookup(scopes[match.group("scope")], match.group("path"))
        if (not found or value is None or value == "") and has_default:
            value = default_value
        text = value_stringify(value)
        return html.escape(text) if escape else text

    return TEMPLATE_TAG_PATTERN.sub(tag_substitute, spec.template or "")


def lexer_get(language: str) -> Lexer:
    """
    Pygments lexer for a language tag, plain text when unknown

    The pressmark/pm tag selects the bundled PressmarkLexer.
    """
    try:
        if language.lower() in ['pressmark', 'pm']:
            return get_lexer()
        return get_lexer_by_name(language)
    except ClassNotFound:
        return TextLexer()


class PartialRegistry:
    """
    Registry of partial specifications

    Maps partial names and aliases to PartialSpec objects. Builtins are
    registered first; template partials loaded later replace builtins with
    the same name. Fully loaded before rendering starts and read-only after.
    """

    def __init__(self) -> None:
        """Initialize the registry and register the builtin partials"""
        self.specs: Dict[str, PartialSpec] = {}
        self.codePartial_register()
        self.imagePartial_register()

    def register(self, spec: PartialSpec) -> None:
        """Register a partial specification under its name and aliases"""
        for name in [spec.name, *spec.aliases]:
            existing = self.specs.get(name)
            if existing is not None and existing is not spec:
                LOG(
                    f"Warning: {spec.category.value} partial '{spec.name}' replaces "
                    f"{existing.category.value} partial '{existing.name}' for '{name}'",
                    level=1,
                )
            self.specs[name] = spec

    def get(self, name: str) -> Optional[PartialSpec]:
        """
        Get a partial specification by name or alias

        Args:
            name: Partial name as written in the inclusion marker

        Returns:
            PartialSpec or None if not registered
        """
        return self.specs.get(name)

    def partials_listByCategory(self, category: PartialCategory) -> List[PartialSpec]:
        """Distinct partials in a category"""
        seen: List[PartialSpec] = []
        for spec in self.specs.values():
            if spec.category == category and spec not in seen:
                seen.append(spec)
        return seen

    def render(self, spec: PartialSpec, call: PartialCall, resolver: Any) -> str:
        """Render a partial for a bound inclusion"""
        if spec.handler is not None:
            return spec.handler(call, resolver)
        return template_render(spec, call, resolver)

    def templates_load(self, directory: Path) -> int:
        """
        Register every file below a directory as a template partial

        Each file is registered under its path relative to the directory
        (e.g., "image.html", "cards/post.html") with the suffix-less path as
        alias. One trailing newline is dropped from each template.

        Args:
            directory: Includes directory

        Returns:
            Number of templates registered

        Raises:
            SiteConfigError: If a template cannot be read or uses an
                             unsupported filter
        """
        if not directory.is_dir():
            LOG(f"No includes directory at {directory}", level=2)
            return 0

        count = 0
        for path in sorted(directory.rglob("*")):
            if not path.is_file() or path.name.startswith("."):
                continue
            name = path.relative_to(directory).as_posix()
            try:
                template = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise SiteConfigError(f"Cannot read partial {path}: {e}") from e
            if template.endswith("\n"):
                template = template[:-1]

            parameters, defaults = template_analyze(template, name)
            alias = name.rsplit(".", 1)[0] if "." in path.name else name
            self.register(PartialSpec(
                name=name,
                category=PartialCategory.TEMPLATE,
                description=f"Template partial from {path}",
                template=template,
                parameters=parameters,
                defaults=defaults,
                aliases=[alias] if alias != name else [],
                source_path=path,
            ))
            LOG(f"Loaded partial '{name}' ({len(parameters)} parameters)", level=3)
            count += 1

        return count

    def codePartial_register(self) -> None:
        """Register the builtin code partial"""

        def code_handler(call: PartialCall, resolver: Any) -> str:
            """Handle code - highlighted code block from a capture or a string"""
            code = call.params["code"]
            if isinstance(code, CaptureBlock):
                payload, language, caption = code.payload, code.lang, code.caption
            else:
                payload, language, caption = value_stringify(code), "text", ""

            # Explicit parameters win over what the capture declared
            language = value_stringify(call.params.get("lang")) or language
            caption = value_stringify(call.params.get("caption")) or caption

            formatter = HtmlFormatter(style=resolver.site.pygmentsStyle_get(), noclasses=True)
            highlighted = highlight(payload, lexer_get(language), formatter)

            caption_html = f'\n<figcaption>{html.escape(caption)}</figcaption>' if caption else ''
            return (
                f'<figure class="code" data-lang="{html.escape(language)}">'
                f'{caption_html}\n{highlighted}</figure>'
            )

        self.register(PartialSpec(
            name='code',
            category=PartialCategory.BUILTIN,
            description='Syntax highlighted code block',
            handler=code_handler,
            parameters=['code', 'lang', 'caption'],
            defaults={'lang': None, 'caption': None},
            aliases=['code.html'],
        ))

    def imagePartial_register(self) -> None:
        """Register the builtin image partial"""

        def image_handler(call: PartialCall, resolver: Any) -> str:
            """Handle image - figure with optional caption"""
            url = value_stringify(call.params["url"])
            if url.startswith("/"):
                url = value_stringify(resolver.site.config_get("baseurl", "")).rstrip("/") + url

            description = value_stringify(call.params.get("description"))
            alt = value_stringify(call.params.get("alt")) or description

            caption_html = f'\n<figcaption>{html.escape(description)}</figcaption>' if description else ''
            return (
                f'<figure class="image">\n'
                f'<img src="{html.escape(url)}" alt="{html.escape(alt)}">'
                f'{caption_html}\n</figure>'
            )

        self.register(PartialSpec(
            name='image',
            category=PartialCategory.BUILTIN,
            description='Image with caption',
            handler=image_handler,
            parameters=['url', 'description', 'alt'],
            defaults={'description': None, 'alt': None},
            aliases=['image.html'],
        ))
