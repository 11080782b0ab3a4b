"""
Inclusion resolver

Expands the inclusion markers and output tags of a parsed Document into
ResolvedSegments, in one pass over the segments:

1. A CaptureBlock becomes visible to inclusions that come after it
2. An InclusionRef is bound to its partial's parameters and rendered
3. A VariableRef is looked up in the page front matter or site config

Partial output is spliced in as final text and never scanned again, so a
partial cannot include itself and expansion always terminates.

Example:
    >>> doc = Parser('{% include image.html url="a.png" %}').parse()
    >>> resolved = Resolver().resolve(doc)
    >>> resolved.segments[0].origin
    'image.html'
"""

from typing import Any, Dict, List, Optional, Set

from ..config import appsettings
from ..models.document import (
    CaptureBlock,
    Document,
    InclusionRef,
    Parameter,
    ResolvedSegment,
    Segment,
    VariableRef,
)
from ..models.partials import PartialCall, PartialSpec
from .errors import MissingParameterError, ResolutionError
from .log import LOG
from .partials import PartialRegistry, path_lookup, value_stringify
from .site import SiteConfig


class Resolver:
    """
    Resolves inclusions and variables of documents

    One Resolver serves any number of documents, also from several threads:
    per-document state (visible and consumed captures) lives only inside a
    resolve() call, and the registry and site configuration are only read.
    """

    def __init__(
        self,
        registry: Optional[PartialRegistry] = None,
        site: Optional[SiteConfig] = None,
        strict: Optional[bool] = None,
    ) -> None:
        """
        Initialize resolver

        Args:
            registry: Partial registry (default: builtins only)
            site: Site configuration for site.* lookups (default: empty)
            strict: Treat unused captures and undefined variables as errors
                    (default: appsettings.strict_mode)
        """
        self.registry = registry if registry is not None else PartialRegistry()
        self.site = site if site is not None else SiteConfig()
        self.strict = appsettings.strict_mode if strict is None else strict

    def resolve(self, document: Document) -> Document:
        """
        Resolve every inclusion and variable of a document

        Args:
            document: Parsed document

        Returns:
            New Document holding only TextSegments and ResolvedSegments.
            Capture blocks are dropped once consumed.

        Raises:
            ResolutionError: Unknown partial, capture used twice, too many
                             positional parameters, or (strict) an unused
                             capture or undefined variable
            MissingParameterError: A required parameter has no value
        """
        page = dict(document.front_matter)
        captures: Dict[str, CaptureBlock] = {}
        consumed: Set[str] = set()
        resolved: List[Segment] = []

        try:
            for segment in document.segments:
                if isinstance(segment, CaptureBlock):
                    captures[segment.name] = segment
                    consumed.discard(segment.name)
                    LOG(f"Captured '{segment.name}' ({len(segment.payload)} chars)", level=3)
                elif isinstance(segment, InclusionRef):
                    resolved.append(self.inclusion_resolve(segment, page, captures, consumed))
                elif isinstance(segment, VariableRef):
                    resolved.append(self.variable_resolve(segment, page))
                else:
                    resolved.append(segment)

            self.captures_checkUsed(captures, consumed)
        except ResolutionError as e:
            e.source_path = document.source_path
            raise

        return document.segments_replace(tuple(resolved))

    def inclusion_resolve(
        self,
        ref: InclusionRef,
        page: Dict[str, Any],
        captures: Dict[str, CaptureBlock],
        consumed: Set[str],
    ) -> ResolvedSegment:
        """
        Expand one inclusion marker

        Args:
            ref: Inclusion marker
            page: Front matter of the document
            captures: Captures seen so far
            consumed: Names of captures already used

        Returns:
            ResolvedSegment with the partial's output

        Raises:
            ResolutionError: If no partial answers to the name
        """
        spec = self.registry.get(ref.name)
        if spec is None:
            raise ResolutionError(ref.name, line_number=ref.line_number)

        params = self.parameters_bind(spec, ref, page, captures, consumed)
        call = PartialCall(name=ref.name, params=params, page=page, line_number=ref.line_number)
        LOG(f"Including '{ref.name}' at line {ref.line_number}", level=3)

        return ResolvedSegment(
            text=self.registry.render(spec, call, self),
            origin=ref.name,
            line_number=ref.line_number,
        )

    def parameters_bind(
        self,
        spec: PartialSpec,
        ref: InclusionRef,
        page: Dict[str, Any],
        captures: Dict[str, CaptureBlock],
        consumed: Set[str],
    ) -> Dict[str, Any]:
        """
        Bind marker arguments to a partial's parameters

        Positional arguments bind in the partial's declared parameter order,
        named ones by name. Declared parameters left unbound take their
        default; extra named arguments are passed through.

        Returns:
            Bound parameter values

        Raises:
            ResolutionError: Too many positional arguments, or a parameter
                             given twice
            MissingParameterError: A required parameter is unbound

        Example:
            code partial (parameters code, lang, caption), marker
            '{% include code hello lang="cpp" %}' -> {"code": <capture hello>,
            "lang": "cpp", "caption": None}
        """
        bound: Dict[str, Any] = {}
        positional = [p for p in ref.parameters if p.name is None]

        if len(positional) > len(spec.parameters):
            raise ResolutionError(
                spec.name,
                f"Partial '{ref.name}' takes {len(spec.parameters)} positional "
                f"parameters, got {len(positional)}",
                ref.line_number,
            )

        for name, parameter in zip(spec.parameters, positional):
            bound[name] = self.value_resolve(parameter, ref, page, captures, consumed)

        for parameter in ref.parameters:
            if parameter.name is None:
                continue
            if parameter.name in bound:
                raise ResolutionError(
                    spec.name,
                    f"Parameter '{parameter.name}' of '{ref.name}' is given twice",
                    ref.line_number,
                )
            bound[parameter.name] = self.value_resolve(parameter, ref, page, captures, consumed)

        for name in spec.parameters:
            if name in bound:
                continue
            if name not in spec.defaults:
                raise MissingParameterError(name, ref.name, ref.line_number)
            bound[name] = spec.defaults[name]

        return bound

    def value_resolve(
        self,
        parameter: Parameter,
        ref: InclusionRef,
        page: Dict[str, Any],
        captures: Dict[str, CaptureBlock],
        consumed: Set[str],
    ) -> Any:
        """
        Value of one marker argument

        Quoted values are literals. An unquoted value is, in order: a
        capture seen earlier (consumed by this use), a page./site. variable,
        or the literal word.

        Raises:
            ResolutionError: If the capture was already consumed
        """
        value = parameter.value
        if parameter.quoted:
            return value

        if value in captures:
            if value in consumed:
                raise ResolutionError(
                    value,
                    f"Capture '{value}' was already used by an earlier include",
                    ref.line_number,
                )
            consumed.add(value)
            return captures[value]

        scope, _, path = value.partition(".")
        if path and scope in ("page", "site"):
            return self.scope_lookup(scope, path, page, ref.line_number, value)

        return value

    def variable_resolve(self, ref: VariableRef, page: Dict[str, Any]) -> ResolvedSegment:
        """Expand one {{ page.x }} / {{ site.x }} tag"""
        value = self.scope_lookup(ref.scope, ref.path, page, ref.line_number, f"{ref.scope}.{ref.path}")
        return ResolvedSegment(
            text=value_stringify(value),
            origin=f"{ref.scope}.{ref.path}",
            line_number=ref.line_number,
        )

    def scope_lookup(self, scope: str, path: str, page: Dict[str, Any], line_number: int, label: str) -> Any:
        """
        Look a dotted path up in page front matter or site configuration

        Undefined variables give None and a warning, or an error in strict
        mode.
        """
        found, value = path_lookup(page if scope == "page" else self.site.config, path)
        if not found:
            if self.strict:
                raise ResolutionError(label, f"Undefined variable '{label}'", line_number)
            LOG(f"Warning: undefined variable '{label}' at line {line_number}", level=1)
            return None
        return value

    def captures_checkUsed(self, captures: Dict[str, CaptureBlock], consumed: Set[str]) -> None:
        """Warn about (or, strict, reject) captures no inclusion used"""
        for name, capture in captures.items():
            if name in consumed:
                continue
            if self.strict:
                raise ResolutionError(
                    name,
                    f"Capture '{name}' is never used by an include",
                    capture.line_number,
                )
            LOG(f"Warning: capture '{name}' at line {capture.line_number} is never used", level=1)

