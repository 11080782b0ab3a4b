"""
Document and batch rendering

Runs the parse -> resolve -> render pipeline for single documents and for
sets of documents. In a batch every document succeeds or fails on its own:
an error is recorded in that document's result and the run continues.
"""

import contextvars
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config import appsettings
from .errors import PressmarkError, RenderError
from .log import LOG
from .parser import Parser
from .partials import PartialRegistry
from .renderer import Renderer
from .resolver import Resolver
from .site import SiteConfig


@dataclass
class DocumentResult:
    """
    Outcome of rendering one document

    Attributes:
        source_path: Document source
        status: True when the document rendered
        output: Rendered text (None on failure)
        output_path: File written, if any
        error: Error message (None on success)
        error_type: Error class name, e.g. "ResolutionError"
    """
    source_path: Optional[Path]
    status: bool
    output: Optional[str] = None
    output_path: Optional[Path] = None
    error: Optional[str] = None
    error_type: Optional[str] = None


@dataclass
class BatchReport:
    """
    Outcome of a batch run, one result per document in input order

    Attributes:
        results: Per-document results
    """
    results: List[DocumentResult] = field(default_factory=list)

    @property
    def succeeded(self) -> List[DocumentResult]:
        return [r for r in self.results if r.status]

    @property
    def failed(self) -> List[DocumentResult]:
        return [r for r in self.results if not r.status]

    @property
    def status(self) -> bool:
        """True when every document rendered"""
        return not self.failed


def text_render(
    source: str,
    registry: Optional[PartialRegistry] = None,
    site: Optional[SiteConfig] = None,
    output_format: str = "html",
) -> str:
    """
    Render a source text in one call

    Args:
        source: Document source (front matter + body)
        registry: Partial registry (default: builtins only)
        site: Site configuration (default: empty)
        output_format: "html" or "source"

    Returns:
        Rendered text

    Raises:
        PressmarkError: Any parse, resolution or render error

    Example:
        >>> text_render('---\\ntitle: Hi\\n---\\n<h1>{{ page.title }}</h1>')
        '<h1>Hi</h1>'
    """
    document = Parser(source).parse()
    resolved = Resolver(registry=registry, site=site).resolve(document)
    return Renderer(site=site, output_format=output_format).render(resolved)


def failure_record(source_path: Path, error: PressmarkError) -> DocumentResult:
    """Log a document error and turn it into a failed result"""
    if error.source_path is None:
        error.source_path = source_path
    LOG(f"Warning: {type(error).__name__}: {error}", level=1)
    return DocumentResult(
        source_path=source_path,
        status=False,
        error=str(error),
        error_type=type(error).__name__,
    )


def document_render(
    source_path: Path,
    resolver: Resolver,
    renderer: Renderer,
    output_path: Optional[Path] = None,
) -> DocumentResult:
    """
    Render one document file, capturing any failure in the result

    Args:
        source_path: Document to read
        resolver: Shared resolver
        renderer: Shared renderer
        output_path: Where to write the result; None keeps it in memory

    Returns:
        DocumentResult (never raises for document errors)
    """
    LOG(f"Rendering {source_path}", level=2)
    try:
        source = source_path.read_text(encoding="utf-8")
        document = Parser(source, source_path=source_path, debug=appsettings.debug_mode).parse()
        resolved = resolver.resolve(document)
        output = renderer.render(resolved)

        if output_path is not None:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(output, encoding="utf-8")
            LOG(f"Wrote {output_path}", level=2)
    except PressmarkError as e:
        return failure_record(source_path, e)
    except (OSError, UnicodeDecodeError) as e:
        LOG(f"Warning: cannot process {source_path}: {e}", level=1)
        return DocumentResult(
            source_path=source_path,
            status=False,
            error=f"{source_path}: {e}",
            error_type=type(e).__name__,
        )

    return DocumentResult(
        source_path=source_path,
        status=True,
        output=output,
        output_path=output_path,
    )


def outputPath_make(source_path: Path, input_root: Path, output_root: Path, output_format: str) -> Path:
    """
    Output file for a source: same relative path under the output root

    html output swaps the extension for appsettings.output_extension;
    source output keeps it.

    Raises:
        RenderError: If the source does not live under the input root
    """
    try:
        relative = source_path.resolve().relative_to(input_root.resolve())
    except ValueError:
        raise RenderError(f"Source is outside the input directory {input_root}") from None
    if output_format == "html":
        relative = relative.with_suffix(appsettings.output_extension)
    return output_root / relative


def documents_renderBatch(
    sources: List[Path],
    resolver: Resolver,
    renderer: Renderer,
    input_root: Optional[Path] = None,
    output_root: Optional[Path] = None,
    jobs: Optional[int] = None,
) -> BatchReport:
    """
    Render many documents, isolating failures per document

    The resolver and renderer (with their partial and layout tables) must
    be fully loaded before the call; they are shared read-only by all
    workers. With jobs > 1 documents render on a thread pool, each worker
    in a copy of the caller's context so LOG verbosity carries over.

    Args:
        sources: Document files
        resolver: Shared resolver
        renderer: Shared renderer
        input_root: Root the sources are relative to (needed to write output)
        output_root: Output directory; None keeps results in memory
        jobs: Worker count (default: appsettings.jobs)

    Returns:
        BatchReport with one result per source, in input order
    """
    jobs = jobs or appsettings.jobs

    def one_render(source_path: Path) -> DocumentResult:
        output_path = None
        if output_root is not None and input_root is not None:
            try:
                output_path = outputPath_make(source_path, input_root, output_root, renderer.output_format)
            except RenderError as e:
                return failure_record(source_path, e)
        return document_render(source_path, resolver, renderer, output_path)

    if jobs <= 1 or len(sources) <= 1:
        return BatchReport(results=[one_render(path) for path in sources])

    LOG(f"Rendering {len(sources)} documents with {jobs} workers", level=2)
    with ThreadPoolExecutor(max_workers=jobs) as executor:
        futures = [
            executor.submit(contextvars.copy_context().run, one_render, path)
            for path in sources
        ]
        results = [future.result() for future in futures]

    return BatchReport(results=results)
