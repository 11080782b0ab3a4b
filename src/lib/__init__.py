"""
pressmark - Text-first article renderer

Renders Jekyll-style article sources: front matter, partial inclusions and
verbatim capture blocks.
"""

__version__ = "1.0.0"

from .errors import (
    PressmarkError,
    ParseError,
    ResolutionError,
    MissingParameterError,
    RenderError,
    SiteConfigError,
)
from .frontmatter import frontmatter_split, frontmatter_dump
from .parser import Parser
from .partials import PartialRegistry
from .resolver import Resolver
from .renderer import Renderer, layouts_load
from .site import SiteConfig, sources_list
from .batch import BatchReport, DocumentResult, documents_renderBatch, document_render, text_render
from .log import LOG, state_connectToLogger

__all__ = [
    "PressmarkError",
    "ParseError",
    "ResolutionError",
    "MissingParameterError",
    "RenderError",
    "SiteConfigError",
    "frontmatter_split",
    "frontmatter_dump",
    "Parser",
    "PartialRegistry",
    "Resolver",
    "Renderer",
    "layouts_load",
    "SiteConfig",
    "sources_list",
    "BatchReport",
    "DocumentResult",
    "documents_renderBatch",
    "document_render",
    "text_render",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
