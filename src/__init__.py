"""
pressmark - Text-first article renderer

Renders Jekyll-style article sources (front matter, partial inclusions,
verbatim capture blocks) into standalone output documents.
"""

__version__ = "1.0.0"

from .lib import (
    Parser,
    Resolver,
    Renderer,
    PartialRegistry,
    SiteConfig,
    text_render,
    LOG,
    state_connectToLogger,
)

__all__ = [
    "Parser",
    "Resolver",
    "Renderer",
    "PartialRegistry",
    "SiteConfig",
    "text_render",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
