"""
Partial specification and metadata models

Defines the structure and categories of partials for lookup, parameter
validation and registry management.
"""

from enum import Enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional


class PartialCategory(Enum):
    """
    Where a partial comes from

    Used for organization and for logging overrides.
    """
    BUILTIN = "builtin"      # code, image (Python handlers)
    TEMPLATE = "template"    # files from the includes directory


@dataclass
class PartialSpec:
    """
    Specification for a partial

    Exactly one of handler or template is set. Handler partials are Python
    functions (call, resolver) -> str; template partials are text with
    {{ include.NAME }} tags substituted in a single pass.

    Attributes:
        name: Partial name (e.g., "code", "image.html")
        category: Category for organization
        description: Human-readable description
        handler: Rendering function for builtin partials
        template: Template text for template partials
        parameters: Parameter names in positional order
        defaults: Default values; a parameter without one is required
        aliases: Alternative names for the partial
        source_path: Template file, for template partials
    """
    name: str
    category: PartialCategory
    description: str = ""
    handler: Optional[Callable[..., str]] = None
    template: Optional[str] = None
    parameters: List[str] = field(default_factory=list)
    defaults: Dict[str, Any] = field(default_factory=dict)
    aliases: List[str] = field(default_factory=list)
    source_path: Optional[Path] = None

    def matches(self, partial_name: str) -> bool:
        """
        Check if this spec answers to a partial name

        Args:
            partial_name: Name to check

        Returns:
            True if the name is the partial's name or one of its aliases
        """
        return partial_name == self.name or partial_name in self.aliases

    def requiredParameters_get(self) -> List[str]:
        """Parameters that must be supplied by every inclusion"""
        return [p for p in self.parameters if p not in self.defaults]


@dataclass
class PartialCall:
    """
    A bound inclusion handed to a partial handler

    Attributes:
        name: Partial name as written in the marker
        params: Bound parameter values; capture parameters hold CaptureBlock
        page: Front matter of the including document
        line_number: Source line of the marker
    """
    name: str
    params: Dict[str, Any]
    page: Dict[str, Any] = field(default_factory=dict)
    line_number: int = 1
