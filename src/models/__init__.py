"""
Models package for pressmark

Contains data structures and type definitions for the rendering pipeline.
"""

from .state import ProgramState, pipeline
from .document import (
    Document,
    TextSegment,
    Parameter,
    InclusionRef,
    CaptureBlock,
    VariableRef,
    ResolvedSegment,
)
from .partials import PartialSpec, PartialCategory, PartialCall
from .parser import SplitSource, TagMatch, BlockExtent

__all__ = [
    "ProgramState",
    "pipeline",
    "Document",
    "TextSegment",
    "Parameter",
    "InclusionRef",
    "CaptureBlock",
    "VariableRef",
    "ResolvedSegment",
    "PartialSpec",
    "PartialCategory",
    "PartialCall",
    "SplitSource",
    "TagMatch",
    "BlockExtent",
]
