"""Thinning tree construction for XML documents.

This module builds "thinned" trees from structural event streams: at every
level all same-named sibling elements are merged into one node, so the tree
approximates the schema shape of the input.

Key Components:
    ThinningTreeBuilder: Single-pass, stack-driven tree construction
    ThinNode: One merged tag identity with children, attributes and text
    ThinTree: Root container with navigation and summary views
    ThinningError: Base class of all build failures
"""

from .builder import ThinningTreeBuilder
from .errors import (
    DepthLimitExceededError,
    InvalidEventError,
    MalformedInputError,
    StructuralUnderflowError,
    ThinningError,
    UnterminatedDocumentError,
)
from .node import ThinNode, ThinTree
from .render import render_json, render_skeleton

__all__ = [
    "ThinningTreeBuilder",
    "DepthLimitExceededError",
    "InvalidEventError",
    "MalformedInputError",
    "StructuralUnderflowError",
    "ThinningError",
    "UnterminatedDocumentError",
    "ThinNode",
    "ThinTree",
    "render_json",
    "render_skeleton",
]
