"""
Rendering of content blocks into host-agnostic node trees.

`HybridRenderer` lives in `genui.render.hybrid_renderer`; it is not imported
here so that the catalog can depend on the node types alone.
"""

from .nodes import (
    ComponentNode,
    ElementNode,
    FragmentNode,
    MarkdownNode,
    ParseErrorNode,
    ProvisionalNode,
    RenderedNode,
    RenderErrorNode,
    TextNode,
    UnknownTypeNode,
    ValidationErrorNode,
    is_fallback,
)

__all__ = [
    "ComponentNode",
    "ElementNode",
    "FragmentNode",
    "MarkdownNode",
    "ParseErrorNode",
    "ProvisionalNode",
    "RenderedNode",
    "RenderErrorNode",
    "TextNode",
    "UnknownTypeNode",
    "ValidationErrorNode",
    "is_fallback",
]
