"""
Rendered node tree handed to the host UI.

Every outcome of rendering, including the failure ones, is a node. A host maps
`kind` to a widget. Fallback nodes always carry enough of the raw input to
debug the failure in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional, Tuple


def _plain(value: Any) -> Any:
    if isinstance(value, RenderedNode):
        return value.to_dict()
    if isinstance(value, dict):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


@dataclass(frozen=True)
class RenderedNode:
    kind: ClassVar[str] = "node"

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"kind": self.kind}
        for name in self.__dataclass_fields__:
            out[name] = _plain(getattr(self, name))
        return out


@dataclass(frozen=True)
class MarkdownNode(RenderedNode):
    kind: ClassVar[str] = "markdown"
    text: str = ""


@dataclass(frozen=True)
class TextNode(RenderedNode):
    kind: ClassVar[str] = "text"
    text: str = ""


@dataclass(frozen=True)
class ElementNode(RenderedNode):
    """An allow-listed intrinsic element such as `div` or `strong`."""

    kind: ClassVar[str] = "element"
    tag: str = "div"
    props: Dict[str, Any] = field(default_factory=dict)
    children: Tuple[RenderedNode, ...] = ()


@dataclass(frozen=True)
class ComponentNode(RenderedNode):
    kind: ClassVar[str] = "component"
    type_name: str = ""
    component_id: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)
    children: Tuple[RenderedNode, ...] = ()


@dataclass(frozen=True)
class FragmentNode(RenderedNode):
    kind: ClassVar[str] = "fragment"
    children: Tuple[RenderedNode, ...] = ()


@dataclass(frozen=True)
class UnknownTypeNode(RenderedNode):
    kind: ClassVar[str] = "unknown-type"
    type_name: str = ""
    component_id: Optional[str] = None
    raw: Any = None


@dataclass(frozen=True)
class ValidationErrorNode(RenderedNode):
    kind: ClassVar[str] = "validation-error"
    type_name: Optional[str] = None
    component_id: Optional[str] = None
    errors: Tuple[Any, ...] = ()
    raw: Any = None


@dataclass(frozen=True)
class ParseErrorNode(RenderedNode):
    kind: ClassVar[str] = "parse-error"
    error_kind: str = "json-parse"
    reason: str = ""
    raw: str = ""


@dataclass(frozen=True)
class RenderErrorNode(RenderedNode):
    kind: ClassVar[str] = "render-error"
    reason: str = ""
    block_index: Optional[int] = None
    block_kind: Optional[str] = None
    component_id: Optional[str] = None
    type_name: Optional[str] = None


@dataclass(frozen=True)
class ProvisionalNode(RenderedNode):
    """Content of a fence that is still streaming."""

    kind: ClassVar[str] = "provisional"
    fence_kind: str = "json"
    partial: str = ""


FALLBACK_KINDS = frozenset(
    {
        UnknownTypeNode.kind,
        ValidationErrorNode.kind,
        ParseErrorNode.kind,
        RenderErrorNode.kind,
    }
)


def is_fallback(node: RenderedNode) -> bool:
    return node.kind in FALLBACK_KINDS
