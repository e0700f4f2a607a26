"""
Content blocks produced by the streaming content parser.

A block is finalized once and never changes afterwards. `span` is the
[start, end) character range of the full stream that the block covers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional, Tuple, Union

from genui.jsx.ast import Node

Span = Tuple[int, int]


@dataclass(frozen=True)
class TextBlock:
    kind: ClassVar[str] = "text"
    text: str
    span: Span = (0, 0)


@dataclass(frozen=True)
class JsxBlock:
    kind: ClassVar[str] = "jsx"
    source: str
    tree: Optional[Node] = None
    language: str = "jsx"
    span: Span = (0, 0)


@dataclass(frozen=True)
class A2UIBlock:
    kind: ClassVar[str] = "a2ui"
    message: Dict[str, Any]
    raw: str
    span: Span = (0, 0)


@dataclass(frozen=True)
class ErrorBlock:
    kind: ClassVar[str] = "error"
    error_kind: str
    raw: str
    reason: str
    span: Span = (0, 0)


@dataclass(frozen=True)
class ProvisionalBlock:
    """The still-open fence, exposed for a "generating" affordance. Never final."""

    kind: ClassVar[str] = "provisional"
    fence_kind: str
    partial: str
    start: int = 0


ContentBlock = Union[TextBlock, JsxBlock, A2UIBlock, ErrorBlock]
