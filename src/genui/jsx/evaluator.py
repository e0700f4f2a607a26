"""
Evaluate a parsed JSX tree against an allow-list of component bindings.

Element names resolve, in order, to a caller binding, an allow-listed
intrinsic tag, or the unknown-type fallback. Identifier references must name
a binding. Event handler props and raw HTML injection are rejected.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from genui.common.exceptions import JsxEvaluationError
from genui.jsx.ast import ArrayLiteral, Element, Fragment, Literal, Node, ObjectLiteral, Reference, Text
from genui.render.nodes import ElementNode, FragmentNode, RenderedNode, TextNode, UnknownTypeNode

ComponentBinding = Callable[[Dict[str, Any], Tuple[RenderedNode, ...]], RenderedNode]

INTRINSIC_ELEMENTS = frozenset(
    {
        "a", "abbr", "b", "blockquote", "br", "caption", "code", "dd", "del", "div", "dl", "dt",
        "em", "figcaption", "figure", "h1", "h2", "h3", "h4", "h5", "h6", "hr", "i", "img",
        "kbd", "li", "mark", "ol", "p", "pre", "q", "s", "section", "small", "span", "strong",
        "sub", "sup", "table", "tbody", "td", "tfoot", "th", "thead", "tr", "u", "ul",
    }
)

_EVENT_HANDLER = re.compile(r"^on[A-Z]")
_BLOCKED_PROPS = frozenset({"dangerouslySetInnerHTML", "ref"})
_URL_PROPS = frozenset({"href", "src", "action", "formAction", "poster"})
_UNSAFE_URL = re.compile(r"^\s*(javascript|vbscript|data:text/html)", re.IGNORECASE)


class JsxEvaluator:
    def __init__(self, bindings: Optional[Mapping[str, ComponentBinding]] = None):
        self.bindings: Dict[str, ComponentBinding] = dict(bindings or {})

    def evaluate(self, node: Node) -> RenderedNode:
        if isinstance(node, Element):
            return self._element(node)
        if isinstance(node, Fragment):
            return FragmentNode(children=self._children(node.children))
        if isinstance(node, Text):
            return TextNode(text=node.value)
        if isinstance(node, Reference):
            return self._reference_node(node.name)
        value = self.value(node)
        if isinstance(value, RenderedNode):
            return value
        return TextNode(text="" if value is None or isinstance(value, bool) else _display(value))

    def value(self, expression: Any) -> Any:
        if isinstance(expression, Literal):
            return expression.value
        if isinstance(expression, ArrayLiteral):
            return [self.value(item) for item in expression.items]
        if isinstance(expression, ObjectLiteral):
            return {key: self.value(item) for key, item in expression.entries}
        if isinstance(expression, Reference):
            return self._reference_node(expression.name)
        raise JsxEvaluationError(f"Unsupported expression {type(expression).__name__}")

    def _reference_node(self, name: str) -> RenderedNode:
        binding = self.bindings.get(name)
        if binding is None:
            raise JsxEvaluationError(f"Unknown identifier '{name}'", context={"identifier": name})
        return binding({}, ())

    def _children(self, children: Tuple[Node, ...]) -> Tuple[RenderedNode, ...]:
        return tuple(self.evaluate(child) for child in children)

    def _props(self, element: Element) -> Dict[str, Any]:
        props: Dict[str, Any] = {}
        for attribute in element.attributes:
            name = attribute.name
            if _EVENT_HANDLER.match(name) or name in _BLOCKED_PROPS:
                raise JsxEvaluationError(
                    f"Attribute '{name}' is not allowed on <{element.name}>",
                    context={"attribute": name, "element": element.name},
                )
            value = self.value(attribute.value)
            if name in _URL_PROPS and isinstance(value, str) and _UNSAFE_URL.match(value):
                raise JsxEvaluationError(
                    f"Unsafe URL in '{name}' on <{element.name}>",
                    context={"attribute": name, "element": element.name},
                )
            props[name] = value
        return props

    def _element(self, element: Element) -> RenderedNode:
        props = self._props(element)
        children = self._children(element.children)
        binding = self.bindings.get(element.name)
        if binding is not None:
            return binding(props, children)
        if element.name in INTRINSIC_ELEMENTS:
            return ElementNode(tag=element.name, props=props, children=children)
        return UnknownTypeNode(
            type_name=element.name,
            component_id=props.get("id") if isinstance(props.get("id"), str) else None,
            raw={"props": props},
        )


def _display(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def evaluate_jsx(node: Node, bindings: Optional[Mapping[str, ComponentBinding]] = None) -> RenderedNode:
    return JsxEvaluator(bindings).evaluate(node)
