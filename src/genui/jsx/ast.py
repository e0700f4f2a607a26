"""
AST for the restricted JSX grammar.

Expressions are data only: literals, arrays and objects of literals, and bare
identifiers that must name a bound component. Nothing here can call code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple, Union


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class Reference:
    name: str


@dataclass(frozen=True)
class ArrayLiteral:
    items: Tuple["Expression", ...] = ()


@dataclass(frozen=True)
class ObjectLiteral:
    entries: Tuple[Tuple[str, "Expression"], ...] = ()


@dataclass(frozen=True)
class Attribute:
    name: str
    value: "Expression"


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Element:
    name: str
    attributes: Tuple[Attribute, ...] = ()
    children: Tuple["Node", ...] = ()

    def attribute(self, name: str) -> "Expression | None":
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute.value
        return None


@dataclass(frozen=True)
class Fragment:
    children: Tuple["Node", ...] = ()


Expression = Union[Literal, Reference, ArrayLiteral, ObjectLiteral]
Node = Union[Element, Fragment, Text, Literal, Reference, ArrayLiteral, ObjectLiteral]


def element_names(node: Node) -> Tuple[str, ...]:
    """Every element name used in a tree, in document order."""
    names = []

    def _walk(item: Any) -> None:
        if isinstance(item, Element):
            names.append(item.name)
            for attribute in item.attributes:
                _walk(attribute.value)
            for child in item.children:
                _walk(child)
        elif isinstance(item, Fragment):
            for child in item.children:
                _walk(child)
        elif isinstance(item, ArrayLiteral):
            for value in item.items:
                _walk(value)
        elif isinstance(item, ObjectLiteral):
            for _, value in item.entries:
                _walk(value)

    _walk(node)
    return tuple(names)
