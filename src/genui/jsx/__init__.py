"""Restricted JSX: parsed into data, evaluated against an allow-list, never executed."""

from .ast import ArrayLiteral, Attribute, Element, Fragment, Literal, ObjectLiteral, Reference, Text
from .parser import JsxParser, parse_jsx
from .evaluator import INTRINSIC_ELEMENTS, ComponentBinding, JsxEvaluator, evaluate_jsx

__all__ = [
    "ArrayLiteral",
    "Attribute",
    "ComponentBinding",
    "Element",
    "Fragment",
    "INTRINSIC_ELEMENTS",
    "JsxEvaluator",
    "JsxParser",
    "Literal",
    "ObjectLiteral",
    "Reference",
    "Text",
    "evaluate_jsx",
    "parse_jsx",
]
