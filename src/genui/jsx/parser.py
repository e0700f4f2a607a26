"""
Recursive-descent parser for a restricted JSX grammar.

    document   := node* EOF
    node       := element | fragment | text | "{" (comment | expr)? "}"
    element    := "<" name attribute* ("/>" | ">" node* "</" name ">")
    fragment   := "<>" node* "</>"
    attribute  := attr_name ("=" (string | "{" expr "}"))?
    expr       := string | number | true | false | null | undefined
                | array | object | identifier

Anything else, arrow functions and calls included, is a syntax error.
"""

from __future__ import annotations

import html
import re
from typing import Any, List, Optional, Tuple

from genui.common.exceptions import JsxSyntaxError
from genui.jsx.ast import ArrayLiteral, Attribute, Element, Expression, Fragment, Literal, Node, ObjectLiteral, Reference, Text

DEFAULT_MAX_DEPTH = 64

_IDENT_START = re.compile(r"[A-Za-z_$]")
_IDENT = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
_ATTR_NAME = re.compile(r"[A-Za-z_$][A-Za-z0-9_$:\-]*")
_NUMBER = re.compile(r"-?(?:0[xX][0-9a-fA-F]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_KEYWORDS = {"true": True, "false": False, "null": None, "undefined": None}
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}


def _normalize_text(raw: str) -> str:
    """JSX whitespace rules: trim around line breaks, drop blank lines, join with spaces."""
    lines = raw.split("\n")
    kept: List[str] = []
    for index, line in enumerate(lines):
        if index > 0:
            line = line.lstrip()
        if index < len(lines) - 1:
            line = line.rstrip()
        if line:
            kept.append(line)
    return html.unescape(" ".join(kept))


class JsxParser:
    def __init__(self, source: str, max_depth: int = DEFAULT_MAX_DEPTH):
        self.source = source
        self.pos = 0
        self.end = len(source)
        self.max_depth = max_depth

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def error(self, message: str, offset: Optional[int] = None) -> JsxSyntaxError:
        offset = self.pos if offset is None else offset
        line = self.source.count("\n", 0, offset) + 1
        column = offset - (self.source.rfind("\n", 0, offset) + 1) + 1
        return JsxSyntaxError(message, offset=offset, line=line, column=column)

    def peek(self, text: str) -> bool:
        return self.source.startswith(text, self.pos, self.end)

    def at_end(self) -> bool:
        return self.pos >= self.end

    def skip_ws(self) -> None:
        while True:
            while self.pos < self.end and self.source[self.pos].isspace():
                self.pos += 1
            if self.peek("/*"):
                end = self.source.find("*/", self.pos + 2, self.end)
                if end < 0:
                    raise self.error("Unterminated comment")
                self.pos = end + 2
                continue
            if self.peek("//"):
                end = self.source.find("\n", self.pos, self.end)
                self.pos = self.end if end < 0 else end + 1
                continue
            return

    def expect(self, text: str) -> None:
        if not self.peek(text):
            found = self.source[self.pos:min(self.pos + 10, self.end)] or "end of input"
            raise self.error(f"Expected '{text}' but found '{found}'")
        self.pos += len(text)

    def match(self, pattern: re.Pattern, what: str) -> str:
        found = pattern.match(self.source, self.pos, self.end)
        if not found:
            raise self.error(f"Expected {what}")
        self.pos = found.end()
        return found.group(0)

    # ------------------------------------------------------------------
    # document and nodes
    # ------------------------------------------------------------------

    def parse(self) -> Node:
        self.skip_leading_noise()
        nodes = self.parse_children(closing=None, depth=0)
        if not nodes:
            raise self.error("JSX source is empty")
        if len(nodes) == 1:
            return nodes[0]
        return Fragment(children=tuple(nodes))

    def skip_leading_noise(self) -> None:
        # Tolerate a wrapping "( ... )" and a trailing ";" around a single expression.
        # Only the scan window moves, so offsets still point into the original source.
        start = len(self.source) - len(self.source.lstrip())
        end = len(self.source.rstrip())
        if end > start and self.source[end - 1] == ";":
            end = len(self.source[:end - 1].rstrip())
        if end - start >= 2 and self.source[start] == "(" and self.source[end - 1] == ")":
            start += 1
            end -= 1
        self.pos = start
        self.end = end

    def parse_children(self, closing: Optional[str], depth: int) -> List[Node]:
        nodes: List[Node] = []
        while True:
            if self.at_end():
                if closing is not None:
                    label = closing or "fragment"
                    raise self.error(f"Unclosed <{label}>")
                return nodes
            if self.peek("</"):
                if closing is None:
                    raise self.error("Unexpected closing tag")
                return nodes
            if self.peek("<"):
                nodes.append(self.parse_element(depth + 1))
            elif self.peek("{"):
                node = self.parse_child_expression(depth)
                if node is not None:
                    nodes.append(node)
            else:
                text = self.parse_text()
                if text is not None:
                    nodes.append(text)

    def parse_text(self) -> Optional[Text]:
        start = self.pos
        while self.pos < self.end and self.source[self.pos] not in "<{":
            self.pos += 1
        value = _normalize_text(self.source[start:self.pos])
        return Text(value) if value else None

    def parse_child_expression(self, depth: int) -> Optional[Expression]:
        self.expect("{")
        self.skip_ws()
        if self.peek("}"):
            self.pos += 1
            return None
        value = self.parse_expression(depth + 1)
        self.skip_ws()
        self.expect("}")
        return value

    def parse_element(self, depth: int) -> Node:
        if depth > self.max_depth:
            raise self.error(f"JSX nesting deeper than {self.max_depth} levels")
        start = self.pos
        self.expect("<")
        self.skip_ws()
        if self.peek(">"):
            self.pos += 1
            children = self.parse_children(closing="", depth=depth)
            self.expect("</")
            self.skip_ws()
            self.expect(">")
            return Fragment(children=tuple(children))

        name = self.parse_element_name()
        attributes = self.parse_attributes(depth)
        self.skip_ws()
        if self.peek("/>"):
            self.pos += 2
            return Element(name=name, attributes=tuple(attributes))
        self.expect(">")

        children = self.parse_children(closing=name, depth=depth)
        self.expect("</")
        self.skip_ws()
        closing_offset = self.pos
        closing_name = self.parse_element_name() if not self.peek(">") else ""
        if closing_name != name:
            raise self.error(
                f"Mismatched closing tag: expected </{name}> but found </{closing_name}> (opened at offset {start})",
                offset=closing_offset,
            )
        self.skip_ws()
        self.expect(">")
        return Element(name=name, attributes=tuple(attributes), children=tuple(children))

    def parse_element_name(self) -> str:
        parts = [self.match(_IDENT, "element name")]
        while self.peek("."):
            self.pos += 1
            parts.append(self.match(_IDENT, "member name"))
        return ".".join(parts)

    def parse_attributes(self, depth: int) -> List[Attribute]:
        attributes: List[Attribute] = []
        while True:
            self.skip_ws()
            if self.peek(">") or self.peek("/>") or self.at_end():
                return attributes
            if self.peek("{"):
                raise self.error("Spread attributes are not supported")
            name = self.match(_ATTR_NAME, "attribute name")
            self.skip_ws()
            if not self.peek("="):
                attributes.append(Attribute(name=name, value=Literal(True)))
                continue
            self.pos += 1
            self.skip_ws()
            if self.peek('"') or self.peek("'"):
                value: Expression = Literal(html.unescape(self.parse_string(allow_escapes=False)))
            elif self.peek("{"):
                self.pos += 1
                self.skip_ws()
                value = self.parse_expression(depth + 1)
                self.skip_ws()
                self.expect("}")
            else:
                raise self.error(f"Attribute '{name}' needs a string or {{expression}} value")
            attributes.append(Attribute(name=name, value=value))

    # ------------------------------------------------------------------
    # expressions
    # ------------------------------------------------------------------

    def parse_expression(self, depth: int) -> Expression:
        if depth > self.max_depth:
            raise self.error(f"Expression nesting deeper than {self.max_depth} levels")
        self.skip_ws()
        if self.at_end():
            raise self.error("Expected an expression")
        char = self.source[self.pos]
        if char in "\"'`":
            return Literal(self.parse_string(allow_escapes=True))
        if char == "[":
            return self.parse_array(depth)
        if char == "{":
            return self.parse_object(depth)
        if char == "<":
            raise self.error("JSX elements are not allowed inside expressions")
        number = _NUMBER.match(self.source, self.pos, self.end)
        if number and (char.isdigit() or char in "-."):
            self.pos = number.end()
            return Literal(self._number_value(number.group(0)))
        if _IDENT_START.match(char):
            start = self.pos
            name = self.match(_IDENT, "identifier")
            self.skip_ws()
            if self.peek("(") or self.peek("=>") or self.peek("."):
                raise self.error(f"Only literals and component references are allowed, found code after '{name}'", start)
            if name in _KEYWORDS:
                return Literal(_KEYWORDS[name])
            return Reference(name)
        raise self.error(f"Unexpected character '{char}' in expression")

    @staticmethod
    def _number_value(text: str) -> Any:
        body = text.lstrip("-")
        sign = -1 if text.startswith("-") else 1
        if body[:2] in ("0x", "0X"):
            return sign * int(body, 16)
        if any(char in body for char in ".eE"):
            return sign * float(body)
        return sign * int(body)

    def parse_string(self, allow_escapes: bool) -> str:
        quote = self.source[self.pos]
        start = self.pos
        self.pos += 1
        out: List[str] = []
        while True:
            if self.at_end():
                raise self.error("Unterminated string", start)
            char = self.source[self.pos]
            if char == quote:
                self.pos += 1
                return "".join(out)
            if quote == "`" and self.peek("${"):
                raise self.error("Template substitutions are not allowed")
            if char == "\\" and allow_escapes:
                self.pos += 1
                if self.at_end():
                    raise self.error("Unterminated string", start)
                escaped = self.source[self.pos]
                if escaped == "u":
                    digits = self.source[self.pos + 1:min(self.pos + 5, self.end)]
                    if len(digits) != 4 or not all(c in "0123456789abcdefABCDEF" for c in digits):
                        raise self.error("Invalid unicode escape")
                    out.append(chr(int(digits, 16)))
                    self.pos += 5
                    continue
                out.append(_ESCAPES.get(escaped, escaped))
                self.pos += 1
                continue
            out.append(char)
            self.pos += 1

    def parse_array(self, depth: int) -> ArrayLiteral:
        self.expect("[")
        items: List[Expression] = []
        while True:
            self.skip_ws()
            if self.peek("]"):
                self.pos += 1
                return ArrayLiteral(items=tuple(items))
            items.append(self.parse_expression(depth + 1))
            self.skip_ws()
            if self.peek(","):
                self.pos += 1
            elif not self.peek("]"):
                raise self.error("Expected ',' or ']' in array")

    def parse_object(self, depth: int) -> ObjectLiteral:
        self.expect("{")
        entries: List[Tuple[str, Expression]] = []
        while True:
            self.skip_ws()
            if self.peek("}"):
                self.pos += 1
                return ObjectLiteral(entries=tuple(entries))
            if self.peek('"') or self.peek("'"):
                key = self.parse_string(allow_escapes=True)
            else:
                number = _NUMBER.match(self.source, self.pos, self.end)
                if number and self.source[self.pos].isdigit():
                    self.pos = number.end()
                    key = number.group(0)
                else:
                    key = self.match(_IDENT, "object key")
            self.skip_ws()
            if self.peek(":"):
                self.pos += 1
                value = self.parse_expression(depth + 1)
            else:
                # Shorthand {Chart} means {Chart: Chart}.
                value = Reference(key)
            entries.append((key, value))
            self.skip_ws()
            if self.peek(","):
                self.pos += 1
            elif not self.peek("}"):
                raise self.error("Expected ',' or '}' in object")


def parse_jsx(source: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Node:
    """Parse JSX source into an AST. Raises JsxSyntaxError on anything outside the grammar."""
    if not isinstance(source, str):
        raise TypeError(f"JSX source must be a string, got {type(source).__name__}")
    parser = JsxParser(source, max_depth=max_depth)
    try:
        return parser.parse()
    except RecursionError:
        raise parser.error("JSX nesting too deep to parse") from None
