"""
Tolerant JSON for closed fences.

Models often emit near-JSON: trailing commas, comments, or hex colour
literals copied from JavaScript (0xff0000). `repair_json` fixes those outside
of string literals and leaves everything else alone.
"""

from __future__ import annotations

import json
import re
from typing import Any, Tuple

_HEX = re.compile(r"0[xX][0-9a-fA-F]+")

NESTING_TOO_DEEP = "JSON nesting too deep"


def _skip_insignificant(text: str, i: int) -> int:
    """Index of the next character that is neither whitespace nor inside a comment."""
    length = len(text)
    while i < length:
        if text[i].isspace():
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = length if end < 0 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = length if end < 0 else end + 2
        else:
            break
    return i


def repair_json(text: str) -> str:
    out = []
    i = 0
    length = len(text)
    in_string = False
    while i < length:
        char = text[i]
        if in_string:
            out.append(char)
            if char == "\\" and i + 1 < length:
                out.append(text[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue

        if char == '"':
            in_string = True
            out.append(char)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = length if end < 0 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = length if end < 0 else end + 2
        elif char == ",":
            j = _skip_insignificant(text, i + 1)
            if j < length and text[j] in "]}":
                i += 1
            else:
                out.append(char)
                i += 1
        elif char == "0" and (i == 0 or not (text[i - 1].isalnum() or text[i - 1] in "._")):
            match = _HEX.match(text, i)
            if match:
                out.append(str(int(match.group(0), 16)))
                i = match.end()
            else:
                out.append(char)
                i += 1
        else:
            out.append(char)
            i += 1
    return "".join(out)


def loads_tolerant(text: str, tolerant: bool = True) -> Tuple[Any, None] | Tuple[None, str]:
    """
    Parse JSON, retrying once on a repaired copy.

    Returns (value, None) on success or (None, reason) with the strict
    parser's error message on failure.
    """
    try:
        return json.loads(text), None
    except json.JSONDecodeError as exc:
        reason = f"{exc.msg} at line {exc.lineno} column {exc.colno}"
    except RecursionError:
        return None, NESTING_TOO_DEEP
    except ValueError as exc:
        reason = str(exc)
    if tolerant:
        repaired = repair_json(text)
        if repaired != text:
            try:
                return json.loads(repaired), None
            except RecursionError:
                return None, NESTING_TOO_DEEP
            except ValueError:
                pass
    return None, reason
