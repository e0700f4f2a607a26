"""
GenUI Exception Hierarchy.

Inside the core, failures travel as data (validation results, error blocks,
fallback nodes). The exceptions below are raised only at API boundaries, or
caught at a render boundary and turned into a visible fallback.

Exception Hierarchy:
    GenUIError (base)
    ├── ProtocolError
    │   ├── StructuralError
    │   └── SchemaValidationError
    ├── ParseError
    │   ├── JsonFenceError
    │   └── JsxSyntaxError
    ├── RenderError
    │   └── JsxEvaluationError
    ├── StreamStateError
    ├── InvalidInputError (also a TypeError)
    ├── PersistenceError
    │   └── AuthorizationError
    └── ConfigurationError

    UnknownTypeWarning (UserWarning, logged only)
"""

from typing import Any, Dict, Optional, Sequence


class GenUIError(Exception):
    """Base exception for all genui errors.

    Attributes:
        context: Additional context dictionary
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}

        parts = [message]
        for key, value in self.context.items():
            if value is not None and not isinstance(value, (list, dict, tuple)):
                parts.append(f"{key}={value}")

        super().__init__(" | ".join(parts))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            **self.context,
        }


# ═══════════════════════════════════════════════════════════════════
# PROTOCOL ERRORS
# ═══════════════════════════════════════════════════════════════════

class ProtocolError(GenUIError):
    """Base class for A2UI envelope problems."""
    pass


class StructuralError(ProtocolError):
    """Message envelope is malformed.

    Raised when:
    - `surfaceUpdate` is missing or `components` is not an array
    - An entry has zero or several keys under `component`
    """

    def __init__(self, message: str, path: Optional[Sequence[str]] = None, **kwargs):
        self.path = list(path or [])
        context = kwargs.pop("context", {})
        context["path"] = ".".join(self.path) or "<root>"
        super().__init__(message, context=context, **kwargs)


class SchemaValidationError(ProtocolError):
    """A known component type carried a payload that fails its schema.

    Carries the full list of field errors so the caller can show all of them
    or feed them back to the model.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[Sequence[Any]] = None,
        component_id: Optional[str] = None,
        type_name: Optional[str] = None,
        **kwargs,
    ):
        self.errors = list(errors or [])
        self.component_id = component_id
        self.type_name = type_name
        context = kwargs.pop("context", {})
        context["component_id"] = component_id
        context["type_name"] = type_name
        context["error_count"] = len(self.errors)
        super().__init__(message, context=context, **kwargs)


# ═══════════════════════════════════════════════════════════════════
# PARSE ERRORS
# ═══════════════════════════════════════════════════════════════════

class ParseError(GenUIError):
    """A closed fence whose content could not be parsed."""

    kind = "parse"

    def __init__(self, message: str, **kwargs):
        context = kwargs.pop("context", {})
        context.setdefault("kind", self.kind)
        super().__init__(message, context=context, **kwargs)


class JsonFenceError(ParseError):
    """JSON fence content is not valid JSON, even after repair."""

    kind = "json-parse"


class JsxSyntaxError(ParseError):
    """JSX fence content does not match the restricted grammar."""

    kind = "jsx-parse"

    def __init__(self, message: str, offset: int = 0, line: int = 1, column: int = 1, **kwargs):
        self.offset = offset
        self.line = line
        self.column = column
        context = kwargs.pop("context", {})
        context.update({"line": line, "column": column})
        super().__init__(message, context=context, **kwargs)


# ═══════════════════════════════════════════════════════════════════
# RENDER ERRORS
# ═══════════════════════════════════════════════════════════════════

class RenderError(GenUIError):
    """A component's render logic failed. Caught at the block boundary."""
    pass


class JsxEvaluationError(RenderError):
    """A parsed JSX tree asked for something outside the allow-list."""
    pass


# ═══════════════════════════════════════════════════════════════════
# BOUNDARY ERRORS
# ═══════════════════════════════════════════════════════════════════

class StreamStateError(GenUIError):
    """A parser was used after it finished, or given a diverging snapshot."""
    pass


class InvalidInputError(GenUIError, TypeError):
    """An entry point received a value of the wrong type."""

    def __init__(self, message: str, expected: Optional[type] = None, actual: Any = None, **kwargs):
        context = kwargs.pop("context", {})
        if expected is not None:
            context["expected_type"] = expected.__name__
        context["actual_type"] = type(actual).__name__
        super().__init__(message, context=context, **kwargs)


class PersistenceError(GenUIError):
    """A generation store operation failed."""
    pass


class AuthorizationError(PersistenceError):
    """No signed-in user, or the record belongs to someone else."""
    pass


class ConfigurationError(GenUIError):
    """Runtime configuration could not be loaded."""
    pass


class UnknownTypeWarning(UserWarning):
    """A component type has no catalog entry. Rendered with a fallback, never raised."""
    pass
