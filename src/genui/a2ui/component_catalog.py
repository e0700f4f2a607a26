"""
Component catalog: the registry pairing each component type with its schema,
its prompt description and its render binding.

A `ComponentCatalog` is an explicit value. Validator and renderer take one as an
argument and fall back to the lazily built process default from
`get_component_catalog()`.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, Union

from pydantic import BaseModel

from genui.a2ui.protocol import FieldError
from genui.a2ui.schemas import BUILTIN_SCHEMAS, ComponentSchema, validate_payload
from genui.config.settings import get_genui_runtime_settings
from genui.render.nodes import ComponentNode, RenderedNode

logger = logging.getLogger(__name__)

COMPONENT_CATALOG_VERSION = "0.8"

RenderBinding = Callable[[str, Dict[str, Any], Dict[str, Any], Tuple[RenderedNode, ...]], RenderedNode]

# Prompt-facing metadata for the built-in schemas.
STANDARD_COMPONENT_CATALOG: Dict[str, Dict[str, Any]] = {
    "Timeline": {
        "category": "temporal",
        "description": "Interactive chronological timeline of dated events with optional eras.",
    },
    "Maps": {
        "category": "geospatial",
        "description": "Interactive map with a center point, zoom level and labelled markers.",
    },
    "Mermaid": {
        "category": "diagrams",
        "description": "Flowcharts, sequence diagrams and other diagrams from Mermaid text.",
    },
    "Latex": {
        "category": "documents",
        "description": "Typeset mathematical equations written in LaTeX.",
    },
    "Markdown": {
        "category": "documents",
        "description": "Formatted markdown document with optional title.",
    },
    "CodeEditor": {
        "category": "documents",
        "description": "Syntax highlighted code viewer and editor.",
    },
    "SVGPreview": {
        "category": "media",
        "description": "Inline preview of an SVG image.",
    },
    "JSONViewer": {
        "category": "data",
        "description": "Collapsible tree view of a JSON value.",
    },
    "KnowledgeGraph": {
        "category": "data",
        "description": "Graph of typed entities and the relationships between them.",
    },
    "Card": {
        "category": "layout",
        "description": "Titled card with body text and an optional child component id.",
    },
    "Stack": {
        "category": "layout",
        "description": "Arranges other components, referenced by id, vertically or horizontally.",
    },
}

PROMPT_FORMAT = """Generate A2UI messages inside a ```json fence in this format:
{
  "surfaceUpdate": {
    "components": [
      { "id": "unique-id", "component": { "ComponentType": { "data": { ... }, "options": { ... } } } }
    ]
  }
}"""

PROMPT_RULES: Tuple[str, ...] = (
    "Always give every component a unique id; reuse an id only to update that component.",
    "Put exactly one component type under each `component` key.",
    "Put schema fields under `data`; `options` is optional display configuration.",
    "Numbers must be JSON numbers, never quoted strings.",
    "Dates use { year, month?, day? } objects.",
    "Map coordinates use { longitude, latitude }.",
    "Emit strict JSON: no comments, no trailing commas.",
)


def default_render_binding(type_name: str) -> RenderBinding:
    def _render(
        component_id: str,
        data: Dict[str, Any],
        options: Dict[str, Any],
        children: Tuple[RenderedNode, ...] = (),
    ) -> RenderedNode:
        return ComponentNode(
            type_name=type_name,
            component_id=component_id,
            data=data,
            options=options,
            children=tuple(children),
        )

    return _render


def _compact_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


@dataclass(frozen=True)
class CatalogEntry:
    type_name: str
    schema: Type[BaseModel]
    options_schema: Optional[Type[BaseModel]] = None
    description: str = ""
    category: str = "general"
    props: Tuple[str, ...] = ()
    example: Mapping[str, Any] = field(default_factory=dict)
    render: Optional[RenderBinding] = None
    describer: Optional[Callable[[], str]] = None

    @property
    def purpose(self) -> str:
        text = " ".join(self.description.split())
        return text.split(". ")[0].rstrip(".")

    def describe(self) -> str:
        """Prompt text for this type: name, purpose, props and a minimal example."""
        if self.describer is not None:
            return self.describer()
        lines = [f"### {self.type_name}", f"Purpose: {self.purpose}."]
        if self.props:
            lines.append(f"Props: {', '.join(self.props)}")
        if self.example:
            lines.append(f"Example: {_compact_json(self.example)}")
        return "\n".join(lines)

    def summary_line(self) -> str:
        key_props = ", ".join(self.props[:3])
        line = f"- {self.type_name}: {self.purpose}. Props: {key_props}"
        if self.example:
            line += f"\n  Example: {_compact_json(self.example)}"
        return line

    def validate(
        self,
        data: Any,
        options: Any = None,
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]], List[FieldError]]:
        """Validate data and options, collecting the errors of both."""
        clean_data, errors = validate_payload(self.schema, data)
        if self.options_schema is None:
            if options is not None and not isinstance(options, Mapping):
                return clean_data, None, errors + [FieldError(("options",), "options must be an object")]
            return clean_data, dict(options or {}), errors
        clean_options, option_errors = validate_payload(self.options_schema, {} if options is None else options)
        return clean_data, clean_options, errors + [error.prefixed("options") for error in option_errors]

    def renderer(self) -> RenderBinding:
        return self.render or default_render_binding(self.type_name)


class ComponentCatalog:
    """Registry of component types. Lookups never raise."""

    def __init__(self, entries: Optional[Iterable[CatalogEntry]] = None):
        self._entries: Dict[str, CatalogEntry] = {}
        self._lock = threading.Lock()
        for entry in entries or ():
            self._entries[entry.type_name] = entry

    def register(
        self,
        type_name: str,
        schema: Type[BaseModel],
        options_schema: Optional[Type[BaseModel]] = None,
        describe: Union[str, Callable[[], str], None] = None,
        *,
        category: str = "general",
        props: Optional[Sequence[str]] = None,
        example: Optional[Mapping[str, Any]] = None,
        render: Optional[RenderBinding] = None,
    ) -> CatalogEntry:
        """
        Register a component type. Registering an existing name replaces it.

        Args:
            type_name: The name used under `component` on the wire.
            schema: Pydantic model for `data`.
            options_schema: Pydantic model for `options`, if any.
            describe: One-line description, or a callable returning the full prompt text.
            category: Grouping used by category-filtered prompts.
            props: Prop names listed in the prompt. Defaults to the schema's fields.
            example: A full component entry shown in the prompt.
            render: Render binding. Defaults to a plain component node.

        Returns:
            The stored CatalogEntry.
        """
        type_name = str(type_name or "").strip()
        if not type_name:
            raise ValueError("Component type name must be a non-empty string")

        description = describe if isinstance(describe, str) else ""
        describer = describe if callable(describe) else None
        if props is None:
            props = [info.alias or name for name, info in schema.model_fields.items()]

        entry = CatalogEntry(
            type_name=type_name,
            schema=schema,
            options_schema=options_schema,
            description=description,
            category=category,
            props=tuple(props),
            example=dict(example or {}),
            render=render,
            describer=describer,
        )
        with self._lock:
            replaced = type_name in self._entries
            self._entries[type_name] = entry
        if replaced:
            logger.info(f"Component type '{type_name}' re-registered; previous entry replaced")
        else:
            logger.debug(f"Component type '{type_name}' registered")
        return entry

    def register_schema(self, schema: ComponentSchema, **kwargs: Any) -> CatalogEntry:
        """Register a schema-registry record, filling prompt metadata from the standard table."""
        meta = STANDARD_COMPONENT_CATALOG.get(schema.type_name, {})
        example = {"id": f"{schema.type_name.lower()}-1", "component": {schema.type_name: {"data": schema.example_data}}}
        if schema.example_options:
            example["component"][schema.type_name]["options"] = schema.example_options
        kwargs.setdefault("describe", meta.get("description", schema.type_name))
        kwargs.setdefault("category", meta.get("category", "general"))
        kwargs.setdefault("example", example)
        return self.register(schema.type_name, schema.data_model, schema.options_model, **kwargs)

    def get(self, type_name: str) -> Optional[CatalogEntry]:
        if not isinstance(type_name, str):
            return None
        return self._entries.get(type_name)

    def has(self, type_name: str) -> bool:
        return isinstance(type_name, str) and type_name in self._entries

    def types(self) -> List[str]:
        return list(self._entries.keys())

    def entries(self) -> List[CatalogEntry]:
        return list(self._entries.values())

    def categories(self) -> List[str]:
        seen: List[str] = []
        for entry in self._entries.values():
            if entry.category not in seen:
                seen.append(entry.category)
        return seen

    def render_bindings(self) -> Dict[str, RenderBinding]:
        return {name: entry.renderer() for name, entry in self._entries.items()}

    def __contains__(self, type_name: object) -> bool:
        return isinstance(type_name, str) and self.has(type_name)

    def __len__(self) -> int:
        return len(self._entries)

    def prompt_catalog_text(self, categories: Optional[Sequence[str]] = None) -> str:
        """
        Full prompt text describing every registered type.

        Built fresh on each call so registrations show up immediately.
        """
        entries = self._filtered(categories)
        if not entries:
            return f"No components found for categories: {', '.join(categories or [])}"
        sections = [f"You can generate interactive UIs using {len(entries)} components:", ""]
        sections.append("\n\n".join(entry.describe() for entry in entries))
        sections.extend(["", PROMPT_FORMAT, "", "Important rules:"])
        sections.extend(f"{index}. {rule}" for index, rule in enumerate(PROMPT_RULES, start=1))
        return "\n".join(sections)

    def minimal_prompt_text(self, categories: Optional[Sequence[str]] = None) -> str:
        lines = ["# A2UI Components (Minimal)", ""]
        lines.extend(entry.summary_line() for entry in self._filtered(categories))
        lines.extend(["", "Use surfaceUpdate to create or update components by id."])
        return "\n".join(lines)

    def _filtered(self, categories: Optional[Sequence[str]]) -> List[CatalogEntry]:
        entries = self.entries()
        if categories:
            wanted = {str(item) for item in categories}
            entries = [entry for entry in entries if entry.category in wanted]
        return entries


def estimate_tokens(text: str) -> int:
    return len(text) // 4


def build_default_catalog() -> ComponentCatalog:
    catalog = ComponentCatalog()
    for schema in BUILTIN_SCHEMAS:
        catalog.register_schema(schema)
    return catalog


_DEFAULT_CATALOG: Optional[ComponentCatalog] = None
_DEFAULT_CATALOG_LOCK = threading.Lock()


def get_component_catalog() -> ComponentCatalog:
    global _DEFAULT_CATALOG
    if _DEFAULT_CATALOG is None:
        with _DEFAULT_CATALOG_LOCK:
            if _DEFAULT_CATALOG is None:
                _DEFAULT_CATALOG = build_default_catalog()
                logger.info(f"Default component catalog initialized with {len(_DEFAULT_CATALOG)} types")
    return _DEFAULT_CATALOG


def get_catalog_prompt(catalog: Optional[ComponentCatalog] = None, level: Optional[str] = None) -> str:
    """Prompt text for the LLM. `level` is "full" or "minimal"; defaults to runtime settings."""
    catalog = catalog if catalog is not None else get_component_catalog()
    level = level or get_genui_runtime_settings().catalog_prompt_level
    if level == "minimal":
        text = catalog.minimal_prompt_text()
    else:
        text = catalog.prompt_catalog_text()
    logger.debug(f"Catalog prompt ({level}, {len(catalog)} types): ~{estimate_tokens(text)} tokens")
    return text


def supported_component_types() -> List[str]:
    return get_component_catalog().types()
