"""
Schema registry: component type name -> data/options validators and fallback payload.

Lookups never raise. An unknown type simply has no schema.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .base import ComponentSchema, DataSchema, OptionsSchema, validate_payload
from .diagrams import LATEX_EXAMPLE, MERMAID_EXAMPLE, LatexData, LatexOptions, MermaidData, MermaidOptions
from .documents import (
    CODE_EDITOR_EXAMPLE,
    JSON_VIEWER_EXAMPLE,
    MARKDOWN_EXAMPLE,
    SVG_PREVIEW_EXAMPLE,
    CodeEditorData,
    CodeEditorOptions,
    JSONViewerData,
    JSONViewerOptions,
    MarkdownData,
    MarkdownOptions,
    SVGPreviewData,
    SVGPreviewOptions,
)
from .knowledge_graph import KNOWLEDGE_GRAPH_EXAMPLE, KnowledgeGraphData, KnowledgeGraphOptions
from .layout import CARD_EXAMPLE, STACK_EXAMPLE, CardData, StackData
from .maps import MAPS_EXAMPLE, MapsData, MapsOptions
from .timeline import TIMELINE_EXAMPLE, TimelineData, TimelineOptions

BUILTIN_SCHEMAS: Tuple[ComponentSchema, ...] = (
    ComponentSchema("Timeline", TimelineData, TimelineOptions, TIMELINE_EXAMPLE, {"height": 500}),
    ComponentSchema("Maps", MapsData, MapsOptions, MAPS_EXAMPLE, {"height": 400}),
    ComponentSchema("Mermaid", MermaidData, MermaidOptions, MERMAID_EXAMPLE),
    ComponentSchema("Latex", LatexData, LatexOptions, LATEX_EXAMPLE),
    ComponentSchema("Markdown", MarkdownData, MarkdownOptions, MARKDOWN_EXAMPLE, {"mode": "preview"}),
    ComponentSchema("CodeEditor", CodeEditorData, CodeEditorOptions, CODE_EDITOR_EXAMPLE),
    ComponentSchema("SVGPreview", SVGPreviewData, SVGPreviewOptions, SVG_PREVIEW_EXAMPLE),
    ComponentSchema("JSONViewer", JSONViewerData, JSONViewerOptions, JSON_VIEWER_EXAMPLE),
    ComponentSchema("KnowledgeGraph", KnowledgeGraphData, KnowledgeGraphOptions, KNOWLEDGE_GRAPH_EXAMPLE),
    ComponentSchema("Card", CardData, example_data=CARD_EXAMPLE),
    ComponentSchema("Stack", StackData, example_data=STACK_EXAMPLE),
)

SCHEMA_REGISTRY: Mapping[str, ComponentSchema] = MappingProxyType(
    {schema.type_name: schema for schema in BUILTIN_SCHEMAS}
)


def get_component_schema(type_name: str) -> Optional[ComponentSchema]:
    return SCHEMA_REGISTRY.get(type_name)


def supported_schema_types() -> list[str]:
    return list(SCHEMA_REGISTRY.keys())


__all__ = [
    "BUILTIN_SCHEMAS",
    "ComponentSchema",
    "DataSchema",
    "OptionsSchema",
    "SCHEMA_REGISTRY",
    "get_component_schema",
    "supported_schema_types",
    "validate_payload",
]
