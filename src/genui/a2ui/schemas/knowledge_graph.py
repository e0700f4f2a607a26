from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import ConfigDict, Field

from .base import DataSchema, OptionsSchema

EntityType = Literal["person", "organization", "concept", "location", "event", "document", "custom"]


class GraphEntity(DataSchema):
    id: str
    label: str
    type: EntityType
    description: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None


class GraphRelationship(DataSchema):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    source: str
    target: str
    type: str
    label: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None
    bidirectional: Optional[bool] = None


class KnowledgeGraphData(DataSchema):
    entities: List[GraphEntity] = Field(min_length=1)
    relationships: List[GraphRelationship]


class KnowledgeGraphOptions(OptionsSchema):
    layout: Optional[Literal["force", "hierarchical", "radial", "manual"]] = None
    show_labels: Optional[bool] = Field(default=None, alias="showLabels")
    show_types: Optional[bool] = Field(default=None, alias="showTypes")
    interactive: Optional[bool] = None
    color_scheme: Optional[Dict[str, str]] = Field(default=None, alias="colorScheme")


KNOWLEDGE_GRAPH_EXAMPLE = {
    "entities": [
        {"id": "curie", "label": "Marie Curie", "type": "person"},
        {"id": "radium", "label": "Radium", "type": "concept"},
    ],
    "relationships": [
        {"id": "r1", "source": "curie", "target": "radium", "type": "discovered"},
    ],
}
