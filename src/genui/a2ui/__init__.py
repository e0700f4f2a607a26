"""
A2UI protocol core: schemas, catalog, message validation and the surface reducer.
"""

from .protocol import (
    ComponentEntry,
    DataModelUpdate,
    FieldError,
    InvalidEntry,
    MessageValidation,
    format_path,
)
from .component_catalog import (
    CatalogEntry,
    ComponentCatalog,
    build_default_catalog,
    get_catalog_prompt,
    get_component_catalog,
    supported_component_types,
)
from .message_validator import build_validation_feedback, validate_message, validation_issues
from .surface_state import SurfaceEntry, SurfaceState, apply_message, apply_messages, empty_surface
from .registry_check import CatalogCheckReport, check_catalog_completeness

__all__ = [
    "CatalogCheckReport",
    "CatalogEntry",
    "ComponentCatalog",
    "ComponentEntry",
    "DataModelUpdate",
    "FieldError",
    "InvalidEntry",
    "MessageValidation",
    "SurfaceEntry",
    "SurfaceState",
    "apply_message",
    "apply_messages",
    "build_default_catalog",
    "build_validation_feedback",
    "check_catalog_completeness",
    "empty_surface",
    "format_path",
    "get_catalog_prompt",
    "get_component_catalog",
    "supported_component_types",
    "validate_message",
    "validation_issues",
]
