"""
A2UI message validation.

`validate_message` never raises. Every problem comes back as data: a single
root error when the envelope itself is unusable, otherwise one `InvalidEntry`
per failing component with every field error collected. Entries are
independent; one bad entry never hides the others.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from genui.a2ui.component_catalog import ComponentCatalog, get_component_catalog
from genui.a2ui.protocol import (
    COMPONENTS_KEY,
    DATA_MODEL_OPERATIONS,
    DATA_MODEL_UPDATE_KEY,
    SURFACE_UPDATE_KEY,
    ComponentEntry,
    DataModelUpdate,
    FieldError,
    InvalidEntry,
    MessageValidation,
    component_type_of,
)
from genui.common.exceptions import SchemaValidationError, StructuralError, UnknownTypeWarning

logger = logging.getLogger(__name__)


def _root_failure(raw: Any, message: str) -> MessageValidation:
    invalid = InvalidEntry(
        entry=raw,
        errors=(FieldError(path=(), message=message),),
        kind="structural",
        scope="root",
    )
    return MessageValidation(invalid=(invalid,), order=(("invalid", 0),))


def _structural(item: Any, index: int, path: Tuple[str, ...], message: str) -> InvalidEntry:
    component_id = item.get("id") if isinstance(item, Mapping) else None
    return InvalidEntry(
        entry=item,
        errors=(FieldError(path=path, message=message),),
        kind="structural",
        component_id=component_id if isinstance(component_id, str) else None,
        type_name=component_type_of(item),
        index=index,
    )


def _extract_child_refs(item: Mapping[str, Any], data: Mapping[str, Any]) -> Tuple[str, ...]:
    refs: List[str] = []

    def _add(value: Any) -> None:
        if isinstance(value, str) and value.strip() and value.strip() not in refs:
            refs.append(value.strip())

    for source in (item.get("children"), data.get("children")):
        if isinstance(source, list):
            for value in source:
                _add(value)
    _add(data.get("child"))
    return tuple(refs)


def _split_payload(payload: Mapping[str, Any]) -> Tuple[Any, Any]:
    # Flat props (no "data" key) are accepted and treated as the data object.
    if "data" in payload:
        data = payload.get("data")
    else:
        data = {key: value for key, value in payload.items() if key != "options"}
    return data, payload.get("options")


def _validate_entry(
    item: Any,
    index: int,
    catalog: ComponentCatalog,
) -> Union[ComponentEntry, InvalidEntry]:
    if not isinstance(item, Mapping):
        return _structural(item, index, (str(index),), "Component entry must be an object")

    raw_id = item.get("id")
    component_id = raw_id.strip() if isinstance(raw_id, str) else ""
    slot = component_id or str(index)

    component = item.get("component")
    if not isinstance(component, Mapping):
        return _structural(item, index, (slot,), "Entry must have a 'component' object with exactly one type key")
    if len(component) != 1:
        return _structural(
            item,
            index,
            (slot,),
            f"'component' must have exactly one type key, found {len(component)}",
        )
    if not component_id:
        return _structural(item, index, (str(index),), "Component entry needs a non-empty string 'id'")

    type_name, payload = next(iter(component.items()))
    type_name = str(type_name)
    if not isinstance(payload, Mapping):
        return _structural(item, index, (slot, type_name), f"Payload for '{type_name}' must be an object")

    data, options = _split_payload(payload)
    children = _extract_child_refs(item, data if isinstance(data, Mapping) else {})

    entry = catalog.get(type_name)
    if entry is None:
        logger.debug(
            f"{UnknownTypeWarning.__name__}: unknown component type '{type_name}' (id={component_id}); "
            "deferred to fallback rendering"
        )
        return ComponentEntry(
            id=component_id,
            type_name=type_name,
            data=dict(data) if isinstance(data, Mapping) else {"value": data},
            options=dict(options) if isinstance(options, Mapping) else {},
            known=False,
            children=children,
        )

    clean_data, clean_options, errors = entry.validate(data, options)
    if errors:
        logger.warning(
            f"Component '{component_id}' of type '{type_name}' failed validation: "
            + "; ".join(f"{error.dotted or '<root>'}: {error.message}" for error in errors)
        )
        return InvalidEntry(
            entry=item,
            errors=tuple(errors),
            kind="schema",
            component_id=component_id,
            type_name=type_name,
            index=index,
        )

    return ComponentEntry(
        id=component_id,
        type_name=type_name,
        data=clean_data or {},
        options=clean_options or {},
        known=True,
        children=children,
    )


def _validate_data_model_update(raw: Mapping[str, Any]) -> Union[DataModelUpdate, InvalidEntry, None]:
    if DATA_MODEL_UPDATE_KEY not in raw:
        return None
    block = raw.get(DATA_MODEL_UPDATE_KEY)
    problem: Optional[str] = None
    if not isinstance(block, Mapping):
        problem = "dataModelUpdate must be an object"
    else:
        path = block.get("path")
        operation = block.get("operation", "set")
        if not isinstance(path, str) or not path.startswith("/"):
            problem = "dataModelUpdate.path must be a JSON pointer starting with '/'"
        elif operation not in DATA_MODEL_OPERATIONS:
            problem = f"dataModelUpdate.operation must be one of {', '.join(DATA_MODEL_OPERATIONS)}"
        else:
            return DataModelUpdate(path=path, value=block.get("value"), operation=operation)
    return InvalidEntry(
        entry=block,
        errors=(FieldError(path=(DATA_MODEL_UPDATE_KEY,), message=problem),),
        kind="structural",
        scope=DATA_MODEL_UPDATE_KEY,
    )


def validate_message(raw: Any, catalog: Optional[ComponentCatalog] = None) -> MessageValidation:
    """
    Validate an A2UI envelope.

    Args:
        raw: Parsed JSON, normally a dict with `surfaceUpdate.components`.
        catalog: Catalog used to tell known from unknown types. Defaults to the process catalog.

    Returns:
        MessageValidation with valid entries, invalid entries and their message order.
    """
    catalog = catalog if catalog is not None else get_component_catalog()

    if not isinstance(raw, Mapping):
        return _root_failure(raw, "A2UI message must be a JSON object")
    surface = raw.get(SURFACE_UPDATE_KEY)
    if not isinstance(surface, Mapping):
        return _root_failure(raw, "A2UI message must contain a 'surfaceUpdate' object")
    components = surface.get(COMPONENTS_KEY)
    if not isinstance(components, list):
        return _root_failure(raw, "'surfaceUpdate.components' must be an array")

    valid: List[ComponentEntry] = []
    invalid: List[InvalidEntry] = []
    order: List[Tuple[str, int]] = []
    for index, item in enumerate(components):
        outcome = _validate_entry(item, index, catalog)
        if isinstance(outcome, ComponentEntry):
            order.append(("valid", len(valid)))
            valid.append(outcome)
        else:
            order.append(("invalid", len(invalid)))
            invalid.append(outcome)

    data_model_update = _validate_data_model_update(raw)
    if isinstance(data_model_update, InvalidEntry):
        order.append(("invalid", len(invalid)))
        invalid.append(data_model_update)
        data_model_update = None

    return MessageValidation(
        valid=tuple(valid),
        invalid=tuple(invalid),
        data_model_update=data_model_update,
        order=tuple(order),
    )


def validation_issues(result: MessageValidation) -> List[Dict[str, Any]]:
    """Flatten invalid entries into code/path/message records."""
    issues: List[Dict[str, Any]] = []
    for item in result.invalid:
        code = "STRUCTURAL_ERROR" if item.kind == "structural" else "SCHEMA_VALIDATION_FAILED"
        for error in item.errors:
            issues.append(
                {
                    "code": code,
                    "component_id": item.component_id,
                    "type_name": item.type_name,
                    "path": error.dotted,
                    "message": error.message,
                }
            )
    return issues


def build_validation_feedback(result: MessageValidation) -> str:
    """
    Text for the next LLM turn so the model can correct its own output.

    Returns an empty string when the message had no invalid entries.
    """
    issues = validation_issues(result)
    if not issues:
        return ""
    lines = ["The previous A2UI message had errors. Fix them and resend the affected components:"]
    for issue in issues:
        where = issue["component_id"] or "message"
        if issue["type_name"]:
            where = f"{where} ({issue['type_name']})"
        path = issue["path"] or "<root>"
        lines.append(f"- [{issue['code']}] {where} at {path}: {issue['message']}")
    return "\n".join(lines)


def raise_for_invalid(result: MessageValidation) -> None:
    """Raise the first failure as an exception, for callers that want strict handling."""
    for item in result.invalid:
        if item.kind == "structural":
            first = item.errors[0]
            raise StructuralError(first.message, path=first.path)
        raise SchemaValidationError(
            f"Component '{item.component_id}' failed schema validation",
            errors=item.errors,
            component_id=item.component_id,
            type_name=item.type_name,
        )
