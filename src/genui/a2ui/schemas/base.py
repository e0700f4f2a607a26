from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any, Dict, List, Optional, Tuple, Type, Union
from urllib.parse import urlparse

from pydantic import AfterValidator, BaseModel, ConfigDict, StrictFloat, StrictInt, ValidationError

from genui.a2ui.protocol import FieldError

# Numbers are strict: "2020" is not a year. Ints are accepted where floats are.
Number = StrictFloat
Integer = StrictInt
Dimension = Union[StrictFloat, str]


class DataSchema(BaseModel):
    """Component data. Unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class OptionsSchema(BaseModel):
    """Component options. Unknown keys pass through to the renderer."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class EmptyOptions(OptionsSchema):
    pass


def check_url(value: str) -> str:
    parsed = urlparse(value)
    if not parsed.scheme or not (parsed.netloc or parsed.scheme == "data"):
        raise ValueError("Invalid url")
    return value


Url = Annotated[str, AfterValidator(check_url)]


@dataclass(frozen=True)
class ComponentSchema:
    """Validation pair and fallback payload for one component type."""

    type_name: str
    data_model: Type[BaseModel]
    options_model: Type[BaseModel] = EmptyOptions
    example_data: Dict[str, Any] = field(default_factory=dict)
    example_options: Dict[str, Any] = field(default_factory=dict)

    def field_names(self) -> List[str]:
        return [info.alias or name for name, info in self.data_model.model_fields.items()]

    def validate_data(self, payload: Any) -> Tuple[Optional[Dict[str, Any]], List[FieldError]]:
        return validate_payload(self.data_model, payload)

    def validate_options(self, payload: Any) -> Tuple[Optional[Dict[str, Any]], List[FieldError]]:
        return validate_payload(self.options_model, payload)


def _loc_to_path(loc: Tuple[Union[str, int], ...]) -> Tuple[str, ...]:
    return tuple(f"[{part}]" if isinstance(part, int) else str(part) for part in loc)


def validate_payload(
    model: Type[BaseModel],
    payload: Any,
) -> Tuple[Optional[Dict[str, Any]], List[FieldError]]:
    """
    Validate `payload` against `model` without raising.

    Returns the normalized payload and an empty list, or None and every field
    error pydantic reported.
    """
    try:
        value = model.model_validate(payload)
    except ValidationError as exc:
        errors = [
            FieldError(path=_loc_to_path(tuple(item.get("loc", ()))), message=str(item.get("msg", "invalid")))
            for item in exc.errors()
        ]
        return None, errors
    return value.model_dump(mode="json", by_alias=True, exclude_unset=True), []
