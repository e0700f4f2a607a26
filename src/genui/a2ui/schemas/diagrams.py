from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import Field, model_validator

from .base import DataSchema, Number, OptionsSchema

MermaidTheme = Literal["default", "dark", "forest", "neutral"]


class MermaidData(DataSchema):
    diagram: str = Field(min_length=1)
    theme: Optional[MermaidTheme] = None


class MermaidOptions(OptionsSchema):
    theme: Optional[MermaidTheme] = None
    security_level: Optional[Literal["strict", "loose", "antiscript", "sandbox"]] = Field(
        default=None, alias="securityLevel"
    )
    start_on_load: Optional[bool] = Field(default=None, alias="startOnLoad")


class LatexEquation(DataSchema):
    id: Optional[str] = None
    equation: str = Field(min_length=1)
    display_mode: Optional[bool] = Field(default=None, alias="displayMode")
    label: Optional[str] = None


class LatexData(DataSchema):
    equations: Optional[List[LatexEquation]] = None
    equation: Optional[str] = None
    display_mode: Optional[bool] = Field(default=None, alias="displayMode")

    @model_validator(mode="after")
    def _require_equation(self) -> "LatexData":
        if not self.equation and not self.equations:
            raise ValueError("Must provide either equation or equations array")
        return self


class LatexOptions(OptionsSchema):
    display_mode: Optional[bool] = Field(default=None, alias="displayMode")
    throw_on_error: Optional[bool] = Field(default=None, alias="throwOnError")
    error_color: Optional[str] = Field(default=None, alias="errorColor")
    macros: Optional[Dict[str, str]] = None
    trust: Optional[bool] = None
    strict: Optional[Union[bool, Literal["warn", "ignore"]]] = None
    output: Optional[Literal["html", "mathml", "htmlAndMathml"]] = None
    fleqn: Optional[bool] = None
    leqno: Optional[bool] = None
    min_rule_thickness: Optional[Number] = Field(default=None, alias="minRuleThickness")


MERMAID_EXAMPLE = {"diagram": "graph TD\n  A[Start] --> B[Finish]"}
LATEX_EXAMPLE = {"equation": "E = mc^2", "displayMode": True}
