"""Completeness check over a component catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from genui.a2ui.component_catalog import ComponentCatalog, get_component_catalog
from genui.a2ui.message_validator import validate_message


@dataclass(frozen=True)
class CatalogIssue:
    type_name: str
    problem: str


@dataclass(frozen=True)
class CatalogCheckReport:
    checked: int = 0
    issues: List[CatalogIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def summary(self) -> str:
        if self.ok:
            return f"{self.checked} component types registered, all complete"
        lines = [f"{len(self.issues)} issue(s) across {self.checked} component types:"]
        lines.extend(f"- {issue.type_name}: {issue.problem}" for issue in self.issues)
        return "\n".join(lines)


def check_catalog_completeness(catalog: Optional[ComponentCatalog] = None) -> CatalogCheckReport:
    """
    Check that every entry can brief the model and validate its own example.

    An entry is incomplete when its description or example is missing, or
    when the example does not pass the entry's own schema.
    """
    catalog = catalog if catalog is not None else get_component_catalog()
    issues: List[CatalogIssue] = []
    for entry in catalog.entries():
        if entry.schema is None:
            issues.append(CatalogIssue(entry.type_name, "missing data schema"))
            continue
        if not entry.description and entry.describer is None:
            issues.append(CatalogIssue(entry.type_name, "missing description"))
        if not entry.example:
            issues.append(CatalogIssue(entry.type_name, "missing example"))
            continue
        result = validate_message({"surfaceUpdate": {"components": [dict(entry.example)]}}, catalog)
        if result.invalid:
            details = "; ".join(
                f"{error.dotted or '<root>'}: {error.message}" for item in result.invalid for error in item.errors
            )
            issues.append(CatalogIssue(entry.type_name, f"example fails validation ({details})"))
        elif any(item.type_name != entry.type_name for item in result.valid):
            issues.append(CatalogIssue(entry.type_name, "example uses a different component type"))
    return CatalogCheckReport(checked=len(catalog), issues=issues)
