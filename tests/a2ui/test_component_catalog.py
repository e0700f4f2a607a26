"""
Tests for the component catalog.

Tests cover:
- Registration, replacement and lookups
- Prompt text generation (full, minimal, category-filtered)
- Catalog round-trip: every example validates and renders
- Completeness checks
"""

import json
import logging

import pytest
from pydantic import BaseModel

from genui.a2ui.component_catalog import (
    PROMPT_FORMAT,
    ComponentCatalog,
    build_default_catalog,
    get_catalog_prompt,
    get_component_catalog,
)
from genui.a2ui.message_validator import validate_message
from genui.a2ui.registry_check import check_catalog_completeness
from genui.a2ui.schemas.base import DataSchema
from genui.render.hybrid_renderer import HybridRenderer
from genui.render.nodes import ComponentNode, TextNode


# ============================================================
# Test Data
# ============================================================

class GaugeData(DataSchema):
    value: float
    label: str = ""


GAUGE_EXAMPLE = {"id": "gauge-1", "component": {"Gauge": {"data": {"value": 0.4, "label": "Load"}}}}


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def catalog():
    return build_default_catalog()


@pytest.fixture
def make_catalog():
    """Factory for a catalog holding only the given registrations."""
    def _make(*registrations):
        built = ComponentCatalog()
        for kwargs in registrations:
            built.register(**kwargs)
        return built
    return _make


@pytest.fixture
def gauge_registration():
    return {
        "type_name": "Gauge",
        "schema": GaugeData,
        "describe": "Radial gauge showing one value between 0 and 1.",
        "category": "data",
        "example": GAUGE_EXAMPLE,
    }


# ============================================================
# Registration Tests
# ============================================================

class TestRegistration:
    """register / get / has."""

    def test_default_catalog_has_builtins(self, catalog):
        assert catalog.types()[:2] == ["Timeline", "Maps"]
        assert len(catalog) == 11
        assert "Stack" in catalog

    def test_lookups_never_raise(self, catalog):
        assert catalog.get("BarChart") is None
        assert catalog.has("BarChart") is False
        assert catalog.get(None) is None
        assert catalog.has(42) is False

    def test_register_new_type(self, make_catalog, gauge_registration):
        built = make_catalog(gauge_registration)
        entry = built.get("Gauge")
        assert entry is not None
        assert entry.props == ("value", "label")
        assert entry.category == "data"

    def test_reregister_replaces_and_logs(self, make_catalog, gauge_registration, caplog):
        built = make_catalog(gauge_registration)
        with caplog.at_level(logging.INFO, logger="genui"):
            built.register(**{**gauge_registration, "describe": "Updated gauge."})
        assert built.get("Gauge").description == "Updated gauge."
        assert len(built) == 1
        assert any("re-registered" in record.getMessage() for record in caplog.records)

    def test_register_requires_name(self, make_catalog):
        with pytest.raises(ValueError):
            make_catalog({"type_name": "  ", "schema": GaugeData})

    def test_registration_order_kept(self, catalog, gauge_registration):
        catalog.register(**gauge_registration)
        assert catalog.types()[-1] == "Gauge"

    def test_default_catalog_is_shared(self):
        assert get_component_catalog() is get_component_catalog()


# ============================================================
# Prompt Text Tests
# ============================================================

class TestPromptText:
    """Prompt generation from the live catalog."""

    def test_full_prompt_lists_every_type(self, catalog):
        text = catalog.prompt_catalog_text()
        for type_name in catalog.types():
            assert f"### {type_name}" in text
        assert PROMPT_FORMAT in text
        assert "Important rules:" in text

    def test_describe_embeds_compact_example(self, catalog):
        entry = catalog.get("Timeline")
        description = entry.describe()
        assert description.startswith("### Timeline")
        assert json.dumps(dict(entry.example), separators=(",", ":")) in description

    def test_prompt_reflects_new_registration(self, catalog, gauge_registration):
        assert "### Gauge" not in catalog.prompt_catalog_text()
        catalog.register(**gauge_registration)
        assert "### Gauge" in catalog.prompt_catalog_text()

    def test_custom_describer(self, make_catalog, gauge_registration):
        built = make_catalog({**gauge_registration, "describe": lambda: "GAUGE PROMPT"})
        assert "GAUGE PROMPT" in built.prompt_catalog_text()

    def test_category_filter(self, catalog):
        text = catalog.prompt_catalog_text(categories=["layout"])
        assert "### Card" in text
        assert "### Stack" in text
        assert "### Timeline" not in text

    def test_category_filter_without_matches(self, catalog):
        assert catalog.prompt_catalog_text(categories=["nothing"]).startswith("No components found")

    def test_minimal_prompt_is_shorter(self, catalog):
        minimal = catalog.minimal_prompt_text()
        assert "- Timeline:" in minimal
        assert len(minimal) < len(catalog.prompt_catalog_text())

    def test_minimal_prompt_carries_examples(self, catalog):
        minimal = catalog.minimal_prompt_text()
        for entry in catalog.entries():
            example = json.dumps(dict(entry.example), ensure_ascii=False, separators=(",", ":"))
            assert f"- {entry.type_name}:" in minimal
            assert f"Example: {example}" in minimal

    def test_get_catalog_prompt_levels(self, catalog):
        assert get_catalog_prompt(catalog, level="minimal") == catalog.minimal_prompt_text()
        assert get_catalog_prompt(catalog, level="full") == catalog.prompt_catalog_text()

    def test_empty_catalog_is_respected(self):
        empty = ComponentCatalog()
        assert get_catalog_prompt(empty, level="full").startswith("No components found")


# ============================================================
# Round-trip Tests
# ============================================================

class TestCatalogRoundTrip:
    """Each type's example validates and renders to a component node."""

    @pytest.mark.parametrize("type_name", build_default_catalog().types())
    def test_example_validates_and_renders(self, catalog, type_name):
        example = catalog.get(type_name).example
        result = validate_message({"surfaceUpdate": {"components": [dict(example)]}}, catalog)
        assert result.ok
        assert [entry.type_name for entry in result.valid] == [type_name]

        fragment = HybridRenderer(catalog=catalog).render_message({"surfaceUpdate": {"components": [dict(example)]}})
        assert len(fragment.children) == 1
        node = fragment.children[0]
        assert isinstance(node, ComponentNode)
        assert node.type_name == type_name
        assert node.component_id == example["id"]

    def test_custom_render_binding_used(self, make_catalog, gauge_registration):
        built = make_catalog(
            {**gauge_registration, "render": lambda cid, data, options, children: TextNode(text=f"{data['value']:.0%}")}
        )
        fragment = HybridRenderer(catalog=built).render_message({"surfaceUpdate": {"components": [GAUGE_EXAMPLE]}})
        assert fragment.children == (TextNode(text="40%"),)


# ============================================================
# Completeness Tests
# ============================================================

class TestCompletenessCheck:
    """check_catalog_completeness."""

    def test_default_catalog_complete(self, catalog):
        report = check_catalog_completeness(catalog)
        assert report.ok, report.summary()
        assert report.checked == 11

    def test_missing_example_and_description(self, make_catalog):
        class Bare(BaseModel):
            x: int

        report = check_catalog_completeness(make_catalog({"type_name": "Bare", "schema": Bare}))
        problems = {issue.problem for issue in report.issues}
        assert problems == {"missing description", "missing example"}
        assert not report.ok

    def test_example_failing_its_schema(self, make_catalog, gauge_registration):
        broken = {"id": "g", "component": {"Gauge": {"data": {"value": "high"}}}}
        report = check_catalog_completeness(make_catalog({**gauge_registration, "example": broken}))
        assert len(report.issues) == 1
        assert report.issues[0].problem.startswith("example fails validation")
        assert "value" in report.summary()
