"""
End-to-end scenarios: streamed text in, rendered nodes and surface state out.
"""

import json

import pytest

from genui import HybridRenderer, StreamingContentParser, apply_message, empty_surface, validate_message
from genui.a2ui.component_catalog import build_default_catalog
from genui.a2ui.message_validator import raise_for_invalid
from genui.common.exceptions import SchemaValidationError
from genui.config.settings import GenUIRuntimeSettings
from genui.render.nodes import ComponentNode, UnknownTypeNode, ValidationErrorNode
from genui.stream.content_parser import parse_content

FENCE = "`" * 3


def timeline(year):
    return {
        "surfaceUpdate": {
            "components": [
                {
                    "id": "t1",
                    "component": {
                        "Timeline": {"data": {"events": [{"start_date": {"year": year}, "text": {"headline": "H"}}]}}
                    },
                }
            ]
        }
    }


def fenced(message):
    return f"{FENCE}json\n{json.dumps(message)}\n{FENCE}\n"


@pytest.fixture
def catalog():
    return build_default_catalog()


@pytest.fixture
def renderer(catalog):
    return HybridRenderer(catalog=catalog, settings=GenUIRuntimeSettings())


def test_valid_timeline_renders_component(catalog, renderer):
    blocks = parse_content(f"Here is the history:\n{fenced(timeline(2020))}")
    assert [block.kind for block in blocks] == ["text", "a2ui"]

    nodes = renderer.render(blocks)
    component = nodes[1].children[0]
    assert isinstance(component, ComponentNode)
    assert component.type_name == "Timeline"
    assert component.data["events"][0]["text"]["headline"] == "H"

    state = apply_message(empty_surface(), validate_message(blocks[1].message, catalog))
    assert state.ids() == ["t1"]


def test_string_year_reports_exact_path(catalog, renderer):
    blocks = parse_content(fenced(timeline("2020")))
    result = validate_message(blocks[0].message, catalog)
    assert result.valid == ()
    assert result.invalid[0].errors[0].dotted == "events.[0].start_date.year"

    node = renderer.render(blocks)[0].children[0]
    assert isinstance(node, ValidationErrorNode)
    assert node.component_id == "t1"

    with pytest.raises(SchemaValidationError):
        raise_for_invalid(result)


def test_unknown_type_keeps_slot_until_registered(catalog, renderer):
    bar = {"surfaceUpdate": {"components": [{"id": "b1", "component": {"BarChart": {"data": {"bars": [3, 1]}}}}]}}
    result = validate_message(bar, catalog)
    assert result.invalid == ()

    node = renderer.render_message(bar).children[0]
    assert isinstance(node, UnknownTypeNode)
    assert node.type_name == "BarChart"

    state = apply_message(empty_surface(), result)
    assert state.get("b1").known is False
    markdown = {"surfaceUpdate": {"components": [{"id": "b1", "component": {"Markdown": {"data": {"content": "now"}}}}]}}
    upgraded = apply_message(state, validate_message(markdown, catalog))
    assert upgraded.get("b1").known is True
    assert upgraded.get("b1").sequence == state.get("b1").sequence


def test_fence_split_across_chunks():
    body = json.dumps(timeline(2020))
    parser = StreamingContentParser(settings=GenUIRuntimeSettings())
    emitted = []
    for chunk in (FENCE, f"json\n{body}", f"\n{FENCE}"):
        emitted.extend(parser.feed(chunk))
    assert emitted == []
    emitted.extend(parser.finish())
    assert [block.kind for block in emitted] == ["a2ui"]
    assert emitted[0].message == timeline(2020)


def test_duplicate_ids_last_wins(catalog):
    message = {
        "surfaceUpdate": {
            "components": [
                {"id": "x", "component": {"Markdown": {"data": {"content": "first"}}}},
                {"id": "x", "component": {"Markdown": {"data": {"content": "second"}}}},
            ]
        }
    }
    state = apply_message(empty_surface(), validate_message(message, catalog))
    assert state.ids() == ["x"]
    assert state.get("x").data == {"content": "second"}
