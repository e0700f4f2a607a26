"""
Tests for evaluating parsed JSX against component bindings.
"""

import pytest

from genui.common.exceptions import JsxEvaluationError
from genui.jsx import JsxEvaluator, evaluate_jsx, parse_jsx
from genui.render.nodes import ComponentNode, ElementNode, FragmentNode, TextNode, UnknownTypeNode


@pytest.fixture
def bindings():
    """A binding that records what it was called with."""
    calls = []

    def badge(props, children):
        calls.append((props, children))
        return ComponentNode(type_name="Badge", data=dict(props), children=children)

    return {"Badge": badge, "calls": calls}


def evaluate(source, bindings=None):
    return evaluate_jsx(parse_jsx(source), bindings)


class TestResolution:
    """Bindings, intrinsic tags and the unknown fallback."""

    def test_intrinsic_elements(self):
        node = evaluate('<div className="box"><strong>Hi</strong></div>')
        assert node == ElementNode(
            tag="div",
            props={"className": "box"},
            children=(ElementNode(tag="strong", children=(TextNode("Hi"),)),),
        )

    def test_binding_receives_props_and_children(self, bindings):
        node = evaluate('<Badge label="new" level={2}>x</Badge>', {"Badge": bindings["Badge"]})
        assert node == ComponentNode(type_name="Badge", data={"label": "new", "level": 2}, children=(TextNode("x"),))
        assert bindings["calls"] == [({"label": "new", "level": 2}, (TextNode("x"),))]

    def test_binding_shadows_intrinsic(self):
        node = evaluate("<p>x</p>", {"p": lambda props, children: TextNode("bound")})
        assert node == TextNode("bound")

    def test_unknown_element_falls_back(self):
        node = evaluate('<Widget id="w1" size={2} />')
        assert node == UnknownTypeNode(type_name="Widget", component_id="w1", raw={"props": {"id": "w1", "size": 2}})

    def test_reference_child_uses_binding(self, bindings):
        node = evaluate("<div>{Badge}</div>", {"Badge": bindings["Badge"]})
        assert node.children == (ComponentNode(type_name="Badge"),)

    def test_unknown_reference_rejected(self):
        with pytest.raises(JsxEvaluationError, match="Unknown identifier"):
            evaluate("<div>{Chart}</div>")

    def test_fragment_and_literal_children(self):
        node = evaluate("<>{42}{2.0}{true}{null}</>")
        assert node == FragmentNode(children=(TextNode("42"), TextNode("2"), TextNode(""), TextNode("")))

    def test_evaluator_instance_reusable(self, bindings):
        evaluator = JsxEvaluator({"Badge": bindings["Badge"]})
        tree = parse_jsx("<Badge />")
        assert evaluator.evaluate(tree) == evaluator.evaluate(tree)
        assert evaluator.value(parse_jsx('<p data={[1, {"a": "b"}]} />').attribute("data")) == [1, {"a": "b"}]


class TestSafety:
    """Nothing executable survives evaluation."""

    @pytest.mark.parametrize(
        "source",
        [
            '<button onClick="steal()">Go</button>',
            '<div onMouseOver={"x"} />',
            '<div dangerouslySetInnerHTML={{__html: "<script></script>"}} />',
            '<input ref="field" />',
            '<a href="javascript:alert(1)">x</a>',
            '<img src=" JavaScript:alert(1)" />',
            '<a href="data:text/html;base64,AAAA">x</a>',
        ],
    )
    def test_rejected_props(self, source):
        with pytest.raises(JsxEvaluationError):
            evaluate(source)

    def test_safe_urls_and_lowercase_on_props_allowed(self):
        node = evaluate('<a href="https://example.com" one="1">x</a>')
        assert node.props == {"href": "https://example.com", "one": "1"}
