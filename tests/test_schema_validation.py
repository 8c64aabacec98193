"""Tests for the render-tree schemas.

These verify that Element/Text models validate their fields, stay
immutable, and dump to the plain structure handed to serializers.
"""

import pytest
from pydantic import ValidationError

from pagelang.schemas import VARIANT_FIELDS, Element, Text, resolve_variant


class TestRenderTree:

    def test_nested_dump(self):
        tree = Element(tag="ul", children=(Element(tag="li", children=(Text(value="one"),)),))
        assert tree.model_dump(mode="json") == {
            "kind": "element",
            "tag": "ul",
            "children": [
                {"kind": "element", "tag": "li", "children": [{"kind": "text", "value": "one"}]},
            ],
        }

    def test_validate_from_dict(self):
        tree = Element.model_validate(
            {"tag": "p", "children": [{"kind": "text", "value": "hi"}, {"kind": "element", "tag": "br"}]}
        )
        assert tree.children == (Text(value="hi"), Element(tag="br"))

    def test_frozen(self):
        node = Text(value="x")
        with pytest.raises(ValidationError):
            node.value = "y"

    def test_hashable_and_structural(self):
        a = Element(tag="p", children=(Text(value="x"),))
        b = Element(tag="p", children=(Text(value="x"),))
        assert a == b
        assert hash(a) == hash(b)

    def test_empty_tag_fails(self):
        with pytest.raises(ValidationError):
            Element(tag="")

    def test_text_requires_value(self):
        with pytest.raises(ValidationError):
            Text()


class TestVariants:

    @pytest.mark.parametrize("written,canonical", [
        ("Element", "Element"),
        ("Text", "Text"),
        ("Node::Element", "Element"),
        ("Node::Text", "Text"),
    ])
    def test_known(self, written, canonical):
        assert resolve_variant(written) == canonical

    @pytest.mark.parametrize("written", ["Span", "Node::Span", "Html::Element", "element"])
    def test_unknown(self, written):
        assert resolve_variant(written) is None

    def test_field_table(self):
        assert VARIANT_FIELDS["Element"] == ("tag", "children")
        assert VARIANT_FIELDS["Text"] == ("value",)
