"""Tests for SVG parser."""

import pytest

from tests.conftest import CIRCLE_LOGO_SVG, GRADIENT_LOGO_SVG, OFFSET_LOGO_SVG, SCRIPT_LOGO_SVG

from bimisvg.errors import ParseError
from bimisvg.svg.document import Comment, Element, Text, local_name, parse_viewbox
from bimisvg.svg.parser import extract_title, parse_svg
from bimisvg.svg.serializer import serialize_svg


def test_parse_circle_logo():
    doc = parse_svg(CIRCLE_LOGO_SVG)
    assert doc.root.tag == "svg"
    assert doc.viewbox == (0.0, 0.0, 50.0, 50.0)
    circles = list(doc.iter("circle"))
    assert len(circles) == 1
    assert circles[0].attributes == {"cx": "25", "cy": "25", "r": "20", "fill": "blue"}


def test_whitespace_between_elements_is_dropped():
    doc = parse_svg(CIRCLE_LOGO_SVG)
    assert all(isinstance(c, Element) for c in doc.root.children)


def test_whitespace_inside_text_is_kept():
    markup = '<svg xmlns="http://www.w3.org/2000/svg"><text><tspan>A</tspan> <tspan>B</tspan></text></svg>'
    doc = parse_svg(markup)
    text = doc.root.find("text")
    assert text.text == "A B"
    assert text.children[1] == Text(" ")
    assert serialize_svg(doc) == markup


def test_xml_space_preserve_keeps_whitespace():
    doc = parse_svg(
        '<svg xmlns="http://www.w3.org/2000/svg"><g xml:space="preserve"> <rect width="1" height="1"/> </g>'
        "<g> <rect width=\"1\" height=\"1\"/> </g></svg>"
    )
    preserved, collapsed = doc.root.elements
    assert [type(c) for c in preserved.children] == [Text, Element, Text]
    assert [type(c) for c in collapsed.children] == [Element]


def test_comments_are_kept():
    doc = parse_svg(SCRIPT_LOGO_SVG)
    comments = [c for c in doc.root.children if isinstance(c, Comment)]
    assert len(comments) == 1
    assert "design tool" in comments[0].value


def test_text_content():
    doc = parse_svg('<svg xmlns="http://www.w3.org/2000/svg"><text>Hello <tspan>world</tspan>!</text></svg>')
    text = doc.root.find("text")
    assert text.text == "Hello world!"
    assert isinstance(text.children[0], Text)


def test_xlink_prefix_is_folded():
    doc = parse_svg(GRADIENT_LOGO_SVG)
    use = next(doc.iter("use"))
    assert use.get("xlink:href") == "#petal"
    assert use.href == "#petal"


def test_unknown_namespace_keeps_uri():
    doc = parse_svg('<svg xmlns="http://www.w3.org/2000/svg" xmlns:foo="urn:foo" foo:bar="1"/>')
    assert doc.root.attributes == {"{urn:foo}bar": "1"}


def test_bytes_with_bom():
    raw = b"\xef\xbb\xbf" + CIRCLE_LOGO_SVG.encode("utf-8")
    doc = parse_svg(raw)
    assert doc.viewbox == (0.0, 0.0, 50.0, 50.0)


def test_doctype_is_allowed():
    markup = (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN" "http://www.w3.org/Graphics/SVG/1.1/DTD/svg11.dtd">\n'
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10"><rect width="10" height="10"/></svg>'
    )
    assert parse_svg(markup).viewbox == (0.0, 0.0, 10.0, 10.0)


@pytest.mark.parametrize(
    "markup",
    [
        "",
        "   \n ",
        "<svg><g></svg>",
        "not xml at all",
        '<html xmlns="http://www.w3.org/1999/xhtml"/>',
    ],
)
def test_invalid_markup_raises(markup):
    with pytest.raises(ParseError):
        parse_svg(markup)


def test_entity_declarations_are_rejected():
    markup = (
        '<!DOCTYPE svg [<!ENTITY lol "lol"><!ENTITY lol2 "&lol;&lol;&lol;">]>'
        '<svg xmlns="http://www.w3.org/2000/svg"><text>&lol2;</text></svg>'
    )
    with pytest.raises(ParseError):
        parse_svg(markup)


def test_non_utf8_bytes_raise():
    with pytest.raises(ParseError):
        parse_svg(b"<svg>\xff\xfe</svg>")


def test_extract_title():
    assert extract_title(OFFSET_LOGO_SVG) == "Acme Corp"
    assert extract_title(CIRCLE_LOGO_SVG) is None
    assert extract_title("<broken") is None
    assert extract_title('<svg xmlns="http://www.w3.org/2000/svg"><title>   </title></svg>') is None


def test_id_index_first_occurrence_wins():
    doc = parse_svg(
        '<svg xmlns="http://www.w3.org/2000/svg"><rect id="a" width="1"/><circle id="a" r="1"/></svg>'
    )
    assert doc.id_index()["a"].tag == "rect"


def test_parse_viewbox():
    assert parse_viewbox("0 0 100 100") == (0.0, 0.0, 100.0, 100.0)
    assert parse_viewbox("0,0,24,24") == (0.0, 0.0, 24.0, 24.0)
    assert parse_viewbox("0 0 100") is None
    assert parse_viewbox("a b c d") is None
    assert parse_viewbox(None) is None


def test_local_name():
    assert local_name("{http://www.w3.org/2000/svg}rect") == "rect"
    assert local_name("sodipodi:namedview") == "namedview"
    assert local_name("circle") == "circle"
