"""Tests for the style resolver."""

from tests.conftest import CLASS_STYLED_LOGO_SVG

from bimisvg.svg.document import Element
from bimisvg.svg.parser import parse_svg
from bimisvg.svg.styles import apply_rules, extract_rules, parse_declarations, parse_stylesheet, resolve_styles


# ---------------------------------------------------------------------------
# Stylesheet parsing
# ---------------------------------------------------------------------------


class TestParseStylesheet:
    def test_single_class(self):
        rules = parse_stylesheet(".a { fill: red; stroke: none }")
        assert rules == {"a": {"fill": "red", "stroke": "none"}}

    def test_selector_list(self):
        rules = parse_stylesheet(".a, .b { fill: red }")
        assert rules == {"a": {"fill": "red"}, "b": {"fill": "red"}}

    def test_unsupported_selectors_skipped(self):
        rules = parse_stylesheet("svg path { fill: black } #id { fill: blue } .ok { fill: green }")
        assert rules == {"ok": {"fill": "green"}}

    def test_at_rules_skipped(self):
        css = """
        @import url("https://fonts.example.com/brand.css");
        @media (max-width: 10px) { .a { fill: blue } }
        .a { fill: red }
        """
        assert parse_stylesheet(css) == {"a": {"fill": "red"}}

    def test_later_declaration_wins(self):
        rules = parse_stylesheet(".a { fill: red } .a { fill: blue; opacity: 1 }")
        assert rules == {"a": {"fill": "blue", "opacity": "1"}}

    def test_comments_and_cdata_markers(self):
        css = "<!-- /* header */ .a { fill: /* inline */ red } -->"
        assert parse_stylesheet(css) == {"a": {"fill": "red"}}

    def test_url_values_kept_verbatim(self):
        rules = parse_stylesheet(".a { fill: url(#grad); }")
        assert rules["a"]["fill"] == "url(#grad)"

    def test_unterminated_block(self):
        assert parse_stylesheet(".a { fill: red") == {"a": {"fill": "red"}}

    def test_garbage_does_not_raise(self):
        assert parse_stylesheet("}}}{{{;;;") == {}


class TestParseDeclarations:
    def test_basic(self):
        assert parse_declarations("fill:red;stroke-width: 2") == {"fill": "red", "stroke-width": "2"}

    def test_important_dropped(self):
        assert parse_declarations("fill: red !important") == {"fill": "red"}

    def test_custom_properties_skipped(self):
        assert parse_declarations("--brand: red; fill: var(--brand)") == {"fill": "var(--brand)"}

    def test_semicolon_inside_string(self):
        decls = parse_declarations("font-family: 'A;B'; fill: red")
        assert decls == {"font-family": "'A;B'", "fill": "red"}

    def test_empty_values_skipped(self):
        assert parse_declarations("fill: ; stroke") == {}


# ---------------------------------------------------------------------------
# Applying rules
# ---------------------------------------------------------------------------


def test_extract_rules_ignores_non_css():
    doc = parse_svg(
        '<svg xmlns="http://www.w3.org/2000/svg">'
        '<style type="text/other">.a { fill: red }</style>'
        "<style>.b { fill: blue }</style></svg>"
    )
    assert extract_rules(doc) == {"b": {"fill": "blue"}}


def test_precedence_attribute_over_inline_over_class():
    doc = parse_svg(CLASS_STYLED_LOGO_SVG)
    content = [el for el in doc.root.elements if el.tag == "rect"]
    resolve_styles(doc, content)
    first, second, third = content

    assert first.get("fill") == "#E63946"
    assert first.get("stroke") == "none"
    # Explicit attribute beats the class rule
    assert second.get("fill") == "#000000"
    assert second.get("opacity") == "0.5"
    # Inline style beats the class rule
    assert third.get("fill") == "#F1FAEE"
    assert third.get("opacity") == "0.5"


def test_first_listed_class_wins():
    rules = {"a": {"fill": "red"}, "b": {"fill": "blue", "stroke": "green"}}
    el = Element("rect", {"class": "a b"})
    added = apply_rules(el, rules)
    assert el.get("fill") == "red"
    assert el.get("stroke") == "green"
    assert added == 2


def test_applies_to_descendants():
    rules = {"x": {"fill": "red"}}
    group = Element("g", children=[Element("path", {"class": "x"}), Element("title", {"class": "x"})])
    apply_rules(group, rules)
    path, title = group.elements
    assert path.get("fill") == "red"
    assert title.get("fill") is None


def test_unknown_class_is_noop():
    el = Element("rect", {"class": "missing"})
    assert apply_rules(el, {}) == 0
    assert el.attributes == {"class": "missing"}
