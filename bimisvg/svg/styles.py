"""Style resolver — flattens class rules and inline declarations onto attributes.

Only a small CSS subset is understood: flat rules whose selector is a single
class (``.name``) or a comma-separated list of them. Every other selector and
every at-rule is skipped without error. The scanner is a single forward pass,
so adversarial style blocks cost linear time.

Precedence on an element, highest first:
    explicit attribute > inline ``style`` declaration > class rule

Among several classes the first listed class that defines a property wins.
Values are copied verbatim, so paint-server references such as
``url(#gradient)`` survive untouched.
"""

from __future__ import annotations

import logging
import re

from bimisvg.svg.document import Document, Element

logger = logging.getLogger(__name__)

StyleRules = dict[str, dict[str, str]]

_CLASS_SELECTOR_RE = re.compile(r"^\.(-?[_a-zA-Z][_a-zA-Z0-9-]*)$")
# Properties that can't become an XML attribute name (custom properties, hacks)
_PROPERTY_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9-]*$")
_IMPORTANT_RE = re.compile(r"\s*!\s*important\s*$", re.IGNORECASE)

# Elements whose attributes never take part in rendering
_SKIP_TAGS = {"style", "script", "title", "desc", "metadata"}


class _Scanner:
    """Forward-only cursor over CSS text."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    @property
    def done(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def skip_trivia(self) -> None:
        """Skip whitespace, comments and stray HTML comment markers."""
        while not self.done:
            if self.text[self.pos].isspace():
                self.pos += 1
            elif self.text.startswith("/*", self.pos):
                end = self.text.find("*/", self.pos + 2)
                self.pos = len(self.text) if end < 0 else end + 2
            elif self.text.startswith("<!--", self.pos):
                self.pos += 4
            elif self.text.startswith("-->", self.pos):
                self.pos += 3
            else:
                break

    def read_until(self, stops: str) -> str:
        """Consume up to (not including) the first top-level stop character.

        Quoted strings, comments and parentheses are consumed as units.
        """
        out: list[str] = []
        depth = 0
        while not self.done:
            ch = self.text[self.pos]
            if ch in "\"'":
                out.append(self._read_string(ch))
                continue
            if self.text.startswith("/*", self.pos):
                end = self.text.find("*/", self.pos + 2)
                self.pos = len(self.text) if end < 0 else end + 2
                continue
            if ch == "(":
                depth += 1
            elif ch == ")" and depth:
                depth -= 1
            elif depth == 0 and ch in stops:
                break
            out.append(ch)
            self.pos += 1
        return "".join(out)

    def read_block(self) -> str:
        """Consume a ``{...}`` block (cursor on ``{``) and return its body."""
        self.pos += 1
        start = self.pos
        depth = 1
        while not self.done:
            ch = self.text[self.pos]
            if ch in "\"'":
                self._read_string(ch)
                continue
            if self.text.startswith("/*", self.pos):
                end = self.text.find("*/", self.pos + 2)
                self.pos = len(self.text) if end < 0 else end + 2
                continue
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    body = self.text[start:self.pos]
                    self.pos += 1
                    return body
            self.pos += 1
        return self.text[start:]

    def _read_string(self, quote: str) -> str:
        start = self.pos
        self.pos += 1
        while not self.done:
            ch = self.text[self.pos]
            if ch == "\\":
                self.pos += 2
                continue
            self.pos += 1
            if ch == quote or ch == "\n":
                break
        return self.text[start:self.pos]


def parse_stylesheet(text: str) -> StyleRules:
    """Parse a style block into ``{class: {property: value}}``."""
    rules: StyleRules = {}
    scanner = _Scanner(text)
    while True:
        scanner.skip_trivia()
        if scanner.done:
            break
        if scanner.peek() == "@":
            _skip_at_rule(scanner)
            continue
        prelude = scanner.read_until("{;}")
        if scanner.peek() != "{":
            # Stray ';' or '}' or truncated input
            scanner.pos += 1
            continue
        body = scanner.read_block()
        classes = _class_selectors(prelude)
        if not classes:
            continue
        declarations = parse_declarations(body)
        for name in classes:
            rules.setdefault(name, {}).update(declarations)
    return rules


def parse_declarations(text: str) -> dict[str, str]:
    """Parse ``prop: value; ...`` (a rule body or an inline ``style``)."""
    declarations: dict[str, str] = {}
    scanner = _Scanner(text)
    while True:
        scanner.skip_trivia()
        if scanner.done:
            break
        chunk = scanner.read_until(";{}")
        if scanner.peek() == "{":
            # Nested block inside a declaration list is not part of the subset
            scanner.read_block()
            continue
        scanner.pos += 1
        name, sep, value = chunk.partition(":")
        name = name.strip().lower()
        value = _IMPORTANT_RE.sub("", value).strip()
        if sep and value and _PROPERTY_RE.match(name):
            declarations[name] = value
    return declarations


def extract_rules(doc: Document) -> StyleRules:
    """Merge the class rules of every <style> block, in document order."""
    rules: StyleRules = {}
    for style in doc.iter("style"):
        media = (style.get("type") or "text/css").strip().lower()
        if media != "text/css":
            continue
        for name, props in parse_stylesheet(style.text).items():
            rules.setdefault(name, {}).update(props)
    return rules


def apply_rules(element: Element, rules: StyleRules) -> int:
    """Flatten inline styles and class rules onto ``element``'s subtree.

    Existing attributes are never overwritten. Returns the number of
    attributes added.
    """
    added = 0
    for el in element.iter():
        if el.tag in _SKIP_TAGS:
            continue
        style = el.get("style")
        if style:
            added += _set_missing(el, parse_declarations(style))
        for name in el.classes:
            props = rules.get(name)
            if props:
                added += _set_missing(el, props)
    return added


def resolve_styles(doc: Document, content: list[Element]) -> int:
    """Apply the document's class rules to each content subtree."""
    rules = extract_rules(doc)
    added = sum(apply_rules(el, rules) for el in content)
    logger.debug("Style resolver: %d classes, %d attributes flattened", len(rules), added)
    return added


def _set_missing(el: Element, props: dict[str, str]) -> int:
    count = 0
    for prop, value in props.items():
        if prop not in el.attributes:
            el.attributes[prop] = value
            count += 1
    return count


def _class_selectors(prelude: str) -> list[str]:
    names: list[str] = []
    for selector in prelude.split(","):
        m = _CLASS_SELECTOR_RE.match(selector.strip())
        if m:
            names.append(m.group(1))
    return names


def _skip_at_rule(scanner: _Scanner) -> None:
    scanner.read_until("{;")
    if scanner.peek() == "{":
        scanner.read_block()
    else:
        scanner.pos += 1
