"""In-memory SVG document tree.

A Document owns a single root Element. Elements own their children outright;
cross references (``href="#id"``, ``fill="url(#id)"``) are resolved through the
secondary id index, never through node pointers.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator
from dataclasses import dataclass, field

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
XML_NS = "http://www.w3.org/XML/1998/namespace"

# Conventional prefixes for namespaces found in exported logos
KNOWN_PREFIXES: dict[str, str] = {
    XLINK_NS: "xlink",
    XML_NS: "xml",
    "http://www.inkscape.org/namespaces/inkscape": "inkscape",
    "http://sodipodi.sourceforge.net/DTD/sodipodi-0.0.dtd": "sodipodi",
    "http://www.w3.org/1999/02/22-rdf-syntax-ns#": "rdf",
    "http://creativecommons.org/ns#": "cc",
    "http://purl.org/dc/elements/1.1/": "dc",
    "http://ns.adobe.com/AdobeIllustrator/10.0/": "i",
    "http://ns.adobe.com/Extensibility/1.0/": "x",
    "http://ns.adobe.com/Graphs/1.0/": "graph",
    "http://www.w3.org/1999/xhtml": "xhtml",
}


@dataclass
class Text:
    value: str


@dataclass
class Comment:
    value: str


@dataclass
class Element:
    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.attributes.get(name, default)

    def set(self, name: str, value: str) -> None:
        self.attributes[name] = value

    def append(self, node: Node) -> Node:
        self.children.append(node)
        return node

    @property
    def elements(self) -> list[Element]:
        """Direct child elements, skipping text and comments."""
        return [c for c in self.children if isinstance(c, Element)]

    @property
    def text(self) -> str:
        """Concatenated text content of the whole subtree."""
        parts: list[str] = []
        for child in self.children:
            if isinstance(child, Text):
                parts.append(child.value)
            elif isinstance(child, Element):
                parts.append(child.text)
        return "".join(parts)

    @property
    def href(self) -> str | None:
        """``href`` with the SVG 1.1 ``xlink:href`` fallback."""
        return self.attributes.get("href") or self.attributes.get("xlink:href")

    @property
    def classes(self) -> list[str]:
        return (self.attributes.get("class") or "").split()

    def iter(self, tag: str | None = None) -> Iterator[Element]:
        """Depth-first pre-order walk over this element and its descendants."""
        if tag is None or self.tag == tag:
            yield self
        for child in self.children:
            if isinstance(child, Element):
                yield from child.iter(tag)

    def find(self, tag: str) -> Element | None:
        return next((e for e in self.elements if e.tag == tag), None)

    def clone(self) -> Element:
        return copy.deepcopy(self)


Node = Element | Text | Comment


@dataclass
class Document:
    """A parsed SVG document with exactly one ``svg`` root."""

    root: Element

    def clone(self) -> Document:
        return Document(root=self.root.clone())

    def iter(self, tag: str | None = None) -> Iterator[Element]:
        return self.root.iter(tag)

    def id_index(self) -> dict[str, Element]:
        """Map of ``id`` → element. First occurrence wins on duplicates."""
        index: dict[str, Element] = {}
        for el in self.root.iter():
            el_id = el.attributes.get("id")
            if el_id and el_id not in index:
                index[el_id] = el
        return index

    @property
    def viewbox(self) -> tuple[float, float, float, float] | None:
        return parse_viewbox(self.root.get("viewBox"))

    @property
    def title(self) -> str | None:
        el = self.root.find("title")
        if el is None:
            return None
        return el.text.strip()


def parse_viewbox(value: str | None) -> tuple[float, float, float, float] | None:
    """Parse ``min-x min-y width height``; ``None`` when absent or malformed."""
    if not value:
        return None
    parts = value.replace(",", " ").split()
    if len(parts) != 4:
        return None
    try:
        x, y, w, h = (float(p) for p in parts)
    except ValueError:
        return None
    return (x, y, w, h)


def local_name(name: str) -> str:
    """Strip a ``{ns}`` or ``prefix:`` qualifier from a tag name."""
    if name.startswith("{"):
        return name.split("}", 1)[1]
    return name.rsplit(":", 1)[-1]
