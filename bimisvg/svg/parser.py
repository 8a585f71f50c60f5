"""SVG parser — facade over defusedxml + ElementTree.

Converts raw SVG markup into a Document tree. ElementTree keeps text in
``.text``/``.tail``; this module rewrites that into explicit Text nodes and
folds namespaced names back into their conventional prefixes.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import DefusedXMLParser

from bimisvg.errors import ParseError
from bimisvg.svg.document import KNOWN_PREFIXES, SVG_NS, Comment, Document, Element, Node, Text

logger = logging.getLogger(__name__)

# Elements whose character data is rendered or read as text
TEXT_CONTENT_TAGS = {"text", "tspan", "textPath", "title", "desc"}


def parse_svg(markup: str | bytes) -> Document:
    """Parse SVG markup into a Document. Raises ParseError on bad input."""
    if isinstance(markup, bytes):
        try:
            markup = markup.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError(f"Invalid SVG: not UTF-8 text ({e.reason})") from e
    if not markup or not markup.strip():
        raise ParseError("Invalid SVG: document is empty")

    builder = ET.TreeBuilder(insert_comments=True)
    parser = DefusedXMLParser(target=builder, forbid_dtd=False)
    try:
        parser.feed(markup.lstrip("\ufeff"))
        root = parser.close()
    except ET.ParseError as e:
        raise ParseError(f"Invalid SVG: {e}") from e
    except DefusedXmlException as e:
        raise ParseError(f"Invalid SVG: forbidden XML construct ({e})") from e

    if not isinstance(root.tag, str) or _local_name(root.tag) != "svg":
        raise ParseError("Invalid SVG: no <svg> element found")

    doc = Document(root=_convert(root))
    logger.debug("Parsed SVG: %d elements", sum(1 for _ in doc.iter()))
    return doc


def extract_title(markup: str | bytes) -> str | None:
    """Return the trimmed text of the document's first <title>, if any."""
    try:
        doc = parse_svg(markup)
    except ParseError:
        return None
    for el in doc.iter("title"):
        title = el.text.strip()
        return title or None
    return None


def _convert(node: ET.Element, preserve: bool = False) -> Element:
    el = Element(
        tag=_qualified(node.tag),
        attributes={_qualified(k): v for k, v in node.attrib.items()},
    )
    space = el.get("xml:space")
    if space is not None:
        preserve = space == "preserve"
    # Whitespace is content inside text; between structural elements it is layout
    keep_blank = preserve or _local_name(node.tag) in TEXT_CONTENT_TAGS

    if node.text and (keep_blank or node.text.strip()):
        el.children.append(Text(node.text))
    for child in node:
        converted = _convert_child(child, keep_blank)
        if converted is not None:
            el.children.append(converted)
        if child.tail and (keep_blank or child.tail.strip()):
            el.children.append(Text(child.tail))
    return el


def _convert_child(node: ET.Element, preserve: bool) -> Node | None:
    if node.tag is ET.Comment:
        return Comment(node.text or "")
    if not isinstance(node.tag, str):
        # Processing instructions carry nothing renderable
        return None
    return _convert(node, preserve)


def _local_name(name: str) -> str:
    return name.split("}", 1)[1] if name.startswith("{") else name


def _qualified(name: str) -> str:
    """``{ns}local`` → ``local`` for SVG, ``prefix:local`` otherwise."""
    if not name.startswith("{"):
        return name
    ns, local = name[1:].split("}", 1)
    if ns == SVG_NS:
        return local
    prefix = KNOWN_PREFIXES.get(ns)
    if prefix is None:
        # Unknown foreign namespace; keep the URI so the serializer can redeclare it
        return name
    return f"{prefix}:{local}"
