"""SVG sanitizer — strips constructs that execute code or fetch remote content.

Any element whose ``href`` points outside the document (``use``, ``image``,
``feImage``, ``tref`` ...) is dropped; hyperlinks only lose their target.

Applied unconditionally before any other stage looks at the artwork. Unlike a
rebuild-from-allowlist approach, everything else (structure, classes, defs,
styles, transforms) is left exactly as it was.
"""

from __future__ import annotations

import logging
from collections import Counter

from bimisvg.svg.document import Comment, Document, Element, Node, local_name

logger = logging.getLogger(__name__)

SCRIPT_TAGS = {"script", "handler"}
FOREIGN_TAGS = {"foreignObject"}
LINK_TAGS = {"a"}
HREF_ATTRS = ("href", "xlink:href")


def sanitize(doc: Document) -> Document:
    """Return a filtered deep copy of ``doc``. Never fails."""
    clean = doc.clone()
    removed: Counter[str] = Counter()
    _sanitize_element(clean.root, removed)
    if removed:
        logger.debug("Sanitizer removed: %s", dict(removed))
    return clean


def has_external_href(el: Element) -> bool:
    """An ``href`` that would need a network or filesystem fetch to resolve."""
    for name in HREF_ATTRS:
        href = (el.get(name) or "").strip()
        if href and not href.startswith("#") and not href.lower().startswith("data:"):
            return True
    return False


def is_event_handler(name: str) -> bool:
    return name.lower().startswith("on")


def _is_script_url(name: str, value: str) -> bool:
    return name in HREF_ATTRS and value.strip().lower().startswith("javascript:")


def _sanitize_element(el: Element, removed: Counter[str]) -> None:
    handlers = [k for k, v in el.attributes.items() if is_event_handler(k) or _is_script_url(k, v)]
    for name in handlers:
        del el.attributes[name]
    if handlers:
        removed["event-handler"] += len(handlers)

    if local_name(el.tag) in LINK_TAGS and has_external_href(el):
        # Hyperlinks keep their artwork and lose only the target
        for name in HREF_ATTRS:
            el.attributes.pop(name, None)
        removed["external-link"] += 1

    kept: list[Node] = []
    for child in el.children:
        reason = _removal_reason(child)
        if reason:
            removed[reason] += 1
            continue
        if isinstance(child, Element):
            _sanitize_element(child, removed)
        kept.append(child)
    el.children = kept


def _removal_reason(node: Node) -> str | None:
    if isinstance(node, Comment):
        return "comment"
    if not isinstance(node, Element):
        return None
    tag = local_name(node.tag)
    if tag in SCRIPT_TAGS:
        return "script"
    if tag in FOREIGN_TAGS:
        return "foreignObject"
    if tag not in LINK_TAGS and has_external_href(node):
        return f"external-{tag}"
    return None
