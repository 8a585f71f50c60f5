"""Write SVG markup from a Document tree."""

from __future__ import annotations

from bimisvg.svg.document import KNOWN_PREFIXES, SVG_NS, XML_NS, Comment, Document, Element, Text

_PREFIX_TO_NS = {prefix: ns for ns, prefix in KNOWN_PREFIXES.items()}


def serialize_svg(doc: Document, *, xml_declaration: bool = False, pretty: bool = False) -> str:
    """Serialize a Document to markup.

    Namespace declarations are regenerated from the names actually used, so
    ``serialize(parse(serialize(d))) == serialize(d)`` holds for any tree.
    """
    foreign = _collect_foreign_namespaces(doc.root)
    decls = {"xmlns": SVG_NS}
    for ns, prefix in foreign.items():
        decls[f"xmlns:{prefix}"] = ns

    out: list[str] = []
    if xml_declaration:
        out.append('<?xml version="1.0" encoding="UTF-8"?>')
        if pretty:
            out.append("\n")
    _write_element(doc.root, out, foreign, decls, 0 if pretty else None)
    return "".join(out)


def _collect_foreign_namespaces(root: Element) -> dict[str, str]:
    """Namespace URI → prefix for every non-SVG namespace in use."""
    used: dict[str, str] = {}
    generated = 0
    for el in root.iter():
        for name in (el.tag, *el.attributes):
            ns = _namespace_of(name)
            if ns is None or ns == XML_NS or ns in used:
                continue
            prefix = KNOWN_PREFIXES.get(ns)
            if prefix is None:
                prefix = f"ns{generated}"
                generated += 1
            used[ns] = prefix
    return used


def _namespace_of(name: str) -> str | None:
    if name.startswith("{"):
        return name[1:].split("}", 1)[0]
    if ":" in name:
        prefix = name.split(":", 1)[0]
        return _PREFIX_TO_NS.get(prefix)
    return None


def _name(name: str, foreign: dict[str, str]) -> str:
    if name.startswith("{"):
        ns, local = name[1:].split("}", 1)
        return f"{foreign[ns]}:{local}"
    return name


def _write_element(
    el: Element,
    out: list[str],
    foreign: dict[str, str],
    decls: dict[str, str] | None,
    depth: int | None,
) -> None:
    tag = _name(el.tag, foreign)
    out.append(f"<{tag}")
    if decls:
        for k, v in decls.items():
            out.append(f' {k}="{escape_attr(v)}"')
    for k, v in el.attributes.items():
        if k == "xmlns" or k.startswith("xmlns:"):
            continue
        out.append(f' {_name(k, foreign)}="{escape_attr(v)}"')

    if not el.children:
        out.append("/>")
        return
    out.append(">")

    # Mixed content is written inline so whitespace in <text> stays untouched
    indent_children = depth is not None and all(isinstance(c, (Element, Comment)) for c in el.children)
    child_depth = depth + 1 if indent_children else None
    for child in el.children:
        if indent_children:
            out.append("\n" + "  " * child_depth)
        if isinstance(child, Element):
            _write_element(child, out, foreign, None, child_depth)
        elif isinstance(child, Text):
            out.append(escape_text(child.value))
        elif isinstance(child, Comment):
            out.append(f"<!--{child.value}-->")
    if indent_children:
        out.append("\n" + "  " * depth)
    out.append(f"</{tag}>")


def escape_text(value: str) -> str:
    return value.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def escape_attr(value: str) -> str:
    return (
        escape_text(value)
        .replace('"', "&quot;")
        .replace("\n", "&#10;")
        .replace("\r", "&#13;")
        .replace("\t", "&#9;")
    )
