"""Document assembler — builds the canonical BIMI document.

Output shape, in paint order:

    <svg viewBox="0 0 100 100" width="100" height="100" version="1.2" baseProfile="tiny-ps">
      <title>…</title>            optional
      <defs>…</defs>              every top-level defs, verbatim
      <style>…</style>            every top-level style block, verbatim
      <circle|rect …/>            opaque background
      <g id="logo" transform="translate(tx, ty) scale(s)">…</g>
    </svg>

Content keeps its own coordinates; only the wrapping group moves, so gradients,
filters and relative path data render exactly as authored.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from bimisvg.engine.config import EngineConfig
from bimisvg.engine.layout import Transform
from bimisvg.models.options import ConvertOptions, Shape
from bimisvg.svg.document import Document, Element, Text, local_name, parse_viewbox
from bimisvg.utils.geometry import parse_length, parse_transform
from bimisvg.utils.math_helpers import format_number

logger = logging.getLogger(__name__)

# Top-level children that never go into the content group
_NON_CONTENT_TAGS = {"defs", "style", "title", "script", "foreignObject", "image", "metadata", "namedview"}
# Top-level children ignored when recognising an already-canonical document
_PASSIVE_TAGS = {"defs", "style", "title", "desc", "metadata", "namedview"}


@dataclass
class SourceParts:
    """The pieces of a sanitized source document the assembler reuses."""

    defs: list[Element] = field(default_factory=list)
    styles: list[Element] = field(default_factory=list)
    content: list[Element] = field(default_factory=list)
    source_size: tuple[float, float] = (100.0, 100.0)
    renormalized: bool = False


def collect_parts(doc: Document, config: EngineConfig | None = None) -> SourceParts:
    """Deep-copy defs, style blocks and drawable content out of ``doc``.

    A document that is already canonical has its background dropped and its
    logo group unwrapped, so converting it again doesn't nest groups.
    """
    config = config or EngineConfig()
    root = doc.root
    parts = SourceParts(source_size=source_canvas_size(root))

    for el in root.elements:
        tag = local_name(el.tag)
        if tag == "defs":
            parts.defs.append(el.clone())
        elif tag == "style":
            parts.styles.append(el.clone())

    logo = _canonical_logo_group(root, config)
    if logo is not None:
        parts.content = [child.clone() for child in logo.elements]
        parts.source_size = (config.canvas_size, config.canvas_size)
        parts.renormalized = True
        logger.debug("Source is already canonical; unwrapping #%s", logo.get("id"))
        return parts

    parts.content = [el.clone() for el in root.elements if local_name(el.tag) not in _NON_CONTENT_TAGS]
    return parts


def assemble(
    parts: SourceParts,
    transform: Transform,
    options: ConvertOptions | None = None,
    config: EngineConfig | None = None,
) -> Document:
    """Build the canonical document from collected parts and a planned transform."""
    options = options or ConvertOptions()
    config = config or EngineConfig()
    size = format_number(config.canvas_size)

    root = Element(
        "svg",
        {
            "viewBox": f"0 0 {size} {size}",
            "width": size,
            "height": size,
            "version": config.svg_version,
            "baseProfile": config.svg_base_profile,
        },
    )

    title = (options.title or "").strip()
    if title:
        root.append(Element("title", children=[Text(title)]))

    for defs in parts.defs:
        root.append(defs.clone())
    for style in parts.styles:
        root.append(style.clone())

    root.append(build_background(options.shape, options.background_color, config))

    logo = Element("g", {"id": unique_logo_id(parts, config.logo_group_id), "transform": transform.to_attribute()})
    logo.children = [el.clone() for el in parts.content]
    root.append(logo)

    return Document(root=root)


def unique_logo_id(parts: SourceParts, base: str) -> str:
    """``base``, or ``base-N`` when the content already uses that id."""
    taken = {el.get("id") for top in (*parts.defs, *parts.content) for el in top.iter()}
    if base not in taken:
        return base
    n = 1
    while f"{base}-{n}" in taken:
        n += 1
    return f"{base}-{n}"


def build_background(shape: Shape, color: str, config: EngineConfig | None = None) -> Element:
    """Full-canvas circle or rounded square filled with ``color``."""
    config = config or EngineConfig()
    size = config.canvas_size
    if shape == "circle":
        half = format_number(size / 2)
        return Element("circle", {"cx": half, "cy": half, "r": half, "fill": color})
    radius = format_number(size * config.corner_radius_ratio)
    return Element(
        "rect",
        {
            "x": "0",
            "y": "0",
            "width": format_number(size),
            "height": format_number(size),
            "rx": radius,
            "ry": radius,
            "fill": color,
        },
    )


def source_canvas_size(root: Element) -> tuple[float, float]:
    """Width/height of the source's user coordinate system.

    The viewBox wins; plain width/height are the fallback; 100×100 otherwise.
    """
    vb = parse_viewbox(root.get("viewBox"))
    if vb and vb[2] > 0 and vb[3] > 0:
        return (vb[2], vb[3])
    try:
        w = parse_length(root.get("width"), 0.0)
        h = parse_length(root.get("height"), 0.0)
    except ValueError:
        w = h = 0.0
    if w > 0 and h > 0 and "%" not in (root.get("width") or "") + (root.get("height") or ""):
        return (w, h)
    return (100.0, 100.0)


def is_full_canvas_background(el: Element, canvas_w: float, canvas_h: float, origin: tuple[float, float] = (0.0, 0.0)) -> bool:
    """A circle or rect that spans the whole canvas (the circle touches every edge)."""
    tag = local_name(el.tag)
    ox, oy = origin
    try:
        if tag == "circle":
            cx = parse_length(el.get("cx"), 0.0, canvas_w)
            cy = parse_length(el.get("cy"), 0.0, canvas_h)
            r = parse_length(el.get("r"), 0.0)
            return (
                math.isclose(cx, ox + canvas_w / 2, abs_tol=1e-6)
                and math.isclose(cy, oy + canvas_h / 2, abs_tol=1e-6)
                and r + 1e-6 >= max(canvas_w, canvas_h) / 2
            )
        if tag == "rect":
            x = parse_length(el.get("x"), 0.0, canvas_w)
            y = parse_length(el.get("y"), 0.0, canvas_h)
            w = parse_length(el.get("width"), 0.0, canvas_w)
            h = parse_length(el.get("height"), 0.0, canvas_h)
            return x <= ox + 1e-6 and y <= oy + 1e-6 and x + w + 1e-6 >= ox + canvas_w and y + h + 1e-6 >= oy + canvas_h
    except ValueError:
        return False
    return False


def _canonical_logo_group(root: Element, config: EngineConfig) -> Element | None:
    vb = parse_viewbox(root.get("viewBox"))
    size = config.canvas_size
    if vb != (0.0, 0.0, size, size):
        return None
    drawable = [el for el in root.elements if local_name(el.tag) not in _PASSIVE_TAGS]
    if len(drawable) != 2:
        return None
    background, logo = drawable
    if local_name(logo.tag) != "g" or not _is_logo_id(logo.get("id"), config.logo_group_id):
        return None
    # Only a bare placement group is unwrapped
    if set(logo.attributes) - {"id", "transform"} or not _is_placement(logo.get("transform")):
        return None
    if background.get("transform") or not is_full_canvas_background(background, size, size):
        return None
    return logo


def _is_logo_id(value: str | None, base: str) -> bool:
    if value == base:
        return True
    suffix = (value or "").removeprefix(f"{base}-")
    return suffix != (value or "") and suffix.isdigit()


def _is_placement(value: str | None) -> bool:
    """Translate plus a positive uniform scale, the only transform ``plan()`` emits."""
    try:
        m = parse_transform(value)
    except ValueError:
        return False
    return (
        abs(m[0, 1]) < 1e-12
        and abs(m[1, 0]) < 1e-12
        and m[0, 0] > 0
        and math.isclose(m[0, 0], m[1, 1], rel_tol=1e-9)
    )
