"""BIMI conformance validator.

Runs an ordered list of rules over a document and reports blocking errors and
advisory warnings. Works on anything: the engine's own output, a raw upload,
or a hand-edited file. It never raises; unparsable markup produces a single
structural error.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from bimisvg.engine.assembler import is_full_canvas_background, source_canvas_size
from bimisvg.engine.config import EngineConfig
from bimisvg.engine.geometry import NON_RENDERED_TAGS, StepBudget, measure
from bimisvg.engine.layout import safe_area
from bimisvg.errors import MeasurementTimeout, ParseError
from bimisvg.models.validation import ValidationResult
from bimisvg.svg.document import Document, Element, local_name
from bimisvg.svg.parser import parse_svg
from bimisvg.svg.sanitizer import SCRIPT_TAGS, is_event_handler
from bimisvg.svg.serializer import serialize_svg
from bimisvg.svg.styles import StyleRules, apply_rules, extract_rules
from bimisvg.utils.colors import color_alpha, parse_opacity
from bimisvg.utils.geometry import UNDEFINED, BoundingBox, translation

logger = logging.getLogger(__name__)

ANIMATION_TAGS = {"animate", "animateTransform", "animateMotion", "animateColor", "set"}
_URL_RE = re.compile(r"url\(\s*['\"]?([^'\")]*)", re.IGNORECASE)
_IMPORT_RE = re.compile(r"@import\b", re.IGNORECASE)


@dataclass
class _Subject:
    """Everything the rules look at, computed once."""

    doc: Document
    config: EngineConfig
    padding_percent: float
    byte_size: int
    rules: StyleRules
    viewbox: tuple[float, float, float, float] | None


Rule = Callable[[_Subject, ValidationResult], None]


def validate(
    source: Document | str | bytes,
    *,
    padding_percent: float | None = None,
    config: EngineConfig | None = None,
) -> ValidationResult:
    """Evaluate BIMI conformance rules against ``source``."""
    config = config or EngineConfig()
    result = ValidationResult()

    if isinstance(source, Document):
        doc = source
        byte_size = len(serialize_svg(doc).encode("utf-8"))
    else:
        raw = source.encode("utf-8") if isinstance(source, str) else source
        byte_size = len(raw)
        try:
            doc = parse_svg(source)
        except ParseError as e:
            result.add_error(f"Structural: {e}")
            return result

    subject = _Subject(
        doc=doc,
        config=config,
        padding_percent=config.nominal_padding_percent if padding_percent is None else padding_percent,
        byte_size=byte_size,
        rules=extract_rules(doc),
        viewbox=doc.viewbox,
    )

    for rule in RULES:
        try:
            rule(subject, result)
        except Exception as e:
            # A rule that can't be evaluated is reported, never fatal
            logger.warning("Validation rule %s failed: %s", rule.__name__, e)
            result.add_warning(f"Internal: could not evaluate {rule.__name__.strip('_')} ({e})")

    logger.debug("Validation: %d errors, %d warnings", len(result.errors), len(result.warnings))
    return result


# ── Structural ────────────────────────────────────────────────────────────


def _check_structure(s: _Subject, result: ValidationResult) -> None:
    root = s.doc.root
    if local_name(root.tag) != "svg":
        result.add_error(f"Structural: root element must be <svg>, found <{root.tag}>")

    nested = sum(1 for el in root.iter() if el is not root and local_name(el.tag) == "svg")
    if nested:
        result.add_error(f"Structural: nested <svg> elements are not allowed ({nested} found)")

    if root.get("viewBox") is None:
        result.add_error("Structural: missing viewBox attribute")
    elif s.viewbox is None:
        result.add_error(f"Structural: malformed viewBox {root.get('viewBox')!r}")
    elif abs(s.viewbox[2] - s.viewbox[3]) > 1e-9:
        result.add_error(f"Structural: viewBox must be square (got {s.viewbox[2]:g}x{s.viewbox[3]:g})")

    counts = {"image": 0, "script": 0, "foreignObject": 0, "animation": 0}
    handlers: set[str] = set()
    external: list[str] = []
    for el in root.iter():
        tag = local_name(el.tag)
        if tag == "image":
            counts["image"] += 1
        elif tag in SCRIPT_TAGS:
            counts["script"] += 1
        elif tag == "foreignObject":
            counts["foreignObject"] += 1
        elif tag in ANIMATION_TAGS:
            counts["animation"] += 1
        handlers.update(k for k in el.attributes if is_event_handler(k))
        external.extend(_external_references(el))

    if counts["image"]:
        result.add_error(f"Structural: raster <image> elements are not allowed ({counts['image']} found)")
    if counts["script"]:
        result.add_error(f"Structural: <script> elements are not allowed ({counts['script']} found)")
    if counts["foreignObject"]:
        result.add_error(f"Structural: <foreignObject> elements are not allowed ({counts['foreignObject']} found)")
    if counts["animation"]:
        result.add_error(f"Structural: animation elements are not allowed ({counts['animation']} found)")
    if handlers:
        result.add_error(f"Structural: event handler attributes are not allowed ({', '.join(sorted(handlers))})")
    if external:
        shown = ", ".join(external[:3]) + (" …" if len(external) > 3 else "")
        result.add_error(f"Structural: external references are not allowed ({shown})")


def _external_references(el: Element) -> list[str]:
    refs: list[str] = []
    for name, value in el.attributes.items():
        if local_name(name) == "href" and _is_external(value.strip()):
            refs.append(value.strip())
        refs.extend(t.strip() for t in _URL_RE.findall(value) if _is_external(t.strip()))
    if local_name(el.tag) == "style":
        text = el.text
        if _IMPORT_RE.search(text):
            refs.append("@import")
        refs.extend(t.strip() for t in _URL_RE.findall(text) if _is_external(t.strip()))
    return refs


def _is_external(target: str) -> bool:
    return bool(target) and not target.startswith("#") and not target.lower().startswith("data:")


# ── Background ────────────────────────────────────────────────────────────


def _check_background(s: _Subject, result: ValidationResult) -> None:
    background = _background_element(s)
    if background is None:
        result.add_error("Background: no solid background shape covering the canvas")
        return

    resolved = background.clone()
    apply_rules(resolved, s.rules)
    fill = resolved.get("fill")
    alpha = color_alpha(fill)
    opacities = [parse_opacity(resolved.get(name)) for name in ("opacity", "fill-opacity")]

    if alpha is None:
        result.add_warning(f"Background: cannot verify opacity of fill {fill!r}")
    elif alpha < 1.0:
        result.add_error(f"Background: background color must be fully opaque (got {fill!r})")
    if any(o is not None and o < 1.0 for o in opacities):
        result.add_error("Background: background opacity must be 1")
    if fill is None:
        result.add_warning("Background: background has no explicit fill and renders black")


def _background_element(s: _Subject) -> Element | None:
    drawable = _drawable_children(s.doc.root)
    if not drawable:
        return None
    first = drawable[0]
    if first.get("transform"):
        return None
    if s.viewbox:
        x, y, w, h = s.viewbox
    else:
        x, y = 0.0, 0.0
        w, h = source_canvas_size(s.doc.root)
    if is_full_canvas_background(first, w, h, origin=(x, y)):
        return first
    return None


def _drawable_children(root: Element) -> list[Element]:
    return [el for el in root.elements if local_name(el.tag) not in NON_RENDERED_TAGS]


# ── Safe area ─────────────────────────────────────────────────────────────


def _check_safe_area(s: _Subject, result: ValidationResult) -> None:
    if s.viewbox is None or s.viewbox[2] <= 0 or s.viewbox[3] <= 0:
        return
    x, y, w, h = s.viewbox
    drawable = _drawable_children(s.doc.root)
    background = _background_element(s)
    content = [el for el in drawable if el is not background]
    if not content:
        result.add_warning("Safe area: document has no visible content besides the background")
        return

    index = s.doc.id_index()
    budget = StepBudget(limit=s.config.measure_step_budget)
    box = UNDEFINED
    try:
        for el in content:
            box = box.union(measure(el, index=index, budget=budget, viewport=(w, h)))
    except MeasurementTimeout as e:
        result.add_warning(f"Safe area: {e}")
        return
    if not box.is_defined:
        result.add_warning("Safe area: content extent could not be measured")
        return

    # Safe area in viewBox units, relative to the viewBox origin
    size = min(w, h)
    area = safe_area(size, s.padding_percent).transformed(translation(x, y))
    if not box.within(area, tolerance=size * 0.005):
        result.add_warning(
            f"Safe area: content extends beyond the {s.padding_percent:g}% safe area "
            f"(content {_fmt_box(box)}, safe area {_fmt_box(area)})"
        )


def _fmt_box(box: BoundingBox) -> str:
    return "[" + ", ".join(f"{v:.2f}" for v in box.as_tuple()) + "]"


# ── Accessibility ─────────────────────────────────────────────────────────


def _check_accessibility(s: _Subject, result: ValidationResult) -> None:
    title = s.doc.title
    if title is None:
        result.add_warning("Accessibility: missing <title>; BIMI logos should carry the brand name")
    elif not title:
        result.add_warning("Accessibility: <title> is empty")


# ── Size ──────────────────────────────────────────────────────────────────


def _check_size(s: _Subject, result: ValidationResult) -> None:
    if s.viewbox is None:
        return
    _, _, w, h = s.viewbox
    if w <= 0 or h <= 0:
        result.add_error(f"Size: viewBox has no area ({w:g}x{h:g})")
    elif min(w, h) < s.config.min_canvas_size:
        result.add_warning(
            f"Size: canvas {w:g}x{h:g} is below the {s.config.min_canvas_size:g}-unit minimum"
        )


# ── Profile ───────────────────────────────────────────────────────────────


def _check_profile(s: _Subject, result: ValidationResult) -> None:
    root = s.doc.root
    if root.get("baseProfile") != s.config.svg_base_profile:
        result.add_warning(f'Profile: root should declare baseProfile="{s.config.svg_base_profile}"')
    if root.get("version") != s.config.svg_version:
        result.add_warning(f'Profile: root should declare version="{s.config.svg_version}"')
    if s.byte_size > s.config.max_recommended_bytes:
        result.add_warning(
            f"Profile: document is {s.byte_size / 1024:.1f} KB; keep BIMI logos under "
            f"{s.config.max_recommended_bytes // 1024} KB"
        )


RULES: list[Rule] = [
    _check_structure,
    _check_background,
    _check_safe_area,
    _check_accessibility,
    _check_size,
    _check_profile,
]

