"""Geometry resolver — analytic bounding boxes of transformed, nested content.

``measure()`` walks a subtree composing each element's ``transform`` into a
cumulative matrix and unions the extents of every drawable leaf. Bounds follow
``getBBox()`` semantics: fill geometry only, no stroke width.

Fallback ladder:
    1. Whole subtree, strict: the first unmeasurable element aborts the pass.
    2. Per child: each direct child is measured strictly; a child that fails is
       itself measured child by child.
    3. Leaves that can't be measured at all are left out of the union.
    4. Nothing measurable: ``UNDEFINED``.

Every visited element costs one step of the budget; running out raises
MeasurementTimeout instead of grinding through pathological inputs.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np
from svgpathtools import Arc, Path, parse_path

from bimisvg.errors import MeasurementTimeout
from bimisvg.svg.document import Element, Text, local_name, parse_viewbox
from bimisvg.utils.geometry import (
    UNDEFINED,
    BoundingBox,
    Matrix,
    apply,
    identity,
    parse_length,
    parse_numbers,
    parse_transform,
    translation,
    viewbox_transform,
)

logger = logging.getLogger(__name__)

DEFAULT_STEP_BUDGET = 50_000
DEFAULT_FONT_SIZE = 16.0

# Never rendered directly; only referenced (or pure metadata)
NON_RENDERED_TAGS = {
    "defs", "style", "script", "title", "desc", "metadata",
    "clipPath", "mask", "symbol", "marker", "pattern", "filter",
    "linearGradient", "radialGradient", "solidColor", "font", "font-face",
    "foreignObject", "namedview", "animate", "animateTransform",
    "animateMotion", "animateColor", "set", "view", "cursor",
}
CONTAINER_TAGS = {"g", "a", "switch", "svg"}
SHAPE_TAGS = {"path", "rect", "circle", "ellipse", "line", "polyline", "polygon"}
TEXT_TAGS = {"text"}

# Average advance per character class, as a fraction of font-size
_ADVANCE_NARROW = 0.28
_ADVANCE_WIDE = 0.85
_ADVANCE_UPPER = 0.68
_ADVANCE_DIGIT = 0.56
_ADVANCE_DEFAULT = 0.52
_NARROW_CHARS = set("il.,:;|!'`ijlftI ")
_WIDE_CHARS = set("mwMW@%")
_ASCENT = 0.8
_DESCENT = 0.2

_IDENTITY = identity()


class MeasurementError(Exception):
    """A single element can't be measured. Consumed by the fallback ladder."""


@dataclass
class StepBudget:
    limit: int = DEFAULT_STEP_BUDGET
    used: int = 0

    def tick(self) -> None:
        self.used += 1
        if self.used > self.limit:
            raise MeasurementTimeout(self.limit)


@dataclass
class _Measurer:
    index: dict[str, Element]
    budget: StepBudget
    viewport: tuple[float, float]
    # ids of <use> targets currently being expanded
    expanding: set[str] = field(default_factory=set)
    # The measured element; an outermost <svg> keeps its own user space
    top: Element | None = None

    # ── Tier 1: strict ────────────────────────────────────────────────

    def strict(self, el: Element, m: Matrix, font_size: float) -> BoundingBox:
        self.budget.tick()
        tag = local_name(el.tag)
        if not _is_rendered(el, tag):
            return UNDEFINED
        m = m @ self._own_transform(el)
        font_size = _font_size(el, font_size)

        if tag in CONTAINER_TAGS:
            m = m @ self._nested_offset(el, tag)
            box = UNDEFINED
            for child in el.elements:
                box = box.union(self.strict(child, m, font_size))
            return box
        if tag == "use":
            return self._measure_use(el, m, font_size, strict=True)
        return self.leaf(el, tag, m, font_size)

    # ── Tiers 2–4: per child, skipping what can't be measured ─────────

    def lenient(self, el: Element, m: Matrix, font_size: float) -> BoundingBox:
        self.budget.tick()
        tag = local_name(el.tag)
        if not _is_rendered(el, tag):
            return UNDEFINED
        try:
            m = m @ self._own_transform(el)
            font_size = _font_size(el, font_size)
            if tag in CONTAINER_TAGS:
                m = m @ self._nested_offset(el, tag)
        except MeasurementError as e:
            logger.debug("Excluding <%s>: %s", tag, e)
            return UNDEFINED

        if tag in CONTAINER_TAGS:
            box = UNDEFINED
            for child in el.elements:
                try:
                    child_box = self.strict(child, m, font_size)
                except MeasurementError as e:
                    logger.debug("Per-child fallback for <%s>: %s", local_name(child.tag), e)
                    child_box = self.lenient(child, m, font_size)
                box = box.union(child_box)
            return box

        try:
            if tag == "use":
                return self._measure_use(el, m, font_size, strict=False)
            return self.leaf(el, tag, m, font_size)
        except MeasurementError as e:
            logger.debug("Excluding <%s>: %s", tag, e)
            return UNDEFINED

    # ── Leaves ────────────────────────────────────────────────────────

    def leaf(self, el: Element, tag: str, m: Matrix, font_size: float) -> BoundingBox:
        try:
            if tag in SHAPE_TAGS:
                path = self._shape_path(el, tag)
                if path is None:
                    return UNDEFINED
                return path_bbox(path, m)
            if tag in TEXT_TAGS:
                return self._text_bbox(el, m, font_size)
            if tag == "image":
                w = self._length(el, "width", self.viewport[0])
                h = self._length(el, "height", self.viewport[1])
                if w <= 0 or h <= 0:
                    return UNDEFINED
                x = self._length(el, "x", self.viewport[0])
                y = self._length(el, "y", self.viewport[1])
                return BoundingBox.from_rect(x, y, w, h).transformed(m)
        except MeasurementError:
            raise
        except Exception as e:
            raise MeasurementError(f"<{tag}>: {e}") from e
        # Unknown element: nothing to draw
        return UNDEFINED

    def _shape_path(self, el: Element, tag: str) -> Path | None:
        vw, vh = self.viewport
        diag = math.hypot(vw, vh) / math.sqrt(2)
        if tag == "path":
            d = el.get("d") or ""
            if not d.strip():
                return None
            path = parse_path(d)
            if len(path) == 0:
                raise MeasurementError("path has no drawable segments")
            return path
        if tag == "rect":
            x, y = self._length(el, "x", vw), self._length(el, "y", vh)
            w, h = self._length(el, "width", vw), self._length(el, "height", vh)
            if w <= 0 or h <= 0:
                return None
            rx, ry = _corner_radii(el, w, h, vw, vh)
            return parse_path(_rect_d(x, y, w, h, rx, ry))
        if tag == "circle":
            r = self._length(el, "r", diag)
            if r <= 0:
                return None
            cx, cy = self._length(el, "cx", vw), self._length(el, "cy", vh)
            return parse_path(_ellipse_d(cx, cy, r, r))
        if tag == "ellipse":
            rx, ry = self._length(el, "rx", vw), self._length(el, "ry", vh)
            if rx <= 0 or ry <= 0:
                return None
            cx, cy = self._length(el, "cx", vw), self._length(el, "cy", vh)
            return parse_path(_ellipse_d(cx, cy, rx, ry))
        if tag == "line":
            x1, y1 = self._length(el, "x1", vw), self._length(el, "y1", vh)
            x2, y2 = self._length(el, "x2", vw), self._length(el, "y2", vh)
            return parse_path(f"M {x1!r} {y1!r} L {x2!r} {y2!r}")
        # polyline / polygon
        nums = parse_numbers(el.get("points"))
        if len(nums) < 2:
            return None
        pairs = [f"{nums[i]!r} {nums[i + 1]!r}" for i in range(0, len(nums) - 1, 2)]
        d = "M " + " L ".join(pairs)
        if len(pairs) == 1:
            d += f" L {pairs[0]}"
        return parse_path(d)

    def _text_bbox(self, el: Element, m: Matrix, font_size: float) -> BoundingBox:
        box = UNDEFINED
        x = _first_length(el.get("x"), self.viewport[0])
        y = _first_length(el.get("y"), self.viewport[1])
        anchor = el.get("text-anchor") or "start"
        for run_text, run_x, run_y, run_size, run_anchor in _text_runs(el, x, y, font_size, anchor, self.viewport):
            advance = text_advance(run_text, run_size)
            if advance <= 0:
                continue
            if run_anchor == "middle":
                run_x -= advance / 2
            elif run_anchor == "end":
                run_x -= advance
            run_box = BoundingBox(run_x, run_y - _ASCENT * run_size, run_x + advance, run_y + _DESCENT * run_size)
            box = box.union(run_box.transformed(m))
        return box

    # ── <use> ─────────────────────────────────────────────────────────

    def _measure_use(self, el: Element, m: Matrix, font_size: float, *, strict: bool) -> BoundingBox:
        href = (el.href or "").strip()
        if not href.startswith("#"):
            raise MeasurementError(f"<use> target {href!r} is not a local reference")
        target_id = href[1:]
        target = self.index.get(target_id)
        if target is None:
            raise MeasurementError(f"<use> target #{target_id} not found")
        if target_id in self.expanding:
            raise MeasurementError(f"<use> reference cycle through #{target_id}")

        offset = translation(self._length(el, "x", self.viewport[0]), self._length(el, "y", self.viewport[1]))
        m = m @ offset
        self.expanding.add(target_id)
        try:
            if local_name(target.tag) == "symbol":
                # A symbol only renders through <use>; measure its content
                box = UNDEFINED
                for child in target.elements:
                    child_box = self.strict(child, m, font_size) if strict else self.lenient(child, m, font_size)
                    box = box.union(child_box)
                return box
            return self.strict(target, m, font_size) if strict else self.lenient(target, m, font_size)
        finally:
            self.expanding.discard(target_id)

    # ── helpers ───────────────────────────────────────────────────────

    def _own_transform(self, el: Element) -> Matrix:
        try:
            return parse_transform(el.get("transform"))
        except ValueError as e:
            raise MeasurementError(str(e)) from e

    def _nested_offset(self, el: Element, tag: str) -> Matrix:
        if tag != "svg" or el is self.top:
            return identity()
        vw, vh = self.viewport
        offset = translation(self._length(el, "x", vw), self._length(el, "y", vh))
        vb = parse_viewbox(el.get("viewBox"))
        if vb is None or vb[2] <= 0 or vb[3] <= 0:
            return offset
        # width and height default to 100%
        width = self._length(el, "width", vw) if el.get("width") else vw
        height = self._length(el, "height", vh) if el.get("height") else vh
        if width <= 0 or height <= 0:
            raise MeasurementError("nested <svg> has an empty viewport")
        return offset @ viewbox_transform(vb, width, height, el.get("preserveAspectRatio"))

    def _length(self, el: Element, name: str, reference: float) -> float:
        try:
            return parse_length(el.get(name), 0.0, reference)
        except ValueError as e:
            raise MeasurementError(str(e)) from e


def measure(
    element: Element,
    matrix: Matrix | None = None,
    *,
    index: dict[str, Element] | None = None,
    budget: StepBudget | None = None,
    viewport: tuple[float, float] = (100.0, 100.0),
    font_size: float = DEFAULT_FONT_SIZE,
) -> BoundingBox:
    """Bounding box of ``element`` in the frame described by ``matrix``.

    ``index`` resolves ``<use>`` references; ``viewport`` resolves percentage
    lengths. Returns ``UNDEFINED`` when nothing can be measured.
    """
    measurer = _Measurer(index=index or {}, budget=budget or StepBudget(), viewport=viewport, top=element)
    m = identity() if matrix is None else matrix

    try:
        box = measurer.strict(element, m, font_size)
    except MeasurementError as e:
        logger.debug("Whole-subtree measurement failed (%s); measuring per child", e)
        box = measurer.lenient(element, m, font_size)

    if not box.is_defined:
        logger.debug("Subtree <%s> has no measurable geometry", local_name(element.tag))
    return box


def path_bbox(path: Path, m: Matrix) -> BoundingBox:
    """Exact bounds of ``path`` after the affine map ``m``.

    Béziers and lines map to Béziers, so their control points are transformed
    and svgpathtools finds the extrema. Arcs are handled analytically.
    """
    xs: list[float] = []
    ys: list[float] = []
    for seg in path:
        if isinstance(seg, Arc):
            ax, ay = _arc_extrema(seg, m)
            xs.extend(ax)
            ys.extend(ay)
            continue
        if np.allclose(m, _IDENTITY):
            xmin, xmax, ymin, ymax = seg.bbox()
        else:
            mapped = type(seg)(*(apply(m, p) for p in seg.bpoints()))
            xmin, xmax, ymin, ymax = mapped.bbox()
        xs.extend((xmin, xmax))
        ys.extend((ymin, ymax))
    if not all(math.isfinite(v) for v in xs + ys):
        raise MeasurementError("non-finite coordinates")
    return BoundingBox.from_points(xs, ys)


def _arc_extrema(arc: Arc, m: Matrix) -> tuple[list[float], list[float]]:
    """Candidate x/y extremes of an elliptical arc under ``m``.

    The arc is C + U·cos(t) + V·sin(t); each coordinate peaks where its
    derivative vanishes, at t = atan2(V, U) and t + 180°.
    """
    phi = math.radians(arc.rotation)
    rx, ry = arc.radius.real, arc.radius.imag
    lin = m[:2, :2]
    u = lin @ np.array([rx * math.cos(phi), rx * math.sin(phi)])
    v = lin @ np.array([-ry * math.sin(phi), ry * math.cos(phi)])
    c = apply(m, arc.center)

    start = math.radians(arc.theta)
    sweep = math.radians(arc.delta)
    candidates = [start, start + sweep]
    for axis in (0, 1):
        t0 = math.atan2(v[axis], u[axis])
        for t in (t0, t0 + math.pi):
            if _angle_in_sweep(t, start, sweep):
                candidates.append(t)

    xs = [c.real + u[0] * math.cos(t) + v[0] * math.sin(t) for t in candidates]
    ys = [c.imag + u[1] * math.cos(t) + v[1] * math.sin(t) for t in candidates]
    return xs, ys


def _angle_in_sweep(t: float, start: float, sweep: float) -> bool:
    two_pi = 2 * math.pi
    if abs(sweep) >= two_pi:
        return True
    if sweep >= 0:
        return (t - start) % two_pi <= sweep
    return (start - t) % two_pi <= -sweep


def text_advance(text: str, font_size: float) -> float:
    """Approximate advance width from a per-character-class metrics table."""
    total = 0.0
    for ch in text:
        if ch in _NARROW_CHARS:
            total += _ADVANCE_NARROW
        elif ch in _WIDE_CHARS:
            total += _ADVANCE_WIDE
        elif ch.isdigit():
            total += _ADVANCE_DIGIT
        elif ch.isupper():
            total += _ADVANCE_UPPER
        else:
            total += _ADVANCE_DEFAULT
    return total * font_size


def _text_runs(el: Element, x: float, y: float, font_size: float, anchor: str, viewport: tuple[float, float]):
    """Yield ``(text, x, y, font_size, anchor)`` per positioned run.

    A <tspan> with its own x/y starts a new run; otherwise its text joins the
    current one.
    """
    current: list[str] = []
    run_x, run_y, run_size = x, y, font_size
    for child in el.children:
        if isinstance(child, Text):
            current.append(child.value)
            continue
        if not isinstance(child, Element) or local_name(child.tag) not in ("tspan", "a"):
            continue
        child_size = _font_size(child, font_size)
        if child.get("x") is not None or child.get("y") is not None:
            text = " ".join("".join(current).split())
            if text:
                yield text, run_x, run_y, run_size, anchor
            current = []
            run_x = _first_length(child.get("x"), viewport[0], run_x)
            run_y = _first_length(child.get("y"), viewport[1], run_y)
            run_size = child_size
            anchor = child.get("text-anchor") or anchor
        current.append(child.text)
    text = " ".join("".join(current).split())
    if text:
        yield text, run_x, run_y, run_size, anchor


def _first_length(value: str | None, reference: float, default: float = 0.0) -> float:
    if not value or not value.strip():
        return default
    first = value.replace(",", " ").split()[0]
    try:
        return parse_length(first, default, reference)
    except ValueError as e:
        raise MeasurementError(str(e)) from e


def _is_rendered(el: Element, tag: str) -> bool:
    if tag in NON_RENDERED_TAGS:
        return False
    return (el.get("display") or "").strip() != "none"


def _corner_radii(el: Element, w: float, h: float, vw: float, vh: float) -> tuple[float, float]:
    raw_rx, raw_ry = el.get("rx"), el.get("ry")
    rx = parse_length(raw_rx, 0.0, vw) if raw_rx not in (None, "auto") else None
    ry = parse_length(raw_ry, 0.0, vh) if raw_ry not in (None, "auto") else None
    if rx is None:
        rx = ry or 0.0
    if ry is None:
        ry = rx
    return max(0.0, min(rx, w / 2)), max(0.0, min(ry, h / 2))


def _rect_d(x: float, y: float, w: float, h: float, rx: float, ry: float) -> str:
    if rx <= 0 or ry <= 0:
        return f"M {x!r} {y!r} H {x + w!r} V {y + h!r} H {x!r} Z"
    return (
        f"M {x + rx!r} {y!r} H {x + w - rx!r} "
        f"A {rx!r} {ry!r} 0 0 1 {x + w!r} {y + ry!r} V {y + h - ry!r} "
        f"A {rx!r} {ry!r} 0 0 1 {x + w - rx!r} {y + h!r} H {x + rx!r} "
        f"A {rx!r} {ry!r} 0 0 1 {x!r} {y + h - ry!r} V {y + ry!r} "
        f"A {rx!r} {ry!r} 0 0 1 {x + rx!r} {y!r} Z"
    )


def _ellipse_d(cx: float, cy: float, rx: float, ry: float) -> str:
    return (
        f"M {cx - rx!r} {cy!r} "
        f"A {rx!r} {ry!r} 0 1 0 {cx + rx!r} {cy!r} "
        f"A {rx!r} {ry!r} 0 1 0 {cx - rx!r} {cy!r} Z"
    )


def _font_size(el: Element, inherited: float) -> float:
    value = el.get("font-size")
    if not value:
        return inherited
    try:
        size = parse_length(value, inherited, reference=inherited, font_size=inherited)
    except ValueError:
        return inherited
    return size if size > 0 else inherited
