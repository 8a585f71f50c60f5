"""Leaf-node geometry helpers. No engine imports."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

Matrix = NDArray[np.float64]

_NUMBER = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
_NUMBER_RE = re.compile(_NUMBER)
_TRANSFORM_FN_RE = re.compile(r"\s*(matrix|translate|scale|rotate|skewX|skewY)\s*\(([^)]*)\)\s*,?", re.IGNORECASE)
_LENGTH_RE = re.compile(rf"^\s*({_NUMBER})\s*([a-zA-Z%]*)\s*$")

# CSS px per unit at 96 dpi
_UNIT_PX = {"": 1.0, "px": 1.0, "pt": 96 / 72, "pc": 16.0, "in": 96.0, "cm": 96 / 2.54, "mm": 96 / 25.4}


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box ``(min_x, min_y, max_x, max_y)``.

    ``UNDEFINED`` stands for "nothing measurable" and is the
    identity element of ``union``.
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_points(cls, xs: NDArray[np.float64] | list[float], ys: NDArray[np.float64] | list[float]) -> BoundingBox:
        if len(xs) == 0:
            return UNDEFINED
        return cls(float(np.min(xs)), float(np.min(ys)), float(np.max(xs)), float(np.max(ys)))

    @classmethod
    def from_rect(cls, x: float, y: float, width: float, height: float) -> BoundingBox:
        return cls(x, y, x + width, y + height)

    @property
    def is_defined(self) -> bool:
        return self.max_x >= self.min_x and self.max_y >= self.min_y and all(
            math.isfinite(v) for v in (self.min_x, self.min_y, self.max_x, self.max_y)
        )

    @property
    def width(self) -> float:
        return self.max_x - self.min_x if self.is_defined else 0.0

    @property
    def height(self) -> float:
        return self.max_y - self.min_y if self.is_defined else 0.0

    @property
    def center(self) -> tuple[float, float]:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    @property
    def is_degenerate(self) -> bool:
        """Undefined, or collapsed to a line or point."""
        return not self.is_defined or self.width <= 0 or self.height <= 0

    def union(self, other: BoundingBox) -> BoundingBox:
        if not other.is_defined:
            return self
        if not self.is_defined:
            return other
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def transformed(self, m: Matrix) -> BoundingBox:
        """Box around the four transformed corners."""
        if not self.is_defined:
            return self
        corners = np.array(
            [
                [self.min_x, self.min_x, self.max_x, self.max_x],
                [self.min_y, self.max_y, self.min_y, self.max_y],
                [1.0, 1.0, 1.0, 1.0],
            ]
        )
        pts = m @ corners
        return BoundingBox.from_points(pts[0], pts[1])

    def within(self, other: BoundingBox, tolerance: float = 1e-6) -> bool:
        return (
            self.min_x >= other.min_x - tolerance
            and self.min_y >= other.min_y - tolerance
            and self.max_x <= other.max_x + tolerance
            and self.max_y <= other.max_y + tolerance
        )

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)


UNDEFINED = BoundingBox(math.inf, math.inf, -math.inf, -math.inf)


# ── Affine matrices ───────────────────────────────────────────────────────
#
# 3×3 homogeneous form of SVG's [a b c d e f]:
#   | a  c  e |
#   | b  d  f |
#   | 0  0  1 |


def identity() -> Matrix:
    return np.eye(3)


def matrix(a: float, b: float, c: float, d: float, e: float, f: float) -> Matrix:
    return np.array([[a, c, e], [b, d, f], [0.0, 0.0, 1.0]])


def translation(tx: float, ty: float = 0.0) -> Matrix:
    return matrix(1.0, 0.0, 0.0, 1.0, tx, ty)


def scaling(sx: float, sy: float | None = None) -> Matrix:
    return matrix(sx, 0.0, 0.0, sx if sy is None else sy, 0.0, 0.0)


def rotation(degrees: float, cx: float = 0.0, cy: float = 0.0) -> Matrix:
    rad = math.radians(degrees)
    cos_a, sin_a = math.cos(rad), math.sin(rad)
    rot = matrix(cos_a, sin_a, -sin_a, cos_a, 0.0, 0.0)
    if cx or cy:
        return translation(cx, cy) @ rot @ translation(-cx, -cy)
    return rot


def viewbox_transform(
    viewbox: tuple[float, float, float, float],
    width: float,
    height: float,
    preserve_aspect_ratio: str | None = None,
) -> Matrix:
    """Map a ``viewBox`` onto a ``width`` x ``height`` viewport.

    Follows ``preserveAspectRatio`` (default ``xMidYMid meet``); ``none``
    stretches each axis independently.
    """
    vx, vy, vw, vh = viewbox
    sx, sy = width / vw, height / vh
    words = (preserve_aspect_ratio or "").split()
    if words and words[0] == "defer":
        words = words[1:]
    align = words[0] if words else "xMidYMid"
    if align == "none":
        return scaling(sx, sy) @ translation(-vx, -vy)

    s = max(sx, sy) if len(words) > 1 and words[1] == "slice" else min(sx, sy)
    frac = {"Min": 0.0, "Mid": 0.5, "Max": 1.0}
    fx = frac.get(align[1:4], 0.5)
    fy = frac.get(align[5:8], 0.5)
    tx = (width - vw * s) * fx
    ty = (height - vh * s) * fy
    return translation(tx, ty) @ scaling(s) @ translation(-vx, -vy)


def apply(m: Matrix, point: complex) -> complex:
    x = m[0, 0] * point.real + m[0, 1] * point.imag + m[0, 2]
    y = m[1, 0] * point.real + m[1, 1] * point.imag + m[1, 2]
    return complex(x, y)


def parse_transform(value: str | None) -> Matrix:
    """Compose an SVG ``transform`` attribute into one matrix.

    Raises ValueError on anything that is not a list of transform functions.
    """
    result = identity()
    if not value or not value.strip():
        return result

    pos = 0
    text = value.strip()
    while pos < len(text):
        m = _TRANSFORM_FN_RE.match(text, pos)
        if not m:
            raise ValueError(f"Malformed transform: {value!r}")
        pos = m.end()
        name = m.group(1).lower()
        nums = [float(n) for n in _NUMBER_RE.findall(m.group(2))]
        result = result @ _transform_function(name, nums, value)
    return result


def _transform_function(name: str, nums: list[float], source: str) -> Matrix:
    if name == "matrix":
        if len(nums) != 6:
            raise ValueError(f"matrix() needs 6 values: {source!r}")
        return matrix(*nums)
    if name == "translate" and len(nums) in (1, 2):
        return translation(*nums)
    if name == "scale" and len(nums) in (1, 2):
        return scaling(*nums)
    if name == "rotate" and len(nums) in (1, 3):
        return rotation(*nums)
    if name == "skewx" and len(nums) == 1:
        return matrix(1.0, 0.0, math.tan(math.radians(nums[0])), 1.0, 0.0, 0.0)
    if name == "skewy" and len(nums) == 1:
        return matrix(1.0, math.tan(math.radians(nums[0])), 0.0, 1.0, 0.0, 0.0)
    raise ValueError(f"Bad arguments to {name}(): {source!r}")


def parse_length(
    value: str | None,
    default: float = 0.0,
    reference: float = 100.0,
    font_size: float = 16.0,
) -> float:
    """Parse an SVG length to user units.

    Percentages resolve against ``reference``; ``em``/``ex`` against ``font_size``.

    Raises ValueError for unparseable values.
    """
    if value is None or not value.strip():
        return default
    m = _LENGTH_RE.match(value)
    if not m:
        raise ValueError(f"Invalid length: {value!r}")
    number = float(m.group(1))
    unit = m.group(2).lower()
    if unit == "%":
        return number * reference / 100.0
    if unit in ("em", "ex"):
        return number * font_size * (0.5 if unit == "ex" else 1.0)
    if unit not in _UNIT_PX:
        raise ValueError(f"Unknown unit in length: {value!r}")
    return number * _UNIT_PX[unit]


def parse_numbers(value: str | None) -> list[float]:
    """All numbers in a list attribute such as ``points``."""
    if not value:
        return []
    return [float(n) for n in _NUMBER_RE.findall(value)]
