"""Layout planner — one uniform scale + translate that fits content into the safe area."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from bimisvg.utils.geometry import BoundingBox, Matrix, matrix
from bimisvg.utils.math_helpers import format_number

logger = logging.getLogger(__name__)

CANVAS_SIZE = 100.0

# Rounding error in the scale grows with source coordinates
TRANSFORM_DECIMALS = 12


@dataclass(frozen=True)
class Transform:
    """Scale-then-translate affine map: ``p' = p * scale + translate``."""

    scale_x: float = 1.0
    scale_y: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0

    @property
    def is_uniform(self) -> bool:
        return math.isclose(self.scale_x, self.scale_y)

    def to_attribute(self) -> str:
        """SVG ``transform`` value, e.g. ``translate(12.5, 12.5) scale(0.75)``."""
        tx = format_number(self.translate_x, TRANSFORM_DECIMALS)
        ty = format_number(self.translate_y, TRANSFORM_DECIMALS)
        if self.is_uniform:
            scale = format_number(self.scale_x, TRANSFORM_DECIMALS)
        else:
            sx = format_number(self.scale_x, TRANSFORM_DECIMALS)
            sy = format_number(self.scale_y, TRANSFORM_DECIMALS)
            scale = f"{sx}, {sy}"
        return f"translate({tx}, {ty}) scale({scale})"

    def to_matrix(self) -> Matrix:
        return matrix(self.scale_x, 0.0, 0.0, self.scale_y, self.translate_x, self.translate_y)

    def apply_box(self, box: BoundingBox) -> BoundingBox:
        return box.transformed(self.to_matrix())


def safe_area(canvas_size: float = CANVAS_SIZE, padding_percent: float = 12.5) -> BoundingBox:
    """The canvas inset by ``padding_percent`` on every side."""
    if not 0 <= padding_percent < 50:
        raise ValueError(f"padding_percent must be in [0, 50), got {padding_percent}")
    safe_min = canvas_size * padding_percent / 100
    safe_max = canvas_size - safe_min
    return BoundingBox(safe_min, safe_min, safe_max, safe_max)


def plan(
    box: BoundingBox,
    canvas_size: float = CANVAS_SIZE,
    padding_percent: float = 12.5,
    source_size: tuple[float, float] | None = None,
) -> Transform:
    """Transform that centers ``box`` in the safe area at the largest uniform scale.

    An undefined or zero-area box can't drive a fit. The source canvas
    (``source_size``, default the output canvas) is then centered 1:1.
    """
    area = safe_area(canvas_size, padding_percent)

    if box.is_degenerate:
        width, height = source_size or (canvas_size, canvas_size)
        logger.debug("Degenerate content box %s; centering %gx%g source canvas", box.as_tuple(), width, height)
        return Transform(
            translate_x=(canvas_size - width) / 2,
            translate_y=(canvas_size - height) / 2,
        )

    scale = min(area.width / box.width, area.height / box.height)
    box_cx, box_cy = box.center
    safe_cx, safe_cy = area.center
    transform = Transform(
        scale_x=scale,
        scale_y=scale,
        translate_x=safe_cx - box_cx * scale,
        translate_y=safe_cy - box_cy * scale,
    )
    logger.debug("Planned %s for content box %s", transform.to_attribute(), box.as_tuple())
    return transform
