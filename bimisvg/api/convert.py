"""POST /api/convert — normalize an SVG logo into a BIMI document."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from bimisvg.engine.pipeline import convert as run_conversion
from bimisvg.models.requests import ConvertRequest
from bimisvg.models.responses import ConvertResponse, TransformInfo

logger = logging.getLogger(__name__)

router = APIRouter()

RASTER_SOURCE_WARNING = (
    "Auto vectorization may not be accurate enough for BIMI. "
    "Please consider using an SVG provided by your designer."
)


@router.post("/convert", response_model=ConvertResponse)
def convert(req: ConvertRequest) -> ConvertResponse:
    # ConversionError propagates to the handler registered in main
    result = run_conversion(req.svg, req.options)

    validation = result.validation
    if req.source_kind == "raster":
        validation = validation.model_copy(deep=True)
        validation.add_warning(RASTER_SOURCE_WARNING)

    t = result.transform
    return ConvertResponse(
        svg=result.document,
        validation=validation,
        transform=TransformInfo(
            scale=t.scale_x,
            translate_x=t.translate_x,
            translate_y=t.translate_y,
            attribute=t.to_attribute(),
        ),
    )
