"""API request models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from bimisvg.models.options import ConvertOptions


class ConvertRequest(BaseModel):
    svg: str = Field(..., description="Raw SVG code")
    options: ConvertOptions = Field(
        default_factory=ConvertOptions,
        description="Background shape, color, padding and title",
    )
    source_kind: Literal["svg", "raster"] = Field(
        default="svg",
        alias="sourceKind",
        description="Where the SVG came from; 'raster' means it was auto-vectorized",
    )

    model_config = {"populate_by_name": True}


class ValidateRequest(BaseModel):
    svg: str = Field(..., description="Raw SVG code to check")


class TitleRequest(BaseModel):
    svg: str = Field(..., description="Raw SVG code")
