"""Conversion options."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Shape = Literal["circle", "roundedSquare"]


class ConvertOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    background_color: str = Field(
        default="#FFFFFF",
        alias="backgroundColor",
        description="Fill of the background primitive; must be opaque for BIMI",
    )
    shape: Shape = Field(default="circle", description="Background primitive")
    padding_percent: float = Field(
        default=12.5,
        alias="paddingPercent",
        ge=1.0,
        le=25.0,
        description="Margin on each side, percent of the canvas",
    )
    title: str | None = Field(default=None, description="Accessible name embedded as <title>")
