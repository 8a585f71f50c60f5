"""API response models."""

from __future__ import annotations

from pydantic import BaseModel

from bimisvg.models.validation import ValidationResult


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"


class TransformInfo(BaseModel):
    scale: float
    translate_x: float
    translate_y: float
    attribute: str


class ConvertResponse(BaseModel):
    svg: str
    validation: ValidationResult
    transform: TransformInfo


class TitleResponse(BaseModel):
    title: str | None = None


class ErrorResponse(BaseModel):
    detail: str
    stage: str = ""
