"""POST /api/validate and /api/title — inspect markup without converting it."""

from __future__ import annotations

from fastapi import APIRouter

from bimisvg.engine.validator import validate as run_validation
from bimisvg.models.requests import TitleRequest, ValidateRequest
from bimisvg.models.responses import TitleResponse
from bimisvg.models.validation import ValidationResult
from bimisvg.svg.parser import extract_title

router = APIRouter()


@router.post("/validate", response_model=ValidationResult)
def validate(req: ValidateRequest) -> ValidationResult:
    return run_validation(req.svg)


@router.post("/title", response_model=TitleResponse)
def title(req: TitleRequest) -> TitleResponse:
    return TitleResponse(title=extract_title(req.svg))
