"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import bimisvg
from bimisvg.config import settings
from bimisvg.errors import ConversionError
from bimisvg.models.responses import ErrorResponse

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.bimisvg_log_level.upper(), logging.INFO),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)


async def conversion_error_handler(request: Request, exc: ConversionError) -> JSONResponse:
    logger.info("Conversion rejected at %s: %s", exc.stage or "unknown stage", exc)
    return JSONResponse(status_code=422, content=ErrorResponse(detail=str(exc), stage=exc.stage).model_dump())


def create_app() -> FastAPI:
    app = FastAPI(
        title="bimisvg",
        description="BIMI SVG logo normalizer and validator",
        version=bimisvg.__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ConversionError, conversion_error_handler)

    from bimisvg.api.router import api_router

    app.include_router(api_router)

    return app


app = create_app()
