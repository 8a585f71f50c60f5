"""BIMI conversion engine: measure, plan, assemble, validate."""

from bimisvg.engine.config import EngineConfig
from bimisvg.engine.layout import Transform, plan, safe_area
from bimisvg.engine.pipeline import ConversionPipeline, ConversionResult, convert
from bimisvg.engine.validator import validate

__all__ = [
    "EngineConfig",
    "Transform",
    "plan",
    "safe_area",
    "ConversionPipeline",
    "ConversionResult",
    "convert",
    "validate",
]
