"""BIMI SVG logo normalizer and validator."""

from bimisvg.engine.pipeline import ConversionResult, convert
from bimisvg.engine.validator import validate
from bimisvg.errors import BimiError, ConversionError, MeasurementTimeout, ParseError
from bimisvg.models.options import ConvertOptions
from bimisvg.models.validation import ValidationResult
from bimisvg.svg.parser import extract_title, parse_svg
from bimisvg.svg.serializer import serialize_svg

__version__ = "0.1.0"

__all__ = [
    "convert",
    "validate",
    "ConversionResult",
    "ConvertOptions",
    "ValidationResult",
    "parse_svg",
    "serialize_svg",
    "extract_title",
    "BimiError",
    "ParseError",
    "MeasurementTimeout",
    "ConversionError",
]
