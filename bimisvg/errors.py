"""Exception hierarchy for the conversion engine."""

from __future__ import annotations


class BimiError(Exception):
    """Base class for every error raised by bimisvg."""


class ParseError(BimiError):
    """Markup is not well-formed or has no <svg> root."""


class MeasurementTimeout(BimiError):
    """Geometry measurement exceeded its step budget."""

    def __init__(self, budget: int) -> None:
        super().__init__(f"Measurement exceeded step budget of {budget} elements")
        self.budget = budget


class ConversionError(BimiError):
    """A fatal failure at any stage of the conversion pipeline."""

    def __init__(self, message: str, stage: str = "") -> None:
        super().__init__(message)
        self.stage = stage
