"""Math helpers — number formatting for emitted markup. No engine imports."""

from __future__ import annotations

import math

# Six decimals keeps sub-micron precision on a 100-unit canvas
_DECIMALS = 6


def format_number(value: float, decimals: int = _DECIMALS) -> str:
    """Shortest fixed-point form: ``12.5``, ``0.75``, ``-3``, never ``1e-07``."""
    if not math.isfinite(value):
        raise ValueError(f"Cannot format non-finite number: {value}")
    text = f"{value:.{decimals}f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text
