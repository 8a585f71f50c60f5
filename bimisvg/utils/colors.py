"""CSS color opacity. No engine imports."""

from __future__ import annotations

import re

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_FUNC_RE = re.compile(r"^(rgba?|hsla?|hwb|lab|lch|oklab|oklch)\(\s*(.*?)\s*\)$", re.IGNORECASE)

# Paints that draw nothing
_INVISIBLE = {"none", "transparent"}
# Paints whose value depends on context we can't see
_CONTEXTUAL = {"currentcolor", "inherit", "unset", "initial", "revert", "context-fill", "context-stroke"}


def color_alpha(value: str | None) -> float | None:
    """Alpha of a paint value in [0, 1].

    Returns ``None`` when the paint can't be judged statically (``url(#…)``
    paint servers, ``currentColor``, ``var()``, unparseable input). A missing
    value is SVG's default black fill, alpha 1.
    """
    if value is None:
        return 1.0
    text = value.strip()
    lowered = text.lower()
    if not text:
        return 1.0
    if lowered in _INVISIBLE:
        return 0.0
    if lowered in _CONTEXTUAL or lowered.startswith(("url(", "var(")):
        return None

    m = _HEX_RE.match(text)
    if m:
        digits = m.group(1)
        if len(digits) == 4:
            return int(digits[3] * 2, 16) / 255
        if len(digits) == 8:
            return int(digits[6:8], 16) / 255
        return 1.0

    m = _FUNC_RE.match(text)
    if m:
        return _functional_alpha(m.group(1).lower(), m.group(2))

    if re.fullmatch(r"[a-zA-Z]+", text):
        # Named color
        return 1.0
    return None


def parse_opacity(value: str | None) -> float | None:
    """``opacity``/``fill-opacity`` as a number in [0, 1]; ``None`` if unparseable."""
    if value is None or not value.strip():
        return 1.0
    text = value.strip()
    try:
        if text.endswith("%"):
            number = float(text[:-1]) / 100
        else:
            number = float(text)
    except ValueError:
        return None
    return min(1.0, max(0.0, number))


def _functional_alpha(name: str, args: str) -> float | None:
    if "/" in args:
        # CSS Color 4: rgb(0 0 0 / 50%)
        alpha_part = args.split("/", 1)[1].strip()
    else:
        parts = [p for p in re.split(r"[\s,]+", args) if p]
        if name in ("rgba", "hsla") or (name in ("rgb", "hsl") and len(parts) == 4):
            if len(parts) != 4:
                return None
            alpha_part = parts[3]
        else:
            return 1.0
    return parse_opacity(alpha_part)
