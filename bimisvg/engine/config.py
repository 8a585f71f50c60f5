"""Engine configuration — canvas geometry and measurement limits."""

from __future__ import annotations

from dataclasses import dataclass

from bimisvg.config import settings


@dataclass
class EngineConfig:
    """Fixed shape of the canonical document plus tunable limits."""

    # Output canvas: square viewBox "0 0 size size"
    canvas_size: float = 100.0

    # Rounded-square background corner radius, fraction of canvas size
    corner_radius_ratio: float = 0.2

    # SVG Tiny Portable/Secure, the profile BIMI requires
    svg_version: str = "1.2"
    svg_base_profile: str = "tiny-ps"

    # Id of the wrapping content group
    logo_group_id: str = "logo"

    # Geometry resolver: max elements visited per measurement
    measure_step_budget: int = settings.measure_step_budget

    # Validator
    nominal_padding_percent: float = settings.validator_nominal_padding
    min_canvas_size: float = settings.min_canvas_size
    max_recommended_bytes: int = 32 * 1024

    # Inputs larger than this are rejected before parsing
    max_document_bytes: int = settings.max_document_bytes
