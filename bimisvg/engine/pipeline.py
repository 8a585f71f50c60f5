"""Conversion pipeline — parse → sanitize → resolve styles → measure → plan → assemble.

Every call builds and discards its own trees, id index and measurement budget,
so conversions can run side by side in separate workers without locking.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from bimisvg.engine.assembler import SourceParts, assemble, collect_parts
from bimisvg.engine.config import EngineConfig
from bimisvg.engine.geometry import StepBudget, measure
from bimisvg.engine.layout import Transform, plan
from bimisvg.engine.validator import validate
from bimisvg.errors import BimiError, ConversionError
from bimisvg.models.options import ConvertOptions
from bimisvg.models.validation import ValidationResult
from bimisvg.svg.document import Document, Element
from bimisvg.svg.parser import parse_svg
from bimisvg.svg.sanitizer import sanitize
from bimisvg.svg.serializer import serialize_svg
from bimisvg.svg.styles import resolve_styles
from bimisvg.utils.geometry import UNDEFINED, BoundingBox

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    document: str
    validation: ValidationResult
    transform: Transform
    bbox: BoundingBox = UNDEFINED
    # Stage name -> wall time in ms
    timings: dict[str, float] = field(default_factory=dict)


@dataclass
class _State:
    """Mutable state for one conversion; never shared between calls."""

    source: str | bytes
    options: ConvertOptions
    doc: Document | None = None
    parts: SourceParts | None = None
    bbox: BoundingBox = UNDEFINED
    transform: Transform = field(default_factory=Transform)
    output: Document | None = None
    markup: str = ""
    validation: ValidationResult = field(default_factory=ValidationResult)
    timings: dict[str, float] = field(default_factory=dict)


class ConversionPipeline:
    """Runs the conversion stages in order, timing each one."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()
        self.stages: list[tuple[str, Callable[[_State], None]]] = [
            ("parse", self._parse),
            ("sanitize", self._sanitize),
            ("collect", self._collect),
            ("resolve_styles", self._resolve_styles),
            ("measure", self._measure),
            ("plan", self._plan),
            ("assemble", self._assemble),
            ("serialize", self._serialize),
            ("validate", self._validate),
        ]

    def run(self, source: str | bytes, options: ConvertOptions | None = None) -> ConversionResult:
        """Convert ``source`` markup. Raises ConversionError; never returns partial output."""
        start = time.perf_counter()
        state = _State(source=source, options=options or ConvertOptions())

        for name, stage in self.stages:
            t0 = time.perf_counter()
            try:
                stage(state)
            except BimiError as e:
                logger.warning("  %s FAILED: %s", name, e)
                if isinstance(e, ConversionError):
                    raise
                raise ConversionError(str(e), stage=name) from e
            except Exception as e:
                logger.exception("  %s FAILED unexpectedly", name)
                raise ConversionError(f"Conversion failed during {name}: {e}", stage=name) from e
            state.timings[name] = (time.perf_counter() - t0) * 1000
            logger.debug("  %s completed in %.1fms", name, state.timings[name])

        total = (time.perf_counter() - start) * 1000
        logger.info(
            "Conversion complete in %.0fms: %s, %d errors, %d warnings",
            total,
            state.transform.to_attribute(),
            len(state.validation.errors),
            len(state.validation.warnings),
        )
        return ConversionResult(
            document=state.markup,
            validation=state.validation,
            transform=state.transform,
            bbox=state.bbox,
            timings=state.timings,
        )

    # ── stages ────────────────────────────────────────────────────────

    def _parse(self, state: _State) -> None:
        size = len(state.source.encode("utf-8") if isinstance(state.source, str) else state.source)
        if size > self.config.max_document_bytes:
            raise ConversionError(
                f"Document is {size} bytes; the limit is {self.config.max_document_bytes}", stage="parse"
            )
        state.doc = parse_svg(state.source)

    def _sanitize(self, state: _State) -> None:
        state.doc = sanitize(state.doc)

    def _collect(self, state: _State) -> None:
        state.parts = collect_parts(state.doc, self.config)

    def _resolve_styles(self, state: _State) -> None:
        resolve_styles(state.doc, state.parts.content)

    def _measure(self, state: _State) -> None:
        parts = state.parts
        # Index over what the output will contain, so <use> sees resolved styles
        index = Document(Element("svg", children=[*parts.defs, *parts.content])).id_index()
        index = {**state.doc.id_index(), **index}
        group = Element("g", children=list(parts.content))
        state.bbox = measure(
            group,
            index=index,
            budget=StepBudget(limit=self.config.measure_step_budget),
            viewport=parts.source_size,
        )

    def _plan(self, state: _State) -> None:
        state.transform = plan(
            state.bbox,
            canvas_size=self.config.canvas_size,
            padding_percent=state.options.padding_percent,
            source_size=state.parts.source_size,
        )

    def _assemble(self, state: _State) -> None:
        state.output = assemble(state.parts, state.transform, state.options, self.config)

    def _serialize(self, state: _State) -> None:
        state.markup = serialize_svg(state.output)

    def _validate(self, state: _State) -> None:
        state.validation = validate(
            state.output,
            padding_percent=state.options.padding_percent,
            config=self.config,
        )


def convert(
    source: str | bytes,
    options: ConvertOptions | dict[str, Any] | None = None,
    config: EngineConfig | None = None,
) -> ConversionResult:
    """Normalize an SVG logo into a canonical BIMI document and validate it."""
    if isinstance(options, dict):
        options = ConvertOptions.model_validate(options)
    return ConversionPipeline(config).run(source, options)
