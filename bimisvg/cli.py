"""Batch BIMI conversion — one independent conversion per input file.

Usage:
    python -m bimisvg.cli logo.svg                     # writes logo.bimi.svg beside it
    python -m bimisvg.cli logos/ -o out/ --workers 4   # every .svg in a folder
    python -m bimisvg.cli logo.svg --shape roundedSquare --background "#0B2A4A"
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field

from pydantic import ValidationError

from bimisvg.config import settings
from bimisvg.engine.pipeline import convert
from bimisvg.errors import ConversionError
from bimisvg.models.options import ConvertOptions
from bimisvg.svg.parser import extract_title

logger = logging.getLogger(__name__)

OUTPUT_SUFFIX = ".bimi.svg"


@dataclass
class FileReport:
    """Outcome of one file; picklable so workers can hand it back."""

    input_path: str
    output_path: str | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.output_path is not None and not self.errors


def output_path_for(input_path: str, output_dir: str | None) -> str:
    base = os.path.basename(input_path)
    stem = base[: -len(".svg")] if base.lower().endswith(".svg") else base
    return os.path.join(output_dir or os.path.dirname(input_path), stem + OUTPUT_SUFFIX)


def process_file(input_path: str, output_dir: str | None, options: dict) -> FileReport:
    """Convert one file and write the result. Never raises for bad input."""
    report = FileReport(input_path=input_path)
    try:
        with open(input_path, "rb") as f:
            raw = f.read()
    except OSError as e:
        report.errors.append(f"cannot read file: {e}")
        return report

    if not options.get("title"):
        # Pre-populate the accessible name from the source's own <title>
        options = {**options, "title": extract_title(raw)}

    try:
        result = convert(raw, ConvertOptions.model_validate(options))
    except ConversionError as e:
        report.errors.append(str(e))
        return report

    out_path = output_path_for(input_path, output_dir)
    try:
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(result.document)
    except OSError as e:
        report.errors.append(f"cannot write file: {e}")
        return report

    report.output_path = out_path
    report.errors.extend(result.validation.errors)
    report.warnings.extend(result.validation.warnings)
    return report


def collect_inputs(paths: list[str]) -> list[str]:
    files: list[str] = []
    for path in paths:
        if os.path.isdir(path):
            files.extend(
                os.path.join(path, name)
                for name in sorted(os.listdir(path))
                if name.lower().endswith(".svg") and not name.lower().endswith(OUTPUT_SUFFIX)
            )
        else:
            files.append(path)
    return files


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bimisvg",
        description="Normalize SVG logos into BIMI-ready documents",
    )
    parser.add_argument("inputs", nargs="+", metavar="INPUT", help="SVG file or folder of SVGs")
    parser.add_argument("-o", "--output", help="Output folder (default: beside each input)")
    parser.add_argument("--shape", choices=["circle", "roundedSquare"], default="circle")
    parser.add_argument("--background", default="#FFFFFF", help="Background fill color")
    parser.add_argument("--padding", type=float, default=12.5, help="Safe-area padding percent (1-25)")
    parser.add_argument("--title", help="Accessible name; defaults to the source's own <title>")
    parser.add_argument("--workers", type=int, default=1, help="Convert in N worker processes")
    return parser


def print_report(report: FileReport) -> None:
    print(f"[{os.path.basename(report.input_path)}]")
    if report.output_path:
        print(f"  → Saved: {report.output_path}")
    for message in report.errors:
        print(f"  ERROR: {message}")
    for message in report.warnings:
        print(f"  warning: {message}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, settings.bimisvg_log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    options = {
        "shape": args.shape,
        "background_color": args.background,
        "padding_percent": args.padding,
        "title": args.title,
    }
    try:
        ConvertOptions.model_validate(options)
    except ValidationError as e:
        print(f"Invalid options: {e}", file=sys.stderr)
        return 2

    inputs = collect_inputs(args.inputs)
    if not inputs:
        print("No .svg files found.", file=sys.stderr)
        return 1
    if args.output:
        os.makedirs(args.output, exist_ok=True)

    if args.workers > 1 and len(inputs) > 1:
        with ProcessPoolExecutor(max_workers=args.workers) as pool:
            reports = list(pool.map(process_file, inputs, [args.output] * len(inputs), [options] * len(inputs)))
    else:
        reports = [process_file(path, args.output, options) for path in inputs]

    for report in reports:
        print_report(report)

    succeeded = sum(1 for r in reports if r.ok)
    print(f"\nDone: {succeeded}/{len(reports)} converted cleanly")
    return 0 if succeeded == len(reports) else 1


if __name__ == "__main__":
    sys.exit(main())
