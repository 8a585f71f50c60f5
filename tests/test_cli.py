"""Tests for the batch conversion CLI."""

from __future__ import annotations

from tests.conftest import CIRCLE_LOGO_SVG, OFFSET_LOGO_SVG

from bimisvg.cli import collect_inputs, main, output_path_for, process_file
from bimisvg.svg.parser import extract_title


def test_output_path_for(tmp_path):
    assert output_path_for("/logos/acme.svg", None) == "/logos/acme.bimi.svg"
    assert output_path_for("/logos/acme.SVG", str(tmp_path)) == str(tmp_path / "acme.bimi.svg")


def test_convert_single_file(tmp_path, capsys):
    src = tmp_path / "circle.svg"
    src.write_text(CIRCLE_LOGO_SVG, encoding="utf-8")

    assert main([str(src)]) == 0
    out = tmp_path / "circle.bimi.svg"
    assert out.exists()
    assert 'viewBox="0 0 100 100"' in out.read_text(encoding="utf-8")
    assert "Done: 1/1" in capsys.readouterr().out


def test_title_taken_from_source(tmp_path):
    src = tmp_path / "acme.svg"
    src.write_text(OFFSET_LOGO_SVG, encoding="utf-8")
    out_dir = tmp_path / "out"

    assert main([str(src), "-o", str(out_dir), "--shape", "roundedSquare"]) == 0
    assert extract_title((out_dir / "acme.bimi.svg").read_bytes()) == "Acme Corp"


def test_title_flag_overrides_source(tmp_path):
    src = tmp_path / "acme.svg"
    src.write_text(OFFSET_LOGO_SVG, encoding="utf-8")

    report = process_file(str(src), None, {"title": "Acme Inc"})
    assert report.ok
    assert extract_title((tmp_path / "acme.bimi.svg").read_text(encoding="utf-8")) == "Acme Inc"


def test_validation_errors_fail_the_run(tmp_path, capsys):
    src = tmp_path / "logo.svg"
    src.write_text(CIRCLE_LOGO_SVG, encoding="utf-8")

    assert main([str(src), "--background", "transparent"]) == 1
    out = capsys.readouterr().out
    assert "ERROR: Background: background color must be fully opaque" in out


def test_unparsable_file(tmp_path, capsys):
    src = tmp_path / "broken.svg"
    src.write_text("<svg><oops></svg>", encoding="utf-8")

    assert main([str(src)]) == 1
    assert not (tmp_path / "broken.bimi.svg").exists()
    assert "ERROR: Invalid SVG" in capsys.readouterr().out


def test_missing_file(tmp_path):
    report = process_file(str(tmp_path / "nope.svg"), None, {})
    assert not report.ok
    assert report.errors[0].startswith("cannot read file")


def test_unwritable_output_is_reported(tmp_path):
    src = tmp_path / "logo.svg"
    src.write_text(CIRCLE_LOGO_SVG, encoding="utf-8")
    report = process_file(str(src), str(tmp_path / "missing" / "dir"), {})
    assert not report.ok
    assert report.output_path is None
    assert report.errors[0].startswith("cannot write file")


def test_invalid_options(tmp_path, capsys):
    src = tmp_path / "logo.svg"
    src.write_text(CIRCLE_LOGO_SVG, encoding="utf-8")
    assert main([str(src), "--padding", "40"]) == 2
    assert "Invalid options" in capsys.readouterr().err


def test_folder_input_skips_previous_output(tmp_path):
    (tmp_path / "a.svg").write_text(CIRCLE_LOGO_SVG, encoding="utf-8")
    (tmp_path / "b.svg").write_text(OFFSET_LOGO_SVG, encoding="utf-8")
    (tmp_path / "a.bimi.svg").write_text(CIRCLE_LOGO_SVG, encoding="utf-8")
    (tmp_path / "notes.txt").write_text("hi", encoding="utf-8")

    inputs = collect_inputs([str(tmp_path)])
    assert [p.rsplit("/", 1)[-1] for p in inputs] == ["a.svg", "b.svg"]


def test_worker_pool(tmp_path):
    for name in ("a", "b", "c"):
        (tmp_path / f"{name}.svg").write_text(CIRCLE_LOGO_SVG, encoding="utf-8")
    out_dir = tmp_path / "out"

    assert main([str(tmp_path), "-o", str(out_dir), "--workers", "2"]) == 0
    assert sorted(p.name for p in out_dir.iterdir()) == ["a.bimi.svg", "b.bimi.svg", "c.bimi.svg"]


def test_empty_folder(tmp_path, capsys):
    assert main([str(tmp_path)]) == 1
    assert "No .svg files found." in capsys.readouterr().err
