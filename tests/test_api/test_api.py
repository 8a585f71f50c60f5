"""Tests for API endpoints."""

from __future__ import annotations

from fastapi.testclient import TestClient

from bimisvg.api.convert import RASTER_SOURCE_WARNING
from bimisvg.main import app
from tests.conftest import CIRCLE_LOGO_SVG, OFFSET_LOGO_SVG, SCRIPT_LOGO_SVG


client = TestClient(app)


def test_health():
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": "0.1.0"}


def test_convert_circle_logo():
    response = client.post("/api/convert", json={"svg": CIRCLE_LOGO_SVG})
    assert response.status_code == 200
    data = response.json()
    assert data["svg"].startswith('<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100"')
    assert data["validation"]["valid"] is True
    assert data["validation"]["errors"] == []
    assert abs(data["transform"]["scale"] - 1.875) < 1e-9
    assert data["transform"]["attribute"] == "translate(3.125, 3.125) scale(1.875)"


def test_convert_with_options():
    response = client.post(
        "/api/convert",
        json={
            "svg": OFFSET_LOGO_SVG,
            "options": {"backgroundColor": "#000000", "shape": "roundedSquare", "paddingPercent": 20, "title": "Acme"},
        },
    )
    assert response.status_code == 200
    svg = response.json()["svg"]
    assert "<title>Acme</title>" in svg
    assert 'rx="20"' in svg
    assert 'fill="#000000"' in svg


def test_convert_raster_source_adds_warning():
    response = client.post("/api/convert", json={"svg": CIRCLE_LOGO_SVG, "source_kind": "raster"})
    assert response.status_code == 200
    assert RASTER_SOURCE_WARNING in response.json()["validation"]["warnings"]

    plain = client.post("/api/convert", json={"svg": CIRCLE_LOGO_SVG})
    assert RASTER_SOURCE_WARNING not in plain.json()["validation"]["warnings"]


def test_convert_invalid_svg():
    response = client.post("/api/convert", json={"svg": "<not-svg>"})
    assert response.status_code == 422
    data = response.json()
    assert data["stage"] == "parse"
    assert "no <svg> element" in data["detail"]


def test_convert_rejects_bad_padding():
    response = client.post("/api/convert", json={"svg": CIRCLE_LOGO_SVG, "options": {"paddingPercent": 40}})
    assert response.status_code == 422


def test_convert_rejects_unknown_shape():
    response = client.post("/api/convert", json={"svg": CIRCLE_LOGO_SVG, "options": {"shape": "hexagon"}})
    assert response.status_code == 422


def test_validate_raw_upload():
    response = client.post("/api/validate", json={"svg": SCRIPT_LOGO_SVG})
    assert response.status_code == 200
    data = response.json()
    assert data["valid"] is False
    assert "Structural: <script> elements are not allowed (1 found)" in data["errors"]


def test_validate_converted_output():
    converted = client.post("/api/convert", json={"svg": SCRIPT_LOGO_SVG}).json()["svg"]
    data = client.post("/api/validate", json={"svg": converted}).json()
    assert data["valid"] is True


def test_validate_garbage():
    data = client.post("/api/validate", json={"svg": "{}"}).json()
    assert data["valid"] is False
    assert data["errors"][0].startswith("Structural:")


def test_title():
    assert client.post("/api/title", json={"svg": OFFSET_LOGO_SVG}).json() == {"title": "Acme Corp"}
    assert client.post("/api/title", json={"svg": CIRCLE_LOGO_SVG}).json() == {"title": None}
