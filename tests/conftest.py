"""Shared test fixtures."""

from __future__ import annotations

import pytest


# A brand mark on a 50-unit canvas: one blue circle inscribed at (25, 25)
CIRCLE_LOGO_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 50 50">
  <circle cx="25" cy="25" r="20" fill="blue"/>
</svg>'''

# Off-center content inside a large canvas, with its own nested transform
OFFSET_LOGO_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="400" height="200" viewBox="0 0 400 200">
  <title>Acme Corp</title>
  <g transform="translate(300, 20)">
    <rect x="0" y="0" width="80" height="40" fill="#E63946"/>
    <rect x="0" y="60" width="80" height="40" fill="#1D3557" transform="scale(1, 2)"/>
  </g>
</svg>'''

SCRIPT_LOGO_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
  <script>alert('pwned')</script>
  <!-- exported by a design tool -->
  <rect x="20" y="20" width="60" height="60" fill="green" onclick="steal()"/>
  <foreignObject x="0" y="0" width="10" height="10"><div xmlns="http://www.w3.org/1999/xhtml">hi</div></foreignObject>
  <image href="https://tracker.example.com/pixel.png" x="0" y="0" width="1" height="1"/>
</svg>'''

GRADIENT_LOGO_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" viewBox="0 0 200 200">
  <defs>
    <linearGradient id="brand" x1="0" y1="0" x2="1" y2="1">
      <stop offset="0" stop-color="#FF6B6B"/>
      <stop offset="1" stop-color="#4ECDC4"/>
    </linearGradient>
    <path id="petal" d="M0 0 C 20 -40 60 -40 80 0 C 60 40 20 40 0 0 Z"/>
  </defs>
  <use xlink:href="#petal" x="60" y="100" fill="url(#brand)"/>
</svg>'''

CLASS_STYLED_LOGO_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
  <style>
    .cls-1 { fill: #E63946; stroke: none }
    .cls-2, .cls-3 { fill: #457B9D; opacity: 0.5 }
    svg path { fill: black }
  </style>
  <rect class="cls-1" x="10" y="10" width="30" height="30"/>
  <rect class="cls-2" fill="#000000" x="60" y="10" width="30" height="30"/>
  <rect class="cls-3" style="fill: #F1FAEE" x="10" y="60" width="30" height="30"/>
</svg>'''

EMPTY_LOGO_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
  <title>Nothing here</title>
</svg>'''

TEXT_LOGO_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 300 100">
  <text x="150" y="60" font-size="40" text-anchor="middle" fill="#222">ACME</text>
</svg>'''

# Already in canonical BIMI form
CANONICAL_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100" width="100" height="100" version="1.2" baseProfile="tiny-ps">
  <title>Acme</title>
  <circle cx="50" cy="50" r="50" fill="#FFFFFF"/>
  <g id="logo" transform="translate(12.5, 12.5) scale(0.75)">
    <rect x="0" y="0" width="100" height="100" fill="red"/>
  </g>
</svg>'''


@pytest.fixture
def circle_logo_svg() -> str:
    return CIRCLE_LOGO_SVG


@pytest.fixture
def offset_logo_svg() -> str:
    return OFFSET_LOGO_SVG


@pytest.fixture
def script_logo_svg() -> str:
    return SCRIPT_LOGO_SVG


@pytest.fixture
def gradient_logo_svg() -> str:
    return GRADIENT_LOGO_SVG


@pytest.fixture
def class_styled_logo_svg() -> str:
    return CLASS_STYLED_LOGO_SVG


@pytest.fixture
def canonical_svg() -> str:
    return CANONICAL_SVG
