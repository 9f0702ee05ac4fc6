# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides a call-counting stub reader, sample SVG markup, and SVG/HTML
files written to temporary directories.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from svginline.cache.asset_reader import BaseAssetReader
from svginline.core.errors import AssetReadError

CIRCLE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="250" height="250" '
    'viewBox="0 0 250 250" alt="y">'
    '<circle cx="125" cy="125" r="100" fill="#ba5b5b"/></svg>'
)

NOISY_SVG = """<?xml version="1.0" encoding="UTF-8"?>
<!-- Generator: some editor -->
<svg xmlns="http://www.w3.org/2000/svg"
     xmlns:inkscape="http://www.inkscape.org/namespaces/inkscape"
     width="10" height="10" viewBox="0 0 10 10" inkscape:version="1.0" class="">
  <metadata><rdf>stuff</rdf></metadata>
  <title>Square</title>
  <!-- a square -->
  <rect x="0" y="0" width="10" height="10"/>
  <inkscape:grid id="grid1"/>
  <text x="1" y="5"> keep  spaces </text>
</svg>
"""


class StubReader(BaseAssetReader):
    """In-memory reader that counts reads per path."""

    def __init__(
        self,
        files: dict[str, str | bytes] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.files: dict[str, str | bytes] = dict(files or {})
        self.delay = delay
        self.calls: dict[str, int] = {}
        self.gate: asyncio.Event | None = None
        self.errors: dict[str, Exception] = {}

    async def read(self, path: str) -> bytes:
        self.calls[path] = self.calls.get(path, 0) + 1
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if path in self.errors:
            raise self.errors[path]
        if path not in self.files:
            raise AssetReadError(path, f"SVG file not found: {path}")
        data = self.files[path]
        return data.encode("utf-8") if isinstance(data, str) else data

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())


def make_svg(size: int) -> str:
    """Return SVG markup of exactly ``size`` bytes (size >= 60)."""
    head = '<svg xmlns="http://www.w3.org/2000/svg"><desc>'
    tail = "</desc></svg>"
    return head + "x" * (size - len(head) - len(tail)) + tail


@pytest.fixture
def stub_reader() -> StubReader:
    return StubReader()


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """Site with two small SVGs, one large SVG and a PNG."""
    site = tmp_path / "site"
    (site / "img").mkdir(parents=True)
    (site / "img" / "circle.svg").write_text(CIRCLE_SVG, encoding="utf-8")
    (site / "img" / "square.svg").write_text(NOISY_SVG, encoding="utf-8")
    (site / "img" / "big.svg").write_text(make_svg(5000), encoding="utf-8")
    (site / "img" / "photo.png").write_bytes(b"\x89PNG\r\n")
    return site


@pytest.fixture
def make_reader() -> type[StubReader]:
    return StubReader


@pytest.fixture
def svg_of_size():
    return make_svg


@pytest.fixture
def noisy_svg() -> str:
    return NOISY_SVG


@pytest.fixture
def circle_svg() -> str:
    return CIRCLE_SVG
