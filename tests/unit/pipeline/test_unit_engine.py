# tests/unit/pipeline/test_unit_engine.py — v1
"""Tests for pipeline/engine.py: orchestration and efficiency reporting."""

from __future__ import annotations

import asyncio
import math
import os

import pytest
from bs4 import BeautifulSoup

from svginline.core.errors import AssetReadError, PathResolutionError
from svginline.core.models import CacheEfficiency, PolicyThresholds
from svginline.pipeline.engine import InlineSvgEngine

DOC = "/site/index.html"
SVG = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 1 1"><path d="M0 0"/></svg>'


def _path(name: str) -> str:
    return os.path.normpath(os.path.join("/site", name))


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _engine(reader, reports=None, **kwargs) -> InlineSvgEngine:
    return InlineSvgEngine(
        reader=reader,
        optimize=False,
        on_cache_efficiency=reports.append if reports is not None else None,
        **kwargs,
    )


class TestProcess:
    @pytest.mark.asyncio
    async def test_no_references_leaves_tree_and_skips_callback(self, make_reader):
        html = '<p>hi <img src="photo.png"></p>'
        reports: list[CacheEfficiency] = []
        soup = _soup(html)
        result = await _engine(make_reader(), reports).process(soup, DOC)
        assert result is soup
        assert str(soup) == str(_soup(html))
        assert reports == []

    @pytest.mark.asyncio
    async def test_inlines_and_reports(self, make_reader):
        reader = make_reader({_path("a.svg"): SVG})
        reports: list[CacheEfficiency] = []
        soup = _soup('<img src="a.svg" alt="A"><img src="a.svg">')
        await _engine(reader, reports).process(soup, DOC)
        assert soup.find("img") is None
        assert [s.get("alt") for s in soup.find_all("svg")] == ["A", None]
        assert reports == [CacheEfficiency(hits=1, misses=1)]

    @pytest.mark.asyncio
    async def test_callback_only_when_counters_change(self, make_reader):
        reader = make_reader({_path("a.svg"): SVG})
        reports: list[CacheEfficiency] = []
        engine = _engine(reader, reports)
        await engine.process(_soup('<img src="a.svg">'), DOC)
        await engine.process(_soup("<p>no images</p>"), DOC)
        await engine.process(_soup('<img src="a.svg"><img src="a.svg">'), DOC)
        assert reports == [
            CacheEfficiency(hits=0, misses=1),
            CacheEfficiency(hits=2, misses=1),
        ]
        assert reader.total_calls == 1

    @pytest.mark.asyncio
    async def test_unknown_document_path(self, make_reader):
        with pytest.raises(PathResolutionError):
            await _engine(make_reader()).process(_soup('<img src="a.svg">'), None)

    @pytest.mark.asyncio
    async def test_rejected_group_left_untouched(self, make_reader, svg_of_size):
        reader = make_reader({_path("a.svg"): svg_of_size(2000)})
        soup = _soup('<img src="a.svg">' * 6)
        _, report = await _engine(reader).process_with_report(soup, DOC)
        assert len(soup.find_all("img")) == 6
        assert report.rejected == [_path("a.svg")]
        assert report.inlined == []

    @pytest.mark.asyncio
    async def test_failed_asset_does_not_block_others(self, make_reader):
        reader = make_reader({_path("ok.svg"): SVG})
        soup = _soup('<img src="missing.svg"><img src="ok.svg">')
        _, report = await _engine(reader).process_with_report(soup, DOC)
        assert report.inlined == [_path("ok.svg")]
        assert _path("missing.svg") in report.failed
        assert soup.find("img")["src"] == "missing.svg"
        assert soup.find("svg") is not None

    @pytest.mark.asyncio
    async def test_reader_os_error_is_isolated(self, make_reader):
        reader = make_reader({_path("ok.svg"): SVG, _path("bad.svg"): SVG})
        reader.errors[_path("bad.svg")] = OSError("disk gone")
        soup = _soup('<img src="bad.svg"><img src="ok.svg">')
        _, report = await _engine(reader).process_with_report(soup, DOC)
        assert report.inlined == [_path("ok.svg")]
        assert "disk gone" in report.failed[_path("bad.svg")]
        assert soup.find("img")["src"] == "bad.svg"
        assert soup.find("svg") is not None

    @pytest.mark.asyncio
    async def test_on_error_raise(self, make_reader):
        engine = _engine(make_reader(), on_error="raise")
        with pytest.raises(AssetReadError):
            await engine.process(_soup('<img src="missing.svg">'), DOC)

    @pytest.mark.asyncio
    async def test_missing_root_reported_not_raised(self, make_reader):
        reader = make_reader({_path("bad.svg"): "<html/>"})
        soup = _soup('<img src="bad.svg">')
        _, report = await _engine(reader).process_with_report(soup, DOC)
        assert _path("bad.svg") in report.failed
        assert soup.find("img") is not None

    @pytest.mark.asyncio
    async def test_max_occurrences_zero(self, make_reader):
        reader = make_reader({_path("a.svg"): SVG})
        engine = _engine(reader, thresholds=PolicyThresholds(max_occurrences=0))
        soup = _soup('<img src="a.svg">')
        await engine.process(soup, DOC)
        assert soup.find("svg") is None

    @pytest.mark.asyncio
    async def test_unbounded_sizes(self, make_reader, svg_of_size):
        reader = make_reader({_path("a.svg"): svg_of_size(50_000)})
        t = PolicyThresholds(max_image_size=math.inf, max_total_size=math.inf)
        soup = _soup('<img src="a.svg">' * 20)
        await _engine(reader, thresholds=t).process(soup, DOC)
        assert len(soup.find_all("svg")) == 20


class TestConcurrentDocuments:
    @pytest.mark.asyncio
    async def test_shared_asset_read_once(self, make_reader):
        reader = make_reader({_path("a.svg"): SVG, _path("b.svg"): SVG}, delay=0.01)
        reports: list[CacheEfficiency] = []
        engine = _engine(reader, reports)
        soups = [_soup('<img src="a.svg"><img src="b.svg">') for _ in range(8)]
        await asyncio.gather(*(engine.process(s, DOC) for s in soups))

        assert reader.calls == {_path("a.svg"): 1, _path("b.svg"): 1}
        assert engine.cache_efficiency == CacheEfficiency(hits=14, misses=2)
        assert all(len(s.find_all("svg")) == 2 for s in soups)
        assert reports[-1] == CacheEfficiency(hits=14, misses=2)

    @pytest.mark.asyncio
    async def test_separate_engines_do_not_share(self, make_reader):
        reader = make_reader({_path("a.svg"): SVG})
        for _ in range(2):
            engine = _engine(reader)
            await engine.process(_soup('<img src="a.svg">'), DOC)
            assert engine.cache_efficiency == CacheEfficiency(hits=0, misses=1)
        assert reader.total_calls == 2


    def test_reused_across_event_loops(self, make_reader):
        reader = make_reader({_path("a.svg"): SVG})
        reports: list[CacheEfficiency] = []
        engine = _engine(reader, reports)
        first = _soup('<img src="a.svg">')
        second = _soup('<img src="a.svg">')
        asyncio.run(engine.process(first, DOC))
        asyncio.run(engine.process(second, DOC))

        assert first.find("svg") is not None
        assert second.find("svg") is not None
        assert reader.total_calls == 1
        assert reports == [
            CacheEfficiency(hits=0, misses=1),
            CacheEfficiency(hits=1, misses=1),
        ]

class TestFromSettings:
    def test_builds_from_settings(self):
        from svginline.config.settings import Settings

        s = Settings(_env_file=None, max_image_size=100, optimize=False, on_asset_error="raise")
        engine = InlineSvgEngine.from_settings(s)
        assert engine.thresholds.max_image_size == 100
        assert engine.on_error == "raise"
