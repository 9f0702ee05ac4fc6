# src/extraction/html_document.py — v1
"""Host HTML documents as BeautifulSoup trees."""

from __future__ import annotations

from bs4 import BeautifulSoup

HTML_PARSER = "html.parser"


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML document into the tree the engine operates on."""
    return BeautifulSoup(html, HTML_PARSER)
