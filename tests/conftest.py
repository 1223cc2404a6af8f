"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def article_html() -> str:
    return _read_fixture("article.html")


@pytest.fixture
def wiki_html() -> str:
    return _read_fixture("wiki.html")


@pytest.fixture
def docs_html() -> str:
    return _read_fixture("docs.html")


@pytest.fixture
def paywall_html() -> str:
    return _read_fixture("paywall.html")
