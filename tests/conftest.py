# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test configuration and fixtures."""

from pathlib import Path

try:
    import agentic_microformats  # noqa: F401
except ImportError:
    raise ImportError("agentic_microformats is not installed. Run: pip install -e '.[dev]'") from None

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def product_html() -> str:
    return load_fixture("product_page.html")


@pytest.fixture
def dashboard_html() -> str:
    return load_fixture("order_dashboard.html")


@pytest.fixture
def product_root(product_html):
    from agentic_microformats.lxml_host import parse_html

    return parse_html(product_html)


@pytest.fixture
def dashboard_root(dashboard_html):
    from agentic_microformats.lxml_host import parse_html

    return parse_html(dashboard_html)
