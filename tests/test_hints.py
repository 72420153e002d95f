# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for interaction hints and the confirmation policy."""

from __future__ import annotations

import logging

import pytest

from agentic_microformats import InteractionHints, RiskLevel, Role
from agentic_microformats.hints import extract_hints, requires_confirmation
from agentic_microformats.lxml_host import parse_html


def _hints(attrs: str) -> InteractionHints:
    root = parse_html(f'<button id="a" data-agent="action" {attrs}>go</button>')
    return extract_hints(root.query_selector("#a"))


class TestExtractHints:
    def test_no_hints(self):
        hints = _hints("")
        assert hints == InteractionHints()
        assert hints.human_preferred is False
        assert hints.reversible is None

    def test_all_hints(self):
        hints = _hints(
            'data-agent-role="danger" data-agent-risk="high" data-agent-human-preferred="true" '
            'data-agent-reversible="false" data-agent-cost="9.99" data-agent-cost-currency="EUR"'
        )
        assert hints.role == Role.DANGER
        assert hints.risk == RiskLevel.HIGH
        assert hints.human_preferred is True
        assert hints.reversible is False
        assert hints.cost == 9.99
        assert hints.cost_currency == "EUR"

    def test_reversible_true(self):
        assert _hints('data-agent-reversible="true"').reversible is True

    def test_reversible_other_value_is_undeclared(self):
        assert _hints('data-agent-reversible="maybe"').reversible is None

    def test_unknown_role_and_risk_are_dropped(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="agentic_microformats.hints"):
            hints = _hints('data-agent-role="fancy" data-agent-risk="extreme"')
        assert hints.role is None
        assert hints.risk is None
        assert "fancy" in caplog.text

    def test_unparseable_cost_drops_currency(self):
        hints = _hints('data-agent-cost="free" data-agent-cost-currency="EUR"')
        assert hints.cost is None
        assert hints.cost_currency is None

    def test_hints_are_not_inherited(self):
        root = parse_html(
            '<div data-agent-risk="high"><button id="a" data-agent="action" data-agent-name="x">go</button></div>'
        )
        assert extract_hints(root.query_selector("#a")).risk is None

    def test_hints_are_frozen(self):
        hints = _hints('data-agent-risk="low"')
        with pytest.raises(AttributeError):
            hints.risk = RiskLevel.HIGH


class TestRequiresConfirmation:
    @pytest.mark.parametrize(
        "hints",
        [
            InteractionHints(risk=RiskLevel.HIGH),
            InteractionHints(cost=5.0),
            InteractionHints(reversible=False),
            InteractionHints(role=Role.DANGER),
        ],
    )
    def test_consequential(self, hints):
        assert requires_confirmation(hints)

    @pytest.mark.parametrize(
        "hints",
        [
            InteractionHints(),
            InteractionHints(risk=RiskLevel.MEDIUM),
            InteractionHints(risk=RiskLevel.LOW, role=Role.PRIMARY),
            InteractionHints(cost=0.0),
            InteractionHints(reversible=True),
            InteractionHints(human_preferred=True),
        ],
    )
    def test_not_consequential(self, hints):
        assert not requires_confirmation(hints)
