# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for agentic_microformats.trust: nearest-marker trust and ignore regions."""

from __future__ import annotations

from agentic_microformats import TrustLevel
from agentic_microformats.lxml_host import parse_html
from agentic_microformats.trust import get_trust_level, is_ignored, is_untrusted, should_skip


def _node(html: str, selector: str = "#target"):
    root = parse_html(html)
    node = root.query_selector(selector)
    assert node is not None
    return node


class TestTrustLevel:
    def test_unmarked_is_system(self):
        assert get_trust_level(_node('<div><p id="target">x</p></div>')) == TrustLevel.SYSTEM

    def test_marker_on_node_itself(self):
        node = _node('<p id="target" data-agent-trust="verified">x</p>')
        assert get_trust_level(node) == TrustLevel.VERIFIED

    def test_inherited_from_ancestor(self):
        node = _node('<div data-agent-trust="untrusted"><p><span id="target">x</span></p></div>')
        assert get_trust_level(node) == TrustLevel.UNTRUSTED
        assert is_untrusted(node)

    def test_nearest_marker_wins_trusted_inside_untrusted(self):
        html = (
            '<div data-agent-trust="untrusted">'
            '<div data-agent-trust="verified"><p id="target">x</p></div>'
            "</div>"
        )
        assert get_trust_level(_node(html)) == TrustLevel.VERIFIED
        assert not should_skip(_node(html))

    def test_nearest_marker_wins_untrusted_inside_system(self):
        html = (
            '<div data-agent-trust="system">'
            '<div data-agent-trust="untrusted"><p id="target">x</p></div>'
            "</div>"
        )
        assert should_skip(_node(html))

    def test_unknown_value_counts_as_system(self):
        node = _node('<div data-agent-trust="bogus"><p id="target">x</p></div>')
        assert get_trust_level(node) == TrustLevel.SYSTEM


class TestIgnore:
    def test_ignore_true_skips(self):
        node = _node('<div data-agent-ignore="true"><p id="target">x</p></div>')
        assert is_ignored(node)
        assert should_skip(node)

    def test_only_literal_true_ignores(self):
        assert not is_ignored(_node('<div data-agent-ignore="yes"><p id="target">x</p></div>'))
        assert not is_ignored(_node('<div data-agent-ignore=""><p id="target">x</p></div>'))

    def test_inner_false_reenables(self):
        html = '<div data-agent-ignore="true"><div data-agent-ignore="false"><p id="target">x</p></div></div>'
        assert not is_ignored(_node(html))

    def test_unmarked_not_ignored(self):
        assert not should_skip(_node('<p id="target">x</p>'))
