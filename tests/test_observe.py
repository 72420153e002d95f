# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for snapshot diffing and live observation.

Covers the pure diff (diff_snapshots) and observe() driven by
ObservableDocument edit rounds.
"""

from __future__ import annotations

import pytest

from agentic_microformats import Action, HttpMethod, Property, Resource, TypeHint
from agentic_microformats.errors import ObservationUnsupportedError
from agentic_microformats.lxml_host import MutationHub, ObservableDocument, parse_html
from agentic_microformats.observe import (
    AgentMutation,
    MutationType,
    Snapshot,
    SnapshotDiffer,
    action_key,
    diff_snapshots,
    observe,
)

_PAGE = """
<div data-agent="resource" data-agent-type="cart" data-agent-id="CART">
  <span data-agent-prop="count" data-agent-typehint="integer">1</span>
  <span data-agent-prop="total" data-agent-typehint="currency">14,99 €</span>
  <ul>
    <li data-agent="resource" data-agent-type="cart-item" data-agent-id="LINE-1">
      <span data-agent-prop="qty">1</span>
    </li>
  </ul>
</div>
<button data-agent="action" data-agent-name="checkout" data-agent-endpoint="/checkout">Pay</button>
"""


def _prop(name: str, raw: str) -> Property:
    return Property(name=name, raw_value=raw, type_hint=TypeHint.STRING, value=raw)


def _res(rid: str, rtype: str = "product", **props: str) -> Resource:
    return Resource(type=rtype, id=rid, properties={k: _prop(k, v) for k, v in props.items()})


def _snap(resources: list[Resource] = (), actions: list[Action] = ()) -> Snapshot:
    return Snapshot(
        resources={r.id: r for r in resources},
        actions={action_key(a): a for a in actions},
    )


def _types(mutations: list[AgentMutation]) -> list[MutationType]:
    return [m.type for m in mutations]


@pytest.fixture
def doc() -> ObservableDocument:
    return ObservableDocument(_PAGE)


# =========================================================================
# diff_snapshots: pure function tests
# =========================================================================


class TestDiffSnapshots:
    def test_identical_is_empty(self):
        snap = _snap([_res("a", price="1")], [Action(name="buy")])
        assert diff_snapshots(snap, _snap([_res("a", price="1")], [Action(name="buy")])) == []

    def test_resource_added_and_removed(self):
        mutations = diff_snapshots(_snap([_res("a")]), _snap([_res("b")]))
        assert _types(mutations) == [MutationType.RESOURCE_ADDED, MutationType.RESOURCE_REMOVED]
        assert mutations[0].resource.id == "b"
        assert mutations[1].resource.id == "a"

    def test_property_changed_carries_previous_value(self):
        (m,) = diff_snapshots(_snap([_res("a", price="1")]), _snap([_res("a", price="2")]))
        assert m.type == MutationType.PROPERTY_CHANGED
        assert m.property.raw_value == "2"
        assert m.previous_value == "1"
        assert m.resource.id == "a"

    def test_new_property_reported_without_previous_value(self):
        (m,) = diff_snapshots(_snap([_res("a")]), _snap([_res("a", price="2")]))
        assert m.type == MutationType.PROPERTY_CHANGED
        assert m.previous_value is None

    def test_type_change(self):
        (m,) = diff_snapshots(_snap([_res("a", "draft")]), _snap([_res("a", "order")]))
        assert m.type == MutationType.RESOURCE_CHANGED
        assert m.previous_value == "draft"
        assert m.resource.type == "order"

    def test_action_added_and_removed(self):
        mutations = diff_snapshots(_snap(actions=[Action(name="a")]), _snap(actions=[Action(name="b")]))
        assert _types(mutations) == [MutationType.ACTION_ADDED, MutationType.ACTION_REMOVED]

    def test_action_keyed_by_name_and_target(self):
        before = _snap(actions=[Action(name="buy", target="x")])
        after = _snap(actions=[Action(name="buy", target="y")])
        assert _types(diff_snapshots(before, after)) == [MutationType.ACTION_ADDED, MutationType.ACTION_REMOVED]

    def test_action_request_change(self):
        before = _snap(actions=[Action(name="buy", endpoint="/v1/buy")])
        after = _snap(actions=[Action(name="buy", method=HttpMethod.PUT, endpoint="/v2/buy")])
        (m,) = diff_snapshots(before, after)
        assert m.type == MutationType.ACTION_CHANGED
        assert m.previous_value == "POST /v1/buy"

    def test_order_of_events(self):
        before = _snap([_res("gone"), _res("kept", price="1")], [Action(name="old")])
        after = _snap([_res("kept", price="2"), _res("new")], [Action(name="fresh")])
        assert _types(diff_snapshots(before, after)) == [
            MutationType.PROPERTY_CHANGED,
            MutationType.RESOURCE_ADDED,
            MutationType.RESOURCE_REMOVED,
            MutationType.ACTION_ADDED,
            MutationType.ACTION_REMOVED,
        ]


class TestSnapshot:
    def test_capture_flattens_nested(self):
        snap = Snapshot.capture(parse_html(_PAGE))
        assert set(snap.resources) == {"CART", "LINE-1"}
        assert set(snap.actions) == {("checkout", "")}

    def test_differ_replaces_baseline(self, doc):
        differ = SnapshotDiffer(doc.root)
        doc.root.query_selector('[data-agent-prop="qty"]').set_text("2")
        assert len(differ.refresh()) == 1
        assert differ.refresh() == []
        assert differ.baseline.resources["LINE-1"].properties["qty"].raw_value == "2"


# =========================================================================
# observe() over ObservableDocument
# =========================================================================


class TestObserve:
    def test_property_change_reported_once(self, doc):
        batches: list[list[AgentMutation]] = []
        observe(doc.root, batches.append)
        with doc.edit() as root:
            root.query_selector('[data-agent-prop="total"]').set_text("29,98 €")
        assert len(batches) == 1
        (m,) = batches[0]
        assert m.type == MutationType.PROPERTY_CHANGED
        assert m.resource.id == "CART"
        assert m.property.name == "total"
        assert m.property.value == 29.98
        assert m.previous_value == "14,99 €"

    def test_several_edits_one_batch(self, doc):
        batches = []
        observe(doc.root, batches.append)
        with doc.edit() as root:
            root.query_selector('[data-agent-prop="count"]').set_text("2")
            root.query_selector('[data-agent-prop="total"]').set_text("29,98 €")
        assert len(batches) == 1
        assert [m.property.name for m in batches[0]] == ["count", "total"]

    def test_irrelevant_edit_is_silent(self, doc):
        batches = []
        observe(doc.root, batches.append)
        with doc.edit() as root:
            root.query_selector("ul").set_attribute("class", "highlight")
        assert batches == []
        assert doc.mutations.rounds_delivered == 1

    def test_nested_resource_added(self, doc):
        batches = []
        observe(doc.root, batches.append)
        with doc.edit() as root:
            root.query_selector("ul").append_html(
                '<li data-agent="resource" data-agent-type="cart-item" data-agent-id="LINE-2">'
                '<span data-agent-prop="qty">3</span></li>'
            )
        (m,) = batches[0]
        assert m.type == MutationType.RESOURCE_ADDED
        assert m.resource.id == "LINE-2"
        assert m.element.get_attribute("data-agent-id") == "LINE-2"

    def test_resource_removed(self, doc):
        batches = []
        observe(doc.root, batches.append)
        with doc.edit() as root:
            root.query_selector('[data-agent-id="LINE-1"]').remove()
        (m,) = batches[0]
        assert m.type == MutationType.RESOURCE_REMOVED
        assert m.resource.id == "LINE-1"

    def test_resource_type_changed(self, doc):
        batches = []
        observe(doc.root, batches.append)
        with doc.edit() as root:
            root.query_selector('[data-agent-id="CART"]').set_attribute("data-agent-type", "order")
        (m,) = batches[0]
        assert m.type == MutationType.RESOURCE_CHANGED
        assert m.previous_value == "cart"

    def test_action_renamed(self, doc):
        batches = []
        observe(doc.root, batches.append)
        with doc.edit() as root:
            root.query_selector('[data-agent="action"]').set_attribute("data-agent-name", "pay_now")
        assert _types(batches[0]) == [MutationType.ACTION_ADDED, MutationType.ACTION_REMOVED]
        assert batches[0][0].action.name == "pay_now"
        assert batches[0][1].action.name == "checkout"

    def test_action_endpoint_changed(self, doc):
        batches = []
        observe(doc.root, batches.append)
        with doc.edit() as root:
            root.query_selector('[data-agent="action"]').set_attribute("data-agent-endpoint", "/v2/checkout")
        (m,) = batches[0]
        assert m.type == MutationType.ACTION_CHANGED
        assert m.previous_value == "POST /checkout"
        assert m.action.endpoint == "/v2/checkout"

    def test_region_becoming_untrusted_removes_resource(self, doc):
        batches = []
        observe(doc.root, batches.append)
        with doc.edit() as root:
            root.query_selector("ul").set_attribute("data-agent-trust", "untrusted")
        (m,) = batches[0]
        assert m.type == MutationType.RESOURCE_REMOVED
        assert m.resource.id == "LINE-1"

    def test_disconnect_stops_delivery(self, doc):
        batches = []
        observation = observe(doc.root, batches.append)
        assert doc.mutations.listener_count == 1
        observation.disconnect()
        observation.disconnect()
        assert not observation.active
        assert doc.mutations.listener_count == 0
        with doc.edit() as root:
            root.query_selector('[data-agent-prop="count"]').set_text("5")
        assert batches == []

    def test_context_manager_disconnects(self, doc):
        with observe(doc.root, lambda batch: None) as observation:
            assert observation.active
        assert not observation.active
        assert doc.mutations.listener_count == 0

    def test_on_round_runs_before_diff(self, doc):
        calls = []
        observe(doc.root, lambda batch: calls.append("callback"), on_round=lambda: calls.append("round"))
        with doc.edit() as root:
            root.query_selector('[data-agent-prop="count"]').set_text("2")
        with doc.edit() as root:
            root.query_selector("ul").set_attribute("class", "x")
        assert calls == ["round", "callback", "round"]

    def test_explicit_source(self):
        hub = MutationHub()
        root = parse_html(_PAGE)
        batches = []
        observe(root, batches.append, source=hub)
        root.query_selector('[data-agent-prop="count"]').set_text("9")
        hub.notify()
        assert _types(batches[0]) == [MutationType.PROPERTY_CHANGED]


class TestObservationUnsupported:
    def test_plain_tree_raises(self):
        with pytest.raises(ObservationUnsupportedError):
            observe(parse_html(_PAGE), lambda batch: None)

    def test_raises_before_subscribing(self, monkeypatch):
        captured = []
        monkeypatch.setattr(
            "agentic_microformats.observe.SnapshotDiffer",
            lambda root: captured.append(root),
        )
        with pytest.raises(ObservationUnsupportedError):
            observe(parse_html(_PAGE), lambda batch: None)
        assert captured == []
