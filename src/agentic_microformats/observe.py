# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Snapshot diffing of live trees into typed mutation events.

Each host-reported change round re-runs resource/action extraction and
compares the result with the previous snapshot:

- resources are keyed by id (nested resources included)
- standalone actions are keyed by (name, target); changing either is a
  remove + add pair
- the baseline is replaced after every round, whether or not events fired
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum

from . import Action, Property, Resource
from .dom import AgentElement, MutationSource
from .errors import ObservationUnsupportedError
from .extract import extract_actions, extract_resources

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


class MutationType(StrEnum):
    RESOURCE_ADDED = "resource-added"
    RESOURCE_REMOVED = "resource-removed"
    RESOURCE_CHANGED = "resource-changed"  # same id, different type tag
    ACTION_ADDED = "action-added"
    ACTION_REMOVED = "action-removed"
    ACTION_CHANGED = "action-changed"  # same (name, target), different method/endpoint
    PROPERTY_CHANGED = "property-changed"


@dataclass(frozen=True)
class AgentMutation:
    """One typed change between two snapshots."""

    type: MutationType
    element: AgentElement | None = field(default=None, repr=False, compare=False)
    resource: Resource | None = None
    action: Action | None = None
    property: Property | None = None
    previous_value: str | None = None


MutationCallback = Callable[[list[AgentMutation]], None]

ActionKey = tuple[str, str]


def action_key(action: Action) -> ActionKey:
    return (action.name, action.target or "")


@dataclass
class Snapshot:
    """Resources by id and standalone actions by (name, target)."""

    resources: dict[str, Resource] = field(default_factory=dict)
    actions: dict[ActionKey, Action] = field(default_factory=dict)

    @classmethod
    def capture(cls, root: AgentElement) -> Snapshot:
        snapshot = cls()
        for top in extract_resources(root):
            for resource in top.iter_tree():
                snapshot.resources[resource.id] = resource
        for action in extract_actions(root):
            snapshot.actions[action_key(action)] = action
        return snapshot


# ---------------------------------------------------------------------------
# Diff (pure function)
# ---------------------------------------------------------------------------


def _describe_request(action: Action) -> str:
    return f"{action.method} {action.endpoint or ''}".strip()


def diff_snapshots(before: Snapshot, after: Snapshot) -> list[AgentMutation]:
    """Typed events turning *before* into *after*.  Empty when nothing changed."""
    mutations: list[AgentMutation] = []

    for resource_id, resource in after.resources.items():
        prev = before.resources.get(resource_id)
        if prev is None:
            mutations.append(
                AgentMutation(MutationType.RESOURCE_ADDED, element=resource.element, resource=resource)
            )
            continue

        if prev.type != resource.type:
            mutations.append(
                AgentMutation(
                    MutationType.RESOURCE_CHANGED,
                    element=resource.element,
                    resource=resource,
                    previous_value=prev.type,
                )
            )

        for name, prop in resource.properties.items():
            prev_prop = prev.properties.get(name)
            if prev_prop is not None and prev_prop.raw_value == prop.raw_value:
                continue
            mutations.append(
                AgentMutation(
                    MutationType.PROPERTY_CHANGED,
                    element=prop.element,
                    resource=resource,
                    property=prop,
                    previous_value=prev_prop.raw_value if prev_prop is not None else None,
                )
            )

    for resource_id, prev in before.resources.items():
        if resource_id not in after.resources:
            mutations.append(AgentMutation(MutationType.RESOURCE_REMOVED, element=prev.element, resource=prev))

    for key, action in after.actions.items():
        prev_action = before.actions.get(key)
        if prev_action is None:
            mutations.append(AgentMutation(MutationType.ACTION_ADDED, element=action.element, action=action))
        elif _describe_request(prev_action) != _describe_request(action):
            mutations.append(
                AgentMutation(
                    MutationType.ACTION_CHANGED,
                    element=action.element,
                    action=action,
                    previous_value=_describe_request(prev_action),
                )
            )

    for key, prev_action in before.actions.items():
        if key not in after.actions:
            mutations.append(
                AgentMutation(MutationType.ACTION_REMOVED, element=prev_action.element, action=prev_action)
            )

    return mutations


# ---------------------------------------------------------------------------
# Differ + subscription
# ---------------------------------------------------------------------------


class SnapshotDiffer:
    """Holds the latest snapshot of one root and diffs each refresh against it."""

    def __init__(self, root: AgentElement) -> None:
        self._root = root
        self._baseline = Snapshot.capture(root)

    @property
    def baseline(self) -> Snapshot:
        return self._baseline

    def refresh(self) -> list[AgentMutation]:
        current = Snapshot.capture(self._root)
        mutations = diff_snapshots(self._baseline, current)
        self._baseline = current
        if mutations:
            logger.debug("diff round produced %d event(s)", len(mutations))
        return mutations


class Observation:
    """Handle returned by observe().  disconnect() stops delivery immediately."""

    def __init__(self, differ: SnapshotDiffer) -> None:
        self.differ = differ
        self._active = True
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def active(self) -> bool:
        return self._active

    def disconnect(self) -> None:
        if not self._active:
            return
        self._active = False
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self) -> Observation:
        return self

    def __exit__(self, *exc: object) -> None:
        self.disconnect()


def observe(
    root: AgentElement,
    callback: MutationCallback,
    *,
    source: MutationSource | None = None,
    on_round: Callable[[], None] | None = None,
) -> Observation:
    """Subscribe to host change rounds and deliver non-empty event batches.

    *source* defaults to the root's ``mutation_source`` attribute.
    *on_round* runs at the start of every round, before diffing.

    Raises:
        ObservationUnsupportedError: the host offers no mutation source.
            Raised before any subscription or extraction happens.
    """
    if source is None:
        source = getattr(root, "mutation_source", None)
    if source is None:
        raise ObservationUnsupportedError(
            "Observation requires a host with mutation-observation support; "
            "pass a MutationSource or use a tree that provides one."
        )

    observation = Observation(SnapshotDiffer(root))

    def _on_round() -> None:
        if not observation.active:
            return
        if on_round is not None:
            on_round()
        mutations = observation.differ.refresh()
        if mutations and observation.active:
            callback(mutations)

    observation._unsubscribe = source.subscribe(_on_round)
    return observation
