# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""AgentDOM facade: cached extraction, lookups and request preparation.

The cache holds one ExtractionResult tagged with the generation it was
built for.  The generation advances on extract(), when observation
starts, and on every host-reported change round; a stale entry is
rebuilt lazily on the next access.

NOTE: one facade per tree.  This class is NOT thread-safe.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from . import Action, ExtractionResult, PageMeta, PreparedAction, Resource, RiskLevel, Role
from .coerce import coerce_value, coercion_failed
from .dom import AgentElement, MutationSource
from .extract import extract_all
from .hints import requires_confirmation
from .observe import MutationCallback, Observation, observe
from .params import build_nested_params

logger = logging.getLogger(__name__)


@dataclass
class _CacheEntry:
    result: ExtractionResult
    generation: int


def _find_action(actions: Iterable[Action], name: str, target_id: str | None) -> Action | None:
    for action in actions:
        if action.name == name and (target_id is None or action.target == target_id):
            return action
    return None


def _hint_warnings(action: Action) -> list[str]:
    hints = action.hints
    warnings: list[str] = []
    if hints.risk == RiskLevel.HIGH:
        warnings.append("High risk action")
    if hints.risk == RiskLevel.MEDIUM:
        warnings.append("Medium risk action")
    if hints.reversible is False:
        warnings.append("Irreversible action")
    if hints.human_preferred:
        warnings.append("Human confirmation preferred")
    if hints.cost is not None and hints.cost > 0:
        cost = int(hints.cost) if hints.cost.is_integer() else hints.cost
        warnings.append(f"Cost: {cost} {hints.cost_currency}" if hints.cost_currency else f"Cost: {cost}")
    if hints.role == Role.DANGER:
        warnings.append("Danger action")
    return warnings


def _parameter_warnings(action: Action) -> list[str]:
    warnings: list[str] = []
    for param in action.params:
        if param.disabled:
            continue
        if not param.value:
            if param.required:
                warnings.append(f"Missing required parameter: {param.name}")
            continue
        if coercion_failed(coerce_value(param.value, param.type_hint), param.type_hint):
            warnings.append(f"Parameter '{param.name}' is not a valid {param.type_hint}")
    return warnings


class AgentDOM:
    """Semantic view of one tree for an autonomous client."""

    def __init__(self, root: AgentElement, *, mutation_source: MutationSource | None = None) -> None:
        self._root = root
        self._mutation_source = mutation_source
        self._generation = 0
        self._cache: _CacheEntry | None = None

    # -- cache ------------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation

    def invalidate(self) -> None:
        self._generation += 1

    def _ensure(self) -> ExtractionResult:
        if self._cache is None or self._cache.generation != self._generation:
            self._cache = _CacheEntry(result=extract_all(self._root), generation=self._generation)
            logger.debug("extracted generation %d", self._generation)
        return self._cache.result

    @property
    def meta(self) -> PageMeta:
        return self._ensure().meta

    @property
    def resources(self) -> list[Resource]:
        return self._ensure().resources

    @property
    def actions(self) -> list[Action]:
        return self._ensure().actions

    def extract(self) -> ExtractionResult:
        """Force a fresh extraction pass."""
        self.invalidate()
        return self._ensure()

    # -- lookups ----------------------------------------------------------

    def iter_resources(self) -> Iterator[Resource]:
        """All resources, nested ones included, depth-first."""
        for top in self.resources:
            yield from top.iter_tree()

    def get_resource(self, resource_id: str) -> Resource | None:
        for resource in self.iter_resources():
            if resource.id == resource_id:
                return resource
        return None

    def get_action(self, name: str, target_id: str | None = None) -> Action | None:
        """Resource-owned actions first (depth-first), then standalone ones.

        *target_id* is only matched when given.
        """
        for resource in self.iter_resources():
            found = _find_action(resource.actions, name, target_id)
            if found is not None:
                return found
        return _find_action(self.actions, name, target_id)

    # -- observation ------------------------------------------------------

    def observe(self, callback: MutationCallback) -> Observation:
        """Deliver typed change batches; the cache is invalidated every round."""
        observation = observe(self._root, callback, source=self._mutation_source, on_round=self.invalidate)
        self.invalidate()
        return observation

    # -- requests ---------------------------------------------------------

    def prepare_action(self, action: Action, values: Mapping[str, Any] | None = None) -> PreparedAction:
        """Turn *action* into a request descriptor.

        Supplied *values* become the body verbatim; otherwise the body is
        built from the action's own declared parameters.
        """
        warnings = _hint_warnings(action)
        if values is not None:
            body = dict(values)
        else:
            body = build_nested_params(action.params)
            warnings.extend(_parameter_warnings(action))

        return PreparedAction(
            method=action.method,
            url=action.endpoint or "",
            headers=dict(action.headers or {}),
            body=body,
            confirmation_required=requires_confirmation(action.hints),
            warnings=warnings,
        )
