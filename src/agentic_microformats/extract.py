# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Resource/action tree reconstruction from a flat set of marked nodes.

Pipeline:
  1. query every resource node and action node under the root
  2. ContainmentIndex rebuilds the resource hierarchy (order independent)
  3. each resource collects the properties/actions whose NEAREST enclosing
     resource is itself, so nested resources keep their own
  4. trust filtering: skipped nodes drop out together with their subtree
  5. actions outside any resource are returned as standalone actions

Extraction never fails on malformed per-node data; bad JSON, unknown
enum values and missing attributes degrade to empty/default values.
"""

from __future__ import annotations

import json
import logging
import re

from . import Action, ExtractionResult, HttpMethod, Property, Resource, TypeHint, parse_enum
from .coerce import coerce_value
from .dom import AgentElement, ContainmentIndex, is_owned_by, nearest
from .hints import extract_hints
from .meta import extract_meta
from .params import extract_parameters
from .trust import should_skip
from .vocabulary import (
    ACTION_SELECTOR,
    ARIA_LABEL,
    CURRENCY,
    DECLARED_PARAMS,
    DESCRIPTION,
    ENDPOINT,
    HEADERS,
    ID,
    METHOD,
    NAME,
    PROP,
    PROP_SELECTOR,
    RESOURCE_SELECTOR,
    TARGET,
    TITLE,
    TYPE,
    TYPEHINT,
    VALUE,
)

logger = logging.getLogger(__name__)

_LIST_SPLIT_RE = re.compile(r"[\s,]+")

__all__ = ["extract_actions", "extract_all", "extract_meta", "extract_resources"]


# --- Helpers ---


def _attr(el: AgentElement, name: str) -> str:
    """Attribute value, or "" when absent."""
    value = el.get_attribute(name)
    return value if value is not None else ""


def _description(el: AgentElement) -> str | None:
    for name in (DESCRIPTION, ARIA_LABEL, TITLE):
        value = el.get_attribute(name)
        if value:
            return value
    return None


def _headers(el: AgentElement) -> dict[str, str] | None:
    raw = el.get_attribute(HEADERS)
    if not raw:
        return None
    try:
        parsed = json.loads(raw)
    except (ValueError, RecursionError):
        logger.debug("ignoring malformed %s JSON", HEADERS)
        return None
    if not isinstance(parsed, dict):
        logger.debug("ignoring non-object %s", HEADERS)
        return None
    return {str(k): str(v) for k, v in parsed.items()}


def _declared_params(el: AgentElement) -> list[str]:
    raw = el.get_attribute(DECLARED_PARAMS) or ""
    return [name for name in _LIST_SPLIT_RE.split(raw) if name]


# --- Actions ---


def _extract_action(el: AgentElement, inherited_target: str | None = None) -> Action:
    explicit_target = el.get_attribute(TARGET)
    method_attr = el.get_attribute(METHOD)
    return Action(
        name=_attr(el, NAME),
        target=explicit_target if explicit_target is not None else inherited_target,
        method=parse_enum(HttpMethod, method_attr.upper() if method_attr else None, HttpMethod.POST),
        endpoint=el.get_attribute(ENDPOINT),
        params=extract_parameters(el),
        declared_params=_declared_params(el),
        headers=_headers(el),
        description=_description(el),
        hints=extract_hints(el),
        element=el,
    )


def extract_actions(root: AgentElement) -> list[Action]:
    """Standalone actions: action nodes with no enclosing resource at all."""
    actions: list[Action] = []
    for el in root.query_selector_all(ACTION_SELECTOR):
        if nearest(el, RESOURCE_SELECTOR) is not None:
            continue
        if should_skip(el):
            continue
        actions.append(_extract_action(el))
    return actions


# --- Resources ---


def _extract_properties(resource_el: AgentElement) -> dict[str, Property]:
    props: dict[str, Property] = {}
    for el in resource_el.query_selector_all(PROP_SELECTOR):
        if not is_owned_by(el, resource_el, RESOURCE_SELECTOR):
            continue
        name = el.get_attribute(PROP)
        if not name or should_skip(el):
            continue

        type_hint = parse_enum(TypeHint, el.get_attribute(TYPEHINT), TypeHint.STRING)
        override = el.get_attribute(VALUE)
        raw_value = override if override is not None else (el.text_content or "").strip()
        props[name] = Property(
            name=name,
            raw_value=raw_value,
            type_hint=type_hint,
            value=coerce_value(raw_value, type_hint),
            currency=el.get_attribute(CURRENCY),
            element=el,
        )
    return props


def _extract_resource_tree(el: AgentElement, index: ContainmentIndex) -> Resource:
    resource_id = _attr(el, ID)
    actions = [
        _extract_action(action_el, resource_id)
        for action_el in el.query_selector_all(ACTION_SELECTOR)
        if is_owned_by(action_el, el, RESOURCE_SELECTOR) and not should_skip(action_el)
    ]
    children = [_extract_resource_tree(child, index) for child in index.children_of(el) if not should_skip(child)]
    return Resource(
        type=_attr(el, TYPE),
        id=resource_id,
        properties=_extract_properties(el),
        actions=actions,
        children=children,
        element=el,
    )


def extract_resources(root: AgentElement) -> list[Resource]:
    """Top-level resources under *root*, each with its nested subtree."""
    index = ContainmentIndex(root.query_selector_all(RESOURCE_SELECTOR), RESOURCE_SELECTOR)
    resources = [_extract_resource_tree(el, index) for el in index.top_level() if not should_skip(el)]
    logger.debug("extracted %d top-level resource(s) from %d resource node(s)", len(resources), len(index))
    return resources


def extract_all(root: AgentElement) -> ExtractionResult:
    """One full extraction pass: meta, resources and standalone actions."""
    return ExtractionResult(
        meta=extract_meta(root),
        resources=extract_resources(root),
        actions=extract_actions(root),
    )
