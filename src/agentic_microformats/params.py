# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Action parameter extraction and nested payload assembly.

Parameters are ``data-agent-param`` nodes under an action node.  Dotted
names (``user.profile.name``) describe where the value lands in the
request body built by build_nested_params().
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from . import Parameter, TypeHint, parse_enum
from .coerce import coerce_value
from .dom import AgentElement
from .trust import should_skip
from .vocabulary import (
    ARIA_REQUIRED,
    NATIVE_CHECKED,
    NATIVE_DISABLED,
    NATIVE_REQUIRED,
    NATIVE_TYPE,
    NATIVE_VALUE,
    OPTION_SELECTOR,
    PARAM,
    PARAM_SELECTOR,
    REQUIRED,
    SELECTED_OPTION_SELECTOR,
    TYPEHINT,
)


def _option_value(option: AgentElement) -> str | None:
    value = option.get_attribute(NATIVE_VALUE)
    return value if value is not None else option.text_content


def _input_value(el: AgentElement) -> str | None:
    """Current value of an input-like node, as a string."""
    if el.tag_name.upper() == "SELECT":
        selected = el.query_selector(SELECTED_OPTION_SELECTOR)
        if selected is not None:
            return _option_value(selected)
        first = el.query_selector(OPTION_SELECTOR)
        return _option_value(first) if first is not None else None

    if (el.get_attribute(NATIVE_TYPE) or "").lower() == "checkbox":
        return "true" if el.has_attribute(NATIVE_CHECKED) else "false"

    return el.get_attribute(NATIVE_VALUE)


def extract_parameters(action_el: AgentElement) -> list[Parameter]:
    """Parameters declared under *action_el*, in document order.

    Nodes without a name are skipped, as are nodes inside an untrusted or
    ignored region nested within an action that is itself extracted.
    """
    action_skipped = should_skip(action_el)
    params: list[Parameter] = []
    for el in action_el.query_selector_all(PARAM_SELECTOR):
        name = el.get_attribute(PARAM)
        if not name:
            continue
        if not action_skipped and should_skip(el):
            continue

        required = (
            el.has_attribute(NATIVE_REQUIRED)
            or el.get_attribute(REQUIRED) == "true"
            or el.get_attribute(ARIA_REQUIRED) == "true"
        )
        params.append(
            Parameter(
                name=name,
                type_hint=parse_enum(TypeHint, el.get_attribute(TYPEHINT), TypeHint.STRING),
                required=required,
                disabled=el.has_attribute(NATIVE_DISABLED),
                value=_input_value(el),
                element=el,
            )
        )
    return params


def build_nested_params(params: Iterable[Parameter]) -> dict[str, Any]:
    """Assemble one nested payload from dotted parameter names.

    Disabled and valueless parameters are left out.  When a later name
    needs an intermediate map where an earlier one stored a leaf, the leaf
    is replaced (last write wins).
    """
    result: dict[str, Any] = {}
    for param in params:
        if param.disabled or param.value is None:
            continue

        *branches, leaf = param.name.split(".")
        current = result
        for part in branches:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]
        current[leaf] = coerce_value(param.value, param.type_hint)
    return result
