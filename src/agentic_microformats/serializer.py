# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Serialization of extraction results: JSON and agent prompt formats.

Two output formats:
- JSON: camelCase structure for programmatic consumption (no node handles)
- Agent prompt: compact outline of resources and actions for LLM agents
"""

from __future__ import annotations

import json
from typing import Any

from . import Action, ExtractionResult, InteractionHints, Parameter, PreparedAction, Property, Resource
from .hints import requires_confirmation
from .observe import AgentMutation
from .sanitizer import add_content_boundary, sanitize_text


def _str(value: Any) -> str | None:
    """Plain str for enum members (YAML safe_dump rejects str subclasses)."""
    return None if value is None else str(value)


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def hints_to_dict(hints: InteractionHints) -> dict[str, Any]:
    return _drop_none(
        {
            "role": _str(hints.role),
            "risk": _str(hints.risk),
            "humanPreferred": hints.human_preferred,
            "reversible": hints.reversible,
            "cost": hints.cost,
            "costCurrency": hints.cost_currency,
        }
    )


def property_to_dict(prop: Property) -> dict[str, Any]:
    return _drop_none(
        {
            "name": prop.name,
            "rawValue": prop.raw_value,
            "typehint": _str(prop.type_hint),
            "value": prop.value,
            "currency": prop.currency,
        }
    )


def parameter_to_dict(param: Parameter) -> dict[str, Any]:
    return {
        "name": param.name,
        "typehint": _str(param.type_hint),
        "required": param.required,
        "disabled": param.disabled,
        "value": param.value,
    }


def action_to_dict(action: Action) -> dict[str, Any]:
    return {
        "name": action.name,
        **({"target": action.target} if action.target is not None else {}),
        "method": _str(action.method),
        **({"endpoint": action.endpoint} if action.endpoint is not None else {}),
        "params": [parameter_to_dict(p) for p in action.params],
        **({"declaredParams": action.declared_params} if action.declared_params else {}),
        **({"headers": action.headers} if action.headers else {}),
        **({"description": action.description} if action.description else {}),
        "hints": hints_to_dict(action.hints),
        "confirmationRequired": requires_confirmation(action.hints),
    }


def resource_to_dict(resource: Resource) -> dict[str, Any]:
    return {
        "type": resource.type,
        "id": resource.id,
        "properties": {name: property_to_dict(p) for name, p in resource.properties.items()},
        "actions": [action_to_dict(a) for a in resource.actions],
        "children": [resource_to_dict(c) for c in resource.children],
    }


def to_dict(result: ExtractionResult) -> dict[str, Any]:
    """Serialize an ExtractionResult to a JSON-safe dictionary."""
    return {
        "meta": result.meta.to_dict(),
        "resources": [resource_to_dict(r) for r in result.resources],
        "actions": [action_to_dict(a) for a in result.actions],
    }


def to_json(result: ExtractionResult, indent: int = 2) -> str:
    return json.dumps(to_dict(result), ensure_ascii=False, indent=indent)


def prepared_to_dict(prepared: PreparedAction) -> dict[str, Any]:
    return {
        "method": _str(prepared.method),
        "url": prepared.url,
        "headers": dict(prepared.headers),
        "body": prepared.body,
        "confirmationRequired": prepared.confirmation_required,
        "warnings": list(prepared.warnings),
    }


def mutation_to_dict(mutation: AgentMutation) -> dict[str, Any]:
    data: dict[str, Any] = {"type": _str(mutation.type)}
    if mutation.resource is not None:
        data["resource"] = {"type": mutation.resource.type, "id": mutation.resource.id}
    if mutation.action is not None:
        data["action"] = {"name": mutation.action.name, "target": mutation.action.target}
    if mutation.property is not None:
        data["property"] = property_to_dict(mutation.property)
    if mutation.previous_value is not None:
        data["previousValue"] = mutation.previous_value
    return data


# ---------------------------------------------------------------------------
# Agent prompt
# ---------------------------------------------------------------------------


def _render_action_line(action: Action) -> str:
    line = f"{sanitize_text(action.name, max_len=100)} {action.method}"
    if action.endpoint:
        line += f" {sanitize_text(action.endpoint)}"
    if action.params:
        names = [sanitize_text(p.name, max_len=100) + ("*" if p.required else "") for p in action.params]
        line += f" ({', '.join(names)})"
    if action.description:
        line += f" - {sanitize_text(action.description)}"
    if requires_confirmation(action.hints):
        line += " [confirm]"
    return line


def _render_resource(resource: Resource, lines: list[str], depth: int = 0) -> None:
    pad = "  " * depth
    lines.append(f"{pad}- {sanitize_text(resource.type, max_len=100)} {sanitize_text(resource.id, max_len=100)}")
    for name, prop in resource.properties.items():
        value = sanitize_text(prop.raw_value)
        if prop.currency:
            value += f" {sanitize_text(prop.currency, max_len=10)}"
        lines.append(f"{pad}  {sanitize_text(name, max_len=100)}: {value}")
    for action in resource.actions:
        lines.append(f"{pad}  > {_render_action_line(action)}")
    for child in resource.children:
        _render_resource(child, lines, depth + 1)


def to_agent_prompt(result: ExtractionResult, source: str = "") -> str:
    """Serialize an ExtractionResult to a minimal-token outline.

    Format:
        ## Page
        Provider: Example Shop GmbH
        Currency: EUR

        ## Resources
        - product SKU-USB-C-2M
          name: USB-C Cable 2m
          price: 14.99 EUR
          > add_to_cart POST /cart/add (product_id, quantity*)

        ## Actions
        > create_project POST /api/projects (name*)

    ``*`` marks required parameters, ``[confirm]`` actions that need
    confirmation.  When *source* is given the outline is wrapped in a
    content boundary naming it.
    """
    lines: list[str] = []

    meta = result.meta
    page_lines: list[str] = []
    if meta.provider and meta.provider.name:
        page_lines.append(f"Provider: {sanitize_text(meta.provider.name)}")
    if meta.page and meta.page.type:
        page_lines.append(f"Type: {sanitize_text(meta.page.type, max_len=100)}")
    if meta.defaults and meta.defaults.currency:
        page_lines.append(f"Currency: {sanitize_text(meta.defaults.currency, max_len=10)}")
    if meta.agent_policies:
        policies = meta.agent_policies
        if policies.rate_limit and policies.rate_limit.requests_per_minute is not None:
            page_lines.append(f"Rate limit: {policies.rate_limit.requests_per_minute}/min")
        if policies.require_auth:
            method = f" ({sanitize_text(policies.auth_method, max_len=50)})" if policies.auth_method else ""
            page_lines.append(f"Auth required{method}")
    if page_lines:
        lines.append("## Page")
        lines.extend(page_lines)
        lines.append("")

    if result.resources:
        lines.append("## Resources")
        for resource in result.resources:
            _render_resource(resource, lines)
        lines.append("")

    if result.actions:
        lines.append("## Actions")
        for action in result.actions:
            lines.append(f"> {_render_action_line(action)}")
        lines.append("")

    text = "\n".join(lines).rstrip("\n")
    if source:
        return add_content_boundary(text, source)
    return text
