# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Attribute vocabulary: the marker names pages use to declare agent semantics.

Leaf module with no internal dependencies.  Names are part of the wire
format and must stay bit-exact.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------

AGENT = "data-agent"
KIND_RESOURCE = "resource"
KIND_ACTION = "action"

TYPE = "data-agent-type"
ID = "data-agent-id"

# Properties
PROP = "data-agent-prop"
VALUE = "data-agent-value"
TYPEHINT = "data-agent-typehint"
CURRENCY = "data-agent-currency"

# Actions
NAME = "data-agent-name"
TARGET = "data-agent-target"
METHOD = "data-agent-method"
ENDPOINT = "data-agent-endpoint"
HEADERS = "data-agent-headers"
DESCRIPTION = "data-agent-description"
DECLARED_PARAMS = "data-agent-params"

# Interaction hints
ROLE = "data-agent-role"
RISK = "data-agent-risk"
HUMAN_PREFERRED = "data-agent-human-preferred"
REVERSIBLE = "data-agent-reversible"
COST = "data-agent-cost"
COST_CURRENCY = "data-agent-cost-currency"

# Trust regions
TRUST = "data-agent-trust"
IGNORE = "data-agent-ignore"

# Parameters
PARAM = "data-agent-param"
REQUIRED = "data-agent-required"

# Page metadata payload
META = "data-agent-meta"

# Native / accessibility attributes the engine reads
ARIA_LABEL = "aria-label"
ARIA_REQUIRED = "aria-required"
TITLE = "title"
NATIVE_REQUIRED = "required"
NATIVE_DISABLED = "disabled"
NATIVE_CHECKED = "checked"
NATIVE_SELECTED = "selected"
NATIVE_VALUE = "value"
NATIVE_TYPE = "type"

# ---------------------------------------------------------------------------
# Selectors (simple selector language understood by every host)
# ---------------------------------------------------------------------------

RESOURCE_SELECTOR = f'[{AGENT}="{KIND_RESOURCE}"]'
ACTION_SELECTOR = f'[{AGENT}="{KIND_ACTION}"]'
PROP_SELECTOR = f"[{PROP}]"
PARAM_SELECTOR = f"[{PARAM}]"
TRUST_SELECTOR = f"[{TRUST}]"
IGNORE_SELECTOR = f"[{IGNORE}]"
META_SELECTOR = f"script[{META}]"
OPTION_SELECTOR = "option"
SELECTED_OPTION_SELECTOR = f"option[{NATIVE_SELECTED}]"

