# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Interaction-risk hints and the confirmation policy derived from them."""

from __future__ import annotations

import logging

from . import InteractionHints, RiskLevel, Role, parse_enum
from .coerce import parse_float_prefix
from .dom import AgentElement
from .vocabulary import COST, COST_CURRENCY, HUMAN_PREFERRED, REVERSIBLE, RISK, ROLE

logger = logging.getLogger(__name__)


def extract_hints(el: AgentElement) -> InteractionHints:
    """Read hint markers declared directly on *el* (never inherited).

    Unrecognized role/risk values and unparseable costs leave the field
    unset; human_preferred defaults to False.
    """
    role_attr = el.get_attribute(ROLE)
    risk_attr = el.get_attribute(RISK)
    role = parse_enum(Role, role_attr)
    risk = parse_enum(RiskLevel, risk_attr)
    if role_attr and role is None:
        logger.debug("ignoring unknown %s=%r", ROLE, role_attr)
    if risk_attr and risk is None:
        logger.debug("ignoring unknown %s=%r", RISK, risk_attr)

    reversible_attr = el.get_attribute(REVERSIBLE)
    reversible = reversible_attr == "true" if reversible_attr in ("true", "false") else None

    cost: float | None = None
    cost_currency: str | None = None
    cost_attr = el.get_attribute(COST)
    if cost_attr:
        cost = parse_float_prefix(cost_attr)
        if cost is not None:
            cost_currency = el.get_attribute(COST_CURRENCY) or None

    return InteractionHints(
        role=role,
        risk=risk,
        human_preferred=el.get_attribute(HUMAN_PREFERRED) == "true",
        reversible=reversible,
        cost=cost,
        cost_currency=cost_currency,
    )


def requires_confirmation(hints: InteractionHints) -> bool:
    """True for clearly consequential actions.

    High risk, a positive cost, declared irreversibility or the danger role
    each require confirmation.  Medium risk alone does not.
    """
    if hints.risk == RiskLevel.HIGH:
        return True
    if hints.cost is not None and hints.cost > 0:
        return True
    if hints.reversible is False:
        return True
    return hints.role == Role.DANGER
