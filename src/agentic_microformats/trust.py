# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Trust-region resolution.

Page regions can be marked ``data-agent-trust="system|untrusted|verified"``
or ``data-agent-ignore="true"``.  Resolution always takes the NEAREST
marker, so a system/verified region nested inside an untrusted one is
extracted again.  Unmarked content is trusted (system).
"""

from __future__ import annotations

from . import TrustLevel, parse_enum
from .dom import AgentElement, nearest
from .vocabulary import IGNORE, IGNORE_SELECTOR, TRUST, TRUST_SELECTOR


def get_trust_level(el: AgentElement) -> TrustLevel:
    """Effective trust level of *el*: the nearest marker's value, else system."""
    marker = nearest(el, TRUST_SELECTOR)
    if marker is None:
        return TrustLevel.SYSTEM
    return parse_enum(TrustLevel, marker.get_attribute(TRUST), TrustLevel.SYSTEM)


def is_untrusted(el: AgentElement) -> bool:
    return get_trust_level(el) == TrustLevel.UNTRUSTED


def is_ignored(el: AgentElement) -> bool:
    """True iff the nearest ignore marker is explicitly ``"true"``."""
    marker = nearest(el, IGNORE_SELECTOR)
    return marker is not None and marker.get_attribute(IGNORE) == "true"


def should_skip(el: AgentElement) -> bool:
    """True if *el* (and everything under it) must stay out of the result."""
    return is_untrusted(el) or is_ignored(el)
