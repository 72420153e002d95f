# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Agentic microformats exception hierarchy.

Extraction itself never raises for malformed page data: bad JSON, unknown
enum values and missing attributes degrade to documented defaults.  The
errors below cover the environment and the outer surfaces only.  All of
them inherit from AgenticMicroformatsError so callers can catch the base
class.
"""

from __future__ import annotations


class AgenticMicroformatsError(Exception):
    """Base exception for all agentic microformats errors."""


class ObservationUnsupportedError(AgenticMicroformatsError):
    """The host tree offers no mutation-observation capability."""


class DocumentLoadError(AgenticMicroformatsError):
    """The lxml host could not parse the supplied markup."""


class ActionNotFoundError(AgenticMicroformatsError):
    """No extracted action matches the requested name/target."""

    def __init__(self, message: str, *, name: str = "", target: str | None = None) -> None:
        super().__init__(message)
        self.name = name
        self.target = target
