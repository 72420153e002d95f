# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Environment-driven settings for the command line surface.

    AGENTIC_MF_LOG_LEVEL   root log level name (default WARNING)
    AGENTIC_MF_LOG_JSON    1/true/yes for JSON log lines
    AGENTIC_MF_FORMAT      default extract format: json | yaml | prompt

Explicit CLI flags always win over these values.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("json", "yaml", "prompt")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    log_level: str = "WARNING"
    log_json: bool = False
    output_format: str = "json"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Read settings from *environ* (default: ``os.environ``).

        Unrecognized values are ignored and the default kept.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        log_level = env.get("AGENTIC_MF_LOG_LEVEL", "").strip().upper()
        if log_level not in _LOG_LEVELS:
            if log_level:
                logger.debug("ignoring unknown AGENTIC_MF_LOG_LEVEL=%r", log_level)
            log_level = defaults.log_level

        env_json = env.get("AGENTIC_MF_LOG_JSON", "").strip().lower()

        output_format = env.get("AGENTIC_MF_FORMAT", "").strip().lower()
        if output_format not in OUTPUT_FORMATS:
            if output_format:
                logger.debug("ignoring unknown AGENTIC_MF_FORMAT=%r", output_format)
            output_format = defaults.output_format

        return cls(
            log_level=log_level,
            log_json=env_json in ("1", "true", "yes"),
            output_format=output_format,
        )
