# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Log setup for the agentic-microformats CLI.

Library modules log through ``logging.getLogger(__name__)`` and never
configure handlers.  The CLI calls configure() once, then bind_invocation()
so every record (library ones included) names the command and the document
being read.  Console output for humans, JSON lines for pipelines; both on
stderr.
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure(*, json_output: bool = False, level: str = "WARNING") -> None:
    """Configure structlog with stdlib bridge, writing to stderr.

    stdout stays reserved for command output (JSON, YAML, outlines).

    Args:
        json_output: True for JSON lines, False for human-readable console output.
        level: Root logger level name (default WARNING).  Unknown names fall
            back to WARNING.
    """
    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))


def bind_invocation(command: str, document: str | None = None) -> None:
    """Tag every following log record with the CLI *command* and its input *document*.

    Replaces any context bound by an earlier invocation in the same process.
    ``-`` is recorded as ``stdin``.
    """
    structlog.contextvars.clear_contextvars()
    context = {"command": command}
    if document is not None:
        context["document"] = "stdin" if document == "-" else document
    structlog.contextvars.bind_contextvars(**context)
