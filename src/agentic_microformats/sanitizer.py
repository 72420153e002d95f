# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Sanitization of page-derived strings before they reach an LLM prompt.

Property values, action descriptions and parameter names are authored by
the page, not by the engine.  Trust filtering removes marked regions, but
text inside trusted regions can still carry role-prefix injection, hidden
Unicode or ANSI escapes.  Two layers:

1. sanitize_text(): every short string rendered into the agent outline
2. add_content_boundary(): wraps the outline with source-tagged markers
"""

from __future__ import annotations

import re
import secrets

# Zero-width chars, bidi overrides, interlinear annotations, C0/C1 controls
_CONTROL_CHAR_RE = re.compile(
    r"[\u200B-\u200F\u202A-\u202E\u2060-\u2069\uFEFF\uFFF9-\uFFFB"
    r"\u0000-\u0008\u000B\u000C\u000E-\u001F\u007F-\u009F]"
)

_ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*[a-zA-Z]")

# "[SYSTEM: ...]", "ASSISTANT:" and friends, anywhere in the text
_ROLE_PREFIX_RE = re.compile(
    r"\[?\s*(?:SYSTEM|ASSISTANT|USER|HUMAN|AI|ADMIN|INSTRUCTION|OVERRIDE"
    r"|IMPORTANT|IGNORE|COMMAND)\s*[:\]]\s*",
    re.IGNORECASE,
)

_BOUNDARY_TAG_RE = re.compile(r"<\s*/?\s*page_semantics[\w]*[^>]*>", re.IGNORECASE)

_WHITESPACE_RUN_RE = re.compile(r"\s{2,}")


def sanitize_text(text: str, max_len: int = 256) -> str:
    """Make a single page-derived value safe to embed in one prompt line.

    Strips ANSI escapes, control/bidi characters, role prefixes and
    boundary tags, collapses newlines and whitespace, truncates to max_len.
    """
    if not text:
        return text

    text = _ANSI_ESCAPE_RE.sub("", text)
    text = _CONTROL_CHAR_RE.sub("", text)
    text = text.replace("\n", " ").replace("\r", " ")
    text = _ROLE_PREFIX_RE.sub("", text)
    text = _BOUNDARY_TAG_RE.sub("", text)
    text = _WHITESPACE_RUN_RE.sub(" ", text).strip()

    if len(text) > max_len:
        text = text[:max_len]
    return text


def add_content_boundary(text: str, source: str) -> str:
    """Wrap *text* in nonce-tagged markers naming where it was extracted from.

    The random nonce in the tag name keeps page content from forging the
    closing tag.
    """
    tag = f"page_semantics_{secrets.token_hex(8)}"
    text = _BOUNDARY_TAG_RE.sub("", text)
    return f'<{tag} source="{_escape_attr(source)}">\n{text}\n</{tag}>'


def _escape_attr(value: str) -> str:
    return value.replace("&", "&amp;").replace('"', "&quot;").replace("<", "&lt;").replace(">", "&gt;")
