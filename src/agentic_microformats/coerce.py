# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Type-hint driven coercion of raw attribute/text values.

coerce_value() is total: on any parse failure it returns the raw string
unchanged, so callers always get a usable value and detect failure
structurally (see coercion_failed()).
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

from . import TypeHint

# Leading float literal, the way browsers' parseFloat reads "12.5kg" as 12.5
_FLOAT_PREFIX_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

# Everything except digits, separators and sign
_NON_NUMERIC_RE = re.compile(r"[^0-9.,\-]")

# Hints whose coercion parses; the rest pass through unchanged
_PARSED_HINTS = frozenset({TypeHint.NUMBER, TypeHint.INTEGER, TypeHint.BOOLEAN, TypeHint.CURRENCY, TypeHint.JSON})


def parse_float_prefix(raw: str) -> float | None:
    """Locale-agnostic float parse of the leading numeric part of *raw*."""
    m = _FLOAT_PREFIX_RE.match(raw)
    if not m:
        return None
    try:
        n = float(m.group(1))
    except ValueError:
        return None
    return n if math.isfinite(n) else None


def _to_integer(raw: str) -> int | None:
    if "_" in raw:
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    # "42.0", "1e3"
    try:
        n = float(raw)
    except ValueError:
        return None
    if not math.isfinite(n) or not n.is_integer():
        return None
    return int(n)


def normalize_currency(raw: str) -> str:
    """Reduce a currency string to a dot-decimal numeric literal.

    A comma after the last period (or a comma with no period at all) is the
    decimal separator and periods group thousands; otherwise commas group.
    """
    cleaned = _NON_NUMERIC_RE.sub("", raw)
    if "," in cleaned and ("." not in cleaned or cleaned.rfind(",") > cleaned.rfind(".")):
        return cleaned.replace(".", "").replace(",", ".", 1)
    return cleaned.replace(",", "")


def coerce_value(raw: str, type_hint: TypeHint | str) -> Any:
    """Convert *raw* according to *type_hint*; never raises, never returns None."""
    if type_hint == TypeHint.NUMBER:
        n = parse_float_prefix(raw)
        return raw if n is None else n

    if type_hint == TypeHint.INTEGER:
        i = _to_integer(raw)
        return raw if i is None else i

    if type_hint == TypeHint.BOOLEAN:
        if raw == "true":
            return True
        if raw == "false":
            return False
        return raw

    if type_hint == TypeHint.CURRENCY:
        n = parse_float_prefix(normalize_currency(raw))
        return raw if n is None else n

    if type_hint == TypeHint.JSON:
        try:
            parsed = json.loads(raw)
        except (ValueError, RecursionError):
            return raw
        return raw if parsed is None else parsed

    # string, enum, url, email, date, datetime: no validation
    return raw


def coercion_failed(value: Any, type_hint: TypeHint | str) -> bool:
    """True if *value* is still a string although *type_hint* asked for parsing."""
    return type_hint in _PARSED_HINTS and isinstance(value, str)
