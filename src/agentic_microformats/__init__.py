# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Agentic microformats: semantic resource/action model for AI agents.

Extracts what exists on a page and what can be done with it from markup
annotated with ``data-agent-*`` attributes:
- resources: typed entities with properties, owned actions and nested children
- actions: invocable operations with method, endpoint and typed parameters
- meta: page-level provider, defaults and agent policies
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, TypeVar

from .meta import PageMeta

if TYPE_CHECKING:
    from .dom import AgentElement

__all__ = [
    "Action",
    "ExtractionResult",
    "HttpMethod",
    "InteractionHints",
    "PageMeta",
    "Parameter",
    "PreparedAction",
    "Property",
    "Resource",
    "RiskLevel",
    "Role",
    "TrustLevel",
    "TypeHint",
    "parse_enum",
]


# ---------------------------------------------------------------------------
# Closed vocabularies
# ---------------------------------------------------------------------------


class TypeHint(StrEnum):
    """Declared semantic type of a raw attribute/text value."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    CURRENCY = "currency"
    DATE = "date"
    DATETIME = "datetime"
    URL = "url"
    EMAIL = "email"
    ENUM = "enum"
    JSON = "json"


class Role(StrEnum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    DANGER = "danger"


class RiskLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TrustLevel(StrEnum):
    """Trust marker of a region.  Unmarked content counts as SYSTEM."""

    SYSTEM = "system"
    UNTRUSTED = "untrusted"
    VERIFIED = "verified"


class HttpMethod(StrEnum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


_E = TypeVar("_E", bound=StrEnum)


def parse_enum(enum_cls: type[_E], value: str | None, default: _E | None = None) -> _E | None:
    """Resolve an attribute value to an enum member, or *default* if unrecognized."""
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Extracted model
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class InteractionHints:
    """Risk/role/cost metadata read from an action node.  Never mutated."""

    role: Role | None = None
    risk: RiskLevel | None = None
    human_preferred: bool = False
    reversible: bool | None = None  # None = not declared
    cost: float | None = None
    cost_currency: str | None = None  # only set alongside a parsed cost


@dataclass
class Property:
    """A named, typed value owned by the nearest enclosing resource."""

    name: str
    raw_value: str  # exactly as found in the tree
    type_hint: TypeHint
    value: Any  # coerced; equals raw_value when coercion failed
    currency: str | None = None
    element: AgentElement | None = field(default=None, repr=False, compare=False)


@dataclass
class Parameter:
    """An input of an action.  Dotted names describe nesting in the payload."""

    name: str
    type_hint: TypeHint
    required: bool = False
    disabled: bool = False
    value: str | None = None
    element: AgentElement | None = field(default=None, repr=False, compare=False)


@dataclass
class Action:
    """An operation an agent can invoke, standalone or against a resource."""

    name: str
    method: HttpMethod = HttpMethod.POST
    target: str | None = None  # nearest resource id unless overridden
    endpoint: str | None = None
    params: list[Parameter] = field(default_factory=list)
    declared_params: list[str] = field(default_factory=list)
    headers: dict[str, str] | None = None
    description: str | None = None
    hints: InteractionHints = field(default_factory=InteractionHints)
    element: AgentElement | None = field(default=None, repr=False, compare=False)


@dataclass
class Resource:
    """A semantic entity on the page, possibly containing nested resources."""

    type: str
    id: str
    properties: dict[str, Property] = field(default_factory=dict)
    actions: list[Action] = field(default_factory=list)
    children: list[Resource] = field(default_factory=list)
    element: AgentElement | None = field(default=None, repr=False, compare=False)

    def iter_tree(self) -> Iterator[Resource]:
        """Yield this resource and all nested resources, depth-first."""
        yield self
        for child in self.children:
            yield from child.iter_tree()


@dataclass
class ExtractionResult:
    """One extraction pass: top-level resources and standalone actions."""

    meta: PageMeta
    resources: list[Resource]
    actions: list[Action]

    @property
    def total_resources(self) -> int:
        return sum(1 for top in self.resources for _ in top.iter_tree())


@dataclass
class PreparedAction:
    """A request descriptor ready to be issued by the caller."""

    method: HttpMethod
    url: str
    headers: dict[str, str]
    body: dict[str, Any]
    confirmation_required: bool
    warnings: list[str] = field(default_factory=list)
