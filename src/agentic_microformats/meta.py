# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Page metadata from the ``<script data-agent-meta>`` JSON payload.

The payload uses a snake_case schema::

    {"provider": {"name": "Example Shop GmbH"},
     "defaults": {"currency": "EUR", "locale": "de-DE"},
     "page": {"type": "product"},
     "agent_policies": {"rate_limit": {"requests_per_minute": 60},
                        "require_auth": true, "auth_method": "oauth2"},
     "related": {"cart": "/cart"}}

Models accept that shape and dump camelCase (agentPolicies.rateLimit...).
Every field is optional.  A missing or malformed payload is an empty
PageMeta; a single section of the wrong shape is dropped on its own.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)
from pydantic.alias_generators import to_camel

from .vocabulary import META_SELECTOR

if TYPE_CHECKING:
    from .dom import AgentElement

logger = logging.getLogger(__name__)


def _drop_malformed(value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
    """Validate one section; a section of the wrong shape becomes None."""
    try:
        return handler(value)
    except ValidationError as e:
        logger.debug("dropping data-agent-meta field %s: %d error(s)", info.field_name, e.error_count())
        return None


class _MetaModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    def to_dict(self) -> dict:
        """camelCase dict without unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Provider(_MetaModel):
    name: str | None = Field(None, description="Legal or display name of the site operator")
    jurisdiction: str | None = Field(None, description="Governing jurisdiction, e.g. DE")
    url: str | None = None


class Defaults(_MetaModel):
    currency: str | None = Field(None, description="ISO 4217 code used when a price omits one")
    locale: str | None = None
    timezone: str | None = None


class PageInfo(_MetaModel):
    type: str | None = Field(None, description="Page-type tag, e.g. product, checkout")


class RateLimit(_MetaModel):
    requests_per_minute: int | float | None = None


class AgentPolicies(_MetaModel):
    rate_limit: RateLimit | None = None
    require_auth: bool | None = None
    auth_method: str | None = None

    @field_validator("rate_limit", "require_auth", "auth_method", mode="wrap")
    @classmethod
    def drop_malformed_policy(cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
        return _drop_malformed(value, handler, info)


class PageMeta(_MetaModel):
    """Page-level metadata.  All fields default to None (absent)."""

    provider: Provider | None = None
    defaults: Defaults | None = None
    page: PageInfo | None = None
    agent_policies: AgentPolicies | None = None
    related: dict[str, str] | None = None

    @field_validator("provider", "defaults", "page", "agent_policies", "related", mode="wrap")
    @classmethod
    def drop_malformed_section(cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
        return _drop_malformed(value, handler, info)

    @property
    def is_empty(self) -> bool:
        return not self.to_dict()


def parse_meta(payload: str) -> PageMeta:
    """Parse a JSON payload into PageMeta.

    Malformed JSON or a non-object payload yields PageMeta(); an off-shape
    section is left unset while the other sections are kept.
    """
    try:
        raw = json.loads(payload or "{}")
    except (ValueError, RecursionError):
        logger.debug("malformed data-agent-meta JSON", exc_info=True)
        return PageMeta()
    try:
        return PageMeta.model_validate(raw)
    except ValidationError as e:
        logger.debug("data-agent-meta does not match schema: %d error(s)", e.error_count())
        return PageMeta()


def extract_meta(root: AgentElement) -> PageMeta:
    """PageMeta from the first metadata script under *root*."""
    script = root.query_selector(META_SELECTOR)
    if script is None:
        return PageMeta()
    return parse_meta(script.text_content or "")
