# -------------------------------------------------------------------
# schemas/input_schema.py
#
# WHAT THIS FILE IS FOR
# --------------------
# This module defines the **public query schema** of the movimentações
# endpoints: the case number plus the per-request tuning options.
#
# Both camelCase (public contract) and snake_case names are accepted:
#   - camelCase:  waitMs, pollMs, retryOnPending, ...
#   - snake_case: wait_ms, poll_ms, retry_on_pending, ...
#
# PARSING RULES
# -------------
# Query strings are untyped, so every field is parsed leniently:
#   - integers: leading integer prefix ("1500ms" -> 1500); anything
#     non-numeric falls back to the field default
#   - booleans: "1", "true", "yes", "sim" (case-insensitive) are true,
#     everything else is false
# and then clamped:
#   | field         | default | bounds       |
#   |---------------|---------|--------------|
#   | wait_ms       | 30000   | [0, 60000]   |
#   | poll_ms       | 1500    | [750, 5000]  |
#   | grace_ms      | 5000    | [0, 15000]   |
#   | grace_poll_ms | 800     | [500, 3000]  |
#
# A blank `cnj` is NOT rejected here: the service raises
# InvalidQueryError so the caller gets the profile-specific 400 body
# instead of a framework validation error.
#
# The model is frozen: a CaseQuery never changes once an invocation
# starts.
# -------------------------------------------------------------------

from __future__ import annotations

import re
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

TRUTHY = {"1", "true", "yes", "sim"}

WAIT_MS_DEFAULT, WAIT_MS_MAX = 30000, 60000
POLL_MS_DEFAULT, POLL_MS_MIN, POLL_MS_MAX = 1500, 750, 5000
GRACE_MS_DEFAULT, GRACE_MS_MAX = 5000, 15000
GRACE_POLL_MS_DEFAULT, GRACE_POLL_MS_MIN, GRACE_POLL_MS_MAX = 800, 500, 3000

_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")


def as_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUTHY


def parse_int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _INT_PREFIX_RE.match(str(value))
    return int(match.group(1)) if match else default


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


class CaseQuery(BaseModel):
    """
    Case number + tuning options for one lookup.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "cnj": "8030912-11.2022.8.05.0080",
                "waitMs": 60000,
                "retryOnPending": "1",
            }
        },
    )

    cnj: str = Field("", description="CNJ case number (trimmed)")

    wait_ms: int = Field(WAIT_MS_DEFAULT, alias="waitMs", description="Main poll budget (ms)")
    poll_ms: int = Field(POLL_MS_DEFAULT, alias="pollMs", description="Main poll interval (ms)")

    retry_on_pending: bool = Field(False, alias="retryOnPending", description="Enable grace phase")
    grace_ms: int = Field(GRACE_MS_DEFAULT, alias="graceMs", description="Grace poll budget (ms)")
    grace_poll_ms: int = Field(GRACE_POLL_MS_DEFAULT, alias="gracePollMs", description="Grace poll interval (ms)")

    force_on_demand: bool = Field(False, alias="forceOnDemand", description="Ask JUDIT for a fresh lookup")
    with_attachments: bool = Field(False, alias="withAttachments", description="Ask JUDIT for attachments")
    include_attachments: bool = Field(
        False,
        alias="includeAttachments",
        description="Include `anexos` in the response body",
    )

    @classmethod
    def from_query_params(cls, params: Mapping[str, Any]) -> "CaseQuery":
        return cls.model_validate(dict(params))

    @field_validator("cnj", mode="before")
    @classmethod
    def _trim_cnj(cls, v: Any) -> str:
        return str(v).strip() if v is not None else ""

    @field_validator("wait_ms", mode="before")
    @classmethod
    def _clamp_wait_ms(cls, v: Any) -> int:
        return clamp(parse_int(v, WAIT_MS_DEFAULT), 0, WAIT_MS_MAX)

    @field_validator("poll_ms", mode="before")
    @classmethod
    def _clamp_poll_ms(cls, v: Any) -> int:
        return clamp(parse_int(v, POLL_MS_DEFAULT), POLL_MS_MIN, POLL_MS_MAX)

    @field_validator("grace_ms", mode="before")
    @classmethod
    def _clamp_grace_ms(cls, v: Any) -> int:
        return clamp(parse_int(v, GRACE_MS_DEFAULT), 0, GRACE_MS_MAX)

    @field_validator("grace_poll_ms", mode="before")
    @classmethod
    def _clamp_grace_poll_ms(cls, v: Any) -> int:
        return clamp(parse_int(v, GRACE_POLL_MS_DEFAULT), GRACE_POLL_MS_MIN, GRACE_POLL_MS_MAX)

    @field_validator("retry_on_pending", "force_on_demand", "with_attachments", "include_attachments", mode="before")
    @classmethod
    def _parse_flag(cls, v: Any) -> bool:
        return as_bool(v)
