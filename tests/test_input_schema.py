# tests/test_input_schema.py
from __future__ import annotations

import pytest
from pydantic import ValidationError

from schemas.input_schema import CaseQuery, as_bool, parse_int


def test_defaults_when_only_cnj_given() -> None:
    q = CaseQuery.from_query_params({"cnj": "8030912-11.2022.8.05.0080"})

    assert q.cnj == "8030912-11.2022.8.05.0080"
    assert q.wait_ms == 30000
    assert q.poll_ms == 1500
    assert q.retry_on_pending is False
    assert q.grace_ms == 5000
    assert q.grace_poll_ms == 800
    assert q.force_on_demand is False
    assert q.with_attachments is False
    assert q.include_attachments is False


def test_cnj_is_trimmed_and_blank_becomes_empty() -> None:
    assert CaseQuery.from_query_params({"cnj": "  123  "}).cnj == "123"
    assert CaseQuery.from_query_params({"cnj": "   "}).cnj == ""
    assert CaseQuery.from_query_params({}).cnj == ""


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("120000", 60000),
        ("60000", 60000),
        ("1000", 1000),
        ("-5", 0),
        ("abc", 30000),
        ("2500ms", 2500),
    ],
)
def test_wait_ms_is_capped(raw: str, expected: int) -> None:
    assert CaseQuery.from_query_params({"cnj": "x", "waitMs": raw}).wait_ms == expected


@pytest.mark.parametrize("raw, expected", [("1", 750), ("100000", 5000), ("2000", 2000), ("", 1500)])
def test_poll_ms_is_clamped(raw: str, expected: int) -> None:
    assert CaseQuery.from_query_params({"cnj": "x", "pollMs": raw}).poll_ms == expected


def test_grace_parameters_are_clamped() -> None:
    q = CaseQuery.from_query_params({"cnj": "x", "graceMs": "99999", "gracePollMs": "10"})
    assert q.grace_ms == 15000
    assert q.grace_poll_ms == 500

    q = CaseQuery.from_query_params({"cnj": "x", "graceMs": "1200", "gracePollMs": "9000"})
    assert q.grace_ms == 1200
    assert q.grace_poll_ms == 3000


@pytest.mark.parametrize("raw", ["1", "true", "TRUE", " yes ", "sim", "Sim"])
def test_truthy_flags(raw: str) -> None:
    q = CaseQuery.from_query_params({"cnj": "x", "retryOnPending": raw, "includeAttachments": raw})
    assert q.retry_on_pending is True
    assert q.include_attachments is True


@pytest.mark.parametrize("raw", ["0", "false", "no", "nao", "", "2"])
def test_falsy_flags(raw: str) -> None:
    q = CaseQuery.from_query_params({"cnj": "x", "forceOnDemand": raw, "withAttachments": raw})
    assert q.force_on_demand is False
    assert q.with_attachments is False


def test_snake_case_names_are_accepted() -> None:
    q = CaseQuery.from_query_params({"cnj": "x", "wait_ms": "1000", "retry_on_pending": "1"})
    assert q.wait_ms == 1000
    assert q.retry_on_pending is True


def test_query_is_frozen() -> None:
    q = CaseQuery.from_query_params({"cnj": "x"})
    with pytest.raises(ValidationError):
        q.wait_ms = 1  # type: ignore[misc]


def test_helpers() -> None:
    assert as_bool(None) is False
    assert as_bool(True) is True
    assert parse_int(None, 7) == 7
    assert parse_int(" 42abc", 7) == 42
    assert parse_int("x42", 7) == 7
