# tests/test_status_normalizer.py
from __future__ import annotations

from judit_proxy.orchestrator.status_normalizer import (
    OutcomeKind,
    classify_outcome,
    http_status_for,
    is_completed,
    record_status,
)


def test_is_completed_accepts_either_signal() -> None:
    assert is_completed("completed", None) is True
    assert is_completed("pending", {"request_status": "completed"}) is True
    assert is_completed(None, {"request_status": "completed"}) is True
    assert is_completed("pending", {"request_status": "pending"}) is False
    assert is_completed(None, None) is False


def test_disagreeing_signals_are_not_reconciled() -> None:
    # job says completed while the record still says pending: completed wins
    assert is_completed("completed", {"request_status": "pending"}) is True


def test_classify_outcome_priority() -> None:
    assert classify_outcome({"request_status": "completed"}, "pending") is OutcomeKind.COMPLETED
    assert classify_outcome({}, "completed") is OutcomeKind.COMPLETED
    assert classify_outcome({"request_status": "processing"}, "pending") is OutcomeKind.PARTIAL_RESULT
    # a completed job status without any record is still "no data"
    assert classify_outcome(None, "completed") is OutcomeKind.TIMEOUT_NO_DATA


def test_http_status_for() -> None:
    assert http_status_for(OutcomeKind.COMPLETED) == 200
    assert http_status_for(OutcomeKind.PARTIAL_RESULT) == 202
    assert http_status_for(OutcomeKind.TIMEOUT_NO_DATA) == 202


def test_record_status_ignores_non_strings() -> None:
    assert record_status({"request_status": 1}) is None
    assert record_status("x") is None  # type: ignore[arg-type]
    assert record_status({"request_status": "completed"}) == "completed"
