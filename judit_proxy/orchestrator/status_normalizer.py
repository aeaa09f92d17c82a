"""
judit_proxy/orchestrator/status_normalizer.py

WHAT THIS FILE IS FOR
---------------------
This module defines the *single canonical rule* for turning the upstream
job signals observed while polling into a terminal outcome and an HTTP
status code.

COMPLETION RULE
---------------
Two independent signals can report completion:
- the job status (GET /requests/{id} or the listing's `request_status`)
- the result record's own `request_status`

Either one equal to "completed" is sufficient (first-true-wins). The two
are NOT reconciled when they disagree.

TERMINAL OUTCOMES (priority order)
----------------------------------
1) COMPLETED       record exists AND a signal says "completed"  -> 200
2) PARTIAL_RESULT  record exists, no signal says "completed"     -> 202
3) TIMEOUT_NO_DATA no record within the applicable budgets       -> 202

This module performs pure, deterministic mapping only: no I/O,
no logging, no exceptions.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional

COMPLETED = "completed"


class OutcomeKind(str, Enum):
    COMPLETED = "completed"
    PARTIAL_RESULT = "partial_result"
    TIMEOUT_NO_DATA = "timeout_no_data"


_HTTP_STATUS = {
    OutcomeKind.COMPLETED: 200,
    OutcomeKind.PARTIAL_RESULT: 202,
    OutcomeKind.TIMEOUT_NO_DATA: 202,
}


def record_status(record: Optional[Mapping[str, Any]]) -> Optional[str]:
    if not isinstance(record, Mapping):
        return None
    value = record.get("request_status")
    return value if isinstance(value, str) and value else None


def is_completed(job_status: Optional[str], record: Optional[Mapping[str, Any]]) -> bool:
    return job_status == COMPLETED or record_status(record) == COMPLETED


def classify_outcome(record: Optional[Mapping[str, Any]], job_status: Optional[str]) -> OutcomeKind:
    if record is None:
        return OutcomeKind.TIMEOUT_NO_DATA
    if is_completed(job_status, record):
        return OutcomeKind.COMPLETED
    return OutcomeKind.PARTIAL_RESULT


def http_status_for(kind: OutcomeKind) -> int:
    return _HTTP_STATUS[kind]
