"""
judit_proxy/orchestrator/poll_orchestrator.py

WHAT THIS FILE IS FOR
---------------------
This module drives one JUDIT lookup job from submission to a terminal
outcome:

    Submitting -> Polling -> {Completed, TimedOut}
                          -> [GracePolling] -> {Completed, TimedOut}

CALL FLOW CONTEXT
-----------------
MovimentacoesService.lookup()
  -> PollOrchestrator.run(query)
      -> JuditClient.submit_job()            (exactly once)
      -> loop: JuditClient.get_job_status()  (failure absorbed)
               JuditClient.list_results()    (failure absorbed)
               Deadline.sleep(poll_ms)
      -> optional grace loop: JuditClient.list_results()

TIMING POLICY
-------------
- Main loop:  budget = query.wait_ms,  interval = query.poll_ms
- Grace loop: only when query.retry_on_pending and the main loop did not
  complete; budget = query.grace_ms, interval = query.grace_poll_ms.
  Reuses the same request_id, lists results only and does not count
  towards `attempts`.
- A loop exits only on an iteration whose listing returned a record
  while either completion signal reports "completed". A "completed" job
  status with an empty or failed listing keeps polling. Intervals are
  fixed (no backoff).

ERROR HANDLING RULES
--------------------
- UpstreamSubmitError propagates (fatal for the invocation).
- UpstreamPollError during polling is logged and swallowed; the loop
  keeps the last known status/record and tries again next cycle.

All state (attempts, best record, last status) lives in locals of one
run() call; nothing is shared between invocations and the request_id is
discarded with the returned PollOutcome.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import structlog

from judit_proxy.orchestrator.deadline import Clock, Deadline, Sleeper
from judit_proxy.orchestrator.errors import UpstreamPollError
from judit_proxy.orchestrator.judit_client import JuditClient
from judit_proxy.orchestrator.status_normalizer import (
    OutcomeKind,
    classify_outcome,
    is_completed,
    record_status,
)
from schemas.input_schema import CaseQuery

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PollOutcome:
    request_id: str
    kind: OutcomeKind
    record: Optional[Dict[str, Any]]
    request_status: Optional[str]
    attempts: int
    waited_ms: int

    @property
    def record_request_status(self) -> Optional[str]:
        return record_status(self.record)

    @property
    def cached_response(self) -> bool:
        tags = self.record.get("tags") if isinstance(self.record, dict) else None
        return bool(tags.get("cached_response")) if isinstance(tags, dict) else False


@dataclass
class _PollState:
    status: Optional[str] = "pending"
    record: Optional[Dict[str, Any]] = None
    attempts: int = 0

    @property
    def completed(self) -> bool:
        return is_completed(self.status, self.record)

    @property
    def confirmed(self) -> bool:
        return self.record is not None and self.completed


class PollOrchestrator:
    def __init__(
        self,
        client: JuditClient,
        *,
        clock: Clock = time.monotonic,
        sleeper: Sleeper = time.sleep,
        debug: bool = False,
    ) -> None:
        self.client = client
        self._clock = clock
        self._sleeper = sleeper
        self._debug = debug

    def run(self, query: CaseQuery) -> PollOutcome:
        request_id = self.client.submit_job(
            query.cnj,
            on_demand=query.force_on_demand,
            with_attachments=query.with_attachments,
        )

        state = _PollState()
        started = self._deadline(query.wait_ms)

        # ---------------------------------------------------------------
        # 1) Main loop
        # ---------------------------------------------------------------
        while not started.expired():
            state.attempts += 1
            got_record = self._poll_once(request_id, state, with_status=True, phase="main")
            if got_record and state.completed:
                break
            started.sleep(query.poll_ms)

        # ---------------------------------------------------------------
        # 2) Grace loop (optional)
        # ---------------------------------------------------------------
        if query.retry_on_pending and not state.confirmed:
            logger.info("grace_polling_started", request_id=request_id, grace_ms=query.grace_ms)
            grace = self._deadline(query.grace_ms)
            while not grace.expired():
                got_record = self._poll_once(request_id, state, with_status=False, phase="grace")
                if got_record and state.completed:
                    break
                grace.sleep(query.grace_poll_ms)

        outcome = PollOutcome(
            request_id=request_id,
            kind=classify_outcome(state.record, state.status),
            record=state.record,
            request_status=state.status,
            attempts=state.attempts,
            waited_ms=started.elapsed_ms,
        )

        logger.info(
            "poll_finished",
            request_id=request_id,
            outcome=outcome.kind.value,
            request_status=outcome.request_status,
            attempts=outcome.attempts,
            waited_ms=outcome.waited_ms,
        )
        return outcome

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _deadline(self, budget_ms: int) -> Deadline:
        return Deadline(budget_ms, clock=self._clock, sleeper=self._sleeper)

    def _poll_once(self, request_id: str, state: _PollState, *, with_status: bool, phase: str) -> bool:
        """One status + listing round. True when page one carried a record."""
        if with_status:
            try:
                state.status = self.client.get_job_status(request_id) or state.status
            except UpstreamPollError as exc:
                logger.warning(
                    "poll_status_failed",
                    request_id=request_id,
                    phase=phase,
                    status_code=exc.status,
                    error=exc.message,
                )

        try:
            page = self.client.list_results(request_id)
        except UpstreamPollError as exc:
            logger.warning(
                "poll_list_failed",
                request_id=request_id,
                phase=phase,
                status_code=exc.status,
                error=exc.message,
            )
            return False

        got_record = page.first is not None
        if got_record:
            state.record = page.first
            state.status = page.request_status or state.status

        if self._debug:
            logger.info(
                "poll_iteration",
                request_id=request_id,
                phase=phase,
                attempt=state.attempts,
                job_status=state.status,
                record_status=record_status(state.record),
                has_record=state.record is not None,
            )
        return got_record
