# tests/conftest.py
"""
Shared fakes for the polling tests.

- FakeClock: monotonic clock + sleeper; sleeping advances time instantly.
- ScriptedJuditClient: replays scripted status / listing responses per
  poll and records every call. A script entry that is an Exception
  instance is raised instead of returned. When a script runs out, its
  last entry repeats.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import pytest

from judit_proxy.orchestrator.errors import UpstreamSubmitError
from judit_proxy.orchestrator.judit_client import ResultPage


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class ScriptedJuditClient:
    def __init__(
        self,
        *,
        request_id: Optional[str] = "req-1",
        statuses: Optional[List[Any]] = None,
        pages: Optional[List[Any]] = None,
        submit_error: Optional[Exception] = None,
    ) -> None:
        self.request_id = request_id
        self.statuses = list(statuses or [None])
        self.pages = list(pages or [ResultPage()])
        self.submit_error = submit_error
        self.calls: List[tuple] = []

    def submit_job(self, cnj: str, *, on_demand: bool = False, with_attachments: bool = False) -> str:
        self.calls.append(("submit", cnj, on_demand, with_attachments))
        if self.submit_error is not None:
            raise self.submit_error
        if not self.request_id:
            raise UpstreamSubmitError("request_id não retornado pela JUDIT.", status=200, detail={})
        return self.request_id

    def get_job_status(self, request_id: str) -> Optional[str]:
        self.calls.append(("status", request_id))
        return self._next(self.statuses)

    def list_results(self, request_id: str, page_size: Optional[int] = None) -> ResultPage:
        self.calls.append(("list", request_id))
        return self._next(self.pages)

    def count(self, op: str) -> int:
        return sum(1 for c in self.calls if c[0] == op)

    @staticmethod
    def _next(script: List[Any]) -> Any:
        item = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(item, Exception):
            raise item
        return item


def page(*records: Dict[str, Any], request_status: Optional[str] = None) -> ResultPage:
    return ResultPage(records=list(records), request_status=request_status)


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def make_client() -> Callable[..., ScriptedJuditClient]:
    return ScriptedJuditClient


@pytest.fixture()
def make_page() -> Callable[..., ResultPage]:
    return page
