"""
judit_proxy/orchestrator/movimentacoes_service.py

WHAT THIS FILE IS FOR
---------------------
This module runs one movimentações lookup end to end and decides the
HTTP status + body for it:

    CaseQuery -> validate -> credential check -> PollOrchestrator.run()
              -> CaseNormalizer -> (status_code, payload)

OUTCOME MAPPING
---------------
| outcome           | status | meta                                        |
|-------------------|--------|---------------------------------------------|
| COMPLETED         | 200    | request_status="completed", is_partial=false |
| PARTIAL_RESULT    | 202    | is_partial=true, "ainda está finalizando"   |
| TIMEOUT_NO_DATA   | 202    | is_partial=true, erro + message (no data)   |

Failures are raised, not returned:
- InvalidQueryError   (400) blank cnj
- ConfigurationError  (500) JUDIT_API_KEY missing
- UpstreamSubmitError (502) submission failed / no request_id
and rendered by the ProxyError handler in api.py.

WHAT THIS FILE IS NOT FOR
-------------------------
This module MUST NOT parse query strings (schemas/input_schema.py) or
build HTTP responses (api.py).
"""

from __future__ import annotations

import time
from typing import Callable, Optional, Tuple

import structlog

from judit_proxy.orchestrator.deadline import Clock, Sleeper
from judit_proxy.orchestrator.errors import ConfigurationError, InvalidQueryError
from judit_proxy.orchestrator.judit_client import JuditClient
from judit_proxy.orchestrator.poll_orchestrator import PollOrchestrator, PollOutcome
from judit_proxy.orchestrator.response_normalizer import CaseNormalizer, CasePayload, Profile
from judit_proxy.orchestrator.status_normalizer import COMPLETED, OutcomeKind, http_status_for
from judit_proxy.utils.settings import Settings
from schemas.input_schema import CaseQuery
from schemas.output_schema import ErroInfo, Meta

logger = structlog.get_logger(__name__)

PARTIAL_MESSAGE = "Resposta parcial: a JUDIT ainda está finalizando."
NO_DATA_MESSAGE = "Não foi possível obter as movimentações dentro do tempo limite."

ClientFactory = Callable[[Settings, str], JuditClient]


class MovimentacoesService:
    """
    Invocation controller for the movimentações endpoints.

    A fresh JuditClient + PollOrchestrator is built per lookup; nothing
    survives the call except the (stateless) settings.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        client_factory: ClientFactory = JuditClient,
        clock: Clock = time.monotonic,
        sleeper: Sleeper = time.sleep,
    ) -> None:
        self.settings = settings
        self._client_factory = client_factory
        self._clock = clock
        self._sleeper = sleeper

    def lookup(self, query: CaseQuery, *, profile: Profile) -> Tuple[int, CasePayload]:
        if not query.cnj:
            raise InvalidQueryError()

        api_key = self.settings.api_key
        if not api_key:
            raise ConfigurationError()

        orchestrator = PollOrchestrator(
            self._client_factory(self.settings, api_key),
            clock=self._clock,
            sleeper=self._sleeper,
            debug=self.settings.enable_debug_metadata,
        )
        outcome = orchestrator.run(query)

        meta, error = self._meta_and_error(outcome)
        payload = CaseNormalizer.normalize(
            query.cnj,
            outcome.record,
            profile=profile,
            meta=meta,
            error=error,
            include_attachments=query.include_attachments,
        )
        status_code = http_status_for(outcome.kind)

        logger.info(
            "lookup_finished",
            cnj=query.cnj,
            profile=profile.value,
            outcome=outcome.kind.value,
            status_code=status_code,
        )
        return status_code, payload

    @staticmethod
    def _meta_and_error(outcome: PollOutcome) -> Tuple[Meta, Optional[ErroInfo]]:
        if outcome.kind is OutcomeKind.COMPLETED:
            return (
                Meta(
                    request_status=COMPLETED,
                    is_partial=False,
                    cached_response=outcome.cached_response,
                    waited_ms=outcome.waited_ms,
                    attempts=outcome.attempts,
                ),
                None,
            )

        if outcome.kind is OutcomeKind.PARTIAL_RESULT:
            return (
                Meta(
                    request_status=outcome.request_status or outcome.record_request_status or "pending",
                    is_partial=True,
                    cached_response=outcome.cached_response,
                    waited_ms=outcome.waited_ms,
                    attempts=outcome.attempts,
                    message=PARTIAL_MESSAGE,
                ),
                None,
            )

        return (
            Meta(
                request_status=outcome.request_status,
                is_partial=True,
                waited_ms=outcome.waited_ms,
                attempts=outcome.attempts,
                message=NO_DATA_MESSAGE,
            ),
            ErroInfo(
                message=NO_DATA_MESSAGE,
                detail={"request_id": outcome.request_id, "request_status": outcome.request_status},
            ),
        )
