# tests/test_movimentacoes_endpoint.py
from __future__ import annotations

from fastapi.testclient import TestClient
import pytest

import api  # imports app + module-level objects
from judit_proxy.orchestrator.errors import UpstreamSubmitError
from judit_proxy.orchestrator.movimentacoes_service import (
    NO_DATA_MESSAGE,
    PARTIAL_MESSAGE,
    MovimentacoesService,
)
from judit_proxy.utils.settings import Settings

CNJ = "8030912-11.2022.8.05.0080"

MINIMAL_KEYS = {"cnj", "fonte", "status", "ultima_movimentacao_data", "ultima_movimentacao", "processo"}

NULL_MINIMAL = {
    "cnj": None,
    "fonte": None,
    "status": None,
    "ultima_movimentacao_data": None,
    "ultima_movimentacao": {"conteudo": None},
    "processo": {"fase": None},
}

RECORD = {
    "request_status": "completed",
    "tags": {"cached_response": True},
    "response_data": {
        "tribunal_acronym": "TJBA",
        "instance": 1,
        "status": "ATIVO",
        "phase": "Conhecimento",
        "steps": [{"step_id": "s1", "step_date": "2024-05-02T08:30:00Z", "content": "Sentença publicada"}],
    },
}


@pytest.fixture()
def client() -> TestClient:
    return TestClient(api.app)


@pytest.fixture()
def use_judit(monkeypatch: pytest.MonkeyPatch, fake_clock):
    """Swap api.svc for a service wired to a scripted upstream."""

    def _install(judit_client, **settings):
        svc = MovimentacoesService(
            Settings(**{"api_key": "test-key", **settings}),
            client_factory=lambda s, key: judit_client,
            clock=fake_clock,
            sleeper=fake_clock.sleep,
        )
        monkeypatch.setattr(api, "svc", svc)
        return svc

    return _install


# ---------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------
def test_health_ok(client: TestClient) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert "service" in body


def test_healthz_ok(client: TestClient) -> None:
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


# ---------------------------------------------------------------------
# Completed
# ---------------------------------------------------------------------
def test_minimal_completed_returns_fixed_keys(client: TestClient, use_judit, make_client, make_page) -> None:
    use_judit(make_client(pages=[make_page(RECORD)]))

    r = client.get("/api/judit/movimentacoes", params={"cnj": CNJ})

    assert r.status_code == 200
    body = r.json()
    assert set(body) == MINIMAL_KEYS
    assert body == {
        "cnj": CNJ,
        "fonte": "TJBA - 1º grau",
        "status": "ATIVO",
        "ultima_movimentacao_data": "2024-05-02T08:30:00Z",
        "ultima_movimentacao": {"conteudo": "Sentença publicada"},
        "processo": {"fase": "Conhecimento"},
    }


def test_full_completed_returns_envelope(client: TestClient, use_judit, make_client, make_page) -> None:
    use_judit(make_client(pages=[make_page(RECORD)]))

    r = client.get("/api/judit/movimentacoes/full", params={"cnj": f"  {CNJ}  "})

    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["cnj"] == CNJ
    assert body["texto"] == "Sentença publicada"
    assert body["ultima_movimentacao"]["tipo"] == "ANDAMENTO"
    assert body["meta"]["request_status"] == "completed"
    assert body["meta"]["is_partial"] is False
    assert body["meta"]["cached_response"] is True
    assert body["erro"] is None
    assert body["anexos"] == []


def test_body_is_utf8_json(client: TestClient, use_judit, make_client, make_page) -> None:
    use_judit(make_client(pages=[make_page(RECORD)]))

    r = client.get("/api/judit/movimentacoes", params={"cnj": CNJ})

    assert r.headers["content-type"] == "application/json; charset=utf-8"
    # non-ASCII text is written as-is, not \u-escaped
    assert "1º grau" in r.content.decode("utf-8")


# ---------------------------------------------------------------------
# Partial / timeout
# ---------------------------------------------------------------------
def test_full_partial_returns_202(client: TestClient, use_judit, make_client, make_page) -> None:
    pending = {"request_status": "pending", "response_data": {"steps": [{"content": "Juntada"}]}}
    use_judit(make_client(statuses=["pending"], pages=[make_page(pending)]))

    r = client.get("/api/judit/movimentacoes/full", params={"cnj": CNJ, "waitMs": "2000", "pollMs": "1000"})

    assert r.status_code == 202
    body = r.json()
    assert body["ok"] is True
    assert body["meta"]["is_partial"] is True
    assert body["meta"]["message"] == PARTIAL_MESSAGE
    assert body["texto"] == "Juntada"


def test_full_timeout_without_data_returns_202_with_error(
    client: TestClient, use_judit, make_client
) -> None:
    use_judit(make_client(request_id="req-7", statuses=["pending"]))

    r = client.get("/api/judit/movimentacoes/full", params={"cnj": CNJ, "waitMs": "1000"})

    assert r.status_code == 202
    body = r.json()
    assert body["ok"] is False
    assert body["erro"]["message"] == NO_DATA_MESSAGE
    assert body["erro"]["detail"]["request_id"] == "req-7"
    assert body["meta"]["message"] == NO_DATA_MESSAGE


def test_minimal_timeout_keeps_fixed_keys(client: TestClient, use_judit, make_client) -> None:
    use_judit(make_client())

    r = client.get("/api/judit/movimentacoes", params={"cnj": CNJ, "waitMs": "0"})

    assert r.status_code == 202
    body = r.json()
    assert set(body) == MINIMAL_KEYS
    assert body["ultima_movimentacao"] == {"conteudo": None}


# ---------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------
def test_missing_cnj_minimal_is_400_all_null(client: TestClient) -> None:
    r = client.get("/api/judit/movimentacoes")

    assert r.status_code == 400
    assert r.json() == NULL_MINIMAL


def test_blank_cnj_full_is_400_with_message(client: TestClient) -> None:
    r = client.get("/api/judit/movimentacoes/full", params={"cnj": "   "})

    assert r.status_code == 400
    body = r.json()
    assert body["ok"] is False
    assert body["erro"]["message"] == 'Parâmetro "cnj" é obrigatório.'


def test_missing_api_key_is_500(client: TestClient, use_judit, make_client) -> None:
    judit = make_client()
    use_judit(judit, api_key=None)

    r = client.get("/api/judit/movimentacoes/full", params={"cnj": CNJ})

    assert r.status_code == 500
    body = r.json()
    assert body["ok"] is False
    assert body["erro"]["message"] == "JUDIT_API_KEY não configurada no ambiente."
    assert judit.calls == []


def test_submit_failure_is_502(client: TestClient, use_judit, make_client) -> None:
    use_judit(make_client(submit_error=UpstreamSubmitError(status=401, raw_body='{"message":"unauthorized"}')))

    r = client.get("/api/judit/movimentacoes/full", params={"cnj": CNJ})

    assert r.status_code == 502
    body = r.json()
    assert body["ok"] is False
    assert body["cnj"] == CNJ
    assert body["erro"]["message"] == "Falha ao criar requisição na JUDIT"
    assert body["erro"]["detail"] == {"status": 401, "text": '{"message":"unauthorized"}'}


def test_submit_failure_minimal_is_all_null(client: TestClient, use_judit, make_client) -> None:
    use_judit(make_client(submit_error=UpstreamSubmitError(status=500, raw_body="x")))

    r = client.get("/api/judit/movimentacoes", params={"cnj": CNJ})

    assert r.status_code == 502
    assert r.json() == NULL_MINIMAL


def test_unexpected_failure_is_500(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    def boom(query, *, profile):
        raise RuntimeError("kaput")

    monkeypatch.setattr(api, "svc", type("SVC", (), {"lookup": staticmethod(boom)})())

    r = client.get("/api/judit/movimentacoes/full", params={"cnj": CNJ})

    assert r.status_code == 500
    body = r.json()
    assert body["ok"] is False
    assert body["erro"]["message"] == "kaput"
    assert body["cnj"] is None
    assert body["erro"]["detail"] == {"type": "RuntimeError"}


# ---------------------------------------------------------------------
# Correlation id
# ---------------------------------------------------------------------
def test_correlation_id_is_echoed(client: TestClient) -> None:
    r = client.get("/health", headers={"X-Correlation-Id": "corr-123"})
    assert r.headers["X-Correlation-Id"] == "corr-123"


def test_correlation_id_is_generated_on_errors(client: TestClient) -> None:
    r = client.get("/api/judit/movimentacoes")
    assert r.status_code == 400
    assert r.headers["X-Correlation-Id"].startswith("corr_")
