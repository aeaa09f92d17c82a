"""
judit_proxy/orchestrator/response_normalizer.py

WHAT THIS FILE IS FOR
---------------------
This module maps one JUDIT result record (page one of /responses) into
the stable public payloads defined in schemas/output_schema.py:

- CaseNormalizer.build_full(...)     -> FullCasePayload
- CaseNormalizer.build_minimal(...)  -> MinimalCasePayload
- CaseNormalizer.normalize(...)      -> either, by profile

DEFENSIVE EXTRACTION STRATEGY
-----------------------------
Every upstream field is optional, and the case payload may be nested
directly in the record or one level under `response_data` (sometimes
twice). Unwrapping always prefers the wrapper:

    lawsuit = record.response_data or record
    rd      = lawsuit.response_data or lawsuit

List fields that may hold plain strings or tagged objects
(classifications, subjects, documents) are mapped element-wise:
objects contribute their `name`/`document`, strings are kept verbatim,
falsy results are dropped.

DERIVED FIELDS
--------------
- movimentacoes: steps sorted by step_date DESC; steps without a
  parseable date go last, in input order
- fonte:  "{tribunal} - {grau}" or "Fonte não informada"
- grau:   1 -> "1º grau", 2 -> "2º grau", other -> verbatim,
          absent -> "instância não informada"
- status: rd.status, else "ANDAMENTO" if any step, else "DESCONHECIDO"

Attachments (`anexos`) are emitted only when include_attachments is set,
even if the upstream payload carries them.

WHAT THIS FILE IS NOT FOR
-------------------------
This module MUST NOT perform I/O or decide HTTP status codes. Given the
same inputs it always produces the same payload.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Union

from schemas.output_schema import (
    Advogado,
    Anexo,
    ErroInfo,
    FullCasePayload,
    Meta,
    MinimalCasePayload,
    MinimalMovimentacao,
    MinimalProcesso,
    Movimentacao,
    Parte,
    Processo,
)

FONTE_FALLBACK = "Fonte não informada"
GRAU_FALLBACK = "instância não informada"
STATUS_IN_PROGRESS = "ANDAMENTO"
STATUS_UNKNOWN = "DESCONHECIDO"


class Profile(str, Enum):
    MINIMAL = "minimal"
    FULL = "full"


CasePayload = Union[FullCasePayload, MinimalCasePayload]


def _obj(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def first_of(*candidates: Any) -> Any:
    """Return the first truthy candidate, else None."""
    for c in candidates:
        if c:
            return c
    return None


def _labels(items: Any, key: str) -> Any:
    """
    Map a list of strings / tagged objects to their labels.

    Non-list values are passed through verbatim (or None when falsy).
    """
    if not isinstance(items, list):
        return items or None
    out: List[Any] = []
    for item in items:
        label = item.get(key) if isinstance(item, Mapping) else item
        if label:
            out.append(label)
    return out


def _parse_step_date(value: Any) -> Optional[float]:
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def sort_steps(steps: Iterable[Any]) -> List[Mapping[str, Any]]:
    """Steps by step_date DESC; undated/unparseable steps last, input order kept."""
    items = [s for s in steps if isinstance(s, Mapping)]

    def key(step: Mapping[str, Any]) -> tuple:
        ts = _parse_step_date(step.get("step_date"))
        return (1, 0.0) if ts is None else (0, -ts)

    return sorted(items, key=key)


def format_grau(instance: Any) -> str:
    if instance is False:
        return GRAU_FALLBACK
    if instance is True:
        return "true"
    if instance == 1 or instance == "1":
        return "1º grau"
    if instance == 2 or instance == "2":
        return "2º grau"
    if instance is None or instance == "":
        return GRAU_FALLBACK
    return str(instance)


def format_fonte(tribunal: Any, instance: Any) -> str:
    if not tribunal:
        return FONTE_FALLBACK
    return f"{tribunal} - {format_grau(instance)}"


class CaseNormalizer:
    """
    Pure mapping from a JUDIT result record to the public payloads.
    """

    @staticmethod
    def unwrap(record: Optional[Mapping[str, Any]]) -> tuple[Mapping[str, Any], Mapping[str, Any]]:
        """Return (lawsuit, rd), each preferring its `response_data` wrapper."""
        rec = _obj(record)
        lawsuit = _obj(rec.get("response_data")) or rec
        rd = _obj(lawsuit.get("response_data")) or lawsuit
        return lawsuit, rd

    @staticmethod
    def build_full(
        cnj: Optional[str],
        record: Optional[Mapping[str, Any]],
        *,
        meta: Optional[Meta] = None,
        error: Optional[ErroInfo] = None,
        include_attachments: bool = False,
    ) -> FullCasePayload:
        lawsuit, rd = CaseNormalizer.unwrap(record)

        raw_steps = lawsuit.get("steps")
        if not isinstance(raw_steps, list):
            raw_steps = rd.get("steps") if isinstance(rd.get("steps"), list) else []
        movimentacoes = [CaseNormalizer._movimentacao(s) for s in sort_steps(raw_steps)]
        last = movimentacoes[0] if movimentacoes else None

        tribunal = first_of(rd.get("tribunal_acronym"), lawsuit.get("tribunal_acronym"))
        instance = first_of(rd.get("instance"), lawsuit.get("instance"))

        return FullCasePayload(
            ok=error is None,
            cnj=cnj,
            fonte=format_fonte(tribunal, instance),
            status=first_of(rd.get("status"), STATUS_IN_PROGRESS if movimentacoes else STATUS_UNKNOWN),
            ultima_movimentacao_data=last.data if last else None,
            texto=last.conteudo if last else None,
            ultima_movimentacao=last,
            movimentacoes=movimentacoes,
            processo=CaseNormalizer._processo(cnj, rd, tribunal, instance),
            partes=CaseNormalizer._partes(lawsuit, rd),
            anexos=CaseNormalizer._anexos(rd) if include_attachments else [],
            meta=meta or Meta(),
            erro=error,
        )

    @staticmethod
    def project_minimal(full: FullCasePayload) -> MinimalCasePayload:
        last = full.ultima_movimentacao
        return MinimalCasePayload(
            cnj=full.cnj,
            fonte=full.fonte,
            status=full.status,
            ultima_movimentacao_data=full.ultima_movimentacao_data,
            ultima_movimentacao=MinimalMovimentacao(conteudo=last.conteudo if last else None),
            processo=MinimalProcesso(fase=full.processo.fase),
        )

    @staticmethod
    def build_minimal(cnj: Optional[str], record: Optional[Mapping[str, Any]]) -> MinimalCasePayload:
        return CaseNormalizer.project_minimal(CaseNormalizer.build_full(cnj, record))

    @staticmethod
    def normalize(
        cnj: Optional[str],
        record: Optional[Mapping[str, Any]],
        *,
        profile: Profile,
        meta: Optional[Meta] = None,
        error: Optional[ErroInfo] = None,
        include_attachments: bool = False,
    ) -> CasePayload:
        full = CaseNormalizer.build_full(
            cnj,
            record,
            meta=meta,
            error=error,
            include_attachments=include_attachments,
        )
        if profile is Profile.MINIMAL:
            return CaseNormalizer.project_minimal(full)
        return full

    @staticmethod
    def error_payload(
        cnj: Optional[str],
        error: ErroInfo,
        *,
        profile: Profile,
        meta: Optional[Meta] = None,
    ) -> CasePayload:
        """Failure-path body: stable envelope (full) or all-null key set (minimal)."""
        if profile is Profile.MINIMAL:
            return MinimalCasePayload.empty()
        return CaseNormalizer.build_full(cnj, None, meta=meta or Meta(is_partial=True), error=error)

    # ------------------------------------------------------------------ #
    # Field extraction
    # ------------------------------------------------------------------ #
    @staticmethod
    def _movimentacao(step: Mapping[str, Any]) -> Movimentacao:
        return Movimentacao(
            id=step.get("step_id") or None,
            data=step.get("step_date") or None,
            conteudo=step.get("content") or None,
            private=bool(step.get("private")),
        )

    @staticmethod
    def _processo(
        cnj: Optional[str],
        rd: Mapping[str, Any],
        tribunal: Any,
        instance: Any,
    ) -> Processo:
        courts = rd.get("courts")
        first_court = _obj(courts[0]) if isinstance(courts, list) and courts else {}

        return Processo(
            codigo=first_of(rd.get("code"), cnj),
            classe=_labels(rd.get("classifications"), "name"),
            assuntos=_labels(rd.get("subjects"), "name"),
            orgao=first_of(first_court.get("name"), rd.get("court")),
            juiz=rd.get("judge") or None,
            tipo_justica=rd.get("justice_description") or None,
            instancia=instance,
            comarca=rd.get("county") or None,
            cidade=rd.get("city") or None,
            uf=rd.get("state") or None,
            tribunal=tribunal,
            fase=rd.get("phase") or None,
            situacao=rd.get("situation") or None,
            distribuicao=rd.get("distribution_date") or None,
            valor_causa=rd.get("amount") or None,
            # secrecy level 0 is meaningful: only absence maps to null
            sigilo=rd.get("secrecy_level"),
        )

    @staticmethod
    def _partes(lawsuit: Mapping[str, Any], rd: Mapping[str, Any]) -> List[Parte]:
        parties = rd.get("parties")
        if not isinstance(parties, list):
            parties = lawsuit.get("parties") if isinstance(lawsuit.get("parties"), list) else []

        partes: List[Parte] = []
        for raw in parties:
            p = _obj(raw)
            documents = p.get("documents")
            lawyers = p.get("lawyers")
            partes.append(
                Parte(
                    nome=p.get("name") or None,
                    polo=p.get("side") or None,
                    tipo=p.get("person_type") or None,
                    documento=p.get("main_document") or None,
                    documentos=_labels(documents, "document") if isinstance(documents, list) else [],
                    advogados=[CaseNormalizer._advogado(_obj(l)) for l in lawyers] if isinstance(lawyers, list) else [],
                )
            )
        return partes

    @staticmethod
    def _advogado(lawyer: Mapping[str, Any]) -> Advogado:
        return Advogado(
            nome=lawyer.get("name") or None,
            oab=lawyer.get("oab") or CaseNormalizer._oab_from_documents(lawyer.get("documents")),
        )

    @staticmethod
    def _oab_from_documents(documents: Any) -> Any:
        """`document` of the first entry whose document_type mentions OAB."""
        if not isinstance(documents, list):
            return None
        for doc in documents:
            d = _obj(doc)
            if "oab" in str(d.get("document_type") or "").lower():
                return d.get("document") or None
        return None

    @staticmethod
    def _anexos(rd: Mapping[str, Any]) -> List[Anexo]:
        attachments = rd.get("attachments")
        if not isinstance(attachments, list):
            return []
        anexos: List[Anexo] = []
        for raw in attachments:
            a = _obj(raw)
            anexos.append(
                Anexo(
                    id=a.get("attachment_id") or None,
                    data=a.get("attachment_date") or None,
                    nome=a.get("attachment_name") or None,
                    extensao=a.get("extension") or None,
                    status=a.get("status") or None,
                )
            )
        return anexos
