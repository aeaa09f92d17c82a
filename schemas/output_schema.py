# -------------------------------------------------------------------
# schemas/output_schema.py
#
# WHAT THIS FILE IS FOR
# --------------------
# This module defines the two **public response contracts** of the
# proxy:
#
#   - FullCasePayload     GET /api/judit/movimentacoes/full
#   - MinimalCasePayload  GET /api/judit/movimentacoes
#
# NAMING CONVENTION (IMPORTANT)
# -----------------------------
# Field names ARE the wire names (pt-BR, snake_case: `fonte`,
# `ultima_movimentacao_data`, `meta.is_partial`, ...). Existing callers
# depend on them, so no key conversion happens at the API boundary.
#
# STABILITY RULES
# ---------------
# - Every key is always present, on success AND failure paths.
# - The full payload signals failure through `ok=false` + `erro`.
# - The minimal payload has no error channel: on failure paths it is
#   emitted with every leaf null (MinimalCasePayload.empty()).
#
# WHAT THIS FILE IS NOT FOR
# ------------------------
# This module does NOT extract fields from upstream payloads; that is
# judit_proxy/orchestrator/response_normalizer.py.
# -------------------------------------------------------------------

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

MOVEMENT_TYPE = "ANDAMENTO"


class Movimentacao(BaseModel):
    """One entry of the case history."""

    model_config = ConfigDict(frozen=True)

    id: Optional[Any] = None
    data: Optional[Any] = None
    tipo: str = MOVEMENT_TYPE
    conteudo: Optional[Any] = None
    private: bool = False


class Advogado(BaseModel):
    model_config = ConfigDict(frozen=True)

    nome: Optional[Any] = None
    oab: Optional[Any] = None


class Parte(BaseModel):
    model_config = ConfigDict(frozen=True)

    nome: Optional[Any] = None
    polo: Optional[Any] = None
    tipo: Optional[Any] = None
    documento: Optional[Any] = None
    documentos: List[Any] = Field(default_factory=list)
    advogados: List[Advogado] = Field(default_factory=list)


class Processo(BaseModel):
    """Case-level facts (capa + localização + metadados)."""

    model_config = ConfigDict(frozen=True)

    codigo: Optional[Any] = None
    classe: Optional[Any] = None
    assuntos: Optional[Any] = None
    orgao: Optional[Any] = None
    juiz: Optional[Any] = None
    tipo_justica: Optional[Any] = None
    instancia: Optional[Any] = None
    comarca: Optional[Any] = None
    cidade: Optional[Any] = None
    uf: Optional[Any] = None
    tribunal: Optional[Any] = None
    fase: Optional[Any] = None
    situacao: Optional[Any] = None
    distribuicao: Optional[Any] = None
    valor_causa: Optional[Any] = None
    sigilo: Optional[Any] = None


class Anexo(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[Any] = None
    data: Optional[Any] = None
    nome: Optional[Any] = None
    extensao: Optional[Any] = None
    status: Optional[Any] = None


class Meta(BaseModel):
    model_config = ConfigDict(frozen=True)

    request_status: Optional[str] = None
    is_partial: bool = False
    cached_response: bool = False
    waited_ms: int = 0
    attempts: int = 0
    message: Optional[str] = None


class ErroInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    detail: Optional[Any] = None


class FullCasePayload(BaseModel):
    """
    Full canonical output.

    `ultima_movimentacao_data` and `texto` duplicate the date/content of
    `ultima_movimentacao` (= movimentacoes[0]) for convenience.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    cnj: Optional[str] = None
    fonte: str
    status: Any
    ultima_movimentacao_data: Optional[Any] = None
    texto: Optional[Any] = None
    ultima_movimentacao: Optional[Movimentacao] = None
    movimentacoes: List[Movimentacao] = Field(default_factory=list)
    processo: Processo
    partes: List[Parte] = Field(default_factory=list)
    anexos: List[Anexo] = Field(default_factory=list)
    meta: Meta
    erro: Optional[ErroInfo] = None


class MinimalMovimentacao(BaseModel):
    model_config = ConfigDict(frozen=True)

    conteudo: Optional[Any] = None


class MinimalProcesso(BaseModel):
    model_config = ConfigDict(frozen=True)

    fase: Optional[Any] = None


class MinimalCasePayload(BaseModel):
    """
    Minimal projection: every other field of the full payload is dropped.
    """

    model_config = ConfigDict(frozen=True)

    cnj: Optional[str] = None
    fonte: Optional[Any] = None
    status: Optional[Any] = None
    ultima_movimentacao_data: Optional[Any] = None
    ultima_movimentacao: MinimalMovimentacao = Field(default_factory=MinimalMovimentacao)
    processo: MinimalProcesso = Field(default_factory=MinimalProcesso)

    @classmethod
    def empty(cls) -> "MinimalCasePayload":
        return cls()
