"""
traitflow — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do traitflow.

Objetivo:
- Permitir que Traits/Engine levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para TraitErrorPayload
- Evitar ValueError/RuntimeError genéricos nas falhas do pipeline

Regras:
- Não contém lógica específica de nenhum trait.
- Exceções devem carregar apenas dados estruturados (serializáveis).
- Nenhuma exceção é tratada com retry dentro do core: o loop de
  reconciliação externo decide se executa uma nova passada.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class TraitflowException(Exception):
    """Base class para exceções internas do traitflow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Catálogo
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UnknownTraitError(TraitflowException):
    """Trait solicitado explicitamente não existe no catálogo."""


@dataclass(frozen=True)
class DuplicateTraitIdError(TraitflowException):
    """Dois traits com o mesmo id foram entregues ao catálogo."""


# ---------------------------------------------------------------------------
# Execução do pipeline
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TraitConfigureError(TraitflowException):
    """Falha na fase `configure` de um trait."""


@dataclass(frozen=True)
class TraitApplyError(TraitflowException):
    """Falha na fase `apply` de um trait."""


@dataclass(frozen=True)
class PostProcessorError(TraitflowException):
    """Falha em um callback pós-step ou pós-pipeline."""


@dataclass(frozen=True)
class NoApplicableTraitError(TraitflowException):
    """Nenhum trait pôde executar e não existe plataforma associada.

    Distingue "nada a fazer porque tudo está desabilitado" (não é erro)
    de "nada a fazer porque a instância está mal configurada".
    """
