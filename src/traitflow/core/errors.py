"""
traitflow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do traitflow.
Erros são artefatos observáveis de uma passada de resolução e devem ser:

- explícitos
- serializáveis
- rastreáveis

O payload é consumido pelo event log do Environment e pelo Manifest.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .exceptions import TraitflowException


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TraitErrorPayload:
    """
    Payload canônico de erro do traitflow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Configuração
CONFIG_DECODE_ERROR = "CONFIG_DECODE_ERROR"
CONFIG_MALFORMED_ANNOTATION = "CONFIG_MALFORMED_ANNOTATION"

# Catálogo
TRAIT_UNKNOWN = "TRAIT_UNKNOWN"

# Engine / Execução
TRAIT_CONFIGURE_FAILED = "TRAIT_CONFIGURE_FAILED"
TRAIT_APPLY_FAILED = "TRAIT_APPLY_FAILED"
POST_PROCESSOR_FAILED = "POST_PROCESSOR_FAILED"
NO_APPLICABLE_TRAIT = "NO_APPLICABLE_TRAIT"
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"


_CODES_BY_CLASS = {
    "ConfigDecodeError": CONFIG_DECODE_ERROR,
    "MalformedAnnotationError": CONFIG_MALFORMED_ANNOTATION,
    "UnknownTraitError": TRAIT_UNKNOWN,
    "TraitConfigureError": TRAIT_CONFIGURE_FAILED,
    "TraitApplyError": TRAIT_APPLY_FAILED,
    "PostProcessorError": POST_PROCESSOR_FAILED,
    "NoApplicableTraitError": NO_APPLICABLE_TRAIT,
}


def to_error_payload(exc: BaseException) -> TraitErrorPayload:
    """Converte exceções em TraitErrorPayload (serializável).

    Regras:
    - TraitflowException: já vem com message/details/hint.
    - Outras exceções: encapsular como ENGINE_EXECUTION_ERROR sem expor stack trace.
    """
    code = _CODES_BY_CLASS.get(exc.__class__.__name__)
    if isinstance(exc, TraitflowException):
        return TraitErrorPayload(
            type=code or exc.__class__.__name__,
            message=exc.message or "Erro de execução",
            details=dict(exc.details or {}),
            hint=exc.hint,
        )

    return TraitErrorPayload(
        type=code or ENGINE_EXECUTION_ERROR,
        message=str(exc) or "Erro inesperado durante execução",
        details={"exception_class": exc.__class__.__name__},
        hint=None,
    )
