"""
Tipos canônicos do pipeline do traitflow.

Este módulo define os enums e estruturas fundamentais que padronizam a
comunicação entre traits, Engine e rastreabilidade.

Componentes principais:
    - TraitProfile       → perfil de plataforma alvo (kubernetes, knative, openshift)
    - ControllerStrategy → tipo de controlador que roda a integração
    - TraitStatus        → estado final de um trait numa passada
    - TraitCondition     → condição imutável reportada por um trait
    - Integration / IntegrationKit / Platform → descritores de entrada

Princípios fundamentais:
    - Tipos são estáveis e serializáveis
    - Valores textuais dos enums são canônicos
    - Nenhuma lógica de execução vive neste módulo

Limites explícitos:
    - Não executa traits
    - Não decide políticas de execução
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class TraitProfile(str, Enum):
    """
    Perfis de plataforma suportados.

    O perfil filtra quais traits participam de uma passada. É determinado
    uma única vez por passada (integração, depois kit, depois plataforma,
    depois o default).
    """
    KUBERNETES = "kubernetes"
    KNATIVE = "knative"
    OPENSHIFT = "openshift"


DEFAULT_PROFILE = TraitProfile.KUBERNETES

ALL_PROFILES = (TraitProfile.KUBERNETES, TraitProfile.KNATIVE, TraitProfile.OPENSHIFT)


class ControllerStrategy(str, Enum):
    """Tipo de controlador escolhido para rodar a integração."""
    DEPLOYMENT = "deployment"
    KNATIVE_SERVICE = "knative-service"
    CRON_JOB = "cron-job"


DEFAULT_CONTROLLER_STRATEGY = ControllerStrategy.DEPLOYMENT


class TraitStatus(str, Enum):
    """
    Estados finais de um trait numa passada.

    Estados definidos:
        - APPLIED: configurado habilitado e aplicado
        - DISABLED: configurado, mas decidiu não aplicar
        - SKIPPED: não participou (perfil ou plataforma ausente)
        - FAILED: execução interrompida por erro
    """
    APPLIED = "applied"
    DISABLED = "disabled"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class TraitCondition:
    """
    Condição reportada por um trait após a fase `configure`.

    Campos:
        - trait_id: id do trait
        - enabled: se o trait decidiu aplicar
        - reason: razão curta e estável (ex.: "Disabled", "Applied")
        - message: texto livre opcional
    """
    trait_id: str
    enabled: bool
    reason: str
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trait_id": self.trait_id,
            "enabled": self.enabled,
            "reason": self.reason,
            "message": self.message,
        }


@dataclass(frozen=True)
class Integration:
    """Descritor da instância sendo reconciliada."""
    name: str
    namespace: str = "default"
    profile: Optional[TraitProfile] = None
    from_uris: List[str] = field(default_factory=list)
    replicas: Optional[int] = None
    generation: int = 1
    uid: str = ""
    annotations: Dict[str, str] = field(default_factory=dict)
    labels: Dict[str, str] = field(default_factory=dict)
    properties: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class IntegrationKit:
    """Descritor do kit de build associado à integração."""
    name: str
    profile: Optional[TraitProfile] = None


@dataclass(frozen=True)
class Platform:
    """Descritor da plataforma que hospeda a integração."""
    name: str
    namespace: str = "default"
    profile: Optional[TraitProfile] = None
    ready: bool = True
