"""
Contrato canônico de Trait do traitflow.

Um trait é um módulo de capacidade opcional, selecionável e configurável,
que contribui para os recursos gerados de uma integração.

Responsabilidades de um trait:
    - declarar explicitamente seu schema de propriedades
    - decidir, na fase `configure`, se deve aplicar
    - mutar a coleção de recursos do Environment, na fase `apply`

Princípios fundamentais:
    - Traits não conhecem o Engine nem outros traits diretamente
    - Traits não controlam a ordem de execução (definida por `order`)
    - Traits não guardam estado entre passadas: todo estado de uma
      passada vive no Environment
    - Conformidade é garantida por duck typing (@runtime_checkable)

Invariantes:
    - Cada trait possui um `id` único no catálogo
    - `configure` é chamado no máximo uma vez por passada
    - `apply` só é chamado se `configure` retornou habilitado

Limites explícitos:
    - Não contém lógica de planejamento
    - Não registra eventos de rastreabilidade no Manifest
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional, Protocol, Tuple, runtime_checkable

from ..config.schema import TraitSchema
from .types import ControllerStrategy, TraitCondition, TraitProfile

if TYPE_CHECKING:
    from .context import Environment


ConfigureResult = Tuple[bool, Optional[TraitCondition]]


@runtime_checkable
class Trait(Protocol):
    """
    Contrato canônico de um trait.

    Atributos obrigatórios:
        - id: identificador único e estável
        - order: posição na execução (menor executa antes)
        - requires_platform: se o trait só participa com plataforma presente
        - schema: declaração explícita das propriedades configuráveis

    Decisões arquiteturais:
        - O protocolo não impõe herança, apenas conformidade estrutural
        - Traits concretos podem herdar o protocolo para reaproveitar
          a implementação padrão de `is_allowed_in_profile`
    """
    id: str
    order: int
    requires_platform: bool
    schema: TraitSchema

    def is_allowed_in_profile(self, profile: TraitProfile) -> bool:
        return True

    def configure(self, env: "Environment") -> ConfigureResult:
        """Decide se o trait aplica nesta passada, sem mutar recursos."""
        ...

    def apply(self, env: "Environment") -> None:
        """Muta `env.resources` e registra callbacks, quando necessário."""
        ...


@runtime_checkable
class ControllerStrategySelector(Protocol):
    """
    Capacidade opcional: participar da escolha da estratégia de controlador.

    Um seletor com prioridade menor é consultado antes. Retornar `None`
    significa "sem opinião".
    """
    strategy_priority: int

    def select_controller_strategy(self, env: "Environment") -> Optional[ControllerStrategy]:
        ...


def trait_props(env: "Environment", trait: Trait) -> Dict[str, Any]:
    """Propriedades resolvidas do trait com os defaults do schema aplicados."""
    return trait.schema.with_defaults(env.config.get(trait.id))


def explicitly_enabled(env: "Environment", trait_id: str) -> Optional[bool]:
    """Valor de `enabled` definido em alguma camada, ou None se ninguém definiu."""
    value = env.config.get(trait_id).get("enabled")
    return value if isinstance(value, bool) else None


def disabled(trait_id: str, reason: str = "Disabled", message: str = "") -> ConfigureResult:
    return False, TraitCondition(trait_id=trait_id, enabled=False, reason=reason, message=message)


def enabled(trait_id: str, reason: str = "Enabled", message: str = "") -> ConfigureResult:
    return True, TraitCondition(trait_id=trait_id, enabled=True, reason=reason, message=message)
