"""
Planejador de uma passada de traits.

Este módulo decide, antes de qualquer execução, quais traits do catálogo
participam de uma passada e em que ordem.

Política de planejamento (v1):
    - a ordem é a do catálogo: `(order, id)`, estável e determinística
    - traits não permitidos no perfil da passada não participam
    - traits que exigem plataforma não participam quando não há plataforma

Traits que não participam não executam nenhuma fase, não contam como
aplicáveis e não produzem condição.

Invariantes:
    - A mesma entrada sempre produz o mesmo plano
    - Todo trait do catálogo aparece exatamente uma vez (planejado ou pulado)

Limites explícitos:
    - Não executa traits
    - Não interage com o Manifest
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from traitflow.core.pipeline.registry import TraitCatalog
from traitflow.core.pipeline.trait import Trait
from traitflow.core.pipeline.types import TraitProfile


SKIP_PROFILE = "profile"
SKIP_NO_PLATFORM = "no-platform"


@dataclass(frozen=True)
class PassPlan:
    """Plano de uma passada: traits planejados e traits pulados (com motivo)."""

    profile: TraitProfile
    planned: List[Trait] = field(default_factory=list)
    skipped: List[Tuple[Trait, str]] = field(default_factory=list)

    def planned_ids(self) -> List[str]:
        return [t.id for t in self.planned]


def plan_execution(
    catalog: TraitCatalog,
    *,
    profile: TraitProfile,
    has_platform: bool,
) -> PassPlan:
    """
    Produz o plano determinístico de uma passada.

    Args:
        catalog: Catálogo fechado de traits.
        profile: Perfil determinado para a passada.
        has_platform: Se existe plataforma associada à integração.

    Returns:
        PassPlan: traits a executar, em ordem, e traits pulados com motivo.
    """
    planned: List[Trait] = []
    skipped: List[Tuple[Trait, str]] = []

    for trait in catalog:
        if not trait.is_allowed_in_profile(profile):
            skipped.append((trait, SKIP_PROFILE))
            continue
        if trait.requires_platform and not has_platform:
            skipped.append((trait, SKIP_NO_PLATFORM))
            continue
        planned.append(trait)

    return PassPlan(profile=profile, planned=planned, skipped=skipped)
