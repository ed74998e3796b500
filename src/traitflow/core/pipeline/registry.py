"""
Catálogo fechado de traits.

Este módulo define o `TraitCatalog`, responsável por registrar o conjunto
fechado de traits conhecidos e validar sua integridade estrutural antes
de qualquer passada.

Responsabilidades do módulo:
    - Validar unicidade de `trait.id`
    - Ordenar traits de forma estável por `(order, id)`
    - Manter o registro secundário de seletores de estratégia
    - Expor os schemas de propriedades para o `ConfigResolver`

Decisões arquiteturais:
    - O catálogo é montado uma única vez e é somente leitura
    - Não existe registro ou remoção em tempo de execução
    - Seletores de estratégia são detectados na construção (marker
      `ControllerStrategySelector`) e ordenados por `(prioridade, id)`

Invariantes:
    - Cada trait possui um `id` único
    - A iteração segue sempre a mesma ordem
    - O catálogo pode ser compartilhado entre passadas concorrentes

Limites explícitos:
    - Não executa traits
    - Não interage com Environment ou Manifest
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..config.schema import TraitSchema
from ..exceptions import DuplicateTraitIdError, UnknownTraitError
from .trait import ControllerStrategySelector, Trait
from .types import TraitProfile


class TraitCatalog:
    """Registro canônico e imutável de traits, em ordem de execução."""

    def __init__(self, traits: Iterable[Trait]):
        by_id: Dict[str, Trait] = {}
        for t in traits:
            trait_id = getattr(t, "id", None)
            if not isinstance(trait_id, str) or not trait_id.strip():
                raise ValueError("trait.id must be a non-empty string")
            if not isinstance(getattr(t, "order", None), int):
                raise ValueError(f"trait {trait_id!r} must declare an integer order")
            if trait_id in by_id:
                raise DuplicateTraitIdError(
                    f"Duplicate trait id: {trait_id}",
                    details={"trait_id": trait_id},
                )
            by_id[trait_id] = t

        self._by_id: Dict[str, Trait] = by_id
        self._ordered: Tuple[Trait, ...] = tuple(
            sorted(by_id.values(), key=lambda t: (t.order, t.id))
        )

        selectors = [
            (t.strategy_priority, t)
            for t in self._ordered
            if isinstance(t, ControllerStrategySelector)
        ]
        self.strategy_selectors: Tuple[Tuple[int, Trait], ...] = tuple(
            sorted(selectors, key=lambda pair: (pair[0], pair[1].id))
        )

    def get(self, trait_id: str) -> Optional[Trait]:
        return self._by_id.get(trait_id)

    def require(self, trait_id: str) -> Trait:
        trait = self._by_id.get(trait_id)
        if trait is None:
            raise UnknownTraitError(
                f"Unknown trait: {trait_id}",
                details={"trait_id": trait_id, "known": self.ids()},
                hint="Verifique o id do trait solicitado",
            )
        return trait

    def list(self) -> List[Trait]:
        return list(self._ordered)

    def ids(self) -> List[str]:
        return [t.id for t in self._ordered]

    def for_profile(self, profile: TraitProfile) -> List[Trait]:
        return [t for t in self._ordered if t.is_allowed_in_profile(profile)]

    @property
    def schemas(self) -> Dict[str, TraitSchema]:
        return {t.id: t.schema for t in self._ordered}

    def compute_traits_properties(self) -> List[str]:
        """Lista `<id>.<propriedade>` para todas as propriedades configuráveis."""
        out: List[str] = []
        for t in self._ordered:
            out.extend(f"{t.id}.{name}" for name in t.schema.names())
        return sorted(out)

    def __len__(self) -> int:
        return len(self._ordered)

    def __iter__(self) -> Iterator[Trait]:
        return iter(self._ordered)

    def __contains__(self, trait_id: object) -> bool:
        return trait_id in self._by_id
