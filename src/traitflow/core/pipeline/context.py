"""
Contexto de execução compartilhado de uma passada do pipeline.

Este módulo define o `Environment`, a estrutura canônica utilizada para
compartilhar estado explícito entre traits durante uma passada de
resolução e execução.

O Environment atua como o único meio permitido de:
    - leitura da integração, kit e plataforma de entrada
    - leitura da configuração resolvida de traits
    - mutação da coleção de recursos de saída
    - registro de callbacks pós-step e pós-pipeline
    - registro de logs estruturados e warnings por trait

Princípios fundamentais:
    - Isolamento por passada (cada passada possui seu próprio Environment)
    - Traits não guardam estado: estado por trait vive aqui
    - Ausência de estado global compartilhado

Invariantes:
    - `executed_traits` é append-only
    - O perfil e a estratégia de controlador são determinados no máximo
      uma vez e então ficam em cache
    - Logs sempre incluem `run_id` e `trait_id`

Limites explícitos:
    - Não executa traits
    - Não planeja nem coordena execução
    - Não persiste dados automaticamente
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from ..config.layers import ConfigLayer
from ..config.resolver import CapabilityConfig
from .resources import ResourceCollection
from .types import (
    DEFAULT_PROFILE,
    ControllerStrategy,
    Integration,
    IntegrationKit,
    Platform,
    TraitCondition,
    TraitProfile,
)

if TYPE_CHECKING:
    from ..traceability.manifest import ResolutionManifest
    from .registry import TraitCatalog


Callback = Callable[["Environment"], None]

INTEGRATION_LABEL = "camel.apache.org/integration"
GENERATION_LABEL = "camel.apache.org/generation"


@dataclass
class Environment:
    """
    Contexto de uma passada: entradas, configuração, saída e callbacks.

    Decisões arquiteturais:
        - Traits interagem entre si apenas via Environment
        - Recursos são mutados somente na fase `apply`
        - Um aborto não desfaz mutações já realizadas: `aborted_by`
          indica que `resources` deve ser descartado pelo chamador
    """
    integration: Integration
    layers: List[ConfigLayer] = field(default_factory=list)
    kit: Optional[IntegrationKit] = None
    platform: Optional[Platform] = None
    catalog: Optional["TraitCatalog"] = None
    configmaps: Dict[str, Dict[str, str]] = field(default_factory=dict)
    manifest: Optional["ResolutionManifest"] = None
    run_id: str = "pass"

    config: CapabilityConfig = field(default_factory=CapabilityConfig, init=False)
    resources: ResourceCollection = field(default_factory=ResourceCollection, init=False)
    executed_traits: List[str] = field(default_factory=list, init=False)
    conditions: List[TraitCondition] = field(default_factory=list, init=False)
    post_step_processors: List[Callback] = field(default_factory=list, init=False, repr=False)
    post_processors: List[Callback] = field(default_factory=list, init=False, repr=False)
    profile: Optional[TraitProfile] = field(default=None, init=False)
    controller_strategy: Optional[ControllerStrategy] = field(default=None, init=False)
    aborted_by: Optional[str] = field(default=None, init=False)

    _state: Dict[str, Dict[str, Any]] = field(default_factory=dict, init=False, repr=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Perfil
    # -----------------------------
    def determine_profile(self) -> TraitProfile:
        if self.profile is not None:
            return self.profile

        for candidate in (
            self.integration.profile,
            self.kit.profile if self.kit is not None else None,
            self.platform.profile if self.platform is not None else None,
        ):
            if candidate is not None:
                self.profile = TraitProfile(candidate)
                return self.profile

        self.profile = DEFAULT_PROFILE
        return self.profile

    # -----------------------------
    # Traits
    # -----------------------------
    def get_trait(self, trait_id: str) -> Any:
        return self.catalog.get(trait_id) if self.catalog is not None else None

    def is_executed(self, trait_id: str) -> bool:
        return trait_id in self.executed_traits

    def state(self, trait_id: str) -> Dict[str, Any]:
        """Estado de passada de um trait (criado sob demanda)."""
        return self._state.setdefault(trait_id, {})

    def integration_labels(self) -> Dict[str, str]:
        return {INTEGRATION_LABEL: self.integration.name}

    # -----------------------------
    # Callbacks
    # -----------------------------
    def add_post_step_processor(self, fn: Callback) -> None:
        self.post_step_processors.append(fn)

    def add_post_processor(self, fn: Callback) -> None:
        self.post_processors.append(fn)

    def is_aborted(self) -> bool:
        return self.aborted_by is not None

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, trait_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "trait_id": trait_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, trait_id: str, message: str) -> None:
        if trait_id not in self.warnings:
            self.warnings[trait_id] = []
        self.warnings[trait_id].append(message)
