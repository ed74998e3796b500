"""
Trait canônico: deployment.

Responsabilidades:
    - Votar na estratégia `deployment` (prioridade mais baixa, sempre
      tem opinião enquanto habilitado)
    - Gerar o recurso `Deployment` quando essa for a estratégia escolhida
    - Registrar um processador pós-step que rotula todo recurso gerado
      com o label da integração

Config esperada (exemplo):
    traits:
      deployment:
        progress-deadline-seconds: 120

Invariantes:
    - O processador de labels é idempotente: rodar de novo não altera
      o resultado
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional

from traitflow.core.config.schema import PropertySpec, PropertyType, TraitSchema
from traitflow.core.engine.strategy import choose_controller_strategy
from traitflow.core.pipeline.context import INTEGRATION_LABEL, Environment
from traitflow.core.pipeline.trait import ConfigureResult, Trait, disabled, enabled, explicitly_enabled, trait_props
from traitflow.core.pipeline.types import ControllerStrategy

from .util import labels_of, object_meta


SCHEMA = TraitSchema.of(
    "deployment",
    PropertySpec("progress-deadline-seconds", PropertyType.INT, default=60),
)


def label_resources(env: Environment) -> None:
    """Processador pós-step: garante o label da integração em todo recurso."""
    name = env.integration.name

    def _label(resource: Dict[str, Any]) -> None:
        labels_of(resource)[INTEGRATION_LABEL] = name

    env.resources.visit(_label)


@dataclass
class DeploymentTrait(Trait):
    id: str = "deployment"
    order: int = 1100
    requires_platform: bool = True
    strategy_priority: int = 10000
    schema: ClassVar[TraitSchema] = SCHEMA

    def select_controller_strategy(self, env: Environment) -> Optional[ControllerStrategy]:
        if explicitly_enabled(env, self.id) is False:
            return None
        return ControllerStrategy.DEPLOYMENT

    def configure(self, env: Environment) -> ConfigureResult:
        if explicitly_enabled(env, self.id) is False:
            return disabled(self.id, message="explicitly disabled")

        strategy = choose_controller_strategy(env)
        if strategy != ControllerStrategy.DEPLOYMENT:
            return disabled(self.id, reason="ControllerStrategy", message=f"controller strategy: {strategy.value}")
        return enabled(self.id)

    def apply(self, env: Environment) -> None:
        props = trait_props(env, self)
        labels = env.integration_labels()
        spec: Dict[str, Any] = {
            "progressDeadlineSeconds": props["progress-deadline-seconds"],
            "selector": {"matchLabels": dict(labels)},
            "template": {
                "metadata": {"labels": dict(labels)},
                "spec": {"containers": [{"name": "integration"}]},
            },
        }
        if env.integration.replicas is not None:
            spec["replicas"] = env.integration.replicas

        meta = object_meta(env)
        meta["annotations"] = dict(env.integration.annotations)
        env.resources.add({
            "apiVersion": "apps/v1",
            "kind": "Deployment",
            "metadata": meta,
            "spec": spec,
        })
        env.add_post_step_processor(label_resources)
        env.log(trait_id=self.id, level="info", message="deployment generated")
