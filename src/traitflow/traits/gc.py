"""
Trait canônico: gc.

Registra um callback pós-pipeline que carimba o label de geração da
integração em todo recurso gerado. O coletor externo usa esse label para
remover recursos de gerações anteriores.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from traitflow.core.config.schema import TraitSchema
from traitflow.core.pipeline.context import GENERATION_LABEL, Environment
from traitflow.core.pipeline.trait import ConfigureResult, Trait, disabled, enabled, explicitly_enabled

from .util import labels_of


SCHEMA = TraitSchema.of("gc")


def stamp_generation(env: Environment) -> None:
    generation = str(env.integration.generation)
    for resource in env.resources:
        labels_of(resource)[GENERATION_LABEL] = generation


@dataclass
class GarbageCollectorTrait(Trait):
    id: str = "gc"
    order: int = 1200
    requires_platform: bool = True
    schema: ClassVar[TraitSchema] = SCHEMA

    def configure(self, env: Environment) -> ConfigureResult:
        if explicitly_enabled(env, self.id) is False:
            return disabled(self.id, message="explicitly disabled")
        return enabled(self.id)

    def apply(self, env: Environment) -> None:
        env.add_post_processor(stamp_generation)
