"""
Trait canônico: platform.

Responsabilidades:
    - Detectar a ausência de uma plataforma pronta para a integração
    - Criar o recurso `IntegrationPlatform` padrão quando `create-default`
      estiver ligado

Config esperada (exemplo):
    traits:
      platform:
        create-default: true
        global: false

Regras:
    - É o único trait do catálogo que participa sem plataforma
    - Com plataforma presente (pronta ou não) o trait fica desabilitado
    - `create-default` assume `true` no perfil openshift quando `auto` não
      foi desligado

Limites explícitos:
    - Não aguarda a plataforma ficar pronta
    - Não altera plataformas existentes
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from traitflow.core.config.schema import PropertySpec, PropertyType, TraitSchema
from traitflow.core.pipeline.context import Environment
from traitflow.core.pipeline.trait import ConfigureResult, Trait, disabled, enabled, explicitly_enabled, trait_props
from traitflow.core.pipeline.types import TraitProfile

from .util import INTEGRATION_API_VERSION


DEFAULT_PLATFORM_NAME = "camel-k"

SCHEMA = TraitSchema.of(
    "platform",
    PropertySpec("create-default", PropertyType.BOOL, description="Cria a plataforma padrão se ausente"),
    PropertySpec("global", PropertyType.BOOL, default=False, description="Plataforma válida para todos os namespaces"),
    PropertySpec("auto", PropertyType.BOOL, default=True, description="Deriva `create-default` do perfil"),
)


@dataclass
class PlatformTrait(Trait):
    """Garante a existência de uma plataforma para a integração."""

    id: str = "platform"
    order: int = 100
    requires_platform: bool = False
    schema: ClassVar[TraitSchema] = SCHEMA

    def configure(self, env: Environment) -> ConfigureResult:
        if explicitly_enabled(env, self.id) is False:
            return disabled(self.id, message="explicitly disabled")
        if env.platform is not None:
            return disabled(self.id, reason="PlatformAvailable", message=env.platform.name)

        props = trait_props(env, self)
        create_default = props.get("create-default")
        if create_default is None and props["auto"]:
            create_default = env.determine_profile() == TraitProfile.OPENSHIFT

        if not create_default:
            env.add_warning(trait_id=self.id, message="no platform found and create-default is off")
            return disabled(self.id, reason="PlatformMissing", message="waiting for a platform")

        env.state(self.id)["global"] = bool(props["global"])
        return enabled(self.id, reason="CreateDefault")

    def apply(self, env: Environment) -> None:
        meta = {"name": DEFAULT_PLATFORM_NAME}
        if not env.state(self.id).get("global"):
            meta["namespace"] = env.integration.namespace

        env.resources.add({
            "apiVersion": INTEGRATION_API_VERSION,
            "kind": "IntegrationPlatform",
            "metadata": meta,
            "spec": {"profile": env.determine_profile().value},
        })
        env.log(trait_id=self.id, level="info", message="default platform created", name=DEFAULT_PLATFORM_NAME)
