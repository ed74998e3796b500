"""
Trait canônico: service.

Expõe o Deployment da integração através de um `Service` Kubernetes.

Regras:
    - Permitido nos perfis kubernetes e openshift
    - Só aplica se um Deployment foi gerado na passada
    - Com `auto` ligado (padrão), só aplica se algum endpoint de entrada
      for HTTP
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from traitflow.core.config.schema import PropertySpec, PropertyType, TraitSchema
from traitflow.core.pipeline.context import Environment
from traitflow.core.pipeline.trait import ConfigureResult, Trait, disabled, enabled, explicitly_enabled, trait_props
from traitflow.core.pipeline.types import TraitProfile

from .util import exposes_http, object_meta


SCHEMA = TraitSchema.of(
    "service",
    PropertySpec("auto", PropertyType.BOOL, default=True),
    PropertySpec("node-port", PropertyType.BOOL, default=False, description="Usa Service do tipo NodePort"),
    PropertySpec("port", PropertyType.INT, default=8080, description="Porta do container"),
)


@dataclass
class ServiceTrait(Trait):
    id: str = "service"
    order: int = 1500
    requires_platform: bool = True
    schema: ClassVar[TraitSchema] = SCHEMA

    def is_allowed_in_profile(self, profile: TraitProfile) -> bool:
        return profile in (TraitProfile.KUBERNETES, TraitProfile.OPENSHIFT)

    def configure(self, env: Environment) -> ConfigureResult:
        if explicitly_enabled(env, self.id) is False:
            return disabled(self.id, message="explicitly disabled")
        if env.resources.get("Deployment", env.integration.name) is None:
            return disabled(self.id, reason="NoDeployment", message="no deployment to expose")

        props = trait_props(env, self)
        if props["auto"] and not exposes_http(env):
            return disabled(self.id, reason="NoHTTPEndpoint", message="no http endpoint exposed")
        return enabled(self.id)

    def apply(self, env: Environment) -> None:
        props = trait_props(env, self)
        env.resources.add({
            "apiVersion": "v1",
            "kind": "Service",
            "metadata": object_meta(env),
            "spec": {
                "type": "NodePort" if props["node-port"] else "ClusterIP",
                "selector": env.integration_labels(),
                "ports": [{
                    "name": "http",
                    "port": 80,
                    "protocol": "TCP",
                    "targetPort": props["port"],
                }],
            },
        })
        env.log(trait_id=self.id, level="info", message="service generated", port=props["port"])
