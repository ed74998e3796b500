"""
Trait canônico: knative-service.

Responsabilidades:
    - Votar na estratégia `knative-service` quando a integração expõe
      endpoints HTTP ou só possui endpoints passivos
    - Gerar o Knative `Service` com as anotações de autoscaling

Config esperada (exemplo):
    traits:
      knative-service:
        autoscaling-class: kpa.autoscaling.knative.dev
        autoscaling-target: 100
        min-scale: 0

Regras:
    - Permitido apenas no perfil knative
    - Desabilitado se um Deployment já foi gerado na passada
    - Com `auto` ligado e `min-scale` ausente, integrações que não são
      puramente HTTP passivas recebem `min-scale = 1`
    - `min-scale` e `max-scale` só viram anotação quando maiores que zero

Limites explícitos:
    - Não configura rotas nem domínios
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional

from traitflow.core.config.schema import PropertySpec, PropertyType, TraitSchema
from traitflow.core.engine.strategy import choose_controller_strategy
from traitflow.core.pipeline.context import Environment
from traitflow.core.pipeline.trait import ConfigureResult, Trait, disabled, enabled, explicitly_enabled, trait_props
from traitflow.core.pipeline.types import ControllerStrategy, TraitProfile
from traitflow.translators.schedule import PASSIVE_COMPONENTS
from traitflow.translators.uri import get_component

from .util import HTTP_COMPONENTS, exposes_http, object_meta


KNATIVE_API_VERSION = "serving.knative.dev/v1"

AUTOSCALING_CLASS_ANNOTATION = "autoscaling.knative.dev/class"
AUTOSCALING_METRIC_ANNOTATION = "autoscaling.knative.dev/metric"
AUTOSCALING_TARGET_ANNOTATION = "autoscaling.knative.dev/target"
MIN_SCALE_ANNOTATION = "autoscaling.knative.dev/minScale"
MAX_SCALE_ANNOTATION = "autoscaling.knative.dev/maxScale"

SCHEMA = TraitSchema.of(
    "knative-service",
    PropertySpec("autoscaling-class", PropertyType.STRING),
    PropertySpec("autoscaling-metric", PropertyType.STRING),
    PropertySpec("autoscaling-target", PropertyType.INT),
    PropertySpec("min-scale", PropertyType.INT),
    PropertySpec("max-scale", PropertyType.INT),
    PropertySpec("auto", PropertyType.BOOL, default=True),
)


def _passive_only(env: Environment) -> bool:
    uris = env.integration.from_uris
    allowed = set(PASSIVE_COMPONENTS) | set(HTTP_COMPONENTS)
    return bool(uris) and all(get_component(uri) in allowed for uri in uris)


@dataclass
class KnativeServiceTrait(Trait):
    id: str = "knative-service"
    order: int = 1400
    requires_platform: bool = True
    strategy_priority: int = 100
    schema: ClassVar[TraitSchema] = SCHEMA

    def is_allowed_in_profile(self, profile: TraitProfile) -> bool:
        return profile == TraitProfile.KNATIVE

    def select_controller_strategy(self, env: Environment) -> Optional[ControllerStrategy]:
        if explicitly_enabled(env, self.id) is False:
            return None
        if exposes_http(env) or _passive_only(env):
            return ControllerStrategy.KNATIVE_SERVICE
        return None

    def configure(self, env: Environment) -> ConfigureResult:
        if explicitly_enabled(env, self.id) is False:
            return disabled(self.id, message="explicitly disabled")
        if env.resources.first("Deployment") is not None:
            return disabled(self.id, reason="ControllerStrategy", message="controller strategy: deployment")

        strategy = choose_controller_strategy(env)
        if strategy != ControllerStrategy.KNATIVE_SERVICE:
            return disabled(self.id, reason="ControllerStrategy", message=f"controller strategy: {strategy.value}")

        props = trait_props(env, self)
        if props["auto"] and props.get("min-scale") is None:
            if not (exposes_http(env) and _passive_only(env)):
                props["min-scale"] = 1
        env.state(self.id)["props"] = props
        return enabled(self.id)

    def apply(self, env: Environment) -> None:
        props = env.state(self.id)["props"]
        annotations: Dict[str, str] = {}
        for key, annotation in (
            ("autoscaling-class", AUTOSCALING_CLASS_ANNOTATION),
            ("autoscaling-metric", AUTOSCALING_METRIC_ANNOTATION),
            ("autoscaling-target", AUTOSCALING_TARGET_ANNOTATION),
        ):
            if props.get(key) is not None:
                annotations[annotation] = str(props[key])
        for key, annotation in (("min-scale", MIN_SCALE_ANNOTATION), ("max-scale", MAX_SCALE_ANNOTATION)):
            if (props.get(key) or 0) > 0:
                annotations[annotation] = str(props[key])

        template: Dict[str, Any] = {
            "metadata": {"labels": env.integration_labels(), "annotations": annotations},
            "spec": {"containers": [{"name": "integration"}]},
        }
        meta = object_meta(env)
        meta["annotations"] = dict(env.integration.annotations)
        env.resources.add({
            "apiVersion": KNATIVE_API_VERSION,
            "kind": "Service",
            "metadata": meta,
            "spec": {"template": template},
        })
        env.log(trait_id=self.id, level="info", message="knative service generated", annotations=sorted(annotations))
