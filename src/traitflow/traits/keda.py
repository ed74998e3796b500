"""
Trait canônico: keda.

Responsabilidades:
    - Reunir triggers de autoscaling declarados manualmente e descobertos
      a partir dos endpoints de entrada
    - Gerar o `ScaledObject` apontando para o controlador da integração
    - Gerar um `TriggerAuthentication` por trigger que referencia um secret

Config esperada (exemplo):
    traits:
      keda:
        enabled: true
        max-replica-count: 10
        triggers:
          - type: prometheus
            metadata:
              threshold: "5"
            authentication-secret: prom-credentials
        auto-metadata:
          kafka.lagThreshold: "10"

Regras:
    - Desligado por padrão: só aplica se `enabled` for explicitamente true
    - Triggers manuais vêm antes dos descobertos; não há deduplicação
    - `auto-metadata` usa chaves `<scheme>.<chave>` e sobrepõe, chave a
      chave, os metadados de triggers descobertos daquele scheme
    - Sem nenhum trigger o trait fica desabilitado

Limites explícitos:
    - Não lê o conteúdo dos secrets referenciados
    - Não valida os metadados específicos de cada scaler
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Mapping

from traitflow.core.config.schema import PropertySpec, PropertyType, TraitSchema
from traitflow.core.pipeline.context import Environment
from traitflow.core.pipeline.resources import Resource
from traitflow.core.pipeline.trait import ConfigureResult, Trait, disabled, enabled, explicitly_enabled, trait_props
from traitflow.translators.autoscaling import ScalerTrigger, collect_triggers

from .util import INTEGRATION_API_VERSION, object_meta


KEDA_API_VERSION = "keda.sh/v1alpha1"
CONTROLLER_KINDS = (
    ("apps/v1", "Deployment"),
    ("batch/v1", "CronJob"),
    ("serving.knative.dev/v1", "Service"),
)

SCHEMA = TraitSchema.of(
    "keda",
    PropertySpec("auto", PropertyType.BOOL, default=True, description="Descobre triggers a partir dos endpoints"),
    PropertySpec("hack-controller-replicas", PropertyType.BOOL, default=True),
    PropertySpec("polling-interval", PropertyType.INT),
    PropertySpec("cooldown-period", PropertyType.INT),
    PropertySpec("idle-replica-count", PropertyType.INT),
    PropertySpec("min-replica-count", PropertyType.INT),
    PropertySpec("max-replica-count", PropertyType.INT),
    PropertySpec("triggers", PropertyType.OBJECT_LIST, description="Triggers declarados manualmente"),
    PropertySpec("auto-metadata", PropertyType.STRING_MAP, description="Sobreposição de metadados por scheme"),
)

_SCALED_OBJECT_FIELDS = (
    ("polling-interval", "pollingInterval"),
    ("cooldown-period", "cooldownPeriod"),
    ("idle-replica-count", "idleReplicaCount"),
    ("min-replica-count", "minReplicaCount"),
    ("max-replica-count", "maxReplicaCount"),
)


def decode_manual_trigger(raw: Mapping[str, Any], index: int) -> ScalerTrigger:
    trigger_type = raw.get("type")
    if not isinstance(trigger_type, str) or not trigger_type:
        raise ValueError(f"keda trigger #{index} must declare a non-empty 'type'")
    metadata = raw.get("metadata") or {}
    if not isinstance(metadata, Mapping):
        raise ValueError(f"keda trigger #{index}: 'metadata' must be a map")
    secret = raw.get("authentication-secret", raw.get("authenticationSecret")) or ""
    return ScalerTrigger(
        type=trigger_type,
        metadata={str(k): str(v) for k, v in metadata.items()},
        authentication_secret=str(secret),
    )


def split_metadata_overrides(flat: Mapping[str, str]) -> Dict[str, Dict[str, str]]:
    out: Dict[str, Dict[str, str]] = {}
    for key, value in flat.items():
        scheme, sep, name = key.partition(".")
        if not sep or not scheme or not name:
            raise ValueError(f"keda auto-metadata key must be <scheme>.<key>, got {key!r}")
        out.setdefault(scheme, {})[name] = value
    return out


def _scale_target(env: Environment) -> Dict[str, str]:
    name = env.integration.name
    for api_version, kind in CONTROLLER_KINDS:
        if env.resources.get(kind, name, api_version=api_version) is not None:
            return {"apiVersion": api_version, "kind": kind, "name": name}
    return {"apiVersion": INTEGRATION_API_VERSION, "kind": "Integration", "name": name}


@dataclass
class KedaTrait(Trait):
    id: str = "keda"
    order: int = 2450
    requires_platform: bool = True
    schema: ClassVar[TraitSchema] = SCHEMA

    def configure(self, env: Environment) -> ConfigureResult:
        if explicitly_enabled(env, self.id) is not True:
            return disabled(self.id, message="keda is disabled by default")

        props = trait_props(env, self)
        manual = [decode_manual_trigger(t, i) for i, t in enumerate(props.get("triggers") or [])]
        uris: List[str] = env.integration.from_uris if props["auto"] else []
        triggers = collect_triggers(manual, uris, split_metadata_overrides(props.get("auto-metadata") or {}))

        state = env.state(self.id)
        state["props"] = props
        state["triggers"] = triggers
        if not triggers:
            return disabled(self.id, reason="NoTriggers", message="no autoscaling trigger found")
        return enabled(self.id, message=f"{len(triggers)} trigger(s)")

    def apply(self, env: Environment) -> None:
        state = env.state(self.id)
        props = state["props"]
        name = env.integration.name

        entries: List[Dict[str, Any]] = []
        for idx, trigger in enumerate(state["triggers"]):
            entry: Dict[str, Any] = {"type": trigger.type, "metadata": dict(trigger.metadata)}
            if trigger.authentication_secret:
                auth_name = f"{name}-keda-{idx}"
                env.resources.add(_trigger_authentication(env, auth_name, trigger.authentication_secret))
                entry["authenticationRef"] = {"name": auth_name}
            entries.append(entry)

        spec: Dict[str, Any] = {"scaleTargetRef": _scale_target(env), "triggers": entries}
        for key, field_name in _SCALED_OBJECT_FIELDS:
            if props.get(key) is not None:
                spec[field_name] = props[key]

        if props["hack-controller-replicas"] and env.integration.replicas is None:
            deployment = env.resources.get("Deployment", name)
            if deployment is not None:
                deployment.setdefault("spec", {})["replicas"] = props.get("min-replica-count") or 1

        env.resources.add({
            "apiVersion": KEDA_API_VERSION,
            "kind": "ScaledObject",
            "metadata": object_meta(env),
            "spec": spec,
        })
        env.log(trait_id=self.id, level="info", message="scaled object generated", triggers=len(entries))


def _trigger_authentication(env: Environment, name: str, secret: str) -> Resource:
    return {
        "apiVersion": KEDA_API_VERSION,
        "kind": "TriggerAuthentication",
        "metadata": object_meta(env, name),
        "spec": {"secretTargetRef": [{"name": secret, "parameter": "secret", "key": "secret"}]},
    }
