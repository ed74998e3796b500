"""
Trait canônico: cron.

Responsabilidades:
    - Determinar o schedule da integração (explícito ou por consenso entre
      os endpoints periódicos de entrada)
    - Votar na estratégia de controlador `cron-job`
    - Gerar o recurso `CronJob` quando a estratégia escolhida for `cron-job`
    - Habilitar o modo fallback (execução contínua via quartz) quando o
      consenso não é possível

Config esperada (exemplo):
    traits:
      cron:
        schedule: "0/5 * * * ?"
        components: "timer,quartz"
        concurrency-policy: Forbid
        active-deadline-seconds: 60

Regras:
    - Com `auto` ligado (padrão), schedule e componentes vazios são
      preenchidos pelo consenso dos endpoints
    - Sem schedule, sem componentes e com algum endpoint `cron:` de entrada,
      o fallback é ligado automaticamente
    - Em fallback o trait não vota na estratégia e não gera CronJob

Limites explícitos:
    - Não valida a sintaxe do schedule explícito
    - Não suspende CronJobs existentes
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional

from traitflow.core.config.schema import PropertySpec, PropertyType, TraitSchema
from traitflow.core.engine.strategy import choose_controller_strategy
from traitflow.core.pipeline.context import Environment
from traitflow.core.pipeline.trait import ConfigureResult, Trait, disabled, enabled, explicitly_enabled, trait_props
from traitflow.core.pipeline.types import ControllerStrategy
from traitflow.translators.schedule import CRON, global_schedule
from traitflow.translators.uri import get_component

from .util import object_meta, unique


CRON_OVERRIDE_ENV = "CAMEL_K_CRON_OVERRIDE"
FALLBACK_DEPENDENCY = "camel:quartz"

SCHEMA = TraitSchema.of(
    "cron",
    PropertySpec("schedule", PropertyType.STRING, description="Schedule cron de 5 campos"),
    PropertySpec("components", PropertyType.STRING, description="Componentes substituídos pelo CronJob, separados por vírgula"),
    PropertySpec("fallback", PropertyType.BOOL, description="Executa continuamente via quartz em vez de CronJob"),
    PropertySpec("concurrency-policy", PropertyType.STRING, default="Forbid", description="Allow | Forbid | Replace"),
    PropertySpec("starting-deadline-seconds", PropertyType.INT),
    PropertySpec("active-deadline-seconds", PropertyType.INT, default=60),
    PropertySpec("backoff-limit", PropertyType.INT, default=2),
    PropertySpec("auto", PropertyType.BOOL, default=True, description="Deriva schedule e componentes dos endpoints"),
)


def _resolve(env: Environment, props: Dict[str, Any]) -> Dict[str, Any]:
    schedule = props.get("schedule") or ""
    components = unique([c.strip() for c in (props.get("components") or "").split(",")])
    fallback: Optional[bool] = props.get("fallback")

    if props["auto"]:
        info = global_schedule(env.integration.from_uris)
        if info is not None:
            if not schedule:
                schedule = info.schedule
            components = unique(components + list(info.components))

        if not schedule and not components and fallback is None:
            if any(get_component(uri) == CRON for uri in env.integration.from_uris):
                fallback = True

    return {"schedule": schedule, "components": components, "fallback": bool(fallback)}


@dataclass
class CronTrait(Trait):
    id: str = "cron"
    order: int = 1000
    requires_platform: bool = True
    strategy_priority: int = 1000
    schema: ClassVar[TraitSchema] = SCHEMA

    def select_controller_strategy(self, env: Environment) -> Optional[ControllerStrategy]:
        if explicitly_enabled(env, self.id) is False:
            return None
        resolved = _resolve(env, trait_props(env, self))
        if resolved["fallback"] or not resolved["schedule"]:
            return None
        return ControllerStrategy.CRON_JOB

    def configure(self, env: Environment) -> ConfigureResult:
        if explicitly_enabled(env, self.id) is False:
            return disabled(self.id, message="explicitly disabled")

        props = trait_props(env, self)
        state = env.state(self.id)
        state.update(_resolve(env, props))
        state["props"] = props

        if state["fallback"]:
            return enabled(self.id, reason="Fallback", message="cron fallback enabled")

        strategy = choose_controller_strategy(env)
        if strategy != ControllerStrategy.CRON_JOB:
            return disabled(self.id, reason="ControllerStrategy", message=f"controller strategy: {strategy.value}")
        if not state["schedule"]:
            return disabled(self.id, reason="NoSchedule", message="no schedule could be determined")
        return enabled(self.id, message=state["schedule"])

    def apply(self, env: Environment) -> None:
        state = env.state(self.id)
        if state["fallback"]:
            state["dependencies"] = [FALLBACK_DEPENDENCY]
            env.log(trait_id=self.id, level="info", message="cron fallback enabled", dependency=FALLBACK_DEPENDENCY)
            return

        props = state["props"]
        job_spec: Dict[str, Any] = {
            "backoffLimit": props["backoff-limit"],
            "activeDeadlineSeconds": props["active-deadline-seconds"],
            "template": {
                "metadata": {"labels": env.integration_labels()},
                "spec": {
                    "restartPolicy": "Never",
                    "containers": [{
                        "name": "integration",
                        "env": [{"name": CRON_OVERRIDE_ENV, "value": ",".join(state["components"])}],
                    }],
                },
            },
        }
        spec: Dict[str, Any] = {
            "schedule": state["schedule"],
            "concurrencyPolicy": props["concurrency-policy"],
            "jobTemplate": {"spec": job_spec},
        }
        if props.get("starting-deadline-seconds") is not None:
            spec["startingDeadlineSeconds"] = props["starting-deadline-seconds"]

        meta = object_meta(env)
        meta["annotations"] = dict(env.integration.annotations)
        env.resources.add({
            "apiVersion": "batch/v1",
            "kind": "CronJob",
            "metadata": meta,
            "spec": spec,
        })
        env.log(trait_id=self.id, level="info", message="cronjob generated", schedule=state["schedule"])
