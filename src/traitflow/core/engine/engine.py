"""
Engine de execução de uma passada de traits.

Fluxo de uma passada (v1):
    1. Resolve a configuração das camadas em `env.config`
    2. Determina o perfil e planeja os traits participantes
    3. Para cada trait planejado, em ordem:
        - `configure` → (habilitado, condição)
        - se habilitado: `apply`, registra em `executed_traits` e executa
          todos os callbacks pós-step, na ordem de registro
    4. Sem nenhum trait aplicável e sem plataforma → NoApplicableTraitError
    5. Executa os callbacks pós-pipeline uma única vez, na ordem de registro

Política de erro:
    - Qualquer falha aborta a passada imediatamente (fail-fast)
    - Nada é desfeito: `env.aborted_by` indica a origem do aborto e os
      detalhes do erro carregam `partial_output=True`
    - A falha é registrada no event log e no Manifest (quando presente)
    - Erros de configuração propagam como `ConfigError`; falhas de trait
      são encapsuladas em `TraitConfigureError`/`TraitApplyError`/
      `PostProcessorError`

Eventos estruturados (event log do Environment):
    pipeline_started, trait_skipped, trait_configured, trait_applied,
    pipeline_finished, pipeline_failed
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from traitflow.core.config.errors import ConfigError
from traitflow.core.config.resolver import ConfigResolver
from traitflow.core.errors import to_error_payload
from traitflow.core.exceptions import (
    NoApplicableTraitError,
    PostProcessorError,
    TraitApplyError,
    TraitConfigureError,
)
from traitflow.core.pipeline.context import Environment
from traitflow.core.pipeline.registry import TraitCatalog
from traitflow.core.pipeline.trait import Trait
from traitflow.core.pipeline.types import TraitCondition, TraitStatus
from traitflow.core.traceability.manifest import (
    pass_failed,
    pass_finished,
    record_config_hash,
    trait_failed,
    trait_finished,
)

from .planner import plan_execution


ENGINE_SCOPE = "engine"
CONFIG_STAGE = "config"
POST_PROCESSOR_STAGE = "post-processor"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Engine:
    """Engine canônico do traitflow (resolução + planner + executor)."""

    def __init__(self, *, catalog: TraitCatalog, env: Environment):
        self.catalog: TraitCatalog = catalog
        self.env: Environment = env
        if env.catalog is None:
            env.catalog = catalog

    # ------------------------------------------------------------------
    # Falhas
    # ------------------------------------------------------------------
    def _abort(self, *, origin: str, exc: BaseException, trait_id: Optional[str] = None) -> None:
        env = self.env
        env.aborted_by = origin
        error = to_error_payload(exc).to_dict()

        env.log(
            trait_id=trait_id or ENGINE_SCOPE,
            level="error",
            message="pipeline_failed",
            aborted_by=origin,
            error=error,
        )

        if env.manifest is not None:
            ts = _now()
            if trait_id is not None:
                trait_failed(env.manifest, trait_id=trait_id, ts=ts, error=error)
            pass_failed(env.manifest, ts=ts, aborted_by=origin, error=error)

    def _run_callback(self, fn: Any, *, stage: str, trait_id: Optional[str]) -> None:
        try:
            fn(self.env)
        except Exception as e:
            err = PostProcessorError(
                f"{stage} callback failed: {e}",
                details={
                    "stage": stage,
                    "trait_id": trait_id,
                    "callback": getattr(fn, "__name__", repr(fn)),
                    "cause": e.__class__.__name__,
                    "partial_output": True,
                },
                hint="Verifique o callback registrado pelo trait",
            )
            self._abort(origin=trait_id or stage, exc=err)
            raise err from e

    # ------------------------------------------------------------------
    # Fases
    # ------------------------------------------------------------------
    def _resolve_config(self) -> None:
        env = self.env
        resolver = ConfigResolver.for_catalog(self.catalog, configmaps=env.configmaps)
        try:
            env.config = resolver.resolve(env.layers)
        except ConfigError as e:
            self._abort(origin=CONFIG_STAGE, exc=e)
            raise

        for ignored in resolver.ignored:
            env.add_warning(trait_id=ignored["trait_id"], message=f"unknown property {ignored['property']!r} ignored")
            env.log(
                trait_id=ignored["trait_id"],
                level="warning",
                message="unknown_property_ignored",
                property=ignored["property"],
                source=ignored["source"],
            )

        if env.manifest is not None:
            record_config_hash(env.manifest, config_hash=env.config.hash())

    def _configure(self, trait: Trait) -> TraitCondition:
        env = self.env
        try:
            enabled, condition = trait.configure(env)
        except Exception as e:
            err = TraitConfigureError(
                f"trait {trait.id} failed to configure: {e}",
                details={"trait_id": trait.id, "phase": "configure",
                         "cause": e.__class__.__name__, "partial_output": True},
            )
            self._abort(origin=trait.id, exc=err, trait_id=trait.id)
            raise err from e

        if condition is None:
            condition = TraitCondition(
                trait_id=trait.id,
                enabled=bool(enabled),
                reason="Enabled" if enabled else "Disabled",
            )
        env.conditions.append(condition)
        env.log(
            trait_id=trait.id,
            level="debug",
            message="trait_configured",
            enabled=bool(enabled),
            reason=condition.reason,
        )
        return condition

    def _apply(self, trait: Trait) -> None:
        env = self.env
        try:
            trait.apply(env)
        except Exception as e:
            err = TraitApplyError(
                f"trait {trait.id} failed to apply: {e}",
                details={"trait_id": trait.id, "phase": "apply",
                         "cause": e.__class__.__name__, "partial_output": True},
            )
            self._abort(origin=trait.id, exc=err, trait_id=trait.id)
            raise err from e

        env.executed_traits.append(trait.id)
        env.log(trait_id=trait.id, level="info", message="trait_applied")

        for fn in list(env.post_step_processors):
            self._run_callback(fn, stage="post-step", trait_id=trait.id)

        if env.manifest is not None:
            trait_finished(env.manifest, trait_id=trait.id, ts=_now(), status=TraitStatus.APPLIED.value)

    # ------------------------------------------------------------------
    # Passada
    # ------------------------------------------------------------------
    def run(self) -> List[TraitCondition]:
        env = self.env
        env.log(
            trait_id=ENGINE_SCOPE,
            level="info",
            message="pipeline_started",
            integration=env.integration.name,
            layers=[layer.source for layer in env.layers],
        )

        self._resolve_config()

        profile = env.determine_profile()
        plan = plan_execution(self.catalog, profile=profile, has_platform=env.platform is not None)
        planned = set(plan.planned_ids())
        skip_reasons: Dict[str, str] = {t.id: reason for t, reason in plan.skipped}

        applicable = 0
        for trait in self.catalog:
            if trait.id not in planned:
                env.log(
                    trait_id=trait.id,
                    level="debug",
                    message="trait_skipped",
                    reason=skip_reasons.get(trait.id, ""),
                )
                continue

            applicable += 1
            condition = self._configure(trait)

            if condition.enabled:
                self._apply(trait)
            elif env.manifest is not None:
                trait_finished(
                    env.manifest,
                    trait_id=trait.id,
                    ts=_now(),
                    status=TraitStatus.DISABLED.value,
                    reason=condition.reason,
                    message=condition.message,
                )

        if applicable == 0 and env.platform is None:
            err = NoApplicableTraitError(
                "no trait can be executed because of no ready platform found",
                details={"integration": env.integration.name, "profile": profile.value,
                         "partial_output": True},
                hint="Associe uma plataforma à integração",
            )
            self._abort(origin=ENGINE_SCOPE, exc=err)
            raise err

        for fn in list(env.post_processors):
            self._run_callback(fn, stage=POST_PROCESSOR_STAGE, trait_id=None)

        strategy = env.controller_strategy.value if env.controller_strategy is not None else None
        env.log(
            trait_id=ENGINE_SCOPE,
            level="info",
            message="pipeline_finished",
            executed=list(env.executed_traits),
            resources=len(env.resources),
        )

        if env.manifest is not None:
            pass_finished(
                env.manifest,
                ts=_now(),
                outputs={
                    "executed_traits": list(env.executed_traits),
                    "resources_digest": env.resources.digest(),
                    "controller_strategy": strategy,
                    "profile": profile.value,
                },
            )

        return list(env.conditions)
