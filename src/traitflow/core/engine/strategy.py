"""
Escolha da estratégia de controlador de uma integração.

Traits que implementam `ControllerStrategySelector` e são permitidos no
perfil da passada são consultados em ordem crescente de prioridade; a
primeira decisão não nula vence. Sem decisão, vale
`DEFAULT_CONTROLLER_STRATEGY`.

A escolha acontece no máximo uma vez por passada: o resultado fica em
cache em `env.controller_strategy`.

Limites explícitos:
    - Seletores leem apenas configuração resolvida e dados da integração
    - Não muta recursos
"""

from __future__ import annotations

from traitflow.core.pipeline.context import Environment
from traitflow.core.pipeline.types import DEFAULT_CONTROLLER_STRATEGY, ControllerStrategy


def choose_controller_strategy(env: Environment) -> ControllerStrategy:
    if env.controller_strategy is not None:
        return env.controller_strategy

    strategy = DEFAULT_CONTROLLER_STRATEGY
    profile = env.determine_profile()
    selectors = env.catalog.strategy_selectors if env.catalog is not None else ()
    for priority, selector in selectors:
        if not selector.is_allowed_in_profile(profile):
            continue
        decision = selector.select_controller_strategy(env)
        if decision is not None:
            env.log(
                trait_id=selector.id,
                level="info",
                message="controller strategy selected",
                strategy=ControllerStrategy(decision).value,
                priority=priority,
            )
            strategy = ControllerStrategy(decision)
            break

    env.controller_strategy = strategy
    return strategy
