# tests/core/engine/test_engine_callbacks.py
"""
Testes dos callbacks pós-step e pós-pipeline do Engine.

Os testes asseguram que:
- callbacks pós-step rodam após cada `apply` bem-sucedido, na ordem de
  registro, incluindo o `apply` que os registrou
- callbacks pós-pipeline rodam uma única vez, depois de todos os traits
- traits desabilitados não disparam callbacks pós-step
"""

import pytest

try:
    from traitflow.core.engine.engine import Engine
    from traitflow.core.pipeline.registry import TraitCatalog
except Exception as e:  # noqa: BLE001
    Engine = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def test_callback_ordering(make_env, DummyTrait):
    """
    Cenário:
        - `a` registra dois callbacks pós-step
        - `b` está desabilitado
        - `c` registra um callback pós-pipeline

    Resultado esperado: os dois callbacks pós-step rodam após `a` e após
    `c`, em ordem de registro; o pós-pipeline roda uma vez, no fim.
    """
    if Engine is None:
        pytest.fail(f"Missing Engine. Import error: {_IMPORT_ERR}")

    trace = []

    def step_one(env):
        trace.append(("step-one", env.executed_traits[-1]))

    def step_two(env):
        trace.append(("step-two", env.executed_traits[-1]))

    def at_end(env):
        trace.append(("end", list(env.executed_traits)))

    def register_steps(env):
        env.add_post_step_processor(step_one)
        env.add_post_step_processor(step_two)

    def register_end(env):
        env.add_post_processor(at_end)

    catalog = TraitCatalog([
        DummyTrait("a", 1, on_apply=register_steps),
        DummyTrait("b", 2, enabled=False),
        DummyTrait("c", 3, on_apply=register_end),
    ])
    env = make_env()

    Engine(catalog=catalog, env=env).run()

    assert trace == [
        ("step-one", "a"),
        ("step-two", "a"),
        ("step-one", "c"),
        ("step-two", "c"),
        ("end", ["a", "c"]),
    ]
