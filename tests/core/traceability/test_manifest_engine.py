# tests/core/traceability/test_manifest_engine.py
"""
Testes da integração entre Engine e Manifest.

Os testes asseguram que, com um Manifest presente no Environment:
- o hash da configuração resolvida é registrado
- traits aplicados e desabilitados recebem estado final
- o resumo da saída inclui traits executados, digest, estratégia e perfil
- uma falha registra o trait como `failed` e a saída como parcial
"""

from datetime import datetime, timezone

import pytest

try:
    from traitflow.core.config.layers import ConfigLayer, LayerKind
    from traitflow.core.engine.engine import Engine
    from traitflow.core.exceptions import TraitApplyError
    from traitflow.core.pipeline.registry import TraitCatalog
    from traitflow.core.traceability.manifest import create_manifest
except Exception as e:  # noqa: BLE001
    Engine = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _manifest():
    if Engine is None:
        pytest.fail(f"Missing Engine/Manifest. Import error: {_IMPORT_ERR}")
    return create_manifest(
        run_id="run-test-001",
        started_at=datetime(2026, 1, 16, tzinfo=timezone.utc),
        integration="demo",
        traitflow_version="0.1.0",
    )


def test_successful_pass_is_recorded(make_env, DummyTrait):
    manifest = _manifest()
    catalog = TraitCatalog([DummyTrait("a", 1), DummyTrait("b", 2)])
    env = make_env(
        manifest=manifest,
        layers=[ConfigLayer.from_traits(LayerKind.INSTANCE, {"b": {"enabled": False}})],
    )

    Engine(catalog=catalog, env=env).run()

    assert manifest.inputs["config_hash"] == env.config.hash()
    assert manifest.trait_status("a") == "applied"
    assert manifest.trait_status("b") == "disabled"
    assert manifest.outputs["executed_traits"] == ["a"]
    assert manifest.outputs["resources_digest"] == env.resources.digest()
    assert manifest.outputs["profile"] == "kubernetes"
    assert manifest.outputs["controller_strategy"] is None
    assert manifest.events[-1]["event_type"] == "pass_finished"


def test_failed_pass_is_recorded(make_env, DummyTrait):
    """
    Verifica que o aborto por falha de `apply` fica visível no Manifest:
    estado `failed` com payload de erro e saída marcada como parcial.
    """
    manifest = _manifest()

    def boom(env):
        raise RuntimeError("boom")

    catalog = TraitCatalog([DummyTrait("a", 1, on_apply=boom)])
    env = make_env(manifest=manifest)

    with pytest.raises(TraitApplyError):
        Engine(catalog=catalog, env=env).run()

    assert manifest.trait_status("a") == "failed"
    assert manifest.traits["a"]["error"]["type"] == "TRAIT_APPLY_FAILED"
    assert manifest.outputs == {
        "aborted_by": "a",
        "partial_output": True,
        "finished_at": manifest.outputs["finished_at"],
    }
