# tests/conftest.py
"""
Fixtures compartilhados para testes do traitflow.

Este módulo define fixtures reutilizáveis que fornecem:
- descritores mínimos e determinísticos de integração e plataforma
- uma factory de Environment isolado por teste
- um Trait dummy para testes estruturais de catálogo e engine

O objetivo destas fixtures é permitir testes do core
(config, pipeline, engine e traceability) sem depender de:
- filesystem
- traits concretos do catálogo padrão
- estado global compartilhado

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Traits dummy utilizam duck typing em vez de herança
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture executa uma passada real
    - Nenhuma fixture realiza I/O
    - Cada chamada da factory produz um Environment novo

Limites explícitos:
    - Não substituir testes de traits concretos
    - Não conter lógica condicional complexa
"""

import pytest


_DEFAULT = object()


@pytest.fixture
def integration():
    """
    Fixture que fornece o descritor de integração padrão dos testes.

    Decisões arquiteturais:
        - Nome, namespace e uid fixos para garantir determinismo
        - Sem endpoints de entrada: cada teste declara os seus

    Returns:
        Integration: Integração "demo" no namespace "ns".
    """
    from traitflow.core.pipeline.types import Integration

    return Integration(name="demo", namespace="ns", uid="uid-demo")


@pytest.fixture
def platform():
    """
    Fixture que fornece uma plataforma pronta e sem perfil explícito.

    Returns:
        Platform: Plataforma "camel-k".
    """
    from traitflow.core.pipeline.types import Platform

    return Platform(name="camel-k", namespace="ns")


@pytest.fixture
def make_env(integration, platform):
    """
    Fixture factory que cria Environments isolados.

    A factory aceita overrides explícitos para integração, camadas,
    plataforma (use `platform=None` para simular ausência), catálogo e
    snapshot de ConfigMaps.

    Decisões arquiteturais:
        - `run_id` fixo para que eventos sejam comparáveis entre passadas
        - A plataforma da fixture é usada por padrão

    Returns:
        Callable[..., Environment]: Factory de Environment.
    """
    from traitflow.core.pipeline.context import Environment

    default_integration, default_platform = integration, platform

    def _make(*, integration=None, layers=None, platform=_DEFAULT, catalog=None, configmaps=None, manifest=None, kit=None):
        return Environment(
            integration=integration or default_integration,
            layers=list(layers or []),
            kit=kit,
            platform=default_platform if platform is _DEFAULT else platform,
            catalog=catalog,
            configmaps=dict(configmaps or {}),
            manifest=manifest,
            run_id="run-test-001",
        )

    return _make


@pytest.fixture
def DummyTrait():
    """
    Fixture factory que fornece uma implementação mínima e duck-typed de um Trait.

    Este fixture retorna uma *classe* (não uma instância). A implementação:
    - respeita o protocolo de Trait (duck typing, sem herança obrigatória)
    - declara um schema com a propriedade string `value`
    - registra em `calls` cada fase executada
    - em `apply`, adiciona um ConfigMap com o nome do próprio trait

    Invariantes:
        - `configure` respeita `enabled` explícito da configuração
        - Não executa I/O

    Returns:
        type: Classe _DummyTrait que pode ser instanciada pelos testes.
    """
    from traitflow.core.config.schema import PropertySpec, PropertyType, TraitSchema
    from traitflow.core.pipeline.trait import explicitly_enabled

    class _DummyTrait:
        def __init__(
            self,
            trait_id: str = "dummy",
            order: int = 100,
            *,
            enabled: bool = True,
            requires_platform: bool = True,
            profiles=None,
            calls=None,
            on_configure=None,
            on_apply=None,
        ):
            self.id = trait_id
            self.order = order
            self.requires_platform = requires_platform
            self.schema = TraitSchema.of(trait_id, PropertySpec("value", PropertyType.STRING))
            self.enabled = enabled
            self.profiles = profiles
            self.calls = calls if calls is not None else []
            self.on_configure = on_configure
            self.on_apply = on_apply

        def is_allowed_in_profile(self, profile):
            return self.profiles is None or profile in self.profiles

        def configure(self, env):
            self.calls.append(("configure", self.id))
            if self.on_configure is not None:
                self.on_configure(env)
            flag = explicitly_enabled(env, self.id)
            return (self.enabled if flag is None else flag), None

        def apply(self, env):
            self.calls.append(("apply", self.id))
            env.resources.add({
                "apiVersion": "v1",
                "kind": "ConfigMap",
                "metadata": {"name": self.id},
                "data": {"value": env.config.get(self.id).get("value", "")},
            })
            if self.on_apply is not None:
                self.on_apply(env)

    return _DummyTrait


@pytest.fixture
def run_pass(make_env):
    """
    Fixture factory que executa uma passada completa com o catálogo padrão.

    Aceita os mesmos overrides de `make_env` e retorna o Environment após
    a passada, para inspeção de recursos, condições e estado por trait.

    Returns:
        Callable[..., Environment]: Factory que executa e retorna o Environment.
    """
    from traitflow.core.engine.engine import Engine
    from traitflow.traits.catalog import build_catalog

    def _run(**kwargs):
        catalog = kwargs.pop("catalog", None) or build_catalog()
        env = make_env(catalog=catalog, **kwargs)
        Engine(catalog=catalog, env=env).run()
        return env

    return _run


def condition_of(env, trait_id):
    """Condição registrada por um trait na passada (ou None)."""
    for condition in env.conditions:
        if condition.trait_id == trait_id:
            return condition
    return None


@pytest.fixture
def condition():
    return condition_of
