# tests/core/config/test_resolver.py
"""
Testes do `ConfigResolver`: precedência de camadas e decodificação.

Os testes asseguram que:
- a camada de maior precedência vence por propriedade, independente da
  ordem de entrega e de quais outras propriedades cada camada define
- ids de trait desconhecidos são ignorados em qualquer camada
- propriedades desconhecidas são descartadas nas camadas de trait e são
  erro nas anotações
- valores inválidos invalidam a resolução
- a `CapabilityConfig` resultante é determinística e isolada

Decisões arquiteturais:
    - Schemas mínimos declarados localmente, sem depender dos traits reais

Limites explícitos:
    - Anotações, blocos legados e valores dinâmicos têm módulos próprios
"""

import pytest

try:
    from traitflow.core.config.errors import ConfigDecodeError
    from traitflow.core.config.layers import ConfigLayer, LayerKind
    from traitflow.core.config.resolver import CapabilityConfig, ConfigResolver
    from traitflow.core.config.schema import PropertySpec, PropertyType, TraitSchema
except Exception as e:  # noqa: BLE001
    ConfigResolver = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _resolver(**kwargs):
    if ConfigResolver is None:
        pytest.fail(f"Missing traitflow.core.config.resolver. Import error: {_IMPORT_ERR}")
    schemas = {
        "cron": TraitSchema.of(
            "cron",
            PropertySpec("schedule", PropertyType.STRING),
            PropertySpec("fallback", PropertyType.BOOL),
            PropertySpec("components", PropertyType.STRING),
        ),
        "keda": TraitSchema.of(
            "keda",
            PropertySpec("max-replica-count", PropertyType.INT),
            PropertySpec("auto-metadata", PropertyType.STRING_MAP),
        ),
    }
    return ConfigResolver(schemas, **kwargs)


def test_highest_precedence_layer_wins_per_property():
    """
    Verifica a precedência PLATFORM < KIT < INSTANCE < ANNOTATIONS.

    Cada camada define `cron.schedule`; apenas a plataforma define
    `cron.fallback`. O schedule final vem das anotações e o fallback da
    plataforma é preservado, mesmo com camadas entregues fora de ordem.
    """
    resolver = _resolver()
    layers = [
        ConfigLayer.from_annotations({"trait.camel.apache.org/cron.schedule": "4 * * * *"}),
        ConfigLayer.from_traits(LayerKind.INSTANCE, {"cron": {"schedule": "3 * * * *"}}),
        ConfigLayer.from_traits(LayerKind.PLATFORM, {"cron": {"schedule": "1 * * * *", "fallback": True}}),
        ConfigLayer.from_traits(LayerKind.KIT, {"cron": {"schedule": "2 * * * *"}}),
    ]

    config = resolver.resolve(layers)

    assert config.get("cron") == {"schedule": "4 * * * *", "fallback": True}


def test_kit_beats_platform_without_annotations():
    resolver = _resolver()
    config = resolver.resolve([
        ConfigLayer.from_traits(LayerKind.KIT, {"keda": {"max-replica-count": 5}}),
        ConfigLayer.from_traits(LayerKind.PLATFORM, {"keda": {"max-replica-count": 1}}),
    ])
    assert config.get("keda") == {"max-replica-count": 5}


def test_map_properties_merge_per_key_across_layers():
    resolver = _resolver()
    config = resolver.resolve([
        ConfigLayer.from_traits(LayerKind.PLATFORM, {"keda": {"auto-metadata": {"kafka.a": "1", "kafka.b": "2"}}}),
        ConfigLayer.from_traits(LayerKind.INSTANCE, {"keda": {"auto-metadata": {"kafka.b": "20"}}}),
    ])
    assert config.get("keda")["auto-metadata"] == {"kafka.a": "1", "kafka.b": "20"}


def test_unknown_trait_ids_are_ignored():
    resolver = _resolver()
    config = resolver.resolve([
        ConfigLayer.from_traits(LayerKind.INSTANCE, {"not-a-trait": {"x": 1}, "cron": {"fallback": "true"}}),
        ConfigLayer.from_annotations({"trait.camel.apache.org/not-a-trait.x": "1"}),
    ])
    assert config.ids() == ["cron"]
    assert config.get("cron") == {"fallback": True}


def test_unknown_properties_in_trait_layers_are_dropped():
    resolver = _resolver()
    config = resolver.resolve([
        ConfigLayer.from_traits(LayerKind.PLATFORM, {"keda": {"max-replica-count": 3, "newer-field": {"a": 1}}}),
        ConfigLayer.from_traits(
            LayerKind.INSTANCE,
            {"cron": {"schedule": "0/5 * * * ?", "newer-field": "x", "configuration": {"older-field": 1}}},
        ),
    ])

    assert config.get("cron") == {"schedule": "0/5 * * * ?"}
    assert config.get("keda") == {"max-replica-count": 3}
    assert [(i["trait_id"], i["property"]) for i in resolver.ignored] == [
        ("keda", "newer-field"),
        ("cron", "newer-field"),
        ("cron", "older-field"),
    ]


@pytest.mark.parametrize(
    "traits",
    [
        {"keda": {"max-replica-count": "many"}},
        {"cron": "not-a-map"},
    ],
)
def test_invalid_trait_layers_fail_the_whole_resolution(traits):
    resolver = _resolver()
    with pytest.raises(ConfigDecodeError):
        resolver.resolve([
            ConfigLayer.from_traits(LayerKind.PLATFORM, {"cron": {"schedule": "0 * * * *"}}),
            ConfigLayer.from_traits(LayerKind.INSTANCE, traits),
        ])


def test_capability_config_is_isolated_and_hashable():
    """
    Verifica que `get` devolve cópias, que ids ausentes resultam em mapa
    vazio e que o hash é estável para a mesma entrada.
    """
    resolver = _resolver()
    layers = [ConfigLayer.from_traits(LayerKind.INSTANCE, {"keda": {"auto-metadata": {"k.a": "1"}}})]

    config = resolver.resolve(layers)
    config.get("keda")["auto-metadata"]["k.a"] = "mutated"

    assert config.get("keda")["auto-metadata"] == {"k.a": "1"}
    assert config.get("cron") == {}
    assert config.is_set("keda", "auto-metadata")
    assert not config.has("cron")
    assert config.hash() == resolver.resolve(layers).hash()
    assert CapabilityConfig().to_dict() == {}


def test_resolve_does_not_mutate_layers():
    resolver = _resolver()
    layer = ConfigLayer.from_traits(LayerKind.INSTANCE, {"cron": {"fallback": "true"}})
    resolver.resolve([layer])
    assert layer.traits == {"cron": {"fallback": "true"}}
