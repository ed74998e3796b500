# tests/core/config/test_resolver_dynamic.py
"""
Testes de formatos de entrada herdados e valores dinâmicos das camadas.

Os testes asseguram que:
- o bloco legado `configuration` é elevado ao topo e o topo prevalece
- o bloco `addons` é aplicado antes dos mapas de topo da mesma camada
- referências `{{configmap:<nome>/<chave>}}` são resolvidas contra o
  snapshot de ConfigMaps, com coerção para int e bool
- ConfigMaps ou chaves ausentes invalidam a resolução
"""

import pytest

try:
    from traitflow.core.config.errors import ConfigDecodeError
    from traitflow.core.config.layers import ConfigLayer, LayerKind
    from traitflow.core.config.resolver import ConfigResolver, lift_legacy_configuration
    from traitflow.core.config.schema import PropertySpec, PropertyType, TraitSchema
except Exception as e:  # noqa: BLE001
    ConfigResolver = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _resolver(configmaps=None):
    if ConfigResolver is None:
        pytest.fail(f"Missing traitflow.core.config.resolver. Import error: {_IMPORT_ERR}")
    schemas = {
        "cron": TraitSchema.of(
            "cron",
            PropertySpec("schedule", PropertyType.STRING),
            PropertySpec("fallback", PropertyType.BOOL),
            PropertySpec("components", PropertyType.STRING),
        ),
        "keda": TraitSchema.of("keda", PropertySpec("max-replica-count", PropertyType.INT)),
        "jvm": TraitSchema.of("jvm", PropertySpec("config", PropertyType.STRING_MAP)),
    }
    return ConfigResolver(schemas, configmaps=configmaps)


def _instance(traits):
    return ConfigLayer.from_traits(LayerKind.INSTANCE, traits)


def test_legacy_configuration_block_is_lifted():
    """
    Verifica que propriedades do bloco legado são elevadas ao topo e que,
    em conflito, o valor de topo prevalece.
    """
    config = _resolver().resolve([_instance({
        "cron": {
            "configuration": {"schedule": "1 * * * *", "fallback": "true"},
            "schedule": "2 * * * *",
        }
    })])
    assert config.get("cron") == {"schedule": "2 * * * *", "fallback": True}


def test_nested_configuration_is_renamed_to_config():
    out = lift_legacy_configuration({"configuration": {"configuration": {"a": "1"}}})
    assert out == {"config": {"a": "1"}}

    config = _resolver().resolve([_instance({"jvm": {"configuration": {"configuration": {"a": "1"}}}})])
    assert config.get("jvm") == {"config": {"a": "1"}}


def test_legacy_block_must_be_a_map():
    with pytest.raises(ConfigDecodeError):
        _resolver().resolve([_instance({"cron": {"configuration": "schedule=1"}})])


def test_addons_are_applied_before_top_level_bags():
    config = _resolver().resolve([_instance({
        "addons": {"cron": {"schedule": "1 * * * *", "components": "timer"}},
        "cron": {"schedule": "2 * * * *"},
    })])
    assert config.get("cron") == {"schedule": "2 * * * *", "components": "timer"}


def test_addons_must_be_a_map():
    with pytest.raises(ConfigDecodeError):
        _resolver().resolve([_instance({"addons": ["cron"]})])


def test_configmap_references_are_resolved_and_coerced():
    """
    Verifica a resolução de valores dinâmicos:
        - "12" vira o inteiro 12
        - "true" vira o booleano True
        - valores não numéricos nem booleanos permanecem string
    """
    resolver = _resolver(configmaps={
        "scaling": {"max": "12"},
        "flags": {"fallback": "true", "schedule": "0/5 * * * ?"},
    })
    config = resolver.resolve([_instance({
        "keda": {"max-replica-count": "{{configmap:scaling/max}}"},
        "cron": {
            "fallback": "{{configmap:flags/fallback}}",
            "schedule": "{{configmap:flags/schedule}}",
        },
    })])

    assert config.get("keda") == {"max-replica-count": 12}
    assert config.get("cron") == {"fallback": True, "schedule": "0/5 * * * ?"}


@pytest.mark.parametrize(
    "configmaps",
    [
        {},
        {"scaling": {}},
        {"scaling": {"max": ""}},
    ],
)
def test_unresolvable_configmap_reference_fails(configmaps):
    with pytest.raises(ConfigDecodeError):
        _resolver(configmaps=configmaps).resolve([
            _instance({"keda": {"max-replica-count": "{{configmap:scaling/max}}"}}),
        ])


def test_configmap_references_in_annotations():
    resolver = _resolver(configmaps={"scaling": {"max": "7"}})
    layer = ConfigLayer.from_annotations({
        "trait.camel.apache.org/keda.max-replica-count": "{{configmap:scaling/max}}",
    })

    assert resolver.resolve([layer]).get("keda") == {"max-replica-count": 7}
