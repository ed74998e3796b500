# tests/core/config/test_layers.py
"""
Testes das camadas de configuração (`ConfigLayer`) e da ordenação por precedência.

Os testes asseguram que:
- a ordem de precedência é PLATFORM < KIT < INSTANCE < ANNOTATIONS
- camadas do mesmo tipo preservam a ordem de entrega
- camadas de trait copiam a entrada e rejeitam raízes que não são mapas
- anotações aceitam mapa ou pares e normalizam valores para string
"""

import pytest

try:
    from traitflow.core.config.errors import InvalidConfigRootTypeError
    from traitflow.core.config.layers import LAYER_PRECEDENCE, ConfigLayer, LayerKind, order_layers
except Exception as e:  # noqa: BLE001
    ConfigLayer = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if ConfigLayer is None:
        pytest.fail(f"Missing traitflow.core.config.layers. Import error: {_IMPORT_ERR}")


def test_precedence_order_is_fixed():
    _require_imports()
    assert LAYER_PRECEDENCE == (
        LayerKind.PLATFORM,
        LayerKind.KIT,
        LayerKind.INSTANCE,
        LayerKind.ANNOTATIONS,
    )
    assert LayerKind.ANNOTATIONS.precedence > LayerKind.INSTANCE.precedence > LayerKind.KIT.precedence


def test_order_layers_is_stable_within_kind():
    """
    Verifica que `order_layers` ordena por precedência independentemente da
    ordem de entrada e mantém a ordem relativa de camadas do mesmo tipo.
    """
    _require_imports()
    inst_a = ConfigLayer.from_traits(LayerKind.INSTANCE, {}, source="inst-a")
    inst_b = ConfigLayer.from_traits(LayerKind.INSTANCE, {}, source="inst-b")
    plat = ConfigLayer.from_traits(LayerKind.PLATFORM, {}, source="plat")
    ann = ConfigLayer.from_annotations({}, source="ann")

    ordered = order_layers([ann, inst_a, plat, inst_b])

    assert [layer.source for layer in ordered] == ["plat", "inst-a", "inst-b", "ann"]


def test_from_traits_copies_input():
    _require_imports()
    raw = {"cron": {"schedule": "0 * * * *"}}
    layer = ConfigLayer.from_traits(LayerKind.KIT, raw)
    raw["cron"]["schedule"] = "changed"

    assert layer.traits["cron"]["schedule"] == "0 * * * *"
    assert layer.source == "kit"


def test_from_traits_rejects_non_mapping_and_annotations_kind():
    _require_imports()
    with pytest.raises(InvalidConfigRootTypeError):
        ConfigLayer.from_traits(LayerKind.PLATFORM, ["cron"])
    with pytest.raises(ValueError):
        ConfigLayer.from_traits(LayerKind.ANNOTATIONS, {})


def test_from_annotations_accepts_pairs_and_stringifies():
    """
    Verifica que pares repetidos são preservados na ordem e que valores
    booleanos e numéricos viram strings.
    """
    _require_imports()
    layer = ConfigLayer.from_annotations(
        [
            ("trait.camel.apache.org/owner.target-labels", "a"),
            ("trait.camel.apache.org/owner.target-labels", "b"),
            ("trait.camel.apache.org/keda.enabled", True),
            ("trait.camel.apache.org/keda.max-replica-count", 5),
        ]
    )

    assert layer.kind is LayerKind.ANNOTATIONS
    assert layer.annotations == (
        ("trait.camel.apache.org/owner.target-labels", "a"),
        ("trait.camel.apache.org/owner.target-labels", "b"),
        ("trait.camel.apache.org/keda.enabled", "true"),
        ("trait.camel.apache.org/keda.max-replica-count", "5"),
    )
    assert not layer.is_empty()
    assert ConfigLayer.from_annotations({}).is_empty()
