# tests/core/config/test_schema.py
"""
Testes do schema explícito de propriedades de traits.

Os testes asseguram que:
- todo schema expõe `enabled` como primeira propriedade
- nomes kebab-case e aliases camelCase resolvem para a mesma propriedade
- a coerção fraca segue as regras de bool, int, string e listas
- propriedades desconhecidas e valores não coercíveis são erro
- defaults são aplicados sem mutar a configuração resolvida
"""

import pytest

try:
    from traitflow.core.config.errors import ConfigDecodeError
    from traitflow.core.config.schema import PropertySpec, PropertyType, TraitSchema
except Exception as e:  # noqa: BLE001
    TraitSchema = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _schema():
    if TraitSchema is None:
        pytest.fail(f"Missing traitflow.core.config.schema. Import error: {_IMPORT_ERR}")
    return TraitSchema.of(
        "sample",
        PropertySpec("concurrency-policy", PropertyType.STRING, default="Forbid"),
        PropertySpec("max-replica-count", PropertyType.INT),
        PropertySpec("auto", PropertyType.BOOL, default=True),
        PropertySpec("properties", PropertyType.STRING_LIST),
        PropertySpec("metadata", PropertyType.STRING_MAP),
        PropertySpec("triggers", PropertyType.OBJECT_LIST),
    )


def test_enabled_is_implicit_and_first():
    schema = _schema()
    assert schema.names()[0] == "enabled"
    assert schema.lookup("enabled").type is PropertyType.BOOL


def test_alias_resolves_to_canonical_name():
    """
    Verifica que `concurrencyPolicy` e `concurrency-policy` decodificam para
    a mesma chave canônica.
    """
    schema = _schema()
    assert schema.decode({"concurrencyPolicy": "Allow"}) == {"concurrency-policy": "Allow"}
    assert schema.decode({"concurrency-policy": "Replace"}) == {"concurrency-policy": "Replace"}


@pytest.mark.parametrize(
    "raw,expected",
    [
        ({"auto": "true"}, {"auto": True}),
        ({"auto": "F"}, {"auto": False}),
        ({"auto": "1"}, {"auto": True}),
        ({"max-replica-count": "7"}, {"max-replica-count": 7}),
        ({"max-replica-count": 3.0}, {"max-replica-count": 3}),
        ({"concurrency-policy": 5}, {"concurrency-policy": "5"}),
        ({"properties": "a=1"}, {"properties": ["a=1"]}),
        ({"properties": '["a=1", "b=2"]'}, {"properties": ["a=1", "b=2"]}),
        ({"metadata": {"k": 1}}, {"metadata": {"k": "1"}}),
        ({"triggers": {"type": "cpu"}}, {"triggers": [{"type": "cpu"}]}),
    ],
)
def test_weak_typing(raw, expected):
    assert _schema().decode(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        {"auto": "maybe"},
        {"max-replica-count": "ten"},
        {"metadata": "not-a-map"},
        {"triggers": ["not-an-object"]},
        {"unknown": 1},
    ],
)
def test_decode_errors(raw):
    with pytest.raises(ConfigDecodeError):
        _schema().decode(raw, source="instance")


def test_none_values_are_skipped():
    assert _schema().decode({"auto": None, "max-replica-count": 2}) == {"max-replica-count": 2}


def test_with_defaults_overlays_resolved_values():
    schema = _schema()
    resolved = {"auto": False}

    props = schema.with_defaults(resolved)

    assert props == {"concurrency-policy": "Forbid", "auto": False}
    assert resolved == {"auto": False}


def test_duplicate_property_names_are_rejected():
    if TraitSchema is None:
        pytest.fail(f"Missing traitflow.core.config.schema. Import error: {_IMPORT_ERR}")
    with pytest.raises(ValueError):
        TraitSchema.of(
            "broken",
            PropertySpec("min-scale", PropertyType.INT),
            PropertySpec("minScale", PropertyType.INT),
        )
