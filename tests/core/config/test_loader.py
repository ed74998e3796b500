# tests/core/config/test_loader.py
"""
Testes do loader de camadas a partir de arquivos YAML/JSON.

Os testes asseguram que:
- arquivos YAML e JSON viram camadas do tipo solicitado
- arquivos de anotações aceitam listas (chaves repetidas)
- arquivos vazios viram camadas vazias
- erros de arquivo ausente, formato e raiz são tipados

Decisões arquiteturais:
    - Arquivos são criados em `tmp_path`, isolados por teste
"""

import json

import pytest

try:
    from traitflow.core.config.errors import (
        InvalidConfigRootTypeError,
        LayerNotFoundError,
        UnsupportedConfigFormatError,
    )
    from traitflow.core.config.layers import LayerKind
    from traitflow.core.config.loader import load_layer, load_layers
except Exception as e:  # noqa: BLE001
    load_layer = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if load_layer is None:
        pytest.fail(f"Missing traitflow.core.config.loader. Import error: {_IMPORT_ERR}")


def test_load_yaml_trait_layer(tmp_path):
    _require_imports()
    path = tmp_path / "platform.yaml"
    path.write_text(
        """\
cron:
  schedule: "0 * * * *"
keda:
  enabled: true
""",
        encoding="utf-8",
    )

    layer = load_layer(path, LayerKind.PLATFORM)

    assert layer.kind is LayerKind.PLATFORM
    assert layer.traits == {"cron": {"schedule": "0 * * * *"}, "keda": {"enabled": True}}
    assert layer.source == str(path)


def test_load_json_annotations_with_repeated_keys(tmp_path):
    """
    Verifica que, em arquivos de anotações, uma lista é expandida em
    ocorrências repetidas da mesma chave, na ordem declarada.
    """
    _require_imports()
    path = tmp_path / "annotations.json"
    path.write_text(
        json.dumps({
            "trait.camel.apache.org/owner.target-labels": ["a", "b"],
            "trait.camel.apache.org/keda.enabled": True,
        }),
        encoding="utf-8",
    )

    layer = load_layer(path, LayerKind.ANNOTATIONS)

    assert layer.annotations == (
        ("trait.camel.apache.org/owner.target-labels", "a"),
        ("trait.camel.apache.org/owner.target-labels", "b"),
        ("trait.camel.apache.org/keda.enabled", "true"),
    )


def test_empty_file_is_empty_layer(tmp_path):
    _require_imports()
    path = tmp_path / "kit.yml"
    path.write_text("", encoding="utf-8")
    assert load_layer(path, LayerKind.KIT).is_empty()


def test_loader_errors(tmp_path):
    _require_imports()
    with pytest.raises(LayerNotFoundError):
        load_layer(tmp_path / "missing.yaml", LayerKind.INSTANCE)

    toml = tmp_path / "instance.toml"
    toml.write_text("a = 1", encoding="utf-8")
    with pytest.raises(UnsupportedConfigFormatError):
        load_layer(toml, LayerKind.INSTANCE)

    root_list = tmp_path / "instance.yaml"
    root_list.write_text("- cron\n- keda\n", encoding="utf-8")
    with pytest.raises(InvalidConfigRootTypeError):
        load_layer(root_list, LayerKind.INSTANCE)


def test_load_layers_skips_none_and_optional_missing(tmp_path):
    """
    Verifica que `load_layers` devolve as camadas em ordem de precedência,
    ignora caminhos None e, com `missing_ok`, arquivos inexistentes.
    """
    _require_imports()
    platform = tmp_path / "platform.yaml"
    platform.write_text("gc: {}\n", encoding="utf-8")
    instance = tmp_path / "instance.yaml"
    instance.write_text("gc:\n  enabled: false\n", encoding="utf-8")

    layers = load_layers(
        platform=platform,
        kit=None,
        instance=instance,
        annotations=tmp_path / "absent.yaml",
        missing_ok=True,
    )

    assert [layer.kind for layer in layers] == [LayerKind.PLATFORM, LayerKind.INSTANCE]

    with pytest.raises(LayerNotFoundError):
        load_layers(annotations=tmp_path / "absent.yaml")
