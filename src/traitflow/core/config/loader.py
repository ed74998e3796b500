"""
Loader de camadas de configuração a partir de arquivos.

Este módulo carrega arquivos YAML ou JSON e os converte em `ConfigLayer`
prontos para o `ConfigResolver`.

Formato dos arquivos (v1):
    - camadas de trait: mapa raiz `trait id -> propriedades`
    - camada de anotações: mapa raiz `chave -> valor`; um valor lista
      gera uma ocorrência repetida da mesma chave por elemento

Invariantes:
    - O conteúdo raiz é sempre um dicionário
    - Arquivos vazios são camadas vazias
    - A ordem das chaves do arquivo é preservada

Limites explícitos:
    - Não resolve precedência (ver `resolver`)
    - Não valida propriedades contra schemas
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
import json

import yaml  # PyYAML

from .errors import (
    InvalidConfigRootTypeError,
    LayerNotFoundError,
    UnsupportedConfigFormatError,
)
from .layers import ConfigLayer, LayerKind


PathLike = Union[str, Path]


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)

    Raises:
        LayerNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise LayerNotFoundError(f"Arquivo de camada não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def _annotation_pairs(data: Dict[str, Any]) -> List[Tuple[str, Any]]:
    pairs: List[Tuple[str, Any]] = []
    for key, value in data.items():
        if isinstance(value, list):
            pairs.extend((key, v) for v in value)
        else:
            pairs.append((key, value))
    return pairs


def load_layer(path: PathLike, kind: LayerKind) -> ConfigLayer:
    """
    Carrega um único arquivo como camada do tipo informado.

    Args:
        path: Caminho do arquivo YAML ou JSON.
        kind: Tipo da camada (define a precedência).

    Returns:
        ConfigLayer: Snapshot imutável da camada, com `source` igual ao caminho.
    """
    file = Path(path)
    data = _load_file(file)

    if kind is LayerKind.ANNOTATIONS:
        return ConfigLayer.from_annotations(_annotation_pairs(data), source=str(file))
    return ConfigLayer.from_traits(kind, data, source=str(file))


def load_layers(
    *,
    platform: Optional[PathLike] = None,
    kit: Optional[PathLike] = None,
    instance: Optional[PathLike] = None,
    annotations: Optional[PathLike] = None,
    missing_ok: bool = False,
) -> List[ConfigLayer]:
    """
    Carrega as camadas informadas, em ordem de precedência.

    Caminhos `None` são ignorados. Com `missing_ok=True`, arquivos
    inexistentes também são ignorados, como overrides locais opcionais.
    """
    requested = (
        (LayerKind.PLATFORM, platform),
        (LayerKind.KIT, kit),
        (LayerKind.INSTANCE, instance),
        (LayerKind.ANNOTATIONS, annotations),
    )

    layers: List[ConfigLayer] = []
    for kind, path in requested:
        if path is None:
            continue
        if missing_ok and not Path(path).exists():
            continue
        layers.append(load_layer(path, kind))
    return layers
