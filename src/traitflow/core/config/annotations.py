"""
Gramática de anotações de traits.

Chaves de anotação com o prefixo de traits seguem a forma:

    <prefixo><traitId>.<caminho-da-propriedade> = "<valor>"

O caminho da propriedade aceita segmentos separados por ponto e índices
entre colchetes, por exemplo `triggers[0].type` ou `metadata.topic`.

Regras:
    - chaves sem o prefixo não pertencem à gramática e são ignoradas
    - uma chave com o prefixo mas sem `.` separador é malformada
    - um id de trait desconhecido NÃO é erro nesta camada
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

from .errors import ConfigDecodeError, MalformedAnnotationError


TRAIT_ANNOTATION_PREFIX = "trait.camel.apache.org/"

_PATH_TOKEN = re.compile(r"\[[^\[\]]*\]|[^.\[\]]+")


@dataclass(frozen=True)
class AnnotationOverride:
    """Uma ocorrência de anotação já separada em trait e caminho."""

    key: str
    trait_id: str
    property_path: str
    value: str


def parse_annotation_key(
    key: str,
    prefix: str = TRAIT_ANNOTATION_PREFIX,
) -> Optional[Tuple[str, str]]:
    """
    Separa uma chave de anotação em `(trait_id, caminho)`.

    Returns:
        None se a chave não possui o prefixo de traits.

    Raises:
        MalformedAnnotationError: Se a chave possui o prefixo mas não
            contém `.` separador, ou se id/caminho estiverem vazios.
    """
    if not key.startswith(prefix):
        return None

    config_key = key[len(prefix):]
    if "." not in config_key:
        raise MalformedAnnotationError(
            f"wrong format for trait annotation {key!r}: missing trait ID"
        )

    trait_id, prop = config_key.split(".", 1)
    if not trait_id or not prop:
        raise MalformedAnnotationError(
            f"wrong format for trait annotation {key!r}: empty trait ID or property"
        )
    return trait_id, prop


def parse_annotations(
    pairs: Iterable[Tuple[str, str]],
    prefix: str = TRAIT_ANNOTATION_PREFIX,
) -> List[AnnotationOverride]:
    """Converte pares de anotação em overrides, preservando a ordem de encontro."""
    overrides: List[AnnotationOverride] = []
    for key, value in pairs:
        parsed = parse_annotation_key(key, prefix)
        if parsed is None:
            continue
        trait_id, prop = parsed
        overrides.append(
            AnnotationOverride(key=key, trait_id=trait_id, property_path=prop, value=value)
        )
    return overrides


def split_property_path(path: str) -> List[str]:
    """
    Quebra um caminho de propriedade em segmentos.

    Exemplo: `a.b[1].c` → `["a", "b", "[1]", "c"]`.

    Raises:
        ConfigDecodeError: Se o caminho for vazio ou tiver colchetes desbalanceados.
    """
    tokens = _PATH_TOKEN.findall(path or "")
    rebuilt = ""
    for tok in tokens:
        if tok.startswith("[") or not rebuilt:
            rebuilt += tok
        else:
            rebuilt += "." + tok
    if not tokens or rebuilt != path:
        raise ConfigDecodeError(f"invalid property path {path!r}")
    return tokens


def index_of(segment: str) -> Optional[int]:
    """Retorna o índice de um segmento `[n]`, ou None se não for um índice."""
    if not (segment.startswith("[") and segment.endswith("]")):
        return None
    inner = segment[1:-1].strip()
    if not inner.isdigit():
        raise ConfigDecodeError(f"invalid list index {segment!r}")
    return int(inner)


def looks_like_json_array(value: Any) -> bool:
    return isinstance(value, str) and value.startswith("[") and value.endswith("]")


def parse_json_array(value: str) -> List[Any]:
    """Decodifica um valor no formato `["v1", "v2"]`."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise ConfigDecodeError(
            f"could not decode JSON array for configuring trait property: {value!r}"
        ) from e
    if not isinstance(parsed, list):
        raise ConfigDecodeError(f"expected a JSON array, got: {value!r}")
    return parsed
