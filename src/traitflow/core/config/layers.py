"""
Camadas de configuração de traits.

Uma camada é uma fonte ordenada de configuração de traits. Existem quatro
tipos, aplicados em ordem fixa de precedência (menor → maior):

    PLATFORM < KIT < INSTANCE < ANNOTATIONS

Camadas de trait (PLATFORM, KIT, INSTANCE) carregam um mapa
`trait id -> propriedades`. A camada ANNOTATIONS carrega uma sequência
ordenada de pares `(chave, valor)` seguindo a gramática de anotações,
permitindo ocorrências repetidas da mesma chave.

Invariantes:
    - Uma camada é um snapshot somente leitura tirado uma vez por passada
    - Camadas do mesmo tipo preservam a ordem em que foram entregues
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple, Union

from .errors import InvalidConfigRootTypeError


class LayerKind(str, Enum):
    """Tipos de camada, em ordem crescente de precedência."""

    PLATFORM = "platform"
    KIT = "kit"
    INSTANCE = "instance"
    ANNOTATIONS = "annotations"

    @property
    def precedence(self) -> int:
        return LAYER_PRECEDENCE.index(self)


LAYER_PRECEDENCE: Tuple[LayerKind, ...] = (
    LayerKind.PLATFORM,
    LayerKind.KIT,
    LayerKind.INSTANCE,
    LayerKind.ANNOTATIONS,
)


AnnotationInput = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


@dataclass(frozen=True)
class ConfigLayer:
    """
    Snapshot imutável de uma camada de configuração.

    Campos:
        - kind: tipo da camada (define a precedência)
        - traits: mapa `trait id -> propriedades` (camadas de trait)
        - annotations: pares `(chave, valor)` ordenados (camada de anotações)
        - source: descrição livre da origem (arquivo, recurso), usada em mensagens
    """

    kind: LayerKind
    traits: Dict[str, Any] = field(default_factory=dict)
    annotations: Tuple[Tuple[str, str], ...] = ()
    source: str = ""

    @classmethod
    def from_traits(
        cls,
        kind: LayerKind,
        traits: Mapping[str, Any],
        *,
        source: str = "",
    ) -> "ConfigLayer":
        if kind is LayerKind.ANNOTATIONS:
            raise ValueError("use ConfigLayer.from_annotations for the annotations layer")
        if not isinstance(traits, Mapping):
            raise InvalidConfigRootTypeError(
                f"Camada {kind.value} deve ser dict, recebido: {type(traits).__name__}"
            )
        return cls(kind=kind, traits=deepcopy(dict(traits)), source=source or kind.value)

    @classmethod
    def from_annotations(
        cls,
        annotations: AnnotationInput,
        *,
        source: str = "",
    ) -> "ConfigLayer":
        items = annotations.items() if isinstance(annotations, Mapping) else annotations
        pairs: List[Tuple[str, str]] = []
        for key, value in items:
            if isinstance(value, bool):
                value = "true" if value else "false"
            pairs.append((str(key), str(value)))
        return cls(
            kind=LayerKind.ANNOTATIONS,
            annotations=tuple(pairs),
            source=source or LayerKind.ANNOTATIONS.value,
        )

    def is_empty(self) -> bool:
        return not self.traits and not self.annotations


def order_layers(layers: Sequence[ConfigLayer]) -> List[ConfigLayer]:
    """Ordena camadas por precedência (estável para camadas do mesmo tipo)."""
    return sorted(layers, key=lambda layer: layer.kind.precedence)
