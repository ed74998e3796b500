"""
Schema tipado de propriedades de traits.

Cada trait declara explicitamente suas propriedades através de um
`TraitSchema`. O schema é a única fonte de verdade usada para:
    - validar nomes de propriedades (desconhecidas são erro)
    - converter valores crus das camadas (coerção fraca)
    - listar as propriedades configuráveis do catálogo

Coerção fraca (v1):
    - "true"/"false" (e variantes) → bool
    - strings numéricas → int
    - escalares → str para propriedades textuais
    - escalar solto em propriedade lista → lista de um elemento
    - string no formato de array JSON → lista decodificada

Decisões arquiteturais:
    - Nomes canônicos são kebab-case; o alias camelCase é aceito
    - Toda propriedade `enabled` é implícita em qualquer schema
    - Nenhuma introspecção de atributos é utilizada

Limites explícitos:
    - Não aplica precedência entre camadas
    - Não lê anotações
"""

from __future__ import annotations

import json
from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .annotations import looks_like_json_array, parse_json_array
from .errors import ConfigDecodeError


class PropertyType(str, Enum):
    BOOL = "bool"
    INT = "int"
    STRING = "string"
    STRING_LIST = "string-list"
    STRING_MAP = "string-map"
    OBJECT_LIST = "object-list"

    @property
    def is_list(self) -> bool:
        return self in (PropertyType.STRING_LIST, PropertyType.OBJECT_LIST)


def _camel_case(name: str) -> str:
    head, *rest = name.split("-")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


@dataclass(frozen=True)
class PropertySpec:
    """Declaração de uma propriedade de trait."""

    name: str
    type: PropertyType
    default: Any = None
    description: str = ""

    @property
    def alias(self) -> str:
        return _camel_case(self.name)


_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
    raise ValueError(f"cannot convert {value!r} to bool")


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise ValueError(f"cannot convert {value!r} to int")


def _to_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise ValueError(f"cannot convert {type(value).__name__} to string")


def _to_str_list(value: Any) -> List[str]:
    if looks_like_json_array(value):
        value = parse_json_array(value)
    if isinstance(value, (list, tuple)):
        return [_to_str(v) for v in value]
    return [_to_str(value)]


def _to_str_map(value: Any) -> Dict[str, str]:
    if isinstance(value, str) and value.startswith("{"):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"invalid JSON object {value!r}") from e
    if not isinstance(value, Mapping):
        raise ValueError(f"expected a map, got {type(value).__name__}")
    return {str(k): _to_str(v) for k, v in value.items()}


def _to_object_list(value: Any) -> List[Dict[str, Any]]:
    if looks_like_json_array(value):
        value = parse_json_array(value)
    if isinstance(value, Mapping):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"expected a list of objects, got {type(value).__name__}")
    items: List[Dict[str, Any]] = []
    for item in value:
        if not isinstance(item, Mapping):
            raise ValueError(f"expected an object, got {type(item).__name__}")
        items.append(deepcopy(dict(item)))
    return items


_COERCERS: Dict[PropertyType, Callable[[Any], Any]] = {
    PropertyType.BOOL: _to_bool,
    PropertyType.INT: _to_int,
    PropertyType.STRING: _to_str,
    PropertyType.STRING_LIST: _to_str_list,
    PropertyType.STRING_MAP: _to_str_map,
    PropertyType.OBJECT_LIST: _to_object_list,
}


ENABLED = PropertySpec("enabled", PropertyType.BOOL, description="Liga ou desliga o trait")


@dataclass(frozen=True)
class TraitSchema:
    """
    Schema explícito de um trait.

    Invariantes:
        - `enabled` é sempre a primeira propriedade
        - nomes canônicos e aliases são únicos dentro do schema
    """

    trait_id: str
    properties: Tuple[PropertySpec, ...] = ()
    _index: Dict[str, PropertySpec] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        props = tuple(self.properties)
        if not any(p.name == ENABLED.name for p in props):
            props = (ENABLED,) + props
        object.__setattr__(self, "properties", props)

        index: Dict[str, PropertySpec] = {}
        for p in props:
            for key in {p.name, p.alias}:
                if key in index:
                    raise ValueError(f"duplicate property {key!r} in schema {self.trait_id!r}")
                index[key] = p
        object.__setattr__(self, "_index", index)

    @classmethod
    def of(cls, trait_id: str, *properties: PropertySpec) -> "TraitSchema":
        return cls(trait_id=trait_id, properties=tuple(properties))

    def names(self) -> List[str]:
        return [p.name for p in self.properties]

    def lookup(self, name: str) -> Optional[PropertySpec]:
        return self._index.get(name)

    def require(self, name: str, *, source: str = "") -> PropertySpec:
        spec = self.lookup(name)
        if spec is None:
            where = f" ({source})" if source else ""
            raise ConfigDecodeError(
                f"trait {self.trait_id!r} has no property {name!r}{where}"
            )
        return spec

    def coerce(self, spec: PropertySpec, value: Any, *, source: str = "") -> Any:
        try:
            return _COERCERS[spec.type](value)
        except ConfigDecodeError:
            raise
        except (TypeError, ValueError) as e:
            where = f" ({source})" if source else ""
            raise ConfigDecodeError(
                f"invalid value for {self.trait_id}.{spec.name}{where}: {e}"
            ) from e

    def decode(self, raw: Mapping[str, Any], *, source: str = "") -> Dict[str, Any]:
        """
        Converte um mapa cru de propriedades para valores tipados.

        Chaves são normalizadas para o nome canônico. Quando o nome
        canônico e o alias aparecem na mesma camada, prevalece o que
        aparecer por último.

        Raises:
            ConfigDecodeError: Propriedade desconhecida ou valor inválido.
        """
        decoded: Dict[str, Any] = {}
        for key, value in raw.items():
            spec = self.require(str(key), source=source)
            if value is None:
                continue
            decoded[spec.name] = self.coerce(spec, value, source=source)
        return decoded

    def defaults(self) -> Dict[str, Any]:
        return {p.name: deepcopy(p.default) for p in self.properties if p.default is not None}

    def with_defaults(self, props: Mapping[str, Any]) -> Dict[str, Any]:
        """Sobrepõe as propriedades resolvidas aos defaults declarados."""
        out = self.defaults()
        for k, v in props.items():
            out[k] = deepcopy(v)
        return out
