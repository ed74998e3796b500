"""
Resolução da configuração efetiva de traits a partir de camadas.

Este módulo implementa o `ConfigResolver`, responsável por combinar as
camadas de configuração (plataforma, kit, instância e anotações) em uma
única `CapabilityConfig` tipada e determinística.

Política de resolução (v1):
    - camadas são aplicadas em ordem fixa de precedência
      PLATFORM < KIT < INSTANCE < ANNOTATIONS, independente da ordem
      de entrega; camadas do mesmo tipo mantêm a ordem recebida
    - cada mapa de propriedades é decodificado pelo schema do trait
      antes do merge por folha
    - ids de trait desconhecidos são ignorados em qualquer camada
    - propriedades desconhecidas de traits conhecidos são descartadas nas
      camadas de trait (registradas em `ignored`) e são erro nas anotações

Camada de trait (PLATFORM, KIT, INSTANCE):
    - bloco legado `configuration` é elevado ao topo (topo prevalece)
    - bloco `addons` é aplicado antes dos mapas de topo da mesma camada
    - valores `{{configmap:<nome>/<chave>}}` são resolvidos contra o
      snapshot de ConfigMaps fornecido pelo chamador

Camada de anotações:
    - ocorrências repetidas de uma propriedade lista são agregadas na
      ordem de encontro (duplicatas preservadas)
    - um único valor em formato de array JSON substitui a lista inteira
    - entre camadas, a lista da camada de maior precedência substitui
      a anterior (a lista é uma folha)
    - valores `{{configmap:...}}` são resolvidos como nas camadas de trait

Invariantes:
    - A mesma entrada sempre produz a mesma configuração
    - Nenhuma camada é mutada
    - Qualquer erro de decodificação invalida toda a resolução

Limites explícitos:
    - Não executa traits
    - Não carrega arquivos (ver `loader`)
"""

from __future__ import annotations

import re
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .annotations import (
    TRAIT_ANNOTATION_PREFIX,
    AnnotationOverride,
    index_of,
    looks_like_json_array,
    parse_annotations,
    parse_json_array,
    split_property_path,
)
from .errors import ConfigDecodeError
from .hashing import compute_config_hash
from .layers import ConfigLayer, LayerKind, order_layers
from .merge import deep_merge, merge_capabilities
from .schema import PropertySpec, PropertyType, TraitSchema


LEGACY_CONFIGURATION_KEY = "configuration"
ADDONS_KEY = "addons"

_CONFIGMAP_REF = re.compile(r"\{\{configmap:([a-z0-9-]+)/([a-zA-Z0-9._-]+)\}\}")

_UNSET = object()


@dataclass(frozen=True)
class CapabilityConfig:
    """
    Configuração resolvida: trait id → propriedades explicitamente definidas.

    Defaults declarados no schema NÃO são materializados aqui; os traits
    os aplicam via `TraitSchema.with_defaults`.
    """

    traits: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def get(self, trait_id: str) -> Dict[str, Any]:
        return deepcopy(self.traits.get(trait_id, {}))

    def has(self, trait_id: str) -> bool:
        return trait_id in self.traits

    def is_set(self, trait_id: str, prop: str) -> bool:
        return prop in self.traits.get(trait_id, {})

    def ids(self) -> List[str]:
        return sorted(self.traits)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {tid: deepcopy(props) for tid, props in sorted(self.traits.items())}

    def hash(self) -> str:
        return compute_config_hash(self.to_dict())


class ConfigResolver:
    """
    Resolve camadas de configuração contra os schemas do catálogo.

    Args:
        schemas: mapa `trait id -> TraitSchema` (tipicamente `catalog.schemas`).
        configmaps: snapshot `nome -> {chave: valor}` para valores dinâmicos.
        annotation_prefix: prefixo das anotações de traits.
    """

    def __init__(
        self,
        schemas: Mapping[str, TraitSchema],
        *,
        configmaps: Optional[Mapping[str, Mapping[str, str]]] = None,
        annotation_prefix: str = TRAIT_ANNOTATION_PREFIX,
    ):
        self.schemas: Dict[str, TraitSchema] = dict(schemas)
        self.configmaps: Dict[str, Dict[str, str]] = {
            name: dict(data) for name, data in (configmaps or {}).items()
        }
        self.annotation_prefix = annotation_prefix
        self.ignored: List[Dict[str, str]] = []

    @classmethod
    def for_catalog(cls, catalog: Any, **kwargs: Any) -> "ConfigResolver":
        return cls(catalog.schemas, **kwargs)

    def resolve(self, layers: Sequence[ConfigLayer]) -> CapabilityConfig:
        self.ignored = []
        accumulated: Dict[str, Dict[str, Any]] = {}
        for layer in order_layers(layers):
            decoded = self.decode_layer(layer)
            accumulated = merge_capabilities(accumulated, decoded)
        return CapabilityConfig(traits=accumulated)

    def decode_layer(self, layer: ConfigLayer) -> Dict[str, Dict[str, Any]]:
        if layer.kind is LayerKind.ANNOTATIONS:
            return self._decode_annotations(layer)
        return self._decode_traits(layer)

    # -----------------------------
    # Trait layers
    # -----------------------------
    def _decode_traits(self, layer: ConfigLayer) -> Dict[str, Dict[str, Any]]:
        bags: List[Tuple[str, Any]] = []

        addons = layer.traits.get(ADDONS_KEY)
        if addons is not None:
            if not isinstance(addons, Mapping):
                raise ConfigDecodeError(
                    f"{layer.source}: '{ADDONS_KEY}' must be a map, got {type(addons).__name__}"
                )
            bags.extend((str(tid), bag) for tid, bag in addons.items())

        bags.extend((str(tid), bag) for tid, bag in layer.traits.items() if tid != ADDONS_KEY)

        result: Dict[str, Dict[str, Any]] = {}
        for trait_id, bag in bags:
            schema = self.schemas.get(trait_id)
            if schema is None:
                continue
            if bag is None:
                bag = {}
            if not isinstance(bag, Mapping):
                raise ConfigDecodeError(
                    f"{layer.source}: trait {trait_id!r} must be a map, got {type(bag).__name__}"
                )
            raw = lift_legacy_configuration(dict(bag), trait_id=trait_id, source=layer.source)
            raw = self._drop_unknown(raw, schema, source=layer.source)
            raw = self.resolve_dynamic_values(raw, trait_id=trait_id)
            decoded = schema.decode(raw, source=layer.source)
            result[trait_id] = deep_merge(result.get(trait_id, {}), decoded)
        return result

    def _drop_unknown(self, raw: Dict[str, Any], schema: TraitSchema, *, source: str) -> Dict[str, Any]:
        kept: Dict[str, Any] = {}
        for key, value in raw.items():
            if schema.lookup(str(key)) is None:
                self.ignored.append({"trait_id": schema.trait_id, "property": str(key), "source": source})
                continue
            kept[key] = value
        return kept

    def resolve_dynamic_values(self, raw: Dict[str, Any], *, trait_id: str) -> Dict[str, Any]:
        """Substitui referências `{{configmap:nome/chave}}` pelos valores do snapshot."""
        return {k: self._resolve_value(v, trait_id=trait_id, prop=k) for k, v in raw.items()}

    def _resolve_value(self, value: Any, *, trait_id: str, prop: str) -> Any:
        if isinstance(value, list):
            return [self._resolve_value(v, trait_id=trait_id, prop=prop) for v in value]
        if not isinstance(value, str):
            return value
        match = _CONFIGMAP_REF.search(value)
        if match is None:
            return value

        name, key = match.group(1), match.group(2)
        data = self.configmaps.get(name)
        if data is None:
            raise ConfigDecodeError(
                f"could not find configmap {name!r} for {trait_id}.{prop}"
            )
        looked_up = data.get(key)
        if not looked_up:
            raise ConfigDecodeError(
                f"configmap {name!r} has no value for key {key!r} ({trait_id}.{prop})"
            )
        return _scalar_from_string(looked_up)

    # -----------------------------
    # Annotations layer
    # -----------------------------
    def _decode_annotations(self, layer: ConfigLayer) -> Dict[str, Dict[str, Any]]:
        overrides = parse_annotations(layer.annotations, self.annotation_prefix)

        raw_by_trait: Dict[str, Dict[str, Any]] = {}
        for ov in overrides:
            schema = self.schemas.get(ov.trait_id)
            if schema is None:
                continue
            raw = raw_by_trait.setdefault(ov.trait_id, {})
            _apply_override(schema, raw, ov, source=layer.source)

        result: Dict[str, Dict[str, Any]] = {}
        for trait_id, raw in raw_by_trait.items():
            schema = self.schemas[trait_id]
            for name, value in raw.items():
                if isinstance(value, list) and any(v is _UNSET for v in value):
                    raise ConfigDecodeError(
                        f"{layer.source}: list {trait_id}.{name} has unset positions"
                    )
            raw = self.resolve_dynamic_values(raw, trait_id=trait_id)
            result[trait_id] = schema.decode(raw, source=layer.source)
        return result


def lift_legacy_configuration(
    raw: Dict[str, Any],
    *,
    trait_id: str = "",
    source: str = "",
) -> Dict[str, Any]:
    """
    Eleva o bloco legado `configuration` para o nível de topo.

    Chaves de topo prevalecem sobre as do bloco legado. Uma chave
    `configuration` aninhada é renomeada para `config`.
    """
    if LEGACY_CONFIGURATION_KEY not in raw:
        return raw

    out = dict(raw)
    legacy = out.pop(LEGACY_CONFIGURATION_KEY)
    if legacy is None:
        return out
    if not isinstance(legacy, Mapping):
        raise ConfigDecodeError(
            f"{source}: legacy '{LEGACY_CONFIGURATION_KEY}' of trait {trait_id!r} must be a map"
        )

    legacy = dict(legacy)
    if LEGACY_CONFIGURATION_KEY in legacy:
        legacy["config"] = legacy.pop(LEGACY_CONFIGURATION_KEY)

    for k, v in legacy.items():
        if out.get(k) is None:
            out[k] = v
    return out


def _scalar_from_string(value: str) -> Any:
    try:
        return int(value)
    except ValueError:
        pass
    lowered = value.strip()
    if lowered in ("true", "True", "TRUE", "t", "T"):
        return True
    if lowered in ("false", "False", "FALSE", "f", "F"):
        return False
    return value


def _apply_override(
    schema: TraitSchema,
    raw: Dict[str, Any],
    ov: AnnotationOverride,
    *,
    source: str,
) -> None:
    segments = split_property_path(ov.property_path)
    spec: PropertySpec = schema.require(segments[0], source=f"{source}: {ov.key}")
    name = spec.name
    rest = segments[1:]

    if not rest:
        if spec.type.is_list:
            if looks_like_json_array(ov.value):
                raw[name] = parse_json_array(ov.value)
            else:
                current = raw.get(name)
                if not isinstance(current, list):
                    current = []
                current.append(ov.value)
                raw[name] = current
        else:
            raw[name] = ov.value
        return

    if spec.type is PropertyType.STRING_MAP:
        if index_of(rest[0]) is not None:
            raise ConfigDecodeError(f"{source}: {ov.key}: {name} is a map, not a list")
        current = raw.get(name)
        if not isinstance(current, dict):
            current = {}
        current[ov.property_path[ov.property_path.index(".") + 1:]] = ov.value
        raw[name] = current
        return

    if spec.type.is_list:
        idx = index_of(rest[0])
        if idx is None:
            raise ConfigDecodeError(f"{source}: {ov.key}: {name} is a list, expected an index")
        current = raw.get(name)
        if not isinstance(current, list):
            current = []
        while len(current) <= idx:
            current.append(_UNSET)
        tail = rest[1:]
        if spec.type is PropertyType.STRING_LIST:
            if tail:
                raise ConfigDecodeError(f"{source}: {ov.key}: {name} items are scalars")
            current[idx] = ov.value
        else:
            if not tail:
                raise ConfigDecodeError(f"{source}: {ov.key}: {name} items are objects")
            item = current[idx] if isinstance(current[idx], dict) else {}
            _set_nested(item, tail, ov.value, key=ov.key, source=source)
            current[idx] = item
        raw[name] = current
        return

    raise ConfigDecodeError(
        f"{source}: {ov.key}: property {name!r} of type {spec.type.value} has no sub-properties"
    )


def _set_nested(target: Dict[str, Any], path: List[str], value: str, *, key: str, source: str) -> None:
    node = target
    for seg in path[:-1]:
        if index_of(seg) is not None:
            raise ConfigDecodeError(f"{source}: {key}: nested lists are not supported")
        child = node.get(seg)
        if not isinstance(child, dict):
            child = {}
            node[seg] = child
        node = child
    leaf = path[-1]
    if index_of(leaf) is not None:
        raise ConfigDecodeError(f"{source}: {key}: nested lists are not supported")
    node[leaf] = value
