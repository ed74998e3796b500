"""
Coleção de recursos produzidos por uma passada do pipeline.

Um recurso é um `dict` com, no mínimo, `kind` e `metadata.name` (e,
opcionalmente, `apiVersion`). A coleção preserva a ordem de inserção e é
indexada por `(apiVersion, kind, nome)`.

Invariantes:
    - Uma chave `(apiVersion, kind, nome)` aparece no máximo uma vez
    - A ordem de iteração é a ordem de inserção
    - O digest depende apenas do conteúdo e da ordem

Limites explícitos:
    - Não valida o schema dos recursos além de `kind` e `metadata.name`
    - Não aplica recursos em nenhum cluster
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from ..config.hashing import compute_resources_digest


Resource = Dict[str, Any]
ResourceKey = Tuple[str, str, str]


def resource_key(resource: Resource) -> ResourceKey:
    if not isinstance(resource, dict):
        raise TypeError(f"resource must be a dict, got {type(resource).__name__}")
    kind = resource.get("kind")
    name = (resource.get("metadata") or {}).get("name")
    if not isinstance(kind, str) or not kind:
        raise ValueError("resource must declare a non-empty 'kind'")
    if not isinstance(name, str) or not name:
        raise ValueError(f"resource of kind {kind!r} must declare 'metadata.name'")
    return str(resource.get("apiVersion") or ""), kind, name


def _matches(key: ResourceKey, kind: str, name: Optional[str], api_version: Optional[str]) -> bool:
    api, k, n = key
    if k != kind:
        return False
    if name is not None and n != name:
        return False
    return api_version is None or api == api_version


class ResourceCollection:
    """Coleção ordenada e tipada por `kind` dos recursos gerados."""

    def __init__(self, resources: Optional[Iterable[Resource]] = None):
        self._items: Dict[ResourceKey, Resource] = {}
        for r in resources or ():
            self.add(r)

    def add(self, resource: Resource) -> None:
        """Adiciona ou substitui (mantendo a posição original) um recurso."""
        self._items[resource_key(resource)] = resource

    def add_all(self, resources: Iterable[Resource]) -> None:
        for r in resources:
            self.add(r)

    def get(self, kind: str, name: str, *, api_version: Optional[str] = None) -> Optional[Resource]:
        for key, r in self._items.items():
            if _matches(key, kind, name, api_version):
                return r
        return None

    def remove(self, kind: str, name: str, *, api_version: Optional[str] = None) -> Optional[Resource]:
        for key in list(self._items):
            if _matches(key, kind, name, api_version):
                return self._items.pop(key)
        return None

    def by_kind(self, kind: str, *, api_version: Optional[str] = None) -> List[Resource]:
        return [r for key, r in self._items.items() if _matches(key, kind, None, api_version)]

    def first(self, kind: str, *, api_version: Optional[str] = None) -> Optional[Resource]:
        found = self.by_kind(kind, api_version=api_version)
        return found[0] if found else None

    def visit(self, fn: Callable[[Resource], None], *, kind: Optional[str] = None) -> None:
        for r in list(self._items.values()):
            if kind is None or r.get("kind") == kind:
                fn(r)

    def items(self) -> List[Resource]:
        return list(self._items.values())

    def kinds(self) -> List[str]:
        return [k for _, k, _ in self._items]

    def digest(self) -> str:
        return compute_resources_digest(self.items())

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Resource]:
        return iter(self.items())
