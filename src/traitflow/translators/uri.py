"""
Utilitários de URIs de endpoints Camel.

Uma URI de endpoint tem a forma `<scheme>:<path>?<k1>=<v1>&<k2>=<v2>`.
O caminho pode começar com `//`, que é descartado. Valores da query são
decodificados como formulário (`+` vira espaço, `%XX` é decodificado).

Regras:
    - chaves vazias são ignoradas
    - para chaves repetidas, vale a primeira ocorrência
    - sequência `%` inválida ou `;` na query → MalformedURIError
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Optional
from urllib.parse import unquote, unquote_plus


_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class MalformedURIError(ValueError):
    """URI com codificação de query inválida."""


@dataclass(frozen=True)
class ParsedURI:
    scheme: str
    path: str = ""
    params: Dict[str, str] = field(default_factory=dict)

    def param(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.params.get(name, default)


def get_component(uri: str) -> str:
    """Retorna o scheme (componente) da URI, ou string vazia se não houver."""
    idx = uri.find(":")
    if idx <= 0:
        return ""
    return uri[:idx]


def _decode(value: str, *, uri: str, plus: bool = True) -> str:
    if _BAD_ESCAPE.search(value):
        raise MalformedURIError(f"invalid escape sequence in {uri!r}")
    return unquote_plus(value) if plus else unquote(value)


def parse_query(query: str, *, uri: str = "") -> Dict[str, str]:
    params: Dict[str, str] = {}
    if not query:
        return params
    if ";" in query:
        raise MalformedURIError(f"invalid semicolon separator in query of {uri!r}")

    for pair in query.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        key = _decode(key, uri=uri)
        if not key:
            continue
        params.setdefault(key, _decode(value, uri=uri))
    return params


def parse_uri(uri: str) -> ParsedURI:
    """
    Separa uma URI em (scheme, path, params).

    Raises:
        MalformedURIError: Se a query possuir codificação inválida.
    """
    scheme = get_component(uri)
    rest = uri[len(scheme) + 1:] if scheme else uri
    path, _, query = rest.partition("?")
    if path.startswith("//"):
        path = path[2:]
    return ParsedURI(scheme=scheme, path=_decode(path, uri=uri, plus=False), params=parse_query(query, uri=uri))


def get_query_parameter(uri: str, name: str) -> str:
    """Valor de um parâmetro da query, ou string vazia se ausente."""
    return parse_uri(uri).params.get(name, "")
