"""
Hashing canônico de estruturas do traitflow.

Este módulo implementa a geração de hash determinístico da configuração
resolvida e da coleção de recursos produzida por uma passada do pipeline.

O hash é a base do requisito de determinismo: o sistema externo compara
saídas sucessivas para decidir se alguma mudança real de infraestrutura
é necessária.

Política de hashing (v1):
    - Serialização JSON canônica
    - Ordenação estável de chaves
    - Separadores compactos
    - Codificação UTF-8
    - SHA-256

Limites explícitos:
    - Não carrega nem resolve configuração
    - Não persiste o hash
"""

import hashlib
import json
from typing import Any, Dict, List


def _canonical_json(value: Any) -> str:
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico de uma configuração resolvida.

    Invariantes:
        - O valor retornado é uma string hexadecimal de 64 caracteres
        - Configurações estruturalmente equivalentes produzem o mesmo hash
        - Nenhuma mutação ocorre sobre o input

    Args:
        config (Dict[str, Any]): Configuração resolvida (trait id -> propriedades).

    Returns:
        str: Hash SHA-256 hexadecimal.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    return hashlib.sha256(_canonical_json(config).encode("utf-8")).hexdigest()


def compute_resources_digest(resources: List[Dict[str, Any]]) -> str:
    """Hash de uma lista ordenada de recursos (a ordem participa do hash)."""
    if not isinstance(resources, list):
        raise TypeError(
            f"Recursos para hashing devem ser list, recebido: {type(resources).__name__}"
        )
    return hashlib.sha256(_canonical_json(resources).encode("utf-8")).hexdigest()
