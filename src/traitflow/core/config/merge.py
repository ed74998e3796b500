"""
Merge por folha (leaf-level) de propriedades de traits.

Este módulo implementa a política oficial de merge usada pelo
`ConfigResolver` ao aplicar uma camada sobre a configuração acumulada
das camadas de menor precedência.

Política de merge (v1):
    - trait ausente no acumulado → copiado integralmente
    - dict (propriedade do tipo mapa) → merge recursivo por chave
    - list → sobrescrita total (uma lista é uma folha)
    - escalar → sobrescrita direta

Diferente de um replace por bloco, campos não mencionados pela camada
de maior precedência preservam o valor da camada anterior.

Invariantes:
    - A mesma entrada sempre produz a mesma saída
    - Nenhum input é mutado durante o processo
    - Exatamente um mapa de propriedades existe por trait id

Limites explícitos:
    - Não valida tipos (isso é responsabilidade do schema)
    - Não carrega arquivos
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigDecodeError


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Realiza um merge por folha entre dois mapas de propriedades.

    Args:
        base (Dict[str, Any]): Propriedades acumuladas (menor precedência).
        override (Dict[str, Any]): Propriedades da camada atual.

    Returns:
        Dict[str, Any]: Novo dicionário resultante.

    Raises:
        ConfigDecodeError: Se algum dos lados não for um dicionário.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigDecodeError(
            f"Merge requer dicts, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, override_value in override.items():
        base_value = result.get(key)

        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(base_value, override_value)
            continue

        result[key] = deepcopy(override_value)

    return result


def merge_capabilities(
    base: Dict[str, Dict[str, Any]],
    layer: Dict[str, Dict[str, Any]],
) -> Dict[str, Dict[str, Any]]:
    """Aplica os mapas de uma camada (trait id -> propriedades) sobre o acumulado."""
    result = {tid: deepcopy(props) for tid, props in base.items()}
    for trait_id, props in layer.items():
        result[trait_id] = deep_merge(result.get(trait_id, {}), props)
    return result
