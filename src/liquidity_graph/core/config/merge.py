# src/liquidity_graph/core/config/merge.py
"""
Deep-merge estrito entre configuração base e overrides locais.

Um override local costuma mexer em poucas chaves (ex.: desligar uma engine
ou reduzir `max_workers` em desenvolvimento). O merge precisa preservar o
restante dos defaults sem reinterpretar tipos.

Política de merge (v1):
    - dict + dict → merge recursivo por chave
    - list        → substituição integral
    - escalar     → substituição direta
    - tipos distintos → ConfigTypeConflictError
    - int sobre float (ex.: `reset_after_s: 5` sobre `60.0`) é aceito

Invariantes:
    - Inputs nunca são mutados
    - O mesmo par (base, override) sempre produz o mesmo resultado
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def _compatible(base_value: Any, override_value: Any) -> bool:
    if type(base_value) is type(override_value):
        return True
    # YAML não distingue "60" de "60.0" para o autor do override
    if isinstance(base_value, float) and isinstance(override_value, int) and not isinstance(override_value, bool):
        return True
    return False


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Combina `base` e `override` em um novo dicionário.

    Args:
        base (Dict[str, Any]): Configuração base (defaults).
        override (Dict[str, Any]): Overrides explícitos.

    Returns:
        Dict[str, Any]: Nova configuração resultante.

    Raises:
        ConfigTypeConflictError: Se uma chave mudar de tipo entre base e override.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, override_value in override.items():
        if key not in result:
            result[key] = deepcopy(override_value)
            continue

        base_value = result[key]

        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(base_value, override_value)
            continue

        if isinstance(base_value, list) and isinstance(override_value, list):
            result[key] = deepcopy(override_value)
            continue

        if not _compatible(base_value, override_value):
            raise ConfigTypeConflictError(
                f"Conflito de tipo na chave '{key}': "
                f"{type(base_value).__name__} vs {type(override_value).__name__}"
            )

        result[key] = deepcopy(override_value)

    return result
