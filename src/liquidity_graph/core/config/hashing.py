# src/liquidity_graph/core/config/hashing.py
"""
Fingerprint canônico de documentos de configuração.

O mesmo hash identifica a configuração efetiva do coordinator e o conteúdo
do catálogo de engines. Ele é gravado no manifest de cada ciclo, o que
permite responder "qual grafo estava publicado quando este resultado foi
produzido".

Política (v1):
    - JSON canônico (chaves ordenadas, separadores compactos, UTF-8)
    - SHA-256 em hexadecimal

Limites explícitos:
    - Não normaliza a ordem de listas; quem chama deve ordená-las
"""

import hashlib
import json
from typing import Any, Dict


def canonical_json(document: Dict[str, Any]) -> str:
    return json.dumps(
        document,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera o hash SHA-256 determinístico de um documento.

    Args:
        config (Dict[str, Any]): Documento já resolvido (config ou catálogo).

    Returns:
        str: Hash hexadecimal de 64 caracteres.

    Raises:
        TypeError: Se o documento não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Documento para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    return hashlib.sha256(canonical_json(config).encode("utf-8")).hexdigest()
