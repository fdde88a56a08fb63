# src/liquidity_graph/core/graph/validator.py
"""
Validação estrutural do grafo de dependências.

O validator percorre TODAS as arestas do registry e reporta todos os
problemas de uma vez, para que o operador corrija o catálogo em uma única
passada.

Decisões arquiteturais:
    - `validate()` nunca levanta para dependências inválidas; devolve a lista
    - Cada dependência ausente gera um `UnknownDependencyError`
    - Cada auto-dependência gera um `SelfDependencyError`
    - `ensure_valid()` é o atalho fail-fast que agrega tudo em
      `GraphValidationError`

Invariantes:
    - Lista vazia se e somente se toda aresta aponta para um id registrado
      e nenhuma engine depende de si mesma
    - Ordem dos erros: engine id asc, depois dependência asc

Limites explícitos:
    - Não detecta ciclos com mais de um nó (ver `scheduler`)
    - Não modifica o registry
"""

from __future__ import annotations

from typing import List

from liquidity_graph.core.exceptions import (
    GraphError,
    GraphValidationError,
    SelfDependencyError,
    UnknownDependencyError,
)

from .registry import Registry


def validate(registry: Registry) -> List[GraphError]:
    """
    Lista todas as violações de aresta do registry.

    Args:
        registry (Registry): Registry já carregado.

    Returns:
        List[GraphError]: Erros encontrados; vazia quando o grafo é consistente.
    """
    errors: List[GraphError] = []
    for engine_id in sorted(registry.ids()):
        for dep in registry.dependencies_of(engine_id):
            if dep == engine_id:
                errors.append(SelfDependencyError.for_engine(engine_id))
            elif dep not in registry:
                errors.append(UnknownDependencyError.for_edge(engine_id, dep))
    return errors


def ensure_valid(registry: Registry) -> None:
    """
    Raises:
        GraphValidationError: Se `validate()` encontrar qualquer problema.
    """
    errors = validate(registry)
    if errors:
        raise GraphValidationError.from_errors(errors)
