# src/liquidity_graph/core/graph/scheduler.py
"""
Scheduler topológico em tiers.

Este módulo particiona as engines do registry em tiers de execução:
    - tier(A) = 0 se A não tem dependências
    - tier(A) = 1 + max(tier(dep)) caso contrário

Essa é a camada canônica por caminho mais longo: cada engine fica no tier
mais baixo possível, e toda engine em um tier > 0 tem ao menos uma
dependência no tier imediatamente anterior.

Princípios fundamentais:
    - Mesmo conteúdo de registry produz sempre a mesma partição e ordem
    - Ciclos são reportados como resultado (com os ids do ciclo), não como
      partição parcial
    - Arestas inválidas nunca são ignoradas silenciosamente

Decisões arquiteturais:
    - DFS iterativa com três estados (não visitado / em progresso / concluído)
      e memoização dos tiers; sem limite de recursão
    - Travessia determinística: raízes por id asc, dependências por id asc
    - Dentro de um tier: priority desc, depois id asc
    - Dependência desconhecida ou auto-dependência em registry não validado
      levanta a exceção correspondente (fail-safe)

Limites explícitos:
    - Não executa engines
    - Não usa `pillar` nem `refresh_interval_ms`
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from liquidity_graph.core.exceptions import (
    CycleDetectedError,
    SelfDependencyError,
    UnknownDependencyError,
)

from .registry import Registry, display_order_key


TIER_LABELS: Tuple[str, ...] = (
    "foundation",
    "core",
    "advanced",
    "synthesis",
    "intelligence",
)


def tier_label(index: int) -> str:
    """Rótulo de exibição do tier; além dos cinco nomeados usa `tier-N`."""
    if index < 0:
        raise ValueError(f"tier index must be >= 0, got {index}")
    if index < len(TIER_LABELS):
        return TIER_LABELS[index]
    return f"tier-{index}"


@dataclass(frozen=True)
class TierResult:
    """
    Resultado do scheduler.

    Exatamente um dos dois estados:
        - sucesso: `tiers` preenchido, `cycle_path` vazio
        - ciclo: `tiers` vazio, `cycle_path` com os ids na ordem percorrida
    """

    tiers: Tuple[Tuple[str, ...], ...] = ()
    cycle_path: Tuple[str, ...] = ()

    @classmethod
    def success(cls, tiers: Sequence[Sequence[str]]) -> "TierResult":
        return cls(tiers=tuple(tuple(t) for t in tiers))

    @classmethod
    def cycle_detected(cls, path: Sequence[str]) -> "TierResult":
        if not path:
            raise ValueError("cycle path must not be empty")
        return cls(cycle_path=tuple(path))

    @property
    def has_cycle(self) -> bool:
        return bool(self.cycle_path)

    @property
    def is_ok(self) -> bool:
        return not self.has_cycle

    @property
    def cycle_members(self) -> frozenset:
        return frozenset(self.cycle_path)

    def tier_of(self, engine_id: str) -> Optional[int]:
        for index, tier in enumerate(self.tiers):
            if engine_id in tier:
                return index
        return None

    def execution_order(self) -> List[str]:
        return [engine_id for tier in self.tiers for engine_id in tier]

    def raise_for_cycle(self) -> None:
        """
        Raises:
            CycleDetectedError: Se o resultado representar um ciclo.
        """
        if self.has_cycle:
            raise CycleDetectedError.for_path(self.cycle_path)

    def __iter__(self) -> Iterator[Tuple[str, ...]]:
        return iter(self.tiers)


_IN_PROGRESS = 1
_DONE = 2


def compute_tiers(registry: Registry) -> TierResult:
    """
    Calcula a partição em tiers do registry.

    Args:
        registry (Registry): Registry carregado (idealmente já validado).

    Returns:
        TierResult: Partição em tiers, ou o ciclo encontrado.

    Raises:
        UnknownDependencyError: Se uma aresta apontar para id não registrado.
        SelfDependencyError: Se uma engine depender de si mesma.
    """
    state: Dict[str, int] = {}
    tier_number: Dict[str, int] = {}

    for root in sorted(registry.ids()):
        if root in state:
            continue

        state[root] = _IN_PROGRESS
        path: List[str] = [root]
        stack = [(root, iter(registry.dependencies_of(root)))]

        while stack:
            node, pending = stack[-1]
            descended = False

            for dep in pending:
                if dep == node:
                    raise SelfDependencyError.for_engine(node)
                if dep not in registry:
                    raise UnknownDependencyError.for_edge(node, dep)

                dep_state = state.get(dep)
                if dep_state is None:
                    state[dep] = _IN_PROGRESS
                    path.append(dep)
                    stack.append((dep, iter(registry.dependencies_of(dep))))
                    descended = True
                    break
                if dep_state == _IN_PROGRESS:
                    return TierResult.cycle_detected(path[path.index(dep):])

            if descended:
                continue

            deps = registry.dependencies_of(node)
            tier_number[node] = 1 + max(tier_number[d] for d in deps) if deps else 0
            state[node] = _DONE
            stack.pop()
            path.pop()

    if not tier_number:
        return TierResult.success([])

    buckets: List[List[str]] = [[] for _ in range(max(tier_number.values()) + 1)]
    for engine_id, index in tier_number.items():
        buckets[index].append(engine_id)

    ordered = [
        [d.id for d in sorted((registry.get(i) for i in bucket), key=display_order_key)]
        for bucket in buckets
    ]
    return TierResult.success(ordered)
