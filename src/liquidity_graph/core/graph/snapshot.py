# src/liquidity_graph/core/graph/snapshot.py
"""
Snapshot publicado do grafo (registry + tiers).

Atualizar o registry e recalcular tiers precisa ser uma única operação
visível: quem lê o snapshot nunca vê um registry novo com tiers antigos.

Decisões arquiteturais:
    - `build_snapshot` executa carga -> validação -> tiers; qualquer
      problema levanta exceção e nenhum snapshot parcial é criado
    - `SnapshotStore` guarda o último snapshot válido (last-known-good) e
      troca a referência sob lock
    - Falha de publicação mantém o snapshot corrente e re-levanta o erro

Invariantes:
    - Todo snapshot publicado tem grafo validado e acíclico
    - `snapshot.fingerprint == snapshot.registry.fingerprint()`
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple, Union

from liquidity_graph.core.catalog.descriptor import EngineDescriptor
from liquidity_graph.core.catalog.loader import load_catalog
from liquidity_graph.core.config.loader import PathLike

from .registry import Registry
from .scheduler import TierResult, compute_tiers, tier_label
from .validator import ensure_valid


@dataclass(frozen=True)
class GraphSnapshot:
    registry: Registry
    tiers: TierResult
    fingerprint: str
    built_at: str

    def tier_of(self, engine_id: str) -> Optional[int]:
        return self.tiers.tier_of(engine_id)

    def execution_order(self) -> List[str]:
        return self.tiers.execution_order()


def build_snapshot(source: Union[Registry, Iterable[EngineDescriptor]]) -> GraphSnapshot:
    """
    Constrói um snapshot validado.

    Args:
        source: Registry já carregado ou sequência de descriptors.

    Raises:
        DuplicateIdError: Se houver ids duplicados.
        GraphValidationError: Com TODOS os problemas de aresta encontrados.
        CycleDetectedError: Se o grafo contiver ciclo.
    """
    registry = source if isinstance(source, Registry) else Registry.load(source)
    ensure_valid(registry)

    tiers = compute_tiers(registry)
    tiers.raise_for_cycle()

    return GraphSnapshot(
        registry=registry,
        tiers=tiers,
        fingerprint=registry.fingerprint(),
        built_at=datetime.now(timezone.utc).isoformat(),
    )


def load_snapshot(catalog_path: Optional[PathLike] = None) -> GraphSnapshot:
    """Carrega o catálogo (embarcado por padrão) e constrói o snapshot."""
    return build_snapshot(load_catalog(catalog_path))


class SnapshotStore:
    """
    Holder thread-safe do snapshot corrente.

    `current` é lido sem lock (troca de referência é atômica); `publish` e
    `replace_descriptor` serializam escritores.
    """

    def __init__(self, initial: Optional[GraphSnapshot] = None) -> None:
        self._lock = threading.Lock()
        self._current = initial

    @property
    def current(self) -> Optional[GraphSnapshot]:
        return self._current

    def require(self) -> GraphSnapshot:
        snapshot = self._current
        if snapshot is None:
            raise LookupError("No engine graph snapshot has been published")
        return snapshot

    def publish(self, source: Union[Registry, Iterable[EngineDescriptor]]) -> GraphSnapshot:
        with self._lock:
            snapshot = build_snapshot(source)
            self._current = snapshot
            return snapshot

    def replace_descriptor(self, descriptor: EngineDescriptor) -> GraphSnapshot:
        """Substitui um descriptor e republica com revalidação completa."""
        with self._lock:
            base = self._current.registry if self._current is not None else Registry.load([])
            snapshot = build_snapshot(base.replace(descriptor))
            self._current = snapshot
            return snapshot


# ---------------------------------------------------------------------------
# Plano de execução
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExecutionPhase:
    """Uma fase do plano: um tier com seus ids e metadados agregados."""

    index: int
    label: str
    engine_ids: Tuple[str, ...]
    upstream: Tuple[str, ...]
    max_refresh_interval_ms: int

    def to_dict(self):
        return {
            "index": self.index,
            "label": self.label,
            "engine_ids": list(self.engine_ids),
            "upstream": list(self.upstream),
            "max_refresh_interval_ms": self.max_refresh_interval_ms,
        }


def plan_summary(snapshot: GraphSnapshot) -> List[ExecutionPhase]:
    phases: List[ExecutionPhase] = []
    registry = snapshot.registry
    for index, tier in enumerate(snapshot.tiers.tiers):
        descriptors = [registry.get(i) for i in tier]
        upstream = sorted({dep for d in descriptors for dep in d.dependencies})
        phases.append(
            ExecutionPhase(
                index=index,
                label=tier_label(index),
                engine_ids=tuple(tier),
                upstream=tuple(upstream),
                max_refresh_interval_ms=max((d.refresh_interval_ms for d in descriptors), default=0),
            )
        )
    return phases
