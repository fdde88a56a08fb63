# src/liquidity_graph/core/graph/__init__.py
"""
Grafo de dependências entre engines: registry, validação, tiers e snapshot.

Estas camadas são puras (sem I/O e sem threads), exceto `SnapshotStore`,
que serializa publicações concorrentes.
"""

from .registry import Registry
from .scheduler import TIER_LABELS, TierResult, compute_tiers, tier_label
from .snapshot import (
    ExecutionPhase,
    GraphSnapshot,
    SnapshotStore,
    build_snapshot,
    load_snapshot,
    plan_summary,
)
from .validator import ensure_valid, validate

__all__ = [
    "ExecutionPhase",
    "GraphSnapshot",
    "Registry",
    "SnapshotStore",
    "TIER_LABELS",
    "TierResult",
    "build_snapshot",
    "compute_tiers",
    "ensure_valid",
    "load_snapshot",
    "plan_summary",
    "tier_label",
    "validate",
]
