# src/liquidity_graph/__init__.py
"""
LIQUIDITY² Graph: registry, scheduler em tiers e coordinator das engines
do terminal de liquidez.

Arquitetura em alto nível:
    - core.catalog      → descriptors e leitura do catálogo de engines
    - core.graph        → registry, validação, tiers e snapshot publicado
    - core.engine       → coordinator, circuit breaker, tipos de resultado
    - core.config       → defaults + overrides, hashing, settings tipados
    - core.traceability → manifest de ciclo e Event Log
    - report            → diagnósticos em Markdown

Limites explícitos:
    - Não contém as fórmulas das engines
    - Não renderiza UI nem busca dados de mercado
"""

from .core.catalog import EngineDescriptor, load_catalog
from .core.engine import (
    EngineInputs,
    EngineResult,
    EngineStatus,
    ExecutionCoordinator,
    RunContext,
    new_run_context,
)
from .core.graph import (
    Registry,
    SnapshotStore,
    TierResult,
    build_snapshot,
    compute_tiers,
    load_snapshot,
    validate,
)
from .version import __version__

__all__ = [
    "EngineDescriptor",
    "EngineInputs",
    "EngineResult",
    "EngineStatus",
    "ExecutionCoordinator",
    "Registry",
    "RunContext",
    "SnapshotStore",
    "TierResult",
    "__version__",
    "build_snapshot",
    "compute_tiers",
    "load_catalog",
    "load_snapshot",
    "new_run_context",
    "validate",
]
