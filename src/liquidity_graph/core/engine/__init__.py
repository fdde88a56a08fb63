# src/liquidity_graph/core/engine/__init__.py
"""
Execução de engines.

Componentes principais:
    - protocol    → contrato estrutural de uma engine (`compute`)
    - types       → status, resultado, entradas e saúde
    - context     → RunContext (log estruturado e warnings)
    - breaker     → circuit breaker por engine
    - coordinator → execução tier a tier com barreira entre tiers

Invariantes:
    - Uma engine só é invocada depois que todas as suas dependências
      terminaram com sucesso no mesmo ciclo
    - Cada engine é invocada no máximo uma vez por ciclo
"""

from .breaker import CircuitBreaker
from .context import COORDINATOR_ID, RunContext, new_run_context
from .coordinator import CycleResult, ExecutionCoordinator
from .protocol import Engine, PresentableEngine
from .types import (
    EngineHealth,
    EngineInputs,
    EngineResult,
    EngineStatus,
    HealthState,
    SystemHealth,
    SystemState,
)

__all__ = [
    "COORDINATOR_ID",
    "CircuitBreaker",
    "CycleResult",
    "Engine",
    "EngineHealth",
    "EngineInputs",
    "EngineResult",
    "EngineStatus",
    "ExecutionCoordinator",
    "HealthState",
    "PresentableEngine",
    "RunContext",
    "SystemHealth",
    "SystemState",
    "new_run_context",
]
