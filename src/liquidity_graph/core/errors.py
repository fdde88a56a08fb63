"""
LIQUIDITY² Graph: Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do grafo de engines.
Erros estruturais (grafo) e erros de execução (engine) são artefatos
operacionais do sistema e devem ser serializáveis, estáveis e acionáveis
pelo operador que corrige o catálogo.

Nenhuma correção implícita é aplicada.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Iterable, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Grafo / Catálogo
GRAPH_DUPLICATE_ID = "GRAPH_DUPLICATE_ID"
GRAPH_UNKNOWN_DEPENDENCY = "GRAPH_UNKNOWN_DEPENDENCY"
GRAPH_SELF_DEPENDENCY = "GRAPH_SELF_DEPENDENCY"
GRAPH_CYCLE_DETECTED = "GRAPH_CYCLE_DETECTED"
GRAPH_INVALID_DESCRIPTOR = "GRAPH_INVALID_DESCRIPTOR"
GRAPH_VALIDATION_FAILED = "GRAPH_VALIDATION_FAILED"

# Engine / Execução
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"
ENGINE_UPSTREAM_UNAVAILABLE = "ENGINE_UPSTREAM_UNAVAILABLE"
ENGINE_CIRCUIT_OPEN = "ENGINE_CIRCUIT_OPEN"
ENGINE_TIMEOUT = "ENGINE_TIMEOUT"
COORDINATOR_LIFECYCLE_ERROR = "COORDINATOR_LIFECYCLE_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica (erros de execução)
# ---------------------------------------------------------------------------

def engine_execution_error(
    *,
    engine_id: str,
    exc: BaseException,
    hint: str = "Verifique a implementação da engine e os indicadores recebidos. Nenhum fallback é aplicado automaticamente.",
) -> ErrorPayload:
    return ErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message=str(exc) or "Falha inesperada durante o cálculo da engine",
        details={
            "engine_id": engine_id,
            "exception_class": exc.__class__.__name__,
        },
        hint=hint,
    )


def engine_configuration_error(
    *,
    engine_id: str,
    message: str = "Engine retornou tipo inválido",
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Ajuste a engine para retornar EngineResult",
) -> ErrorPayload:
    merged: Dict[str, Any] = {"engine_id": engine_id}
    merged.update(details or {})
    return ErrorPayload(
        type=ENGINE_CONFIGURATION_ERROR,
        message=message,
        details=merged,
        hint=hint,
    )


def upstream_unavailable(
    *,
    engine_id: str,
    unavailable: Iterable[str],
) -> ErrorPayload:
    missing = sorted(unavailable)
    return ErrorPayload(
        type=ENGINE_UPSTREAM_UNAVAILABLE,
        message="Dependências upstream sem resultado neste ciclo",
        details={
            "engine_id": engine_id,
            "unavailable_dependencies": missing,
        },
        hint="Corrija as engines upstream listadas; esta engine não foi executada.",
    )


def circuit_open(
    *,
    engine_id: str,
    failures: int,
    retry_in_s: float,
) -> ErrorPayload:
    return ErrorPayload(
        type=ENGINE_CIRCUIT_OPEN,
        message="Circuit breaker aberto para a engine",
        details={
            "engine_id": engine_id,
            "consecutive_failures": failures,
            "retry_in_s": round(max(0.0, retry_in_s), 3),
        },
        hint="A engine falhou repetidamente; aguarde a janela de reset ou corrija a causa.",
    )


def engine_timeout(
    *,
    engine_id: str,
    timeout_s: float,
) -> ErrorPayload:
    return ErrorPayload(
        type=ENGINE_TIMEOUT,
        message="Engine excedeu o tempo limite do ciclo",
        details={
            "engine_id": engine_id,
            "timeout_s": timeout_s,
        },
        hint="Aumente coordinator.engine_timeout_s ou investigue a lentidão da engine.",
    )
