"""
LIQUIDITY² Graph: Canonical Exceptions (v1)

Este módulo define as exceções tipadas do grafo de engines e do coordinator.

Objetivo:
- Permitir que Registry, Validator, Scheduler e Coordinator sinalizem
  violações estruturais com dados estruturados (nunca texto solto)
- Facilitar o mapeamento determinístico para ErrorPayload
- Permitir que o Validator *retorne* erros (diagnóstico completo) e que o
  Scheduler os *levante* (fail-safe) usando os mesmos tipos

Regras:
- Exceções carregam apenas dados serializáveis em `details`.
- Nenhuma exceção tenta recuperar ou corrigir configuração.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, FrozenSet, Iterable, Optional, Tuple

from .errors import (
    COORDINATOR_LIFECYCLE_ERROR,
    ENGINE_CIRCUIT_OPEN,
    ENGINE_CONFIGURATION_ERROR,
    ENGINE_EXECUTION_ERROR,
    GRAPH_CYCLE_DETECTED,
    GRAPH_DUPLICATE_ID,
    GRAPH_INVALID_DESCRIPTOR,
    GRAPH_SELF_DEPENDENCY,
    GRAPH_UNKNOWN_DEPENDENCY,
    GRAPH_VALIDATION_FAILED,
    ErrorPayload,
)


@dataclass(frozen=True)
class LiquidityException(Exception):
    """Base class para exceções internas.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    code: ClassVar[str] = ENGINE_EXECUTION_ERROR

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message

    def to_payload(self) -> ErrorPayload:
        return ErrorPayload(
            type=self.code,
            message=self.message,
            details=dict(self.details),
            hint=self.hint,
        )


# ---------------------------------------------------------------------------
# Grafo / Catálogo
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GraphError(LiquidityException):
    """Violação estrutural do grafo de dependências entre engines."""

    @property
    def engine_id(self) -> Optional[str]:
        return self.details.get("engine_id")


@dataclass(frozen=True)
class DuplicateIdError(GraphError):
    """Dois descriptors declaram o mesmo `id`; a carga inteira é rejeitada."""

    code: ClassVar[str] = GRAPH_DUPLICATE_ID

    @classmethod
    def for_id(cls, engine_id: str) -> "DuplicateIdError":
        return cls(
            message=f"Duplicate engine id: {engine_id}",
            details={"engine_id": engine_id},
            hint="Remova ou renomeie uma das entradas duplicadas no catálogo.",
        )


@dataclass(frozen=True)
class UnknownDependencyError(GraphError):
    """Dependência declarada não corresponde a nenhum descriptor registrado."""

    code: ClassVar[str] = GRAPH_UNKNOWN_DEPENDENCY

    @classmethod
    def for_edge(cls, engine_id: str, missing_dependency_id: str) -> "UnknownDependencyError":
        return cls(
            message=f"Engine '{engine_id}' depends on unknown engine '{missing_dependency_id}'",
            details={
                "engine_id": engine_id,
                "missing_dependency_id": missing_dependency_id,
            },
            hint="Registre a engine ausente ou remova a dependência do catálogo.",
        )

    @property
    def missing_dependency_id(self) -> str:
        return self.details["missing_dependency_id"]


@dataclass(frozen=True)
class SelfDependencyError(GraphError):
    """Descriptor lista o próprio `id` em `dependencies`."""

    code: ClassVar[str] = GRAPH_SELF_DEPENDENCY

    @classmethod
    def for_engine(cls, engine_id: str) -> "SelfDependencyError":
        return cls(
            message=f"Engine '{engine_id}' depends on itself",
            details={"engine_id": engine_id},
            hint="Remova o próprio id da lista de dependências.",
        )


@dataclass(frozen=True)
class CycleDetectedError(GraphError):
    """
    O grafo contém um ciclo (sem self-loop direto).

    `details["cycle_members"]` traz todos os ids que participam do ciclo,
    ordenados; `details["cycle_path"]` preserva a ordem em que o ciclo
    foi percorrido.
    """

    code: ClassVar[str] = GRAPH_CYCLE_DETECTED

    @classmethod
    def for_path(cls, path: Iterable[str]) -> "CycleDetectedError":
        ordered = list(path)
        members = sorted(set(ordered))
        return cls(
            message="Cycle detected in engine dependency graph: " + " -> ".join(ordered + ordered[:1]),
            details={"cycle_members": members, "cycle_path": ordered},
            hint="Quebre o ciclo removendo ao menos uma das dependências listadas.",
        )

    @property
    def cycle_members(self) -> FrozenSet[str]:
        return frozenset(self.details.get("cycle_members", []))


@dataclass(frozen=True)
class InvalidDescriptorError(GraphError):
    """Campo de EngineDescriptor ausente ou com tipo/valor inválido."""

    code: ClassVar[str] = GRAPH_INVALID_DESCRIPTOR

    @classmethod
    def for_field(cls, engine_id: Any, field_name: str, reason: str) -> "InvalidDescriptorError":
        return cls(
            message=f"Invalid descriptor field '{field_name}' for engine {engine_id!r}: {reason}",
            details={"engine_id": engine_id, "field": field_name, "reason": reason},
            hint="Corrija a entrada correspondente no catálogo de engines.",
        )


@dataclass(frozen=True)
class GraphValidationError(GraphError):
    """Agregado de TODOS os problemas encontrados pelo validator."""

    code: ClassVar[str] = GRAPH_VALIDATION_FAILED

    errors: Tuple[GraphError, ...] = ()

    @classmethod
    def from_errors(cls, errors: Iterable[GraphError]) -> "GraphValidationError":
        collected = tuple(errors)
        return cls(
            message=f"Engine graph has {len(collected)} validation problem(s)",
            details={"errors": [e.to_payload().to_dict() for e in collected]},
            hint="Corrija todas as entradas listadas antes de publicar o catálogo.",
            errors=collected,
        )


# ---------------------------------------------------------------------------
# Engine / Coordinator
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EngineConfigurationError(LiquidityException):
    """Configuração inválida ou inconsistente para o coordinator."""

    code: ClassVar[str] = ENGINE_CONFIGURATION_ERROR


@dataclass(frozen=True)
class CircuitOpenError(LiquidityException):
    """Engine recusada porque seu circuit breaker está aberto."""

    code: ClassVar[str] = ENGINE_CIRCUIT_OPEN


@dataclass(frozen=True)
class CoordinatorLifecycleError(LiquidityException):
    """start/stop/run_cycle chamados fora da ordem permitida."""

    code: ClassVar[str] = COORDINATOR_LIFECYCLE_ERROR
