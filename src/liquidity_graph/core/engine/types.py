# src/liquidity_graph/core/engine/types.py
"""
Tipos canônicos de execução de engines.

Componentes principais:
    - EngineStatus  → estados finais de uma engine em um ciclo
    - EngineResult  → resultado imutável produzido (ou sintetizado) por ciclo
    - EngineInputs  → o que uma engine recebe ao ser invocada
    - HealthState / EngineHealth / SystemHealth → roll-up de saúde

Princípios fundamentais:
    - Tipos são estáveis e serializáveis (valores de enum textuais)
    - Nenhuma lógica de execução vive neste módulo

Limites explícitos:
    - Não interpreta `signal`, `metrics` ou `payload` de engines
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from liquidity_graph.core.catalog.descriptor import EngineDescriptor


class EngineStatus(str, Enum):
    """
    Estados finais de uma engine dentro de um ciclo.

    - SUCCESS: cálculo concluído
    - SKIPPED: desabilitada por configuração
    - UPSTREAM_UNAVAILABLE: alguma dependência não teve sucesso neste
      ciclo; a engine NÃO foi invocada
    - FAILED: exceção, tipo de retorno inválido ou circuit breaker aberto
    """
    SUCCESS = "success"
    SKIPPED = "skipped"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    FAILED = "failed"


@dataclass(frozen=True)
class EngineResult:
    """
    Resultado imutável de uma engine.

    Campos:
        - engine_id: id da engine (o coordinator garante o valor correto)
        - status: estado final
        - summary: resumo curto para o tile do dashboard
        - signal: sinal direcional opcional (ex.: "bullish", "neutral")
        - confidence: confiança opcional em [0, 100]
        - metrics: métricas numéricas
        - warnings: avisos não fatais
        - payload: dados livres (inclui `error` em falhas)
    """
    engine_id: str
    status: EngineStatus
    summary: str = ""
    signal: Optional[str] = None
    confidence: Optional[float] = None
    metrics: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == EngineStatus.SUCCESS

    @property
    def error(self) -> Optional[Dict[str, Any]]:
        return self.payload.get("error")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "engine_id": self.engine_id,
            "status": self.status.value,
            "summary": self.summary,
            "signal": self.signal,
            "confidence": self.confidence,
            "metrics": dict(self.metrics),
            "warnings": list(self.warnings),
            "payload": dict(self.payload),
        }


@dataclass(frozen=True)
class EngineInputs:
    """
    Entradas de uma invocação.

    `indicators` contém apenas os indicadores declarados pela engine
    (ou todos, quando ela declara `"*"`); `upstream` contém os resultados
    das dependências diretas, todos com status SUCCESS.
    """
    descriptor: EngineDescriptor
    indicators: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    upstream: Mapping[str, EngineResult] = field(default_factory=lambda: MappingProxyType({}))
    cycle_id: str = ""

    @property
    def engine_id(self) -> str:
        return self.descriptor.id

    def indicator(self, name: str, default: Any = None) -> Any:
        return self.indicators.get(name, default)


class HealthState(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"
    OFFLINE = "offline"


@dataclass(frozen=True)
class EngineHealth:
    engine_id: str
    state: HealthState = HealthState.OFFLINE
    last_status: Optional[EngineStatus] = None
    last_run_at: Optional[str] = None
    consecutive_failures: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "engine_id": self.engine_id,
            "state": self.state.value,
            "last_status": self.last_status.value if self.last_status else None,
            "last_run_at": self.last_run_at,
            "consecutive_failures": self.consecutive_failures,
        }


class SystemState(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    CRITICAL = "critical"


@dataclass(frozen=True)
class SystemHealth:
    state: SystemState
    total: int
    healthy: int
    warning: int
    critical: int
    offline: int

    @property
    def healthy_ratio(self) -> float:
        return self.healthy / self.total if self.total else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "total": self.total,
            "healthy": self.healthy,
            "warning": self.warning,
            "critical": self.critical,
            "offline": self.offline,
        }
