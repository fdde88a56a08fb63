# src/liquidity_graph/core/engine/coordinator.py
"""
ExecutionCoordinator: execução das engines tier a tier.

O coordinator é a fronteira entre o grafo (puro) e as implementações das
engines. Ele consome o snapshot publicado e executa cada tier em ordem:

    - tier k+1 só começa depois que TODAS as engines do tier k terminaram
    - engines de um mesmo tier rodam concorrentemente (pool limitado por
      `coordinator.max_workers`)
    - a ordem de registro de resultados/eventos segue a ordem do tier
      (priority desc, id asc), independente da ordem de conclusão

Políticas explícitas por engine:
    - desabilitada por config          → SKIPPED (não invocada)
    - dependência sem sucesso no ciclo → UPSTREAM_UNAVAILABLE (não invocada)
    - circuit breaker aberto           → FAILED / ENGINE_CIRCUIT_OPEN
    - exceção durante compute          → novas tentativas com backoff
                                         (`coordinator.retry`); esgotadas,
                                         FAILED / ENGINE_EXECUTION_ERROR
    - prazo `engine_timeout_s` excedido → FAILED / ENGINE_TIMEOUT
    - retorno que não é EngineResult   → FAILED / ENGINE_CONFIGURATION_ERROR

Execução parcial:
    - `run_cycle(engine_ids=...)` e `run_pillar()` executam apenas as engines
      selecionadas mais as dependências transitivas delas

Ciclo de vida:
    - construção explícita (sem singleton global)
    - `start()` e `stop()` são chamados exatamente uma vez cada
    - `run_cycle()` só é permitido entre `start()` e `stop()`

Limites explícitos:
    - Não agenda ciclos periódicos (quem chama decide a cadência)
    - Não busca indicadores; recebe o mapa pronto
    - Não interrompe a thread de uma engine que estourou o prazo; o
      resultado tardio é descartado
"""

from __future__ import annotations

import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from liquidity_graph.core.catalog.descriptor import EngineDescriptor
from liquidity_graph.core.config.hashing import compute_config_hash
from liquidity_graph.core.config.settings import CoordinatorSettings, coordinator_settings
from liquidity_graph.core.errors import (
    ErrorPayload,
    engine_configuration_error,
    engine_execution_error,
    engine_timeout,
    upstream_unavailable,
)
from liquidity_graph.core.exceptions import (
    CircuitOpenError,
    CoordinatorLifecycleError,
    EngineConfigurationError,
    LiquidityException,
)
from liquidity_graph.core.graph.scheduler import tier_label
from liquidity_graph.core.graph.snapshot import GraphSnapshot, SnapshotStore
from liquidity_graph.core.traceability.manifest import (
    CycleManifest,
    add_event,
    create_manifest,
    engine_failed,
    engine_finished,
    engine_started,
    save_manifest,
)
from liquidity_graph.version import __version__

from .breaker import CircuitBreaker, Clock
from .context import COORDINATOR_ID, RunContext
from .protocol import Engine
from .types import (
    EngineHealth,
    EngineInputs,
    EngineResult,
    EngineStatus,
    HealthState,
    SystemHealth,
    SystemState,
)


_CREATED = "created"
_RUNNING = "running"
_STOPPED = "stopped"

_HEALTH_BY_STATUS = {
    EngineStatus.SUCCESS: HealthState.HEALTHY,
    EngineStatus.UPSTREAM_UNAVAILABLE: HealthState.WARNING,
    EngineStatus.FAILED: HealthState.CRITICAL,
    EngineStatus.SKIPPED: HealthState.OFFLINE,
}

HEALTHY_RATIO = 0.8
DEGRADED_RATIO = 0.5


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CycleResult:
    """Resultado agregado de um ciclo (ordem de `results` = ordem de execução)."""

    cycle_id: str
    fingerprint: str
    tiers: Tuple[Tuple[str, ...], ...]
    results: Dict[str, EngineResult] = field(default_factory=dict)
    manifest: Optional[CycleManifest] = None

    def status_of(self, engine_id: str) -> EngineStatus:
        return self.results[engine_id].status

    def ids_with_status(self, status: EngineStatus) -> List[str]:
        return [i for i, r in self.results.items() if r.status == status]

    @property
    def succeeded(self) -> List[str]:
        return self.ids_with_status(EngineStatus.SUCCESS)

    @property
    def failed(self) -> List[str]:
        return self.ids_with_status(EngineStatus.FAILED)


class ExecutionCoordinator:
    """
    Coordinator canônico (tiers + pool de threads + circuit breaker).

    Args:
        snapshot: Snapshot fixo ou `SnapshotStore`; com store, cada ciclo usa
            o snapshot corrente no momento em que começa.
        engines: Implementações indexadas por engine id.
        ctx: Contexto da execução (config, log estruturado, warnings).
        settings: Opções do coordinator; derivadas de `ctx.config` se omitidas.
        manifest_dir: Quando informado, o manifest de cada ciclo é salvo ali.
        clock: Relógio monotônico do circuit breaker (injetável em testes).
        sleep: Espera entre tentativas (injetável em testes).

    Raises:
        EngineConfigurationError: Se uma engine habilitada não tiver
            implementação ou se houver implementação sem descriptor.
    """

    def __init__(
        self,
        *,
        snapshot: Union[GraphSnapshot, SnapshotStore],
        engines: Mapping[str, Engine],
        ctx: RunContext,
        settings: Optional[CoordinatorSettings] = None,
        manifest_dir: Optional[Path] = None,
        clock: Clock = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._source = snapshot
        self._engines: Dict[str, Engine] = dict(engines)
        self.ctx = ctx
        self.settings = settings if settings is not None else coordinator_settings(ctx.config)
        self.manifest_dir = Path(manifest_dir) if manifest_dir is not None else None
        self._sleep = sleep

        self._breaker = CircuitBreaker(
            threshold=self.settings.breaker_threshold,
            reset_after_s=self.settings.breaker_reset_after_s,
            enabled=self.settings.breaker_enabled,
            clock=clock,
        )
        self._state = _CREATED
        self._executor: Optional[ThreadPoolExecutor] = None
        self._health: Dict[str, EngineHealth] = {}

        self._check_implementations(self._snapshot())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def running(self) -> bool:
        return self._state == _RUNNING

    def start(self) -> None:
        if self._state != _CREATED:
            raise CoordinatorLifecycleError(
                message=f"start() não permitido no estado '{self._state}'",
                details={"state": self._state},
                hint="Crie um novo coordinator; start() só pode ser chamado uma vez.",
            )
        self._executor = ThreadPoolExecutor(
            max_workers=self.settings.max_workers,
            thread_name_prefix="liquidity-engine",
        )
        self._state = _RUNNING
        self.ctx.log(
            engine_id=COORDINATOR_ID,
            level="info",
            message="coordinator_started",
            max_workers=self.settings.max_workers,
        )

    def stop(self) -> None:
        if self._state != _RUNNING:
            raise CoordinatorLifecycleError(
                message=f"stop() não permitido no estado '{self._state}'",
                details={"state": self._state},
                hint="stop() só é válido uma vez, após start().",
            )
        self._executor.shutdown(wait=True)
        self._executor = None
        self._state = _STOPPED
        self.ctx.log(engine_id=COORDINATOR_ID, level="info", message="coordinator_stopped")

    def __enter__(self) -> "ExecutionCoordinator":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Snapshot / configuração
    # ------------------------------------------------------------------
    def _snapshot(self) -> GraphSnapshot:
        if isinstance(self._source, SnapshotStore):
            return self._source.require()
        return self._source

    def _check_implementations(self, snapshot: GraphSnapshot) -> None:
        registry = snapshot.registry
        missing = sorted(
            i for i in registry.ids()
            if i not in self._engines and self.settings.is_enabled(i)
        )
        unknown = sorted(i for i in self._engines if i not in registry)
        mismatched = sorted(
            key for key, engine in self._engines.items()
            if getattr(engine, "id", key) != key
        )
        if missing or unknown or mismatched:
            raise EngineConfigurationError(
                message="Implementações de engine inconsistentes com o catálogo",
                details={
                    "missing_implementations": missing,
                    "unknown_engines": unknown,
                    "mismatched_ids": mismatched,
                },
                hint="Registre uma implementação por engine habilitada, com o mesmo id do catálogo.",
            )

    def _inputs_for(
        self,
        descriptor: EngineDescriptor,
        indicators: Mapping[str, Any],
        results: Mapping[str, EngineResult],
        cycle_id: str,
    ) -> Tuple[EngineInputs, List[str]]:
        if descriptor.wants_all_indicators:
            selected = dict(indicators)
            missing: List[str] = []
        else:
            selected = {k: indicators[k] for k in descriptor.required_indicators if k in indicators}
            missing = sorted(descriptor.required_indicators - set(indicators))

        warnings = [f"missing indicator: {name}" for name in missing]
        for message in warnings:
            self.ctx.add_warning(engine_id=descriptor.id, message=message)

        inputs = EngineInputs(
            descriptor=descriptor,
            indicators=MappingProxyType(selected),
            upstream=MappingProxyType({d: results[d] for d in sorted(descriptor.dependencies)}),
            cycle_id=cycle_id,
        )
        return inputs, warnings

    # ------------------------------------------------------------------
    # Execução de uma engine (thread do pool)
    # ------------------------------------------------------------------
    def _failed(self, engine_id: str, error: ErrorPayload, warnings: List[str]) -> EngineResult:
        return EngineResult(
            engine_id=engine_id,
            status=EngineStatus.FAILED,
            summary=error.message,
            warnings=list(warnings),
            payload={"error": error.to_dict()},
        )

    def _compute(self, engine: Engine, engine_id: str, inputs: EngineInputs) -> Any:
        """Chama `compute`, repetindo em caso de exceção conforme `coordinator.retry`."""
        attempt = 1
        while True:
            try:
                return engine.compute(inputs)
            except Exception as exc:
                if attempt > self.settings.max_retries:
                    raise
                delay = self.settings.retry_delay_s(attempt)
                self.ctx.log(
                    engine_id=engine_id,
                    level="warning",
                    message="engine_retry",
                    attempt=attempt,
                    delay_s=delay,
                    exception_class=exc.__class__.__name__,
                )
                self._sleep(delay)
                attempt += 1

    def _invoke(self, engine_id: str, inputs: EngineInputs, warnings: List[str]) -> EngineResult:
        try:
            self._breaker.check(engine_id)
        except CircuitOpenError as exc:
            self.ctx.log(engine_id=engine_id, level="warning", message="circuit_open", details=exc.details)
            return self._failed(engine_id, exc.to_payload(), warnings)

        engine = self._engines[engine_id]
        started = time.perf_counter()
        try:
            result = self._compute(engine, engine_id, inputs)
        except LiquidityException as exc:
            self._breaker.record_failure(engine_id)
            self.ctx.log(engine_id=engine_id, level="error", message="engine_exception", error_type=exc.code)
            return self._failed(engine_id, exc.to_payload(), warnings)
        except Exception as exc:
            self._breaker.record_failure(engine_id)
            self.ctx.log(
                engine_id=engine_id,
                level="error",
                message="engine_exception",
                exception_class=exc.__class__.__name__,
            )
            return self._failed(engine_id, engine_execution_error(engine_id=engine_id, exc=exc), warnings)

        if not isinstance(result, EngineResult):
            self._breaker.record_failure(engine_id)
            error = engine_configuration_error(
                engine_id=engine_id,
                details={"expected": "EngineResult", "received": type(result).__name__},
            )
            self.ctx.log(engine_id=engine_id, level="error", message="invalid_result_type", received=type(result).__name__)
            return self._failed(engine_id, error, warnings)

        if result.status == EngineStatus.FAILED:
            self._breaker.record_failure(engine_id)
        else:
            self._breaker.record_success(engine_id)

        merged: List[str] = []
        for message in list(result.warnings) + warnings:
            if message not in merged:
                merged.append(message)

        self.ctx.log(
            engine_id=engine_id,
            level="info",
            message="engine_computed",
            status=result.status.value,
            elapsed_ms=int((time.perf_counter() - started) * 1000),
        )
        return replace(result, engine_id=engine_id, warnings=merged)

    def _settle(
        self,
        engine_id: str,
        future: "Future[EngineResult]",
        submitted_at: float,
        warnings: List[str],
    ) -> EngineResult:
        """Aguarda o resultado de uma engine respeitando `engine_timeout_s`."""
        timeout = self.settings.engine_timeout_s
        remaining = None if timeout is None else max(0.0, submitted_at + timeout - time.monotonic())
        try:
            return future.result(timeout=remaining)
        except FutureTimeoutError:
            future.cancel()
            self._breaker.record_failure(engine_id)
            self.ctx.log(engine_id=engine_id, level="error", message="engine_timeout", timeout_s=timeout)
            return self._failed(engine_id, engine_timeout(engine_id=engine_id, timeout_s=timeout), warnings)
        except Exception as exc:
            # falha fora de compute (ex.: resultado malformado)
            self._breaker.record_failure(engine_id)
            self.ctx.log(
                engine_id=engine_id,
                level="error",
                message="engine_invoke_error",
                exception_class=exc.__class__.__name__,
            )
            return self._failed(engine_id, engine_execution_error(engine_id=engine_id, exc=exc), warnings)

    # ------------------------------------------------------------------
    # Ciclo
    # ------------------------------------------------------------------
    def run_cycle(
        self,
        indicators: Optional[Mapping[str, Any]] = None,
        *,
        engine_ids: Optional[Iterable[str]] = None,
    ) -> CycleResult:
        """
        Executa um ciclo sobre o snapshot corrente.

        Args:
            indicators: Valores de indicadores disponíveis neste ciclo.
            engine_ids: Quando informado, executa só essas engines e as
                dependências transitivas delas; os tiers sem engine
                selecionada são omitidos.

        Returns:
            CycleResult: Um resultado por engine executada no ciclo.

        Raises:
            CoordinatorLifecycleError: Fora do intervalo start()/stop().
            EngineConfigurationError: Se o snapshot corrente tiver engines
                habilitadas sem implementação.
            KeyError: Se `engine_ids` citar engine fora do snapshot.
        """
        if self._state != _RUNNING:
            raise CoordinatorLifecycleError(
                message=f"run_cycle() não permitido no estado '{self._state}'",
                details={"state": self._state},
                hint="Chame start() antes de run_cycle() e não use o coordinator após stop().",
            )
        snapshot = self._snapshot()
        self._check_implementations(snapshot)
        indicators = dict(indicators or {})
        registry = snapshot.registry
        selected = None if engine_ids is None else registry.with_dependencies(engine_ids)
        cycle_id = uuid.uuid4().hex

        planned: List[Tuple[int, Tuple[str, ...]]] = []
        for index, tier in enumerate(snapshot.tiers.tiers):
            chosen = tier if selected is None else tuple(i for i in tier if i in selected)
            if chosen:
                planned.append((index, chosen))

        manifest = create_manifest(
            cycle_id=cycle_id,
            run_id=self.ctx.run_id,
            started_at=_now(),
            package_version=__version__,
            config_hash=compute_config_hash(dict(self.ctx.config or {})),
            catalog_fingerprint=snapshot.fingerprint,
        )
        started_payload: Dict[str, Any] = {
            "tiers": len(planned),
            "engines": sum(len(tier) for _, tier in planned),
        }
        if selected is not None:
            started_payload["selection"] = sorted(selected)
        add_event(manifest, event_type="cycle_started", ts=_now(), payload=started_payload)
        self.ctx.log(engine_id=COORDINATOR_ID, level="info", message="cycle_started", cycle_id=cycle_id)

        results: Dict[str, EngineResult] = {}

        for index, tier in planned:
            add_event(
                manifest,
                event_type="tier_started",
                ts=_now(),
                payload={"tier": index, "label": tier_label(index), "engines": list(tier)},
            )

            settled: Dict[str, EngineResult] = {}
            pending = []

            for engine_id in tier:
                descriptor = registry.get(engine_id)

                if not self.settings.is_enabled(engine_id):
                    settled[engine_id] = EngineResult(
                        engine_id=engine_id,
                        status=EngineStatus.SKIPPED,
                        summary="skipped by config",
                    )
                    continue

                unavailable = [
                    d for d in sorted(descriptor.dependencies)
                    if d not in results or not results[d].succeeded
                ]
                if unavailable:
                    error = upstream_unavailable(engine_id=engine_id, unavailable=unavailable)
                    settled[engine_id] = EngineResult(
                        engine_id=engine_id,
                        status=EngineStatus.UPSTREAM_UNAVAILABLE,
                        summary=error.message,
                        payload={"error": error.to_dict()},
                    )
                    self.ctx.log(
                        engine_id=engine_id,
                        level="warning",
                        message="upstream_unavailable",
                        unavailable_dependencies=unavailable,
                    )
                    continue

                inputs, warnings = self._inputs_for(descriptor, indicators, results, cycle_id)
                engine_started(manifest, engine_id=engine_id, tier=index, ts=_now())
                future = self._executor.submit(self._invoke, engine_id, inputs, warnings)
                pending.append((engine_id, future, time.monotonic(), warnings))

            # barreira do tier
            for engine_id, future, submitted_at, warnings in pending:
                settled[engine_id] = self._settle(engine_id, future, submitted_at, warnings)

            for engine_id in tier:
                result = settled[engine_id]
                results[engine_id] = result
                self._record(manifest, result)

            add_event(
                manifest,
                event_type="tier_completed",
                ts=_now(),
                payload={
                    "tier": index,
                    "statuses": {i: settled[i].status.value for i in tier},
                },
            )

        counts: Dict[str, int] = {}
        for result in results.values():
            counts[result.status.value] = counts.get(result.status.value, 0) + 1
        add_event(manifest, event_type="cycle_finished", ts=_now(), payload={"counts": counts})
        self.ctx.log(engine_id=COORDINATOR_ID, level="info", message="cycle_finished", cycle_id=cycle_id, counts=counts)

        if self.manifest_dir is not None:
            self._save(manifest, self.manifest_dir / f"cycle-{cycle_id}.json")

        return CycleResult(
            cycle_id=cycle_id,
            fingerprint=snapshot.fingerprint,
            tiers=tuple(tier for _, tier in planned),
            results=results,
            manifest=manifest,
        )

    def run_pillar(self, pillar: int, indicators: Optional[Mapping[str, Any]] = None) -> CycleResult:
        """Executa as engines de um pillar (e as dependências delas)."""
        ids = [d.id for d in self._snapshot().registry.all_by_pillar(pillar)]
        return self.run_cycle(indicators, engine_ids=ids)

    def _save(self, manifest: CycleManifest, path: Path) -> None:
        try:
            save_manifest(manifest, path)
        except (OSError, TypeError, ValueError) as exc:
            # o resultado do ciclo continua válido sem o arquivo
            self.ctx.log(
                engine_id=COORDINATOR_ID,
                level="error",
                message="manifest_save_failed",
                path=str(path),
                exception_class=exc.__class__.__name__,
                error=str(exc),
            )

    def _record(self, manifest: CycleManifest, result: EngineResult) -> None:
        ts = _now()
        if result.status == EngineStatus.FAILED:
            engine_failed(manifest, engine_id=result.engine_id, ts=ts, error=result.error or {})
        else:
            engine_finished(manifest, engine_id=result.engine_id, ts=ts, result=result.to_dict())

        self._health[result.engine_id] = EngineHealth(
            engine_id=result.engine_id,
            state=_HEALTH_BY_STATUS[result.status],
            last_status=result.status,
            last_run_at=ts.isoformat(),
            consecutive_failures=self._breaker.failures(result.engine_id),
        )

    # ------------------------------------------------------------------
    # Saúde
    # ------------------------------------------------------------------
    def engine_status(self, engine_id: str) -> EngineHealth:
        """
        Estado de saúde da engine; OFFLINE antes da primeira execução.

        Raises:
            KeyError: Se a engine não existir no snapshot corrente.
        """
        if engine_id not in self._snapshot().registry:
            raise KeyError(engine_id)
        return self._health.get(engine_id, EngineHealth(engine_id=engine_id))

    def system_health(self) -> SystemHealth:
        ids = self._snapshot().registry.ids()
        states = [self.engine_status(i).state for i in ids]
        total = len(states)
        healthy = states.count(HealthState.HEALTHY)

        if total == 0 or healthy / total >= HEALTHY_RATIO:
            state = SystemState.HEALTHY
        elif healthy / total >= DEGRADED_RATIO:
            state = SystemState.DEGRADED
        else:
            state = SystemState.CRITICAL

        return SystemHealth(
            state=state,
            total=total,
            healthy=healthy,
            warning=states.count(HealthState.WARNING),
            critical=states.count(HealthState.CRITICAL),
            offline=states.count(HealthState.OFFLINE),
        )
