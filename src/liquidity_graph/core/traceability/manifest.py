# src/liquidity_graph/core/traceability/manifest.py
"""
Manifest de ciclo: rastreabilidade forense das execuções do coordinator.

O manifest consolida, de forma determinística e auditável:
    - metadados do ciclo (cycle_id, run_id, started_at, versão do pacote)
    - fingerprints das entradas (config efetiva e catálogo publicado)
    - estado incremental de cada engine no ciclo
    - Event Log ordenado de eventos explícitos

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - A ordem do Event Log reflete a ordem real de chamada
    - O manifest é serializável e reconstruível (round-trip JSON)

Decisões arquiteturais:
    - UTC é o timezone canônico de todos os timestamps
    - Mutação apenas pela thread do coordinator (engines não escrevem aqui)

Limites explícitos:
    - Não executa engines
    - Não decide políticas (skip, upstream unavailable, circuit breaker)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Timestamps sem timezone são assumidos como UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class CycleManifest:
    """
    Registro forense de um ciclo do coordinator.

    Campos principais:
        - cycle: metadados (cycle_id, run_id, started_at, package_version)
        - inputs: config_hash e catalog_fingerprint
        - engines: estado incremental indexado por engine_id
        - events: Event Log ordenado
    """

    cycle: Dict[str, Any]
    inputs: Dict[str, Any]
    engines: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cycle": dict(self.cycle),
            "inputs": dict(self.inputs),
            "engines": {k: dict(v) for k, v in self.engines.items()},
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CycleManifest":
        return cls(
            cycle=dict(data.get("cycle", {})),
            inputs=dict(data.get("inputs", {})),
            engines={k: dict(v) for k, v in (data.get("engines", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )

    def event_types(self) -> List[str]:
        return [e["event_type"] for e in self.events]


def create_manifest(
    *,
    cycle_id: str,
    run_id: str,
    started_at: datetime,
    package_version: str,
    config_hash: str,
    catalog_fingerprint: str,
) -> CycleManifest:
    """
    Cria o manifest inicial de um ciclo.

    O Event Log inicia vazio: `cycle_started` é registrado pelo coordinator
    via `add_event`, nunca aqui.
    """
    return CycleManifest(
        cycle={
            "cycle_id": cycle_id,
            "run_id": run_id,
            "started_at": _iso(started_at),
            "package_version": package_version,
        },
        inputs={
            "config_hash": config_hash,
            "catalog_fingerprint": catalog_fingerprint,
        },
    )


def add_event(
    manifest: CycleManifest,
    *,
    event_type: str,
    ts: datetime,
    engine_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if engine_id is not None:
        ev["engine_id"] = engine_id
    if payload is not None:
        ev["payload"] = payload
    manifest.events.append(ev)


def engine_started(
    manifest: CycleManifest,
    *,
    engine_id: str,
    tier: int,
    ts: datetime,
) -> None:
    manifest.engines.setdefault(engine_id, {})
    manifest.engines[engine_id].update(
        {
            "engine_id": engine_id,
            "tier": tier,
            "status": "running",
            "started_at": _iso(ts),
        }
    )
    add_event(manifest, event_type="engine_started", ts=ts, engine_id=engine_id, payload={"tier": tier})


def engine_finished(
    manifest: CycleManifest,
    *,
    engine_id: str,
    ts: datetime,
    result: Dict[str, Any],
) -> None:
    """
    Registra a conclusão de uma engine (qualquer status final exceto falha).

    `result` segue `EngineResult.to_dict()`; a duração é calculada a partir de
    `started_at` quando a engine chegou a ser iniciada. O erro do payload
    (ex.: dependências indisponíveis) é preservado quando presente.
    """
    e = manifest.engines.setdefault(engine_id, {"engine_id": engine_id})
    started_iso = e.get("started_at")
    started_dt = datetime.fromisoformat(started_iso) if started_iso else ts

    status = result.get("status", "success")
    e.update(
        {
            "status": status,
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(started_dt, ts),
            "summary": result.get("summary"),
            "metrics": result.get("metrics", {}) or {},
            "warnings": result.get("warnings", []) or [],
        }
    )
    error = (result.get("payload") or {}).get("error")
    if error:
        e["error"] = error
    add_event(
        manifest,
        event_type="engine_finished",
        ts=ts,
        engine_id=engine_id,
        payload={"status": status, "duration_ms": e["duration_ms"]},
    )


def engine_failed(
    manifest: CycleManifest,
    *,
    engine_id: str,
    ts: datetime,
    error: Dict[str, Any],
) -> None:
    """`error` é um `ErrorPayload.to_dict()`."""
    e = manifest.engines.setdefault(engine_id, {"engine_id": engine_id})
    e.update(
        {
            "status": "failed",
            "finished_at": _iso(ts),
            "error": error,
        }
    )
    add_event(manifest, event_type="engine_failed", ts=ts, engine_id=engine_id, payload={"error": error})


def save_manifest(manifest: CycleManifest, path: Path) -> None:
    """Valores não JSON (ex.: datetime em `metrics`) são gravados como texto."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(manifest.to_dict(), ensure_ascii=False, indent=2, sort_keys=True, default=str),
        encoding="utf-8",
    )


def load_manifest(path: Path) -> CycleManifest:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return CycleManifest.from_dict(data)
