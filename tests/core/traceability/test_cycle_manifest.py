# tests/core/traceability/test_cycle_manifest.py
"""
Testes do manifest de ciclo (traceability).

Garantem que:
- o manifest inicial carrega metadados e fingerprints, com Event Log vazio
- eventos só entram por chamadas explícitas, na ordem de chamada
- o estado incremental por engine é atualizado (started/finished/failed)
- o manifest sobrevive a um round-trip em disco (JSON)
"""

from datetime import datetime, timedelta, timezone

import pytest

try:
    from liquidity_graph.core.traceability.manifest import (
        add_event,
        create_manifest,
        engine_failed,
        engine_finished,
        engine_started,
        load_manifest,
        save_manifest,
    )
except Exception as e:
    create_manifest = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


T0 = datetime(2026, 1, 16, 12, 0, 0, tzinfo=timezone.utc)


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing manifest API. Import error: {_IMPORT_ERR}")


def _manifest():
    return create_manifest(
        cycle_id="cycle-1",
        run_id="run-test-001",
        started_at=T0,
        package_version="0.1.0",
        config_hash="c" * 64,
        catalog_fingerprint="f" * 64,
    )


def test_create_manifest_has_metadata_and_empty_log():
    _require_imports()
    m = _manifest()

    assert m.cycle == {
        "cycle_id": "cycle-1",
        "run_id": "run-test-001",
        "started_at": "2026-01-16T12:00:00+00:00",
        "package_version": "0.1.0",
    }
    assert m.inputs == {"config_hash": "c" * 64, "catalog_fingerprint": "f" * 64}
    assert m.engines == {}
    assert m.events == []


def test_naive_timestamps_are_treated_as_utc():
    _require_imports()
    m = create_manifest(
        cycle_id="c",
        run_id="r",
        started_at=datetime(2026, 1, 16, 12, 0, 0),
        package_version="0.1.0",
        config_hash="x",
        catalog_fingerprint="y",
    )

    assert m.cycle["started_at"].endswith("+00:00")


def test_events_keep_call_order():
    _require_imports()
    m = _manifest()
    add_event(m, event_type="cycle_started", ts=T0 + timedelta(seconds=5))
    add_event(m, event_type="tier_started", ts=T0, payload={"tier": 0})
    add_event(m, event_type="custom", ts=T0, engine_id="tail-risk")

    assert m.event_types() == ["cycle_started", "tier_started", "custom"]
    assert "engine_id" not in m.events[0]
    assert "payload" not in m.events[0]
    assert m.events[1]["payload"] == {"tier": 0}
    assert m.events[2]["engine_id"] == "tail-risk"


def test_engine_started_then_finished_tracks_duration():
    _require_imports()
    m = _manifest()
    engine_started(m, engine_id="net-liquidity", tier=2, ts=T0)
    assert m.engines["net-liquidity"]["status"] == "running"

    engine_finished(
        m,
        engine_id="net-liquidity",
        ts=T0 + timedelta(milliseconds=250),
        result={
            "status": "success",
            "summary": "liquidity expanding",
            "metrics": {"net": 5.8},
            "warnings": ["missing indicator: RRP"],
        },
    )

    entry = m.engines["net-liquidity"]
    assert entry["tier"] == 2
    assert entry["status"] == "success"
    assert entry["duration_ms"] == 250
    assert entry["metrics"] == {"net": 5.8}
    assert entry["warnings"] == ["missing indicator: RRP"]
    assert m.event_types() == ["engine_started", "engine_finished"]
    assert m.events[-1]["payload"] == {"status": "success", "duration_ms": 250}


def test_finished_without_start_has_zero_duration():
    _require_imports()
    m = _manifest()
    engine_finished(m, engine_id="b", ts=T0, result={"status": "skipped"})

    assert m.engines["b"]["status"] == "skipped"
    assert m.engines["b"]["duration_ms"] == 0


def test_engine_failed_records_error_payload():
    _require_imports()
    m = _manifest()
    error = {"type": "ENGINE_EXECUTION_ERROR", "message": "boom", "details": {}, "hint": None}
    engine_started(m, engine_id="a", tier=0, ts=T0)
    engine_failed(m, engine_id="a", ts=T0, error=error)

    assert m.engines["a"]["status"] == "failed"
    assert m.engines["a"]["error"] == error
    assert m.events[-1] == {
        "event_type": "engine_failed",
        "timestamp": "2026-01-16T12:00:00+00:00",
        "engine_id": "a",
        "payload": {"error": error},
    }


def test_round_trip_on_disk(tmp_path):
    _require_imports()
    m = _manifest()
    add_event(m, event_type="cycle_started", ts=T0, payload={"tiers": 1, "engines": 1})
    engine_started(m, engine_id="a", tier=0, ts=T0)
    engine_finished(m, engine_id="a", ts=T0, result={"status": "success", "summary": "ok"})

    path = tmp_path / "nested" / "cycle-1.json"
    save_manifest(m, path)
    restored = load_manifest(path)

    assert restored.to_dict() == m.to_dict()
    assert restored.event_types() == ["cycle_started", "engine_started", "engine_finished"]


def test_finished_entry_keeps_payload_error():
    _require_imports()
    m = _manifest()
    error = {
        "type": "ENGINE_UPSTREAM_UNAVAILABLE",
        "message": "Dependências upstream sem resultado neste ciclo",
        "details": {"engine_id": "master-control", "unavailable_dependencies": ["signal-aggregator"]},
        "hint": None,
    }
    engine_finished(
        m,
        engine_id="master-control",
        ts=T0,
        result={"status": "upstream_unavailable", "payload": {"error": error}},
    )
    engine_finished(m, engine_id="b", ts=T0, result={"status": "success", "payload": {}})

    assert m.engines["master-control"]["error"] == error
    assert "error" not in m.engines["b"]


def test_non_json_values_are_saved_as_text(tmp_path):
    _require_imports()
    m = _manifest()
    engine_finished(m, engine_id="a", ts=T0, result={"status": "success", "metrics": {"as_of": T0}})

    path = tmp_path / "cycle-1.json"
    save_manifest(m, path)

    assert load_manifest(path).engines["a"]["metrics"] == {"as_of": str(T0)}
