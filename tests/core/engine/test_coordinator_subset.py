# tests/core/engine/test_coordinator_subset.py
"""Execução parcial: engines selecionadas por id ou por pillar, mais o fecho upstream."""

import pytest

try:
    from liquidity_graph.core.engine.coordinator import ExecutionCoordinator
    from liquidity_graph.core.engine.types import EngineStatus
    from liquidity_graph.core.graph.snapshot import build_snapshot
except Exception as e:
    ExecutionCoordinator = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing ExecutionCoordinator. Import error: {_IMPORT_ERR}")


def test_selected_ids_run_with_their_dependencies(worked_example_registry, dummy_ctx, DummyEngine):
    _require_imports()
    engines = {i: DummyEngine(i) for i in "FGHI"}

    with ExecutionCoordinator(
        snapshot=build_snapshot(worked_example_registry),
        engines=engines,
        ctx=dummy_ctx,
    ) as coordinator:
        cycle = coordinator.run_cycle({}, engine_ids=["G"])

    assert cycle.tiers == (("F",), ("G",))
    assert list(cycle.results) == ["F", "G"]
    assert cycle.succeeded == ["F", "G"]
    assert engines["H"].calls == [] and engines["I"].calls == []
    assert cycle.manifest.events[0]["payload"] == {"tiers": 2, "engines": 2, "selection": ["F", "G"]}


def test_tier_index_is_kept_for_partial_runs(worked_example_registry, dummy_ctx, DummyEngine):
    _require_imports()
    with ExecutionCoordinator(
        snapshot=build_snapshot(worked_example_registry),
        engines={i: DummyEngine(i) for i in "FGHI"},
        ctx=dummy_ctx,
    ) as coordinator:
        cycle = coordinator.run_cycle({}, engine_ids=["I"])

    assert cycle.tiers == (("F",), ("G", "H"), ("I",))
    assert cycle.manifest.engines["I"]["tier"] == 2


def test_unknown_selection_raises(worked_example_registry, dummy_ctx, DummyEngine):
    _require_imports()
    with ExecutionCoordinator(
        snapshot=build_snapshot(worked_example_registry),
        engines={i: DummyEngine(i) for i in "FGHI"},
        ctx=dummy_ctx,
    ) as coordinator:
        with pytest.raises(KeyError):
            coordinator.run_cycle({}, engine_ids=["ghost"])


def test_run_pillar(make_descriptor, dummy_ctx, DummyEngine):
    _require_imports()
    snapshot = build_snapshot(
        [
            make_descriptor("data-integrity", pillar=0),
            make_descriptor("net-liquidity", pillar=1, deps=["data-integrity"]),
            make_descriptor("credit-stress", pillar=1),
            make_descriptor("enhanced-momentum", pillar=2, deps=["net-liquidity"]),
        ]
    )
    engines = {d.id: DummyEngine(d.id) for d in snapshot.registry}

    with ExecutionCoordinator(snapshot=snapshot, engines=engines, ctx=dummy_ctx) as coordinator:
        cycle = coordinator.run_pillar(1)

    assert sorted(cycle.results) == ["credit-stress", "data-integrity", "net-liquidity"]
    assert cycle.status_of("net-liquidity") == EngineStatus.SUCCESS
    assert engines["enhanced-momentum"].calls == []
