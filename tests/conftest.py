# tests/conftest.py
"""
Fixtures compartilhados para testes do LIQUIDITY² Graph.

Este módulo define fixtures reutilizáveis que fornecem:
- factory de descriptors com defaults mínimos
- configuração resolvida mínima (dict, sem I/O)
- contexto de execução determinístico (RunContext)
- engines dummy (duck typing) com comportamento configurável
- relógio manual para o circuit breaker

Invariantes:
    - Nenhuma fixture realiza I/O
    - Nenhuma fixture contém lógica de domínio das engines
    - Imports do pacote são lazy para que falhas de import apareçam
      no teste que as causou
"""

import threading

import pytest


# =====================================================
# Catálogo / grafo
# =====================================================

@pytest.fixture
def make_descriptor():
    """
    Factory de EngineDescriptor.

    Uso: `make_descriptor("a", deps=["b"], priority=10)`.
    """
    from liquidity_graph.core.catalog.descriptor import EngineDescriptor

    def _make(engine_id, deps=(), priority=0, pillar=0, indicators=(), refresh_interval_ms=60000, name=None):
        return EngineDescriptor(
            id=engine_id,
            name=name or engine_id.upper(),
            pillar=pillar,
            priority=priority,
            refresh_interval_ms=refresh_interval_ms,
            required_indicators=frozenset(indicators),
            dependencies=frozenset(deps),
        )

    return _make


@pytest.fixture
def make_registry(make_descriptor):
    """Factory de Registry a partir de `{id: [deps]}` (prioridade 0)."""
    from liquidity_graph.core.graph.registry import Registry

    def _make(edges, priorities=None):
        priorities = priorities or {}
        return Registry.load(
            make_descriptor(engine_id, deps=deps, priority=priorities.get(engine_id, 0))
            for engine_id, deps in edges.items()
        )

    return _make


@pytest.fixture
def worked_example_registry(make_descriptor):
    """
    F sem dependências; G e H dependem de F; I depende de G e H.
    Tiers esperados: [[F], [G, H], [I]] (G antes de H por priority).
    """
    from liquidity_graph.core.graph.registry import Registry

    return Registry.load(
        [
            make_descriptor("I", deps=["G", "H"], priority=1),
            make_descriptor("H", deps=["F"], priority=5),
            make_descriptor("G", deps=["F"], priority=10),
            make_descriptor("F", priority=0),
        ]
    )


# =====================================================
# Config / RunContext
# =====================================================

@pytest.fixture
def dummy_config() -> dict:
    """Configuração resolvida mínima: pool pequeno, sem retries e breaker agressivo."""
    return {
        "coordinator": {
            "max_workers": 4,
            "engine_timeout_s": 5.0,
            "retry": {"max_retries": 0, "base_delay_s": 0.0, "backoff_multiplier": 1.0},
            "circuit_breaker": {"enabled": True, "threshold": 2, "reset_after_s": 30.0},
        },
        "engines": {},
    }


@pytest.fixture
def dummy_ctx(dummy_config):
    """RunContext determinístico (run_id e created_at fixos)."""
    from liquidity_graph.core.engine.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at="2026-01-16T00:00:00+00:00",
        config=dummy_config,
        meta={"source": "pytest"},
    )


@pytest.fixture
def manual_clock():
    """Relógio monotônico controlado pelo teste (`clock.advance(s)`)."""

    class _Clock:
        def __init__(self):
            self.now = 1000.0

        def __call__(self):
            return self.now

        def advance(self, seconds):
            self.now += seconds

    return _Clock()


# =====================================================
# Engines dummy
# =====================================================

@pytest.fixture
def DummyEngine():
    """
    Fixture factory que fornece uma engine mínima e duck-typed.

    Comportamentos (parâmetro `behavior`):
        - "ok": retorna EngineResult SUCCESS com `metrics={"calls": n}`
        - "raise": levanta RuntimeError
        - "wrong_type": retorna um dict em vez de EngineResult

    Cada instância registra as chamadas recebidas em `calls` (lista de
    EngineInputs) de forma thread-safe.
    """
    from liquidity_graph.core.engine.types import EngineResult, EngineStatus

    class _DummyEngine:
        def __init__(self, engine_id, behavior="ok", on_compute=None):
            self.id = engine_id
            self.behavior = behavior
            self.on_compute = on_compute
            self.calls = []
            self._lock = threading.Lock()

        def compute(self, inputs):
            with self._lock:
                self.calls.append(inputs)
                n = len(self.calls)
            if self.on_compute is not None:
                self.on_compute(self.id)
            if self.behavior == "raise":
                raise RuntimeError(f"{self.id} exploded")
            if self.behavior == "wrong_type":
                return {"status": "success"}
            return EngineResult(
                engine_id=self.id,
                status=EngineStatus.SUCCESS,
                summary=f"{self.id} ok",
                signal="neutral",
                confidence=50.0,
                metrics={"calls": n},
            )

    return _DummyEngine
