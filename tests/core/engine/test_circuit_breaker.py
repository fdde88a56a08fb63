# tests/core/engine/test_circuit_breaker.py
"""Testes do circuit breaker por engine (relógio manual)."""

import pytest

try:
    from liquidity_graph.core.engine.breaker import CircuitBreaker
    from liquidity_graph.core.exceptions import CircuitOpenError
    from liquidity_graph.core.errors import ENGINE_CIRCUIT_OPEN
except Exception as e:
    CircuitBreaker = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing CircuitBreaker. Import error: {_IMPORT_ERR}")


def test_opens_after_threshold(manual_clock):
    _require_imports()
    breaker = CircuitBreaker(threshold=3, reset_after_s=60.0, clock=manual_clock)

    breaker.record_failure("tail-risk")
    breaker.record_failure("tail-risk")
    breaker.check("tail-risk")
    breaker.record_failure("tail-risk")

    assert breaker.is_open("tail-risk")
    with pytest.raises(CircuitOpenError) as exc_info:
        breaker.check("tail-risk")

    payload = exc_info.value.to_payload()
    assert payload.type == ENGINE_CIRCUIT_OPEN
    assert payload.details["engine_id"] == "tail-risk"
    assert payload.details["consecutive_failures"] == 3
    assert payload.details["retry_in_s"] == 60.0


def test_breakers_are_per_engine(manual_clock):
    _require_imports()
    breaker = CircuitBreaker(threshold=1, clock=manual_clock)
    breaker.record_failure("a")

    assert breaker.is_open("a")
    assert not breaker.is_open("b")
    breaker.check("b")


def test_half_open_after_reset_window(manual_clock):
    _require_imports()
    breaker = CircuitBreaker(threshold=2, reset_after_s=30.0, clock=manual_clock)
    breaker.record_failure("a")
    breaker.record_failure("a")

    manual_clock.advance(29.9)
    assert breaker.is_open("a")

    manual_clock.advance(0.2)
    assert not breaker.is_open("a")
    breaker.check("a")

    # falha na tentativa half-open reabre imediatamente
    breaker.record_failure("a")
    assert breaker.is_open("a")


def test_success_closes_and_resets_count(manual_clock):
    _require_imports()
    breaker = CircuitBreaker(threshold=2, clock=manual_clock)
    breaker.record_failure("a")
    breaker.record_success("a")
    breaker.record_failure("a")

    assert breaker.failures("a") == 1
    assert not breaker.is_open("a")


def test_disabled_breaker_never_opens(manual_clock):
    _require_imports()
    breaker = CircuitBreaker(threshold=1, enabled=False, clock=manual_clock)
    for _ in range(5):
        breaker.record_failure("a")

    breaker.check("a")
    assert breaker.failures("a") == 5


def test_threshold_must_be_positive():
    _require_imports()
    with pytest.raises(ValueError):
        CircuitBreaker(threshold=0)
