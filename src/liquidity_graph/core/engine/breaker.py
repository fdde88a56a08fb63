# src/liquidity_graph/core/engine/breaker.py
"""
Circuit breaker por engine.

Após `threshold` falhas consecutivas o circuito abre e a engine deixa de ser
invocada até que `reset_after_s` segundos se passem. Depois disso uma
tentativa é liberada (half-open): sucesso fecha o circuito, falha reabre.

O relógio é injetável para que testes não dependam de tempo real.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict

from liquidity_graph.core.errors import circuit_open
from liquidity_graph.core.exceptions import CircuitOpenError


Clock = Callable[[], float]


class CircuitBreaker:
    def __init__(
        self,
        *,
        threshold: int = 3,
        reset_after_s: float = 60.0,
        enabled: bool = True,
        clock: Clock = time.monotonic,
    ) -> None:
        if threshold < 1:
            raise ValueError("threshold must be >= 1")
        self.threshold = threshold
        self.reset_after_s = reset_after_s
        self.enabled = enabled
        self._clock = clock
        self._lock = threading.Lock()
        self._failures: Dict[str, int] = {}
        self._opened_at: Dict[str, float] = {}

    def failures(self, engine_id: str) -> int:
        with self._lock:
            return self._failures.get(engine_id, 0)

    def is_open(self, engine_id: str) -> bool:
        with self._lock:
            return self._is_open_locked(engine_id)

    def _is_open_locked(self, engine_id: str) -> bool:
        opened_at = self._opened_at.get(engine_id)
        if opened_at is None:
            return False
        return self._clock() - opened_at < self.reset_after_s

    def check(self, engine_id: str) -> None:
        """
        Raises:
            CircuitOpenError: Se o circuito da engine estiver aberto.
        """
        if not self.enabled:
            return
        with self._lock:
            if not self._is_open_locked(engine_id):
                return
            failures = self._failures.get(engine_id, 0)
            retry_in = self.reset_after_s - (self._clock() - self._opened_at[engine_id])
        payload = circuit_open(engine_id=engine_id, failures=failures, retry_in_s=retry_in)
        raise CircuitOpenError(message=payload.message, details=payload.details, hint=payload.hint)

    def record_success(self, engine_id: str) -> None:
        with self._lock:
            self._failures.pop(engine_id, None)
            self._opened_at.pop(engine_id, None)

    def record_failure(self, engine_id: str) -> None:
        with self._lock:
            count = self._failures.get(engine_id, 0) + 1
            self._failures[engine_id] = count
            if self.enabled and count >= self.threshold:
                self._opened_at[engine_id] = self._clock()
