# src/liquidity_graph/core/config/settings.py
"""
Leitura tipada da configuração consumida pelo coordinator.

O dicionário resolvido pelo loader é a fonte de verdade; este módulo apenas
extrai e valida as chaves que o coordinator usa:

    coordinator:
      max_workers: 8
      engine_timeout_s: 30.0      # null desliga o timeout
      retry:
        max_retries: 2
        base_delay_s: 1.0
        backoff_multiplier: 1.5
      circuit_breaker:
        enabled: true
        threshold: 3
        reset_after_s: 60.0
    engines:
      <engine-id>:
        enabled: false

Chaves ausentes assumem os mesmos valores do defaults embarcado, o que
permite construir um coordinator a partir de `{}` em testes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

from .errors import InvalidSettingError


@dataclass(frozen=True)
class CoordinatorSettings:
    max_workers: int = 8
    engine_timeout_s: Optional[float] = 30.0
    max_retries: int = 2
    retry_base_delay_s: float = 1.0
    retry_backoff_multiplier: float = 1.5
    breaker_enabled: bool = True
    breaker_threshold: int = 3
    breaker_reset_after_s: float = 60.0
    disabled_engines: FrozenSet[str] = field(default_factory=frozenset)

    def is_enabled(self, engine_id: str) -> bool:
        return engine_id not in self.disabled_engines

    def retry_delay_s(self, attempt: int) -> float:
        """Espera antes da tentativa `attempt + 1` (attempt começa em 1)."""
        return self.retry_base_delay_s * self.retry_backoff_multiplier ** (attempt - 1)


def _section(config: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = (config or {}).get(key, {})
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidSettingError(f"Seção '{key}' deve ser dict, recebido: {type(value).__name__}")
    return value


def _subsection(section: Dict[str, Any], key: str, name: str) -> Dict[str, Any]:
    value = section.get(key, {}) or {}
    if not isinstance(value, dict):
        raise InvalidSettingError(f"'{name}' deve ser dict")
    return value


def _int_at_least(value: Any, name: str, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise InvalidSettingError(f"'{name}' deve ser inteiro >= {minimum}, recebido: {value!r}")
    return value


def _number_at_least(value: Any, name: str, minimum: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < minimum:
        raise InvalidSettingError(f"'{name}' deve ser número >= {minimum}, recebido: {value!r}")
    return float(value)


def coordinator_settings(config: Dict[str, Any]) -> CoordinatorSettings:
    """
    Extrai `CoordinatorSettings` da configuração resolvida.

    Raises:
        InvalidSettingError: Se algum valor estiver fora do domínio.
    """
    coordinator = _section(config, "coordinator")
    breaker = _subsection(coordinator, "circuit_breaker", "coordinator.circuit_breaker")
    retry = _subsection(coordinator, "retry", "coordinator.retry")

    timeout = coordinator.get("engine_timeout_s", 30.0)
    if timeout is not None:
        timeout = _number_at_least(timeout, "coordinator.engine_timeout_s", 0)
        if timeout == 0:
            raise InvalidSettingError("'coordinator.engine_timeout_s' deve ser > 0 (use null para desligar)")

    disabled = set()
    for engine_id, engine_cfg in _section(config, "engines").items():
        engine_cfg = engine_cfg or {}
        if not isinstance(engine_cfg, dict):
            raise InvalidSettingError(f"'engines.{engine_id}' deve ser dict")
        if not bool(engine_cfg.get("enabled", True)):
            disabled.add(str(engine_id))

    return CoordinatorSettings(
        max_workers=_int_at_least(coordinator.get("max_workers", 8), "coordinator.max_workers", 1),
        engine_timeout_s=timeout,
        max_retries=_int_at_least(retry.get("max_retries", 2), "coordinator.retry.max_retries", 0),
        retry_base_delay_s=_number_at_least(
            retry.get("base_delay_s", 1.0), "coordinator.retry.base_delay_s", 0
        ),
        retry_backoff_multiplier=_number_at_least(
            retry.get("backoff_multiplier", 1.5), "coordinator.retry.backoff_multiplier", 1
        ),
        breaker_enabled=bool(breaker.get("enabled", True)),
        breaker_threshold=_int_at_least(
            breaker.get("threshold", 3), "coordinator.circuit_breaker.threshold", 1
        ),
        breaker_reset_after_s=_number_at_least(
            breaker.get("reset_after_s", 60.0), "coordinator.circuit_breaker.reset_after_s", 0
        ),
        disabled_engines=frozenset(disabled),
    )
