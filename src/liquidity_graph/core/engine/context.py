# src/liquidity_graph/core/engine/context.py
"""
Contexto de execução compartilhado do coordinator.

O `RunContext` é o único canal de log estruturado e de warnings não fatais
das engines e do coordinator. Não existe logger global: todo evento carrega
`run_id` e `engine_id` e fica disponível para testes, manifest e relatórios.

Princípios fundamentais:
    - Isolamento por execução (cada coordinator possui seu contexto)
    - Eventos estruturados (dict), nunca texto solto
    - Seguro para escrita concorrente (engines de um tier rodam em threads)

Invariantes:
    - Logs sempre incluem `run_id` e `engine_id`
    - Warnings são agrupados por `engine_id`

Limites explícitos:
    - Não executa engines
    - Não persiste eventos automaticamente
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


# Engine id usado em eventos do próprio coordinator.
COORDINATOR_ID = "__coordinator__"


@dataclass
class RunContext:
    """
    Campos canônicos:
    - run_id: identificador único da execução
    - created_at: timestamp UTC de criação
    - config: configuração efetiva (defaults + local deep-merge)
    - meta: metadados livres (ex.: fingerprint do catálogo)
    - warnings: warnings por engine_id
    - events: log estruturado de eventos
    """

    run_id: str
    created_at: str
    config: Dict[str, Any] = field(default_factory=dict)
    meta: Dict[str, Any] = field(default_factory=dict)

    warnings: Dict[str, List[str]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, engine_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "engine_id": engine_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        with self._lock:
            self.events.append(event)

    def add_warning(self, *, engine_id: str, message: str) -> None:
        with self._lock:
            self.warnings.setdefault(engine_id, []).append(message)

    def warnings_for(self, engine_id: str) -> List[str]:
        with self._lock:
            return list(self.warnings.get(engine_id, []))

    def events_for(self, engine_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [e for e in self.events if e.get("engine_id") == engine_id]


def new_run_context(
    config: Optional[Dict[str, Any]] = None,
    *,
    run_id: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> RunContext:
    return RunContext(
        run_id=run_id or uuid.uuid4().hex,
        created_at=datetime.now(timezone.utc).isoformat(),
        config=dict(config or {}),
        meta=dict(meta or {}),
    )
