# src/liquidity_graph/core/engine/protocol.py
"""
Contrato mínimo de uma engine.

Uma engine é qualquer objeto com `id` e `compute(inputs) -> EngineResult`.
O coordinator não exige herança; a checagem é estrutural (duck typing).
Engines que também servem o dashboard implementam `PresentableEngine`.
"""

from __future__ import annotations

from typing import Any, Dict, Protocol, runtime_checkable

from .types import EngineInputs, EngineResult


@runtime_checkable
class Engine(Protocol):
    id: str

    def compute(self, inputs: EngineInputs) -> EngineResult:
        ...


@runtime_checkable
class PresentableEngine(Engine, Protocol):
    def dashboard_summary(self, result: EngineResult) -> Dict[str, Any]:
        ...

    def detail_view(self, result: EngineResult) -> Dict[str, Any]:
        ...
