# src/liquidity_graph/core/traceability/__init__.py
from .manifest import (
    CycleManifest,
    add_event,
    create_manifest,
    engine_failed,
    engine_finished,
    engine_started,
    load_manifest,
    save_manifest,
)

__all__ = [
    "CycleManifest",
    "add_event",
    "create_manifest",
    "engine_failed",
    "engine_finished",
    "engine_started",
    "load_manifest",
    "save_manifest",
]
