"""
src/liquidity_graph/report/cycle_md.py

Relatório Markdown de um ciclo do coordinator.

Regras:
- Derivado EXCLUSIVAMENTE do manifest do ciclo (dict).
- Não infere nem recalcula status; o que não está no manifest não aparece.
- Mesmo manifest => mesmo Markdown.

Estrutura mínima obrigatória:
# Cycle Report

## Summary
## Engines
## Failures
## Traceability
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple


REQUIRED_SECTIONS: List[str] = [
    "# Cycle Report",
    "## Summary",
    "## Engines",
    "## Failures",
    "## Traceability",
]


def _sorted_items(d: Any) -> List[Tuple[str, Any]]:
    if not isinstance(d, dict):
        return []
    return sorted(d.items(), key=lambda kv: kv[0])


def _as_pretty_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True, indent=2)


def render_cycle_md(manifest: Dict[str, Any]) -> str:
    """Gera o relatório de um ciclo a partir de `CycleManifest.to_dict()`."""
    if not isinstance(manifest, dict) or not manifest:
        raise ValueError("Manifest is required to render the cycle report")

    cycle = manifest.get("cycle") if isinstance(manifest.get("cycle"), dict) else {}
    inputs = manifest.get("inputs") if isinstance(manifest.get("inputs"), dict) else {}
    engines = manifest.get("engines") if isinstance(manifest.get("engines"), dict) else {}
    events = manifest.get("events") if isinstance(manifest.get("events"), list) else []

    lines: List[str] = []
    lines.append("# Cycle Report\n")

    lines.append("## Summary")
    lines.append(f"- **Cycle ID**: `{cycle.get('cycle_id', '<unknown>')}`")
    lines.append(f"- **Run ID**: `{cycle.get('run_id', '<unknown>')}`")
    lines.append(f"- **Started At (UTC)**: `{cycle.get('started_at', '<unknown>')}`")
    lines.append(f"- **Package Version**: `{cycle.get('package_version', '<unknown>')}`")
    counts: Dict[str, int] = {}
    for _, entry in _sorted_items(engines):
        status = entry.get("status", "unknown") if isinstance(entry, dict) else "unknown"
        counts[status] = counts.get(status, 0) + 1
    for status, count in _sorted_items(counts):
        lines.append(f"- **{status}**: `{count}`")
    lines.append("")

    lines.append("## Engines")
    if engines:
        lines.append("| Engine | Tier | Status | Duration (ms) | Summary |")
        lines.append("|---|---|---|---|---|")
        for engine_id, entry in _sorted_items(engines):
            if not isinstance(entry, dict):
                continue
            tier = entry.get("tier", "-")
            duration = entry.get("duration_ms", "-")
            summary = (entry.get("summary") or "").replace("|", "\\|")
            lines.append(f"| `{engine_id}` | {tier} | `{entry.get('status', 'unknown')}` | {duration} | {summary} |")
    else:
        lines.append("No engines recorded in the manifest.")
    lines.append("")

    lines.append("## Failures")
    # falhas e engines não invocadas por dependência indisponível
    failures = [
        (engine_id, entry)
        for engine_id, entry in _sorted_items(engines)
        if isinstance(entry, dict) and (entry.get("status") == "failed" or entry.get("error"))
    ]
    if failures:
        for engine_id, entry in failures:
            error = entry.get("error")
            lines.append(f"### {engine_id}")
            lines.append(f"- **Status**: `{entry.get('status', 'unknown')}`")
            lines.append("```json")
            lines.append(_as_pretty_json(error or {}))
            lines.append("```")
    else:
        lines.append("No failed engines in this cycle.")
    lines.append("")

    lines.append("## Traceability")
    lines.append(f"- Events recorded: `{len(events)}`")
    lines.append("### inputs")
    lines.append("```json")
    lines.append(_as_pretty_json(inputs))
    lines.append("```")

    content = "\n".join(lines)

    for sec in REQUIRED_SECTIONS:
        if sec not in content:
            raise RuntimeError(f"Cycle report generation failed: missing required section: {sec}")

    return content
