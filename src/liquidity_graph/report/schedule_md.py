"""
src/liquidity_graph/report/schedule_md.py

Diagnóstico de startup em Markdown: tiers calculados e problemas do grafo.

Regras:
- Derivado exclusivamente do registry, do resultado do scheduler e dos erros
  já coletados; nada é recalculado aqui.
- Mesma entrada => mesmo Markdown (ordenação estável).

Estrutura mínima obrigatória:
# Engine Schedule

## Summary
## Execution Tiers
## Graph Problems
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from liquidity_graph.core.catalog.pillars import pillar_name
from liquidity_graph.core.exceptions import GraphError
from liquidity_graph.core.graph.registry import Registry
from liquidity_graph.core.graph.scheduler import TierResult, tier_label


REQUIRED_SECTIONS: List[str] = [
    "# Engine Schedule",
    "## Summary",
    "## Execution Tiers",
    "## Graph Problems",
]


def _escape(text: str) -> str:
    return text.replace("|", "\\|")


def render_schedule_md(
    registry: Registry,
    tiers: Optional[TierResult] = None,
    errors: Iterable[GraphError] = (),
) -> str:
    """Gera o Markdown de diagnóstico do grafo publicado (ou rejeitado)."""
    problems = list(errors)
    lines: List[str] = []

    lines.append("# Engine Schedule\n")

    lines.append("## Summary")
    lines.append(f"- **Engines**: `{len(registry)}`")
    lines.append(f"- **Fingerprint**: `{registry.fingerprint()}`")
    if tiers is None:
        lines.append("- **Tiers**: `<not computed>`")
    elif tiers.has_cycle:
        lines.append("- **Tiers**: `<cycle detected>`")
    else:
        lines.append(f"- **Tiers**: `{len(tiers.tiers)}`")
    lines.append(f"- **Problems**: `{len(problems) + (1 if tiers is not None and tiers.has_cycle else 0)}`")
    lines.append("")

    lines.append("## Execution Tiers")
    if tiers is None or tiers.has_cycle or not tiers.tiers:
        lines.append("No execution tiers available.")
    else:
        for index, tier in enumerate(tiers.tiers):
            lines.append(f"### Tier {index}: {tier_label(index)}")
            lines.append("| Engine | Name | Pillar | Priority | Refresh (ms) | Depends on |")
            lines.append("|---|---|---|---|---|---|")
            for engine_id in tier:
                d = registry.get(engine_id)
                deps = ", ".join(sorted(d.dependencies)) or "-"
                lines.append(
                    f"| `{d.id}` | {_escape(d.name)} | {_escape(pillar_name(d.pillar))} "
                    f"| {d.priority} | {d.refresh_interval_ms} | {deps} |"
                )
            lines.append("")
    lines.append("")

    lines.append("## Graph Problems")
    if tiers is not None and tiers.has_cycle:
        lines.append(f"- `GRAPH_CYCLE_DETECTED`: {' -> '.join(tiers.cycle_path + tiers.cycle_path[:1])}")
    for error in problems:
        lines.append(f"- `{error.code}`: {error.message}")
    if not problems and not (tiers is not None and tiers.has_cycle):
        lines.append("No problems found.")

    content = "\n".join(lines)

    for sec in REQUIRED_SECTIONS:
        if sec not in content:
            raise RuntimeError(f"Schedule report generation failed: missing required section: {sec}")

    return content
