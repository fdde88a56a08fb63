# src/liquidity_graph/core/catalog/pillars.py
"""Nomes de exibição dos pillars (agrupamento de UI, sem efeito em scheduling)."""

from typing import Dict

PILLAR_NAMES: Dict[int, str] = {
    0: "Foundation Layer",
    1: "Liquidity Intelligence",
    2: "Network & Market Structure",
    3: "Economic Context",
    4: "Synthesis & Intelligence",
}


def pillar_name(pillar: int) -> str:
    return PILLAR_NAMES.get(pillar, "Unknown")
