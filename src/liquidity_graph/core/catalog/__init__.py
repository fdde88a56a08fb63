# src/liquidity_graph/core/catalog/__init__.py
"""
Catálogo estático de engines: descriptors, nomes de pillar e leitura de
arquivos de catálogo.
"""

from .descriptor import ALL_INDICATORS, EngineDescriptor
from .loader import DEFAULT_CATALOG_PATH, load_catalog, parse_catalog
from .pillars import PILLAR_NAMES, pillar_name

__all__ = [
    "ALL_INDICATORS",
    "DEFAULT_CATALOG_PATH",
    "EngineDescriptor",
    "PILLAR_NAMES",
    "load_catalog",
    "parse_catalog",
    "pillar_name",
]
