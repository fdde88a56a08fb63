# src/liquidity_graph/core/config/__init__.py
"""
Camada de configuração.

Responsabilidades do pacote:
    - Ler documentos YAML/JSON (config e catálogo) com validação de raiz
    - Resolver defaults + overrides locais via deep-merge estrito
    - Gerar fingerprint canônico para o manifest
    - Expor as opções do coordinator de forma tipada

Limites explícitos:
    - Não conhece o grafo de engines
    - Não executa engines
"""

from .errors import (
    CatalogFormatError,
    CatalogNotFoundError,
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    DuplicateKeyError,
    InvalidConfigRootTypeError,
    InvalidSettingError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import DEFAULT_CONFIG_PATH, RESOURCES_DIR, load_config, read_mapping
from .merge import deep_merge
from .settings import CoordinatorSettings, coordinator_settings

__all__ = [
    "CatalogFormatError",
    "CatalogNotFoundError",
    "ConfigError",
    "ConfigTypeConflictError",
    "CoordinatorSettings",
    "DEFAULT_CONFIG_PATH",
    "DefaultsNotFoundError",
    "DuplicateKeyError",
    "InvalidConfigRootTypeError",
    "InvalidSettingError",
    "RESOURCES_DIR",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "coordinator_settings",
    "deep_merge",
    "load_config",
    "read_mapping",
]
