# src/liquidity_graph/core/config/errors.py
"""
Exceções da camada de configuração e de catálogo.

Configuração (coordinator, engines habilitadas) e catálogo (lista de
descriptors) são arquivos declarativos lidos no startup. Qualquer problema
estrutural nesses arquivos é fatal: o processo não deve seguir com uma
configuração parcial.

Invariantes:
    - Todas as exceções desta camada herdam de `ConfigError`
    - Nenhuma exceção aqui representa falha de execução de engine

Limites explícitos:
    - Não representa erros de grafo (ver `core.exceptions`)
    - Não realiza fallback ou recovery
"""


class ConfigError(Exception):
    """
    Exceção base para erros de configuração e de catálogo.

    Permite captura genérica no startup, separando falhas de arquivo
    de falhas estruturais do grafo.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Arquivo de defaults não encontrado.

    Decisões arquiteturais:
        - O arquivo de defaults é obrigatório
        - Não existe configuração efetiva sem defaults
    """


class CatalogNotFoundError(ConfigError):
    """Arquivo de catálogo de engines não encontrado."""


class UnsupportedConfigFormatError(ConfigError):
    """
    Extensão de arquivo não suportada.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """O conteúdo raiz do arquivo não é um mapa chave-valor."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge defaults + local.

    Exemplo de conflito:
        - base:     {"coordinator": {"max_workers": 8}}
        - override: {"coordinator": "fast"}
    """


class CatalogFormatError(ConfigError):
    """A seção `engines` do catálogo não tem a forma esperada."""


class InvalidSettingError(ConfigError):
    """Valor de configuração do coordinator fora do domínio permitido."""


class DuplicateKeyError(ConfigError):
    """
    Chave repetida dentro de um mesmo mapa do arquivo.

    YAML e JSON aceitam a repetição e mantêm só o último valor; aqui a
    repetição é rejeitada para que nenhuma entrada seja sobrescrita.
    """

    def __init__(self, key, location: str = "") -> None:
        self.key = key
        suffix = f" ({location})" if location else ""
        super().__init__(f"Chave duplicada: '{key}'{suffix}")
