# src/liquidity_graph/core/config/loader.py
"""
Loader de configuração do coordinator.

A configuração efetiva é resolvida a partir de:
    - um arquivo de defaults (obrigatório; por padrão o defaults embarcado
      no pacote, `resources/config.defaults.yaml`)
    - um arquivo local de overrides (opcional)

O mesmo leitor de documentos (`read_mapping`) é usado pelo loader de
catálogo, de modo que YAML e JSON são aceitos nos dois casos com as mesmas
regras estruturais.

Invariantes:
    - O resultado é sempre um `dict` puro
    - Overrides nunca mutam os defaults
    - Arquivo local ausente é ignorado; defaults ausente é fatal

Limites explícitos:
    - Não interpreta os valores (ver `settings.coordinator_settings`)
    - Não lê variáveis de ambiente
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Type, Union

import yaml  # PyYAML

from .errors import (
    ConfigError,
    DefaultsNotFoundError,
    DuplicateKeyError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


RESOURCES_DIR = Path(__file__).resolve().parents[2] / "resources"
DEFAULT_CONFIG_PATH = RESOURCES_DIR / "config.defaults.yaml"

PathLike = Union[str, Path]

_YAML_MERGE_TAG = "tag:yaml.org,2002:merge"


class UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader que rejeita chaves repetidas no mesmo mapa."""

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _ in node.value:
            if key_node.tag == _YAML_MERGE_TAG:
                continue
            key = self.construct_object(key_node, deep=deep)
            try:
                repeated = key in seen
            except TypeError:
                # chave não hashable: o construtor base reporta o erro
                break
            if repeated:
                raise DuplicateKeyError(key, f"linha {key_node.start_mark.line + 1}")
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _unique_pairs(pairs):
    data: Dict[str, Any] = {}
    for key, value in pairs:
        if key in data:
            raise DuplicateKeyError(key)
        data[key] = value
    return data


def read_mapping(
    path: PathLike,
    *,
    missing_error: Type[ConfigError] = DefaultsNotFoundError,
) -> Dict[str, Any]:
    """
    Lê um arquivo YAML/JSON cujo conteúdo raiz deve ser um dicionário.

    Arquivos vazios são interpretados como `{}`.

    Args:
        path (PathLike): Caminho do arquivo.
        missing_error (Type[ConfigError]): Exceção levantada se o arquivo
            não existir (defaults e catálogo usam tipos distintos).

    Returns:
        Dict[str, Any]: Conteúdo carregado.

    Raises:
        ConfigError: Subclasse indicada em `missing_error` se o arquivo não existir.
        UnsupportedConfigFormatError: Se a extensão não for suportada.
        DuplicateKeyError: Se um mesmo mapa repetir uma chave.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    file = Path(path)
    if not file.exists():
        raise missing_error(f"Arquivo não encontrado: {file}")

    suffix = file.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with file.open("r", encoding="utf-8") as f:
            data = yaml.load(f, Loader=UniqueKeyLoader)

    elif suffix == ".json":
        with file.open("r", encoding="utf-8") as f:
            data = json.load(f, object_pairs_hook=_unique_pairs)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {file.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Raiz de {file.name} deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def load_config(
    *,
    defaults_path: Optional[PathLike] = None,
    local_path: Optional[PathLike] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva.

    Args:
        defaults_path (Optional[PathLike]): Defaults; usa o arquivo embarcado
            quando omitido.
        local_path (Optional[PathLike]): Overrides locais, aplicados por
            deep-merge quando o arquivo existir.

    Returns:
        Dict[str, Any]: Configuração final resolvida.

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults não existir.
        UnsupportedConfigFormatError: Se o formato não for suportado.
        InvalidConfigRootTypeError: Se a raiz não for um dicionário.
        ConfigTypeConflictError: Se o override conflitar em tipo com os defaults.
    """
    defaults = read_mapping(defaults_path if defaults_path is not None else DEFAULT_CONFIG_PATH)

    if local_path is None:
        return defaults

    local_file = Path(local_path)
    if not local_file.exists():
        return defaults

    return deep_merge(defaults, read_mapping(local_file))
