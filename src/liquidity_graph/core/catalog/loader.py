# src/liquidity_graph/core/catalog/loader.py
"""
Carregamento do catálogo de engines.

O catálogo é configuração estática: um documento YAML/JSON com a seção
`engines`, lido uma única vez no startup (ou recarregado inteiro).

Formatos aceitos para `engines`:
    - lista de entradas, cada uma com `id`
    - mapa `id -> entrada` (forma das tabelas de registro do dashboard);
      quando a entrada declara `id`, ele deve coincidir com a chave

A ordem de declaração é preservada. Na forma lista, `id` repetido é
rejeitado por `Registry.load`; na forma mapa, a chave repetida é rejeitada
ainda na leitura do arquivo (`CatalogFormatError`), antes que o parser
YAML/JSON descarte a primeira entrada.
"""

from __future__ import annotations

from typing import Any, List, Optional

from liquidity_graph.core.config.errors import (
    CatalogFormatError,
    CatalogNotFoundError,
    DuplicateKeyError,
)
from liquidity_graph.core.config.loader import RESOURCES_DIR, PathLike, read_mapping

from .descriptor import EngineDescriptor


DEFAULT_CATALOG_PATH = RESOURCES_DIR / "engines.yaml"


def parse_catalog(document: Any) -> List[EngineDescriptor]:
    """
    Converte um documento de catálogo já carregado em descriptors.

    Raises:
        CatalogFormatError: Se `engines` estiver ausente ou com forma inválida.
        InvalidDescriptorError: Se alguma entrada tiver campo inválido.
    """
    if not isinstance(document, dict) or "engines" not in document:
        raise CatalogFormatError("Catálogo deve conter a seção 'engines'")

    entries = document["engines"]
    if entries is None:
        return []

    if isinstance(entries, list):
        return [EngineDescriptor.from_mapping(entry) for entry in entries]

    if isinstance(entries, dict):
        descriptors: List[EngineDescriptor] = []
        for key, entry in entries.items():
            if not isinstance(entry, dict):
                raise CatalogFormatError(f"Entrada '{key}' deve ser um mapa")
            declared = entry.get("id", key)
            if declared != key:
                raise CatalogFormatError(f"Entrada '{key}' declara id divergente: '{declared}'")
            descriptors.append(EngineDescriptor.from_mapping({**entry, "id": key}))
        return descriptors

    raise CatalogFormatError(
        f"'engines' deve ser lista ou mapa, recebido: {type(entries).__name__}"
    )


def load_catalog(path: Optional[PathLike] = None) -> List[EngineDescriptor]:
    """
    Lê o catálogo em `path` (ou o catálogo embarcado) e retorna os descriptors.

    Raises:
        CatalogNotFoundError: Se o arquivo não existir.
        CatalogFormatError: Se a estrutura for inválida ou repetir chaves.
    """
    try:
        document = read_mapping(
            path if path is not None else DEFAULT_CATALOG_PATH,
            missing_error=CatalogNotFoundError,
        )
    except DuplicateKeyError as exc:
        raise CatalogFormatError(f"Catálogo repete a chave '{exc.key}': {exc}") from exc
    return parse_catalog(document)
