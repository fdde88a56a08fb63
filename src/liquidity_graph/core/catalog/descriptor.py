# src/liquidity_graph/core/catalog/descriptor.py
"""
EngineDescriptor: metadados estáticos de uma engine.

Um descriptor descreve uma unidade de cálculo do terminal sem carregar a
lógica do cálculo: identidade, agrupamento de exibição (pillar),
prioridade, intervalo de atualização, indicadores de entrada e
dependências upstream.

Decisões arquiteturais:
    - Descriptors são valores imutáveis (frozen dataclass)
    - Coleções são normalizadas para `frozenset` na construção
    - Campos inválidos levantam `InvalidDescriptorError` imediatamente
    - `pillar` e `priority` são informativos; nunca definem tier

Invariantes:
    - `id` é string não vazia
    - `refresh_interval_ms` é inteiro >= 0
    - `required_indicators` e `dependencies` nunca são None

Limites explícitos:
    - Não verifica se as dependências existem (ver `graph.validator`)
    - Não interpreta indicadores
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Mapping

from liquidity_graph.core.exceptions import InvalidDescriptorError


# Indicador curinga: a engine recebe todos os indicadores do ciclo.
ALL_INDICATORS = "*"

# Chaves aceitas por `from_mapping`; as variantes camelCase vêm das tabelas
# de registro originais do dashboard.
_KEY_ALIASES = {
    "refreshIntervalMs": "refresh_interval_ms",
    "updateInterval": "refresh_interval_ms",
    "requiredIndicators": "required_indicators",
}

_FIELDS = (
    "id",
    "name",
    "pillar",
    "priority",
    "refresh_interval_ms",
    "required_indicators",
    "dependencies",
)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _string_set(engine_id: Any, field_name: str, value: Any) -> FrozenSet[str]:
    if value is None:
        raise InvalidDescriptorError.for_field(engine_id, field_name, "must not be None")
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise InvalidDescriptorError.for_field(engine_id, field_name, "must be a collection of strings")
    items = list(value)
    for item in items:
        if not isinstance(item, str) or not item.strip():
            raise InvalidDescriptorError.for_field(engine_id, field_name, f"invalid entry {item!r}")
    return frozenset(items)


@dataclass(frozen=True)
class EngineDescriptor:
    """
    Metadados imutáveis de uma engine.

    Campos:
        - id: identificador único e estável
        - name: nome de exibição (sem restrição de unicidade)
        - pillar: agrupamento de exibição (0 foundation … 4 synthesis)
        - priority: desempate dentro de um tier (maior executa primeiro)
        - refresh_interval_ms: cadência de recálculo, consumida pelo coordinator
        - required_indicators: indicadores externos consumidos (opacos)
        - dependencies: ids das engines que precisam ter resultado antes desta
    """

    id: str
    name: str = ""
    pillar: int = 0
    priority: int = 0
    refresh_interval_ms: int = 0
    required_indicators: FrozenSet[str] = field(default_factory=frozenset)
    dependencies: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise InvalidDescriptorError.for_field(self.id, "id", "must be a non-empty string")
        if not isinstance(self.name, str):
            raise InvalidDescriptorError.for_field(self.id, "name", "must be a string")
        if not _is_int(self.pillar):
            raise InvalidDescriptorError.for_field(self.id, "pillar", "must be an integer")
        if not _is_int(self.priority):
            raise InvalidDescriptorError.for_field(self.id, "priority", "must be an integer")
        if not _is_int(self.refresh_interval_ms) or self.refresh_interval_ms < 0:
            raise InvalidDescriptorError.for_field(self.id, "refresh_interval_ms", "must be an integer >= 0")

        # frozen: normalização via object.__setattr__
        object.__setattr__(
            self,
            "required_indicators",
            _string_set(self.id, "required_indicators", self.required_indicators),
        )
        object.__setattr__(
            self,
            "dependencies",
            _string_set(self.id, "dependencies", self.dependencies),
        )

    @property
    def wants_all_indicators(self) -> bool:
        return ALL_INDICATORS in self.required_indicators

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "EngineDescriptor":
        """
        Constrói um descriptor a partir de uma entrada de catálogo.

        Aceita chaves snake_case e os aliases camelCase
        (`refreshIntervalMs`, `updateInterval`, `requiredIndicators`).
        Chaves desconhecidas são rejeitadas para que erros de digitação no
        catálogo não passem silenciosamente.

        Raises:
            InvalidDescriptorError: Se a entrada não for um mapa, tiver chaves
                desconhecidas ou campos inválidos.
        """
        if not isinstance(data, Mapping):
            raise InvalidDescriptorError.for_field(None, "<entry>", f"must be a mapping, got {type(data).__name__}")

        normalized: Dict[str, Any] = {}
        for key, value in data.items():
            name = _KEY_ALIASES.get(key, key)
            if name not in _FIELDS:
                raise InvalidDescriptorError.for_field(data.get("id"), str(key), "unknown field")
            normalized[name] = value

        if "id" not in normalized:
            raise InvalidDescriptorError.for_field(None, "id", "is required")

        for collection in ("required_indicators", "dependencies"):
            if collection in normalized and normalized[collection] is None:
                raise InvalidDescriptorError.for_field(normalized["id"], collection, "must not be None")

        return cls(**normalized)

    def to_dict(self) -> Dict[str, Any]:
        """Representação serializável e estável (coleções ordenadas)."""
        return {
            "id": self.id,
            "name": self.name,
            "pillar": self.pillar,
            "priority": self.priority,
            "refresh_interval_ms": self.refresh_interval_ms,
            "required_indicators": sorted(self.required_indicators),
            "dependencies": sorted(self.dependencies),
        }
