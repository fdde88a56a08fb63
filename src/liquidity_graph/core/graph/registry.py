# src/liquidity_graph/core/graph/registry.py
"""
Registro estrutural de engines.

Este módulo define o `Registry`, o mapa imutável `id -> EngineDescriptor`
construído uma única vez a partir do catálogo.

O registry atua como a primeira camada de proteção do grafo, garantindo que:
    - cada descriptor possua identificador único
    - a ordem de declaração seja preservada explicitamente
    - consultas por id sejam O(1)

Decisões arquiteturais:
    - Duplicidade de id é erro fatal de carga (`DuplicateIdError`);
      nenhuma entrada é sobrescrita
    - Após a carga o registry é somente leitura
    - `replace()` devolve um NOVO registry; o chamador deve revalidar e
      recalcular os tiers (não existe atualização parcial)

Invariantes:
    - Cada descriptor registrado possui `id` único
    - `ids()` reflete exatamente a ordem de carga

Limites explícitos:
    - Não valida dependências (ver `validator`)
    - Não calcula tiers (ver `scheduler`)
    - Não executa engines
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple

from liquidity_graph.core.catalog.descriptor import EngineDescriptor
from liquidity_graph.core.config.hashing import compute_config_hash
from liquidity_graph.core.exceptions import DuplicateIdError


def display_order_key(descriptor: EngineDescriptor) -> Tuple[int, str]:
    """Ordenação de exibição: priority desc, id asc."""
    return (-descriptor.priority, descriptor.id)


@dataclass(frozen=True)
class Registry:
    """
    Mapa imutável de descriptors de engines.

    Use `Registry.load(...)` para construir; o construtor direto é interno.
    """

    _by_id: Mapping[str, EngineDescriptor] = field(default_factory=lambda: MappingProxyType({}))
    _order: Tuple[str, ...] = ()

    @classmethod
    def load(cls, descriptors: Iterable[EngineDescriptor]) -> "Registry":
        """
        Constrói o registry a partir de uma sequência de descriptors.

        Raises:
            DuplicateIdError: Se dois descriptors declararem o mesmo id.
        """
        by_id: Dict[str, EngineDescriptor] = {}
        order: List[str] = []
        for descriptor in descriptors:
            if descriptor.id in by_id:
                raise DuplicateIdError.for_id(descriptor.id)
            by_id[descriptor.id] = descriptor
            order.append(descriptor.id)
        return cls(_by_id=MappingProxyType(by_id), _order=tuple(order))

    # -----------------------------
    # Lookups
    # -----------------------------
    def get(self, engine_id: str) -> Optional[EngineDescriptor]:
        return self._by_id.get(engine_id)

    def ids(self) -> List[str]:
        return list(self._order)

    def descriptors(self) -> List[EngineDescriptor]:
        return [self._by_id[i] for i in self._order]

    def all_by_pillar(self, pillar: int) -> List[EngineDescriptor]:
        return sorted(
            (d for d in self._by_id.values() if d.pillar == pillar),
            key=display_order_key,
        )

    def all_by_priority(self) -> List[EngineDescriptor]:
        return sorted(self._by_id.values(), key=display_order_key)

    def dependencies_of(self, engine_id: str) -> List[str]:
        """Dependências declaradas (ordenadas), inclusive as não registradas."""
        descriptor = self._by_id.get(engine_id)
        if descriptor is None:
            raise KeyError(engine_id)
        return sorted(descriptor.dependencies)

    def dependents_of(self, engine_id: str) -> List[str]:
        """Engines que declaram `engine_id` como dependência direta."""
        return sorted(d.id for d in self._by_id.values() if engine_id in d.dependencies)

    def with_dependencies(self, engine_ids: Iterable[str]) -> FrozenSet[str]:
        """
        Fecho upstream: os ids informados mais todas as dependências
        transitivas registradas.

        Raises:
            KeyError: Se algum id informado não estiver no registry.
        """
        pending = list(engine_ids)
        for engine_id in pending:
            if engine_id not in self._by_id:
                raise KeyError(engine_id)

        selected = set()
        while pending:
            engine_id = pending.pop()
            if engine_id in selected or engine_id not in self._by_id:
                continue
            selected.add(engine_id)
            pending.extend(self._by_id[engine_id].dependencies)
        return frozenset(selected)

    # -----------------------------
    # Derivações
    # -----------------------------
    def replace(self, descriptor: EngineDescriptor) -> "Registry":
        """
        Retorna um novo registry com `descriptor` substituindo (ou anexando)
        a entrada de mesmo id. A posição original na ordem de carga é mantida.
        """
        if descriptor.id in self._by_id:
            updated = [descriptor if d.id == descriptor.id else d for d in self.descriptors()]
        else:
            updated = self.descriptors() + [descriptor]
        return Registry.load(updated)

    def fingerprint(self) -> str:
        """SHA-256 canônico do conteúdo (independe da ordem de carga)."""
        return compute_config_hash(
            {d.id: d.to_dict() for d in self._by_id.values()}
        )

    # -----------------------------
    # Protocolo de container
    # -----------------------------
    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, engine_id: object) -> bool:
        return engine_id in self._by_id

    def __iter__(self) -> Iterator[EngineDescriptor]:
        return iter(self.descriptors())
