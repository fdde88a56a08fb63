# src/liquidity_graph/core/__init__.py
"""
Core do LIQUIDITY² Graph.

Componentes principais:
    - catalog      → metadados estáticos das engines
    - graph        → registry, validator, scheduler e snapshot (puros)
    - engine       → execução tier a tier com barreira entre tiers
    - config       → resolução de configuração (merge estrito, hashing)
    - traceability → manifest e Event Log por ciclo

Princípios fundamentais:
    - Nenhuma decisão silenciosa: todo erro estrutural é tipado
    - O mesmo catálogo produz sempre os mesmos tiers
"""
