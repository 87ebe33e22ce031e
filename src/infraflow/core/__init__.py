# src/infraflow/core/__init__.py
"""
Core do InfraFlow.

Implementação canônica e independente de provedor do orquestrador de
provisionamento: planos, registry de tipos, resolução de referências,
validação, ordenação e execução com rollback.

Componentes principais:
    - config   → carregamento, merge, hashing e settings do Orchestrator
    - pipeline → modelo de dados do plano, contratos de handler e registry
    - engine   → validação, planejamento (DAG) e execução

Limites explícitos:
    - Não contém handlers de provedor (ver `infraflow.steps`)
    - Não depende de CLI ou serviços externos
"""
