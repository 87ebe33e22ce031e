# src/infraflow/core/engine/__init__.py
"""
Engine do InfraFlow.

Este pacote contém a implementação responsável por **validar**,
**ordenar** e **executar** planos de provisionamento.

Componentes principais:
    - references → reconhecimento e resolução de `$step.<id>.<output>`
    - planner    → grafo efetivo, ordenação de Kahn e detecção de ciclos
    - validator  → validação acumulativa do plano contra o registry
    - conditions → avaliação de condições de execução
    - engine     → Orchestrator: execução sequencial com rollback

Invariantes:
    - Steps só são executados após suas dependências efetivas
    - Cada Step é executado no máximo uma vez por run
    - Após a primeira falha nenhum handler `execute` é invocado

Limites explícitos:
    - Não define tipos de Step concretos (ver `infraflow.steps`)
    - Não persiste resultados
"""

from .conditions import evaluate_condition
from .engine import Orchestrator, OrchestratorOptions, orchestrate
from .planner import (
    CycleDetectedError,
    DuplicateStepIdError,
    UnknownDependencyError,
    build_dependency_graph,
    detect_cycle,
    effective_dependencies,
    topological_sort,
)
from .references import (
    OUTPUT_REF_PATTERN,
    OutputRef,
    is_output_ref,
    iter_output_refs,
    parse_output_ref,
    resolve_step_params,
)
from .validator import validate_plan

__all__ = [
    "CycleDetectedError",
    "DuplicateStepIdError",
    "OUTPUT_REF_PATTERN",
    "Orchestrator",
    "OrchestratorOptions",
    "OutputRef",
    "UnknownDependencyError",
    "build_dependency_graph",
    "detect_cycle",
    "effective_dependencies",
    "evaluate_condition",
    "is_output_ref",
    "iter_output_refs",
    "orchestrate",
    "parse_output_ref",
    "resolve_step_params",
    "topological_sort",
    "validate_plan",
]
