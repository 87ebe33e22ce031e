# src/infraflow/__init__.py
"""
InfraFlow — orquestrador de planos de provisionamento de infraestrutura.

Um plano é um DAG de Steps tipados. Cada Step declara parâmetros (que
podem referenciar outputs de Steps anteriores com `$step.<id>.<output>`),
dependências explícitas, uma condição opcional de execução e uma política
de rollback. O Orchestrator valida o plano, ordena os Steps e os executa
em sequência, desfazendo os Steps concluídos quando uma falha pede
rollback.

Arquitetura em alto nível:
    - core.config   → carregamento, merge, hashing e settings do Orchestrator
    - core.pipeline → modelo do plano, contratos de handler, registry, loader
    - core.engine   → referências, validação, planejamento e execução
    - steps         → catálogo embutido de tipos de Step (GCP)

Limites explícitos:
    - Não contém clientes de API de provedor
    - Não persiste resultados nem estado entre runs
"""

from .core.engine import (
    Orchestrator,
    OrchestratorOptions,
    detect_cycle,
    evaluate_condition,
    orchestrate,
    resolve_step_params,
    topological_sort,
    validate_plan,
)
from .core.pipeline import (
    ConditionCheck,
    ExecutionPlan,
    FunctionStepHandler,
    OrchestrationResult,
    PlanStep,
    RunStatus,
    StepCategory,
    StepCondition,
    StepDefinition,
    StepExecutionContext,
    StepHandler,
    StepResult,
    StepStatus,
    StepTypeRegistry,
    load_plan,
    plan_from_dict,
)
from .steps import ResourceManagerFactories, register_builtin_steps, register_builtin_steps_dry_run

__all__ = [
    "ConditionCheck",
    "ExecutionPlan",
    "FunctionStepHandler",
    "OrchestrationResult",
    "Orchestrator",
    "OrchestratorOptions",
    "PlanStep",
    "ResourceManagerFactories",
    "RunStatus",
    "StepCategory",
    "StepCondition",
    "StepDefinition",
    "StepExecutionContext",
    "StepHandler",
    "StepResult",
    "StepStatus",
    "StepTypeRegistry",
    "detect_cycle",
    "evaluate_condition",
    "load_plan",
    "orchestrate",
    "plan_from_dict",
    "register_builtin_steps",
    "register_builtin_steps_dry_run",
    "resolve_step_params",
    "topological_sort",
    "validate_plan",
]
