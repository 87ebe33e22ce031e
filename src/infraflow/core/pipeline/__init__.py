# src/infraflow/core/pipeline/__init__.py
"""
# Pipeline Core — InfraFlow

Este pacote define os **contratos canônicos** e as **estruturas de dados**
de um plano de provisionamento e de sua execução.

## Componentes

- **types**: `StepStatus`, `RunStatus`, `StepCategory`, `ConditionCheck`,
  `StepDefinition`, `StepResult`, `OrchestrationResult`
- **plan**: `ExecutionPlan`, `PlanStep`, `StepCondition`
- **step**: `StepHandler` (Protocol), `StepExecutionContext`, `FunctionStepHandler`
- **context**: `RunContext` e `StepLogger` (log de eventos por run)
- **registry**: `StepTypeRegistry` (tipo → definição + handler)
- **loader**: `plan_from_dict`, `load_plan`

## Limites Explícitos

- Não valida nem ordena planos (ver `core.engine`)
- Não executa Steps
"""

from .context import RunContext, StepLogger
from .loader import (
    PlanError,
    PlanFileNotFoundError,
    PlanParseError,
    UnsupportedPlanFormatError,
    load_plan,
    plan_from_dict,
)
from .plan import ExecutionPlan, PlanStep, StepCondition
from .registry import StepTypeAlreadyRegisteredError, StepTypeRegistry
from .step import FunctionStepHandler, StepExecutionContext, StepHandler
from .types import (
    ConditionCheck,
    OrchestrationResult,
    RunStatus,
    StepCategory,
    StepDefinition,
    StepResult,
    StepStatus,
)

__all__ = [
    "ConditionCheck",
    "ExecutionPlan",
    "FunctionStepHandler",
    "OrchestrationResult",
    "PlanError",
    "PlanFileNotFoundError",
    "PlanParseError",
    "PlanStep",
    "RunContext",
    "RunStatus",
    "StepCategory",
    "StepCondition",
    "StepDefinition",
    "StepExecutionContext",
    "StepHandler",
    "StepLogger",
    "StepResult",
    "StepStatus",
    "StepTypeAlreadyRegisteredError",
    "StepTypeRegistry",
    "UnsupportedPlanFormatError",
    "load_plan",
    "plan_from_dict",
]
