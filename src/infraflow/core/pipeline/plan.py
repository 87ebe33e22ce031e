# src/infraflow/core/pipeline/plan.py
"""
Modelo declarativo de plano de execução.

Um `ExecutionPlan` é construído uma única vez pelo chamador (ou por um
blueprint) e nunca é mutado pelo Orchestrator. Cada `PlanStep` declara
o tipo a executar, seus parâmetros (literais ou referências `$step.X.Y`)
e, opcionalmente, dependências explícitas, condição, rollback e timeout.

Invariantes (checados pelo validador, não pelo construtor):
    - IDs de Step são únicos dentro do plano
    - Todo `depends_on`, referência de output e `condition.step_id`
      aponta para um Step do mesmo plano
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class StepCondition:
    """Condição avaliada contra o *resultado* de outro Step (ver `engine.conditions`)."""

    step_id: str
    check: str


@dataclass(frozen=True)
class PlanStep:
    """
    Unidade de trabalho declarada em um plano.

    Campos:
        - id: único dentro do plano
        - type: nome de tipo registrado no StepTypeRegistry
        - name: rótulo de exibição
        - params: literais ou referências `$step.<id>.<output>`
        - depends_on: dependências explícitas (somam-se às implícitas)
        - condition: gate opcional sobre o resultado de outro Step
        - rollback_on_failure: dispara rollback dos Steps concluídos se este falhar
        - timeout_ms: limite da invocação do handler (ms)
    """

    id: str
    type: str
    name: str = ""
    params: Mapping[str, Any] = field(default_factory=dict)
    depends_on: List[str] = field(default_factory=list)
    condition: Optional[StepCondition] = None
    rollback_on_failure: bool = False
    timeout_ms: Optional[int] = None

    @property
    def label(self) -> str:
        return self.name or self.id


@dataclass(frozen=True)
class ExecutionPlan:
    """Plano declarativo completo; `params` é informativo e não é injetado nos Steps."""

    id: str
    name: str
    steps: List[PlanStep] = field(default_factory=list)
    description: str = ""
    params: Dict[str, Any] = field(default_factory=dict)
    created_at: str = field(default_factory=_utc_now_iso)

    def step_ids(self) -> List[str]:
        return [s.id for s in self.steps]
