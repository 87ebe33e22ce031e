# src/infraflow/core/pipeline/types.py
"""
Tipos canônicos de execução do InfraFlow.

Este módulo define as estruturas e enums fundamentais que padronizam
a comunicação entre registry, handlers, Engine e chamadores.

Componentes principais:
    - StepCategory        → classificação de tipos de Step por domínio de recurso
    - StepStatus          → estados finais de um Step em uma run
    - RunStatus           → estado agregado de uma run
    - ConditionCheck      → verificações aceitas por `StepCondition`
    - StepDefinition      → schema declarado de um tipo de Step
    - StepResult          → resultado imutável de um Step em uma run
    - OrchestrationResult → resultado imutável de uma run completa

Princípios fundamentais:
    - Tipos são estáveis e serializáveis
    - Enums carregam valores textuais canônicos
    - Nenhuma lógica de execução vive neste módulo

Invariantes:
    - StepResult e OrchestrationResult são imutáveis (frozen)
    - `outputs` de um StepResult é vazio salvo quando status é COMPLETED
      (ou ROLLED_BACK, que preserva o que havia sido produzido)

Limites explícitos:
    - Não executa Steps
    - Não valida planos
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class StepCategory(str, Enum):
    """
    Domínio de recurso ao qual um tipo de Step pertence.

    A categoria é puramente informativa: o Engine não a utiliza para
    decidir ordem ou política de execução.
    """
    FOUNDATION = "foundation"
    NETWORKING = "networking"
    STORAGE = "storage"
    DATABASE = "database"
    COMPUTE = "compute"
    MESSAGING = "messaging"
    MONITORING = "monitoring"
    SECURITY = "security"


class StepStatus(str, Enum):
    """
    Estados finais possíveis de um Step em uma run.

    Estados definidos:
        - COMPLETED: handler executou e retornou outputs
        - FAILED: resolução de parâmetros, lookup de handler ou execução falhou
        - SKIPPED: condição não satisfeita ou run já marcada como falha
        - ROLLED_BACK: Step concluído cujo efeito foi desfeito por rollback

    Estados intermediários (pending, running) não pertencem a este enum:
    a run é síncrona e só registra estados terminais.
    """
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"
    ROLLED_BACK = "rolled-back"


class RunStatus(str, Enum):
    """Estado agregado de uma run (ver `compute_run_status`)."""
    COMPLETED = "completed"
    FAILED = "failed"
    PARTIAL = "partial"
    ROLLED_BACK = "rolled-back"


class ConditionCheck(str, Enum):
    """Verificações reconhecidas por `StepCondition.check` (SUCCEEDED e COMPLETED são sinônimos)."""
    SUCCEEDED = "succeeded"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class StepDefinition:
    """
    Schema declarado de um tipo de Step.

    Usado exclusivamente pelo validador para checar parâmetros obrigatórios;
    nunca participa da execução.

    Campos:
        - type: nome do tipo (ex.: "create-gcs-bucket")
        - category: domínio de recurso
        - description: descrição humana
        - required_params: parâmetros que devem estar presentes e não vazios
        - optional_params: parâmetros aceitos mas não exigidos
        - outputs: nomes dos outputs produzidos pelo handler
    """
    type: str
    category: StepCategory
    description: str
    required_params: Tuple[str, ...] = ()
    optional_params: Tuple[str, ...] = ()
    outputs: Tuple[str, ...] = ()


@dataclass(frozen=True)
class StepResult:
    """
    Resultado imutável de um Step em uma run.

    Campos:
        - step_id / step_name / step_type: identidade do Step no plano
        - status: estado final
        - outputs: outputs nomeados (vazio salvo em COMPLETED/ROLLED_BACK)
        - duration_ms: duração da invocação do handler (0 para Steps não invocados)
        - error: mensagem humana da falha
        - error_details: ErrorPayload serializado da falha
        - started_at / completed_at: timestamps ISO-8601 (UTC)
    """
    step_id: str
    step_name: str
    step_type: str
    status: StepStatus
    outputs: Dict[str, Any] = field(default_factory=dict)
    duration_ms: int = 0
    error: Optional[str] = None
    error_details: Optional[Dict[str, Any]] = None
    started_at: str = ""
    completed_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_id": self.step_id,
            "step_name": self.step_name,
            "step_type": self.step_type,
            "status": self.status.value,
            "outputs": dict(self.outputs),
            "duration_ms": self.duration_ms,
            "error": self.error,
            "error_details": self.error_details,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
        }


@dataclass(frozen=True)
class OrchestrationResult:
    """
    Resultado imutável de uma run completa.

    `steps` vazio com status FAILED significa que nada executou (erro de
    validação ou de ordenação); `steps` populado significa que ao menos
    parte do plano foi percorrida.
    """
    plan_id: str
    plan_name: str
    status: RunStatus
    steps: List[StepResult] = field(default_factory=list)
    outputs: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    total_duration_ms: int = 0
    started_at: str = ""
    completed_at: str = ""
    events: List[Dict[str, Any]] = field(default_factory=list)

    def step(self, step_id: str) -> StepResult:
        for r in self.steps:
            if r.step_id == step_id:
                return r
        raise KeyError(step_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plan_id": self.plan_id,
            "plan_name": self.plan_name,
            "status": self.status.value,
            "steps": [r.to_dict() for r in self.steps],
            "outputs": {k: dict(v) for k, v in self.outputs.items()},
            "errors": list(self.errors),
            "total_duration_ms": self.total_duration_ms,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "events": [dict(e) for e in self.events],
        }


def compute_run_status(results: List[StepResult]) -> RunStatus:
    """
    Deriva o status agregado a partir dos resultados por Step.

    Precedência:
        1. algum ROLLED_BACK → ROLLED_BACK
        2. FAILED e COMPLETED presentes → PARTIAL
        3. apenas FAILED (sem COMPLETED) → FAILED
        4. caso contrário → COMPLETED (inclui runs só com SKIPPED)
    """
    statuses = {r.status for r in results}
    if StepStatus.ROLLED_BACK in statuses:
        return RunStatus.ROLLED_BACK
    if StepStatus.FAILED in statuses and StepStatus.COMPLETED in statuses:
        return RunStatus.PARTIAL
    if StepStatus.FAILED in statuses:
        return RunStatus.FAILED
    return RunStatus.COMPLETED
