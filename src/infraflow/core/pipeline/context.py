# src/infraflow/core/pipeline/context.py
"""
Contexto de uma run e logger por Step.

Este módulo define o `RunContext`, a estrutura que acumula o log de
eventos estruturados de uma única chamada a `Orchestrator.execute`, e o
`StepLogger`, a fachada entregue aos handlers para registrar mensagens
associadas a um Step.

Princípios fundamentais:
    - Isolamento por execução (cada run possui seu próprio contexto)
    - Eventos são estruturados, ordenados e rastreáveis
    - Ausência de estado global compartilhado

Invariantes:
    - Todo evento inclui `run_id`, `step_id`, `level`, `message` e `timestamp`
    - Eventos nunca são reordenados
    - Eventos em nível de run usam `step_id=None`

Limites explícitos:
    - Não executa Steps
    - Não persiste eventos (o chamador decide o destino de `result.events`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass
class RunContext:
    """
    Contexto de uma run do Orchestrator.

    Consolida a identidade da execução (run_id, plan_id, created_at),
    metadados livres (ex.: `global_labels`) e o log de eventos.

    Decisões arquiteturais:
        - Um RunContext é criado por chamada de `execute` e nunca reutilizado
        - Handlers não recebem o contexto, apenas um `StepLogger` ligado a ele
    """
    run_id: str
    plan_id: str
    created_at: datetime
    meta: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)

    def log(self, *, step_id: Optional[str], level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "plan_id": self.plan_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def events_for(self, step_id: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e.get("step_id") == step_id]

    def logger_for(self, step_id: str) -> "StepLogger":
        return StepLogger(ctx=self, step_id=step_id)


@dataclass(frozen=True)
class StepLogger:
    """Logger por Step entregue aos handlers; grava eventos no RunContext da run."""

    ctx: RunContext
    step_id: str

    def info(self, message: str, **extra: Any) -> None:
        self.ctx.log(step_id=self.step_id, level="info", message=message, **extra)

    def warn(self, message: str, **extra: Any) -> None:
        self.ctx.log(step_id=self.step_id, level="warning", message=message, **extra)

    def error(self, message: str, **extra: Any) -> None:
        self.ctx.log(step_id=self.step_id, level="error", message=message, **extra)
