"""
InfraFlow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros por Step do InfraFlow.
Todo Step que falha carrega, além da mensagem humana (`StepResult.error`),
um payload estruturado (`StepResult.error_details`) que deve ser:

- explícito
- serializável
- rastreável
- acionável
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do InfraFlow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Plano (estrutural)
PLAN_VALIDATION_ERROR = "PLAN_VALIDATION_ERROR"
PLAN_CYCLE_DETECTED = "PLAN_CYCLE_DETECTED"

# Resolução
REFERENCE_RESOLUTION_ERROR = "REFERENCE_RESOLUTION_ERROR"

# Execução
HANDLER_NOT_FOUND = "HANDLER_NOT_FOUND"
STEP_EXECUTION_ERROR = "STEP_EXECUTION_ERROR"
STEP_TIMEOUT = "STEP_TIMEOUT"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def reference_resolution_error(
    *,
    step: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Garanta que o Step de origem executou com sucesso e declara o output referenciado.",
) -> ErrorPayload:
    return ErrorPayload(
        type=REFERENCE_RESOLUTION_ERROR,
        message=message,
        details={"step": step, **(details or {})},
        hint=hint,
    )


def handler_not_found(
    *,
    step: str,
    step_type: str,
    hint: str = "Registre um handler para o tipo do Step antes de executar o plano.",
) -> ErrorPayload:
    return ErrorPayload(
        type=HANDLER_NOT_FOUND,
        message=f'No handler registered for step type "{step_type}"',
        details={"step": step, "step_type": step_type},
        hint=hint,
    )


def step_execution_error(
    *,
    step: str,
    exc_type: str,
    exc_message: str,
    hint: str = "Verifique os eventos do run e o estado do recurso no provedor. Nenhum retry é aplicado automaticamente.",
) -> ErrorPayload:
    return ErrorPayload(
        type=STEP_EXECUTION_ERROR,
        message=exc_message,
        details={"step": step, "exc_type": exc_type},
        hint=hint,
    )


def step_timeout(
    *,
    step: str,
    timeout_ms: int,
    hint: str = "Aumente `timeoutMs` do Step ou `orchestrator.default_step_timeout_ms`.",
) -> ErrorPayload:
    return ErrorPayload(
        type=STEP_TIMEOUT,
        message=f'Step "{step}" timed out after {timeout_ms}ms',
        details={"step": step, "timeout_ms": timeout_ms},
        hint=hint,
    )
