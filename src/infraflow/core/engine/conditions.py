# src/infraflow/core/engine/conditions.py
"""Avaliação de `StepCondition` contra os resultados já registrados na run."""

from __future__ import annotations

from typing import Mapping

from infraflow.core.pipeline.plan import StepCondition
from infraflow.core.pipeline.types import ConditionCheck, StepResult, StepStatus


_CHECK_TO_STATUS = {
    ConditionCheck.SUCCEEDED.value: StepStatus.COMPLETED,
    ConditionCheck.COMPLETED.value: StepStatus.COMPLETED,
    ConditionCheck.FAILED.value: StepStatus.FAILED,
    ConditionCheck.SKIPPED.value: StepStatus.SKIPPED,
}


def evaluate_condition(condition: StepCondition, results: Mapping[str, StepResult]) -> bool:
    """
    Retorna True quando o Step alvo tem resultado com o status pedido.

    Sem resultado para `condition.step_id` → False (nunca levanta).
    `succeeded` e `completed` são sinônimos; checks desconhecidos → False.
    """
    result = results.get(condition.step_id)
    if result is None:
        return False
    check = condition.check.value if isinstance(condition.check, ConditionCheck) else condition.check
    expected = _CHECK_TO_STATUS.get(check)
    return expected is not None and result.status == expected
