# src/infraflow/core/engine/validator.py
"""
Validação estrutural de planos de execução.

O validador examina um `ExecutionPlan` contra um `StepTypeRegistry` e
devolve **todas** as falhas encontradas em uma única chamada, permitindo
um único ciclo de correção em vez de um erro por vez.

Verificações, nesta ordem:
    1. IDs de Step duplicados
    2. Tipo desconhecido no registry (demais checagens do Step são puladas)
    3. Parâmetros obrigatórios ausentes ou vazios (referências contam como presentes)
    4. `depends_on` apontando para Step inexistente ou para o próprio Step
    5. Referências de output (varredura profunda) apontando para Step inexistente
    6. `condition.step_id` apontando para Step inexistente
    7. Ciclo no grafo efetivo (no máximo um erro, com o caminho do ciclo)

Invariantes:
    - Nunca levanta exceção: o retorno é sempre uma lista de strings
    - Lista vazia significa plano válido
"""

from __future__ import annotations

from typing import Any, List, Set

from infraflow.core.pipeline.plan import ExecutionPlan
from infraflow.core.pipeline.registry import StepTypeRegistry

from .planner import detect_cycle
from .references import is_output_ref, iter_output_refs


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def validate_plan(plan: ExecutionPlan, registry: StepTypeRegistry) -> List[str]:
    """
    Executa as verificações estruturais do plano e acumula todas as falhas.

    Args:
        plan (ExecutionPlan): plano a validar.
        registry (StepTypeRegistry): tipos de Step conhecidos e suas definições.

    Returns:
        List[str]: mensagens de erro na ordem das verificações; vazia se o
        plano for válido.
    """
    errors: List[str] = []
    step_ids: Set[str] = {s.id for s in plan.steps}

    seen: Set[str] = set()
    for step in plan.steps:
        if step.id in seen:
            errors.append(f'Duplicate step ID "{step.id}"')
        seen.add(step.id)

    for step in plan.steps:
        definition = registry.get(step.type)
        if definition is None:
            errors.append(f'Step "{step.id}": unknown step type "{step.type}"')
            continue

        params = dict(step.params or {})
        for name in definition.required_params:
            value = params.get(name)
            if is_output_ref(value):
                continue
            if _is_missing(value):
                errors.append(
                    f'Step "{step.id}": missing required parameter "{name}" for type "{step.type}"'
                )

        for dep in step.depends_on or []:
            if dep not in step_ids:
                errors.append(f'Step "{step.id}": dependsOn references unknown step "{dep}"')
            if dep == step.id:
                errors.append(f'Step "{step.id}": step depends on itself')

        for ref in iter_output_refs(params):
            if ref.source_step_id not in step_ids:
                errors.append(
                    f'Step "{step.id}": output ref "{ref}" references unknown step "{ref.source_step_id}"'
                )

        if step.condition is not None and step.condition.step_id not in step_ids:
            errors.append(
                f'Step "{step.id}": condition references unknown step "{step.condition.step_id}"'
            )

    cycle = detect_cycle(plan.steps)
    if cycle:
        errors.append(f"Circular dependency detected: {' → '.join(cycle)}")

    return errors
