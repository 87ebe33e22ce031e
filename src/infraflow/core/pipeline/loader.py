"""Loader canônico de planos de execução (dict / YAML / JSON).

Notas:
- YAML é preferencial, JSON é alternativo; o formato é inferido pela extensão.
- Chaves são aceitas em camelCase (`dependsOn`, `rollbackOnFailure`,
  `timeoutMs`, `createdAt`, `stepId`) ou snake_case.
- O loader valida apenas a *forma* do documento. Tipos desconhecidos,
  referências pendentes e ciclos são responsabilidade do validador.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from infraflow.core.config.hashing import short_hash

from .plan import ExecutionPlan, PlanStep, StepCondition


class PlanError(Exception):
    """Erro base do carregamento de planos."""


class PlanFileNotFoundError(PlanError):
    """Arquivo de plano não existe no caminho informado."""


class UnsupportedPlanFormatError(PlanError):
    """Formato de plano não suportado (YAML/JSON)."""


class PlanParseError(PlanError):
    """Documento de plano ilegível ou estruturalmente inválido."""


def _is_non_empty_str(x: Any) -> bool:
    return isinstance(x, str) and bool(x.strip())


def _expect(cond: bool, msg: str) -> None:
    if not cond:
        raise PlanParseError(msg)


def _pick(data: Mapping[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    if camel in data:
        return data[camel]
    return data.get(snake, default)


def _default_if_none(value: Any, default: Any) -> Any:
    # só `None` (ou chave ausente) recebe o default; `[]`, `""`, `0` seguem para a checagem de tipo
    return default if value is None else value


def _parse_condition(raw: Any, where: str) -> Optional[StepCondition]:
    if raw is None:
        return None
    _expect(isinstance(raw, dict), f"{where}.condition must be a mapping")
    target = _pick(raw, "stepId", "step_id")
    check = raw.get("check")
    _expect(_is_non_empty_str(target), f"{where}.condition.stepId is required")
    _expect(_is_non_empty_str(check), f"{where}.condition.check is required")
    return StepCondition(step_id=target, check=check)


def _parse_step(raw: Any, index: int) -> PlanStep:
    where = f"steps[{index}]"
    _expect(isinstance(raw, dict), f"{where} must be a mapping")

    step_id = raw.get("id")
    step_type = raw.get("type")
    _expect(_is_non_empty_str(step_id), f"{where}.id is required")
    _expect(_is_non_empty_str(step_type), f"{where}.type is required")

    params = _default_if_none(raw.get("params"), {})
    _expect(isinstance(params, dict), f"{where}.params must be a mapping")

    depends_on = _default_if_none(_pick(raw, "dependsOn", "depends_on"), [])
    _expect(
        isinstance(depends_on, list) and all(_is_non_empty_str(d) for d in depends_on),
        f"{where}.dependsOn must be a list of step ids",
    )

    rollback = _pick(raw, "rollbackOnFailure", "rollback_on_failure", False)
    _expect(isinstance(rollback, bool), f"{where}.rollbackOnFailure must be boolean")

    timeout_ms = _pick(raw, "timeoutMs", "timeout_ms")
    if timeout_ms is not None:
        _expect(
            isinstance(timeout_ms, int) and not isinstance(timeout_ms, bool) and timeout_ms > 0,
            f"{where}.timeoutMs must be a positive integer",
        )

    return PlanStep(
        id=step_id,
        type=step_type,
        name=str(raw.get("name") or step_id),
        params=dict(params),
        depends_on=list(depends_on),
        condition=_parse_condition(raw.get("condition"), where),
        rollback_on_failure=rollback,
        timeout_ms=timeout_ms,
    )


def plan_from_dict(data: Any) -> ExecutionPlan:
    """Materializa um `ExecutionPlan` a partir de um mapa já desserializado.

    Planos sem `id` recebem `plan-<12 primeiros hex do hash canônico>`,
    estável para o mesmo documento.

    Raises:
        PlanParseError: se o documento não tiver a forma esperada.
    """
    _expect(isinstance(data, dict), "plan root must be a mapping/dict")

    steps_raw = data.get("steps")
    _expect(isinstance(steps_raw, list), "steps must be a list")
    steps: List[PlanStep] = [_parse_step(s, i) for i, s in enumerate(steps_raw)]

    plan_id = data.get("id")
    if plan_id is None:
        plan_id = f"plan-{short_hash(data)}"
    _expect(_is_non_empty_str(plan_id), "id must be a non-empty string")

    params = _default_if_none(data.get("params"), {})
    _expect(isinstance(params, dict), "params must be a mapping")

    kwargs: Dict[str, Any] = {}
    created_at = _pick(data, "createdAt", "created_at")
    if created_at is not None:
        kwargs["created_at"] = str(created_at)

    return ExecutionPlan(
        id=plan_id,
        name=str(data.get("name") or plan_id),
        description=str(data.get("description") or ""),
        steps=steps,
        params=dict(params),
        **kwargs,
    )


def load_plan(*, path: str) -> ExecutionPlan:
    """Carrega um plano a partir de YAML/JSON.

    Raises:
        PlanFileNotFoundError: se arquivo não existir.
        UnsupportedPlanFormatError: se extensão não suportada.
        PlanParseError: se parsing ou validação de forma falhar.
    """
    p = Path(path)
    if not p.exists():
        raise PlanFileNotFoundError(f"plan file not found: {p}")

    suffix = p.suffix.lower()
    raw = p.read_text(encoding="utf-8")

    try:
        if suffix in {".yml", ".yaml"}:
            data = yaml.safe_load(raw)
        elif suffix == ".json":
            data = json.loads(raw)
        else:
            raise UnsupportedPlanFormatError(f"unsupported plan format: {suffix}")
    except UnsupportedPlanFormatError:
        raise
    except Exception as e:
        raise PlanParseError(str(e) or "failed to parse plan") from e

    if data is None:
        raise PlanParseError("plan file is empty")

    return plan_from_dict(data)
