# src/infraflow/core/engine/engine.py
"""
Orchestrator do InfraFlow (validação + ordenação + execução + rollback).

Uma chamada a `Orchestrator.execute(plan)`:
    1. valida o plano; havendo erros, retorna FAILED sem executar nada
    2. ordena topologicamente; falha de ordenação retorna FAILED
    3. percorre os Steps em ordem, um por vez:
        - run já falhou → Step SKIPPED (sem avaliar condição nem registry)
        - condição falsa → Step SKIPPED (não marca a run como falha)
        - resolução de referências falha → Step FAILED, run marcada como falha
        - tipo sem handler → Step FAILED, run marcada como falha
        - handler executa → COMPLETED com outputs, ou FAILED; falha em Step
          com `rollback_on_failure` (fora de dry-run) dispara rollback
    4. calcula o status agregado e devolve o OrchestrationResult

Correções e decisões:
- O Orchestrator guarda apenas configuração. Outputs acumulados, resultados,
  pilha de Steps concluídos e log de eventos vivem na chamada, portanto
  chamadas concorrentes na mesma instância não compartilham estado.
- Exceções de handler são convertidas em ErrorPayload (`error_details`) e
  nunca escapam de `execute`. Callbacks do chamador não são protegidos.
- `concurrency` é consultivo: a execução é estritamente sequencial.
- Steps desfeitos com sucesso pelo rollback são regravados como ROLLED_BACK
  (desligável via `relabel_rolled_back`).
- `timeout_ms` limita a invocação do handler; timeout é uma falha de
  execução como outra qualquer. A thread do handler não é interrompida,
  seu resultado tardio é descartado.
"""

from __future__ import annotations

import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Set

from infraflow.core.config.settings import settings_from_config
from infraflow.core.errors import (
    PLAN_CYCLE_DETECTED,
    PLAN_VALIDATION_ERROR,
    ErrorPayload,
    handler_not_found,
    reference_resolution_error,
    step_execution_error,
    step_timeout,
)
from infraflow.core.exceptions import InfraFlowException, StepTimeoutError
from infraflow.core.pipeline.context import RunContext
from infraflow.core.pipeline.plan import ExecutionPlan, PlanStep
from infraflow.core.pipeline.registry import StepTypeRegistry
from infraflow.core.pipeline.step import (
    StepExecutionContext,
    StepHandler,
    has_rollback,
    read_only_outputs,
)
from infraflow.core.pipeline.types import (
    OrchestrationResult,
    RunStatus,
    StepResult,
    StepStatus,
    compute_run_status,
)

from .conditions import evaluate_condition
from .planner import CycleDetectedError, topological_sort
from .references import resolve_step_params
from .validator import validate_plan


def _noop_start(step_id: str) -> None:
    return None


def _noop_complete(step_id: str, result: StepResult) -> None:
    return None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


@dataclass(frozen=True)
class OrchestratorOptions:
    """Configuração de uma instância de Orchestrator, reutilizável entre runs."""

    dry_run: bool = False
    concurrency: int = 1
    on_step_start: Callable[[str], None] = _noop_start
    on_step_complete: Callable[[str, StepResult], None] = _noop_complete
    global_labels: Dict[str, str] = field(default_factory=dict)
    default_step_timeout_ms: Optional[int] = None
    relabel_rolled_back: bool = True

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        if self.default_step_timeout_ms is not None and self.default_step_timeout_ms < 1:
            raise ValueError("default_step_timeout_ms must be a positive integer")


@dataclass
class _RunState:
    """Estado de uma única chamada a `execute`."""

    ctx: RunContext
    steps_by_id: Dict[str, PlanStep] = field(default_factory=dict)
    results: List[StepResult] = field(default_factory=list)
    result_map: Dict[str, StepResult] = field(default_factory=dict)
    outputs: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    completed: List[str] = field(default_factory=list)
    plan_failed: bool = False

    def record(self, result: StepResult) -> None:
        self.results.append(result)
        self.result_map[result.step_id] = result


class Orchestrator:
    """Executor canônico de planos do InfraFlow."""

    def __init__(self, registry: StepTypeRegistry, options: Optional[OrchestratorOptions] = None):
        self.registry = registry
        self.options = options or OrchestratorOptions()

    @classmethod
    def from_config(
        cls,
        registry: StepTypeRegistry,
        config: Optional[Dict[str, Any]],
        *,
        on_step_start: Callable[[str], None] = _noop_start,
        on_step_complete: Callable[[str, StepResult], None] = _noop_complete,
    ) -> "Orchestrator":
        settings = settings_from_config(config)
        return cls(
            registry,
            OrchestratorOptions(
                dry_run=settings.dry_run,
                concurrency=settings.concurrency,
                on_step_start=on_step_start,
                on_step_complete=on_step_complete,
                global_labels=dict(settings.global_labels),
                default_step_timeout_ms=settings.default_step_timeout_ms,
                relabel_rolled_back=settings.relabel_rolled_back,
            ),
        )

    # ------------------------------------------------------------------
    # Guardrails: exceção -> ErrorPayload
    # ------------------------------------------------------------------

    def _exception_to_error(self, exc: BaseException, step_id: str) -> ErrorPayload:
        if isinstance(exc, StepTimeoutError):
            return step_timeout(step=step_id, timeout_ms=int(exc.details.get("timeout_ms", 0)))
        if isinstance(exc, InfraFlowException):
            return ErrorPayload(
                type=exc.__class__.__name__,
                message=str(exc) or "Erro de execução",
                details={"step": step_id, **dict(exc.details or {})},
                hint=exc.hint,
            )
        return step_execution_error(
            step=step_id,
            exc_type=exc.__class__.__name__,
            exc_message=str(exc) or exc.__class__.__name__,
        )

    # ------------------------------------------------------------------
    # Resultados
    # ------------------------------------------------------------------

    def _mk_result(
        self,
        step: PlanStep,
        status: StepStatus,
        *,
        outputs: Optional[Dict[str, Any]] = None,
        duration_ms: int = 0,
        error: Optional[ErrorPayload] = None,
        started_at: Optional[str] = None,
    ) -> StepResult:
        now = _now_iso()
        return StepResult(
            step_id=step.id,
            step_name=step.label,
            step_type=step.type,
            status=status,
            outputs=dict(outputs or {}),
            duration_ms=duration_ms,
            error=error.message if error else None,
            error_details=error.to_dict() if error else None,
            started_at=started_at or now,
            completed_at=now,
        )

    def _finish(
        self,
        plan: ExecutionPlan,
        ctx: RunContext,
        *,
        status: RunStatus,
        started_at: str,
        start: float,
        steps: Optional[List[StepResult]] = None,
        outputs: Optional[Dict[str, Dict[str, Any]]] = None,
        errors: Optional[List[str]] = None,
    ) -> OrchestrationResult:
        ctx.log(step_id=None, level="info", message=f"Plan finished with status {status.value}",
                event="run_finished", status=status.value)
        return OrchestrationResult(
            plan_id=plan.id,
            plan_name=plan.name,
            status=status,
            steps=list(steps or []),
            outputs={sid: dict(o) for sid, o in (outputs or {}).items()},
            errors=list(errors or []),
            total_duration_ms=_elapsed_ms(start),
            started_at=started_at,
            completed_at=_now_iso(),
            events=list(ctx.events),
        )

    # ------------------------------------------------------------------
    # Invocação
    # ------------------------------------------------------------------

    def _timeout_for(self, step: PlanStep) -> Optional[int]:
        if step.timeout_ms is not None:
            return step.timeout_ms
        return self.options.default_step_timeout_ms

    def _invoke(self, handler: StepHandler, ctx: StepExecutionContext, timeout_ms: Optional[int]) -> Any:
        if timeout_ms is None:
            return handler.execute(ctx)

        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"infraflow-{ctx.step_id}")
        future = pool.submit(handler.execute, ctx)
        try:
            return future.result(timeout=timeout_ms / 1000.0)
        except FutureTimeoutError:
            future.cancel()
            raise StepTimeoutError(
                message=f'Step "{ctx.step_id}" timed out after {timeout_ms}ms',
                details={"timeout_ms": timeout_ms},
            ) from None
        finally:
            pool.shutdown(wait=False)

    def _execute_step(self, step: PlanStep, handler: StepHandler, params: Dict[str, Any], state: _RunState) -> None:
        opts = self.options
        logger = state.ctx.logger_for(step.id)
        exec_ctx = StepExecutionContext(
            step_id=step.id,
            params=params,
            outputs=read_only_outputs(state.outputs),
            dry_run=opts.dry_run,
            logger=logger,
        )

        opts.on_step_start(step.id)
        state.ctx.log(step_id=step.id, level="info", message=f'Starting step "{step.label}"',
                      event="step_started", step_type=step.type)
        started_at = _now_iso()
        start = time.monotonic()

        try:
            outputs = self._invoke(handler, exec_ctx, self._timeout_for(step))
            if not isinstance(outputs, Mapping):
                raise TypeError(
                    f'Handler for step type "{step.type}" must return a mapping of outputs, '
                    f"got {type(outputs).__name__}"
                )
        except Exception as e:
            error = self._exception_to_error(e, step.id)
            result = self._mk_result(step, StepStatus.FAILED, duration_ms=_elapsed_ms(start),
                                     error=error, started_at=started_at)
            state.record(result)
            state.plan_failed = True
            state.ctx.log(step_id=step.id, level="error", message=error.message,
                          event="step_failed", error_type=error.type)
            try:
                opts.on_step_complete(step.id, result)
            finally:
                # o rollback roda mesmo que o callback do chamador levante
                if step.rollback_on_failure and not opts.dry_run:
                    self._rollback(state, trigger=step)
            return

        produced = dict(outputs)
        state.outputs[step.id] = produced
        state.completed.append(step.id)
        result = self._mk_result(step, StepStatus.COMPLETED, outputs=produced,
                                 duration_ms=_elapsed_ms(start), started_at=started_at)
        state.record(result)
        state.ctx.log(step_id=step.id, level="info", message=f'Completed step "{step.label}"',
                      event="step_completed", duration_ms=result.duration_ms)
        opts.on_step_complete(step.id, result)

    # ------------------------------------------------------------------
    # Rollback
    # ------------------------------------------------------------------

    def _rollback(self, state: _RunState, *, trigger: PlanStep) -> None:
        """Desfaz os Steps concluídos em ordem inversa de conclusão (best-effort)."""
        state.ctx.log(step_id=trigger.id, level="warning",
                      message=f"Rolling back {len(state.completed)} completed step(s)",
                      event="rollback_started", completed=list(reversed(state.completed)))

        rolled_back: Set[str] = set()
        snapshot = read_only_outputs(state.outputs)
        for step_id in reversed(state.completed):
            step = state.steps_by_id[step_id]
            handler = self.registry.get_handler(step.type)
            if handler is None or not has_rollback(handler):
                continue

            logger = state.ctx.logger_for(step_id)
            rollback_ctx = StepExecutionContext(
                step_id=step_id,
                params=dict(step.params or {}),
                outputs=snapshot,
                dry_run=False,
                logger=logger,
            )
            try:
                handler.rollback(rollback_ctx, dict(state.outputs.get(step_id, {})))  # type: ignore[attr-defined]
            except Exception as e:
                logger.warn(f'Rollback failed for step "{step.label}": {e}',
                            event="rollback_step_failed", exc_type=e.__class__.__name__)
                continue
            logger.info(f'Rolled back step "{step.label}"', event="rollback_step_completed")
            rolled_back.add(step_id)

        if self.options.relabel_rolled_back and rolled_back:
            for i, r in enumerate(state.results):
                if r.step_id in rolled_back and r.status == StepStatus.COMPLETED:
                    relabeled = replace(r, status=StepStatus.ROLLED_BACK)
                    state.results[i] = relabeled
                    state.result_map[r.step_id] = relabeled

    # ------------------------------------------------------------------
    # Execução
    # ------------------------------------------------------------------

    def execute(self, plan: ExecutionPlan) -> OrchestrationResult:
        opts = self.options
        started_at = _now_iso()
        start = time.monotonic()
        ctx = RunContext(
            run_id=uuid.uuid4().hex,
            plan_id=plan.id,
            created_at=datetime.now(timezone.utc),
            meta={"global_labels": dict(opts.global_labels), "dry_run": opts.dry_run},
        )
        ctx.log(step_id=None, level="info", message=f'Executing plan "{plan.name}"',
                event="run_started", dry_run=opts.dry_run, step_count=len(plan.steps),
                global_labels=dict(opts.global_labels))

        validation_errors = validate_plan(plan, self.registry)
        if validation_errors:
            ctx.log(step_id=None, level="error", message="Plan validation failed",
                    event="plan_invalid", error_type=PLAN_VALIDATION_ERROR, errors=list(validation_errors))
            return self._finish(plan, ctx, status=RunStatus.FAILED, started_at=started_at,
                                start=start, errors=validation_errors)

        try:
            ordered = topological_sort(plan)
        except ValueError as e:
            error_type = PLAN_CYCLE_DETECTED if isinstance(e, CycleDetectedError) else PLAN_VALIDATION_ERROR
            ctx.log(step_id=None, level="error", message=str(e), event="plan_unsortable", error_type=error_type)
            return self._finish(plan, ctx, status=RunStatus.FAILED, started_at=started_at,
                                start=start, errors=[str(e)])

        state = _RunState(ctx=ctx, steps_by_id={s.id: s for s in ordered})

        for step in ordered:
            if state.plan_failed:
                state.record(self._mk_result(step, StepStatus.SKIPPED))
                ctx.log(step_id=step.id, level="info", message="Skipped: plan already failed",
                        event="step_skipped", reason="plan_failed")
                continue

            if step.condition is not None and not evaluate_condition(step.condition, state.result_map):
                state.record(self._mk_result(step, StepStatus.SKIPPED))
                ctx.log(step_id=step.id, level="info", message="Skipped: condition not met",
                        event="step_skipped", reason="condition",
                        condition={"step_id": step.condition.step_id,
                                   "check": getattr(step.condition.check, "value", step.condition.check)})
                continue

            try:
                params = resolve_step_params(dict(step.params or {}), state.outputs)
            except InfraFlowException as e:
                error = reference_resolution_error(
                    step=step.id,
                    message=f"Failed to resolve params: {e}",
                    details=dict(e.details or {}),
                )
                state.record(self._mk_result(step, StepStatus.FAILED, error=error))
                state.plan_failed = True
                ctx.log(step_id=step.id, level="error", message=error.message,
                        event="step_failed", error_type=error.type)
                continue

            handler = self.registry.get_handler(step.type)
            if handler is None:
                error = handler_not_found(step=step.id, step_type=step.type)
                state.record(self._mk_result(step, StepStatus.FAILED, error=error))
                state.plan_failed = True
                ctx.log(step_id=step.id, level="error", message=error.message,
                        event="step_failed", error_type=error.type)
                continue

            self._execute_step(step, handler, params, state)

        status = compute_run_status(state.results)
        return self._finish(
            plan,
            ctx,
            status=status,
            started_at=started_at,
            start=start,
            steps=state.results,
            outputs=state.outputs,
            errors=[r.error for r in state.results if r.error],
        )


def orchestrate(plan: ExecutionPlan, registry: StepTypeRegistry, **options: Any) -> OrchestrationResult:
    """Atalho: cria um Orchestrator com `OrchestratorOptions(**options)` e executa o plano."""
    return Orchestrator(registry, OrchestratorOptions(**options)).execute(plan)
