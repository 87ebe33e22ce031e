# tests/core/engine/test_executor_dry_run_and_timeout.py
"""
Testes de dry-run e de timeout por Step.

Invariantes:
    - Em dry-run os handlers continuam sendo invocados, com `ctx.dry_run=True`
    - `timeoutMs` do Step prevalece sobre `default_step_timeout_ms`
    - Timeout é uma falha de execução com mensagem e tipo estáveis
"""

import pytest

try:
    from infraflow.core.engine.engine import Orchestrator, OrchestratorOptions
    from infraflow.core.errors import STEP_TIMEOUT
    from infraflow.core.pipeline.types import RunStatus, StepStatus
except Exception as e:  # noqa: BLE001
    Orchestrator = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


@pytest.fixture(autouse=True)
def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing Orchestrator. Import error: {_IMPORT_ERR}")


def test_dry_run_flag_reaches_handlers(make_plan, step_registry):
    plan = make_plan([
        {"id": "a", "type": "fake-ok"},
        {"id": "b", "type": "fake-ok", "params": {"input": "$step.a.value"}},
    ])

    result = Orchestrator(step_registry, OrchestratorOptions(dry_run=True)).execute(plan)

    assert result.status == RunStatus.COMPLETED
    assert result.outputs["a"]["dry"] is True
    assert result.outputs["b"]["echo"] == "a-value"
    assert result.events[0]["dry_run"] is True


def test_step_timeout_fails_the_step(make_plan, step_registry):
    plan = make_plan([
        {"id": "s", "type": "fake-slow", "timeoutMs": 50},
        {"id": "after", "type": "fake-ok"},
    ])

    result = Orchestrator(step_registry).execute(plan)

    s = result.step("s")
    assert s.status == StepStatus.FAILED
    assert s.error == 'Step "s" timed out after 50ms'
    assert s.error_details["type"] == STEP_TIMEOUT
    assert s.error_details["details"]["timeout_ms"] == 50
    assert s.duration_ms < 500
    assert result.step("after").status == StepStatus.SKIPPED
    assert result.status == RunStatus.FAILED


def test_default_timeout_applies(make_plan, step_registry):
    options = OrchestratorOptions(default_step_timeout_ms=40)

    result = Orchestrator(step_registry, options).execute(make_plan([{"id": "s", "type": "fake-slow"}]))

    assert result.step("s").error == 'Step "s" timed out after 40ms'


def test_step_timeout_overrides_default(make_plan, step_registry):
    options = OrchestratorOptions(default_step_timeout_ms=40)
    plan = make_plan([{"id": "s", "type": "fake-slow", "timeoutMs": 5000}])

    result = Orchestrator(step_registry, options).execute(plan)

    assert result.step("s").status == StepStatus.COMPLETED


def test_fast_step_within_timeout(make_plan, step_registry):
    plan = make_plan([{"id": "a", "type": "fake-ok", "timeoutMs": 5000}])

    result = Orchestrator(step_registry).execute(plan)

    assert result.step("a").status == StepStatus.COMPLETED
    assert result.outputs["a"]["value"] == "a-value"


def test_handler_exception_within_timeout_keeps_message(make_plan, step_registry):
    plan = make_plan([{"id": "f", "type": "fake-fail", "timeoutMs": 5000}])

    result = Orchestrator(step_registry).execute(plan)

    assert result.step("f").error == "f exploded"


@pytest.mark.parametrize("kwargs", [{"concurrency": 0}, {"default_step_timeout_ms": 0}])
def test_invalid_options_are_rejected(kwargs):
    with pytest.raises(ValueError):
        OrchestratorOptions(**kwargs)


def test_from_config_applies_settings(step_registry, make_plan):
    config = {
        "orchestrator": {
            "dry_run": True,
            "default_step_timeout_ms": 40,
            "global_labels": {"team": "platform"},
        }
    }

    orch = Orchestrator.from_config(step_registry, config)
    result = orch.execute(make_plan([{"id": "s", "type": "fake-slow"}]))

    assert orch.options.dry_run is True
    assert orch.options.global_labels == {"team": "platform"}
    assert result.step("s").error == 'Step "s" timed out after 40ms'
