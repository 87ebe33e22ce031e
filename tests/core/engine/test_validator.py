# tests/core/engine/test_validator.py
"""
Testes do validador de planos (validate_plan).

Este módulo valida que o validador:
- nunca levanta exceção e sempre retorna uma lista
- acumula todas as falhas em uma única chamada
- produz mensagens estáveis e legíveis por humanos
- pula as demais checagens de um Step com tipo desconhecido

Decisões arquiteturais:
    - O registry usado é o de tipos falsos do conftest
    - Mensagens são comparadas literalmente (fazem parte do contrato)
"""

import pytest

try:
    from infraflow.core.engine.validator import validate_plan
except Exception as e:  # noqa: BLE001
    validate_plan = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


@pytest.fixture(autouse=True)
def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing validator. Import error: {_IMPORT_ERR}")


def test_valid_plan_has_no_errors(make_plan, step_registry):
    plan = make_plan([
        {"id": "a", "type": "fake-required", "params": {"name": "x"}},
        {"id": "b", "type": "fake-ok", "params": {"input": "$step.a.value"}, "dependsOn": ["a"]},
        {"id": "c", "type": "fake-ok", "condition": {"stepId": "b", "check": "failed"}},
    ])

    assert validate_plan(plan, step_registry) == []


def test_duplicate_ids(make_plan, step_registry):
    plan = make_plan([{"id": "a", "type": "fake-ok"}, {"id": "a", "type": "fake-ok"}])

    assert 'Duplicate step ID "a"' in validate_plan(plan, step_registry)


def test_unknown_type_skips_remaining_checks(make_plan, step_registry):
    """Um tipo desconhecido gera um único erro para o Step, mesmo com outras falhas nele."""
    plan = make_plan([
        {"id": "a", "type": "nope", "dependsOn": ["ghost"], "params": {"x": "$step.ghost.v"}},
    ])

    assert validate_plan(plan, step_registry) == ['Step "a": unknown step type "nope"']


@pytest.mark.parametrize("params", [{}, {"name": None}, {"name": ""}])
def test_missing_required_param(make_plan, step_registry, params):
    plan = make_plan([{"id": "a", "type": "fake-required", "params": params}])

    assert validate_plan(plan, step_registry) == [
        'Step "a": missing required parameter "name" for type "fake-required"'
    ]


def test_reference_counts_as_present_required_param(make_plan, step_registry):
    plan = make_plan([
        {"id": "src", "type": "fake-ok"},
        {"id": "a", "type": "fake-required", "params": {"name": "$step.src.value"}},
    ])

    assert validate_plan(plan, step_registry) == []


def test_falsy_non_empty_values_are_present(make_plan, step_registry):
    plan = make_plan([{"id": "a", "type": "fake-required", "params": {"name": 0}}])

    assert validate_plan(plan, step_registry) == []


def test_unknown_dependency_and_self_dependency(make_plan, step_registry):
    plan = make_plan([
        {"id": "a", "type": "fake-ok", "dependsOn": ["ghost"]},
        {"id": "b", "type": "fake-ok", "dependsOn": ["b"]},
    ])

    errors = validate_plan(plan, step_registry)

    assert 'Step "a": dependsOn references unknown step "ghost"' in errors
    assert 'Step "b": step depends on itself' in errors
    assert "Circular dependency detected: b → b" in errors


def test_unknown_output_ref_source_nested(make_plan, step_registry):
    plan = make_plan([
        {"id": "a", "type": "fake-ok", "params": {"input": {"deep": ["$step.ghost.out"]}}},
    ])

    assert validate_plan(plan, step_registry) == [
        'Step "a": output ref "$step.ghost.out" references unknown step "ghost"'
    ]


def test_unknown_condition_target(make_plan, step_registry):
    plan = make_plan([
        {"id": "a", "type": "fake-ok", "condition": {"stepId": "ghost", "check": "succeeded"}},
    ])

    assert validate_plan(plan, step_registry) == ['Step "a": condition references unknown step "ghost"']


def test_cycle_is_reported_once_with_path(make_plan, step_registry):
    plan = make_plan([
        {"id": "a", "type": "fake-ok", "dependsOn": ["b"]},
        {"id": "b", "type": "fake-ok", "params": {"input": "$step.a.value"}},
    ])

    errors = validate_plan(plan, step_registry)
    cycle_errors = [e for e in errors if e.startswith("Circular dependency detected: ")]

    assert cycle_errors == ["Circular dependency detected: a → b → a"]


def test_all_errors_accumulate_in_one_call(make_plan, step_registry):
    """
    Verifica o acúmulo: cada categoria de falha aparece na mesma chamada.

    Invariantes:
        - Nenhuma falha interrompe as checagens seguintes
        - A ordem segue a ordem das checagens
    """
    plan = make_plan([
        {"id": "dup", "type": "fake-ok"},
        {"id": "dup", "type": "fake-ok"},
        {"id": "unknown", "type": "nope"},
        {"id": "req", "type": "fake-required"},
        {"id": "dep", "type": "fake-ok", "dependsOn": ["ghost"]},
        {"id": "ref", "type": "fake-ok", "params": {"input": "$step.phantom.out"}},
        {"id": "cond", "type": "fake-ok", "condition": {"stepId": "specter", "check": "failed"}},
        {"id": "x", "type": "fake-ok", "dependsOn": ["y"]},
        {"id": "y", "type": "fake-ok", "dependsOn": ["x"]},
    ])

    errors = validate_plan(plan, step_registry)

    assert errors[0] == 'Duplicate step ID "dup"'
    assert 'Step "unknown": unknown step type "nope"' in errors
    assert 'Step "req": missing required parameter "name" for type "fake-required"' in errors
    assert 'Step "dep": dependsOn references unknown step "ghost"' in errors
    assert 'Step "ref": output ref "$step.phantom.out" references unknown step "phantom"' in errors
    assert 'Step "cond": condition references unknown step "specter"' in errors
    assert errors[-1] == "Circular dependency detected: x → y → x"
    assert len(errors) == 7


def test_empty_plan_is_valid(make_plan, step_registry):
    assert validate_plan(make_plan([]), step_registry) == []
