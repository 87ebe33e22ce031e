# tests/core/engine/test_references.py
"""
Testes do reconhecimento e da resolução de referências `$step.<id>.<output>`.

Os testes asseguram que:
- apenas strings que casam *inteiras* com o padrão são referências
- a resolução substitui referências (inclusive aninhadas) e preserva literais
- falhas de resolução distinguem "sem outputs" de "output inexistente"
- nenhum input é mutado
"""

import pytest

try:
    from infraflow.core.engine.references import (
        OutputRef,
        is_output_ref,
        iter_output_refs,
        parse_output_ref,
        resolve_step_params,
    )
    from infraflow.core.exceptions import OutputReferenceError
except Exception as e:  # noqa: BLE001
    resolve_step_params = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


@pytest.fixture(autouse=True)
def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing references module. Import error: {_IMPORT_ERR}")


@pytest.mark.parametrize(
    "value",
    ["$step.net.networkId", "$step.my-step_1.out_2", "$step.A.B"],
)
def test_valid_references(value):
    assert is_output_ref(value) is True


@pytest.mark.parametrize(
    "value",
    [
        "prefix-$step.a.b",
        "$step.a.b-suffix",
        "$step.a",
        "$step.a.b.c",
        "$step..b",
        "$step.a.b\n",
        "step.a.b",
        "",
        None,
        42,
        ["$step.a.b"],
    ],
)
def test_non_references(value):
    assert is_output_ref(value) is False
    assert parse_output_ref(value) is None


def test_parse_output_ref():
    ref = parse_output_ref("$step.sql.connectionString")

    assert ref == OutputRef(source_step_id="sql", output_name="connectionString")
    assert str(ref) == "$step.sql.connectionString"


def test_iter_output_refs_scans_nested_values():
    params = {
        "a": "$step.x.one",
        "b": ["literal", "$step.y.two", {"c": "$step.z.three"}],
        "d": 5,
    }

    assert [str(r) for r in iter_output_refs(params)] == ["$step.x.one", "$step.y.two", "$step.z.three"]


def test_resolve_replaces_refs_and_keeps_literals():
    params = {
        "network": "$step.net.networkSelfLink",
        "name": "literal",
        "port": 6379,
        "flags": [True, "$step.net.networkId"],
        "nested": {"host": "$step.redis.host"},
        "embedded": "x-$step.net.networkId",
    }
    outputs = {
        "net": {"networkSelfLink": "https://n", "networkId": "n-1"},
        "redis": {"host": "10.0.0.2"},
    }
    snapshot = {k: (list(v) if isinstance(v, list) else v) for k, v in params.items()}

    resolved = resolve_step_params(params, outputs)

    assert resolved == {
        "network": "https://n",
        "name": "literal",
        "port": 6379,
        "flags": [True, "n-1"],
        "nested": {"host": "10.0.0.2"},
        "embedded": "x-$step.net.networkId",
    }
    assert params["flags"] == snapshot["flags"]
    assert params["network"] == "$step.net.networkSelfLink"


def test_resolved_values_keep_their_type():
    resolved = resolve_step_params({"port": "$step.redis.port"}, {"redis": {"port": 6379}})

    assert resolved["port"] == 6379


def test_resolve_missing_step_outputs():
    with pytest.raises(OutputReferenceError) as exc:
        resolve_step_params({"n": "$step.net.networkId"}, {})

    assert str(exc.value) == 'Cannot resolve "$step.net.networkId": step "net" has no outputs yet'


def test_resolve_missing_output_name():
    with pytest.raises(OutputReferenceError) as exc:
        resolve_step_params({"n": "$step.net.missing"}, {"net": {"networkId": "n-1"}})

    assert str(exc.value) == 'Cannot resolve "$step.net.missing": output "missing" not found in step "net"'
    assert exc.value.details["output_name"] == "missing"


def test_resolve_without_refs_is_identity():
    params = {"a": 1, "b": "two", "c": None}

    assert resolve_step_params(params, {}) == params
