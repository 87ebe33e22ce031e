# tests/core/config/test_merge.py
"""
Testes da política de deep-merge de configuração.

Os testes asseguram que:
- dicts são mesclados recursivamente
- listas e escalares são sobrescritos integralmente
- `None` sobrescreve (desliga explicitamente um valor)
- conflitos de tipo levantam `ConfigTypeConflictError`
- nenhum input é mutado
"""

import pytest

try:
    from infraflow.core.config.merge import deep_merge
    from infraflow.core.config.errors import ConfigTypeConflictError
except Exception as e:  # noqa: BLE001
    deep_merge = None
    ConfigTypeConflictError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing merge module. Import error: {_IMPORT_ERR}")


def test_merge_simple_override():
    _require_imports()

    out = deep_merge({"orchestrator": {"dry_run": False}}, {"orchestrator": {"dry_run": True}})

    assert out == {"orchestrator": {"dry_run": True}}


def test_merge_nested_dict():
    """Chaves não sobrescritas em níveis aninhados são preservadas."""
    _require_imports()

    base = {"orchestrator": {"concurrency": 1, "global_labels": {"team": "infra"}}}
    override = {"orchestrator": {"global_labels": {"env": "prod"}}}

    out = deep_merge(base, override)

    assert out["orchestrator"]["concurrency"] == 1
    assert out["orchestrator"]["global_labels"] == {"team": "infra", "env": "prod"}


def test_merge_list_override_total():
    _require_imports()

    out = deep_merge({"regions": ["us-central1", "europe-west1"]}, {"regions": ["asia-east1"]})

    assert out["regions"] == ["asia-east1"]


def test_merge_none_overrides_value():
    """`default_step_timeout_ms: null` em um override desliga o timeout padrão."""
    _require_imports()

    out = deep_merge(
        {"orchestrator": {"default_step_timeout_ms": 60000}},
        {"orchestrator": {"default_step_timeout_ms": None}},
    )
    assert out["orchestrator"]["default_step_timeout_ms"] is None

    back = deep_merge(out, {"orchestrator": {"default_step_timeout_ms": 1000}})
    assert back["orchestrator"]["default_step_timeout_ms"] == 1000


def test_merge_type_conflict_raises():
    _require_imports()

    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"orchestrator": {"concurrency": 1}}, {"orchestrator": {"concurrency": "many"}})


def test_merge_does_not_mutate_inputs():
    _require_imports()

    base = {"orchestrator": {"global_labels": {"team": "infra"}}}
    override = {"orchestrator": {"global_labels": {"env": "prod"}}}

    deep_merge(base, override)

    assert base == {"orchestrator": {"global_labels": {"team": "infra"}}}
    assert override == {"orchestrator": {"global_labels": {"env": "prod"}}}
