# tests/steps/test_builtin_dry_run.py
"""
Testes de dry-run dos Steps embutidos.

Em dry-run nenhum manager é obtido: as factories indisponíveis nunca são
chamadas e os outputs placeholder são derivados apenas dos parâmetros.
"""

import pytest

try:
    from infraflow.core.engine.engine import Orchestrator, OrchestratorOptions
    from infraflow.core.pipeline.loader import plan_from_dict
    from infraflow.core.pipeline.registry import StepTypeRegistry
    from infraflow.core.pipeline.types import RunStatus
    from infraflow.steps import BUILTIN_STEP_DEFINITIONS, register_builtin_steps_dry_run
except Exception as e:  # noqa: BLE001
    Orchestrator = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


@pytest.fixture(autouse=True)
def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing builtin steps. Import error: {_IMPORT_ERR}")


@pytest.fixture
def dry_run_registry():
    registry = StepTypeRegistry()
    register_builtin_steps_dry_run(registry)
    return registry


def _run(registry, steps):
    plan = plan_from_dict({"id": "dry", "name": "Dry", "steps": steps})
    return Orchestrator(registry, OrchestratorOptions(dry_run=True)).execute(plan)


def test_every_builtin_type_produces_its_declared_outputs(dry_run_registry):
    steps = [
        {
            "id": f"s{i}",
            "type": d.type,
            "params": {name: f"{name}-x" for name in d.required_params},
        }
        for i, d in enumerate(BUILTIN_STEP_DEFINITIONS)
    ]

    result = _run(dry_run_registry, steps)

    assert result.status == RunStatus.COMPLETED
    for i, d in enumerate(BUILTIN_STEP_DEFINITIONS):
        assert set(result.outputs[f"s{i}"]) == set(d.outputs), d.type


def test_dry_run_placeholders_follow_params(dry_run_registry):
    result = _run(dry_run_registry, [
        {"id": "proj", "type": "create-project", "params": {"projectId": "acme-dev", "projectName": "Acme"}},
        {"id": "bucket", "type": "create-gcs-bucket",
         "params": {"project": "$step.proj.projectId", "bucketName": "acme-assets", "location": "US"}},
        {"id": "sql", "type": "create-cloud-sql",
         "params": {"project": "$step.proj.projectId", "instanceName": "db", "region": "us-central1",
                    "databaseVersion": "POSTGRES_15", "tier": "db-f1-micro"}},
        {"id": "fs", "type": "create-firestore-db", "params": {"project": "acme-dev", "locationId": "nam5"}},
    ])

    assert result.outputs["proj"] == {"projectId": "acme-dev", "projectNumber": "123456789012"}
    assert result.outputs["bucket"]["bucketSelfLink"] == "https://storage.googleapis.com/storage/v1/b/acme-assets"
    assert result.outputs["sql"]["connectionString"] == "acme-dev:us-central1:db"
    assert result.outputs["fs"] == {"databaseId": "(default)", "locationId": "nam5"}


def test_missing_required_params_are_reported(dry_run_registry):
    result = _run(dry_run_registry, [
        {"id": "bucket", "type": "create-gcs-bucket", "params": {"project": "p", "bucketName": ""}},
    ])

    assert result.status == RunStatus.FAILED
    assert result.errors == [
        'Step "bucket": missing required parameter "bucketName" for type "create-gcs-bucket"',
        'Step "bucket": missing required parameter "location" for type "create-gcs-bucket"',
    ]


def test_real_execution_without_managers_fails_the_step(dry_run_registry):
    plan = plan_from_dict({"id": "real", "name": "Real", "steps": [
        {"id": "bucket", "type": "create-gcs-bucket",
         "params": {"project": "p", "bucketName": "b", "location": "US"}},
    ]})

    result = Orchestrator(dry_run_registry).execute(plan)

    bucket = result.step("bucket")
    assert result.status == RunStatus.FAILED
    assert bucket.error.startswith('No resource manager configured for "storage"')
    assert bucket.error_details["type"] == "ResourceManagerUnavailableError"
    assert bucket.error_details["details"]["domain"] == "storage"
