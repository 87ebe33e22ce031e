# src/infraflow/steps/database.py
"""Steps embutidos de banco de dados.

Tipos:
- create-cloud-sql       → instância Cloud SQL (com rollback)
- create-firestore-db    → banco Firestore (sem rollback)
- create-redis-instance  → Memorystore for Redis (com rollback)

Limites explícitos:
- Firestore não é removido no rollback: o banco `(default)` de um projeto
  não pode ser recriado com outra localização depois de apagado, então a
  remoção fica a cargo do operador.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from infraflow.core.pipeline.step import StepExecutionContext
from infraflow.core.pipeline.types import StepCategory, StepDefinition

from .base import DeletableResourceStepHandler, ResourceStepHandler, result_get


CREATE_CLOUD_SQL = StepDefinition(
    type="create-cloud-sql",
    category=StepCategory.DATABASE,
    description="Create a Cloud SQL instance with a database",
    required_params=("project", "instanceName", "region", "databaseVersion", "tier"),
    optional_params=("databaseName", "rootPassword", "ipConfiguration", "backupEnabled", "highAvailability"),
    outputs=("instanceName", "connectionString", "ipAddress"),
)

CREATE_FIRESTORE_DB = StepDefinition(
    type="create-firestore-db",
    category=StepCategory.DATABASE,
    description="Create a Firestore database in the specified project",
    required_params=("project", "locationId"),
    optional_params=("databaseId", "type"),
    outputs=("databaseId", "locationId"),
)

CREATE_REDIS_INSTANCE = StepDefinition(
    type="create-redis-instance",
    category=StepCategory.DATABASE,
    description="Create a Memorystore for Redis instance",
    required_params=("project", "region", "instanceId", "tier", "memorySizeGb"),
    optional_params=("redisVersion", "displayName", "network", "labels"),
    outputs=("host", "port", "instanceId"),
)

_REDIS_DEFAULT_PORT = 6379


def _first_ip(result: Any) -> str:
    addresses = result_get(result, "ipAddresses", [])
    if not addresses:
        return ""
    return result_get(addresses[0], "ipAddress")


class CreateCloudSqlHandler(DeletableResourceStepHandler):
    def dry_run_outputs(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "instanceName": params.get("instanceName"),
            "connectionString": f"{params.get('project')}:{params.get('region')}:{params.get('instanceName')}",
            "ipAddress": "10.0.0.1",
        }

    def create(self, manager: Any, ctx: StepExecutionContext) -> Dict[str, Any]:
        p = ctx.params
        result = manager.create_instance(p["project"], p["instanceName"], dict(p))
        ctx.logger.info(f'Created Cloud SQL instance "{p["instanceName"]}" in {p["region"]}')
        return {
            "instanceName": result_get(result, "name", p["instanceName"]),
            "connectionString": result_get(result, "connectionName"),
            "ipAddress": _first_ip(result),
        }

    def delete(self, manager: Any, ctx: StepExecutionContext, outputs: Mapping[str, Any]) -> None:
        manager.delete_instance(ctx.params["project"], ctx.params["instanceName"])
        ctx.logger.info(f'Rolled back: deleted Cloud SQL instance "{ctx.params["instanceName"]}"')


class CreateFirestoreDbHandler(ResourceStepHandler):
    def dry_run_outputs(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "databaseId": params.get("databaseId") or "(default)",
            "locationId": params.get("locationId"),
        }

    def create(self, manager: Any, ctx: StepExecutionContext) -> Dict[str, Any]:
        p = ctx.params
        result = manager.create_database(p["project"], dict(p))
        ctx.logger.info(f'Created Firestore database in project "{p["project"]}" at {p["locationId"]}')
        return {
            "databaseId": result_get(result, "name", "(default)"),
            "locationId": result_get(result, "locationId", p["locationId"]),
        }


class CreateRedisInstanceHandler(DeletableResourceStepHandler):
    def dry_run_outputs(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "host": "10.0.0.2",
            "port": _REDIS_DEFAULT_PORT,
            "instanceId": (
                f"projects/{params.get('project')}/locations/{params.get('region')}"
                f"/instances/{params.get('instanceId')}"
            ),
        }

    def create(self, manager: Any, ctx: StepExecutionContext) -> Dict[str, Any]:
        p = ctx.params
        result = manager.create_instance(p["project"], p["region"], p["instanceId"], dict(p))
        ctx.logger.info(f'Created Redis instance "{p["instanceId"]}" in {p["region"]}')
        return {
            "host": result_get(result, "host"),
            "port": result_get(result, "port", _REDIS_DEFAULT_PORT),
            "instanceId": result_get(result, "name"),
        }

    def delete(self, manager: Any, ctx: StepExecutionContext, outputs: Mapping[str, Any]) -> None:
        manager.delete_instance(ctx.params["project"], ctx.params["region"], ctx.params["instanceId"])
        ctx.logger.info(f'Rolled back: deleted Redis instance "{ctx.params["instanceId"]}"')
