# src/infraflow/steps/foundation.py
"""Step embutido: create-project (foundation).

Responsabilidades:
- criar um projeto sob uma organização ou pasta
- publicar `projectId` e `projectNumber` para os Steps seguintes

Limites explícitos:
- NÃO vincula billing
- NÃO habilita APIs do projeto
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from infraflow.core.pipeline.step import StepExecutionContext
from infraflow.core.pipeline.types import StepCategory, StepDefinition

from .base import DeletableResourceStepHandler, result_get


CREATE_PROJECT = StepDefinition(
    type="create-project",
    category=StepCategory.FOUNDATION,
    description="Create a new GCP project under a specified organization or folder",
    required_params=("projectId", "projectName"),
    optional_params=("orgId", "folderId", "labels"),
    outputs=("projectId", "projectNumber"),
)


class CreateProjectHandler(DeletableResourceStepHandler):
    def dry_run_outputs(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "projectId": params.get("projectId") or "dry-run-project",
            "projectNumber": "123456789012",
        }

    def create(self, manager: Any, ctx: StepExecutionContext) -> Dict[str, Any]:
        p = ctx.params
        result = manager.create_project(p["projectId"], p["projectName"], dict(p))
        ctx.logger.info(f'Created project "{p["projectId"]}"')
        return {
            "projectId": result_get(result, "projectId", p["projectId"]),
            "projectNumber": result_get(result, "projectNumber"),
        }

    def delete(self, manager: Any, ctx: StepExecutionContext, outputs: Mapping[str, Any]) -> None:
        project_id = ctx.params["projectId"]
        manager.delete_project(project_id)
        ctx.logger.info(f'Rolled back: deleted project "{project_id}"')
