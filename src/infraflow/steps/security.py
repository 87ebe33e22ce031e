# src/infraflow/steps/security.py
"""Step embutido: create-secret (Secret Manager).

`secretData`, quando informado, é repassado ao manager e nunca aparece
nos outputs nem nos eventos.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from infraflow.core.pipeline.step import StepExecutionContext
from infraflow.core.pipeline.types import StepCategory, StepDefinition

from .base import DeletableResourceStepHandler, result_get


CREATE_SECRET = StepDefinition(
    type="create-secret",
    category=StepCategory.SECURITY,
    description="Create a secret in Secret Manager",
    required_params=("project", "secretId"),
    optional_params=("replication", "labels", "secretData"),
    outputs=("secretId", "secretName"),
)


def _secret_path(params: Mapping[str, Any]) -> str:
    return f"projects/{params.get('project')}/secrets/{params.get('secretId')}"


class CreateSecretHandler(DeletableResourceStepHandler):
    def dry_run_outputs(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        return {"secretId": params.get("secretId"), "secretName": _secret_path(params)}

    def create(self, manager: Any, ctx: StepExecutionContext) -> Dict[str, Any]:
        p = ctx.params
        result = manager.create_secret(p["project"], p["secretId"], dict(p))
        ctx.logger.info(f'Created secret "{p["secretId"]}" in project "{p["project"]}"')
        return {"secretId": p["secretId"], "secretName": result_get(result, "name", _secret_path(p))}

    def delete(self, manager: Any, ctx: StepExecutionContext, outputs: Mapping[str, Any]) -> None:
        manager.delete_secret(ctx.params["project"], ctx.params["secretId"])
        ctx.logger.info(f'Rolled back: deleted secret "{ctx.params["secretId"]}"')
