# src/infraflow/steps/monitoring.py
"""Step embutido: create-monitoring-alert.

O ID da política só é conhecido depois da criação, portanto o rollback
remove a política pelo output `alertPolicyId` e não pelos parâmetros.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from infraflow.core.pipeline.step import StepExecutionContext
from infraflow.core.pipeline.types import StepCategory, StepDefinition

from .base import DeletableResourceStepHandler, result_get


CREATE_MONITORING_ALERT = StepDefinition(
    type="create-monitoring-alert",
    category=StepCategory.MONITORING,
    description="Create a Cloud Monitoring alert policy",
    required_params=("project", "displayName", "conditions"),
    optional_params=("notificationChannels", "combiner", "documentation"),
    outputs=("alertPolicyId", "alertPolicyName"),
)


class CreateMonitoringAlertHandler(DeletableResourceStepHandler):
    def dry_run_outputs(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "alertPolicyId": f"projects/{params.get('project')}/alertPolicies/dry-run-policy",
            "alertPolicyName": params.get("displayName"),
        }

    def create(self, manager: Any, ctx: StepExecutionContext) -> Dict[str, Any]:
        p = ctx.params
        result = manager.create_alert_policy(p["project"], dict(p))
        ctx.logger.info(f'Created monitoring alert policy "{p["displayName"]}" in project "{p["project"]}"')
        return {
            "alertPolicyId": result_get(result, "name"),
            "alertPolicyName": result_get(result, "displayName", p["displayName"]),
        }

    def delete(self, manager: Any, ctx: StepExecutionContext, outputs: Mapping[str, Any]) -> None:
        manager.delete_alert_policy(outputs["alertPolicyId"])
        ctx.logger.info(f'Rolled back: deleted alert policy "{outputs.get("alertPolicyName")}"')
