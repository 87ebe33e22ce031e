# src/infraflow/steps/messaging.py
"""Step embutido: create-pubsub-topic."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from infraflow.core.pipeline.step import StepExecutionContext
from infraflow.core.pipeline.types import StepCategory, StepDefinition

from .base import DeletableResourceStepHandler, result_get


CREATE_PUBSUB_TOPIC = StepDefinition(
    type="create-pubsub-topic",
    category=StepCategory.MESSAGING,
    description="Create a Pub/Sub topic with optional subscriptions",
    required_params=("project", "topicName"),
    optional_params=("labels", "messageRetentionDuration", "schemaSettings"),
    outputs=("topicName", "topicId"),
)


def _topic_path(params: Mapping[str, Any]) -> str:
    return f"projects/{params.get('project')}/topics/{params.get('topicName')}"


class CreatePubsubTopicHandler(DeletableResourceStepHandler):
    def dry_run_outputs(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        return {"topicName": _topic_path(params), "topicId": params.get("topicName")}

    def create(self, manager: Any, ctx: StepExecutionContext) -> Dict[str, Any]:
        p = ctx.params
        result = manager.create_topic(p["project"], p["topicName"], dict(p))
        ctx.logger.info(f'Created Pub/Sub topic "{p["topicName"]}" in project "{p["project"]}"')
        return {"topicName": result_get(result, "name", _topic_path(p)), "topicId": p["topicName"]}

    def delete(self, manager: Any, ctx: StepExecutionContext, outputs: Mapping[str, Any]) -> None:
        manager.delete_topic(ctx.params["project"], ctx.params["topicName"])
        ctx.logger.info(f'Rolled back: deleted Pub/Sub topic "{ctx.params["topicName"]}"')
