# src/infraflow/steps/storage.py
"""Step embutido: create-gcs-bucket."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from infraflow.core.pipeline.step import StepExecutionContext
from infraflow.core.pipeline.types import StepCategory, StepDefinition

from .base import DeletableResourceStepHandler, result_get


CREATE_GCS_BUCKET = StepDefinition(
    type="create-gcs-bucket",
    category=StepCategory.STORAGE,
    description="Create a Google Cloud Storage bucket",
    required_params=("project", "bucketName", "location"),
    optional_params=("storageClass", "versioning", "uniformBucketLevelAccess", "labels"),
    outputs=("bucketName", "bucketSelfLink"),
)


class CreateGcsBucketHandler(DeletableResourceStepHandler):
    def dry_run_outputs(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "bucketName": params.get("bucketName"),
            "bucketSelfLink": f"https://storage.googleapis.com/storage/v1/b/{params.get('bucketName')}",
        }

    def create(self, manager: Any, ctx: StepExecutionContext) -> Dict[str, Any]:
        p = ctx.params
        result = manager.create_bucket(p["project"], p["bucketName"], dict(p))
        ctx.logger.info(f'Created GCS bucket "{p["bucketName"]}" in {p["location"]}')
        return {
            "bucketName": result_get(result, "name", p["bucketName"]),
            "bucketSelfLink": result_get(result, "selfLink"),
        }

    def delete(self, manager: Any, ctx: StepExecutionContext, outputs: Mapping[str, Any]) -> None:
        # buckets têm namespace global: o nome basta
        manager.delete_bucket(ctx.params["bucketName"])
        ctx.logger.info(f'Rolled back: deleted GCS bucket "{ctx.params["bucketName"]}"')
