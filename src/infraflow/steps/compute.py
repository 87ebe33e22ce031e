# src/infraflow/steps/compute.py
"""Steps embutidos de computação.

Tipos:
- create-gke-cluster        → cluster GKE
- create-cloud-run-service  → serviço Cloud Run a partir de uma imagem
- create-cloud-function     → Cloud Function (2nd gen)
- create-app-engine         → aplicação App Engine (sem rollback)

Limites explícitos:
- Uma aplicação App Engine não pode ser apagada depois de criada; o tipo
  não declara rollback e o Step é simplesmente pulado na varredura.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from infraflow.core.pipeline.step import StepExecutionContext
from infraflow.core.pipeline.types import StepCategory, StepDefinition

from .base import DeletableResourceStepHandler, ResourceStepHandler, result_get


CREATE_GKE_CLUSTER = StepDefinition(
    type="create-gke-cluster",
    category=StepCategory.COMPUTE,
    description="Create a Google Kubernetes Engine cluster",
    required_params=("project", "zone", "clusterName"),
    optional_params=("initialNodeCount", "machineType", "network", "subnetwork", "releaseChannel", "enableAutopilot"),
    outputs=("clusterEndpoint", "clusterName", "clusterId"),
)

CREATE_CLOUD_RUN_SERVICE = StepDefinition(
    type="create-cloud-run-service",
    category=StepCategory.COMPUTE,
    description="Deploy a Cloud Run service from a container image",
    required_params=("project", "region", "serviceName", "image"),
    optional_params=("port", "memory", "cpu", "maxInstances", "minInstances", "envVars", "allowUnauthenticated"),
    outputs=("serviceUrl", "serviceName", "serviceId"),
)

CREATE_CLOUD_FUNCTION = StepDefinition(
    type="create-cloud-function",
    category=StepCategory.COMPUTE,
    description="Deploy a Cloud Function (2nd gen)",
    required_params=("project", "region", "functionName", "runtime", "entryPoint"),
    optional_params=("sourceDir", "memory", "timeout", "triggerHttp", "triggerTopic", "envVars"),
    outputs=("functionUrl", "functionName", "functionId"),
)

CREATE_APP_ENGINE = StepDefinition(
    type="create-app-engine",
    category=StepCategory.COMPUTE,
    description="Create an App Engine application in the specified project",
    required_params=("project", "locationId"),
    optional_params=("servingStatus", "featureSettings"),
    outputs=("defaultHostname", "appId"),
)


def _location_path(params: Mapping[str, Any], location_key: str, kind: str, name_key: str) -> str:
    return f"projects/{params.get('project')}/locations/{params.get(location_key)}/{kind}/{params.get(name_key)}"


class CreateGkeClusterHandler(DeletableResourceStepHandler):
    def dry_run_outputs(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "clusterEndpoint": "https://35.192.0.1",
            "clusterName": params.get("clusterName"),
            "clusterId": _location_path(params, "zone", "clusters", "clusterName"),
        }

    def create(self, manager: Any, ctx: StepExecutionContext) -> Dict[str, Any]:
        p = ctx.params
        result = manager.create_cluster(p["project"], p["zone"], p["clusterName"], dict(p))
        ctx.logger.info(f'Created GKE cluster "{p["clusterName"]}" in {p["zone"]}')
        return {
            "clusterEndpoint": result_get(result, "endpoint"),
            "clusterName": result_get(result, "name", p["clusterName"]),
            "clusterId": result_get(result, "selfLink"),
        }

    def delete(self, manager: Any, ctx: StepExecutionContext, outputs: Mapping[str, Any]) -> None:
        p = ctx.params
        manager.delete_cluster(p["project"], p["zone"], p["clusterName"])
        ctx.logger.info(f'Rolled back: deleted GKE cluster "{p["clusterName"]}"')


class CreateCloudRunServiceHandler(DeletableResourceStepHandler):
    def dry_run_outputs(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "serviceUrl": f"https://{params.get('serviceName')}-run.app",
            "serviceName": params.get("serviceName"),
            "serviceId": _location_path(params, "region", "services", "serviceName"),
        }

    def create(self, manager: Any, ctx: StepExecutionContext) -> Dict[str, Any]:
        p = ctx.params
        result = manager.deploy_service(p["project"], p["region"], p["serviceName"], dict(p))
        ctx.logger.info(f'Deployed Cloud Run service "{p["serviceName"]}" in {p["region"]}')
        return {
            "serviceUrl": result_get(result, "uri"),
            "serviceName": result_get(result, "name", p["serviceName"]),
            "serviceId": result_get(result, "uid"),
        }

    def delete(self, manager: Any, ctx: StepExecutionContext, outputs: Mapping[str, Any]) -> None:
        p = ctx.params
        manager.delete_service(p["project"], p["region"], p["serviceName"])
        ctx.logger.info(f'Rolled back: deleted Cloud Run service "{p["serviceName"]}"')


class CreateCloudFunctionHandler(DeletableResourceStepHandler):
    def dry_run_outputs(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "functionUrl": (
                f"https://{params.get('region')}-{params.get('project')}.cloudfunctions.net/"
                f"{params.get('functionName')}"
            ),
            "functionName": params.get("functionName"),
            "functionId": _location_path(params, "region", "functions", "functionName"),
        }

    def create(self, manager: Any, ctx: StepExecutionContext) -> Dict[str, Any]:
        p = ctx.params
        result = manager.deploy_function(p["project"], p["region"], p["functionName"], dict(p))
        ctx.logger.info(f'Deployed Cloud Function "{p["functionName"]}" in {p["region"]}')
        trigger = result_get(result, "httpsTrigger", None)
        return {
            "functionUrl": result_get(trigger, "url", None) or result_get(result, "url"),
            "functionName": result_get(result, "name", p["functionName"]),
            "functionId": result_get(result, "uid"),
        }

    def delete(self, manager: Any, ctx: StepExecutionContext, outputs: Mapping[str, Any]) -> None:
        p = ctx.params
        manager.delete_function(p["project"], p["region"], p["functionName"])
        ctx.logger.info(f'Rolled back: deleted Cloud Function "{p["functionName"]}"')


class CreateAppEngineHandler(ResourceStepHandler):
    def dry_run_outputs(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "defaultHostname": f"{params.get('project')}.appspot.com",
            "appId": params.get("project"),
        }

    def create(self, manager: Any, ctx: StepExecutionContext) -> Dict[str, Any]:
        p = ctx.params
        result = manager.create_application(p["project"], p["locationId"], dict(p))
        ctx.logger.info(f'Created App Engine application in project "{p["project"]}" at {p["locationId"]}')
        return {
            "defaultHostname": result_get(result, "defaultHostname", f"{p['project']}.appspot.com"),
            "appId": result_get(result, "id", p["project"]),
        }
