# src/infraflow/steps/networking.py
"""Steps embutidos de rede: create-vpc-network, create-firewall-rule.

Ambos usam o manager de rede (`ResourceManagerFactories.network`).
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from infraflow.core.pipeline.step import StepExecutionContext
from infraflow.core.pipeline.types import StepCategory, StepDefinition

from .base import DeletableResourceStepHandler, result_get


_COMPUTE_API = "https://compute.googleapis.com/compute/v1"


CREATE_VPC_NETWORK = StepDefinition(
    type="create-vpc-network",
    category=StepCategory.NETWORKING,
    description="Create a VPC network in the specified project",
    required_params=("project", "networkName"),
    optional_params=("autoCreateSubnetworks", "routingMode", "description"),
    outputs=("networkId", "networkSelfLink"),
)

CREATE_FIREWALL_RULE = StepDefinition(
    type="create-firewall-rule",
    category=StepCategory.NETWORKING,
    description="Create a firewall rule in the specified VPC network",
    required_params=("project", "ruleName", "network"),
    optional_params=("direction", "priority", "sourceRanges", "allowed", "denied", "targetTags"),
    outputs=("firewallId", "firewallSelfLink"),
)


class CreateVpcNetworkHandler(DeletableResourceStepHandler):
    def dry_run_outputs(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        path = f"projects/{params.get('project')}/global/networks/{params.get('networkName')}"
        return {"networkId": path, "networkSelfLink": f"{_COMPUTE_API}/{path}"}

    def create(self, manager: Any, ctx: StepExecutionContext) -> Dict[str, Any]:
        p = ctx.params
        result = manager.create_network(p["project"], p["networkName"], dict(p))
        ctx.logger.info(f'Created VPC network "{p["networkName"]}" in project "{p["project"]}"')
        return {
            "networkId": result_get(result, "id"),
            "networkSelfLink": result_get(result, "selfLink"),
        }

    def delete(self, manager: Any, ctx: StepExecutionContext, outputs: Mapping[str, Any]) -> None:
        manager.delete_network(ctx.params["project"], ctx.params["networkName"])
        ctx.logger.info(f'Rolled back: deleted VPC network "{ctx.params["networkName"]}"')


class CreateFirewallRuleHandler(DeletableResourceStepHandler):
    def dry_run_outputs(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        path = f"projects/{params.get('project')}/global/firewalls/{params.get('ruleName')}"
        return {"firewallId": path, "firewallSelfLink": f"{_COMPUTE_API}/{path}"}

    def create(self, manager: Any, ctx: StepExecutionContext) -> Dict[str, Any]:
        p = ctx.params
        result = manager.create_firewall_rule(p["project"], p["ruleName"], dict(p))
        ctx.logger.info(f'Created firewall rule "{p["ruleName"]}" in project "{p["project"]}"')
        return {
            "firewallId": result_get(result, "id"),
            "firewallSelfLink": result_get(result, "selfLink"),
        }

    def delete(self, manager: Any, ctx: StepExecutionContext, outputs: Mapping[str, Any]) -> None:
        manager.delete_firewall_rule(ctx.params["project"], ctx.params["ruleName"])
        ctx.logger.info(f'Rolled back: deleted firewall rule "{ctx.params["ruleName"]}"')
