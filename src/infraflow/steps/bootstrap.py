# src/infraflow/steps/bootstrap.py
"""
Registro do catálogo embutido no StepTypeRegistry.

`register_builtin_steps(registry, factories)` liga as 14 definições
embutidas a handlers que fecham sobre `ResourceManagerFactories`.

Invariantes:
    - Idempotente: tipos já presentes no registry não são tocados, inclusive
      quando registrados antes por outro handler
    - A ordem de registro segue `BUILTIN_STEP_DEFINITIONS`

`register_builtin_steps_dry_run(registry)` registra o mesmo catálogo sem
managers reais: validação e dry-run funcionam, execução real falha com
`ResourceManagerUnavailableError` no Step.
"""

from __future__ import annotations

from typing import List, Tuple

from infraflow.core.pipeline.registry import StepTypeAlreadyRegisteredError, StepTypeRegistry
from infraflow.core.pipeline.step import StepHandler
from infraflow.core.pipeline.types import StepDefinition

from .compute import (
    CREATE_APP_ENGINE,
    CREATE_CLOUD_FUNCTION,
    CREATE_CLOUD_RUN_SERVICE,
    CREATE_GKE_CLUSTER,
    CreateAppEngineHandler,
    CreateCloudFunctionHandler,
    CreateCloudRunServiceHandler,
    CreateGkeClusterHandler,
)
from .database import (
    CREATE_CLOUD_SQL,
    CREATE_FIRESTORE_DB,
    CREATE_REDIS_INSTANCE,
    CreateCloudSqlHandler,
    CreateFirestoreDbHandler,
    CreateRedisInstanceHandler,
)
from .factories import ResourceManagerFactories
from .foundation import CREATE_PROJECT, CreateProjectHandler
from .messaging import CREATE_PUBSUB_TOPIC, CreatePubsubTopicHandler
from .monitoring import CREATE_MONITORING_ALERT, CreateMonitoringAlertHandler
from .networking import (
    CREATE_FIREWALL_RULE,
    CREATE_VPC_NETWORK,
    CreateFirewallRuleHandler,
    CreateVpcNetworkHandler,
)
from .security import CREATE_SECRET, CreateSecretHandler
from .storage import CREATE_GCS_BUCKET, CreateGcsBucketHandler


BUILTIN_STEP_DEFINITIONS: Tuple[StepDefinition, ...] = (
    CREATE_PROJECT,
    CREATE_VPC_NETWORK,
    CREATE_FIREWALL_RULE,
    CREATE_GCS_BUCKET,
    CREATE_CLOUD_SQL,
    CREATE_FIRESTORE_DB,
    CREATE_REDIS_INSTANCE,
    CREATE_GKE_CLUSTER,
    CREATE_CLOUD_RUN_SERVICE,
    CREATE_CLOUD_FUNCTION,
    CREATE_APP_ENGINE,
    CREATE_PUBSUB_TOPIC,
    CREATE_MONITORING_ALERT,
    CREATE_SECRET,
)


def _builtin_registrations(factories: ResourceManagerFactories) -> List[Tuple[StepDefinition, StepHandler]]:
    return [
        (CREATE_PROJECT, CreateProjectHandler(factories.project)),
        (CREATE_VPC_NETWORK, CreateVpcNetworkHandler(factories.network)),
        (CREATE_FIREWALL_RULE, CreateFirewallRuleHandler(factories.network)),
        (CREATE_GCS_BUCKET, CreateGcsBucketHandler(factories.storage)),
        (CREATE_CLOUD_SQL, CreateCloudSqlHandler(factories.sql)),
        (CREATE_FIRESTORE_DB, CreateFirestoreDbHandler(factories.firestore)),
        (CREATE_REDIS_INSTANCE, CreateRedisInstanceHandler(factories.redis)),
        (CREATE_GKE_CLUSTER, CreateGkeClusterHandler(factories.gke)),
        (CREATE_CLOUD_RUN_SERVICE, CreateCloudRunServiceHandler(factories.cloud_run)),
        (CREATE_CLOUD_FUNCTION, CreateCloudFunctionHandler(factories.cloud_function)),
        (CREATE_APP_ENGINE, CreateAppEngineHandler(factories.app_engine)),
        (CREATE_PUBSUB_TOPIC, CreatePubsubTopicHandler(factories.pubsub)),
        (CREATE_MONITORING_ALERT, CreateMonitoringAlertHandler(factories.monitoring)),
        (CREATE_SECRET, CreateSecretHandler(factories.secret)),
    ]


def register_builtin_steps(registry: StepTypeRegistry, factories: ResourceManagerFactories) -> List[str]:
    """Registra os tipos embutidos ausentes e retorna os tipos efetivamente registrados."""
    registered: List[str] = []
    for definition, handler in _builtin_registrations(factories):
        if registry.has(definition.type):
            continue
        try:
            registry.register(definition, handler)
        except StepTypeAlreadyRegisteredError:
            # registrado em paralelo entre has() e register()
            continue
        registered.append(definition.type)
    return registered


def register_builtin_steps_dry_run(registry: StepTypeRegistry) -> List[str]:
    return register_builtin_steps(registry, ResourceManagerFactories.unavailable())
