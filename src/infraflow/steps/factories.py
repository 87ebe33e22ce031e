# src/infraflow/steps/factories.py
"""
Factories de managers de recurso injetadas nos handlers embutidos.

Cada campo é uma função sem argumentos que devolve o manager de um
domínio do provedor (projetos, rede, storage, ...). O contrato de cada
manager é apenas o conjunto de métodos que o handler correspondente
chama, por exemplo `create_project(project_id, project_name, params)` e
`delete_project(project_id)`.

`ResourceManagerFactories.unavailable()` monta um conjunto em que toda
factory levanta `ResourceManagerUnavailableError`: serve para registrar o
catálogo quando só se pretende validar planos ou executar em dry-run.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Callable

from infraflow.core.exceptions import ResourceManagerUnavailableError


def _unavailable_factory(domain: str) -> Callable[[], Any]:
    def factory() -> Any:
        raise ResourceManagerUnavailableError(
            message=f'No resource manager configured for "{domain}"; only dry-run execution is available',
            details={"domain": domain},
            hint="Registre os Steps com `register_builtin_steps(registry, factories)` para execução real.",
        )

    return factory


@dataclass(frozen=True)
class ResourceManagerFactories:
    project: Callable[[], Any]
    network: Callable[[], Any]
    storage: Callable[[], Any]
    sql: Callable[[], Any]
    firestore: Callable[[], Any]
    redis: Callable[[], Any]
    gke: Callable[[], Any]
    cloud_run: Callable[[], Any]
    cloud_function: Callable[[], Any]
    app_engine: Callable[[], Any]
    pubsub: Callable[[], Any]
    monitoring: Callable[[], Any]
    secret: Callable[[], Any]

    @classmethod
    def unavailable(cls) -> "ResourceManagerFactories":
        return cls(**{f.name: _unavailable_factory(f.name) for f in fields(cls)})
