# src/infraflow/steps/__init__.py
"""
Catálogo embutido de tipos de Step (GCP).

Os handlers são agrupados por categoria (foundation, networking, storage,
database, compute, messaging, monitoring, security) e registrados com
`register_builtin_steps` ou `register_builtin_steps_dry_run`.

Limites explícitos:
    - Não contém clientes de API do provedor; o chamador injeta managers
      via `ResourceManagerFactories`
"""

from .bootstrap import (
    BUILTIN_STEP_DEFINITIONS,
    register_builtin_steps,
    register_builtin_steps_dry_run,
)
from .factories import ResourceManagerFactories

__all__ = [
    "BUILTIN_STEP_DEFINITIONS",
    "ResourceManagerFactories",
    "register_builtin_steps",
    "register_builtin_steps_dry_run",
]
