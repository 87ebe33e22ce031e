"""
Managers de recurso falsos para testes dos Steps embutidos.

`RecordingManager` aceita qualquer método (`create_bucket`, `delete_topic`,
...) e grava a chamada com seus argumentos posicionais; a resposta de
cada método é configurável por nome.

Uso:
    manager = RecordingManager(responses={"create_bucket": {"name": "b1"}})
    factories = factories_for(manager)
    register_builtin_steps(registry, factories)
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict, List, Optional, Tuple

from infraflow.steps.factories import ResourceManagerFactories


class RecordingManager:
    def __init__(self, responses: Optional[Dict[str, Any]] = None, failures: Optional[Dict[str, Exception]] = None):
        self.calls: List[Tuple[Any, ...]] = []
        self.responses = dict(responses or {})
        self.failures = dict(failures or {})

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)

        def method(*args: Any) -> Any:
            self.calls.append((name, *args))
            if name in self.failures:
                raise self.failures[name]
            return self.responses.get(name)

        return method

    def names(self) -> List[str]:
        return [c[0] for c in self.calls]


def factories_for(manager: Any) -> ResourceManagerFactories:
    """Todas as factories devolvem o mesmo manager."""
    return ResourceManagerFactories(**{f.name: (lambda: manager) for f in fields(ResourceManagerFactories)})
