# src/infraflow/core/pipeline/registry.py
"""
Registro de tipos de Step do InfraFlow.

Este módulo define o `StepTypeRegistry`, o catálogo que associa o nome de
um tipo de Step ao seu schema (`StepDefinition`) e à sua capacidade
executável (`StepHandler`).

O registry é o único estado compartilhado entre runs. Por isso ele é um
objeto explícito, injetado no Orchestrator pelo construtor, e não um
singleton de módulo: suites de teste paralelas usam instâncias próprias.

Responsabilidades do módulo:
    - Registrar pares (definição, handler) com unicidade de `type`
    - Expor lookup de definição e de handler
    - Preservar a ordem de registro na listagem
    - Oferecer `clear()` como ponto de reset explícito

Decisões arquiteturais:
    - Registro duplicado é erro fatal (nunca sobrescreve)
    - Leituras e escritas são protegidas por lock, permitindo runs
      concorrentes enquanto registros tardios acontecem

Invariantes:
    - Cada `type` aparece no máximo uma vez
    - `list()` reflete exatamente a ordem de registro

Limites explícitos:
    - Não valida planos
    - Não executa handlers
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .step import StepHandler
from .types import StepDefinition


class StepTypeAlreadyRegisteredError(ValueError):
    """
    Exceção levantada ao registrar um `type` já presente no registry.

    Decisões arquiteturais:
        - O registro é imutável por tipo: não há substituição silenciosa
        - Bootstraps idempotentes devem consultar `has()` antes de registrar
    """


@dataclass
class StepTypeRegistry:
    """
    Catálogo de tipos de Step: `type` → (StepDefinition, StepHandler).

    Decisões arquiteturais:
        - A ordem de inserção é preservada separadamente
        - A estrutura interna não é exposta diretamente
        - `clear()` existe para testes e reinicialização explícita

    Invariantes:
        - Cada `type` é único no registry
        - Apenas definições com `type` não vazio são aceitas
    """

    _entries: Dict[str, Tuple[StepDefinition, StepHandler]] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    def register(self, definition: StepDefinition, handler: StepHandler) -> None:
        step_type = getattr(definition, "type", None)
        if not isinstance(step_type, str) or not step_type.strip():
            raise ValueError("definition.type must be a non-empty string")
        if not callable(getattr(handler, "execute", None)):
            raise TypeError(f'Handler for step type "{step_type}" must define execute(ctx)')

        with self._lock:
            if step_type in self._entries:
                raise StepTypeAlreadyRegisteredError(f'Step type "{step_type}" is already registered')
            self._entries[step_type] = (definition, handler)
            self._order.append(step_type)

    def get(self, step_type: str) -> Optional[StepDefinition]:
        with self._lock:
            entry = self._entries.get(step_type)
        return entry[0] if entry else None

    def get_handler(self, step_type: str) -> Optional[StepHandler]:
        with self._lock:
            entry = self._entries.get(step_type)
        return entry[1] if entry else None

    def has(self, step_type: str) -> bool:
        with self._lock:
            return step_type in self._entries

    def list(self) -> List[StepDefinition]:
        with self._lock:
            return [self._entries[t][0] for t in self._order]

    def clear(self) -> None:
        """Remove todos os registros. Ponto de reset para testes; não usar durante uma run."""
        with self._lock:
            self._entries.clear()
            self._order.clear()

    def __contains__(self, step_type: object) -> bool:
        return isinstance(step_type, str) and self.has(step_type)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
