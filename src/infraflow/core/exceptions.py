"""
InfraFlow — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do InfraFlow.

Objetivo:
- Permitir que o Engine e os handlers levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para ErrorPayload
- Evitar RuntimeError genérico nos pontos de falha por Step

Regras:
- Exceções devem carregar apenas dados estruturados (serializáveis).
- Erros estruturais de plano (ciclo, duplicidade, dependência desconhecida)
  vivem no planner e no registry, como subclasses de ValueError.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class InfraFlowException(Exception):
    """Base class para exceções internas do InfraFlow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Resolução de referências
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OutputReferenceError(InfraFlowException):
    """Referência `$step.X.Y` não pode ser satisfeita no momento da execução."""


# ---------------------------------------------------------------------------
# Execução
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StepTimeoutError(InfraFlowException):
    """Invocação do handler excedeu o timeout do Step."""


# ---------------------------------------------------------------------------
# Managers de recurso
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ResourceManagerUnavailableError(InfraFlowException):
    """Handler embutido precisou de um manager que não foi configurado."""
