# src/infraflow/core/pipeline/step.py
"""
Contrato canônico de handler de Step do InfraFlow.

Um handler é a capacidade executável associada a um tipo de Step no
`StepTypeRegistry`. O registry funciona como uma tabela de despacho
(tipo → capacidade), sem exigir herança: qualquer objeto com `execute`
(e, opcionalmente, `rollback`) satisfaz o contrato.

Responsabilidades de um handler:
    - executar o efeito de provisionamento a partir de parâmetros já resolvidos
    - retornar um mapa de outputs nomeados
    - em dry-run, não produzir efeitos reais e devolver outputs placeholder
      determinísticos com os nomes declarados
    - opcionalmente, desfazer o efeito em `rollback` (best-effort)

Princípios fundamentais:
    - Handlers não conhecem o Engine, o planner nem outros handlers
    - Handlers leem outputs anteriores apenas via `ctx.outputs`
    - Conformidade é garantida por duck typing (@runtime_checkable)

Limites explícitos:
    - Não contém lógica de ordenação, retry ou timeout
    - Não decide políticas de rollback
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, runtime_checkable

from .context import StepLogger


@dataclass(frozen=True)
class StepExecutionContext:
    """
    Contexto entregue ao handler em `execute` e `rollback`.

    Campos:
        - step_id: ID do Step no plano
        - params: parâmetros resolvidos (em rollback: os originais, não resolvidos)
        - outputs: visão somente-leitura de todos os outputs anteriores, por step_id
        - dry_run: se verdadeiro o handler não deve produzir efeitos reais
        - logger: logger ligado ao Step nesta run
    """
    step_id: str
    params: Mapping[str, Any]
    outputs: Mapping[str, Mapping[str, Any]]
    dry_run: bool
    logger: StepLogger


@runtime_checkable
class StepHandler(Protocol):
    """
    Capacidade executável de um tipo de Step.

    `rollback(ctx, outputs)` é opcional e por isso não faz parte do
    protocolo verificado em runtime; o Engine o detecta com
    `getattr(handler, "rollback", None)`.
    """

    def execute(self, ctx: StepExecutionContext) -> Dict[str, Any]:
        """Executa o Step e retorna seus outputs nomeados."""
        ...


ExecuteFn = Callable[[StepExecutionContext], Dict[str, Any]]
RollbackFn = Callable[[StepExecutionContext, Mapping[str, Any]], None]


class FunctionStepHandler:
    """Handler montado a partir de funções simples (útil em testes e handlers pequenos)."""

    def __init__(self, execute: ExecuteFn, rollback: Optional[RollbackFn] = None):
        self._execute = execute
        if rollback is not None:
            self.rollback = rollback

    def execute(self, ctx: StepExecutionContext) -> Dict[str, Any]:
        return self._execute(ctx)

    def __repr__(self) -> str:
        return f"FunctionStepHandler(execute={self._execute!r}, rollback={hasattr(self, 'rollback')})"


def has_rollback(handler: Any) -> bool:
    return callable(getattr(handler, "rollback", None))


def read_only_outputs(outputs: Dict[str, Dict[str, Any]]) -> Mapping[str, Mapping[str, Any]]:
    return MappingProxyType({sid: MappingProxyType(dict(o)) for sid, o in outputs.items()})
