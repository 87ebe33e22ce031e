# src/infraflow/steps/base.py
"""
Base dos handlers de recurso embutidos.

Todo tipo de Step embutido segue o mesmo ciclo:
    - em dry-run, devolve outputs placeholder determinísticos derivados
      apenas dos parâmetros (nenhum manager é obtido)
    - fora de dry-run, obtém o manager do domínio pela factory injetada,
      cria o recurso e mapeia a resposta do provedor para os outputs
      declarados na definição
    - quando o recurso pode ser removido, `rollback` obtém o manager e o
      apaga a partir dos parâmetros originais (ou dos outputs do Step)

Decisões arquiteturais:
    - Managers são obtidos de forma preguiçosa, a cada chamada, pela
      factory; o handler não guarda estado entre runs
    - Respostas do provedor podem ser mapeamentos ou objetos; campos
      ausentes caem nos defaults do handler (`result_get`)
    - Handlers não capturam falhas de remoção: o Orchestrator as registra
      como warning e segue o rollback

Limites explícitos:
    - Não implementa clientes de provedor (ver `ResourceManagerFactories`)
    - Não faz retry nem polling de operações longas
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Callable, Dict, Mapping

from infraflow.core.engine.references import resolve_step_params
from infraflow.core.pipeline.step import StepExecutionContext


ManagerFactory = Callable[[], Any]


def result_get(result: Any, key: str, default: Any = "") -> Any:
    """Lê `key` da resposta do provedor (mapping ou atributo); None vira `default`."""
    if result is None:
        return default
    if isinstance(result, Mapping):
        value = result.get(key)
    else:
        value = getattr(result, key, None)
    return default if value is None else value


class ResourceStepHandler(ABC):
    """Handler de criação de recurso sem rollback."""

    def __init__(self, get_manager: ManagerFactory):
        self._get_manager = get_manager

    def execute(self, ctx: StepExecutionContext) -> Dict[str, Any]:
        if ctx.dry_run:
            return self.dry_run_outputs(ctx.params)
        return self.create(self._get_manager(), ctx)

    @abstractmethod
    def dry_run_outputs(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def create(self, manager: Any, ctx: StepExecutionContext) -> Dict[str, Any]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class DeletableResourceStepHandler(ResourceStepHandler):
    """
    Handler de recurso que pode ser removido no rollback.

    O Orchestrator entrega ao rollback os parâmetros originais do Step;
    referências `$step.X.Y` são resolvidas aqui contra `ctx.outputs` antes
    de `delete`, para que nomes derivados de outros Steps cheguem concretos.
    """

    def rollback(self, ctx: StepExecutionContext, outputs: Mapping[str, Any]) -> None:
        resolved = replace(ctx, params=resolve_step_params(ctx.params, ctx.outputs))
        self.delete(self._get_manager(), resolved, outputs)

    @abstractmethod
    def delete(self, manager: Any, ctx: StepExecutionContext, outputs: Mapping[str, Any]) -> None:
        raise NotImplementedError
