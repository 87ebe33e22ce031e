# tests/conftest.py
"""
Fixtures compartilhados para testes do InfraFlow.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas do Orchestrator
- um StepTypeRegistry isolado por teste
- tipos de Step falsos (handlers que registram chamadas)
- um construtor de planos a partir de documentos declarativos

O objetivo destas fixtures é permitir testes do core
(config, pipeline e engine) sem depender de:
- provedores de nuvem ou credenciais
- filesystem (salvo quando o próprio teste usa `tmp_path`)
- estado global compartilhado entre testes

Decisões arquiteturais:
    - Cada teste recebe um registry próprio (nunca um singleton)
    - Handlers falsos utilizam duck typing em vez de herança
    - O log de chamadas é uma lista simples de tuplas, fácil de comparar
    - Planos são montados via `plan_from_dict`, o mesmo caminho usado
      para documentos YAML/JSON

Invariantes:
    - Nenhuma fixture executa plano real
    - Nenhuma fixture contém lógica de provedor
    - Todas as fixtures são seguras para execução em paralelo

Limites explícitos:
    - Não substituir testes de integração dos handlers embutidos
    - Não conter lógica condicional complexa
"""

import time

import pytest


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def orchestrator_config_defaults_yaml() -> str:
    """
    Fixture que fornece um YAML de configuração padrão (defaults) do Orchestrator.

    Representa o conteúdo típico de um `config.defaults.yaml`, base sobre a
    qual overrides locais são aplicados via deep-merge.

    Invariantes:
        - YAML sintaticamente válido
        - Contém todas as chaves da seção `orchestrator`

    Usado por:
        - Testes do loader de config
        - Testes de settings e de `Orchestrator.from_config`
    """
    return """\
orchestrator:
  dry_run: false
  concurrency: 1
  default_step_timeout_ms: null
  relabel_rolled_back: true
  global_labels:
    managed-by: infraflow
"""


@pytest.fixture
def orchestrator_config_local_yaml() -> str:
    """
    Fixture que fornece um YAML de override local.

    Liga dry-run, define timeout padrão e acrescenta um label global,
    preservando os demais valores dos defaults.
    """
    return """\
orchestrator:
  dry_run: true
  default_step_timeout_ms: 30000
  global_labels:
    env: staging
"""


# =====================================================
# Registry + handlers falsos
# =====================================================

class RecordingHandler:
    """
    Handler falso que registra cada chamada em `calls`.

    Decisões arquiteturais:
        - `rollback` só existe quando `with_rollback=True`, espelhando o
          contrato opcional do handler
        - `outputs` pode ser um dict fixo ou uma função de `ctx`

    Invariantes:
        - Cada chamada registra `("execute" | "rollback", step_id, params)`
        - Falhas são sempre `RuntimeError` com mensagem conhecida
    """

    def __init__(
        self,
        calls,
        *,
        outputs=None,
        fail=False,
        with_rollback=True,
        rollback_fails=False,
        delay_s=0.0,
    ):
        self.calls = calls
        self._outputs = outputs
        self._fail = fail
        self._rollback_fails = rollback_fails
        self._delay_s = delay_s
        if with_rollback:
            self.rollback = self._rollback

    def execute(self, ctx):
        self.calls.append(("execute", ctx.step_id, dict(ctx.params)))
        if self._delay_s:
            time.sleep(self._delay_s)
        if self._fail:
            raise RuntimeError(f"{ctx.step_id} exploded")
        if callable(self._outputs):
            return self._outputs(ctx)
        return dict(self._outputs or {})

    def _rollback(self, ctx, outputs):
        self.calls.append(("rollback", ctx.step_id, dict(ctx.params)))
        if self._rollback_fails:
            raise RuntimeError(f"cannot undo {ctx.step_id}")


def _echo_outputs(ctx):
    return {"value": f"{ctx.step_id}-value", "echo": ctx.params.get("input"), "dry": ctx.dry_run}


@pytest.fixture
def call_log():
    """Lista compartilhada onde os handlers falsos registram suas chamadas."""
    return []


@pytest.fixture
def step_registry(call_log):
    """
    Fixture que fornece um StepTypeRegistry isolado com tipos falsos registrados.

    Tipos disponíveis:
        - fake-ok              → sucesso; outputs `value`, `echo`, `dry`; com rollback
        - fake-fail            → sempre falha; com rollback
        - fake-no-rollback     → sucesso; sem rollback
        - fake-rollback-fails  → sucesso; rollback sempre falha
        - fake-required        → exige o parâmetro `name`
        - fake-slow            → demora ~0.5s antes de concluir

    Invariantes:
        - Registry novo a cada teste
        - Todos os handlers escrevem em `call_log`
    """
    from infraflow.core.pipeline.registry import StepTypeRegistry
    from infraflow.core.pipeline.types import StepCategory, StepDefinition

    registry = StepTypeRegistry()

    def define(step_type, required=(), outputs=("value", "echo", "dry")):
        return StepDefinition(
            type=step_type,
            category=StepCategory.COMPUTE,
            description=f"test type {step_type}",
            required_params=tuple(required),
            outputs=tuple(outputs),
        )

    registry.register(define("fake-ok"), RecordingHandler(call_log, outputs=_echo_outputs))
    registry.register(define("fake-fail"), RecordingHandler(call_log, fail=True))
    registry.register(
        define("fake-no-rollback"),
        RecordingHandler(call_log, outputs=_echo_outputs, with_rollback=False),
    )
    registry.register(
        define("fake-rollback-fails"),
        RecordingHandler(call_log, outputs=_echo_outputs, rollback_fails=True),
    )
    registry.register(define("fake-required", required=("name",)), RecordingHandler(call_log, outputs=_echo_outputs))
    registry.register(define("fake-slow"), RecordingHandler(call_log, outputs=_echo_outputs, delay_s=0.5))
    return registry


# =====================================================
# Planos
# =====================================================

@pytest.fixture
def make_plan():
    """
    Fixture que retorna um construtor de planos.

    Uso:
        plan = make_plan([
            {"id": "a", "type": "fake-ok"},
            {"id": "b", "type": "fake-ok", "params": {"input": "$step.a.value"}},
        ])

    Decisões arquiteturais:
        - Documentos em camelCase, como em arquivos de plano reais
        - `id` e `name` do plano são fixos para comparação determinística
    """
    from infraflow.core.pipeline.loader import plan_from_dict

    def _make(steps, **extra):
        doc = {"id": "test-plan", "name": "Test Plan", "steps": steps}
        doc.update(extra)
        return plan_from_dict(doc)

    return _make
