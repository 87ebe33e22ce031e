# src/infraflow/core/engine/planner.py
"""
Planejador de execução do plano (DAG).

Este módulo constrói o grafo de dependências efetivo de um plano e produz
uma ordem de execução topológica determinística, ou reporta ciclos.

Dependência efetiva de um Step:
    união de `depends_on` explícito com os Steps de origem de toda
    referência `$step.X.Y` encontrada em `params` (varredura profunda).

Decisões arquiteturais:
    - Ordenação por algoritmo de Kahn; empates resolvidos pela ordem de
      declaração no plano
    - Detecção de ciclo por DFS de três cores, iterativa (pilha explícita),
      com reconstrução de caminho; a profundidade da cadeia não esbarra no
      limite de recursão
    - Ordenação e detecção consideram exatamente as mesmas arestas,
      portanto validação e ordenação nunca divergem sobre o que é um ciclo

Invariantes:
    - Nenhum Step aparece antes de suas dependências efetivas
    - Todos os Steps aparecem exatamente uma vez na ordem final
    - A mesma entrada produz sempre a mesma ordem

Limites explícitos:
    - Não executa Steps
    - Não consulta o registry
    - Não acumula erros (ver `validator`); a falha do sort é uma rede de segurança
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from infraflow.core.pipeline.plan import ExecutionPlan, PlanStep

from .references import iter_output_refs


class DuplicateStepIdError(ValueError):
    """Dois ou mais Steps do plano compartilham o mesmo `id`."""


class UnknownDependencyError(ValueError):
    """
    Um Step depende (explícita ou implicitamente) de um `id` ausente do plano.

    Invariantes:
        - Um Step não pode depender de um Step inexistente
        - O plano é considerado inválido nesta condição
    """


class CycleDetectedError(ValueError):
    """
    O grafo de dependências efetivo contém um ciclo.

    Nenhuma ordem topológica válida pode ser produzida e nenhuma
    execução parcial é permitida.
    """


_WHITE, _GRAY, _BLACK = 0, 1, 2


def effective_dependencies(step: PlanStep) -> List[str]:
    """Dependências explícitas seguidas das implícitas, sem repetição, na ordem em que aparecem."""
    deps: List[str] = []
    seen: Set[str] = set()
    for dep in list(step.depends_on or []):
        if dep not in seen:
            seen.add(dep)
            deps.append(dep)
    for ref in iter_output_refs(dict(step.params or {})):
        if ref.source_step_id not in seen:
            seen.add(ref.source_step_id)
            deps.append(ref.source_step_id)
    return deps


def build_dependency_graph(steps: Iterable[PlanStep]) -> Dict[str, List[str]]:
    """Mapa `step_id → dependências efetivas`; em IDs duplicados prevalece o primeiro Step."""
    graph: Dict[str, List[str]] = {}
    for step in steps:
        graph.setdefault(step.id, effective_dependencies(step))
    return graph


def topological_sort(plan: ExecutionPlan) -> List[PlanStep]:
    """
    Produz a ordem de execução topológica determinística dos Steps do plano.

    Algoritmo de Kahn: lista de adjacência dependência → dependentes e
    grau de entrada por Step; a fila de prontos é semeada com os Steps de
    grau zero e sempre entrega o Step de menor índice de declaração.

    Args:
        plan (ExecutionPlan): plano a ordenar.

    Returns:
        List[PlanStep]: Steps em ordem de execução.

    Raises:
        DuplicateStepIdError: se o plano tiver IDs duplicados.
        UnknownDependencyError: se alguma dependência efetiva não existir no plano.
        CycleDetectedError: se a ordem produzida for menor que o número de Steps.
    """
    by_id: Dict[str, PlanStep] = {}
    position: Dict[str, int] = {}
    for index, step in enumerate(plan.steps):
        if step.id in by_id:
            raise DuplicateStepIdError(f'Duplicate step ID "{step.id}"')
        by_id[step.id] = step
        position[step.id] = index

    graph = build_dependency_graph(plan.steps)
    for sid, deps in graph.items():
        for dep in deps:
            if dep not in by_id:
                raise UnknownDependencyError(f'Step "{sid}" depends on unknown step "{dep}"')

    in_degree: Dict[str, int] = {sid: len(deps) for sid, deps in graph.items()}
    dependents: Dict[str, List[str]] = {sid: [] for sid in by_id}
    for sid, deps in graph.items():
        for dep in deps:
            dependents[dep].append(sid)

    ready: List[str] = [sid for sid in by_id if in_degree[sid] == 0]
    order_ids: List[str] = []

    while ready:
        sid = ready.pop(0)
        order_ids.append(sid)
        for child in dependents[sid]:
            in_degree[child] -= 1
            if in_degree[child] == 0:
                ready.append(child)
                ready.sort(key=position.__getitem__)

    if len(order_ids) < len(plan.steps):
        raise CycleDetectedError("Cycle detected in execution plan — topological sort failed")

    return [by_id[sid] for sid in order_ids]


def detect_cycle(steps: Iterable[PlanStep]) -> Optional[List[str]]:
    """
    Detecta um ciclo no grafo efetivo por DFS de três cores.

    Ao encontrar uma aresta para um nó cinza (em progresso), o caminho é
    reconstruído seguindo os ponteiros de pai do nó atual até o nó cinza
    e então invertido, fechando o ciclo: `["a", "b", "c", "a"]`. Uma
    auto-dependência produz `["a", "a"]`. Arestas para IDs fora do plano
    são ignoradas.

    Returns:
        Optional[List[str]]: caminho fechado do primeiro ciclo encontrado, ou None.
    """
    graph = build_dependency_graph(steps)
    color: Dict[str, int] = {sid: _WHITE for sid in graph}
    parent: Dict[str, Optional[str]] = {sid: None for sid in graph}

    for root in graph:
        if color[root] != _WHITE:
            continue
        color[root] = _GRAY
        stack: List[Tuple[str, Iterator[str]]] = [(root, iter(graph[root]))]
        while stack:
            node, pending = stack[-1]
            for dep in pending:
                if dep not in color:
                    continue
                if color[dep] == _GRAY:
                    path = [node]
                    cur = node
                    while cur != dep:
                        cur = parent[cur]  # type: ignore[assignment]
                        path.append(cur)
                    path.reverse()
                    path.append(dep)
                    return path
                if color[dep] == _WHITE:
                    parent[dep] = node
                    color[dep] = _GRAY
                    stack.append((dep, iter(graph[dep])))
                    break
            else:
                # todas as dependências de `node` foram exploradas
                color[node] = _BLACK
                stack.pop()
    return None
