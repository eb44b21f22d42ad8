# src/wrangle_dataflow/core/engine/planner.py
"""
Planejador de execução do pipeline (DAG).

Valida a estrutura do pipeline e produz uma ordem topológica
determinística dos Steps declarados.

Decisões arquiteturais:
    - Ordenação topológica pelo algoritmo de Kahn
    - Empates são resolvidos pela ordem de declaração dos Steps, para que
      o fluxo executado leia como o fluxo escrito na configuração
    - Erros estruturais são fatais e ocorrem antes de qualquer execução

Invariantes:
    - Nenhum Step aparece antes de suas dependências
    - Cada Step aparece exatamente uma vez
    - A mesma definição produz sempre a mesma ordem
"""

from __future__ import annotations

import heapq
from typing import Dict, Iterable, List, Set

from wrangle_dataflow.core.pipeline.step import Step


class UnknownDependencyError(ValueError):
    """Um Step declarou em `depends_on` um `step.id` inexistente."""


class CycleDetectedError(ValueError):
    """O grafo de dependências contém um ciclo; nenhuma ordem válida existe."""


def plan_execution(steps: Iterable[Step]) -> List[Step]:
    """
    Valida e produz a ordem de execução dos Steps.

    Args:
        steps (Iterable[Step]): Steps declarados, na ordem da configuração.

    Returns:
        List[Step]: Steps em ordem topológica determinística.

    Raises:
        ValueError: Se algum Step possuir `id` inválido ou duplicado.
        UnknownDependencyError: Se um Step declarar dependência inexistente.
        CycleDetectedError: Se houver ciclo no grafo de dependências.
    """
    step_list = list(steps)
    by_id: Dict[str, Step] = {}
    position: Dict[str, int] = {}
    for idx, s in enumerate(step_list):
        sid = getattr(s, "id", None)
        if not isinstance(sid, str) or not sid.strip():
            raise ValueError("step.id must be a non-empty string")
        if sid in by_id:
            raise ValueError(f"Duplicate step id: {sid}")
        by_id[sid] = s
        position[sid] = idx

    deps: Dict[str, List[str]] = {}
    for sid, s in by_id.items():
        d = list(dict.fromkeys(getattr(s, "depends_on", []) or []))
        for dep in d:
            if dep not in by_id:
                raise UnknownDependencyError(f"Step '{sid}' depends on unknown step '{dep}'")
        deps[sid] = d

    incoming_count: Dict[str, int] = {sid: len(d) for sid, d in deps.items()}
    outgoing: Dict[str, Set[str]] = {sid: set() for sid in by_id}
    for sid, dlist in deps.items():
        for dep in dlist:
            outgoing[dep].add(sid)

    # heap de (posição de declaração, id)
    ready = [(position[sid], sid) for sid, c in incoming_count.items() if c == 0]
    heapq.heapify(ready)
    order_ids: List[str] = []

    while ready:
        _, sid = heapq.heappop(ready)
        order_ids.append(sid)
        for child in outgoing[sid]:
            incoming_count[child] -= 1
            if incoming_count[child] == 0:
                heapq.heappush(ready, (position[child], child))

    if len(order_ids) != len(by_id):
        stuck = sorted(sid for sid, c in incoming_count.items() if c > 0)
        raise CycleDetectedError(f"Cycle detected in step dependency graph: {stuck}")

    return [by_id[sid] for sid in order_ids]
