# src/wrangle_dataflow/core/engine/__init__.py
"""
Engine do Wrangle DataFlow.

Planeja (DAG) e executa pipelines respeitando configuração resolvida e
políticas explícitas.

Componentes:
    - planner → ordenação topológica determinística e validações estruturais
    - engine  → execução coordenada de Steps (enabled, fail-fast, skip por dependência)

Invariantes:
    - Steps só são executados após suas dependências
    - Cada Step é executado no máximo uma vez por run
"""

from .engine import Engine, RunResult
from .planner import CycleDetectedError, UnknownDependencyError, plan_execution

__all__ = [
    "CycleDetectedError",
    "Engine",
    "RunResult",
    "UnknownDependencyError",
    "plan_execution",
]
