# src/wrangle_dataflow/core/pipeline/step.py
"""
Contrato canônico de Step do Wrangle DataFlow.

Um Step é a menor unidade executável do pipeline: uma operação tabular
(ler, selecionar, filtrar, derivar, resumir, remodelar, exportar) que lê
e escreve tabelas nomeadas exclusivamente via `RunContext`.

Princípios:
    - Steps não conhecem o Engine nem o planner
    - Steps não controlam ordem de execução
    - Conformidade é verificada por duck typing (@runtime_checkable)
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from .context import RunContext
from .types import StepKind, StepResult


@runtime_checkable
class Step(Protocol):
    """
    Interface mínima de um Step executável pelo Engine.

    Atributos obrigatórios:
        - id: identificador único e estável do Step no pipeline
        - kind: classificação semântica (`StepKind`)
        - depends_on: `step_id`s dos quais o Step depende

    `run` é chamado no máximo uma vez por execução e sempre devolve um
    `StepResult`.
    """
    id: str
    kind: StepKind
    depends_on: List[str]

    def run(self, ctx: RunContext) -> StepResult:
        """Executa a etapa uma única vez usando exclusivamente o RunContext."""
        ...
