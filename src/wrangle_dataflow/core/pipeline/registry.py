# src/wrangle_dataflow/core/pipeline/registry.py
"""
Registro estrutural de Steps do pipeline.

O `StepRegistry` valida identificadores e preserva a ordem de declaração
antes de qualquer planejamento. É usado pelo builder para montar o fluxo
a partir da seção `pipeline` da configuração.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from .step import Step


class DuplicateStepIdError(ValueError):
    """
    Dois Steps com o mesmo `step.id` no mesmo pipeline.

    A duplicidade é detectada no registro, antes da execução; o registry
    nunca renomeia Steps automaticamente.
    """


@dataclass
class StepRegistry:
    """
    Registro canônico de Steps, na ordem em que foram declarados.

    Invariantes:
        - Cada `step.id` é único e não vazio
        - `list()` reflete exatamente a ordem de registro
    """

    _steps: Dict[str, Step] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    def add(self, step: Step) -> None:
        step_id = getattr(step, "id", None)
        if not isinstance(step_id, str) or not step_id.strip():
            raise ValueError("step.id must be a non-empty string")

        if step_id in self._steps:
            raise DuplicateStepIdError(f"Duplicate step id: {step_id}")

        self._steps[step_id] = step
        self._order.append(step_id)

    def get(self, step_id: str) -> Step:
        return self._steps[step_id]

    def ids(self) -> List[str]:
        return list(self._order)

    def list(self) -> List[Step]:
        return [self._steps[sid] for sid in self._order]

    def __len__(self) -> int:
        return len(self._order)
