# src/wrangle_dataflow/core/pipeline/__init__.py
"""
# Pipeline Core: Wrangle DataFlow

Contratos e estruturas fundamentais de um pipeline de manipulação de
dados. Um pipeline é um **DAG explícito de Steps**, no qual cada Step lê
uma tabela nomeada do `RunContext` e publica outra.

## Componentes

- **types**: `StepStatus`, `StepKind`, `StepResult`
- **step**: `Step` (Protocol)
- **context**: `RunContext` (tabelas nomeadas, eventos, warnings, impactos)
- **registry**: `StepRegistry` (unicidade e ordem de `step.id`)

## Princípios

- Steps não conhecem o Engine nem o planner
- Dependências são explícitas e declarativas
- Comunicação entre Steps ocorre apenas via RunContext
"""

from .context import DEFAULT_TABLE, RunContext
from .registry import DuplicateStepIdError, StepRegistry
from .step import Step
from .types import StepKind, StepResult, StepStatus

__all__ = [
    "DEFAULT_TABLE",
    "DuplicateStepIdError",
    "RunContext",
    "Step",
    "StepKind",
    "StepRegistry",
    "StepResult",
    "StepStatus",
]
