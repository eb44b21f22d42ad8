# src/wrangle_dataflow/core/pipeline/types.py
"""
Tipos canônicos do pipeline do Wrangle DataFlow.

Componentes:
    - StepKind   → classificação semântica de Steps
    - StepStatus → estados finais (SUCCESS, SKIPPED, FAILED)
    - StepResult → resultado imutável da execução de um Step

Os enums herdam de `str` para serializar diretamente em JSON
(Manifest, eventos, relatório).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class StepKind(str, Enum):
    """
    Tipos semânticos de Steps.

    - DIAGNOSTIC: leitura e inspeção de tabelas (ingest, glimpse)
    - TRANSFORM: select, filter, mutate, arrange, summarize, count, reshape
    - EXPORT: materialização de tabelas em disco

    O Engine não usa `kind` para decidir execução; o valor é apenas
    informativo (Manifest e relatório).
    """
    DIAGNOSTIC = "diagnostic"
    TRANSFORM = "transform"
    EXPORT = "export"


class StepStatus(str, Enum):
    """Estados finais possíveis da execução de um Step."""
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    """
    Resultado imutável da execução de um Step.

    Campos:
        - step_id: identificador único do Step
        - kind: tipo semântico do Step
        - status: estado final da execução
        - summary: resumo textual curto
        - metrics: números produzidos (linhas, colunas, bytes...)
        - warnings: avisos não fatais
        - artifacts: referências a artefatos (tabelas, arquivos)
        - payload: dados livres (impacto, erro, estrutura)

    Instâncias nunca são alteradas depois de criadas; quem precisa
    enriquecer um resultado cria outro com `dataclasses.replace`.
    """
    step_id: str
    kind: StepKind
    status: StepStatus
    summary: str
    metrics: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    artifacts: Dict[str, Any] = field(default_factory=dict)
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_id": self.step_id,
            "kind": getattr(self.kind, "value", self.kind),
            "status": getattr(self.status, "value", self.status),
            "summary": self.summary,
            "metrics": dict(self.metrics),
            "warnings": list(self.warnings),
            "artifacts": dict(self.artifacts),
            "payload": dict(self.payload),
        }
