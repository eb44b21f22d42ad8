# src/wrangle_dataflow/core/pipeline/context.py
"""
Contexto de execução compartilhado do pipeline.

O `RunContext` é o único meio pelo qual Steps trocam informação. Ele
mantém:
    - identidade e metadados da run (`run_id`, `created_at`, `meta`)
    - configuração resolvida
    - um artifact store explícito, incluindo as tabelas nomeadas
      (`table.<nome>`) que cada Step lê e escreve
    - eventos de log estruturados
    - warnings e payloads de impacto agrupados por `step_id`

Invariantes:
    - Logs sempre incluem `run_id`, `step_id` e `timestamp` UTC
    - Warnings são agrupados por `step_id` na ordem de emissão
    - Tabelas são acessadas por nome; um nome ausente é erro explícito

Limites explícitos:
    - Não executa Steps
    - Não copia tabelas: Steps publicam novos DataFrames em vez de mutar
      o que receberam
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from wrangle_dataflow.core.errors import table_not_found
from wrangle_dataflow.core.exceptions import TableNotFound


# Prefixo das tabelas nomeadas dentro do artifact store.
TABLE_PREFIX = "table."

# Tabela usada quando o Step não declara `input`/`output`.
DEFAULT_TABLE = "main"


@dataclass
class RunContext:
    """
    Contexto de execução de uma run.

    Decisões arquiteturais:
        - Cada run possui seu próprio contexto; não há estado global
        - Tabelas intermediárias ficam sob nomes explícitos, como as
          variáveis de uma sessão interativa de análise
        - `meta` carrega dados do runner (ex.: `run_dir`, `manifest`)
    """
    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    meta: Dict[str, Any] = field(default_factory=dict)

    _artifacts: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)
    impacts: Dict[str, Any] = field(default_factory=dict, init=False)

    # -----------------------------
    # Artifact store
    # -----------------------------
    def set_artifact(self, key: str, value: Any) -> None:
        self._artifacts[key] = value

    def has_artifact(self, key: str) -> bool:
        return key in self._artifacts

    def get_artifact(self, key: str) -> Any:
        if key not in self._artifacts:
            raise KeyError(key)
        return self._artifacts[key]

    # -----------------------------
    # Tabelas nomeadas
    # -----------------------------
    def set_table(self, name: str, table: Any) -> None:
        self.set_artifact(TABLE_PREFIX + name, table)

    def has_table(self, name: str) -> bool:
        return self.has_artifact(TABLE_PREFIX + name)

    def get_table(self, name: str, *, step_id: str | None = None) -> Any:
        if not self.has_table(name):
            err = table_not_found(table=name, available_tables=self.table_names(), step=step_id)
            raise TableNotFound(
                message=f"Table not found: {name}",
                details=err.details,
                hint=err.hint,
            )
        return self.get_artifact(TABLE_PREFIX + name)

    def table_names(self) -> List[str]:
        return sorted(k[len(TABLE_PREFIX):] for k in self._artifacts if k.startswith(TABLE_PREFIX))

    # -----------------------------
    # Impact payloads
    # -----------------------------
    def set_impact(self, step_id: str, impact: Dict[str, Any]) -> None:
        self.impacts[step_id] = impact

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        if step_id not in self.warnings:
            self.warnings[step_id] = []
        self.warnings[step_id].append(message)
