"""Utilitários compartilhados pelos Steps tabulares.

Todos os Steps seguem o mesmo ciclo:
- ler `steps.<id>` da configuração
- devolver SKIPPED quando `enabled: false`
- ler a tabela `input` do RunContext, publicar a tabela `output`
- registrar impacto + evento de log
- devolver FAILED com `payload.error` em vez de propagar exceções
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from wrangle_dataflow.core.errors import column_not_found, error_from_exception
from wrangle_dataflow.core.exceptions import ColumnNotFound, WrangleException
from wrangle_dataflow.core.pipeline.context import DEFAULT_TABLE, RunContext
from wrangle_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus


def get_step_cfg(ctx: RunContext, step_id: str) -> Dict[str, Any]:
    cfg = ctx.config or {}
    if not isinstance(cfg, dict):
        return {}
    steps_cfg = cfg.get("steps")
    if not isinstance(steps_cfg, dict):
        return {}
    step_cfg = steps_cfg.get(step_id) or {}
    return step_cfg if isinstance(step_cfg, dict) else {}


def is_enabled(step_cfg: Dict[str, Any], step_id: str) -> bool:
    enabled = step_cfg.get("enabled", True)
    if not isinstance(enabled, bool):
        raise TypeError(f"steps.{step_id}.enabled must be a bool")
    return enabled


def table_io(step_cfg: Dict[str, Any], step_id: str) -> Tuple[str, str]:
    """Resolve (input, output); `output` padrão é o próprio `input`."""
    src = step_cfg.get("input", DEFAULT_TABLE)
    if not isinstance(src, str) or not src.strip():
        raise ValueError(f"steps.{step_id}.input must be a non-empty string")
    dst = step_cfg.get("output", src)
    if not isinstance(dst, str) or not dst.strip():
        raise ValueError(f"steps.{step_id}.output must be a non-empty string")
    return src.strip(), dst.strip()


def read_table(ctx: RunContext, name: str, step_id: str) -> pd.DataFrame:
    table = ctx.get_table(name, step_id=step_id)
    if not isinstance(table, pd.DataFrame):
        raise TypeError(f"table '{name}' must be a pandas DataFrame, got {type(table).__name__}")
    return table


def str_list(value: Any, field: str, step_id: str, *, allow_empty: bool = False) -> List[str]:
    """Valida uma lista de strings não vazias vinda da configuração."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ValueError(f"steps.{step_id}.{field} must be a list of strings")
    if not value and not allow_empty:
        raise ValueError(f"steps.{step_id}.{field} must not be empty")
    out: List[str] = []
    for v in value:
        if not isinstance(v, str) or not v.strip():
            raise ValueError(f"steps.{step_id}.{field} must contain only non-empty strings")
        out.append(v.strip())
    return out


def require_columns(df: pd.DataFrame, columns: Iterable[str], step_id: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        err = column_not_found(
            missing_columns=missing,
            available_columns=[str(c) for c in df.columns],
            step=step_id,
        )
        raise ColumnNotFound(
            message=f"Columns not found in table: {missing}",
            details=err.details,
            hint=err.hint,
        )


def shape_impact(before: pd.DataFrame, after: pd.DataFrame, **extra: Any) -> Dict[str, Any]:
    impact: Dict[str, Any] = {
        "rows_before": int(before.shape[0]),
        "rows_after": int(after.shape[0]),
        "columns_before": int(before.shape[1]),
        "columns_after": int(after.shape[1]),
    }
    impact.update(extra)
    return impact


def skipped_result(step_id: str, kind: StepKind) -> StepResult:
    return StepResult(
        step_id=step_id,
        kind=kind,
        status=StepStatus.SKIPPED,
        summary="step disabled by config",
        metrics={},
        warnings=[],
        artifacts={},
        payload={"disabled": True},
    )


def table_result(
    *,
    step_id: str,
    kind: StepKind,
    summary: str,
    output: str,
    table: pd.DataFrame,
    impact: Dict[str, Any],
    payload: Optional[Dict[str, Any]] = None,
) -> StepResult:
    body = {"impact": impact}
    body.update(payload or {})
    return StepResult(
        step_id=step_id,
        kind=kind,
        status=StepStatus.SUCCESS,
        summary=summary,
        metrics={
            "rows": int(table.shape[0]),
            "columns": int(table.shape[1]),
        },
        warnings=[],
        artifacts={"table": output},
        payload=body,
    )


def failed_result(ctx: RunContext, step_id: str, kind: StepKind, exc: Exception) -> StepResult:
    """Converte uma exceção em StepResult FAILED e registra o evento de erro."""
    message = str(exc) or f"{step_id} failed"
    ctx.log(
        step_id=step_id,
        level="error",
        message=f"{step_id} failed",
        error_type=exc.__class__.__name__,
        error_message=message,
    )
    error: Dict[str, Any] = {"type": exc.__class__.__name__, "message": message}
    if isinstance(exc, WrangleException):
        canonical = error_from_exception(exc)
        error.update(
            {
                "code": canonical.type,
                "details": canonical.details,
                "hint": canonical.hint,
                "decision_required": canonical.decision_required,
            }
        )
    return StepResult(
        step_id=step_id,
        kind=kind,
        status=StepStatus.FAILED,
        summary=message,
        metrics={},
        warnings=[],
        artifacts={},
        payload={"error": error},
    )
