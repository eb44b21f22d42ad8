"""Step canônico: transform.filter (v1).

Subconjunto de linhas por predicado, preservando a ordem original.

Config esperada (exemplo):
steps:
  transform.filter:
    expr: "no_membrs > 5"            # opcional, sintaxe de DataFrame.eval
    conditions:                       # opcional
      - {column: village, op: "==", value: Chirodzo}
      - {column: months_lack_food, op: not_na}
    combine: all                      # all | any (entre conditions)

Quando `expr` e `conditions` são declarados, ambos precisam ser verdadeiros.

Semântica de ausentes: uma linha cujo predicado resulta em NA é excluída,
exceto em `not_in` (NA não pertence ao conjunto) e `is_na`.

Payload mínimo esperado:
payload:
  impact:
    rows_before: int
    rows_after: int
    rows_removed: int
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pandas as pd

from wrangle_dataflow.core.errors import invalid_expression
from wrangle_dataflow.core.exceptions import InvalidExpression
from wrangle_dataflow.core.pipeline.context import RunContext
from wrangle_dataflow.core.pipeline.step import Step
from wrangle_dataflow.core.pipeline.types import StepKind, StepResult
from wrangle_dataflow.steps._helpers import (
    failed_result,
    get_step_cfg,
    is_enabled,
    read_table,
    require_columns,
    shape_impact,
    skipped_result,
    table_io,
    table_result,
)


COMPARISON_OPS = ("==", "!=", "<", "<=", ">", ">=")
SET_OPS = ("in", "not_in")
NULL_OPS = ("is_na", "not_na")


def _validate_condition(cond: Any, i: int, step_id: str) -> Dict[str, Any]:
    if not isinstance(cond, dict):
        raise ValueError(f"steps.{step_id}.conditions[{i}] must be a mapping")
    column = cond.get("column")
    if not isinstance(column, str) or not column.strip():
        raise ValueError(f"steps.{step_id}.conditions[{i}].column must be a non-empty string")
    op = cond.get("op", "==")
    if op not in COMPARISON_OPS + SET_OPS + NULL_OPS:
        raise ValueError(f"steps.{step_id}.conditions[{i}].op not supported: {op}")
    if op in SET_OPS:
        values = cond.get("value")
        if not isinstance(values, list):
            raise ValueError(f"steps.{step_id}.conditions[{i}].value must be a list for op '{op}'")
    elif op in COMPARISON_OPS and "value" not in cond:
        raise ValueError(f"steps.{step_id}.conditions[{i}].value is required for op '{op}'")
    return {"column": column.strip(), "op": op, "value": cond.get("value")}


def _validate_config(step_cfg: Dict[str, Any], step_id: str) -> Dict[str, Any]:
    expr = step_cfg.get("expr")
    if expr is not None and (not isinstance(expr, str) or not expr.strip()):
        raise ValueError(f"steps.{step_id}.expr must be a non-empty string")

    raw_conditions = step_cfg.get("conditions") or []
    if not isinstance(raw_conditions, list):
        raise ValueError(f"steps.{step_id}.conditions must be a list")
    conditions = [_validate_condition(c, i, step_id) for i, c in enumerate(raw_conditions)]

    if expr is None and not conditions:
        raise ValueError(f"steps.{step_id} must declare expr and/or conditions")

    combine = step_cfg.get("combine", "all")
    if combine not in ("all", "any"):
        raise ValueError(f"steps.{step_id}.combine must be 'all' or 'any'")

    return {"expr": expr, "conditions": conditions, "combine": combine}


def _as_mask(values: Any, index: pd.Index) -> pd.Series:
    # NA no predicado exclui a linha
    mask = pd.Series(values, index=index).astype("boolean")
    return mask.fillna(False).astype(bool)


def condition_mask(df: pd.DataFrame, cond: Dict[str, Any]) -> pd.Series:
    s = df[cond["column"]]
    op = cond["op"]
    value = cond.get("value")

    if op == "is_na":
        return s.isna()
    if op == "not_na":
        return s.notna()
    if op == "in":
        return _as_mask(s.isin(value), df.index)
    if op == "not_in":
        return _as_mask(~s.isin(value), df.index)
    if op == "!=":
        return _as_mask(s.ne(value) & s.notna(), df.index)

    compare = {"==": s.eq, "<": s.lt, "<=": s.le, ">": s.gt, ">=": s.ge}[op]
    return _as_mask(compare(value), df.index)


def expression_mask(df: pd.DataFrame, expr: str, step_id: Optional[str] = None) -> pd.Series:
    try:
        result = df.eval(expr, engine="python")
    except Exception as e:
        err = invalid_expression(expression=expr, reason=f"{e.__class__.__name__}: {e}", step=step_id)
        raise InvalidExpression(
            message=f"Invalid filter expression: {expr}",
            details=err.details,
            hint=err.hint,
        ) from e

    if (
        not isinstance(result, pd.Series)
        or len(result) != len(df)
        or not (pd.api.types.is_bool_dtype(result.dtype) or result.dtype == object)
    ):
        err = invalid_expression(expression=expr, reason="expression must produce one boolean per row", step=step_id)
        raise InvalidExpression(
            message=f"Filter expression is not a row predicate: {expr}",
            details=err.details,
            hint=err.hint,
        )
    return _as_mask(result, df.index)


def filter_rows(
    df: pd.DataFrame,
    *,
    expr: Optional[str],
    conditions: List[Dict[str, Any]],
    combine: str = "all",
    step_id: Optional[str] = None,
) -> pd.DataFrame:
    keep = pd.Series(True, index=df.index)

    if conditions:
        require_columns(df, [c["column"] for c in conditions], step_id or "transform.filter")
        masks = [condition_mask(df, c) for c in conditions]
        combined = masks[0]
        for m in masks[1:]:
            combined = (combined & m) if combine == "all" else (combined | m)
        keep &= combined

    if expr is not None:
        keep &= expression_mask(df, expr, step_id)

    return df.loc[keep].copy()


@dataclass
class TransformFilterStep(Step):
    """Mantém as linhas que satisfazem o predicado declarado."""

    id: str = "transform.filter"
    kind: StepKind = StepKind.TRANSFORM
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["ingest.load"]

    def run(self, ctx: RunContext) -> StepResult:
        step_cfg = get_step_cfg(ctx, self.id)

        try:
            if not is_enabled(step_cfg, self.id):
                return skipped_result(self.id, self.kind)

            parsed = _validate_config(step_cfg, self.id)
            src, dst = table_io(step_cfg, self.id)
            df = read_table(ctx, src, self.id)

            out = filter_rows(
                df,
                expr=parsed["expr"],
                conditions=parsed["conditions"],
                combine=parsed["combine"],
                step_id=self.id,
            )

            rows_removed = int(df.shape[0] - out.shape[0])
            impact = shape_impact(df, out, rows_removed=rows_removed)
            if out.empty and not df.empty:
                ctx.add_warning(step_id=self.id, message="filter removed every row")

            ctx.set_table(dst, out)
            ctx.set_impact(self.id, impact)
            ctx.log(
                step_id=self.id,
                level="info",
                message="rows filtered",
                rows_before=impact["rows_before"],
                rows_after=impact["rows_after"],
                rows_removed=rows_removed,
                table=dst,
            )

            return table_result(
                step_id=self.id,
                kind=self.kind,
                summary=f"kept {out.shape[0]} of {df.shape[0]} rows",
                output=dst,
                table=out,
                impact=impact,
            )

        except Exception as e:
            return failed_result(ctx, self.id, self.kind, e)
