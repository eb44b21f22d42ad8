"""Step canônico: transform.mutate (v1).

Deriva colunas a partir de expressões (`DataFrame.eval`, engine python).
As expressões são avaliadas em ordem: uma coluna criada no mesmo Step
pode ser usada pelas seguintes. Ausentes propagam pela aritmética.

Config esperada (exemplo):
steps:
  transform.mutate:
    drop_na_in: [memb_assoc]          # opcional: remove NA antes de derivar
    columns:
      people_per_room: no_membrs / rooms
      crowded: people_per_room > 2
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

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
    str_list,
    table_io,
    table_result,
)


def _validate_config(step_cfg: Dict[str, Any], step_id: str) -> Dict[str, Any]:
    raw = step_cfg.get("columns")
    pairs: List[Tuple[str, str]] = []

    # mapping (ordem do YAML) ou lista de {name, expr}
    if isinstance(raw, dict):
        items = list(raw.items())
    elif isinstance(raw, list):
        items = []
        for i, entry in enumerate(raw):
            if not isinstance(entry, dict) or "name" not in entry or "expr" not in entry:
                raise ValueError(f"steps.{step_id}.columns[{i}] must be a mapping with name and expr")
            items.append((entry["name"], entry["expr"]))
    else:
        raise ValueError(f"steps.{step_id}.columns must be a mapping name -> expression")

    if not items:
        raise ValueError(f"steps.{step_id}.columns must not be empty")

    for name, expr in items:
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"steps.{step_id}.columns names must be non-empty strings")
        if isinstance(expr, (int, float, bool)):
            expr = repr(expr)
        if not isinstance(expr, str) or not expr.strip():
            raise ValueError(f"steps.{step_id}.columns['{name}'] must be an expression string")
        pairs.append((name.strip(), expr.strip()))

    drop_na_in = str_list(step_cfg.get("drop_na_in") or [], "drop_na_in", step_id, allow_empty=True)
    return {"columns": pairs, "drop_na_in": drop_na_in}


def mutate(
    df: pd.DataFrame,
    columns: List[Tuple[str, str]],
    *,
    step_id: str = "transform.mutate",
) -> pd.DataFrame:
    out = df.copy()
    for name, expr in columns:
        try:
            value = out.eval(expr, engine="python")
        except Exception as e:
            err = invalid_expression(expression=expr, reason=f"{e.__class__.__name__}: {e}", step=step_id)
            raise InvalidExpression(
                message=f"Invalid expression for column '{name}': {expr}",
                details=err.details,
                hint=err.hint,
            ) from e

        if isinstance(value, pd.Series) and len(value) != len(out):
            err = invalid_expression(expression=expr, reason="expression must produce one value per row", step=step_id)
            raise InvalidExpression(
                message=f"Expression for column '{name}' does not align with the table",
                details=err.details,
                hint=err.hint,
            )
        out[name] = value
    return out


@dataclass
class TransformMutateStep(Step):
    """Cria ou sobrescreve colunas derivadas."""

    id: str = "transform.mutate"
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

            base = df
            if parsed["drop_na_in"]:
                require_columns(df, parsed["drop_na_in"], self.id)
                base = df.dropna(subset=parsed["drop_na_in"])

            out = mutate(base, parsed["columns"], step_id=self.id)

            created = [n for n, _ in parsed["columns"] if n not in df.columns]
            overwritten = [n for n, _ in parsed["columns"] if n in df.columns]
            new_missing = {n: int(out[n].isna().sum()) for n, _ in parsed["columns"]}
            for name, count in new_missing.items():
                if count:
                    ctx.add_warning(step_id=self.id, message=f"column '{name}' has {count} missing values")

            impact = shape_impact(
                df,
                out,
                rows_removed=int(df.shape[0] - out.shape[0]),
                columns_created=created,
                columns_overwritten=overwritten,
                missing_by_column=new_missing,
            )

            ctx.set_table(dst, out)
            ctx.set_impact(self.id, impact)
            ctx.log(
                step_id=self.id,
                level="info",
                message="columns derived",
                created=created,
                overwritten=overwritten,
                table=dst,
            )

            return table_result(
                step_id=self.id,
                kind=self.kind,
                summary=f"derived {len(parsed['columns'])} column(s)",
                output=dst,
                table=out,
                impact=impact,
            )

        except Exception as e:
            return failed_result(ctx, self.id, self.kind, e)
