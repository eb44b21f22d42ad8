"""Step canônico: transform.select (v1).

Subconjunto de colunas. Exatamente uma das formas deve ser declarada:

steps:
  transform.select:
    columns: [village, no_membrs, rooms]     # mantém, nesta ordem
    # exclude: [affect_conflicts]            # remove, preserva a ordem restante
    # range: [village, respondent_wall_type] # intervalo inclusivo por posição

Colunas desconhecidas são erro (ColumnNotFound); nada é descartado em silêncio.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

import pandas as pd

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


_MODES = ("columns", "exclude", "range")


def _validate_config(step_cfg: Dict[str, Any], step_id: str) -> Dict[str, Any]:
    declared = [m for m in _MODES if step_cfg.get(m) is not None]
    if len(declared) != 1:
        raise ValueError(f"steps.{step_id} must declare exactly one of: {', '.join(_MODES)}")

    mode = declared[0]
    cols = str_list(step_cfg[mode], mode, step_id)
    if mode == "range" and len(cols) != 2:
        raise ValueError(f"steps.{step_id}.range must be [first, last]")
    if len(set(cols)) != len(cols):
        raise ValueError(f"steps.{step_id}.{mode} must not repeat columns")
    return {"mode": mode, "columns": cols}


def select_columns(df: pd.DataFrame, mode: str, columns: List[str], step_id: str) -> pd.DataFrame:
    require_columns(df, columns, step_id)

    if mode == "columns":
        return df.loc[:, columns].copy()

    if mode == "exclude":
        return df.drop(columns=columns)

    first, last = (df.columns.get_loc(c) for c in columns)
    if first > last:
        first, last = last, first
    return df.iloc[:, first:last + 1].copy()


@dataclass
class TransformSelectStep(Step):
    """Mantém ou remove colunas de uma tabela."""

    id: str = "transform.select"
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

            out = select_columns(df, parsed["mode"], parsed["columns"], self.id)

            dropped = [str(c) for c in df.columns if c not in out.columns]
            impact = shape_impact(df, out, mode=parsed["mode"], columns_dropped=dropped)
            ctx.set_table(dst, out)
            ctx.set_impact(self.id, impact)
            ctx.log(
                step_id=self.id,
                level="info",
                message="columns selected",
                mode=parsed["mode"],
                columns=[str(c) for c in out.columns],
                table=dst,
            )

            return table_result(
                step_id=self.id,
                kind=self.kind,
                summary=f"selected {out.shape[1]} of {df.shape[1]} columns",
                output=dst,
                table=out,
                impact=impact,
            )

        except Exception as e:
            return failed_result(ctx, self.id, self.kind, e)
