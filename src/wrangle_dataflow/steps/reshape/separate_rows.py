"""Step canônico: reshape.separate_rows (v1).

Quebra valores delimitados de uma coluna em uma linha por elemento,
repetindo as demais colunas. Normalmente precede um `reshape.spread`
(ex.: `items_owned = "bicycle;radio"` → duas linhas).

steps:
  reshape.separate_rows:
    column: items_owned
    sep: ";"
    strip: true
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

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
    table_io,
    table_result,
)


def _split(value: Any, sep: str, strip: bool) -> Any:
    if not isinstance(value, str) and pd.isna(value):
        return value
    pieces = str(value).split(sep)
    if strip:
        pieces = [p.strip() for p in pieces]
    pieces = [p for p in pieces if p != ""]
    return pieces if pieces else [None]


def separate_rows(
    df: pd.DataFrame,
    column: str,
    *,
    sep: str = ";",
    strip: bool = True,
    step_id: str = "reshape.separate_rows",
) -> pd.DataFrame:
    require_columns(df, [column], step_id)
    out = df.copy()
    out[column] = out[column].astype(object).map(lambda v: _split(v, sep, strip))
    return out.explode(column, ignore_index=True)


@dataclass
class ReshapeSeparateRowsStep(Step):
    """Uma linha por elemento de uma coluna delimitada."""

    id: str = "reshape.separate_rows"
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

            column = step_cfg.get("column")
            if not isinstance(column, str) or not column.strip():
                raise ValueError(f"Missing required config: steps.{self.id}.column")
            sep = step_cfg.get("sep", ";")
            if not isinstance(sep, str) or not sep:
                raise ValueError(f"steps.{self.id}.sep must be a non-empty string")
            strip = step_cfg.get("strip", True)
            if not isinstance(strip, bool):
                raise TypeError(f"steps.{self.id}.strip must be a bool")

            src, dst = table_io(step_cfg, self.id)
            df = read_table(ctx, src, self.id)

            out = separate_rows(df, column.strip(), sep=sep, strip=strip, step_id=self.id)

            impact = shape_impact(df, out, column=column, rows_added=int(out.shape[0] - df.shape[0]))
            ctx.set_table(dst, out)
            ctx.set_impact(self.id, impact)
            ctx.log(
                step_id=self.id,
                level="info",
                message="delimited values separated",
                column=column,
                rows_before=impact["rows_before"],
                rows_after=impact["rows_after"],
                table=dst,
            )

            return table_result(
                step_id=self.id,
                kind=self.kind,
                summary=f"'{column}' separated into {out.shape[0]} rows",
                output=dst,
                table=out,
                impact=impact,
            )

        except Exception as e:
            return failed_result(ctx, self.id, self.kind, e)
