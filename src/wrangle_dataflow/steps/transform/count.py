"""Step canônico: transform.count (v1).

Conta as combinações distintas de `columns` (atalho para group_by + n).

steps:
  transform.count:
    columns: [village]
    name: n          # nome da coluna de contagem
    sort: true       # maior contagem primeiro; empates na ordem da chave
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import pandas as pd

from wrangle_dataflow.core.pipeline.context import RunContext
from wrangle_dataflow.core.pipeline.step import Step
from wrangle_dataflow.core.pipeline.types import StepKind, StepResult
from wrangle_dataflow.steps._helpers import (
    failed_result,
    get_step_cfg,
    is_enabled,
    read_table,
    shape_impact,
    skipped_result,
    str_list,
    table_io,
    table_result,
)
from wrangle_dataflow.steps.transform.summarize import summarize


def count_rows(
    df: pd.DataFrame,
    columns: List[str],
    *,
    name: str = "n",
    sort: bool = False,
    step_id: str = "transform.count",
) -> pd.DataFrame:
    if name in columns:
        raise ValueError(f"count column name '{name}' collides with a group column")
    out = summarize(df, columns, [(name, "n", None)], step_id=step_id)
    if sort:
        out = out.sort_values(by=name, ascending=False, kind="mergesort").reset_index(drop=True)
    return out


@dataclass
class TransformCountStep(Step):
    """Conta linhas por combinação de valores."""

    id: str = "transform.count"
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

            columns = str_list(step_cfg.get("columns"), "columns", self.id)
            name = step_cfg.get("name", "n")
            if not isinstance(name, str) or not name.strip():
                raise ValueError(f"steps.{self.id}.name must be a non-empty string")
            sort = step_cfg.get("sort", False)
            if not isinstance(sort, bool):
                raise TypeError(f"steps.{self.id}.sort must be a bool")

            src, dst = table_io(step_cfg, self.id)
            df = read_table(ctx, src, self.id)

            out = count_rows(df, columns, name=name, sort=sort, step_id=self.id)

            impact = shape_impact(df, out, columns=columns, combinations=int(out.shape[0]))
            ctx.set_table(dst, out)
            ctx.set_impact(self.id, impact)
            ctx.log(
                step_id=self.id,
                level="info",
                message="combinations counted",
                columns=columns,
                combinations=int(out.shape[0]),
                table=dst,
            )

            return table_result(
                step_id=self.id,
                kind=self.kind,
                summary=f"{out.shape[0]} distinct combination(s) of {', '.join(columns)}",
                output=dst,
                table=out,
                impact=impact,
            )

        except Exception as e:
            return failed_result(ctx, self.id, self.kind, e)
