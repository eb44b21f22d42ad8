"""Step canônico: transform.arrange (v1).

Ordena linhas por uma ou mais colunas. Prefixo `-` indica ordem
decrescente. Ordenação estável; ausentes sempre por último.

steps:
  transform.arrange:
    by: [village, -no_membrs]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

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


def parse_sort_keys(by: List[str]) -> List[Tuple[str, bool]]:
    """`["a", "-b"]` -> `[("a", True), ("b", False)]` (coluna, ascendente)."""
    keys: List[Tuple[str, bool]] = []
    for item in by:
        if item.startswith("-") and len(item) > 1:
            keys.append((item[1:], False))
        else:
            keys.append((item, True))
    return keys


def arrange(df: pd.DataFrame, keys: List[Tuple[str, bool]], step_id: str = "transform.arrange") -> pd.DataFrame:
    require_columns(df, [c for c, _ in keys], step_id)
    return df.sort_values(
        by=[c for c, _ in keys],
        ascending=[asc for _, asc in keys],
        kind="mergesort",
        na_position="last",
    )


def _validate_config(step_cfg: Dict[str, Any], step_id: str) -> List[Tuple[str, bool]]:
    return parse_sort_keys(str_list(step_cfg.get("by"), "by", step_id))


@dataclass
class TransformArrangeStep(Step):
    """Ordena as linhas de uma tabela."""

    id: str = "transform.arrange"
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

            keys = _validate_config(step_cfg, self.id)
            src, dst = table_io(step_cfg, self.id)
            df = read_table(ctx, src, self.id)

            out = arrange(df, keys, self.id)
            if step_cfg.get("reset_index", True):
                out = out.reset_index(drop=True)

            impact = shape_impact(df, out, by=[{"column": c, "ascending": a} for c, a in keys])
            ctx.set_table(dst, out)
            ctx.set_impact(self.id, impact)
            ctx.log(step_id=self.id, level="info", message="rows sorted", by=step_cfg.get("by"), table=dst)

            return table_result(
                step_id=self.id,
                kind=self.kind,
                summary="sorted by " + ", ".join(f"{c} {'asc' if a else 'desc'}" for c, a in keys),
                output=dst,
                table=out,
                impact=impact,
            )

        except Exception as e:
            return failed_result(ctx, self.id, self.kind, e)
