"""Step canônico: audit.glimpse (v1).

Visão estrutural de uma tabela, sem modificá-la: número de linhas e
colunas e, por coluna, dtype, ausentes, distintos e primeiros valores.

Config esperada (exemplo):
steps:
  audit.glimpse:
    input: interviews
    sample_size: 5
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

import pandas as pd

from wrangle_dataflow.core.pipeline.context import RunContext
from wrangle_dataflow.core.pipeline.step import Step
from wrangle_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus
from wrangle_dataflow.steps._helpers import (
    failed_result,
    get_step_cfg,
    is_enabled,
    read_table,
    skipped_result,
    table_io,
)


def _sample_values(series: pd.Series, n: int) -> List[Any]:
    out: List[Any] = []
    for v in series.head(n).tolist():
        if v is None or (not isinstance(v, (list, dict)) and pd.isna(v)):
            out.append(None)
        elif hasattr(v, "item"):
            out.append(v.item())
        elif isinstance(v, (int, float, bool, str)):
            out.append(v)
        else:
            out.append(str(v))
    return out


def glimpse(df: pd.DataFrame, sample_size: int = 5) -> Dict[str, Any]:
    columns: List[Dict[str, Any]] = []
    for name in df.columns:
        s = df[name]
        columns.append(
            {
                "name": str(name),
                "dtype": str(s.dtype),
                "missing": int(s.isna().sum()),
                "distinct": int(s.nunique(dropna=True)),
                "sample": _sample_values(s, sample_size),
            }
        )
    return {
        "rows": int(df.shape[0]),
        "columns": int(df.shape[1]),
        "schema": columns,
    }


@dataclass
class AuditGlimpseStep(Step):
    """Inspeciona a estrutura de uma tabela (str/glimpse)."""

    id: str = "audit.glimpse"
    kind: StepKind = StepKind.DIAGNOSTIC
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["ingest.load"]

    def run(self, ctx: RunContext) -> StepResult:
        step_cfg = get_step_cfg(ctx, self.id)

        try:
            if not is_enabled(step_cfg, self.id):
                return skipped_result(self.id, self.kind)

            src, _ = table_io(step_cfg, self.id)
            sample_size = step_cfg.get("sample_size", 5)
            if not isinstance(sample_size, int) or isinstance(sample_size, bool) or sample_size < 0:
                raise ValueError(f"steps.{self.id}.sample_size must be a non-negative int")

            df = read_table(ctx, src, self.id)
            structure = glimpse(df, sample_size)

            for col in structure["schema"]:
                if col["missing"] == structure["rows"] and structure["rows"] > 0:
                    ctx.add_warning(step_id=self.id, message=f"column '{col['name']}' is entirely missing")

            ctx.log(
                step_id=self.id,
                level="info",
                message="table inspected",
                table=src,
                rows=structure["rows"],
                columns=structure["columns"],
            )

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary=f"table '{src}': {structure['rows']} rows x {structure['columns']} columns",
                metrics={
                    "rows": structure["rows"],
                    "columns": structure["columns"],
                    "missing_cells": sum(c["missing"] for c in structure["schema"]),
                },
                warnings=[],
                artifacts={"table": src},
                payload={"glimpse": structure},
            )

        except Exception as e:
            return failed_result(ctx, self.id, self.kind, e)
