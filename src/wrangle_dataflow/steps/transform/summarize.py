"""Step canônico: transform.summarize (v1) — split-apply-combine.

Particiona a tabela por `group_by`, calcula os resumos declarados em cada
grupo e monta uma linha por chave distinta.

Config esperada (exemplo):
steps:
  transform.summarize:
    group_by: [village, memb_assoc]
    na_rm: false
    aggregations:
      mean_no_membrs: {column: no_membrs, fn: mean}
      min_membrs: {column: no_membrs, fn: min}
      households: n

Regras v1:
- `group_by` vazio/ausente → resumo da tabela inteira (uma linha)
- chave ausente (NA) forma um grupo próprio; grupos ordenados pela chave
- categorias sem nenhuma linha não geram grupo
- `na_rm: false` → qualquer NA no grupo torna o resumo numérico NA
- `na_rm: true`  → NAs são ignorados
- `n` conta linhas e não usa coluna; `count` conta valores não ausentes
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import numpy as np
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


NUMERIC_FNS = ("mean", "median", "min", "max", "sum", "std", "var")
AGG_FNS = NUMERIC_FNS + ("count", "n", "n_distinct", "first", "last")

Aggregation = Tuple[str, str, Any]  # (saída, fn, coluna | None)


def _parse_aggregations(raw: Any, step_id: str) -> List[Aggregation]:
    if not isinstance(raw, dict) or not raw:
        raise ValueError(f"steps.{step_id}.aggregations must be a non-empty mapping")

    out: List[Aggregation] = []
    for name, entry in raw.items():
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"steps.{step_id}.aggregations keys must be non-empty strings")
        if entry == "n":
            out.append((name, "n", None))
            continue
        if not isinstance(entry, dict):
            raise ValueError(f"steps.{step_id}.aggregations.{name} must be 'n' or {{column, fn}}")
        fn = entry.get("fn")
        if fn not in AGG_FNS:
            raise ValueError(f"steps.{step_id}.aggregations.{name}.fn not supported: {fn}")
        column = entry.get("column")
        if fn != "n" and (not isinstance(column, str) or not column.strip()):
            raise ValueError(f"steps.{step_id}.aggregations.{name}.column is required for fn '{fn}'")
        out.append((name, fn, column))
    return out


def reduce_series(s: pd.Series, fn: str, na_rm: bool) -> Any:
    """Aplica um resumo a uma série respeitando a política de ausentes."""
    if fn == "n":
        return int(len(s))
    if fn == "count":
        return int(s.notna().sum())
    if fn == "n_distinct":
        return int(s.nunique(dropna=na_rm))

    values = s.dropna() if na_rm else s

    if fn in ("first", "last"):
        if values.empty:
            return np.nan
        return values.iloc[0] if fn == "first" else values.iloc[-1]

    # NA contamina o resultado, como na aritmética
    if not na_rm and s.isna().any():
        return np.nan

    return getattr(values, fn)()


def summarize(
    df: pd.DataFrame,
    group_by: List[str],
    aggregations: List[Aggregation],
    *,
    na_rm: bool = False,
    step_id: str = "transform.summarize",
) -> pd.DataFrame:
    require_columns(df, list(group_by) + [c for _, fn, c in aggregations if fn != "n"], step_id)

    if not group_by:
        row = {
            name: reduce_series(df[column] if column else df.index.to_series(), fn, na_rm)
            for name, fn, column in aggregations
        }
        return pd.DataFrame([row])

    grouped = df.groupby(group_by, dropna=False, sort=True, observed=True)
    sizes = grouped.size()
    parts: Dict[str, Any] = {}
    for name, fn, column in aggregations:
        if fn == "n":
            parts[name] = sizes.to_numpy()
        else:
            agg = grouped[column].agg(lambda s, fn=fn: reduce_series(s, fn, na_rm))
            # mesma ordem de grupos que `sizes`; evita alinhar índices com chave NA
            parts[name] = agg.to_numpy()

    result = pd.DataFrame(parts, index=sizes.index)
    return result.reset_index()


@dataclass
class TransformSummarizeStep(Step):
    """Agrupa e resume (group_by + summarize)."""

    id: str = "transform.summarize"
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

            group_by = str_list(step_cfg.get("group_by") or [], "group_by", self.id, allow_empty=True)
            aggregations = _parse_aggregations(step_cfg.get("aggregations"), self.id)
            na_rm = step_cfg.get("na_rm", False)
            if not isinstance(na_rm, bool):
                raise TypeError(f"steps.{self.id}.na_rm must be a bool")

            src, dst = table_io(step_cfg, self.id)
            df = read_table(ctx, src, self.id)

            out = summarize(df, group_by, aggregations, na_rm=na_rm, step_id=self.id)

            na_results = {
                name: int(out[name].isna().sum())
                for name, fn, _ in aggregations
                if fn in NUMERIC_FNS
            }
            for name, count in na_results.items():
                if count and not na_rm:
                    ctx.add_warning(
                        step_id=self.id,
                        message=f"'{name}' is NA in {count} group(s); set na_rm: true to ignore missing values",
                    )

            impact = shape_impact(
                df,
                out,
                group_by=group_by,
                groups=int(out.shape[0]),
                na_rm=na_rm,
            )
            ctx.set_table(dst, out)
            ctx.set_impact(self.id, impact)
            ctx.log(
                step_id=self.id,
                level="info",
                message="groups summarized",
                group_by=group_by,
                groups=int(out.shape[0]),
                table=dst,
            )

            return table_result(
                step_id=self.id,
                kind=self.kind,
                summary=f"{out.shape[0]} group(s) summarized",
                output=dst,
                table=out,
                impact=impact,
            )

        except Exception as e:
            return failed_result(ctx, self.id, self.kind, e)
