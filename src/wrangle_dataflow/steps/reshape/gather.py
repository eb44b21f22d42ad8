"""Step canônico: reshape.gather (v1) — formato largo → longo.

steps:
  reshape.gather:
    key: items
    value: owned
    exclude: [key_ID]     # ou columns: [bicycle, radio, ...]
    drop_na: false
    convert: false        # true: rótulos numéricos ("2000") voltam a ser números

As linhas saem agrupadas pela coluna reunida, na ordem original das
linhas dentro de cada coluna (ordem de `DataFrame.melt`).
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


def gather(
    df: pd.DataFrame,
    *,
    key: str,
    value: str,
    columns: List[str],
    drop_na: bool = False,
    convert: bool = False,
    step_id: str = "reshape.gather",
) -> pd.DataFrame:
    require_columns(df, columns, step_id)
    id_vars = [c for c in df.columns if c not in columns]

    clash = [n for n in (key, value) if n in id_vars]
    if clash or key == value:
        raise ValueError(f"gather key/value names must be new and distinct: key={key!r}, value={value!r}")

    out = df.melt(id_vars=id_vars, value_vars=list(columns), var_name=key, value_name=value)
    if drop_na:
        out = out.dropna(subset=[value])
    if convert:
        out[key] = _convert_labels(out[key])
    return out.reset_index(drop=True)


def _convert_labels(labels: pd.Series) -> pd.Series:
    # só converte quando todos os rótulos são numéricos
    try:
        return pd.to_numeric(labels)
    except (ValueError, TypeError):
        return labels


def _validate_config(step_cfg: Dict[str, Any], step_id: str) -> Dict[str, Any]:
    for field in ("key", "value"):
        v = step_cfg.get(field)
        if not isinstance(v, str) or not v.strip():
            raise ValueError(f"Missing required config: steps.{step_id}.{field}")

    has_columns = step_cfg.get("columns") is not None
    has_exclude = step_cfg.get("exclude") is not None
    if has_columns == has_exclude:
        raise ValueError(f"steps.{step_id} requires exactly one of: columns, exclude")

    drop_na = step_cfg.get("drop_na", False)
    if not isinstance(drop_na, bool):
        raise TypeError(f"steps.{step_id}.drop_na must be a bool")

    convert = step_cfg.get("convert", False)
    if not isinstance(convert, bool):
        raise TypeError(f"steps.{step_id}.convert must be a bool")

    return {
        "key": step_cfg["key"].strip(),
        "value": step_cfg["value"].strip(),
        "columns": str_list(step_cfg["columns"], "columns", step_id) if has_columns else None,
        "exclude": str_list(step_cfg["exclude"], "exclude", step_id, allow_empty=True) if has_exclude else None,
        "drop_na": drop_na,
        "convert": convert,
    }


@dataclass
class ReshapeGatherStep(Step):
    """Reúne colunas em pares chave/valor."""

    id: str = "reshape.gather"
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

            if parsed["exclude"] is not None:
                require_columns(df, parsed["exclude"], self.id)
                columns = [c for c in df.columns if c not in parsed["exclude"]]
            else:
                columns = parsed["columns"]

            out = gather(
                df,
                key=parsed["key"],
                value=parsed["value"],
                columns=columns,
                drop_na=parsed["drop_na"],
                convert=parsed["convert"],
                step_id=self.id,
            )

            impact = shape_impact(
                df,
                out,
                columns_gathered=[str(c) for c in columns],
                drop_na=parsed["drop_na"],
                convert=parsed["convert"],
            )
            ctx.set_table(dst, out)
            ctx.set_impact(self.id, impact)
            ctx.log(
                step_id=self.id,
                level="info",
                message="table gathered to long format",
                columns_gathered=len(columns),
                table=dst,
            )

            return table_result(
                step_id=self.id,
                kind=self.kind,
                summary=f"{len(columns)} column(s) gathered into '{parsed['key']}'/'{parsed['value']}'",
                output=dst,
                table=out,
                impact=impact,
            )

        except Exception as e:
            return failed_result(ctx, self.id, self.kind, e)
