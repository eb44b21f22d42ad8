"""Step canônico: reshape.spread (v1) — formato longo → largo.

Cada valor distinto de `key` vira uma coluna; as células recebem `value`
(ou o literal `value_constant`, útil para indicadores de presença).

Config esperada (exemplo):
steps:
  reshape.spread:
    key: items_owned
    value_constant: true
    fill: false
    id_columns: [key_ID]

Regras v1:
- `id_columns` ausente → todas as colunas exceto `key` e `value`
- combinação (id_columns, key) repetida → DuplicateReshapeKeys (decisão humana)
- novas colunas em ordem crescente do valor da chave; chave ausente → coluna `NA`
- rótulos das novas colunas são sempre texto (`str` da chave); `reshape.gather`
  com `convert: true` devolve chaves numéricas ao tipo original
- linhas na ordem da primeira aparição de cada identificação
- combinação inexistente → `fill` (padrão: ausente)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from wrangle_dataflow.core.errors import duplicate_reshape_keys
from wrangle_dataflow.core.exceptions import DuplicateReshapeKeys
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


NA_KEY_LABEL = "NA"
_VALUE_SLOT = "__spread_value__"


def _key_label(value: Any) -> str:
    if not isinstance(value, str) and pd.isna(value):
        return NA_KEY_LABEL
    return str(value)


def _ordered_labels(keys: pd.Series) -> List[str]:
    present = keys.dropna().unique().tolist()
    try:
        present = sorted(present)
    except TypeError:
        present = sorted(present, key=str)
    labels = [_key_label(v) for v in present]
    if keys.isna().any():
        labels.append(NA_KEY_LABEL)
    return labels


def _fill_column(col: pd.Series, fill: Any) -> pd.Series:
    filled = np.where(col.isna().to_numpy(), fill, col.to_numpy(dtype=object))
    return pd.Series(filled, index=col.index, dtype=object).infer_objects()


def spread(
    df: pd.DataFrame,
    *,
    key: str,
    value: Optional[str] = None,
    value_constant: Any = None,
    fill: Any = None,
    id_columns: Optional[List[str]] = None,
    step_id: str = "reshape.spread",
) -> pd.DataFrame:
    if value is None and value_constant is None:
        raise ValueError(f"steps.{step_id} requires value or value_constant")

    require_columns(df, [key] + ([value] if value is not None else []), step_id)

    if id_columns is None:
        id_columns = [c for c in df.columns if c not in (key, value)]
    require_columns(df, id_columns, step_id)

    work = df.copy()
    if value is None:
        work[_VALUE_SLOT] = value_constant
        value = _VALUE_SLOT

    dup = work.duplicated(subset=list(id_columns) + [key], keep=False)
    if dup.any():
        err = duplicate_reshape_keys(
            key=key,
            id_columns=list(id_columns),
            duplicated_rows=int(dup.sum()),
            step=step_id,
        )
        raise DuplicateReshapeKeys(
            message=f"Duplicate ({', '.join(id_columns) or 'no id'}, {key}) combinations: {int(dup.sum())} rows",
            details=err.details,
            hint=err.hint,
            decision_required=True,
        )

    labels = _ordered_labels(work[key])
    clash = sorted(set(labels) & set(map(str, id_columns)))
    if clash:
        raise ValueError(f"spread would create columns that already exist: {clash}")

    if id_columns:
        codes = work.groupby(list(id_columns), dropna=False, sort=False, observed=True).ngroup()
    else:
        codes = pd.Series(0, index=work.index)

    # ngroup com sort=False numera pela primeira aparição
    ids = work.loc[~codes.duplicated(), list(id_columns)].reset_index(drop=True)

    long = pd.DataFrame(
        {
            "_row": codes.to_numpy(),
            "_key": [_key_label(v) for v in work[key]],
            "_val": work[value].to_numpy(),
        }
    )
    wide = long.pivot(index="_row", columns="_key", values="_val")
    wide = wide.reindex(index=range(len(ids)), columns=labels)
    wide.columns.name = None
    wide = wide.reset_index(drop=True)

    if fill is not None:
        for col in labels:
            wide[col] = _fill_column(wide[col], fill)

    return pd.concat([ids, wide], axis=1)


def _validate_config(step_cfg: Dict[str, Any], step_id: str) -> Dict[str, Any]:
    key = step_cfg.get("key")
    if not isinstance(key, str) or not key.strip():
        raise ValueError(f"Missing required config: steps.{step_id}.key")

    value = step_cfg.get("value")
    has_constant = "value_constant" in step_cfg
    if (value is None) == (not has_constant):
        raise ValueError(f"steps.{step_id} requires exactly one of: value, value_constant")
    if value is not None and (not isinstance(value, str) or not value.strip()):
        raise ValueError(f"steps.{step_id}.value must be a non-empty string")

    id_columns = step_cfg.get("id_columns")
    if id_columns is not None:
        id_columns = str_list(id_columns, "id_columns", step_id, allow_empty=True)

    return {
        "key": key.strip(),
        "value": value.strip() if isinstance(value, str) else None,
        "value_constant": step_cfg.get("value_constant"),
        "fill": step_cfg.get("fill"),
        "id_columns": id_columns,
    }


@dataclass
class ReshapeSpreadStep(Step):
    """Pivota de longo para largo."""

    id: str = "reshape.spread"
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

            out = spread(df, step_id=self.id, **parsed)

            created = [c for c in out.columns if c not in df.columns]
            impact = shape_impact(
                df,
                out,
                key=parsed["key"],
                columns_created=created,
                fill=parsed["fill"],
            )
            ctx.set_table(dst, out)
            ctx.set_impact(self.id, impact)
            ctx.log(
                step_id=self.id,
                level="info",
                message="table spread to wide format",
                key=parsed["key"],
                columns_created=len(created),
                table=dst,
            )

            return table_result(
                step_id=self.id,
                kind=self.kind,
                summary=f"'{parsed['key']}' spread into {len(created)} column(s)",
                output=dst,
                table=out,
                impact=impact,
            )

        except Exception as e:
            return failed_result(ctx, self.id, self.kind, e)
