"""Step canônico: ingest.load (v1).

Responsabilidades:
- ler o dataset de arquivo (CSV ou TSV com cabeçalho / Parquet) com pandas
- aplicar apenas o que a configuração declara: marcadores de ausência,
  dtypes explícitos (ex.: `category`) e colunas de data
- registrar origem (path + tipo) e fingerprint (sha256)
- publicar o DataFrame como tabela nomeada (padrão: `main`)

Config esperada (exemplo):
steps:
  ingest.load:
    path: data/interviews.csv
    output: interviews
    na_values: ["", "NA", "NULL"]
    dtypes:
      village: category
    parse_dates: [interview_date]

Limites explícitos (v1):
- NÃO normaliza valores
- NÃO infere dtypes além do que o leitor do pandas já faz
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pandas as pd

from wrangle_dataflow.core.pipeline.context import DEFAULT_TABLE, RunContext
from wrangle_dataflow.core.pipeline.step import Step
from wrangle_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus
from wrangle_dataflow.steps._helpers import (
    failed_result,
    get_step_cfg,
    is_enabled,
    skipped_result,
    str_list,
)


DEFAULT_NA_VALUES = ["", "NA", "NULL"]


def resolve_input_path(path_value: Any, ctx: RunContext, step_id: str) -> Path:
    if not isinstance(path_value, str) or not path_value.strip():
        raise ValueError(f"Missing required config: steps.{step_id}.path")

    p = Path(path_value).expanduser()
    base_dir = (ctx.meta or {}).get("base_dir")
    if not p.is_absolute() and base_dir:
        p = Path(base_dir) / p
    p = p.resolve()

    if not p.exists():
        raise FileNotFoundError(f"File not found: {p}")
    if not p.is_file():
        raise ValueError(f"Path is not a file: {p}")
    return p


def sha256_and_bytes(path: Path) -> Tuple[str, int]:
    h = hashlib.sha256()
    size = 0
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
            size += len(chunk)
    return h.hexdigest(), size


def _read_options(step_cfg: Dict[str, Any], step_id: str, suffix: str = ".csv") -> Dict[str, Any]:
    na_values = step_cfg.get("na_values", DEFAULT_NA_VALUES)
    if not isinstance(na_values, list):
        raise ValueError(f"steps.{step_id}.na_values must be a list")

    # .tsv separa por tabulação, salvo `sep` explícito
    sep = step_cfg.get("sep", "\t" if suffix == ".tsv" else ",")
    if not isinstance(sep, str) or not sep:
        raise ValueError(f"steps.{step_id}.sep must be a non-empty string")

    dtypes = step_cfg.get("dtypes") or {}
    if not isinstance(dtypes, dict):
        raise ValueError(f"steps.{step_id}.dtypes must be a mapping column -> dtype")

    parse_dates: List[str] = str_list(step_cfg.get("parse_dates") or [], "parse_dates", step_id, allow_empty=True)

    return {
        "na_values": [str(v) for v in na_values],
        "sep": sep,
        "dtypes": {str(k): str(v) for k, v in dtypes.items()},
        "parse_dates": parse_dates,
    }


def _load_csv(path: Path, opts: Dict[str, Any]) -> pd.DataFrame:
    # keep_default_na=False: somente os marcadores declarados viram ausência
    return pd.read_csv(
        path,
        sep=opts["sep"],
        na_values=opts["na_values"],
        keep_default_na=False,
        dtype=opts["dtypes"] or None,
        parse_dates=opts["parse_dates"] or False,
        encoding="utf-8",
    )


def _load_parquet(path: Path, opts: Dict[str, Any]) -> pd.DataFrame:
    df = pd.read_parquet(path)
    if opts["dtypes"]:
        df = df.astype(opts["dtypes"])
    for col in opts["parse_dates"]:
        df[col] = pd.to_datetime(df[col])
    return df


@dataclass
class IngestLoadStep(Step):
    """Carrega uma tabela de arquivo (CSV/Parquet) e registra origem + fingerprint."""

    id: str = "ingest.load"
    kind: StepKind = StepKind.DIAGNOSTIC
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = []

    def run(self, ctx: RunContext) -> StepResult:
        step_cfg = get_step_cfg(ctx, self.id)

        try:
            if not is_enabled(step_cfg, self.id):
                return skipped_result(self.id, self.kind)

            path = resolve_input_path(step_cfg.get("path"), ctx, self.id)
            output = step_cfg.get("output", DEFAULT_TABLE)
            if not isinstance(output, str) or not output.strip():
                raise ValueError(f"steps.{self.id}.output must be a non-empty string")

            suffix = path.suffix.lower()
            opts = _read_options(step_cfg, self.id, suffix)
            sha256, size_bytes = sha256_and_bytes(path)

            if suffix in {".csv", ".tsv"}:
                df = _load_csv(path, opts)
                source_type = suffix.lstrip(".")
            elif suffix == ".parquet":
                df = _load_parquet(path, opts)
                source_type = "parquet"
            else:
                raise ValueError(f"Unsupported file extension: {suffix}")

            ctx.set_table(output, df)

            missing_cells = int(df.isna().sum().sum())
            if missing_cells:
                ctx.add_warning(
                    step_id=self.id,
                    message=f"{missing_cells} missing values read as NA",
                )

            impact = {
                "rows_after": int(df.shape[0]),
                "columns_after": int(df.shape[1]),
                "missing_cells": missing_cells,
            }
            ctx.set_impact(self.id, impact)

            ctx.log(
                step_id=self.id,
                level="info",
                message="dataset loaded",
                source_type=source_type,
                source_path=str(path),
                rows=int(df.shape[0]),
                table=output,
            )

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary=f"dataset loaded into table '{output}'",
                metrics={
                    "rows": int(df.shape[0]),
                    "columns": int(df.shape[1]),
                    "bytes": size_bytes,
                },
                warnings=[],
                artifacts={
                    "table": output,
                    "source_path": str(path),
                    "source_type": source_type,
                    "source_bytes": size_bytes,
                    "source_sha256": sha256,
                },
                payload={
                    "impact": impact,
                    "source": {
                        "path": str(path),
                        "type": source_type,
                        "sha256": sha256,
                        "bytes": size_bytes,
                    },
                    "columns": [str(c) for c in df.columns],
                },
            )

        except Exception as e:
            return failed_result(ctx, self.id, self.kind, e)
