"""Step canônico: export.csv (v1).

Grava uma tabela do RunContext como CSV (cabeçalho + vírgula) usando
`DataFrame.to_csv`.

steps:
  export.csv:
    input: households_by_village
    path: data_output/households_by_village.csv
    na_rep: NA
    create_dirs: false

Regras v1:
- caminho relativo é resolvido contra `meta["run_dir"]` (ou o diretório atual)
- diretório inexistente → OutputDirectoryNotFound, a menos que `create_dirs: true`
- registra path, linhas, bytes e sha256 do arquivo gravado
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from wrangle_dataflow.core.errors import output_dir_not_found
from wrangle_dataflow.core.exceptions import OutputDirectoryNotFound
from wrangle_dataflow.core.pipeline.context import DEFAULT_TABLE, RunContext
from wrangle_dataflow.core.pipeline.step import Step
from wrangle_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus
from wrangle_dataflow.steps._helpers import (
    failed_result,
    get_step_cfg,
    is_enabled,
    read_table,
    skipped_result,
)
from wrangle_dataflow.steps.ingest.load import sha256_and_bytes


def resolve_output_path(path_value: Any, ctx: RunContext, step_id: str) -> Path:
    if not isinstance(path_value, str) or not path_value.strip():
        raise ValueError(f"Missing required config: steps.{step_id}.path")

    p = Path(path_value).expanduser()
    run_dir = (ctx.meta or {}).get("run_dir")
    if not p.is_absolute() and run_dir:
        p = Path(run_dir) / p
    return p.resolve()


def _validate_config(step_cfg: Dict[str, Any], step_id: str) -> Dict[str, Any]:
    na_rep = step_cfg.get("na_rep", "NA")
    if not isinstance(na_rep, str):
        raise ValueError(f"steps.{step_id}.na_rep must be a string")
    for flag in ("create_dirs", "index"):
        if not isinstance(step_cfg.get(flag, False), bool):
            raise TypeError(f"steps.{step_id}.{flag} must be a bool")
    src = step_cfg.get("input", DEFAULT_TABLE)
    if not isinstance(src, str) or not src.strip():
        raise ValueError(f"steps.{step_id}.input must be a non-empty string")
    return {
        "input": src.strip(),
        "na_rep": na_rep,
        "create_dirs": step_cfg.get("create_dirs", False),
        "index": step_cfg.get("index", False),
    }


@dataclass
class ExportCsvStep(Step):
    """Exporta uma tabela derivada para CSV."""

    id: str = "export.csv"
    kind: StepKind = StepKind.EXPORT
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["ingest.load"]

    def run(self, ctx: RunContext) -> StepResult:
        step_cfg = get_step_cfg(ctx, self.id)

        try:
            if not is_enabled(step_cfg, self.id):
                return skipped_result(self.id, self.kind)

            opts = _validate_config(step_cfg, self.id)
            out_path = resolve_output_path(step_cfg.get("path"), ctx, self.id)
            df = read_table(ctx, opts["input"], self.id)

            directory = out_path.parent
            if not directory.exists():
                if not opts["create_dirs"]:
                    err = output_dir_not_found(directory=str(directory), step=self.id)
                    raise OutputDirectoryNotFound(
                        message=f"Output directory does not exist: {directory}",
                        details=err.details,
                        hint=err.hint,
                    )
                directory.mkdir(parents=True, exist_ok=True)

            df.to_csv(out_path, index=opts["index"], na_rep=opts["na_rep"], encoding="utf-8")
            sha256, size_bytes = sha256_and_bytes(out_path)

            export = {
                "path": str(out_path),
                "table": opts["input"],
                "rows": int(df.shape[0]),
                "columns": int(df.shape[1]),
                "bytes": size_bytes,
                "sha256": sha256,
            }
            ctx.set_artifact(self.id, export)
            ctx.log(
                step_id=self.id,
                level="info",
                message="table exported to csv",
                path=str(out_path),
                rows=export["rows"],
                bytes=size_bytes,
            )

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary=f"table '{opts['input']}' written to {out_path.name} ({export['rows']} rows)",
                metrics={"rows": export["rows"], "columns": export["columns"], "bytes": size_bytes},
                warnings=[],
                artifacts={"csv": str(out_path)},
                payload={"export": export},
            )

        except Exception as e:
            return failed_result(ctx, self.id, self.kind, e)
