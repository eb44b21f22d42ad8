"""
Execução ponta a ponta de um pipeline declarado em configuração.

Sequência:
    1. carrega e resolve a configuração (defaults + local)
    2. cria o RunContext e o Manifest (`run_started`)
    3. constrói os Steps a partir da seção `pipeline`
    4. executa o Engine, que atualiza o Manifest Step a Step
    5. registra fingerprints das fontes lidas e `run_finished`
    6. grava `manifest.json` e `report.md` no diretório da run

Caminhos relativos de entrada são resolvidos contra o diretório do
arquivo de configuração; caminhos de saída, contra o diretório da run.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from wrangle_dataflow import __version__
from wrangle_dataflow.builders.pipeline import build_steps
from wrangle_dataflow.core.config import compute_config_hash, load_config
from wrangle_dataflow.core.engine import Engine, RunResult, plan_execution
from wrangle_dataflow.core.pipeline.context import RunContext
from wrangle_dataflow.core.traceability.manifest import (
    WrangleManifest,
    add_event,
    create_manifest,
    register_source,
    run_finished,
    save_manifest,
)
from wrangle_dataflow.report.report_md import generate_report_md


MANIFEST_FILENAME = "manifest.json"
REPORT_FILENAME = "report.md"


@dataclass(frozen=True)
class PipelineRun:
    """Tudo o que uma run produziu: contexto, resultados e arquivos gravados."""

    ctx: RunContext
    result: RunResult
    manifest: WrangleManifest
    run_dir: Path
    manifest_path: Path
    report_path: Path

    @property
    def ok(self) -> bool:
        return self.result.ok


def _default_run_id(now: datetime) -> str:
    return now.strftime("run-%Y%m%dT%H%M%SZ")


def run_pipeline(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
    run_dir: Optional[str] = None,
    run_id: Optional[str] = None,
) -> PipelineRun:
    """
    Executa o pipeline descrito em `defaults_path` (+ overrides locais).

    Erros de configuração e de estrutura do pipeline (tipo desconhecido,
    dependência inexistente, ciclo) são levantados antes de qualquer Step
    executar. Falhas de Steps não são levantadas: ficam no RunResult e no
    Manifest.
    """
    started_at = datetime.now(timezone.utc)
    config_file = Path(defaults_path).resolve()

    config = load_config(defaults_path=str(config_file), local_path=local_path)
    steps = build_steps(config)
    # dependência inexistente ou ciclo falham antes de criar o diretório da run
    plan_execution(steps)

    rid = run_id or _default_run_id(started_at)
    out_dir = Path(run_dir) if run_dir else config_file.parent / "runs" / rid
    out_dir = out_dir.resolve()
    out_dir.mkdir(parents=True, exist_ok=True)

    ctx = RunContext(
        run_id=rid,
        created_at=started_at,
        config=config,
        meta={
            "base_dir": str(config_file.parent),
            "run_dir": str(out_dir),
            "config_path": str(config_file),
        },
    )

    manifest = create_manifest(
        run_id=rid,
        started_at=started_at,
        version=__version__,
        config_hash=compute_config_hash(config),
    )
    add_event(
        manifest,
        event_type="run_started",
        ts=started_at,
        payload={"steps": [s.id for s in steps]},
    )

    result = Engine(steps=steps, ctx=ctx, manifest=manifest).run()

    for sid, step_result in result.steps.items():
        artifacts = step_result.artifacts or {}
        if "source_sha256" in artifacts:
            register_source(
                manifest,
                step_id=sid,
                path=str(artifacts.get("source_path")),
                sha256=str(artifacts["source_sha256"]),
                size_bytes=int(artifacts.get("source_bytes", 0)),
            )

    run_finished(
        manifest,
        ts=datetime.now(timezone.utc),
        status="success" if result.ok else "failed",
    )

    manifest_path = out_dir / MANIFEST_FILENAME
    save_manifest(manifest, manifest_path)

    report_path = out_dir / REPORT_FILENAME
    report_path.write_text(generate_report_md(manifest.to_dict()), encoding="utf-8")

    ctx.meta["manifest"] = manifest.to_dict()

    return PipelineRun(
        ctx=ctx,
        result=result,
        manifest=manifest,
        run_dir=out_dir,
        manifest_path=manifest_path,
        report_path=report_path,
    )


__all__ = ["MANIFEST_FILENAME", "REPORT_FILENAME", "PipelineRun", "run_pipeline"]
