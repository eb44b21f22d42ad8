"""Linha de comando do Wrangle DataFlow.

    python -m wrangle_dataflow run --config config/interviews.yaml [--local config.local.yaml]

Executa o pipeline, grava `manifest.json` e `report.md` no diretório da
run e imprime o status de cada Step. Código de saída: 0 quando nenhum
Step falhou, 1 quando algum falhou, 2 para configuração inválida.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from wrangle_dataflow.core.config import ConfigError
from wrangle_dataflow.core.engine import CycleDetectedError, UnknownDependencyError
from wrangle_dataflow.core.exceptions import EngineConfigurationError
from wrangle_dataflow.core.pipeline.registry import DuplicateStepIdError
from wrangle_dataflow.runner import run_pipeline


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wrangle-dataflow",
        description="Run a declarative, traceable data-wrangling pipeline.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Execute the pipeline declared in a config file.")
    run.add_argument("--config", required=True, help="Defaults config file (YAML or JSON).")
    run.add_argument("--local", default=None, help="Optional local overrides file.")
    run.add_argument("--run-dir", default=None, help="Output directory for this run.")
    run.add_argument("--run-id", default=None, help="Explicit run identifier.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Parse the command line arguments and execute the pipeline."""
    args = _build_parser().parse_args(argv)

    try:
        run = run_pipeline(
            defaults_path=args.config,
            local_path=args.local,
            run_dir=args.run_dir,
            run_id=args.run_id,
        )
    except (
        ConfigError,
        EngineConfigurationError,
        DuplicateStepIdError,
        UnknownDependencyError,
        CycleDetectedError,
    ) as e:
        print(f"Invalid pipeline configuration, {e}", file=sys.stderr)
        return 2

    for sid, result in run.result.steps.items():
        print(f"{result.status.value:<8} {sid}: {result.summary}")
    print(f"report: {run.report_path}")
    print(f"manifest: {run.manifest_path}")

    return 0 if run.ok else 1


if __name__ == "__main__":
    sys.exit(main())
