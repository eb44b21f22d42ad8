"""
src/wrangle_dataflow/report/report_md.py

Gerador canônico de `report.md` (v1) — Wrangle DataFlow

Regras:
- O report.md é derivado EXCLUSIVAMENTE do Manifest final (dict).
- Não infere, não recalcula, não relê tabelas nem arquivos.
- Mesmo Manifest => mesmo report.md.

O roteiro dos Steps segue a ordem real de execução (Event Log), de modo
que o relatório narra a análise na sequência em que ela foi feita.

Estrutura mínima obrigatória:
# Wrangling Report

## Executive Summary
## Step-by-Step Walkthrough
## Inputs
## Generated Files
## Traceability
## Execution Metadata
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple

from wrangle_dataflow.core.traceability.manifest import WrangleManifest


REQUIRED_SECTIONS: List[str] = [
    "# Wrangling Report",
    "## Executive Summary",
    "## Step-by-Step Walkthrough",
    "## Inputs",
    "## Generated Files",
    "## Traceability",
    "## Execution Metadata",
]

# Fatos de impacto já narrados na linha de forma da tabela.
_SHAPE_KEYS = ("rows_before", "rows_after", "columns_before", "columns_after")


def _sorted_items(d: Any) -> List[Tuple[str, Any]]:
    if not isinstance(d, dict):
        return []
    return sorted(d.items(), key=lambda kv: kv[0])


def _as_pretty_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True, indent=2)


def _as_inline(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def _require_manifest(manifest: Any) -> Dict[str, Any]:
    if isinstance(manifest, WrangleManifest):
        manifest = manifest.to_dict()
    if not isinstance(manifest, dict) or not manifest:
        raise ValueError("Manifest is required to generate report.md")
    return manifest


def _execution_order(steps: Dict[str, Any], events: List[Any]) -> List[str]:
    """Ordem de `step_started` no Event Log; Steps sem evento vão ao fim, ordenados."""
    order: List[str] = []
    for ev in events:
        if not isinstance(ev, dict) or ev.get("event_type") != "step_started":
            continue
        sid = ev.get("step_id")
        if sid in steps and sid not in order:
            order.append(sid)
    order.extend(sorted(sid for sid in steps if sid not in order))
    return order


def _shape_line(impact: Dict[str, Any]) -> str | None:
    if not all(k in impact for k in _SHAPE_KEYS):
        return None
    return (
        f"- Table: {impact['rows_before']} × {impact['columns_before']}"
        f" → {impact['rows_after']} × {impact['columns_after']} (rows × columns)"
    )


def _step_block(index: int, step_id: str, step: Dict[str, Any]) -> List[str]:
    status = step.get("status", "unknown")
    kind = step.get("kind", "unknown")
    lines = [f"### {index}. {step_id} (`{kind}`): `{status}`"]

    summary = step.get("summary")
    if summary:
        lines.append(f"{summary}\n")

    payload = step.get("payload") if isinstance(step.get("payload"), dict) else {}

    impact = payload.get("impact") if isinstance(payload.get("impact"), dict) else {}
    shape = _shape_line(impact)
    if shape:
        lines.append(shape)
    for k, v in _sorted_items(impact):
        if k in _SHAPE_KEYS:
            continue
        lines.append(f"- {k}: `{_as_inline(v)}`")

    artifacts = step.get("artifacts") if isinstance(step.get("artifacts"), dict) else {}
    table = artifacts.get("table")
    if table:
        lines.append(f"- Output table: `{table}`")

    warnings = step.get("warnings") or []
    for w in warnings:
        lines.append(f"- ⚠ {w}")

    error = payload.get("error")
    if isinstance(error, dict):
        lines.append(f"- Error `{error.get('code') or error.get('type')}`: {error.get('message')}")
        if error.get("hint"):
            lines.append(f"- Hint: {error['hint']}")
    elif step.get("error"):
        lines.append(f"- Error: {step['error']}")

    blocked_by = payload.get("blocked_by")
    if blocked_by:
        lines.append(f"- Blocked by: {', '.join(f'`{b}`' for b in blocked_by)}")

    lines.append("")
    return lines


def generate_report_md(manifest: Any) -> str:
    """Gera o conteúdo completo do report.md a partir do Manifest final."""
    manifest = _require_manifest(manifest)

    run = manifest.get("run") if isinstance(manifest.get("run"), dict) else {}
    inputs = manifest.get("inputs") if isinstance(manifest.get("inputs"), dict) else {}
    steps = manifest.get("steps") if isinstance(manifest.get("steps"), dict) else {}
    events = manifest.get("events") if isinstance(manifest.get("events"), list) else []

    lines: List[str] = []

    lines.append("# Wrangling Report\n")

    # Executive Summary
    lines.append("## Executive Summary")
    lines.append(f"- **Run ID**: `{run.get('run_id', '<unknown>')}`")
    lines.append(f"- **Started At (UTC)**: `{run.get('started_at', '<unknown>')}`")
    lines.append(f"- **Finished At (UTC)**: `{run.get('finished_at', '<unknown>')}`")
    lines.append(f"- **Status**: `{run.get('status', '<unknown>')}`")
    lines.append(f"- **Version**: `{run.get('version', '<unknown>')}`")

    counts: Dict[str, int] = {}
    for _, step in _sorted_items(steps):
        if isinstance(step, dict):
            status = str(step.get("status", "unknown"))
            counts[status] = counts.get(status, 0) + 1
    if counts:
        lines.append("- **Steps**: " + ", ".join(f"{k}={v}" for k, v in sorted(counts.items())))
    lines.append("\nThis report consolidates the wrangling run strictly from the Manifest.")
    lines.append("If something is absent here, it was absent from the Manifest.\n")

    # Walkthrough
    lines.append("## Step-by-Step Walkthrough")
    if steps:
        for i, sid in enumerate(_execution_order(steps, events), start=1):
            step = steps.get(sid)
            if isinstance(step, dict):
                lines.extend(_step_block(i, sid, step))
    else:
        lines.append("No steps recorded in the Manifest.\n")

    # Inputs
    lines.append("## Inputs")
    lines.append(f"- **Config hash**: `{inputs.get('config_hash', '<unknown>')}`")
    sources = inputs.get("sources") if isinstance(inputs.get("sources"), dict) else {}
    if sources:
        for sid, src in _sorted_items(sources):
            if not isinstance(src, dict):
                continue
            lines.append(
                f"- **{sid}**: `{src.get('path')}` ({src.get('bytes')} bytes, sha256 `{src.get('sha256')}`)"
            )
    else:
        lines.append("No source files recorded.")
    lines.append("")

    # Generated files (Steps de export)
    lines.append("## Generated Files")
    exported = []
    for sid, step in _sorted_items(steps):
        payload = step.get("payload") if isinstance(step, dict) else None
        export = payload.get("export") if isinstance(payload, dict) else None
        if isinstance(export, dict):
            exported.append((sid, export))
    if exported:
        for sid, export in exported:
            lines.append(
                f"- **{sid}**: `{export.get('path')}` ({export.get('rows')} rows,"
                f" {export.get('bytes')} bytes, sha256 `{export.get('sha256')}`)"
            )
    else:
        lines.append("No files exported in this run.")
    lines.append("")

    # Traceability
    lines.append("## Traceability")
    lines.append("- Source of truth: `Manifest` (final) only.")
    lines.append("- This report does not compute or infer missing information.")
    lines.append(f"- Events recorded: `{len(events)}`\n")

    # Execution Metadata
    lines.append("## Execution Metadata")
    lines.append("### run")
    lines.append("```json")
    lines.append(_as_pretty_json(run))
    lines.append("```")

    content = "\n".join(lines) + "\n"

    for sec in REQUIRED_SECTIONS:
        if sec not in content:
            raise RuntimeError(f"Report generation failed: missing required section: {sec}")

    return content


__all__ = ["REQUIRED_SECTIONS", "generate_report_md"]
