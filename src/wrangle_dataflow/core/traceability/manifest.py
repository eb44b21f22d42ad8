# src/wrangle_dataflow/core/traceability/manifest.py
"""
Manifest v1 — rastreabilidade de execuções do Wrangle DataFlow.

O Manifest consolida, de forma determinística e auditável:
    - metadados da execução (run)
    - hashes das entradas (configuração e arquivos lidos)
    - estado incremental de cada Step (status, métricas, impacto)
    - Event Log ordenado

Princípios:
    - Nenhum evento é emitido implicitamente
    - A ordem do Event Log reflete a ordem real de execução
    - UTC é o timezone canônico de todos os timestamps
    - O Manifest é serializável e reconstruível (round-trip JSON)

Limites explícitos:
    - Não executa pipeline
    - Não decide políticas de execução
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Timestamps sem timezone são assumidos como UTC; os demais são convertidos."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


def _jsonable(value: Any) -> Any:
    """Reduz um payload a tipos JSON (valores numpy/pandas viram nativos ou str)."""
    return json.loads(json.dumps(value, ensure_ascii=False, default=_json_default))


def _json_default(value: Any) -> Any:
    item = getattr(value, "item", None)
    if callable(item):
        try:
            return item()
        except (TypeError, ValueError):
            pass
    if isinstance(value, (set, tuple)):
        return list(value)
    return str(value)


@dataclass
class WrangleManifest:
    """
    Registro de uma execução de pipeline.

    Campos:
        - run: `run_id`, `started_at`, `finished_at`, `version`, `status`
        - inputs: `config_hash` e fingerprints de arquivos lidos
        - steps: estado por `step_id`
        - events: Event Log ordenado
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    steps: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run": dict(self.run),
            "inputs": dict(self.inputs),
            "steps": {k: dict(v) for k, v in self.steps.items()},
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WrangleManifest":
        return cls(
            run=dict(data.get("run", {})),
            inputs=dict(data.get("inputs", {})),
            steps={k: dict(v) for k, v in (data.get("steps", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )


def _get_manifest(manifest: Union[WrangleManifest, Dict[str, Any]]) -> Tuple[WrangleManifest, bool]:
    if isinstance(manifest, WrangleManifest):
        return manifest, False
    return WrangleManifest.from_dict(manifest), True


def _sync_back(manifest: Union[WrangleManifest, Dict[str, Any]], m: WrangleManifest, is_dict: bool) -> None:
    if is_dict:
        manifest.clear()  # type: ignore[union-attr]
        manifest.update(m.to_dict())  # type: ignore[union-attr]


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    version: str,
    config_hash: str,
) -> WrangleManifest:
    """
    Cria o Manifest inicial de uma execução.

    O Event Log inicia vazio: esta função não emite `run_started`.
    """
    return WrangleManifest(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "version": version,
        },
        inputs={
            "config_hash": config_hash,
            "sources": {},
        },
        steps={},
        events=[],
    )


def add_event(
    manifest: Union[WrangleManifest, Dict[str, Any]],
    *,
    event_type: str,
    ts: datetime,
    step_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """Acrescenta um evento explícito ao Event Log, preservando a ordem de chamada."""
    m, is_dict = _get_manifest(manifest)
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if step_id is not None:
        ev["step_id"] = step_id
    if payload is not None:
        ev["payload"] = _jsonable(payload)
    m.events.append(ev)
    _sync_back(manifest, m, is_dict)


def register_source(
    manifest: Union[WrangleManifest, Dict[str, Any]],
    *,
    step_id: str,
    path: str,
    sha256: str,
    size_bytes: int,
) -> None:
    """Registra a fingerprint de um arquivo lido em `inputs.sources`."""
    m, is_dict = _get_manifest(manifest)
    m.inputs.setdefault("sources", {})[step_id] = {
        "path": path,
        "sha256": sha256,
        "bytes": int(size_bytes),
    }
    _sync_back(manifest, m, is_dict)


def step_started(
    manifest: Union[WrangleManifest, Dict[str, Any]],
    *,
    step_id: str,
    kind: str,
    ts: datetime,
) -> None:
    m, is_dict = _get_manifest(manifest)
    m.steps.setdefault(step_id, {})
    m.steps[step_id].update(
        {
            "step_id": step_id,
            "kind": kind,
            "status": "running",
            "started_at": _iso(ts),
        }
    )
    add_event(m, event_type="step_started", ts=ts, step_id=step_id, payload={"kind": kind})
    _sync_back(manifest, m, is_dict)


def step_finished(
    manifest: Union[WrangleManifest, Dict[str, Any]],
    *,
    step_id: str,
    ts: datetime,
    result: Dict[str, Any],
) -> None:
    """
    Registra a conclusão (SUCCESS ou SKIPPED) de um Step.

    `result` segue a forma de `StepResult.to_dict()`.
    """
    m, is_dict = _get_manifest(manifest)
    s = m.steps.setdefault(step_id, {"step_id": step_id})

    started_iso = s.get("started_at")
    started_dt = datetime.fromisoformat(started_iso) if started_iso else ts

    status = result.get("status", "success")
    s.update(
        {
            "status": status,
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(started_dt, ts),
            "summary": result.get("summary"),
            "metrics": _jsonable(result.get("metrics", {}) or {}),
            "warnings": list(result.get("warnings", []) or []),
            "artifacts": _jsonable(result.get("artifacts", {}) or {}),
            "payload": _jsonable(result.get("payload", {}) or {}),
        }
    )

    add_event(
        m,
        event_type="step_finished",
        ts=ts,
        step_id=step_id,
        payload={"status": status, "duration_ms": s["duration_ms"]},
    )
    _sync_back(manifest, m, is_dict)


def step_failed(
    manifest: Union[WrangleManifest, Dict[str, Any]],
    *,
    step_id: str,
    ts: datetime,
    error: str,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    m, is_dict = _get_manifest(manifest)
    s = m.steps.setdefault(step_id, {"step_id": step_id})
    s.update(
        {
            "status": "failed",
            "finished_at": _iso(ts),
            "error": error,
            "payload": _jsonable(payload or {}),
        }
    )
    add_event(m, event_type="step_failed", ts=ts, step_id=step_id, payload={"error": error})
    _sync_back(manifest, m, is_dict)


def run_finished(
    manifest: Union[WrangleManifest, Dict[str, Any]],
    *,
    ts: datetime,
    status: str,
) -> None:
    m, is_dict = _get_manifest(manifest)
    m.run["finished_at"] = _iso(ts)
    m.run["status"] = status
    add_event(m, event_type="run_finished", ts=ts, payload={"status": status})
    _sync_back(manifest, m, is_dict)


def save_manifest(manifest: Union[WrangleManifest, Dict[str, Any]], path: Path) -> None:
    """Persiste o Manifest em JSON determinístico (chaves ordenadas, indentado)."""
    m, _ = _get_manifest(manifest)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(m.to_dict(), ensure_ascii=False, sort_keys=True, indent=2, default=_json_default),
        encoding="utf-8",
    )


def load_manifest(path: Path) -> WrangleManifest:
    """Reconstrói um Manifest persistido por `save_manifest`."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Manifest not found: {path}")
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Manifest root must be a JSON object")
    return WrangleManifest.from_dict(data)
