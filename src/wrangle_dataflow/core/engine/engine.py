# src/wrangle_dataflow/core/engine/engine.py
"""
Engine de execução do pipeline do Wrangle DataFlow.

Responsabilidades:
- Planejar a ordem dos Steps (`plan_execution`).
- Respeitar `steps.<id>.enabled` e a política `engine.fail_fast`.
- Pular Steps cujas dependências falharam ou foram puladas.
- Converter exceções em `WrangleErrorPayload` (sem stack trace cru).
- Enriquecer cada StepResult com warnings e impacto registrados no
  RunContext e com metadados leves do payload (bytes + sha256).
- Atualizar o Manifest, quando um for fornecido.

StepResult é frozen: qualquer enriquecimento cria uma nova instância
(dataclasses.replace).
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from wrangle_dataflow.core.errors import (
    WrangleErrorPayload,
    engine_configuration_error,
    error_from_exception,
)
from wrangle_dataflow.core.pipeline.context import RunContext
from wrangle_dataflow.core.pipeline.step import Step
from wrangle_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus
from wrangle_dataflow.core.traceability.manifest import (
    WrangleManifest,
    step_failed,
    step_finished,
    step_started,
)

from .planner import plan_execution


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado de uma execução de pipeline, na ordem executada."""

    steps: Dict[str, StepResult] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not any(r.status == StepStatus.FAILED for r in self.steps.values())

    def failed(self) -> List[str]:
        return [sid for sid, r in self.steps.items() if r.status == StepStatus.FAILED]


class Engine:
    """Engine canônico do Wrangle DataFlow (planner + executor)."""

    def __init__(
        self,
        *,
        steps: Sequence[Step],
        ctx: RunContext,
        manifest: Optional[WrangleManifest] = None,
    ):
        self.steps: List[Step] = list(steps)
        self.ctx: RunContext = ctx
        self.manifest = manifest

    def _is_enabled(self, step_id: str) -> bool:
        steps_cfg = (self.ctx.config or {}).get("steps", {}) or {}
        step_cfg = steps_cfg.get(step_id, {}) or {}
        return bool(step_cfg.get("enabled", True))

    def _fail_fast(self) -> bool:
        engine_cfg = (self.ctx.config or {}).get("engine", {}) or {}
        return bool(engine_cfg.get("fail_fast", True))

    # ------------------------------------------------------------------
    # Rastreamento: helpers para enriquecer StepResult
    # ------------------------------------------------------------------
    def _payload_meta(self, payload: Any) -> Dict[str, Any]:
        raw = json.dumps(payload, ensure_ascii=False, sort_keys=True, default=str).encode("utf-8")
        return {
            "payload_bytes": len(raw),
            "payload_sha256": hashlib.sha256(raw).hexdigest(),
        }

    def _enrich(self, *, step: Step, result: StepResult) -> StepResult:
        sid = step.id

        # warnings (result + ctx), sem duplicatas e na ordem de emissão
        merged = list(dict.fromkeys(list(result.warnings or []) + list(self.ctx.warnings.get(sid, []))))

        payload = dict(result.payload or {})
        impact = self.ctx.impacts.get(sid)
        if impact is not None and "impact" not in payload:
            payload["impact"] = impact

        artifacts = dict(result.artifacts or {})
        artifacts.setdefault("payload_meta", self._payload_meta(payload))

        return replace(
            result,
            step_id=sid,
            kind=result.kind or getattr(step, "kind", None) or StepKind.DIAGNOSTIC,
            warnings=merged,
            payload=payload,
            artifacts=artifacts,
        )

    def _mk_result(
        self,
        *,
        step: Step,
        status: StepStatus,
        summary: str,
        payload: Dict[str, Any] | None = None,
    ) -> StepResult:
        r = StepResult(
            step_id=step.id,
            kind=getattr(step, "kind", None) or StepKind.DIAGNOSTIC,
            status=status,
            summary=summary,
            payload=dict(payload or {}),
        )
        return self._enrich(step=step, result=r)

    def _failure(self, step: Step, error: WrangleErrorPayload) -> StepResult:
        return self._mk_result(
            step=step,
            status=StepStatus.FAILED,
            summary=error.message,
            payload={"error": error.to_dict()},
        )

    # ------------------------------------------------------------------
    # Manifest
    # ------------------------------------------------------------------
    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _record_start(self, step: Step) -> None:
        if self.manifest is None:
            return
        kind = getattr(step, "kind", None) or StepKind.DIAGNOSTIC
        step_started(self.manifest, step_id=step.id, kind=getattr(kind, "value", str(kind)), ts=self._now())

    def _record_end(self, result: StepResult) -> None:
        if self.manifest is None:
            return
        if result.status == StepStatus.FAILED:
            step_failed(
                self.manifest,
                step_id=result.step_id,
                ts=self._now(),
                error=result.summary,
                payload=result.payload,
            )
        else:
            step_finished(self.manifest, step_id=result.step_id, ts=self._now(), result=result.to_dict())

    def _blocks(self, dep_result: StepResult) -> bool:
        # Step desabilitado por config não bloqueia: a tabela segue adiante intacta
        if dep_result.status == StepStatus.FAILED:
            return True
        return dep_result.status == StepStatus.SKIPPED and "blocked_by" in dep_result.payload

    # ------------------------------------------------------------------
    # Execução
    # ------------------------------------------------------------------
    def run(self) -> RunResult:
        ordered = plan_execution(self.steps)

        results: Dict[str, StepResult] = {}
        for step in ordered:
            sid = step.id
            self._record_start(step)

            if not self._is_enabled(sid):
                result = self._mk_result(
                    step=step,
                    status=StepStatus.SKIPPED,
                    summary="skipped by config",
                    payload={"disabled": True},
                )
                results[sid] = result
                self._record_end(result)
                continue

            deps = list(getattr(step, "depends_on", []) or [])
            blocked = [d for d in deps if d in results and self._blocks(results[d])]
            if blocked:
                result = self._mk_result(
                    step=step,
                    status=StepStatus.SKIPPED,
                    summary="skipped due to failed dependency",
                    payload={"blocked_by": blocked},
                )
                results[sid] = result
                self._record_end(result)
                continue

            try:
                step_result = step.run(self.ctx)
            except Exception as e:
                result = self._failure(step, error_from_exception(e))
                self.ctx.log(
                    step_id=sid,
                    level="error",
                    message="step raised",
                    error_type=e.__class__.__name__,
                    error_message=str(e) or "error",
                )
            else:
                if isinstance(step_result, StepResult):
                    result = self._enrich(step=step, result=step_result)
                else:
                    result = self._failure(
                        step,
                        engine_configuration_error(
                            message="Step retornou tipo inválido",
                            details={
                                "step_id": sid,
                                "expected": "StepResult",
                                "received": type(step_result).__name__,
                            },
                            hint="Ajuste o Step para retornar StepResult",
                        ),
                    )

            results[sid] = result
            self._record_end(result)

            if result.status == StepStatus.FAILED and self._fail_fast():
                break

        return RunResult(steps=results)
