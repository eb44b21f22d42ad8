"""
Builder canônico do pipeline (v1).

Converte a seção `pipeline` da configuração em instâncias de Step.

pipeline:
  - type: ingest.load
  - id: keep_columns
    type: transform.select
  - id: big_households
    type: transform.filter
    depends_on: [keep_columns]

Regras:
- `type` é uma chave de `STEP_TYPES`; tipo desconhecido → EngineConfigurationError
- `id` padrão é o próprio `type`; ids repetidos → DuplicateStepIdError
- sem `depends_on`, a entrada depende da entrada anterior (pipe linear)
- `depends_on: []` declara uma raiz
- parâmetros de cada Step ficam em `steps.<id>`
"""

from __future__ import annotations

from typing import Any, Dict, List, Type

from wrangle_dataflow.core.config import validate_pipeline_section
from wrangle_dataflow.core.errors import engine_configuration_error
from wrangle_dataflow.core.exceptions import EngineConfigurationError
from wrangle_dataflow.core.pipeline.registry import StepRegistry
from wrangle_dataflow.core.pipeline.step import Step
from wrangle_dataflow.steps.audit.glimpse import AuditGlimpseStep
from wrangle_dataflow.steps.export.csv import ExportCsvStep
from wrangle_dataflow.steps.ingest.load import IngestLoadStep
from wrangle_dataflow.steps.reshape.gather import ReshapeGatherStep
from wrangle_dataflow.steps.reshape.separate_rows import ReshapeSeparateRowsStep
from wrangle_dataflow.steps.reshape.spread import ReshapeSpreadStep
from wrangle_dataflow.steps.transform.arrange import TransformArrangeStep
from wrangle_dataflow.steps.transform.count import TransformCountStep
from wrangle_dataflow.steps.transform.filter import TransformFilterStep
from wrangle_dataflow.steps.transform.mutate import TransformMutateStep
from wrangle_dataflow.steps.transform.select import TransformSelectStep
from wrangle_dataflow.steps.transform.summarize import TransformSummarizeStep


STEP_TYPES: Dict[str, Type[Any]] = {
    "ingest.load": IngestLoadStep,
    "audit.glimpse": AuditGlimpseStep,
    "transform.select": TransformSelectStep,
    "transform.filter": TransformFilterStep,
    "transform.mutate": TransformMutateStep,
    "transform.arrange": TransformArrangeStep,
    "transform.summarize": TransformSummarizeStep,
    "transform.count": TransformCountStep,
    "reshape.separate_rows": ReshapeSeparateRowsStep,
    "reshape.spread": ReshapeSpreadStep,
    "reshape.gather": ReshapeGatherStep,
    "export.csv": ExportCsvStep,
}


def build_steps(config: Dict[str, Any]) -> List[Step]:
    """
    Instancia os Steps declarados em `config["pipeline"]`, na ordem declarada.

    Raises:
        InvalidPipelineSectionError: Se a seção tiver forma inválida.
        EngineConfigurationError: Se a seção estiver vazia ou um `type` for desconhecido.
        DuplicateStepIdError: Se dois Steps resolverem para o mesmo id.
    """
    entries = validate_pipeline_section(config)
    if not entries:
        err = engine_configuration_error(
            message="Pipeline section is empty",
            details={"pipeline": []},
        )
        raise EngineConfigurationError(message=err.message, details=err.details, hint=err.hint)

    registry = StepRegistry()
    previous: str | None = None

    for i, entry in enumerate(entries):
        step_type = entry["type"].strip()
        cls = STEP_TYPES.get(step_type)
        if cls is None:
            err = engine_configuration_error(
                message=f"Unknown step type: {step_type}",
                details={"index": i, "type": step_type, "known_types": sorted(STEP_TYPES)},
            )
            raise EngineConfigurationError(message=err.message, details=err.details, hint=err.hint)

        step_id = entry.get("id", step_type).strip()
        if "depends_on" in entry:
            depends_on = list(entry["depends_on"])
        else:
            depends_on = [previous] if previous is not None else []

        registry.add(cls(id=step_id, depends_on=depends_on))
        previous = step_id

    return registry.list()


__all__ = ["STEP_TYPES", "build_steps"]
