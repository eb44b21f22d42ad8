# tests/core/pipeline/test_registry_unique_step_id.py
"""
Testes do StepRegistry.

Invariantes:
    - Cada `step.id` é único e não vazio
    - `list()` e `ids()` refletem exatamente a ordem de registro
"""

import pytest

from wrangle_dataflow.core.pipeline.registry import DuplicateStepIdError, StepRegistry


def test_registry_rejects_duplicate_step_id(DummyStep):
    reg = StepRegistry()
    reg.add(DummyStep("transform.filter"))

    with pytest.raises(DuplicateStepIdError):
        reg.add(DummyStep("transform.filter"))


def test_registry_accepts_unique_ids(DummyStep):
    reg = StepRegistry()
    reg.add(DummyStep("ingest.load"))
    reg.add(DummyStep("audit.glimpse"))

    assert [s.id for s in reg.list()] == ["ingest.load", "audit.glimpse"]
    assert reg.ids() == ["ingest.load", "audit.glimpse"]
    assert len(reg) == 2
    assert reg.get("audit.glimpse").id == "audit.glimpse"


def test_registry_rejects_empty_id(DummyStep):
    with pytest.raises(ValueError):
        StepRegistry().add(DummyStep(""))
