# tests/core/engine/test_executor_skip_by_config.py
"""
Testes de `steps.<id>.enabled: false`.

Um Step desabilitado não executa e é registrado como SKIPPED. Ele não
bloqueia seus dependentes: a tabela segue adiante sem essa transformação.
"""

from wrangle_dataflow.core.engine.engine import Engine
from wrangle_dataflow.core.pipeline.types import StepStatus


def test_disabled_step_is_skipped(dummy_ctx, DummyStep):
    dummy_ctx.config["steps"]["transform.filter"] = {"enabled": False}
    filter_step = DummyStep("transform.filter")

    result = Engine(steps=[filter_step], ctx=dummy_ctx).run()

    sr = result.steps["transform.filter"]
    assert sr.status == StepStatus.SKIPPED
    assert sr.summary == "skipped by config"
    assert sr.payload == {"disabled": True}
    assert filter_step.calls == 0
    assert not dummy_ctx.has_artifact("transform.filter.ok")


def test_disabled_step_does_not_block_dependents(dummy_ctx, DummyStep):
    dummy_ctx.config["steps"]["transform.filter"] = {"enabled": False}
    steps = [
        DummyStep("ingest.load"),
        DummyStep("transform.filter", depends_on=["ingest.load"]),
        DummyStep("export.csv", depends_on=["transform.filter"]),
    ]

    result = Engine(steps=steps, ctx=dummy_ctx).run()

    assert result.steps["transform.filter"].status == StepStatus.SKIPPED
    assert result.steps["export.csv"].status == StepStatus.SUCCESS
    assert result.ok is True
