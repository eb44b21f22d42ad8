"""
Testes do builder do pipeline (seção `pipeline` → Steps).
"""

import pytest

from wrangle_dataflow.builders.pipeline import STEP_TYPES, build_steps
from wrangle_dataflow.core.config.errors import InvalidPipelineSectionError
from wrangle_dataflow.core.engine.planner import plan_execution
from wrangle_dataflow.core.exceptions import EngineConfigurationError
from wrangle_dataflow.core.pipeline.registry import DuplicateStepIdError
from wrangle_dataflow.steps.transform.filter import TransformFilterStep


def test_linear_pipe_depends_on_previous_entry():
    steps = build_steps(
        {
            "pipeline": [
                {"type": "ingest.load"},
                {"type": "transform.select"},
                {"type": "transform.filter"},
                {"type": "export.csv"},
            ]
        }
    )

    assert [s.id for s in steps] == ["ingest.load", "transform.select", "transform.filter", "export.csv"]
    assert [s.depends_on for s in steps] == [
        [],
        ["ingest.load"],
        ["transform.select"],
        ["transform.filter"],
    ]
    assert isinstance(steps[2], TransformFilterStep)


def test_explicit_ids_and_branches():
    steps = build_steps(
        {
            "pipeline": [
                {"type": "ingest.load"},
                {"id": "by_village", "type": "transform.count"},
                {"id": "export_by_village", "type": "export.csv"},
                {"id": "big_households", "type": "transform.filter", "depends_on": ["ingest.load"]},
                {"id": "extra_root", "type": "ingest.load", "depends_on": []},
            ]
        }
    )

    by_id = {s.id: s for s in steps}
    assert by_id["export_by_village"].depends_on == ["by_village"]
    assert by_id["big_households"].depends_on == ["ingest.load"]
    assert by_id["extra_root"].depends_on == []
    assert [s.id for s in plan_execution(steps)] == [s.id for s in steps]


def test_every_registered_type_builds():
    entries = [{"id": f"s{i}", "type": t} for i, t in enumerate(STEP_TYPES)]

    steps = build_steps({"pipeline": entries})

    assert [type(s) for s in steps] == list(STEP_TYPES.values())


def test_unknown_type_raises():
    with pytest.raises(EngineConfigurationError) as exc:
        build_steps({"pipeline": [{"type": "ingest.load"}, {"type": "transform.pivot"}]})

    details = exc.value.details
    assert details["index"] == 1
    assert details["type"] == "transform.pivot"
    assert "reshape.spread" in details["known_types"]


def test_duplicate_id_raises():
    with pytest.raises(DuplicateStepIdError):
        build_steps({"pipeline": [{"type": "ingest.load"}, {"type": "ingest.load"}]})


@pytest.mark.parametrize("config", [{}, {"pipeline": []}])
def test_empty_pipeline_raises(config):
    with pytest.raises(EngineConfigurationError):
        build_steps(config)


@pytest.mark.parametrize(
    "pipeline",
    [
        "ingest.load",
        [{"id": "load"}],
        [{"type": "ingest.load", "depends_on": "x"}],
    ],
)
def test_malformed_pipeline_section_raises(pipeline):
    with pytest.raises(InvalidPipelineSectionError):
        build_steps({"pipeline": pipeline})
