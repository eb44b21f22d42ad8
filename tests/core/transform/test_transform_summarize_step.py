"""
Testes do Step transform.summarize (v1) — split-apply-combine.

Propriedades:
- uma linha por chave distinta (chave ausente forma grupo próprio)
- grupos ordenados pela chave, colunas de grupo primeiro
- `na_rm: false` propaga NA; `na_rm: true` ignora ausentes
"""

import numpy as np
import pandas as pd
import pytest

from wrangle_dataflow.core.pipeline.types import StepStatus
from wrangle_dataflow.steps.transform.summarize import (
    TransformSummarizeStep,
    reduce_series,
    summarize,
)


def test_summarize_by_village(make_ctx):
    ctx = make_ctx(
        {
            "transform.summarize": {
                "group_by": ["village"],
                "output": "by_village",
                "aggregations": {
                    "households": "n",
                    "mean_no_membrs": {"column": "no_membrs", "fn": "mean"},
                    "max_rooms": {"column": "rooms", "fn": "max"},
                },
            }
        }
    )

    sr = TransformSummarizeStep().run(ctx)

    assert sr.status == StepStatus.SUCCESS
    out = ctx.get_table("by_village")
    assert list(out.columns) == ["village", "households", "mean_no_membrs", "max_rooms"]
    assert out["village"].tolist() == ["Chirodzo", "God", "Ruaca"]
    assert out["households"].tolist() == [3, 7, 2]
    assert out["mean_no_membrs"].tolist() == pytest.approx([32 / 3, 43 / 7, 6.5])
    assert out["max_rooms"].tolist() == [5, 1, 3]
    assert sr.payload["impact"]["groups"] == 3


def test_one_row_per_distinct_key(interviews_df):
    out = summarize(interviews_df, ["village", "respondent_wall_type"], [("n", "n", None)])

    distinct = interviews_df[["village", "respondent_wall_type"]].drop_duplicates()
    assert len(out) == len(distinct)
    assert out["n"].sum() == len(interviews_df)


def test_missing_key_forms_its_own_group(interviews_df):
    out = summarize(interviews_df, ["memb_assoc"], [("n", "n", None)])

    assert out["memb_assoc"].iloc[:2].tolist() == ["no", "yes"]
    assert pd.isna(out["memb_assoc"].iloc[2])
    assert out["n"].tolist() == [3, 3, 6]


def test_na_propagates_without_na_rm(make_ctx):
    table = pd.DataFrame({"g": ["a", "a", "b"], "x": [1.0, np.nan, 2.0]})
    ctx = make_ctx(
        {"transform.summarize": {"group_by": ["g"], "aggregations": {"mean_x": {"column": "x", "fn": "mean"}}}},
        table=table,
    )

    TransformSummarizeStep().run(ctx)

    out = ctx.get_table("main")
    assert np.isnan(out["mean_x"].iloc[0])
    assert out["mean_x"].iloc[1] == 2.0
    assert ctx.warnings["transform.summarize"] == [
        "'mean_x' is NA in 1 group(s); set na_rm: true to ignore missing values"
    ]


def test_na_rm_ignores_missing(make_ctx):
    table = pd.DataFrame({"g": ["a", "a", "b"], "x": [1.0, np.nan, 2.0]})
    ctx = make_ctx(
        {
            "transform.summarize": {
                "group_by": ["g"],
                "na_rm": True,
                "aggregations": {"mean_x": {"column": "x", "fn": "mean"}},
            }
        },
        table=table,
    )

    TransformSummarizeStep().run(ctx)

    assert ctx.get_table("main")["mean_x"].tolist() == [1.0, 2.0]
    assert "transform.summarize" not in ctx.warnings


def test_whole_table_summary(interviews_df):
    out = summarize(
        interviews_df,
        [],
        [("n", "n", None), ("max_rooms", "max", "rooms"), ("villages", "n_distinct", "village")],
    )

    assert out.to_dict(orient="records") == [{"n": 12, "max_rooms": 5, "villages": 3}]


@pytest.mark.parametrize(
    "fn, na_rm, expected",
    [
        ("count", False, 2),
        ("n", False, 3),
        ("n_distinct", False, 3),
        ("n_distinct", True, 2),
        ("first", False, 1.0),
        ("last", True, 2.0),
        ("sum", True, 3.0),
        ("median", True, 1.5),
    ],
)
def test_reduce_series(fn, na_rm, expected):
    s = pd.Series([1.0, 2.0, np.nan])
    assert reduce_series(s, fn, na_rm) == expected


def test_summarize_unknown_fn_fails(make_ctx):
    ctx = make_ctx(
        {"transform.summarize": {"group_by": ["village"], "aggregations": {"m": {"column": "rooms", "fn": "mode"}}}}
    )

    sr = TransformSummarizeStep().run(ctx)

    assert sr.status == StepStatus.FAILED
    assert "fn not supported" in sr.payload["error"]["message"]


def test_summarize_unknown_column_fails(make_ctx):
    ctx = make_ctx(
        {"transform.summarize": {"group_by": ["villge"], "aggregations": {"n": "n"}}}
    )

    sr = TransformSummarizeStep().run(ctx)

    assert sr.payload["error"]["code"] == "COLUMN_NOT_FOUND"
