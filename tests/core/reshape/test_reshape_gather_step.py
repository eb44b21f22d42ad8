"""
Testes do Step reshape.gather (v1) — largo → longo.
"""

import numpy as np
import pandas as pd
import pytest

from wrangle_dataflow.core.pipeline.types import StepStatus
from wrangle_dataflow.steps.reshape.gather import ReshapeGatherStep, gather
from wrangle_dataflow.steps.reshape.spread import spread


@pytest.fixture
def wide():
    return pd.DataFrame(
        {
            "key_ID": [1, 2, 3],
            "radio": [True, False, True],
            "table": [False, False, True],
        }
    )


def test_gather_excluding_id(make_ctx, wide):
    ctx = make_ctx(
        {"reshape.gather": {"key": "item", "value": "owned", "exclude": ["key_ID"]}},
        table=wide,
    )

    sr = ReshapeGatherStep().run(ctx)

    assert sr.status == StepStatus.SUCCESS
    out = ctx.get_table("main")
    assert list(out.columns) == ["key_ID", "item", "owned"]
    assert out["item"].tolist() == ["radio"] * 3 + ["table"] * 3
    assert out["key_ID"].tolist() == [1, 2, 3, 1, 2, 3]
    assert out["owned"].tolist() == [True, False, True, False, False, True]
    assert sr.payload["impact"]["columns_gathered"] == ["radio", "table"]


def test_gather_explicit_columns_keeps_the_rest(wide):
    out = gather(wide, key="item", value="owned", columns=["table"])

    assert list(out.columns) == ["key_ID", "radio", "item", "owned"]
    assert len(out) == 3


def test_gather_drop_na():
    wide = pd.DataFrame({"id": [1, 2], "a": [1.0, np.nan], "b": [np.nan, 4.0]})

    assert len(gather(wide, key="k", value="v", columns=["a", "b"])) == 4

    out = gather(wide, key="k", value="v", columns=["a", "b"], drop_na=True)
    assert out.to_dict(orient="list") == {"id": [1, 2], "k": ["a", "b"], "v": [1.0, 4.0]}


@pytest.mark.parametrize("key, value", [("key_ID", "owned"), ("item", "key_ID"), ("x", "x")])
def test_gather_key_value_must_be_new_and_distinct(wide, key, value):
    with pytest.raises(ValueError):
        gather(wide, key=key, value=value, columns=["radio", "table"])


def test_gather_requires_exactly_one_selection(make_ctx, wide):
    cfg = {"key": "item", "value": "owned", "columns": ["radio"], "exclude": ["key_ID"]}

    sr = ReshapeGatherStep().run(make_ctx({"reshape.gather": cfg}, table=wide))

    assert sr.status == StepStatus.FAILED


def test_spread_then_gather_recovers_long_table():
    long = pd.DataFrame(
        {"id": [1, 1, 2, 2], "k": ["a", "b", "a", "b"], "v": [1, 2, 3, 4]}
    )

    back = gather(spread(long, key="k", value="v"), key="k", value="v", columns=["a", "b"])
    back = back.sort_values(["id", "k"]).reset_index(drop=True)

    pd.testing.assert_frame_equal(back[long.columns], long, check_dtype=False)


def test_gather_then_spread_recovers_wide_up_to_fill():
    wide = pd.DataFrame(
        {"id": [3, 1, 2], "a": [1.0, np.nan, 3.0], "b": [4.0, 5.0, np.nan]}
    )

    long = gather(wide, key="k", value="v", columns=["a", "b"], drop_na=True)
    back = spread(long, key="k", value="v", fill=0.0)

    pd.testing.assert_frame_equal(
        back.sort_values("id").reset_index(drop=True)[list(wide.columns)],
        wide.fillna(0).sort_values("id").reset_index(drop=True),
        check_dtype=False,
    )


def test_gather_convert_restores_numeric_keys():
    long = pd.DataFrame({"id": [1, 2, 2], "year": [2000, 2000, 2001], "v": [1, 2, 3]})
    wide = spread(long, key="year", value="v")
    assert list(wide.columns) == ["id", "2000", "2001"]

    plain = gather(wide, key="year", value="v", columns=["2000", "2001"], drop_na=True)
    assert set(plain["year"]) == {"2000", "2001"}

    back = gather(wide, key="year", value="v", columns=["2000", "2001"], drop_na=True, convert=True)
    back = back.sort_values(["id", "year"]).reset_index(drop=True)
    assert back["year"].tolist() == [2000, 2000, 2001]
    assert pd.api.types.is_integer_dtype(back["year"])


def test_gather_convert_keeps_text_keys(make_ctx, wide):
    ctx = make_ctx(
        {"reshape.gather": {"key": "item", "value": "owned", "exclude": ["key_ID"], "convert": True}},
        table=wide,
    )

    sr = ReshapeGatherStep().run(ctx)

    assert sr.status == StepStatus.SUCCESS
    assert set(ctx.get_table("main")["item"]) == {"radio", "table"}
    assert sr.payload["impact"]["convert"] is True


def test_gather_convert_must_be_bool(make_ctx, wide):
    ctx = make_ctx(
        {"reshape.gather": {"key": "item", "value": "owned", "exclude": ["key_ID"], "convert": "yes"}},
        table=wide,
    )

    sr = ReshapeGatherStep().run(ctx)

    assert sr.status == StepStatus.FAILED
