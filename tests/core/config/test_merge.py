# tests/core/config/test_merge.py
"""
Testes do deep-merge de configuração.

Regras validadas:
- dict + dict → merge recursivo
- lista no override → substituição total
- tipos incompatíveis → ConfigTypeConflictError
- entradas nunca são mutadas
"""

import pytest

from wrangle_dataflow.core.config.errors import ConfigTypeConflictError
from wrangle_dataflow.core.config.merge import deep_merge


def test_merge_simple_override():
    base = {"a": 1, "b": 2}
    override = {"b": 99}

    out = deep_merge(base, override)

    assert out == {"a": 1, "b": 99}
    assert base == {"a": 1, "b": 2}
    assert override == {"b": 99}


def test_merge_nested_dict():
    base = {"steps": {"transform.filter": {"expr": "rooms > 1", "combine": "all"}}}
    override = {"steps": {"transform.filter": {"combine": "any"}}}

    out = deep_merge(base, override)

    assert out == {"steps": {"transform.filter": {"expr": "rooms > 1", "combine": "any"}}}


def test_merge_list_override_total():
    """Listas não são concatenadas: a lista local substitui a base inteira."""
    base = {"steps": {"transform.select": {"columns": ["key_ID", "village", "rooms"]}}}
    override = {"steps": {"transform.select": {"columns": ["village"]}}}

    out = deep_merge(base, override)

    assert out["steps"]["transform.select"]["columns"] == ["village"]


def test_merge_none_base_accepts_any_override():
    out = deep_merge({"fill": None}, {"fill": False})
    assert out == {"fill": False}


def test_merge_type_conflict_raises():
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"engine": {"fail_fast": True}}, {"engine": "fast"})


def test_merge_root_must_be_dicts():
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"a": 1}, ["not", "a", "dict"])  # type: ignore[arg-type]
