# tests/core/config/test_hashing.py
"""
Testes do hash canônico de configuração.

O hash precisa ser:
- determinístico (independente da ordem das chaves)
- igual ao SHA-256 do JSON canônico
- sensível a qualquer mudança de valor
"""

import hashlib
import json

import pytest

from wrangle_dataflow.core.config.hashing import canonical_json, compute_config_hash


def test_hash_is_deterministic():
    a = {"engine": {"fail_fast": True}, "steps": {"ingest.load": {"path": "x.csv"}}}
    b = {"steps": {"ingest.load": {"path": "x.csv"}}, "engine": {"fail_fast": True}}

    h1 = compute_config_hash(a)
    h2 = compute_config_hash(b)

    assert h1 == h2
    assert isinstance(h1, str)
    assert len(h1) == 64


def test_hash_matches_sha256_of_canonical_json():
    cfg = {"pipeline": [{"type": "ingest.load"}], "steps": {"ingest.load": {"na_values": ["", "NA"]}}}

    expected = hashlib.sha256(
        json.dumps(cfg, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    ).hexdigest()

    assert compute_config_hash(cfg) == expected
    assert canonical_json(cfg).startswith('{"pipeline"')


def test_hash_changes_on_override():
    base = {"steps": {"transform.summarize": {"na_rm": False}}}
    changed = {"steps": {"transform.summarize": {"na_rm": True}}}

    assert compute_config_hash(base) != compute_config_hash(changed)


def test_hash_rejects_non_dict():
    with pytest.raises(TypeError):
        compute_config_hash(["not", "a", "dict"])  # type: ignore[arg-type]
