# tests/core/traceability/test_manifest_create.py
"""
Testes de criação do Manifest v1.

- `create_manifest` registra run_id, started_at (UTC ISO), versão e config_hash
- o Event Log nasce vazio: nenhum evento é emitido implicitamente
"""

from datetime import datetime, timedelta, timezone

from wrangle_dataflow.core.traceability.manifest import WrangleManifest, create_manifest


def test_create_manifest_minimal():
    m = create_manifest(
        run_id="run-001",
        started_at=datetime(2026, 1, 16, 12, 0, 0, tzinfo=timezone.utc),
        version="0.1.0",
        config_hash="a" * 64,
    )

    assert isinstance(m, WrangleManifest)
    assert m.run == {
        "run_id": "run-001",
        "started_at": "2026-01-16T12:00:00+00:00",
        "version": "0.1.0",
    }
    assert m.inputs == {"config_hash": "a" * 64, "sources": {}}
    assert m.steps == {}
    assert m.events == []


def test_naive_and_offset_timestamps_are_normalized_to_utc():
    naive = create_manifest(run_id="r", started_at=datetime(2026, 1, 16, 12, 0), version="0.1.0", config_hash="x")
    offset = create_manifest(
        run_id="r",
        started_at=datetime(2026, 1, 16, 9, 0, tzinfo=timezone(timedelta(hours=-3))),
        version="0.1.0",
        config_hash="x",
    )

    assert naive.run["started_at"] == "2026-01-16T12:00:00+00:00"
    assert offset.run["started_at"] == "2026-01-16T12:00:00+00:00"
