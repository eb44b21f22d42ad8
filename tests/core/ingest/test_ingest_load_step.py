"""
Testes do Step canônico ingest.load (v1).

Cobre:
- leitura de CSV com marcadores de ausência declarados
- dtypes explícitos e colunas de data
- registro de origem + fingerprint (sha256)
- resolução de caminho relativo contra `meta["base_dir"]`
- erros: arquivo ausente, extensão não suportada, path ausente
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd
import pytest

from wrangle_dataflow.core.pipeline.context import RunContext
from wrangle_dataflow.core.pipeline.types import StepStatus
from wrangle_dataflow.steps.ingest.load import IngestLoadStep


CSV_TEXT = (
    "key_ID,village,interview_date,no_membrs,memb_assoc\n"
    "1,God,2016-11-17,3,NULL\n"
    "2,God,2016-11-17,7,yes\n"
    "3,Chirodzo,2016-11-16,10,NA\n"
    "4,Ruaca,2016-11-21,7,\n"
)


def _sha256_of_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def _make_ctx(step_cfg: dict, meta: dict | None = None) -> RunContext:
    return RunContext(
        run_id="test",
        created_at=datetime.now(timezone.utc),
        config={"steps": {"ingest.load": step_cfg}},
        meta=meta or {},
    )


def _make_csv(tmp_path: Path) -> Path:
    path = tmp_path / "interviews.csv"
    path.write_text(CSV_TEXT, encoding="utf-8")
    return path


@pytest.mark.parametrize("suffix", [".xlsx", ".txt", ".json"])
def test_ingest_load_unsupported_extension(tmp_path: Path, suffix: str) -> None:
    path = tmp_path / f"dataset{suffix}"
    path.write_text("dummy", encoding="utf-8")

    sr = IngestLoadStep().run(_make_ctx({"path": str(path)}))

    assert sr.status == StepStatus.FAILED
    assert sr.payload["error"]["type"] == "ValueError"
    assert "Unsupported file extension" in sr.payload["error"]["message"]


def test_ingest_load_file_not_found(tmp_path: Path) -> None:
    sr = IngestLoadStep().run(_make_ctx({"path": str(tmp_path / "missing.csv")}))

    assert sr.status == StepStatus.FAILED
    assert sr.payload["error"]["type"] == "FileNotFoundError"


def test_ingest_load_missing_path_config() -> None:
    sr = IngestLoadStep().run(_make_ctx({}))

    assert sr.status == StepStatus.FAILED
    assert "steps.ingest.load.path" in sr.payload["error"]["message"]


def test_ingest_load_csv_success(tmp_path: Path) -> None:
    path = _make_csv(tmp_path)
    ctx = _make_ctx({"path": str(path)})

    sr = IngestLoadStep().run(ctx)

    assert sr.status == StepStatus.SUCCESS
    df = ctx.get_table("main")
    assert isinstance(df, pd.DataFrame)
    assert df.shape == (4, 5)
    assert sr.metrics["rows"] == 4
    assert sr.artifacts["table"] == "main"
    assert sr.payload["columns"] == ["key_ID", "village", "interview_date", "no_membrs", "memb_assoc"]


def test_ingest_load_reads_declared_na_markers(tmp_path: Path) -> None:
    path = _make_csv(tmp_path)
    ctx = _make_ctx({"path": str(path)})

    IngestLoadStep().run(ctx)

    memb = ctx.get_table("main")["memb_assoc"]
    assert memb.isna().tolist() == [True, False, True, True]
    assert ctx.warnings["ingest.load"] == ["3 missing values read as NA"]


def test_ingest_load_only_declared_markers_are_missing(tmp_path: Path) -> None:
    path = _make_csv(tmp_path)
    ctx = _make_ctx({"path": str(path), "na_values": [""]})

    IngestLoadStep().run(ctx)

    assert ctx.get_table("main")["memb_assoc"].tolist()[:3] == ["NULL", "yes", "NA"]


def test_ingest_load_dtypes_and_dates(tmp_path: Path) -> None:
    path = _make_csv(tmp_path)
    ctx = _make_ctx(
        {
            "path": str(path),
            "output": "interviews",
            "dtypes": {"village": "category"},
            "parse_dates": ["interview_date"],
        }
    )

    sr = IngestLoadStep().run(ctx)

    assert sr.status == StepStatus.SUCCESS
    df = ctx.get_table("interviews")
    assert isinstance(df["village"].dtype, pd.CategoricalDtype)
    assert pd.api.types.is_datetime64_any_dtype(df["interview_date"])
    assert not ctx.has_table("main")


def test_ingest_load_registers_origin_and_hash(tmp_path: Path) -> None:
    path = _make_csv(tmp_path)

    sr = IngestLoadStep().run(_make_ctx({"path": str(path)}))

    artifacts = sr.artifacts
    assert artifacts["source_path"] == str(path.resolve())
    assert artifacts["source_type"] == "csv"
    assert artifacts["source_sha256"] == _sha256_of_file(path)
    assert artifacts["source_bytes"] == path.stat().st_size
    assert sr.payload["source"]["sha256"] == artifacts["source_sha256"]


def test_ingest_load_relative_path_uses_base_dir(tmp_path: Path) -> None:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    _make_csv(data_dir)
    ctx = _make_ctx({"path": "data/interviews.csv"}, meta={"base_dir": str(tmp_path)})

    sr = IngestLoadStep().run(ctx)

    assert sr.status == StepStatus.SUCCESS
    assert sr.artifacts["source_path"] == str((data_dir / "interviews.csv").resolve())


def test_ingest_load_disabled_is_skipped(tmp_path: Path) -> None:
    ctx = _make_ctx({"enabled": False, "path": str(tmp_path / "missing.csv")})

    sr = IngestLoadStep().run(ctx)

    assert sr.status == StepStatus.SKIPPED
    assert sr.payload == {"disabled": True}


def test_ingest_load_parquet_success(tmp_path: Path) -> None:
    pytest.importorskip("pyarrow")
    path = tmp_path / "interviews.parquet"
    pd.DataFrame({"key_ID": [1, 2], "village": ["God", "Ruaca"]}).to_parquet(path)
    ctx = _make_ctx({"path": str(path), "dtypes": {"village": "category"}})

    sr = IngestLoadStep().run(ctx)

    assert sr.status == StepStatus.SUCCESS
    assert sr.artifacts["source_type"] == "parquet"
    assert ctx.get_table("main").shape == (2, 2)
    assert isinstance(ctx.get_table("main")["village"].dtype, pd.CategoricalDtype)


def test_ingest_load_tsv_defaults_to_tab_separator(tmp_path: Path) -> None:
    path = tmp_path / "interviews.tsv"
    path.write_text(CSV_TEXT.replace(",", "\t"), encoding="utf-8")
    ctx = _make_ctx({"path": str(path)})

    sr = IngestLoadStep().run(ctx)

    assert sr.status == StepStatus.SUCCESS
    assert ctx.get_table("main").shape == (4, 5)
    assert sr.artifacts["source_type"] == "tsv"
