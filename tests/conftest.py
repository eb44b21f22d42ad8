# tests/conftest.py
"""
Fixtures compartilhados para testes do Wrangle DataFlow.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas
- contexto de execução controlado (RunContext)
- Steps dummy para testes estruturais do engine
- uma amostra em memória da tabela de entrevistas usada nos testes de Steps

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Dados retornados são determinísticos e isolados
    - Steps dummy utilizam duck typing em vez de herança
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture executa pipeline real
    - Nenhuma fixture realiza I/O
    - Cada teste recebe uma cópia nova da tabela de entrevistas

Este módulo existe como infraestrutura de teste e não
como validação funcional do framework.
"""

from datetime import datetime, timezone

import numpy as np
import pandas as pd
import pytest


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    YAML de configuração padrão (defaults) semelhante ao uso real do projeto.

    Serve de base para os testes de loader, deep-merge e hashing.

    Returns:
        str: Conteúdo YAML representando configuração padrão (defaults).
    """
    return """\
engine:
  fail_fast: true
pipeline:
  - type: ingest.load
  - type: transform.select
steps:
  ingest.load:
    path: data/interviews.csv
    na_values: ["", "NA", "NULL"]
  transform.select:
    enabled: true
    columns: [key_ID, village, no_membrs]
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """
    YAML de overrides locais (`config.local.yaml`).

    Contém apenas o que muda em relação aos defaults: listas são
    substituídas por inteiro, dicts são mesclados recursivamente.

    Returns:
        str: Conteúdo YAML representando configuração local de override.
    """
    return """\
steps:
  transform.select:
    enabled: false
    columns: [village]
"""


# =====================================================
# Pipeline fixtures (Step + RunContext)
# =====================================================

@pytest.fixture
def dummy_config() -> dict:
    """
    Configuração mínima, já resolvida, para exercitar engine e RunContext.

    Invariantes:
        - `fail_fast` explicitamente habilitado
        - Não depende de filesystem, env vars ou defaults externos

    Returns:
        dict: Configuração mínima e válida para execução de testes.
    """
    return {
        "engine": {"fail_fast": True},
        "steps": {"ingest.load": {"enabled": True}},
    }


@pytest.fixture
def dummy_ctx(dummy_config):
    """
    RunContext determinístico para testes.

    `run_id` e `created_at` são fixos; o contexto inicia sem tabelas,
    eventos ou warnings.

    Returns:
        RunContext: Contexto de execução isolado e previsível para testes.
    """
    from wrangle_dataflow.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config=dummy_config,
        meta={"source": "pytest"},
    )


@pytest.fixture
def DummyStep():
    """
    Fixture factory que fornece uma implementação mínima e duck-typed de um Step.

    Retorna uma *classe* (não uma instância) que:
    - expõe os atributos obrigatórios (`id`, `kind`, `depends_on`)
    - implementa `run(ctx)` registrando um artefato `<id>.ok`
    - pode ser configurada para falhar (`fail=True`) ou levantar (`raises=...`)

    Usado por:
        - Testes de planner (ordenação, dependências)
        - Testes de engine (execução, status, fail-fast, skip)

    Returns:
        type: Classe _DummyStep que pode ser instanciada pelos testes.
    """
    from wrangle_dataflow.core.pipeline.types import StepKind, StepResult, StepStatus

    class _DummyStep:
        def __init__(
            self,
            step_id: str = "ingest.load",
            kind: StepKind = StepKind.DIAGNOSTIC,
            depends_on=None,
            *,
            fail: bool = False,
            raises: Exception = None,
        ):
            self.id = step_id
            self.kind = kind
            self.depends_on = depends_on or []
            self.fail = fail
            self.raises = raises
            self.calls = 0

        def run(self, ctx):
            self.calls += 1
            if self.raises is not None:
                raise self.raises
            if self.fail:
                return StepResult(
                    step_id=self.id,
                    kind=self.kind,
                    status=StepStatus.FAILED,
                    summary="dummy failed",
                    payload={"error": {"type": "DummyError", "message": "dummy failed"}},
                )
            ctx.set_artifact(f"{self.id}.ok", True)
            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary="dummy ok",
                metrics={},
                warnings=[],
                artifacts={"ok": f"{self.id}.ok"},
                payload={"note": "dummy"},
            )

    return _DummyStep


# =====================================================
# Dados: amostra de entrevistas domiciliares
# =====================================================

@pytest.fixture
def interviews_df() -> pd.DataFrame:
    """
    Amostra de entrevistas domiciliares (12 linhas, 3 vilarejos).

    Fatos usados pelos testes:
        - village: God=7, Chirodzo=3, Ruaca=2
        - memb_assoc: yes=3, no=3, NA=6
        - items_owned: lista separada por `;`, com um valor ausente (key_ID 6)
        - rooms: inteiro; no_membrs: inteiro
    """
    return pd.DataFrame(
        {
            "key_ID": list(range(1, 13)),
            "village": [
                "God", "God", "God", "God", "God", "God", "God",
                "Chirodzo", "Chirodzo", "Chirodzo",
                "Ruaca", "Ruaca",
            ],
            "interview_date": pd.to_datetime(
                [
                    "2016-11-17", "2016-11-17", "2016-11-17", "2016-11-17",
                    "2016-11-17", "2016-11-17", "2016-11-17",
                    "2016-11-16", "2016-11-16", "2016-12-16",
                    "2016-11-21", "2016-11-21",
                ]
            ),
            "no_membrs": [3, 7, 10, 7, 7, 3, 6, 12, 8, 12, 6, 7],
            "years_liv": [4, 9, 15, 6, 40, 3, 38, 70, 6, 23, 20, 20],
            "respondent_wall_type": [
                "muddaub", "muddaub", "burntbricks", "burntbricks", "burntbricks", "muddaub",
                "muddaub", "burntbricks", "burntbricks", "burntbricks", "burntbricks", "burntbricks",
            ],
            "rooms": [1, 1, 1, 1, 1, 1, 1, 3, 1, 5, 1, 3],
            "memb_assoc": [
                np.nan, "yes", np.nan, np.nan, np.nan, np.nan,
                "no", "yes", "no", "no", np.nan, "yes",
            ],
            "liv_count": [1, 3, 1, 1, 1, 1, 1, 2, 3, 2, 1, 2],
            "items_owned": [
                "bicycle;television;solar_panel;table",
                "cow_cart;bicycle;radio;cow_plough;solar_panel;solar_torch;table;mobile_phone",
                "solar_torch",
                "bicycle;radio;cow_plough;solar_panel;mobile_phone",
                "motorcyle;radio;cow_plough;mobile_phone",
                np.nan,
                "motorcyle;cow_plough",
                "motorcyle;bicycle;television;radio;cow_plough;solar_panel;solar_torch;table;fridge",
                "television;solar_panel;solar_torch",
                "cow_cart;motorcyle;bicycle;television;radio;cow_plough;solar_panel;solar_torch;table;mobile_phone",
                "radio;cow_plough;solar_panel",
                "cow_cart;bicycle;radio;cow_plough;table",
            ],
            "no_meals": [2, 2, 2, 2, 2, 2, 3, 2, 3, 3, 2, 2],
        }
    )


@pytest.fixture
def make_ctx(interviews_df):
    """
    Factory de RunContext com a tabela `main` já publicada.

    Uso: `ctx = make_ctx({"transform.filter": {...}})`.
    """
    from wrangle_dataflow.core.pipeline.context import RunContext

    def _make(steps_cfg=None, *, table=None, meta=None):
        ctx = RunContext(
            run_id="run-test-steps",
            created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
            config={"steps": steps_cfg or {}},
            meta=meta or {},
        )
        ctx.set_table("main", interviews_df if table is None else table)
        return ctx

    return _make
