# src/wrangle_dataflow/core/config/__init__.py

"""
Camada de configuração do Wrangle DataFlow.

Este pacote carrega, mescla, valida estruturalmente e identifica (hash)
a configuração de uma run.

Uma configuração típica:

    engine:
      fail_fast: true
    pipeline:
      - id: ingest.load
        type: ingest.load
      - id: keep.village
        type: transform.filter
    steps:
      ingest.load:
        path: data/interviews.csv
      keep.village:
        conditions:
          - {column: village, op: "==", value: Chirodzo}

Princípios:
    - Defaults obrigatórios, overrides locais opcionais
    - Merge determinístico (dict recursivo, lista substituída)
    - Conflitos de tipo são erro, nunca coerção silenciosa
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidPipelineSectionError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import load_config, validate_pipeline_section
from .merge import deep_merge

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidPipelineSectionError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "deep_merge",
    "load_config",
    "validate_pipeline_section",
]
