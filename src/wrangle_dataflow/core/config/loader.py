# src/wrangle_dataflow/core/config/loader.py
"""
Carregamento e resolução da configuração efetiva.

Responsabilidades:
    - ler defaults (obrigatório) e overrides locais (opcional)
    - aplicar `deep_merge` (local tem prioridade)
    - validar a forma da seção `pipeline`

Limites explícitos:
    - Não conhece o catálogo de Steps (responsabilidade do builder)
    - Não valida parâmetros individuais de Steps (cada Step valida os seus)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml  # PyYAML

from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidPipelineSectionError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Lê um arquivo de configuração YAML/JSON e garante raiz `dict`.

    Arquivos vazios são interpretados como `{}`.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se a extensão não for suportada.
        InvalidConfigRootTypeError: Se a raiz não for um dicionário.
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Config file not found: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Unsupported config format: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root must be a dict, got: {type(data).__name__}"
        )

    return data


def validate_pipeline_section(config: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Valida a forma da seção `pipeline` e devolve suas entradas.

    Regras (v1):
        - ausente ou vazia → lista vazia
        - deve ser uma lista de dicts
        - `type` obrigatório (string não vazia)
        - `id`, quando presente, string não vazia
        - `depends_on`, quando presente, lista de strings

    Raises:
        InvalidPipelineSectionError: Em qualquer violação acima.
    """
    entries = config.get("pipeline")
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise InvalidPipelineSectionError(
            f"pipeline must be a list, got: {type(entries).__name__}"
        )

    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise InvalidPipelineSectionError(f"pipeline[{i}] must be a mapping")

        step_type = entry.get("type")
        if not isinstance(step_type, str) or not step_type.strip():
            raise InvalidPipelineSectionError(f"pipeline[{i}].type must be a non-empty string")

        if "id" in entry:
            step_id = entry["id"]
            if not isinstance(step_id, str) or not step_id.strip():
                raise InvalidPipelineSectionError(f"pipeline[{i}].id must be a non-empty string")

        if "depends_on" in entry:
            deps = entry["depends_on"]
            if not isinstance(deps, list) or not all(isinstance(d, str) for d in deps):
                raise InvalidPipelineSectionError(
                    f"pipeline[{i}].depends_on must be a list of strings"
                )

    return list(entries)


def load_config(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva de uma run.

    O arquivo local é ignorado quando não existe, permitindo que um
    `config.local.yaml` seja opcional no repositório do usuário.

    Args:
        defaults_path (str): Caminho da configuração base.
        local_path (Optional[str]): Caminho opcional de overrides.

    Returns:
        Dict[str, Any]: Configuração final resolvida.

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults não existir.
        UnsupportedConfigFormatError: Se o formato não for suportado.
        InvalidConfigRootTypeError: Se a raiz não for um dicionário.
        ConfigTypeConflictError: Se houver conflito de tipos no merge.
        InvalidPipelineSectionError: Se a seção `pipeline` for inválida.
    """
    effective = _load_file(Path(defaults_path))

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, _load_file(local_file))

    validate_pipeline_section(effective)

    return effective
