# src/wrangle_dataflow/core/config/hashing.py
"""
Hash canônico de configuração.

O hash identifica estruturalmente a configuração efetiva de uma run e é
gravado no Manifest (`inputs.config_hash`). Duas configurações com o
mesmo conteúdo produzem o mesmo hash, independentemente da ordem das
chaves no arquivo de origem.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Dict


def canonical_json(value: Any) -> str:
    """Serialização JSON canônica: chaves ordenadas, separadores compactos, UTF-8."""
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera o SHA-256 hexadecimal (64 caracteres) da configuração efetiva.

    Args:
        config (Dict[str, Any]): Configuração resolvida.

    Returns:
        str: Hash SHA-256 hexadecimal.

    Raises:
        TypeError: Se `config` não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config to hash must be a dict, got: {type(config).__name__}"
        )

    return hashlib.sha256(canonical_json(config).encode("utf-8")).hexdigest()
