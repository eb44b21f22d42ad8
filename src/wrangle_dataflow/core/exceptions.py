from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class WrangleException(Exception):
    """Base class para exceções de domínio do Wrangle DataFlow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem curta e humana
    - `hint` diz onde corrigir (config, dataset, diretório de saída)
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None
    decision_required: bool = False

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Tabelas / colunas
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ColumnNotFound(WrangleException):
    """Coluna referenciada pela configuração não existe na tabela."""


@dataclass(frozen=True)
class TableNotFound(WrangleException):
    """Tabela nomeada não foi produzida por nenhum Step anterior."""


@dataclass(frozen=True)
class InvalidExpression(WrangleException):
    """Expressão de filtro ou mutate rejeitada pelo pandas."""


@dataclass(frozen=True)
class DuplicateReshapeKeys(WrangleException):
    """Spread encontrou mais de um valor para a mesma célula (id, key)."""


# ---------------------------------------------------------------------------
# Saída
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OutputDirectoryNotFound(WrangleException):
    """Diretório de destino do export não existe."""


# ---------------------------------------------------------------------------
# Engine / Configuração
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EngineConfigurationError(WrangleException):
    """Configuração inválida ou inconsistente para execução."""


@dataclass(frozen=True)
class EngineExecutionError(WrangleException):
    """Erro inesperado durante execução do Engine (encapsulado)."""
