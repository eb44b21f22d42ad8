from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WrangleErrorPayload:
    """
    Payload canônico de erro do Wrangle DataFlow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    - decision_required: o pipeline está bloqueado aguardando decisão humana
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    decision_required: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Tabelas / colunas
COLUMN_NOT_FOUND = "COLUMN_NOT_FOUND"
TABLE_NOT_FOUND = "TABLE_NOT_FOUND"
INVALID_EXPRESSION = "INVALID_EXPRESSION"
DUPLICATE_RESHAPE_KEYS = "DUPLICATE_RESHAPE_KEYS"

# Saída
OUTPUT_DIR_NOT_FOUND = "OUTPUT_DIR_NOT_FOUND"

# Engine / Execução
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"

# Nome da classe de exceção -> código estável
EXCEPTION_CODES: Dict[str, str] = {
    "ColumnNotFound": COLUMN_NOT_FOUND,
    "TableNotFound": TABLE_NOT_FOUND,
    "InvalidExpression": INVALID_EXPRESSION,
    "DuplicateReshapeKeys": DUPLICATE_RESHAPE_KEYS,
    "OutputDirectoryNotFound": OUTPUT_DIR_NOT_FOUND,
    "EngineConfigurationError": ENGINE_CONFIGURATION_ERROR,
    "EngineExecutionError": ENGINE_EXECUTION_ERROR,
}


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def column_not_found(
    *,
    missing_columns: List[str],
    available_columns: List[str],
    step: Optional[str] = None,
    hint: str = "Corrija o nome da coluna na configuração do Step ou garanta que um Step anterior a produza.",
) -> WrangleErrorPayload:
    return WrangleErrorPayload(
        type=COLUMN_NOT_FOUND,
        message="Coluna não encontrada na tabela",
        details={
            "missing_columns": missing_columns,
            "available_columns": available_columns,
            "step": step,
        },
        hint=hint,
        decision_required=False,
    )


def table_not_found(
    *,
    table: str,
    available_tables: List[str],
    step: Optional[str] = None,
    hint: str = "Declare um Step anterior que produza essa tabela (output) ou ajuste o input do Step.",
) -> WrangleErrorPayload:
    return WrangleErrorPayload(
        type=TABLE_NOT_FOUND,
        message="Tabela de entrada não encontrada no contexto da run",
        details={
            "table": table,
            "available_tables": available_tables,
            "step": step,
        },
        hint=hint,
        decision_required=False,
    )


def invalid_expression(
    *,
    expression: str,
    reason: str,
    step: Optional[str] = None,
    hint: str = "Revise a expressão: use nomes de coluna existentes e a sintaxe de DataFrame.query/eval.",
) -> WrangleErrorPayload:
    return WrangleErrorPayload(
        type=INVALID_EXPRESSION,
        message="Expressão inválida",
        details={
            "expression": expression,
            "reason": reason,
            "step": step,
        },
        hint=hint,
        decision_required=False,
    )


def duplicate_reshape_keys(
    *,
    key: str,
    id_columns: List[str],
    duplicated_rows: int,
    step: Optional[str] = None,
    hint: str = "Resuma a tabela antes do spread (summarize) ou inclua colunas de identificação que tornem cada célula única.",
) -> WrangleErrorPayload:
    return WrangleErrorPayload(
        type=DUPLICATE_RESHAPE_KEYS,
        message="Combinações duplicadas de identificação e chave no spread",
        details={
            "key": key,
            "id_columns": id_columns,
            "duplicated_rows": duplicated_rows,
            "step": step,
        },
        hint=hint,
        decision_required=True,
    )


def output_dir_not_found(
    *,
    directory: str,
    step: Optional[str] = None,
    hint: str = "Crie o diretório de saída ou declare `create_dirs: true` no Step de export.",
) -> WrangleErrorPayload:
    return WrangleErrorPayload(
        type=OUTPUT_DIR_NOT_FOUND,
        message="Diretório de saída não existe",
        details={
            "directory": directory,
            "step": step,
        },
        hint=hint,
        decision_required=False,
    )


def engine_execution_error(
    *,
    step: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique os eventos da run e a configuração do Step. Nenhum fallback é aplicado automaticamente.",
) -> WrangleErrorPayload:
    return WrangleErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message="Falha inesperada durante a execução do pipeline",
        details={
            "step": step,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
        decision_required=False,
    )


def engine_configuration_error(
    *,
    message: str = "Configuração inválida para execução do pipeline",
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Revise a seção pipeline/steps da configuração antes de reexecutar.",
) -> WrangleErrorPayload:
    return WrangleErrorPayload(
        type=ENGINE_CONFIGURATION_ERROR,
        message=message,
        details=details or {},
        hint=hint,
        decision_required=False,
    )


def error_from_exception(exc: BaseException) -> WrangleErrorPayload:
    """Converte uma exceção de domínio (ou genérica) no payload canônico.

    Exceções de domínio carregam `message/details/hint`; o código vem de
    `EXCEPTION_CODES`. Qualquer outra exceção vira ENGINE_EXECUTION_ERROR,
    sem stack trace.
    """
    name = exc.__class__.__name__
    if name in EXCEPTION_CODES and hasattr(exc, "details"):
        return WrangleErrorPayload(
            type=EXCEPTION_CODES[name],
            message=str(exc) or name,
            details=dict(getattr(exc, "details", {}) or {}),
            hint=getattr(exc, "hint", None),
            decision_required=bool(getattr(exc, "decision_required", False)),
        )
    return engine_execution_error(exc_type=name, exc_message=str(exc) or None)
