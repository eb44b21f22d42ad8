# src/wrangle_dataflow/core/config/errors.py
"""
Exceções da camada de configuração do Wrangle DataFlow.

Todas as falhas de carregamento, merge ou validação estrutural herdam de
`ConfigError`. Essas falhas acontecem antes de qualquer Step executar e
são sempre fatais.
"""


class ConfigError(Exception):
    """
    Exceção base para erros de configuração.

    Permite capturar qualquer falha de configuração de forma genérica,
    separando-a de falhas de execução de Steps.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Arquivo de configuração base (defaults) inexistente.

    Sem defaults não existe configuração efetiva: o loader não cria
    nem infere um arquivo substituto.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Extensão de arquivo de configuração não suportada.

    Formatos aceitos: `.yaml`, `.yml` e `.json`. O formato nunca é
    inferido pelo conteúdo.
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Conteúdo raiz da configuração não é um mapa chave-valor.

    Listas ou escalares na raiz são rejeitados sem tentativa de
    normalização.
    """


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo:
        - base:     {"engine": {"fail_fast": true}}
        - override: {"engine": "strict"}

    Nenhum merge parcial é produzido quando o conflito é detectado.
    """


class InvalidPipelineSectionError(ConfigError):
    """
    Seção `pipeline` estruturalmente inválida.

    A seção deve ser uma lista de mapas com `type` obrigatório e,
    opcionalmente, `id` e `depends_on`. Nomes de Step desconhecidos são
    validados depois, pelo builder.
    """
