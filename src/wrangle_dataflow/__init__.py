# src/wrangle_dataflow/__init__.py
"""
Wrangle DataFlow — pipelines declarativos de manipulação de dados tabulares.

Este pacote raiz define o namespace público do Wrangle DataFlow, um
framework para descrever, executar e narrar fluxos de análise de dados
(select, filter, mutate, group-by/summarize, arrange, count,
spread/gather e exportação CSV) sobre tabelas pandas.

Princípios centrais:
    - O fluxo é um DAG explícito de Steps canônicos (o "pipe")
    - Cada operação tabular é delegada ao pandas, nunca reimplementada
    - Tabelas intermediárias são nomeadas, como variáveis de uma sessão
    - Toda execução deixa um Manifest e um relatório narrativo

Arquitetura em alto nível:
    - core.config       → carregamento, merge e hashing de configuração
    - core.pipeline     → protocolos, contexto de execução e registro de Steps
    - core.engine       → planejamento (DAG) e execução do pipeline
    - core.traceability → Manifest e Event Log
    - steps.*           → Steps de ingestão, transformação, reshape e export
    - builders.pipeline → montagem dos Steps a partir da seção `pipeline`
    - runner            → execução ponta a ponta com Manifest e report.md
"""
# src/wrangle_dataflow/__init__.py

__version__ = "0.1.0"

__all__ = ["__version__"]
