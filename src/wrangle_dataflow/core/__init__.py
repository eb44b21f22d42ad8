# src/wrangle_dataflow/core/__init__.py
"""
Core do Wrangle DataFlow.

Reúne as responsabilidades independentes de domínio: configuração,
contratos de Step, contexto de execução, planejamento, execução e
rastreabilidade.

Componentes principais:
    - config       → resolução de configuração (merge, validação estrutural, hashing)
    - pipeline     → protocolo de Step, tipos, RunContext e registry
    - engine       → planner (DAG) e execução controlada
    - traceability → Manifest e Event Log

Limites explícitos:
    - Não contém operações tabulares (vivem em `steps`)
    - Não depende de CLI ou notebooks
"""
