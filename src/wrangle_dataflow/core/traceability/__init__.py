# src/wrangle_dataflow/core/traceability/__init__.py
"""
Rastreabilidade do Wrangle DataFlow.

Exporta o Manifest v1 e suas operações explícitas: criação, registro de
fontes, eventos de Step, encerramento da run e persistência JSON.
"""

from .manifest import (
    WrangleManifest,
    add_event,
    create_manifest,
    load_manifest,
    register_source,
    run_finished,
    save_manifest,
    step_failed,
    step_finished,
    step_started,
)

__all__ = [
    "WrangleManifest",
    "add_event",
    "create_manifest",
    "load_manifest",
    "register_source",
    "run_finished",
    "save_manifest",
    "step_failed",
    "step_finished",
    "step_started",
]
