"""
Pacote de rastreabilidade do traitflow — Manifest v1.

API pública exposta:
    - ResolutionManifest → estrutura canônica do Manifest
    - create_manifest    → criação explícita do Manifest
    - add_event          → registro explícito de eventos no Event Log
    - record_config_hash → registra o hash da configuração resolvida
    - trait_finished     → registra o estado final de um trait
    - trait_failed       → registra a falha de um trait
    - pass_finished      → resumo de uma passada concluída
    - pass_failed        → resumo de uma passada abortada
    - save_manifest      → persistência do Manifest em JSON
    - load_manifest      → restauração determinística do Manifest

Invariantes:
    - O Manifest inicia com `traits` e `events` vazios
    - Eventos nunca são reordenados automaticamente
"""

from .manifest import (
    ResolutionManifest,
    create_manifest,
    add_event,
    record_config_hash,
    trait_finished,
    trait_failed,
    pass_finished,
    pass_failed,
    save_manifest,
    load_manifest,
)

__all__ = [
    "ResolutionManifest",
    "create_manifest",
    "add_event",
    "record_config_hash",
    "trait_finished",
    "trait_failed",
    "pass_finished",
    "pass_failed",
    "save_manifest",
    "load_manifest",
]
