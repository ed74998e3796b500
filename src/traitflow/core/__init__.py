"""
Core do traitflow.

Este pacote contém a implementação canônica da resolução de configuração
de traits e da execução de passadas, independente dos traits concretos.

Componentes principais:
    - config       → camadas, anotações, schemas, resolução e hashing
    - pipeline     → protocolo de trait, Environment, recursos e catálogo
    - engine       → planejamento, estratégia de controlador e execução
    - traceability → Manifest e Event Log de uma passada

Limites explícitos:
    - Não define traits concretos (ver `traitflow.traits`)
    - Não aplica recursos em nenhum cluster
"""
