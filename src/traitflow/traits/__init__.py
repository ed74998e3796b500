"""
Traits concretos do traitflow.

Cada módulo implementa um único trait com schema explícito:
    - platform, camel, cron, deployment, gc
    - knative-service, service, keda, owner

O catálogo padrão é montado por `traits.catalog.build_catalog`.
"""
