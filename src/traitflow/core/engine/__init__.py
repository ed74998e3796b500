"""
Engine do traitflow.

Este pacote contém a implementação responsável por **planejar** e
**executar** uma passada de traits sobre uma integração.

Componentes principais:
    - planner  → seleção determinística dos traits participantes
    - strategy → escolha (única, em cache) da estratégia de controlador
    - engine   → execução em duas fases (configure/apply) com fail-fast

Invariantes:
    - Cada trait é configurado no máximo uma vez por passada
    - A mesma entrada produz a mesma lista de traits executados,
      os mesmos recursos e a mesma estratégia
"""
