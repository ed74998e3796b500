"""
# Pipeline Core — traitflow

Este pacote define os **contratos canônicos** e as **estruturas fundamentais**
de uma passada de execução de traits.

## Componentes

- **types**
  - `TraitProfile`, `ControllerStrategy`, `TraitStatus`
  - `TraitCondition`: condição imutável reportada por um trait
  - `Integration`, `IntegrationKit`, `Platform`: descritores de entrada

- **trait**
  - `Trait` (Protocol): contrato mínimo de todo trait
  - `ControllerStrategySelector` (Protocol): capacidade opcional

- **context**
  - `Environment`: contexto de uma passada (config, recursos, callbacks, logs)

- **resources**
  - `ResourceCollection`: recursos gerados, ordenados por inserção

- **registry**
  - `TraitCatalog`: catálogo fechado, ordenado e validado

## Invariantes

- Cada trait possui um `id` único
- Traits não executam fora do controle do Engine
- Estado de passada é sempre explícito e rastreável
"""
