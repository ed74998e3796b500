"""
traitflow — resolução de configuração em camadas e execução de traits.

Este pacote raiz define o namespace público do traitflow: um motor que,
para cada integração, resolve a configuração de traits a partir de camadas
ordenadas, decide quais traits aplicam e executa-os em ordem determinística
sobre uma coleção de recursos de saída.

Princípios centrais:
    - Precedência fixa de camadas: platform < kit < instance < annotations
    - Traits são módulos sem estado, com schema explícito
    - Execução determinística: mesmas entradas, mesmos recursos
    - Falhas abortam a passada e ficam registradas (event log e Manifest)

Arquitetura em alto nível:
    - core.config       → camadas, anotações, schema e resolução
    - core.pipeline     → contrato de Trait, Environment, catálogo e recursos
    - core.engine       → planejamento, escolha de estratégia e execução
    - core.traceability → Manifest da passada
    - translators       → tradução de endpoints (schedule, autoscaling)
    - traits            → traits concretos e catálogo padrão

Limites explícitos:
    - Não aplica recursos em nenhum cluster
    - Não observa mudanças nem reconcilia continuamente
"""

__version__ = "0.1.0"
