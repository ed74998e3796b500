"""
Exceções canônicas da camada de configuração do traitflow.

Este módulo define a hierarquia oficial de exceções utilizadas durante
o carregamento de camadas, a decodificação de propriedades de traits e a
resolução da configuração final.

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Erros de configuração são sempre fatais e abortam a resolução
      antes que qualquer trait execute
    - Mensagens de erro apontam a camada, o trait e a propriedade

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa erro de execução de trait

Limites explícitos:
    - Não executa pipeline
    - Não realiza fallback ou recovery
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do traitflow.

    Todas as exceções levantadas durante carregamento de camadas,
    decodificação e merge de configuração devem herdar desta classe.

    Limites explícitos:
        - Não representa erro de execução do pipeline
    """


class ConfigDecodeError(ConfigError):
    """
    Exceção levantada quando um valor de uma camada não pode ser
    convertido para o schema tipado do trait.

    Exemplos:
        - propriedade desconhecida para um trait conhecido
        - valor "abc" para uma propriedade inteira
        - array JSON inválido (`["a", `)
        - referência `{{configmap:...}}` não resolvível

    Invariantes:
        - Nenhuma configuração parcial é devolvida ao chamador
    """


class MalformedAnnotationError(ConfigDecodeError):
    """
    Exceção levantada quando uma chave de anotação com o prefixo de traits
    não segue a gramática `<prefixo><traitId>.<propriedade>`.

    Decisões arquiteturais:
        - Uma chave estruturalmente inválida invalida toda a resolução,
          mesmo que as demais anotações sejam válidas
        - Ids de trait desconhecidos NÃO são erro de gramática
    """


class LayerNotFoundError(ConfigError):
    """
    Exceção levantada quando o arquivo de uma camada de configuração
    não é encontrado no caminho especificado.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo de configuração
    não é suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Exceção levantada quando o conteúdo raiz de uma camada
    não é um dicionário (`dict`).
    """
