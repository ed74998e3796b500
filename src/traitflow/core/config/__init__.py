"""
Camada de configuração do traitflow.

Este pacote contém as estruturas responsáveis por carregar, decodificar,
mesclar e identificar a configuração de traits de uma passada.

A configuração de traits é:
    - em camadas (plataforma, kit, instância, anotações)
    - tipada por schemas explícitos
    - determinística

Responsabilidades do pacote:
    - Carregamento de camadas a partir de arquivos YAML/JSON
    - Gramática de anotações
    - Decodificação tipada com coerção fraca
    - Resolução por precedência com merge por folha
    - Hash canônico para rastreabilidade

Limites explícitos:
    - Não executa traits
    - Não interage com o Engine diretamente
"""

from .errors import (
    ConfigDecodeError,
    ConfigError,
    InvalidConfigRootTypeError,
    LayerNotFoundError,
    MalformedAnnotationError,
    UnsupportedConfigFormatError,
)
from .layers import ConfigLayer, LayerKind
from .resolver import CapabilityConfig, ConfigResolver
from .schema import PropertySpec, PropertyType, TraitSchema

__all__ = [
    "CapabilityConfig",
    "ConfigDecodeError",
    "ConfigError",
    "ConfigLayer",
    "ConfigResolver",
    "InvalidConfigRootTypeError",
    "LayerKind",
    "LayerNotFoundError",
    "MalformedAnnotationError",
    "PropertySpec",
    "PropertyType",
    "TraitSchema",
    "UnsupportedConfigFormatError",
]
