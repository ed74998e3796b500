"""
Construção do catálogo padrão de traits.

O catálogo é fechado: a lista de traits é fixada aqui, na construção, e não
muda durante a vida do processo. Chamadores podem montar um catálogo com um
subconjunto (ou com traits próprios) passando `traits` explicitamente.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from traitflow.core.pipeline.registry import TraitCatalog
from traitflow.core.pipeline.trait import Trait

from .camel import CamelTrait
from .cron import CronTrait
from .deployment import DeploymentTrait
from .gc import GarbageCollectorTrait
from .keda import KedaTrait
from .knative_service import KnativeServiceTrait
from .owner import OwnerTrait
from .platform import PlatformTrait
from .service import ServiceTrait


def default_traits() -> List[Trait]:
    return [
        PlatformTrait(),
        CamelTrait(),
        CronTrait(),
        DeploymentTrait(),
        GarbageCollectorTrait(),
        KnativeServiceTrait(),
        ServiceTrait(),
        KedaTrait(),
        OwnerTrait(),
    ]


def build_catalog(traits: Optional[Iterable[Trait]] = None) -> TraitCatalog:
    """Catálogo sobre a lista padrão ou sobre os traits informados."""
    return TraitCatalog(default_traits() if traits is None else traits)
