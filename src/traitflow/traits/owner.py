"""
Trait canônico: owner.

Marca todos os recursos gerados como pertencentes à integração
(`ownerReferences`) e propaga anotações e labels transferíveis.

Config esperada (exemplo):
    traits:
      owner:
        target-annotations: [team/owner]
        target-labels: [app.kubernetes.io/part-of]

Regras:
    - Só anotações/labels listadas são propagadas
    - Anotações com prefixo `kubectl.kubernetes.io/` nunca são propagadas
    - Valores já presentes no recurso não são sobrescritos
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List

from traitflow.core.config.schema import PropertySpec, PropertyType, TraitSchema
from traitflow.core.pipeline.context import Environment
from traitflow.core.pipeline.trait import ConfigureResult, Trait, disabled, enabled, explicitly_enabled, trait_props

from .util import INTEGRATION_API_VERSION, labels_of


NON_TRANSFERABLE_PREFIX = "kubectl.kubernetes.io/"

SCHEMA = TraitSchema.of(
    "owner",
    PropertySpec("target-annotations", PropertyType.STRING_LIST),
    PropertySpec("target-labels", PropertyType.STRING_LIST),
)


def transferable(source: Dict[str, str], keys: List[str]) -> Dict[str, str]:
    return {
        k: source[k]
        for k in keys
        if k in source and not k.startswith(NON_TRANSFERABLE_PREFIX)
    }


@dataclass
class OwnerTrait(Trait):
    id: str = "owner"
    order: int = 2500
    requires_platform: bool = True
    schema: ClassVar[TraitSchema] = SCHEMA

    def configure(self, env: Environment) -> ConfigureResult:
        if explicitly_enabled(env, self.id) is False:
            return disabled(self.id, message="explicitly disabled")
        return enabled(self.id)

    def apply(self, env: Environment) -> None:
        props = trait_props(env, self)
        integration = env.integration
        annotations = transferable(integration.annotations, props.get("target-annotations") or [])
        labels = transferable(integration.labels, props.get("target-labels") or [])
        reference = {
            "apiVersion": INTEGRATION_API_VERSION,
            "kind": "Integration",
            "name": integration.name,
            "uid": integration.uid,
            "controller": True,
            "blockOwnerDeletion": True,
        }

        def _own(resource: Dict[str, Any]) -> None:
            meta = resource.setdefault("metadata", {})
            meta["ownerReferences"] = [dict(reference)]
            if annotations:
                current = meta.setdefault("annotations", {})
                for k, v in annotations.items():
                    current.setdefault(k, v)
            if labels:
                current_labels = labels_of(resource)
                for k, v in labels.items():
                    current_labels.setdefault(k, v)

        env.resources.visit(_own)
        env.log(trait_id=self.id, level="info", message="owner references set", resources=len(env.resources))
