"""
Trait canônico: camel.

Responsabilidades:
    - Fixar a versão de runtime usada pela integração
    - Gerar o ConfigMap `<integração>-application-properties` a partir das
      propriedades da integração e da lista `properties` do trait

Config esperada (exemplo):
    traits:
      camel:
        runtime-version: "3.2.3"
        properties:
          - camel.main.name=demo

Regras:
    - Propriedades da integração entram primeiro, ordenadas por chave
    - Entradas de `properties` entram depois, na ordem declarada
    - Sem nenhuma propriedade, nenhum ConfigMap é gerado
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, List

from traitflow.core.config.schema import PropertySpec, PropertyType, TraitSchema
from traitflow.core.pipeline.context import Environment
from traitflow.core.pipeline.trait import ConfigureResult, Trait, disabled, enabled, explicitly_enabled, trait_props

from .util import object_meta


DEFAULT_RUNTIME_VERSION = "3.2.3"
RUNTIME_VERSION_LABEL = "camel.apache.org/runtime.version"
PROPERTIES_FILE = "application.properties"

SCHEMA = TraitSchema.of(
    "camel",
    PropertySpec("runtime-version", PropertyType.STRING, description="Versão do runtime"),
    PropertySpec("properties", PropertyType.STRING_LIST, description="Propriedades extras no formato chave=valor"),
)


def _property_lines(env: Environment, extra: List[str]) -> List[str]:
    props = env.integration.properties
    lines = [f"{k}={props[k]}" for k in sorted(props)]
    for entry in extra:
        if "=" not in entry:
            raise ValueError(f"camel property must be in the form key=value, got {entry!r}")
        lines.append(entry)
    return lines


@dataclass
class CamelTrait(Trait):
    id: str = "camel"
    order: int = 200
    requires_platform: bool = True
    schema: ClassVar[TraitSchema] = SCHEMA

    def configure(self, env: Environment) -> ConfigureResult:
        if explicitly_enabled(env, self.id) is False:
            return disabled(self.id, message="explicitly disabled")

        props = trait_props(env, self)
        state = env.state(self.id)
        state["runtime_version"] = props.get("runtime-version") or DEFAULT_RUNTIME_VERSION
        state["properties"] = _property_lines(env, props.get("properties") or [])
        return enabled(self.id, message=state["runtime_version"])

    def apply(self, env: Environment) -> None:
        state = env.state(self.id)
        lines = state["properties"]
        if not lines:
            return

        meta = object_meta(env, f"{env.integration.name}-application-properties")
        meta["labels"][RUNTIME_VERSION_LABEL] = state["runtime_version"]
        env.resources.add({
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": meta,
            "data": {PROPERTIES_FILE: "\n".join(lines)},
        })
        env.log(trait_id=self.id, level="info", message="application properties generated", count=len(lines))
