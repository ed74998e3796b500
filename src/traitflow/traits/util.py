"""Helpers compartilhados pelos traits para montar recursos."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from traitflow.core.pipeline.context import Environment
from traitflow.core.pipeline.resources import Resource
from traitflow.translators.uri import get_component


INTEGRATION_API_VERSION = "camel.apache.org/v1"

HTTP_COMPONENTS = ("platform-http", "http", "https", "rest", "servlet", "undertow", "netty-http")


def object_meta(env: Environment, name: Optional[str] = None) -> Dict[str, Any]:
    return {
        "name": name or env.integration.name,
        "namespace": env.integration.namespace,
        "labels": env.integration_labels(),
    }


def labels_of(resource: Resource) -> Dict[str, str]:
    meta = resource.setdefault("metadata", {})
    labels = meta.get("labels")
    if not isinstance(labels, dict):
        labels = {}
        meta["labels"] = labels
    return labels


def exposes_http(env: Environment) -> bool:
    return any(get_component(uri) in HTTP_COMPONENTS for uri in env.integration.from_uris)


def unique(values: List[str]) -> List[str]:
    out: List[str] = []
    for v in values:
        if v and v not in out:
            out.append(v)
    return out
