"""
Mapeamento de URIs de endpoints para triggers de autoscaling.

Cada scheme conhecido possui uma entrada em `SCALER_MAPPINGS`:
    - tipo do scaler
    - chave onde o segmento de caminho da URI é colocado (opcional)
    - mapa de renomeação de parâmetros da query

Parâmetros fora do mapa de renomeação são descartados. Schemes sem
entrada não produzem trigger (não é erro).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from .uri import parse_uri


@dataclass(frozen=True)
class ScalerMapping:
    scaler_type: str
    path_key: Optional[str] = None
    params: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ScalerTrigger:
    type: str
    metadata: Dict[str, str] = field(default_factory=dict)
    authentication_secret: str = ""

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {"type": self.type, "metadata": dict(self.metadata)}
        if self.authentication_secret:
            out["authentication-secret"] = self.authentication_secret
        return out


SCALER_MAPPINGS: Dict[str, ScalerMapping] = {
    "kafka": ScalerMapping(
        scaler_type="kafka",
        path_key="topic",
        params={"brokers": "bootstrapServers", "groupId": "consumerGroup"},
    ),
    "aws2-sqs": ScalerMapping(
        scaler_type="aws-sqs-queue",
        path_key="queueURL",
        params={"region": "awsRegion"},
    ),
    "rabbitmq": ScalerMapping(
        scaler_type="rabbitmq",
        params={"queue": "queueName", "addresses": "host"},
    ),
}


def map_trigger(
    uri: str,
    metadata_override: Optional[Mapping[str, str]] = None,
) -> Optional[ScalerTrigger]:
    """
    Converte uma URI em trigger; None para schemes sem scaler.

    Raises:
        MalformedURIError: Se a query da URI possuir codificação inválida.
    """
    parsed = parse_uri(uri)
    mapping = SCALER_MAPPINGS.get(parsed.scheme)
    if mapping is None:
        return None

    metadata: Dict[str, str] = {}
    if mapping.path_key and parsed.path:
        metadata[mapping.path_key] = parsed.path
    for name, value in parsed.params.items():
        renamed = mapping.params.get(name)
        if renamed is not None:
            metadata[renamed] = value

    for k, v in (metadata_override or {}).items():
        metadata[k] = v

    return ScalerTrigger(type=mapping.scaler_type, metadata=metadata)


def collect_triggers(
    manual: Iterable[ScalerTrigger],
    uris: Iterable[str],
    metadata_overrides: Optional[Mapping[str, Mapping[str, str]]] = None,
) -> List[ScalerTrigger]:
    """
    Concatena triggers manuais e descobertos, manuais primeiro.

    `metadata_overrides` é indexado pelo scheme da URI descoberta. Não há
    deduplicação.
    """
    overrides = metadata_overrides or {}
    triggers: List[ScalerTrigger] = list(manual)
    for uri in uris:
        scheme = parse_uri(uri).scheme
        trigger = map_trigger(uri, overrides.get(scheme))
        if trigger is not None:
            triggers.append(trigger)
    return triggers
