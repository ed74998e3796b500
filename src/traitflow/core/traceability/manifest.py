"""
Manifest v1 — rastreabilidade de passadas de resolução do traitflow.

Este módulo define a estrutura e as operações canônicas do Manifest de
resolução, o artefato que registra o que uma passada decidiu e produziu.

O Manifest consolida, de forma determinística e auditável:
    - metadados da passada (run_id, integração, início)
    - hash da configuração resolvida e origem das camadas
    - estado final de cada trait
    - Event Log ordenado de eventos explícitos
    - resumo da saída (digest de recursos, estratégia, perfil)

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - Toda mutação ocorre por chamadas explícitas da API
    - A ordem do Event Log reflete a ordem real de execução
    - O Manifest é serializável e reconstruível (round-trip)

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - O formato de persistência é JSON determinístico
    - A API aceita o Manifest como objeto ou como dict serializado

Limites explícitos:
    - Não executa pipeline
    - Não decide políticas de execução
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Normaliza um timestamp para timezone-aware em UTC (naive é assumido UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


@dataclass
class ResolutionManifest:
    """
    Manifest v1 — registro de uma passada de resolução e execução.

    Campos principais:
        - run: metadados da passada (run_id, started_at, integration, traitflow_version)
        - inputs: hash da configuração resolvida e fontes das camadas
        - traits: estado final de cada trait, indexado por trait_id
        - events: Event Log ordenado
        - outputs: resumo da saída, preenchido em `pass_finished`/`pass_failed`

    Invariantes:
        - `traits` é sempre um dicionário indexado por trait_id
        - `events` é sempre uma lista ordenada
        - A estrutura completa é serializável
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    traits: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)
    outputs: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Cópia serializável e independente do estado interno."""
        return {
            "run": dict(self.run),
            "inputs": json.loads(json.dumps(self.inputs)),
            "traits": {k: dict(v) for k, v in self.traits.items()},
            "events": [dict(e) for e in self.events],
            "outputs": json.loads(json.dumps(self.outputs)),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResolutionManifest":
        """Reconstrução permissiva: campos ausentes viram estruturas vazias."""
        return cls(
            run=dict(data.get("run", {})),
            inputs=dict(data.get("inputs", {})),
            traits={k: dict(v) for k, v in (data.get("traits", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
            outputs=dict(data.get("outputs", {}) or {}),
        )

    def trait_status(self, trait_id: str) -> Optional[str]:
        return (self.traits.get(trait_id) or {}).get("status")


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    integration: str,
    traitflow_version: str,
    layer_sources: Optional[List[str]] = None,
) -> ResolutionManifest:
    """
    Cria o Manifest inicial de uma passada.

    ⚠️ Importante: esta função **não emite eventos implicitamente**.
    O hash de configuração é preenchido por `record_config_hash`, depois
    que a resolução acontece.
    """
    started_at = _ensure_tzaware_utc(started_at)

    return ResolutionManifest(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "integration": integration,
            "traitflow_version": traitflow_version,
        },
        inputs={
            "config_hash": None,
            "layers": list(layer_sources or []),
        },
        traits={},
        events=[],
        outputs={},
    )


def _get_manifest(
    manifest: Union[ResolutionManifest, Dict[str, Any]],
) -> Tuple[ResolutionManifest, bool]:
    if isinstance(manifest, ResolutionManifest):
        return manifest, False
    return ResolutionManifest.from_dict(manifest), True


def _sync(manifest: Union[ResolutionManifest, Dict[str, Any]], m: ResolutionManifest, is_dict: bool) -> None:
    if is_dict:
        manifest.clear()  # type: ignore[union-attr]
        manifest.update(m.to_dict())  # type: ignore[union-attr]


def add_event(
    manifest: Union[ResolutionManifest, Dict[str, Any]],
    *,
    event_type: str,
    ts: datetime,
    trait_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Adiciona um evento explícito ao Event Log do Manifest.

    Invariantes:
        - Cada chamada adiciona exatamente um evento
        - Eventos não são reordenados ou deduplicados
    """
    ts = _ensure_tzaware_utc(ts)
    m, is_dict = _get_manifest(manifest)

    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if trait_id is not None:
        ev["trait_id"] = trait_id
    if payload is not None:
        ev["payload"] = payload

    m.events.append(ev)
    _sync(manifest, m, is_dict)


def record_config_hash(
    manifest: Union[ResolutionManifest, Dict[str, Any]],
    *,
    config_hash: str,
) -> None:
    m, is_dict = _get_manifest(manifest)
    m.inputs["config_hash"] = config_hash
    _sync(manifest, m, is_dict)


def trait_finished(
    manifest: Union[ResolutionManifest, Dict[str, Any]],
    *,
    trait_id: str,
    ts: datetime,
    status: str,
    reason: str = "",
    message: str = "",
) -> None:
    """
    Registra o estado final de um trait (applied, disabled ou skipped).

    Um evento `trait_<status>` é adicionado ao Event Log.
    """
    ts = _ensure_tzaware_utc(ts)
    m, is_dict = _get_manifest(manifest)

    s = m.traits.setdefault(trait_id, {"trait_id": trait_id})
    s.update(
        {
            "status": status,
            "reason": reason,
            "message": message,
            "finished_at": _iso(ts),
        }
    )

    add_event(m, event_type=f"trait_{status}", ts=ts, trait_id=trait_id, payload={"reason": reason})
    _sync(manifest, m, is_dict)


def trait_failed(
    manifest: Union[ResolutionManifest, Dict[str, Any]],
    *,
    trait_id: str,
    ts: datetime,
    error: Dict[str, Any],
) -> None:
    """Marca um trait como FAILED, associando o payload de erro serializado."""
    ts = _ensure_tzaware_utc(ts)
    m, is_dict = _get_manifest(manifest)

    s = m.traits.setdefault(trait_id, {"trait_id": trait_id})
    s.update(
        {
            "status": "failed",
            "finished_at": _iso(ts),
            "error": error,
        }
    )

    add_event(m, event_type="trait_failed", ts=ts, trait_id=trait_id, payload={"error": error})
    _sync(manifest, m, is_dict)


def pass_finished(
    manifest: Union[ResolutionManifest, Dict[str, Any]],
    *,
    ts: datetime,
    outputs: Dict[str, Any],
) -> None:
    """Registra o resumo da saída de uma passada concluída."""
    ts = _ensure_tzaware_utc(ts)
    m, is_dict = _get_manifest(manifest)

    m.outputs = dict(outputs)
    m.outputs["finished_at"] = _iso(ts)
    add_event(m, event_type="pass_finished", ts=ts, payload={"executed": list(outputs.get("executed_traits", []))})
    _sync(manifest, m, is_dict)


def pass_failed(
    manifest: Union[ResolutionManifest, Dict[str, Any]],
    *,
    ts: datetime,
    aborted_by: str,
    error: Dict[str, Any],
) -> None:
    """Registra o aborto de uma passada. A saída parcial não é confiável."""
    ts = _ensure_tzaware_utc(ts)
    m, is_dict = _get_manifest(manifest)

    m.outputs = {
        "aborted_by": aborted_by,
        "partial_output": True,
        "finished_at": _iso(ts),
    }
    add_event(m, event_type="pass_failed", ts=ts, payload={"aborted_by": aborted_by, "error": error})
    _sync(manifest, m, is_dict)


def save_manifest(manifest: Union[ResolutionManifest, Dict[str, Any]], path: Path) -> None:
    """
    Persiste um Manifest em disco no formato JSON.

    Decisões arquiteturais:
        - A ordenação de chaves é estável (`sort_keys=True`)
        - Diretórios intermediários são criados automaticamente
    """
    data = manifest.to_dict() if isinstance(manifest, ResolutionManifest) else manifest
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")


def load_manifest(path: Path) -> ResolutionManifest:
    data = json.loads(path.read_text(encoding="utf-8"))
    return ResolutionManifest.from_dict(data)
