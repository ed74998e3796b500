"""
Tradução de endpoints periódicos para um schedule cron comum.

Componentes suportados:
    - timer  → `period` em milissegundos ou no formato `XhYmZs`; aceito
      apenas se for um número inteiro de segundos e expressável como
      cadência de horas divisora de 24 ou de minutos divisora de 60.
      Rejeitado quando `delay`, `repeatCount` ou `time` estão presentes.
    - quartz → parâmetro `cron`; rejeitado com `fireNow`, `customCalendar`
      ou `startDelayedSeconds`.
    - cron   → parâmetro `schedule`.

Normalização para o cron de 5 campos:
    - com mais de 5 campos, o campo de segundos só é descartado se for "0"
    - com 6 campos terminando em `*` ou `?`, o campo de ano é descartado
    - o resultado precisa ter exatamente 5 campos

Consenso entre várias URIs:
    - todas traduzem para o mesmo schedule (com `?` equivalente a `*`),
      ou pertencem à lista de componentes passivos
    - qualquer divergência, URI não traduzível ou componente não passivo
      anula o consenso (retorna None, nunca uma resposta parcial)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Optional, Tuple

from .uri import MalformedURIError, get_component, parse_uri


TIMER = "timer"
QUARTZ = "quartz"
CRON = "cron"

PASSIVE_COMPONENTS: Tuple[str, ...] = ("direct", "seda", "vm", "disruptor", "stub")

_PERIOD_MILLIS = re.compile(r"^[0-9]+$")
_PERIOD_HUMAN = re.compile(r"^(?:([0-9]+)h)?(?:([0-9]+)m)?(?:([0-9]+)s)?$")


@dataclass(frozen=True)
class CronInfo:
    """Schedule cron de 5 campos e os componentes que o originaram."""

    schedule: str
    components: Tuple[str, ...] = field(default_factory=tuple)

    def with_components(self, *components: str) -> "CronInfo":
        merged = list(self.components)
        for c in components:
            if c not in merged:
                merged.append(c)
        return CronInfo(schedule=self.schedule, components=tuple(merged))


def to_kubernetes_cron_schedule(cron: str) -> Optional[str]:
    parts = cron.split(" ")

    if len(parts) > 5:
        if parts[0] != "0":
            return None
        parts = parts[1:]

    if len(parts) == 6 and parts[5] in ("*", "?"):
        parts = parts[:5]

    if len(parts) == 5:
        return " ".join(parts)
    return None


def cron_equivalent(a: str, b: str) -> bool:
    return a.replace("?", "*") == b.replace("?", "*")


def _period_millis(period: str) -> Optional[int]:
    if _PERIOD_MILLIS.match(period):
        return int(period)
    m = _PERIOD_HUMAN.match(period)
    if m is None:
        return None
    hours, minutes, seconds = (int(g) if g else 0 for g in m.groups())
    return hours * 3_600_000 + minutes * 60_000 + seconds * 1_000


def timer_to_cron(uri: str) -> Optional[CronInfo]:
    params = parse_uri(uri).params
    if params.get("delay") or params.get("repeatCount") or params.get("time"):
        return None

    period = _period_millis(params.get("period", ""))
    if not period or period % 1000 != 0:
        return None
    seconds = period // 1000

    if seconds % 3600 == 0:
        hours = seconds // 3600
        if hours == 24:
            return CronInfo("0 0 * * ?", (TIMER,))
        if hours < 24 and 24 % hours == 0:
            return CronInfo(f"0 0/{hours} * * ?", (TIMER,))
    elif seconds % 60 == 0:
        minutes = seconds // 60
        if minutes < 60 and 60 % minutes == 0:
            return CronInfo(f"0/{minutes} * * * ?", (TIMER,))
    return None


def quartz_to_cron(uri: str) -> Optional[CronInfo]:
    params = parse_uri(uri).params
    if params.get("fireNow") or params.get("customCalendar") or params.get("startDelayedSeconds"):
        return None
    normalized = to_kubernetes_cron_schedule(params.get("cron", ""))
    if normalized is None:
        return None
    return CronInfo(normalized, (QUARTZ,))


def cron_to_cron(uri: str) -> Optional[CronInfo]:
    normalized = to_kubernetes_cron_schedule(parse_uri(uri).params.get("schedule", ""))
    if normalized is None:
        return None
    return CronInfo(normalized, (CRON,))


SUPPORTED_COMPONENTS: Dict[str, Callable[[str], Optional[CronInfo]]] = {
    TIMER: timer_to_cron,
    QUARTZ: quartz_to_cron,
    CRON: cron_to_cron,
}


def cron_for_uri(uri: str) -> Optional[CronInfo]:
    """Traduz uma única URI; None se o componente não é suportado ou a URI não traduz."""
    extractor = SUPPORTED_COMPONENTS.get(get_component(uri))
    if extractor is None:
        return None
    try:
        return extractor(uri)
    except MalformedURIError:
        return None


def global_schedule(
    uris: Iterable[str],
    passive_components: Iterable[str] = PASSIVE_COMPONENTS,
) -> Optional[CronInfo]:
    """
    Consenso de schedule entre URIs periódicas.

    URIs de componentes passivos são neutras; qualquer outro componente não
    suportado, ou URI que não traduz, anula o consenso. Sem nenhuma URI
    periódica não há consenso.

    O schedule retornado é a forma canônica da primeira URI traduzida; os
    componentes são acumulados sem repetição, na ordem de encontro.
    """
    passive = set(passive_components)
    result: Optional[CronInfo] = None
    for uri in uris:
        comp = get_component(uri)
        if comp not in SUPPORTED_COMPONENTS and comp in passive:
            continue
        info = cron_for_uri(uri)
        if info is None:
            return None
        if result is None:
            result = info
            continue
        if not cron_equivalent(result.schedule, info.schedule):
            return None
        result = result.with_components(*info.components)
    return result
