"""
Event Bus - Background Delivery
=================================
bg_publish hands (event_name, payload) to Django's task framework.
A worker later runs `deliver_event`, which re-enters the synchronous
announce path on the registry attached under the bus alias.

The queue only carries JSON, and this module coerces explicitly
before enqueueing rather than relying on a backend to do it:
- Enum event names become their textual form
- Enum keys and values become their textual form
- every key becomes a str
- tuples become lists
- datetimes, dates, Decimals, UUIDs go through DjangoJSONEncoder

So a listener fed by bg_publish can see text where the same listener
fed by publish sees the original objects. The synchronous path never
coerces.

Wiring (composition root):

    bus = EventBus(config=BusConfig.from_settings())
    attach(bus)
    bus.bg_publish("report.requested", {"report_id": 3})

This module touches Django settings at import time (the task is
validated against its backend), so import it only once settings are
configured.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from threading import Lock
from typing import Any, Dict, Mapping, Optional

from django.core.serializers.json import DjangoJSONEncoder
from django.tasks import task

from eventbus.errors import UnknownBus
from eventbus.patterns import EventName, event_text
from eventbus.registry import Registry

logger = logging.getLogger("eventbus.background")

_attached: Dict[str, Registry] = {}
_attached_lock = Lock()


# ══════════════════════════════════════════════════════════════
# SERIALIZATION
# ══════════════════════════════════════════════════════════════

class EventJSONEncoder(DjangoJSONEncoder):
    """DjangoJSONEncoder that also renders Enum members as text."""

    def default(self, o: Any) -> Any:
        if isinstance(o, Enum):
            return event_text(o)
        return super().default(o)


def _coerce(value: Any) -> Any:
    if isinstance(value, Enum):
        return event_text(value)
    if isinstance(value, Mapping):
        return {_coerce_key(k): _coerce(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_coerce(item) for item in value]
    return value


def _coerce_key(key: Any) -> str:
    if isinstance(key, Enum):
        return event_text(key)
    return str(key)


def serialize_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    JSON-safe copy of a payload, exactly as a worker will receive it.

    Raises:
        TypeError: a value has no JSON form (e.g. an arbitrary object).
    """
    return json.loads(json.dumps(_coerce(payload), cls=EventJSONEncoder))


# ══════════════════════════════════════════════════════════════
# ATTACHED REGISTRIES
# ══════════════════════════════════════════════════════════════

def connect(alias: str, registry: Registry) -> None:
    """Make `registry` reachable by workers under `alias`."""
    with _attached_lock:
        _attached[alias] = registry
    logger.info(f"Registry attached for background delivery: '{alias}'")


def detach(alias: str) -> None:
    with _attached_lock:
        removed = _attached.pop(alias, None)
    if removed is not None:
        logger.info(f"Registry detached: '{alias}'")


def resolve(alias: str) -> Registry:
    with _attached_lock:
        registry = _attached.get(alias)
    if registry is None:
        raise UnknownBus(alias)
    return registry


# ══════════════════════════════════════════════════════════════
# WORKER TASK
# ══════════════════════════════════════════════════════════════

@task
def deliver_event(bus_alias: str, event_name: str, payload: Dict[str, Any]) -> int:
    """
    Worker side of bg_publish: announce on the attached registry.

    Returns the number of listener failures, which the task backend
    records as the task's return value.
    """
    report = resolve(bus_alias).announce(event_name, payload)
    return report.failed


# ══════════════════════════════════════════════════════════════
# SUBMITTER
# ══════════════════════════════════════════════════════════════

class BackgroundSubmitter:
    """Enqueues events for one bus alias on one backend/queue."""

    def __init__(
        self,
        bus_alias: str = "default",
        backend: str = "default",
        queue_name: str = "default",
    ):
        self.bus_alias = bus_alias
        self.backend = backend
        self.queue_name = queue_name

    def submit(self, event_name: EventName, payload: Mapping[str, Any]):
        """Serialize and enqueue. Returns the backend's TaskResult."""
        queued = deliver_event.using(backend=self.backend, queue_name=self.queue_name)
        result = queued.enqueue(
            self.bus_alias, event_text(event_name), serialize_payload(payload)
        )
        logger.debug(
            f"Enqueued '{event_name}' on {self.backend}/{self.queue_name} "
            f"(bus: {self.bus_alias}, task: {result.id})"
        )
        return result


def attach(
    bus: Any,
    alias: Optional[str] = None,
    backend: Optional[str] = None,
    queue_name: Optional[str] = None,
) -> BackgroundSubmitter:
    """
    Connect `bus` for background delivery and enable its bg_publish.

    Omitted arguments come from the bus's BusConfig.
    """
    config = bus.config
    submitter = BackgroundSubmitter(
        bus_alias=alias or config.bus_alias,
        backend=backend or config.task_backend,
        queue_name=queue_name or config.task_queue,
    )
    connect(submitter.bus_alias, bus.registry)
    bus.use_background(submitter)
    return submitter
