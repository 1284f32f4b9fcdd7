"""
Event Bus - Configuration
===========================
Bus behaviour that a host may tune without touching code.

Read from the Django setting EVENT_BUS (a dict), e.g.:

    EVENT_BUS = {
        "ISOLATE_PAYLOADS": False,
        "TASK_BACKEND": "default",
        "TASK_QUEUE": "default",
        "BUS_ALIAS": "default",
    }

Every key is optional. Unknown keys are rejected so typos are loud.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from django.core.exceptions import ImproperlyConfigured

SETTINGS_NAME = "EVENT_BUS"

# EVENT_BUS key -> BusConfig field
_SETTING_FIELDS = {
    "ISOLATE_PAYLOADS": "isolate_payloads",
    "TASK_BACKEND": "task_backend",
    "TASK_QUEUE": "task_queue",
    "BUS_ALIAS": "bus_alias",
}


@dataclass(frozen=True)
class BusConfig:
    """
    Per-bus settings.

    isolate_payloads: deep-copy the payload for every listener, so a
                      listener mutating its argument is invisible to the
                      listeners after it. Off by default: all listeners
                      share one payload dict.
    task_backend:     django.tasks backend alias used by bg_publish.
    task_queue:       queue name passed to that backend.
    bus_alias:        name the bus is attached under for background
                      delivery; workers resolve the registry by it.
    """

    isolate_payloads: bool = False
    task_backend: str = "default"
    task_queue: str = "default"
    bus_alias: str = "default"

    def __post_init__(self) -> None:
        if not isinstance(self.isolate_payloads, bool):
            raise ImproperlyConfigured(
                f"{SETTINGS_NAME}['ISOLATE_PAYLOADS'] must be a bool, "
                f"got {type(self.isolate_payloads).__name__}."
            )
        for name in ("task_backend", "task_queue", "bus_alias"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ImproperlyConfigured(
                    f"BusConfig.{name} must be a non-empty string, got {value!r}."
                )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "BusConfig":
        unknown = sorted(set(values) - set(_SETTING_FIELDS))
        if unknown:
            raise ImproperlyConfigured(
                f"Unknown {SETTINGS_NAME} keys: {', '.join(unknown)}."
            )
        kwargs: Dict[str, Any] = {
            _SETTING_FIELDS[key]: value for key, value in values.items()
        }
        return cls(**kwargs)

    @classmethod
    def from_settings(cls, settings: Optional[Any] = None) -> "BusConfig":
        """Build from Django settings. Missing EVENT_BUS means defaults."""
        if settings is None:
            from django.conf import settings
        values = getattr(settings, SETTINGS_NAME, None) or {}
        if not isinstance(values, Mapping):
            raise ImproperlyConfigured(f"{SETTINGS_NAME} must be a dict.")
        return cls.from_mapping(values)
