"""
Event Bus - Public API
========================
In-process publish/subscribe. Publishers announce named events,
subscribers select them by pattern. Neither holds the other.

Background delivery lives in eventbus.background and needs Django
settings; it is not imported here.
"""

from eventbus.conf import BusConfig
from eventbus.dispatcher import EventBus
from eventbus.errors import (
    BackgroundNotConfigured,
    ErrorHandlerFailure,
    EventBusError,
    InvalidArgument,
    InvalidEventName,
    InvalidSubscription,
    ListenerFailure,
    UnknownBus,
)
from eventbus.listeners import BlockListener, Listener, MethodListener
from eventbus.patterns import MATCH_ALL, event_text, matches
from eventbus.registry import DispatchReport, Registry

__all__ = [
    "EventBus",
    "Registry",
    "BusConfig",
    "DispatchReport",
    "Listener",
    "MethodListener",
    "BlockListener",
    "MATCH_ALL",
    "matches",
    "event_text",
    "EventBusError",
    "InvalidArgument",
    "InvalidEventName",
    "InvalidSubscription",
    "ErrorHandlerFailure",
    "ListenerFailure",
    "BackgroundNotConfigured",
    "UnknownBus",
]
