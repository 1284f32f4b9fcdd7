"""
Event Bus - Errors
====================
Error types for the publish/subscribe layer.

Argument errors surface to the caller immediately and nothing is
dispatched. Listener failures never surface; they are recorded and
routed to the error handler.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class EventBusError(Exception):
    """Base error for Event Bus operations."""
    pass


class InvalidArgument(EventBusError, ValueError):
    """Malformed call to publish or subscribe."""
    pass


class InvalidEventName(InvalidArgument):
    """Event name is neither a string nor an Enum member."""

    def __init__(self, event_name: Any):
        self.event_name = event_name
        super().__init__(
            f"Event name must be a string or Enum member, "
            f"got {type(event_name).__name__}: {event_name!r}."
        )


class InvalidSubscription(InvalidArgument):
    """Subscription arguments are missing or contradict each other."""
    pass


class ErrorHandlerFailure(EventBusError):
    """
    The installed error handler raised while reporting a listener failure.

    The original listener error is kept on `listener_error`; the handler's
    own exception is chained as `__cause__`.
    """

    def __init__(self, event_name: Any, listener_error: BaseException):
        self.event_name = event_name
        self.listener_error = listener_error
        super().__init__(
            f"Error handler failed while reporting "
            f"{type(listener_error).__name__} for event '{event_name}'."
        )


class BackgroundNotConfigured(EventBusError):
    """bg_publish called on a bus with no background submitter attached."""

    def __init__(self):
        super().__init__(
            "Background publish requires a submitter; "
            "call eventbus.background.attach(bus) first."
        )


class UnknownBus(EventBusError):
    """No registry is attached under the requested alias."""

    def __init__(self, alias: str):
        self.alias = alias
        super().__init__(f"No event bus attached under alias '{alias}'.")


@dataclass(frozen=True)
class ListenerFailure:
    """A listener raised during delivery. Recorded, never re-raised."""

    source: Any
    error: BaseException

    @property
    def error_type(self) -> str:
        return type(self.error).__name__
