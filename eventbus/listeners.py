"""
Event Bus - Listeners
=======================
A listener is a (pattern, target) pair that knows how to react to a
matching event.

Variants:
- MethodListener: calls a named method on a target object. Without a
  method name it runs in bare-object mode and derives the method from
  the event name.
- BlockListener: calls a standalone callable.

Listeners never catch. Whatever the target raises goes back to the
registry's dispatch loop, which isolates it.

Listeners compare by identity: two registrations of the same target
and pattern are two entries, and removal takes out exactly one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

from eventbus.patterns import EventName, Pattern, event_text, matches

Payload = Dict[str, Any]


class Listener(Protocol):
    """Contract shared by every listener variant."""

    pattern: Pattern

    def attempt(self, event_name: EventName, payload: Payload) -> None:
        """Deliver if the pattern matches. May raise."""
        ...  # pragma: no cover

    def identity(self) -> Any:
        """The object reported to the error handler when delivery fails."""
        ...  # pragma: no cover

    def describe(self) -> str:
        """Short label for log lines."""
        ...  # pragma: no cover


def resolve_handler(target: Any, name: str) -> Optional[Callable[..., Any]]:
    """
    Look up a public handler method on `target` by name.

    Returns None when the name is private/dunder, missing, or not callable.
    Bare-object subscriptions use this to skip events the target does not
    handle instead of failing.
    """
    if not name or name.startswith("_"):
        return None
    handler = getattr(target, name, None)
    if not callable(handler):
        return None
    return handler


@dataclass(eq=False)
class MethodListener:
    pattern: Pattern
    target: Any
    method_name: Optional[str] = None

    @property
    def name_derived(self) -> bool:
        return self.method_name is None

    def attempt(self, event_name: EventName, payload: Payload) -> None:
        if not matches(self.pattern, event_name):
            return

        if self.method_name is not None:
            # Explicit method: a missing one is the listener's failure.
            getattr(self.target, self.method_name)(payload)
            return

        handler = resolve_handler(self.target, event_text(payload["event_name"]))
        if handler is not None:
            handler(payload)

    def identity(self) -> Any:
        return self.target

    def describe(self) -> str:
        method = self.method_name or "<event name>"
        return f"{type(self.target).__name__}.{method}"


@dataclass(eq=False)
class BlockListener:
    pattern: Pattern
    block: Callable[[Payload], Any]

    def attempt(self, event_name: EventName, payload: Payload) -> None:
        if matches(self.pattern, event_name):
            self.block(payload)

    def identity(self) -> Any:
        return self.block

    def describe(self) -> str:
        return getattr(self.block, "__qualname__", repr(self.block))
