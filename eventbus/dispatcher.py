"""
Event Bus - Dispatcher
========================
Public entry points. Validates arguments, then delegates to the Registry.

Publishing:
- publish(name, payload)     deliver now, on the caller's thread
- bg_publish(name, payload)  hand off to the background task queue

Subscribing:
- subscribe(pattern, listener, method_name)   method on an object
- subscribe(pattern, block=fn)                standalone callable
- subscribe(listener)                         bare object, method named
                                              after each event
- on(pattern)                                 decorator form of block
- register(listener)                          listener.events_map table

Every public method returns the bus so calls can be chained:

    bus.subscribe("order.placed", mailer, "send_receipt").publish(
        "order.placed", {"order_id": 7}
    )

Invalid calls raise InvalidArgument immediately and dispatch nothing.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping, Optional

from eventbus.conf import BusConfig
from eventbus.errors import (
    BackgroundNotConfigured,
    InvalidArgument,
    InvalidEventName,
    InvalidSubscription,
)
from eventbus.listeners import Listener, Payload
from eventbus.patterns import MATCH_ALL, EventName, Pattern, is_event_name, is_pattern
from eventbus.registry import ErrorHandler, Registry

logger = logging.getLogger("eventbus.dispatcher")


def _validate_event_name(event_name: Any) -> None:
    if not is_event_name(event_name):
        raise InvalidEventName(event_name)


def _validate_payload(payload: Any) -> None:
    if payload is not None and not isinstance(payload, Mapping):
        raise InvalidArgument(
            f"Payload must be a mapping, got {type(payload).__name__}."
        )


class EventBus:
    """
    Facade over a Registry.

    Args:
        registry: listener store to use; a fresh one is built when omitted.
        config:   bus settings; BusConfig() defaults when omitted.
    """

    def __init__(
        self,
        registry: Optional[Registry] = None,
        config: Optional[BusConfig] = None,
    ):
        self._config = config if config is not None else BusConfig()
        if registry is None:
            registry = Registry(isolate_payloads=self._config.isolate_payloads)
        self._registry = registry
        self._submitter: Optional[Any] = None

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def config(self) -> BusConfig:
        return self._config

    # ── Publishing ────────────────────────────────────────────

    def publish(
        self, event_name: EventName, payload: Optional[Mapping[str, Any]] = None
    ) -> "EventBus":
        """
        Announce an event to every matching listener.

        Raises:
            InvalidEventName:    event_name is not a str or Enum member.
            InvalidArgument:     payload is not a mapping.
            ErrorHandlerFailure: the installed error handler raised.
        """
        _validate_event_name(event_name)
        _validate_payload(payload)
        self._registry.announce(event_name, payload or {})
        return self

    def bg_publish(
        self, event_name: EventName, payload: Optional[Mapping[str, Any]] = None
    ) -> "EventBus":
        """
        Queue an event for delivery by a background worker.

        The worker re-enters the synchronous path on the registry this
        bus is attached under. Event name and payload travel as JSON, so
        listeners see text where the caller passed Enum members (see
        eventbus.background.serialize_payload).

        Raises:
            InvalidEventName:        event_name is not a str or Enum member.
            InvalidArgument:         payload is not a mapping.
            BackgroundNotConfigured: no submitter attached.
        """
        _validate_event_name(event_name)
        _validate_payload(payload)
        if self._submitter is None:
            raise BackgroundNotConfigured()
        self._submitter.submit(event_name, payload or {})
        logger.debug(f"Queued '{event_name}' for background delivery")
        return self

    def use_background(self, submitter: Optional[Any]) -> "EventBus":
        """Install the object bg_publish hands events to (None detaches)."""
        self._submitter = submitter
        return self

    # ── Subscribing ───────────────────────────────────────────

    def subscribe(
        self,
        pattern_or_listener: Any,
        listener: Any = None,
        method_name: Optional[str] = None,
        block: Optional[Callable[[Payload], Any]] = None,
    ) -> "EventBus":
        """
        Register a listener.

        Raises:
            InvalidSubscription: listener and block both given, neither
                                 given, a listener without a method name,
                                 a method name with a block, or extra
                                 arguments with a bare listener.
        """
        self._add(pattern_or_listener, listener, method_name, block)
        return self

    def on(self, pattern: Pattern) -> Callable[[Callable[[Payload], Any]], Callable[[Payload], Any]]:
        """
        Decorator form of subscribe(pattern, block=fn).

            @bus.on(re.compile(r"^order\\."))
            def audit(payload): ...
        """
        if not is_pattern(pattern):
            raise InvalidSubscription(f"{pattern!r} is not a valid pattern")

        def decorator(fn: Callable[[Payload], Any]) -> Callable[[Payload], Any]:
            self._add(pattern, None, None, fn)
            return fn

        return decorator

    def register(self, listener: Any) -> "EventBus":
        """
        Subscribe every (pattern → method name) entry of listener.events_map.

        Raises:
            InvalidSubscription: listener has no events_map, or an entry's
                                 pattern or method name is malformed.
        """
        events_map = getattr(listener, "events_map", None)
        if not isinstance(events_map, Mapping):
            raise InvalidSubscription(
                f"{type(listener).__name__} has no events_map mapping"
            )
        for pattern in events_map:
            if not is_pattern(pattern):
                raise InvalidSubscription(
                    f"events_map key {pattern!r} is not a valid pattern"
                )
        for pattern, method_name in events_map.items():
            self._add(pattern, listener, method_name, None)
        return self

    def _add(
        self,
        pattern_or_listener: Any,
        listener: Any,
        method_name: Optional[str],
        block: Optional[Callable[[Payload], Any]],
    ) -> Listener:
        if is_pattern(pattern_or_listener):
            pattern = pattern_or_listener
            if listener is not None and block is not None:
                raise InvalidSubscription("cannot give both a listener and a block")
            if listener is None and block is None:
                raise InvalidSubscription("must provide a listener or a block")
            if block is not None:
                if method_name is not None:
                    raise InvalidSubscription("cannot give a method name with a block")
                if not callable(block):
                    raise InvalidSubscription("block must be callable")
                return self._registry.add_block(pattern, block)
            if not method_name or not isinstance(method_name, str):
                raise InvalidSubscription("must supply a method name")
            return self._registry.add_method(pattern, listener, method_name)

        if pattern_or_listener is None:
            raise InvalidSubscription("must provide a listener or a block")
        if listener is not None or method_name is not None or block is not None:
            raise InvalidSubscription(
                "a bare listener cannot be given a method name, listener or block"
            )
        return self._registry.add_method(MATCH_ALL, pattern_or_listener, None)

    @contextmanager
    def with_temporary_subscriber(
        self,
        pattern: Pattern,
        listener: Any = None,
        method_name: Optional[str] = None,
        block: Optional[Callable[[Payload], Any]] = None,
    ) -> Iterator[Listener]:
        """
        Subscribe for the duration of a with-block.

            with bus.with_temporary_subscriber("job.done", probe, "record"):
                run_job()

        The subscription is removed on every exit path, including an
        exception raised inside the block. Only this subscription is
        removed; identical registrations made elsewhere stay.
        """
        temporary = self._add(pattern, listener, method_name, block)
        try:
            yield temporary
        finally:
            self._registry.remove(temporary)

    # ── Registry control ──────────────────────────────────────

    def on_error(self, handler: Optional[ErrorHandler]) -> "EventBus":
        """
        Install the error handler, replacing any previous one.

        It is called as handler(listener_identity, payload) where payload
        holds the event payload plus `event_name` and `error`. Only one
        handler is active at a time.
        """
        if handler is not None and not callable(handler):
            raise InvalidSubscription("error handler must be callable")
        self._registry.on_error(handler)
        return self

    def clear(self) -> "EventBus":
        """Remove all listeners. The error handler stays installed."""
        self._registry.clear()
        return self
