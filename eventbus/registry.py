"""
Event Bus - Listener Registry
===============================
Ordered store of listeners plus the optional error handler.

Rules:
- Delivery order is registration order
- Duplicates allowed (same target registered twice is delivered twice)
- One listener failing never stops the others
- At most one error handler; installing a new one replaces the old
- clear() drops listeners but keeps the error handler
- Thread-safe: mutations and snapshots are serialized by a lock,
  delivery runs outside it so listeners may subscribe, unsubscribe
  or publish while being called
- No singleton: whoever composes the application owns the instance
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from eventbus.errors import ErrorHandlerFailure, ListenerFailure
from eventbus.listeners import BlockListener, Listener, MethodListener, Payload
from eventbus.patterns import EventName, Pattern

logger = logging.getLogger("eventbus.registry")

ErrorHandler = Callable[[Any, Payload], Any]

EVENT_NAME_KEY = "event_name"
ERROR_KEY = "error"


@dataclass
class DispatchReport:
    """What happened during one announce() call."""

    event_name: EventName
    listeners_evaluated: int = 0
    failures: List[ListenerFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures


def build_payload(event_name: EventName, payload: Optional[Mapping[str, Any]]) -> Payload:
    """Fresh dict with `event_name` forced to the published name."""
    full_payload = dict(payload or {})
    full_payload[EVENT_NAME_KEY] = event_name
    return full_payload


class Registry:
    """
    In-memory registry of listeners.

    Args:
        isolate_payloads: hand every listener its own deep copy of the
                          payload instead of one shared dict.
    """

    def __init__(self, isolate_payloads: bool = False):
        self._listeners: List[Listener] = []
        self._error_handler: Optional[ErrorHandler] = None
        self._isolate_payloads = isolate_payloads
        self._lock = Lock()

    # ── Registration ──────────────────────────────────────────

    def add_method(
        self, pattern: Pattern, target: Any, method_name: Optional[str]
    ) -> MethodListener:
        listener = MethodListener(pattern, target, method_name)
        self._append(listener)
        return listener

    def add_block(self, pattern: Pattern, block: Callable[[Payload], Any]) -> BlockListener:
        listener = BlockListener(pattern, block)
        self._append(listener)
        return listener

    def add(
        self,
        pattern: Pattern,
        target: Any = None,
        method_name: Optional[str] = None,
        block: Optional[Callable[[Payload], Any]] = None,
    ) -> Listener:
        """Add a block listener if `block` is given, else a method listener."""
        if block is not None:
            return self.add_block(pattern, block)
        return self.add_method(pattern, target, method_name)

    def _append(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)
        logger.debug(f"Listener registered: {listener.describe()} → {listener.pattern!r}")

    def remove(self, listener: Listener) -> bool:
        """Remove exactly this listener (by identity). False if absent."""
        with self._lock:
            for index, existing in enumerate(self._listeners):
                if existing is listener:
                    del self._listeners[index]
                    break
            else:
                return False
        logger.debug(f"Listener removed: {listener.describe()}")
        return True

    def last(self) -> Optional[Listener]:
        with self._lock:
            return self._listeners[-1] if self._listeners else None

    def clear(self) -> None:
        with self._lock:
            count = len(self._listeners)
            self._listeners.clear()
        logger.info(f"Registry cleared ({count} listeners removed)")

    def listeners(self) -> Tuple[Listener, ...]:
        with self._lock:
            return tuple(self._listeners)

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)

    # ── Error handler ─────────────────────────────────────────

    def on_error(self, handler: Optional[ErrorHandler]) -> None:
        """Install, replace, or (with None) remove the error handler."""
        with self._lock:
            self._error_handler = handler

    @property
    def error_handler(self) -> Optional[ErrorHandler]:
        with self._lock:
            return self._error_handler

    # ── Delivery ──────────────────────────────────────────────

    def announce(
        self, event_name: EventName, payload: Optional[Mapping[str, Any]] = None
    ) -> DispatchReport:
        """
        Deliver an event to every listener, in registration order.

        Listeners whose pattern does not match are no-ops. A listener that
        raises is reported to the error handler with the payload plus an
        `error` key; without a handler the failure is only logged.

        Raises:
            ErrorHandlerFailure: the error handler itself raised. Remaining
                                 listeners are not evaluated.
        """
        full_payload = build_payload(event_name, payload)

        with self._lock:
            listeners = list(self._listeners)
            error_handler = self._error_handler

        report = DispatchReport(event_name=event_name)

        for listener in listeners:
            report.listeners_evaluated += 1
            try:
                if self._isolate_payloads:
                    listener.attempt(event_name, copy.deepcopy(full_payload))
                else:
                    listener.attempt(event_name, full_payload)
            except Exception as exc:
                source = listener.identity()
                report.failures.append(ListenerFailure(source=source, error=exc))

                if error_handler is None:
                    logger.warning(
                        f"Listener failed: {listener.describe()} for "
                        f"'{event_name}': {type(exc).__name__}: {exc} "
                        f"(no error handler installed)"
                    )
                    continue

                self._report(error_handler, source, full_payload, event_name, exc)

        logger.info(
            f"Announce complete: '{event_name}', "
            f"{report.listeners_evaluated} evaluated, {report.failed} failed"
        )

        return report

    @staticmethod
    def _report(
        error_handler: ErrorHandler,
        source: Any,
        full_payload: Payload,
        event_name: EventName,
        exc: Exception,
    ) -> None:
        error_payload: Dict[str, Any] = {**full_payload, ERROR_KEY: exc}
        try:
            error_handler(source, error_payload)
        except Exception as handler_exc:
            logger.error(
                f"Error handler failed for '{event_name}' while reporting "
                f"{type(exc).__name__}: {handler_exc}",
                exc_info=True,
            )
            raise ErrorHandlerFailure(event_name, exc) from handler_exc
