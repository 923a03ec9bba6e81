"""Event system: a lightweight in-process publish/subscribe dispatcher.

Listeners fire synchronously, on the caller's thread, in registration order.
``emit`` iterates over a snapshot of the listener list taken when the call
starts, so a listener that subscribes or unsubscribes (itself included) only
changes what later emits see.

Removal by callback compares references with ``is``. Passing a different
function object, or a fresh bound method such as ``view.on_update`` taken a
second time, removes nothing and leaves the original listener firing. Prefer
keeping the :class:`Subscription` returned by :meth:`EventDispatcher.subscribe`
and cancelling that.
"""

from __future__ import annotations

import itertools
import threading
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Tuple

from .config import DispatcherSettings
from .exceptions import InvalidEventName, InvalidListener, ListenerDispatchError
from .logging import get_logger, log_event
from .telemetry import MetricsCollector

LOGGER = get_logger("events")


class Listener(Protocol):
    """Callable signature for event listeners."""

    def __call__(self, *args: Any) -> Any:  # pragma: no cover - Protocol
        ...


@dataclass(eq=False, slots=True)
class Subscription:
    """Handle for one listener registration.

    Equality is identity: two registrations of the same callback produce two
    distinct subscriptions, each removable on its own.
    """

    event_name: str
    callback: Listener
    id: int
    _dispatcher: "EventDispatcher" = field(repr=False)

    @property
    def active(self) -> bool:
        return self._dispatcher._is_registered(self)

    def cancel(self) -> None:
        """Remove this registration. Calling it again is a no-op."""

        self._dispatcher.unsubscribe(self.event_name, self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()


def _check_event_name(event_name: object) -> None:
    if not isinstance(event_name, str) or not event_name:
        raise InvalidEventName(f"Event name must be a non-empty string, got {event_name!r}")


def _describe(callback: object) -> str:
    return getattr(callback, "__qualname__", None) or repr(callback)


class EventDispatcher:
    """Registry mapping event names to ordered listener lists."""

    def __init__(
        self,
        settings: DispatcherSettings | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self.settings = settings or DispatcherSettings()
        self.metrics = metrics
        # Keys are present only while they have at least one subscription.
        self._registry: Dict[str, List[Subscription]] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock() if self.settings.thread_safe else nullcontext()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(events={len(self._registry)}, "
            f"listeners={self.listener_count()}, policy={self.settings.failure_policy!r})"
        )

    # ----- Registration ---------------------------------------------------
    def subscribe(self, event_name: str, callback: Listener) -> Subscription:
        """Append ``callback`` to the listeners of ``event_name``."""

        _check_event_name(event_name)
        if not callable(callback):
            raise InvalidListener(f"Listener for {event_name!r} must be callable, got {callback!r}")

        with self._lock:
            subscription = Subscription(event_name, callback, next(self._ids), self)
            self._registry.setdefault(event_name, []).append(subscription)
        LOGGER.debug(
            "subscribed listener=%s event=%s id=%s",
            _describe(callback),
            event_name,
            subscription.id,
        )
        return subscription

    def unsubscribe(self, event_name: str, target: Listener | Subscription) -> None:
        """Remove listeners from ``event_name``.

        A :class:`Subscription` removes exactly that registration. A callback
        removes every registration whose callback *is* that object. Unknown
        events and unregistered callbacks are ignored.
        """

        _check_event_name(event_name)
        with self._lock:
            entries = self._registry.get(event_name)
            if not entries:
                return
            if isinstance(target, Subscription):
                remaining = [entry for entry in entries if entry is not target]
            else:
                remaining = [entry for entry in entries if entry.callback is not target]
            removed = len(entries) - len(remaining)
            if remaining:
                self._registry[event_name] = remaining
            else:
                del self._registry[event_name]

        if removed:
            LOGGER.debug("unsubscribed event=%s removed=%s", event_name, removed)

    def clear(self, event_name: str | None = None) -> None:
        """Drop every listener of ``event_name``, or of all events when omitted."""

        with self._lock:
            if event_name is None:
                self._registry.clear()
            else:
                self._registry.pop(event_name, None)

    # ----- Dispatch -------------------------------------------------------
    def emit(self, event_name: str, *args: Any) -> None:
        """Invoke the listeners of ``event_name`` with ``args``.

        Under the ``propagate`` policy the first listener exception escapes
        unchanged and the remaining listeners are skipped. Under ``isolate``
        every listener runs and a :class:`ListenerDispatchError` collecting the
        failures is raised at the end.
        """

        _check_event_name(event_name)
        with self._lock:
            snapshot: Tuple[Subscription, ...] = tuple(self._registry.get(event_name, ()))

        if self.settings.log_emits:
            log_event(
                LOGGER,
                "event_emitted",
                {"event_name": event_name, "listeners": len(snapshot), "args": len(args)},
            )
        if self.metrics is not None:
            self.metrics.increment(f"emit.{event_name}")
        if not snapshot:
            return

        if self.metrics is None:
            self._dispatch(event_name, snapshot, args)
        else:
            with self.metrics.time(f"dispatch.{event_name}"):
                self._dispatch(event_name, snapshot, args)

    def _dispatch(
        self,
        event_name: str,
        snapshot: Tuple[Subscription, ...],
        args: Tuple[Any, ...],
    ) -> None:
        failures: List[Tuple[Subscription, BaseException]] = []
        for subscription in snapshot:
            self._count("deliver", event_name)
            try:
                subscription.callback(*args)
            except Exception as exc:
                self._count("failure", event_name)
                if self.settings.failure_policy == "propagate":
                    raise
                listener = _describe(subscription.callback)
                LOGGER.exception(
                    "listener=%s failed for event=%s id=%s",
                    listener,
                    event_name,
                    subscription.id,
                    extra={
                        "event": "listener_failed",
                        "payload": {"event_name": event_name, "listener": listener},
                        "subscription_id": subscription.id,
                    },
                )
                failures.append((subscription, exc))

        if failures:
            raise ListenerDispatchError(event_name, tuple(failures))

    def _count(self, kind: str, event_name: str) -> None:
        if self.metrics is not None:
            self.metrics.increment(f"{kind}.{event_name}")

    # ----- Introspection --------------------------------------------------
    def listeners(self, event_name: str) -> Tuple[Listener, ...]:
        with self._lock:
            return tuple(entry.callback for entry in self._registry.get(event_name, ()))

    def subscriptions(self, event_name: str | None = None) -> Tuple[Subscription, ...]:
        """Return registrations for one event, or for every event in registry order."""

        with self._lock:
            if event_name is not None:
                return tuple(self._registry.get(event_name, ()))
            return tuple(itertools.chain.from_iterable(self._registry.values()))

    def listener_count(self, event_name: str | None = None) -> int:
        with self._lock:
            if event_name is not None:
                return len(self._registry.get(event_name, ()))
            return sum(len(entries) for entries in self._registry.values())

    def has_listeners(self, event_name: str) -> bool:
        with self._lock:
            return event_name in self._registry

    def event_names(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._registry)

    def _is_registered(self, subscription: Subscription) -> bool:
        with self._lock:
            entries = self._registry.get(subscription.event_name, ())
            return any(entry is subscription for entry in entries)


__all__ = [
    "EventDispatcher",
    "Listener",
    "Subscription",
]
