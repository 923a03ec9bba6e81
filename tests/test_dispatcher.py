from __future__ import annotations

from typing import Any, List, Tuple

import pytest

from event_dispatch.events import EventDispatcher
from event_dispatch.exceptions import InvalidArgument, InvalidEventName, InvalidListener


def _recorder(calls: List[Tuple[str, Tuple[Any, ...]]], label: str):
    def listener(*args: Any) -> None:
        calls.append((label, args))

    return listener


def test_emit_without_listeners_is_noop() -> None:
    bus = EventDispatcher()
    bus.emit("never-subscribed")
    bus.emit("never-subscribed", 1, {"a": 2})
    assert bus.event_names() == ()


def test_listeners_fire_in_registration_order_with_args() -> None:
    calls: List[Tuple[str, Tuple[Any, ...]]] = []
    bus = EventDispatcher()
    bus.subscribe("ping", _recorder(calls, "f"))
    bus.subscribe("ping", _recorder(calls, "g"))

    bus.emit("ping", 1, 2)

    assert calls == [("f", (1, 2)), ("g", (1, 2))]


def test_args_are_forwarded_unchanged() -> None:
    received: List[Tuple[Any, ...]] = []
    payload = {"rows": [1, 2, 3]}
    bus = EventDispatcher()
    bus.subscribe("data", lambda *args: received.append(args))

    bus.emit("data", payload, None)

    assert received[0][0] is payload
    assert received[0][1] is None


def test_duplicate_registration_fires_twice() -> None:
    calls: List[Tuple[str, Tuple[Any, ...]]] = []
    listener = _recorder(calls, "dup")
    bus = EventDispatcher()
    bus.subscribe("x", listener)
    bus.subscribe("x", listener)

    bus.emit("x")

    assert len(calls) == 2
    assert bus.listeners("x") == (listener, listener)


def test_unsubscribe_by_callback_removes_every_registration() -> None:
    calls: List[Tuple[str, Tuple[Any, ...]]] = []
    listener = _recorder(calls, "dup")
    other = _recorder(calls, "other")
    bus = EventDispatcher()
    for _ in range(3):
        bus.subscribe("x", listener)
    bus.subscribe("x", other)

    bus.unsubscribe("x", listener)
    bus.emit("x")

    assert calls == [("other", ())]


def test_subscribe_then_unsubscribe_then_emit_invokes_nothing() -> None:
    calls: List[Tuple[str, Tuple[Any, ...]]] = []
    f = _recorder(calls, "f")
    bus = EventDispatcher()
    bus.subscribe("a", f)
    bus.unsubscribe("a", f)

    bus.emit("a")

    assert calls == []
    assert not bus.has_listeners("a")


def test_unsubscribe_unknown_callback_or_event_is_noop() -> None:
    calls: List[Tuple[str, Tuple[Any, ...]]] = []
    f = _recorder(calls, "f")
    bus = EventDispatcher()
    bus.subscribe("a", f)

    bus.unsubscribe("a", _recorder(calls, "stranger"))
    bus.unsubscribe("missing", f)

    assert bus.listeners("a") == (f,)


def test_unsubscribe_uses_identity_not_equality() -> None:
    class View:
        def __init__(self) -> None:
            self.updates = 0

        def on_update(self) -> None:
            self.updates += 1

    view = View()
    bus = EventDispatcher()
    bus.subscribe("update", view.on_update)

    # A bound method is a fresh object on every attribute access.
    bus.unsubscribe("update", view.on_update)
    bus.emit("update")
    assert view.updates == 1

    handler = view.on_update
    bus.subscribe("refresh", handler)
    bus.unsubscribe("refresh", handler)
    bus.emit("refresh")
    assert view.updates == 1


def test_registry_key_removed_with_last_listener() -> None:
    bus = EventDispatcher()
    first = bus.subscribe("a", lambda: None)
    second = bus.subscribe("a", lambda: None)

    first.cancel()
    assert bus.event_names() == ("a",)
    second.cancel()
    assert bus.event_names() == ()
    assert bus.listener_count() == 0


def test_self_unsubscribe_during_emit_does_not_skip_others() -> None:
    calls: List[str] = []
    bus = EventDispatcher()

    def once() -> None:
        calls.append("once")
        bus.unsubscribe("tick", once)

    bus.subscribe("tick", once)
    bus.subscribe("tick", lambda: calls.append("after"))

    bus.emit("tick")
    bus.emit("tick")

    assert calls == ["once", "after", "after"]


def test_removal_of_later_listener_during_emit_keeps_snapshot() -> None:
    calls: List[str] = []
    bus = EventDispatcher()

    def late() -> None:
        calls.append("late")

    bus.subscribe("tick", lambda: bus.unsubscribe("tick", late))
    bus.subscribe("tick", late)

    bus.emit("tick")
    bus.emit("tick")

    assert calls == ["late"]


def test_subscribe_during_emit_applies_to_next_emit() -> None:
    calls: List[str] = []
    bus = EventDispatcher()

    def spawner() -> None:
        calls.append("spawner")
        bus.subscribe("tick", lambda: calls.append("spawned"))

    bus.subscribe("tick", spawner)

    bus.emit("tick")
    assert calls == ["spawner"]

    bus.emit("tick")
    assert calls == ["spawner", "spawner", "spawned"]


def test_reentrant_emit_from_listener() -> None:
    calls: List[str] = []
    bus = EventDispatcher()
    bus.subscribe("outer", lambda: bus.emit("inner", "nested"))
    bus.subscribe("inner", calls.append)

    bus.emit("outer")

    assert calls == ["nested"]


def test_multiple_dispatchers_are_independent() -> None:
    calls: List[Tuple[str, Tuple[Any, ...]]] = []
    first = EventDispatcher()
    second = EventDispatcher()
    first.subscribe("a", _recorder(calls, "first"))

    second.emit("a")
    assert calls == []
    first.emit("a")
    assert calls == [("first", ())]


@pytest.mark.parametrize("name", ["", None, 42, b"bytes"])
def test_invalid_event_names_are_rejected(name: Any) -> None:
    bus = EventDispatcher()
    with pytest.raises(InvalidEventName):
        bus.subscribe(name, lambda: None)
    with pytest.raises(InvalidEventName):
        bus.emit(name)
    with pytest.raises(InvalidEventName):
        bus.unsubscribe(name, lambda: None)


def test_non_callable_listener_is_rejected() -> None:
    bus = EventDispatcher()
    with pytest.raises(InvalidListener):
        bus.subscribe("a", "not callable")  # type: ignore[arg-type]
    assert bus.event_names() == ()


def test_invalid_argument_is_a_value_error() -> None:
    bus = EventDispatcher()
    with pytest.raises(ValueError):
        bus.emit("")
    assert issubclass(InvalidEventName, InvalidArgument)


def test_clear_single_event_and_all() -> None:
    bus = EventDispatcher()
    bus.subscribe("a", lambda: None)
    bus.subscribe("b", lambda: None)

    bus.clear("a")
    assert bus.event_names() == ("b",)
    bus.clear()
    assert bus.event_names() == ()


def test_introspection_helpers() -> None:
    bus = EventDispatcher()
    f = lambda: None  # noqa: E731
    bus.subscribe("a", f)
    bus.subscribe("b", f)
    bus.subscribe("a", f)

    assert bus.listener_count("a") == 2
    assert bus.listener_count("missing") == 0
    assert bus.listener_count() == 3
    assert bus.event_names() == ("a", "b")
    assert bus.listeners("missing") == ()
    assert [s.event_name for s in bus.subscriptions()] == ["a", "a", "b"]
    assert "listeners=3" in repr(bus)
