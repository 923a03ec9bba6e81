"""Typed channels binding one event name to one payload model."""

from __future__ import annotations

from typing import Any, Callable, Generic, Mapping, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .events import EventDispatcher, Subscription, _check_event_name
from .exceptions import PayloadValidationError

P = TypeVar("P", bound=BaseModel)


class Topic(Generic[P]):
    """An event whose listeners always receive a single validated ``P``.

    Example::

        class UserLoaded(BaseModel):
            user_id: int
            name: str

        USER_LOADED = Topic("user:loaded", UserLoaded)
        USER_LOADED.subscribe(dispatcher, view.render_user)
        USER_LOADED.emit(dispatcher, user_id=7, name="Ada")
    """

    def __init__(self, name: str, payload_model: Type[P]) -> None:
        _check_event_name(name)
        if not (isinstance(payload_model, type) and issubclass(payload_model, BaseModel)):
            raise TypeError(f"Topic payload model must be a pydantic model, got {payload_model!r}")
        self.name = name
        self.payload_model = payload_model

    def __repr__(self) -> str:
        return f"Topic({self.name!r}, {self.payload_model.__name__})"

    def subscribe(self, dispatcher: EventDispatcher, callback: Callable[[P], Any]) -> Subscription:
        return dispatcher.subscribe(self.name, callback)

    def unsubscribe(
        self, dispatcher: EventDispatcher, target: Callable[[P], Any] | Subscription
    ) -> None:
        dispatcher.unsubscribe(self.name, target)

    def build(self, payload: P | Mapping[str, Any] | None = None, /, **fields: Any) -> P:
        """Validate ``payload`` (or keyword ``fields``) into a ``P`` instance."""

        if payload is not None and fields:
            raise PayloadValidationError(
                f"Pass either a payload or keyword fields to {self.name!r}, not both"
            )
        if isinstance(payload, self.payload_model):
            return payload
        data = fields if payload is None else payload
        try:
            return self.payload_model.model_validate(data)
        except ValidationError as exc:
            raise PayloadValidationError(f"Invalid payload for {self.name!r}: {exc}") from exc

    def emit(
        self,
        dispatcher: EventDispatcher,
        payload: P | Mapping[str, Any] | None = None,
        /,
        **fields: Any,
    ) -> P:
        """Validate the payload, dispatch it and return the validated instance.

        ``dispatcher`` and ``payload`` are positional-only, so models may use
        those names as fields: ``topic.emit(bus, payload="x")``.
        """

        instance = self.build(payload, **fields)
        dispatcher.emit(self.name, instance)
        return instance


__all__ = ["Topic"]
