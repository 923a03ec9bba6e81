"""Custom exceptions raised by the event dispatcher."""

from __future__ import annotations

from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .events import Subscription


class DispatcherError(RuntimeError):
    """Base error for all dispatcher related exceptions."""


class InvalidArgument(DispatcherError, ValueError):
    """Raised when a value is rejected at the dispatcher boundary."""


class InvalidEventName(InvalidArgument):
    """Raised when an event name is empty or not a string."""


class InvalidListener(InvalidArgument):
    """Raised when a listener is not callable."""


class PayloadValidationError(InvalidArgument):
    """Raised when a typed topic payload fails validation."""


class ConfigurationError(DispatcherError):
    """Raised when configuration values are invalid or missing."""


class ListenerDispatchError(DispatcherError):
    """Raised after an isolated dispatch in which one or more listeners failed.

    ``failures`` holds ``(subscription, exception)`` pairs in firing order.
    """

    def __init__(
        self,
        event_name: str,
        failures: Tuple[Tuple["Subscription", BaseException], ...],
    ) -> None:
        self.event_name = event_name
        self.failures = failures
        super().__init__(
            f"{len(failures)} listener(s) failed while dispatching {event_name!r}"
        )

    @property
    def exceptions(self) -> Tuple[BaseException, ...]:
        return tuple(exc for _, exc in self.failures)
