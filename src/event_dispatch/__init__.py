"""In-process publish/subscribe event dispatcher."""

from .config import DispatcherSettings, FailurePolicy, build_settings_from_dict
from .events import EventDispatcher, Listener, Subscription
from .exceptions import (
    ConfigurationError,
    DispatcherError,
    InvalidArgument,
    InvalidEventName,
    InvalidListener,
    ListenerDispatchError,
    PayloadValidationError,
)
from .runtime import EventRuntime
from .telemetry import MetricsCollector
from .topics import Topic

__all__ = [
    "ConfigurationError",
    "DispatcherError",
    "DispatcherSettings",
    "EventDispatcher",
    "EventRuntime",
    "FailurePolicy",
    "InvalidArgument",
    "InvalidEventName",
    "InvalidListener",
    "Listener",
    "ListenerDispatchError",
    "MetricsCollector",
    "PayloadValidationError",
    "Subscription",
    "Topic",
    "build_settings_from_dict",
]
