"""Composition root holding the process-wide dispatcher."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .config import DispatcherSettings
from .events import EventDispatcher
from .exceptions import ConfigurationError
from .logging import get_logger, log_event
from .telemetry import MetricsCollector

LOGGER = get_logger("runtime")


@dataclass(slots=True)
class EventRuntime:
    """Owns the dispatcher a host application shares between its components.

    Build one at start-up and pass ``runtime.dispatcher`` to whatever needs
    it instead of importing a module level instance. When an existing
    dispatcher is supplied, its settings and metrics are the runtime's; a
    dispatcher without metrics gets the runtime's collector attached.
    """

    settings: DispatcherSettings | None = None
    metrics: MetricsCollector | None = None
    dispatcher: EventDispatcher | None = None

    def __post_init__(self) -> None:
        if self.dispatcher is None:
            if self.settings is None:
                self.settings = DispatcherSettings()
            if self.metrics is None:
                self.metrics = MetricsCollector()
            self.dispatcher = EventDispatcher(settings=self.settings, metrics=self.metrics)
        else:
            self._adopt(self.dispatcher)
        log_event(
            LOGGER,
            "runtime_initialized",
            {
                "failure_policy": self.settings.failure_policy,
                "thread_safe": self.settings.thread_safe,
            },
        )

    def _adopt(self, dispatcher: EventDispatcher) -> None:
        if self.settings is not None and self.settings != dispatcher.settings:
            raise ConfigurationError(
                "Runtime settings conflict with the supplied dispatcher's settings"
            )
        if (
            self.metrics is not None
            and dispatcher.metrics is not None
            and self.metrics is not dispatcher.metrics
        ):
            raise ConfigurationError(
                "Runtime metrics conflict with the supplied dispatcher's collector"
            )
        if dispatcher.metrics is None:
            dispatcher.metrics = self.metrics if self.metrics is not None else MetricsCollector()
        self.settings = dispatcher.settings
        self.metrics = dispatcher.metrics

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EventRuntime":
        return cls(settings=DispatcherSettings.from_env(environ))

    def stats(self) -> dict:
        """Metrics snapshot plus the current registry size."""

        assert self.dispatcher is not None and self.metrics is not None  # pragma: no cover
        return {
            **self.metrics.snapshot(),
            "events": len(self.dispatcher.event_names()),
            "listeners": self.dispatcher.listener_count(),
        }
