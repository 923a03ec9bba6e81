"""Configuration models for event dispatchers."""
from __future__ import annotations

import os
from typing import Any, Dict, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ConfigurationError

FailurePolicy = Literal["propagate", "isolate"]

_ENV_PREFIX = "EVENT_DISPATCH_"
_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


class DispatcherSettings(BaseModel):
    """Behavioural switches for an :class:`~event_dispatch.events.EventDispatcher`."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    failure_policy: FailurePolicy = Field(
        default="propagate",
        description=(
            "'propagate' re-raises the first listener error and skips the rest; "
            "'isolate' runs every listener and reports failures afterwards."
        ),
    )
    thread_safe: bool = Field(
        default=True,
        description="Guard registry mutation and emit snapshots with a lock.",
    )
    log_emits: bool = Field(
        default=False,
        description="Write an 'event_emitted' log record for every emit call.",
    )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "DispatcherSettings":
        """Build settings from ``EVENT_DISPATCH_*`` environment variables."""

        env = os.environ if environ is None else environ
        raw: Dict[str, Any] = {}
        policy = env.get(f"{_ENV_PREFIX}FAILURE_POLICY")
        if policy is not None:
            raw["failure_policy"] = policy.strip().lower()
        for field_name in ("thread_safe", "log_emits"):
            value = env.get(f"{_ENV_PREFIX}{field_name.upper()}")
            if value is not None:
                raw[field_name] = _parse_flag(field_name, value)
        return build_settings_from_dict(raw)


def _parse_flag(name: str, value: str) -> bool:
    text = value.strip().lower()
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    raise ConfigurationError(f"{_ENV_PREFIX}{name.upper()} must be a boolean flag, got {value!r}")


def build_settings_from_dict(raw: Mapping[str, Any]) -> DispatcherSettings:
    """Utility helper to build :class:`DispatcherSettings` from a plain dictionary."""

    try:
        return DispatcherSettings.model_validate(dict(raw))
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid dispatcher settings: {exc}") from exc


__all__ = [
    "DispatcherSettings",
    "FailurePolicy",
    "build_settings_from_dict",
]
