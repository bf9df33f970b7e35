"""Status results returned by the engine commands.

None of the playback or flag commands raise for recoverable conditions.
They return an :class:`OperationResult` describing what happened so the
caller (usually a UI collaborator) can decide how to surface it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, MutableMapping, Optional

__all__ = [
    "OperationResult",
    "Status",
    "TrackReplayError",
    "empty_interval",
    "invalid_state",
    "not_found",
    "ok",
]


class TrackReplayError(ValueError):
    """Base class for malformed input handed to the core at construction time."""


class Status(str, Enum):
    """Outcome categories for engine commands."""

    OK = "ok"
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    EMPTY_INTERVAL = "empty_interval"


def _normalise_context(context: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    if not context:
        return {}
    payload: MutableMapping[str, Any] = {}
    for key, value in context.items():
        if isinstance(value, (str, int, float, bool)) or value is None:
            payload[key] = value
        else:
            payload[key] = str(value)
    return dict(payload)


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Structured outcome of a command issued to the engine."""

    status: Status
    message: str = ""
    context: Mapping[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status is Status.OK

    def __bool__(self) -> bool:
        return self.ok

    def as_dict(self) -> Mapping[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "context": dict(self.context),
        }


def ok(message: str = "", **context: Any) -> OperationResult:
    return OperationResult(Status.OK, message, _normalise_context(context))


def not_found(message: str, **context: Any) -> OperationResult:
    return OperationResult(Status.NOT_FOUND, message, _normalise_context(context))


def invalid_state(message: str, **context: Any) -> OperationResult:
    return OperationResult(Status.INVALID_STATE, message, _normalise_context(context))


def empty_interval(message: str, **context: Any) -> OperationResult:
    return OperationResult(Status.EMPTY_INTERVAL, message, _normalise_context(context))
