"""Error helpers for the trackreplay command line front-end."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from trackreplay_core.results import OperationResult, Status

__all__ = [
    "CliError",
    "ErrorPayload",
    "build_error_payload",
    "log_cli_error",
]


_EXIT_CODES: Mapping[str, int] = {
    "runtime": 1,
    "usage": 2,
    "io": 3,
    "not_found": 4,
}

_STATUS_CATEGORIES: Mapping[Status, str] = {
    Status.NOT_FOUND: "not_found",
    Status.INVALID_STATE: "usage",
    Status.EMPTY_INTERVAL: "runtime",
}

_LOGGER_NAME = "trackreplay.cli"


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """What the CLI reports when a command fails."""

    status_code: int
    category: str
    message: str
    context: Mapping[str, Any]

    def as_dict(self) -> Mapping[str, Any]:
        return {
            "status_code": self.status_code,
            "category": self.category,
            "message": self.message,
            "context": dict(self.context),
        }


def _flatten(context: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    flattened: dict[str, Any] = {}
    for key, value in (context or {}).items():
        scalar = isinstance(value, (str, int, float, bool)) or value is None
        flattened[str(key)] = value if scalar else str(value)
    return flattened


def build_error_payload(
    message: str,
    *,
    category: str = "runtime",
    status_code: Optional[int] = None,
    context: Optional[Mapping[str, Any]] = None,
) -> ErrorPayload:
    category = category if category in _EXIT_CODES else "runtime"
    code = status_code if status_code is not None else _EXIT_CODES[category]
    return ErrorPayload(status_code=code, category=category, message=message, context=_flatten(context))


def log_cli_error(
    payload: ErrorPayload,
    *,
    logger: Optional[logging.Logger] = None,
    exc_info: Optional[BaseException] = None,
) -> None:
    """Emit ``payload`` through ``logger.error`` with structured context."""

    (logger or logging.getLogger(_LOGGER_NAME)).error(
        payload.message,
        extra={
            "event": "cli.error",
            "category": payload.category,
            "status_code": payload.status_code,
            "context": dict(payload.context),
        },
        exc_info=exc_info,
    )


class CliError(RuntimeError):
    """Raised by command handlers; carries the exit code and log context."""

    def __init__(
        self,
        message: str,
        *,
        category: str = "runtime",
        status_code: Optional[int] = None,
        context: Optional[Mapping[str, Any]] = None,
        logged: bool = False,
    ) -> None:
        super().__init__(message)
        self.payload = build_error_payload(
            message, category=category, status_code=status_code, context=context
        )
        self.category = self.payload.category
        self.status_code = self.payload.status_code
        self.context = dict(self.payload.context)
        self.logged = logged

    @classmethod
    def from_result(cls, result: OperationResult, *, prefix: str = "") -> "CliError":
        """Turn an unsuccessful engine result into a CLI failure."""

        category = _STATUS_CATEGORIES.get(result.status, "runtime")
        message = f"{prefix}{result.message}" if prefix else result.message
        context = dict(result.context)
        context["status"] = result.status.value
        return cls(message, category=category, context=context)
