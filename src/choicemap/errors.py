"""Errors and error containment.

The layout pipeline degrades malformed-but-plausible input to safe defaults
instead of raising. Only structurally unusable input raises
``ScenarioFormatError``. Front ends that must never crash mid-render wrap
their calls in an ``ErrorBoundary``, which logs the failure and hands back a
``RecoveryAction`` describing what to show instead.
"""

from __future__ import annotations

import logging
import traceback
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_FALLBACK_MESSAGE = "An unexpected error occurred. Please try again."


class ChoiceMapError(Exception):
    """Base class for all errors raised by choicemap."""


class ScenarioFormatError(ChoiceMapError, ValueError):
    """A node mapping or layout config could not be interpreted at all."""


# ─── Recovery ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RecoveryAction:
    """What a UI layer should do after a contained failure.

    Attributes:
        message: Human-readable text to display in place of the failed view.
        details: Error summary plus traceback, for an expandable details box.
        retryable: Whether offering a "Try Again" action makes sense.
    """

    message: str
    details: str
    retryable: bool = True


class ErrorHandler(Protocol):
    """Capability consumed by UI layers to turn errors into recovery actions."""

    def on_error(self, error: BaseException) -> RecoveryAction:
        """Handle ``error`` and describe how to recover."""
        ...


@dataclass(frozen=True)
class BoundaryResult(Generic[T]):
    """Outcome of ``ErrorBoundary.call``: exactly one of value/action is meaningful."""

    value: T | None = None
    action: RecoveryAction | None = None

    @property
    def failed(self) -> bool:
        return self.action is not None


class ErrorBoundary:
    """Stateless error boundary.

    Holds only its fallback message; every call is independent, so a retry is
    simply calling again.
    """

    def __init__(self, fallback_message: str | None = None) -> None:
        self.fallback_message = fallback_message or DEFAULT_FALLBACK_MESSAGE

    def on_error(self, error: BaseException) -> RecoveryAction:
        logger.error("ErrorBoundary caught an error: %s", error, exc_info=error)
        details = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return RecoveryAction(message=self.fallback_message, details=details, retryable=True)

    def call(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> BoundaryResult[T]:
        """Run ``func`` and contain any ``Exception`` it raises."""
        try:
            return BoundaryResult(value=func(*args, **kwargs))
        except Exception as exc:
            return BoundaryResult(action=self.on_error(exc))
