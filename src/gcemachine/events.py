from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

from .logger import logger


class EventSeverity(str, Enum):
    NORMAL = "Normal"
    WARNING = "Warning"


class EventRecorder(Protocol):
    """Sink for machine events. Implementations may drop events."""

    def emit(
        self, ref: str, severity: EventSeverity, reason: str, message: str
    ) -> None: ...


class LoggingEventRecorder:
    """Default recorder: writes events to the package logger."""

    def emit(
        self, ref: str, severity: EventSeverity, reason: str, message: str
    ) -> None:
        level = logging.WARNING if severity is EventSeverity.WARNING else logging.INFO
        logger.log(level, f"Event {reason} on {ref}: {message}")
