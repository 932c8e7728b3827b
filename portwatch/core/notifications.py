"""Notification sink for watched-port transitions."""

from typing import Protocol

from .models import Direction, TransitionEvent
from ..utils.logging_config import get_logger

logger = get_logger('notifications')


class NotificationSink(Protocol):
    def notify(self, event: TransitionEvent) -> None:
        ...


def format_event(event: TransitionEvent) -> tuple[str, str]:
    """Title and message for a transition."""
    if event.direction == Direction.STARTED:
        return (
            f"Port {event.port} started",
            f"{event.process_name} is now listening on port {event.port}",
        )
    return (
        f"Port {event.port} stopped",
        f"{event.process_name} stopped listening on port {event.port}",
    )


class LoggingNotifier:
    """Writes transitions to the log. Used when no desktop notifier is available."""

    def notify(self, event: TransitionEvent) -> None:
        title, message = format_event(event)
        logger.info(f"{title}: {message}")
