"""Booking-completed notifications."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from ..core.observability import metrics_collector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingCompletedEvent:
    """Raised after a booking has been committed."""

    booking_id: int
    flight_id: int
    user_id: int
    username: Optional[str]
    booking_date: datetime


BookingHandler = Callable[[BookingCompletedEvent], None]


class BookingEvents:
    """
    Observer registry for booking-completed events.

    Handlers run synchronously in registration order. A handler that raises
    is logged and skipped; the booking it reports on is already committed.
    """

    def __init__(self):
        self._handlers: List[BookingHandler] = []

    def subscribe(self, handler: BookingHandler) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler: BookingHandler) -> None:
        """Remove a handler; unknown handlers are ignored."""
        try:
            self._handlers.remove(handler)
        except ValueError:
            pass

    @property
    def handlers(self) -> tuple:
        return tuple(self._handlers)

    def emit(self, event: BookingCompletedEvent) -> int:
        """
        Deliver an event to every handler.

        Returns:
            Number of handlers that failed
        """
        failures = 0
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                failures += 1
                metrics_collector.record_booking_handler_failure()
                logger.exception(
                    "Booking event handler failed",
                    extra={
                        "handler": getattr(handler, "__qualname__", repr(handler)),
                        "booking_id": event.booking_id,
                    }
                )
        return failures


def log_booking_completed(event: BookingCompletedEvent) -> None:
    """Default subscriber: log the booking and count it."""
    metrics_collector.record_booking_created()
    logger.info(
        "Booking event triggered: user %s (ID: %s) booked flight %s at %s",
        event.username,
        event.user_id,
        event.flight_id,
        event.booking_date.isoformat(),
        extra={
            "booking_id": event.booking_id,
            "flight_id": event.flight_id,
            "user_id": event.user_id,
        }
    )


def create_booking_events() -> BookingEvents:
    """Build the process-wide registry with the default subscriber attached."""
    events = BookingEvents()
    events.subscribe(log_booking_completed)
    return events
