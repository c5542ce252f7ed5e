"""
User Notifications

Toast-style success/error signals for the app shell. Delivery is
fire-and-forget: a broken sink must never fail the turn that triggered it.
"""

from abc import ABC, abstractmethod

import structlog


logger = structlog.get_logger(__name__)


class NotificationSinkInterface(ABC):
    """Where success and error toasts go."""

    @abstractmethod
    async def success(self, message: str) -> None:
        pass

    @abstractmethod
    async def error(self, message: str) -> None:
        pass


class LoggingNotificationSink(NotificationSinkInterface):
    """Sink that only writes toasts to the structured log."""

    async def success(self, message: str) -> None:
        logger.info("notification", level="success", message=message)

    async def error(self, message: str) -> None:
        logger.info("notification", level="error", message=message)


async def notify(sink: NotificationSinkInterface, message: str, ok: bool = True) -> None:
    """Send a toast, logging and dropping any failure."""
    try:
        if ok:
            await sink.success(message)
        else:
            await sink.error(message)
    except Exception as e:
        logger.warning("notification_failed", error=str(e))
