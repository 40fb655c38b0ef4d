from __future__ import annotations

import logging
from typing import Iterable, Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Delivery channel for bell/push notifications (implemented outside this core)."""

    def notify(self, recipient_id: str, *, title: str, message: str) -> None:
        raise NotImplementedError


class LoggingNotifier:
    """Default channel: writes the notification to the log."""

    def notify(self, recipient_id: str, *, title: str, message: str) -> None:
        logger.info("notify %s: %s - %s", recipient_id, title, message)


def fan_out(notifier: Notifier, recipients: Iterable[str], *, title: str, message: str) -> int:
    """Best-effort delivery; returns how many recipients were reached.

    A failing recipient never undoes the state change that triggered it.
    """
    delivered = 0
    for recipient_id in recipients:
        try:
            notifier.notify(recipient_id, title=title, message=message)
            delivered += 1
        except Exception:
            logger.warning("notification to %s failed", recipient_id, exc_info=True)
    return delivered
