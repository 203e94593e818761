# lovelymods/core/notify.py
from abc import ABC, abstractmethod

from loguru import logger


class Notifier(ABC):
    """One-way, user-facing notifications (alerts, dialogs)."""

    @abstractmethod
    def notify(self, message: str) -> None:
        pass


class LogNotifier(Notifier):
    """Routes notifications to the log. Default outside the GUI."""

    def notify(self, message: str) -> None:
        logger.warning(message)

