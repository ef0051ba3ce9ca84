from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Protocol


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class NoticeCategory(str, Enum):
    LISTENING_STARTED = "listening_started"
    RECOGNITION_SUCCESS = "recognition_success"
    RECOGNITION_STOPPED = "recognition_stopped"
    PERMISSION_DENIED = "permission_denied"
    NO_SPEECH = "no_speech"
    DEVICE_UNAVAILABLE = "device_unavailable"
    NETWORK_FAILURE = "network_failure"
    SERVICE_DISALLOWED = "service_disallowed"
    ABORTED = "aborted"
    RECOGNITION_ERROR = "recognition_error"
    UNSUPPORTED = "unsupported"
    START_FAILED = "start_failed"
    PERMISSION_HELP = "permission_help"


@dataclass(frozen=True)
class Notice:
    category: NoticeCategory
    level: NoticeLevel
    message: str


class Notifier(Protocol):
    def notify(self, notice: Notice) -> None:
        ...


class ConsoleNotifier:
    def notify(self, notice: Notice) -> None:
        print(f"[{notice.level.value}] {notice.message}")


class LoggingNotifier:
    _LEVELS = {
        NoticeLevel.INFO: logging.INFO,
        NoticeLevel.SUCCESS: logging.INFO,
        NoticeLevel.WARNING: logging.WARNING,
        NoticeLevel.ERROR: logging.ERROR,
    }

    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger

    def notify(self, notice: Notice) -> None:
        self.logger.log(
            self._LEVELS[notice.level],
            "notice",
            extra={
                "category": notice.category.value,
                "notice_level": notice.level.value,
                "text": notice.message,
            },
        )


class MultiNotifier:
    def __init__(self, notifiers: Iterable[Notifier]) -> None:
        self.notifiers = list(notifiers)

    def notify(self, notice: Notice) -> None:
        for n in self.notifiers:
            n.notify(notice)
