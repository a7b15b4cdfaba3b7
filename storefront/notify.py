import logging
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)

_LEVELS = {
    "success": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass(frozen=True)
class Notice:
    level: str
    message: str


class Notifier:
    """Collects user-facing notices (the storefront's toasts)."""

    def __init__(self):
        self.notices: List[Notice] = []

    def post(self, level: str, message: str) -> Notice:
        notice = Notice(level, message)
        self.notices.append(notice)
        logger.log(_LEVELS.get(level, logging.INFO), "[%s] %s", level, message)
        return notice

    def success(self, message: str) -> Notice:
        return self.post("success", message)

    def info(self, message: str) -> Notice:
        return self.post("info", message)

    def warning(self, message: str) -> Notice:
        return self.post("warning", message)

    def error(self, message: str) -> Notice:
        return self.post("error", message)

    def messages(self, level: Optional[str] = None) -> List[str]:
        return [n.message for n in self.notices if level is None or n.level == level]
