import logging
import re
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .config import RegistrySettings
from .constants import (
    DEFAULT_LOG_DATEFMT,
    EVENT_DEPENDENCY_SKIPPED,
    EVENT_MODULE_BUILT,
    EVENT_MODULE_REGISTERED,
    EVENT_MODULE_REQUIRED,
)

REGISTRY_LOGGER_NAME = "moddef"

_EVENT_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    (EVENT_MODULE_REGISTERED, re.compile(r"^Registered module '(?P<module_id>.*)' with dependencies")),
    (EVENT_MODULE_BUILT, re.compile(r"^Built anonymous module with dependencies")),
    (EVENT_MODULE_REQUIRED, re.compile(r"^Resolved module '(?P<module_id>.*)'$")),
    (EVENT_DEPENDENCY_SKIPPED, re.compile(r"^Skipping duplicate dependency '(?P<module_id>.*)'$")),
)


def configure_logging(settings: Optional[RegistrySettings] = None) -> None:
    """Apply the root logging configuration from registry settings.

    Args:
        settings: Settings to apply; read from the environment when omitted.

    Returns:
        None
    """

    settings = settings or RegistrySettings.from_env()
    logging.basicConfig(
        level=settings.level,
        format=settings.log_format,
        datefmt=DEFAULT_LOG_DATEFMT,
    )


class RegistryLogHandler(logging.Handler):
    """Keep registry log records in memory for later inspection."""

    def __init__(self, level: int = logging.NOTSET) -> None:
        """Initialize an empty handler.

        Args:
            level: Minimum level of records to keep.

        Returns:
            None
        """

        super().__init__(level)
        self._entries: List[Dict[str, Any]] = []

    def emit(self, record: logging.LogRecord) -> None:
        """Store a log record along with any registry event it describes.

        Args:
            record: Log record emitted by a ``moddef`` logger.

        Returns:
            None
        """

        try:
            message = self.format(record)
        except Exception:
            message = record.getMessage()
        event, module_id = _extract_event_from_log(record.getMessage())
        self._entries.append(
            {
                "level": record.levelname,
                "logger": record.name,
                "message": message,
                "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc),
                "event": event,
                "module_id": module_id,
            }
        )

    @property
    def entries(self) -> List[Dict[str, Any]]:
        return list(self._entries)

    def events(self, name: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return captured entries that map to a registry event.

        Args:
            name: Restrict to one event name when given.

        Returns:
            List[Dict[str, Any]]: Matching entries in emission order.
        """

        return [
            entry
            for entry in self._entries
            if entry["event"] is not None and (name is None or entry["event"] == name)
        ]

    def clear(self) -> None:
        self._entries.clear()


@contextmanager
def capture_registry_logs(level: int = logging.DEBUG) -> Iterator[RegistryLogHandler]:
    """Attach a ``RegistryLogHandler`` to the ``moddef`` logger for a block.

    The logger's previous level is restored on exit.

    Args:
        level: Level the logger is lowered to while capturing.

    Yields:
        RegistryLogHandler: The attached handler.
    """

    handler = RegistryLogHandler(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    tracked = logging.getLogger(REGISTRY_LOGGER_NAME)
    previous_level = tracked.level
    if tracked.level == logging.NOTSET or tracked.level > level:
        tracked.setLevel(level)
    tracked.addHandler(handler)
    try:
        yield handler
    finally:
        tracked.removeHandler(handler)
        tracked.setLevel(previous_level)


def _extract_event_from_log(message: str) -> Tuple[Optional[str], Optional[str]]:
    """Parse well-known registry log lines into an event name.

    Args:
        message: Raw log message.

    Returns:
        Tuple[Optional[str], Optional[str]]: Event name and module id, each
        ``None`` when the message is not a registry event.
    """

    for event, pattern in _EVENT_PATTERNS:
        if match := pattern.search(message):
            return event, match.groupdict().get("module_id")
    return None, None
