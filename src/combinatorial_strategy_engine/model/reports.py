from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ReportLevel(Enum):
    """
    Severity of a report sent to a Reporter, ordered from least to most severe.

    Each level carries the stdlib logging level it corresponds to.
    """

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"

    @property
    def logging_level(self) -> int:
        return _LOGGING_LEVELS[self]

    def is_worse_than_or_equal_to(self, other: ReportLevel) -> bool:
        return self.logging_level >= other.logging_level


_LOGGING_LEVELS: dict[ReportLevel, int] = {
    ReportLevel.TRACE: 5,
    ReportLevel.DEBUG: logging.DEBUG,
    ReportLevel.INFO: logging.INFO,
    ReportLevel.WARN: logging.WARNING,
    ReportLevel.ERROR: logging.ERROR,
    ReportLevel.FATAL: logging.CRITICAL,
}


@dataclass(frozen=True, slots=True)
class Report:
    """
    A message template and its arguments.

    The template uses ``str.format`` placeholders; ``resolve()`` renders it.
    """

    template: str
    arguments: tuple[Any, ...] = ()

    def resolve(self) -> str:
        if not self.arguments:
            return self.template
        return self.template.format(*self.arguments)

    def __str__(self) -> str:
        return self.resolve()
