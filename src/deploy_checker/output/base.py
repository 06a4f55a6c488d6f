"""
Base Output Formatter
"""

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Sequence

from ..violations import Violation


class OutputLevel(IntEnum):
    """Output verbosity levels"""
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


class BaseFormatter(ABC):
    """Base class for report formatters"""

    def __init__(self, level: OutputLevel = OutputLevel.NORMAL):
        self.level = level

    @abstractmethod
    def report(self, violations: Sequence[Violation]) -> None:
        """Format the full violation report"""
        pass

    @abstractmethod
    def error(self, message: str) -> None:
        """Format a fatal error"""
        pass
