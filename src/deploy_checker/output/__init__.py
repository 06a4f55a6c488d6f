"""
Output Formatting

Console and JSON rendering of violation reports.
"""

from .base import BaseFormatter, OutputLevel
from .console import ConsoleFormatter
from .json_output import JsonFormatter

__all__ = [
    "BaseFormatter",
    "OutputLevel",
    "ConsoleFormatter",
    "JsonFormatter",
]
