"""
Logging Configuration

Centralized logging setup for the checker.

Records about a single domain carry a `domain` attribute (see
DomainLogger) and are rendered with a [domain N] tag.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, MutableMapping, Optional, Tuple


class CheckerFormatter(logging.Formatter):
    """Formatter with color support: [TIME] LEVEL [logger] [domain N] message"""

    COLORS = {
        "DEBUG": "\033[36m",      # Cyan
        "INFO": "\033[32m",       # Green
        "WARNING": "\033[33m",    # Yellow
        "ERROR": "\033[31m",      # Red
        "CRITICAL": "\033[35m",   # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3]
        level = record.levelname

        if self.use_colors:
            color = self.COLORS.get(level, "")
            level = f"{color}{level}{self.RESET}"

        parts = [
            f"[{timestamp}]",
            f"{level:8}",
            f"[{record.name}]",
        ]

        domain = getattr(record, "domain", None)
        if domain is not None:
            parts.append(f"[domain {domain}]")

        parts.append(record.getMessage())

        if record.exc_info:
            parts.append(self.formatException(record.exc_info))

        return " ".join(parts)


class DomainLogger(logging.LoggerAdapter):
    """Logger adapter that tags every record with a domain id"""

    def __init__(self, logger: logging.Logger, domain: Optional[int]):
        super().__init__(logger, {"domain": domain})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**kwargs.get("extra", {}), **self.extra}
        return msg, kwargs


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    use_colors: bool = True,
) -> None:
    """
    Configure logging for the checker.

    Logs go to stderr so reports on stdout stay machine readable.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file path for log output
        use_colors: Enable colored console output
    """
    root_logger = logging.getLogger("deploy_checker")
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(CheckerFormatter(use_colors=use_colors))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(CheckerFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    root_logger.debug("Logging configured")
