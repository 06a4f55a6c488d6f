"""
Console Output Formatter

Colored report output. Falls back to plain text when not in a TTY.
"""

import sys
from typing import Sequence

from .base import BaseFormatter, OutputLevel
from ..errors import UnhandledViolationError
from ..violations import Violation, ViolationType


class ConsoleFormatter(BaseFormatter):
    """Console formatter with colored output"""

    COLORS = {
        "reset": "\033[0m",
        "bold": "\033[1m",
        "dim": "\033[2m",
        "green": "\033[32m",
        "yellow": "\033[33m",
        "red": "\033[31m",
        "cyan": "\033[36m",
    }

    def __init__(self, level: OutputLevel = OutputLevel.NORMAL, use_colors: bool = True):
        super().__init__(level)
        self.use_colors = use_colors and sys.stdout.isatty()

    def _c(self, color: str, text: str) -> str:
        """Apply color to text"""
        if self.use_colors:
            return f"{self.COLORS.get(color, '')}{text}{self.COLORS['reset']}"
        return text

    def violation_lines(self, violation: Violation) -> Sequence[str]:
        """Lines describing one violation"""
        kind = violation.kind
        tag = self._c("red", f"✗ {kind.value}")

        if kind is ViolationType.UPGRADE_BEACON:
            lines = [
                f"{tag} {self._c('cyan', f'domain {violation.domain}')} {violation.name}",
                f"    expected: {violation.expected}",
                f"    actual:   {violation.actual}",
            ]
            if self.level >= OutputLevel.VERBOSE:
                proxied = violation.proxied_address
                lines.append(f"    {self._c('dim', 'beacon:')} {proxied.beacon}")
                lines.append(f"    {self._c('dim', 'proxy:')}  {proxied.proxy}")
            return lines
        elif kind is ViolationType.VALIDATOR_MANAGER:
            return [
                f"{tag} {self._c('cyan', f'domain {violation.domain}')}",
                f"    expected: {violation.expected}",
                f"    actual:   {violation.actual}",
            ]
        elif kind is ViolationType.VALIDATOR:
            domains = f"domain {violation.local_domain} -> {violation.remote_domain}"
            return [
                f"{tag} {self._c('cyan', domains)}",
                f"    expected: {violation.expected}",
                f"    actual:   {violation.actual}",
            ]
        raise UnhandledViolationError(f"No console output for violation kind: {kind!r}")

    def report(self, violations: Sequence[Violation]) -> None:
        """Print every violation followed by per-kind counts"""
        if not violations:
            if self.level >= OutputLevel.NORMAL:
                print(self._c("green", "✓ No violations found"))
            return

        for violation in violations:
            for line in self.violation_lines(violation):
                print(line)

        if self.level < OutputLevel.NORMAL:
            return

        print()
        print(self._c("bold", "═" * 50))
        print(self._c("bold", f"  {len(violations)} VIOLATION(S)"))
        print(self._c("bold", "═" * 50))
        for kind in ViolationType:
            count = sum(1 for v in violations if v.kind is kind)
            color = "red" if count else "dim"
            label = kind.value + ":"
            print(f"    {label:18} {self._c(color, str(count))}")

    def error(self, message: str) -> None:
        print(f"{self._c('red', 'Error:')} {message}", file=sys.stderr)
