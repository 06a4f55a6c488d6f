"""
JSON Output Formatter
"""

import json
import sys
from typing import Any, Dict, Sequence

from .base import BaseFormatter, OutputLevel
from ..violations import Violation, ViolationType


class JsonFormatter(BaseFormatter):
    """Prints the report as a single JSON document on stdout"""

    def __init__(self, level: OutputLevel = OutputLevel.NORMAL, indent: int = 2):
        super().__init__(level)
        self.indent = indent

    def build(self, violations: Sequence[Violation]) -> Dict[str, Any]:
        return {
            "violations": [v.to_dict() for v in violations],
            "counts": {
                kind.value: sum(1 for v in violations if v.kind is kind)
                for kind in ViolationType
            },
        }

    def report(self, violations: Sequence[Violation]) -> None:
        print(json.dumps(self.build(violations), indent=self.indent))

    def error(self, message: str) -> None:
        print(json.dumps({"error": message}), file=sys.stderr)
