"""
Violation Ledger

Insertion-ordered, dedup-aware collection of violations for one checker.

Only UpgradeBeacon violations are deduplicated, keyed on
(domain, actual, expected); the proxy name and address set are not part of
the key, so two proxies on one domain sharing the same bad implementation
collapse to one entry. ValidatorManager and Validator violations are always
appended, even when identical to an existing entry. This asymmetry matches
what report consumers of the deployed system expect and is kept on purpose.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Sequence, Tuple

from .violations import Violation, ViolationType, describe_violation

logger = logging.getLogger(__name__)


@dataclass
class DistributionResult:
    """Result of a ledger assertion"""
    passed: bool
    reason: str = ""
    details: Dict[str, Any] = field(default_factory=dict)


class ViolationAssertionError(AssertionError):
    """Ledger contents did not match the expectation"""

    def __init__(self, result: DistributionResult):
        self.result = result
        super().__init__(result.reason)


class ViolationLedger:
    """
    Shared violation store for one checker instance.

    add() holds a lock across the duplicate scan and the append so two
    concurrent writers cannot both record the same beacon drift.
    """

    def __init__(self):
        self._violations: List[Violation] = []
        self._lock = threading.Lock()

    # =========================================================================
    # Recording
    # =========================================================================

    def add(self, violation: Violation) -> bool:
        """
        Record a violation.

        Returns False when an UpgradeBeacon violation collapsed into an
        existing entry, True when the violation was appended.
        """
        with self._lock:
            if violation.kind is ViolationType.UPGRADE_BEACON and self._has_beacon_duplicate(violation):
                logger.debug(
                    f"Duplicate beacon violation on domain {violation.domain} "
                    f"({violation.name}) collapsed"
                )
                return False
            self._violations.append(violation)

        logger.warning(f"Violation recorded: {describe_violation(violation)}")
        return True

    def _has_beacon_duplicate(self, violation: Violation) -> bool:
        for existing in self._violations:
            if (
                existing.kind is ViolationType.UPGRADE_BEACON
                and existing.domain == violation.domain
                and existing.actual == violation.actual
                and existing.expected == violation.expected
            ):
                return True
        return False

    def clear(self) -> None:
        """Drop every recorded violation"""
        with self._lock:
            self._violations.clear()

    # =========================================================================
    # Read-only export
    # =========================================================================

    @property
    def violations(self) -> Tuple[Violation, ...]:
        with self._lock:
            return tuple(self._violations)

    def __len__(self) -> int:
        with self._lock:
            return len(self._violations)

    def __iter__(self) -> Iterator[Violation]:
        return iter(self.violations)

    def of_kind(self, kind: ViolationType) -> List[Violation]:
        return [v for v in self.violations if v.kind is kind]

    def counts(self) -> Dict[ViolationType, int]:
        """Number of entries per kind, every kind present"""
        result = {kind: 0 for kind in ViolationType}
        for violation in self.violations:
            result[violation.kind] += 1
        return result

    def to_dict(self) -> List[Dict[str, Any]]:
        return [v.to_dict() for v in self.violations]

    # =========================================================================
    # Assertions
    # =========================================================================

    def check_distribution(
        self,
        kinds: Sequence[ViolationType],
        expected_counts: Sequence[int],
    ) -> DistributionResult:
        """
        Compare the ledger against an expected count per kind.

        Args:
            kinds: Violation kinds to count
            expected_counts: Expected number of entries, positionally matched to kinds

        Returns:
            DistributionResult; fails when any count differs or when an entry's
            kind is not in `kinds`
        """
        if len(kinds) != len(expected_counts):
            raise ValueError(
                f"kinds and expected_counts differ in length: "
                f"{len(kinds)} != {len(expected_counts)}"
            )

        violations = self.violations
        actual_counts = [
            sum(1 for v in violations if v.kind is kind)
            for kind in kinds
        ]

        if actual_counts != list(expected_counts):
            mismatches = [
                {"kind": kind.value, "expected": expected, "actual": actual}
                for kind, expected, actual in zip(kinds, expected_counts, actual_counts)
                if expected != actual
            ]
            lines = [
                f"  {m['kind']}: expected {m['expected']}, found {m['actual']}"
                for m in mismatches
            ]
            return DistributionResult(
                passed=False,
                reason="Violation counts do not match:\n" + "\n".join(lines) + _dump(violations),
                details={"mismatches": mismatches},
            )

        unmatched = [v for v in violations if v.kind not in kinds]
        if unmatched:
            lines = [f"  {describe_violation(v)}" for v in unmatched]
            return DistributionResult(
                passed=False,
                reason=f"{len(unmatched)} unexpected violation(s):\n" + "\n".join(lines),
                details={"unmatched": [v.to_dict() for v in unmatched]},
            )

        return DistributionResult(
            passed=True,
            reason="Violation distribution matches",
            details={"counts": {k.value: c for k, c in zip(kinds, actual_counts)}},
        )

    def assert_distribution(
        self,
        kinds: Sequence[ViolationType],
        expected_counts: Sequence[int],
    ) -> None:
        result = self.check_distribution(kinds, expected_counts)
        if not result.passed:
            raise ViolationAssertionError(result)

    def check_empty(self) -> DistributionResult:
        violations = self.violations
        if violations:
            return DistributionResult(
                passed=False,
                reason=f"Expected no violations, found {len(violations)}:" + _dump(violations),
                details={"violations": [v.to_dict() for v in violations]},
            )
        return DistributionResult(passed=True, reason="No violations")

    def assert_empty(self) -> None:
        result = self.check_empty()
        if not result.passed:
            raise ViolationAssertionError(result)


def _dump(violations: Sequence[Violation]) -> str:
    if not violations:
        return ""
    return "\n" + "\n".join(f"  - {describe_violation(v)}" for v in violations)
