"""
Tests for the Violation Ledger
"""

import asyncio
import threading

import pytest

from deploy_checker.ledger import ViolationAssertionError, ViolationLedger
from deploy_checker.main import ProxiedAddress
from deploy_checker.violations import (
    UpgradeBeaconViolation,
    ValidatorManagerViolation,
    ValidatorViolation,
    ViolationType,
)

# EIP-55 checksum test vectors
ADDR_A = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
ADDR_B = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"
ADDR_C = "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB"
ADDR_D = "0xD1220A0cf47c7B9Be7A2E6BA89F429762e7b9aDb"


def beacon_violation(domain=1000, name="Home", expected=ADDR_A, actual=ADDR_B):
    return UpgradeBeaconViolation(
        domain=domain,
        name=name,
        proxied_address=ProxiedAddress(beacon=ADDR_C, proxy=ADDR_D, implementation=expected),
        expected=expected,
        actual=actual,
    )


class TestAdd:
    """Tests for dedup-aware add"""

    @pytest.fixture
    def ledger(self):
        return ViolationLedger()

    def test_beacon_duplicates_collapse(self, ledger):
        """Same (domain, actual, expected) should be recorded once"""
        assert ledger.add(beacon_violation())
        for _ in range(5):
            assert not ledger.add(beacon_violation())
        assert len(ledger) == 1

    def test_beacon_dedup_ignores_name_and_addresses(self, ledger):
        """Different proxy names with the same mismatch collapse"""
        ledger.add(beacon_violation(name="Home"))
        other = UpgradeBeaconViolation(
            domain=1000,
            name="Replica",
            proxied_address=ProxiedAddress(beacon=ADDR_D, proxy=ADDR_C, implementation=ADDR_A),
            expected=ADDR_A,
            actual=ADDR_B,
        )
        assert not ledger.add(other)
        assert ledger.violations[0].name == "Home"

    def test_beacon_dedup_ignores_address_casing(self, ledger):
        """Checksum-equivalent addresses collapse into one entry"""
        assert ledger.add(beacon_violation(expected=ADDR_A, actual=ADDR_B))
        assert not ledger.add(beacon_violation(expected=ADDR_A.lower(), actual=ADDR_B.lower()))
        assert len(ledger) == 1
        assert ledger.violations[0].actual == ADDR_B

    def test_beacon_different_domain_is_kept(self, ledger):
        ledger.add(beacon_violation(domain=1000))
        ledger.add(beacon_violation(domain=2000))
        assert len(ledger) == 2

    def test_beacon_different_actual_is_kept(self, ledger):
        ledger.add(beacon_violation(actual=ADDR_B))
        ledger.add(beacon_violation(actual=ADDR_C))
        assert len(ledger) == 2

    def test_validator_manager_not_deduplicated(self, ledger):
        """Identical ValidatorManager violations are both kept"""
        v = ValidatorManagerViolation(domain=1000, expected=ADDR_A, actual=ADDR_B)
        assert ledger.add(v)
        assert ledger.add(v)
        assert len(ledger) == 2

    def test_validator_not_deduplicated(self, ledger):
        """Identical Validator violations are both kept"""
        v = ValidatorViolation(local_domain=1000, remote_domain=2000, expected=ADDR_A, actual=ADDR_B)
        ledger.add(v)
        ledger.add(v)
        assert len(ledger.of_kind(ViolationType.VALIDATOR)) == 2

    def test_insertion_order_preserved(self, ledger):
        first = ValidatorManagerViolation(domain=1, expected=ADDR_A, actual=ADDR_B)
        second = beacon_violation()
        third = ValidatorViolation(local_domain=1, remote_domain=2, expected=ADDR_A, actual=ADDR_C)
        for v in (first, second, third):
            ledger.add(v)
        assert ledger.violations == (first, second, third)

    def test_violations_is_a_snapshot(self, ledger):
        ledger.add(beacon_violation())
        snapshot = ledger.violations
        ledger.add(beacon_violation(domain=2))
        assert len(snapshot) == 1
        assert len(ledger) == 2

    def test_clear(self, ledger):
        ledger.add(beacon_violation())
        ledger.clear()
        assert len(ledger) == 0
        assert ledger.add(beacon_violation())

    def test_counts(self, ledger):
        ledger.add(beacon_violation())
        ledger.add(ValidatorManagerViolation(domain=1, expected=ADDR_A, actual=ADDR_B))
        counts = ledger.counts()
        assert counts[ViolationType.UPGRADE_BEACON] == 1
        assert counts[ViolationType.VALIDATOR_MANAGER] == 1
        assert counts[ViolationType.VALIDATOR] == 0


class TestConcurrentAdd:
    """Concurrent writers must not record duplicate beacon drift"""

    def test_threads_record_one_beacon_violation(self):
        ledger = ViolationLedger()
        barrier = threading.Barrier(8)

        def writer():
            barrier.wait()
            for _ in range(50):
                ledger.add(beacon_violation())

        threads = [threading.Thread(target=writer) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(ledger) == 1

    @pytest.mark.asyncio
    async def test_tasks_record_one_beacon_violation(self):
        ledger = ViolationLedger()

        async def writer():
            await asyncio.sleep(0)
            ledger.add(beacon_violation())

        await asyncio.gather(*(writer() for _ in range(20)))
        assert len(ledger) == 1


class TestDistribution:
    """Tests for check_distribution / assert_distribution"""

    @pytest.fixture
    def ledger(self):
        ledger = ViolationLedger()
        ledger.add(beacon_violation(domain=1000))
        ledger.add(beacon_violation(domain=2000))
        return ledger

    def test_exact_match_passes(self, ledger):
        ledger.assert_distribution(
            [ViolationType.UPGRADE_BEACON, ViolationType.VALIDATOR],
            [2, 0],
        )

    def test_count_mismatch_fails(self, ledger):
        with pytest.raises(ViolationAssertionError) as exc_info:
            ledger.assert_distribution([ViolationType.UPGRADE_BEACON], [1])
        result = exc_info.value.result
        assert not result.passed
        assert result.details["mismatches"] == [
            {"kind": "UpgradeBeacon", "expected": 1, "actual": 2}
        ]

    def test_unlisted_kind_fails(self, ledger):
        """A ValidatorManager entry is unexpected when its kind is not listed"""
        ledger.add(ValidatorManagerViolation(domain=1000, expected=ADDR_A, actual=ADDR_B))
        result = ledger.check_distribution(
            [ViolationType.UPGRADE_BEACON, ViolationType.VALIDATOR],
            [2, 0],
        )
        assert not result.passed
        assert len(result.details["unmatched"]) == 1
        assert result.details["unmatched"][0]["kind"] == "ValidatorManager"
        assert "unexpected" in result.reason

    def test_assertion_error_is_assertion_error(self, ledger):
        with pytest.raises(AssertionError):
            ledger.assert_distribution([ViolationType.VALIDATOR], [0])

    def test_length_mismatch_raises_value_error(self, ledger):
        with pytest.raises(ValueError):
            ledger.check_distribution([ViolationType.UPGRADE_BEACON], [2, 0])

    def test_empty_ledger_empty_expectation(self):
        ViolationLedger().assert_distribution([], [])


class TestEmpty:
    """Tests for check_empty / assert_empty"""

    def test_empty_passes(self):
        ledger = ViolationLedger()
        ledger.assert_empty()
        assert ledger.check_empty().passed

    def test_non_empty_fails_with_dump(self):
        ledger = ViolationLedger()
        ledger.add(beacon_violation(domain=1000))
        ledger.add(ValidatorManagerViolation(domain=2000, expected=ADDR_A, actual=ADDR_C))

        with pytest.raises(ViolationAssertionError) as exc_info:
            ledger.assert_empty()

        message = str(exc_info.value)
        assert "found 2" in message
        assert ADDR_B in message
        assert ADDR_C in message
        assert len(exc_info.value.result.details["violations"]) == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
