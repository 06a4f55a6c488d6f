"""
Deploy Checker - Core Orchestration Logic

AppChecker fans out one task per domain, waits for all of them, and
collects what they find into a single ViolationLedger. Concrete checkers
decide what to verify on each domain.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, Tuple

from .app import MultiDomainApp
from .errors import DomainCheckError
from .ledger import DistributionResult, ViolationLedger
from .logging_config import DomainLogger
from .main import Address, DomainId, ProxiedAddress, normalize_address
from .verification.beacon import BeaconVerifier
from .violations import Violation, ViolationType

logger = logging.getLogger(__name__)


class AppChecker(ABC):
    """
    Base class for deployment checkers.

    Lifecycle: constructed -> checked. check() may run again on the same
    instance and keeps adding to the same ledger; callers wanting a clean
    report clear the ledger or build a new checker.
    """

    def __init__(
        self,
        app: MultiDomainApp,
        config: Any,
        owners: Optional[Dict[DomainId, Address]] = None,
    ):
        self.app = app
        self.config = config
        self.owners: Dict[DomainId, Address] = {
            domain: normalize_address(owner)
            for domain, owner in (owners or {}).items()
        }
        self.ledger = ViolationLedger()
        self._beacons = BeaconVerifier(app, self.ledger)

    # =========================================================================
    # Subclass hooks
    # =========================================================================

    @abstractmethod
    async def check_domain(self, domain: DomainId) -> None:
        """Run every check for one domain, recording drift via add_violation"""
        pass

    @abstractmethod
    async def check_ownership(self, domain: DomainId) -> None:
        """Verify governed contracts on one domain are owned by owners[domain]"""
        pass

    # =========================================================================
    # Fan-out
    # =========================================================================

    async def check(self) -> None:
        """
        Run check_domain for every domain concurrently.

        Returns once every domain task has finished. If any failed, raises
        DomainCheckError after the join; violations recorded by the other
        domains stay in the ledger.
        """
        await self._for_each_domain("check", self.check_domain)

    async def check_all_ownership(self) -> None:
        """Run check_ownership for every domain concurrently"""
        await self._for_each_domain("ownership", self.check_ownership)

    async def _for_each_domain(
        self,
        label: str,
        func: Callable[[DomainId], Awaitable[None]],
    ) -> None:
        domains = self.app.domains
        logger.info(f"Starting {label} on {len(domains)} domain(s)")

        tasks = [asyncio.create_task(func(domain)) for domain in domains]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        failures: Dict[DomainId, BaseException] = {}
        for domain, result in zip(domains, results):
            if isinstance(result, Exception):
                DomainLogger(logger, domain).error(f"{label} failed: {result}")
                failures[domain] = result
            elif isinstance(result, BaseException):
                raise result

        logger.info(
            f"Finished {label}: {len(domains) - len(failures)} domain(s) ok, "
            f"{len(failures)} failed, {len(self.ledger)} violation(s) recorded"
        )

        if failures:
            raise DomainCheckError(failures)

    # =========================================================================
    # Shared checks
    # =========================================================================

    async def check_proxied_contract(
        self,
        domain: DomainId,
        name: str,
        proxied_address: ProxiedAddress,
    ) -> bool:
        """Verify a proxy's beacon points at its declared implementation"""
        return await self._beacons.check_proxied_contract(domain, name, proxied_address)

    # =========================================================================
    # Ledger surface
    # =========================================================================

    def add_violation(self, violation: Violation) -> bool:
        return self.ledger.add(violation)

    @property
    def violations(self) -> Tuple[Violation, ...]:
        return self.ledger.violations

    def check_distribution(
        self,
        kinds: Sequence[ViolationType],
        expected_counts: Sequence[int],
    ) -> DistributionResult:
        return self.ledger.check_distribution(kinds, expected_counts)

    def assert_distribution(
        self,
        kinds: Sequence[ViolationType],
        expected_counts: Sequence[int],
    ) -> None:
        self.ledger.assert_distribution(kinds, expected_counts)

    def check_empty(self) -> DistributionResult:
        return self.ledger.check_empty()

    def assert_empty(self) -> None:
        self.ledger.assert_empty()


async def run_checks(checker: AppChecker, ownership: bool = False) -> ViolationLedger:
    """
    Drive any AppChecker implementation.

    Runs the domain checks and, when asked, the ownership checks, then
    returns the checker's ledger.
    """
    await checker.check()
    if ownership:
        await checker.check_all_ownership()
    return checker.ledger
