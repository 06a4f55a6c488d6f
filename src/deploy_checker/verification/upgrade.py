"""
Upgrade Checker

Concrete AppChecker for a deployment described in a YAML file: checks
every declared proxy's beacon, the validator manager and the enrolled
validators on each domain, and optionally contract ownership.
"""

import logging
from typing import Dict, Optional

from ..app import MultiDomainApp
from ..checker import AppChecker
from ..errors import MissingOwnerError, OwnershipMismatchError
from ..logging_config import DomainLogger
from ..main import Address, CheckerConfig, DomainId
from ..violations import ValidatorManagerViolation, ValidatorViolation

logger = logging.getLogger(__name__)


class UpgradeChecker(AppChecker):
    """
    Checks proxies and validator settings against CheckerConfig.

    Checks on one domain run in order: proxies, validator manager,
    validators. Expectations missing from the config are skipped.

    Only the proxy check reads the chain. The validator manager and
    validator checks compare the addresses recorded for the deployment
    (the `domains:` section) with the expected ones (`checker:`), so
    they catch a deployment record that disagrees with the plan, not
    on-chain drift.
    """

    def __init__(
        self,
        app: MultiDomainApp,
        config: CheckerConfig,
        owners: Optional[Dict[DomainId, Address]] = None,
    ):
        super().__init__(app, config, owners if owners is not None else config.owners)

    async def check_domain(self, domain: DomainId) -> None:
        for name, proxied_address in self.app.proxies(domain).items():
            await self.check_proxied_contract(domain, name, proxied_address)

        self.check_validator_manager(domain)
        self.check_validators(domain)

    def check_validator_manager(self, domain: DomainId) -> None:
        expected = self.config.expected_validator_managers.get(domain)
        actual = self.app.validator_manager(domain)
        if expected is None or actual is None:
            return

        if actual != expected:
            self.add_violation(
                ValidatorManagerViolation(domain=domain, expected=expected, actual=actual)
            )

    def check_validators(self, domain: DomainId) -> None:
        expected_validators = self.config.expected_validators.get(domain, {})
        actual_validators = self.app.validators(domain)

        for remote, expected in expected_validators.items():
            actual = actual_validators.get(remote)
            if actual is None:
                DomainLogger(logger, domain).debug(f"no validator recorded for remote {remote}")
                continue
            if actual != expected:
                self.add_violation(
                    ValidatorViolation(
                        local_domain=domain,
                        remote_domain=remote,
                        expected=expected,
                        actual=actual,
                    )
                )

    async def check_ownership(self, domain: DomainId) -> None:
        """
        Compare owner() of each governed contract with owners[domain].

        Raises:
            MissingOwnerError: no expected owner for the domain
            OwnershipMismatchError: first contract with a different owner
        """
        expected = self.owners.get(domain)
        if expected is None:
            raise MissingOwnerError(domain)

        log = DomainLogger(logger, domain)
        provider = self.app.must_get_provider(domain)
        for contract, address in self.app.governed(domain).items():
            actual = await provider.get_owner(address)
            if actual != expected:
                raise OwnershipMismatchError(domain, contract, expected, actual)
            log.debug(f"{contract} owned by {actual}")
