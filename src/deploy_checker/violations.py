"""
Violation Model

The closed set of drift kinds a checker can record. Adding a kind means
adding a ViolationType member, a dataclass, and a branch in every
dispatcher (describe_violation, the output formatters); the test suite
walks every member through each dispatcher.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Union

from .errors import UnhandledViolationError
from .main import Address, DomainId, ProxiedAddress, normalize_address


class ViolationType(Enum):
    """Drift kinds"""
    UPGRADE_BEACON = "UpgradeBeacon"
    VALIDATOR_MANAGER = "ValidatorManager"
    VALIDATOR = "Validator"


def _normalize_addresses(violation) -> None:
    # frozen dataclasses: bypass __setattr__
    object.__setattr__(violation, "expected", normalize_address(violation.expected))
    object.__setattr__(violation, "actual", normalize_address(violation.actual))


@dataclass(frozen=True)
class UpgradeBeaconViolation:
    """Beacon storage points at an implementation other than the declared one"""
    domain: DomainId
    name: str
    proxied_address: ProxiedAddress
    expected: Address
    actual: Address
    kind: ViolationType = field(default=ViolationType.UPGRADE_BEACON, init=False)

    def __post_init__(self):
        _normalize_addresses(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "domain": self.domain,
            "name": self.name,
            "proxied_address": self.proxied_address.to_dict(),
            "expected": self.expected,
            "actual": self.actual,
        }


@dataclass(frozen=True)
class ValidatorManagerViolation:
    """Deployed validator manager differs from the declared one"""
    domain: DomainId
    expected: Address
    actual: Address
    kind: ViolationType = field(default=ViolationType.VALIDATOR_MANAGER, init=False)

    def __post_init__(self):
        _normalize_addresses(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "domain": self.domain,
            "expected": self.expected,
            "actual": self.actual,
        }


@dataclass(frozen=True)
class ValidatorViolation:
    """Validator enrolled on local_domain for remote_domain differs from the declared one"""
    local_domain: DomainId
    remote_domain: DomainId
    expected: Address
    actual: Address
    kind: ViolationType = field(default=ViolationType.VALIDATOR, init=False)

    def __post_init__(self):
        _normalize_addresses(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "local_domain": self.local_domain,
            "remote_domain": self.remote_domain,
            "expected": self.expected,
            "actual": self.actual,
        }


Violation = Union[UpgradeBeaconViolation, ValidatorManagerViolation, ValidatorViolation]


def describe_violation(violation: Violation) -> str:
    """One-line human readable rendering"""
    kind = violation.kind
    if kind is ViolationType.UPGRADE_BEACON:
        return (
            f"[{kind.value}] domain {violation.domain} {violation.name}: "
            f"beacon {violation.proxied_address.beacon} points at {violation.actual}, "
            f"expected {violation.expected}"
        )
    elif kind is ViolationType.VALIDATOR_MANAGER:
        return (
            f"[{kind.value}] domain {violation.domain}: "
            f"validator manager is {violation.actual}, expected {violation.expected}"
        )
    elif kind is ViolationType.VALIDATOR:
        return (
            f"[{kind.value}] domain {violation.local_domain} "
            f"(remote {violation.remote_domain}): validator is {violation.actual}, "
            f"expected {violation.expected}"
        )
    raise UnhandledViolationError(f"No description for violation kind: {kind!r}")
