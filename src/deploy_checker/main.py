"""
Configuration and Types for the Deploy Checker

Addresses are compared in EIP-55 checksum form; every address that enters
the checker goes through normalize_address() first.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from eth_utils import is_hex_address, to_checksum_address

from .errors import ConfigurationError, InvalidAddressError

DomainId = int
Address = str

ZERO_ADDRESS: Address = "0x0000000000000000000000000000000000000000"


def normalize_address(value: Any) -> Address:
    """
    Convert an address to its checksum rendering.

    Accepts any casing of a 0x-prefixed 40 hex digit string.
    """
    if not isinstance(value, str) or not is_hex_address(value):
        raise InvalidAddressError(f"Not a 20-byte hex address: {value!r}")
    return to_checksum_address(value)


def addresses_equal(a: Address, b: Address) -> bool:
    """Compare two addresses on their checksum rendering"""
    return normalize_address(a) == normalize_address(b)


def is_unset_address(value: Optional[str]) -> bool:
    """True for None, empty strings and the zero address"""
    if not value:
        return True
    return is_hex_address(value) and int(value, 16) == 0


def coerce_domain_keys(data: Optional[Mapping[Any, Any]]) -> Dict[DomainId, Any]:
    """YAML keys may be strings; domain ids are ints"""
    result: Dict[DomainId, Any] = {}
    for key, value in (data or {}).items():
        try:
            result[int(key)] = value
        except (TypeError, ValueError):
            raise ConfigurationError(f"Domain id must be an integer: {key!r}")
    return result


@dataclass(frozen=True)
class ProxiedAddress:
    """The three addresses composing an upgradeable-proxy deployment"""
    beacon: Optional[Address] = None
    proxy: Optional[Address] = None
    implementation: Optional[Address] = None

    def missing_field(self) -> Optional[str]:
        """Name of the first unset address, or None when complete"""
        for name in ("beacon", "proxy", "implementation"):
            if is_unset_address(getattr(self, name)):
                return name
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProxiedAddress":
        return cls(
            beacon=data.get("beacon"),
            proxy=data.get("proxy"),
            implementation=data.get("implementation"),
        )

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "beacon": self.beacon,
            "proxy": self.proxy,
            "implementation": self.implementation,
        }


@dataclass
class CheckerConfig:
    """
    Expected state handed to a checker.

    The orchestrator treats this object as opaque; concrete checkers read
    the expectations they care about.
    """
    # RPC settings
    rpc_timeout_ms: int = field(
        default_factory=lambda: int(os.getenv("CHECKER_RPC_TIMEOUT_MS", "10000"))
    )

    # Which checks to run
    check_ownership: bool = field(
        default_factory=lambda: os.getenv("CHECKER_CHECK_OWNERSHIP", "false").lower() == "true"
    )

    # Expectations
    owners: Dict[DomainId, Address] = field(default_factory=dict)
    expected_validator_managers: Dict[DomainId, Address] = field(default_factory=dict)
    expected_validators: Dict[DomainId, Dict[DomainId, Address]] = field(default_factory=dict)

    def __post_init__(self):
        self.owners = {
            domain: normalize_address(owner)
            for domain, owner in coerce_domain_keys(self.owners).items()
        }
        self.expected_validator_managers = {
            domain: normalize_address(manager)
            for domain, manager in coerce_domain_keys(self.expected_validator_managers).items()
        }
        self.expected_validators = {
            local: {
                remote: normalize_address(validator)
                for remote, validator in coerce_domain_keys(remotes).items()
            }
            for local, remotes in coerce_domain_keys(self.expected_validators).items()
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CheckerConfig":
        """Build from the `checker:` section of a deployment file"""
        known = {
            "rpc_timeout_ms",
            "check_ownership",
            "owners",
            "expected_validator_managers",
            "expected_validators",
        }
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown checker settings: {sorted(unknown)}")
        return cls(**dict(data))

    @classmethod
    def from_yaml(cls, path: str) -> "CheckerConfig":
        """Load config from YAML file"""
        return cls.from_dict(load_yaml(path).get("checker") or {})

    @classmethod
    def from_env(cls) -> "CheckerConfig":
        """Load config from environment variables"""
        return cls(
            rpc_timeout_ms=int(os.getenv("CHECKER_RPC_TIMEOUT_MS", "10000")),
            check_ownership=os.getenv("CHECKER_CHECK_OWNERSHIP", "false").lower() == "true",
        )


def load_yaml(path: str) -> Dict[str, Any]:
    """Read a deployment description"""
    import yaml

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Deployment file must be a mapping: {path}")
    return data
