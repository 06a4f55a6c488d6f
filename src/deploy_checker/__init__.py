"""
Deploy Checker

Drift detection for multi-domain smart-contract deployments. A checker
reads live chain state, compares it with the declared deployment, and
records every discrepancy as a Violation in a ledger rather than failing
on the first mismatch.
"""

__version__ = "1.0.0"

# Types and configuration
from .main import (
    ZERO_ADDRESS,
    Address,
    CheckerConfig,
    DomainId,
    ProxiedAddress,
    addresses_equal,
    normalize_address,
)

# Violation model and ledger
from .violations import (
    UpgradeBeaconViolation,
    ValidatorManagerViolation,
    ValidatorViolation,
    Violation,
    ViolationType,
    describe_violation,
)
from .ledger import DistributionResult, ViolationAssertionError, ViolationLedger

# Chain access and topology
from .providers import ChainProvider, JsonRpcProvider, StaticProvider
from .app import DomainContracts, MultiDomainApp

# Checkers
from .checker import AppChecker, run_checks
from .verification import BeaconVerifier, decode_storage_address
from .verification.upgrade import UpgradeChecker

from .errors import (
    CheckerError,
    ConfigurationError,
    DomainCheckError,
    InvalidAddressError,
    MissingAddressError,
    MissingOwnerError,
    OwnershipMismatchError,
    RpcError,
    StorageDecodeError,
    UnhandledViolationError,
    UnknownDomainError,
)

__all__ = [
    # Types
    "ZERO_ADDRESS",
    "Address",
    "CheckerConfig",
    "DomainId",
    "ProxiedAddress",
    "addresses_equal",
    "normalize_address",
    # Violations
    "UpgradeBeaconViolation",
    "ValidatorManagerViolation",
    "ValidatorViolation",
    "Violation",
    "ViolationType",
    "describe_violation",
    "DistributionResult",
    "ViolationAssertionError",
    "ViolationLedger",
    # Chain
    "ChainProvider",
    "JsonRpcProvider",
    "StaticProvider",
    "DomainContracts",
    "MultiDomainApp",
    # Checkers
    "AppChecker",
    "run_checks",
    "BeaconVerifier",
    "decode_storage_address",
    "UpgradeChecker",
    # Errors
    "CheckerError",
    "ConfigurationError",
    "DomainCheckError",
    "InvalidAddressError",
    "MissingAddressError",
    "MissingOwnerError",
    "OwnershipMismatchError",
    "RpcError",
    "StorageDecodeError",
    "UnhandledViolationError",
    "UnknownDomainError",
    # Meta
    "__version__",
]
