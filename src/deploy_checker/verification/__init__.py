"""
Verification

Chain-state verifiers used by checkers. The concrete UpgradeChecker lives
in deploy_checker.verification.upgrade.
"""

from .beacon import (
    BEACON_IMPLEMENTATION_SLOT,
    BeaconVerifier,
    decode_storage_address,
    require_complete,
)

__all__ = [
    "BEACON_IMPLEMENTATION_SLOT",
    "BeaconVerifier",
    "decode_storage_address",
    "require_complete",
]
