"""
Upgrade Beacon Verifier

Confirms that a proxy's beacon points at the declared implementation.
The beacon keeps the implementation address right-aligned in storage
slot 0.
"""

import logging
from typing import Union

from ..app import MultiDomainApp
from ..codec import decode_address_word
from ..errors import InvalidAddressError, MissingAddressError
from ..ledger import ViolationLedger
from ..logging_config import DomainLogger
from ..main import Address, DomainId, ProxiedAddress, normalize_address
from ..violations import UpgradeBeaconViolation

logger = logging.getLogger(__name__)

BEACON_IMPLEMENTATION_SLOT = 0


def decode_storage_address(word: Union[bytes, str]) -> Address:
    """Address stored in the low 20 bytes of a 32-byte storage word"""
    return decode_address_word(word)


def require_complete(name: str, proxied_address: ProxiedAddress) -> None:
    """
    Raise unless beacon, proxy and implementation are set and well formed.

    Raises:
        MissingAddressError: an address is unset or zero
        InvalidAddressError: an address is not 20 hex bytes
    """
    missing = proxied_address.missing_field()
    if missing is not None:
        raise MissingAddressError(name, missing)

    for field_name, value in proxied_address.to_dict().items():
        try:
            normalize_address(value)
        except InvalidAddressError as e:
            raise InvalidAddressError(f"{name}.{field_name}: {e}") from e


class BeaconVerifier:
    """
    Reads beacon storage and records an UpgradeBeacon violation on mismatch.

    Bound to the application that supplies providers and to the ledger
    that receives violations.
    """

    def __init__(self, app: MultiDomainApp, ledger: ViolationLedger):
        self.app = app
        self.ledger = ledger

    async def check_proxied_contract(
        self,
        domain: DomainId,
        name: str,
        proxied_address: ProxiedAddress,
    ) -> bool:
        """
        Verify one proxied contract.

        Args:
            domain: Domain the proxy lives on
            name: Contract name, used for reporting only
            proxied_address: Declared beacon/proxy/implementation

        Returns:
            True when the beacon points at the declared implementation

        Raises:
            MissingAddressError: before any RPC read, when an address is unset
            InvalidAddressError: before any RPC read, when an address is malformed
        """
        require_complete(name, proxied_address)

        provider = self.app.must_get_provider(domain)
        word = await provider.get_storage_at(
            proxied_address.beacon,
            BEACON_IMPLEMENTATION_SLOT,
        )
        actual = decode_storage_address(word)
        expected = normalize_address(proxied_address.implementation)

        if actual == expected:
            DomainLogger(logger, domain).debug(f"{name} beacon points at {actual}")
            return True

        self.ledger.add(
            UpgradeBeaconViolation(
                domain=domain,
                name=name,
                proxied_address=proxied_address,
                expected=expected,
                actual=actual,
            )
        )
        return False
