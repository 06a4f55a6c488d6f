"""
Chain Providers

Per-domain read access to chain state. The checker needs two reads:
a raw storage word and the owner() of a governed contract. Retries are
the caller's business; a failed request raises RpcError.
"""

import itertools
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

import httpx

from .codec import decode_address_word, to_word, WORD_SIZE
from .errors import RpcError
from .logging_config import DomainLogger
from .main import Address, DomainId, normalize_address

logger = logging.getLogger(__name__)

# keccak256("owner()")[:4]
OWNER_SELECTOR = "0x8da5cb5b"


class ChainProvider(ABC):
    """Base class for per-domain chain readers"""

    domain: Optional[DomainId] = None

    @abstractmethod
    async def get_storage_at(self, account: Address, slot: int) -> bytes:
        """
        Read one storage slot.

        Returns:
            The 32-byte storage word
        """
        pass

    @abstractmethod
    async def get_owner(self, account: Address) -> Address:
        """Return the checksum address reported by account.owner()"""
        pass


class JsonRpcProvider(ChainProvider):
    """
    Ethereum JSON-RPC provider over HTTP.

    Uses one short-lived httpx.AsyncClient per request; a transport can be
    injected for tests.
    """

    def __init__(
        self,
        url: str,
        domain: Optional[DomainId] = None,
        timeout_ms: int = 10000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.domain = domain
        self.timeout_ms = timeout_ms
        self._transport = transport
        self._ids = itertools.count(1)
        self._log = DomainLogger(logger, domain)

    async def _request(self, method: str, params: List[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_ms / 1000,
                transport=self._transport,
            ) as client:
                response = await client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            raise RpcError(f"{method} request failed: {e}", domain=self.domain) from e

        if response.status_code != 200:
            raise RpcError(
                f"{method} returned HTTP {response.status_code}",
                domain=self.domain,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise RpcError(f"{method} returned invalid JSON", domain=self.domain) from e
        if not isinstance(body, dict):
            raise RpcError(f"{method} returned a non-object response", domain=self.domain)

        error = body.get("error")
        if error and not isinstance(error, dict):
            raise RpcError(f"{method} error: {error}", domain=self.domain)
        if error:
            raise RpcError(
                f"{method} error: {error.get('message', 'unknown error')}",
                code=error.get("code"),
                domain=self.domain,
            )
        if "result" not in body:
            raise RpcError(f"{method} response has no result", domain=self.domain)

        self._log.debug(f"{method} ok")
        return body["result"]

    async def get_storage_at(self, account: Address, slot: int) -> bytes:
        result = await self._request(
            "eth_getStorageAt",
            [normalize_address(account), hex(slot), "latest"],
        )
        return to_word(result)

    async def get_owner(self, account: Address) -> Address:
        result = await self._request(
            "eth_call",
            [{"to": normalize_address(account), "data": OWNER_SELECTOR}, "latest"],
        )
        return decode_address_word(result)


class StaticProvider(ChainProvider):
    """
    In-memory provider backed by fixed storage and owner maps.

    Unset slots read as zero words, like an untouched slot on chain.
    Every read is appended to `calls`.
    """

    def __init__(
        self,
        storage: Optional[Dict[Tuple[Address, int], bytes]] = None,
        owners: Optional[Dict[Address, Address]] = None,
        domain: Optional[DomainId] = None,
    ):
        self.domain = domain
        self._storage: Dict[Tuple[Address, int], bytes] = {
            (normalize_address(account), slot): to_word(word)
            for (account, slot), word in (storage or {}).items()
        }
        self._owners: Dict[Address, Address] = {
            normalize_address(account): normalize_address(owner)
            for account, owner in (owners or {}).items()
        }
        self.calls: List[Tuple[str, Address]] = []

    def set_storage(self, account: Address, slot: int, word: bytes) -> None:
        self._storage[(normalize_address(account), slot)] = to_word(word)

    def set_owner(self, account: Address, owner: Address) -> None:
        self._owners[normalize_address(account)] = normalize_address(owner)

    async def get_storage_at(self, account: Address, slot: int) -> bytes:
        account = normalize_address(account)
        self.calls.append(("get_storage_at", account))
        return self._storage.get((account, slot), bytes(WORD_SIZE))

    async def get_owner(self, account: Address) -> Address:
        account = normalize_address(account)
        self.calls.append(("get_owner", account))
        if account not in self._owners:
            raise RpcError(f"owner() reverted for {account}", domain=self.domain)
        return self._owners[account]
