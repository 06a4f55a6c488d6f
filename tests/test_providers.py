"""
Tests for the chain providers
"""

import json

import httpx
import pytest

from deploy_checker.codec import encode_address_word
from deploy_checker.errors import RpcError, StorageDecodeError
from deploy_checker.providers import OWNER_SELECTOR, JsonRpcProvider, StaticProvider

ADDR_A = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
BEACON = "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB"
OWNER = "0x52908400098527886E0F7030069857D2E4169EE7"

RPC_URL = "http://rpc.test"


def rpc_transport(handler_result, requests):
    """MockTransport that records JSON-RPC payloads and answers with handler_result"""

    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        requests.append(payload)
        if isinstance(handler_result, httpx.Response):
            return handler_result
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], **handler_result})

    return httpx.MockTransport(handler)


class TestJsonRpcProvider:
    """Tests for the httpx JSON-RPC provider"""

    @pytest.mark.asyncio
    async def test_get_storage_at_request(self):
        requests = []
        word = "0x" + encode_address_word(ADDR_A).hex()
        provider = JsonRpcProvider(
            RPC_URL,
            domain=1000,
            transport=rpc_transport({"result": word}, requests),
        )

        result = await provider.get_storage_at(BEACON.lower(), 0)

        assert result == encode_address_word(ADDR_A)
        assert requests[0]["method"] == "eth_getStorageAt"
        assert requests[0]["params"] == [BEACON, "0x0", "latest"]

    @pytest.mark.asyncio
    async def test_get_owner_request(self):
        requests = []
        word = "0x" + encode_address_word(OWNER).hex()
        provider = JsonRpcProvider(RPC_URL, transport=rpc_transport({"result": word}, requests))

        assert await provider.get_owner(BEACON) == OWNER
        assert requests[0]["method"] == "eth_call"
        assert requests[0]["params"] == [{"to": BEACON, "data": OWNER_SELECTOR}, "latest"]

    @pytest.mark.asyncio
    async def test_request_ids_increase(self):
        requests = []
        word = "0x" + "00" * 32
        provider = JsonRpcProvider(RPC_URL, transport=rpc_transport({"result": word}, requests))

        await provider.get_storage_at(BEACON, 0)
        await provider.get_storage_at(BEACON, 1)

        assert [r["id"] for r in requests] == [1, 2]
        assert requests[1]["params"][1] == "0x1"

    @pytest.mark.asyncio
    async def test_rpc_error_object(self):
        provider = JsonRpcProvider(
            RPC_URL,
            domain=1000,
            transport=rpc_transport({"error": {"code": -32000, "message": "header not found"}}, []),
        )

        with pytest.raises(RpcError) as exc_info:
            await provider.get_storage_at(BEACON, 0)

        assert exc_info.value.code == -32000
        assert exc_info.value.domain == 1000
        assert "header not found" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_rpc_error_string(self):
        provider = JsonRpcProvider(
            RPC_URL,
            domain=1000,
            transport=rpc_transport({"error": "rate limited"}, []),
        )

        with pytest.raises(RpcError) as exc_info:
            await provider.get_storage_at(BEACON, 0)

        assert exc_info.value.code is None
        assert "rate limited" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        provider = JsonRpcProvider(
            RPC_URL,
            transport=rpc_transport(httpx.Response(503, text="unavailable"), []),
        )
        with pytest.raises(RpcError, match="HTTP 503"):
            await provider.get_storage_at(BEACON, 0)

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = JsonRpcProvider(RPC_URL, transport=httpx.MockTransport(handler))
        with pytest.raises(RpcError, match="request failed"):
            await provider.get_storage_at(BEACON, 0)

    @pytest.mark.asyncio
    async def test_missing_result(self):
        provider = JsonRpcProvider(RPC_URL, transport=rpc_transport({}, []))
        with pytest.raises(RpcError, match="no result"):
            await provider.get_storage_at(BEACON, 0)

    @pytest.mark.asyncio
    async def test_short_word_is_rejected(self):
        provider = JsonRpcProvider(RPC_URL, transport=rpc_transport({"result": "0x"}, []))
        with pytest.raises(StorageDecodeError):
            await provider.get_owner(BEACON)


class TestStaticProvider:
    """Tests for the in-memory provider"""

    @pytest.mark.asyncio
    async def test_unset_slot_is_zero(self):
        assert await StaticProvider().get_storage_at(BEACON, 0) == bytes(32)

    @pytest.mark.asyncio
    async def test_storage_keys_are_normalized(self):
        provider = StaticProvider(storage={(BEACON.lower(), 0): encode_address_word(ADDR_A)})
        assert await provider.get_storage_at(BEACON, 0) == encode_address_word(ADDR_A)

    @pytest.mark.asyncio
    async def test_unknown_owner_raises(self):
        with pytest.raises(RpcError):
            await StaticProvider().get_owner(BEACON)

    @pytest.mark.asyncio
    async def test_records_calls(self):
        provider = StaticProvider(owners={BEACON: OWNER})
        await provider.get_owner(BEACON.lower())
        assert provider.calls == [("get_owner", BEACON)]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
