"""Hyperion and chain API clients against httpx.MockTransport."""

from __future__ import annotations

import httpx
import pytest

from wax_trigger.errors import UpstreamQueryFailure
from wax_trigger.models.query import BlockSource, HistoryQuery
from wax_trigger.wax.chain import ChainApiClient
from wax_trigger.wax.hyperion import HyperionClient
from wax_trigger.wax.networks import NETWORKS, get_network

from tests.factories import make_action
from tests.mocks import T0

CHAIN_INFO = {
    "server_version": "d6b8b4d6",
    "chain_id": NETWORKS["mainnet"].chain_id,
    "head_block_num": 250000100,
    "last_irreversible_block_num": 250000000,
    "last_irreversible_block_id": "0ee6b280lib",
    "head_block_id": "0ee6b2e4head",
    "head_block_time": "2025-01-01T12:00:00.000",
    "head_block_producer": "eosphereiobp",
}


def _client(handler, cls, base="https://wax.example.com"):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return cls(base, client=http)


async def test_get_actions_sends_filters():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"actions": [make_action(T0), "junk"]})

    client = _client(handler, HyperionClient)
    query = HistoryQuery(
        after=T0, before=T0, limit=100,
        extra_filters={"act.account": "atomicassets", "act.name": "logtransfer,transfer",
                       "data.to": "alice"},
    )
    try:
        actions = await client.get_actions(query)
    finally:
        await client.close()

    assert len(actions) == 1
    request = seen[0]
    assert request.url.path == "/v2/history/get_actions"
    assert request.url.params["act.name"] == "logtransfer,transfer"
    assert request.url.params["data.to"] == "alice"
    assert request.url.params["sort"] == "asc"
    assert request.url.params["after"] == "2025-01-01T12:00:00.000Z"


async def test_get_actions_missing_key_is_empty():
    client = _client(lambda r: httpx.Response(200, json={"total": {"value": 0}}), HyperionClient)
    try:
        assert await client.get_actions(HistoryQuery(after=T0, before=T0)) == []
    finally:
        await client.close()


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="elasticsearch timeout"),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json=["not", "an", "object"]),
        httpx.Response(200, json={"actions": "nope"}),
    ],
)
async def test_get_actions_errors_wrapped(response):
    client = _client(lambda r: response, HyperionClient)
    try:
        with pytest.raises(UpstreamQueryFailure) as info:
            await client.get_actions(HistoryQuery(after=T0, before=T0))
    finally:
        await client.close()
    assert info.value.service == "hyperion"


async def test_connection_error_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler, HyperionClient)
    try:
        with pytest.raises(UpstreamQueryFailure):
            await client.get_actions(HistoryQuery(after=T0, before=T0))
    finally:
        await client.close()


async def test_chain_get_info():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1/chain/get_info"
        return httpx.Response(200, json=CHAIN_INFO)

    client = _client(handler, ChainApiClient, base="https://chain.example.com/")
    try:
        info = await client.get_info()
    finally:
        await client.close()

    assert info.block_num(BlockSource.HEAD) == 250000100
    assert info.block_num(BlockSource.IRREVERSIBLE) == 250000000
    assert info.block_id(BlockSource.IRREVERSIBLE) == "0ee6b280lib"
    assert info.chain_id == NETWORKS["mainnet"].chain_id


@pytest.mark.parametrize(
    "response",
    [httpx.Response(502, text="bad gateway"), httpx.Response(200, json={"chain_id": "x"})],
)
async def test_chain_errors_wrapped(response):
    client = _client(lambda r: response, ChainApiClient)
    try:
        with pytest.raises(UpstreamQueryFailure) as info:
            await client.get_info()
    finally:
        await client.close()
    assert info.value.service == "chain_api"


def test_network_resolution():
    assert get_network("testnet").chain_api == "https://testnet.waxsweden.org"
    custom = get_network("custom", hyperion="https://my.hyperion")
    assert custom.name == "Custom Network"
    assert custom.hyperion == "https://my.hyperion"
    assert custom.chain_api == NETWORKS["mainnet"].chain_api
