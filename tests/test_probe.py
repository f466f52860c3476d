from typing import Any

import pytest

from chaincfg.errors import EndpointUnreachableError, NetworkIdMismatchError
from chaincfg.models import ResolvedProfile
from chaincfg.probe import check_network_id, probe_endpoint
from chaincfg.rpc_client import RPCClient, RPCError


def _profile(endpoint: str, network_id: Any) -> ResolvedProfile:
    return ResolvedProfile(name="test", endpoint=endpoint, network_id=network_id)


async def test_rpc_client_reads_chain_state(rpc_node: Any) -> None:
    async with RPCClient(rpc_node.url, retries=1) as client:
        assert await client.get_chain_id() == 43113
        assert await client.get_net_version() == 43113
        assert await client.get_latest_block_number() == 0x1B4
        assert (await client.get_client_version()).startswith("Ganache")

    assert rpc_node.methods == [
        "eth_chainId",
        "net_version",
        "eth_blockNumber",
        "web3_clientVersion",
    ]


async def test_rpc_client_surfaces_jsonrpc_errors(rpc_node: Any) -> None:
    async with RPCClient(rpc_node.url, retries=1) as client:
        with pytest.raises(RPCError, match="Method not found"):
            await client._call("eth_unknownMethod")


async def test_rpc_client_retries_before_giving_up(rpc_node: Any) -> None:
    rpc_node.status = 503

    async with RPCClient(rpc_node.url, retries=3, backoff_factor=0) as client:
        with pytest.raises(RPCError, match="HTTP status 503"):
            await client.get_chain_id()

    assert rpc_node.methods == ["eth_chainId"] * 3


async def test_probe_matching_network(rpc_node: Any) -> None:
    result = await probe_endpoint(_profile(rpc_node.url, 43113), retries=1)

    assert result.endpoint == rpc_node.url
    assert result.chain_id == 43113
    assert result.latest_block == 0x1B4
    assert result.client_version.startswith("Ganache")


async def test_probe_wildcard_network(rpc_node: Any) -> None:
    rpc_node.chain_id = 1337

    result = await probe_endpoint(_profile(rpc_node.url, "*"), retries=1)

    assert result.chain_id == 1337


async def test_probe_network_mismatch(rpc_node: Any) -> None:
    with pytest.raises(NetworkIdMismatchError) as info:
        await probe_endpoint(_profile(rpc_node.url, 43114), retries=1)

    assert info.value.expected == 43114
    assert info.value.actual == 43113


async def test_probe_unreachable_endpoint() -> None:
    with pytest.raises(EndpointUnreachableError, match="127.0.0.1:1"):
        await probe_endpoint(_profile("http://127.0.0.1:1/", 1), retries=1)


async def test_probe_failing_endpoint(rpc_node: Any) -> None:
    rpc_node.status = 500

    with pytest.raises(EndpointUnreachableError, match="HTTP status 500"):
        await probe_endpoint(_profile(rpc_node.url, 43113), retries=2, backoff_factor=0)


@pytest.mark.parametrize("block", [None, "latest", "0xzz", {"number": 436}])
async def test_probe_rejects_malformed_block_number(rpc_node: Any, block: Any) -> None:
    rpc_node.overrides["eth_blockNumber"] = block

    with pytest.raises(EndpointUnreachableError, match=rpc_node.url):
        await probe_endpoint(_profile(rpc_node.url, 43113), retries=1)


async def test_rpc_client_accepts_decimal_block_number(rpc_node: Any) -> None:
    rpc_node.overrides["eth_blockNumber"] = 436

    async with RPCClient(rpc_node.url, retries=1) as client:
        assert await client.get_latest_block_number() == 436


def test_check_network_id() -> None:
    check_network_id("http://node", "*", 5)
    check_network_id("http://node", 5, 5)

    with pytest.raises(NetworkIdMismatchError):
        check_network_id("http://node", 1, 5)
