import sys
from typing import Any, Dict, Iterator, List

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer
from loguru import logger

# Well-known development key (first account of the Hardhat/Anvil mnemonic).
DEV_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEV_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

SECRET_VARS = ("PRIVATE_KEY", "SNOWTRACE_KEY", "CHAINCFG_CONFIG_PATH")


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> None:
    for name in SECRET_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's own .env out of the tests.
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _restore_logger() -> Iterator[None]:
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def log_messages() -> Iterator[List[str]]:
    messages: List[str] = []
    handler_id = logger.add(lambda message: messages.append(str(message)), level="DEBUG")
    yield messages
    logger.remove(handler_id)


class FakeNode:
    """In-process JSON-RPC node answering the probe's calls."""

    def __init__(self, chain_id: int = 43113, block: int = 0x1B4) -> None:
        self.chain_id = chain_id
        self.block = block
        self.status = 200
        self.methods: List[str] = []
        self.overrides: Dict[str, Any] = {}
        self.url = ""

    async def handle(self, request: web.Request) -> web.Response:
        body: Dict[str, Any] = await request.json()
        self.methods.append(body["method"])
        if self.status != 200:
            return web.Response(status=self.status, text="unavailable")

        results = {
            "eth_chainId": hex(self.chain_id),
            "net_version": str(self.chain_id),
            "eth_blockNumber": hex(self.block),
            "web3_clientVersion": "Ganache/v7.9.1/EthereumJS TestRPC/v7.9.1/ethereum-js",
        }
        results.update(self.overrides)
        if body["method"] in results:
            payload = {"jsonrpc": "2.0", "id": body["id"], "result": results[body["method"]]}
        else:
            payload = {
                "jsonrpc": "2.0",
                "id": body["id"],
                "error": {"code": -32601, "message": "Method not found"},
            }
        return web.json_response(payload)


@pytest_asyncio.fixture
async def rpc_node() -> Any:
    node = FakeNode()
    app = web.Application()
    app.router.add_post("/", node.handle)
    server = TestServer(app)
    await server.start_server()
    node.url = str(server.make_url("/"))
    yield node
    await server.close()
