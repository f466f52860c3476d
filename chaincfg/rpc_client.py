import asyncio
import itertools
from types import TracebackType
from typing import Any, List, Optional, Type

import aiohttp
from loguru import logger
from pydantic import TypeAdapter

from chaincfg.config import settings
from chaincfg.utils.custom_types import HexInt

_hex_int = TypeAdapter(HexInt)


class RPCError(Exception):
    """Raised when a JSON-RPC call fails at the HTTP or the JSON-RPC level."""


class RPCClient:
    """RPCClient is an asynchronous JSON-RPC client for probing an Ethereum-compatible node."""  # noqa: E501

    def __init__(
        self,
        rpc_endpoint: str,
        retries: int = settings.rpc_max_retries,
        backoff_factor: float = settings.rpc_backoff_factor,
        timeout: float = settings.rpc_timeout,
    ) -> None:
        """
        Initialize the RPC client.

        Must be created inside a running event loop.

        Args:
            rpc_endpoint (str): The endpoint URL for the RPC server.
            retries (int): Attempts per call before giving up.
            backoff_factor (float): Base delay of the exponential backoff.
            timeout (float): Total timeout of one HTTP request, in seconds.

        Attributes:
            session (aiohttp.ClientSession): The http session for making HTTP requests.
            _id_counter (itertools.count): Counter for generating unique request IDs.
        """
        self.rpc_endpoint = rpc_endpoint
        self.retries = max(1, retries)
        self.backoff_factor = backoff_factor
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.session = aiohttp.ClientSession()

        # Incrementing counter for unique IDs
        self._id_counter = itertools.count(1)

    async def __aenter__(self) -> "RPCClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """
        Asynchronously closes the session.

        This method should be called to properly close the session and release any
        resources associated with it.
        """
        await self.session.close()

    async def _call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Makes an asynchronous JSON-RPC call with retries and exponential backoff.

        Args:
            method (str): The name of the RPC method to call.
            params (Optional[List[Any]]): The parameters to pass to the RPC method.
                                          Defaults to None.

        Returns:
            Any: The result of the RPC call.

        Raises:
            RPCError: If the RPC call fails after the configured number of retries
                      or the node answers with a JSON-RPC error.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._id_counter),
            "method": method,
            "params": params or [],
        }
        attempt = 0

        while True:
            try:
                async with self.session.post(
                    self.rpc_endpoint,
                    json=payload,
                    timeout=self.timeout,
                ) as response:

                    # Check for HTTP errors
                    if response.status != 200:
                        raise RPCError(
                            f"{method} failed with HTTP status {response.status}",
                        )

                    data = await response.json(content_type=None)

                    # Check for JSON-RPC errors
                    if "error" in data:
                        raise RPCError(f"{method} returned error: {data['error']}")

                    if "result" not in data:
                        raise RPCError(f"{method} returned no result")

                    return data["result"]

            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError, RPCError) as exc:  # noqa: E501
                attempt += 1

                if attempt >= self.retries:
                    if isinstance(exc, RPCError):
                        raise
                    raise RPCError(
                        f"{method} failed: {type(exc).__name__}: {exc}",
                    ) from exc

                # Exponential backoff
                delay = self.backoff_factor * (2**attempt)
                logger.warning(
                    f"{method} on {self.rpc_endpoint} failed ({exc}), "
                    f"retrying in {delay:.2f}s",
                )
                await asyncio.sleep(delay)

    async def get_chain_id(self) -> int:
        """
        Asynchronously retrieves the chain id reported by the node.

        Returns:
            int: The chain id from ``eth_chainId``.
        """
        return _hex_int.validate_python(await self._call("eth_chainId"))

    async def get_net_version(self) -> int:
        """Network id from ``net_version``, a decimal string on most nodes."""
        return int(await self._call("net_version"))

    async def get_client_version(self) -> str:
        return await self._call("web3_clientVersion")

    async def get_latest_block_number(self) -> int:
        """
        Asynchronously retrieves the latest block number.

        This method calls the "eth_blockNumber" RPC method to get the latest block
        number in hexadecimal format and converts it to an integer. A result that
        is not a number raises a ``ValueError``.

        Returns:
            int: The latest block number as an integer.
        """
        return _hex_int.validate_python(await self._call("eth_blockNumber"))
