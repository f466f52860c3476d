from typing import Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict

from chaincfg.config import settings
from chaincfg.errors import EndpointUnreachableError, NetworkIdMismatchError
from chaincfg.models import ResolvedProfile
from chaincfg.rpc_client import RPCClient, RPCError
from chaincfg.utils.custom_types import ANY_NETWORK
from chaincfg.utils.decorators import log_execution


class ProbeResult(BaseModel):
    """
    What a profile's endpoint reported when probed.

    Attributes:
        endpoint (str): The probed endpoint URL.
        chain_id (int): Chain id from ``eth_chainId``.
        latest_block (int): Head block number.
        client_version (Optional[str]): Node software, when the node tells.
    """

    model_config = ConfigDict(frozen=True)

    endpoint: str
    chain_id: int
    latest_block: int
    client_version: Optional[str] = None


def check_network_id(
    endpoint: str,
    declared: Union[int, str],
    reported: int,
) -> None:
    """
    Compare a reported chain id with the one a profile declares.

    Raises:
        NetworkIdMismatchError: If the profile declares a concrete id that
                                differs from the reported one.
    """
    if declared != ANY_NETWORK and declared != reported:
        raise NetworkIdMismatchError(endpoint, declared, reported)


@log_execution()
async def probe_endpoint(
    profile: ResolvedProfile,
    retries: int = settings.rpc_max_retries,
    backoff_factor: float = settings.rpc_backoff_factor,
    timeout: float = settings.rpc_timeout,
) -> ProbeResult:
    """
    Contact a resolved profile's endpoint and check its network id.

    This is an explicit step separate from resolution; resolution itself never
    touches the network.

    Args:
        profile (ResolvedProfile): The resolved profile to probe.
        retries (int): Attempts per RPC call.
        backoff_factor (float): Base delay between attempts.
        timeout (float): Per request timeout in seconds.

    Returns:
        ProbeResult: What the endpoint reported.

    Raises:
        EndpointUnreachableError: If the endpoint does not answer.
        NetworkIdMismatchError: If the endpoint serves a different network.
    """
    logger.info(f"Probing {profile.name} at {profile.endpoint}")
    async with RPCClient(
        profile.endpoint,
        retries=retries,
        backoff_factor=backoff_factor,
        timeout=timeout,
    ) as client:
        try:
            chain_id = await client.get_chain_id()
            latest_block = await client.get_latest_block_number()
        except (RPCError, ValueError) as exc:
            raise EndpointUnreachableError(profile.endpoint, str(exc)) from exc

        try:
            client_version: Optional[str] = await client.get_client_version()
        except RPCError as exc:
            logger.debug(f"web3_clientVersion unavailable: {exc}")
            client_version = None

    check_network_id(profile.endpoint, profile.network_id, chain_id)
    logger.info(
        f"Endpoint {profile.endpoint} is on chain {chain_id} at block {latest_block}",
    )
    return ProbeResult(
        endpoint=profile.endpoint,
        chain_id=chain_id,
        latest_block=latest_block,
        client_version=client_version,
    )
