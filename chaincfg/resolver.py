from typing import Dict, Optional

from loguru import logger
from pydantic import SecretStr

from chaincfg.credentials import Secrets
from chaincfg.errors import MissingSecretError
from chaincfg.models import (
    NetworkProfile,
    ResolvedConfig,
    ResolvedProfile,
    Signer,
    ToolchainConfig,
)
from chaincfg.signer import build_signer
from chaincfg.utils.decorators import log_execution


class ConfigResolver:
    """
    Turns a profile name into the record the external toolchain consumes.

    Resolution only reads the configuration and the secrets it was given. It
    never contacts an endpoint, so a missing credential is reported before any
    network operation can start.

    Methods:
        resolve(profile: str, require_api_keys: bool = False) -> ResolvedConfig:
            Resolve the named profile with its signer, compiler directive,
            plugins and API keys.
    """

    def __init__(self, config: ToolchainConfig, secrets: Secrets) -> None:
        """
        Initializes the resolver.

        Args:
            config (ToolchainConfig): The configuration artifact.
            secrets (Secrets): Secrets loaded from the environment at startup.
        """
        self.config = config
        self.secrets = secrets

    @log_execution()
    def resolve(self, profile: str, require_api_keys: bool = False) -> ResolvedConfig:
        """
        Resolve a network profile.

        Args:
            profile (str): The profile name, e.g. from a command-line argument.
            require_api_keys (bool): Fail when a declared API key is missing.
                                     Verification workflows need every key.

        Returns:
            ResolvedConfig: The resolved, immutable configuration.

        Raises:
            ProfileNotFoundError: If the profile is not in the table.
            MissingSecretError: If a required secret is unset or empty.
            InvalidSecretError: If the signing key is malformed.
        """
        network = self.config.profile(profile)
        endpoint = network.endpoint_url
        signer = self._resolve_signer(profile, network, endpoint)
        api_keys = self._resolve_api_keys(require_api_keys)

        resolved = ResolvedConfig(
            profile=ResolvedProfile(
                name=profile,
                endpoint=endpoint,
                network_id=network.network_id,
                signer=signer,
            ),
            compiler=self.config.compilers.solc,
            plugins=self.config.plugins,
            api_keys=api_keys,
        )
        logger.info(
            f"Resolved profile {profile} -> {endpoint} "
            f"(network {network.network_id}, "
            f"signer {signer.address if signer else 'none'})",
        )
        return resolved

    def _resolve_signer(
        self,
        profile: str,
        network: NetworkProfile,
        endpoint: str,
    ) -> Optional[Signer]:
        if network.signer is None:
            return None
        name = network.signer.private_key_env
        key = self.secrets.get(name)
        if key is None:
            logger.error(f"Signing key {name} for profile {profile} is not set")
            raise MissingSecretError(name, f"signing on profile {profile!r}")
        return build_signer(key, endpoint, name)

    def _resolve_api_keys(self, required: bool) -> Dict[str, SecretStr]:
        api_keys: Dict[str, SecretStr] = {}
        for service, name in self.config.api_keys.items():
            value = self.secrets.get(name)
            if value is not None:
                api_keys[service] = value
            elif required:
                raise MissingSecretError(name, f"{service} API access")
            else:
                logger.debug(f"API key {name} for {service} is not set")
        return api_keys
