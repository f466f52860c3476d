from typing import List, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from yarl import URL

from chaincfg.errors import ProfileNotFoundError, VersionConstraintError
from chaincfg.semver import VersionConstraint, parse_constraint
from chaincfg.utils.custom_types import ANY_NETWORK, FrozenDict, NetworkId

DEFAULT_RPC_PORT = 8545
RPC_SCHEMES = ("http", "https", "ws", "wss")


class SignerRef(BaseModel):
    """
    Reference to the environment secret holding a profile's signing key.

    Attributes:
        private_key_env (str): Name of the environment variable with the key.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    private_key_env: str = "PRIVATE_KEY"


class NetworkProfile(BaseModel):
    """
    Connection parameters for one target network.

    A profile names its endpoint either as ``host``/``port`` (a local JSON-RPC
    node reached over plain HTTP) or as a full ``url``, never both.

    Attributes:
        host (Optional[str]): Hostname or IP of a local node.
        port (Optional[int]): Port of the local node, 8545 when only a host
                              is given.
        url (Optional[str]): Remote JSON-RPC endpoint URL.
        network_id (NetworkId): Chain id, or "*" to accept any.
        signer (Optional[SignerRef]): Key source when transactions must be
                                      signed locally.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    host: Optional[str] = None
    port: Optional[int] = Field(default=None, ge=1, le=65535)
    url: Optional[str] = None
    network_id: NetworkId
    signer: Optional[SignerRef] = None

    @field_validator("host")
    @classmethod
    def _validate_host(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        host = value.strip()
        try:
            URL.build(scheme="http", host=host)
        except ValueError as exc:
            raise ValueError(f"not a hostname or IP address: {value!r}") from exc
        if not host or any(char in host for char in ":/ \t"):
            raise ValueError(f"not a hostname or IP address: {value!r}")
        return host

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        url = URL(value.strip())
        if url.scheme not in RPC_SCHEMES or not url.host:
            raise ValueError(f"not a JSON-RPC endpoint URL: {value!r}")
        return str(url)

    @model_validator(mode="after")
    def _single_endpoint(self) -> "NetworkProfile":
        if self.url and self.host:
            raise ValueError("give either url or host/port, not both")
        if not self.url and not self.host:
            raise ValueError("one of url or host is required")
        if self.port is not None and not self.host:
            raise ValueError("port requires host")
        return self

    @property
    def signing_required(self) -> bool:
        return self.signer is not None

    @property
    def endpoint_url(self) -> str:
        """
        The single endpoint this profile connects to.

        :return: endpoint URL.
        """
        if self.url:
            return self.url
        return str(
            URL.build(
                scheme="http",
                host=self.host or "",
                port=self.port or DEFAULT_RPC_PORT,
            ),
        )

    def accepts_network_id(self, network_id: int) -> bool:
        return self.network_id == ANY_NETWORK or self.network_id == network_id


class OptimizerSettings(BaseModel):
    """Optimizer toggle and the expected number of contract runs."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = False
    runs: int = Field(default=200, ge=0)


class CompilerDirective(BaseModel):
    """
    Compiler settings handed to the external toolchain.

    Attributes:
        version (str): npm-style version constraint, e.g. ``^0.8.11``.
        optimizer (OptimizerSettings): Optimizer toggle and run count.
        evm_version (Optional[str]): EVM target, compiler default when unset.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str
    optimizer: OptimizerSettings = OptimizerSettings()
    evm_version: Optional[str] = None

    @field_validator("version")
    @classmethod
    def _validate_version(cls, value: str) -> str:
        try:
            return parse_constraint(value).text
        except VersionConstraintError as exc:
            raise ValueError(str(exc)) from exc

    @property
    def constraint(self) -> VersionConstraint:
        return parse_constraint(self.version)


class Compilers(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    solc: CompilerDirective


class ToolchainConfig(BaseModel):
    """
    The complete configuration artifact.

    Attributes:
        plugins (Tuple[str, ...]): Plugin identifiers in load order.
        compilers (Compilers): Compiler directives keyed by compiler.
        networks (FrozenDict[str, NetworkProfile]): Profiles keyed by name.
        api_keys (FrozenDict[str, str]): Service name to the environment variable
                                   holding its API key.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    plugins: Tuple[str, ...] = ()
    compilers: Compilers
    networks: FrozenDict[str, NetworkProfile]
    api_keys: FrozenDict[str, str] = Field(
        default_factory=dict, validate_default=True,
    )

    def profile(self, name: str) -> NetworkProfile:
        """
        Look up a network profile by name.

        Raises:
            ProfileNotFoundError: If no profile has that name.
        """
        try:
            return self.networks[name]
        except KeyError:
            raise ProfileNotFoundError(name, self.networks) from None

    def secret_names(self) -> List[str]:
        """Every environment variable name the configuration refers to."""
        names = [
            profile.signer.private_key_env
            for profile in self.networks.values()
            if profile.signer is not None
        ]
        names.extend(self.api_keys.values())
        return sorted(set(names))


class Signer(BaseModel):
    """
    A signing key bound to the endpoint it signs transactions for.

    Attributes:
        address (str): Checksum address derived from the key.
        endpoint (str): Endpoint URL of the profile the signer belongs to.
        private_key (SecretStr): The key exactly as found in the environment.
    """

    model_config = ConfigDict(frozen=True)

    address: str
    endpoint: str
    private_key: SecretStr


class ResolvedProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    endpoint: str
    network_id: Union[int, str]
    signer: Optional[Signer] = None


class ResolvedConfig(BaseModel):
    """
    Everything the external toolchain needs for a single invocation.

    Attributes:
        profile (ResolvedProfile): Endpoint and optional signer.
        compiler (CompilerDirective): Compiler directive, unchanged.
        plugins (Tuple[str, ...]): Plugin identifiers in load order.
        api_keys (FrozenDict[str, SecretStr]): Resolved API keys by service name.
    """

    model_config = ConfigDict(frozen=True)

    profile: ResolvedProfile
    compiler: CompilerDirective
    plugins: Tuple[str, ...]
    api_keys: FrozenDict[str, SecretStr] = Field(
        default_factory=dict, validate_default=True,
    )
