from typing import Iterable, Optional, Union


class ConfigurationError(Exception):
    """
    Base class for every missing or invalid configuration condition.

    Raised before any network or compilation step proceeds. Nothing raising it
    is retried; the operator has to fix the configuration or the environment.
    """


class ProfileNotFoundError(ConfigurationError):
    """Raised when a network profile name is not present in the profile table."""

    def __init__(self, profile: str, known: Iterable[str]) -> None:
        self.profile = profile
        self.known = sorted(known)
        names = ", ".join(self.known) or "none"
        super().__init__(
            f"Profile not found: {profile!r} (known profiles: {names})",
        )


class MissingSecretError(ConfigurationError):
    """Raised when a required secret is unset or empty in the environment."""

    def __init__(self, name: str, purpose: str) -> None:
        self.name = name
        self.purpose = purpose
        super().__init__(
            f"Missing secret {name}: required for {purpose}, "
            f"set it in the environment or in .env",
        )


class InvalidSecretError(ConfigurationError):
    """Raised when a secret is present but cannot be used as a credential."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        super().__init__(f"Invalid secret {name}: {reason}")


class ConfigFileError(ConfigurationError):
    """Raised when a configuration file cannot be read or does not validate."""

    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        super().__init__(f"Invalid configuration file {path}: {reason}")


class VersionConstraintError(ConfigurationError):
    """Raised when a compiler version constraint cannot be parsed."""

    def __init__(self, constraint: str, reason: str) -> None:
        self.constraint = constraint
        super().__init__(f"Invalid version constraint {constraint!r}: {reason}")


class CompilerVersionError(ConfigurationError):
    """Raised when no available compiler release satisfies the constraint."""

    def __init__(self, constraint: str, latest: Optional[str] = None) -> None:
        self.constraint = constraint
        self.latest = latest
        suffix = f" (latest release: {latest})" if latest else ""
        super().__init__(
            f"No compiler release satisfies {constraint!r}{suffix}",
        )


class EndpointUnreachableError(ConfigurationError):
    """Raised when a profile's endpoint does not answer JSON-RPC requests."""

    def __init__(self, endpoint: str, reason: str) -> None:
        self.endpoint = endpoint
        super().__init__(f"Endpoint {endpoint} is unreachable: {reason}")


class NetworkIdMismatchError(ConfigurationError):
    """Raised when an endpoint reports a chain id other than the declared one."""

    def __init__(
        self,
        endpoint: str,
        expected: Union[int, str],
        actual: int,
    ) -> None:
        self.endpoint = endpoint
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Endpoint {endpoint} reports network id {actual}, "
            f"profile declares {expected}",
        )
