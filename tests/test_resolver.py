from typing import Dict

import aiohttp
import pytest
from conftest import DEV_ADDRESS, DEV_PRIVATE_KEY
from pydantic import SecretStr

from chaincfg.credentials import Secrets, load_secrets
from chaincfg.defaults import AVALANCHE_FUJI_RPC, DEFAULT_CONFIG
from chaincfg.errors import (
    InvalidSecretError,
    MissingSecretError,
    ProfileNotFoundError,
)
from chaincfg.resolver import ConfigResolver


def _resolver(environ: Dict[str, str]) -> ConfigResolver:
    secrets = load_secrets(DEFAULT_CONFIG.secret_names(), environ=environ)
    return ConfigResolver(DEFAULT_CONFIG, secrets)


@pytest.fixture
def no_network(monkeypatch: pytest.MonkeyPatch) -> None:
    def forbidden(*args: object, **kwargs: object) -> None:
        raise AssertionError("resolution must not open network sessions")

    monkeypatch.setattr(aiohttp, "ClientSession", forbidden)


@pytest.mark.parametrize("profile", ["mainnet", "avalanche", "FUJI"])
def test_unknown_profile_is_not_found(profile: str) -> None:
    with pytest.raises(ProfileNotFoundError, match="Profile not found"):
        _resolver({}).resolve(profile)


def test_development_profile_needs_no_secrets(no_network: None) -> None:
    resolved = _resolver({}).resolve("development")

    assert resolved.profile.name == "development"
    assert resolved.profile.endpoint == "http://172.21.32.1:7545"
    assert resolved.profile.network_id == "*"
    assert resolved.profile.signer is None
    assert resolved.plugins == ("truffle-plugin-verify",)
    assert resolved.api_keys == {}


@pytest.mark.parametrize("environ", [{}, {"PRIVATE_KEY": ""}, {"PRIVATE_KEY": "   "}])
def test_signing_profile_without_key_fails_fast(
    environ: Dict[str, str],
    no_network: None,
) -> None:
    with pytest.raises(MissingSecretError) as info:
        _resolver(environ).resolve("fuji")

    assert info.value.name == "PRIVATE_KEY"
    assert "fuji" in str(info.value)


def test_signing_profile_with_key_binds_signer(no_network: None) -> None:
    resolved = _resolver({"PRIVATE_KEY": DEV_PRIVATE_KEY}).resolve("fuji")

    signer = resolved.profile.signer
    assert signer is not None
    assert signer.private_key.get_secret_value() == DEV_PRIVATE_KEY
    assert signer.address == DEV_ADDRESS
    assert signer.endpoint == AVALANCHE_FUJI_RPC
    assert resolved.profile.endpoint == AVALANCHE_FUJI_RPC
    assert resolved.profile.network_id == 43113


def test_malformed_signing_key_is_rejected() -> None:
    with pytest.raises(InvalidSecretError):
        _resolver({"PRIVATE_KEY": "0xdeadbeef"}).resolve("fuji")


def test_optimizer_directive_is_unchanged() -> None:
    resolved = _resolver({}).resolve("development")

    assert resolved.compiler.optimizer.enabled is True
    assert resolved.compiler.optimizer.runs == 1
    assert resolved.compiler.version == "^0.8.11"


def test_resolution_is_deterministic() -> None:
    environ = {"PRIVATE_KEY": DEV_PRIVATE_KEY, "SNOWTRACE_KEY": "snow"}

    first = _resolver(environ).resolve("fuji")
    second = _resolver(environ).resolve("fuji")

    assert first == second
    assert first.model_dump(mode="json") == second.model_dump(mode="json")


def test_present_api_keys_are_resolved() -> None:
    resolved = _resolver({"SNOWTRACE_KEY": "snow-key"}).resolve("development")

    assert resolved.api_keys == {"snowtrace": SecretStr("snow-key")}


def test_required_api_keys_must_be_present() -> None:
    resolver = _resolver({"PRIVATE_KEY": DEV_PRIVATE_KEY})

    with pytest.raises(MissingSecretError, match="SNOWTRACE_KEY"):
        resolver.resolve("fuji", require_api_keys=True)


def test_signing_key_is_checked_before_api_keys() -> None:
    with pytest.raises(MissingSecretError) as info:
        _resolver({}).resolve("fuji", require_api_keys=True)

    assert info.value.name == "PRIVATE_KEY"


def test_resolution_log_never_contains_the_key(log_messages: list) -> None:
    resolver = ConfigResolver(
        DEFAULT_CONFIG,
        Secrets(entries={"PRIVATE_KEY": SecretStr(DEV_PRIVATE_KEY)}),
    )

    resolver.resolve("fuji")

    assert any(DEV_ADDRESS in message for message in log_messages)
    assert not any(DEV_PRIVATE_KEY[2:] in message for message in log_messages)


def test_resolved_api_keys_are_read_only() -> None:
    resolved = _resolver({"SNOWTRACE_KEY": "snow-key"}).resolve("development")

    with pytest.raises(TypeError):
        resolved.api_keys["etherscan"] = SecretStr("other")  # type: ignore[index]

    assert list(resolved.api_keys) == ["snowtrace"]
