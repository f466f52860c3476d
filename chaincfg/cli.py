"""
chaincfg.cli
------------

Inspect and resolve the contract toolchain configuration.

Examples
--------
# List the network profiles
python -m chaincfg profiles

# Resolve a profile; secrets are masked in the output
PRIVATE_KEY=0x... python -m chaincfg resolve fuji

# Resolve for source verification, which needs every API key
python -m chaincfg resolve fuji --require-api-keys

# Select a compiler release and probe the endpoint
python -m chaincfg check development --releases list.json
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import typer
from loguru import logger

from chaincfg.config import settings
from chaincfg.credentials import Secrets, load_secrets
from chaincfg.errors import ConfigurationError
from chaincfg.loader import load_config
from chaincfg.models import ResolvedConfig, ToolchainConfig
from chaincfg.probe import probe_endpoint
from chaincfg.releases import SolcReleaseIndex
from chaincfg.resolver import ConfigResolver
from chaincfg.utils.log import setup_logging

EXIT_CONFIG_ERROR = 2

app = typer.Typer(
    name="chaincfg",
    add_completion=False,
    no_args_is_help=True,
    help="Resolve network profiles, compiler settings and secrets for contract tooling.",
)


def _config_option() -> Any:
    return typer.Option(
        None,
        "--config",
        "-c",
        help="JSON or TOML configuration file (built-in table when omitted).",
    )


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Log level, overrides CHAINCFG_LOG_LEVEL.",
    ),
) -> None:
    setup_logging(log_level)


def _fail(exc: ConfigurationError) -> typer.Exit:
    typer.echo(f"error: {exc}", err=True)
    return typer.Exit(code=EXIT_CONFIG_ERROR)


def _load(config_path: Optional[Path]) -> Tuple[ToolchainConfig, Secrets]:
    config = load_config(config_path or settings.config_path)
    secrets = load_secrets(config.secret_names(), env_file=settings.secrets_file)
    return config, secrets


def _redacted(resolved: ResolvedConfig) -> Dict[str, Any]:
    return resolved.model_dump(mode="json")


@app.command("profiles")
def profiles(config_path: Optional[Path] = _config_option()) -> None:
    """List network profiles with their endpoint and signing requirement."""
    try:
        config, secrets = _load(config_path)
    except ConfigurationError as exc:
        raise _fail(exc) from exc

    for name, profile in sorted(config.networks.items()):
        signing = "no signer"
        if profile.signer:
            key_name = profile.signer.private_key_env
            state = "set" if secrets.get(key_name) is not None else "unset"
            signing = f"signs with ${key_name} ({state})"
        typer.echo(
            f"{name}\t{profile.endpoint_url}\tnetwork {profile.network_id}\t{signing}",
        )


@app.command("resolve")
def resolve(
    profile: str = typer.Argument(..., help="Network profile name."),
    config_path: Optional[Path] = _config_option(),
    require_api_keys: bool = typer.Option(
        False,
        "--require-api-keys",
        help="Fail when any declared API key is missing (verification).",
    ),
) -> None:
    """Resolve a profile and print the resolved configuration as JSON."""
    try:
        config, secrets = _load(config_path)
        resolved = ConfigResolver(config, secrets).resolve(
            profile, require_api_keys=require_api_keys,
        )
    except ConfigurationError as exc:
        raise _fail(exc) from exc

    typer.echo(json.dumps(_redacted(resolved), indent=2))


@app.command("check")
def check(
    profile: str = typer.Argument(..., help="Network profile name."),
    config_path: Optional[Path] = _config_option(),
    releases: Optional[Path] = typer.Option(
        None,
        "--releases",
        help="Local copy of solc-bin list.json instead of downloading it.",
    ),
    skip_compiler: bool = typer.Option(
        False, "--skip-compiler", help="Do not check the compiler constraint.",
    ),
    skip_probe: bool = typer.Option(
        False, "--skip-probe", help="Do not contact the endpoint.",
    ),
) -> None:
    """Resolve a profile, select a compiler release and probe the endpoint."""
    try:
        config, secrets = _load(config_path)
        resolved = ConfigResolver(config, secrets).resolve(profile)
        report = asyncio.run(
            _check(resolved, releases, skip_compiler, skip_probe),
        )
    except ConfigurationError as exc:
        raise _fail(exc) from exc

    typer.echo(json.dumps(report, indent=2))


async def _check(
    resolved: ResolvedConfig,
    releases: Optional[Path],
    skip_compiler: bool,
    skip_probe: bool,
) -> Dict[str, Any]:
    report: Dict[str, Any] = {"profile": resolved.profile.name}

    if not skip_compiler:
        if releases is not None:
            index = SolcReleaseIndex.from_file(releases)
        else:
            index = await SolcReleaseIndex.fetch()
        report["compiler"] = index.select(resolved.compiler).model_dump()

    if not skip_probe:
        result = await probe_endpoint(resolved.profile)
        report["endpoint"] = result.model_dump()

    logger.info(f"Profile {resolved.profile.name} checks out")
    return report
