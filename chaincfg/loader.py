import tomllib
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from chaincfg.defaults import DEFAULT_CONFIG
from chaincfg.errors import ConfigFileError
from chaincfg.models import ToolchainConfig

SUPPORTED_SUFFIXES = (".json", ".toml")


def load_config(path: Optional[Path] = None) -> ToolchainConfig:
    """
    Load the toolchain configuration.

    Args:
        path (Optional[Path]): A ``.json`` or ``.toml`` file. The built-in
                               configuration is returned when None.

    Returns:
        ToolchainConfig: The validated configuration.

    Raises:
        ConfigFileError: If the file cannot be read, parsed or validated.
    """
    if path is None:
        logger.debug("Using built-in configuration")
        return DEFAULT_CONFIG

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ConfigFileError(
            path, f"unsupported format {suffix or '(none)'}, use .json or .toml",
        )

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigFileError(path, exc.strerror or str(exc)) from exc

    try:
        if suffix == ".toml":
            config = ToolchainConfig.model_validate(tomllib.loads(text))
        else:
            config = ToolchainConfig.model_validate_json(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileError(path, str(exc)) from exc
    except ValidationError as exc:
        raise ConfigFileError(path, _summarize(exc)) from exc

    logger.info(f"Loaded configuration from {path}")
    return config


def _summarize(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
        for error in exc.errors()
    )
