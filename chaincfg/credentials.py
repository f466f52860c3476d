import os
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional

from dotenv import dotenv_values
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, SecretStr

from chaincfg.utils.custom_types import FrozenDict


class Secrets(BaseModel):
    """
    Credentials read from the environment once, at startup.

    Values are kept as ``SecretStr`` so they never show up in reprs, logs or
    serialized output. Blank values are treated the same as absent ones.

    Attributes:
        entries (FrozenDict[str, SecretStr]): Secret values keyed by variable name.
    """

    model_config = ConfigDict(frozen=True)

    entries: FrozenDict[str, SecretStr] = Field(
        default_factory=dict, validate_default=True,
    )

    def get(self, name: str) -> Optional[SecretStr]:
        """
        Return the named secret, or None when it is unset or blank.

        Args:
            name (str): The environment variable name.

        Returns:
            Optional[SecretStr]: The secret with surrounding whitespace removed.
        """
        value = self.entries.get(name)
        if value is None:
            return None
        text = value.get_secret_value().strip()
        return SecretStr(text) if text else None


def load_secrets(
    names: Iterable[str],
    env_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Secrets:
    """
    Load the named secrets from the process environment and an optional .env.

    Process environment values take precedence over the .env file, as with
    dotenv loading in other toolchains. Missing files are ignored.

    Args:
        names (Iterable[str]): The variable names to read.
        env_file (Optional[Path]): Path of a dotenv file to fall back on.
        environ (Optional[Mapping[str, str]]): Environment mapping, the
                                              process environment by default.

    Returns:
        Secrets: The immutable secret values that were found.
    """
    environ = os.environ if environ is None else environ
    file_values: Dict[str, Optional[str]] = {}
    if env_file is not None and env_file.is_file():
        logger.debug(f"Reading secrets file {env_file}")
        file_values = dotenv_values(env_file)

    entries: Dict[str, SecretStr] = {}
    for name in names:
        value = environ.get(name)
        if value is None:
            value = file_values.get(name)
        if value is not None:
            entries[name] = SecretStr(value)

    logger.debug(f"Loaded secrets: {sorted(entries)}")
    return Secrets(entries=entries)
