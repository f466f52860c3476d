from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from yarl import URL


class Settings(BaseSettings):
    """Settings configuration class for the chaincfg tool."""

    log_level: str = "INFO"

    # Configuration sources
    config_path: Optional[Path] = None  # Built-in table when unset
    secrets_file: Path = Path(".env")

    # RPC Configuration
    rpc_max_retries: int = 3
    rpc_backoff_factor: float = 0.5
    rpc_timeout: float = 10.0  # Seconds per request

    # Compiler release index
    solc_list_host: str = "binaries.soliditylang.org"
    solc_list_path: str = "/bin/list.json"

    @property
    def solc_list_url(self) -> URL:
        """
        Assemble the solc release list URL from settings.

        :return: release list URL.
        """
        return URL.build(
            scheme="https",
            host=self.solc_list_host,
            path=self.solc_list_path,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CHAINCFG_",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
