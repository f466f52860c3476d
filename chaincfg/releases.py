import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiohttp
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from chaincfg.config import settings
from chaincfg.errors import CompilerVersionError, ConfigFileError
from chaincfg.models import CompilerDirective
from chaincfg.semver import Version


class SolcRelease(BaseModel):
    """A published compiler release and the build file that ships it."""

    model_config = ConfigDict(frozen=True)

    version: str
    build: str


class ReleaseList(BaseModel):
    """The subset of solc-bin's ``list.json`` this tool reads."""

    releases: Dict[str, str]
    latest_release: Optional[str] = Field(default=None, alias="latestRelease")


class SolcReleaseIndex:
    """
    Index of available solc releases.

    Built from the ``list.json`` published by the solc-bin mirrors, either
    fetched over HTTP or read from a local copy.

    Methods:
        from_payload(payload: Dict[str, Any]) -> SolcReleaseIndex:
        from_file(path: Path) -> SolcReleaseIndex:
        fetch(url: str) -> SolcReleaseIndex:
        select(directive: CompilerDirective) -> SolcRelease:
    """

    def __init__(self, releases: Dict[str, str], latest: Optional[str] = None) -> None:
        self.releases: Dict[Version, SolcRelease] = {}
        for version, build in releases.items():
            try:
                parsed = Version.parse(version)
            except ValueError:
                logger.debug(f"Skipping non-release entry {version!r}")
                continue
            self.releases[parsed] = SolcRelease(version=str(parsed), build=build)
        self.latest = latest

    @property
    def versions(self) -> List[Version]:
        return sorted(self.releases)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SolcReleaseIndex":
        listing = ReleaseList.model_validate(payload)
        return cls(listing.releases, listing.latest_release)

    @classmethod
    def from_file(cls, path: Path) -> "SolcReleaseIndex":
        """
        Read a local copy of ``list.json``.

        Raises:
            ConfigFileError: If the file is missing or malformed.
        """
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            return cls.from_payload(payload)
        except OSError as exc:
            raise ConfigFileError(path, exc.strerror or str(exc)) from exc
        except (ValueError, ValidationError) as exc:
            raise ConfigFileError(path, f"not a solc release list: {exc}") from exc

    @classmethod
    async def fetch(
        cls,
        url: str = str(settings.solc_list_url),
        retries: int = settings.rpc_max_retries,
        backoff_factor: float = settings.rpc_backoff_factor,
        timeout: float = settings.rpc_timeout,
    ) -> "SolcReleaseIndex":
        """
        Download the release list with retries and exponential backoff.

        Args:
            url (str): Location of ``list.json``.
            retries (int): Attempts before giving up.
            backoff_factor (float): Base delay between attempts.
            timeout (float): Per request timeout in seconds.

        Returns:
            SolcReleaseIndex: The index built from the downloaded list.

        Raises:
            ConfigFileError: If the list cannot be downloaded or parsed.
        """
        attempt = 0
        async with aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as session:
            while True:
                try:
                    async with session.get(url) as response:
                        response.raise_for_status()
                        payload = await response.json(content_type=None)
                    break
                except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
                    attempt += 1
                    if attempt >= retries:
                        raise ConfigFileError(url, f"download failed: {exc}") from exc
                    delay = backoff_factor * (2**attempt)
                    logger.warning(
                        f"Fetching {url} failed ({exc}), retrying in {delay:.2f}s",
                    )
                    await asyncio.sleep(delay)

        try:
            index = cls.from_payload(payload)
        except ValidationError as exc:
            raise ConfigFileError(url, f"not a solc release list: {exc}") from exc
        logger.info(f"Fetched {len(index.releases)} solc releases from {url}")
        return index

    def select(self, directive: CompilerDirective) -> SolcRelease:
        """
        Pick the newest release satisfying the directive's version constraint.

        Raises:
            CompilerVersionError: If no release satisfies the constraint.
        """
        match = directive.constraint.highest_match(self.releases)
        if match is None:
            raise CompilerVersionError(directive.version, self.latest)
        release = self.releases[match]
        logger.info(f"Compiler constraint {directive.version} -> solc {release.version}")
        return release
