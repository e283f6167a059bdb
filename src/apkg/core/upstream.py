"""
Upstream collaborators — the I/O side of each adapter.

- AurClient: AUR RPC v5 search over httpx
- DebianMirror: downloads and gunzips a `Packages.gz` index over httpx
- FlatpakCli: runs `flatpak remote-ls` as a subprocess

None of these retry. Any failure surfaces as an ApkgError subclass so the
sync orchestrator can decide whether it is fatal.
"""

import asyncio
import gzip
import logging
import shutil
from urllib.parse import quote

import httpx

from apkg.core.config import AUR_RPC_URL, DEBIAN_MIRROR_URL
from apkg.core.errors import FlatpakError, UpstreamError
from apkg.parsers.flatpak import FLATPAK_COLUMNS

logger = logging.getLogger(__name__)


class AurClient:
    """Thin client for the AUR RPC search endpoint."""

    def __init__(self, client: httpx.AsyncClient, rpc_url: str = AUR_RPC_URL):
        self.client = client
        self.rpc_url = rpc_url.rstrip("/")

    def search_url(self, term: str) -> str:
        return f"{self.rpc_url}/{quote(term, safe='')}"

    async def search(self, term: str) -> dict:
        """
        Run one search request.

        Returns:
            The decoded JSON body (`resultcount`, `results`, ...).

        Raises:
            UpstreamError: Transport failure, HTTP error status or undecodable body.
        """
        url = self.search_url(term)
        try:
            resp = await self.client.get(url)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPError as e:
            raise UpstreamError(f"AUR search for {term!r} failed: {e}") from e
        except ValueError as e:
            raise UpstreamError(f"AUR search for {term!r} returned invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise UpstreamError(f"AUR search for {term!r} returned {type(payload).__name__}, not an object")

        logger.debug(f"[AUR] {term!r}: {payload.get('resultcount', 0)} results")
        return payload


class DebianMirror:
    """Fetches decoded `Packages` indexes from a Debian archive mirror."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        mirror_url: str = DEBIAN_MIRROR_URL,
        arch: str = "amd64",
    ):
        self.client = client
        self.mirror_url = mirror_url.rstrip("/")
        self.arch = arch

    def packages_url(self, suite: str, component: str) -> str:
        return f"{self.mirror_url}/dists/{suite}/{component}/binary-{self.arch}/Packages.gz"

    async def fetch_packages(self, suite: str, component: str) -> str:
        """
        Download and decompress the index for one (suite, component).

        Raises:
            UpstreamError: Transport failure, HTTP error status or a corrupt archive.
        """
        url = self.packages_url(suite, component)
        logger.info(f"[Debian] Fetching {url}")
        try:
            resp = await self.client.get(url)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise UpstreamError(f"Debian index {suite}/{component} failed: {e}") from e

        try:
            return gzip.decompress(resp.content).decode("utf-8")
        except (OSError, EOFError, UnicodeDecodeError) as e:
            raise UpstreamError(f"Debian index {suite}/{component} is corrupt: {e}") from e


class FlatpakCli:
    """Wrapper around the `flatpak` executable."""

    def __init__(self, executable: str = "flatpak"):
        self.executable = executable

    def is_available(self) -> bool:
        """Check whether the executable is on PATH."""
        return shutil.which(self.executable) is not None

    def remote_ls_args(self, remote: str) -> list[str]:
        return [
            self.executable,
            "remote-ls",
            remote,
            "--app",
            f"--columns={','.join(FLATPAK_COLUMNS)}",
        ]

    async def remote_ls(self, remote: str) -> str:
        """
        List applications on a remote.

        Raises:
            FlatpakError: The executable is missing or exited non-zero.
        """
        args = self.remote_ls_args(remote)
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise FlatpakError(f"Could not run {self.executable}: {e}") from e

        stdout, stderr = await proc.communicate()
        if proc.returncode != 0:
            err = stderr.decode("utf-8", errors="replace").strip()
            raise FlatpakError(
                f"{self.executable} remote-ls {remote} exited with {proc.returncode}: {err}",
                returncode=proc.returncode,
                stderr=err,
            )

        return stdout.decode("utf-8", errors="replace")
