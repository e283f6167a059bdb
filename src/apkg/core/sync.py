"""
Package Synchronizer — drives each adapter against its live upstream.

Sources run one after another:
- AUR, always. Any failure aborts the whole sync.
- Debian, for each configured suite. Failures are logged and skipped.
- Flatpak, for each configured remote, only when the flatpak executable
  is available. Failures are logged and skipped.

Records are inserted as each response/index/listing is converted, so an
aborted AUR sync leaves the packages of earlier search terms in the store.
Saving the database is left to the caller.
"""

import contextlib
import logging
from dataclasses import dataclass, field

import httpx
from rich.console import Console

from apkg.core.config import SyncConfig
from apkg.core.database import PackageDatabase
from apkg.core.errors import ApkgError
from apkg.core.resilience import RateLimiter
from apkg.core.upstream import AurClient, DebianMirror, FlatpakCli
from apkg.parsers.aur import parse_aur_response
from apkg.parsers.debian import parse_debian_packages
from apkg.parsers.flatpak import parse_flatpak_listing

logger = logging.getLogger("PackageSynchronizer")


@dataclass
class SyncReport:
    """Outcome of a sync run."""

    aur: int = 0
    debian: int = 0
    flatpak: int = 0
    failures: list[tuple[str, str]] = field(default_factory=list)  # (source, message)

    @property
    def total(self) -> int:
        return self.aur + self.debian + self.flatpak


class PackageSynchronizer:
    """
    Sequences the source adapters and commits their records into a PackageDatabase.

    Collaborators are injectable: pass an httpx.AsyncClient (e.g. one built on
    httpx.MockTransport), a FlatpakCli pointing at another executable, or a
    RateLimiter with a fake clock.
    """

    def __init__(
        self,
        database: PackageDatabase,
        config: SyncConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
        flatpak: FlatpakCli | None = None,
        rate_limiter: RateLimiter | None = None,
        console: Console | None = None,
    ):
        self.database = database
        self.config = config or SyncConfig()
        self.http_client = http_client
        self.flatpak = flatpak or FlatpakCli()
        self.rate_limiter = rate_limiter or RateLimiter(interval=self.config.aur_request_interval)
        self.console = console or Console(stderr=True)

    # ──────────────────────────────────────────────
    # Per-source syncs
    # ──────────────────────────────────────────────

    async def sync_aur(self, aur: AurClient) -> int:
        """Search the AUR for each configured term. Errors propagate."""
        count = 0

        for term in self.config.aur_search_terms:
            await self.rate_limiter.wait()
            payload = await aur.search(term)

            for pkg in parse_aur_response(payload):
                self.database.insert(pkg)
                count += 1

            logger.debug(f"[AUR] {term!r} done, {count} packages so far")

        logger.info(f"[AUR] Synced {count} packages")
        return count

    async def sync_debian(self, mirror: DebianMirror, suite: str) -> int:
        """Import every configured component of a Debian suite. Errors propagate."""
        count = 0

        for component in self.config.debian_components:
            content = await mirror.fetch_packages(suite, component)

            for pkg in parse_debian_packages(content, suite, component):
                self.database.insert(pkg)
                count += 1

        logger.info(f"[Debian] Synced {count} packages from {suite}")
        return count

    async def sync_flatpak(self, remote: str) -> int:
        """Import the applications of one Flatpak remote. Errors propagate."""
        output = await self.flatpak.remote_ls(remote)
        count = 0

        for pkg in parse_flatpak_listing(output, remote):
            self.database.insert(pkg)
            count += 1

        logger.info(f"[Flatpak] Synced {count} packages from {remote}")
        return count

    # ──────────────────────────────────────────────
    # Main Run
    # ──────────────────────────────────────────────

    async def run(self) -> SyncReport:
        """
        Sync all sources in sequence.

        Raises:
            UpstreamError: The AUR sync failed. Nothing after it runs.
        """
        report = SyncReport()

        async with contextlib.AsyncExitStack() as stack:
            client = self.http_client
            if client is None:
                client = await stack.enter_async_context(
                    httpx.AsyncClient(timeout=self.config.timeout(), follow_redirects=True)
                )

            # --- 1. AUR (fail-fast) ---
            with self.console.status("[bold cyan]Syncing AUR...[/bold cyan]"):
                report.aur = await self.sync_aur(AurClient(client, self.config.aur_rpc_url))

            # --- 2. DEBIAN ---
            mirror = DebianMirror(client, self.config.debian_mirror_url)
            for suite in self.config.debian_suites:
                try:
                    with self.console.status(f"[bold cyan]Syncing Debian ({suite})...[/bold cyan]"):
                        report.debian += await self.sync_debian(mirror, suite)
                except ApkgError as e:
                    logger.error(f"Debian sync failed for {suite}: {e}")
                    report.failures.append((f"debian:{suite}", str(e)))

        # --- 3. FLATPAK ---
        if not self.config.flatpak_remotes:
            return report

        if not self.flatpak.is_available():
            logger.info(f"{self.flatpak.executable} not found, skipping Flatpak sync")
            return report

        for remote in self.config.flatpak_remotes:
            try:
                with self.console.status(f"[bold cyan]Syncing Flatpak ({remote})...[/bold cyan]"):
                    report.flatpak += await self.sync_flatpak(remote)
            except ApkgError as e:
                logger.error(f"Flatpak sync failed for {remote}: {e}")
                report.failures.append((f"flatpak:{remote}", str(e)))

        return report
