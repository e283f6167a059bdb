"""
Sync configuration.

Tunable constants for talking to upstreams. The cache directory is not part
of this: it is handed to PackageDatabase by whoever builds it (the CLI).
"""

from dataclasses import dataclass

import httpx

AUR_RPC_URL = "https://aur.archlinux.org/rpc/v5/search"
DEBIAN_MIRROR_URL = "https://deb.debian.org/debian"

# Topic seeds; the AUR RPC has no "list everything" endpoint.
DEFAULT_AUR_SEARCH_TERMS = ("rust", "gui", "terminal", "system")
DEFAULT_DEBIAN_COMPONENTS = ("main", "contrib", "non-free")
DEFAULT_FLATPAK_REMOTES = ("flathub",)


@dataclass
class SyncConfig:
    """Settings for a single sync run."""

    aur_search_terms: tuple[str, ...] = DEFAULT_AUR_SEARCH_TERMS
    aur_rpc_url: str = AUR_RPC_URL
    aur_request_interval: float = 0.1  # seconds between AUR requests
    debian_mirror_url: str = DEBIAN_MIRROR_URL
    debian_suites: tuple[str, ...] = ()  # empty: Debian sync disabled
    debian_components: tuple[str, ...] = DEFAULT_DEBIAN_COMPONENTS
    flatpak_remotes: tuple[str, ...] = DEFAULT_FLATPAK_REMOTES
    http_timeout: float = 30.0
    http_connect_timeout: float = 60.0

    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.http_timeout, connect=self.http_connect_timeout)
