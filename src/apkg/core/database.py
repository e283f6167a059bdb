"""
Package Database — the aggregation store.

An in-memory mapping from package name to ApkgPackage, persisted as one
pretty-printed JSON snapshot per cache directory:

    cache_dir/
    └── packages.json      {"ripgrep": {...}, "bash": {...}, ...}

Inserts are unconditional upserts: a later package with the same name
replaces the earlier one, whatever its source.
"""

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import aiofiles

from apkg.core.errors import DatabaseError
from apkg.models.package import (
    ApkgPackage,
    AurSource,
    DebianSource,
    FlatpakSource,
    NixpkgsSource,
    SnapSource,
    SourceRepo,
)

logger = logging.getLogger(__name__)

DEFAULT_DB_FILENAME = "packages.json"


@dataclass
class DatabaseStats:
    """Per-source package counts. Computed on demand, never stored."""

    total_count: int = 0
    aur_count: int = 0
    debian_count: int = 0
    flatpak_count: int = 0
    snap_count: int = 0
    nixpkgs_count: int = 0
    source_count: int = 0


class PackageDatabase:
    """Keyed collection of canonical packages with JSON snapshot persistence."""

    def __init__(self, cache_dir: Path, filename: str = DEFAULT_DB_FILENAME):
        self.cache_dir = Path(cache_dir)
        self.filename = filename
        self.packages: dict[str, ApkgPackage] = {}

    @property
    def db_path(self) -> Path:
        return self.cache_dir / self.filename

    def __len__(self) -> int:
        return len(self.packages)

    def __contains__(self, name: object) -> bool:
        return name in self.packages

    def __iter__(self) -> Iterator[ApkgPackage]:
        return iter(self.packages.values())

    # ──────────────────────────────────────────────
    # Mutation & Lookup
    # ──────────────────────────────────────────────

    def insert(self, package: ApkgPackage) -> None:
        """Insert or replace a package, keyed by name."""
        previous = self.packages.get(package.name)
        if previous is not None and previous.source != package.source:
            logger.debug(
                f"Replacing {package.name} ({previous.source.kind}) with {package.source.kind} entry"
            )
        self.packages[package.name] = package

    def get(self, name: str) -> ApkgPackage | None:
        return self.packages.get(name)

    def search(self, query: str) -> list[ApkgPackage]:
        """
        Case-insensitive substring search over name and description.

        Results are in store iteration order; callers that need a stable
        ordering must sort.
        """
        needle = query.lower()
        return [
            pkg
            for pkg in self.packages.values()
            if needle in pkg.name.lower() or needle in pkg.description.lower()
        ]

    def stats(self) -> DatabaseStats:
        """Count packages per source variant."""
        stats = DatabaseStats()

        for pkg in self.packages.values():
            match pkg.source:
                case AurSource():
                    stats.aur_count += 1
                case DebianSource():
                    stats.debian_count += 1
                case FlatpakSource():
                    stats.flatpak_count += 1
                case SnapSource():
                    stats.snap_count += 1
                case NixpkgsSource():
                    stats.nixpkgs_count += 1
                case SourceRepo():
                    stats.source_count += 1

        stats.total_count = len(self.packages)
        return stats

    # ──────────────────────────────────────────────
    # Persistence
    # ──────────────────────────────────────────────

    def to_dict(self) -> dict[str, dict]:
        return {name: pkg.to_dict() for name, pkg in self.packages.items()}

    async def save(self, path: Path | None = None) -> Path:
        """
        Write the full snapshot, replacing any existing file.

        A failure part-way through may leave a truncated file behind; the
        snapshot is a cache and is rebuilt by the next sync.

        Raises:
            DatabaseError: The snapshot could not be written.
        """
        path = Path(path) if path is not None else self.db_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(self.to_dict(), indent=2))
        except OSError as e:
            raise DatabaseError(f"Failed to save package database to {path}: {e}") from e

        logger.info(f"Saved {len(self.packages)} packages to {path}")
        return path

    async def load(self, path: Path | None = None) -> int:
        """
        Replace in-memory state with the snapshot at `path`.

        Returns:
            Number of packages loaded.

        Raises:
            DatabaseError: The file is unreadable or not a valid snapshot.
                In-memory state is left untouched.
        """
        path = Path(path) if path is not None else self.db_path
        try:
            async with aiofiles.open(path, encoding="utf-8") as f:
                content = await f.read()
        except OSError as e:
            raise DatabaseError(f"Failed to read package database {path}: {e}") from e

        try:
            data = json.loads(content)
            if not isinstance(data, dict):
                raise ValueError(f"expected an object, got {type(data).__name__}")
            packages = {name: ApkgPackage.from_dict(entry) for name, entry in data.items()}
        except (ValueError, KeyError, TypeError) as e:
            raise DatabaseError(f"Corrupt package database {path}: {e}") from e

        self.packages = packages
        logger.info(f"Loaded {len(packages)} packages from {path}")
        return len(packages)
