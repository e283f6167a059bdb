"""
apkg - Universal package metadata aggregator.

Pulls package metadata from the AUR, Debian archives and Flatpak remotes,
normalizes it into a single ApkgPackage record format, and serves search and
lookup over the combined database.
"""

__version__ = "1.0.0"


def __getattr__(name: str):
    """Lazy import for heavy dependencies."""
    if name == "PackageDatabase":
        from apkg.core.database import PackageDatabase

        return PackageDatabase
    if name == "PackageSynchronizer":
        from apkg.core.sync import PackageSynchronizer

        return PackageSynchronizer
    if name == "ApkgPackage":
        from apkg.models.package import ApkgPackage

        return ApkgPackage
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["PackageDatabase", "PackageSynchronizer", "ApkgPackage", "__version__"]
