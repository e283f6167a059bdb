"""
apkg CLI — Universal package metadata aggregator.

Usage:
    apkg sync
    apkg sync --debian-suite bookworm --remote flathub
    apkg search ripgrep
    apkg info ripgrep
    apkg --cache-dir ./cache stats
"""

import asyncio
import logging
from dataclasses import fields
from pathlib import Path

import click
from rich.console import Console

DEFAULT_CACHE_DIR = "/var/cache/apkg"
SEARCH_DISPLAY_LIMIT = 20


def _open_database(cache_dir: Path):
    """Build the database and load the existing snapshot, if any."""
    from apkg.core.database import PackageDatabase
    from apkg.core.errors import DatabaseError

    database = PackageDatabase(cache_dir)
    if database.db_path.exists():
        logging.getLogger(__name__).info("Loading existing package database...")
        try:
            asyncio.run(database.load())
        except DatabaseError as e:
            raise click.ClickException(str(e)) from e
    return database


def _print_stats(console: Console, stats, full: bool = True) -> None:
    console.print(f"  Total: {stats.total_count}")
    console.print(f"  AUR: {stats.aur_count}")
    console.print(f"  Debian: {stats.debian_count}")
    console.print(f"  Flatpak: {stats.flatpak_count}")
    if full:
        console.print(f"  Snap: {stats.snap_count}")
        console.print(f"  Nixpkgs: {stats.nixpkgs_count}")
        console.print(f"  Source: {stats.source_count}")


def _describe_variant(variant) -> str:
    """
    Render a source or build type for display.

    AurSource(pkgbase="rg", url="https://...") -> 'Aur (pkgbase: rg, url: https://...)'
    """
    parts = []
    for f in fields(variant):
        value = getattr(variant, f.name)
        if value is None:
            continue
        if isinstance(value, tuple):
            value = " ".join(value)
        parts.append(f"{f.name}: {value}")
    return f"{variant.kind} ({', '.join(parts)})" if parts else variant.kind


@click.group()
@click.version_option(package_name="apkg")
@click.option(
    "--cache-dir",
    "-c",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="APKG_CACHE_DIR",
    default=DEFAULT_CACHE_DIR,
    show_default=True,
    help="Directory holding the package database.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.pass_context
def cli(ctx, cache_dir, verbose):
    """apkg — Universal package metadata aggregator."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.obj = {"cache_dir": cache_dir}


@cli.command()
@click.option(
    "--debian-suite",
    "-d",
    "debian_suites",
    multiple=True,
    help="Debian suite to import (e.g. bookworm). Repeatable.",
)
@click.option(
    "--remote",
    "-r",
    "remotes",
    multiple=True,
    default=["flathub"],
    show_default=True,
    help="Flatpak remote to import. Repeatable.",
)
@click.pass_obj
def sync(obj, debian_suites, remotes):
    """Sync all package databases."""
    from apkg.core.config import SyncConfig
    from apkg.core.errors import ApkgError
    from apkg.core.sync import PackageSynchronizer

    console = Console(highlight=False)
    database = _open_database(obj["cache_dir"])
    config = SyncConfig(debian_suites=tuple(debian_suites), flatpak_remotes=tuple(remotes))
    synchronizer = PackageSynchronizer(database, config)

    async def run_and_save():
        report = await synchronizer.run()
        console.print("Saving database...")
        await database.save()
        return report

    console.print("Syncing package databases...")
    try:
        report = asyncio.run(run_and_save())
    except ApkgError as e:
        raise click.ClickException(f"Sync failed: {e}") from e

    console.print(f"Synced {report.aur} AUR packages")
    if config.debian_suites:
        console.print(f"Synced {report.debian} Debian packages")
    if report.flatpak:
        console.print(f"Synced {report.flatpak} Flatpak packages")
    for source, message in report.failures:
        click.echo(f"{source} sync failed: {message}", err=True)

    console.print("\n[bold]Database Statistics:[/bold]")
    _print_stats(console, database.stats(), full=False)


@cli.command()
@click.argument("query")
@click.pass_obj
def search(obj, query):
    """Search for packages by name or description."""
    database = _open_database(obj["cache_dir"])
    results = database.search(query)

    click.echo(f"Found {len(results)} packages:\n")
    for pkg in results[:SEARCH_DISPLAY_LIMIT]:
        click.echo(f"{pkg.name} {pkg.version} - {pkg.description}")


@cli.command()
@click.argument("package")
@click.pass_obj
def info(obj, package):
    """Show package information."""
    database = _open_database(obj["cache_dir"])
    pkg = database.get(package)
    if pkg is None:
        raise click.ClickException(f"Package not found: {package}")

    click.echo(f"Name: {pkg.name}")
    click.echo(f"Version: {pkg.version}")
    click.echo(f"Description: {pkg.description}")
    click.echo(f"Source: {_describe_variant(pkg.source)}")
    click.echo(f"Dependencies: {', '.join(pkg.dependencies) or '(none)'}")
    click.echo(f"Build Type: {_describe_variant(pkg.build_type)}")
    if pkg.homepage:
        click.echo(f"Homepage: {pkg.homepage}")
    click.echo(f"License: {', '.join(pkg.license) or '(none)'}")
    if pkg.maintainer:
        click.echo(f"Maintainer: {pkg.maintainer}")


@cli.command()
@click.pass_obj
def stats(obj):
    """Show database statistics."""
    console = Console(highlight=False)
    database = _open_database(obj["cache_dir"])
    console.print("[bold]Database Statistics:[/bold]")
    _print_stats(console, database.stats())


if __name__ == "__main__":
    cli()
