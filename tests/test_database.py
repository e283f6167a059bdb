"""Tests for the PackageDatabase store."""

import json
import tempfile
from pathlib import Path

import pytest

from apkg.core.database import DatabaseStats, PackageDatabase
from apkg.core.errors import DatabaseError
from apkg.models.package import (
    ApkgPackage,
    AurSource,
    Binary,
    Container,
    DebianSource,
    FlatpakSource,
    NixpkgsSource,
    SnapSource,
    SourceBuild,
    SourceRepo,
)


def make_aur(name="ripgrep", version="14.0.0", description="Fast grep", dependencies=None):
    return ApkgPackage(
        name=name,
        version=version,
        description=description,
        source=AurSource(pkgbase=name, url=f"https://aur.archlinux.org/cgit/aur.git/snapshot/{name}.tar.gz"),
        dependencies=dependencies if dependencies is not None else ["pcre2"],
        build_type=SourceBuild(build_cmd=["makepkg", "--noconfirm", "-si"]),
    )


def make_debian(name="bash", version="5.2"):
    return ApkgPackage(
        name=name,
        version=version,
        description="GNU Bourne Again SHell",
        source=DebianSource(suite="stable", component="main", arch="amd64"),
        dependencies=["base-files (>= 2.1.12)", "debianutils"],
        build_type=Binary(extract_cmd=["dpkg-deb", "-x"]),
        homepage="https://www.gnu.org/software/bash/",
        maintainer="Matthias Klose <doko@debian.org>",
    )


def make_flatpak(name="org.app.Foo"):
    return ApkgPackage(
        name=name,
        version="1.0",
        description="A foo app",
        source=FlatpakSource(remote="flathub", ref_name=f"app/{name}/stable"),
        build_type=Container(runtime="org.freedesktop.Platform"),
    )


@pytest.fixture
def database(tmp_path):
    return PackageDatabase(tmp_path)


# ═══════════════════════════════════════════
# Insert & Lookup
# ═══════════════════════════════════════════


class TestInsert:
    def test_insert_and_get(self, database):
        pkg = make_aur()
        database.insert(pkg)
        assert database.get("ripgrep") is pkg
        assert "ripgrep" in database
        assert len(database) == 1

    def test_get_missing(self, database):
        assert database.get("nope") is None

    def test_last_writer_wins_across_sources(self, database):
        database.insert(make_aur(name="git"))
        database.insert(make_debian(name="git", version="2.39"))
        assert len(database) == 1
        assert isinstance(database.get("git").source, DebianSource)
        assert database.get("git").version == "2.39"

    def test_identical_insert_is_idempotent(self, database):
        database.insert(make_aur())
        database.insert(make_debian())
        stats_before = database.stats()
        search_before = database.search("r")

        database.insert(make_aur())

        assert database.stats() == stats_before
        assert database.search("r") == search_before

    def test_iteration_yields_packages(self, database):
        database.insert(make_aur())
        database.insert(make_flatpak())
        assert {p.name for p in database} == {"ripgrep", "org.app.Foo"}


# ═══════════════════════════════════════════
# Search
# ═══════════════════════════════════════════


class TestSearch:
    def test_case_insensitive_name(self, database):
        database.insert(make_aur(name="Foo"))
        assert [p.name for p in database.search("foo")] == ["Foo"]
        assert [p.name for p in database.search("FOO")] == ["Foo"]

    def test_matches_description(self, database):
        database.insert(make_debian())
        assert [p.name for p in database.search("bourne")] == ["bash"]

    def test_substring(self, database):
        database.insert(make_aur(name="ripgrep"))
        database.insert(make_aur(name="ripgrep-all", description="rga"))
        database.insert(make_aur(name="fd", description="find alternative"))
        assert sorted(p.name for p in database.search("grep")) == ["ripgrep", "ripgrep-all"]

    def test_no_match(self, database):
        database.insert(make_aur())
        assert database.search("zzz") == []

    def test_empty_query_matches_everything(self, database):
        database.insert(make_aur())
        database.insert(make_flatpak())
        assert len(database.search("")) == 2


# ═══════════════════════════════════════════
# Statistics
# ═══════════════════════════════════════════


class TestStats:
    def test_empty(self, database):
        assert database.stats() == DatabaseStats()

    def test_ripgrep_scenario(self, database):
        database.insert(make_aur())
        stats = database.stats()
        assert stats.aur_count == 1
        assert stats.total_count == 1

    def test_counts_every_variant(self, database):
        database.insert(make_aur())
        database.insert(make_debian())
        database.insert(make_flatpak())
        database.insert(make_flatpak(name="org.app.Bar"))
        database.insert(
            ApkgPackage(
                name="snapped",
                version="1",
                description="",
                source=SnapSource(channel="stable"),
                build_type=Container(runtime="snapd"),
            )
        )
        database.insert(
            ApkgPackage(
                name="nixed",
                version="1",
                description="",
                source=NixpkgsSource(attr="nixpkgs.nixed"),
                build_type=SourceBuild(build_cmd=["nix-build"]),
            )
        )
        database.insert(
            ApkgPackage(
                name="built",
                version="1",
                description="",
                source=SourceRepo(url="https://example.org/built.git", vcs_type="git"),
                build_type=SourceBuild(build_cmd=["make"]),
            )
        )

        stats = database.stats()
        assert stats == DatabaseStats(
            total_count=7,
            aur_count=1,
            debian_count=1,
            flatpak_count=2,
            snap_count=1,
            nixpkgs_count=1,
            source_count=1,
        )


# ═══════════════════════════════════════════
# Persistence
# ═══════════════════════════════════════════


class TestPersistence:
    def test_db_path(self, tmp_path):
        assert PackageDatabase(tmp_path).db_path == tmp_path / "packages.json"
        assert PackageDatabase(tmp_path, filename="x.json").db_path == tmp_path / "x.json"

    @pytest.mark.asyncio
    async def test_round_trip(self, database, tmp_path):
        database.insert(make_aur(dependencies=["zlib", "pcre2", "cargo"]))
        database.insert(make_debian())
        database.insert(make_flatpak())
        await database.save()

        fresh = PackageDatabase(tmp_path)
        count = await fresh.load()

        assert count == 3
        assert set(fresh.packages) == set(database.packages)
        for name, pkg in database.packages.items():
            assert fresh.get(name) == pkg
        assert fresh.get("ripgrep").dependencies == ["zlib", "pcre2", "cargo"]

    @pytest.mark.asyncio
    async def test_snapshot_is_readable_json(self, database):
        database.insert(make_aur())
        path = await database.save()

        data = json.loads(path.read_text())
        assert list(data) == ["ripgrep"]
        assert data["ripgrep"]["source"]["Aur"]["pkgbase"] == "ripgrep"

    @pytest.mark.asyncio
    async def test_save_overwrites(self, database):
        database.insert(make_aur())
        await database.save()
        database.packages.clear()
        database.insert(make_debian())
        await database.save()

        fresh = PackageDatabase(database.cache_dir)
        await fresh.load()
        assert list(fresh.packages) == ["bash"]

    @pytest.mark.asyncio
    async def test_save_creates_cache_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db = PackageDatabase(Path(tmpdir) / "nested" / "cache")
            db.insert(make_flatpak())
            path = await db.save()
            assert path.exists()

    @pytest.mark.asyncio
    async def test_save_to_explicit_path(self, database, tmp_path):
        database.insert(make_aur())
        target = tmp_path / "elsewhere.json"
        assert await database.save(target) == target
        assert target.exists()
        assert not database.db_path.exists()

    @pytest.mark.asyncio
    async def test_load_replaces_state(self, database, tmp_path):
        database.insert(make_aur())
        await database.save()

        other = PackageDatabase(tmp_path)
        other.insert(make_flatpak())
        await other.load()
        assert list(other.packages) == ["ripgrep"]

    @pytest.mark.asyncio
    async def test_load_missing_file(self, database):
        database.insert(make_aur())
        with pytest.raises(DatabaseError):
            await database.load()
        assert "ripgrep" in database

    @pytest.mark.asyncio
    async def test_load_corrupt_json_keeps_state(self, database):
        database.db_path.write_text("{not json")
        database.insert(make_aur())
        with pytest.raises(DatabaseError, match="Corrupt"):
            await database.load()
        assert len(database) == 1

    @pytest.mark.asyncio
    async def test_load_bad_variant_keeps_state(self, database):
        entry = make_flatpak().to_dict()
        entry["source"] = {"Homebrew": {"tap": "core"}}
        database.db_path.write_text(json.dumps({"org.app.Foo": entry}))
        database.insert(make_debian())

        with pytest.raises(DatabaseError):
            await database.load()
        assert list(database.packages) == ["bash"]

    @pytest.mark.asyncio
    async def test_load_non_object(self, database):
        database.db_path.write_text("[]")
        with pytest.raises(DatabaseError):
            await database.load()

    @pytest.mark.asyncio
    async def test_save_failure(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        db = PackageDatabase(blocker / "cache")
        with pytest.raises(DatabaseError):
            await db.save()
