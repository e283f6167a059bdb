"""
apkg Package Model — the canonical package record.

Every upstream (AUR, Debian, Flatpak, ...) is normalized into ApkgPackage.
Where a package comes from and how it is materialized are closed sum types:
one frozen dataclass per variant, carrying exactly the fields that variant needs.

Variants serialize externally tagged, e.g. {"Aur": {"pkgbase": ..., "url": ...}}.
"""

from dataclasses import MISSING, asdict, dataclass, field, fields
from typing import ClassVar


# ──────────────────────────────────────────────
# Package sources
# ──────────────────────────────────────────────


@dataclass(frozen=True)
class AurSource:
    kind: ClassVar[str] = "Aur"

    pkgbase: str
    url: str


@dataclass(frozen=True)
class DebianSource:
    kind: ClassVar[str] = "Debian"

    suite: str
    component: str
    arch: str


@dataclass(frozen=True)
class FlatpakSource:
    kind: ClassVar[str] = "Flatpak"

    remote: str
    ref_name: str


@dataclass(frozen=True)
class SnapSource:
    kind: ClassVar[str] = "Snap"

    channel: str


@dataclass(frozen=True)
class NixpkgsSource:
    kind: ClassVar[str] = "Nixpkgs"

    attr: str


@dataclass(frozen=True)
class SourceRepo:
    """A package built straight from an upstream source tree."""

    kind: ClassVar[str] = "Source"

    url: str
    vcs_type: str | None = None


PackageSource = AurSource | DebianSource | FlatpakSource | SnapSource | NixpkgsSource | SourceRepo

SOURCE_VARIANTS: dict[str, type] = {
    cls.kind: cls
    for cls in (AurSource, DebianSource, FlatpakSource, SnapSource, NixpkgsSource, SourceRepo)
}


# ──────────────────────────────────────────────
# Build types
# ──────────────────────────────────────────────


@dataclass(frozen=True)
class SourceBuild:
    kind: ClassVar[str] = "SourceBuild"

    build_cmd: tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "build_cmd", tuple(self.build_cmd))


@dataclass(frozen=True)
class Binary:
    kind: ClassVar[str] = "Binary"

    extract_cmd: tuple[str, ...] | None = None

    def __post_init__(self):
        if self.extract_cmd is not None:
            object.__setattr__(self, "extract_cmd", tuple(self.extract_cmd))


@dataclass(frozen=True)
class Container:
    kind: ClassVar[str] = "Container"

    runtime: str


BuildType = SourceBuild | Binary | Container

BUILD_VARIANTS: dict[str, type] = {cls.kind: cls for cls in (SourceBuild, Binary, Container)}


# ──────────────────────────────────────────────
# Tagged (de)serialization
# ──────────────────────────────────────────────


def _variant_to_dict(variant) -> dict:
    payload = {}
    for f in fields(variant):
        value = getattr(variant, f.name)
        payload[f.name] = list(value) if isinstance(value, tuple) else value
    return {variant.kind: payload}


def _variant_from_dict(data, registry: dict[str, type], what: str):
    if not isinstance(data, dict) or len(data) != 1:
        raise ValueError(f"Malformed {what}: expected a single-key tagged object, got {data!r}")

    tag, payload = next(iter(data.items()))
    cls = registry.get(tag)
    if cls is None:
        raise ValueError(f"Unknown {what} variant: {tag!r}")
    if not isinstance(payload, dict):
        raise ValueError(f"Malformed {what} payload for {tag!r}: {payload!r}")

    kwargs = {}
    for f in fields(cls):
        if f.name in payload:
            kwargs[f.name] = payload[f.name]
        elif f.default is MISSING:
            raise ValueError(f"{what} variant {tag!r} is missing field {f.name!r}")
    return cls(**kwargs)


def source_to_dict(source: PackageSource) -> dict:
    """Serialize a package source to its tagged form."""
    return _variant_to_dict(source)


def source_from_dict(data: dict) -> PackageSource:
    """Deserialize a tagged package source. Raises ValueError on bad input."""
    return _variant_from_dict(data, SOURCE_VARIANTS, "source")


def build_type_to_dict(build_type: BuildType) -> dict:
    """Serialize a build type to its tagged form."""
    return _variant_to_dict(build_type)


def build_type_from_dict(data: dict) -> BuildType:
    """Deserialize a tagged build type. Raises ValueError on bad input."""
    return _variant_from_dict(data, BUILD_VARIANTS, "build_type")


# ──────────────────────────────────────────────
# Canonical record
# ──────────────────────────────────────────────


@dataclass
class ApkgPackage:
    """
    Normalized package metadata.

    This is the unit of the package database. All adapters converge on it;
    `name` is the store key.
    """

    name: str
    version: str
    description: str
    source: PackageSource
    build_type: BuildType
    dependencies: list[str] = field(default_factory=list)
    homepage: str | None = None
    license: list[str] = field(default_factory=list)
    maintainer: str | None = None

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dictionary."""
        data = asdict(self)
        data["source"] = source_to_dict(self.source)
        data["build_type"] = build_type_to_dict(self.build_type)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ApkgPackage":
        """Deserialize from dictionary."""
        return cls(
            name=data["name"],
            version=data["version"],
            description=data.get("description", ""),
            source=source_from_dict(data["source"]),
            build_type=build_type_from_dict(data["build_type"]),
            dependencies=list(data.get("dependencies", [])),
            homepage=data.get("homepage"),
            license=list(data.get("license", [])),
            maintainer=data.get("maintainer"),
        )
