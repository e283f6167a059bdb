"""
AUR RPC Adapter.

Converts results of the Arch User Repository RPC v5 search endpoint into
ApkgPackage records. The adapter does not fetch PKGBUILDs: every AUR package
is built from source with makepkg.
"""

from apkg.core.errors import UpstreamError
from apkg.models.package import ApkgPackage, AurSource, SourceBuild

AUR_BASE_URL = "https://aur.archlinux.org"
AUR_BUILD_CMD = ("makepkg", "--noconfirm", "-si")
NO_DESCRIPTION = "No description"

REQUIRED_FIELDS = ("Name", "PackageBase", "Version", "URLPath")
OPTIONAL_FIELDS = ("Description", "URL", "Maintainer")
LIST_FIELDS = ("Depends", "MakeDepends", "License")


def convert_aur_package(result: dict) -> ApkgPackage:
    """
    Convert a single AUR RPC result object.

    Args:
        result: One entry of the RPC response's `results` list.

    Returns:
        The normalized package. Runtime dependencies come first, followed by
        build-time dependencies; nothing is deduplicated.
    """
    dependencies = list(result.get("Depends") or [])
    dependencies.extend(result.get("MakeDepends") or [])

    description = result.get("Description")
    if description is None:
        description = NO_DESCRIPTION

    return ApkgPackage(
        name=result["Name"],
        version=result["Version"],
        description=description,
        source=AurSource(
            pkgbase=result["PackageBase"],
            url=f"{AUR_BASE_URL}{result['URLPath']}",
        ),
        dependencies=dependencies,
        build_type=SourceBuild(build_cmd=AUR_BUILD_CMD),
        homepage=result.get("URL"),
        license=list(result.get("License") or []),
        maintainer=result.get("Maintainer"),
    )


def _check_result(result) -> None:
    """Raise UpstreamError unless `result` decodes to a package."""
    if not isinstance(result, dict):
        raise UpstreamError(f"AUR result is not a JSON object: {result!r}")

    missing = [key for key in REQUIRED_FIELDS if key not in result]
    if missing:
        raise UpstreamError(f"AUR result is missing fields {missing}: {result!r}")

    for key in REQUIRED_FIELDS:
        value = result[key]
        if not isinstance(value, str) or not value:
            raise UpstreamError(f"AUR result field {key!r} must be a non-empty string, got {value!r}")

    for key in OPTIONAL_FIELDS:
        value = result.get(key)
        if value is not None and not isinstance(value, str):
            raise UpstreamError(f"AUR result field {key!r} must be a string, got {value!r}")

    for key in LIST_FIELDS:
        value = result.get(key)
        if value is not None and not (isinstance(value, list) and all(isinstance(v, str) for v in value)):
            raise UpstreamError(f"AUR result field {key!r} must be a list of strings, got {value!r}")


def parse_aur_response(payload: dict) -> list[ApkgPackage]:
    """
    Convert a full RPC response body.

    The whole response is validated before anything is returned, so a
    malformed result never yields a partial list.

    Raises:
        UpstreamError: The body is an RPC error, or a result lacks required
            fields or carries them with the wrong type.
    """
    if not isinstance(payload, dict):
        raise UpstreamError(f"AUR response is not a JSON object: {type(payload).__name__}")

    if payload.get("type") == "error":
        raise UpstreamError(f"AUR RPC error: {payload.get('error', 'unknown error')}")

    results = payload.get("results")
    if not isinstance(results, list):
        raise UpstreamError("AUR response has no 'results' list")

    for result in results:
        _check_result(result)

    return [convert_aur_package(result) for result in results]
