"""
Flatpak Remote Listing Adapter.

Parses the output of
`flatpak remote-ls <remote> --app --columns=application,version,branch,description`.
"""

from apkg.models.package import ApkgPackage, Container, FlatpakSource
from apkg.parsers.text import split_lines

FLATPAK_COLUMNS = ("application", "version", "branch", "description")
FLATPAK_RUNTIME = "org.freedesktop.Platform"


def make_ref_name(app_id: str, branch: str) -> str:
    """
    Build the Flatpak ref for an application.

    'org.gnome.Calculator', 'stable' -> 'app/org.gnome.Calculator/stable'
    """
    return f"app/{app_id}/{branch}"


def parse_flatpak_listing(output: str, remote: str) -> list[ApkgPackage]:
    """
    Parse tab-separated remote-ls output.

    Args:
        output: Raw command output. The first line is a header.
        remote: Name of the remote the listing came from.

    Returns:
        One package per line with at least four columns; shorter lines are skipped.
    """
    packages = []

    for line in split_lines(output)[1:]:
        parts = line.split("\t")
        if len(parts) < len(FLATPAK_COLUMNS):
            continue

        app_id, version, branch, description = parts[:4]
        packages.append(
            ApkgPackage(
                name=app_id,
                version=version,
                description=description,
                source=FlatpakSource(remote=remote, ref_name=make_ref_name(app_id, branch)),
                dependencies=[],
                build_type=Container(runtime=FLATPAK_RUNTIME),
            )
        )

    return packages
