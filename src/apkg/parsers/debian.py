"""
Debian Control-File Adapter.

Parses the plain-text `Packages` index of a Debian archive (RFC822-style
stanzas separated by blank lines) into ApkgPackage records.

Continuation lines are not folded: a multi-line Description keeps only its
first line.
"""

import logging

from apkg.models.package import ApkgPackage, Binary, DebianSource
from apkg.parsers.text import split_lines

logger = logging.getLogger(__name__)

DEBIAN_ARCH = "amd64"
DEBIAN_EXTRACT_CMD = ("dpkg-deb", "-x")
UNKNOWN_VERSION = "unknown"


def parse_control_stanzas(content: str) -> list[dict[str, str]]:
    """
    Split control-file text into stanzas of `Key: Value` pairs.

    Only a blank line closes a stanza: lines after the last blank line are
    discarded. A repeated key within a stanza keeps its last value. Lines
    without a ": " separator are ignored. Empty stanzas are not returned.
    """
    stanzas = []
    current: dict[str, str] = {}

    for line in split_lines(content):
        if not line:
            if current:
                stanzas.append(current)
            current = {}
            continue

        key, sep, value = line.partition(": ")
        if sep:
            current[key] = value

    return stanzas


def parse_depends(value: str | None) -> list[str]:
    """
    Split a Depends field on commas.

    'libc6 (>= 2.34), libtinfo6 (>= 6)' -> ['libc6 (>= 2.34)', 'libtinfo6 (>= 6)']

    Version constraints and alternatives ('a | b') are kept verbatim, and so are
    empty tokens: 'a, , b' -> ['a', '', 'b'].
    """
    if value is None:
        return []
    return [token.strip() for token in value.split(",")]


def convert_debian_stanza(stanza: dict[str, str], suite: str, component: str) -> ApkgPackage:
    """Convert one stanza that has a `Package` field."""
    return ApkgPackage(
        name=stanza["Package"],
        version=stanza.get("Version", UNKNOWN_VERSION),
        description=stanza.get("Description", ""),
        source=DebianSource(suite=suite, component=component, arch=DEBIAN_ARCH),
        dependencies=parse_depends(stanza.get("Depends")),
        build_type=Binary(extract_cmd=DEBIAN_EXTRACT_CMD),
        homepage=stanza.get("Homepage"),
        license=[],
        maintainer=stanza.get("Maintainer"),
    )


def parse_debian_packages(content: str, suite: str, component: str) -> list[ApkgPackage]:
    """
    Parse a decoded `Packages` index for one (suite, component).

    Stanzas without a `Package` field are dropped.
    """
    packages = []
    skipped = 0

    for stanza in parse_control_stanzas(content):
        if "Package" not in stanza:
            skipped += 1
            continue
        packages.append(convert_debian_stanza(stanza, suite, component))

    if skipped:
        logger.debug(f"[Debian] {suite}/{component}: skipped {skipped} stanzas without Package")

    return packages
