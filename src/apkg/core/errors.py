"""
Exception hierarchy for apkg.

Adapters and collaborators raise these; the sync orchestrator decides per
source whether a failure aborts the run, and the CLI reports them.
"""


class ApkgError(Exception):
    """Base class for all apkg errors."""


class UpstreamError(ApkgError):
    """Transport or decode failure while talking to an upstream (AUR, Debian mirror)."""


class FlatpakError(ApkgError):
    """The flatpak executable could not be run or exited non-zero."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class DatabaseError(ApkgError):
    """Reading or writing the package database snapshot failed."""
