"""Exception types for failures that must cross a module boundary.

Validation problems, missing entities and rejected credentials are not
exceptions; they travel as :class:`clinicsite.results.Result` values.
"""

from __future__ import annotations

from pathlib import Path

GENERIC_SERVER_ERROR = "Server error"


class ClinicSiteError(Exception):
    """Base class for clinicsite errors."""


class StoreUnavailableError(ClinicSiteError):
    """A data file exists but cannot be parsed or has the wrong shape.

    Kept separate from "file not found" so corrupt data is never masked
    by a silent default.
    """

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Store unavailable at {self.path}: {reason}")


class BootstrapError(ClinicSiteError):
    """No credentials file and no bootstrap password to create one."""
