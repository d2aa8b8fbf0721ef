"""Error types shared across the context pipeline."""

from __future__ import annotations


class WorkspaceUnavailableError(RuntimeError):
    """Raised when the workspace tree cannot be enumerated.

    Structural failures abort the scan; no partial snapshot is produced.
    """

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


class BuildCancelledError(RuntimeError):
    """Raised when a context build or ask is superseded or cancelled."""


class FileLoadError(Exception):
    """Raised by a file loader when one file cannot be read as text."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class PreferencesError(Exception):
    """Raised when persisted inclusion preferences cannot be decoded."""
