"""Deterministic workspace context assembly for code questions."""

from .cancellation import CancellationToken, ContextBuildCoordinator
from .config import ConfigOverrides, WorkspaceConfig, load_effective_config
from .errors import BuildCancelledError, FileLoadError, PreferencesError, WorkspaceUnavailableError
from .session import WorkspaceSession

__all__ = [
    "BuildCancelledError",
    "CancellationToken",
    "ConfigOverrides",
    "ContextBuildCoordinator",
    "FileLoadError",
    "PreferencesError",
    "WorkspaceConfig",
    "WorkspaceSession",
    "WorkspaceUnavailableError",
    "load_effective_config",
]
