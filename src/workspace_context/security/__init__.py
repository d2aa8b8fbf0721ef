"""Workspace path guard shared by selection, inclusion and edits."""

from .paths import PathBlockedError, WorkspacePathGuard

__all__ = ["PathBlockedError", "WorkspacePathGuard"]
