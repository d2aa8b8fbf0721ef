"""Mapping of user-supplied paths onto canonical workspace paths."""

from __future__ import annotations

import os
import posixpath
import re
from pathlib import Path
from typing import Final

from workspace_context.workspace.boundary import BoundaryFilter, BoundaryRules

DRIVE_PREFIX_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:/")


class PathBlockedError(Exception):
    """Raised when a path may not be selected, included or edited."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


class WorkspacePathGuard:
    """Turn relative or absolute inputs into the snapshot's canonical paths.

    A path is accepted only when it stays under the root lexically, still does
    so once links are resolved, and names an entry the boundary rules would
    scan. Results are POSIX strings matching `FileDescriptor.canonical_path`.
    """

    def __init__(self, root: Path, rules: BoundaryRules | None = None) -> None:
        self._root = root.resolve()
        self._boundary = BoundaryFilter(self._root.as_posix(), rules)

    @property
    def root(self) -> Path:
        return self._root

    def canonical(self, candidate: str) -> str:
        lexical = self._lexical_path(candidate)
        resolved = Path(lexical).resolve(strict=False)
        if not resolved.is_relative_to(self._root):
            raise PathBlockedError(
                reason="Path resolves through a link outside the workspace.",
                hint="Links leaving the workspace cannot be followed.",
            )
        canonical = resolved.as_posix()
        if not self._boundary.allows(canonical, is_directory=resolved.is_dir()):
            raise PathBlockedError(
                reason="Path is excluded by the workspace boundary.",
                hint="Hidden, build output and binary entries are never in context.",
            )
        return canonical

    def resolve(self, candidate: str) -> Path:
        """Return the canonical path as a filesystem path."""
        return Path(self.canonical(candidate))

    def _lexical_path(self, candidate: str) -> str:
        text = candidate.strip().replace("\\", "/")
        if not text:
            raise PathBlockedError(
                reason="Path is empty.",
                hint="Name a workspace entry such as 'Sources/App.swift'.",
            )
        root = self._root.as_posix()
        if DRIVE_PREFIX_PATTERN.match(text) and os.name != "nt":
            raise PathBlockedError(
                reason="Path is outside the workspace.",
                hint=f"Use a path under {root}.",
            )
        if posixpath.isabs(text) or DRIVE_PREFIX_PATTERN.match(text):
            joined = posixpath.normpath(text)
            if joined != root and not joined.startswith(root.rstrip("/") + "/"):
                raise PathBlockedError(
                    reason="Path is outside the workspace.",
                    hint=f"Use a path under {root}.",
                )
            return joined
        parts = [part for part in text.split("/") if part not in ("", ".")]
        if ".." in parts:
            raise PathBlockedError(
                reason="Parent directory segments are not allowed.",
                hint="Remove '..' and name the entry relative to the workspace root.",
            )
        return posixpath.join(root, *parts) if parts else root
