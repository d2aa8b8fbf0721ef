"""File mutation capability, reachable only through explicit edits."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Protocol

from workspace_context.security.paths import WorkspacePathGuard
from workspace_context.workspace.boundary import BoundaryRules


class MutationAuthorizing(Protocol):
    """Write full file content to a workspace path."""

    def apply(self, path: str, content: str) -> None: ...


class SandboxedFileWriter:
    """Atomic writer confined to one workspace root."""

    def __init__(self, root: Path, rules: BoundaryRules | None = None) -> None:
        self._guard = WorkspacePathGuard(root, rules)

    def apply(self, path: str, content: str) -> None:
        """Write content atomically; raises PathBlockedError for blocked paths."""
        target = self._guard.resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class RecordingMutationAuthority:
    """In-memory mutation double counting apply calls."""

    def __init__(self) -> None:
        self.apply_calls = 0
        self.writes: dict[str, str] = {}

    def apply(self, path: str, content: str) -> None:
        self.apply_calls += 1
        self.writes[path] = content
