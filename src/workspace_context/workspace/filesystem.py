"""File-system capability consumed by the snapshot builder."""

from __future__ import annotations

import hashlib
import os
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from workspace_context.errors import WorkspaceUnavailableError

ENTRY_FILE = "file"
ENTRY_DIRECTORY = "directory"
ENTRY_OTHER = "other"


@dataclass(slots=True, frozen=True)
class FileEntry:
    """One directory listing entry."""

    name: str
    canonical_path: str
    kind: str


@dataclass(slots=True, frozen=True)
class FileMetadata:
    """Size and content hash for one regular file."""

    path: str
    byte_size: int
    content_hash: str


class FileSystemAccess(Protocol):
    """Read-only view of a workspace tree.

    `resolve_root` and `list_children` raise WorkspaceUnavailableError on
    structural failure. `metadata` raises OSError for a single bad file.
    """

    def resolve_root(self, path: str) -> str: ...

    def list_children(self, path: str) -> list[FileEntry]: ...

    def metadata(self, path: str) -> FileMetadata: ...


def sha256_file(path: Path) -> str:
    """Compute SHA-256 hash in deterministic chunked reads."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        while True:
            chunk = handle.read(1024 * 128)
            if not chunk:
                break
            digest.update(chunk)
    return digest.hexdigest()


class LocalFileSystem:
    """FileSystemAccess backed by the local disk; symlinks are never followed."""

    def resolve_root(self, path: str) -> str:
        root = Path(path).expanduser()
        try:
            resolved = root.resolve(strict=True)
        except OSError as exc:
            raise WorkspaceUnavailableError(
                reason=f"Workspace root cannot be resolved: {path}",
                hint="Open an existing, readable directory.",
            ) from exc
        if not resolved.is_dir():
            raise WorkspaceUnavailableError(
                reason=f"Workspace root is not a directory: {path}",
                hint="Open a directory rather than a single file.",
            )
        return resolved.as_posix()

    def list_children(self, path: str) -> list[FileEntry]:
        try:
            with os.scandir(path) as entries:
                ordered = sorted(entries, key=lambda item: item.name)
        except OSError as exc:
            raise WorkspaceUnavailableError(
                reason=f"Directory cannot be listed: {path}",
                hint="Check directory permissions and retry.",
            ) from exc
        output: list[FileEntry] = []
        for entry in ordered:
            canonical = Path(entry.path).as_posix()
            try:
                if entry.is_symlink():
                    kind = ENTRY_OTHER
                elif entry.is_dir(follow_symlinks=False):
                    kind = ENTRY_DIRECTORY
                elif entry.is_file(follow_symlinks=False):
                    kind = ENTRY_FILE
                else:
                    kind = ENTRY_OTHER
            except OSError:
                kind = ENTRY_OTHER
            output.append(FileEntry(name=entry.name, canonical_path=canonical, kind=kind))
        return output

    def metadata(self, path: str) -> FileMetadata:
        full_path = Path(path)
        stat = full_path.stat()
        return FileMetadata(
            path=path,
            byte_size=stat.st_size,
            content_hash=sha256_file(full_path),
        )


class InMemoryFileSystem:
    """FileSystemAccess over a dict of POSIX path to bytes.

    Parent directories of every file are implied. Paths listed in
    `unreadable` fail: directories structurally, files per entry.
    """

    def __init__(
        self,
        root: str,
        files: dict[str, bytes | str],
        directories: tuple[str, ...] = (),
        unreadable: frozenset[str] = frozenset(),
        others: tuple[str, ...] = (),
    ) -> None:
        self._root = root.rstrip("/") or "/"
        self._files: dict[str, bytes] = {}
        for path, content in files.items():
            data = content.encode("utf-8") if isinstance(content, str) else content
            self._files[self._absolute(path)] = data
        self._directories: set[str] = {self._root}
        for path in directories:
            self._add_directory(self._absolute(path))
        for path in self._files:
            self._add_directory(posixpath.dirname(path))
        self._others = {self._absolute(path) for path in others}
        for path in self._others:
            self._add_directory(posixpath.dirname(path))
        self._unreadable = {self._absolute(path) for path in unreadable}

    def _absolute(self, path: str) -> str:
        if path.startswith("/"):
            return posixpath.normpath(path)
        return posixpath.normpath(posixpath.join(self._root, path))

    def _add_directory(self, path: str) -> None:
        while path and path not in self._directories:
            self._directories.add(path)
            parent = posixpath.dirname(path)
            if parent == path:
                break
            path = parent

    def resolve_root(self, path: str) -> str:
        normalized = posixpath.normpath(path)
        if normalized in self._unreadable or normalized not in self._directories:
            raise WorkspaceUnavailableError(
                reason=f"Workspace root cannot be resolved: {path}",
                hint="Open an existing, readable directory.",
            )
        return normalized

    def list_children(self, path: str) -> list[FileEntry]:
        if path in self._unreadable or path not in self._directories:
            raise WorkspaceUnavailableError(
                reason=f"Directory cannot be listed: {path}",
                hint="Check directory permissions and retry.",
            )
        entries: dict[str, FileEntry] = {}
        for candidate in self._directories:
            if candidate != path and posixpath.dirname(candidate) == path:
                name = posixpath.basename(candidate)
                entries[name] = FileEntry(name=name, canonical_path=candidate, kind=ENTRY_DIRECTORY)
        for candidate in self._files:
            if posixpath.dirname(candidate) == path:
                name = posixpath.basename(candidate)
                entries[name] = FileEntry(name=name, canonical_path=candidate, kind=ENTRY_FILE)
        for candidate in self._others:
            if posixpath.dirname(candidate) == path:
                name = posixpath.basename(candidate)
                entries[name] = FileEntry(name=name, canonical_path=candidate, kind=ENTRY_OTHER)
        return [entries[name] for name in sorted(entries)]

    def metadata(self, path: str) -> FileMetadata:
        if path in self._unreadable or path not in self._files:
            raise FileNotFoundError(path)
        data = self._files[path]
        return FileMetadata(
            path=path,
            byte_size=len(data),
            content_hash=hashlib.sha256(data).hexdigest(),
        )
