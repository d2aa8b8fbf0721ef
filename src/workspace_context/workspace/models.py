"""Typed models for immutable workspace snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum


class FileKind(StrEnum):
    """Kind of a workspace tree entry."""

    FILE = "file"
    DIRECTORY = "directory"


class ContextInclusionState(StrEnum):
    """Per-path user intent for context inclusion."""

    INCLUDED = "included"
    EXCLUDED = "excluded"
    NEUTRAL = "neutral"


@dataclass(slots=True, frozen=True)
class FileDescriptor:
    """One file or directory in a snapshot.

    Directories carry ordered child identifiers and never a size or hash.
    """

    file_id: str
    name: str
    kind: FileKind
    canonical_path: str
    children: tuple[str, ...] = ()
    language: str | None = None
    size: int | None = None
    content_hash: str | None = None

    @property
    def is_directory(self) -> bool:
        return self.kind is FileKind.DIRECTORY


@dataclass(slots=True, frozen=True)
class InclusionPreferences:
    """Persisted inclusion intent keyed by canonical path."""

    included_paths: frozenset[str] = frozenset()
    excluded_paths: frozenset[str] = frozenset()
    last_focused_path: str | None = None
    last_selection_path: str | None = None

    def with_inclusion(self, path: str, included: bool) -> InclusionPreferences:
        """Return preferences with one path forced in or out."""
        if included:
            return replace(
                self,
                included_paths=self.included_paths | {path},
                excluded_paths=self.excluded_paths - {path},
                last_focused_path=path,
            )
        return replace(
            self,
            included_paths=self.included_paths - {path},
            excluded_paths=self.excluded_paths | {path},
            last_focused_path=path,
        )

    def with_selection(self, path: str | None) -> InclusionPreferences:
        """Return preferences remembering the last selected path."""
        return replace(self, last_selection_path=path)


@dataclass(slots=True, frozen=True)
class WorkspaceSnapshot:
    """Immutable result of one workspace scan.

    Any tree or preference change produces a new snapshot; instances are never
    edited in place.
    """

    root_path: str
    selected_path: str | None
    selected_id: str | None
    descriptor_paths: dict[str, str]
    path_index: dict[str, str]
    context_inclusions: dict[str, ContextInclusionState]
    descriptors: tuple[FileDescriptor, ...]
    snapshot_hash: str
    preferences: InclusionPreferences = field(default_factory=InclusionPreferences)

    def descriptor_for_id(self, file_id: str) -> FileDescriptor | None:
        """Return a descriptor by identifier."""
        for descriptor in self.descriptors:
            if descriptor.file_id == file_id:
                return descriptor
        return None

    def descriptor_for_path(self, path: str) -> FileDescriptor | None:
        """Return a descriptor by canonical path."""
        file_id = self.path_index.get(path)
        if file_id is None:
            return None
        return self.descriptor_for_id(file_id)

    def file_descriptors(self) -> tuple[FileDescriptor, ...]:
        """Return file descriptors in canonical path order."""
        return tuple(d for d in self.descriptors if d.kind is FileKind.FILE)

    def inclusion_for_path(self, path: str) -> ContextInclusionState:
        """Return the inclusion state for a path, neutral when unknown."""
        file_id = self.path_index.get(path)
        if file_id is None:
            return ContextInclusionState.NEUTRAL
        return self.context_inclusions.get(file_id, ContextInclusionState.NEUTRAL)

    def with_selection(self, path: str | None) -> WorkspaceSnapshot:
        """Return a snapshot with a new selection; the path must exist."""
        if path is None:
            return replace(self, selected_path=None, selected_id=None)
        file_id = self.path_index.get(path)
        if file_id is None:
            raise ValueError(f"Path is not part of the workspace snapshot: {path}")
        return replace(self, selected_path=path, selected_id=file_id)


@dataclass(slots=True, frozen=True)
class TreeNode:
    """Read-only nested projection of a snapshot for display."""

    file_id: str
    name: str
    path: str
    is_directory: bool
    children: tuple[TreeNode, ...] = ()
