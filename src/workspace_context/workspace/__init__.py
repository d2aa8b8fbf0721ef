"""Workspace tree boundary, snapshot and inclusion preferences."""

from .boundary import BoundaryFilter, BoundaryRules
from .filesystem import (
    FileEntry,
    FileMetadata,
    FileSystemAccess,
    InMemoryFileSystem,
    LocalFileSystem,
)
from .models import (
    ContextInclusionState,
    FileDescriptor,
    FileKind,
    InclusionPreferences,
    TreeNode,
    WorkspaceSnapshot,
)
from .preferences import PreferencesStore, compute_inclusion_map
from .snapshot import apply_preferences, build_file_id, build_snapshot, build_tree_projection

__all__ = [
    "BoundaryFilter",
    "BoundaryRules",
    "ContextInclusionState",
    "FileDescriptor",
    "FileEntry",
    "FileKind",
    "FileMetadata",
    "FileSystemAccess",
    "InMemoryFileSystem",
    "InclusionPreferences",
    "LocalFileSystem",
    "PreferencesStore",
    "TreeNode",
    "WorkspaceSnapshot",
    "apply_preferences",
    "build_file_id",
    "build_snapshot",
    "build_tree_projection",
    "compute_inclusion_map",
]
