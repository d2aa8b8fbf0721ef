"""Deterministic workspace snapshot construction."""

from __future__ import annotations

import hashlib
from dataclasses import replace

from workspace_context.cancellation import CancellationToken
from workspace_context.workspace.boundary import BoundaryFilter, BoundaryRules
from workspace_context.workspace.filesystem import (
    ENTRY_DIRECTORY,
    ENTRY_FILE,
    FileSystemAccess,
)
from workspace_context.workspace.languages import language_for_path
from workspace_context.workspace.models import (
    FileDescriptor,
    FileKind,
    InclusionPreferences,
    TreeNode,
    WorkspaceSnapshot,
)
from workspace_context.workspace.preferences import compute_inclusion_map


def build_file_id(canonical_path: str) -> str:
    """Return the stable identifier for a canonical path."""
    return hashlib.sha256(canonical_path.encode("utf-8")).hexdigest()


def compute_snapshot_hash(descriptors: tuple[FileDescriptor, ...]) -> str:
    """Hash sorted `path:identifier` pairs of every descriptor."""
    pairs = sorted(f"{d.canonical_path}:{d.file_id}" for d in descriptors)
    return hashlib.sha256("\n".join(pairs).encode("utf-8")).hexdigest()


def build_snapshot(
    root_path: str,
    file_system: FileSystemAccess,
    rules: BoundaryRules | None = None,
    *,
    previous_selection: str | None = None,
    preferences: InclusionPreferences | None = None,
    cancel: CancellationToken | None = None,
) -> WorkspaceSnapshot:
    """Enumerate the workspace and return an immutable snapshot.

    Raises WorkspaceUnavailableError when the root or any directory cannot be
    listed. Files whose metadata cannot be read are skipped.
    """
    root = file_system.resolve_root(root_path)
    boundary = BoundaryFilter(root, rules)
    collected: dict[str, FileDescriptor] = {}
    _scan_directory(root, root, file_system, boundary, collected, cancel)

    descriptors = tuple(collected[path] for path in sorted(collected))
    prefs = preferences or InclusionPreferences()
    path_index = {d.canonical_path: d.file_id for d in descriptors}
    selected_path = previous_selection if previous_selection in path_index else None
    return WorkspaceSnapshot(
        root_path=root,
        selected_path=selected_path,
        selected_id=path_index.get(selected_path) if selected_path is not None else None,
        descriptor_paths={d.file_id: d.canonical_path for d in descriptors},
        path_index=path_index,
        context_inclusions=compute_inclusion_map(descriptors, prefs, root),
        descriptors=descriptors,
        snapshot_hash=compute_snapshot_hash(descriptors),
        preferences=prefs,
    )


def _scan_directory(
    path: str,
    name: str,
    file_system: FileSystemAccess,
    boundary: BoundaryFilter,
    collected: dict[str, FileDescriptor],
    cancel: CancellationToken | None,
) -> None:
    if cancel is not None:
        cancel.raise_if_cancelled()
    children: list[str] = []
    for entry in file_system.list_children(path):
        if entry.kind == ENTRY_DIRECTORY:
            if not boundary.allows(entry.canonical_path, is_directory=True):
                continue
            _scan_directory(
                entry.canonical_path, entry.name, file_system, boundary, collected, cancel
            )
            children.append(build_file_id(entry.canonical_path))
            continue
        if entry.kind != ENTRY_FILE:
            continue
        if not boundary.allows(entry.canonical_path):
            continue
        try:
            metadata = file_system.metadata(entry.canonical_path)
        except OSError:
            continue
        file_id = build_file_id(entry.canonical_path)
        collected[entry.canonical_path] = FileDescriptor(
            file_id=file_id,
            name=entry.name,
            kind=FileKind.FILE,
            canonical_path=entry.canonical_path,
            language=language_for_path(entry.canonical_path),
            size=metadata.byte_size,
            content_hash=metadata.content_hash,
        )
        children.append(file_id)
    collected[path] = FileDescriptor(
        file_id=build_file_id(path),
        name=name.rsplit("/", 1)[-1] or name,
        kind=FileKind.DIRECTORY,
        canonical_path=path,
        children=tuple(children),
    )


def apply_preferences(
    snapshot: WorkspaceSnapshot,
    preferences: InclusionPreferences,
) -> WorkspaceSnapshot:
    """Return a snapshot with inclusion states recomputed for new preferences."""
    return replace(
        snapshot,
        preferences=preferences,
        context_inclusions=compute_inclusion_map(
            snapshot.descriptors, preferences, snapshot.root_path
        ),
    )


def build_tree_projection(snapshot: WorkspaceSnapshot) -> TreeNode | None:
    """Return a nested display tree; directories first, then files, by name."""
    root = snapshot.descriptor_for_path(snapshot.root_path)
    if root is None:
        return None
    by_id = {d.file_id: d for d in snapshot.descriptors}
    return _project(root, by_id)


def _project(descriptor: FileDescriptor, by_id: dict[str, FileDescriptor]) -> TreeNode:
    children = [by_id[child] for child in descriptor.children if child in by_id]
    children.sort(key=lambda d: (not d.is_directory, d.name.lower(), d.name))
    return TreeNode(
        file_id=descriptor.file_id,
        name=descriptor.name,
        path=descriptor.canonical_path,
        is_directory=descriptor.is_directory,
        children=tuple(_project(child, by_id) for child in children),
    )
