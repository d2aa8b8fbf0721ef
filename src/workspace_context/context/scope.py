"""Scope resolution from a snapshot to ordered candidate paths."""

from __future__ import annotations

import posixpath

from workspace_context.context.models import ContextScope
from workspace_context.workspace.models import ContextInclusionState, WorkspaceSnapshot


def resolve_scope(snapshot: WorkspaceSnapshot, scope: ContextScope) -> tuple[str, ...]:
    """Return candidate file paths sorted by canonical path.

    An empty tuple means no context can be built for this scope.
    """
    files = snapshot.file_descriptors()
    allowed = [
        d.canonical_path
        for d in files
        if snapshot.context_inclusions.get(d.file_id) is not ContextInclusionState.EXCLUDED
    ]
    if scope is ContextScope.WORKSPACE:
        return tuple(sorted(allowed))
    if scope is ContextScope.MANUAL:
        return tuple(
            sorted(
                d.canonical_path
                for d in files
                if snapshot.context_inclusions.get(d.file_id) is ContextInclusionState.INCLUDED
            )
        )

    selected = _selected_file_path(snapshot)
    if selected is None or selected not in allowed:
        return ()
    if scope is ContextScope.SELECTION:
        return (selected,)
    if scope is ContextScope.SELECTION_AND_SIBLINGS:
        parent = posixpath.dirname(selected)
        return tuple(sorted(path for path in allowed if posixpath.dirname(path) == parent))
    raise ValueError(f"Unsupported context scope: {scope}")


def _selected_file_path(snapshot: WorkspaceSnapshot) -> str | None:
    if snapshot.selected_path is None:
        return None
    descriptor = snapshot.descriptor_for_path(snapshot.selected_path)
    if descriptor is None or descriptor.is_directory:
        return None
    return descriptor.canonical_path
