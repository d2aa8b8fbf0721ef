"""Context inclusion resolution and preference persistence."""

from __future__ import annotations

import json
import posixpath
from pathlib import Path

from workspace_context.errors import PreferencesError
from workspace_context.workspace.models import (
    ContextInclusionState,
    FileDescriptor,
    InclusionPreferences,
)

PREFERENCES_FILE_NAME = "context_preferences.json"


def inclusion_for_path(
    path: str,
    preferences: InclusionPreferences,
    root_path: str,
) -> ContextInclusionState:
    """Resolve one path against the nearest explicitly marked self or ancestor.

    Excluded wins when a path is marked both ways.
    """
    current = path
    while True:
        if current in preferences.excluded_paths:
            return ContextInclusionState.EXCLUDED
        if current in preferences.included_paths:
            return ContextInclusionState.INCLUDED
        if current == root_path:
            return ContextInclusionState.NEUTRAL
        parent = posixpath.dirname(current)
        if parent == current or not parent.startswith(root_path):
            return ContextInclusionState.NEUTRAL
        current = parent


def compute_inclusion_map(
    descriptors: tuple[FileDescriptor, ...],
    preferences: InclusionPreferences,
    root_path: str,
) -> dict[str, ContextInclusionState]:
    """Return inclusion state keyed by descriptor identifier."""
    return {
        descriptor.file_id: inclusion_for_path(descriptor.canonical_path, preferences, root_path)
        for descriptor in descriptors
    }


class PreferencesStore:
    """JSON-backed store for inclusion preferences of one workspace."""

    def __init__(self, data_dir: Path, strict: bool = False) -> None:
        self._path = data_dir / PREFERENCES_FILE_NAME
        self._strict = strict

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> InclusionPreferences:
        """Load preferences; missing files yield empty preferences."""
        if not self._path.exists():
            return InclusionPreferences()
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            if self._strict:
                raise PreferencesError(f"Preferences file is unreadable: {self._path}") from exc
            return InclusionPreferences()
        if not isinstance(payload, dict):
            if self._strict:
                raise PreferencesError(f"Preferences file must contain an object: {self._path}")
            return InclusionPreferences()
        return InclusionPreferences(
            included_paths=frozenset(_as_str_list(payload.get("included_paths"))),
            excluded_paths=frozenset(_as_str_list(payload.get("excluded_paths"))),
            last_focused_path=_as_optional_str(payload.get("last_focused_path")),
            last_selection_path=_as_optional_str(payload.get("last_selection_path")),
        )

    def save(self, preferences: InclusionPreferences) -> None:
        """Persist preferences atomically with sorted keys and path lists."""
        payload: dict[str, object] = {
            "included_paths": sorted(preferences.included_paths),
            "excluded_paths": sorted(preferences.excluded_paths),
            "last_focused_path": preferences.last_focused_path,
            "last_selection_path": preferences.last_selection_path,
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, sort_keys=True)
            handle.write("\n")
        tmp.replace(self._path)


def _as_str_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _as_optional_str(value: object) -> str | None:
    if isinstance(value, str):
        return value
    return None
