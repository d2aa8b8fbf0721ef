"""Boundary rules deciding which workspace entries are ever eligible."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

DEFAULT_EXCLUDED_NAMES = frozenset(
    {
        ".git",
        ".swiftpm",
        ".swift-module-cache",
        ".build",
        "DerivedData",
        ".idea",
        ".vscode",
        "Pods",
        "Carthage",
        "node_modules",
        ".Trash",
        ".history",
        "tmp_home",
        ".tmp_home",
        "xcuserdata",
        "xcshareddata",
        "__pycache__",
        ".venv",
        ".mypy_cache",
        ".pytest_cache",
    }
)
DEFAULT_EXCLUDED_FILE_NAMES = frozenset({".DS_Store", "Package.resolved", ".swiftpm"})
DEFAULT_EXCLUDED_EXTENSIONS = frozenset(
    {
        "png",
        "jpg",
        "jpeg",
        "gif",
        "webp",
        "heic",
        "mp3",
        "wav",
        "ttf",
        "otf",
        "o",
        "swiftmodule",
        "swiftdoc",
        "xcuserstate",
        "xcworkspacedata",
        "pyc",
    }
)


@dataclass(slots=True, frozen=True)
class BoundaryRules:
    """Exclusion sets applied before any descriptor is created."""

    excluded_names: frozenset[str] = DEFAULT_EXCLUDED_NAMES
    excluded_file_names: frozenset[str] = DEFAULT_EXCLUDED_FILE_NAMES
    excluded_extensions: frozenset[str] = DEFAULT_EXCLUDED_EXTENSIONS
    include_hidden: bool = False

    def extended(
        self,
        names: tuple[str, ...] = (),
        file_names: tuple[str, ...] = (),
        extensions: tuple[str, ...] = (),
    ) -> BoundaryRules:
        """Return rules with extra exclusions; defaults are never relaxed."""
        return BoundaryRules(
            excluded_names=self.excluded_names | frozenset(names),
            excluded_file_names=self.excluded_file_names | frozenset(file_names),
            excluded_extensions=self.excluded_extensions
            | frozenset(ext.lower().lstrip(".") for ext in extensions),
            include_hidden=self.include_hidden,
        )


class BoundaryFilter:
    """Pure path-string filter bound to one workspace root."""

    def __init__(self, root: str, rules: BoundaryRules | None = None) -> None:
        self._root = root.rstrip("/") or "/"
        self._rules = rules or BoundaryRules()

    @property
    def root(self) -> str:
        return self._root

    @property
    def rules(self) -> BoundaryRules:
        return self._rules

    def allows(self, canonical_path: str, is_directory: bool = False) -> bool:
        """Return True when the path may ever appear in a snapshot."""
        parts = self._relative_parts(canonical_path)
        if parts is None:
            return False
        if not parts:
            return True
        for directory in parts[:-1]:
            if not self._allows_directory_name(directory):
                return False
        leaf = parts[-1]
        if is_directory:
            return self._allows_directory_name(leaf)
        return self._allows_file_name(leaf)

    def _relative_parts(self, canonical_path: str) -> list[str] | None:
        path = canonical_path.rstrip("/") or "/"
        if path == self._root:
            return []
        prefix = self._root if self._root.endswith("/") else f"{self._root}/"
        if not path.startswith(prefix):
            return None
        relative = path[len(prefix) :]
        return [part for part in relative.split("/") if part]

    def _allows_directory_name(self, name: str) -> bool:
        if name in self._rules.excluded_names:
            return False
        if name.startswith(".") and not self._rules.include_hidden:
            return False
        return True

    def _allows_file_name(self, name: str) -> bool:
        if name in self._rules.excluded_names:
            return False
        if name in self._rules.excluded_file_names:
            return False
        if name.startswith(".") and not self._rules.include_hidden:
            return False
        extension = posixpath.splitext(name)[1].lower().lstrip(".")
        if extension and extension in self._rules.excluded_extensions:
            return False
        return True
