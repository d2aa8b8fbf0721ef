"""File extension to language tag mapping."""

from __future__ import annotations

import posixpath

_LANGUAGE_BY_EXTENSION = {
    "c": "c",
    "cc": "cpp",
    "cpp": "cpp",
    "cs": "csharp",
    "css": "css",
    "go": "go",
    "h": "c",
    "hpp": "cpp",
    "html": "html",
    "java": "java",
    "js": "javascript",
    "json": "json",
    "jsx": "javascript",
    "kt": "kotlin",
    "m": "objective-c",
    "md": "markdown",
    "mm": "objective-cpp",
    "py": "python",
    "rb": "ruby",
    "rs": "rust",
    "sh": "shell",
    "sql": "sql",
    "swift": "swift",
    "toml": "toml",
    "ts": "typescript",
    "tsx": "typescript",
    "txt": "text",
    "yaml": "yaml",
    "yml": "yaml",
}


def language_for_path(path: str) -> str | None:
    """Return a language tag for a path; unknown extensions map to themselves."""
    extension = posixpath.splitext(posixpath.basename(path))[1].lower().lstrip(".")
    if not extension:
        return None
    return _LANGUAGE_BY_EXTENSION.get(extension, extension)
