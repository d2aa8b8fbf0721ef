"""Per-file text loading that never aborts the whole build."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Protocol

from workspace_context.cancellation import CancellationToken
from workspace_context.context.models import LoadedFile, LoadFailure, LoadOutcome
from workspace_context.errors import FileLoadError


class FileLoader(Protocol):
    """Read one file as text or raise FileLoadError."""

    def load(self, path: str) -> str: ...


class LocalFileLoader:
    """Load UTF-8 text files from disk, rejecting binaries and oversize files."""

    def __init__(self, max_bytes: int = 1_000_000) -> None:
        if max_bytes < 1:
            raise ValueError("max_bytes must be >= 1")
        self._max_bytes = max_bytes

    def load(self, path: str) -> str:
        full_path = Path(path)
        try:
            size = full_path.stat().st_size
            if size > self._max_bytes:
                raise FileLoadError(path, f"File exceeds loader limit of {self._max_bytes} bytes.")
            data = full_path.read_bytes()
        except OSError as exc:
            raise FileLoadError(path, f"File cannot be read: {exc.strerror or exc}") from exc
        if b"\x00" in data:
            raise FileLoadError(path, "File appears to be binary.")
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FileLoadError(path, "File is not valid UTF-8 text.") from exc


class InMemoryFileLoader:
    """FileLoader over a dict of path to text; listed failures raise."""

    def __init__(
        self,
        contents: dict[str, str],
        failures: dict[str, str] | None = None,
    ) -> None:
        self._contents = dict(contents)
        self._failures = dict(failures or {})
        self.load_calls: list[str] = []

    def load(self, path: str) -> str:
        self.load_calls.append(path)
        if path in self._failures:
            raise FileLoadError(path, self._failures[path])
        if path not in self._contents:
            raise FileLoadError(path, "File not found.")
        return self._contents[path]


def load_files(
    paths: tuple[str, ...],
    loader: FileLoader,
    *,
    max_workers: int = 4,
    cancel: CancellationToken | None = None,
) -> LoadOutcome:
    """Load every candidate and return results in candidate order.

    All reads complete before returning. Cancellation is checked before the
    reads start and again once they have all finished.
    """
    if cancel is not None:
        cancel.raise_if_cancelled()
    if not paths:
        return LoadOutcome(files=(), failures=())

    def _load_one(path: str) -> LoadedFile | LoadFailure:
        if cancel is not None and cancel.cancelled:
            return LoadFailure(path=path, reason="Cancelled before read.")
        try:
            return LoadedFile(path=path, content=loader.load(path))
        except FileLoadError as exc:
            return LoadFailure(path=path, reason=exc.reason)

    workers = max(1, min(max_workers, len(paths)))
    if workers == 1:
        results = [_load_one(path) for path in paths]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(_load_one, paths))

    if cancel is not None:
        cancel.raise_if_cancelled()
    return LoadOutcome(
        files=tuple(item for item in results if isinstance(item, LoadedFile)),
        failures=tuple(item for item in results if isinstance(item, LoadFailure)),
    )
