from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from workspace_context.errors import WorkspaceUnavailableError
from workspace_context.workspace import (
    FileKind,
    InMemoryFileSystem,
    LocalFileSystem,
    build_file_id,
    build_snapshot,
)


def _tree(root: Path) -> None:
    (root / "src" / "sub").mkdir(parents=True)
    (root / "src" / "b.swift").write_text("let b = 2\n", encoding="utf-8")
    (root / "src" / "a.swift").write_text("let a = 1\n", encoding="utf-8")
    (root / "src" / "sub" / "c.swift").write_text("let c = 3\n", encoding="utf-8")
    (root / ".git").mkdir()
    (root / ".git" / "HEAD").write_text("ref: main\n", encoding="utf-8")
    (root / ".build" / "debug").mkdir(parents=True)
    (root / ".build" / "debug" / "out.swift").write_text("x\n", encoding="utf-8")
    (root / "logo.png").write_bytes(b"\x89PNG")


def test_two_builds_of_same_tree_are_identical(tmp_path: Path) -> None:
    _tree(tmp_path)

    first = build_snapshot(str(tmp_path), LocalFileSystem())
    second = build_snapshot(str(tmp_path), LocalFileSystem())

    assert first.snapshot_hash == second.snapshot_hash
    assert [d.canonical_path for d in first.descriptors] == [
        d.canonical_path for d in second.descriptors
    ]


def test_descriptors_are_sorted_and_boundary_filtered(tmp_path: Path) -> None:
    _tree(tmp_path)

    snapshot = build_snapshot(str(tmp_path), LocalFileSystem())
    paths = [d.canonical_path for d in snapshot.descriptors]
    root = tmp_path.resolve().as_posix()

    assert paths == sorted(paths)
    assert paths == [
        root,
        f"{root}/src",
        f"{root}/src/a.swift",
        f"{root}/src/b.swift",
        f"{root}/src/sub",
        f"{root}/src/sub/c.swift",
    ]
    for path in paths:
        assert "/.git" not in path
        assert "/.build" not in path


def test_identifiers_and_hash_derivation() -> None:
    file_system = InMemoryFileSystem("/ws", {"src/a.swift": "let a = 1\n"})

    snapshot = build_snapshot("/ws", file_system)
    pairs = sorted(f"{d.canonical_path}:{d.file_id}" for d in snapshot.descriptors)
    expected = hashlib.sha256("\n".join(pairs).encode("utf-8")).hexdigest()

    assert snapshot.snapshot_hash == expected
    assert snapshot.path_index["/ws/src/a.swift"] == build_file_id("/ws/src/a.swift")
    assert build_file_id("/ws/src/a.swift") == hashlib.sha256(b"/ws/src/a.swift").hexdigest()


def test_directory_descriptors_carry_sorted_children_and_no_size() -> None:
    file_system = InMemoryFileSystem(
        "/ws",
        {"src/b.swift": "b", "src/a.swift": "a", "src/sub/c.swift": "c"},
    )

    snapshot = build_snapshot("/ws", file_system)
    src = snapshot.descriptor_for_path("/ws/src")
    file = snapshot.descriptor_for_path("/ws/src/a.swift")

    assert src is not None and file is not None
    assert src.kind is FileKind.DIRECTORY
    assert src.size is None
    assert src.content_hash is None
    assert src.children == (
        build_file_id("/ws/src/a.swift"),
        build_file_id("/ws/src/b.swift"),
        build_file_id("/ws/src/sub"),
    )
    assert file.size == 1
    assert file.content_hash == hashlib.sha256(b"a").hexdigest()
    assert file.language == "swift"


def test_previous_selection_is_kept_only_when_path_exists() -> None:
    file_system = InMemoryFileSystem("/ws", {"src/a.swift": "a"})

    kept = build_snapshot("/ws", file_system, previous_selection="/ws/src/a.swift")
    cleared = build_snapshot("/ws", file_system, previous_selection="/ws/src/gone.swift")

    assert kept.selected_path == "/ws/src/a.swift"
    assert kept.selected_id == build_file_id("/ws/src/a.swift")
    assert cleared.selected_path is None
    assert cleared.selected_id is None


def test_unreadable_root_fails_atomically() -> None:
    file_system = InMemoryFileSystem("/ws", {"a.swift": "a"}, unreadable=frozenset({"/ws"}))

    with pytest.raises(WorkspaceUnavailableError):
        build_snapshot("/ws", file_system)


def test_unlistable_directory_is_structural_failure() -> None:
    file_system = InMemoryFileSystem(
        "/ws",
        {"src/a.swift": "a", "lib/b.swift": "b"},
        unreadable=frozenset({"/ws/lib"}),
    )

    with pytest.raises(WorkspaceUnavailableError) as error:
        build_snapshot("/ws", file_system)

    assert "/ws/lib" in error.value.reason


def test_missing_local_root_raises_workspace_unavailable(tmp_path: Path) -> None:
    with pytest.raises(WorkspaceUnavailableError):
        build_snapshot(str(tmp_path / "missing"), LocalFileSystem())


def test_unreadable_file_metadata_skips_only_that_file() -> None:
    file_system = InMemoryFileSystem(
        "/ws",
        {"src/a.swift": "a", "src/b.swift": "b"},
        unreadable=frozenset({"/ws/src/b.swift"}),
    )

    snapshot = build_snapshot("/ws", file_system)

    assert snapshot.descriptor_for_path("/ws/src/a.swift") is not None
    assert snapshot.descriptor_for_path("/ws/src/b.swift") is None


def test_symlinks_are_not_followed(tmp_path: Path) -> None:
    root = tmp_path / "ws"
    root.mkdir()
    (root / "a.swift").write_text("a", encoding="utf-8")
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.swift").write_text("s", encoding="utf-8")
    (root / "link").symlink_to(outside, target_is_directory=True)

    snapshot = build_snapshot(str(root), LocalFileSystem())

    assert all("secret" not in d.canonical_path for d in snapshot.descriptors)
    assert all(not d.canonical_path.endswith("/link") for d in snapshot.descriptors)
