from __future__ import annotations

import pytest

from workspace_context.workspace import InMemoryFileSystem, build_snapshot, build_tree_projection


def test_projection_lists_directories_before_files() -> None:
    file_system = InMemoryFileSystem(
        "/ws",
        {"b.swift": "b", "A.swift": "a", "zeta/x.swift": "x", "alpha/y.swift": "y"},
        directories=("empty",),
    )

    tree = build_tree_projection(build_snapshot("/ws", file_system))

    assert tree is not None
    assert tree.is_directory
    names = [child.name for child in tree.children]
    assert names == ["alpha", "empty", "zeta", "A.swift", "b.swift"]
    assert tree.children[1].children == ()


def test_selection_helper_rejects_unknown_paths() -> None:
    snapshot = build_snapshot("/ws", InMemoryFileSystem("/ws", {"a.swift": "a"}))

    selected = snapshot.with_selection("/ws/a.swift")

    assert selected.selected_path == "/ws/a.swift"
    assert snapshot.selected_path is None
    with pytest.raises(ValueError):
        snapshot.with_selection("/ws/missing.swift")
