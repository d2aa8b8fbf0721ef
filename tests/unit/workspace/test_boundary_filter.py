from __future__ import annotations

from workspace_context.workspace import BoundaryFilter, BoundaryRules


def test_excluded_directory_components_are_rejected() -> None:
    boundary = BoundaryFilter("/ws")

    assert boundary.allows("/ws/src/a.swift")
    assert not boundary.allows("/ws/.git", is_directory=True)
    assert not boundary.allows("/ws/.build/debug/out.txt")
    assert not boundary.allows("/ws/node_modules", is_directory=True)
    assert not boundary.allows("/ws/app/DerivedData/x.swift")
    assert not boundary.allows("/ws/pkg/__pycache__/m.txt")


def test_excluded_file_names_and_extensions_are_rejected() -> None:
    boundary = BoundaryFilter("/ws")

    assert not boundary.allows("/ws/Package.resolved")
    assert not boundary.allows("/ws/assets/logo.PNG")
    assert not boundary.allows("/ws/build/main.o")
    assert boundary.allows("/ws/README.md")
    assert boundary.allows("/ws/Makefile")


def test_hidden_entries_follow_include_hidden() -> None:
    hidden_off = BoundaryFilter("/ws")
    hidden_on = BoundaryFilter("/ws", BoundaryRules(include_hidden=True))

    assert not hidden_off.allows("/ws/.env")
    assert not hidden_off.allows("/ws/.config", is_directory=True)
    assert hidden_on.allows("/ws/.env")
    assert hidden_on.allows("/ws/.config/settings.json")
    assert not hidden_on.allows("/ws/.git/config")
    assert not hidden_on.allows("/ws/.DS_Store")


def test_components_are_evaluated_relative_to_root() -> None:
    boundary = BoundaryFilter("/home/user/.build/ws")

    assert boundary.allows("/home/user/.build/ws")
    assert boundary.allows("/home/user/.build/ws/src/a.swift")
    assert not boundary.allows("/home/user/other/a.swift")
    assert not boundary.allows("/home/user/.build/wsx/a.swift")


def test_extended_rules_keep_defaults() -> None:
    rules = BoundaryRules().extended(names=("vendor",), extensions=(".LOG",))
    boundary = BoundaryFilter("/ws", rules)

    assert not boundary.allows("/ws/vendor/lib.swift")
    assert not boundary.allows("/ws/trace.log")
    assert not boundary.allows("/ws/.git/HEAD")


def test_swiftpm_directory_stays_excluded_with_hidden_entries() -> None:
    boundary = BoundaryFilter("/ws", BoundaryRules(include_hidden=True))

    assert not boundary.allows("/ws/.swiftpm", is_directory=True)
    assert not boundary.allows("/ws/.swiftpm/xcode/package.xcworkspace/contents")
    assert boundary.allows("/ws/.env")
