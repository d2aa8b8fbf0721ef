from __future__ import annotations

import io
import json
from pathlib import Path

from workspace_context.cli import run


def _workspace(root: Path) -> None:
    (root / "src").mkdir()
    (root / "src" / "a.swift").write_text("let a = 1\n", encoding="utf-8")
    (root / "src" / "big.swift").write_text("x" * 2000, encoding="utf-8")


def _run(argv: list[str]) -> tuple[int, dict[str, object]]:
    out = io.StringIO()
    code = run(argv, out)
    return code, json.loads(out.getvalue())


def test_cli_prints_context_snapshot(tmp_path: Path) -> None:
    _workspace(tmp_path)

    code, payload = _run(["--root", str(tmp_path), "--max-per-file-bytes", "1000"])

    assert code == 0
    assert payload["ok"] is True
    context = payload["context"]
    assert context["counts"]["included"] == 1
    assert context["excluded"][0]["reason"] == "Exceeds per-file bytes limit: 1000"


def test_cli_prompt_prints_composed_messages(tmp_path: Path) -> None:
    _workspace(tmp_path)

    code, payload = _run(
        [
            "--root",
            str(tmp_path),
            "--scope",
            "selection",
            "--select",
            "src/a.swift",
            "--prompt",
            "Why?",
        ]
    )

    assert code == 0
    messages = payload["messages"]
    assert [m["role"] for m in messages] == ["system", "user"]
    assert messages[1]["text"].startswith("## Context Segment 1\n-- ")
    assert messages[1]["text"].endswith("## Question\nWhy?")


def test_cli_empty_selection_reports_no_context(tmp_path: Path) -> None:
    _workspace(tmp_path)

    code, payload = _run(["--root", str(tmp_path), "--scope", "selection"])

    assert code == 0
    assert payload == {"context": None, "messages": [], "ok": True}


def test_cli_missing_root_returns_error_envelope(tmp_path: Path) -> None:
    code, payload = _run(["--root", str(tmp_path / "missing")])

    assert code == 1
    assert payload["ok"] is False
    assert payload["error"]["code"] == "WORKSPACE_UNAVAILABLE"


def test_cli_invalid_limit_returns_error_envelope(tmp_path: Path) -> None:
    _workspace(tmp_path)

    code, payload = _run(["--root", str(tmp_path), "--max-total-tokens", "0"])

    assert code == 1
    assert payload["error"]["code"] == "INVALID_ARGUMENT"
    assert "overrides.max_total_tokens" in payload["error"]["message"]


def test_cli_blocked_selection_returns_error_envelope(tmp_path: Path) -> None:
    _workspace(tmp_path)

    code, payload = _run(["--root", str(tmp_path), "--select", "../outside.swift"])

    assert code == 1
    assert payload["error"]["code"] == "PATH_BLOCKED"
