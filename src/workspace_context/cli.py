"""Command-line entrypoint printing a context snapshot or composed prompt."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import TextIO

from workspace_context.config import ConfigOverrides, load_effective_config
from workspace_context.context.models import ContextScope
from workspace_context.context.presentation import build_context_snapshot
from workspace_context.context.prompt import compose_messages
from workspace_context.errors import PreferencesError, WorkspaceUnavailableError
from workspace_context.security.paths import PathBlockedError
from workspace_context.session import WorkspaceSession


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for one context build."""
    parser = argparse.ArgumentParser(prog="workspace-context")
    parser.add_argument("--root", required=False, default=".")
    parser.add_argument("--data-dir", required=False, default=None)
    parser.add_argument(
        "--scope",
        choices=[scope.value for scope in ContextScope],
        required=False,
        default=ContextScope.WORKSPACE.value,
    )
    parser.add_argument("--select", required=False, default=None)
    parser.add_argument("--include", action="append", default=[])
    parser.add_argument("--exclude", action="append", default=[])
    parser.add_argument("--max-per-file-bytes", type=int, required=False, default=None)
    parser.add_argument("--max-per-file-tokens", type=int, required=False, default=None)
    parser.add_argument("--max-total-bytes", type=int, required=False, default=None)
    parser.add_argument("--max-total-tokens", type=int, required=False, default=None)
    parser.add_argument("--max-segment-tokens", type=int, required=False, default=None)
    parser.add_argument("--max-segment-bytes", type=int, required=False, default=None)
    parser.add_argument(
        "--oversize-bytes", choices=("exclude", "truncate"), required=False, default=None
    )
    parser.add_argument(
        "--oversize-tokens", choices=("exclude", "truncate"), required=False, default=None
    )
    parser.add_argument("--include-hidden", action="store_true", default=None)
    parser.add_argument("--prompt", required=False, default=None)
    return parser


def run(argv: list[str] | None, out_stream: TextIO) -> int:
    """Run one build and write a JSON payload; returns the process exit code."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    try:
        payload = _execute(args)
    except (ValueError, RuntimeError, PreferencesError, PathBlockedError) as exc:
        _write(out_stream, error_payload(exc))
        return 1
    _write(out_stream, payload)
    return 0


def _execute(args: argparse.Namespace) -> dict[str, object]:
    overrides = ConfigOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        max_per_file_bytes=args.max_per_file_bytes,
        max_per_file_tokens=args.max_per_file_tokens,
        max_total_bytes=args.max_total_bytes,
        max_total_tokens=args.max_total_tokens,
        oversize_bytes=args.oversize_bytes,
        oversize_tokens=args.oversize_tokens,
        max_tokens_per_segment=args.max_segment_tokens,
        max_bytes_per_segment=args.max_segment_bytes,
        include_hidden=args.include_hidden,
    )
    config = load_effective_config(Path(args.root), overrides)
    session = WorkspaceSession(config)
    session.open()
    for path in args.include:
        session.set_inclusion(path, True)
    for path in args.exclude:
        session.set_inclusion(path, False)
    if args.select is not None:
        session.select(args.select)

    scope = ContextScope(args.scope)
    result = session.build_context(scope)
    if result is None:
        return {"ok": True, "context": None, "messages": []}
    if args.prompt is None:
        return {"ok": True, "context": build_context_snapshot(result).to_public_dict()}
    if not args.prompt.strip():
        raise ValueError("--prompt must be a non-empty string")
    if not result.segments:
        snapshot = build_context_snapshot(result).to_public_dict()
        return {"ok": True, "context": snapshot, "messages": []}
    messages = compose_messages(args.prompt, result.segments)
    return {"ok": True, "messages": [asdict(message) for message in messages]}


def error_payload(exc: Exception) -> dict[str, object]:
    """Map an exception to the explicit JSON error envelope."""
    if isinstance(exc, WorkspaceUnavailableError):
        code, message = "WORKSPACE_UNAVAILABLE", f"{exc.reason} {exc.hint}"
    elif isinstance(exc, PathBlockedError):
        code, message = "PATH_BLOCKED", f"{exc.reason} {exc.hint}"
    elif isinstance(exc, PreferencesError):
        code, message = "PREFERENCES_INVALID", str(exc)
    elif isinstance(exc, ValueError):
        code, message = "INVALID_ARGUMENT", str(exc)
    else:
        code, message = "INTERNAL_ERROR", str(exc)
    return {"ok": False, "error": {"code": code, "message": message}}


def _write(out_stream: TextIO, payload: dict[str, object]) -> None:
    out_stream.write(json.dumps(payload, sort_keys=True))
    out_stream.write("\n")
    out_stream.flush()


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the workspace-context command."""
    return run(argv, sys.stdout)


if __name__ == "__main__":
    raise SystemExit(main())
