"""Read-only context build pipeline from snapshot to ordered segments."""

from __future__ import annotations

import hashlib

from workspace_context.cancellation import CancellationToken
from workspace_context.context.budget import enforce_budget
from workspace_context.context.encoder import encode_files
from workspace_context.context.loader import FileLoader, load_files
from workspace_context.context.models import (
    ContextBudget,
    ContextBuildResult,
    ContextScope,
    SegmentLimits,
)
from workspace_context.context.scope import resolve_scope
from workspace_context.context.segmenter import segment_with_limits
from workspace_context.logging.audit import JsonlAuditLogger
from workspace_context.workspace.models import WorkspaceSnapshot


def build_context(
    snapshot: WorkspaceSnapshot,
    scope: ContextScope,
    loader: FileLoader,
    *,
    budget: ContextBudget | None = None,
    segment_limits: SegmentLimits | None = None,
    cancel: CancellationToken | None = None,
    max_workers: int = 4,
    audit_logger: JsonlAuditLogger | None = None,
) -> ContextBuildResult | None:
    """Run scope, load, encode, budget and segment stages.

    Returns None when the scope has no candidates. Raises BuildCancelledError
    when the token is cancelled at any stage boundary.
    """
    active_budget = budget or ContextBudget()
    limits = segment_limits or SegmentLimits()

    _check(cancel)
    candidates = resolve_scope(snapshot, scope)
    if not candidates:
        return None

    build_id = _build_id(snapshot.snapshot_hash, scope, candidates)
    outcome = load_files(candidates, loader, max_workers=max_workers, cancel=cancel)
    if audit_logger is not None:
        for failure in outcome.failures:
            audit_logger.record(
                build_id,
                "context.load_failed",
                ok=False,
                outcome="skipped",
                metadata={"path": failure.path, "reason": failure.reason},
            )

    _check(cancel)
    encoded = encode_files(outcome.files)
    _check(cancel)
    budgeted = enforce_budget(encoded, active_budget)
    _check(cancel)
    sent = tuple(
        sorted((*budgeted.attachments, *budgeted.truncated), key=lambda file: file.path)
    )
    segments = segment_with_limits(sent, limits)
    _check(cancel)

    result = ContextBuildResult(
        scope=scope,
        snapshot_hash=snapshot.snapshot_hash,
        candidate_paths=candidates,
        attachments=budgeted.attachments,
        truncated_files=budgeted.truncated,
        excluded_files=budgeted.exclusions,
        load_failures=outcome.failures,
        total_bytes=budgeted.total_bytes,
        total_tokens=budgeted.total_tokens,
        budget=active_budget,
        segments=segments,
    )
    if audit_logger is not None:
        audit_logger.record(
            build_id,
            "context.build",
            ok=True,
            outcome="built" if segments else "empty",
            metadata={
                "scope": str(scope),
                "snapshot_hash": snapshot.snapshot_hash,
                "candidate_count": len(candidates),
                "attachment_count": len(budgeted.attachments),
                "truncated_count": len(budgeted.truncated),
                "excluded_count": len(budgeted.exclusions),
                "load_failure_count": len(outcome.failures),
                "segment_count": len(segments),
                "total_bytes": budgeted.total_bytes,
                "total_tokens": budgeted.total_tokens,
            },
        )
    return result


def _check(cancel: CancellationToken | None) -> None:
    if cancel is not None:
        cancel.raise_if_cancelled()


def _build_id(snapshot_hash: str, scope: ContextScope, candidates: tuple[str, ...]) -> str:
    digest = hashlib.sha256()
    digest.update(snapshot_hash.encode("ascii"))
    digest.update(b"|")
    digest.update(str(scope).encode("ascii"))
    for path in candidates:
        digest.update(b"|")
        digest.update(path.encode("utf-8"))
    return f"ctx-{digest.hexdigest()[:16]}"
