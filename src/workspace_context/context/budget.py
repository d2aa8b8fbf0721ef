"""Per-file and total budget classification of encoded files."""

from __future__ import annotations

import hashlib
from dataclasses import replace

from workspace_context.context.encoder import BYTES_PER_TOKEN, estimate_tokens
from workspace_context.context.models import (
    BudgetOutcome,
    ContextBudget,
    ContextExclusion,
    EncodedFile,
    ExclusionKind,
    ExclusionReason,
    OversizePolicy,
)


def validate_budget(budget: ContextBudget) -> None:
    """Raise ValueError when any budget ceiling is not positive."""
    for name in (
        "max_per_file_bytes",
        "max_per_file_tokens",
        "max_total_bytes",
        "max_total_tokens",
    ):
        value = getattr(budget, name)
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            raise ValueError(f"{name} must be an integer >= 1")


def enforce_budget(files: tuple[EncodedFile, ...], budget: ContextBudget) -> BudgetOutcome:
    """Classify files in canonical path order.

    Per-file limits are checked first (bytes before tokens), then the running
    totals. A file over several per-file limits is trimmed only when every
    violated limit allows truncation. The first total-budget exclusion
    latches: every later file that passes the per-file checks is excluded for
    the same reason.
    """
    validate_budget(budget)
    attachments: list[EncodedFile] = []
    truncated: list[EncodedFile] = []
    exclusions: list[ContextExclusion] = []
    running_bytes = 0
    running_tokens = 0
    exhausted: ExclusionReason | None = None

    for file in sorted(files, key=lambda item: item.path):
        working = file
        violations = _per_file_violations(working, budget)
        if violations:
            blocking = [reason for reason, policy in violations if policy is OversizePolicy.EXCLUDE]
            if blocking:
                exclusions.append(ContextExclusion(file=working, reason=blocking[0]))
                continue
            working = trim_file(working, budget)

        if exhausted is not None:
            exclusions.append(ContextExclusion(file=working, reason=exhausted))
            continue

        if running_bytes + working.byte_count > budget.max_total_bytes:
            exhausted = ExclusionReason(ExclusionKind.EXCEEDS_TOTAL_BYTES, budget.max_total_bytes)
            exclusions.append(ContextExclusion(file=working, reason=exhausted))
            continue
        if running_tokens + working.token_estimate > budget.max_total_tokens:
            exhausted = ExclusionReason(ExclusionKind.EXCEEDS_TOTAL_TOKENS, budget.max_total_tokens)
            exclusions.append(ContextExclusion(file=working, reason=exhausted))
            continue

        running_bytes += working.byte_count
        running_tokens += working.token_estimate
        if working.is_truncated:
            truncated.append(working)
        else:
            attachments.append(working)

    return BudgetOutcome(
        attachments=tuple(attachments),
        truncated=tuple(truncated),
        exclusions=tuple(exclusions),
        total_bytes=running_bytes,
        total_tokens=running_tokens,
    )


def _per_file_violations(
    file: EncodedFile,
    budget: ContextBudget,
) -> list[tuple[ExclusionReason, OversizePolicy]]:
    violations: list[tuple[ExclusionReason, OversizePolicy]] = []
    if file.byte_count > budget.max_per_file_bytes:
        violations.append(
            (
                ExclusionReason(ExclusionKind.EXCEEDS_PER_FILE_BYTES, budget.max_per_file_bytes),
                budget.oversize_bytes,
            )
        )
    if file.token_estimate > budget.max_per_file_tokens:
        violations.append(
            (
                ExclusionReason(ExclusionKind.EXCEEDS_PER_FILE_TOKENS, budget.max_per_file_tokens),
                budget.oversize_tokens,
            )
        )
    return violations


def trim_limit(budget: ContextBudget) -> int:
    """Return the byte target for trimmed content, notice included."""
    return min(budget.max_per_file_bytes, budget.max_per_file_tokens * BYTES_PER_TOKEN)


def trim_file(file: EncodedFile, budget: ContextBudget) -> EncodedFile:
    """Trim content on a UTF-8 boundary so the result fits the per-file limits."""
    limit = trim_limit(budget)
    content = truncate_text(file.content, limit)
    data = content.encode("utf-8")
    note = (
        f"Trimmed from {format_bytes(file.byte_count)} to {format_bytes(len(data))} "
        "to respect the per-file limit."
    )
    return replace(
        file,
        content=content,
        byte_count=len(data),
        token_estimate=estimate_tokens(len(data)),
        content_hash=hashlib.sha256(data).hexdigest(),
        original_byte_count=file.byte_count,
        original_token_estimate=file.token_estimate,
        note=note,
    )


def truncate_text(content: str, byte_limit: int) -> str:
    """Return content cut to byte_limit bytes including a trailing notice.

    The notice is dropped when it alone would not fit the limit.
    """
    data = content.encode("utf-8")
    if len(data) <= byte_limit:
        return content
    notice = (
        f"\n...\n[Context trimmed automatically to {format_bytes(byte_limit)} of text. "
        f"Original size was {format_bytes(len(data))}]"
    )
    notice_bytes = len(notice.encode("utf-8"))
    if notice_bytes >= byte_limit:
        return data[:byte_limit].decode("utf-8", errors="ignore")
    prefix = data[: byte_limit - notice_bytes].decode("utf-8", errors="ignore")
    return prefix + notice


def format_bytes(count: int) -> str:
    if count >= 1_048_576:
        return f"{count / 1_048_576:.1f} MB"
    if count >= 1024:
        return f"{count / 1024:.1f} KB"
    return f"{count} B"
