"""Read-only presentation view of a context build."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from workspace_context.context.models import ContextBuildResult


@dataclass(slots=True, frozen=True)
class PresentedFile:
    path: str
    byte_count: int
    token_estimate: int
    note: str | None = None


@dataclass(slots=True, frozen=True)
class PresentedExclusion:
    path: str
    byte_count: int
    token_estimate: int
    reason: str


@dataclass(slots=True, frozen=True)
class SegmentDescriptor:
    index: int
    paths: tuple[str, ...]
    total_bytes: int
    total_tokens: int


@dataclass(slots=True, frozen=True)
class BudgetUsage:
    total_bytes: int
    max_total_bytes: int
    total_tokens: int
    max_total_tokens: int
    max_per_file_bytes: int
    max_per_file_tokens: int


@dataclass(slots=True, frozen=True)
class ContextSnapshot:
    """Display payload: counts, totals against budget and per-file reasons."""

    scope: str
    snapshot_hash: str
    included: tuple[PresentedFile, ...]
    truncated: tuple[PresentedFile, ...]
    excluded: tuple[PresentedExclusion, ...]
    load_failures: tuple[tuple[str, str], ...]
    segments: tuple[SegmentDescriptor, ...]
    usage: BudgetUsage

    def to_public_dict(self) -> dict[str, object]:
        """Return a JSON-serializable payload."""
        payload = asdict(self)
        payload["segments"] = [
            {**segment, "paths": list(segment["paths"])} for segment in payload["segments"]
        ]
        payload["load_failures"] = [
            {"path": path, "reason": reason} for path, reason in self.load_failures
        ]
        payload["included"] = list(payload["included"])
        payload["truncated"] = list(payload["truncated"])
        payload["excluded"] = list(payload["excluded"])
        payload["counts"] = {
            "included": len(self.included),
            "truncated": len(self.truncated),
            "excluded": len(self.excluded),
            "load_failures": len(self.load_failures),
            "segments": len(self.segments),
        }
        return payload


def build_context_snapshot(result: ContextBuildResult) -> ContextSnapshot:
    return ContextSnapshot(
        scope=str(result.scope),
        snapshot_hash=result.snapshot_hash,
        included=tuple(
            PresentedFile(path=f.path, byte_count=f.byte_count, token_estimate=f.token_estimate)
            for f in result.attachments
        ),
        truncated=tuple(
            PresentedFile(
                path=f.path,
                byte_count=f.byte_count,
                token_estimate=f.token_estimate,
                note=f.note,
            )
            for f in result.truncated_files
        ),
        excluded=tuple(
            PresentedExclusion(
                path=exclusion.path,
                byte_count=exclusion.file.byte_count,
                token_estimate=exclusion.file.token_estimate,
                reason=exclusion.reason.describe(),
            )
            for exclusion in result.excluded_files
        ),
        load_failures=tuple((failure.path, failure.reason) for failure in result.load_failures),
        segments=tuple(
            SegmentDescriptor(
                index=segment.index,
                paths=segment.paths,
                total_bytes=segment.total_bytes,
                total_tokens=segment.total_tokens,
            )
            for segment in result.segments
        ),
        usage=BudgetUsage(
            total_bytes=result.total_bytes,
            max_total_bytes=result.budget.max_total_bytes,
            total_tokens=result.total_tokens,
            max_total_tokens=result.budget.max_total_tokens,
            max_per_file_bytes=result.budget.max_per_file_bytes,
            max_per_file_tokens=result.budget.max_per_file_tokens,
        ),
    )
