"""Typed models for context loading, budgeting and segmentation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

DEFAULT_MAX_TOKENS_PER_SEGMENT = 8_000
DEFAULT_MAX_BYTES_PER_SEGMENT = 64 * 1024


class ContextScope(StrEnum):
    """User-chosen rule for which files are context candidates."""

    SELECTION = "selection"
    SELECTION_AND_SIBLINGS = "selection_and_siblings"
    WORKSPACE = "workspace"
    MANUAL = "manual"


class OversizePolicy(StrEnum):
    """Outcome for a file that exceeds one per-file limit."""

    EXCLUDE = "exclude"
    TRUNCATE = "truncate"


class ExclusionKind(StrEnum):
    """Budget rule that excluded a file."""

    EXCEEDS_PER_FILE_BYTES = "exceeds_per_file_bytes"
    EXCEEDS_PER_FILE_TOKENS = "exceeds_per_file_tokens"
    EXCEEDS_TOTAL_BYTES = "exceeds_total_bytes"
    EXCEEDS_TOTAL_TOKENS = "exceeds_total_tokens"


_REASON_LABELS = {
    ExclusionKind.EXCEEDS_PER_FILE_BYTES: "Exceeds per-file bytes limit",
    ExclusionKind.EXCEEDS_PER_FILE_TOKENS: "Exceeds per-file tokens limit",
    ExclusionKind.EXCEEDS_TOTAL_BYTES: "Exceeds total bytes limit",
    ExclusionKind.EXCEEDS_TOTAL_TOKENS: "Exceeds total tokens limit",
}


@dataclass(slots=True, frozen=True)
class ExclusionReason:
    """Budget exclusion reason carrying the configured limit."""

    kind: ExclusionKind
    limit: int

    def describe(self) -> str:
        """Return the short user-facing string for this reason."""
        return f"{_REASON_LABELS[self.kind]}: {self.limit}"


@dataclass(slots=True, frozen=True)
class LoadedFile:
    """Text content read for one candidate path."""

    path: str
    content: str


@dataclass(slots=True, frozen=True)
class LoadFailure:
    """Diagnostic record for a candidate that could not be read."""

    path: str
    reason: str


@dataclass(slots=True, frozen=True)
class LoadOutcome:
    """Loaded files and failures, both in candidate path order."""

    files: tuple[LoadedFile, ...]
    failures: tuple[LoadFailure, ...]


@dataclass(slots=True, frozen=True)
class EncodedFile:
    """Loaded file annotated with byte, token and hash metrics.

    Trimmed files carry the metrics of the sent content plus the original
    size and a note.
    """

    path: str
    content: str
    byte_count: int
    token_estimate: int
    content_hash: str
    language: str | None = None
    original_byte_count: int | None = None
    original_token_estimate: int | None = None
    note: str | None = None

    @property
    def is_truncated(self) -> bool:
        return self.original_byte_count is not None


@dataclass(slots=True, frozen=True)
class ContextExclusion:
    """Encoded file paired with the budget rule that excluded it."""

    file: EncodedFile
    reason: ExclusionReason

    @property
    def path(self) -> str:
        return self.file.path


@dataclass(slots=True, frozen=True)
class ContextBudget:
    """Per-file and total byte/token ceilings."""

    max_per_file_bytes: int = 32 * 1024
    max_per_file_tokens: int = 8_000
    max_total_bytes: int = 220 * 1024
    max_total_tokens: int = 60_000
    oversize_bytes: OversizePolicy = OversizePolicy.EXCLUDE
    oversize_tokens: OversizePolicy = OversizePolicy.EXCLUDE


@dataclass(slots=True, frozen=True)
class BudgetOutcome:
    """Classification of encoded files against a budget."""

    attachments: tuple[EncodedFile, ...]
    truncated: tuple[EncodedFile, ...]
    exclusions: tuple[ContextExclusion, ...]
    total_bytes: int
    total_tokens: int


@dataclass(slots=True, frozen=True)
class SegmentLimits:
    """Aggregate ceilings for one context segment."""

    max_tokens_per_segment: int = DEFAULT_MAX_TOKENS_PER_SEGMENT
    max_bytes_per_segment: int = DEFAULT_MAX_BYTES_PER_SEGMENT


@dataclass(slots=True, frozen=True)
class ContextSegment:
    """Ordered, non-splittable group of encoded files."""

    index: int
    files: tuple[EncodedFile, ...]
    total_bytes: int
    total_tokens: int

    @property
    def paths(self) -> tuple[str, ...]:
        return tuple(file.path for file in self.files)


@dataclass(slots=True, frozen=True)
class ContextBuildResult:
    """Final output of one context build."""

    scope: ContextScope
    snapshot_hash: str
    candidate_paths: tuple[str, ...]
    attachments: tuple[EncodedFile, ...]
    truncated_files: tuple[EncodedFile, ...]
    excluded_files: tuple[ContextExclusion, ...]
    load_failures: tuple[LoadFailure, ...]
    total_bytes: int
    total_tokens: int
    budget: ContextBudget
    segments: tuple[ContextSegment, ...]

    @property
    def attachment_count(self) -> int:
        return len(self.attachments)

    @property
    def sent_files(self) -> tuple[EncodedFile, ...]:
        """Return attachments and truncated files merged in path order."""
        return tuple(
            sorted((*self.attachments, *self.truncated_files), key=lambda file: file.path)
        )
