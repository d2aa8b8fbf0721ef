from __future__ import annotations

import pytest

from workspace_context.context import (
    ContextBudget,
    EncodedFile,
    ExclusionKind,
    LoadedFile,
    OversizePolicy,
    encode_file,
    enforce_budget,
)
from workspace_context.context.budget import trim_limit, truncate_text


def _file(path: str, size: int, char: str = "x") -> EncodedFile:
    return encode_file(LoadedFile(path=path, content=char * size))


def test_per_file_bytes_reason_carries_configured_limit() -> None:
    budget = ContextBudget(max_per_file_bytes=1000)

    outcome = enforce_budget((_file("/ws/a.txt", 1001), _file("/ws/b.txt", 10)), budget)

    assert [f.path for f in outcome.attachments] == ["/ws/b.txt"]
    assert len(outcome.exclusions) == 1
    reason = outcome.exclusions[0].reason
    assert reason.kind is ExclusionKind.EXCEEDS_PER_FILE_BYTES
    assert reason.limit == 1000
    assert reason.describe() == "Exceeds per-file bytes limit: 1000"


def test_bytes_limit_is_checked_before_tokens() -> None:
    budget = ContextBudget(max_per_file_bytes=100, max_per_file_tokens=10)

    outcome = enforce_budget((_file("/ws/a.txt", 200),), budget)

    assert outcome.exclusions[0].reason.kind is ExclusionKind.EXCEEDS_PER_FILE_BYTES


def test_per_file_tokens_reason() -> None:
    budget = ContextBudget(max_per_file_bytes=1000, max_per_file_tokens=10)

    outcome = enforce_budget((_file("/ws/a.txt", 41),), budget)

    assert outcome.exclusions[0].reason.describe() == "Exceeds per-file tokens limit: 10"


def test_total_budget_latches_for_later_files() -> None:
    budget = ContextBudget(max_total_bytes=25)
    files = (
        _file("/ws/a.txt", 10),
        _file("/ws/b.txt", 10),
        _file("/ws/c.txt", 10),
        _file("/ws/d.txt", 1),
    )

    outcome = enforce_budget(files, budget)

    assert [f.path for f in outcome.attachments] == ["/ws/a.txt", "/ws/b.txt"]
    assert [e.path for e in outcome.exclusions] == ["/ws/c.txt", "/ws/d.txt"]
    assert {e.reason.describe() for e in outcome.exclusions} == {"Exceeds total bytes limit: 25"}
    assert outcome.total_bytes == 20
    assert outcome.total_tokens == 6


def test_total_tokens_exclusion() -> None:
    budget = ContextBudget(max_total_tokens=5)

    outcome = enforce_budget((_file("/ws/a.txt", 16), _file("/ws/b.txt", 8)), budget)

    assert [f.path for f in outcome.attachments] == ["/ws/a.txt"]
    assert outcome.exclusions[0].reason.describe() == "Exceeds total tokens limit: 5"


def test_classification_is_path_ordered_and_repeatable() -> None:
    budget = ContextBudget(max_total_bytes=15)
    files = (_file("/ws/b.txt", 10), _file("/ws/a.txt", 10))

    first = enforce_budget(files, budget)
    second = enforce_budget(tuple(reversed(files)), budget)

    assert first == second
    assert [f.path for f in first.attachments] == ["/ws/a.txt"]


def test_truncate_policy_trims_on_character_boundary() -> None:
    budget = ContextBudget(
        max_per_file_bytes=200,
        max_per_file_tokens=1000,
        oversize_bytes=OversizePolicy.TRUNCATE,
    )

    outcome = enforce_budget((_file("/ws/a.txt", 300, char="é"),), budget)

    assert outcome.attachments == ()
    assert outcome.exclusions == ()
    trimmed = outcome.truncated[0]
    assert trimmed.byte_count <= trim_limit(budget)
    assert trimmed.content.encode("utf-8").decode("utf-8") == trimmed.content
    assert "Context trimmed automatically" in trimmed.content
    assert trimmed.original_byte_count == 600
    assert trimmed.note is not None and trimmed.note.startswith("Trimmed from")
    assert outcome.total_bytes == trimmed.byte_count


def test_truncate_target_respects_token_limit() -> None:
    budget = ContextBudget(
        max_per_file_bytes=10_000,
        max_per_file_tokens=100,
        oversize_tokens=OversizePolicy.TRUNCATE,
    )

    outcome = enforce_budget((_file("/ws/a.txt", 1000),), budget)

    assert trim_limit(budget) == 400
    assert outcome.truncated[0].byte_count <= 400
    assert outcome.truncated[0].token_estimate <= 100


def test_small_truncate_limit_never_exceeds_limit_or_original() -> None:
    budget = ContextBudget(max_per_file_bytes=50, oversize_bytes=OversizePolicy.TRUNCATE)

    outcome = enforce_budget((_file("/ws/a.txt", 60),), budget)

    trimmed = outcome.truncated[0]
    assert trimmed.byte_count <= 50
    assert trimmed.byte_count < trimmed.original_byte_count
    assert trimmed.content == "x" * 50
    assert outcome.total_bytes == trimmed.byte_count


def test_truncate_text_fits_limit_when_notice_is_too_long() -> None:
    trimmed = truncate_text("é" * 40, 9)

    assert len(trimmed.encode("utf-8")) <= 9
    assert trimmed == "é" * 4


def test_excluding_policy_wins_when_both_per_file_limits_are_exceeded() -> None:
    budget = ContextBudget(
        max_per_file_bytes=400,
        max_per_file_tokens=50,
        oversize_bytes=OversizePolicy.TRUNCATE,
        oversize_tokens=OversizePolicy.EXCLUDE,
    )

    outcome = enforce_budget((_file("/ws/a.txt", 1000),), budget)

    assert outcome.truncated == ()
    assert len(outcome.exclusions) == 1
    assert outcome.exclusions[0].reason.describe() == "Exceeds per-file tokens limit: 50"


def test_bytes_reason_is_reported_first_when_both_limits_exclude() -> None:
    budget = ContextBudget(
        max_per_file_bytes=400,
        max_per_file_tokens=50,
        oversize_bytes=OversizePolicy.EXCLUDE,
        oversize_tokens=OversizePolicy.TRUNCATE,
    )

    outcome = enforce_budget((_file("/ws/a.txt", 1000),), budget)

    assert outcome.exclusions[0].reason.kind is ExclusionKind.EXCEEDS_PER_FILE_BYTES


def test_file_over_both_limits_is_trimmed_when_both_allow_it() -> None:
    budget = ContextBudget(
        max_per_file_bytes=400,
        max_per_file_tokens=50,
        oversize_bytes=OversizePolicy.TRUNCATE,
        oversize_tokens=OversizePolicy.TRUNCATE,
    )

    outcome = enforce_budget((_file("/ws/a.txt", 1000),), budget)

    assert outcome.exclusions == ()
    assert outcome.truncated[0].byte_count <= 200
    assert outcome.truncated[0].token_estimate <= 50


def test_non_positive_budget_is_rejected() -> None:
    with pytest.raises(ValueError, match="max_total_tokens"):
        enforce_budget((), ContextBudget(max_total_tokens=0))
