"""Greedy packing of encoded files into ordered segments."""

from __future__ import annotations

from workspace_context.context.models import (
    DEFAULT_MAX_BYTES_PER_SEGMENT,
    DEFAULT_MAX_TOKENS_PER_SEGMENT,
    ContextSegment,
    EncodedFile,
    SegmentLimits,
)


def segment_files(
    files: tuple[EncodedFile, ...],
    *,
    max_tokens_per_segment: int = DEFAULT_MAX_TOKENS_PER_SEGMENT,
    max_bytes_per_segment: int = DEFAULT_MAX_BYTES_PER_SEGMENT,
) -> tuple[ContextSegment, ...]:
    """Pack files in input order without ever splitting a file.

    A file larger than either limit occupies a segment alone.
    """
    if max_tokens_per_segment < 1:
        raise ValueError("max_tokens_per_segment must be >= 1")
    if max_bytes_per_segment < 1:
        raise ValueError("max_bytes_per_segment must be >= 1")

    segments: list[ContextSegment] = []
    current: list[EncodedFile] = []
    current_bytes = 0
    current_tokens = 0
    for file in files:
        fits = (
            current_bytes + file.byte_count <= max_bytes_per_segment
            and current_tokens + file.token_estimate <= max_tokens_per_segment
        )
        if current and not fits:
            segments.append(_segment(len(segments), current, current_bytes, current_tokens))
            current = []
            current_bytes = 0
            current_tokens = 0
        current.append(file)
        current_bytes += file.byte_count
        current_tokens += file.token_estimate
    if current:
        segments.append(_segment(len(segments), current, current_bytes, current_tokens))
    return tuple(segments)


def segment_with_limits(
    files: tuple[EncodedFile, ...],
    limits: SegmentLimits,
) -> tuple[ContextSegment, ...]:
    return segment_files(
        files,
        max_tokens_per_segment=limits.max_tokens_per_segment,
        max_bytes_per_segment=limits.max_bytes_per_segment,
    )


def _segment(
    index: int,
    files: list[EncodedFile],
    total_bytes: int,
    total_tokens: int,
) -> ContextSegment:
    return ContextSegment(
        index=index,
        files=tuple(files),
        total_bytes=total_bytes,
        total_tokens=total_tokens,
    )
