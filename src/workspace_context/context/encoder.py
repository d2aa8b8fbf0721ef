"""Deterministic byte, token and hash annotation of loaded files."""

from __future__ import annotations

import hashlib

from workspace_context.context.models import EncodedFile, LoadedFile
from workspace_context.workspace.languages import language_for_path

# Approximation only; not tied to any model tokenizer.
BYTES_PER_TOKEN = 4


def estimate_tokens(byte_count: int) -> int:
    """Return ceil(byte_count / 4), at least 1 for non-empty content."""
    if byte_count <= 0:
        return 0
    return max(1, -(-byte_count // BYTES_PER_TOKEN))


def encode_file(loaded: LoadedFile) -> EncodedFile:
    data = loaded.content.encode("utf-8")
    return EncodedFile(
        path=loaded.path,
        content=loaded.content,
        byte_count=len(data),
        token_estimate=estimate_tokens(len(data)),
        content_hash=hashlib.sha256(data).hexdigest(),
        language=language_for_path(loaded.path),
    )


def encode_files(files: tuple[LoadedFile, ...]) -> tuple[EncodedFile, ...]:
    """Encode files preserving input order."""
    return tuple(encode_file(file) for file in files)
