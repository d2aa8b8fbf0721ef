"""Context build pipeline: scope, load, encode, budget and segment."""

from .budget import enforce_budget
from .encoder import BYTES_PER_TOKEN, encode_file, estimate_tokens
from .engine import build_context
from .loader import FileLoader, InMemoryFileLoader, LocalFileLoader, load_files
from .models import (
    BudgetOutcome,
    ContextBudget,
    ContextBuildResult,
    ContextExclusion,
    ContextScope,
    ContextSegment,
    EncodedFile,
    ExclusionKind,
    ExclusionReason,
    LoadedFile,
    LoadFailure,
    LoadOutcome,
    OversizePolicy,
    SegmentLimits,
)
from .presentation import ContextSnapshot, build_context_snapshot
from .prompt import Message, compose_messages
from .scope import resolve_scope
from .segmenter import segment_files

__all__ = [
    "BYTES_PER_TOKEN",
    "BudgetOutcome",
    "ContextBudget",
    "ContextBuildResult",
    "ContextExclusion",
    "ContextScope",
    "ContextSegment",
    "ContextSnapshot",
    "EncodedFile",
    "ExclusionKind",
    "ExclusionReason",
    "FileLoader",
    "InMemoryFileLoader",
    "LoadFailure",
    "LoadOutcome",
    "LoadedFile",
    "LocalFileLoader",
    "Message",
    "OversizePolicy",
    "SegmentLimits",
    "build_context",
    "build_context_snapshot",
    "compose_messages",
    "encode_file",
    "enforce_budget",
    "estimate_tokens",
    "load_files",
    "resolve_scope",
    "segment_files",
]
