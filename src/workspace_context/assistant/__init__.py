"""Assistant-facing capabilities and the read-only ask flow."""

from .client import AssistantClient, RecordedInvocation, RecordingAssistantClient
from .mutation import MutationAuthorizing, RecordingMutationAuthority, SandboxedFileWriter
from .service import AskResult, AskService

__all__ = [
    "AskResult",
    "AskService",
    "AssistantClient",
    "MutationAuthorizing",
    "RecordedInvocation",
    "RecordingAssistantClient",
    "RecordingMutationAuthority",
    "SandboxedFileWriter",
]
