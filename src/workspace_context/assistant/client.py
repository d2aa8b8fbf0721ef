"""Assistant client capability; transport lives outside this library."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from workspace_context.context.models import EncodedFile
from workspace_context.context.prompt import Message


class AssistantClient(Protocol):
    """Send composed messages and return the plain-text answer."""

    def complete(
        self,
        messages: tuple[Message, ...],
        context_files: tuple[EncodedFile, ...],
    ) -> str: ...


@dataclass(slots=True, frozen=True)
class RecordedInvocation:
    messages: tuple[Message, ...]
    context_paths: tuple[str, ...]


class RecordingAssistantClient:
    """In-memory client that records invocations and returns a canned answer."""

    def __init__(self, answer: str = "ok") -> None:
        self._answer = answer
        self.invocations: list[RecordedInvocation] = []

    def complete(
        self,
        messages: tuple[Message, ...],
        context_files: tuple[EncodedFile, ...],
    ) -> str:
        self.invocations.append(
            RecordedInvocation(
                messages=messages,
                context_paths=tuple(file.path for file in context_files),
            )
        )
        return self._answer
