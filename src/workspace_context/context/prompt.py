"""Prompt shape composed from ordered context segments."""

from __future__ import annotations

from dataclasses import dataclass

from workspace_context.context.models import ContextSegment

ROLE_SYSTEM = "system"
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"

SYSTEM_PROMPT = (
    "Answer only with plain text. Do not propose edits. "
    "Context is provided in stable segments; respect ordering."
)


@dataclass(slots=True, frozen=True)
class Message:
    """One chat message handed to the assistant client."""

    role: str
    text: str


def render_segments(segments: tuple[ContextSegment, ...]) -> str:
    """Render segments with 1-based headers and files in path order."""
    blocks: list[str] = []
    for number, segment in enumerate(segments, start=1):
        lines = [f"## Context Segment {number}"]
        for file in segment.files:
            lines.append(f"-- {file.path}")
            lines.append(file.content)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def compose_messages(
    question: str,
    segments: tuple[ContextSegment, ...],
) -> tuple[Message, Message]:
    """Return the system message and the user message for one question."""
    body = render_segments(segments)
    question_block = f"## Question\n{question.strip()}"
    user_text = f"{body}\n\n{question_block}" if body else question_block
    return (
        Message(role=ROLE_SYSTEM, text=SYSTEM_PROMPT),
        Message(role=ROLE_USER, text=user_text),
    )
