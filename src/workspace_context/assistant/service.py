"""Read-only ask flow: build context, compose prompt, call the assistant once."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from workspace_context.assistant.client import AssistantClient
from workspace_context.cancellation import CancellationToken
from workspace_context.context.engine import build_context
from workspace_context.context.loader import FileLoader
from workspace_context.context.models import (
    ContextBudget,
    ContextBuildResult,
    ContextScope,
    SegmentLimits,
)
from workspace_context.context.prompt import ROLE_ASSISTANT, Message, compose_messages
from workspace_context.logging.audit import JsonlAuditLogger
from workspace_context.workspace.models import WorkspaceSnapshot


@dataclass(slots=True, frozen=True)
class AskResult:
    """Messages produced by one ask; empty when no context could be sent."""

    messages: tuple[Message, ...]
    context: ContextBuildResult | None


class AskService:
    """Answer questions about workspace files without any write capability."""

    def __init__(
        self,
        loader: FileLoader,
        client: AssistantClient,
        *,
        budget: ContextBudget | None = None,
        segment_limits: SegmentLimits | None = None,
        audit_logger: JsonlAuditLogger | None = None,
        max_workers: int = 4,
    ) -> None:
        self._loader = loader
        self._client = client
        self._budget = budget or ContextBudget()
        self._segment_limits = segment_limits or SegmentLimits()
        self._audit_logger = audit_logger
        self._max_workers = max_workers

    def ask(
        self,
        question: str,
        snapshot: WorkspaceSnapshot,
        scope: ContextScope,
        *,
        cancel: CancellationToken | None = None,
    ) -> AskResult:
        if not question.strip():
            raise ValueError("question must be a non-empty string")

        context = build_context(
            snapshot,
            scope,
            self._loader,
            budget=self._budget,
            segment_limits=self._segment_limits,
            cancel=cancel,
            max_workers=self._max_workers,
            audit_logger=self._audit_logger,
        )
        request_id = _ask_id(question, snapshot.snapshot_hash, scope)
        if context is None or not context.segments:
            self._record(
                request_id,
                outcome="no_context",
                question=question,
                scope=scope,
                snapshot_hash=snapshot.snapshot_hash,
                segment_count=0,
            )
            return AskResult(messages=(), context=context)

        if cancel is not None:
            cancel.raise_if_cancelled()
        system_message, user_message = compose_messages(question, context.segments)
        answer = self._client.complete((system_message, user_message), context.sent_files)
        if cancel is not None:
            cancel.raise_if_cancelled()

        self._record(
            request_id,
            outcome="answered",
            question=question,
            scope=scope,
            snapshot_hash=snapshot.snapshot_hash,
            segment_count=len(context.segments),
        )
        return AskResult(
            messages=(user_message, Message(role=ROLE_ASSISTANT, text=answer)),
            context=context,
        )

    def _record(
        self,
        request_id: str,
        *,
        outcome: str,
        question: str,
        scope: ContextScope,
        snapshot_hash: str,
        segment_count: int,
    ) -> None:
        if self._audit_logger is None:
            return
        self._audit_logger.record(
            request_id,
            "assistant.ask",
            ok=True,
            outcome=outcome,
            metadata={
                "question": question,
                "scope": str(scope),
                "snapshot_hash": snapshot_hash,
                "segment_count": segment_count,
            },
        )


def _ask_id(question: str, snapshot_hash: str, scope: ContextScope) -> str:
    digest = hashlib.sha256()
    digest.update(snapshot_hash.encode("ascii"))
    digest.update(b"|")
    digest.update(str(scope).encode("ascii"))
    digest.update(b"|")
    digest.update(question.encode("utf-8"))
    return f"ask-{digest.hexdigest()[:16]}"
