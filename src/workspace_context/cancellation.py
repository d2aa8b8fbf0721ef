"""Cooperative cancellation for context builds."""

from __future__ import annotations

import threading

from workspace_context.errors import BuildCancelledError


class CancellationToken:
    """Thread-safe cancellation flag checked between pipeline stages."""

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        """Raise BuildCancelledError once the token has been cancelled."""
        if self._event.is_set():
            raise BuildCancelledError("Context build was cancelled.")


class ContextBuildCoordinator:
    """Track one in-flight build per conversation.

    Beginning a new build cancels the previous token for the same
    conversation, so only the newest request can publish a result.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active: dict[str, CancellationToken] = {}

    def begin(self, conversation_id: str) -> CancellationToken:
        token = CancellationToken()
        with self._lock:
            previous = self._active.get(conversation_id)
            if previous is not None:
                previous.cancel()
            self._active[conversation_id] = token
        return token

    def finish(self, conversation_id: str, token: CancellationToken) -> None:
        """Clear the active token when it is still the newest one."""
        with self._lock:
            if self._active.get(conversation_id) is token:
                del self._active[conversation_id]

    def active_token(self, conversation_id: str) -> CancellationToken | None:
        with self._lock:
            return self._active.get(conversation_id)
