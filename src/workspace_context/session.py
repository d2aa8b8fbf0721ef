"""Workspace session composing snapshot, preferences, context and ask flows."""

from __future__ import annotations

import posixpath

from workspace_context.assistant.client import AssistantClient
from workspace_context.assistant.mutation import MutationAuthorizing, SandboxedFileWriter
from workspace_context.assistant.service import AskResult, AskService
from workspace_context.cancellation import ContextBuildCoordinator
from workspace_context.config import WorkspaceConfig
from workspace_context.context.engine import build_context
from workspace_context.context.loader import FileLoader, LocalFileLoader
from workspace_context.context.models import ContextBuildResult, ContextScope
from workspace_context.logging.audit import JsonlAuditLogger
from workspace_context.security.paths import WorkspacePathGuard
from workspace_context.workspace.boundary import BoundaryRules
from workspace_context.workspace.filesystem import FileSystemAccess, LocalFileSystem
from workspace_context.workspace.models import (
    ContextInclusionState,
    InclusionPreferences,
    WorkspaceSnapshot,
)
from workspace_context.workspace.preferences import PreferencesStore
from workspace_context.workspace.snapshot import apply_preferences, build_snapshot

DEFAULT_CONVERSATION_ID = "default"


class WorkspaceSession:
    """Explicit owner of the published snapshot for one workspace.

    Snapshots are replaced wholesale; a failed rebuild keeps the previous one.
    Only `apply_edit` reaches the mutation capability.
    """

    def __init__(
        self,
        config: WorkspaceConfig,
        file_system: FileSystemAccess | None = None,
        loader: FileLoader | None = None,
        client: AssistantClient | None = None,
        mutation_authority: MutationAuthorizing | None = None,
    ) -> None:
        self._config = config
        self._file_system = file_system or LocalFileSystem()
        self._loader = loader or LocalFileLoader(max_bytes=config.loader.max_file_bytes)
        self._client = client
        self._rules = _session_rules(config)
        self._guard = WorkspacePathGuard(config.root, self._rules)
        self._mutation_authority = mutation_authority or SandboxedFileWriter(
            config.root, self._rules
        )
        self._audit_logger: JsonlAuditLogger | None = None
        self._preferences_store = PreferencesStore(config.data_dir)
        self._coordinator = ContextBuildCoordinator()
        self._snapshot: WorkspaceSnapshot | None = None
        self._preferences = InclusionPreferences()

    @property
    def config(self) -> WorkspaceConfig:
        return self._config

    @property
    def audit_logger(self) -> JsonlAuditLogger:
        """Return the session audit log, created on first use."""
        if self._audit_logger is None:
            self._audit_logger = JsonlAuditLogger(path=self._config.data_dir / "audit.jsonl")
        return self._audit_logger

    @property
    def snapshot(self) -> WorkspaceSnapshot | None:
        """Return the currently published snapshot, if any."""
        return self._snapshot

    def open(self) -> WorkspaceSnapshot:
        """Load preferences and publish the first snapshot.

        The last selection is restored when it still exists; otherwise the last
        path whose inclusion was changed is selected, unless it is excluded.
        """
        preferences = self._preferences_store.load()
        snapshot = self._scan(preferences, preferences.last_selection_path)
        if snapshot.selected_path is None:
            snapshot = _focus_fallback(snapshot, preferences.last_focused_path)
        self._preferences = preferences
        return self._publish(snapshot)

    def refresh(self) -> WorkspaceSnapshot:
        """Rescan the tree, keeping the selection when its path still exists."""
        previous = self._snapshot.selected_path if self._snapshot is not None else None
        snapshot = self._scan(self._preferences, previous)
        return self._publish(snapshot)

    def select(self, path: str | None) -> WorkspaceSnapshot:
        snapshot = self._require_snapshot()
        canonical = self._guard.canonical(path) if path is not None else None
        updated = snapshot.with_selection(canonical)
        self._preferences = self._preferences.with_selection(canonical)
        self._preferences_store.save(self._preferences)
        self._snapshot = updated
        return updated

    def set_inclusion(self, path: str, included: bool) -> WorkspaceSnapshot:
        """Force a path in or out of context and publish a new snapshot."""
        snapshot = self._require_snapshot()
        canonical = self._guard.canonical(path)
        if snapshot.descriptor_for_path(canonical) is None:
            raise ValueError(f"Path is not part of the workspace snapshot: {canonical}")
        preferences = self._preferences.with_inclusion(canonical, included)
        if not included and _is_within(snapshot.selected_path, canonical):
            snapshot = snapshot.with_selection(None)
            preferences = preferences.with_selection(None)
        updated = apply_preferences(snapshot, preferences)
        self._preferences = preferences
        self._preferences_store.save(preferences)
        self._snapshot = updated
        return updated

    def build_context(
        self,
        scope: ContextScope,
        conversation_id: str = DEFAULT_CONVERSATION_ID,
    ) -> ContextBuildResult | None:
        """Build context; a newer request for the conversation cancels this one."""
        snapshot = self._require_snapshot()
        token = self._coordinator.begin(conversation_id)
        try:
            return build_context(
                snapshot,
                scope,
                self._loader,
                budget=self._config.budget,
                segment_limits=self._config.segments,
                cancel=token,
                max_workers=self._config.loader.max_workers,
                audit_logger=self.audit_logger,
            )
        finally:
            self._coordinator.finish(conversation_id, token)

    def ask(
        self,
        question: str,
        scope: ContextScope,
        conversation_id: str = DEFAULT_CONVERSATION_ID,
    ) -> AskResult:
        if self._client is None:
            raise RuntimeError("No assistant client is configured for this session.")
        snapshot = self._require_snapshot()
        service = AskService(
            self._loader,
            self._client,
            budget=self._config.budget,
            segment_limits=self._config.segments,
            audit_logger=self.audit_logger,
            max_workers=self._config.loader.max_workers,
        )
        token = self._coordinator.begin(conversation_id)
        try:
            return service.ask(question, snapshot, scope, cancel=token)
        finally:
            self._coordinator.finish(conversation_id, token)

    def cancel(self, conversation_id: str = DEFAULT_CONVERSATION_ID) -> None:
        """Cancel the in-flight build for a conversation, if any."""
        token = self._coordinator.active_token(conversation_id)
        if token is not None:
            token.cancel()

    def apply_edit(self, path: str, content: str) -> WorkspaceSnapshot:
        """Write through the mutation capability, then rescan."""
        self._require_snapshot()
        self._mutation_authority.apply(path, content)
        return self.refresh()

    def _scan(
        self,
        preferences: InclusionPreferences,
        previous_selection: str | None,
    ) -> WorkspaceSnapshot:
        return build_snapshot(
            str(self._config.root),
            self._file_system,
            self._rules,
            previous_selection=previous_selection,
            preferences=preferences,
        )

    def _publish(self, snapshot: WorkspaceSnapshot) -> WorkspaceSnapshot:
        self._snapshot = snapshot
        self.audit_logger.record(
            f"snap-{snapshot.snapshot_hash[:16]}",
            "workspace.snapshot",
            ok=True,
            outcome="published",
            metadata={
                "root_path": snapshot.root_path,
                "snapshot_hash": snapshot.snapshot_hash,
                "descriptor_count": len(snapshot.descriptors),
                "file_count": len(snapshot.file_descriptors()),
            },
        )
        return snapshot

    def _require_snapshot(self) -> WorkspaceSnapshot:
        if self._snapshot is None:
            raise RuntimeError("Workspace is not open; call open() first.")
        return self._snapshot

def _session_rules(config: WorkspaceConfig) -> BoundaryRules:
    """Keep the session data directory out of every scan."""
    if config.data_dir.is_relative_to(config.root):
        return config.boundary.extended(names=(config.data_dir.name,))
    return config.boundary


def _focus_fallback(snapshot: WorkspaceSnapshot, path: str | None) -> WorkspaceSnapshot:
    if path is None or snapshot.descriptor_for_path(path) is None:
        return snapshot
    if snapshot.inclusion_for_path(path) is ContextInclusionState.EXCLUDED:
        return snapshot
    return snapshot.with_selection(path)


def _is_within(path: str | None, ancestor: str) -> bool:
    if path is None:
        return False
    if path == ancestor:
        return True
    return path.startswith(ancestor.rstrip(posixpath.sep) + posixpath.sep)
