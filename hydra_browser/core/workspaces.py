"""
Named, ordered pane sets and the active-workspace pointer.
"""

import logging

from pydantic import ValidationError

from hydra_browser.models.workspace import WorkspaceConfig, WorkspacesDocument
from hydra_browser.storage.json_store import JsonDocument

from .panes import PaneOrchestrator

log = logging.getLogger(__name__)


class WorkspaceStore:
    """
    Keeps the workspace collection and materializes the active one through the
    `PaneOrchestrator`.

    There is always at least one workspace and the active id always names one
    of them; both are re-established after every load and mutation.
    """

    def __init__(self, panes: PaneOrchestrator, document: JsonDocument):
        self._panes = panes
        self.document = document
        initial = WorkspacesDocument().normalized()
        self._workspaces: list[WorkspaceConfig] = initial.workspaces
        self._active_id: str = initial.active_workspace_id

    @property
    def active_workspace_id(self) -> str:
        return self._active_id

    def list_all(self) -> list[WorkspaceConfig]:
        return list(self._workspaces)

    def get(self, workspace_id: str) -> WorkspaceConfig | None:
        return next((w for w in self._workspaces if w.id == workspace_id), None)

    def get_active(self) -> WorkspaceConfig | None:
        return self.get(self._active_id)

    async def load(self) -> None:
        """Reads the persisted collection, falling back to a single default workspace."""
        data = await self.document.load(None)
        document = None
        if data is not None:
            try:
                document = WorkspacesDocument.model_validate(data)
            except ValidationError as e:
                log.error(f"Ignoring invalid workspaces document {self.document.path}: {e}")
        document = (document or WorkspacesDocument()).normalized()
        self._workspaces = document.workspaces
        self._active_id = document.active_workspace_id
        log.debug(
            f"Loaded {len(self._workspaces)} workspaces; active is {self._active_id}."
        )

    def activate(self) -> None:
        """Materializes the active workspace's panes; used once at startup."""
        active = self.get_active()
        if active is not None:
            self._panes.load_panes(active.panes)

    async def save(self) -> bool:
        """Captures the live panes into the active workspace and persists."""
        self._capture_active()
        return await self._persist()

    async def auto_save(self) -> bool:
        """Called after every pane mutation so stored state never drifts from live state."""
        return await self.save()

    async def switch_to(self, workspace_id: str) -> bool:
        target = self.get(workspace_id)
        if target is None:
            return False

        if self._active_id and self._active_id != workspace_id:
            self._capture_active()

        self._active_id = workspace_id
        self._panes.load_panes(target.panes)
        await self.save()
        log.info(f"Switched to workspace '{target.name}'.")
        return True

    async def create(self, name: str = "") -> WorkspaceConfig:
        self._capture_active()
        workspace = WorkspaceConfig(name=name or f"Workspace {len(self._workspaces) + 1}")
        self._workspaces.append(workspace)
        await self.switch_to(workspace.id)
        return workspace

    async def delete(self, workspace_id: str) -> bool:
        index = next(
            (i for i, w in enumerate(self._workspaces) if w.id == workspace_id), None
        )
        if index is None:
            return False

        removed = self._workspaces.pop(index)
        log.info(f"Deleted workspace '{removed.name}'.")

        if self._active_id == workspace_id:
            if not self._workspaces:
                self._workspaces.append(WorkspaceConfig())
            # The outgoing workspace no longer exists, so nothing is captured.
            await self.switch_to(self._workspaces[0].id)
        else:
            await self.save()
        return True

    async def rename(self, workspace_id: str, name: str) -> bool:
        workspace = self.get(workspace_id)
        if workspace is None:
            return False
        workspace.name = name
        await self.save()
        return True

    def _capture_active(self) -> None:
        active = self.get_active()
        if active is not None:
            active.panes = self._panes.get_configs()

    async def _persist(self) -> bool:
        document = WorkspacesDocument(
            workspaces=self._workspaces, active_workspace_id=self._active_id
        ).normalized()
        self._workspaces = document.workspaces
        self._active_id = document.active_workspace_id
        return await self.document.save(document.to_document())
