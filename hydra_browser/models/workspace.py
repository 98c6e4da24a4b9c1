"""
Pydantic models for workspaces and the persisted workspaces document.
"""

from pydantic import Field

from hydra_browser.utils.ids import generate_id

from .base import CamelModel
from .pane import PaneConfig

DEFAULT_WORKSPACE_NAME = "Workspace 1"


class WorkspaceConfig(CamelModel):
    """A named, ordered set of pane configurations."""

    id: str = Field(default_factory=generate_id)
    name: str = DEFAULT_WORKSPACE_NAME
    panes: list[PaneConfig] = Field(default_factory=list)


class WorkspacesDocument(CamelModel):
    """Shape of `workspaces.json`."""

    workspaces: list[WorkspaceConfig] = Field(default_factory=list)
    active_workspace_id: str = ""

    def normalized(self) -> "WorkspacesDocument":
        """
        Enforces the document invariants in place and returns self: at least one
        workspace exists and `active_workspace_id` names one of them.
        """
        if not self.workspaces:
            self.workspaces.append(WorkspaceConfig())
        if not any(w.id == self.active_workspace_id for w in self.workspaces):
            self.active_workspace_id = self.workspaces[0].id
        return self
